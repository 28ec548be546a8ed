"""End-to-end runs of the updater against real temporary git repositories."""

from __future__ import annotations

import shutil
import subprocess
from pathlib import Path

import pytest

import gitupdater.commands as commands_module
from gitupdater.config import load_config
from gitupdater.constants import (
    EXIT_CONFLICT,
    NOTHING_TO_COMMIT_MESSAGE,
    REBASE_CONFLICT_MESSAGE,
    STASH_CONFLICT_MESSAGE,
)
from gitupdater.update import run_update

pytestmark = pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")


def _git(cwd: Path, *args: str) -> str:
    result = subprocess.run(
        ["git", *args],
        cwd=str(cwd),
        check=True,
        capture_output=True,
        text=True,
    )
    return result.stdout.strip()


def _write(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


def _commit_all(repo: Path, message: str) -> None:
    _git(repo, "add", "-A")
    _git(repo, "commit", "-m", message)


@pytest.fixture
def repos(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> dict[str, Path]:
    home = tmp_path / "home"
    home.mkdir()
    gitconfig = home / ".gitconfig"
    gitconfig.write_text(
        "[user]\n"
        "\tname = Updater Test\n"
        "\temail = updater@example.com\n"
        "[init]\n"
        "\tdefaultBranch = main\n"
        "[commit]\n"
        "\tgpgsign = false\n",
        encoding="utf-8",
    )
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("GIT_CONFIG_GLOBAL", str(gitconfig))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")

    remote = tmp_path / "remote.git"
    _git(tmp_path, "init", "--bare", str(remote))

    seed = tmp_path / "seed"
    seed.mkdir()
    _git(seed, "init")
    _git(seed, "checkout", "-B", "main")
    _write(seed / "README.md", "line one\n")
    _commit_all(seed, "initial")
    _git(seed, "remote", "add", "origin", str(remote))
    _git(seed, "push", "-u", "origin", "main")
    _git(remote, "symbolic-ref", "HEAD", "refs/heads/main")

    work = tmp_path / "work"
    other = tmp_path / "other"
    _git(tmp_path, "clone", str(remote), str(work))
    _git(tmp_path, "clone", str(remote), str(other))
    return {"remote": remote, "work": work, "other": other}


def _run(work: Path, message: str | None = "update from work"):
    config = load_config(work, overrides={"notify": False})
    return config, run_update(
        config, message, prompt=lambda _text: "", pause=lambda _text: ""
    )


def _remote_subjects(remote: Path) -> list[str]:
    return _git(remote, "log", "--format=%s", "main").splitlines()


def test_new_file_is_committed_and_pushed(repos: dict[str, Path]) -> None:
    work = repos["work"]
    _write(work / "notes.txt", "hello\n")

    config, result = _run(work, "add notes")

    assert result.exit_code == 0
    assert result.committed is True
    assert result.pushed is True
    assert _remote_subjects(repos["remote"])[0] == "add notes"
    assert _git(work, "stash", "list") == ""
    assert "OK: project updated! Message: add notes" in config.log_file.read_text(
        encoding="utf-8"
    )


def test_log_file_stays_out_of_commits(repos: dict[str, Path]) -> None:
    work = repos["work"]

    config, result = _run(work)

    assert result.exit_code == 0
    assert result.stashed is False
    assert result.committed is False
    assert config.log_file.exists()
    assert _git(work, "status", "--porcelain") == ""
    assert NOTHING_TO_COMMIT_MESSAGE in config.log_file.read_text(encoding="utf-8")


def test_dirty_tree_is_rebased_onto_upstream_changes(repos: dict[str, Path]) -> None:
    work, other = repos["work"], repos["other"]
    _write(other / "upstream.txt", "from other\n")
    _commit_all(other, "upstream change")
    _git(other, "push")
    _write(work / "local.txt", "local work\n")

    _config, result = _run(work, "local change")

    assert result.exit_code == 0
    assert result.stashed is True
    assert result.committed is True
    assert _remote_subjects(repos["remote"])[:2] == ["local change", "upstream change"]
    assert (work / "upstream.txt").exists()
    assert _git(work, "stash", "list") == ""


def test_rebase_conflict_exits_without_restoring_stash(repos: dict[str, Path]) -> None:
    work, other = repos["work"], repos["other"]
    _write(other / "README.md", "line from other\n")
    _commit_all(other, "other edit")
    _git(other, "push")
    _write(work / "README.md", "line from work\n")
    _commit_all(work, "work edit")
    _write(work / "scratch.txt", "untracked\n")

    config, result = _run(work)

    assert result.exit_code == EXIT_CONFLICT
    assert result.stage == "rebase"
    assert result.stashed is True
    assert result.pushed is False
    assert result.stash_label in _git(work, "stash", "list")
    assert _remote_subjects(repos["remote"])[0] == "other edit"
    assert REBASE_CONFLICT_MESSAGE in config.log_file.read_text(encoding="utf-8")


def test_stash_conflict_exits_without_commit_or_push(repos: dict[str, Path]) -> None:
    work, other = repos["work"], repos["other"]
    _write(other / "README.md", "line from other\n")
    _commit_all(other, "other edit")
    _git(other, "push")
    _write(work / "README.md", "uncommitted line from work\n")

    config, result = _run(work)

    assert result.exit_code == EXIT_CONFLICT
    assert result.stage == "restore"
    assert result.committed is False
    assert result.pushed is False
    assert result.stash_label in _git(work, "stash", "list")
    assert _remote_subjects(repos["remote"])[0] == "other edit"
    log_text = config.log_file.read_text(encoding="utf-8")
    assert STASH_CONFLICT_MESSAGE in log_text
    assert REBASE_CONFLICT_MESSAGE not in log_text


def test_cli_update_runs_unattended(repos: dict[str, Path]) -> None:
    work = repos["work"]
    _write(work / "cli.txt", "cli\n")

    exit_code = commands_module.main(
        [
            "update",
            "--project-dir",
            str(work),
            "--no-interactive",
            "--no-notify",
        ]
    )

    assert exit_code == 0
    assert _remote_subjects(repos["remote"])[0] == "update"


def test_subdirectory_project_runs_repeatedly(repos: dict[str, Path]) -> None:
    work = repos["work"]
    game = work / "game"
    _write(game / "level.txt", "level one\n")
    _commit_all(work, "add game dir")
    _git(work, "push")

    config, first = _run(game, "first pass")
    _config, second = _run(game, "second pass")

    assert first.exit_code == 0
    assert first.stashed is False
    assert second.exit_code == 0
    assert second.stashed is False
    assert config.log_file == game.resolve() / "tools" / "update_git_last.log"
    assert config.log_file.exists()
    assert _git(work, "status", "--porcelain") == ""
    assert _git(work, "stash", "list") == ""
    assert "/game/tools/update_git_last.log" in (work / ".git" / "info" / "exclude").read_text(
        encoding="utf-8"
    )
