"""Thin wrappers around the git commands used by the update routine.

Queries return plain values; mutations return the completed process so the
caller decides whether a non-zero exit is fatal.
"""

from __future__ import annotations

import subprocess
from datetime import datetime
from pathlib import Path

from gitupdater.constants import STASH_TIMESTAMP_FORMAT
from gitupdater.models import GitStepError
from gitupdater.utils import _process_detail, _run_git


def is_git_worktree(project_dir: Path) -> bool:
    check = _run_git(project_dir, ["rev-parse", "--is-inside-work-tree"])
    return check.returncode == 0 and check.stdout.strip() == "true"


def _diff_is_nonempty(project_dir: Path, args: list[str], *, step: str) -> bool:
    diff = _run_git(project_dir, args)
    if diff.returncode == 0:
        return False
    if diff.returncode == 1:
        return True
    detail = _process_detail(diff, f"git {' '.join(args)} failed")
    raise GitStepError(step, f"{step} failed: {detail}", returncode=diff.returncode)


def has_unstaged_changes(project_dir: Path) -> bool:
    return _diff_is_nonempty(project_dir, ["diff", "--quiet"], step="dirty check")


def has_staged_changes(project_dir: Path) -> bool:
    return _diff_is_nonempty(
        project_dir, ["diff", "--cached", "--quiet"], step="staged check"
    )


def list_untracked_files(project_dir: Path) -> list[str]:
    listing = _run_git(project_dir, ["ls-files", "--others", "--exclude-standard"])
    if listing.returncode != 0:
        detail = _process_detail(listing, "git ls-files failed")
        raise GitStepError(
            "dirty check", f"dirty check failed: {detail}", returncode=listing.returncode
        )
    return [line.strip() for line in listing.stdout.splitlines() if line.strip()]


def is_dirty(project_dir: Path) -> bool:
    """Return True when the tree has unstaged, staged, or untracked changes."""
    if has_unstaged_changes(project_dir):
        return True
    if has_staged_changes(project_dir):
        return True
    return bool(list_untracked_files(project_dir))


def build_stash_label(prefix: str, now: datetime | None = None) -> str:
    moment = now or datetime.now()
    return f"{prefix} {moment.strftime(STASH_TIMESTAMP_FORMAT)}"


def stash_push(project_dir: Path, label: str) -> subprocess.CompletedProcess[str]:
    return _run_git(project_dir, ["stash", "push", "-u", "-m", label])


def pull_rebase(
    project_dir: Path, remote: str, branch: str
) -> subprocess.CompletedProcess[str]:
    return _run_git(project_dir, ["pull", "--rebase", remote, branch])


def stash_pop(project_dir: Path) -> subprocess.CompletedProcess[str]:
    return _run_git(project_dir, ["stash", "pop"])


def stage_all(project_dir: Path) -> subprocess.CompletedProcess[str]:
    return _run_git(project_dir, ["add", "-A"])


def commit(project_dir: Path, message: str) -> subprocess.CompletedProcess[str]:
    return _run_git(project_dir, ["commit", "-m", message])


def push(project_dir: Path) -> subprocess.CompletedProcess[str]:
    return _run_git(project_dir, ["push"])


def remote_url(project_dir: Path, remote: str) -> str | None:
    result = _run_git(project_dir, ["remote", "get-url", remote])
    if result.returncode != 0:
        return None
    return result.stdout.strip() or None


def worktree_root(project_dir: Path) -> Path | None:
    located = _run_git(project_dir, ["rev-parse", "--show-toplevel"])
    if located.returncode != 0 or not located.stdout.strip():
        return None
    return Path(located.stdout.strip()).resolve()


def is_ignored(repo_root: Path, relative_path: str) -> bool:
    check = _run_git(repo_root, ["check-ignore", "-q", "--", relative_path])
    return check.returncode == 0


def exclude_from_worktree(project_dir: Path, path: Path) -> bool:
    """Add *path* to the repository's local exclude file unless already ignored.

    The entry is anchored at the top of the work tree, which may sit above
    *project_dir*. Returns True when an exclude entry was written. Paths
    outside the work tree are left alone.
    """
    repo_root = worktree_root(project_dir)
    if repo_root is None:
        return False
    try:
        relative = path.resolve().relative_to(repo_root).as_posix()
    except ValueError:
        return False
    if is_ignored(repo_root, relative):
        return False
    located = _run_git(repo_root, ["rev-parse", "--git-path", "info/exclude"])
    if located.returncode != 0 or not located.stdout.strip():
        return False
    exclude_path = Path(located.stdout.strip())
    if not exclude_path.is_absolute():
        exclude_path = repo_root / exclude_path
    exclude_path.parent.mkdir(parents=True, exist_ok=True)
    with exclude_path.open("a", encoding="utf-8") as handle:
        handle.write(f"/{relative}\n")
    return True
