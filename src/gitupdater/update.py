from __future__ import annotations

import subprocess
from typing import Callable

from gitupdater.constants import (
    COMMIT_MESSAGE_PROMPT,
    EXIT_CONFLICT,
    EXIT_FAILURE,
    EXIT_OK,
    NOTHING_TO_COMMIT_MESSAGE,
    PAUSE_PROMPT,
    REBASE_CONFLICT_MESSAGE,
    STASH_CONFLICT_GUIDANCE,
    STASH_CONFLICT_MESSAGE,
)
from gitupdater.git_ops import (
    build_stash_label,
    commit,
    exclude_from_worktree,
    has_staged_changes,
    is_dirty,
    is_git_worktree,
    pull_rebase,
    push,
    stage_all,
    stash_pop,
    stash_push,
)
from gitupdater.mirror import mirror_sources
from gitupdater.models import (
    GitStepError,
    RebaseConflictError,
    StashConflictError,
    UpdateResult,
    UpdaterConfig,
)
from gitupdater.notify import send_notification
from gitupdater.utils import RunLog, _process_detail

Prompt = Callable[[str], str]


def _silent(_text: str) -> str:
    return ""


def resolve_commit_message(
    message: str | None,
    *,
    default: str,
    prompt: Prompt,
) -> str:
    """Return *message*, else ask with *prompt*; blank answers fall back to *default*.

    Only a missing or empty *message* triggers the prompt. A whitespace-only
    *message* is an explicit argument: it is not prompted for and resolves
    to *default*. ``EOFError`` and ``KeyboardInterrupt`` raised by *prompt*
    propagate.
    """
    candidate = message
    if not candidate:
        candidate = prompt(COMMIT_MESSAGE_PROMPT)
    candidate = (candidate or "").strip()
    return candidate or default


def _acknowledge(pause: Prompt) -> None:
    try:
        pause(PAUSE_PROMPT)
    except (EOFError, KeyboardInterrupt):
        print("")


class _UpdateRun:
    def __init__(self, config: UpdaterConfig, log: RunLog, commit_message: str) -> None:
        self.config = config
        self.log = log
        self.commit_message = commit_message
        self.stage = "start"
        self.stashed = False
        self.stash_label = ""
        self.restored = False
        self.committed = False
        self.pushed = False

    def _enter(self, stage: str, title: str | None = None) -> None:
        self.stage = stage
        if title:
            self.log.section(title)

    def _check(
        self,
        process: subprocess.CompletedProcess[str],
        *,
        step: str,
        failure: str,
    ) -> None:
        self.log.record(process)
        if process.returncode == 0:
            return
        detail = _process_detail(process, f"git {step} failed")
        raise GitStepError(
            step,
            f"{failure} ({detail})",
            returncode=process.returncode or EXIT_FAILURE,
        )

    def execute(self) -> None:
        project_dir = self.config.project_dir

        self._enter("worktree")
        if not is_git_worktree(project_dir):
            raise GitStepError("worktree", f"Not a git work tree: {project_dir}")
        exclude_from_worktree(project_dir, self.log.path)

        self._enter("dirty check")
        if is_dirty(project_dir):
            self._enter("stash", "Local changes found; saving them to a temporary stash")
            self.stash_label = build_stash_label(self.config.stash_prefix)
            self._check(
                stash_push(project_dir, self.stash_label),
                step="stash",
                failure="Could not stash local changes; aborting before the rebase.",
            )
            self.stashed = True

        self._enter("rebase", "Pull (rebase)")
        pulled = pull_rebase(project_dir, self.config.remote, self.config.branch)
        self.log.record(pulled)
        if pulled.returncode != 0:
            raise RebaseConflictError(
                "rebase", REBASE_CONFLICT_MESSAGE, returncode=EXIT_CONFLICT
            )

        if self.stashed:
            self._enter("restore", "Reapplying local changes (stash pop)")
            popped = stash_pop(project_dir)
            self.log.record(popped)
            if popped.returncode != 0:
                raise StashConflictError(
                    "restore", STASH_CONFLICT_MESSAGE, returncode=EXIT_CONFLICT
                )
            self.restored = True

        self._enter("commit", "Add and commit")
        self._check(
            stage_all(project_dir),
            step="add",
            failure="Could not stage changes.",
        )
        if has_staged_changes(project_dir):
            self._check(
                commit(project_dir, self.commit_message),
                step="commit",
                failure="Commit failed.",
            )
            self.committed = True
        else:
            self.log.emit(NOTHING_TO_COMMIT_MESSAGE)

        self._enter("push", "Push")
        self._check(push(project_dir), step="push", failure="Push failed.")
        self.pushed = True
        self.stage = "done"

    def report_failure(self, exc: GitStepError) -> int:
        self.log.emit("")
        self.log.emit(str(exc))
        if isinstance(exc, StashConflictError):
            self.log.emit(STASH_CONFLICT_GUIDANCE)
        elif self.stashed and not self.restored:
            self.log.emit(
                f"Local changes are kept in the stash '{self.stash_label}'; "
                "reapply them with `git stash pop`."
            )
        if isinstance(exc, (RebaseConflictError, StashConflictError)):
            return EXIT_CONFLICT
        return exc.returncode or EXIT_FAILURE

    def result(self, exit_code: int, detail: str = "") -> UpdateResult:
        return UpdateResult(
            exit_code=exit_code,
            message=self.commit_message,
            stage=self.stage,
            stashed=self.stashed,
            stash_label=self.stash_label,
            committed=self.committed,
            pushed=self.pushed,
            detail=detail,
        )


def run_update(
    config: UpdaterConfig,
    message: str | None = None,
    *,
    prompt: Prompt | None = None,
    pause: Prompt | None = None,
    log: RunLog | None = None,
) -> UpdateResult:
    """Stash, rebase-pull, restore, commit, and push the project once.

    *prompt* asks for the commit message and *pause* waits for the final
    acknowledgment. Both default to ``input`` in interactive mode and to
    no-ops otherwise. Conflicts during the rebase or the stash restore
    return ``EXIT_CONFLICT`` without staging, committing, or pushing.
    """
    ask = prompt if prompt is not None else (input if config.interactive else _silent)
    wait = pause if pause is not None else (input if config.interactive else _silent)
    if not config.project_dir.is_dir():
        print(f"Project directory not found: {config.project_dir}", flush=True)
        _acknowledge(wait)
        return UpdateResult(
            exit_code=EXIT_FAILURE,
            message="",
            stage="project dir",
            detail=f"missing project directory {config.project_dir}",
        )

    run_log = log if log is not None else RunLog(config.log_file).open()

    if config.mirror.enabled:
        mirror_sources(config.mirror, run_log)

    try:
        commit_message = resolve_commit_message(
            message, default=config.default_message, prompt=ask
        )
    except (EOFError, KeyboardInterrupt):
        run_log.emit("")
        run_log.emit("Aborted: no commit message was entered.")
        return UpdateResult(exit_code=EXIT_FAILURE, message="", stage="message")

    run = _UpdateRun(config, run_log, commit_message)
    try:
        run.execute()
    except GitStepError as exc:
        exit_code = run.report_failure(exc)
        _acknowledge(wait)
        return run.result(exit_code, detail=str(exc))

    run_log.emit("")
    run_log.emit(f"OK: project updated! Message: {commit_message}")
    send_notification(config.notify, f"Update finished: {commit_message}")
    _acknowledge(wait)
    return run.result(EXIT_OK)
