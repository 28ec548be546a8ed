"""gitupdater data models — exceptions, dataclasses, and coercion helpers."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any


def _coerce_bool(value: Any, *, default: bool = False) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in {"true", "1", "yes", "on"}
    return bool(value) if value is not None else default


def _coerce_text(value: Any, *, default: str) -> str:
    if value is None:
        return default
    text = str(value).strip()
    return text or default


class ConfigError(RuntimeError):
    """Raised when the updater configuration cannot be loaded or validated."""


class GitStepError(RuntimeError):
    """Raised when a git step fails and the run cannot continue."""

    def __init__(self, step: str, message: str, *, returncode: int = 1) -> None:
        super().__init__(message)
        self.step = step
        self.returncode = returncode


class RebaseConflictError(GitStepError):
    """Raised when `git pull --rebase` stops on a conflict."""


class StashConflictError(GitStepError):
    """Raised when reapplying the temporary stash conflicts."""


@dataclass(frozen=True)
class NotifyConfig:
    enabled: bool
    command: str
    title: str


@dataclass(frozen=True)
class MirrorConfig:
    enabled: bool
    source_dir: Path
    pattern: str
    target_suffix: str


@dataclass(frozen=True)
class UpdaterConfig:
    project_dir: Path
    remote: str
    branch: str
    log_file: Path
    default_message: str
    stash_prefix: str
    interactive: bool
    notify: NotifyConfig
    mirror: MirrorConfig
    config_path: Path | None = None


@dataclass(frozen=True)
class MirrorResult:
    copied: int
    failed: tuple[Path, ...] = ()
    skipped_reason: str | None = None

    @property
    def ok(self) -> bool:
        return not self.failed and self.skipped_reason is None


@dataclass(frozen=True)
class UpdateResult:
    exit_code: int
    message: str
    stage: str            # last step reached
    stashed: bool = False
    stash_label: str = ""
    committed: bool = False
    pushed: bool = False
    detail: str = ""
