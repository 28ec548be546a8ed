"""gitupdater utility functions — timestamps, run log, and subprocess helpers."""

from __future__ import annotations

import shutil
import subprocess
from datetime import datetime
from pathlib import Path


# ---------------------------------------------------------------------------
# Timestamp helpers
# ---------------------------------------------------------------------------


def _local_timestamp() -> str:
    return datetime.now().astimezone().strftime("%a %b %d %H:%M:%S %Z %Y")


def _compact_log_text(text: str, limit: int = 240) -> str:
    compact = " ".join(str(text).split())
    if len(compact) <= limit:
        return compact
    return f"{compact[: limit - 3]}..."


def _is_command_available(command: str) -> bool:
    return shutil.which(command) is not None


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------


class RunLog:
    """Terminal output mirrored into a per-run log file.

    The file is truncated when the log is opened, so it always holds the
    output of the most recent run only.
    """

    def __init__(self, path: Path, *, echo: bool = True) -> None:
        self.path = path
        self.echo = echo
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text("", encoding="utf-8")

    def open(self) -> "RunLog":
        self.emit(f"==== Start: {_local_timestamp()} ====")
        return self

    def _write(self, text: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("a", encoding="utf-8") as handle:
            handle.write(text)

    def emit(self, message: str) -> None:
        if self.echo:
            print(message, flush=True)
        self._write(f"{message}\n")

    def section(self, title: str) -> None:
        self.emit("")
        self.emit(f"== {title} ==")

    def record(self, process: subprocess.CompletedProcess[str]) -> None:
        for stream in (process.stdout, process.stderr):
            text = (stream or "").rstrip("\n")
            if text:
                self.emit(text)


# ---------------------------------------------------------------------------
# Git helpers
# ---------------------------------------------------------------------------


def _run_git(project_dir: Path, args: list[str]) -> subprocess.CompletedProcess[str]:
    command = ["git", "-C", str(project_dir), *args]
    try:
        return subprocess.run(
            command,
            text=True,
            capture_output=True,
            check=False,
        )
    except FileNotFoundError as exc:
        return subprocess.CompletedProcess(command, 127, "", f"git not found: {exc}")
    except OSError as exc:
        return subprocess.CompletedProcess(command, 1, "", str(exc))


def _process_detail(process: subprocess.CompletedProcess[str], fallback: str) -> str:
    return _compact_log_text((process.stderr or process.stdout or fallback).strip())
