"""Duplicate source files under a text suffix so they can be browsed as plain text."""

from __future__ import annotations

import shutil
from pathlib import Path

from gitupdater.models import MirrorConfig, MirrorResult
from gitupdater.utils import RunLog


def _iter_sources(source_dir: Path, pattern: str) -> list[Path]:
    return sorted(path for path in source_dir.rglob(pattern) if path.is_file())


def mirror_sources(config: MirrorConfig, log: RunLog) -> MirrorResult:
    log.emit(f"== Mirror {config.pattern} -> {config.target_suffix} ==")
    if not config.source_dir.is_dir():
        log.emit(f"Warning: directory not found: {config.source_dir}")
        return MirrorResult(copied=0, skipped_reason="source dir missing")

    copied = 0
    failed: list[Path] = []
    for source in _iter_sources(config.source_dir, config.pattern):
        target = source.with_suffix(config.target_suffix)
        if target == source:
            continue
        try:
            shutil.copyfile(source, target)
        except OSError:
            failed.append(source)
            log.emit(f"Failed to copy: {source}")
            continue
        copied += 1

    if failed:
        log.emit("Mirror failed")
    else:
        log.emit(f"Mirror finished successfully ({copied} files copied/updated)")
    return MirrorResult(copied=copied, failed=tuple(failed))
