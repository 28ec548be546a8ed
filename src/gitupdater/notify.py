from __future__ import annotations

import subprocess

from gitupdater.models import NotifyConfig
from gitupdater.utils import _is_command_available


def send_notification(config: NotifyConfig, message: str) -> bool:
    """Fire a desktop notification; never raises and returns whether it was sent."""
    if not config.enabled or not _is_command_available(config.command):
        return False
    try:
        proc = subprocess.run(
            [config.command, config.title, message],
            check=False,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            timeout=10,
        )
    except (OSError, subprocess.TimeoutExpired):
        return False
    return proc.returncode == 0
