"""gitupdater constants — defaults, messages, and exit codes."""

from __future__ import annotations

CONFIG_FILE_NAME = ".gitupdater.yaml"
PROJECT_DIR_ENV_VAR = "GITUPDATER_PROJECT_DIR"

DEFAULT_REMOTE = "origin"
DEFAULT_BRANCH = "main"
DEFAULT_COMMIT_MESSAGE = "update"
DEFAULT_STASH_PREFIX = "auto-stash: updater"
STASH_TIMESTAMP_FORMAT = "%Y-%m-%d_%H-%M-%S"
DEFAULT_LOG_FILE = "tools/update_git_last.log"

DEFAULT_NOTIFY_COMMAND = "notify-send"
DEFAULT_MIRROR_SOURCE_DIR = "Assets/_Scripts"
DEFAULT_MIRROR_PATTERN = "*.cs"
DEFAULT_MIRROR_TARGET_SUFFIX = ".txt"

EXIT_OK = 0
EXIT_CONFLICT = 1
EXIT_FAILURE = 1
EXIT_USAGE = 2

COMMIT_MESSAGE_PROMPT = "Commit message: "
PAUSE_PROMPT = "Press Enter to close..."

REBASE_CONFLICT_MESSAGE = (
    "Rebase conflict. Resolve it in git and run the updater again."
)
STASH_CONFLICT_MESSAGE = "Conflicts while reapplying the stash."
STASH_CONFLICT_GUIDANCE = (
    "Open your editor, resolve the conflicts, commit, and run the updater again."
)
NOTHING_TO_COMMIT_MESSAGE = "Nothing to commit."

DEFAULT_CONFIG_TEMPLATE = """\
# gitupdater configuration
remote: origin
branch: main
log_file: tools/update_git_last.log
default_message: update
stash_prefix: "auto-stash: updater"
interactive: true
notify:
  enabled: true
  command: notify-send
  title: ""
mirror:
  enabled: false
  source_dir: Assets/_Scripts
  pattern: "*.cs"
  target_suffix: .txt
"""
