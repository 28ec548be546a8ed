from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Any

from gitupdater.config import load_config, render_default_config
from gitupdater.constants import CONFIG_FILE_NAME, EXIT_USAGE
from gitupdater.git_ops import is_git_worktree, remote_url
from gitupdater.models import ConfigError, UpdaterConfig
from gitupdater.update import run_update
from gitupdater.utils import _is_command_available


def _load_config_from_args(args: argparse.Namespace, **overrides: Any) -> UpdaterConfig:
    return load_config(
        args.project_dir,
        config_path=args.config,
        overrides=overrides,
    )


def _cmd_update(args: argparse.Namespace) -> int:
    try:
        config = _load_config_from_args(
            args,
            remote=args.remote,
            branch=args.branch,
            log_file=args.log_file,
            interactive=args.interactive,
            notify=args.notify,
            mirror=args.mirror,
        )
    except ConfigError as exc:
        print(f"gitupdater: {exc}", file=sys.stderr)
        return EXIT_USAGE

    result = run_update(config, args.message)
    return int(result.exit_code)


def _cmd_configure(args: argparse.Namespace) -> int:
    check_only = bool(args.check)
    project_dir = Path(args.project_dir).expanduser().resolve() if args.project_dir else None

    print("gitupdater configure")
    print(f"check_only: {check_only}")
    print("")

    all_pass = True
    has_warn = False

    try:
        config = load_config(project_dir, config_path=args.config)
    except ConfigError as exc:
        print(f"gitupdater: {exc}", file=sys.stderr)
        return EXIT_USAGE

    # 1. Project directory
    if config.project_dir.is_dir():
        print(f"  [PASS] project_dir: {config.project_dir}")
    else:
        print(f"  [FAIL] project_dir: not found at {config.project_dir}")
        all_pass = False

    # 2. Config file
    if config.config_path is not None:
        print(f"  [PASS] config: valid ({config.config_path})")
    else:
        print(f"  [WARN] config: no {CONFIG_FILE_NAME}; using defaults")
        has_warn = True

    # 3. Git work tree and remote
    if all_pass and is_git_worktree(config.project_dir):
        print("  [PASS] git work tree")
        url = remote_url(config.project_dir, config.remote)
        if url:
            print(f"  [PASS] remote {config.remote}: {url} (branch {config.branch})")
        else:
            print(f"  [FAIL] remote {config.remote}: not configured")
            all_pass = False
    else:
        print("  [FAIL] git work tree: project_dir is not inside a git repository")
        all_pass = False

    # 4. Desktop notification
    if not config.notify.enabled:
        print("  [PASS] notify: disabled")
    elif _is_command_available(config.notify.command):
        print(f"  [PASS] notify: {config.notify.command}")
    else:
        print(f"  [WARN] notify: {config.notify.command} not found on PATH; notifications skipped")
        has_warn = True

    # 5. Mirror source directory
    if config.mirror.enabled:
        if config.mirror.source_dir.is_dir():
            print(f"  [PASS] mirror: {config.mirror.source_dir} ({config.mirror.pattern})")
        else:
            print(f"  [WARN] mirror: source dir not found at {config.mirror.source_dir}")
            has_warn = True

    print("")
    if all_pass and not has_warn:
        print("summary: all checks passed")
    elif all_pass and has_warn:
        print("summary: passed with warnings")
    else:
        print("summary: some checks failed")

    default_path = config.project_dir / CONFIG_FILE_NAME
    if not check_only and config.config_path is None and config.project_dir.is_dir():
        print(f"\nWriting default {CONFIG_FILE_NAME} to {default_path}")
        default_path.write_text(render_default_config(), encoding="utf-8")
        print(f"  written: {CONFIG_FILE_NAME} (default)")

    return 0 if all_pass else 1


def _add_project_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--project-dir",
        default=None,
        help="Project directory (default: $GITUPDATER_PROJECT_DIR, else the current directory)",
    )
    parser.add_argument(
        "--config",
        default=None,
        help=f"Path to the YAML config (default: <project-dir>/{CONFIG_FILE_NAME})",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="gitupdater command line interface")
    subparsers = parser.add_subparsers(dest="command")

    update = subparsers.add_parser(
        "update",
        help="Stash local changes, pull --rebase, restore, commit, and push",
    )
    update.add_argument(
        "message",
        nargs="?",
        default=None,
        help="Commit message (prompted for when omitted)",
    )
    _add_project_arguments(update)
    update.add_argument("--remote", default=None, help="Remote to pull from (default: origin)")
    update.add_argument("--branch", default=None, help="Branch to rebase onto (default: main)")
    update.add_argument(
        "--log-file",
        default=None,
        help="Run log path, relative to the project dir (default: tools/update_git_last.log)",
    )
    update.add_argument(
        "--no-interactive",
        dest="interactive",
        action="store_const",
        const=False,
        default=None,
        help="Never prompt or wait for Enter; use the default message when none is given.",
    )
    update.add_argument(
        "--no-notify",
        dest="notify",
        action="store_const",
        const=False,
        default=None,
        help="Skip the desktop notification.",
    )
    update.add_argument(
        "--mirror",
        action="store_const",
        const=True,
        default=None,
        help="Duplicate source files to their text suffix before updating.",
    )
    update.set_defaults(handler=_cmd_update)

    configure = subparsers.add_parser(
        "configure",
        help="Check the updater setup and write a default config",
    )
    configure.add_argument("--check", action="store_true", help="Check configuration without modifying")
    _add_project_arguments(configure)
    configure.set_defaults(handler=_cmd_configure)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    handler = getattr(args, "handler", None)
    if handler is None:
        parser.print_help()
        return 2
    return int(handler(args))
