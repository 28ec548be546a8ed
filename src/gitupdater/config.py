from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml

from gitupdater.constants import (
    CONFIG_FILE_NAME,
    DEFAULT_BRANCH,
    DEFAULT_COMMIT_MESSAGE,
    DEFAULT_CONFIG_TEMPLATE,
    DEFAULT_LOG_FILE,
    DEFAULT_MIRROR_PATTERN,
    DEFAULT_MIRROR_SOURCE_DIR,
    DEFAULT_MIRROR_TARGET_SUFFIX,
    DEFAULT_NOTIFY_COMMAND,
    DEFAULT_REMOTE,
    DEFAULT_STASH_PREFIX,
    PROJECT_DIR_ENV_VAR,
)
from gitupdater.models import (
    ConfigError,
    MirrorConfig,
    NotifyConfig,
    UpdaterConfig,
    _coerce_bool,
    _coerce_text,
)


def _resolve_project_dir(project_dir: str | Path | None) -> Path:
    if project_dir is not None and str(project_dir).strip():
        candidate = Path(project_dir)
    else:
        env_value = os.environ.get(PROJECT_DIR_ENV_VAR, "").strip()
        candidate = Path(env_value) if env_value else Path.cwd()
    return candidate.expanduser().resolve()


def _resolve_relative(project_dir: Path, raw_path: str) -> Path:
    path = Path(raw_path).expanduser()
    if not path.is_absolute():
        path = project_dir / path
    return path


def _load_config_file(config_path: Path, *, required: bool) -> dict[str, Any]:
    if not config_path.exists():
        if required:
            raise ConfigError(f"config file not found: {config_path}")
        return {}
    try:
        loaded = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigError(f"config could not be parsed at {config_path}: {exc}") from exc
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ConfigError(f"config at {config_path} must be a mapping")
    return loaded


def _section(payload: dict[str, Any], key: str) -> dict[str, Any]:
    section = payload.get(key)
    if section is None:
        return {}
    if not isinstance(section, dict):
        raise ConfigError(f"{key} must be a mapping")
    return section


def _load_notify_config(payload: dict[str, Any], project_dir: Path) -> NotifyConfig:
    notify = _section(payload, "notify")
    return NotifyConfig(
        enabled=_coerce_bool(notify.get("enabled"), default=True),
        command=_coerce_text(notify.get("command"), default=DEFAULT_NOTIFY_COMMAND),
        title=_coerce_text(notify.get("title"), default=project_dir.name or "gitupdater"),
    )


def _load_mirror_config(payload: dict[str, Any], project_dir: Path) -> MirrorConfig:
    mirror = _section(payload, "mirror")
    suffix = _coerce_text(mirror.get("target_suffix"), default=DEFAULT_MIRROR_TARGET_SUFFIX)
    if not suffix.startswith("."):
        raise ConfigError("mirror.target_suffix must start with '.'")
    source_dir = _coerce_text(mirror.get("source_dir"), default=DEFAULT_MIRROR_SOURCE_DIR)
    return MirrorConfig(
        enabled=_coerce_bool(mirror.get("enabled"), default=False),
        source_dir=_resolve_relative(project_dir, source_dir),
        pattern=_coerce_text(mirror.get("pattern"), default=DEFAULT_MIRROR_PATTERN),
        target_suffix=suffix,
    )


def load_config(
    project_dir: str | Path | None = None,
    *,
    config_path: str | Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> UpdaterConfig:
    """Build the run configuration.

    Precedence, lowest first: built-in defaults, the YAML config file
    (``<project>/.gitupdater.yaml`` unless *config_path* is given), the
    ``GITUPDATER_PROJECT_DIR`` environment variable (only when *project_dir*
    is not given), then *overrides*. ``None`` values in *overrides* are
    ignored so argparse namespaces can be passed through unfiltered.
    """
    resolved_dir = _resolve_project_dir(project_dir)
    if config_path is not None:
        resolved_config = _resolve_relative(resolved_dir, str(config_path))
        payload = _load_config_file(resolved_config, required=True)
    else:
        resolved_config = resolved_dir / CONFIG_FILE_NAME
        payload = _load_config_file(resolved_config, required=False)

    for key, value in (overrides or {}).items():
        if value is None:
            continue
        if key in {"notify", "mirror"}:
            section = dict(_section(payload, key))
            section["enabled"] = value
            payload[key] = section
        else:
            payload[key] = value

    remote = _coerce_text(payload.get("remote"), default=DEFAULT_REMOTE)
    branch = _coerce_text(payload.get("branch"), default=DEFAULT_BRANCH)
    log_file = _coerce_text(payload.get("log_file"), default=DEFAULT_LOG_FILE)

    return UpdaterConfig(
        project_dir=resolved_dir,
        remote=remote,
        branch=branch,
        log_file=_resolve_relative(resolved_dir, log_file),
        default_message=_coerce_text(
            payload.get("default_message"), default=DEFAULT_COMMIT_MESSAGE
        ),
        stash_prefix=_coerce_text(payload.get("stash_prefix"), default=DEFAULT_STASH_PREFIX),
        interactive=_coerce_bool(payload.get("interactive"), default=True),
        notify=_load_notify_config(payload, resolved_dir),
        mirror=_load_mirror_config(payload, resolved_dir),
        config_path=resolved_config if resolved_config.exists() else None,
    )


def render_default_config() -> str:
    return DEFAULT_CONFIG_TEMPLATE
