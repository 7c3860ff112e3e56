"""Build ClientConfig from environment variables and .env files."""
from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Callable, Mapping, Optional, Tuple

from .errors import ConfigurationError
from .models import DEFAULT_BASE_URL, DEFAULT_POSTS_PATH, DEFAULT_UPLOAD_PATH, ClientConfig


_QUOTES = ("'", '"')


def _parse_env_line(raw_line: str) -> Optional[Tuple[str, str]]:
    """Return ``(key, value)`` for a KEY=VALUE line, None for anything else."""
    line = raw_line.strip()
    if line.startswith("export "):
        line = line[len("export ") :].lstrip()
    if not line or line.startswith("#") or "=" not in line:
        return None

    key, _, value = line.partition("=")
    key, value = key.strip(), value.strip()
    if len(value) >= 2 and value[0] in _QUOTES and value[-1] == value[0]:
        value = value[1:-1]
    return (key, value) if key else None


def load_env_file(path: Path, override: bool = False) -> None:
    """Export the KEY=VALUE pairs of ``path``; variables already set win unless ``override``."""
    if not path.is_file():
        reason = "not found" if not path.exists() else "is not a file"
        raise ConfigurationError(f"env file {reason}: {path}")

    try:
        lines = path.read_text(encoding="utf-8").splitlines()
    except OSError as exc:
        raise ConfigurationError(f"could not read env file {path}: {exc}") from exc

    pairs = (_parse_env_line(line) for line in lines)
    for key, value in filter(None, pairs):
        if override or key not in os.environ:
            os.environ[key] = value


def _first(env: Mapping[str, str], *names: str) -> Optional[str]:
    for name in names:
        value = env.get(name)
        if value:
            return value
    return None


def _number(env: Mapping[str, str], name: str, cast: Callable[[str], Any], default: Any) -> Any:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return cast(raw.strip())
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from exc


def config_from_env(env: Optional[Mapping[str, str]] = None, **overrides: Any) -> ClientConfig:
    """
    Build a ClientConfig from environment variables.

    Keyword overrides that are not None take precedence over the environment.
    """
    env = os.environ if env is None else env
    values = {
        "api_key": _first(env, "BOODIBOX_API_KEY", "API_KEY") or "",
        "base_url": _first(env, "BOODIBOX_BASE_URL", "BASE_URL") or DEFAULT_BASE_URL,
        "upload_path": env.get("BOODIBOX_UPLOAD_PATH") or DEFAULT_UPLOAD_PATH,
        "posts_path": env.get("BOODIBOX_POSTS_PATH") or DEFAULT_POSTS_PATH,
        "poll_interval": _number(env, "BOODIBOX_POLL_INTERVAL", float, 1.0),
        "poll_timeout": _number(env, "BOODIBOX_POLL_TIMEOUT", float, 30.0),
        "max_retries": _number(env, "BOODIBOX_MAX_RETRIES", int, 3),
    }
    values.update({key: value for key, value in overrides.items() if value is not None})
    return ClientConfig(**values)
