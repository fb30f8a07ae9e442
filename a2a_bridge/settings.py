"""Load bridge settings from config/settings.yaml."""

import os
from pathlib import Path
from typing import Any

import yaml

_DEFAULTS: dict[str, Any] = {
    "agents": {
        "primary": {
            "name": "Assistant",
            "model": "gpt-5",
            "instructions": "",
            "instructions_file": "",
        },
        "judge": {
            "name": "Task Judge",
            "model": "gpt-5-mini",
            "instructions": "",
            "instructions_file": "prompts/judge.jinja2",
        },
    },
    "runner": {
        "max_turns": 10,
    },
    "session": {
        "enabled": True,
        "db_path": "data/sessions.db",
    },
    "mcp": {
        "servers": [],
    },
    "logging": {
        "file": "logs/a2a_bridge.log",
        "level": "INFO",
        "log_to_console": False,
        "max_bytes": 10485760,  # 10 MB
        "backup_count": 3,
    },
}

CONFIG_DIR_ENV = "A2A_BRIDGE_CONFIG_DIR"

_cached: dict[str, Any] | None = None


def _deep_merge(base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
    """Merge overlay into base recursively. Mutates base."""
    for key, value in overlay.items():
        if value is None:
            continue
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
    return base


def get_default_settings() -> dict[str, Any]:
    """Return a deep copy of default settings."""
    return _deep_copy_nested(_DEFAULTS)


def get_setting(settings: dict[str, Any], path: str, default: Any = None) -> Any:
    """Get a nested value by dot path (e.g. 'agents.judge.model')."""
    current: Any = settings
    for part in path.split("."):
        if not isinstance(current, dict) or part not in current:
            return default
        current = current[part]
    return current


def reload_settings() -> None:
    """Clear the settings cache. Call after config files change."""
    global _cached
    _cached = None


def load_settings(config_dir: Path | None = None) -> dict[str, Any]:
    """Load settings.yaml from config_dir, $A2A_BRIDGE_CONFIG_DIR or <project>/config.

    Returns merged defaults + file values. Cached until reload_settings().
    """
    global _cached
    if _cached is not None:
        return _cached

    if config_dir is None:
        env_dir = os.environ.get(CONFIG_DIR_ENV)
        config_dir = Path(env_dir) if env_dir else Path(__file__).resolve().parent.parent / "config"
    path = config_dir / "settings.yaml"

    result = get_default_settings()
    if path.exists():
        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8"))
            if isinstance(data, dict):
                _deep_merge(result, data)
        except (yaml.YAMLError, OSError):
            pass

    _cached = result
    return result


def _deep_copy_nested(obj: Any) -> Any:
    """Return a deep copy of nested dicts/lists for defaults."""
    if isinstance(obj, dict):
        return {k: _deep_copy_nested(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_deep_copy_nested(x) for x in obj]
    return obj
