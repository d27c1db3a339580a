"""
Configuration: loads settings from .structural_edit.yaml, environment
variables, and built-in defaults (priority: CLI args > env > YAML > defaults).
"""

import os

import yaml


_DEFAULTS = {
    "max_bytes": 1024 * 1024,
    "preview_max_lines": 400,
    "indent_width": 2,
    "quote_style": "single",
    "metrics_enabled": False,
    "metrics_dir": ".structural_edit",
    "log_dir": ".structural_edit/logs",
}

# Config file search locations
_CONFIG_FILENAMES = [".structural_edit.yaml", ".structural_edit.yml"]

_ENV_PREFIX = "STRUCTURAL_EDIT_"


def _find_config_file(explicit_path: str | None = None) -> str | None:
    """Find the config file. Checks explicit path, CWD, then user home."""
    if explicit_path:
        if os.path.isfile(explicit_path):
            return explicit_path
        return None

    search_dirs = [os.getcwd(), os.path.expanduser("~")]
    for d in search_dirs:
        for name in _CONFIG_FILENAMES:
            path = os.path.join(d, name)
            if os.path.isfile(path):
                return path
    return None


def _load_yaml(path: str) -> dict:
    """Load YAML file, returns empty dict on failure."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
        return data if isinstance(data, dict) else {}
    except (OSError, yaml.YAMLError):
        return {}


class Config:
    """Engine and tool settings.

    Settings are resolved in priority order:
    1. CLI arguments (handled by caller)
    2. Environment variables (``STRUCTURAL_EDIT_<NAME>``)
    3. .structural_edit.yaml config file
    4. Built-in defaults
    """

    def __init__(self, yaml_data: dict | None = None):
        yd = yaml_data or {}

        # Helper: env var > yaml > default
        def _get(key: str, cast=str):
            env_val = os.getenv(_ENV_PREFIX + key.upper())
            if env_val is not None:
                return cast(env_val)
            yaml_val = yd.get(key)
            if yaml_val is not None:
                return cast(yaml_val)
            return _DEFAULTS[key]

        def _get_bool(key: str) -> bool:
            env_val = os.getenv(_ENV_PREFIX + key.upper())
            if env_val is not None:
                return env_val.lower() in ("1", "true", "yes")
            yaml_val = yd.get(key)
            if yaml_val is not None:
                return bool(yaml_val)
            return _DEFAULTS[key]

        self.MAX_BYTES = _get("max_bytes", cast=int)
        self.PREVIEW_MAX_LINES = _get("preview_max_lines", cast=int)

        # Printer style for newly introduced code
        style = yd.get("style", {}) if isinstance(yd.get("style"), dict) else {}
        self.INDENT_WIDTH = int(
            os.getenv(_ENV_PREFIX + "INDENT_WIDTH")
            or style.get("indent_width", _get("indent_width", cast=int))
        )
        quote_style = str(
            os.getenv(_ENV_PREFIX + "QUOTE_STYLE")
            or style.get("quote_style", _get("quote_style"))
        ).lower()
        if quote_style not in ("single", "double"):
            quote_style = _DEFAULTS["quote_style"]
        self.QUOTE_STYLE = quote_style

        # Edit metrics (JSONL)
        self.METRICS_ENABLED = _get_bool("metrics_enabled")
        self.METRICS_DIR = _get("metrics_dir")

        self.LOG_DIR = _get("log_dir")

    @classmethod
    def load(cls, config_path: str | None = None) -> "Config":
        """Load config from YAML file (if found) + env vars + defaults."""
        path = _find_config_file(config_path)
        yaml_data = _load_yaml(path) if path else {}
        return cls(yaml_data)
