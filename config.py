"""
Central configuration for the Akka cluster exporter.
Supports defaults, optional config file (YAML), and environment overrides.
Command-line flags take precedence over all of these (see cli.py).
"""
from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml

from utils import env_str, get_logger

logger = get_logger(__name__)

EXPORTER_NAME = "akka_cluster_http_management_exporter"
VERSION = "0.1.0"

# -----------------------------------------------------------------------------
# Defaults
# -----------------------------------------------------------------------------

DEFAULTS: dict[str, Any] = {
    "web": {
        "listen_address": ":9110",
        "telemetry_path": "/metrics",
    },
    "akka": {
        "scrape_uri": "http://localhost:19999/members",
        "timeout": "5s",
    },
    "logging": {
        "level": "INFO",
        "file": None,
    },
}

# -----------------------------------------------------------------------------
# Config file loading (optional YAML)
# -----------------------------------------------------------------------------

_config_overrides: dict[str, Any] = {}


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    out = dict(base)
    for k, v in override.items():
        if k in out and isinstance(out[k], dict) and isinstance(v, dict):
            out[k] = _deep_merge(out[k], v)
        else:
            out[k] = v
    return out


def load_config_file(path: str | Path | None = None) -> bool:
    """Load optional YAML config. Returns True if loaded."""
    if path is None:
        for p in (
            Path(os.getcwd()) / "config.yaml",
            Path(os.getcwd()) / "config.yml",
            Path(__file__).parent / "config.yaml",
            Path.home() / ".akka_cluster_exporter" / "config.yaml",
        ):
            if p.exists():
                path = p
                break
    if path is None:
        return False
    path = Path(path).expanduser()
    if not path.exists():
        logger.warning("Config file %s does not exist", path)
        return False
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        logger.warning("Failed to load config file %s: %s", path, e)
        return False
    if not isinstance(data, dict):
        return False
    global _config_overrides
    _config_overrides = _deep_merge(_config_overrides, data)
    # Environment still wins over the file.
    _apply_env()
    return True


def get(key_path: str, default: Any = None) -> Any:
    """Get config value by dot path, e.g. 'akka.scrape_uri'."""
    merged: Any = _deep_merge(DEFAULTS, _config_overrides)
    keys = key_path.split(".")
    for k in keys:
        if isinstance(merged, dict) and k in merged:
            merged = merged[k]
        else:
            return default
    return merged


def reset() -> None:
    """Drop file overrides and re-apply the environment."""
    _config_overrides.clear()
    _apply_env()


# -----------------------------------------------------------------------------
# Environment overrides (take precedence over file)
# -----------------------------------------------------------------------------

def _env_overrides() -> dict[str, Any]:
    return {
        "web.listen_address": env_str("AKKA_EXPORTER_LISTEN_ADDRESS"),
        "web.telemetry_path": env_str("AKKA_EXPORTER_TELEMETRY_PATH"),
        "akka.scrape_uri": env_str("AKKA_SCRAPE_URI"),
        "akka.timeout": env_str("AKKA_TIMEOUT"),
        "logging.level": env_str("AKKA_EXPORTER_LOG_LEVEL"),
        "logging.file": env_str("AKKA_EXPORTER_LOG_FILE"),
    }


def _apply_env() -> None:
    e = _env_overrides()
    for path, value in e.items():
        if not value:
            continue
        keys = path.split(".")
        d = _config_overrides
        for k in keys[:-1]:
            if not isinstance(d.get(k), dict):
                d[k] = {}
            d = d[k]
        d[keys[-1]] = value


# Apply env on import
_apply_env()
