"""
Settings for the alliance scanner.

Resolved in order: defaults, JSON config file, WARTRACKER_* environment
variables. Command-line flags are applied on top by scan_alliance.py.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = Path.home() / ".wartracker-cli.json"

DEFAULT_SETTINGS: Dict[str, Any] = {
    "scratch": "_scratch",
    "debug": False,
    "tessdata": None,
    "tesseract_cmd": None,
    "layout": "default",
    "layout_file": None,
}

_ENV_PREFIX = "WARTRACKER_"


def _env_value(key: str, default: Any) -> Any:
    raw = os.getenv(_ENV_PREFIX + key.upper())
    if raw is None:
        return default
    if isinstance(DEFAULT_SETTINGS.get(key), bool):
        return raw.strip().lower() in ("1", "true", "yes", "on")
    return raw


def load_settings(config_file: Optional[Path] = None) -> Dict[str, Any]:
    """
    Load settings from the config file and environment.

    Returns:
        Settings dictionary. A missing or unreadable file leaves the defaults in place.
    """
    result = DEFAULT_SETTINGS.copy()
    path = Path(config_file) if config_file else DEFAULT_CONFIG_FILE

    if path.exists():
        try:
            with open(path, 'r', encoding='utf-8') as f:
                loaded = json.load(f)
            if isinstance(loaded, dict):
                result.update({k: v for k, v in loaded.items() if k in DEFAULT_SETTINGS})
                logger.debug(f"Using config file: {path}")
            else:
                logger.warning(f"Config file {path} is not a JSON object, ignoring it")
        except (json.JSONDecodeError, IOError) as e:
            logger.warning(f"Failed to load settings from {path}: {e}, using defaults")
    elif config_file:
        logger.warning(f"Config file {path} not found, using defaults")

    for key in DEFAULT_SETTINGS:
        result[key] = _env_value(key, result[key])

    return result
