from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

STATE_DIR = Path(".portpeek/state")
SETTINGS_FILE = STATE_DIR / "settings.json"

DEFAULTS = {
    "confirm_kill": True,
    "audit_enabled": True,
    "web_host": "127.0.0.1",
    "web_port": 7861,
}


def _ensure() -> None:
    STATE_DIR.mkdir(parents=True, exist_ok=True)


def load_settings() -> dict:
    _ensure()
    data = dict(DEFAULTS)
    if not SETTINGS_FILE.exists():
        return data
    try:
        stored = json.loads(SETTINGS_FILE.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return data
    if isinstance(stored, dict):
        # hand-edited values that would break the CLI are ignored
        data.update({k: v for k, v in stored.items() if check_setting(k, v) is None})
    return data


def save_settings(data: dict) -> dict:
    _ensure()
    SETTINGS_FILE.write_text(json.dumps(data, indent=2), encoding="utf-8")
    return data


def coerce_value(raw: str):
    """CLI strings -> JSON values: true/false, integers, else the string."""
    low = raw.strip().lower()
    if low in ("true", "yes", "on"):
        return True
    if low in ("false", "no", "off"):
        return False
    try:
        return int(raw)
    except ValueError:
        return raw


def check_setting(key: str, value) -> Optional[str]:
    """Returns an error message, or None when the value is acceptable."""
    if key not in DEFAULTS:
        return f"Unknown setting: {key}"
    default = DEFAULTS[key]
    if isinstance(default, bool):
        if not isinstance(value, bool):
            return f"{key} must be true or false"
    elif isinstance(default, int):
        if isinstance(value, bool) or not isinstance(value, int) or not 1 <= value <= 65535:
            return f"{key} must be a port number between 1 and 65535"
    elif not isinstance(value, str) or not value.strip():
        return f"{key} must be a non-empty string"
    return None


def set_setting(key: str, value) -> dict:
    data = load_settings()
    data[key] = value
    return save_settings(data)
