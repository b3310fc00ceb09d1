"""Per-user file locations for nativeftp.

Settings, saved sessions and logs live under one application directory.
``NATIVEFTP_HOME`` overrides the platform default.
"""

import os
import sys
from pathlib import Path

APP_NAME = "nativeftp"

HOME_ENV_VAR = "NATIVEFTP_HOME"

SETTINGS_FILE = "settings.json"
SESSIONS_FILE = "sessions.json"
LOG_FILE = "nativeftp.log"


def _platform_config_base() -> Path:
    if sys.platform == "win32":
        return Path(os.environ.get("APPDATA", Path.home() / "AppData" / "Roaming"))
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support"
    return Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))


def get_app_data_dir() -> Path:
    """
    Application data directory, created if missing.

    Platform defaults:
        - Windows: %APPDATA%/nativeftp
        - Linux: $XDG_CONFIG_HOME/nativeftp or ~/.config/nativeftp
        - macOS: ~/Library/Application Support/nativeftp
    """
    override = os.environ.get(HOME_ENV_VAR)
    app_dir = Path(override) if override else _platform_config_base() / APP_NAME
    app_dir.mkdir(parents=True, exist_ok=True)
    return app_dir


def get_settings_path() -> Path:
    return get_app_data_dir() / SETTINGS_FILE


def get_sessions_path() -> Path:
    return get_app_data_dir() / SESSIONS_FILE


def get_log_dir() -> Path:
    """Log directory, created if missing."""
    log_dir = get_app_data_dir() / "logs"
    log_dir.mkdir(exist_ok=True)
    return log_dir


def get_log_file_path() -> Path:
    return get_log_dir() / LOG_FILE
