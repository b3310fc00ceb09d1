"""Client settings management for nativeftp.

Provides ClientSettings dataclass and SettingsManager for persistence.
"""

import json
import logging
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Optional

from nativeftp.config.paths import get_log_file_path, get_settings_path
from nativeftp.utils.logging import setup_logging


@dataclass
class ClientSettings:
    """Connection defaults that persist between sessions."""

    # FTP connection defaults
    default_port: int = 21
    timeout: int = 90
    passive_mode: bool = False
    use_ssl: bool = False
    username: str = "anonymous"

    # Logging
    log_level: str = "INFO"
    log_to_file: bool = False

    # Store passwords of saved sessions in the system keyring
    use_keyring: bool = True

    def to_dict(self) -> dict:
        """Convert settings to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "ClientSettings":
        """Create settings from dictionary, ignoring unknown keys."""
        valid_fields = {f.name for f in cls.__dataclass_fields__.values()}
        filtered = {k: v for k, v in data.items() if k in valid_fields}
        return cls(**filtered)

    def connect_kwargs(self) -> dict:
        """Keyword arguments for ``Connector.connect`` from these defaults."""
        return {
            "port": self.default_port,
            "is_ssl": self.use_ssl,
            "timeout": self.timeout,
            "passive": self.passive_mode,
        }


def read_json(path: Path) -> Optional[dict]:
    """
    Read a JSON object from disk.

    Returns:
        The decoded object, or None if the file is missing or unreadable
    """
    if not path.exists():
        return None
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (json.JSONDecodeError, IOError):
        return None
    return data if isinstance(data, dict) else None


def write_json(path: Path, data: dict) -> None:
    """Write a JSON object to disk, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)


class SettingsManager:
    """Manages client settings persistence."""

    def __init__(self, config_path: Optional[Path] = None):
        """
        Initialize settings manager.

        Args:
            config_path: Optional custom path, defaults to platform standard
        """
        self._config_path = config_path or get_settings_path()
        self._settings: Optional[ClientSettings] = None

    @property
    def config_path(self) -> Path:
        """Path to settings file."""
        return self._config_path

    @property
    def settings(self) -> ClientSettings:
        """Current settings, loaded on first access."""
        if self._settings is None:
            return self.load()
        return self._settings

    def load(self) -> ClientSettings:
        """
        Load settings from disk.

        Returns:
            ClientSettings instance (defaults if the file is missing or invalid)
        """
        data = read_json(self._config_path)
        self._settings = ClientSettings.from_dict(data) if data is not None else ClientSettings()
        return self._settings

    def save(self, settings: ClientSettings) -> None:
        self._settings = settings
        write_json(self._config_path, settings.to_dict())

    def reset(self) -> ClientSettings:
        """Delete the settings file and return the defaults."""
        self._settings = ClientSettings()
        if self._config_path.exists():
            self._config_path.unlink()
        return self._settings

    def update(self, **kwargs) -> ClientSettings:
        """
        Update specific settings fields and save.

        Unknown field names are ignored.
        """
        settings = self.settings
        for key, value in kwargs.items():
            if hasattr(settings, key):
                setattr(settings, key, value)

        self.save(settings)
        return settings

    def configure_logging(self) -> logging.Logger:
        """Set up package logging from the current settings."""
        settings = self.settings
        log_file = get_log_file_path() if settings.log_to_file else None
        return setup_logging(level=settings.log_level, log_file=log_file)
