# settings_manager.py
# Version 01.00.00.00 dated 20261019
# JSON-backed application settings

import json
import os
from pathlib import Path
from typing import Any, Dict, Optional

from logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_DATA_DIR = str(Path.home() / ".easygallery")

DEFAULT_SETTINGS: Dict[str, Any] = {
    "data_dir": DEFAULT_DATA_DIR,
    "database_name": "easygallery.db",
    "thumbnail_dir_name": "thumbnails",
    "thumbnail_size": 256,
    "log_level": "INFO",
    "log_to_console": True,
    "log_colored_output": True,
    "log_file_name": "easygallery.log",
    "skip_unchanged_photos": True,
    "ignore_hidden_folders": False,
}


class SettingsManager:
    """
    Persistent key/value settings stored as a JSON document.

    Unknown keys are kept as-is so newer settings survive older builds.
    Missing keys fall back to DEFAULT_SETTINGS.

    Usage:
        settings = SettingsManager()
        level = settings.get("log_level", "INFO")
        settings.set("thumbnail_size", 320)
    """

    def __init__(self, settings_file: Optional[str] = None):
        """
        Load settings from disk.

        Args:
            settings_file: Path of the JSON file. Defaults to
                           ~/.easygallery/settings.json, or $EASYGALLERY_SETTINGS.
        """
        default_file = os.environ.get(
            "EASYGALLERY_SETTINGS",
            os.path.join(DEFAULT_DATA_DIR, "settings.json")
        )
        self.settings_file = Path(settings_file or default_file)
        self._data: Dict[str, Any] = dict(DEFAULT_SETTINGS)
        self._load()

    def _load(self):
        if not self.settings_file.exists():
            return

        try:
            with open(self.settings_file, "r", encoding="utf-8") as f:
                stored = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Could not read settings from {self.settings_file}: {e}, using defaults")
            return

        if not isinstance(stored, dict):
            logger.warning(f"Ignoring malformed settings file {self.settings_file}")
            return

        self._data.update(stored)

    def save(self):
        """Write current settings to disk."""
        self.settings_file.parent.mkdir(parents=True, exist_ok=True)
        with open(self.settings_file, "w", encoding="utf-8") as f:
            json.dump(self._data, f, indent=2, sort_keys=True)
        logger.debug(f"Settings saved to {self.settings_file}")

    def get(self, key: str, default: Any = None) -> Any:
        if key in self._data:
            return self._data[key]
        return default

    def set(self, key: str, value: Any):
        """Set a value and persist immediately."""
        self._data[key] = value
        self.save()

    def override(self, key: str, value: Any):
        """Set a value for this process only (not persisted)."""
        self._data[key] = value

    def as_dict(self) -> Dict[str, Any]:
        return dict(self._data)

    # ------------------------------------------------------------------
    # Derived paths
    # ------------------------------------------------------------------

    def data_dir(self) -> Path:
        return Path(os.path.expanduser(str(self.get("data_dir", DEFAULT_DATA_DIR))))

    def database_path(self) -> Path:
        return self.data_dir() / self.get("database_name", "easygallery.db")

    def thumbnail_dir(self) -> Path:
        return self.data_dir() / self.get("thumbnail_dir_name", "thumbnails")

    def log_file(self) -> Optional[Path]:
        name = self.get("log_file_name")
        if not name:
            return None
        return self.data_dir() / "logs" / name
