import json
import logging
import os
from pathlib import Path
from typing import Any, Optional

logger = logging.getLogger(__name__)


class Config:
    """Simple configuration manager for persisting capture and detector settings."""

    _instance = None
    _defaults = {
        "device": None,  # None selects the default input device
        "sample_rate": 44100,
        "channels": 2,
        "bits": 16,
        "frames_per_period": 256,
        "window_seconds": 3.0,
        "log_level": "INFO",
    }

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super(Config, cls).__new__(cls)
            cls._instance._load()
        return cls._instance

    @classmethod
    def reset_instance(cls):
        """Drop the cached instance so the next Config() reloads from disk."""
        cls._instance = None

    def _get_config_path(self) -> Path:
        """Get path to config file, under WAVETEMPO_HOME or the user's home directory."""
        app_dir = Path(os.environ.get("WAVETEMPO_HOME", Path.home() / ".wavetempo"))
        app_dir.mkdir(parents=True, exist_ok=True)
        return app_dir / "settings.json"

    def _load(self):
        """Load settings from disk."""
        self._settings = self._defaults.copy()
        path = self._get_config_path()
        if path.exists():
            try:
                with open(path, 'r', encoding='utf-8') as f:
                    data = json.load(f)
            except (OSError, json.JSONDecodeError) as exc:
                logger.warning("Ignoring unreadable settings file %s: %s", path, exc)
                return
            if isinstance(data, dict):
                self._settings.update(data)
            else:
                logger.warning("Ignoring settings file %s: not a JSON object", path)

    def save(self):
        """Save settings to disk."""
        path = self._get_config_path()
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(self._settings, f, indent=4)

    def get(self, key: str, default: Any = None) -> Any:
        return self._settings.get(key, default)

    def set(self, key: str, value: Any):
        self._settings[key] = value
        self.save()

    @property
    def device(self) -> Optional[Any]:
        return self._settings.get("device")

    @device.setter
    def device(self, value: Optional[Any]):
        self.set("device", value)

    @property
    def sample_rate(self) -> float:
        return float(self._settings.get("sample_rate", 44100))

    @property
    def channels(self) -> int:
        return int(self._settings.get("channels", 2))

    @property
    def bits(self) -> int:
        return int(self._settings.get("bits", 16))

    @property
    def frames_per_period(self) -> int:
        return int(self._settings.get("frames_per_period", 256))

    @property
    def window_seconds(self) -> float:
        return float(self._settings.get("window_seconds", 3.0))

    @window_seconds.setter
    def window_seconds(self, value: float):
        self.set("window_seconds", float(value))

    @property
    def log_level(self) -> str:
        return str(self._settings.get("log_level", "INFO"))
