"""
Settings Manager.

Handles engine and canvas settings with JSON file storage.
"""

import json
import logging
import os
from dataclasses import dataclass, field, asdict
from typing import Optional
from pathlib import Path


logger = logging.getLogger(__name__)


@dataclass
class RenderSettings:
    """Redraw and interaction timing."""
    drag_throttle_ms: float = 16.0   # at most one drag update per frame
    frame_interval_ms: int = 16      # Qt frame clock period
    hit_epsilon: float = 0.1         # triangle hit test tolerance
    antialiasing: bool = True
    background: str = "#FAFAFA"


@dataclass
class TransformerDefaults:
    """Default look of the selection overlay."""
    color: str = "white"                      # anchor fill
    border_color: str = "#3B82F6"
    border_width: float = 2.0
    border_fill: str = "rgba(255, 255, 255, 0.2)"
    size: float = 10.0                        # anchor diameter and minimum resize
    padding: float = 5.0


@dataclass
class CanvasSettings:
    """Default canvas dimensions."""
    width: int = 800
    height: int = 600


@dataclass
class AppSettings:
    """Complete settings."""
    render: RenderSettings = field(default_factory=RenderSettings)
    transformer: TransformerDefaults = field(default_factory=TransformerDefaults)
    canvas: CanvasSettings = field(default_factory=CanvasSettings)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "render": asdict(self.render),
            "transformer": asdict(self.transformer),
            "canvas": asdict(self.canvas),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "AppSettings":
        """Create from dictionary. Unknown keys are ignored."""
        settings = cls()

        if "render" in data:
            settings.render = _build(RenderSettings, data["render"])
        if "transformer" in data:
            settings.transformer = _build(TransformerDefaults, data["transformer"])
        if "canvas" in data:
            settings.canvas = _build(CanvasSettings, data["canvas"])

        return settings


def _build(cls, values: dict):
    """Instantiate a settings dataclass from the keys it knows about."""
    known = cls.__dataclass_fields__.keys()
    return cls(**{k: v for k, v in values.items() if k in known})


class SettingsManager:
    """
    Manages settings with JSON file storage.

    Settings file location:
    - Windows: %APPDATA%/Radial/settings.json
    - Linux: ~/.config/Radial/settings.json
    - macOS: ~/Library/Application Support/Radial/settings.json
    """

    APP_NAME = "Radial"
    SETTINGS_FILE = "settings.json"

    def __init__(self, config_override: Optional[str] = None):
        """
        Initialize settings manager.

        Args:
            config_override: Optional path to override config file location.
                            Useful for testing.
        """
        self._settings = AppSettings()
        self._config_override = config_override
        self._settings_path = self._get_settings_path()
        self.load()

    @property
    def settings(self) -> AppSettings:
        """Get current settings."""
        return self._settings

    @property
    def settings_path(self) -> str:
        """Get the settings file path."""
        return str(self._settings_path)

    # Convenience properties for common settings
    @property
    def render(self) -> RenderSettings:
        return self._settings.render

    @property
    def transformer(self) -> TransformerDefaults:
        return self._settings.transformer

    @property
    def canvas(self) -> CanvasSettings:
        return self._settings.canvas

    @property
    def drag_throttle_ms(self) -> float:
        return self._settings.render.drag_throttle_ms

    @drag_throttle_ms.setter
    def drag_throttle_ms(self, value: float):
        self._settings.render.drag_throttle_ms = max(0.0, float(value))
        self.save()

    def _get_settings_path(self) -> Path:
        """Get platform-specific settings directory."""
        if self._config_override:
            return Path(self._config_override)

        import platform
        system = platform.system()

        if system == "Windows":
            base = os.environ.get("APPDATA", os.path.expanduser("~"))
            config_dir = Path(base) / self.APP_NAME
        elif system == "Darwin":  # macOS
            config_dir = Path.home() / "Library" / "Application Support" / self.APP_NAME
        else:  # Linux and others
            xdg_config = os.environ.get("XDG_CONFIG_HOME", os.path.expanduser("~/.config"))
            config_dir = Path(xdg_config) / self.APP_NAME

        return config_dir / self.SETTINGS_FILE

    def load(self) -> bool:
        """Load settings from file. Missing or broken files keep the defaults."""
        if not self._settings_path.exists():
            return False

        try:
            with open(self._settings_path, "r", encoding="utf-8") as f:
                data = json.load(f)
            self._settings = AppSettings.from_dict(data)
            return True
        except (OSError, ValueError, TypeError) as e:
            logger.error(f"Error loading settings from {self._settings_path}: {e}")
            return False

    def save(self) -> bool:
        """Save settings to file."""
        try:
            self._settings_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self._settings_path, "w", encoding="utf-8") as f:
                json.dump(self._settings.to_dict(), f, indent=2)
            return True
        except OSError as e:
            logger.error(f"Error saving settings to {self._settings_path}: {e}")
            return False

    def reset(self):
        """Reset settings to defaults."""
        self._settings = AppSettings()
        self.save()


# Global settings instance
_settings_manager: Optional[SettingsManager] = None


def get_settings(config_override: Optional[str] = None) -> SettingsManager:
    """
    Get the global settings manager instance.

    Args:
        config_override: Optional path to override config location.
                        Only used on first call to initialize.
    """
    global _settings_manager
    if _settings_manager is None:
        _settings_manager = SettingsManager(config_override)
    return _settings_manager


def reset_settings_manager():
    """Reset the global settings manager (useful for testing)."""
    global _settings_manager
    _settings_manager = None
