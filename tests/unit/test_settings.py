"""
Unit tests for the settings manager.
"""

import json
from pathlib import Path

from radial.services.settings_manager import (
    AppSettings, SettingsManager, get_settings, reset_settings_manager,
)


class TestAppSettings:
    """Tests for the settings dataclasses."""

    def test_defaults(self):
        settings = AppSettings()
        assert settings.render.drag_throttle_ms == 16.0
        assert settings.render.frame_interval_ms == 16
        assert settings.transformer.padding == 5.0
        assert settings.transformer.size == 10.0
        assert settings.canvas.width == 800

    def test_round_trip_through_dict(self):
        settings = AppSettings()
        settings.transformer.padding = 8.0
        restored = AppSettings.from_dict(settings.to_dict())
        assert restored.transformer.padding == 8.0
        assert restored == settings

    def test_unknown_keys_ignored(self):
        settings = AppSettings.from_dict({
            "render": {"drag_throttle_ms": 32, "retired_option": True},
            "plugins": {},
        })
        assert settings.render.drag_throttle_ms == 32
        assert settings.transformer.padding == 5.0


class TestSettingsManager:
    """Tests for SettingsManager file storage."""

    def test_missing_file_keeps_defaults(self, settings_path):
        manager = SettingsManager(settings_path)
        assert manager.load() is False
        assert manager.settings == AppSettings()
        assert manager.settings_path == settings_path

    def test_setter_saves(self, settings_path):
        manager = SettingsManager(settings_path)
        manager.drag_throttle_ms = 40

        data = json.loads(Path(settings_path).read_text(encoding="utf-8"))
        assert data["render"]["drag_throttle_ms"] == 40.0

        reloaded = SettingsManager(settings_path)
        assert reloaded.drag_throttle_ms == 40.0

    def test_negative_throttle_clamped(self, settings_path):
        manager = SettingsManager(settings_path)
        manager.drag_throttle_ms = -5
        assert manager.drag_throttle_ms == 0.0

    def test_broken_file_keeps_defaults(self, settings_path, caplog):
        path = Path(settings_path)
        path.parent.mkdir(parents=True)
        path.write_text("{not json", encoding="utf-8")

        manager = SettingsManager(settings_path)

        assert manager.load() is False
        assert manager.settings == AppSettings()
        assert "Error loading settings" in caplog.text

    def test_reset(self, settings_path):
        manager = SettingsManager(settings_path)
        manager.settings.canvas.width = 1024
        manager.reset()
        assert manager.canvas.width == 800
        assert Path(settings_path).exists()


class TestGlobalSettings:
    """Tests for the module-level settings instance."""

    def test_singleton(self, settings_path):
        first = get_settings(settings_path)
        second = get_settings()
        assert first is second
        assert first.settings_path == settings_path

    def test_reset_settings_manager(self, settings_path):
        first = get_settings(settings_path)
        reset_settings_manager()
        assert get_settings(settings_path) is not first

    def test_scene_uses_global_settings(self, settings_path, surface):
        from radial.core.scene import Scene

        manager = get_settings(settings_path)
        manager.drag_throttle_ms = 50
        scene = Scene(surface)
        rect = scene.rect(width=10, height=10)

        assert scene.settings is manager.settings
        assert rect.get_event_delegate().throttle_ms == 50.0
