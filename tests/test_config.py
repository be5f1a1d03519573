#!/usr/bin/env python3
"""Tests for settings loading."""
import pytest
from pathlib import Path

from carcare import Settings, load_settings
from carcare.config import DEFAULT_DATA_DIR
from maint import main


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("CARCARE_DATA_DIR", "CARCARE_APP_GROUP_DIR", "CARCARE_NOTIFICATIONS_ENABLED",
                 "CARCARE_WIDGET_REMINDER_LIMIT", "CARCARE_DEFAULT_NOTIFY_DAYS_BEFORE", "CARCARE_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)


class TestLoadSettings:
    """Tests for load_settings."""

    def test_defaults(self):
        settings = load_settings()
        assert settings == Settings()
        assert settings.data_dir == DEFAULT_DATA_DIR
        assert settings.notifications_enabled is True
        assert settings.widget_reminder_limit == 5

    def test_missing_file_is_defaults(self, tmp_path):
        assert load_settings(tmp_path / "nope.yaml") == Settings()

    def test_file_values(self, tmp_path):
        config = tmp_path / "carcare.yaml"
        config.write_text(f"""
dataDir: {tmp_path / 'data'}
notificationsEnabled: false
widgetReminderLimit: 3
defaultNotifyDaysBefore: 14
logLevel: debug
""")
        settings = load_settings(config)

        assert settings.data_dir == tmp_path / "data"
        assert settings.notifications_enabled is False
        assert settings.widget_reminder_limit == 3
        assert settings.default_notify_days_before == 14
        assert settings.log_level == "DEBUG"

    def test_environment_wins(self, tmp_path, monkeypatch):
        config = tmp_path / "carcare.yaml"
        config.write_text("notificationsEnabled: true\nwidgetReminderLimit: 3\n")
        monkeypatch.setenv("CARCARE_DATA_DIR", str(tmp_path / "env"))
        monkeypatch.setenv("CARCARE_NOTIFICATIONS_ENABLED", "off")
        monkeypatch.setenv("CARCARE_LOG_LEVEL", "info")

        settings = load_settings(config)

        assert settings.data_dir == tmp_path / "env"
        assert settings.notifications_enabled is False
        assert settings.log_level == "INFO"
        assert settings.widget_reminder_limit == 3

    def test_malformed_file(self, tmp_path):
        config = tmp_path / "carcare.yaml"
        config.write_text("- just\n- a list\n")
        with pytest.raises(ValueError):
            load_settings(config)

    def test_invalid_values_are_reported(self, tmp_path):
        config = tmp_path / "carcare.yaml"
        config.write_text("widgetReminderLimit: lots\ndefaultNotifyDaysBefore: -1\n")

        with pytest.raises(ValueError) as e:
            load_settings(config)

        message = str(e.value)
        assert message.startswith("Config values are not valid:")
        assert "widget_reminder_limit" in message
        assert "default_notify_days_before" in message

    def test_unknown_key_is_reported(self, tmp_path):
        config = tmp_path / "carcare.yaml"
        config.write_text("widgetLimit: 3\n")
        with pytest.raises(ValueError, match="widget_limit"):
            load_settings(config)

    def test_unknown_log_level(self, monkeypatch):
        monkeypatch.setenv("CARCARE_LOG_LEVEL", "chatty")
        with pytest.raises(ValueError, match="log_level"):
            load_settings()

    def test_cli_reports_invalid_config(self, tmp_path, capsys):
        config = tmp_path / "carcare.yaml"
        config.write_text("widgetReminderLimit: 0\n")

        assert main(["--config", str(config), "--data-dir", str(tmp_path), "cars"]) == 1
        assert "Config values are not valid" in capsys.readouterr().out


class TestSettingsPaths:
    """Tests for derived file locations."""

    def test_files_under_data_dir(self):
        settings = Settings(data_dir=Path("/data"))
        assert settings.garage_file == Path("/data/garage.yaml")
        assert settings.alerts_file == Path("/data/alerts.yaml")
        assert settings.shared_dir == Path("/data/shared")

    def test_app_group_dir_overrides_shared(self):
        settings = Settings(data_dir=Path("/data"), app_group_dir=Path("/group"))
        assert settings.shared_dir == Path("/group")
