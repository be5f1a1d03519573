"""Settings loaded from an optional YAML file, overridable from the environment."""

import logging
import re
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_DATA_DIR = Path.home() / ".carcare"

ENV_PREFIX = "CARCARE_"


class Settings(BaseSettings):
    """Runtime settings for the CLI and the widget host."""

    # Pydantic settings
    model_config = SettingsConfigDict(
        env_ignore_empty=True,
        env_prefix=ENV_PREFIX,
        extra="forbid",
    )

    data_dir: Path = DEFAULT_DATA_DIR
    app_group_dir: Optional[Path] = None
    notifications_enabled: bool = True
    widget_reminder_limit: int = Field(default=5, ge=1)
    default_notify_days_before: int = Field(default=7, ge=0)
    log_level: str = "WARNING"

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        # Environment overrides the config file
        return env_settings, init_settings

    @field_validator("data_dir", "app_group_dir")
    @classmethod
    def _expand_user(cls, value: Optional[Path]) -> Optional[Path]:
        return value.expanduser() if value is not None else None

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        value = value.upper()
        if not isinstance(logging.getLevelName(value), int):
            raise ValueError(f"unknown log level {value}")
        return value

    @property
    def garage_file(self) -> Path:
        return self.data_dir / "garage.yaml"

    @property
    def alerts_file(self) -> Path:
        return self.data_dir / "alerts.yaml"

    @property
    def shared_dir(self) -> Path:
        """Directory shared with the widget host."""
        return self.app_group_dir or self.data_dir / "shared"


def _snake_case(key: str) -> str:
    return re.sub(r"(?<!^)(?=[A-Z])", "_", key).lower()


def load_settings(config_file: Optional[Union[str, Path]] = None) -> Settings:
    """
    Build settings from defaults, then the YAML file, then CARCARE_* variables.

    The file uses camelCase keys (dataDir, widgetReminderLimit, ...). A
    missing config file is not an error; invalid values are (ValueError).
    """
    data: Dict[str, Any] = {}
    if config_file is not None and Path(config_file).exists():
        with open(config_file, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"Config file {config_file} must contain a mapping")

    try:
        return Settings(**{_snake_case(k): v for k, v in data.items()})

    # Pretty print validation errors
    except ValidationError as e:
        err = "Config values are not valid:"
        for i, error in enumerate(e.errors()):
            err += f"\n{i + 1}. At {'.'.join(str(loc) for loc in error['loc'])}: {error['msg']} (input value: {error['input']})"
        raise ValueError(err) from e
