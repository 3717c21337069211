import os
import tomllib
from datetime import timedelta
from pathlib import Path
from typing import Optional, Tuple, Type

from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    SettingsError,
    TomlConfigSettingsSource,
)

from timetracker.errors import ConfigError

CONFIG_FILE_NAME = "config"
ACTIVITIES_FILE_NAME = "activities"


def tt_home() -> Path:
    """Directory holding the day logs, the activities file and the config."""
    return Path(os.getenv("TT_HOME", str(Path.home() / ".tt"))).expanduser()


def config_file() -> Path:
    return tt_home() / CONFIG_FILE_NAME


class WatchI3Settings(BaseModel):
    granularity: timedelta = timedelta(seconds=10)  # poll interval
    timebox: timedelta = timedelta(seconds=120)  # dwell time before acting
    log_file: Optional[Path] = None

    @field_validator('granularity', 'timebox', mode='before')
    @classmethod
    def parse_seconds(cls, v):
        # Config and environment give plain seconds.
        if isinstance(v, str) and v.strip().isdigit():
            return int(v)
        return v


class Settings(BaseSettings):
    # --- Core Paths ---
    home: Path = Field(default_factory=tt_home)

    # --- Activity resolution ---
    prefix: Optional[str] = None  # bare numbers become "<prefix>-<number>"

    # --- i3 watcher ---
    watch_i3: WatchI3Settings = WatchI3Settings()

    model_config = SettingsConfigDict(
        env_prefix="TT_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        extra='ignore'
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: Type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> Tuple[PydanticBaseSettingsSource, ...]:
        # The config file has the lowest precedence; a missing file yields no values.
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            TomlConfigSettingsSource(settings_cls, toml_file=config_file()),
        )

    @property
    def activities_file(self) -> Path:
        return self.home / ACTIVITIES_FILE_NAME


def load_settings(**overrides) -> Settings:
    """Build the process-wide settings once; a broken config file is fatal."""
    try:
        return Settings(**overrides)
    except (tomllib.TOMLDecodeError, SettingsError, ValidationError) as e:
        raise ConfigError(f"cannot read config file {config_file()}: {e}") from e
