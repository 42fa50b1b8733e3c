"""Configuration loading.

Settings are loaded in priority order (highest first):
  1. Constructor arguments  (used by the CLI for --data-dir and friends)
  2. Environment variables  (SITEWATCH__CRYPTO__SECRET=..., or the older
                             MONITOR_ENCRYPTION_KEY as a fallback)
  3. sitewatch.yaml         (searched in cwd, then platform config dir)
  4. Hardcoded defaults

The config file is optional. The only thing an operator normally has to
provide is the encryption secret, and only when sites use encrypted URLs.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import platformdirs
from pydantic import BaseModel, Field, SecretStr, model_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

_DEFAULT_DATA_DIR = platformdirs.user_data_dir("sitewatch")

INSECURE_DEFAULT_KEY = "default-key-change-in-production"


def _find_config_file() -> str | None:
    """Return the path of the first sitewatch.yaml found, or None."""
    candidates = [
        Path("sitewatch.yaml"),
        Path(platformdirs.user_config_dir("sitewatch")) / "sitewatch.yaml",
    ]
    for path in candidates:
        if path.exists():
            return str(path)
    return None


class DataSettings(BaseModel):
    dir: str = _DEFAULT_DATA_DIR
    sites_file: str = "sites.json"
    status_file: str = "status.json"
    history_file: str = "history.json"

    @property
    def sites_path(self) -> Path:
        return Path(self.dir).expanduser() / self.sites_file

    @property
    def status_path(self) -> Path:
        return Path(self.dir).expanduser() / self.status_file

    @property
    def history_path(self) -> Path:
        return Path(self.dir).expanduser() / self.history_file


class FetcherSettings(BaseModel):
    connect_timeout_seconds: float = Field(default=10.0, gt=0)
    read_timeout_seconds: float = Field(default=30.0, gt=0)
    user_agent: str = "WebMonitor/1.0"


class HistorySettings(BaseModel):
    max_entries: int = Field(default=100, ge=1)


class CryptoSettings(BaseModel):
    secret: SecretStr | None = None
    # Opt-in only: the fallback key is public, so URLs "encrypted" with it
    # are obfuscated rather than confidential.
    allow_insecure_default_key: bool = False


class LoggingSettings(BaseModel):
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    format: Literal["json", "text"] = "text"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        # Double-underscore separates nesting: SITEWATCH__FETCHER__READ_TIMEOUT_SECONDS=60
        env_prefix="SITEWATCH__",
        env_nested_delimiter="__",
        yaml_file=_find_config_file(),
        yaml_file_encoding="utf-8",
    )

    data: DataSettings = DataSettings()
    fetcher: FetcherSettings = FetcherSettings()
    history: HistorySettings = HistorySettings()
    crypto: CryptoSettings = CryptoSettings()
    logging: LoggingSettings = LoggingSettings()

    # Read from MONITOR_ENCRYPTION_KEY, the variable of the older monitor script.
    # Only used when crypto.secret is unset.
    legacy_encryption_key: SecretStr | None = Field(
        default=None,
        validation_alias="MONITOR_ENCRYPTION_KEY",
        exclude=True,
    )

    @model_validator(mode="after")
    def _apply_legacy_encryption_key(self) -> Settings:
        secret = self.crypto.secret
        if self.legacy_encryption_key is not None and not (secret and secret.get_secret_value()):
            self.crypto = self.crypto.model_copy(update={"secret": self.legacy_encryption_key})
        return self

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
        **kwargs: Any,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            YamlConfigSettingsSource(settings_cls),
        )
