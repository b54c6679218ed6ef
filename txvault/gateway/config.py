"""Configuration management for txvault: pydantic-settings + TOML."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Literal

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings

from txvault.constants import (
    CONFIG_FILE,
    DEFAULT_HOST,
    DEFAULT_PORT,
    MK_VERSION,
    RECORDS_DB,
    SUPPORTED_MK_VERSIONS,
)
from txvault.crypto.keys import MasterKey


class GatewayConfig(BaseSettings):
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    cors_origins: list[str] = ["http://localhost:3000"]
    rate_limit_per_minute: int = 120
    max_body_bytes: int = 1024 * 1024

    model_config = {"env_prefix": "TXVAULT_GATEWAY_"}

    @field_validator("host")
    @classmethod
    def validate_host(cls, v: str) -> str:
        if v == "0.0.0.0":
            raise ValueError(
                "Binding to 0.0.0.0 is FORBIDDEN in configuration. "
                "Pass --host 0.0.0.0 --bind-public to 'txvault serve' instead."
            )
        return v


class CryptoConfig(BaseSettings):
    master_key_hex: SecretStr | None = None
    mk_version: int = MK_VERSION

    # TXVAULT_MASTER_KEY_HEX, TXVAULT_MK_VERSION
    model_config = {"env_prefix": "TXVAULT_"}

    @field_validator("mk_version")
    @classmethod
    def validate_mk_version(cls, v: int) -> int:
        if v not in SUPPORTED_MK_VERSIONS:
            raise ValueError(f"Unsupported master key version: {v}")
        return v


class StorageConfig(BaseSettings):
    backend: Literal["memory", "sqlite"] = "memory"
    path: Path = RECORDS_DB

    model_config = {"env_prefix": "TXVAULT_STORAGE_"}


class LoggingConfig(BaseSettings):
    level: str = "INFO"
    format: str = "json"

    model_config = {"env_prefix": "TXVAULT_LOG_"}


class TxVaultConfig(BaseSettings):
    """Root configuration for txvault. Loads from TOML + env vars."""

    gateway: GatewayConfig = Field(default_factory=GatewayConfig)
    crypto: CryptoConfig = Field(default_factory=CryptoConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = {"env_prefix": "TXVAULT_"}

    def load_master_key(self) -> MasterKey:
        """
        Decode the configured master key.

        Raises ConfigError if none is configured, InvalidHex/InvalidLength
        if it is malformed. Either is fatal at startup.
        """
        if self.crypto.master_key_hex is None:
            raise ConfigError(
                "Missing TXVAULT_MASTER_KEY_HEX (must be 64 hex chars). "
                "Generate one with 'txvault keygen'."
            )
        return MasterKey.from_hex(
            self.crypto.master_key_hex.get_secret_value(),
            version=self.crypto.mk_version,
        )


class ConfigError(Exception):
    """Raised for configuration that cannot be used."""

    pass


def load_config(config_path: Path | None = None) -> TxVaultConfig:
    """
    Load configuration from TOML file with env var overrides.

    Priority (highest to lowest):
    1. Environment variables (TXVAULT_*)
    2. User config file (~/.txvault/config.toml)
    3. Built-in defaults
    """
    import tomli

    merged: dict[str, Any] = {}

    user_path = config_path or CONFIG_FILE
    if user_path.exists():
        with open(user_path, "rb") as f:
            merged = tomli.load(f)

    # Values passed as init kwargs outrank env vars in pydantic-settings,
    # so drop TOML values that the environment overrides.
    return TxVaultConfig(
        gateway=_section(GatewayConfig, merged.get("gateway", {})),
        crypto=_section(CryptoConfig, merged.get("crypto", {})),
        storage=_section(StorageConfig, merged.get("storage", {})),
        logging=_section(LoggingConfig, merged.get("logging", {})),
    )


def _section(model: type[BaseSettings], values: dict[str, Any]) -> BaseSettings:
    prefix = model.model_config.get("env_prefix", "")
    env_names = {name.upper() for name in os.environ}
    kept = {k: v for k, v in values.items() if f"{prefix}{k}".upper() not in env_names}
    return model(**kept)
