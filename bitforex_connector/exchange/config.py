from __future__ import annotations

"""
Connector Configuration
=======================

- Credentials from explicit values or environment variables
- Venue endpoint, API version, fees and transport timeout
- YAML loading with pydantic validation

Resolution order for credentials: explicit YAML values, then
`BITFOREX_API_KEY` / `BITFOREX_API_SECRET`.
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from bitforex_connector.exchange.common import CredentialsRequired, Fees

logger = logging.getLogger(__name__)

CONFIG_ENV = "BITFOREX_CONFIG"
KEY_ENV = "BITFOREX_API_KEY"
SECRET_ENV = "BITFOREX_API_SECRET"

DEFAULT_API_BASE = "https://api.bitforex.com"
DEFAULT_VERSION = "v1"


class ConfigError(RuntimeError):
    pass


class Credentials(BaseModel):
    """Exchange API credentials."""

    model_config = ConfigDict(frozen=True)

    api_key: str = ""
    api_secret: str = Field(default="", repr=False)

    @classmethod
    def from_env(cls) -> "Credentials":
        return cls(api_key=os.getenv(KEY_ENV, ""), api_secret=os.getenv(SECRET_ENV, ""))

    @property
    def present(self) -> bool:
        return bool(self.api_key) and bool(self.api_secret)

    def require(self, operation: Optional[str] = None) -> None:
        if not self.present:
            missing = "api_key" if not self.api_key else "api_secret"
            raise CredentialsRequired(
                f"bitforex requires {missing} for {operation or 'private requests'}",
                operation=operation,
                argument=missing,
            )


class ConnectorConfig(BaseModel):
    api_base: str = DEFAULT_API_BASE
    version: str = DEFAULT_VERSION
    timeout_s: float = Field(default=10.0, gt=0, le=300)
    maker_fee: float = Field(default=0.0, ge=-0.01, le=0.01)
    taker_fee: float = Field(default=0.0005, ge=0, le=0.01)
    credentials: Credentials = Field(default_factory=Credentials)

    @field_validator("api_base")
    @classmethod
    def validate_api_base(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"api_base must be an http(s) URL, got: {v}")
        return v.rstrip("/")

    @field_validator("version")
    @classmethod
    def validate_version(cls, v: str) -> str:
        v = v.strip().strip("/")
        if not v:
            raise ValueError("version must not be empty")
        return v

    @property
    def fees(self) -> Fees:
        return Fees(maker=self.maker_fee, taker=self.taker_fee)

    def with_env_credentials(self) -> "ConnectorConfig":
        """Fill blank credential fields from the environment."""
        env = Credentials.from_env()
        creds = Credentials(
            api_key=self.credentials.api_key or env.api_key,
            api_secret=self.credentials.api_secret or env.api_secret,
        )
        return self.model_copy(update={"credentials": creds})


def _load_yaml(path: Path) -> Dict[str, Any]:
    try:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Failed to load YAML '{path}': {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"YAML root must be a mapping: '{path}'")
    return data


def load_config(path: Union[str, Path, None] = None) -> ConnectorConfig:
    """Load connector settings from YAML (path or $BITFOREX_CONFIG), defaults otherwise.

    The file may nest settings under a top-level `bitforex:` key.
    """
    cfg_path = path or os.getenv(CONFIG_ENV)
    raw: Dict[str, Any] = {}
    if cfg_path:
        raw = _load_yaml(Path(cfg_path))
        if isinstance(raw.get("bitforex"), dict):
            raw = raw["bitforex"]
        logger.info(f"Loaded connector config from {cfg_path}")
    try:
        cfg = ConnectorConfig(**raw)
    except ValidationError as e:
        raise ConfigError(f"Invalid connector config {cfg_path or '<defaults>'}: {e}") from e
    return cfg.with_env_credentials()


__all__ = [
    "CONFIG_ENV",
    "KEY_ENV",
    "SECRET_ENV",
    "DEFAULT_API_BASE",
    "DEFAULT_VERSION",
    "ConfigError",
    "Credentials",
    "ConnectorConfig",
    "load_config",
]
