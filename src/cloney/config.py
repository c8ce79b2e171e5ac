"""Application configuration management using Pydantic Settings.

This module defines the `Settings` class, which loads configuration parameters
from environment variables and a `.env` file: which networks to clone between,
which signing mode to use, RPC / indexer endpoints and runtime behavior.

It also holds the per-network defaults (`DEFAULT_RPC_URLS`,
`DEFAULT_INDEXER_URLS`) used whenever a URL is not supplied explicitly.

The `get_settings` function provides a cached, singleton instance of the
configuration, ensuring consistent settings throughout the application.
"""
from __future__ import annotations

from enum import Enum
from functools import lru_cache
from typing import Any, Dict, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings
from pydantic_settings import SettingsConfigDict as _SettingsConfigDict

from .models.contract import SigningMode


class NetworkType(str, Enum):
    MAINNET = "MAINNET"
    HANGZHOUNET = "HANGZHOUNET"
    GRANADANET = "GRANADANET"
    FLORENCENET = "FLORENCENET"
    CUSTOM = "CUSTOM"


# CUSTOM has no default endpoint; an explicit URL is required.
DEFAULT_RPC_URLS: Dict[NetworkType, str] = {
    NetworkType.MAINNET: "https://mainnet.api.tez.ie",
    NetworkType.HANGZHOUNET: "https://hangzhounet.api.tez.ie",
    NetworkType.GRANADANET: "https://granadanet.api.tez.ie",
    NetworkType.FLORENCENET: "https://florencenet.api.tez.ie",
    NetworkType.CUSTOM: "",
}

DEFAULT_INDEXER_URLS: Dict[NetworkType, str] = {
    NetworkType.MAINNET: "https://api.tzkt.io/v1/",
    NetworkType.HANGZHOUNET: "https://api.hangzhou2net.tzkt.io/v1/",
    NetworkType.GRANADANET: "https://api.granadanet.tzkt.io/v1/",
    NetworkType.FLORENCENET: "https://api.florencenet.tzkt.io/v1/",
    NetworkType.CUSTOM: "",
}

DEFAULT_BIGMAP_PAGE_SIZE = 10


class Settings(BaseSettings):
    """Defines all application configuration parameters.

    Values come from environment variables or a `.env` file. Network names are
    case-insensitive and must name a `NetworkType`; blank optional values are
    treated as unset so an empty line in `.env` falls back to the defaults.
    """

    model_config = _SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Networks
    SOURCE_NETWORK: NetworkType = Field(
        default=NetworkType.MAINNET, description="Network the source contract lives on"
    )
    TARGET_NETWORK: Optional[NetworkType] = Field(
        default=None, description="Network the clone is originated on"
    )
    SOURCE_RPC_URL: Optional[str] = Field(
        default=None, description="Override RPC URL of the source network"
    )
    TARGET_RPC_URL: Optional[str] = Field(
        default=None, description="Override RPC URL of the target network"
    )
    INDEXER_URL: Optional[str] = Field(
        default=None,
        description="Override indexer base URL (otherwise derived from SOURCE_NETWORK)",
    )

    # Signing
    SIGNING_MODE: SigningMode = Field(
        default=SigningMode.DIRECT,
        description="wallet (interactive approval) or direct (pre-authorized signer)",
    )
    TARGET_CLIENT_FACTORY: Optional[str] = Field(
        default=None,
        description=(
            "Import path 'module:callable' returning a target network client; "
            "called as factory(network, rpc_url)"
        ),
    )
    SIGNER_FACTORY: Optional[str] = Field(
        default=None,
        description="Import path 'module:callable' returning a Signer; called as factory(signing_mode)",
    )

    # Runtime behavior
    BIGMAP_PAGE_SIZE: int = Field(
        default=DEFAULT_BIGMAP_PAGE_SIZE,
        gt=0,
        description="Entries requested per big map (single page, no continuation)",
    )
    HTTP_TIMEOUT: float = Field(default=30.0, description="Timeout (seconds) for RPC / indexer calls")
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    DRY_RUN: bool = Field(
        default=True,
        description="If true, build the new storage but do not originate anything",
    )

    @field_validator("SOURCE_NETWORK", "TARGET_NETWORK", mode="before")
    @classmethod
    def normalize_network(cls, v: Any) -> Any:
        if isinstance(v, str):
            trimmed = v.strip()
            if not trimmed:
                return None
            return trimmed.upper()
        return v

    @field_validator("SIGNING_MODE", mode="before")
    @classmethod
    def normalize_signing_mode(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator(
        "SOURCE_RPC_URL",
        "TARGET_RPC_URL",
        "INDEXER_URL",
        "TARGET_CLIENT_FACTORY",
        "SIGNER_FACTORY",
        mode="before",
    )
    @classmethod
    def blank_to_none(cls, v: Any) -> Optional[str]:
        """Trim whitespace and normalize blank -> None."""
        if v is None:
            return None
        if isinstance(v, str):
            trimmed = v.strip()
            return trimmed or None
        return None


@lru_cache(maxsize=1)
def get_settings() -> Settings:  # pragma: no cover - trivial
    """Return a cached, singleton instance of the application settings."""
    return Settings()
