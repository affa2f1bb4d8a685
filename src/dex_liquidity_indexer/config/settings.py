"""Configuration management for the pricing core."""

from __future__ import annotations

import json
import os
import tomllib
from decimal import Decimal
from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Annotated, Any, Dict, Iterable, List, Optional, Tuple, cast

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from ..utils.constants import (
    ATOM_ADDRESS,
    ETH_ADDRESS,
    NOTE_ADDRESS,
    NOTE_WCANTO_PAIR,
    USDC_ADDRESS,
    USDT_ADDRESS,
    WCANTO_ADDRESS,
)


DEFAULT_CONFIG_FILE = Path("config/indexer.toml")
CONFIG_FILE_ENV_VAR = "INDEXER_CONFIG_FILE"
NETWORK_ENV_VAR = "INDEXER_NETWORK"
DEFAULT_NETWORK = "canto"


class MissingBundlePolicy(str, Enum):
    """How USD attribution behaves before the Bundle singleton exists."""

    RAISE = "raise"
    ZERO = "zero"


def _resolve_config_path() -> Path:
    env_value = os.getenv(CONFIG_FILE_ENV_VAR)
    if env_value:
        candidate = Path(env_value)
        if not candidate.is_absolute():
            candidate = Path.cwd() / candidate
        return candidate
    return Path.cwd() / DEFAULT_CONFIG_FILE


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    result: Dict[str, Any] = {**base}
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(cast(Dict[str, Any], result[key]), value)
        else:
            result[key] = value
    return result


def _select_profile(data: Dict[str, Any]) -> Dict[str, Any]:
    if not data:
        return {}
    base_section = cast(Dict[str, Any], data.get("default", {}))
    requested = os.getenv(NETWORK_ENV_VAR)
    if not requested:
        network_section = base_section.get("network")
        if isinstance(network_section, dict):
            requested = cast(str, network_section.get("active", DEFAULT_NETWORK))
        elif isinstance(network_section, str):
            requested = network_section
    requested = (requested or DEFAULT_NETWORK).lower()

    if requested != "default" and requested in data:
        merged = _deep_merge(base_section, cast(Dict[str, Any], data[requested]))
        network = merged.get("network")
        network = dict(network) if isinstance(network, dict) else {}
        network["active"] = requested
        merged["network"] = network
        return merged
    if base_section:
        return base_section
    return data


def _load_toml_config() -> Tuple[Dict[str, Any], Optional[Path]]:
    path = _resolve_config_path()
    if not path.exists():
        return {}, None
    with path.open("rb") as handle:
        payload = tomllib.load(handle)
    if not isinstance(payload, dict):
        return {}, path
    merged = dict(_select_profile(payload))
    network_section = merged.get("network")
    if isinstance(network_section, dict):
        network_section = dict(network_section)
        network_section.setdefault("config_file", str(path))
        merged["network"] = network_section
    else:
        merged["network"] = {"config_file": str(path)}
    return merged, path


def _normalize_addresses(value: Iterable[str]) -> List[str]:
    seen: set[str] = set()
    unique: List[str] = []
    for address in value:
        normalized = str(address).strip().lower()
        if normalized and normalized not in seen:
            unique.append(normalized)
            seen.add(normalized)
    return unique


class NetworkConfig(BaseModel):
    """Which deployment profile is active and where it was loaded from."""

    active: str = Field(default=DEFAULT_NETWORK)
    config_file: Optional[Path] = None


class PricingConfig(BaseModel):
    """Anchor whitelist, canonical pair and manipulation-resistance thresholds."""

    whitelist: Annotated[List[str], NoDecode] = Field(
        default_factory=lambda: [
            NOTE_ADDRESS,
            USDC_ADDRESS,
            USDT_ADDRESS,
            ATOM_ADDRESS,
            ETH_ADDRESS,
            WCANTO_ADDRESS,
        ],
        min_length=1,
    )
    native_unit_token: str = Field(default=WCANTO_ADDRESS)
    reference_asset_token: str = Field(default=NOTE_ADDRESS)
    reference_pair: str = Field(default=NOTE_WCANTO_PAIR)
    untracked_pairs: Annotated[List[str], NoDecode] = Field(default_factory=list)
    minimum_usd_threshold_new_pairs: Decimal = Field(default=Decimal("1"), ge=0)
    minimum_liquidity_threshold_native: Decimal = Field(default=Decimal("1"), ge=0)
    minimum_liquidity_providers: int = Field(default=5, ge=0)
    decimal_precision: int = Field(default=34, ge=1, le=1_000)
    missing_bundle_policy: MissingBundlePolicy = Field(default=MissingBundlePolicy.RAISE)

    @field_validator("whitelist", "untracked_pairs", mode="before")
    @classmethod
    def _unique_addresses(cls, value: Any) -> List[str]:
        if isinstance(value, str):
            # environment values arrive raw: a JSON array or a comma-separated list
            raw = value.strip()
            value = json.loads(raw) if raw.startswith("[") else raw.split(",")
        return _normalize_addresses(value)

    @field_validator("native_unit_token", "reference_asset_token", "reference_pair", mode="before")
    @classmethod
    def _lower_address(cls, value: Any) -> str:
        return str(value).strip().lower()

    @field_validator(
        "minimum_usd_threshold_new_pairs",
        "minimum_liquidity_threshold_native",
        mode="before",
    )
    @classmethod
    def _parse_decimal(cls, value: Any) -> Any:
        # floats from TOML go through their shortest repr, not their binary value
        if isinstance(value, float):
            return Decimal(str(value))
        return value


class MonitoringConfig(BaseModel):
    """Logging configuration."""

    log_level: str = Field(default="INFO")
    structured_logs: bool = True


class AppConfig(BaseSettings):
    """Aggregated application configuration."""

    network: NetworkConfig = Field(default_factory=NetworkConfig)
    pricing: PricingConfig = Field(default_factory=PricingConfig)
    monitoring: MonitoringConfig = Field(default_factory=MonitoringConfig)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        def file_settings(_: Optional[BaseSettings] = None) -> Dict[str, Any]:
            payload, _ = _load_toml_config()
            return payload

        # Environment variables win over the static config file.
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            file_settings,
            file_secret_settings,
        )


@lru_cache(maxsize=1)
def get_app_config() -> AppConfig:
    """Create a cached application configuration object."""

    return AppConfig()


__all__ = [
    "AppConfig",
    "MissingBundlePolicy",
    "MonitoringConfig",
    "NetworkConfig",
    "PricingConfig",
    "get_app_config",
]
