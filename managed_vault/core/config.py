"""
Configuration loader for the managed vault.

This module provides Pydantic models for the vault's governance parameters
and runtime settings, and a loader that merges a YAML file with environment
variables.

Design Principles:
- Strict Schema: every parameter is declared on a Pydantic model with its
  bounds, so a bad file fails loudly before any vault is built.
- Human Units In, Wei Out: ratios and values are written as decimals in YAML
  (``min_weight: 0.01``) and converted to 18-decimal integers on load.
  Durations are whole seconds.
- Environment Overrides: any setting can be overridden by an environment
  variable, e.g. ``fees.management_fee`` by
  ``MANAGED_VAULT_FEES__MANAGEMENT_FEE``.
- Clear Errors: validation failures are wrapped in ``ConfigError``.
"""

import json
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from loguru import logger
from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic_core import PydanticCustomError

from managed_vault.core.errors import MathError
from managed_vault.core.mathutils import ONE, to_fixed

ENV_PREFIX = "MANAGED_VAULT"

# --- Custom Exceptions ---

class ConfigError(Exception):
    """Custom exception for configuration-related errors."""
    pass


def _as_fixed(v: Any) -> int:
    try:
        return to_fixed(v)
    except MathError:
        raise PydanticCustomError(
            "fixed_point_invalid",
            "Value '{value}' is not a non-negative decimal number",
            {"value": v},
        )

# --- Pydantic Models for Configuration Sections ---

class WeightSettings(BaseModel):
    """Bounds on pool weights and on how fast they may move."""
    min_weight: int = to_fixed("0.01")
    # per second, applied to max(w0, w1) / min(w0, w1)
    max_weight_change_ratio: int = to_fixed("0.01")
    min_weight_change_duration: int = Field(4 * 3600, ge=0)
    # wei; tolerance on sum(weights) == ONE
    weight_sum_tolerance: int = Field(1, ge=0)

    @field_validator("min_weight", "max_weight_change_ratio", mode="before")
    @classmethod
    def _fixed(cls, v):
        return _as_fixed(v)

    @field_validator("min_weight")
    @classmethod
    def _min_weight_below_one(cls, v):
        if v == 0 or v >= ONE:
            raise PydanticCustomError(
                "min_weight_invalid",
                "min_weight must be strictly between 0 and 1, got {value}",
                {"value": v},
            )
        return v


class FeeSettings(BaseModel):
    """Management fee, charged per second on every holding."""
    management_fee: int = to_fixed("0.000000001")
    max_management_fee: int = to_fixed("0.000000001")
    min_fee_duration: int = Field(60 * 24 * 3600, ge=0)

    @field_validator("management_fee", "max_management_fee", mode="before")
    @classmethod
    def _fixed(cls, v):
        return _as_fixed(v)


class SwapSettings(BaseModel):
    swap_fee: int = to_fixed("0.000001")
    min_swap_fee: int = to_fixed("0.000001")
    max_swap_fee: int = to_fixed("0.1")
    max_swap_fee_change: int = to_fixed("0.005")
    swap_fee_cooldown: int = Field(60, ge=0)

    @field_validator("swap_fee", "min_swap_fee", "max_swap_fee", "max_swap_fee_change", mode="before")
    @classmethod
    def _fixed(cls, v):
        return _as_fixed(v)

    @field_validator("max_swap_fee")
    @classmethod
    def _bounds_ordered(cls, v, values):
        lo = values.data.get("min_swap_fee")
        if lo is not None and v < lo:
            raise PydanticCustomError(
                "swap_fee_bounds_invalid",
                "max_swap_fee {max} is below min_swap_fee {min}",
                {"max": v, "min": lo},
            )
        return v


class OracleSettings(BaseModel):
    """Defaults applied to every non-numeraire token's price feed."""
    max_oracle_delay: int = Field(5 * 3600, ge=0)
    max_oracle_spot_divergence: int = to_fixed("0.1")
    min_reliable_vault_value: int = to_fixed(1)
    min_significant_deposit_value: int = to_fixed(20)
    oracles_enabled: bool = True

    @field_validator(
        "max_oracle_spot_divergence",
        "min_reliable_vault_value",
        "min_significant_deposit_value",
        mode="before",
    )
    @classmethod
    def _fixed(cls, v):
        return _as_fixed(v)


class LifecycleSettings(BaseModel):
    # seconds between initiate_finalization and finalize; 0 finalizes directly
    notice_period: int = Field(0, ge=0)


class LoggingSettings(BaseModel):
    level: str = "INFO"
    file: Optional[str] = None
    rotation: str = "10 MB"


class PersistenceSettings(BaseModel):
    db_path: str = "vault_journal.db"
    # store a full snapshot every N journaled events; 0 disables
    snapshot_every: int = Field(50, ge=0)


class VaultSettings(BaseModel):
    """Root settings object returned by ``load_settings``."""
    weights: WeightSettings = WeightSettings()
    fees: FeeSettings = FeeSettings()
    swap: SwapSettings = SwapSettings()
    oracle: OracleSettings = OracleSettings()
    lifecycle: LifecycleSettings = LifecycleSettings()
    logging: LoggingSettings = LoggingSettings()
    persistence: PersistenceSettings = PersistenceSettings()

# --- Helper Functions ---

def _load_config_from_yaml(path: Path) -> Dict[str, Any]:
    """Loads the YAML configuration file."""
    if not path.is_file():
        raise ConfigError(f"Configuration file not found at: {path}")
    try:
        with open(path, "r", encoding="utf-8") as f:
            return yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Error parsing YAML file at {path}: {e}") from e

def _get_env_overrides(prefix: str = ENV_PREFIX) -> Dict[str, Any]:
    """
    Parses environment variables and converts them into a nested dict.
    e.g., MANAGED_VAULT_FEES__MANAGEMENT_FEE becomes
    {'fees': {'management_fee': ...}}
    """
    overrides: Dict[str, Any] = {}
    for key, value in os.environ.items():
        if not key.startswith(prefix + "_"):
            continue
        parts = key.removeprefix(prefix).strip("_").lower().split("__")

        # Numbers stay strings so decimals reach the fixed-point converter intact
        if value.lower() in ("true", "false", "null") or \
                (value.startswith("[") and value.endswith("]")) or \
                (value.startswith("{") and value.endswith("}")):
            try:
                parsed_value = json.loads(value)
            except json.JSONDecodeError:
                parsed_value = value
        else:
            parsed_value = value

        d = overrides
        for part in parts[:-1]:
            d = d.setdefault(part, {})
        d[parts[-1]] = parsed_value
    return overrides

def _merge_configs(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """
    Recursively merges the override dict into the base dict.
    """
    for key, value in overrides.items():
        if isinstance(value, dict) and key in base and isinstance(base[key], dict):
            base[key] = _merge_configs(base[key], value)
        else:
            base[key] = value
    return base

# --- Public API ---

def load_settings(path: Optional[str] = None) -> VaultSettings:
    """
    Loads, validates, and returns the vault settings.

    Steps:
    1. Loads the base configuration from ``path`` (defaults only when None).
    2. Scans environment variables for ``MANAGED_VAULT_`` overrides.
    3. Merges the overrides into the base configuration.
    4. Validates the result against ``VaultSettings``.

    Raises:
        ConfigError: if the file is missing or unparsable, or validation fails.
    """
    if path is None:
        logger.info("Loading default settings (no file given)...")
        base: Dict[str, Any] = {}
    else:
        logger.info(f"Loading settings from '{path}'...")
        base = _load_config_from_yaml(Path(path))
        if not isinstance(base, dict):
            raise ConfigError(f"YAML file '{path}' must contain a mapping.")

    final_config = _merge_configs(base, _get_env_overrides())

    try:
        settings = VaultSettings.model_validate(final_config)
        logger.success("Settings loaded and validated successfully.")
        return settings
    except ValidationError as e:
        error_details = e.errors()
        error_msg = f"Configuration validation failed with {len(error_details)} error(s):\n"
        for error in error_details:
            loc = " -> ".join(map(str, error['loc'])) if error['loc'] else "root"
            error_msg += f"  - Location: {loc}\n    Message: {error['msg']}\n"

        logger.error(error_msg)
        raise ConfigError("Failed to validate settings.") from e
