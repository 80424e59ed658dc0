"""
Security policy configuration.

Configuration is owned by the host and injected into every validation call;
there is no module-level mutable config. Historical deployments differ only
in a few economic parameters, so they are expressed as `PolicyVersion`
presets over one `PolicyConfig`, never as separate math.

YAML layout accepted by `load_policy_config()`:

    version: core            # legacy | core | v5_enhanced (optional, default core)
    min_ada_reserve: 2000000 # any PolicyConfig field overrides the preset
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields, replace
from enum import Enum, unique
from pathlib import Path
from typing import Any, Dict, Mapping, Union

import yaml


logger = logging.getLogger(__name__)

BPS_DENOM = 10_000
MAX_PROTOCOL_FEE_BPS = 1_000

# Minimum ADA a pool UTxO must carry on-chain (2 ADA in lovelace).
MIN_UTXO_LOVELACE = 2_000_000


@unique
class PolicyVersion(Enum):
    LEGACY = "legacy"
    CORE = "core"
    V5_ENHANCED = "v5_enhanced"


_BPS_FIELDS = (
    "default_fee_bps",
    "max_fee_bps",
    "max_swap_reserve_bps",
    "max_add_reserve_bps",
    "max_withdrawal_share_bps",
    "max_emergency_withdrawal_share_bps",
    "ratio_tolerance_bps",
    "max_price_impact_bps",
)


@dataclass(frozen=True)
class PolicyConfig:
    """Parameters of the security-constraint layer (defaults = CORE preset)."""

    version: PolicyVersion = PolicyVersion.CORE

    # Fees for newly created pools, and their admissible bounds.
    default_fee_bps: int = 30
    default_protocol_fee_bps: int = 0
    max_fee_bps: int = BPS_DENOM
    max_protocol_fee_bps: int = MAX_PROTOCOL_FEE_BPS

    # Dust floors.
    min_swap_amount: int = 1
    min_ada_amount: int = 1
    min_token_amount: int = 1
    min_lp_burn: int = 1

    # Single-operation caps.
    max_swap_reserve_bps: int = 5_000
    max_add_reserve_bps: int = 5_000
    max_withdrawal_share_bps: int = 9_000
    max_emergency_withdrawal_share_bps: int = 9_900

    # Draining floors (normal / emergency).
    min_ada_reserve: int = 1_000
    min_token_reserve: int = 1_000
    min_lp_supply: int = 1_000
    emergency_min_ada_reserve: int = 1
    emergency_min_token_reserve: int = 1
    emergency_min_lp_supply: int = 1
    allow_full_drain: bool = False

    ratio_tolerance_bps: int = 500
    max_price_impact_bps: int = 2_000

    def __post_init__(self) -> None:
        if not isinstance(self.version, PolicyVersion):
            raise TypeError("version must be a PolicyVersion")
        if not isinstance(self.allow_full_drain, bool):
            raise TypeError("allow_full_drain must be a bool")
        for f in fields(self):
            if f.name in ("version", "allow_full_drain"):
                continue
            v = getattr(self, f.name)
            if not isinstance(v, int) or isinstance(v, bool):
                raise TypeError(f"{f.name} must be an int")
            if v < 0:
                raise ValueError(f"{f.name} must be non-negative: {v}")
        for name in _BPS_FIELDS:
            v = getattr(self, name)
            if v > BPS_DENOM:
                raise ValueError(f"{name} must be in [0, {BPS_DENOM}]: {v}")
        if self.max_protocol_fee_bps > MAX_PROTOCOL_FEE_BPS:
            raise ValueError(f"max_protocol_fee_bps must be in [0, {MAX_PROTOCOL_FEE_BPS}]")
        if self.default_fee_bps > self.max_fee_bps:
            raise ValueError("default_fee_bps exceeds max_fee_bps")
        if self.default_protocol_fee_bps > self.max_protocol_fee_bps:
            raise ValueError("default_protocol_fee_bps exceeds max_protocol_fee_bps")
        if self.max_emergency_withdrawal_share_bps < self.max_withdrawal_share_bps:
            raise ValueError("emergency withdrawal cap must not be stricter than the normal cap")
        for normal, emergency in (
            ("min_ada_reserve", "emergency_min_ada_reserve"),
            ("min_token_reserve", "emergency_min_token_reserve"),
            ("min_lp_supply", "emergency_min_lp_supply"),
        ):
            if getattr(self, emergency) > getattr(self, normal):
                raise ValueError(f"{emergency} must not exceed {normal}")

    @classmethod
    def for_version(cls, version: Union[PolicyVersion, str]) -> "PolicyConfig":
        v = _parse_version(version)
        return cls(**_PRESETS[v])

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PolicyConfig":
        """
        Build a config from a plain mapping: `version` picks the preset and any
        other key overrides one field. Unknown keys are rejected.
        """
        if not isinstance(data, Mapping):
            raise TypeError("policy config must be a mapping")
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"unknown policy config keys: {unknown}")
        base = cls.for_version(data.get("version", PolicyVersion.CORE))
        overrides = {k: v for k, v in data.items() if k != "version"}
        return replace(base, **overrides)

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {f.name: getattr(self, f.name) for f in fields(self)}
        out["version"] = self.version.value
        return out

    def reserve_floor(self, *, emergency: bool) -> tuple[int, int]:
        """(min_ada_reserve, min_token_reserve) after a transition."""
        if emergency:
            return self.emergency_min_ada_reserve, self.emergency_min_token_reserve
        return self.min_ada_reserve, self.min_token_reserve

    def supply_floor(self, *, emergency: bool) -> int:
        return self.emergency_min_lp_supply if emergency else self.min_lp_supply

    def withdrawal_share_cap(self, *, emergency: bool) -> int:
        if not emergency:
            return self.max_withdrawal_share_bps
        if self.allow_full_drain:
            return BPS_DENOM
        return self.max_emergency_withdrawal_share_bps


def _parse_version(version: Union[PolicyVersion, str]) -> PolicyVersion:
    if isinstance(version, PolicyVersion):
        return version
    if isinstance(version, str):
        try:
            return PolicyVersion(version.strip().lower())
        except ValueError as exc:
            raise ValueError(f"unknown policy version: {version!r}") from exc
    raise TypeError("version must be a PolicyVersion or string")


_PRESETS: Dict[PolicyVersion, Dict[str, Any]] = {
    # First deployments: only a non-zero floor, no price-impact ceiling.
    PolicyVersion.LEGACY: dict(
        version=PolicyVersion.LEGACY,
        min_ada_reserve=1,
        min_token_reserve=1,
        min_lp_supply=1,
        max_price_impact_bps=BPS_DENOM,
    ),
    PolicyVersion.CORE: dict(version=PolicyVersion.CORE),
    # Pool UTxO must keep the on-chain minimum ADA even in emergency mode.
    PolicyVersion.V5_ENHANCED: dict(
        version=PolicyVersion.V5_ENHANCED,
        min_swap_amount=1_000,
        min_ada_amount=MIN_UTXO_LOVELACE,
        min_ada_reserve=MIN_UTXO_LOVELACE,
        emergency_min_ada_reserve=MIN_UTXO_LOVELACE,
        max_price_impact_bps=1_000,
    ),
}


def load_policy_config(path: Union[str, Path]) -> PolicyConfig:
    """Load a `PolicyConfig` from a YAML file (fail-closed on any schema error)."""
    p = Path(path)
    raw = p.read_text(encoding="utf-8")
    data = yaml.safe_load(raw)
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValueError(f"{p}: policy config must be a YAML mapping")
    config = PolicyConfig.from_dict(data)
    logger.info("loaded %s policy config from %s", config.version.value, p)
    return config
