# [TESTER] v1

from __future__ import annotations

import logging
from dataclasses import replace

import pytest

from puckswap.core.config import MIN_UTXO_LOVELACE, PolicyConfig, PolicyVersion, load_policy_config


def test_defaults_are_the_core_preset() -> None:
    assert PolicyConfig() == PolicyConfig.for_version(PolicyVersion.CORE)
    cfg = PolicyConfig()
    assert cfg.max_swap_reserve_bps == 5_000
    assert cfg.max_withdrawal_share_bps == 9_000
    assert cfg.max_emergency_withdrawal_share_bps == 9_900
    assert cfg.ratio_tolerance_bps == 500
    assert not cfg.allow_full_drain


def test_presets_differ_only_in_economic_parameters() -> None:
    legacy = PolicyConfig.for_version("legacy")
    v5 = PolicyConfig.for_version(" V5_Enhanced ")
    assert legacy.min_ada_reserve == 1
    assert legacy.max_price_impact_bps == 10_000
    assert v5.min_ada_reserve == MIN_UTXO_LOVELACE
    assert v5.emergency_min_ada_reserve == MIN_UTXO_LOVELACE
    assert v5.min_ada_amount == MIN_UTXO_LOVELACE
    assert legacy.max_swap_reserve_bps == v5.max_swap_reserve_bps


def test_unknown_version() -> None:
    with pytest.raises(ValueError, match="unknown policy version"):
        PolicyConfig.for_version("v9")


def test_from_dict_overrides_preset() -> None:
    cfg = PolicyConfig.from_dict({"version": "legacy", "min_swap_amount": 50})
    assert cfg.version is PolicyVersion.LEGACY
    assert cfg.min_swap_amount == 50
    assert cfg.min_ada_reserve == 1


def test_from_dict_rejects_unknown_keys() -> None:
    with pytest.raises(ValueError, match="unknown policy config keys"):
        PolicyConfig.from_dict({"max_slippage": 10})


def test_from_dict_rejects_non_int_values() -> None:
    with pytest.raises(TypeError):
        PolicyConfig.from_dict({"min_swap_amount": True})
    with pytest.raises(TypeError):
        PolicyConfig.from_dict({"min_swap_amount": 1.5})


def test_to_dict_round_trip() -> None:
    cfg = replace(PolicyConfig.for_version("v5_enhanced"), max_price_impact_bps=1_500)
    assert PolicyConfig.from_dict(cfg.to_dict()) == cfg


@pytest.mark.parametrize(
    "overrides",
    [
        {"max_swap_reserve_bps": 10_001},
        {"max_protocol_fee_bps": 1_001},
        {"default_fee_bps": 200, "max_fee_bps": 100},
        {"max_emergency_withdrawal_share_bps": 8_000},
        {"emergency_min_lp_supply": 5_000},
        {"min_lp_burn": -1},
    ],
)
def test_invalid_configs_are_rejected(overrides) -> None:
    with pytest.raises(ValueError):
        replace(PolicyConfig(), **overrides)


def test_allow_full_drain_must_be_bool() -> None:
    with pytest.raises(TypeError):
        PolicyConfig(allow_full_drain=1)


def test_emergency_share_cap() -> None:
    cfg = PolicyConfig()
    assert cfg.withdrawal_share_cap(emergency=False) == 9_000
    assert cfg.withdrawal_share_cap(emergency=True) == 9_900
    assert replace(cfg, allow_full_drain=True).withdrawal_share_cap(emergency=True) == 10_000
    assert cfg.reserve_floor(emergency=True) == (1, 1)
    assert cfg.supply_floor(emergency=False) == 1_000


def test_load_policy_config_from_yaml(tmp_path, caplog) -> None:
    path = tmp_path / "policy.yaml"
    path.write_text(
        "version: v5_enhanced\n"
        "max_price_impact_bps: 1500\n"
        "allow_full_drain: false\n",
        encoding="utf-8",
    )
    caplog.set_level(logging.INFO, logger="puckswap.core.config")
    cfg = load_policy_config(path)
    assert cfg.version is PolicyVersion.V5_ENHANCED
    assert cfg.max_price_impact_bps == 1_500
    assert cfg.min_ada_reserve == MIN_UTXO_LOVELACE
    assert "v5_enhanced" in caplog.text


def test_empty_yaml_is_core(tmp_path) -> None:
    path = tmp_path / "empty.yaml"
    path.write_text("", encoding="utf-8")
    assert load_policy_config(str(path)) == PolicyConfig()


def test_yaml_must_be_a_mapping(tmp_path) -> None:
    path = tmp_path / "list.yaml"
    path.write_text("- 1\n- 2\n", encoding="utf-8")
    with pytest.raises(ValueError, match="YAML mapping"):
        load_policy_config(path)


def test_yaml_schema_errors_fail_closed(tmp_path) -> None:
    path = tmp_path / "bad.yaml"
    path.write_text("min_swap_amount: lots\n", encoding="utf-8")
    with pytest.raises(TypeError):
        load_policy_config(path)
