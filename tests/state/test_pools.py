"""Tests for puckswap/state: PoolState, PoolStats, MintEvent."""

import pytest
from dataclasses import replace

from puckswap.state import ADA_ASSET, MAX_AMOUNT, MintEvent, PoolState, PoolStats, SwapDirection


LP = "pool1.lp"


def _pool(**kwargs) -> PoolState:
    return PoolState(ada_reserve=1000, token_reserve=2000, total_lp_supply=1414, lp_asset=LP, **kwargs)


class TestPoolState:
    def test_empty(self):
        s = PoolState.empty(LP, fee_bps=25, created_at=7)
        assert (s.ada_reserve, s.token_reserve, s.total_lp_supply) == (0, 0, 0)
        assert s.fee_bps == 25
        assert s.last_interaction_time == 7
        assert not s.is_initialized
        assert s.consistency_errors() == []

    def test_constant_product(self):
        assert _pool().constant_product() == 2_000_000

    def test_reserves_for(self):
        s = _pool()
        assert s.reserves_for(SwapDirection.ADA_TO_TOKEN) == (1000, 2000)
        assert s.reserves_for(SwapDirection.TOKEN_TO_ADA) == (2000, 1000)

    @pytest.mark.parametrize(
        "kwargs, exc",
        [
            ({"fee_bps": 10_001}, ValueError),
            ({"protocol_fee_bps": 1_001}, ValueError),
            ({"fee_bps": -1}, ValueError),
            ({"paused": 1}, TypeError),
            ({"stats": {}}, TypeError),
            ({"last_interaction_time": 1.0}, TypeError),
        ],
    )
    def test_constructor_rejects(self, kwargs, exc):
        with pytest.raises(exc):
            _pool(**kwargs)

    def test_rejects_negative_reserve(self):
        with pytest.raises(ValueError):
            PoolState(ada_reserve=-1, token_reserve=2000, total_lp_supply=1414, lp_asset=LP)

    @pytest.mark.parametrize("lp_asset", ["", "   ", ADA_ASSET])
    def test_rejects_bad_lp_asset(self, lp_asset):
        with pytest.raises(ValueError):
            PoolState(ada_reserve=0, token_reserve=0, total_lp_supply=0, lp_asset=lp_asset)

    def test_consistency_errors(self):
        assert _pool().consistency_errors() == []
        assert replace(_pool(), total_lp_supply=0).consistency_errors()
        assert replace(_pool(), ada_reserve=0).consistency_errors()

    def test_oversized_fields(self):
        s = replace(_pool(), token_reserve=MAX_AMOUNT + 1)
        assert s.oversized_fields() == ["token_reserve"]
        assert _pool().oversized_fields() == []

    def test_changed_fields(self):
        a = _pool()
        b = replace(a, ada_reserve=1001, paused=True, stats=PoolStats(swap_count=1))
        assert a.changed_fields(b) == ["ada_reserve", "paused", "stats.swap_count"]
        assert a.changed_fields(a) == []


class TestPoolStats:
    def test_record_ada_to_token(self):
        s = PoolStats().record_swap(SwapDirection.ADA_TO_TOKEN, 100, 181, 1)
        assert s == PoolStats(total_volume_ada=100, total_volume_token=181, total_fees_ada=1, swap_count=1)

    def test_record_token_to_ada(self):
        s = PoolStats().record_swap(SwapDirection.TOKEN_TO_ADA, 100, 181, 1)
        assert s == PoolStats(total_volume_ada=181, total_volume_token=100, total_fees_token=1, swap_count=1)

    def test_rejects_negative_counter(self):
        with pytest.raises(ValueError):
            PoolStats(swap_count=-1)


class TestMintEvent:
    def test_of_drops_zero_and_sorts(self):
        m = MintEvent.of({"b.lp": 5, "a.x": -2, "c.y": 0})
        assert m.quantities == (("a.x", -2), ("b.lp", 5))
        assert m.affected_assets() == frozenset({"a.x", "b.lp"})
        assert m.quantity("b.lp") == 5
        assert m.quantity("c.y") == 0
        assert m.as_dict() == {"a.x": -2, "b.lp": 5}

    def test_none_is_empty(self):
        assert MintEvent.none() == MintEvent.of({})
        assert MintEvent.none().affected_assets() == frozenset()

    def test_rejects_duplicates(self):
        with pytest.raises(ValueError, match="duplicate"):
            MintEvent(((LP, 1), (LP, 2)))

    def test_rejects_malformed_entries(self):
        with pytest.raises(ValueError):
            MintEvent(((LP,),))
        with pytest.raises(TypeError):
            MintEvent(((LP, 1.5),))
