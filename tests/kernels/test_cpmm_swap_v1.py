# [TESTER] v1

from __future__ import annotations

import pytest

from puckswap.kernels.python.cpmm_swap_v1 import (
    MAX_AMOUNT,
    compute_fee_total,
    compute_protocol_fee,
    min_out_for_tolerance,
    price_impact_bps,
    swap_exact_in,
)


def test_swap_exact_in_matches_hand_computed_quote() -> None:
    # amount_in_scaled = 100 * 9970 = 997_000
    # denominator = 1000 * 10_000 + 997_000 = 10_997_000
    # out = floor(997_000 * 2000 / 10_997_000) = 181
    res = swap_exact_in(reserve_in=1000, reserve_out=2000, amount_in=100, fee_bps=30)
    assert res.amount_in_scaled == 997_000
    assert res.amount_out == 181
    assert res.new_reserve_in == 1100
    assert res.new_reserve_out == 1819
    assert res.k_before == 2_000_000
    assert res.k_after == 1100 * 1819
    assert res.k_after >= res.k_before


def test_fee_total_rounds_in_favour_of_the_pool() -> None:
    # 100 * 30 / 10_000 = 0.3, charged as 1.
    assert compute_fee_total(amount_in=100, fee_bps=30) == 1
    assert compute_fee_total(amount_in=10_000, fee_bps=30) == 30
    assert compute_fee_total(amount_in=0, fee_bps=30) == 0
    assert compute_fee_total(amount_in=12_345, fee_bps=0) == 0


def test_protocol_fee_is_floor_share_of_fee() -> None:
    assert compute_protocol_fee(fee_total=30, protocol_fee_bps=1000) == 3
    assert compute_protocol_fee(fee_total=9, protocol_fee_bps=1000) == 0


def test_swap_reports_protocol_fee_without_removing_it() -> None:
    res = swap_exact_in(reserve_in=1_000_000, reserve_out=1_000_000, amount_in=10_000, fee_bps=30, protocol_fee_bps=1000)
    assert res.fee_total == 30
    assert res.protocol_fee == 3
    assert res.new_reserve_in == 1_010_000


def test_price_impact_scenario() -> None:
    assert price_impact_bps(reserve_in=1000, reserve_out=2000, new_reserve_in=1100, new_reserve_out=1819) == 1731


def test_price_impact_is_zero_when_price_does_not_move_down() -> None:
    assert price_impact_bps(reserve_in=10, reserve_out=10, new_reserve_in=10, new_reserve_out=10) == 0


def test_swap_rejects_zero_output() -> None:
    with pytest.raises(ValueError, match="amount_out is zero"):
        swap_exact_in(reserve_in=1_000_000, reserve_out=1_000, amount_in=1, fee_bps=30)


def test_swap_rejects_empty_reserves() -> None:
    with pytest.raises(ValueError, match="reserves must be positive"):
        swap_exact_in(reserve_in=0, reserve_out=1000, amount_in=10, fee_bps=30)


def test_swap_rejects_bool_amount() -> None:
    with pytest.raises(TypeError):
        swap_exact_in(reserve_in=1000, reserve_out=1000, amount_in=True, fee_bps=30)


def test_swap_raises_overflow_outside_amount_domain() -> None:
    with pytest.raises(OverflowError):
        swap_exact_in(reserve_in=1000, reserve_out=1000, amount_in=MAX_AMOUNT + 1, fee_bps=30)


def test_swap_raises_overflow_when_post_reserve_leaves_domain() -> None:
    near_max = MAX_AMOUNT - 10
    with pytest.raises(OverflowError, match="new_reserve_in"):
        swap_exact_in(reserve_in=near_max, reserve_out=near_max, amount_in=100, fee_bps=30)


def test_min_out_for_tolerance() -> None:
    assert min_out_for_tolerance(amount_out=181, slippage_tolerance_bps=50) == 180
    assert min_out_for_tolerance(amount_out=181, slippage_tolerance_bps=0) == 181
    with pytest.raises(ValueError):
        min_out_for_tolerance(amount_out=181, slippage_tolerance_bps=10_001)
