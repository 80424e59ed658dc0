# [TESTER] v1

from __future__ import annotations

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from puckswap.core.cpmm import compute_swap, quote_min_out
from puckswap.core.errors import EngineError, RejectionKind
from puckswap.state.operations import SwapDirection
from puckswap.state.pools import MAX_AMOUNT


def test_swap_ada_to_token_scenario() -> None:
    res = compute_swap((1000, 2000), 100, SwapDirection.ADA_TO_TOKEN, fee_bps=30)
    assert res.amount_out == 181
    assert (res.new_ada_reserve, res.new_token_reserve) == (1100, 1819)
    assert res.fee_amount == 1
    assert res.price_impact_bps == 1731
    assert res.k_after >= res.k_before


def test_swap_token_to_ada_maps_reserves() -> None:
    res = compute_swap((2000, 1000), 100, SwapDirection.TOKEN_TO_ADA, fee_bps=30)
    assert res.amount_out == 181
    # Token is paid in, ADA is paid out.
    assert (res.new_ada_reserve, res.new_token_reserve) == (1819, 1100)


def test_swap_rejects_unknown_direction() -> None:
    with pytest.raises(EngineError) as excinfo:
        compute_swap((1000, 2000), 100, "ada_to_token", fee_bps=30)  # type: ignore[arg-type]
    assert excinfo.value.kind is RejectionKind.INVALID_INPUT


def test_swap_maps_kernel_value_error_to_invalid_input() -> None:
    with pytest.raises(EngineError) as excinfo:
        compute_swap((0, 2000), 100, SwapDirection.ADA_TO_TOKEN, fee_bps=30)
    assert excinfo.value.kind is RejectionKind.INVALID_INPUT


def test_swap_maps_overflow_to_arithmetic_overflow() -> None:
    with pytest.raises(EngineError) as excinfo:
        compute_swap((1000, 2000), MAX_AMOUNT + 1, SwapDirection.ADA_TO_TOKEN, fee_bps=30)
    assert excinfo.value.kind is RejectionKind.ARITHMETIC_OVERFLOW
    assert excinfo.value.rejection.kind is RejectionKind.ARITHMETIC_OVERFLOW


def test_engine_error_is_a_value_error() -> None:
    with pytest.raises(ValueError):
        compute_swap((1000, 2000), 0, SwapDirection.ADA_TO_TOKEN, fee_bps=30)


def test_quote_min_out() -> None:
    assert quote_min_out(181, 50) == 180
    with pytest.raises(EngineError):
        quote_min_out(-1, 50)


_reserve = st.integers(min_value=1, max_value=10**15)


@settings(max_examples=300, deadline=None)
@given(
    ada=_reserve,
    token=_reserve,
    amount_in=st.integers(min_value=1, max_value=10**15),
    fee_bps=st.integers(min_value=0, max_value=10_000),
    direction=st.sampled_from(list(SwapDirection)),
)
def test_swap_never_decreases_k(ada: int, token: int, amount_in: int, fee_bps: int, direction: SwapDirection) -> None:
    try:
        res = compute_swap((ada, token), amount_in, direction, fee_bps)
    except EngineError as exc:
        # Trades too small to move a unit out of the pool are refused, never rounded up.
        assert exc.kind is RejectionKind.INVALID_INPUT
        return
    assert res.new_ada_reserve * res.new_token_reserve >= ada * token
    assert 0 < res.amount_out
    if direction is SwapDirection.ADA_TO_TOKEN:
        assert res.new_ada_reserve == ada + amount_in
        assert res.new_token_reserve == token - res.amount_out
    else:
        assert res.new_token_reserve == token + amount_in
        assert res.new_ada_reserve == ada - res.amount_out
