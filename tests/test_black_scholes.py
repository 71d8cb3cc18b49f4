import math

import pytest

from invsolve.implied_vola.black_scholes import bs_price, bs_state, price_from_state, vega, vega_from_state


def test_state_feeds_price_and_vega() -> None:
    st = bs_state(100.0, 95.0, 0.5, 0.03, 0.01, 0.2)
    assert price_from_state(st, True) == bs_price(100.0, 95.0, 0.5, 0.03, 0.01, 0.2, True)
    assert vega_from_state(st) == vega(100.0, 95.0, 0.5, 0.03, 0.01, 0.2)


def test_vega_matches_finite_difference() -> None:
    h = 1e-5
    up = bs_price(100.0, 110.0, 1.0, 0.02, 0.0, 0.3 + h, True)
    dn = bs_price(100.0, 110.0, 1.0, 0.02, 0.0, 0.3 - h, True)
    assert vega(100.0, 110.0, 1.0, 0.02, 0.0, 0.3) == pytest.approx((up - dn) / (2 * h), rel=1e-6)


def test_put_call_parity() -> None:
    S, K, T, r, q, sigma = 100.0, 105.0, 0.75, 0.04, 0.015, 0.35
    call = bs_price(S, K, T, r, q, sigma, True)
    put = bs_price(S, K, T, r, q, sigma, False)
    assert call - put == pytest.approx(S * math.exp(-q * T) - K * math.exp(-r * T), abs=1e-10)


def test_degenerate_cases() -> None:
    # at expiry: intrinsic value
    assert bs_price(100.0, 90.0, 0.0, 0.02, 0.0, 0.2, True) == 10.0
    assert bs_price(100.0, 90.0, 0.0, 0.02, 0.0, 0.2, False) == 0.0
    # zero volatility: discounted forward intrinsic
    expected = 100.0 - 90.0 * math.exp(-0.02)
    assert bs_price(100.0, 90.0, 1.0, 0.02, 0.0, 0.0, True) == pytest.approx(expected)
    assert vega_from_state(bs_state(100.0, 90.0, 1.0, 0.02, 0.0, 0.0)) == 0.0
    assert vega(100.0, 90.0, 0.0, 0.02, 0.0, 0.2) == 0.0


def test_rejects_non_positive_spot_or_strike() -> None:
    with pytest.raises(ValueError):
        bs_state(0.0, 100.0, 1.0, 0.0, 0.0, 0.2)
