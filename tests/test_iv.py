import math

import pytest

from invsolve import implied_vol_bs
from invsolve.implied_vola.black_scholes import bs_price


@pytest.mark.parametrize(
    "S, K, T, r, q, sigma, is_call",
    [
        (100.0, 100.0, 0.5, 0.02, 0.0, 0.25, True),
        (100.0, 120.0, 1.0, 0.03, 0.01, 0.4, True),
        (100.0, 80.0, 0.25, 0.01, 0.0, 0.15, False),
        (50.0, 55.0, 2.0, 0.05, 0.02, 1.2, False),
    ],
)
def test_recovers_volatility(S, K, T, r, q, sigma, is_call) -> None:
    price = bs_price(S, K, T, r, q, sigma, is_call)
    iv, method, reason = implied_vol_bs(price, S, K, T, r, q, is_call, tol=1e-10)
    assert reason == "ok"
    assert method in ("newton", "bisection")
    assert iv == pytest.approx(sigma, abs=1e-6)


def test_price_outside_no_arbitrage_bounds() -> None:
    iv, method, reason = implied_vol_bs(150.0, 100.0, 100.0, 1.0, 0.0, 0.0, True)
    assert math.isnan(iv)
    assert (method, reason) == ("failed", "price_out_of_bounds")


def test_price_not_reachable_inside_sigma_bounds() -> None:
    # below the no-arbitrage cap of 100 but above the price at sigma = 5
    iv, method, reason = implied_vol_bs(99.0, 100.0, 100.0, 1.0, 0.0, 0.0, True)
    assert math.isnan(iv)
    assert reason == "no_bracket"


def test_iteration_cap_reported() -> None:
    price = bs_price(100.0, 100.0, 1.0, 0.0, 0.0, 0.3, True)
    iv, method, reason = implied_vol_bs(price, 100.0, 100.0, 1.0, 0.0, 0.0, True, tol=0.0, max_iter=1)
    assert (method, reason) == ("failed", "no_convergence")


@pytest.mark.parametrize(
    "S, K, T, reason",
    [
        (0.0, 100.0, 1.0, "bad_inputs"),
        (100.0, -1.0, 1.0, "bad_inputs"),
        (100.0, 100.0, 0.0, "T_le_zero"),
    ],
)
def test_bad_inputs(S, K, T, reason) -> None:
    iv, method, got = implied_vol_bs(10.0, S, K, T, 0.0, 0.0, True)
    assert math.isnan(iv)
    assert method == "failed"
    assert got == reason
