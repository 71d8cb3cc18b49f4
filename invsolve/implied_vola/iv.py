# invsolve/implied_vola/iv.py
from __future__ import annotations

import math
from math import exp
from typing import Tuple

from invsolve.implied_vola.black_scholes import BlackScholesState, bs_state, price_from_state, vega_from_state
from invsolve.math_methods.numerical_solvers.exceptions import (
    CallbackFailure,
    InvalidBracket,
    NonConvergence,
)
from invsolve.math_methods.numerical_solvers.Safeguarded_Newton import invert_differentiable_function


def _no_arb_bounds(
    S: float, K: float, T: float, r: float, q: float, is_call: bool
) -> Tuple[float, float]:
    """
    No-arbitrage price bounds under continuous compounding.

    Parameters
    ----------
    S : float
        Spot price.
    K : float
        Strike price.
    T : float
        Time to maturity in YEARS.
    r : float
        Risk-free rate (decimal, continuous).
    q : float
        Dividend yield (decimal, continuous).
    is_call : bool
        True for call, False for put.

    Returns
    -------
    (lower, upper) : tuple of float
        Lower/upper price bounds for the option.
    """
    disc_r = exp(-r * T)
    disc_q = exp(-q * T)
    if is_call:
        lower = max(S * disc_q - K * disc_r, 0.0)
        upper = S * disc_q
    else:
        lower = max(K * disc_r - S * disc_q, 0.0)
        upper = K * disc_r
    return lower, upper


def implied_vol_bs(
    price: float,
    S: float,
    K: float,
    T: float,
    r: float,
    q: float,
    is_call: bool,
    *,
    tol: float = 1e-6,
    max_iter: int = 100,
    bounds: Tuple[float, float] = (1e-6, 5.0),
) -> Tuple[float, str, str]:
    """
    Black–Scholes implied volatility by inverting price(sigma) on `bounds`.

    Each trial sigma builds one BlackScholesState; price and vega are both
    read off it, so d1/d2 and the discount factors are computed once per step.

    Parameters
    ----------
    price : float
        Observed option price (e.g., mid, bid, or ask).
    S : float
        Spot price (must be > 0).
    K : float
        Strike price (must be > 0).
    T : float
        Time to maturity in YEARS (must be > 0).
    r : float
        Risk-free rate as DECIMAL, continuously compounded.
    q : float
        Dividend yield as DECIMAL, continuously compounded.
    is_call : bool
        True for call, False for put.
    tol : float, default 1e-6
        Solver tolerance, scaled by max(1, |model| + |price|).
    max_iter : int, default 100
        Maximum solver iterations.
    bounds : (float, float), default (1e-6, 5.0)
        Lower/upper bounds for sigma. The price must be reachable inside them.

    Returns
    -------
    tuple
        (sigma, method, reason)
        - sigma (float): implied volatility (NaN on failure).
        - method (str): 'newton' or 'bisection' (kind of the last solver step),
          'endpoint' if a bound already matched, or 'failed'.
        - reason (str): 'ok' on success, otherwise a short failure reason
          (e.g., 'price_out_of_bounds', 'no_bracket', 'no_convergence', 'T_le_zero').

    Notes
    -----
    - Validates the observed price against no-arbitrage bounds before solving.
    - Uses continuous compounding for r and q.
    """
    # Basic input checks
    if S <= 0 or K <= 0:
        return (math.nan, "failed", "bad_inputs")
    if T <= 0:
        # At expiry, IV is not defined (payoff only).
        return (math.nan, "failed", "T_le_zero")

    # No-arbitrage price check
    lb, ub = _no_arb_bounds(S, K, T, r, q, is_call)
    eps = 1e-10
    if price < lb - eps or price > ub + eps:
        return (math.nan, "failed", "price_out_of_bounds")

    def state(sig: float) -> BlackScholesState:
        return bs_state(S, K, T, r, q, sig)

    def model_price(st: BlackScholesState) -> float:
        return price_from_state(st, is_call)

    lo, hi = bounds
    lo_state = state(lo)
    lo_price = model_price(lo_state)
    hi_price = model_price(state(hi))

    try:
        res = invert_differentiable_function(
            state,
            model_price,
            vega_from_state,
            price,
            tol,
            lo,
            hi,
            lo_price,
            hi_price,
            (lo, lo_price, vega_from_state(lo_state)),
            max_iter=max_iter,
        )
    except InvalidBracket:
        return (math.nan, "failed", "no_bracket")
    except NonConvergence:
        return (math.nan, "failed", "no_convergence")
    except CallbackFailure:
        return (math.nan, "failed", "nan_in_eval")

    return (float(res.domain_value), res.last_step, "ok")


__all__ = ["implied_vol_bs"]
