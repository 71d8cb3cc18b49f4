# invsolve/implied_vola/black_scholes.py
from __future__ import annotations
from math import log, sqrt, exp
from typing import NamedTuple, Optional, Union
from invsolve.math_methods.generic_functions.math_methods import norm_cdf, norm_pdf

Number = Union[float, int]


class BlackScholesState(NamedTuple):
    """
    Everything price and vega need, computed once per sigma.
    d1/d2 are None in the degenerate cases (sigma <= 0 or T <= 0).
    """
    S: float
    K: float
    T: float
    sigma: float
    disc_r: float
    disc_q: float
    sqrt_T: float
    d1: Optional[float]
    d2: Optional[float]


def bs_state(S: Number, K: Number, T: Number, r: Number, q: Number, sigma: Number) -> BlackScholesState:
    """
    Black–Scholes intermediate quantities with continuous compounding.

    Parameters
    ----------
    S : spot price (must be > 0)
    K : strike (must be > 0)
    T : time to maturity in YEARS (e.g., DTE/365.0)
    r : risk-free rate as DECIMAL (0.02 for 2%), continuously compounded
    q : dividend yield as DECIMAL, continuously compounded
    sigma : volatility as DECIMAL (e.g., 0.2 for 20%)

    Returns
    -------
    BlackScholesState
    """
    if S <= 0 or K <= 0:
        raise ValueError("S (spot price) and K (strike) must be positive.")
    if T <= 0:
        return BlackScholesState(S, K, T, sigma, 1.0, 1.0, 0.0, None, None)

    disc_r = exp(-r * T)
    disc_q = exp(-q * T)
    st = sqrt(T)
    if sigma <= 0:
        return BlackScholesState(S, K, T, sigma, disc_r, disc_q, st, None, None)

    d1 = (log(S / K) + (r - q + 0.5 * sigma * sigma) * T) / (sigma * st)
    d2 = d1 - sigma * st
    return BlackScholesState(S, K, T, sigma, disc_r, disc_q, st, d1, d2)


def price_from_state(state: BlackScholesState, is_call: bool) -> float:
    """
    Option price from a precomputed state.

    Notes
    -----
    - At expiry (T <= 0), returns intrinsic value: max(S-K, 0) for calls,
      max(K-S, 0) for puts.
    - For sigma <= 0 returns the zero-volatility limit (discounted intrinsic on forward).
    """
    S, K = state.S, state.K
    if state.T <= 0:
        return max(S - K, 0.0) if is_call else max(K - S, 0.0)
    if state.d1 is None:
        fwd = S * state.disc_q - K * state.disc_r
        return max(fwd, 0.0) if is_call else max(-fwd, 0.0)

    if is_call:
        return S * state.disc_q * norm_cdf(state.d1) - K * state.disc_r * norm_cdf(state.d2)
    else:
        return K * state.disc_r * norm_cdf(-state.d2) - S * state.disc_q * norm_cdf(-state.d1)


def vega_from_state(state: BlackScholesState) -> float:
    """
    Vega (∂Price/∂sigma) from a precomputed state. Zero in the degenerate cases.
    """
    if state.d1 is None:
        return 0.0
    return state.S * state.disc_q * norm_pdf(state.d1) * state.sqrt_T


def bs_price(S: Number, K: Number, T: Number, r: Number, q: Number, sigma: Number, is_call: bool) -> float:
    """
    Black–Scholes price with continuous compounding for rates and dividend yield.
    """
    return price_from_state(bs_state(S, K, T, r, q, sigma), is_call)


def vega(S: Number, K: Number, T: Number, r: Number, q: Number, sigma: Number) -> float:
    """
    Black–Scholes Vega (∂Price/∂sigma). Units: price per 1.0 change in sigma.
    """
    if S <= 0 or K <= 0 or T <= 0 or sigma <= 0:
        return 0.0
    return vega_from_state(bs_state(S, K, T, r, q, sigma))
