# invsolve/math_methods/numerical_solvers/Safeguarded_Newton.py
from __future__ import annotations

import logging
import math
from typing import Callable, NamedTuple, Optional, Protocol, Tuple, TypeVar

from invsolve.math_methods.generic_functions.math_methods import (
    absolute_value,
    are_close,
    average,
)
from invsolve.math_methods.numerical_solvers.exceptions import (
    CallbackFailure,
    InvalidBracket,
    NonConvergence,
)

logger = logging.getLogger(__name__)

S = TypeVar("S")


class DifferentiableFunction(Protocol[S]):
    """
    A function split into three pure operations sharing an intermediate state.

    `state` does the expensive work once per domain value; `range_value` and
    `derivative` read their answers off that state.
    """

    def state(self, domain_value: float) -> S: ...

    def range_value(self, state: S) -> float: ...

    def derivative(self, state: S) -> float: ...


class InversionResult(NamedTuple):
    """
    Outcome of an inversion. The first three fields are the solution triple,
    so `x, y, dy = result[:3]` works.
    """

    domain_value: float
    range_value: float
    derivative_value: float
    iterations: int
    evaluations: int
    newton_steps: int
    bisection_steps: int
    last_step: str  # 'endpoint', 'newton' or 'bisection'


def _check_settings(
    tolerance: float,
    max_iter: int,
    deriv_min: float,
    newton_window: int,
    shrink_factor: float,
    xtol: float,
) -> None:
    if not (tolerance >= 0.0):
        raise ValueError("tolerance must be nonnegative")
    if max_iter < 1:
        raise ValueError("max_iter must be at least 1")
    if not (deriv_min >= 0.0):
        raise ValueError("deriv_min must be nonnegative")
    if newton_window < 1:
        raise ValueError("newton_window must be at least 1")
    if not (0.0 < shrink_factor < 1.0):
        raise ValueError("shrink_factor must lie in (0, 1)")
    if not (xtol >= 0.0):
        raise ValueError("xtol must be nonnegative")


def _newton_candidate(
    x: float,
    residual: float,
    derivative: float,
    lo: float,
    hi: float,
    deriv_min: float,
) -> Optional[float]:
    """Newton extrapolation from x, or None if it is unavailable or leaves the open bracket."""
    if not math.isfinite(derivative) or absolute_value(derivative) <= deriv_min:
        return None
    candidate = x - residual / derivative
    # NaN fails both comparisons
    if lo < candidate < hi:
        return candidate
    return None


def _bracket_collapsed(lo: float, hi: float, xtol: float) -> bool:
    if hi - lo <= xtol:
        return True
    mid = average(lo, hi)
    return not (lo < mid < hi)


def invert_differentiable_function(
    state_from_domain_value: Callable[[float], S],
    range_value_from_state: Callable[[S], float],
    derivative_value_from_state: Callable[[S], float],
    desired_range_value: float,
    tolerance: float,
    minimum_domain_value: float,
    maximum_domain_value: float,
    range_at_minimum_domain_value: float,
    range_at_maximum_domain_value: float,
    initial: Tuple[float, float, float],
    *,
    max_iter: int = 100,
    deriv_min: float = 1e-12,
    newton_window: int = 4,
    shrink_factor: float = 0.5,
    xtol: float = 0.0,
) -> InversionResult:
    """
    Find x in [minimum, maximum] with range(state(x)) == desired_range_value.

    Safeguarded Newton iteration: a Newton step is taken whenever it lands
    strictly inside the current bracket and the bracket keeps shrinking,
    otherwise the bracket is bisected. Every trial point costs exactly one
    call to `state_from_domain_value`, whose result is passed to
    `range_value_from_state` and then `derivative_value_from_state`.

    Parameters
    ----------
    state_from_domain_value : callable
        Domain value -> state. Assumed deterministic and side-effect free.
    range_value_from_state : callable
        State -> range value.
    derivative_value_from_state : callable
        State -> d(range)/d(domain).
    desired_range_value : float
        Target range value.
    tolerance : float
        Nonnegative. A range value y is accepted when
        |y - target| <= tolerance * max(1, |y| + |target|).
    minimum_domain_value, maximum_domain_value : float
        Bracket bounds, minimum <= maximum.
    range_at_minimum_domain_value, range_at_maximum_domain_value : float
        Range values at the bounds; the target must lie between them.
    initial : (float, float, float)
        (domain, range, derivative) already evaluated at the minimum bound.
    max_iter : int
        Iteration cap.
    deriv_min : float
        Derivatives with |f'| <= deriv_min make Newton unavailable for that round.
    newton_window : int
        Number of consecutive Newton steps after which the bracket must have
        shrunk to `shrink_factor` of its width at the start of the streak.
    shrink_factor : float
        Required shrink per window, in (0, 1). A stalled streak forces bisection.
    xtol : float
        The search gives up once the bracket is at most this wide. With the
        default of 0 it gives up only when no floating-point value fits
        strictly inside.

    Returns
    -------
    InversionResult
        Solution triple plus iteration/evaluation counters. `evaluations`
        counts only calls made by this function.

    Raises
    ------
    InvalidBracket
        Target not between the endpoint range values, reversed bounds, or
        non-finite endpoint range values.
    NonConvergence
        `max_iter` iterations, or a collapsed bracket, without meeting the
        tolerance. Happens for discontinuous or inconsistent callbacks, and for
        tolerances below what floating point can resolve.
    CallbackFailure
        A callback produced a non-finite range value.
    ValueError
        Invalid tuning knobs.

    Notes
    -----
    - Exceptions raised by the callbacks propagate unchanged.
    - No automatic bracket discovery; a single root of interest is assumed.
    - If the minimum bound already meets the tolerance it is returned without
      any evaluation. The maximum bound costs one evaluation for its
      derivative; its range value is taken from the caller.
    """
    _check_settings(tolerance, max_iter, deriv_min, newton_window, shrink_factor, xtol)

    target = float(desired_range_value)
    lo = float(minimum_domain_value)
    hi = float(maximum_domain_value)
    if not (lo <= hi):
        raise InvalidBracket(f"bracket bounds must satisfy minimum <= maximum, got [{lo!r}, {hi!r}]")

    lo_residual = range_at_minimum_domain_value - target
    hi_residual = range_at_maximum_domain_value - target
    if not (math.isfinite(lo_residual) and math.isfinite(hi_residual)):
        raise InvalidBracket("range values at the bracket endpoints must be finite")

    x, y, dy = initial

    # Either endpoint may already be the answer
    if are_close(range_at_minimum_domain_value, target, tolerance):
        logger.debug("minimum bound %r already within tolerance", lo)
        return InversionResult(lo, range_at_minimum_domain_value, dy, 0, 0, 0, 0, "endpoint")
    if are_close(range_at_maximum_domain_value, target, tolerance):
        logger.debug("maximum bound %r already within tolerance", hi)
        dy_hi = derivative_value_from_state(state_from_domain_value(hi))
        return InversionResult(hi, range_at_maximum_domain_value, dy_hi, 0, 1, 0, 0, "endpoint")

    if (lo_residual < 0.0) == (hi_residual < 0.0):
        raise InvalidBracket(
            f"target {target!r} is not between f({lo!r})={range_at_minimum_domain_value!r} "
            f"and f({hi!r})={range_at_maximum_domain_value!r}"
        )

    evaluations = newton_steps = bisection_steps = 0
    last_step = "endpoint"
    streak = 0
    reference_width = hi - lo

    for it in range(1, max_iter + 1):
        if _bracket_collapsed(lo, hi, xtol):
            raise NonConvergence(
                f"bracket [{lo!r}, {hi!r}] collapsed after {it - 1} iterations "
                f"(x={x!r}, residual={y - target!r})",
                domain_value=x,
                range_value=y,
                derivative_value=dy,
                iterations=it - 1,
            )

        width = hi - lo
        candidate = _newton_candidate(x, y - target, dy, lo, hi, deriv_min)
        if candidate is not None:
            if streak == 0:
                reference_width = width
            elif streak >= newton_window:
                if width > shrink_factor * reference_width:
                    logger.debug("Newton stalled over %d steps; bisecting", streak)
                    candidate = None
                else:
                    streak = 0
                    reference_width = width

        if candidate is None:
            candidate = average(lo, hi)
            last_step = "bisection"
            bisection_steps += 1
            streak = 0
        else:
            last_step = "newton"
            newton_steps += 1
            streak += 1

        state = state_from_domain_value(candidate)
        evaluations += 1
        y = range_value_from_state(state)
        if not math.isfinite(y):
            raise CallbackFailure(f"range value at x={candidate!r} is not finite: {y!r}")
        dy = derivative_value_from_state(state)
        x = candidate
        residual = y - target

        logger.debug(
            "iter %d (%s): x=%r residual=%r deriv=%r bracket=[%r, %r]",
            it, last_step, x, residual, dy, lo, hi,
        )

        if are_close(y, target, tolerance):
            return InversionResult(x, y, dy, it, evaluations, newton_steps, bisection_steps, last_step)

        # Keep opposite signs at the two ends
        if (residual < 0.0) == (lo_residual < 0.0):
            lo, lo_residual = x, residual
        else:
            hi, hi_residual = x, residual

    raise NonConvergence(
        f"no convergence after {max_iter} iterations (x={x!r}, residual={y - target!r})",
        domain_value=x,
        range_value=y,
        derivative_value=dy,
        iterations=max_iter,
    )


def invert(
    function: DifferentiableFunction[S],
    desired_range_value: float,
    tolerance: float,
    minimum_domain_value: float,
    maximum_domain_value: float,
    range_at_minimum_domain_value: float,
    range_at_maximum_domain_value: float,
    initial: Tuple[float, float, float],
    **options,
) -> InversionResult:
    """Same as `invert_differentiable_function`, with the callbacks taken from `function`."""
    return invert_differentiable_function(
        function.state,
        function.range_value,
        function.derivative,
        desired_range_value,
        tolerance,
        minimum_domain_value,
        maximum_domain_value,
        range_at_minimum_domain_value,
        range_at_maximum_domain_value,
        initial,
        **options,
    )


def invert_between(
    function: DifferentiableFunction[S],
    desired_range_value: float,
    minimum_domain_value: float,
    maximum_domain_value: float,
    *,
    tolerance: float = 1e-8,
    **options,
) -> InversionResult:
    """
    Evaluate both bounds, then invert `function` on [minimum, maximum].

    The two endpoint evaluations made here are not included in
    `InversionResult.evaluations`.
    """
    minimum_state = function.state(minimum_domain_value)
    range_at_minimum = function.range_value(minimum_state)
    initial = (minimum_domain_value, range_at_minimum, function.derivative(minimum_state))
    range_at_maximum = function.range_value(function.state(maximum_domain_value))
    return invert(
        function,
        desired_range_value,
        tolerance,
        minimum_domain_value,
        maximum_domain_value,
        range_at_minimum,
        range_at_maximum,
        initial,
        **options,
    )


__all__ = [
    "DifferentiableFunction",
    "InversionResult",
    "invert_differentiable_function",
    "invert",
    "invert_between",
]
