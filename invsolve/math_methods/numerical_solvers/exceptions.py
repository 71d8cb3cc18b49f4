# invsolve/math_methods/numerical_solvers/exceptions.py
"""Exception classes for the inversion solver."""
from __future__ import annotations


class InversionError(Exception):
    """Base exception for inversion failures."""


class InvalidBracket(InversionError, ValueError):
    """Raised when the target is not between the range values at the bracket endpoints."""


class NonConvergence(InversionError, RuntimeError):
    """
    Raised when the iteration cap is reached without meeting the tolerance.

    The last best point is kept on the exception so callers can inspect
    how far the search got.
    """

    def __init__(
        self,
        message: str,
        *,
        domain_value: float,
        range_value: float,
        derivative_value: float,
        iterations: int,
    ) -> None:
        super().__init__(message)
        self.domain_value = domain_value
        self.range_value = range_value
        self.derivative_value = derivative_value
        self.iterations = iterations


class CallbackFailure(InversionError):
    """
    Raised when a callback yields an unusable (non-finite) range value.

    Callbacks may raise it themselves to abort a search early; the solver
    lets it, and any other callback exception, propagate unchanged.
    """
