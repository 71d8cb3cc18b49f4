# invsolve/math_methods/generic_functions/math_methods.py
from math import erf, exp, isfinite, sqrt, pi


def absolute_value(a: float) -> float:
    return abs(a)


def maximum(a: float, b: float) -> float:
    return b if a < b else a


def average(a: float, b: float) -> float:
    """
    Arithmetic mean of two values, never outside [a, b].
    Falls back to halving each operand when b - a overflows.
    """
    half_width = (b - a) / 2.0
    if isfinite(half_width):
        return a + half_width
    return 0.5 * a + 0.5 * b


def are_close(a: float, b: float, tolerance: float) -> bool:
    """
    Tolerance-scaled closeness test.

    True when |a - b| <= tolerance * max(1, |a| + |b|), i.e. an absolute
    tolerance near zero and a relative one for large magnitudes.
    """
    return absolute_value(a - b) <= tolerance * maximum(1.0, absolute_value(a) + absolute_value(b))


# Normal distribution functions (fast scalar approximation)
def norm_cdf(x):
    """
    Standard normal cumulative distribution function.
    Implemented using the error function (erf)
    """
    return 0.5 * (1.0 + erf(x / sqrt(2.0)))


def norm_pdf(x):
    """
    Standard normal probability density function.
    Direct formula based on exponential function.
    """
    return (1.0 / sqrt(2.0 * pi)) * exp(-0.5 * x * x)
