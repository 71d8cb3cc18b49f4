# invsolve/math_methods/__init__.py
from .generic_functions.math_methods import (
    absolute_value,
    are_close,
    average,
    maximum,
    norm_cdf,
    norm_pdf,
)

__all__ = ["absolute_value", "are_close", "average", "maximum", "norm_cdf", "norm_pdf"]
