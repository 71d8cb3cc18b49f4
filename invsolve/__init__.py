# invsolve/__init__.py
from .math_methods.numerical_solvers.Safeguarded_Newton import (
    DifferentiableFunction,
    InversionResult,
    invert,
    invert_between,
    invert_differentiable_function,
)
from .math_methods.numerical_solvers.exceptions import (
    CallbackFailure,
    InvalidBracket,
    InversionError,
    NonConvergence,
)
from .implied_vola.iv import implied_vol_bs

__all__ = [
    "DifferentiableFunction",
    "InversionResult",
    "invert",
    "invert_between",
    "invert_differentiable_function",
    "InversionError",
    "InvalidBracket",
    "NonConvergence",
    "CallbackFailure",
    "implied_vol_bs",
]
__version__ = "0.1.0"
