# invsolve/math_methods/numerical_solvers/__init__.py
from .exceptions import CallbackFailure, InvalidBracket, InversionError, NonConvergence
from .Safeguarded_Newton import (
    DifferentiableFunction,
    InversionResult,
    invert,
    invert_between,
    invert_differentiable_function,
)
