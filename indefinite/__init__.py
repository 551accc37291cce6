"""
Symbolic indefinite integration for elementary functions.

    >>> import sympy as sp
    >>> from indefinite import integrate
    >>> x = sp.Symbol('x')
    >>> integrate(x * sp.exp(x), x).expr
    (x - 1)*exp(x)
"""

from .context import CancellationToken, RecursionBudget
from .dispatcher import integrate
from .errors import IntegrationCancelled, IntegrationError, NonElementaryIntegral
from .options import IntegrationOptions
from .result import (
    ClosedForm,
    IntegrationResult,
    IntegrationTrace,
    NonElementary,
    SymbolicFallback,
    TraceStep,
)

__version__ = "1.0.0"

__all__ = [
    "integrate",
    "IntegrationOptions",
    "CancellationToken",
    "RecursionBudget",
    "ClosedForm",
    "SymbolicFallback",
    "NonElementary",
    "IntegrationResult",
    "IntegrationTrace",
    "TraceStep",
    "IntegrationError",
    "IntegrationCancelled",
    "NonElementaryIntegral",
]
