"""Internal exception taxonomy.

None of these escape :func:`indefinite.integrate`; the dispatcher turns them
into :class:`~indefinite.result.NonElementary` or
:class:`~indefinite.result.SymbolicFallback` values.
"""


class IntegrationError(Exception):
    """Base class for integration-engine errors."""


class NonElementaryIntegral(IntegrationError):
    """Raised by the Risch subsystem once it has proven no elementary antiderivative exists."""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class IntegrationCancelled(IntegrationError):
    """Raised when the caller's deadline passes or its token is cancelled."""
