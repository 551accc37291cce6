"""Per-call configuration for :func:`indefinite.integrate`."""

from dataclasses import dataclass
from typing import Optional

from .context import CancellationToken


@dataclass(frozen=True)
class IntegrationOptions:
    """
    Configuration for one top-level integration call.

    Attributes:
        max_depth: Maximum nesting of recursive dispatches (by-parts,
            substitution, trigonometric reduction, linearity).
        max_dispatches: Ceiling on the total number of nested dispatches in
            one call, whatever their depth.
        max_by_parts_rounds: How many times the by-parts engine may re-apply
            itself to its own residual before giving up.
        risch: Whether the Risch decision procedure runs as the last technique.
        verify: Differentiate closed forms and record whether they check out.
        timeout: Seconds before the call is abandoned (None = no deadline).
        token: Caller-owned cancellation token, checked at coarse boundaries.
    """
    max_depth: int = 10
    max_dispatches: int = 400
    max_by_parts_rounds: int = 6
    risch: bool = True
    verify: bool = True
    timeout: Optional[float] = None
    token: Optional[CancellationToken] = None

    def __post_init__(self):
        if self.max_depth < 0:
            raise ValueError(f"max_depth must be non-negative, got {self.max_depth}")
        if self.max_dispatches < 1:
            raise ValueError(f"max_dispatches must be positive, got {self.max_dispatches}")
        if self.max_by_parts_rounds < 1:
            raise ValueError(f"max_by_parts_rounds must be positive, got {self.max_by_parts_rounds}")
        if self.timeout is not None and self.timeout <= 0:
            raise ValueError(f"timeout must be positive, got {self.timeout}")

    @classmethod
    def quick(cls) -> 'IntegrationOptions':
        """Shallow search without the Risch fallback."""
        return cls(max_depth=4, max_dispatches=60, risch=False)

    @classmethod
    def thorough(cls) -> 'IntegrationOptions':
        """Deeper search for integrands needing long reduction chains."""
        return cls(max_depth=16, max_dispatches=2000, max_by_parts_rounds=10)

    def make_token(self) -> CancellationToken:
        """Combine the caller's token with this call's timeout."""
        if self.timeout is None:
            return self.token if self.token is not None else CancellationToken()
        return CancellationToken.from_timeout(self.timeout, parent=self.token)
