"""Per-call state threaded through every recursive dispatch.

One :class:`RecursionBudget`, one :class:`CancellationToken` and one
:class:`~indefinite.result.IntegrationTrace` are created for each top-level
call and shared by reference with all nested dispatches of that call. Nothing
here is shared between independent calls.
"""

import threading
import time
from contextlib import contextmanager
from typing import Callable, FrozenSet, Iterable, Optional

import sympy as sp

from .errors import IntegrationCancelled
from .result import ClosedForm, IntegrationResult, IntegrationTrace


class CancellationToken:
    """Cooperative cancellation signal with an optional monotonic deadline."""

    def __init__(self, deadline: Optional[float] = None, parent: Optional['CancellationToken'] = None):
        self.deadline = deadline
        self.parent = parent
        self._event = threading.Event()

    @classmethod
    def from_timeout(cls, seconds: float, parent: Optional['CancellationToken'] = None) -> 'CancellationToken':
        return cls(deadline=time.monotonic() + seconds, parent=parent)

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        if self._event.is_set():
            return True
        if self.deadline is not None and time.monotonic() >= self.deadline:
            return True
        return self.parent is not None and self.parent.cancelled

    def check(self) -> None:
        """Raise :class:`IntegrationCancelled` if the call should stop now."""
        if self.cancelled:
            raise IntegrationCancelled("integration cancelled by caller deadline")


class RecursionBudget:
    """
    Depth and work budget owned by a single top-level call.

    ``remaining`` drops by one for the duration of every nested dispatch and
    ``dispatches`` counts every nested dispatch ever made. Once either limit
    is reached, nested dispatches stop running techniques.
    """

    def __init__(self, max_depth: int, max_dispatches: int):
        self.max_depth = max_depth
        self.max_dispatches = max_dispatches
        self.remaining = max_depth
        self.dispatches = 0

    @property
    def depth(self) -> int:
        return self.max_depth - self.remaining

    @property
    def exhausted(self) -> bool:
        return self.remaining <= 0 or self.dispatches >= self.max_dispatches

    @contextmanager
    def descend(self):
        self.remaining -= 1
        self.dispatches += 1
        try:
            yield self
        finally:
            self.remaining += 1


DispatchFn = Callable[[sp.Expr, sp.Symbol, 'IntegrationContext'], IntegrationResult]


class IntegrationContext:
    """What a technique needs to recurse: budget, token, trace and the dispatcher."""

    def __init__(self, options, budget: RecursionBudget, token: CancellationToken,
                 trace: IntegrationTrace, dispatch: DispatchFn,
                 excluded: FrozenSet[str] = frozenset()):
        self.options = options
        self.budget = budget
        self.token = token
        self.trace = trace
        self._dispatch = dispatch
        self.excluded = excluded

    @property
    def depth(self) -> int:
        return self.budget.depth

    def check_cancelled(self) -> None:
        self.token.check()

    def note(self, technique: str, description: str) -> None:
        self.trace.add(self.depth, technique, description)

    def child(self, exclude: Iterable[str] = ()) -> 'IntegrationContext':
        return IntegrationContext(
            self.options, self.budget, self.token, self.trace, self._dispatch,
            self.excluded | frozenset(exclude),
        )

    def integrate(self, expr: sp.Expr, var: sp.Symbol, exclude: Iterable[str] = ()) -> IntegrationResult:
        """Nested dispatch: one level of the shared budget."""
        return self._dispatch(expr, var, self.child(exclude))

    def integrate_closed(self, expr: sp.Expr, var: sp.Symbol, exclude: Iterable[str] = ()) -> Optional[sp.Expr]:
        """Nested dispatch that only cares about closed forms."""
        result = self.integrate(expr, var, exclude)
        if isinstance(result, ClosedForm):
            return result.expr
        return None
