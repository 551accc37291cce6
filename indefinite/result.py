"""Result values and the optional solution trace."""

from dataclasses import dataclass
from typing import Dict, List, Union

import sympy as sp


@dataclass(frozen=True)
class ClosedForm:
    """An antiderivative, checked by differentiation when ``verified`` is set."""
    expr: sp.Expr
    verified: bool = False
    technique: str = ""

    def as_expr(self) -> sp.Expr:
        return self.expr


@dataclass(frozen=True)
class SymbolicFallback:
    """The integral left unevaluated: always a safe answer."""
    expr: sp.Expr
    cancelled: bool = False
    reason: str = ""

    def as_expr(self) -> sp.Expr:
        return self.expr


@dataclass(frozen=True)
class NonElementary:
    """Proof (from the Risch procedure) that no elementary antiderivative exists."""
    integrand: sp.Expr
    var: sp.Symbol
    reason: str

    def as_expr(self) -> sp.Expr:
        return sp.Integral(self.integrand, self.var)


IntegrationResult = Union[ClosedForm, SymbolicFallback, NonElementary]


class TraceStep:
    """One recorded sub-step: which technique, at which depth, doing what (LaTeX)."""

    def __init__(self, depth: int, technique: str, description: str):
        self.depth = depth
        self.technique = technique
        self.description = description

    def __repr__(self) -> str:
        return f"{'  ' * self.depth}[{self.technique}] {self.description}"

    def to_dict(self) -> Dict:
        return {
            "depth": self.depth,
            "technique": self.technique,
            "description": self.description,
        }


class IntegrationTrace:
    """
    Sub-steps of the techniques that succeeded, in the order they ran.

    Steps recorded by a technique that later declines are rolled back, so the
    trace only ever describes the path to the returned answer. It is additive:
    nothing in the engine reads it back.
    """

    def __init__(self):
        self.steps: List[TraceStep] = []
        self.method: str = ""

    def add(self, depth: int, technique: str, description: str) -> None:
        self.steps.append(TraceStep(depth, technique, description))

    def mark(self) -> int:
        return len(self.steps)

    def rollback(self, mark: int) -> None:
        del self.steps[mark:]

    def techniques(self) -> List[str]:
        seen = []
        for step in self.steps:
            if step.technique not in seen:
                seen.append(step.technique)
        return seen

    def format(self, style: str = "verbose") -> str:
        """
        Format the trace.

        Args:
            style: "verbose" (one indented line per step) or "techniques"
                (the technique names joined by arrows).
        """
        if style == "techniques":
            names = self.techniques()
            return " -> ".join(names) if names else "(no techniques applied)"
        return "\n".join(repr(step) for step in self.steps)

    def __repr__(self) -> str:
        return f"IntegrationTrace(method={self.method!r}, steps={len(self.steps)})"
