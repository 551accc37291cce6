import time
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

import sympy as sp

from .dispatcher import integrate
from .options import IntegrationOptions
from .result import ClosedForm, NonElementary, SymbolicFallback, TraceStep

METHOD_NAMES = {
    "constant": "Constant Rule",
    "table": "Basic Standard Patterns",
    "rational": "Partial Fractions",
    "linearity": "Linearity (Sum and Constant Multiple Rules)",
    "by_parts": "Integration by Parts",
    "substitution": "Integration by Substitution",
    "trigonometric": "Trigonometric Powers",
    "risch": "Risch Algorithm",
}


def _step_label(step: TraceStep) -> str:
    name = METHOD_NAMES.get(step.technique, step.technique)
    if step.depth == 0:
        return name
    return f"{name} (sub-integral, depth {step.depth})"


class ComputationResult:
    def __init__(self):
        self.given: str = ""
        self.method: str = ""
        self.steps: List[Tuple[str, str]] = []
        self.final_answer: str = ""
        self.verification: str = ""
        self.summary: Dict[str, Any] = {}
        self.is_success: bool = False
        self.is_verified: bool = False
        self.is_non_elementary: bool = False
        self.error_message: str = ""


class IntegrationEngine:
    def __init__(self, options: Optional[IntegrationOptions] = None):
        self.options = options if options is not None else IntegrationOptions()

    def compute(self, integrand_str: str, variable: str = "x") -> ComputationResult:
        """Integrate a typed-in integrand and lay the answer out as a solution trail."""
        result = ComputationResult()
        start_time = time.perf_counter()

        try:
            var = sp.Symbol(variable)
            expr = sp.sympify(integrand_str, locals={variable: var})
            d = sp.latex(var)
            result.given = rf"\int \left( {sp.latex(expr)} \right) \, d{d}"
            result.steps.append(("Setup", rf"\text{{Identify the integrand: }} f({d}) = {sp.latex(expr)}"))

            outcome, trace = integrate(expr, var, self.options, trace=True)
            result.steps.extend((_step_label(step), step.description) for step in trace.steps)

            if isinstance(outcome, NonElementary):
                result.method = METHOD_NAMES["risch"]
                result.is_non_elementary = True
                raise ValueError(f"No elementary antiderivative exists: {outcome.reason}")
            if isinstance(outcome, SymbolicFallback):
                if outcome.cancelled:
                    raise ValueError("Timed out before an antiderivative was found.")
                raise ValueError("Requires techniques beyond the ones implemented, or has no closed-form solution.")

            antiderivative = outcome.expr
            result.method = METHOD_NAMES.get(outcome.technique, outcome.technique)
            result.steps.append(("Finish", rf"\text{{Add the constant of integration, }} C."))
            result.final_answer = rf"{sp.latex(antiderivative)} + C"

            # Verification Phase
            derivative = sp.diff(antiderivative, var)
            verification_text = rf"\text{{Back-check by differentiating: }} \frac{{d}}{{d{d}}}\left[{sp.latex(antiderivative)}\right] = {sp.latex(derivative)}"

            result.is_verified = isinstance(outcome, ClosedForm) and outcome.verified
            if result.is_verified:
                result.verification = verification_text + "\n\n**Verification Successful:** Derivative matches the integrand."
            else:
                result.verification = verification_text + "\n\n**Verification Warning:** Symbolic equivalence to 0 not trivially established."

            result.summary = {
                "Runtime": f"{(time.perf_counter() - start_time) * 1000:.2f} ms",
                "Techniques": trace.format("techniques"),
                "Timestamp": datetime.now().strftime("%Y-%m-%d %H:%M:%S")
            }
            result.is_success = True

        except Exception as e:
            result.is_success = False
            result.error_message = f"Error: {str(e)}"

        return result
