"""
Integration table: direct lookup of standard forms.

Rules are matched in declared order against the integrand with its constant
multiple pulled out. Patterns are written over the placeholder ``X``; the
wildcards never match anything containing it.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple

import sympy as sp

logger = logging.getLogger(__name__)

X = sp.Dummy('x', real=True)

a = sp.Wild('a', exclude=[X])
b = sp.Wild('b', exclude=[X])
c = sp.Wild('c', exclude=[X])
n = sp.Wild('n', exclude=[X])

Bindings = Dict[sp.Wild, sp.Expr]


def _always(m: Bindings) -> bool:
    return True


def _linear(m: Bindings) -> bool:
    return m[a] != 0


@dataclass(frozen=True)
class IntegrationRule:
    name: str
    pattern: sp.Expr
    template: sp.Expr
    condition: Callable[[Bindings], bool]
    example: sp.Expr

    def apply(self, expr: sp.Expr) -> Optional[sp.Expr]:
        """Instantiate the template for ``expr`` (written over ``X``), or None."""
        bindings = expr.match(self.pattern)
        if bindings is None:
            return None
        if not self.condition(bindings):
            return None
        result = self.template.xreplace(bindings)
        if result.has(sp.Wild) or result.has(sp.nan, sp.zoo):
            return None
        return result


_u = a * X + b

RULES: Tuple[IntegrationRule, ...] = (
    IntegrationRule("identity", X, X**2 / 2, _always, X),
    IntegrationRule("exponential", sp.exp(_u), sp.exp(_u) / a, _linear, sp.exp(3 * X + 1)),
    IntegrationRule(
        "constant base power", c**_u, c**_u / (a * sp.log(c)),
        lambda m: m[a] != 0 and m[c].is_positive is True and m[c] != 1,
        2**X,
    ),
    IntegrationRule(
        "power", _u**n, _u**(n + 1) / (a * (n + 1)),
        lambda m: m[a] != 0 and m[n] != -1,
        (2 * X + 1)**3,
    ),
    IntegrationRule("reciprocal linear", 1 / _u, sp.log(sp.Abs(_u)) / a, _linear, 1 / (3 * X - 2)),
    IntegrationRule("logarithm", sp.log(_u), _u * sp.log(_u) / a - X, _linear, sp.log(X)),
    IntegrationRule("sine", sp.sin(_u), -sp.cos(_u) / a, _linear, sp.sin(2 * X)),
    IntegrationRule("cosine", sp.cos(_u), sp.sin(_u) / a, _linear, sp.cos(X + 1)),
    IntegrationRule("tangent", sp.tan(_u), -sp.log(sp.Abs(sp.cos(_u))) / a, _linear, sp.tan(X)),
    IntegrationRule("cotangent", sp.cot(_u), sp.log(sp.Abs(sp.sin(_u))) / a, _linear, sp.cot(X)),
    IntegrationRule(
        "secant", sp.sec(_u), sp.log(sp.Abs(sp.sec(_u) + sp.tan(_u))) / a, _linear, sp.sec(X),
    ),
    IntegrationRule(
        "cosecant", sp.csc(_u), -sp.log(sp.Abs(sp.csc(_u) + sp.cot(_u))) / a, _linear, sp.csc(X),
    ),
    IntegrationRule("secant squared", sp.sec(_u)**2, sp.tan(_u) / a, _linear, sp.sec(2 * X)**2),
    IntegrationRule("reciprocal cosine squared", sp.cos(_u)**-2, sp.tan(_u) / a, _linear, 1 / sp.cos(X)**2),
    IntegrationRule("cosecant squared", sp.csc(_u)**2, -sp.cot(_u) / a, _linear, sp.csc(X)**2),
    IntegrationRule("reciprocal sine squared", sp.sin(_u)**-2, -sp.cot(_u) / a, _linear, 1 / sp.sin(X)**2),
    IntegrationRule("secant tangent", sp.sec(_u) * sp.tan(_u), sp.sec(_u) / a, _linear, sp.sec(X) * sp.tan(X)),
    IntegrationRule("cosecant cotangent", sp.csc(_u) * sp.cot(_u), -sp.csc(_u) / a, _linear, sp.csc(X) * sp.cot(X)),
    IntegrationRule(
        "sine squared", sp.sin(_u)**2, X / 2 - sp.sin(2 * _u) / (4 * a), _linear, sp.sin(X)**2,
    ),
    IntegrationRule(
        "cosine squared", sp.cos(_u)**2, X / 2 + sp.sin(2 * _u) / (4 * a), _linear, sp.cos(3 * X)**2,
    ),
    IntegrationRule("hyperbolic sine", sp.sinh(_u), sp.cosh(_u) / a, _linear, sp.sinh(X)),
    IntegrationRule("hyperbolic cosine", sp.cosh(_u), sp.sinh(_u) / a, _linear, sp.cosh(2 * X)),
    IntegrationRule("hyperbolic tangent", sp.tanh(_u), sp.log(sp.cosh(_u)) / a, _linear, sp.tanh(X)),
    IntegrationRule("hyperbolic secant squared", sp.sech(_u)**2, sp.tanh(_u) / a, _linear, sp.sech(X)**2),
    IntegrationRule(
        "arctangent form", 1 / (a * X**2 + c), sp.atan(sp.sqrt(a / c) * X) / sp.sqrt(a * c),
        lambda m: m[a].is_positive is True and m[c].is_positive is True,
        1 / (X**2 + 4),
    ),
    IntegrationRule(
        "arcsine form", (a * X**2 + c)**sp.Rational(-1, 2), sp.asin(sp.sqrt(-a / c) * X) / sp.sqrt(-a),
        lambda m: m[a].is_negative is True and m[c].is_positive is True,
        1 / sp.sqrt(1 - X**2),
    ),
    IntegrationRule(
        "inverse hyperbolic form", (a * X**2 + c)**sp.Rational(-1, 2),
        sp.log(sp.Abs(sp.sqrt(a) * X + sp.sqrt(a * X**2 + c))) / sp.sqrt(a),
        lambda m: m[a].is_positive is True and m[c] != 0,
        1 / sp.sqrt(X**2 + 1),
    ),
    IntegrationRule("arcsine", sp.asin(X), X * sp.asin(X) + sp.sqrt(1 - X**2), _always, sp.asin(X)),
    IntegrationRule("arccosine", sp.acos(X), X * sp.acos(X) - sp.sqrt(1 - X**2), _always, sp.acos(X)),
    IntegrationRule("arctangent", sp.atan(X), X * sp.atan(X) - sp.log(X**2 + 1) / 2, _always, sp.atan(X)),
    IntegrationRule(
        "linear times exponential", X * sp.exp(a * X), sp.exp(a * X) * (a * X - 1) / a**2,
        lambda m: m[a] != 0,
        X * sp.exp(2 * X),
    ),
    IntegrationRule("linear times logarithm", X * sp.log(X), X**2 * sp.log(X) / 2 - X**2 / 4, _always, X * sp.log(X)),
    IntegrationRule("logarithm over identity", sp.log(X) / X, sp.log(X)**2 / 2, _always, sp.log(X) / X),
    IntegrationRule(
        "reciprocal of identity times logarithm", 1 / (X * sp.log(X)), sp.log(sp.Abs(sp.log(X))), _always,
        1 / (X * sp.log(X)),
    ),
)


def match_rule(expr: sp.Expr, var: sp.Symbol) -> Optional[Tuple[IntegrationRule, sp.Expr]]:
    """Find the first rule matching ``expr`` and return it with the antiderivative."""
    if not expr.has(var):
        return None
    coeff, rest = expr.as_independent(var, as_Add=False)
    rest = rest.xreplace({var: X})
    for rule in RULES:
        result = rule.apply(rest)
        if result is not None:
            return rule, coeff * result.xreplace({X: var})
    return None


def lookup(expr: sp.Expr, var: sp.Symbol) -> Optional[sp.Expr]:
    found = match_rule(expr, var)
    return found[1] if found is not None else None


def integrate_table(expr: sp.Expr, var: sp.Symbol, ctx) -> Optional[sp.Expr]:
    found = match_rule(expr, var)
    if found is None:
        return None
    rule, result = found
    logger.debug("table rule %r matched %s", rule.name, expr)
    ctx.note("table", rf"\text{{Standard form ({rule.name}): }} \int {sp.latex(expr)} \, d{sp.latex(var)} = {sp.latex(result)}")
    return result
