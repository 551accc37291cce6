"""
Trigonometric integrands ``c * sin(ax+b)**k * cos(ax+b)**n``.

Odd ``k`` substitutes ``u = cos``, odd ``n`` substitutes ``u = sin``, and
both even applies the half-angle identities and recurses. Products of sines
and cosines of two different linear arguments go through product-to-sum.
"""

import logging
from typing import Callable, Dict, Optional, Tuple

import sympy as sp

from .algebra import linear_coefficients, split_constant

logger = logging.getLogger(__name__)


def _sin_cos_powers(expr: sp.Expr, var: sp.Symbol) -> Optional[Tuple[sp.Expr, int, int]]:
    """``(theta, k, n)`` for ``sin(theta)**k * cos(theta)**n``, else None."""
    theta = None
    powers = {sp.sin: 0, sp.cos: 0}
    for factor in sp.Mul.make_args(expr):
        base, exponent = factor.as_base_exp()
        if type(base) not in powers or not exponent.is_Integer or exponent < 0:
            return None
        if theta is None:
            theta = base.args[0]
        elif base.args[0] != theta:
            return None
        powers[type(base)] += int(exponent)
    if theta is None or linear_coefficients(theta, var) is None:
        return None
    return theta, powers[sp.sin], powers[sp.cos]


def _odd_power(theta, k, n, var, ctx) -> Optional[sp.Expr]:
    a, _ = linear_coefficients(theta, var)
    u = sp.Dummy('u', real=True)
    if k % 2 == 1:
        integrand = sp.expand(-(1 - u**2)**((k - 1) // 2) * u**n / a)
        back = sp.cos(theta)
        ctx.note("trigonometric", rf"\text{{Odd power of }} \sin\text{{: let }} u = {sp.latex(back)},\ \sin^2 = 1 - u^2")
    else:
        integrand = sp.expand((1 - u**2)**((n - 1) // 2) * u**k / a)
        back = sp.sin(theta)
        ctx.note("trigonometric", rf"\text{{Odd power of }} \cos\text{{: let }} u = {sp.latex(back)},\ \cos^2 = 1 - u^2")
    antiderivative = ctx.integrate_closed(integrand, u)
    if antiderivative is None:
        return None
    return antiderivative.xreplace({u: back})


def _half_angle(theta, k, n, var, ctx) -> Optional[sp.Expr]:
    half_sin = (1 - sp.cos(2 * theta)) / 2
    half_cos = (1 + sp.cos(2 * theta)) / 2
    reduced = sp.expand(half_sin**(k // 2) * half_cos**(n // 2))
    ctx.note("trigonometric", rf"\text{{Half-angle identities: }} {sp.latex(reduced)}")
    return ctx.integrate_closed(reduced, var)


_PRODUCT_TO_SUM: Dict[Tuple[type, type], Callable] = {
    (sp.sin, sp.cos): lambda p, q: (sp.sin(p + q) + sp.sin(p - q)) / 2,
    (sp.sin, sp.sin): lambda p, q: (sp.cos(p - q) - sp.cos(p + q)) / 2,
    (sp.cos, sp.cos): lambda p, q: (sp.cos(p - q) + sp.cos(p + q)) / 2,
}


def _product_to_sum(expr: sp.Expr, var: sp.Symbol, ctx) -> Optional[sp.Expr]:
    factors = sp.Mul.make_args(expr)
    if len(factors) != 2:
        return None
    first, second = sorted(factors, key=lambda f: type(f).__name__, reverse=True)
    rule = _PRODUCT_TO_SUM.get((type(first), type(second)))
    if rule is None:
        return None
    p, q = first.args[0], second.args[0]
    if p == q or linear_coefficients(p, var) is None or linear_coefficients(q, var) is None:
        return None
    rewritten = sp.expand(rule(p, q))
    ctx.note("trigonometric", rf"\text{{Product to sum: }} {sp.latex(expr)} = {sp.latex(rewritten)}")
    return ctx.integrate_closed(rewritten, var)


def integrate_trigonometric(expr: sp.Expr, var: sp.Symbol, ctx) -> Optional[sp.Expr]:
    coeff, rest = split_constant(expr, var)
    found = _sin_cos_powers(rest, var)
    if found is None:
        result = _product_to_sum(rest, var, ctx)
        return None if result is None else coeff * result
    theta, k, n = found
    if k == 0 and n == 0:
        return None
    if k % 2 == 1 or n % 2 == 1:
        result = _odd_power(theta, k, n, var, ctx)
    else:
        result = _half_angle(theta, k, n, var, ctx)
    if result is None:
        return None
    logger.debug("trigonometric: sin^%d cos^%d of %s", k, n, theta)
    return coeff * result
