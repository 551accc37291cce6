"""Linearity: constant multiples and termwise integration of sums."""

import logging
from typing import Optional

import sympy as sp

from .algebra import split_constant

logger = logging.getLogger(__name__)


def _as_sum(expr: sp.Expr) -> Optional[sp.Expr]:
    if expr.is_Add:
        return expr
    expanded = sp.expand(expr)
    if expanded.is_Add:
        return expanded
    return None


def integrate_linear(expr: sp.Expr, var: sp.Symbol, ctx) -> Optional[sp.Expr]:
    """
    Integrate ``c * f`` as ``c * F`` and ``f + g`` as ``F + G``.

    Every piece goes back through the dispatcher; one piece that does not
    come back in closed form makes the whole attempt decline, since the
    non-elementary parts of separate terms can cancel.
    """
    coeff, rest = split_constant(expr, var)
    if coeff != 1:
        inner = ctx.integrate_closed(rest, var)
        if inner is None:
            return None
        ctx.note("linearity", rf"\text{{Pull out the constant }} {sp.latex(coeff)}")
        return coeff * inner

    total = _as_sum(expr)
    if total is None:
        return None
    terms = total.as_ordered_terms()
    ctx.note("linearity", rf"\text{{Integrate the {len(terms)} terms separately: }} {sp.latex(total)}")
    result = sp.S.Zero
    for term in terms:
        ctx.check_cancelled()
        antiderivative = ctx.integrate_closed(term, var)
        if antiderivative is None:
            logger.debug("linearity: term %s has no closed form here", term)
            return None
        result += antiderivative
    return result
