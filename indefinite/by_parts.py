"""
Integration by parts with LIATE factor selection.

``u`` is chosen by LIATE rank (logarithmic > inverse trigonometric >
algebraic > trigonometric > exponential); the remaining factor is ``dv``.
The residual ``v du`` is re-split up to ``max_by_parts_rounds`` times. A
residual that comes back as a constant multiple ``k`` of the original
integrand closes the loop algebraically: ``I = A + s*k*I``.
"""

import logging
from typing import Dict, List, Optional, Tuple

import sympy as sp

from .algebra import expression_size, split_constant

logger = logging.getLogger(__name__)

LOGARITHMIC, INVERSE_TRIG, ALGEBRAIC, TRIGONOMETRIC, EXPONENTIAL = 5, 4, 3, 2, 1

_INVERSE_TRIG = (sp.asin, sp.acos, sp.atan, sp.acot, sp.asec, sp.acsc)
_TRIG = (sp.sin, sp.cos, sp.tan, sp.cot, sp.sec, sp.csc)


def liate_rank(factor: sp.Expr, var: sp.Symbol) -> Optional[int]:
    """LIATE class of one factor, or None if it has none."""
    base = factor
    if factor.is_Pow and factor.exp.is_Integer and factor.exp > 0:
        base = factor.base
    if isinstance(base, sp.log):
        return LOGARITHMIC
    if isinstance(base, _INVERSE_TRIG):
        return INVERSE_TRIG
    if factor.is_polynomial(var):
        return ALGEBRAIC
    # 1/p integrates to a logarithm, which outranks it
    if factor.is_Pow and not factor.exp.has(var) and factor.exp != -1 and factor.base.is_polynomial(var):
        return ALGEBRAIC
    if isinstance(base, _TRIG):
        return TRIGONOMETRIC
    if isinstance(factor, sp.exp):
        return EXPONENTIAL
    if factor.is_Pow and not factor.base.has(var) and factor.exp.has(var):
        return EXPONENTIAL
    return None


def _group_by_rank(expr: sp.Expr, var: sp.Symbol) -> Optional[Dict[int, sp.Expr]]:
    groups: Dict[int, sp.Expr] = {}
    for factor in sp.Mul.make_args(expr):
        rank = liate_rank(factor, var)
        if rank is None:
            return None
        groups[rank] = groups.get(rank, sp.S.One) * factor
    return groups


def split_parts(expr: sp.Expr, var: sp.Symbol) -> List[Tuple[sp.Expr, sp.Expr]]:
    """Candidate ``(u, dv)`` pairs, preferred order first."""
    groups = _group_by_rank(expr, var)
    if groups is None:
        return []
    if len(groups) == 1:
        rank, factor = next(iter(groups.items()))
        if rank in (LOGARITHMIC, INVERSE_TRIG):
            return [(factor, sp.S.One)]
        return []
    if len(groups) != 2:
        return []
    high, low = sorted(groups, reverse=True)
    return [(groups[high], groups[low]), (groups[low], groups[high])]


def _describe(u, dv, v, var) -> str:
    d = sp.latex(var)
    return (rf"\text{{Let }} u = {sp.latex(u)},\ dv = {sp.latex(dv)}\,d{d}"
            rf"\ \Rightarrow\ du = {sp.latex(sp.diff(u, var))}\,d{d},\ v = {sp.latex(v)}")


def _reduce(expr: sp.Expr, var: sp.Symbol, ctx, first: Tuple[sp.Expr, sp.Expr], rounds: int,
            max_size: Optional[int] = None) -> Optional[sp.Expr]:
    accumulated = sp.S.Zero
    sign = 1
    current = expr
    split = first
    for round_number in range(rounds):
        ctx.check_cancelled()
        u, dv = split
        v = ctx.integrate_closed(dv, var, exclude={"by_parts"})
        if v is None:
            return None
        ctx.note("by_parts", _describe(u, dv, v, var))
        accumulated += sign * u * v
        sign = -sign
        current = sp.simplify(v * sp.diff(u, var))
        if current == 0:
            return accumulated

        k = sp.simplify(current / expr)
        if not k.has(var):
            denominator = 1 - sign * k
            if sp.simplify(denominator) == 0:
                logger.debug("by_parts: degenerate cycle for %s", expr)
                return None
            ctx.note("by_parts", rf"\text{{The integral reappears with factor }} {sp.latex(sign * k)}\text{{; solve for it}}")
            return accumulated / denominator

        if max_size is not None and expression_size(current) > max_size:
            return None

        rest = ctx.integrate_closed(current, var, exclude={"by_parts"})
        if rest is not None:
            return accumulated + sign * rest

        scale, core = split_constant(current, var)
        candidates = split_parts(core, var)
        if not candidates:
            return None
        u, dv = candidates[0]
        split = (u, scale * dv)
        logger.debug("by_parts: round %d leaves %s", round_number + 1, current)
    return None


def integrate_by_parts(expr: sp.Expr, var: sp.Symbol, ctx) -> Optional[sp.Expr]:
    coeff, rest = split_constant(expr, var)
    candidates = split_parts(rest, var)
    rounds = ctx.options.max_by_parts_rounds
    for index, candidate in enumerate(candidates):
        mark = ctx.trace.mark()
        if index == 0:
            result = _reduce(rest, var, ctx, candidate, rounds)
        else:
            # reversed ordering: one round, and the residual may not grow
            result = _reduce(rest, var, ctx, candidate, 1, max_size=expression_size(rest))
        if result is not None:
            return coeff * result
        ctx.trace.rollback(mark)
    return None
