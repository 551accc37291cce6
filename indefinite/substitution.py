"""u-substitution: find ``g(x)`` with ``f(x) = c * F(g(x)) * g'(x)``."""

import logging
from typing import List, Optional

import sympy as sp

from .algebra import expression_size

logger = logging.getLogger(__name__)


def substitution_candidates(expr: sp.Expr, var: sp.Symbol) -> List[sp.Expr]:
    """Inner expressions worth trying as ``u``, largest first."""
    found = set()
    for node in sp.preorder_traversal(expr):
        if node.is_Pow:
            found.update(part for part in (node.base, node.exp) if part.has(var))
            if node.exp.is_Integer and node.exp > 1 and node.base.has(var):
                # x**4 also offers x**2
                found.update(node.base**k for k in sp.divisors(int(node.exp))[1:-1])
        elif isinstance(node, sp.Function):
            found.add(node)
            found.update(arg for arg in node.args if arg.has(var))
    found.discard(var)
    found = [c for c in found if c.has(var) and not c.is_Number]
    return sorted(found, key=lambda c: (-expression_size(c), sp.default_sort_key(c)))


def _rewrite_in(expr: sp.Expr, g: sp.Expr, dg: sp.Expr, u: sp.Symbol, var: sp.Symbol) -> Optional[sp.Expr]:
    f_u = sp.simplify(expr.subs(g, u) / dg)
    if not f_u.has(var):
        return f_u
    f_u = sp.simplify(expr / dg).subs(g, u)
    if not f_u.has(var):
        return f_u
    return None


def integrate_substitution(expr: sp.Expr, var: sp.Symbol, ctx) -> Optional[sp.Expr]:
    u = sp.Dummy('u', real=True)
    for g in substitution_candidates(expr, var):
        ctx.check_cancelled()
        dg = sp.diff(g, var)
        if dg == 0:
            continue
        f_u = _rewrite_in(expr, g, dg, u, var)
        if f_u is None:
            continue
        mark = ctx.trace.mark()
        ctx.note("substitution", rf"\text{{Let }} u = {sp.latex(g)},\ du = {sp.latex(dg)}\,d{sp.latex(var)}"
                                 rf"\ \Rightarrow\ \int {sp.latex(f_u.xreplace({u: sp.Symbol('u')}))}\,du")
        antiderivative = ctx.integrate_closed(f_u, u)
        if antiderivative is None:
            logger.debug("substitution: u = %s gives %s with no closed form", g, f_u)
            ctx.trace.rollback(mark)
            continue
        result = antiderivative.xreplace({u: g})
        ctx.note("substitution", rf"\text{{Substitute back }} u = {sp.latex(g)}")
        return result
    return None
