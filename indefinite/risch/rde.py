"""
Risch differential equation ``y' + f*y = g`` over ``Q(x)``.

Only the no-cancellation case is solved: after the normal-denominator
reduction ``a*q' + b*q = c`` must have ``b != 0``. The cancellation case
(``b == 0``) is declined.
"""

import logging
from typing import Optional, Tuple

import sympy as sp

from ..errors import NonElementaryIntegral

logger = logging.getLogger(__name__)


def _fraction(expr: sp.Expr, var: sp.Symbol) -> Tuple[sp.Poly, sp.Poly]:
    num, den = sp.fraction(sp.cancel(sp.together(expr)))
    return sp.Poly(num, var, field=True), sp.Poly(den, var, field=True)


def normal_denominator(f: sp.Expr, g: sp.Expr, var: sp.Symbol):
    """
    Bound the denominator of a solution.

    Returns ``(a, b, c, h)`` such that ``y = q/h`` with ``q`` a polynomial
    solving ``a*q' + b*q = c``. Raises :class:`NonElementaryIntegral` if no
    rational solution can exist.
    """
    _, dn = _fraction(f, var)
    _, en = _fraction(g, var)
    p = dn.gcd(en)
    h = en.gcd(en.diff(var)).exquo(p.gcd(p.diff(var)))
    if not (dn * h**2).rem(en).is_zero:
        raise NonElementaryIntegral(
            f"y' + ({f})*y = {g} has no solution in Q({var}): "
            f"the denominator {en.as_expr()} cannot come from y"
        )
    h_expr = h.as_expr()
    dn_expr = dn.as_expr()
    a = dn * h
    b = sp.Poly(sp.cancel(dn_expr * h_expr * f - dn_expr * sp.diff(h_expr, var)), var, field=True)
    c = sp.Poly(sp.cancel(dn_expr * h_expr**2 * g), var, field=True)
    return a, b, c, h


def degree_bound(a: sp.Poly, b: sp.Poly, c: sp.Poly) -> int:
    da, db, dc = a.degree(), b.degree(), c.degree()
    bound = max(0, dc - max(db, da - 1))
    if db == da - 1:
        m = -b.LC() / a.LC()
        if m.is_Integer and m >= 0:
            bound = max(bound, int(m), dc - db)
    return bound


def solve_rde(f: sp.Expr, g: sp.Expr, var: sp.Symbol, token=None) -> Optional[sp.Expr]:
    """
    Find ``y`` in ``Q(x)`` with ``y' + f*y = g``.

    Returns None in the cancellation case. Raises
    :class:`NonElementaryIntegral` when there is provably no solution.
    """
    if token is not None:
        token.check()
    if g == 0:
        return sp.S.Zero

    a, b, c, h = normal_denominator(f, g, var)
    if b.is_zero:
        logger.debug("rde: cancellation case for f=%s, g=%s declined", f, g)
        return None

    n = degree_bound(a, b, c)
    logger.debug("rde: y' + (%s)y = %s, degree bound %d", f, g, n)
    if token is not None:
        token.check()

    unknowns = sp.symbols(f'q0:{n + 1}', cls=sp.Dummy)
    q = sum(coeff * var**i for i, coeff in enumerate(unknowns))
    residual = a.as_expr() * sp.diff(q, var) + b.as_expr() * q - c.as_expr()
    equations = sp.Poly(sp.expand(residual), var).all_coeffs()
    solutions = sp.linsolve(equations, list(unknowns))
    if not solutions:
        raise NonElementaryIntegral(
            f"y' + ({f})*y = {g} has no polynomial solution of degree <= {n}"
        )
    solution = next(iter(solutions))
    free = {u: 0 for u in unknowns}
    q_value = q.xreplace(dict(zip(unknowns, [value.xreplace(free) for value in solution])))
    return sp.cancel(q_value / h.as_expr())
