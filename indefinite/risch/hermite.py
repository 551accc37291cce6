"""Hermite reduction over a monomial extension with derivation ``D``."""

from typing import Callable, Tuple

import sympy as sp

Derivation = Callable[[sp.Poly], sp.Poly]


def solve_diophantine(p: sp.Poly, q: sp.Poly, c: sp.Poly) -> Tuple[sp.Poly, sp.Poly]:
    """
    ``(s, u)`` with ``s*p + u*q == c`` and ``deg(s) < deg(q)``.

    ``p`` and ``q`` must be coprime.
    """
    s0, _, g = p.gcdex(q)
    if g.degree() != 0:
        raise sp.PolynomialError(f"{p.as_expr()} and {q.as_expr()} are not coprime")
    s0 = s0.quo_ground(g.LC())
    s = (s0 * c).rem(q)
    u = (c - s * p).exquo(q)
    return s, u


def hermite_reduce(a: sp.Poly, d: sp.Poly, derivation: Derivation) -> Tuple[sp.Expr, sp.Poly, sp.Poly]:
    """
    Split ``a/d`` (``d`` normal) into ``D(g) + h``.

    Returns ``(g, a_h, d_h)`` with ``h = a_h/d_h`` and ``d_h`` squarefree.
    ``a_h`` may still have degree at least ``deg(d_h)``.
    """
    g = sp.S.Zero
    gen = d.gen
    _, factors = d.sqf_list()
    for v, multiplicity in factors:
        if multiplicity < 2 or v.degree() < 1:
            continue
        u = d.exquo(v**multiplicity)
        for j in range(multiplicity - 1, 0, -1):
            b, c = solve_diophantine(u * derivation(v), v, a.mul_ground(sp.Rational(-1, j)))
            g += b.as_expr() / v.as_expr()**j
            a = c.mul_ground(-j) - u * derivation(b)
        d = u * v
    return g, a, sp.Poly(d, gen)
