"""
SymPy adapters for the algebra the techniques consume.

The techniques only touch expressions through these helpers and a handful of
SymPy primitives (``diff``, ``subs``/``xreplace``, ``simplify``, ``Poly``), so
the polynomial layer stays a narrow interface: rational-function recognition,
long division, square-free decomposition, gcd and resultant.
"""

from typing import List, Optional, Tuple

import sympy as sp


def real_stand_in(var: sp.Symbol) -> sp.Symbol:
    """A real-valued symbol to integrate over, so |.| and log rules simplify."""
    if var.is_real:
        return var
    return sp.Dummy(var.name, real=True)


def is_constant(expr: sp.Expr, var: sp.Symbol) -> bool:
    return not expr.has(var)


def expression_size(expr: sp.Expr) -> int:
    return sum(1 for _ in sp.preorder_traversal(expr))


def split_constant(expr: sp.Expr, var: sp.Symbol) -> Tuple[sp.Expr, sp.Expr]:
    """``expr == coeff * rest`` with ``coeff`` free of ``var``."""
    coeff, rest = expr.as_independent(var, as_Add=False)
    return coeff, rest


def as_polynomial(expr: sp.Expr, var: sp.Symbol) -> Optional[sp.Poly]:
    if not expr.is_polynomial(var):
        return None
    return sp.Poly(expr, var)


def linear_coefficients(expr: sp.Expr, var: sp.Symbol) -> Optional[Tuple[sp.Expr, sp.Expr]]:
    """``(a, b)`` with ``expr == a*var + b`` and ``a != 0``, else None."""
    poly = as_polynomial(expr, var)
    if poly is None or poly.degree() != 1:
        return None
    a, b = poly.all_coeffs()
    return a, b


def as_rational_function(expr: sp.Expr, var: sp.Symbol) -> Optional[Tuple[sp.Expr, sp.Expr]]:
    """``(P, Q)`` polynomials in ``var`` with ``expr == P/Q``, or None."""
    num, den = sp.fraction(sp.cancel(sp.together(expr)))
    if not (num.is_polynomial(var) and den.is_polynomial(var)):
        return None
    return sp.expand(num), sp.expand(den)


def long_division(p: sp.Expr, q: sp.Expr, var: sp.Symbol) -> Tuple[sp.Expr, sp.Expr]:
    quotient, remainder = sp.div(p, q, var)
    return quotient, remainder


def square_free_decomposition(p: sp.Expr, var: sp.Symbol) -> Tuple[sp.Expr, List[Tuple[sp.Expr, int]]]:
    coeff, factors = sp.sqf_list(p, var)
    return coeff, [(factor, multiplicity) for factor, multiplicity in factors]


def polynomial_gcd(p: sp.Expr, q: sp.Expr, var: sp.Symbol) -> sp.Expr:
    return sp.gcd(p, q, var)


def resultant(p: sp.Expr, q: sp.Expr, var: sp.Symbol) -> sp.Expr:
    return sp.resultant(p, q, var)


def log_abs(arg: sp.Expr) -> sp.Expr:
    """``ln|arg|``; the absolute value folds away when ``arg`` is known positive."""
    if arg.has(sp.I):
        return sp.log(arg)
    return sp.log(sp.Abs(arg))


def strip_abs(expr: sp.Expr) -> sp.Expr:
    return expr.replace(sp.Abs, lambda arg: arg)


def verify_antiderivative(antiderivative: sp.Expr, integrand: sp.Expr, var: sp.Symbol) -> bool:
    """
    Back-check by differentiating.

    ``ln|g|`` is differentiated as ``ln g``: both have derivative ``g'/g``
    wherever ``g != 0``.
    """
    derivative = sp.diff(strip_abs(antiderivative), var)
    residual = sp.simplify(derivative - integrand)
    if residual == 0:
        return True
    residual = sp.simplify(sp.expand(residual.rewrite(sp.exp)))
    if residual == 0:
        return True
    return sp.simplify(sp.trigsimp(sp.expand_trig(residual))) == 0
