"""
Rational function integration by long division and partial fractions.

Denominator factors are taken over the rationals (with any parameters as
coefficients). Linear factors give logarithms and negative powers. An
irreducible quadratic ``x**2 + p*x + q`` with discriminant ``D = p**2 - 4*q``
is handled by the sign of ``D``:

* ``D < 0``: a logarithm plus an arctangent after completing the square;
  repeated powers use the reduction formula.
* ``D > 0``: split over the two real (irrational) roots into logarithms;
  only for multiplicity one.
* undetermined sign: decline.

Factors of higher degree are declined.
"""

import logging
from typing import List, Optional, Tuple

import sympy as sp

from .algebra import as_rational_function, log_abs, long_division

logger = logging.getLogger(__name__)


def _integrate_polynomial(poly_expr: sp.Expr, var: sp.Symbol) -> sp.Expr:
    if poly_expr == 0:
        return sp.S.Zero
    return sp.Poly(poly_expr, var).integrate().as_expr()


def _factor_denominator(den: sp.Expr, var: sp.Symbol) -> Optional[Tuple[sp.Expr, List[Tuple[sp.Expr, sp.Expr, int]]]]:
    """
    Split ``den`` into ``lead * prod(monic_i ** k_i)``.

    Returns ``(lead, [(original_factor, monic_factor, k), ...])`` or None when
    a factor has degree above two.
    """
    coeff, factors = sp.factor_list(den, var)
    lead = coeff
    result = []
    for factor, multiplicity in factors:
        poly = sp.Poly(factor, var)
        degree = poly.degree()
        if degree == 0:
            lead *= factor**multiplicity
            continue
        if degree > 2:
            logger.debug("rational: factor %s of degree %d not handled", factor, degree)
            return None
        lc = poly.LC()
        lead *= lc**multiplicity
        result.append((factor, sp.expand(factor / lc), multiplicity))
    return lead, result


def _quadratic_coefficients(monic: sp.Expr, var: sp.Symbol) -> Tuple[sp.Expr, sp.Expr]:
    _, p, q = sp.Poly(monic, var).all_coeffs()
    return p, q


def partial_fractions(num: sp.Expr, den: sp.Expr, var: sp.Symbol):
    """
    Decompose the proper fraction ``num/den`` by undetermined coefficients.

    Returns a list of ``(factor, monic, j, numerator)`` with the term
    ``numerator / monic**j``, or None.
    """
    factored = _factor_denominator(den, var)
    if factored is None:
        return None
    lead, factors = factored
    monic_den = sp.Mul(*[monic**k for _, monic, k in factors])

    unknowns = []
    terms = []
    for index, (factor, monic, multiplicity) in enumerate(factors):
        degree = sp.degree(monic, var)
        for j in range(1, multiplicity + 1):
            if degree == 1:
                A = sp.Dummy(f'A{index}_{j}')
                unknowns.append(A)
                terms.append((factor, monic, j, A))
            else:
                B, C = sp.Dummy(f'B{index}_{j}'), sp.Dummy(f'C{index}_{j}')
                unknowns.extend([B, C])
                terms.append((factor, monic, j, B * var + C))

    rhs = sp.S.Zero
    for _, monic, j, numerator in terms:
        rhs += numerator * sp.cancel(monic_den / monic**j)
    lhs = num / lead
    equations = sp.Poly(sp.expand(lhs - rhs), var).all_coeffs()
    solutions = sp.linsolve(equations, unknowns)
    if not solutions:
        return None
    solution = next(iter(solutions))
    if any(value.has(*unknowns) for value in solution):
        return None
    values = dict(zip(unknowns, solution))
    return [(factor, monic, j, sp.expand(numerator.xreplace(values)))
            for factor, monic, j, numerator in terms]


def _integrate_linear_term(factor, monic, j, numerator, var) -> sp.Expr:
    if numerator == 0:
        return sp.S.Zero
    if j == 1:
        return numerator * log_abs(factor)
    return numerator * monic**(1 - j) / (1 - j)


def _arctan_reduction(w: sp.Expr, s2: sp.Expr, j: int) -> sp.Expr:
    """Antiderivative of ``1/(w**2 + s2)**j`` with respect to ``w``."""
    s = sp.sqrt(s2)
    result = sp.atan(w / s) / s
    for k in range(2, j + 1):
        result = (w / (2 * s2 * (k - 1) * (w**2 + s2)**(k - 1))
                  + sp.Rational(2 * k - 3, 2 * (k - 1)) / s2 * result)
    return result


def _integrate_quadratic_term(monic, j, numerator, var, multiplicity) -> Optional[sp.Expr]:
    if numerator == 0:
        return sp.S.Zero
    p, q = _quadratic_coefficients(monic, var)
    B = numerator.coeff(var, 1)
    C = numerator.coeff(var, 0)
    discriminant = sp.simplify(p**2 - 4 * q)

    if discriminant.is_negative is True:
        # B*x + C = (B/2)(2x + p) + (C - B*p/2)
        log_part = B / 2
        atan_part = C - B * p / 2
        if j == 1:
            result = log_part * sp.log(monic)
        else:
            result = log_part * monic**(1 - j) / (1 - j)
        w = var + p / 2
        s2 = q - p**2 / 4
        return result + atan_part * _arctan_reduction(w, s2, j)

    if discriminant.is_positive is True:
        if multiplicity > 1:
            logger.debug("rational: repeated quadratic %s with real roots declined", monic)
            return None
        root = sp.sqrt(discriminant)
        r1 = (-p + root) / 2
        r2 = (-p - root) / 2
        a1 = (B * r1 + C) / (r1 - r2)
        a2 = (B * r2 + C) / (r2 - r1)
        return a1 * log_abs(var - r1) + a2 * log_abs(var - r2)

    logger.debug("rational: sign of discriminant %s undetermined", discriminant)
    return None


def integrate_rational_function(num: sp.Expr, den: sp.Expr, var: sp.Symbol, ctx=None) -> Optional[sp.Expr]:
    quotient, remainder = long_division(num, den, var)
    result = _integrate_polynomial(quotient, var)
    if remainder == 0:
        return result
    if ctx is not None:
        ctx.note("rational", rf"\text{{Divide: }} {sp.latex(quotient)} + \frac{{{sp.latex(remainder)}}}{{{sp.latex(den)}}}")

    decomposition = partial_fractions(remainder, den, var)
    if decomposition is None:
        return None
    if ctx is not None:
        pieces = sp.Add(*[numerator / monic**j for _, monic, j, numerator in decomposition])
        ctx.note("rational", rf"\text{{Partial fractions: }} {sp.latex(pieces)}")

    multiplicities = {}
    for _, monic, j, _ in decomposition:
        multiplicities[monic] = max(j, multiplicities.get(monic, 0))
    for factor, monic, j, numerator in decomposition:
        if sp.degree(monic, var) == 1:
            result += _integrate_linear_term(factor, monic, j, numerator, var)
        else:
            term = _integrate_quadratic_term(monic, j, numerator, var, multiplicities[monic])
            if term is None:
                return None
            result += term
    return result


def integrate_rational(expr: sp.Expr, var: sp.Symbol, ctx) -> Optional[sp.Expr]:
    parts = as_rational_function(expr, var)
    if parts is None:
        return None
    num, den = parts
    if not den.has(var):
        result = _integrate_polynomial(sp.expand(num / den), var)
        ctx.note("rational", rf"\text{{Integrate the polynomial termwise: }} {sp.latex(result)}")
        return result
    return integrate_rational_function(num, den, var, ctx)
