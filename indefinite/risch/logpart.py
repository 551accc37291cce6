"""Logarithmic part of a simple fraction (Rothstein-Trager resultant)."""

import logging
from dataclasses import dataclass
from typing import List, Optional

import sympy as sp

from ..algebra import polynomial_gcd, resultant
from ..errors import NonElementaryIntegral
from .hermite import Derivation

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LogarithmicPartTerm:
    """One ``coefficient * ln(argument)`` summand."""
    coefficient: sp.Expr
    argument: sp.Expr

    def as_expr(self) -> sp.Expr:
        return self.coefficient * sp.log(self.argument)


def logarithmic_part(a: sp.Poly, d: sp.Poly, derivation: Derivation, var: sp.Symbol) -> Optional[List[LogarithmicPartTerm]]:
    """
    Integrate ``a/d`` (``d`` squarefree and normal, ``deg(a) < deg(d)``).

    The residues are the roots of ``R(z) = res_t(d, a - z*D(d))``. A residue
    depending on ``var`` proves the integral is not elementary. Returns None
    when the roots cannot be written down explicitly.
    """
    if a.is_zero:
        return []
    t = d.gen
    z = sp.Dummy('z')
    d_expr = d.as_expr()
    a_expr = a.as_expr()
    dd_expr = derivation(d).as_expr()

    R = resultant(d_expr, sp.expand(a_expr - z * dd_expr), t)
    R = sp.numer(sp.together(R))
    R_poly = sp.Poly(R, z, field=True)
    if R_poly.degree() < 1:
        return []
    R_poly = R_poly.monic()
    coeffs = [sp.cancel(coeff) for coeff in R_poly.all_coeffs()]
    if any(coeff.has(var) for coeff in coeffs):
        raise NonElementaryIntegral(
            f"residues of the logarithmic part depend on {var}: "
            f"{sp.Poly(coeffs, z).as_expr()} = 0"
        )

    monic = sp.Poly(coeffs, z)
    roots = sp.roots(monic)
    if sum(roots.values()) < monic.degree():
        logger.debug("risch: residue polynomial %s has no explicit roots", monic.as_expr())
        return None

    terms = []
    for root in sp.ordered(roots.keys()):
        argument = polynomial_gcd(d_expr, sp.expand(a_expr - root * dd_expr), t)
        if not argument.has(t):
            continue
        terms.append(LogarithmicPartTerm(root, argument))
    return terms
