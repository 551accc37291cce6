"""
Risch decision procedure for exponential and logarithmic towers.

The procedure runs as a fixed sequence of phases::

    BUILD_TOWER -> EXPRESS_AS_RATIONAL -> HERMITE_REDUCE
                -> SOLVE_LOGARITHMIC_PART -> BACK_SUBSTITUTE

Each phase may decline (the integrand is outside what is implemented) or
prove that no elementary antiderivative exists, which is signalled by
raising :class:`~indefinite.errors.NonElementaryIntegral`.

Integration is implemented for towers of height one over ``Q(x)``; taller
towers are declined.
"""

import enum
import logging
from typing import Dict, Optional, Tuple

import sympy as sp

from ..algebra import real_stand_in
from ..errors import NonElementaryIntegral
from ..rational import integrate_rational_function
from .hermite import hermite_reduce
from .logpart import LogarithmicPartTerm, logarithmic_part
from .rde import solve_rde
from .tower import DifferentialExtensionTower, Exponential, Logarithmic, TowerBuilder

logger = logging.getLogger(__name__)

__all__ = [
    "RischPhase",
    "RischIntegrator",
    "integrate_risch",
    "DifferentialExtensionTower",
    "Exponential",
    "Logarithmic",
    "LogarithmicPartTerm",
    "TowerBuilder",
]


class RischPhase(enum.Enum):
    BUILD_TOWER = "build tower"
    EXPRESS_AS_RATIONAL = "express as rational"
    HERMITE_REDUCE = "Hermite reduce"
    SOLVE_LOGARITHMIC_PART = "solve logarithmic part"
    BACK_SUBSTITUTE = "back-substitute"


def _integrate_in_base_field(expr: sp.Expr, var: sp.Symbol) -> Optional[sp.Expr]:
    if expr == 0:
        return sp.S.Zero
    num, den = sp.fraction(sp.cancel(sp.together(expr)))
    return integrate_rational_function(sp.expand(num), sp.expand(den), var)


def _is_zero(expr: sp.Expr) -> bool:
    if sp.simplify(expr) == 0:
        return True
    return sp.simplify(sp.expand(expr.rewrite(sp.exp))) == 0


def _hermite_split(expr: sp.Expr, var: sp.Symbol) -> Tuple[sp.Expr, sp.Expr, sp.Expr]:
    """``expr = D(g) + polynomial + simple`` over ``Q(x)``."""
    num, den = sp.fraction(sp.cancel(sp.together(expr)))
    num = sp.Poly(num, var, field=True)
    den = sp.Poly(den, var, field=True)
    quotient, remainder = num.div(den)
    g, a_h, d_h = hermite_reduce(remainder, den, lambda p: p.diff(var))
    q_h, r_h = a_h.div(d_h)
    return g, (quotient + q_h).as_expr(), sp.cancel(r_h.as_expr() / d_h.as_expr())


def limited_integrate(a: sp.Expr, w: sp.Expr, var: sp.Symbol) -> Tuple[sp.Expr, sp.Expr]:
    """
    ``(b, c)`` with ``a = b' + c*w``, ``b`` in ``Q(x)`` and ``c`` constant.

    Raises :class:`NonElementaryIntegral` when no such pair exists.
    """
    g_a, poly_a, simple_a = _hermite_split(a, var)
    g_w, poly_w, simple_w = _hermite_split(w, var)
    if simple_a == 0:
        c = sp.S.Zero
    elif simple_w == 0:
        raise NonElementaryIntegral(f"{a} is not a derivative plus a multiple of {w}")
    else:
        c = sp.cancel(simple_a / simple_w)
        if c.has(var):
            raise NonElementaryIntegral(f"{a} is not a derivative plus a constant multiple of {w}")
    polynomial = sp.expand(poly_a - c * poly_w)
    b = g_a - c * g_w
    if polynomial != 0:
        b += sp.Poly(polynomial, var).integrate().as_expr()
    return b, c


class RischIntegrator:
    """One attempt of the Risch procedure on one integrand."""

    def __init__(self, expr: sp.Expr, var: sp.Symbol, ctx=None):
        self.expr = expr
        self.var = var
        self.ctx = ctx
        self.phase = RischPhase.BUILD_TOWER
        self.tower: Optional[DifferentialExtensionTower] = None

    def _enter(self, phase: RischPhase) -> None:
        self.phase = phase
        logger.debug("risch: %s", phase.value)
        if self.ctx is not None:
            self.ctx.check_cancelled()

    def _note(self, description: str) -> None:
        if self.ctx is not None:
            self.ctx.note("risch", description)

    def _token(self):
        return self.ctx.token if self.ctx is not None else None

    def _poly(self, expr: sp.Expr) -> sp.Poly:
        return sp.Poly(expr, self.tower.extensions[-1].symbol, field=True)

    def _derivation(self, p: sp.Poly) -> sp.Poly:
        return self._poly(sp.expand(self.tower.derivation(p.as_expr())))

    def run(self) -> Optional[sp.Expr]:
        self._enter(RischPhase.BUILD_TOWER)
        self.tower = TowerBuilder(self.var).build(self.expr)
        if self.tower is None or self.tower.height == 0:
            return None
        if self.tower.height > 1:
            logger.debug("risch: tower of height %d not supported", self.tower.height)
            return None
        ext = self.tower.extensions[0]
        kind = "exp" if isinstance(ext, Exponential) else "ln"
        source = ext.generator if isinstance(ext, Exponential) else ext.argument
        self._note(rf"\text{{Adjoin }} t = \{kind}\left({sp.latex(source)}\right),\ Dt = {sp.latex(ext.derivative.xreplace({ext.symbol: sp.Symbol('t')}))}")

        self._enter(RischPhase.EXPRESS_AS_RATIONAL)
        num, den = sp.fraction(sp.cancel(self.tower.integrand))
        a, d = self._poly(num), self._poly(den)
        if isinstance(ext, Exponential):
            normal_num, normal_den = self._split_special(a, d)
        else:
            _, normal_num = a.div(d)
            normal_den = d

        self._enter(RischPhase.HERMITE_REDUCE)
        g, a_h, d_h = hermite_reduce(normal_num, normal_den, self._derivation)
        _, r_h = a_h.div(d_h)
        if g != 0:
            self._note(rf"\text{{Hermite reduction, rational part: }} {sp.latex(g.xreplace({ext.symbol: ext.value}))}")

        self._enter(RischPhase.SOLVE_LOGARITHMIC_PART)
        terms = logarithmic_part(r_h, d_h, self._derivation, self.var)
        if terms is None:
            return None
        log_part = sp.Add(*[term.as_expr() for term in terms])
        if terms:
            self._note(rf"\text{{Logarithmic part: }} {sp.latex(log_part.xreplace({ext.symbol: ext.value}))}")

        remainder = sp.cancel(self.tower.integrand - self.tower.derivation(g + log_part))
        if isinstance(ext, Exponential):
            rest = self._integrate_laurent(remainder, ext)
        else:
            rest = self._integrate_primitive(remainder, ext)
        if rest is None:
            return None

        self._enter(RischPhase.BACK_SUBSTITUTE)
        return self._back_substitute(g + log_part + rest)

    def _split_special(self, a: sp.Poly, d: sp.Poly) -> Tuple[sp.Poly, sp.Poly]:
        """Normal part of ``a/d`` after removing the Laurent polynomial in ``t``."""
        t = d.gen
        m = min(monom[0] for monom in d.monoms())
        special = self._poly(t**m)
        normal_den = d.exquo(special)
        _, r = a.div(d)
        s, _, _ = special.gcdex(normal_den)
        normal_num = (r * s).rem(normal_den)
        return normal_num, normal_den

    def _laurent_coefficients(self, expr: sp.Expr, t: sp.Symbol) -> Optional[Dict[int, sp.Expr]]:
        num, den = sp.fraction(sp.cancel(sp.together(expr)))
        den_poly = sp.Poly(den, t)
        if len(den_poly.terms()) != 1:
            logger.debug("risch: remainder %s is not a Laurent polynomial", expr)
            return None
        shift = den_poly.degree()
        scale = den_poly.LC()
        coefficients = {}
        for (power,), coeff in sp.Poly(num, t).terms():
            coefficients[power - shift] = sp.cancel(coeff / scale)
        return coefficients

    def _integrate_laurent(self, expr: sp.Expr, ext: Exponential) -> Optional[sp.Expr]:
        coefficients = self._laurent_coefficients(expr, ext.symbol)
        if coefficients is None:
            return None
        generator_prime = sp.diff(ext.generator, self.var)
        result = sp.S.Zero
        for k in sorted(coefficients):
            b_k = coefficients[k]
            if k == 0:
                y = _integrate_in_base_field(b_k, self.var)
                if y is None:
                    return None
                result += y
                continue
            y = solve_rde(k * generator_prime, b_k, self.var, self._token())
            if y is None:
                return None
            self._note(rf"\text{{Solve }} y' + {sp.latex(k * generator_prime)} y = {sp.latex(b_k)}:\ y = {sp.latex(y)}")
            result += y * ext.symbol**k
        return result

    def _integrate_primitive(self, expr: sp.Expr, ext: Logarithmic) -> Optional[sp.Expr]:
        t = ext.symbol
        num, den = sp.fraction(sp.cancel(sp.together(expr)))
        if den.has(t):
            logger.debug("risch: remainder %s is not a polynomial in %s", expr, t)
            return None
        p = sp.Poly(sp.expand(num / den), t)
        result = sp.S.Zero
        while not p.is_zero:
            if self.ctx is not None:
                self.ctx.check_cancelled()
            m = p.degree()
            lead = sp.cancel(p.LC())
            if m == 0:
                y = _integrate_in_base_field(lead, self.var)
                if y is None:
                    return None
                return result + y
            b, c = limited_integrate(lead, ext.derivative, self.var)
            step = c * t**(m + 1) / (m + 1) + b * t**m
            result += step
            p = sp.Poly(sp.expand(sp.cancel(p.as_expr() - self.tower.derivation(step))), t)
            if not p.is_zero and p.degree() >= m:
                logger.debug("risch: primitive reduction made no progress at degree %d", m)
                return None
        return result

    def _back_substitute(self, result: sp.Expr) -> Optional[sp.Expr]:
        result = sp.simplify(self.tower.back_substitute(result))
        if result.has(sp.I) and not self.expr.has(sp.I):
            result = sp.simplify(sp.expand(result.rewrite(sp.cos)))
            if result.has(sp.I):
                return self._real_part(result)
        return result

    def _real_part(self, result: sp.Expr) -> Optional[sp.Expr]:
        """
        Real part of a complex antiderivative of a real integrand.

        The imaginary part must be constant in ``var``; it is then only an
        integration constant and is dropped.
        """
        real = real_stand_in(self.var)
        real_part, imaginary_part = result.xreplace({self.var: real}).as_real_imag()
        imaginary_part = sp.simplify(imaginary_part)
        if imaginary_part.has(real) and not _is_zero(sp.diff(imaginary_part, real)):
            logger.debug("risch: could not remove i from %s", result)
            return None
        real_part = sp.simplify(real_part.rewrite(sp.atan2))
        if real_part.has(sp.I, sp.re, sp.im):
            logger.debug("risch: real part of %s is not explicit", result)
            return None
        self._note(rf"\text{{Drop the constant imaginary part }} {sp.latex(imaginary_part)}")
        return real_part.xreplace({real: self.var})


def integrate_risch(expr: sp.Expr, var: sp.Symbol, ctx) -> Optional[sp.Expr]:
    ctx.check_cancelled()
    result = RischIntegrator(expr, var, ctx).run()
    if result is not None:
        logger.debug("risch: %s integrated to %s", expr, result)
    return result
