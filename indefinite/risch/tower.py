"""
Differential extension towers over ``Q(x)``.

A tower adjoins exponentials ``t = exp(g)`` (``Dt = g' t``) and logarithms
``t = ln(a)`` (``Dt = a'/a``) one at a time, innermost first, until the
integrand is a rational function of ``x`` and the tower symbols.
"""

import logging
from dataclasses import dataclass
from functools import reduce
from typing import Dict, List, Optional, Tuple, Union

import sympy as sp

logger = logging.getLogger(__name__)

_TO_EXP = (
    sp.sin, sp.cos, sp.tan, sp.cot, sp.sec, sp.csc,
    sp.sinh, sp.cosh, sp.tanh, sp.coth, sp.sech, sp.csch,
)


@dataclass(frozen=True)
class Exponential:
    symbol: sp.Symbol
    generator: sp.Expr
    derivative: sp.Expr
    value: sp.Expr


@dataclass(frozen=True)
class Logarithmic:
    symbol: sp.Symbol
    argument: sp.Expr
    derivative: sp.Expr
    value: sp.Expr


Extension = Union[Exponential, Logarithmic]


@dataclass(frozen=True)
class DifferentialExtensionTower:
    var: sp.Symbol
    extensions: Tuple[Extension, ...]
    integrand: sp.Expr

    @property
    def height(self) -> int:
        return len(self.extensions)

    @property
    def symbols(self) -> Tuple[sp.Symbol, ...]:
        return tuple(ext.symbol for ext in self.extensions)

    def derivation(self, expr: sp.Expr) -> sp.Expr:
        return derive(expr, self.var, self.extensions)

    def back_substitute(self, expr: sp.Expr) -> sp.Expr:
        """Replace tower symbols by what they stand for, innermost to outermost."""
        for ext in self.extensions:
            expr = expr.xreplace({ext.symbol: ext.value})
        return expr


def derive(expr: sp.Expr, var: sp.Symbol, extensions) -> sp.Expr:
    """Total derivation ``d/dx + sum(Dt_i * d/dt_i)``."""
    result = sp.diff(expr, var)
    for ext in extensions:
        result += sp.diff(expr, ext.symbol) * ext.derivative
    return result


def normalize(expr: sp.Expr, var: sp.Symbol) -> sp.Expr:
    """Rewrite everything exponential-like as ``exp`` and expand logarithms."""
    expr = expr.rewrite(list(_TO_EXP), sp.exp)
    expr = expr.replace(
        lambda e: e.is_Pow and not e.base.has(var) and e.exp.has(var) and e.base != sp.E,
        lambda e: sp.exp(e.exp * sp.log(e.base)),
    )
    expr = sp.expand_log(expr, force=True)
    expr = expr.replace(
        lambda e: isinstance(e, sp.exp) and e.args[0].is_Add and e.args[0].as_independent(var)[0] != 0,
        lambda e: sp.exp(e.args[0].as_independent(var)[0]) * sp.exp(e.args[0].as_independent(var)[1]),
    )
    return expr


def _rational_gcd(values: List[sp.Rational]) -> sp.Rational:
    numerator = reduce(sp.igcd, [v.p for v in values])
    denominator = reduce(sp.ilcm, [v.q for v in values])
    return sp.Rational(numerator, denominator)


def _rational_ratio(a: sp.Expr, b: sp.Expr) -> Optional[sp.Rational]:
    ratio = sp.cancel(a / b)
    if ratio.is_Rational and ratio != 0:
        return ratio
    return None


class TowerBuilder:
    """Build a :class:`DifferentialExtensionTower` for one integrand."""

    def __init__(self, var: sp.Symbol):
        self.var = var
        self.extensions: List[Extension] = []
        self._values: Dict[sp.Symbol, sp.Expr] = {}

    def _dependent(self, expr: sp.Expr) -> bool:
        return expr.has(self.var, *[ext.symbol for ext in self.extensions])

    def _innermost(self, expr: sp.Expr) -> List[sp.Expr]:
        found = []
        for f in expr.atoms(sp.exp, sp.log):
            if not self._dependent(f):
                continue
            if any(self._dependent(inner) for inner in f.args[0].atoms(sp.exp, sp.log)):
                continue
            found.append(f)
        return sorted(found, key=lambda f: (sp.count_ops(f), sp.default_sort_key(f)))

    def _resolve(self, expr: sp.Expr) -> sp.Expr:
        for ext in self.extensions:
            expr = expr.xreplace({ext.symbol: ext.value})
        return expr

    def _new_symbol(self) -> sp.Symbol:
        return sp.Dummy(f"t{len(self.extensions)}")

    def _absorb_exp(self, arg: sp.Expr, pending: List[sp.Expr]) -> Optional[sp.Expr]:
        for ext in self.extensions:
            if isinstance(ext, Exponential):
                ratio = _rational_ratio(arg, ext.generator)
                if ratio is None:
                    continue
                if not ratio.is_Integer:
                    logger.debug("risch: exp(%s) would rebase exp(%s)", arg, ext.generator)
                    return None
                return ext.symbol**ratio

        ratios = [sp.Integer(1)]
        for other in pending:
            ratio = _rational_ratio(other, arg)
            if ratio is not None:
                ratios.append(ratio)
        base = _rational_gcd(ratios)
        generator = sp.expand(arg * base)
        t = self._new_symbol()
        derivative = sp.expand(derive(generator, self.var, self.extensions)) * t
        ext = Exponential(t, generator, derivative, sp.exp(self._resolve(generator)))
        self.extensions.append(ext)
        logger.debug("risch: adjoined %s = exp(%s)", t, generator)
        return t**(1 / base)

    def _absorb_log(self, arg: sp.Expr) -> Optional[sp.Expr]:
        for ext in self.extensions:
            if isinstance(ext, Logarithmic) and sp.cancel(ext.argument - arg) == 0:
                return ext.symbol
        base, exponent = arg.as_base_exp()
        for ext in self.extensions:
            if isinstance(ext, Exponential) and base == ext.symbol:
                return exponent * ext.generator
        t = self._new_symbol()
        derivative = sp.cancel(derive(arg, self.var, self.extensions) / arg)
        ext = Logarithmic(t, arg, derivative, sp.log(self._resolve(arg)))
        self.extensions.append(ext)
        logger.debug("risch: adjoined %s = log(%s)", t, arg)
        return t

    def build(self, expr: sp.Expr) -> Optional[DifferentialExtensionTower]:
        current = normalize(expr, self.var)
        while True:
            candidates = self._innermost(current)
            if not candidates:
                break
            pick = candidates[0]
            if isinstance(pick, sp.exp):
                pending = [f.args[0] for f in candidates[1:] if isinstance(f, sp.exp)]
                replacement = self._absorb_exp(pick.args[0], pending)
            else:
                replacement = self._absorb_log(pick.args[0])
            if replacement is None:
                return None
            current = current.xreplace({pick: replacement})

        num, den = sp.fraction(sp.cancel(sp.together(current)))
        gens = (self.var,) + tuple(ext.symbol for ext in self.extensions)
        if not (num.is_polynomial(*gens) and den.is_polynomial(*gens)):
            logger.debug("risch: %s is not rational over the tower", current)
            return None
        return DifferentialExtensionTower(self.var, tuple(self.extensions), num / den)
