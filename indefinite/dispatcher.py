"""
Strategy dispatcher and the public :func:`integrate` entry point.

Techniques are plain functions ``(expr, var, ctx) -> Optional[Expr]`` tried
in a fixed order; the first one that returns an expression wins. Returning
None is a decline. Only the Risch technique may raise
:class:`~indefinite.errors.NonElementaryIntegral`.
"""

import logging
from typing import Callable, Optional, Tuple, Union

import sympy as sp
from sympy.polys.polyerrors import BasePolynomialError

from .algebra import real_stand_in, verify_antiderivative
from .basic import integrate_linear
from .by_parts import integrate_by_parts
from .context import IntegrationContext, RecursionBudget
from .errors import IntegrationCancelled, NonElementaryIntegral
from .options import IntegrationOptions
from .rational import integrate_rational
from .result import ClosedForm, IntegrationResult, IntegrationTrace, NonElementary, SymbolicFallback
from .risch import integrate_risch
from .substitution import integrate_substitution
from .table import integrate_table
from .trigonometric import integrate_trigonometric

logger = logging.getLogger(__name__)

Technique = Callable[[sp.Expr, sp.Symbol, IntegrationContext], Optional[sp.Expr]]

TECHNIQUES: Tuple[Tuple[str, Technique], ...] = (
    ("table", integrate_table),
    ("rational", integrate_rational),
    ("linearity", integrate_linear),
    ("by_parts", integrate_by_parts),
    ("substitution", integrate_substitution),
    ("trigonometric", integrate_trigonometric),
    ("risch", integrate_risch),
)


def _fallback(expr: sp.Expr, var: sp.Symbol, reason: str, cancelled: bool = False) -> SymbolicFallback:
    return SymbolicFallback(sp.Integral(expr, var), cancelled=cancelled, reason=reason)


def _run_techniques(expr: sp.Expr, var: sp.Symbol, ctx: IntegrationContext) -> IntegrationResult:
    if not expr.has(var):
        return ClosedForm(expr * var, technique="constant")

    for name, technique in TECHNIQUES:
        if name in ctx.excluded:
            continue
        if name == "risch" and not ctx.options.risch:
            continue
        ctx.check_cancelled()
        mark = ctx.trace.mark()
        try:
            result = technique(expr, var, ctx)
        except NonElementaryIntegral as e:
            ctx.trace.rollback(mark)
            ctx.note(name, r"\text{No elementary antiderivative exists}")
            logger.debug("%s proved %s non-elementary: %s", name, expr, e.reason)
            return NonElementary(expr, var, e.reason)
        except (BasePolynomialError, NotImplementedError) as e:
            logger.debug("%s gave up on %s: %s", name, expr, e)
            result = None

        if result is None:
            ctx.trace.rollback(mark)
            continue
        logger.debug("%s integrated %s at depth %d", name, expr, ctx.depth)
        return ClosedForm(result, technique=name)

    return _fallback(expr, var, "no technique applies")


def dispatch(expr: sp.Expr, var: sp.Symbol, ctx: IntegrationContext) -> IntegrationResult:
    """Nested dispatch: consumes one level of the shared budget."""
    if ctx.budget.exhausted:
        logger.debug("budget exhausted before %s", expr)
        return _fallback(expr, var, "recursion budget exhausted")
    with ctx.budget.descend():
        return _run_techniques(expr, var, ctx)


def _restore(result: IntegrationResult, stand_in: sp.Symbol, expr: sp.Expr, var: sp.Symbol) -> IntegrationResult:
    if isinstance(result, ClosedForm):
        return ClosedForm(result.expr.xreplace({stand_in: var}), result.verified, result.technique)
    reason = result.reason
    if stand_in != var:
        reason = reason.replace(str(stand_in), str(var))
    if isinstance(result, NonElementary):
        return NonElementary(expr, var, reason)
    return SymbolicFallback(sp.Integral(expr, var), result.cancelled, reason)


def integrate(expr, var, options: Optional[IntegrationOptions] = None,
              trace: bool = False) -> Union[IntegrationResult, Tuple[IntegrationResult, IntegrationTrace]]:
    """
    Integrate ``expr`` with respect to ``var``.

    Args:
        expr: Integrand (anything :func:`sympy.sympify` accepts).
        var: Integration variable.
        options: Search limits and switches; defaults to
            :class:`IntegrationOptions()`.
        trace: Also return the :class:`IntegrationTrace` of the sub-steps.

    Returns:
        ``ClosedForm``, ``SymbolicFallback`` or ``NonElementary`` (and the
        trace when requested). Never raises once the input is parsed.

    Raises:
        SympifyError: ``expr`` or ``var`` cannot be parsed.
        TypeError: ``var`` is not a Symbol.

    Both are caller errors and are raised before any technique runs.

    Example:
        >>> x = sp.Symbol('x')
        >>> integrate(x**2, x)
        ClosedForm(expr=x**3/3, verified=True, technique='table')
    """
    options = options if options is not None else IntegrationOptions()
    expr = sp.sympify(expr)
    var = sp.sympify(var)
    if not isinstance(var, sp.Symbol):
        raise TypeError(f"integration variable must be a Symbol, got {var!r}")

    record = IntegrationTrace()
    stand_in = real_stand_in(var)
    work = expr.xreplace({var: stand_in})
    budget = RecursionBudget(options.max_depth, options.max_dispatches)
    ctx = IntegrationContext(options, budget, options.make_token(), record, dispatch)

    try:
        result = _run_techniques(work, stand_in, ctx)
        if isinstance(result, ClosedForm) and options.verify:
            verified = verify_antiderivative(result.expr, work, stand_in)
            if not verified:
                logger.debug("closed form %s for %s did not verify", result.expr, expr)
            result = ClosedForm(result.expr, verified, result.technique)
    except IntegrationCancelled as e:
        logger.debug("integration of %s cancelled: %s", expr, e)
        record.rollback(0)
        result = _fallback(work, stand_in, str(e), cancelled=True)
    except Exception as e:
        logger.warning("integration of %s failed unexpectedly: %s", expr, e, exc_info=True)
        record.rollback(0)
        result = _fallback(work, stand_in, f"internal error: {e}")

    result = _restore(result, stand_in, expr, var)
    if isinstance(result, ClosedForm):
        record.method = result.technique
    elif isinstance(result, NonElementary):
        record.method = "risch"
    logger.debug("integrate(%s, %s) -> %s after %d dispatches", expr, var, type(result).__name__, budget.dispatches)
    if trace:
        return result, record
    return result
