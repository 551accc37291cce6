"""Shared fixtures for the integration tests."""

import pytest
import sympy as sp

from indefinite.algebra import strip_abs, verify_antiderivative
from indefinite.context import CancellationToken, IntegrationContext, RecursionBudget
from indefinite.dispatcher import dispatch
from indefinite.options import IntegrationOptions
from indefinite.result import IntegrationTrace

SAMPLE_POINTS = (sp.Rational(3, 10), sp.Rational(9, 20), sp.Rational(7, 10))


def is_antiderivative(antiderivative, integrand, var, tolerance=1e-9):
    """Symbolic check first, then the derivative sampled at a few points."""
    if verify_antiderivative(antiderivative, integrand, var):
        return True
    difference = sp.diff(strip_abs(antiderivative), var) - integrand
    for point in SAMPLE_POINTS:
        value = complex(difference.subs(var, point).evalf(30))
        if abs(value) > tolerance:
            return False
    return True


@pytest.fixture
def check():
    return is_antiderivative


@pytest.fixture
def ctx():
    options = IntegrationOptions()
    return IntegrationContext(
        options,
        RecursionBudget(options.max_depth, options.max_dispatches),
        CancellationToken(),
        IntegrationTrace(),
        dispatch,
    )
