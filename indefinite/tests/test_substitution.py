"""Tests for u-substitution."""

import sympy as sp

from indefinite import ClosedForm, integrate
from indefinite.substitution import substitution_candidates

x = sp.Symbol('x')


class TestCandidates:
    """Tests for substitution_candidates()."""

    def test_largest_first(self):
        candidates = substitution_candidates(sp.exp(x) / (sp.exp(x) + 1), x)
        assert candidates == [sp.exp(x) + 1, sp.exp(x)]

    def test_variable_itself_excluded(self):
        candidates = substitution_candidates(x * sp.cos(x**2), x)
        assert x not in candidates
        assert x**2 in candidates

    def test_constant_free_of_variable_excluded(self):
        assert substitution_candidates(sp.sin(sp.Integer(2)) * x, x) == []

    def test_square_root_of_even_power_offered(self):
        candidates = substitution_candidates(x / (x**4 + 1), x)
        assert x**2 in candidates
        assert candidates.index(x**4 + 1) < candidates.index(x**2)


class TestIntegrateSubstitution:
    """Substitution integrals through the dispatcher."""

    def test_logarithmic_derivative(self):
        result = integrate(sp.exp(x) / (sp.exp(x) + 1), x)
        assert isinstance(result, ClosedForm)
        assert result.technique == "substitution"
        assert result.expr == sp.log(sp.exp(x) + 1)

    def test_power_of_sine(self):
        result = integrate(sp.sin(x)**3 * sp.cos(x), x)
        assert result.technique == "substitution"
        assert result.expr == sp.sin(x)**4 / 4

    def test_chain_rule_factor(self):
        result = integrate(x * sp.cos(x**2), x)
        assert result.expr == sp.sin(x**2) / 2
        assert result.verified

    def test_gaussian_derivative(self, check):
        result = integrate(x * sp.exp(x**2), x)
        assert result.technique == "substitution"
        assert check(result.expr, x * sp.exp(x**2), x)

    def test_logarithm_over_variable_power(self, check):
        integrand = sp.log(x)**3 / x
        result = integrate(integrand, x)
        assert isinstance(result, ClosedForm)
        assert check(result.expr, integrand, x)

    def test_even_power_substitution(self, check):
        integrand = x / (x**4 + 1)
        result = integrate(integrand, x)
        assert result.technique == "substitution"
        assert check(result.expr, integrand, x)

    def test_trace_records_substitution(self):
        _, trace = integrate(x * sp.cos(x**2), x, trace=True)
        assert trace.method == "substitution"
        assert "substitution" in trace.techniques()
