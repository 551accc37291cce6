"""Tests for the table of standard integrals."""

import pytest
import sympy as sp

from indefinite.table import RULES, X, lookup, match_rule

x = sp.Symbol('x')


class TestRuleSoundness:
    """Every rule's template differentiates back to its pattern."""

    @pytest.mark.parametrize("rule", RULES, ids=lambda rule: rule.name)
    def test_example_is_matched(self, rule):
        """The rule's own example instantiates the template."""
        assert rule.apply(rule.example) is not None

    @pytest.mark.parametrize("rule", RULES, ids=lambda rule: rule.name)
    def test_template_is_antiderivative(self, rule, check):
        """d/dX of the instantiated template equals the example."""
        result = rule.apply(rule.example)
        assert check(result, rule.example, X)

    def test_rule_names_unique(self):
        """Rule names identify rules in the trace."""
        names = [rule.name for rule in RULES]
        assert len(names) == len(set(names))


class TestLookup:
    """Tests for lookup() on integrands in an ordinary symbol."""

    def test_power(self):
        assert lookup(x**2, x) == x**3 / 3

    def test_reciprocal(self):
        assert lookup(1 / x, x) == sp.log(sp.Abs(x))

    def test_exponential_with_linear_argument(self):
        assert lookup(sp.exp(3 * x), x) == sp.exp(3 * x) / 3

    def test_constant_base(self):
        assert lookup(2**x, x) == 2**x / sp.log(2)

    def test_tangent(self):
        assert lookup(sp.tan(x), x) == -sp.log(sp.Abs(sp.cos(x)))

    def test_constant_multiple_pulled_out(self):
        """The constant factor is carried through unchanged."""
        assert lookup(5 * sp.sin(x), x) == -5 * sp.cos(x)

    def test_symbolic_coefficient(self):
        k = sp.Symbol('k', positive=True)
        assert sp.simplify(lookup(sp.cos(k * x), x) - sp.sin(k * x) / k) == 0

    def test_linear_times_exponential(self):
        assert sp.simplify(lookup(x * sp.exp(x), x) - (x - 1) * sp.exp(x)) == 0

    def test_arctangent_form(self, check):
        result = lookup(1 / (x**2 + 4), x)
        assert result.has(sp.atan)
        assert check(result, 1 / (x**2 + 4), x)

    def test_variable_free_integrand_declines(self):
        assert lookup(sp.Integer(3), x) is None

    def test_no_matching_form(self):
        assert lookup(sp.exp(x**2), x) is None
        assert lookup(x * sp.sin(x), x) is None


class TestRuleOrder:
    """The first matching rule in declared order wins."""

    def test_identity_before_power(self):
        rule, _ = match_rule(x, x)
        assert rule.name == "identity"

    def test_power_rule_name(self):
        rule, _ = match_rule(x**5, x)
        assert rule.name == "power"

    def test_reciprocal_not_power(self):
        """n = -1 is excluded from the power rule."""
        rule, _ = match_rule(1 / (2 * x + 1), x)
        assert rule.name == "reciprocal linear"

    def test_arcsine_needs_negative_square(self):
        rule, _ = match_rule(1 / sp.sqrt(4 - x**2), x)
        assert rule.name == "arcsine form"
        rule, _ = match_rule(1 / sp.sqrt(x**2 + 4), x)
        assert rule.name == "inverse hyperbolic form"
