"""Tests for rational function integration."""

import sympy as sp

from indefinite.rational import integrate_rational_function, partial_fractions

x = sp.Symbol('x')


def integrate_fraction(expr):
    num, den = sp.fraction(sp.together(expr))
    return integrate_rational_function(num, den, x)


class TestPartialFractions:
    """Tests for partial_fractions()."""

    def test_distinct_linear_factors(self):
        terms = partial_fractions(sp.Integer(1), x**2 - 1, x)
        found = {(monic, numerator) for _, monic, j, numerator in terms}
        assert found == {(x - 1, sp.Rational(1, 2)), (x + 1, sp.Rational(-1, 2))}

    def test_repeated_linear_factor(self):
        terms = partial_fractions(x, (x - 1)**2, x)
        found = {(j, numerator) for _, _, j, numerator in terms}
        assert found == {(1, sp.Integer(1)), (2, sp.Integer(1))}

    def test_quadratic_numerator(self):
        terms = partial_fractions(2 * x + 3, (x**2 + 1)**2, x)
        found = {(j, numerator) for _, _, j, numerator in terms}
        assert found == {(1, sp.Integer(0)), (2, 2 * x + 3)}

    def test_cubic_factor_declines(self):
        assert partial_fractions(sp.Integer(1), x**3 + x + 1, x) is None


class TestLinearDenominators:
    """Logarithms and negative powers from linear factors."""

    def test_difference_of_squares(self, check):
        result = integrate_fraction(1 / (x**2 - 1))
        assert result is not None
        assert not result.has(sp.atan)
        assert check(result, 1 / (x**2 - 1), x)

    def test_non_monic_factor(self, check):
        result = integrate_fraction(1 / ((2 * x + 1) * (x - 3)))
        assert check(result, 1 / ((2 * x + 1) * (x - 3)), x)

    def test_cube_of_linear_factor(self):
        result = integrate_fraction(1 / (x - 1)**3)
        assert sp.simplify(result + 1 / (2 * (x - 1)**2)) == 0

    def test_polynomial_part(self, check):
        integrand = (x**3 + 2) / (x - 1)
        result = integrate_fraction(integrand)
        assert check(result, integrand, x)


class TestQuadraticDenominators:
    """The three cases of the discriminant."""

    def test_negative_discriminant_gives_arctangent(self):
        result = integrate_fraction(1 / (x**2 + 2 * x + 5))
        assert result.has(sp.atan)
        assert sp.simplify(result - sp.atan((x + 1) / 2) / 2) == 0

    def test_log_and_arctangent(self, check):
        integrand = (3 * x + 1) / (x**2 + x + 1)
        result = integrate_fraction(integrand)
        assert result.has(sp.atan) and result.has(sp.log)
        assert check(result, integrand, x)

    def test_repeated_irreducible_quadratic(self, check):
        integrand = (2 * x + 3) / (x**2 + 1)**2
        result = integrate_fraction(integrand)
        assert check(result, integrand, x)

    def test_positive_discriminant_gives_logarithms(self, check):
        result = integrate_fraction(1 / (x**2 - 2))
        assert result is not None
        assert not result.has(sp.atan)
        assert check(result, 1 / (x**2 - 2), x)

    def test_repeated_real_quadratic_declines(self):
        assert integrate_fraction(1 / (x**2 - 2)**2) is None

    def test_undetermined_discriminant_declines(self):
        a = sp.Symbol('a')
        assert integrate_rational_function(sp.Integer(1), x**2 + a, x) is None

    def test_positive_parameter(self):
        a = sp.Symbol('a', positive=True)
        result = integrate_rational_function(sp.Integer(1), x**2 + a, x)
        assert result.has(sp.atan)
        assert sp.simplify(sp.diff(result, x) - 1 / (x**2 + a)) == 0

    def test_cubic_denominator_declines(self):
        assert integrate_fraction(1 / (x**3 + x + 1)) is None
