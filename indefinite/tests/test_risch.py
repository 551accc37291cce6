"""Tests for the Risch subsystem: towers, Hermite reduction, RDE, logarithmic part."""

import pytest
import sympy as sp

from indefinite import ClosedForm, integrate
from indefinite.errors import NonElementaryIntegral
from indefinite.risch import RischIntegrator, RischPhase, limited_integrate
from indefinite.risch.hermite import hermite_reduce, solve_diophantine
from indefinite.risch.logpart import logarithmic_part
from indefinite.risch.rde import degree_bound, solve_rde
from indefinite.risch.tower import Exponential, Logarithmic, TowerBuilder

x = sp.Symbol('x')


def d_dx(p):
    return p.diff(x)


class TestTowerBuilder:
    """Tests for TowerBuilder.build()."""

    def test_single_exponential(self):
        tower = TowerBuilder(x).build(sp.exp(x**2))
        assert tower.height == 1
        ext = tower.extensions[0]
        assert isinstance(ext, Exponential)
        assert ext.generator == x**2
        assert sp.expand(ext.derivative - 2 * x * ext.symbol) == 0

    def test_integer_multiples_share_a_generator(self):
        tower = TowerBuilder(x).build(sp.exp(x) + sp.exp(2 * x))
        assert tower.height == 1
        t = tower.extensions[0].symbol
        assert sp.expand(tower.integrand - (t + t**2)) == 0

    def test_rational_multiples_rebase_the_generator(self):
        tower = TowerBuilder(x).build(sp.exp(x / 2) + sp.exp(x))
        assert tower.height == 1
        t = tower.extensions[0].symbol
        assert tower.extensions[0].generator == x / 2
        assert sp.expand(tower.integrand - (t + t**2)) == 0

    def test_logarithm(self):
        tower = TowerBuilder(x).build(sp.log(x) / x)
        ext = tower.extensions[0]
        assert isinstance(ext, Logarithmic)
        assert ext.derivative == 1 / x

    def test_trigonometric_becomes_exponential(self):
        tower = TowerBuilder(x).build(sp.sin(x))
        assert tower.height == 1
        assert isinstance(tower.extensions[0], Exponential)

    def test_mixed_tower(self):
        tower = TowerBuilder(x).build(sp.exp(x) * sp.log(x))
        assert tower.height == 2

    def test_back_substitute(self):
        tower = TowerBuilder(x).build(sp.exp(x**2))
        t = tower.extensions[0].symbol
        assert tower.back_substitute(x * t) == x * sp.exp(x**2)

    def test_algebraic_integrand_declines(self):
        assert TowerBuilder(x).build(sp.sqrt(x) * sp.exp(x)) is None

    def test_rational_integrand_has_empty_tower(self):
        tower = TowerBuilder(x).build(1 / (x + 1))
        assert tower.height == 0


class TestHermite:
    """Tests for solve_diophantine() and hermite_reduce()."""

    def test_diophantine(self):
        p = sp.Poly(x + 1, x, field=True)
        q = sp.Poly(x**2 + 1, x, field=True)
        c = sp.Poly(x, x, field=True)
        s, u = solve_diophantine(p, q, c)
        assert (s * p + u * q - c).is_zero
        assert s.degree() < q.degree()

    def test_diophantine_needs_coprime(self):
        p = sp.Poly(x - 1, x, field=True)
        q = sp.Poly(x**2 - 1, x, field=True)
        with pytest.raises(sp.PolynomialError):
            solve_diophantine(p, q, sp.Poly(1, x, field=True))

    def test_square(self):
        g, a, d = hermite_reduce(sp.Poly(1, x, field=True), sp.Poly(x**2, x, field=True), d_dx)
        assert sp.simplify(g + 1 / x) == 0
        assert a.is_zero

    def test_cube(self):
        g, a, d = hermite_reduce(sp.Poly(1, x, field=True), sp.Poly(x**3, x, field=True), d_dx)
        assert sp.simplify(g + 1 / (2 * x**2)) == 0
        assert a.is_zero

    def test_reduction_identity(self):
        """a/d == D(g) + a_h/d_h with d_h squarefree."""
        a = sp.Poly(x**2 + 3, x, field=True)
        d = sp.Poly(sp.expand((x - 1)**2 * (x + 2)**3), x, field=True)
        g, a_h, d_h = hermite_reduce(a, d, d_dx)
        lhs = a.as_expr() / d.as_expr()
        rhs = sp.diff(g, x) + a_h.as_expr() / d_h.as_expr()
        assert sp.cancel(lhs - rhs) == 0
        assert sp.degree(sp.gcd(d_h.as_expr(), d_h.diff(x).as_expr()), x) == 0


class TestLogarithmicPart:
    """Tests for the resultant-based logarithmic part."""

    def test_two_residues(self):
        terms = logarithmic_part(sp.Poly(1, x, field=True), sp.Poly(x**2 - 1, x, field=True), d_dx, x)
        found = {(term.coefficient, term.argument) for term in terms}
        assert found == {(sp.Rational(1, 2), x - 1), (sp.Rational(-1, 2), x + 1)}

    def test_zero_numerator(self):
        assert logarithmic_part(sp.Poly(0, x, field=True), sp.Poly(x, x, field=True), d_dx, x) == []


class TestRde:
    """Tests for solve_rde() and its degree bound."""

    def test_degree_bound(self):
        a = sp.Poly(1, x, field=True)
        b = sp.Poly(2 * x, x, field=True)
        c = sp.Poly(2 * x**2 + 1, x, field=True)
        assert degree_bound(a, b, c) == 1

    def test_polynomial_solution(self):
        y = solve_rde(2 * x, 2 * x**2 + 1, x)
        assert sp.simplify(y - x) == 0

    def test_rational_solution(self):
        y = solve_rde(sp.Integer(1), 1 / x - 1 / x**2, x)
        assert sp.simplify(y - 1 / x) == 0

    def test_zero_right_hand_side(self):
        assert solve_rde(2 * x, sp.Integer(0), x) == 0

    def test_no_solution(self):
        with pytest.raises(NonElementaryIntegral):
            solve_rde(2 * x, sp.Integer(1), x)

    def test_denominator_cannot_come_from_y(self):
        with pytest.raises(NonElementaryIntegral):
            solve_rde(sp.Integer(1), 1 / x, x)

    def test_cancellation_case_declines(self):
        assert solve_rde(sp.Integer(0), 2 * x, x) is None


class TestLimitedIntegrate:
    """Tests for limited_integrate()."""

    def test_derivative_plus_multiple(self):
        b, c = limited_integrate(1 + 3 / x, 1 / x, x)
        assert c == 3
        assert sp.simplify(b - x) == 0

    def test_not_a_multiple(self):
        with pytest.raises(NonElementaryIntegral):
            limited_integrate(1 / (x + 1), 1 / x, x)


class TestRischIntegrator:
    """End-to-end runs of the decision procedure."""

    def test_logarithmic_derivative_of_exponential(self, ctx, check):
        integrand = sp.exp(x) / (sp.exp(x) + 1)
        result = RischIntegrator(integrand, x, ctx).run()
        assert check(result, integrand, x)

    def test_rde_closed_form(self, ctx):
        result = RischIntegrator((1 + 2 * x**2) * sp.exp(x**2), x, ctx).run()
        assert sp.simplify(result - x * sp.exp(x**2)) == 0

    def test_polynomial_times_exponential(self, ctx, check):
        result = RischIntegrator(x**2 * sp.exp(x), x, ctx).run()
        assert check(result, x**2 * sp.exp(x), x)

    def test_nested_logarithm(self, ctx, check):
        result = RischIntegrator(1 / (x * sp.log(x)), x, ctx).run()
        assert check(result, 1 / (x * sp.log(x)), x)

    def test_logarithm_squared(self, ctx, check):
        result = RischIntegrator(sp.log(x)**2, x, ctx).run()
        assert check(result, sp.log(x)**2, x)

    def test_phase_reaches_back_substitution(self, ctx):
        integrator = RischIntegrator(x * sp.exp(x), x, ctx)
        assert integrator.run() is not None
        assert integrator.phase is RischPhase.BACK_SUBSTITUTE

    @pytest.mark.parametrize("integrand", [
        sp.exp(x**2),
        sp.exp(x) / x,
        sp.sin(x) / x,
        1 / sp.log(x),
    ], ids=["gaussian", "exponential integral", "sine integral", "logarithmic integral"])
    def test_non_elementary(self, ctx, integrand):
        with pytest.raises(NonElementaryIntegral):
            RischIntegrator(integrand, x, ctx).run()

    def test_tall_tower_declines(self, ctx):
        assert RischIntegrator(sp.exp(x) * sp.log(x), x, ctx).run() is None

    def test_algebraic_declines(self, ctx):
        assert RischIntegrator(sp.sqrt(x) * sp.exp(x), x, ctx).run() is None


class TestTrigonometricRational:
    """Rational functions of sin and cos, integrated over exp(i*x)."""

    @pytest.mark.parametrize("integrand", [
        sp.tan(x)**2,
        1 / (1 + sp.cos(x)),
        1 / (2 + sp.sin(x)),
        1 / (sp.sin(x) * sp.cos(x)),
    ], ids=["tan squared", "one plus cosine", "two plus sine", "sine cosine product"])
    def test_real_closed_form(self, integrand, check):
        result = integrate(integrand, x)
        assert isinstance(result, ClosedForm)
        assert not result.expr.has(sp.I)
        assert check(result.expr, integrand, x)

    def test_constant_imaginary_part_is_dropped(self, ctx):
        x_real = sp.Symbol('x', real=True)
        integrator = RischIntegrator(1 / (1 + sp.cos(x_real)), x_real, ctx)
        assert integrator._real_part(2 * sp.I / (sp.exp(sp.I * x_real) + 1)) is not None
        assert integrator._real_part(sp.I * x_real) is None
