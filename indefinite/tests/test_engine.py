"""Tests for the solution-trail facade used by the web app."""

from indefinite.engine import METHOD_NAMES, IntegrationEngine
from indefinite.options import IntegrationOptions


class TestCompute:
    """Tests for IntegrationEngine.compute()."""

    def test_success(self):
        res = IntegrationEngine().compute("x**2")
        assert res.is_success
        assert res.method == METHOD_NAMES["table"]
        assert res.final_answer.endswith("+ C")
        assert "Verification Successful" in res.verification
        label, step = res.steps[0]
        assert label == "Setup"
        assert step.startswith(r"\text{Identify the integrand")
        assert res.is_verified
        assert set(res.summary) == {"Runtime", "Techniques", "Timestamp"}

    def test_method_names(self):
        res = IntegrationEngine().compute("x*cos(x**2)")
        assert res.method == "Integration by Substitution"
        res = IntegrationEngine().compute("x*sin(x)")
        assert res.method == "Integration by Parts"

    def test_other_variable(self):
        res = IntegrationEngine().compute("t*exp(t)", variable="t")
        assert res.is_success
        assert r"\int" in res.given and "dt" in res.given

    def test_non_elementary(self):
        res = IntegrationEngine().compute("exp(x**2)")
        assert not res.is_success
        assert res.is_non_elementary
        assert res.method == METHOD_NAMES["risch"]
        assert "No elementary antiderivative exists" in res.error_message

    def test_unsupported(self):
        res = IntegrationEngine().compute("sqrt(1 + x**3)")
        assert not res.is_success
        assert not res.is_non_elementary
        assert res.error_message.startswith("Error:")

    def test_invalid_input(self):
        res = IntegrationEngine().compute("1/(")
        assert not res.is_success
        assert res.error_message.startswith("Error:")

    def test_options_are_used(self):
        res = IntegrationEngine(IntegrationOptions(risch=False)).compute("exp(x**2)")
        assert not res.is_success
        assert not res.is_non_elementary

    def test_nested_steps_are_labelled(self):
        res = IntegrationEngine().compute("x**2 + sin(x)")
        labels = [label for label, _ in res.steps]
        assert METHOD_NAMES["linearity"] in labels
        assert any("depth 1" in label for label in labels)
