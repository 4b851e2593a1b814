"""
Integration Tests for Stochastic Programming.

Tests covering:
1. Classic problems (newsvendor, two-point recourse)
2. Sampled deterministic equivalents
3. Solve options, cancellation and reporting
"""

import math

import numpy as np
import pytest

from stochprox import StochasticModel, Status
from stochprox.exceptions import AbortedError, ModelDataError
from stochprox.stochastic import (
    NormalDistribution,
    SamplingMethod,
    SamplingParameters,
    StochasticDirective,
    StochasticResult,
)

pytestmark = pytest.mark.integration


def _normal_newsvendor():
    """Newsvendor with N(100, 15) demand; critical fractile 1/3."""
    model = StochasticModel("normal_newsvendor")
    order = model.add_decision(lb=0, name="order")
    sales = model.add_recourse_decision(lb=0, name="sales")
    demand = model.add_random_parameter("demand", NormalDistribution(mean_=100.0, std=15.0))
    model.add_constr(sales <= order, name="stock")
    model.add_constr(sales <= demand, name="market")
    model.minimize(order - 1.5 * sales)
    return model


class TestNewsvendorProblem:
    """Discrete uniform demand, solved over all 100 scenarios."""

    def test_newsvendor_solve(self, newsvendor):
        """Optimal order at the critical fractile."""
        result = newsvendor["model"].solve()

        assert isinstance(result, StochasticResult)
        assert result.status == Status.OPTIMAL
        assert result.objective == pytest.approx(newsvendor["expected_obj"], abs=1e-6)
        assert result.x["order"] == pytest.approx(newsvendor["expected_order"], abs=1e-6)

    def test_recourse_statistics(self, newsvendor):
        """Sales are min(order, demand) in every scenario."""
        result = newsvendor["model"].solve()
        stats = result.recourse["sales"]
        assert stats.expected_value == pytest.approx(newsvendor["expected_sales"], abs=1e-6)
        assert stats.minimum == pytest.approx(50.0, abs=1e-6)
        assert stats.maximum == pytest.approx(83.0, abs=1e-6)

        sales = newsvendor["sales"]
        assert sales.scenario_count == 100
        np.testing.assert_allclose(sales.values[:3], [50.0, 51.0, 52.0], atol=1e-6)

    def test_model_size(self, newsvendor):
        """One sales clone and two rows per scenario plus the goal row."""
        result = newsvendor["model"].solve()
        assert result.n_columns == 1 + 100
        assert result.n_rows == 2 * 100 + 1
        assert result.solution.scenario_count == 100
        assert not result.solution.sampled

    def test_maximize(self):
        """Maximizing profit gives the negated optimum."""
        model = StochasticModel()
        order = model.add_decision(lb=0, name="order")
        sales = model.add_recourse_decision(lb=0, name="sales")
        demand = model.add_scenarios_parameter("demand", [(0.5, 40.0), (0.5, 80.0)])
        model.add_constr(sales <= order)
        model.add_constr(sales <= demand)
        model.maximize(3 * sales - order)

        # Each unit up to 40 earns 2; from 40 to 80 it earns 0.5
        result = model.solve()
        assert result.objective == pytest.approx(100.0)
        assert result.x["order"] == pytest.approx(80.0)

    def test_resolve(self, newsvendor):
        """Solving twice gives the same answer and no extra clones."""
        model = newsvendor["model"]
        first = model.solve()
        second = model.solve()
        assert second.objective == pytest.approx(first.objective)
        assert newsvendor["sales"].scenario_count == 100


class TestTwoPointRecourse:
    """Two equally likely demands."""

    def test_solve(self, two_point_model):
        """Hedge at the low demand and recourse at the high one."""
        result = two_point_model["model"].solve()
        assert result.objective == pytest.approx(two_point_model["expected_obj"])
        assert result.x["x"] == pytest.approx(two_point_model["expected_x"])

        stats = result.recourse["y"]
        assert stats.expected_value == pytest.approx(2.0)
        assert stats.minimum == pytest.approx(0.0, abs=1e-9)
        assert stats.maximum == pytest.approx(4.0)
        np.testing.assert_allclose(two_point_model["y"].probabilities, [0.5, 0.5])

    def test_goal_constants(self):
        """Fixed and random constants shift the expected objective."""
        model = StochasticModel()
        x = model.add_decision(lb=0, ub=10, name="x")
        y = model.add_recourse_decision(lb=0, name="y")
        d = model.add_scenarios_parameter("d", [(0.5, 4.0), (0.5, 8.0)])
        model.add_constr(x + y >= d)

        model.minimize(2 * x + 3 * y + 10)
        assert model.solve().objective == pytest.approx(24.0)

        model.minimize(2 * x + 3 * y + d)
        assert model.solve().objective == pytest.approx(20.0)

    def test_without_random_parameters(self):
        """A model without random parameters has one certain scenario."""
        model = StochasticModel()
        x = model.add_decision(name="x")
        y = model.add_recourse_decision(name="y")
        model.add_constr(x + y >= 3)
        model.minimize(x + 2 * y)

        result = model.solve()
        assert result.objective == pytest.approx(3.0)
        assert result.solution.scenario_count == 1
        assert result.recourse["y"].expected_value == pytest.approx(0.0, abs=1e-9)


class TestSampledModels:
    """Continuous demand forces sampling."""

    def test_latin_hypercube_newsvendor(self):
        """The sampled optimum is the sample quantile at the critical fractile."""
        model = _normal_newsvendor()
        result = model.solve(SamplingParameters(sample_count=200, random_seed=7))

        assert result.status == Status.OPTIMAL
        assert result.solution.sampling_method is SamplingMethod.LATIN_HYPERCUBE
        assert result.solution.sample_count == 200
        assert result.solution.random_seed == 7
        # 67th of 200 stratified samples; the true 1/3 quantile is 93.54
        assert 93.3 < result.x["order"] < 93.7

    def test_monte_carlo_from_params(self):
        """Sampling options can be passed in the params dict."""
        model = _normal_newsvendor()
        result = model.solve(params={"method": "monte_carlo", "sample_count": 50, "seed": 3})

        assert result.status == Status.OPTIMAL
        assert result.solution.sampling_method is SamplingMethod.MONTE_CARLO
        assert result.solution.sample_count == 50
        assert result.n_columns == 51

    def test_reproducible(self):
        """Equal seeds give equal objectives."""
        sampling = SamplingParameters(sample_count=40, random_seed=5)
        first = _normal_newsvendor().solve(sampling)
        second = _normal_newsvendor().solve(sampling)
        other = _normal_newsvendor().solve(SamplingParameters(sample_count=40, random_seed=6))

        assert first.objective == second.objective
        assert first.x == second.x
        assert other.objective != first.objective

    def test_threshold_from_directive(self, newsvendor):
        """A lower threshold samples the discrete model."""
        result = newsvendor["model"].solve(directive=StochasticDirective(50))
        assert result.solution.sampled
        assert result.solution.scenario_count == 100
        assert result.solution.sample_count == 100
        assert result.status == Status.OPTIMAL

    def test_threshold_from_params(self, newsvendor):
        """The threshold can be passed in the params dict."""
        result = newsvendor["model"].solve(params={"max_scenarios": 50, "sample_count": 30})
        assert result.solution.sample_count == 30
        assert result.n_columns == 31

    def test_no_sampling_refused(self, newsvendor):
        """Disabling sampling above the threshold is a model error."""
        with pytest.raises(ModelDataError):
            newsvendor["model"].solve(
                SamplingParameters(sampling_method=SamplingMethod.NO_SAMPLING),
                StochasticDirective(50),
            )


class TestFailures:
    """Infeasible models and cancellation."""

    def test_infeasible(self):
        """An infeasible deterministic equivalent reports a failed status."""
        model = StochasticModel()
        x = model.add_decision(lb=0, ub=10, name="x")
        y = model.add_recourse_decision(lb=0, name="y")
        d = model.add_scenarios_parameter("d", [(0.5, 4.0), (0.5, 8.0)])
        model.add_constr(x + y >= d)
        model.add_constr(y <= -1)
        model.minimize(x + y)

        result = model.solve()
        assert not result.status.is_successful
        assert math.isnan(result.objective)
        assert result.recourse == {}

    def test_abort(self, newsvendor):
        """query_abort stops the build before any scenario."""
        with pytest.raises(AbortedError) as excinfo:
            newsvendor["model"].solve(query_abort=lambda: True)
        assert excinfo.value.scenarios_completed == 0


class TestReporting:
    """Summary and repr."""

    def test_summary(self, newsvendor):
        """The summary lists first-stage values and recourse statistics."""
        result = newsvendor["model"].solve()
        summary = result.summary()
        assert "Stochastic Model Solution" in summary
        assert "Status:            optimal" in summary
        assert "order = 83.0000" in summary
        assert "sales = 77.3900 / 50.0000 / 83.0000" in summary

    def test_repr(self, two_point_model):
        """repr shows status and scenario count."""
        text = repr(two_point_model["model"].solve())
        assert text.startswith("StochasticResult(")
        assert "status=optimal" in text
        assert "scenarios=2" in text
        assert "sampling_method=no_sampling" in text

    def test_logging(self, two_point_model, caplog):
        """The build and the solve are logged."""
        with caplog.at_level("INFO", logger="stochprox"):
            two_point_model["model"].solve()
        assert "Start to build the deterministic equivalent model" in caplog.text
        assert "Stochastic solve finished with status optimal" in caplog.text
