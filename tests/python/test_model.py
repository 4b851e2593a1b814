"""
Tests for the StochasticModel builder class.
"""

import math

import numpy as np
import pytest

from stochprox import StochasticModel
from stochprox.exceptions import InvalidInputError, ModelDataError
from stochprox.model import Constraint, Decision, LinearExpr, RandomParameter, RecourseDecision
from stochprox.stochastic import (
    DiscreteUniformDistribution,
    DiscreteUniformValue,
    ExplicitScenariosValue,
    NormalDistribution,
    distributed_value,
)


class TestDecision:
    """Tests for decisions."""

    def test_decision_creation(self):
        """Test creating a first-stage decision."""
        model = StochasticModel()
        x = model.add_decision(lb=0, ub=10, name="x")

        assert isinstance(x, Decision)
        assert not x.is_recourse
        assert x.lb == 0
        assert x.ub == 10
        assert x.name == "x"
        assert x.index == 0

    def test_default_names_and_bounds(self):
        """Test default decision names and bounds."""
        model = StochasticModel()
        x = model.add_decision()
        y = model.add_recourse_decision()

        assert x.lb == 0
        assert x.ub == float("inf")
        assert x.name == "x_0"
        assert y.name == "y_1"

    def test_recourse_decision(self):
        """Test creating a recourse decision."""
        model = StochasticModel()
        y = model.add_recourse_decision(lb=-5, name="y")

        assert isinstance(y, RecourseDecision)
        assert y.is_recourse
        assert y.scenario_count == 0
        assert model.recourse_decisions[0] is y
        assert model.first_stage_decisions == []

    def test_duplicate_name(self):
        """Decision names must be unique."""
        model = StochasticModel()
        model.add_decision(name="x")
        with pytest.raises(InvalidInputError, match="duplicate"):
            model.add_recourse_decision(name="x")

    @pytest.mark.parametrize("lb,ub", [(5, 3), (math.nan, 1)])
    def test_invalid_bounds(self, lb, ub):
        """Reversed or NaN bounds are rejected."""
        model = StochasticModel()
        with pytest.raises(InvalidInputError):
            model.add_decision(lb=lb, ub=ub)

    def test_recourse_statistics(self):
        """Weighted statistics over scenario values."""
        model = StochasticModel()
        y = model.add_recourse_decision(name="y")
        y.probabilities = np.array([0.25, 0.75])
        y.values = np.array([4.0, 8.0])

        assert y.expected_value() == pytest.approx(7.0)
        assert y.minimum() == 4.0
        assert y.maximum() == 8.0

    def test_statistics_before_solve(self):
        """Statistics need solution values."""
        model = StochasticModel()
        y = model.add_recourse_decision(name="y")
        with pytest.raises(InvalidInputError, match="no solution values"):
            y.expected_value()


class TestRandomParameter:
    """Tests for random parameters."""

    def test_from_distribution(self):
        """A distribution is wrapped in the matching value type."""
        model = StochasticModel()
        d = model.add_random_parameter("d", DiscreteUniformDistribution(1, 3))

        assert isinstance(d, RandomParameter)
        assert isinstance(d.value, DiscreteUniformValue)
        assert d.value.name == "d"
        assert d.distribution.count == 3
        assert math.isnan(d.current_sample)

    def test_from_value(self):
        """An existing value is renamed to the parameter."""
        model = StochasticModel()
        value = distributed_value(NormalDistribution(0.0), "other")
        p = model.add_random_parameter("p", value)
        assert p.value is value
        assert value.name == "p"

    def test_scenarios_parameter(self):
        """Explicit scenarios are validated and finalized."""
        model = StochasticModel()
        d = model.add_scenarios_parameter("d", [(0.5, 4.0), (0.5, 8.0)])
        assert isinstance(d.value, ExplicitScenariosValue)
        assert d.value.scenario_count == 2

        with pytest.raises(ModelDataError):
            model.add_scenarios_parameter("e", [(0.5, 4.0), (0.4, 8.0)])

    def test_duplicate_name(self):
        """Parameter names must be unique."""
        model = StochasticModel()
        model.add_random_parameter("d", NormalDistribution(0.0))
        with pytest.raises(InvalidInputError, match="duplicate"):
            model.add_random_parameter("d", NormalDistribution(1.0))

    def test_distributed_values(self):
        """The model exposes its values in insertion order."""
        model = StochasticModel()
        a = model.add_random_parameter("a", NormalDistribution(0.0))
        b = model.add_random_parameter("b", NormalDistribution(1.0))
        assert model.distributed_values() == [a.value, b.value]


class TestLinearExpr:
    """Tests for LinearExpr class."""

    def test_decision_addition(self):
        """Test adding decisions."""
        model = StochasticModel()
        x = model.add_decision(name="x")
        y = model.add_recourse_decision(name="y")

        expr = x + y
        assert isinstance(expr, LinearExpr)
        assert expr.terms[(x.index, None)] == 1
        assert expr.terms[(y.index, None)] == 1
        assert not expr.has_random

    def test_complex_expression(self):
        """Test complex expression building."""
        model = StochasticModel()
        x = model.add_decision(name="x")
        y = model.add_decision(name="y")

        expr = 2 * x + 3 * y - 5
        assert expr.terms[(x.index, None)] == 2
        assert expr.terms[(y.index, None)] == 3
        assert expr.constant == -5
        assert expr.decision_indices == [0, 1]

    def test_random_coefficient(self):
        """A parameter times a decision is a random-coefficient term."""
        model = StochasticModel()
        x = model.add_decision(name="x")
        d = model.add_random_parameter("d", NormalDistribution(5.0))

        expr = 2 * d * x + d + 1
        assert expr.terms[(x.index, "d")] == 2
        assert expr.terms[(None, "d")] == 1
        assert expr.constant == 1
        assert expr.has_random
        assert expr.parameter_names == ["d"]
        assert expr.random_coefficient_terms == [(x.index, "d")]

    def test_distributes_over_sums(self):
        """A parameter times a sum expands term by term."""
        model = StochasticModel()
        x = model.add_decision(name="x")
        y = model.add_decision(name="y")
        d = model.add_random_parameter("d", NormalDistribution(5.0))

        expr = d * (x + 2 * y + 3)
        assert expr.terms == {(x.index, "d"): 1, (y.index, "d"): 2, (None, "d"): 3}

    def test_nonlinear_products(self):
        """Products of two decisions or two parameters are rejected."""
        model = StochasticModel()
        x = model.add_decision(name="x")
        y = model.add_decision(name="y")
        a = model.add_random_parameter("a", NormalDistribution(0.0))
        b = model.add_random_parameter("b", NormalDistribution(0.0))

        with pytest.raises(ModelDataError, match="two decisions"):
            x * y
        with pytest.raises(ModelDataError, match="random parameters"):
            a * b

    def test_negation_and_division(self):
        """Negation and scalar division."""
        model = StochasticModel()
        x = model.add_decision(name="x")

        assert (-x).terms[(x.index, None)] == -1
        assert (x / 4).terms[(x.index, None)] == 0.25
        assert (10 - x).constant == 10

    def test_evaluate(self):
        """Instantiating an expression for one scenario."""
        model = StochasticModel()
        x = model.add_decision(name="x")
        y = model.add_recourse_decision(name="y")
        d = model.add_random_parameter("d", NormalDistribution(5.0))

        expr = d * x + 3 * y - d + 2
        coeffs, constant = expr.evaluate({"d": 4.0}, {x.index: 0, y.index: 7})
        assert coeffs == {0: 4.0, 7: 3.0}
        assert constant == pytest.approx(-2.0)

    def test_evaluate_unknown_term(self):
        """Missing parameters are model errors."""
        model = StochasticModel()
        x = model.add_decision(name="x")
        d = model.add_random_parameter("d", NormalDistribution(5.0))

        with pytest.raises(ModelDataError, match="unknown term"):
            (d * x).evaluate({}, {x.index: 0})

    def test_repr(self):
        """Readable expression text."""
        model = StochasticModel()
        x = model.add_decision(name="x")
        y = model.add_recourse_decision(name="y")
        d = model.add_random_parameter("demand", NormalDistribution(5.0))

        assert repr(2 * x + d * y + 5) == "2*x + demand*y + 5"
        assert repr(x - y) == "x - y"


class TestConstraint:
    """Tests for Constraint class."""

    def test_le_constraint(self):
        """Test <= constraint."""
        model = StochasticModel()
        x = model.add_decision(name="x")
        y = model.add_decision(name="y")

        constr = x + y <= 10
        assert isinstance(constr, Constraint)
        assert constr.sense == "<="
        assert constr.lhs.constant == -10

    def test_ge_constraint(self):
        """Test >= constraint against a random parameter."""
        model = StochasticModel()
        x = model.add_decision(name="x")
        d = model.add_random_parameter("d", NormalDistribution(5.0))

        constr = x >= d
        assert isinstance(constr, Constraint)
        assert constr.sense == ">="
        assert constr.lhs.terms[(None, "d")] == -1

    def test_eq_constraint(self):
        """Test == constraint."""
        model = StochasticModel()
        x = model.add_decision(name="x")
        y = model.add_decision(name="y")

        constr = x + y == 10
        assert isinstance(constr, Constraint)
        assert constr.sense == "=="

    def test_invalid_sense(self):
        """Unknown senses are rejected."""
        with pytest.raises(InvalidInputError):
            Constraint(LinearExpr(), "<", 0.0)

    def test_add_constraint_names(self):
        """Constraints get default names and indices."""
        model = StochasticModel()
        x = model.add_decision(name="x")

        first = model.add_constr(x <= 10, name="capacity")
        second = model.add_constr(x >= 1)
        assert first.name == "capacity"
        assert second.name == "c_1"
        assert second.index == 1
        assert model.num_constrs == 2

    def test_add_non_constraint(self):
        """Only constraints can be added."""
        model = StochasticModel()
        x = model.add_decision(name="x")
        with pytest.raises(InvalidInputError):
            model.add_constr(x + 1)


class TestGoal:
    """Tests for goals."""

    def test_minimize_replaces(self):
        """minimize / maximize replace any previous goal."""
        model = StochasticModel()
        x = model.add_decision(name="x")

        model.add_goal(x, name="first")
        model.maximize(2 * x)
        assert len(model.goals) == 1
        assert model.goals[0].sense == "maximize"

    def test_add_goal_appends(self):
        """add_goal keeps existing goals."""
        model = StochasticModel()
        x = model.add_decision(name="x")

        model.add_goal(x)
        model.add_goal(-x, enabled=False)
        assert len(model.goals) == 2
        assert model.goals[1].name == "goal_1"
        assert not model.goals[1].enabled

    def test_invalid_sense(self):
        """Unknown goal senses are rejected."""
        model = StochasticModel()
        x = model.add_decision(name="x")
        with pytest.raises(InvalidInputError):
            model.add_goal(x, sense="minimise")


class TestScenarioModel:
    """Recourse cloning and reset."""

    def test_clone_recourse(self):
        """Clones are numbered from one and remembered."""
        model = StochasticModel()
        y = model.add_recourse_decision(lb=1, ub=9, name="sales")

        first = model.clone_recourse(y, 0)
        second = model.clone_recourse(y, 1)
        assert first.name == "sales_1"
        assert second.name == "sales_2"
        assert (second.lb, second.ub, second.parent_index) == (1, 9, y.index)
        assert y.scenario_count == 2

    def test_reset(self):
        """Reset drops clones and solution data."""
        model = StochasticModel()
        y = model.add_recourse_decision(name="y")
        model.clone_recourse(y, 0)
        model.record_probabilities(y, [1.0])
        y.values = np.array([3.0])

        model.reset()
        assert y.scenario_count == 0
        assert y.probabilities.size == 0
        assert y.values.size == 0

    def test_model_repr(self):
        """Test model string representation."""
        model = StochasticModel()
        x = model.add_decision()
        model.add_recourse_decision()
        model.add_random_parameter("d", NormalDistribution(0.0))
        model.add_constr(x <= 10)

        repr_str = repr(model)
        assert "vars=2" in repr_str
        assert "constrs=1" in repr_str
        assert "random_parameters=1" in repr_str
