"""
pytest configuration and fixtures for stochProx tests.
"""

import pytest
import numpy as np


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture
def simple_lp():
    """
    Simple LP problem for testing.

    minimize: -x - y
    subject to: x + 2y <= 10
                3x + y <= 15
                x, y >= 0

    Optimal: x=4, y=3, obj=-7
    """
    c = np.array([-1.0, -1.0])
    A = np.array([
        [1.0, 2.0],
        [3.0, 1.0],
    ])
    b = np.array([10.0, 15.0])
    lb = np.array([0.0, 0.0])
    ub = np.array([np.inf, np.inf])

    return {
        "c": c,
        "A": A,
        "b": b,
        "lb": lb,
        "ub": ub,
        "expected_obj": -7.0,
        "expected_x": np.array([4.0, 3.0]),
    }


@pytest.fixture
def newsvendor():
    """
    Newsvendor model with discrete uniform demand on 50..149.

    minimize: order - 1.5 * E[sales]
    subject to: sales <= order, sales <= demand  (per scenario)

    Critical fractile 1/3: optimal order 83, E[min(83, D)] = 77.39,
    expected objective 83 - 1.5 * 77.39 = -33.085
    """
    from stochprox import StochasticModel
    from stochprox.stochastic import DiscreteUniformDistribution

    model = StochasticModel("newsvendor")
    order = model.add_decision(lb=0, name="order")
    sales = model.add_recourse_decision(lb=0, name="sales")
    demand = model.add_random_parameter("demand", DiscreteUniformDistribution(50, 149))
    model.add_constr(sales <= order, name="stock")
    model.add_constr(sales <= demand, name="market")
    model.minimize(1.0 * order - 1.5 * sales)

    return {
        "model": model,
        "order": order,
        "sales": sales,
        "demand": demand,
        "expected_order": 83.0,
        "expected_sales": 77.39,
        "expected_obj": -33.085,
    }


@pytest.fixture
def two_point_model():
    """
    Two-scenario recourse model.

    minimize: 2x + E[3y]
    subject to: x + y >= d,  d in {4, 8} with probabilities 0.5 / 0.5
                0 <= x <= 10

    Buying x=8 costs 16; x=4 costs 8 + 0.5*3*4 = 14; optimal x=4, obj=14
    """
    from stochprox import StochasticModel

    model = StochasticModel("two_point")
    x = model.add_decision(lb=0, ub=10, name="x")
    y = model.add_recourse_decision(lb=0, name="y")
    d = model.add_scenarios_parameter("d", [(0.5, 4.0), (0.5, 8.0)])
    model.add_constr(x + y >= d, name="cover")
    model.minimize(2 * x + 3 * y)

    return {"model": model, "x": x, "y": y, "d": d, "expected_obj": 14.0, "expected_x": 4.0}


@pytest.fixture
def rng():
    """Seeded Mersenne Twister."""
    from stochprox.stochastic import PseudoRandom
    return PseudoRandom.create(2024)


# ============================================================================
# Markers
# ============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "slow: marks tests as slow")
    config.addinivalue_line("markers", "integration: marks integration tests")
