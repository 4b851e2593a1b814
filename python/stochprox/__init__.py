"""
stochProx: Scenario-Based Stochastic Linear Programming
=======================================================

stochProx solves linear models whose data depends on random parameters.
Random parameters are bound to distributions; the engine enumerates or
samples scenarios and builds a single deterministic equivalent LP that is
solved with SciPy's HiGHS backend.

Quick Start
-----------
>>> import stochprox
>>> model = stochprox.StochasticModel()
>>> order = model.add_decision(lb=0, name="order")
>>> sales = model.add_recourse_decision(lb=0, name="sales")
>>> demand = model.add_scenarios_parameter("demand", [(0.5, 80.0), (0.5, 120.0)])
>>> model.add_constr(sales <= order)
>>> model.add_constr(sales <= demand)
>>> model.minimize(1.0 * order - 1.5 * sales)
>>> result = model.solve()
>>> print(result.status, result.x["order"])
optimal 80.0

Continuous distributions are sampled (Latin Hypercube by default):

>>> from stochprox.stochastic import NormalDistribution, SamplingParameters
>>> model.add_random_parameter("price", NormalDistribution(mean_=1.5, std=0.2))
>>> result = model.solve(sampling=SamplingParameters(sample_count=200, random_seed=7))
"""

__version__ = "0.1.0"
__author__ = "stochProx Contributors"

# Import public API
from .model import (
    Constraint,
    Decision,
    Goal,
    LinearExpr,
    RandomParameter,
    RecourseDecision,
    StochasticModel,
)
from .solver import solve
from .result import SolveResult, Status
from .exceptions import (
    AbortedError,
    DimensionError,
    InvalidInputError,
    ModelDataError,
    NonConvergenceError,
    StochproxError,
)
from .stochastic import (
    SamplingMethod,
    SamplingParameters,
    StochasticDirective,
    StochasticResult,
    solve_model,
)

__all__ = [
    # Version
    "__version__",

    # Model building
    "StochasticModel",
    "Decision",
    "RecourseDecision",
    "RandomParameter",
    "Constraint",
    "Goal",
    "LinearExpr",

    # Solving
    "solve",
    "solve_model",
    "SamplingMethod",
    "SamplingParameters",
    "StochasticDirective",

    # Results
    "SolveResult",
    "StochasticResult",
    "Status",

    # Exceptions
    "StochproxError",
    "InvalidInputError",
    "ModelDataError",
    "DimensionError",
    "NonConvergenceError",
    "AbortedError",
]


def info() -> str:
    """Return information about the stochProx installation."""
    import platform

    import numpy
    import scipy

    lines = [
        f"stochProx version: {__version__}",
        f"Python version: {platform.python_version()}",
        f"Platform: {platform.platform()}",
        f"NumPy version: {numpy.__version__}",
        f"SciPy version: {scipy.__version__}",
        "LP backend: HiGHS (scipy.optimize.linprog)",
    ]

    return "\n".join(lines)
