"""
stochProx Stochastic Programming
================================

Scenario engine for optimization models with random parameters.

Given random parameters bound to distributions and recourse decisions
resolved per scenario, the engine turns the randomness into a finite set of
weighted scenarios and builds one deterministic equivalent LP.

Two-Stage Stochastic Programming
--------------------------------
- **First stage**: "Here and now" decisions (x) before uncertainty is revealed
- **Second stage**: "Recourse" decisions (y) after observing random outcome ξ

Deterministic equivalent over scenarios s with probabilities p_s:

    minimize    c'x + Σ_s p_s q'y_s
    subject to  Ax ≤ b
                T(ξ_s)x + W y_s ≤ h(ξ_s)   for every scenario s

Scenario Generation
-------------------
When the number of scenario combinations is at most the directive's
threshold (500 by default) every combination is enumerated exactly.
Otherwise Latin Hypercube (or Monte Carlo) samples are drawn from a seeded
Mersenne Twister, so repeated solves see the same scenarios.

>>> from stochprox.stochastic import ScenarioGenerator, NormalDistribution, distributed_value
>>> demand = distributed_value(NormalDistribution(mean_=100.0, std=15.0), "demand")
>>> gen = ScenarioGenerator([demand])
>>> gen.sampling_needed, gen.sampling_method
(True, <SamplingMethod.LATIN_HYPERCUBE: 'latin_hypercube'>)

References
----------
- Birge & Louveaux (2011): "Introduction to Stochastic Programming"
- McKay, Beckman & Conover (1979): "A Comparison of Three Methods for
  Selecting Values of Input Variables in the Analysis of Output from a
  Computer Code"
- Hormann (1993): "The generation of binomial random variates"
"""

from .config import (
    DecompositionType,
    SamplingMethod,
    SamplingParameters,
    StochasticDirective,
)
from .distributions import (
    DYNAMIC,
    BinomialDistribution,
    ContinuousUniformDistribution,
    DiscreteUniformDistribution,
    Distribution,
    ExponentialDistribution,
    GeometricDistribution,
    LogNormalDistribution,
    NormalDistribution,
    ScenariosDistribution,
)
from .generator import Phase, ScenarioModel, StochasticModelGenerator, StochasticSolution
from .prng import BoundKind, Interval, MersenneTwister, PseudoRandom
from .problem import RecourseStatistics, StochasticResult, solve_model
from .sampling import SamplingEngine, ScenarioDraw
from .scenarios import Cancelled, Done, ScenarioGenerator, ScenarioStream, enumerate_scenarios
from .task import LinearStochasticTask
from .values import (
    MAX_SCENARIO_COUNT,
    BinomialValue,
    DiscreteUniformValue,
    DistributedValue,
    ExplicitScenariosValue,
    Scenario,
    UnivariateValue,
    distributed_value,
)

__all__ = [
    # Configuration
    "SamplingMethod",
    "SamplingParameters",
    "DecompositionType",
    "StochasticDirective",
    # Distributions
    "Distribution",
    "DYNAMIC",
    "NormalDistribution",
    "LogNormalDistribution",
    "ExponentialDistribution",
    "ContinuousUniformDistribution",
    "DiscreteUniformDistribution",
    "GeometricDistribution",
    "BinomialDistribution",
    "ScenariosDistribution",
    # Distributed values
    "Scenario",
    "DistributedValue",
    "UnivariateValue",
    "DiscreteUniformValue",
    "BinomialValue",
    "ExplicitScenariosValue",
    "distributed_value",
    "MAX_SCENARIO_COUNT",
    # Random numbers
    "PseudoRandom",
    "MersenneTwister",
    "Interval",
    "BoundKind",
    # Scenario generation
    "SamplingEngine",
    "ScenarioDraw",
    "ScenarioGenerator",
    "ScenarioStream",
    "Cancelled",
    "Done",
    "enumerate_scenarios",
    # Deterministic equivalent
    "ScenarioModel",
    "Phase",
    "StochasticModelGenerator",
    "StochasticSolution",
    "LinearStochasticTask",
    "StochasticResult",
    "RecourseStatistics",
    "solve_model",
]
