"""
Stochastic Problem Solving
==========================

Runs the full pipeline for a stochastic model: deterministic equivalent
builder, linear task, linear solver, then maps the solution back onto the
model's decisions.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

import numpy as np

from ..result import Status
from .config import SamplingParameters, StochasticDirective
from .generator import StochasticModelGenerator, StochasticSolution

logger = logging.getLogger(__name__)


@dataclass
class RecourseStatistics:
    """Probability-weighted statistics of one recourse decision."""

    expected_value: float
    minimum: float
    maximum: float


@dataclass
class StochasticResult:
    """
    Result of solving a stochastic model.

    Attributes:
        status: Linear solver status
        objective: Expected objective value
        x: First-stage decision values by name
        recourse: Recourse statistics by decision name
        solution: How scenarios were produced
        solve_time: Total time (build + solve) in seconds
        n_columns: Columns of the deterministic equivalent
        n_rows: Rows of the deterministic equivalent, goal row included
    """

    status: Status
    objective: float
    x: Dict[str, float]
    recourse: Dict[str, RecourseStatistics]
    solution: StochasticSolution
    solve_time: float
    n_columns: int = 0
    n_rows: int = 0
    info: Dict[str, Any] = field(default_factory=dict)

    def __repr__(self) -> str:
        return (
            f"StochasticResult(\n"
            f"  status={self.status},\n"
            f"  objective={self.objective:.4f},\n"
            f"  scenarios={self.solution.sample_count},\n"
            f"  sampling_method={self.solution.sampling_method}\n"
            f")"
        )

    def summary(self) -> str:
        """Formatted summary."""
        lines = [
            "=" * 50,
            "Stochastic Model Solution",
            "=" * 50,
            f"Status:            {self.status}",
            f"Objective:         {self.objective:.4f}",
            f"Scenario count:    {self.solution.scenario_count}",
            f"Sampling method:   {self.solution.sampling_method}",
            f"Scenarios used:    {self.solution.sample_count}",
            f"Random seed:       {self.solution.random_seed}",
            f"Columns / rows:    {self.n_columns} / {self.n_rows}",
            f"Solve time:        {self.solve_time:.4f}s",
            "-" * 50,
            "First-stage decisions:",
        ]

        for name, value in self.x.items():
            lines.append(f"  {name} = {value:.4f}")

        if self.recourse:
            lines.append("-" * 50)
            lines.append("Recourse decisions (expected / min / max):")
            for name, stats in self.recourse.items():
                lines.append(
                    f"  {name} = {stats.expected_value:.4f} / "
                    f"{stats.minimum:.4f} / {stats.maximum:.4f}"
                )

        lines.append("=" * 50)
        return "\n".join(lines)


def solve_model(
    model,
    sampling: Optional[SamplingParameters] = None,
    directive: Optional[StochasticDirective] = None,
    params: Optional[Dict[str, Any]] = None,
    query_abort: Optional[Callable[[], bool]] = None,
) -> StochasticResult:
    """
    Build and solve the deterministic equivalent of ``model``.

    ``params`` may also carry sampling and directive options
    (``sample_count``, ``sampling_method``, ``random_seed``,
    ``maximum_scenario_count_before_sampling``, ...) when the explicit
    option objects are not given.

    Raises:
        ModelDataError: If the model fails validation
        AbortedError: If ``query_abort`` fired
        NonConvergenceError: If a sampler failed to converge
    """
    start_time = time.perf_counter()
    params = params or {}
    if sampling is None:
        sampling = SamplingParameters.from_params(params)
    if directive is None:
        directive = StochasticDirective.from_params(params)

    generator = StochasticModelGenerator(model, sampling, directive, query_abort)
    task = generator.build()
    lp = task.solve(params)

    first_stage = {}
    for decision in model.first_stage_decisions:
        column = generator.columns[decision.index]
        first_stage[decision.name] = float(lp.x[column])

    recourse = {}
    for decision in model.recourse_decisions:
        columns = [task.column_index(clone.name) for clone in decision.clones]
        decision.values = np.asarray(lp.x[columns], dtype=np.float64)
        if lp.status.has_solution and decision.values.size > 0:
            recourse[decision.name] = RecourseStatistics(
                expected_value=decision.expected_value(),
                minimum=decision.minimum(),
                maximum=decision.maximum(),
            )

    result = StochasticResult(
        status=lp.status,
        objective=lp.objective,
        x=first_stage,
        recourse=recourse,
        solution=generator.solution,
        solve_time=time.perf_counter() - start_time,
        n_columns=task.column_count,
        n_rows=task.row_count,
        info={"iterations": lp.iterations},
    )
    logger.info("Stochastic solve finished with status %s in %.4fs", result.status, result.solve_time)
    return result
