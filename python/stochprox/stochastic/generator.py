"""
Deterministic Equivalent Builder
================================

Expands a stochastic model over its scenarios into one linear task.

Phases:

1. INITIALIZE: validate the goal, resolve the directive and build the
   scenario generator
2. PARTITION: split constraints into first stage (no recourse decision, no
   random parameter) and second stage
3. PER_SCENARIO: for every scenario clone each recourse decision, add the
   second-stage constraints against the clones and fold the
   probability-weighted goal into the single goal row
4. FINALIZE: record the per-scenario probability vector on every recourse
   decision

Standard form of the result:
    minimize    c'x + sum_s p_s q_s'y_s
    subject to  first-stage rows in x
                second-stage rows in (x, y_s) for every scenario s
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Protocol, Sequence, Tuple, runtime_checkable

from ..exceptions import AbortedError, ModelDataError
from .config import DecompositionType, SamplingMethod, SamplingParameters, StochasticDirective
from .sampling import ScenarioDraw
from .scenarios import Cancelled, Done, ScenarioGenerator
from .task import LinearStochasticTask
from .values import DistributedValue

logger = logging.getLogger(__name__)


@runtime_checkable
class ScenarioModel(Protocol):
    """Everything the builder reads from or writes back to a model."""

    @property
    def decisions(self) -> Sequence[Any]:
        ...

    @property
    def first_stage_decisions(self) -> Sequence[Any]:
        ...

    @property
    def recourse_decisions(self) -> Sequence[Any]:
        ...

    @property
    def constraints(self) -> Sequence[Any]:
        ...

    @property
    def goals(self) -> Sequence[Any]:
        ...

    def distributed_values(self) -> Sequence[DistributedValue]:
        ...

    def clone_recourse(self, decision: Any, scenario_index: int) -> Any:
        ...

    def record_probabilities(self, decision: Any, probabilities: Sequence[float]) -> None:
        ...

    def reset(self) -> None:
        ...


class Phase(Enum):
    INITIALIZE = "initialize"
    PARTITION = "partition"
    PER_SCENARIO = "per_scenario"
    FINALIZE = "finalize"
    FINISHED = "finished"


@dataclass
class StochasticSolution:
    """
    How the scenarios of a solve were produced.

    Attributes:
        scenario_count: Exact number of scenario combinations (saturated)
        sampling_method: NO_SAMPLING when every combination was enumerated
        sample_count: Number of scenarios in the deterministic equivalent
        random_seed: Seed used by the sampling engine
        decomposition_type: Decomposition requested by the directive
    """

    scenario_count: int
    sampling_method: SamplingMethod
    sample_count: int
    random_seed: int
    decomposition_type: DecompositionType = DecompositionType.AUTOMATIC

    @property
    def sampled(self) -> bool:
        return self.sampling_method is not SamplingMethod.NO_SAMPLING


class StochasticModelGenerator:
    """
    Build the deterministic equivalent of a stochastic model.

    Args:
        model: A StochasticModel or any other ScenarioModel
        sampling: Sampling options
        directive: Stochastic directive
        query_abort: Polled before every scenario; True aborts the build

    Example:
        >>> generator = StochasticModelGenerator(model)
        >>> task = generator.build()
        >>> generator.solution.sample_count
        3
    """

    def __init__(
        self,
        model: ScenarioModel,
        sampling: Optional[SamplingParameters] = None,
        directive: Optional[StochasticDirective] = None,
        query_abort: Optional[Callable[[], bool]] = None,
    ):
        self.model = model
        self.sampling = sampling if sampling is not None else SamplingParameters()
        self.directive = directive if directive is not None else StochasticDirective()
        self.query_abort = query_abort
        self.phase = Phase.INITIALIZE
        self.scenario_generator: Optional[ScenarioGenerator] = None
        self.solution: Optional[StochasticSolution] = None
        self.first_stage_constraints: List[Any] = []
        self.second_stage_constraints: List[Any] = []
        self.columns: Dict[int, int] = {}

    def validate_goal(self):
        """
        Return the single enabled goal.

        Raises:
            ModelDataError: No enabled goal, more than one goal, or a goal
                multiplying a decision by a random parameter
        """
        goals = self.model.goals
        if len(goals) > 1:
            raise ModelDataError(
                f"stochastic models support exactly one goal, got {len(goals)}"
            )
        if not goals or not goals[0].enabled:
            raise ModelDataError("stochastic model has no enabled goal")
        goal = goals[0]
        ill_posed = goal.expr.random_coefficient_terms
        if ill_posed:
            names = {d.index: d.name for d in self.model.decisions}
            pairs = ", ".join(f"{param}*{names.get(idx, idx)}" for idx, param in ill_posed)
            raise ModelDataError(
                f"goal {goal.name!r} multiplies decisions by random parameters ({pairs})"
            )
        return goal

    def _initialize(self):
        goal = self.validate_goal()
        self.model.reset()
        self.scenario_generator = ScenarioGenerator(
            self.model.distributed_values(),
            self.sampling,
            self.directive,
            self.query_abort,
        )
        gen = self.scenario_generator
        self.solution = StochasticSolution(
            scenario_count=gen.scenario_count,
            sampling_method=gen.sampling_method,
            sample_count=gen.sample_count,
            random_seed=gen.random_seed,
            decomposition_type=self.directive.decomposition_type,
        )
        return goal

    def _partition(self) -> Tuple[List[Any], List[Any]]:
        recourse = {d.index for d in self.model.recourse_decisions}
        first, second = [], []
        for constraint in self.model.constraints:
            expr = constraint.lhs
            if expr.has_random or any(idx in recourse for idx in expr.decision_indices):
                second.append(constraint)
            else:
                first.append(constraint)
        return first, second

    def build(self) -> LinearStochasticTask:
        """
        Run every phase and return the filled task.

        Raises:
            ModelDataError: If the model fails validation
            AbortedError: If ``query_abort`` fired; no partial task is returned
        """
        logger.info("Start to build the deterministic equivalent model")
        self.phase = Phase.INITIALIZE
        goal = self._initialize()

        self.phase = Phase.PARTITION
        self.first_stage_constraints, self.second_stage_constraints = self._partition()
        logger.debug(
            "%d first-stage and %d second-stage constraints",
            len(self.first_stage_constraints),
            len(self.second_stage_constraints),
        )

        task = LinearStochasticTask(goal.sense)
        self.columns = {}
        for decision in self.model.first_stage_decisions:
            self.columns[decision.index] = task.add_column(decision.name, decision.lb, decision.ub)
        for constraint in self.first_stage_constraints:
            coeffs, constant = constraint.lhs.evaluate({}, self.columns)
            task.add_row(constraint.name, coeffs, constraint.sense, constraint.rhs - constant)

        self.phase = Phase.PER_SCENARIO
        probabilities = self._add_scenarios(task, goal)

        self.phase = Phase.FINALIZE
        for decision in self.model.recourse_decisions:
            self.model.record_probabilities(decision, probabilities)

        task.trace_model_details()
        logger.info("Finish building the deterministic equivalent model")
        self.phase = Phase.FINISHED
        return task

    def _add_scenarios(self, task: LinearStochasticTask, goal) -> List[float]:
        recourse = self.model.recourse_decisions
        stream = self.scenario_generator.stream(start_over=True)
        probabilities: List[float] = []
        while True:
            outcome = stream.pull()
            if isinstance(outcome, Cancelled):
                raise AbortedError(
                    "Building the deterministic equivalent was aborted",
                    scenarios_completed=outcome.scenarios_completed,
                )
            if isinstance(outcome, Done):
                return probabilities
            self._add_scenario(task, goal, recourse, outcome)
            probabilities.append(outcome.probability)

    def _add_scenario(self, task, goal, recourse, draw: ScenarioDraw) -> None:
        columns = dict(self.columns)
        for decision in recourse:
            clone = self.model.clone_recourse(decision, draw.index)
            columns[decision.index] = task.add_column(clone.name, clone.lb, clone.ub)

        number = draw.index + 1
        for constraint in self.second_stage_constraints:
            coeffs, constant = constraint.lhs.evaluate(draw.values, columns)
            task.add_row(f"{constraint.name}_{number}", coeffs, constraint.sense, constraint.rhs - constant)

        coeffs, constant = goal.expr.evaluate(draw.values, columns)
        task.add_goal_terms(coeffs, constant, weight=draw.probability)
        logger.debug("Scenario %d added with probability %g", number, draw.probability)
