"""
stochProx Model Builder
=======================

Algebraic interface for building stochastic linear models.

A model has first-stage decisions (fixed before randomness is revealed),
recourse decisions (resolved per scenario), random parameters bound to
distributions, linear constraints and a single goal. Random parameters may
multiply decisions inside constraints; products of two decisions or of two
random parameters are rejected.

Example:
    >>> model = StochasticModel()
    >>> order = model.add_decision(lb=0, name="order")
    >>> sales = model.add_recourse_decision(lb=0, name="sales")
    >>> demand = model.add_scenarios_parameter("demand", [(0.5, 80.0), (0.5, 120.0)])
    >>> model.add_constr(sales <= order)
    >>> model.add_constr(sales <= demand)
    >>> model.minimize(1.0 * order - 1.5 * sales)
    >>> result = model.solve()
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

import numpy as np

from .exceptions import InvalidInputError, ModelDataError
from .stochastic.distributions import Distribution
from .stochastic.values import DistributedValue, ExplicitScenariosValue, distributed_value

if TYPE_CHECKING:
    from .stochastic.config import SamplingParameters, StochasticDirective
    from .stochastic.problem import StochasticResult

# (decision index, random parameter name); None marks an absent factor
TermKey = Tuple[Optional[int], Optional[str]]

Operand = Union["Decision", "RandomParameter", "LinearExpr", float]


def _as_expr(other: Operand) -> "LinearExpr":
    if isinstance(other, LinearExpr):
        return other
    if isinstance(other, Decision):
        return LinearExpr.from_var(other)
    if isinstance(other, RandomParameter):
        return LinearExpr.from_param(other)
    return LinearExpr(constant=float(other))


class _ExprOperators:
    """Arithmetic and comparison operators shared by decisions and parameters."""

    def _expr(self) -> "LinearExpr":
        raise NotImplementedError

    def __add__(self, other: Operand) -> "LinearExpr":
        return self._expr() + other

    def __radd__(self, other: Operand) -> "LinearExpr":
        return self.__add__(other)

    def __sub__(self, other: Operand) -> "LinearExpr":
        return self._expr() - other

    def __rsub__(self, other: Operand) -> "LinearExpr":
        return (-1) * self._expr() + other

    def __mul__(self, other: Operand) -> "LinearExpr":
        return self._expr() * other

    def __rmul__(self, other: Operand) -> "LinearExpr":
        return self.__mul__(other)

    def __neg__(self) -> "LinearExpr":
        return self.__mul__(-1)

    def __truediv__(self, other: float) -> "LinearExpr":
        return self.__mul__(1.0 / other)

    # Comparison operators for constraints
    def __le__(self, other: Operand) -> "Constraint":
        return self._expr() <= other

    def __ge__(self, other: Operand) -> "Constraint":
        return self._expr() >= other

    def __eq__(self, other: Operand) -> "Constraint":  # type: ignore[override]
        return self._expr().__eq__(other)

    __hash__ = object.__hash__


@dataclass(eq=False)
class Decision(_ExprOperators):
    """
    First-stage decision: one value shared by every scenario.

    Attributes:
        index: Internal index in the model
        lb: Lower bound (default: 0)
        ub: Upper bound (default: +inf)
        name: Name of the decision
    """

    index: int
    lb: float = 0.0
    ub: float = float("inf")
    name: Optional[str] = None

    @property
    def is_recourse(self) -> bool:
        return False

    def _expr(self) -> "LinearExpr":
        return LinearExpr.from_var(self)

    def __repr__(self) -> str:
        if self.name:
            return f"Decision({self.name})"
        return f"Decision(x_{self.index})"


@dataclass(frozen=True)
class RecourseClone:
    """Per-scenario copy of a recourse decision in the deterministic equivalent."""

    name: str
    lb: float
    ub: float
    parent_index: int
    scenario_index: int


@dataclass(eq=False)
class RecourseDecision(Decision):
    """
    Second-stage decision, cloned once per scenario.

    After a solve it holds the probability of every scenario and the value
    its clone took there, from which the weighted statistics are computed.

    Example:
        >>> result = model.solve()
        >>> sales.expected_value(), sales.minimum(), sales.maximum()
    """

    clones: List[RecourseClone] = field(default_factory=list, repr=False)
    probabilities: np.ndarray = field(default_factory=lambda: np.zeros(0), repr=False)
    values: np.ndarray = field(default_factory=lambda: np.zeros(0), repr=False)

    @property
    def is_recourse(self) -> bool:
        return True

    @property
    def scenario_count(self) -> int:
        return len(self.clones)

    def reset(self) -> None:
        """Drop clones, probabilities and values from a previous solve."""
        self.clones = []
        self.probabilities = np.zeros(0)
        self.values = np.zeros(0)

    def _require_values(self) -> None:
        if self.values.size == 0 or self.values.shape != self.probabilities.shape:
            raise InvalidInputError(f"recourse decision {self.name!r} has no solution values")

    def expected_value(self) -> float:
        """Probability-weighted average over scenarios."""
        self._require_values()
        return float(np.dot(self.probabilities, self.values) / self.probabilities.sum())

    def minimum(self) -> float:
        self._require_values()
        return float(self.values.min())

    def maximum(self) -> float:
        self._require_values()
        return float(self.values.max())

    def __repr__(self) -> str:
        return f"RecourseDecision({self.name or f'y_{self.index}'})"


class RandomParameter(_ExprOperators):
    """
    Model parameter whose value is drawn from a distribution.

    Args:
        name: Unique parameter name
        value: The distributed value backing the parameter
    """

    def __init__(self, name: str, value: DistributedValue):
        self.name = name
        self.value = value

    @property
    def distribution(self) -> Distribution:
        return self.value.distribution

    @property
    def current_sample(self) -> float:
        return self.value.current_sample

    def _expr(self) -> "LinearExpr":
        return LinearExpr.from_param(self)

    def __repr__(self) -> str:
        return f"RandomParameter({self.name})"


@dataclass(eq=False)
class LinearExpr:
    """
    Linear expression whose coefficients may be random.

    Each term is keyed by (decision index, random parameter name); a term
    with only a parameter is a random constant, a term with both is a
    decision with a random coefficient.

    Example:
        >>> expr = 2*x + demand*y + 5
        >>> print(expr)
        2*x + demand*y + 5
    """

    terms: Dict[TermKey, float] = field(default_factory=dict)
    constant: float = 0.0
    _var_names: Dict[int, str] = field(default_factory=dict)  # For pretty printing

    @classmethod
    def from_var(cls, var: Decision, coef: float = 1.0) -> "LinearExpr":
        """Create expression from a single decision."""
        expr = cls()
        expr.terms[(var.index, None)] = coef
        if var.name:
            expr._var_names[var.index] = var.name
        return expr

    @classmethod
    def from_param(cls, param: RandomParameter, coef: float = 1.0) -> "LinearExpr":
        """Create expression from a single random parameter."""
        expr = cls()
        expr.terms[(None, param.name)] = coef
        return expr

    def _copy(self) -> "LinearExpr":
        return LinearExpr(dict(self.terms), self.constant, dict(self._var_names))

    def __repr__(self) -> str:
        parts = []
        for (idx, param), coef in self.terms.items():
            factors = []
            if param is not None:
                factors.append(param)
            if idx is not None:
                factors.append(self._var_names.get(idx, f"x_{idx}"))
            name = "*".join(factors)
            if coef == 1:
                parts.append(name)
            elif coef == -1:
                parts.append(f"-{name}")
            else:
                parts.append(f"{coef:g}*{name}")
        if self.constant != 0 or not parts:
            parts.append(f"{self.constant:g}")
        return " + ".join(parts).replace("+ -", "- ")

    @property
    def decision_indices(self) -> List[int]:
        return sorted({idx for idx, _ in self.terms if idx is not None})

    @property
    def parameter_names(self) -> List[str]:
        return sorted({param for _, param in self.terms if param is not None})

    @property
    def has_random(self) -> bool:
        return any(param is not None for _, param in self.terms)

    @property
    def random_coefficient_terms(self) -> List[TermKey]:
        """Terms multiplying a decision by a random parameter."""
        return [key for key in self.terms if key[0] is not None and key[1] is not None]

    def __add__(self, other: Operand) -> "LinearExpr":
        result = self._copy()
        other = _as_expr(other)
        for key, coef in other.terms.items():
            result.terms[key] = result.terms.get(key, 0) + coef
        result._var_names.update(other._var_names)
        result.constant += other.constant
        return result

    def __radd__(self, other: Operand) -> "LinearExpr":
        return self.__add__(other)

    def __sub__(self, other: Operand) -> "LinearExpr":
        return self + (-1) * _as_expr(other)

    def __rsub__(self, other: Operand) -> "LinearExpr":
        return (-1) * self + other

    def __mul__(self, other: Operand) -> "LinearExpr":
        if isinstance(other, (Decision, RandomParameter, LinearExpr)):
            return self._multiply(_as_expr(other))
        return LinearExpr(
            {k: v * other for k, v in self.terms.items()},
            self.constant * other,
            dict(self._var_names),
        )

    def __rmul__(self, other: Operand) -> "LinearExpr":
        return self.__mul__(other)

    def _multiply(self, other: "LinearExpr") -> "LinearExpr":
        left = list(self.terms.items()) + [((None, None), self.constant)]
        right = list(other.terms.items()) + [((None, None), other.constant)]
        result = LinearExpr(_var_names={**self._var_names, **other._var_names})
        for (d1, p1), c1 in left:
            for (d2, p2), c2 in right:
                if c1 == 0 or c2 == 0:
                    continue
                if d1 is not None and d2 is not None:
                    raise ModelDataError("product of two decisions is not linear")
                if p1 is not None and p2 is not None:
                    raise ModelDataError(
                        f"product of random parameters {p1!r} and {p2!r} is not supported"
                    )
                key = (d1 if d1 is not None else d2, p1 if p1 is not None else p2)
                if key == (None, None):
                    result.constant += c1 * c2
                else:
                    result.terms[key] = result.terms.get(key, 0) + c1 * c2
        return result

    def __neg__(self) -> "LinearExpr":
        return self.__mul__(-1)

    def __truediv__(self, other: float) -> "LinearExpr":
        return self.__mul__(1.0 / other)

    # Comparison operators for constraints
    def __le__(self, other: Operand) -> "Constraint":
        return Constraint(self - other, "<=", 0.0)

    def __ge__(self, other: Operand) -> "Constraint":
        return Constraint(self - other, ">=", 0.0)

    def __eq__(self, other: Operand) -> "Constraint":  # type: ignore[override]
        return Constraint(self - other, "==", 0.0)

    __hash__ = object.__hash__

    def evaluate(
        self, values: Mapping[str, float], columns: Mapping[int, int]
    ) -> Tuple[Dict[int, float], float]:
        """
        Instantiate the expression for one scenario.

        Args:
            values: Random parameter name -> value in this scenario
            columns: Decision index -> column of the deterministic equivalent

        Returns:
            (column -> coefficient, constant) pair

        Raises:
            ModelDataError: If a parameter or decision is not part of the scenario
        """
        coeffs: Dict[int, float] = {}
        constant = self.constant
        for (idx, param), coef in self.terms.items():
            try:
                factor = coef * (values[param] if param is not None else 1.0)
                if idx is None:
                    constant += factor
                else:
                    column = columns[idx]
                    coeffs[column] = coeffs.get(column, 0.0) + factor
            except KeyError as err:
                raise ModelDataError(f"expression refers to unknown term {err}") from err
        return coeffs, constant


@dataclass(eq=False)
class Constraint:
    """
    Linear constraint in a stochastic model.

    Represents: lhs sense rhs (e.g., sales - demand <= 0)

    Attributes:
        lhs: Left-hand side linear expression
        sense: Constraint sense ("<=", ">=", "==")
        rhs: Right-hand side constant
        name: Optional constraint name
        index: Internal index (set when added to model)
    """

    lhs: LinearExpr
    sense: str  # "<=", ">=", "=="
    rhs: float
    name: Optional[str] = None
    index: int = -1

    def __post_init__(self):
        if self.sense not in ("<=", ">=", "=="):
            raise InvalidInputError(f"unknown constraint sense {self.sense!r}")

    def __repr__(self) -> str:
        name_str = f"{self.name}: " if self.name else ""
        return f"{name_str}{self.lhs} {self.sense} {self.rhs}"


@dataclass(eq=False)
class Goal:
    """
    Objective of the model.

    Attributes:
        expr: Expression to optimize
        sense: "minimize" or "maximize"
        name: Optional goal name
        enabled: Disabled goals are ignored when solving
    """

    expr: LinearExpr
    sense: str = "minimize"
    name: Optional[str] = None
    enabled: bool = True

    def __post_init__(self):
        if self.sense not in ("minimize", "maximize"):
            raise InvalidInputError(f"goal sense must be 'minimize' or 'maximize', got {self.sense!r}")


class StochasticModel:
    """
    Stochastic linear model builder with algebraic syntax.

    Solving builds the deterministic equivalent: one clone of every recourse
    decision per scenario, second-stage constraints instantiated against the
    clones, and one goal row weighted by scenario probability.

    Example:
        >>> model = StochasticModel()
        >>> x = model.add_decision(lb=0, ub=10, name="x")
        >>> y = model.add_recourse_decision(lb=0, name="y")
        >>> d = model.add_random_parameter("d", DiscreteUniformDistribution(1, 3))
        >>> model.add_constr(x + y >= d)
        >>> model.minimize(2*x + 3*y)
        >>> result = model.solve()
    """

    def __init__(self, name: str = ""):
        """
        Create a new stochastic model.

        Args:
            name: Optional model name
        """
        self.name = name
        self._vars: List[Decision] = []
        self._constrs: List[Constraint] = []
        self._goals: List[Goal] = []
        self._params: Dict[str, RandomParameter] = {}

    @property
    def num_vars(self) -> int:
        """Number of decisions (first-stage and recourse) in the model."""
        return len(self._vars)

    @property
    def num_constrs(self) -> int:
        """Number of constraints in the model."""
        return len(self._constrs)

    @property
    def decisions(self) -> List[Decision]:
        return list(self._vars)

    @property
    def first_stage_decisions(self) -> List[Decision]:
        return [v for v in self._vars if not v.is_recourse]

    @property
    def recourse_decisions(self) -> List[RecourseDecision]:
        return [v for v in self._vars if isinstance(v, RecourseDecision)]

    @property
    def random_parameters(self) -> List[RandomParameter]:
        return list(self._params.values())

    @property
    def constraints(self) -> List[Constraint]:
        return list(self._constrs)

    @property
    def goals(self) -> List[Goal]:
        return list(self._goals)

    def add_decision(
        self,
        lb: float = 0.0,
        ub: float = float("inf"),
        name: Optional[str] = None,
    ) -> Decision:
        """
        Add a first-stage decision to the model.

        Args:
            lb: Lower bound (default: 0)
            ub: Upper bound (default: +inf)
            name: Decision name (default: x_<index>)

        Returns:
            The created Decision object
        """
        return self._add(Decision, lb, ub, name, "x")

    def add_recourse_decision(
        self,
        lb: float = 0.0,
        ub: float = float("inf"),
        name: Optional[str] = None,
    ) -> RecourseDecision:
        """
        Add a recourse (second-stage) decision to the model.

        Args:
            lb: Lower bound (default: 0)
            ub: Upper bound (default: +inf)
            name: Decision name (default: y_<index>); clones are named
                ``<name>_<scenario number>``
        """
        return self._add(RecourseDecision, lb, ub, name, "y")

    def _add(self, cls, lb: float, ub: float, name: Optional[str], prefix: str):
        if math.isnan(lb) or math.isnan(ub) or lb > ub:
            raise InvalidInputError(f"invalid bounds [{lb}, {ub}] for decision {name!r}")
        index = len(self._vars)
        name = name or f"{prefix}_{index}"
        if any(v.name == name for v in self._vars):
            raise InvalidInputError(f"duplicate decision name {name!r}")
        var = cls(index=index, lb=lb, ub=ub, name=name)
        self._vars.append(var)
        return var

    def add_random_parameter(
        self,
        name: str,
        distribution: Union[Distribution, DistributedValue],
    ) -> RandomParameter:
        """
        Add a random parameter bound to a distribution.

        Args:
            name: Unique parameter name
            distribution: A distribution, or an already built distributed value

        Returns:
            The created RandomParameter object
        """
        if name in self._params:
            raise InvalidInputError(f"duplicate random parameter name {name!r}")
        if isinstance(distribution, DistributedValue):
            value = distribution
            value.name = name
        else:
            value = distributed_value(distribution, name)
        param = RandomParameter(name, value)
        self._params[name] = param
        return param

    def add_scenarios_parameter(
        self, name: str, scenarios: Iterable[Tuple[float, float]]
    ) -> RandomParameter:
        """
        Add a random parameter with explicit (probability, value) scenarios.

        Raises:
            ModelDataError: If the probabilities do not sum to one
        """
        return self.add_random_parameter(name, ExplicitScenariosValue.from_pairs(name, scenarios))

    def add_constr(
        self,
        constraint: Constraint,
        name: Optional[str] = None,
    ) -> Constraint:
        """
        Add a constraint to the model.

        Args:
            constraint: Constraint object (from comparison operators)
            name: Optional constraint name

        Returns:
            The added Constraint object

        Example:
            >>> model.add_constr(sales <= demand, name="market")
        """
        if not isinstance(constraint, Constraint):
            raise InvalidInputError(f"expected a Constraint, got {type(constraint).__name__}")
        if name:
            constraint.name = name
        constraint.index = len(self._constrs)
        if not constraint.name:
            constraint.name = f"c_{constraint.index}"
        self._constrs.append(constraint)
        return constraint

    def add_constrs(self, constraints: List[Constraint]) -> List[Constraint]:
        """Add multiple constraints to the model."""
        for c in constraints:
            self.add_constr(c)
        return constraints

    def add_goal(
        self,
        expr: Operand,
        sense: str = "minimize",
        name: Optional[str] = None,
        enabled: bool = True,
    ) -> Goal:
        """Append a goal; a model must end up with exactly one enabled goal."""
        goal = Goal(_as_expr(expr), sense, name or f"goal_{len(self._goals)}", enabled)
        self._goals.append(goal)
        return goal

    def minimize(self, expr: Operand) -> Goal:
        """Set the goal to minimize ``expr`` (replaces existing goals)."""
        self._goals = []
        return self.add_goal(expr, "minimize")

    def maximize(self, expr: Operand) -> Goal:
        """Set the goal to maximize ``expr`` (replaces existing goals)."""
        self._goals = []
        return self.add_goal(expr, "maximize")

    # Scenario model boundary used by the deterministic-equivalent builder

    def distributed_values(self) -> List[DistributedValue]:
        return [p.value for p in self._params.values()]

    def clone_recourse(self, decision: RecourseDecision, scenario_index: int) -> RecourseClone:
        """Create the clone of ``decision`` for the 0-based ``scenario_index``."""
        clone = RecourseClone(
            name=f"{decision.name}_{scenario_index + 1}",
            lb=decision.lb,
            ub=decision.ub,
            parent_index=decision.index,
            scenario_index=scenario_index,
        )
        decision.clones.append(clone)
        return clone

    def record_probabilities(self, decision: RecourseDecision, probabilities: Any) -> None:
        decision.probabilities = np.asarray(probabilities, dtype=np.float64)

    def reset(self) -> None:
        """Discard recourse clones and results so the model can be solved again."""
        for decision in self.recourse_decisions:
            decision.reset()

    def solve(
        self,
        sampling: Optional["SamplingParameters"] = None,
        directive: Optional["StochasticDirective"] = None,
        params: Optional[Dict[str, Any]] = None,
        query_abort=None,
    ) -> "StochasticResult":
        """
        Build the deterministic equivalent and solve it.

        Args:
            sampling: Sampling options (default: automatic)
            directive: Stochastic directive (default threshold 500)
            params: Linear solver parameters (max_iterations, tolerance)
            query_abort: Callable polled between scenarios; returning True
                aborts the solve with AbortedError

        Returns:
            StochasticResult with status, objective and recourse statistics
        """
        from .stochastic.problem import solve_model

        return solve_model(self, sampling, directive, params=params, query_abort=query_abort)

    def __repr__(self) -> str:
        return (
            f"StochasticModel(vars={self.num_vars}, constrs={self.num_constrs}, "
            f"random_parameters={len(self._params)})"
        )
