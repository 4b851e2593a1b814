"""
stochProx Result Classes
========================

Data classes for linear solver results and status.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List

import numpy as np


class Status(Enum):
    """
    Solver status codes.

    Attributes:
        OPTIMAL: Solution found within tolerance
        PRIMAL_INFEASIBLE: Problem has no feasible solution
        DUAL_INFEASIBLE: Problem is unbounded (objective → -∞)
        MAX_ITERATIONS: Maximum iteration limit reached
        NUMERICAL_ERROR: Numerical issues encountered
        UNSOLVED: Problem not yet solved
    """
    OPTIMAL = "optimal"
    PRIMAL_INFEASIBLE = "primal_infeasible"
    DUAL_INFEASIBLE = "dual_infeasible"
    MAX_ITERATIONS = "max_iterations"
    NUMERICAL_ERROR = "numerical_error"
    UNSOLVED = "unsolved"

    def __str__(self) -> str:
        return self.value

    @property
    def is_successful(self) -> bool:
        """True if an optimal solution was found."""
        return self == Status.OPTIMAL

    @property
    def has_solution(self) -> bool:
        """True if a (possibly suboptimal) solution is available."""
        return self in (Status.OPTIMAL, Status.MAX_ITERATIONS)


@dataclass
class SolveResult:
    """
    Result of solving an LP.

    Attributes:
        status: Solver status
        objective: Optimal objective value
        x: Primal solution vector
        y: Dual solution vector (row marginals)
        iterations: Number of iterations performed
        solve_time: Wall clock time in seconds

    Example:
        >>> result = solve(c, A=A, constraint_l=l, constraint_u=u)
        >>> if result.status == Status.OPTIMAL:
        ...     print(f"Optimal value: {result.objective}")
    """

    status: Status
    objective: float
    x: np.ndarray
    y: np.ndarray
    iterations: int
    solve_time: float

    # Optional metadata
    problem_info: Dict[str, Any] = field(default_factory=dict)

    def __repr__(self) -> str:
        return (
            f"SolveResult(status={self.status}, "
            f"objective={self.objective:.6g}, "
            f"iterations={self.iterations}, "
            f"time={self.solve_time:.4f}s)"
        )

    def get_value(self, column: int) -> float:
        """Solution value of one column."""
        return float(self.x[column])

    def get_values(self, columns: List[int]) -> np.ndarray:
        """Solution values of several columns."""
        return self.x[list(columns)]

    def summary(self) -> str:
        """Return a formatted summary of the solve result."""
        lines = [
            "=" * 50,
            "stochProx Solve Summary",
            "=" * 50,
            f"Status:           {self.status}",
            f"Objective:        {self.objective:.10g}",
            f"Iterations:       {self.iterations}",
            f"Solve time:       {self.solve_time:.4f} s",
            "=" * 50,
        ]
        return "\n".join(lines)
