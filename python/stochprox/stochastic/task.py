"""
Linear Stochastic Task
======================

Receives the columns, constraint rows and the aggregated goal row of a
deterministic equivalent and forwards them to the linear solver.

There is exactly one goal row however many scenarios are added: each
scenario folds its probability-weighted goal terms into it.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Tuple

import numpy as np
from scipy import sparse

from ..exceptions import DimensionError, InvalidInputError
from ..result import SolveResult
from ..utils.validation import validate_problem

logger = logging.getLogger(__name__)


@dataclass
class Column:
    """One column (decision or recourse clone) of the deterministic equivalent."""

    name: str
    lb: float
    ub: float


@dataclass
class Row:
    """One constraint row: lower <= coeffs . x <= upper."""

    name: str
    coeffs: Dict[int, float]
    lower: float
    upper: float


class LinearStochasticTask:
    """
    Deterministic equivalent under construction.

    Args:
        sense: "minimize" or "maximize"

    Example:
        >>> task = LinearStochasticTask()
        >>> x = task.add_column("x", 0.0, 10.0)
        >>> task.add_goal_terms({x: 2.0}, 0.0, weight=0.5)
        >>> task.add_row("cap", {x: 1.0}, "<=", 4.0)
        >>> result = task.solve()
    """

    def __init__(self, sense: str = "minimize"):
        if sense not in ("minimize", "maximize"):
            raise InvalidInputError(f"unknown goal sense {sense!r}")
        self.sense = sense
        self.columns: List[Column] = []
        self.rows: List[Row] = []
        self.goal: Dict[int, float] = {}
        self.goal_constant = 0.0
        self._names: Dict[str, int] = {}

    @property
    def column_count(self) -> int:
        return len(self.columns)

    @property
    def row_count(self) -> int:
        """Constraint rows plus the single goal row."""
        return len(self.rows) + 1

    @property
    def nonzero_count(self) -> int:
        row_nz = sum(1 for row in self.rows for v in row.coeffs.values() if v != 0.0)
        goal_nz = sum(1 for v in self.goal.values() if v != 0.0)
        return row_nz + goal_nz

    def column_index(self, name: str) -> int:
        return self._names[name]

    def add_column(self, name: str, lb: float, ub: float) -> int:
        """Add a column and return its index."""
        if name in self._names:
            raise InvalidInputError(f"duplicate column name {name!r}")
        index = len(self.columns)
        self.columns.append(Column(name, lb, ub))
        self._names[name] = index
        return index

    def add_row(
        self,
        name: str,
        coeffs: Mapping[int, float],
        sense: str,
        rhs: float,
    ) -> int:
        """
        Add the row ``coeffs . x <sense> rhs`` and return its index.

        Raises:
            DimensionError: If a coefficient refers to an unknown column
        """
        for column in coeffs:
            if not 0 <= column < len(self.columns):
                raise DimensionError(f"row {name!r} refers to column {column}")
        if sense == "<=":
            lower, upper = -math.inf, rhs
        elif sense == ">=":
            lower, upper = rhs, math.inf
        elif sense == "==":
            lower = upper = rhs
        else:
            raise InvalidInputError(f"unknown constraint sense {sense!r}")
        self.rows.append(Row(name, dict(coeffs), lower, upper))
        return len(self.rows) - 1

    def add_goal_terms(
        self, coeffs: Mapping[int, float], constant: float, weight: float = 1.0
    ) -> None:
        """Fold ``weight * (coeffs . x + constant)`` into the goal row."""
        for column, coef in coeffs.items():
            if not 0 <= column < len(self.columns):
                raise DimensionError(f"goal refers to column {column}")
            self.goal[column] = self.goal.get(column, 0.0) + weight * coef
        self.goal_constant += weight * constant

    def goal_coefficient(self, column: int) -> float:
        return self.goal.get(column, 0.0)

    def to_matrices(self) -> Tuple[np.ndarray, sparse.csr_matrix, np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
        """
        Assemble the task in matrix form.

        Returns:
            (c, A, row_lower, row_upper, lb, ub) with ``c`` in the goal's sense
        """
        n, m = len(self.columns), len(self.rows)
        c = np.zeros(n)
        for column, coef in self.goal.items():
            c[column] = coef

        rows, cols, data = [], [], []
        for i, row in enumerate(self.rows):
            for column, coef in row.coeffs.items():
                rows.append(i)
                cols.append(column)
                data.append(coef)
        A = sparse.csr_matrix((data, (rows, cols)), shape=(m, n))
        row_lower = np.array([row.lower for row in self.rows], dtype=np.float64)
        row_upper = np.array([row.upper for row in self.rows], dtype=np.float64)
        lb = np.array([col.lb for col in self.columns], dtype=np.float64)
        ub = np.array([col.ub for col in self.columns], dtype=np.float64)
        return c, A, row_lower, row_upper, lb, ub

    def trace_model_details(self) -> None:
        logger.info(
            "DeterministicEquivalent model has %d columns, %d rows and %d nonzeroes",
            self.column_count,
            self.row_count,
            self.nonzero_count,
        )

    def solve(self, params: Optional[Dict[str, Any]] = None) -> SolveResult:
        """
        Forward the task to the linear solver.

        The returned objective is in the goal's sense and includes the
        constant part of the goal.

        Raises:
            DimensionError: If the assembled data is inconsistent
        """
        from ..solver import solve

        c, A, row_lower, row_upper, lb, ub = self.to_matrices()
        is_valid, message = validate_problem(c, A, row_lower, row_upper, lb, ub)
        if not is_valid:
            raise DimensionError(message)

        sign = -1.0 if self.sense == "maximize" else 1.0
        result = solve(
            c=sign * c,
            A=A,
            lb=lb,
            ub=ub,
            constraint_l=row_lower,
            constraint_u=row_upper,
            params=params,
        )
        result.objective = sign * result.objective + self.goal_constant
        return result

    def __repr__(self) -> str:
        return (
            f"LinearStochasticTask(columns={self.column_count}, rows={self.row_count}, "
            f"nonzeroes={self.nonzero_count})"
        )
