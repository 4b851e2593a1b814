"""stochProx Linear Solver Interface."""

from __future__ import annotations

import logging
import time
from typing import Any, Dict, List, Optional, Union

import numpy as np
from scipy import sparse
from scipy.optimize import linprog

from .exceptions import DimensionError, InvalidInputError
from .result import SolveResult, Status

logger = logging.getLogger(__name__)

_STATUS_MAP = {
    0: Status.OPTIMAL,
    1: Status.MAX_ITERATIONS,
    2: Status.PRIMAL_INFEASIBLE,
    3: Status.DUAL_INFEASIBLE,
    4: Status.NUMERICAL_ERROR,
}


def solve(
    c: np.ndarray,
    A: Optional[Union[np.ndarray, sparse.spmatrix]] = None,
    b: Optional[np.ndarray] = None,
    lb: Optional[np.ndarray] = None,
    ub: Optional[np.ndarray] = None,
    constraint_l: Optional[np.ndarray] = None,
    constraint_u: Optional[np.ndarray] = None,
    constraint_senses: Optional[List[str]] = None,
    params: Optional[Dict[str, Any]] = None,
) -> SolveResult:
    """
    Solve the LP  min c'x  s.t.  constraint_l <= Ax <= constraint_u,  lb <= x <= ub.

    Rows can be given as ranges (``constraint_l``/``constraint_u``), as
    ``b`` with ``constraint_senses`` ("<=", ">=", "=="), or as ``b`` alone
    for equality rows. The LP is handed to SciPy's HiGHS backend.

    Args:
        params: ``max_iterations`` / ``max_iters`` and ``tolerance`` / ``tol``
    """
    start_time = time.perf_counter()
    params = params or {}
    max_iters = params.get("max_iterations", params.get("max_iters"))
    tol = params.get("tolerance", params.get("tol"))

    c = np.asarray(c, dtype=np.float64).ravel()
    n = len(c)
    lb = np.zeros(n) if lb is None else np.asarray(lb, dtype=np.float64).ravel()
    ub = np.full(n, np.inf) if ub is None else np.asarray(ub, dtype=np.float64).ravel()

    if len(lb) != n or len(ub) != n:
        raise DimensionError(f"Bounds mismatch: lb={len(lb)}, ub={len(ub)}, n={n}")

    if A is not None:
        A = A.tocsr() if sparse.issparse(A) else sparse.csr_matrix(np.atleast_2d(np.asarray(A, dtype=np.float64)))
        m = A.shape[0]
        if A.shape[1] != n:
            raise DimensionError(f"A columns {A.shape[1]} != n={n}")
    else:
        m = 0
        A = sparse.csr_matrix((0, n))

    if constraint_senses is not None:
        if b is None:
            raise InvalidInputError("b required with constraint_senses")
        b = np.asarray(b, dtype=np.float64).ravel()
        constr_l = np.full(m, -np.inf)
        constr_u = np.full(m, np.inf)
        for i, sense in enumerate(constraint_senses):
            if sense in ("=", "=="):
                constr_l[i] = constr_u[i] = b[i]
            elif sense in ("<=", "<"):
                constr_u[i] = b[i]
            elif sense in (">=", ">"):
                constr_l[i] = b[i]
            else:
                raise InvalidInputError(f"unknown constraint sense {sense!r}")
    elif constraint_l is not None or constraint_u is not None:
        constr_l = np.asarray(constraint_l, dtype=np.float64) if constraint_l is not None else np.full(m, -np.inf)
        constr_u = np.asarray(constraint_u, dtype=np.float64) if constraint_u is not None else np.full(m, np.inf)
    elif b is not None:
        b = np.asarray(b, dtype=np.float64).ravel()
        constr_l = constr_u = b
    else:
        constr_l = constr_u = np.zeros(m)

    if len(constr_l) != m or len(constr_u) != m:
        raise DimensionError(f"Row bounds mismatch: {len(constr_l)}/{len(constr_u)} for {m} rows")

    result = _solve_highs(c, A, lb, ub, constr_l, constr_u, max_iters, tol)
    result.solve_time = time.perf_counter() - start_time
    return result


def _solve_highs(c, A, lb, ub, constr_l, constr_u, max_iters, tol):
    n, m = len(c), A.shape[0]
    A_ub, b_ub, A_eq, b_eq = None, None, None, None
    eq_rows = np.array([], dtype=int)
    ub_rows, ub_signs = np.array([], dtype=int), np.array([])
    if m > 0:
        eq_mask = np.abs(constr_l - constr_u) < 1e-10
        eq_rows = np.flatnonzero(eq_mask)
        if eq_rows.size:
            A_eq, b_eq = A[eq_rows], constr_l[eq_rows]
        upper = np.flatnonzero(~eq_mask & ~np.isinf(constr_u))
        lower = np.flatnonzero(~eq_mask & ~np.isinf(constr_l))
        # Ranges are split into  A x <= u  and  -A x <= -l
        ub_rows = np.concatenate([upper, lower])
        ub_signs = np.concatenate([np.ones(upper.size), -np.ones(lower.size)])
        if ub_rows.size:
            A_ub = sparse.vstack([A[upper], -A[lower]]).tocsr()
            b_ub = np.concatenate([constr_u[upper], -constr_l[lower]])

    bounds = [(l if not np.isinf(l) else None, u if not np.isinf(u) else None) for l, u in zip(lb, ub)]
    options = {}
    if max_iters is not None:
        options["maxiter"] = int(max_iters)
    if tol is not None:
        options["primal_feasibility_tolerance"] = float(tol)
        options["dual_feasibility_tolerance"] = float(tol)

    res = linprog(c, A_ub=A_ub, b_ub=b_ub, A_eq=A_eq, b_eq=b_eq, bounds=bounds,
                  method="highs", options=options)
    status = _STATUS_MAP.get(res.status, Status.NUMERICAL_ERROR)
    if status is not Status.OPTIMAL:
        logger.warning("HiGHS finished with status %s: %s", status, res.message)

    # Row marginals in terms of the original rows
    y = np.zeros(m)
    if res.success:
        if eq_rows.size:
            y[eq_rows] = res.eqlin.marginals
        if ub_rows.size:
            np.add.at(y, ub_rows, ub_signs * res.ineqlin.marginals)

    return SolveResult(
        status=status,
        objective=float(res.fun) if res.success else float("nan"),
        x=res.x if res.x is not None else np.full(n, np.nan),
        y=y,
        iterations=int(getattr(res, "nit", 0)),
        solve_time=0.0,
        problem_info={"n": n, "m": m, "message": res.message},
    )
