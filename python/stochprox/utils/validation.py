"""Input validation utilities."""

from typing import Any, Optional, Tuple

import numpy as np


def validate_problem(
    c: np.ndarray,
    A: Any,
    row_lower: np.ndarray,
    row_upper: np.ndarray,
    lb: Optional[np.ndarray] = None,
    ub: Optional[np.ndarray] = None,
) -> Tuple[bool, str]:
    """
    Validate assembled LP data before it is handed to the linear solver.

    Returns:
        (is_valid, error_message) tuple
    """
    n = len(c)

    if A is not None:
        m, n_A = A.shape
        if n_A != n:
            return False, f"A has {n_A} columns but c has {n} elements"
        if len(row_lower) != m or len(row_upper) != m:
            return False, (
                f"A has {m} rows but row bounds have {len(row_lower)}/{len(row_upper)} elements"
            )

    if lb is not None and len(lb) != n:
        return False, f"lb has {len(lb)} elements, expected {n}"

    if ub is not None and len(ub) != n:
        return False, f"ub has {len(ub)} elements, expected {n}"

    if np.any(np.isnan(c)):
        return False, "c contains NaN values"

    if np.any(np.isnan(row_lower)) or np.any(np.isnan(row_upper)):
        return False, "row bounds contain NaN values"

    if np.any(np.asarray(row_lower) > np.asarray(row_upper)):
        return False, "a row lower bound exceeds its upper bound"

    return True, ""
