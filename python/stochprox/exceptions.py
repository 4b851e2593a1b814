"""
stochProx Exception Classes
===========================

Custom exceptions for stochProx error handling.

Three failure families are kept apart:

- invalid input (``InvalidInputError`` / ``ModelDataError``): the caller gave
  parameters or model data outside their domain
- non-convergence (``NonConvergenceError``): a numerical algorithm hit its
  iteration cap; an engine limitation, not a user mistake
- cancellation (``AbortedError``): the cooperative abort predicate fired
"""

from typing import Optional


class StochproxError(Exception):
    """Base exception for all stochProx errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class InvalidInputError(StochproxError, ValueError):
    """
    Raised when input data is invalid.

    Examples: NaN parameters, negative standard deviation, probability
    outside [0, 1], unknown sampling method.
    """

    def __init__(self, message: str) -> None:
        super().__init__(f"Invalid input: {message}")


class ModelDataError(InvalidInputError):
    """
    Raised when model-level data violates a stochastic modeling rule.

    Examples: explicit scenario probabilities not summing to one, a model
    with no goal, a goal that multiplies a decision by a random parameter.
    """

    def __init__(self, message: str) -> None:
        StochproxError.__init__(self, f"Model data error: {message}")


class DimensionError(StochproxError):
    """
    Raised when matrix/vector dimensions are incompatible.
    """

    def __init__(self, message: str) -> None:
        super().__init__(f"Dimension mismatch: {message}")


class NonConvergenceError(StochproxError):
    """
    Raised when an iterative numerical algorithm fails to terminate.

    Examples: BTRD rejection sampling exceeding its trial cap, the binomial
    quantile recurrence running past the number of trials.
    """

    def __init__(
        self,
        message: str = "Numerical algorithm did not converge",
        iterations: Optional[int] = None,
    ) -> None:
        self.iterations = iterations
        super().__init__(message)


class AbortedError(StochproxError):
    """
    Raised when the abort predicate asks the pipeline to stop.

    No partial model is produced.
    """

    def __init__(
        self,
        message: str = "Solve aborted",
        scenarios_completed: Optional[int] = None,
    ) -> None:
        self.scenarios_completed = scenarios_completed
        super().__init__(message)
