"""Typed failures raised by the statistical test runner.

Every error derives from ``ValueError`` and carries the public operation name
plus the specific cause.
"""

from __future__ import annotations


class StatisticalTestError(ValueError):
    """Base class for input-validation failures of a statistical operation.

    Attributes:
        operation (str): Public function that rejected its input, for example
            ``"one_way_anova"``.
        cause (str): Human-readable description of the offending condition.
    """

    def __init__(self, operation: str, cause: str):
        self.operation = operation
        self.cause = cause
        super().__init__(f"{operation}: {cause}")


class InsufficientDataError(StatisticalTestError):
    """Fewer observations than the test's minimum degrees of freedom."""


class InsufficientGroupsError(StatisticalTestError):
    """Too few groups, a group with too few rows, or the wrong level count."""


class LengthMismatchError(StatisticalTestError):
    """Paired observations that cannot be matched one-to-one."""


class RankDeficiencyError(StatisticalTestError):
    """Regression design matrix without full column rank."""


class MissingValueError(StatisticalTestError):
    """Missing values in a column the caller did not allow to be excluded."""
