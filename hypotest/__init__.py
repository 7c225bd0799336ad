"""
A Python package of classical hypothesis tests for tabular data.

Covers t-tests, one- and two-way ANOVA with Tukey post-hoc comparisons,
correlation tests and linear regression with categorical predictors, each
returning an immutable structured result.

Modules:
    - stats: Pure statistical routines over sequences (the test runner).
    - frame: Column-name front end for pandas DataFrames and model formulas.
    - data_processing: Coercion, factor level order and missing-value policy.
    - results: TestResult and RegressionResult value types.
    - errors: Typed input-validation failures.
    - datasets: The iris and mtcars example tables.
"""

__version__ = "1.0.0"

from .errors import (
    InsufficientDataError,
    InsufficientGroupsError,
    LengthMismatchError,
    MissingValueError,
    RankDeficiencyError,
    StatisticalTestError,
)
from .frame import aov, group_means, lm, parse_formula, t_test_by_group
from .results import RegressionResult, TestResult
from .stats import (
    anova_from_model,
    correlation_test,
    linear_regression,
    one_sample_t_test,
    one_way_anova,
    tukey_hsd,
    tukey_hsd_two_way,
    two_sample_t_test,
    two_way_anova,
)

__all__ = [
    # Test runner
    "one_sample_t_test",
    "two_sample_t_test",
    "one_way_anova",
    "two_way_anova",
    "tukey_hsd",
    "tukey_hsd_two_way",
    "correlation_test",
    "linear_regression",
    "anova_from_model",
    # DataFrame front end
    "group_means",
    "t_test_by_group",
    "parse_formula",
    "lm",
    "aov",
    # Results
    "TestResult",
    "RegressionResult",
    # Errors
    "StatisticalTestError",
    "InsufficientDataError",
    "InsufficientGroupsError",
    "LengthMismatchError",
    "RankDeficiencyError",
    "MissingValueError",
]
