"""
Statistical test runner.

This subpackage provides the hypothesis tests of the workshop as pure
functions over in-memory sequences. Every function returns a new immutable
result and raises a typed :mod:`hypotest.errors` exception on invalid input.

Modules:
    ttest:
        One-sample, paired and independent (Welch or pooled) t-tests.

    anova:
        One-way ANOVA, two-way factorial ANOVA and the sequential ANOVA table
        of a fitted regression.

    posthoc:
        Tukey HSD pairwise comparisons with family-wise error control.

    correlation:
        Pearson correlation with its t test; Spearman and Kendall rank
        correlations.

    regression:
        Ordinary least squares with numeric, categorical and interaction
        terms.

    distributions:
        t and F tail probabilities and interval helpers shared by the above.

Design Principle:
    This subpackage knows nothing about table layouts or column names beyond
    optional Series names; :mod:`hypotest.frame` adds the DataFrame front end.
"""

from .anova import anova_from_model, one_way_anova, two_way_anova
from .correlation import correlation_test
from .posthoc import tukey_hsd, tukey_hsd_two_way
from .regression import linear_regression
from .ttest import one_sample_t_test, two_sample_t_test

__all__ = [
    "one_sample_t_test",
    "two_sample_t_test",
    "one_way_anova",
    "two_way_anova",
    "anova_from_model",
    "tukey_hsd",
    "tukey_hsd_two_way",
    "correlation_test",
    "linear_regression",
]
