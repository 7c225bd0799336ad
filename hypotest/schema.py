"""Define standardized column names for result DataFrames."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class AnovaColumns:
    """Column labels of ANOVA tables.

    Attributes:
        term: Name of the model term (factor, numeric predictor, interaction)
            or ``"Residuals"`` for the error row.
        df: Degrees of freedom attributed to the term.
        sum_sq: Sequential (Type I) sum of squares; each term is adjusted only
            for the terms entered before it.
        mean_sq: ``sum_sq / df``.
        f_value: Ratio of the term mean square to the residual mean square.
            Missing (NaN) on the residual row.
        p_value: Upper-tail probability of ``f_value`` under the F
            distribution with ``(df, residual df)`` degrees of freedom.
    """

    term: str = "term"
    df: str = "df"
    sum_sq: str = "sum_sq"
    mean_sq: str = "mean_sq"
    f_value: str = "F"
    p_value: str = "p_value"


@dataclass(frozen=True)
class TukeyColumns:
    """Column labels of post-hoc pairwise comparison tables.

    ``diff`` is always the mean of ``group2`` minus the mean of ``group1``,
    with ``group1`` the earlier level in factor order.
    """

    group1: str = "group1"
    group2: str = "group2"
    diff: str = "diff"
    lower: str = "lower"
    upper: str = "upper"
    p_adj: str = "p_adj"


@dataclass(frozen=True)
class CoefficientColumns:
    """Column labels of regression coefficient tables."""

    estimate: str = "estimate"
    std_error: str = "std_error"
    t_value: str = "t_value"
    p_value: str = "p_value"


ANOVA = AnovaColumns()
TUKEY = TukeyColumns()
COEFFICIENTS = CoefficientColumns()

RESIDUAL_TERM = "Residuals"
INTERCEPT = "intercept"
