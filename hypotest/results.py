"""Immutable result values returned by the statistical test runner."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple, Union

import numpy as np
import pandas as pd
from scipy.stats import t as student_t

from .schema import COEFFICIENTS

DegreesOfFreedom = Union[float, Tuple[float, float]]


def _freeze(mapping: Optional[Mapping[str, Any]]) -> Mapping[str, Any]:
    return MappingProxyType(dict(mapping or {}))


@dataclass(frozen=True, eq=False)
class TestResult:
    """Outcome of one hypothesis test.

    Attributes:
        name: Identifying test name (``"one_sample_t_test"``,
            ``"one_way_anova"``, ...).
        method: Human-readable label such as ``"Welch Two Sample t-test"``.
        statistic: Test statistic value.
        statistic_name: ``"t"``, ``"F"``, ``"rho"`` (Spearman) or ``"tau"``
            (Kendall).
        df: Degrees of freedom; a ``(numerator, denominator)`` pair for F
            tests and ``nan`` where the statistic has none.
        p_value: p-value for ``alternative``.
        estimates: Point estimates keyed by name (means, group means,
            correlation coefficient).
        confidence_interval: ``(low, high)`` for the primary estimate, or
            ``None`` when not defined for the test.
        confidence_level: Coverage of ``confidence_interval``.
        alternative: ``"two-sided"``, ``"less"`` or ``"greater"``.
        null_value: Hypothesised value of the primary estimate.
        n_obs: Number of observations used after missing-value handling.
        table: Supporting table (ANOVA table or pairwise comparisons), copied
            on construction; treat it as read-only.
    """

    __test__ = False

    name: str
    method: str
    statistic: float
    statistic_name: str
    df: DegreesOfFreedom
    p_value: float
    estimates: Mapping[str, float] = field(default_factory=dict)
    confidence_interval: Optional[Tuple[float, float]] = None
    confidence_level: Optional[float] = None
    alternative: str = "two-sided"
    null_value: Optional[float] = None
    n_obs: int = 0
    table: Optional[pd.DataFrame] = None

    def __post_init__(self):
        object.__setattr__(self, "estimates", _freeze(self.estimates))
        if self.table is not None:
            object.__setattr__(self, "table", self.table.copy())

    @property
    def f_statistic(self) -> float:
        if self.statistic_name != "F":
            raise AttributeError(f"{self.name} does not report an F statistic")
        return self.statistic

    @property
    def t_statistic(self) -> float:
        if self.statistic_name != "t":
            raise AttributeError(f"{self.name} does not report a t statistic")
        return self.statistic

    @property
    def estimate(self) -> float:
        """First (primary) point estimate."""
        if not self.estimates:
            return math.nan
        return next(iter(self.estimates.values()))

    def is_significant(self, alpha: float = 0.05) -> bool:
        return bool(self.p_value < alpha)


@dataclass(frozen=True, eq=False)
class RegressionResult:
    """Ordinary least-squares fit with per-coefficient inference.

    Coefficient keys are design-column names: ``"intercept"``, numeric
    predictor names, ``"<factor>[<level>]"`` for dummy columns and
    ``"<col_a>:<col_b>"`` for interaction columns.

    ``terms`` lists model terms in entry order and ``term_columns`` maps each
    term to its design columns; together with ``design_matrix`` and ``response``
    they are the context needed for a sequential ANOVA. The design matrix is
    held as a read-only array; ``design`` returns a fresh DataFrame copy.
    """

    coefficients: Mapping[str, float]
    std_errors: Mapping[str, float]
    t_values: Mapping[str, float]
    p_values: Mapping[str, float]
    r_squared: float
    adj_r_squared: float
    f_statistic: float
    f_df: Tuple[int, int]
    f_p_value: float
    df_resid: int
    residual_std_error: float
    n_obs: int
    terms: Tuple[str, ...]
    term_columns: Mapping[str, Tuple[str, ...]]
    response_name: str
    design_matrix: np.ndarray
    design_columns: Tuple[str, ...]
    response: np.ndarray
    fitted: np.ndarray
    residuals: np.ndarray
    levels: Mapping[str, Tuple[Any, ...]] = field(default_factory=dict)

    def __post_init__(self):
        for name in ("coefficients", "std_errors", "t_values", "p_values"):
            object.__setattr__(self, name, _freeze(getattr(self, name)))
        object.__setattr__(
            self,
            "term_columns",
            _freeze({k: tuple(v) for k, v in self.term_columns.items()}),
        )
        object.__setattr__(
            self, "levels", _freeze({k: tuple(v) for k, v in self.levels.items()})
        )
        object.__setattr__(self, "terms", tuple(self.terms))
        object.__setattr__(self, "design_columns", tuple(self.design_columns))
        for name in ("design_matrix", "response", "fitted", "residuals"):
            arr = np.array(getattr(self, name), dtype=float)
            arr.setflags(write=False)
            object.__setattr__(self, name, arr)

    @property
    def design(self) -> pd.DataFrame:
        """Design matrix as a new DataFrame with one column per coefficient."""
        return pd.DataFrame(np.array(self.design_matrix), columns=list(self.design_columns))

    @property
    def residual_mean_square(self) -> float:
        return float(self.residual_std_error**2)

    def coefficient_table(self) -> pd.DataFrame:
        """Return estimates, standard errors, t values and p-values per column."""
        cols = COEFFICIENTS
        return pd.DataFrame(
            {
                cols.estimate: pd.Series(dict(self.coefficients)),
                cols.std_error: pd.Series(dict(self.std_errors)),
                cols.t_value: pd.Series(dict(self.t_values)),
                cols.p_value: pd.Series(dict(self.p_values)),
            }
        ).loc[list(self.coefficients)]

    def conf_int(self, level: float = 0.95) -> pd.DataFrame:
        """Two-sided t-based confidence intervals for every coefficient."""
        if not 0.0 < level < 1.0:
            raise ValueError(f"level must lie in (0, 1), got {level}")
        t_crit = float(student_t.ppf(0.5 + level / 2.0, self.df_resid))
        rows: Dict[str, Tuple[float, float]] = {}
        for name, est in self.coefficients.items():
            half = t_crit * self.std_errors[name]
            rows[name] = (est - half, est + half)
        return pd.DataFrame.from_dict(rows, orient="index", columns=["lower", "upper"])
