"""Correlation coefficients with significance tests."""

from __future__ import annotations

import math
import warnings
from typing import Optional, Sequence, Tuple

import numpy as np
from scipy import stats as scipy_stats

from ..data_processing import DEFAULT_MISSING_POLICY, complete_cases, to_float_array
from ..errors import InsufficientDataError
from ..results import TestResult
from .distributions import (
    DEFAULT_CONFIDENCE_LEVEL,
    check_alternative,
    check_confidence_level,
    t_p_value,
)

CORRELATION_METHODS = ("pearson", "spearman", "kendall")


def _fisher_interval(
    r: float, n: int, confidence_level: float, alternative: str
) -> Optional[Tuple[float, float]]:
    """Confidence interval for Pearson's r via Fisher's z transform."""
    if n < 4:
        warnings.warn(
            "Confidence interval for Pearson's r needs at least 4 pairs.",
            RuntimeWarning,
            stacklevel=3,
        )
        return None
    if abs(r) >= 1.0:
        return r, r
    z = math.atanh(r)
    sigma = 1.0 / math.sqrt(n - 3)
    if alternative == "two-sided":
        crit = float(scipy_stats.norm.ppf(0.5 + confidence_level / 2.0))
        return math.tanh(z - crit * sigma), math.tanh(z + crit * sigma)
    crit = float(scipy_stats.norm.ppf(confidence_level))
    if alternative == "less":
        return -1.0, math.tanh(z + crit * sigma)
    return math.tanh(z - crit * sigma), 1.0


def correlation_test(
    x: Sequence[float],
    y: Sequence[float],
    method: str = "pearson",
    alternative: str = "two-sided",
    confidence_level: float = DEFAULT_CONFIDENCE_LEVEL,
    missing: str = DEFAULT_MISSING_POLICY,
) -> TestResult:
    """Test for association between two paired numeric variables.

    Args:
        x (Sequence[float]): First variable.
        y (Sequence[float]): Second variable, paired with ``x``.
        method (str): ``"pearson"`` (default), ``"spearman"`` or
            ``"kendall"``.
        alternative (str): ``"two-sided"``, ``"less"`` or ``"greater"``.
        confidence_level (float): Coverage of the Pearson interval.
        missing (str): ``"raise"`` or ``"drop"`` (incomplete pairs).

    Returns:
        TestResult: For Pearson, ``estimates["cor"]`` is r, the statistic is
        ``t = r * sqrt(df / (1 - r**2))`` with ``df = n - 2`` and the
        interval comes from Fisher's z transform (``None`` when n = 3). The
        rank methods report the coefficient itself as the statistic
        (``"rho"`` or ``"tau"``) with scipy's p-value and no interval.

    Raises:
        InsufficientDataError: If fewer than 3 complete pairs remain or either
            variable is constant.
        ValueError: If ``method`` is not supported.
    """
    operation = "correlation_test"
    method = str(method).lower()
    if method not in CORRELATION_METHODS:
        raise ValueError(f"method must be one of {CORRELATION_METHODS}, got {method!r}")
    alternative = check_alternative(alternative)
    confidence_level = check_confidence_level(confidence_level)

    frame = complete_cases({"x": x, "y": y}, operation, missing)
    xa = to_float_array(frame["x"], "x", operation)
    ya = to_float_array(frame["y"], "y", operation)
    n = int(len(xa))
    if n < 3:
        raise InsufficientDataError(
            operation, f"need at least 3 complete pairs for n-2 degrees of freedom, got {n}"
        )
    if np.ptp(xa) == 0 or np.ptp(ya) == 0:
        raise InsufficientDataError(
            operation, "one of the variables is constant; correlation is undefined"
        )

    df = n - 2
    if method == "pearson":
        r = float(np.clip(np.corrcoef(xa, ya)[0, 1], -1.0, 1.0))
        spread = 1.0 - r * r
        if spread <= 0.0:
            t_stat = math.copysign(math.inf, r)
        else:
            t_stat = r * math.sqrt(df / spread)
        return TestResult(
            name=operation,
            method="Pearson's product-moment correlation",
            statistic=float(t_stat),
            statistic_name="t",
            df=float(df),
            p_value=t_p_value(t_stat, df, alternative),
            estimates={"cor": r},
            confidence_interval=_fisher_interval(r, n, confidence_level, alternative),
            confidence_level=confidence_level,
            alternative=alternative,
            null_value=0.0,
            n_obs=n,
        )

    if method == "spearman":
        coef, p_value = scipy_stats.spearmanr(xa, ya, alternative=alternative)
        label, statistic_name, dof = "Spearman's rank correlation rho", "rho", float(df)
    else:
        coef, p_value = scipy_stats.kendalltau(xa, ya, alternative=alternative)
        label, statistic_name, dof = "Kendall's rank correlation tau", "tau", math.nan
    return TestResult(
        name=operation,
        method=label,
        statistic=float(coef),
        statistic_name=statistic_name,
        df=dof,
        p_value=float(p_value),
        estimates={statistic_name: float(coef)},
        alternative=alternative,
        null_value=0.0,
        n_obs=n,
    )
