"""Tail probabilities and interval bounds from the t and F distributions."""

from __future__ import annotations

import math
from typing import Tuple

from scipy.stats import f as f_dist
from scipy.stats import t as student_t

ALTERNATIVES = ("two-sided", "less", "greater")
DEFAULT_CONFIDENCE_LEVEL = 0.95
DEFAULT_ALPHA = 0.05


def check_alternative(alternative: str) -> str:
    alt = str(alternative).lower()
    if alt not in ALTERNATIVES:
        raise ValueError(f"alternative must be one of {ALTERNATIVES}, got {alternative!r}")
    return alt


def check_confidence_level(confidence_level: float) -> float:
    level = float(confidence_level)
    if not 0.0 < level < 1.0:
        raise ValueError(f"confidence_level must lie in (0, 1), got {confidence_level}")
    return level


def t_p_value(t_stat: float, df: float, alternative: str = "two-sided") -> float:
    """p-value of a t statistic for the given alternative hypothesis."""
    if alternative == "two-sided":
        p_value = 2.0 * float(student_t.sf(abs(t_stat), df))
    elif alternative == "greater":
        p_value = float(student_t.sf(t_stat, df))
    else:
        p_value = float(student_t.cdf(t_stat, df))
    return max(min(p_value, 1.0), 0.0)


def t_interval(
    estimate: float,
    std_error: float,
    df: float,
    confidence_level: float,
    alternative: str = "two-sided",
) -> Tuple[float, float]:
    """Confidence interval ``estimate ± t_crit * std_error``.

    One-sided alternatives give a half-open interval, as ``t.test`` does:
    ``"less"`` bounds the estimate from above, ``"greater"`` from below.
    """
    if alternative == "two-sided":
        t_crit = float(student_t.ppf(0.5 + confidence_level / 2.0, df))
        return estimate - t_crit * std_error, estimate + t_crit * std_error
    t_crit = float(student_t.ppf(confidence_level, df))
    if alternative == "less":
        return -math.inf, estimate + t_crit * std_error
    return estimate - t_crit * std_error, math.inf


def f_p_value(f_stat: float, df_num: float, df_den: float) -> float:
    """Upper-tail probability of an F statistic."""
    if math.isnan(f_stat):
        return math.nan
    return float(f_dist.sf(f_stat, df_num, df_den))
