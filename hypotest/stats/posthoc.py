"""Tukey honest-significant-difference pairwise comparisons."""

from __future__ import annotations

import itertools
import math
from typing import Any, Dict, Mapping, Sequence

import numpy as np
import pandas as pd
from scipy.stats import studentized_range

from ..data_processing import (
    DEFAULT_MISSING_POLICY,
    column_name,
    complete_cases,
    split_by_level,
    to_factor,
    to_float_array,
)
from ..schema import ANOVA, RESIDUAL_TERM, TUKEY
from .anova import factor_names, one_way_groups, two_way_anova, within_group_error
from .distributions import DEFAULT_ALPHA


def _check_alpha(alpha: float) -> float:
    alpha = float(alpha)
    if not 0.0 < alpha < 1.0:
        raise ValueError(f"alpha must lie in (0, 1), got {alpha}")
    return alpha


def pairwise_table(
    grouped: Mapping[Any, np.ndarray],
    ms_resid: float,
    df_resid: float,
    alpha: float = DEFAULT_ALPHA,
) -> pd.DataFrame:
    """Tukey-Kramer comparisons of every unordered pair of groups.

    Args:
        grouped (Mapping[Any, numpy.ndarray]): Observations per group, in
            level order.
        ms_resid (float): Residual mean square of the fitted model.
        df_resid (float): Residual degrees of freedom.
        alpha (float): Family-wise error rate of the simultaneous intervals.

    Returns:
        pandas.DataFrame: One row per pair with ``diff`` (later minus earlier
        level), simultaneous ``lower`` / ``upper`` bounds at ``1 - alpha``
        and the family-wise adjusted p-value ``p_adj``.
    """
    levels = list(grouped)
    k = len(levels)
    means = {lvl: float(np.mean(arr)) for lvl, arr in grouped.items()}
    sizes = {lvl: len(arr) for lvl, arr in grouped.items()}
    q_crit = float(studentized_range.ppf(1.0 - alpha, k, df_resid))

    records = []
    for first, second in itertools.combinations(levels, 2):
        diff = means[second] - means[first]
        se = math.sqrt(ms_resid / 2.0 * (1.0 / sizes[first] + 1.0 / sizes[second]))
        if se > 0:
            p_adj = float(studentized_range.sf(abs(diff) / se, k, df_resid))
        else:
            p_adj = 0.0 if diff != 0 else 1.0
        records.append(
            {
                TUKEY.group1: first,
                TUKEY.group2: second,
                TUKEY.diff: diff,
                TUKEY.lower: diff - q_crit * se,
                TUKEY.upper: diff + q_crit * se,
                TUKEY.p_adj: min(max(p_adj, 0.0), 1.0),
            }
        )
    columns = [TUKEY.group1, TUKEY.group2, TUKEY.diff, TUKEY.lower, TUKEY.upper, TUKEY.p_adj]
    return pd.DataFrame.from_records(records, columns=columns)


def tukey_hsd(
    values: Sequence[float],
    groups: Sequence[Any],
    alpha: float = DEFAULT_ALPHA,
    missing: str = DEFAULT_MISSING_POLICY,
) -> pd.DataFrame:
    """Post-hoc pairwise comparisons after a one-way ANOVA.

    Every unordered pair of the k groups appears exactly once. The error
    variance is the pooled within-group mean square, and both the intervals
    and p-values use the studentized range distribution, so the family-wise
    error rate across all C(k, 2) comparisons is held at ``alpha``.

    Raises:
        InsufficientGroupsError: Same conditions as ``one_way_anova``.
    """
    alpha = _check_alpha(alpha)
    grouped = one_way_groups(values, groups, "tukey_hsd", missing)
    ss_within, df_within = within_group_error(grouped)
    return pairwise_table(grouped, ss_within / df_within, df_within, alpha)


def tukey_hsd_two_way(
    values: Sequence[float],
    factor_a: Sequence[Any],
    factor_b: Sequence[Any],
    alpha: float = DEFAULT_ALPHA,
    missing: str = DEFAULT_MISSING_POLICY,
) -> Dict[str, pd.DataFrame]:
    """Pairwise comparisons for each term of a two-way factorial ANOVA.

    Returns:
        dict[str, pandas.DataFrame]: Tables keyed by factor A name, factor B
        name and ``"A:B"``. Main-effect tables compare raw marginal means;
        the interaction table compares cell means labelled
        ``"<level_a>:<level_b>"``. All use the residual mean square and
        degrees of freedom of the full ``a * b`` model.
    """
    operation = "tukey_hsd_two_way"
    alpha = _check_alpha(alpha)
    anova = two_way_anova(values, factor_a, factor_b, missing=missing)
    residual = anova.table.loc[RESIDUAL_TERM]
    ms_resid = float(residual[ANOVA.mean_sq])
    df_resid = float(residual[ANOVA.df])

    name_a, name_b = factor_names(factor_a, factor_b)
    frame = complete_cases(
        {"values": values, "a": factor_a, "b": factor_b}, operation, missing
    )
    y = to_float_array(frame["values"], column_name(values, "values"), operation)
    fa = to_factor(frame["a"])
    fb = to_factor(frame["b"])

    cells: Dict[str, np.ndarray] = {}
    codes_a = np.asarray(fa.codes)
    codes_b = np.asarray(fb.codes)
    for (ia, la), (ib, lb) in itertools.product(
        enumerate(fa.categories), enumerate(fb.categories)
    ):
        cells[f"{la}:{lb}"] = y[(codes_a == ia) & (codes_b == ib)]

    return {
        name_a: pairwise_table(split_by_level(y, fa), ms_resid, df_resid, alpha),
        name_b: pairwise_table(split_by_level(y, fb), ms_resid, df_resid, alpha),
        f"{name_a}:{name_b}": pairwise_table(cells, ms_resid, df_resid, alpha),
    }
