"""One-way and factorial analysis of variance.

The one-way test is computed from group sums of squares directly. The
two-way test and :func:`anova_from_model` share the regression machinery:
sequential (Type I) sums of squares are read off the orthogonal effects of a
QR decomposition of the design matrix, so each term is adjusted only for the
terms entered before it.
"""

from __future__ import annotations

import itertools
import math
import warnings
from typing import Any, Dict, List, Mapping, Sequence

import numpy as np
import pandas as pd

from ..data_processing import (
    DEFAULT_MISSING_POLICY,
    column_name,
    complete_cases,
    require_groups,
    split_by_level,
    to_factor,
    to_float_array,
)
from ..errors import InsufficientGroupsError
from ..results import RegressionResult, TestResult
from ..schema import ANOVA, RESIDUAL_TERM
from .distributions import f_p_value
from .regression import interaction_name, linear_regression


def _f_ratio(mean_sq: float, ms_resid: float) -> float:
    if ms_resid > 0:
        return mean_sq / ms_resid
    return math.inf if mean_sq > 0 else math.nan


def _anova_frame(
    rows: List[Dict[str, float]], ss_resid: float, df_resid: int
) -> pd.DataFrame:
    ms_resid = ss_resid / df_resid
    records = []
    for row in rows:
        mean_sq = row["sum_sq"] / row["df"]
        f_value = _f_ratio(mean_sq, ms_resid)
        records.append(
            {
                ANOVA.term: row["term"],
                ANOVA.df: int(row["df"]),
                ANOVA.sum_sq: float(row["sum_sq"]),
                ANOVA.mean_sq: float(mean_sq),
                ANOVA.f_value: float(f_value),
                ANOVA.p_value: f_p_value(f_value, row["df"], df_resid),
            }
        )
    records.append(
        {
            ANOVA.term: RESIDUAL_TERM,
            ANOVA.df: int(df_resid),
            ANOVA.sum_sq: float(ss_resid),
            ANOVA.mean_sq: float(ms_resid),
            ANOVA.f_value: math.nan,
            ANOVA.p_value: math.nan,
        }
    )
    return pd.DataFrame.from_records(records).set_index(ANOVA.term)


def one_way_groups(
    values: Sequence[float],
    groups: Sequence[Any],
    operation: str,
    missing: str = DEFAULT_MISSING_POLICY,
) -> Dict[Any, np.ndarray]:
    """Validate a value/group pair and split values by group level."""
    frame = complete_cases({"values": values, "groups": groups}, operation, missing)
    y = to_float_array(frame["values"], column_name(values, "values"), operation)
    grouped = split_by_level(y, to_factor(frame["groups"]))
    require_groups(grouped, operation)
    return grouped


def within_group_error(grouped: Mapping[Any, np.ndarray]) -> tuple[float, int]:
    """Pooled within-group sum of squares and its degrees of freedom."""
    ss_within = float(sum(np.sum((g - np.mean(g)) ** 2) for g in grouped.values()))
    df_within = int(sum(len(g) for g in grouped.values()) - len(grouped))
    return ss_within, df_within


def one_way_anova(
    values: Sequence[float],
    groups: Sequence[Any],
    missing: str = DEFAULT_MISSING_POLICY,
) -> TestResult:
    """Test whether the mean of ``values`` differs across ``groups``.

    Args:
        values (Sequence[float]): Response values.
        groups (Sequence): Group label per value.
        missing (str): ``"raise"`` or ``"drop"`` (listwise over both columns).

    Returns:
        TestResult: F statistic with ``(k - 1, N - k)`` degrees of freedom,
        the upper-tail p-value, group means as ``estimates`` (level order) and
        the ANOVA table indexed by term.

    Raises:
        InsufficientGroupsError: If fewer than 2 groups are present or any
            group holds fewer than 2 observations.
    """
    operation = "one_way_anova"
    grouped = one_way_groups(values, groups, operation, missing)
    group_name = column_name(groups, "group")
    if group_name == RESIDUAL_TERM:
        group_name = "group"

    all_values = np.concatenate(list(grouped.values()))
    grand_mean = float(np.mean(all_values))
    means = {level: float(np.mean(g)) for level, g in grouped.items()}
    ss_between = float(
        sum(len(g) * (means[level] - grand_mean) ** 2 for level, g in grouped.items())
    )
    ss_within, df_within = within_group_error(grouped)
    df_between = len(grouped) - 1

    table = _anova_frame(
        [{"term": group_name, "df": df_between, "sum_sq": ss_between}],
        ss_within,
        df_within,
    )
    return TestResult(
        name=operation,
        method="One-way analysis of variance",
        statistic=float(table.loc[group_name, ANOVA.f_value]),
        statistic_name="F",
        df=(float(df_between), float(df_within)),
        p_value=float(table.loc[group_name, ANOVA.p_value]),
        estimates=means,
        n_obs=int(len(all_values)),
        table=table,
    )


def anova_from_model(model: RegressionResult) -> pd.DataFrame:
    """Build the sequential (Type I) ANOVA table of a fitted regression.

    Terms appear in the order they entered the model, followed by a
    ``Residuals`` row. For a single categorical predictor the F statistic is
    the one-way ANOVA F statistic.

    Args:
        model (RegressionResult): Output of
            :func:`hypotest.stats.regression.linear_regression`.

    Returns:
        pandas.DataFrame: Columns ``df``, ``sum_sq``, ``mean_sq``, ``F`` and
        ``p_value`` indexed by term.

    Raises:
        ValueError: If a model term is named ``Residuals``.
    """
    if RESIDUAL_TERM in model.terms:
        raise ValueError(
            f"Model term '{RESIDUAL_TERM}' collides with the residual row; rename it"
        )
    q, _ = np.linalg.qr(model.design_matrix)
    effects = q.T @ model.response
    position = {name: idx for idx, name in enumerate(model.design_columns)}

    rows = []
    for term in model.terms:
        idx = [position[col] for col in model.term_columns[term]]
        rows.append(
            {
                "term": term,
                "df": len(idx),
                "sum_sq": float(np.sum(effects[idx] ** 2)),
            }
        )
    ss_resid = float(np.sum(model.residuals**2))
    return _anova_frame(rows, ss_resid, model.df_resid)


def factor_names(factor_a: Any, factor_b: Any) -> tuple[str, str]:
    """Term labels for a two-factor design, ``"A"`` / ``"B"`` when unusable."""
    name_a = column_name(factor_a, "A")
    name_b = column_name(factor_b, "B")
    if name_a == name_b or RESIDUAL_TERM in (name_a, name_b):
        return "A", "B"
    return name_a, name_b


def two_way_anova(
    values: Sequence[float],
    factor_a: Sequence[Any],
    factor_b: Sequence[Any],
    missing: str = DEFAULT_MISSING_POLICY,
) -> TestResult:
    """Factorial ANOVA with two factors and their interaction.

    Equivalent to ``aov(y ~ a * b)``: the model ``a + b + a:b`` is fitted by
    least squares and its variance is decomposed sequentially. Factor names
    come from the Series names when available (``"A"`` / ``"B"`` otherwise).

    Returns:
        TestResult: ``statistic``, ``df`` and ``p_value`` of the interaction
        term; ``estimates`` maps ``"<level_a>:<level_b>"`` to cell means;
        ``table`` is the full ANOVA table.

    Raises:
        InsufficientGroupsError: If a factor does not have exactly 2 levels
            or any cell of the design holds fewer than 2 observations.
    """
    operation = "two_way_anova"
    name_a, name_b = factor_names(factor_a, factor_b)

    frame = complete_cases(
        {"values": values, "a": factor_a, "b": factor_b}, operation, missing
    )
    y = to_float_array(frame["values"], column_name(values, "values"), operation)
    fa = to_factor(frame["a"])
    fb = to_factor(frame["b"])
    for name, factor in ((name_a, fa), (name_b, fb)):
        if len(factor.categories) != 2:
            raise InsufficientGroupsError(
                operation,
                f"factor '{name}' must have exactly 2 levels, found {list(factor.categories)}",
            )

    codes_a = np.asarray(fa.codes)
    codes_b = np.asarray(fb.codes)
    cells: Dict[str, np.ndarray] = {}
    for (ia, la), (ib, lb) in itertools.product(
        enumerate(fa.categories), enumerate(fb.categories)
    ):
        cells[f"{la}:{lb}"] = y[(codes_a == ia) & (codes_b == ib)]
    require_groups(cells, operation)

    sizes = {len(cell) for cell in cells.values()}
    if len(sizes) > 1:
        warnings.warn(
            "Unbalanced design: sequential sums of squares depend on factor order.",
            RuntimeWarning,
            stacklevel=2,
        )

    model = linear_regression(
        y,
        {name_a: fa, name_b: fb},
        interactions=[(name_a, name_b)],
    )
    table = anova_from_model(model)
    term = interaction_name(name_a, name_b)
    return TestResult(
        name=operation,
        method="Two-way analysis of variance (sequential sums of squares)",
        statistic=float(table.loc[term, ANOVA.f_value]),
        statistic_name="F",
        df=(float(table.loc[term, ANOVA.df]), float(model.df_resid)),
        p_value=float(table.loc[term, ANOVA.p_value]),
        estimates={label: float(np.mean(cell)) for label, cell in cells.items()},
        n_obs=int(len(y)),
        table=table,
    )
