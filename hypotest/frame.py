"""Run the statistical tests on columns of a pandas DataFrame.

This module is the table-level front end: callers name columns instead of
passing sequences, group t-tests accept a long-format table, and regression
models are described with a small R-style formula (``"mpg ~ am * vs"``).
"""

from __future__ import annotations

from typing import Any, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

import pandas as pd

from .data_processing import (
    DEFAULT_MISSING_POLICY,
    complete_cases,
    to_factor,
    to_float_array,
)
from .errors import InsufficientGroupsError, LengthMismatchError
from .results import RegressionResult, TestResult
from .stats.anova import anova_from_model
from .stats.distributions import DEFAULT_CONFIDENCE_LEVEL
from .stats.regression import linear_regression
from .stats.ttest import two_sample_t_test


def _require_columns(table: pd.DataFrame, names: Iterable[str]) -> None:
    missing_cols = [name for name in names if name not in table.columns]
    if missing_cols:
        raise KeyError(
            f"Columns {missing_cols} not found. Available columns: {list(table.columns)}"
        )


def group_means(
    table: pd.DataFrame,
    value: str,
    by: Union[str, Sequence[str]],
    missing: str = DEFAULT_MISSING_POLICY,
) -> Union[pd.Series, pd.DataFrame]:
    """Mean of ``value`` per level of one or two grouping columns.

    Levels follow the package-wide order (category order, else sorted). With
    two grouping columns the result is a DataFrame with the first factor on
    the rows and the second on the columns.
    """
    by_cols = [by] if isinstance(by, str) else list(by)
    if not 1 <= len(by_cols) <= 2:
        raise ValueError("group_means supports one or two grouping columns")
    _require_columns(table, [value, *by_cols])

    frame = complete_cases(
        {col: table[col] for col in [value, *by_cols]}, "group_means", missing
    )
    frame[value] = to_float_array(frame[value], value, "group_means")
    for col in by_cols:
        frame[col] = to_factor(frame[col])

    means = frame.groupby(by_cols, observed=True, sort=True)[value].mean()
    if len(by_cols) == 2:
        return means.unstack(by_cols[1])
    return means


def t_test_by_group(
    table: pd.DataFrame,
    value: str,
    group: str,
    paired: bool = False,
    equal_variance: bool = False,
    id_col: Optional[str] = None,
    alternative: str = "two-sided",
    confidence_level: float = DEFAULT_CONFIDENCE_LEVEL,
    missing: str = DEFAULT_MISSING_POLICY,
) -> TestResult:
    """Two-sample t-test of ``value`` between the two levels of ``group``.

    Sample ``a`` is the first level and ``b`` the second, so the estimate is
    ``mean(first) - mean(second)``. For paired tests on a long-format table
    (one identifier column, one category column, one numeric value column),
    pass ``id_col`` so observations are matched by identifier; without it
    rows are matched by their order within each group.

    Raises:
        InsufficientGroupsError: If ``group`` does not have exactly 2 levels.
        LengthMismatchError: If paired observations cannot be matched.
    """
    operation = "t_test_by_group"
    cols = [value, group] + ([id_col] if id_col is not None else [])
    _require_columns(table, cols)

    frame = complete_cases({col: table[col] for col in cols}, operation, missing)
    factor = to_factor(frame[group])
    levels = list(factor.categories)
    if len(levels) != 2:
        raise InsufficientGroupsError(
            operation,
            f"column '{group}' must have exactly 2 levels, found {len(levels)}: {levels}",
        )
    first, second = levels
    frame[group] = factor.astype(object)

    if paired and id_col is not None:
        if frame.duplicated([id_col, group]).any():
            raise LengthMismatchError(
                operation, f"'{id_col}' repeats within a level of '{group}'"
            )
        wide = frame.pivot(index=id_col, columns=group, values=value)
        unmatched = int(wide[[first, second]].isna().any(axis=1).sum())
        if unmatched:
            raise LengthMismatchError(
                operation, f"{unmatched} id(s) lack an observation in both groups"
            )
        a, b = wide[first], wide[second]
    else:
        a = frame.loc[frame[group] == first, value]
        b = frame.loc[frame[group] == second, value]

    return two_sample_t_test(
        a,
        b,
        paired=paired,
        equal_variance=equal_variance,
        alternative=alternative,
        confidence_level=confidence_level,
    )


def parse_formula(formula: str) -> Tuple[str, List[str], List[Tuple[str, str]]]:
    """Split ``"y ~ a + b * c"`` into response, main effects and interactions.

    ``a * b`` expands to ``a + b + a:b``. ``a:b`` adds only the interaction and
    needs both main effects elsewhere in the formula. Main effects keep their
    order of first appearance and precede all interactions.

    Raises:
        ValueError: On a missing ``~``, empty terms, interactions of more than
            two variables or an interaction without its main effects.
    """
    if formula.count("~") != 1:
        raise ValueError(f"Formula must contain exactly one '~': {formula!r}")
    lhs, rhs = (part.strip() for part in formula.split("~"))
    if not lhs:
        raise ValueError(f"Formula has no response: {formula!r}")

    mains: List[str] = []
    pairs: List[Tuple[str, str]] = []
    for raw in rhs.split("+"):
        token = raw.strip()
        if not token:
            raise ValueError(f"Empty term in formula {formula!r}")
        for op in ("*", ":"):
            if op in token:
                parts = [p.strip() for p in token.split(op)]
                if len(parts) != 2 or not all(parts) or any(
                    sym in p for p in parts for sym in "*:"
                ):
                    raise ValueError(
                        f"Only two-way interactions are supported, got {token!r}"
                    )
                if op == "*":
                    mains.extend(p for p in parts if p not in mains)
                pair = (parts[0], parts[1])
                if pair not in pairs:
                    pairs.append(pair)
                break
        else:
            if token not in mains:
                mains.append(token)

    for a, b in pairs:
        if a not in mains or b not in mains:
            raise ValueError(
                f"Interaction {a}:{b} requires both main effects in {formula!r}"
            )
    return lhs, mains, pairs


def lm(
    table: pd.DataFrame,
    formula: str,
    reference: Optional[Mapping[str, Any]] = None,
    categorical: Iterable[str] = (),
    standardize: bool = False,
    missing: str = DEFAULT_MISSING_POLICY,
) -> RegressionResult:
    """Fit a linear model described by an R-style formula on ``table``."""
    response, mains, pairs = parse_formula(formula)
    _require_columns(table, [response, *mains])
    return linear_regression(
        table[response],
        {name: table[name] for name in mains},
        interactions=pairs,
        reference=reference,
        categorical=categorical,
        standardize=standardize,
        missing=missing,
    )


def aov(table: pd.DataFrame, formula: str, **kwargs: Any) -> pd.DataFrame:
    """Sequential ANOVA table of the model ``formula`` fitted on ``table``."""
    return anova_from_model(lm(table, formula, **kwargs))
