"""
Prepares raw columns for the statistical routines.

Columns arrive as lists, numpy arrays or pandas Series. They are assembled into
a single frame so the missing-value policy can be applied listwise, then split
back into float arrays (numeric variables) or categoricals (grouping factors).
"""

# Level order rule: a pandas Categorical keeps its declared category order,
# anything else is ordered by its sorted distinct values. The first level is
# the reference level unless the caller names another one.

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional

import numpy as np
import pandas as pd

from .errors import InsufficientGroupsError, LengthMismatchError, MissingValueError

logger = logging.getLogger(__name__)

MISSING_POLICIES = ("raise", "drop")
DEFAULT_MISSING_POLICY = "raise"


def column_name(values: Any, default: str) -> str:
    """Return the Series name of ``values`` when it has one, else ``default``."""
    name = getattr(values, "name", None)
    if isinstance(name, str) and name:
        return name
    return default


def _as_series(values: Any) -> pd.Series:
    if isinstance(values, pd.Series):
        return values.reset_index(drop=True)
    if isinstance(values, (pd.Categorical, np.ndarray)):
        return pd.Series(values)
    return pd.Series(list(values))


def complete_cases(
    columns: Mapping[str, Any],
    operation: str,
    missing: str = DEFAULT_MISSING_POLICY,
) -> pd.DataFrame:
    """Assemble equal-length columns and apply the missing-value policy.

    Args:
        columns (Mapping[str, Any]): Column name to sequence of values. All
            sequences must have the same length.
        operation (str): Public operation name used in error messages.
        missing (str): ``"raise"`` to reject missing values, ``"drop"`` to
            exclude every row with a missing value in any column (listwise).

    Returns:
        pandas.DataFrame: The assembled rows with a fresh ``RangeIndex``.

    Raises:
        ValueError: If ``missing`` is not a known policy.
        LengthMismatchError: If the columns differ in length.
        MissingValueError: If a column holds missing values and
            ``missing="raise"``.
    """
    if missing not in MISSING_POLICIES:
        raise ValueError(
            f"missing must be one of {MISSING_POLICIES}, got {missing!r}"
        )

    series = {name: _as_series(values) for name, values in columns.items()}
    lengths = {name: len(s) for name, s in series.items()}
    if len(set(lengths.values())) > 1:
        detail = ", ".join(f"{name}={n}" for name, n in lengths.items())
        raise LengthMismatchError(operation, f"columns differ in length ({detail})")

    frame = pd.DataFrame(series)
    na_mask = frame.isna()
    if not na_mask.to_numpy().any():
        return frame

    if missing == "raise":
        counts = na_mask.sum()
        offending = {name: int(n) for name, n in counts.items() if n > 0}
        detail = ", ".join(f"'{name}' ({n})" for name, n in offending.items())
        raise MissingValueError(
            operation,
            f"missing values in {detail}; pass missing='drop' to exclude "
            "incomplete rows",
        )

    keep = ~na_mask.any(axis=1)
    n_dropped = int((~keep).sum())
    logger.warning(
        "%s: dropped %d of %d rows with missing values (listwise)",
        operation,
        n_dropped,
        len(frame),
    )
    return frame.loc[keep].reset_index(drop=True)


def to_float_array(values: Any, name: str, operation: str) -> np.ndarray:
    """Convert one numeric column to a finite float array.

    Raises:
        ValueError: If a value cannot be read as a number or is infinite.
    """
    try:
        numeric = pd.to_numeric(_as_series(values), errors="raise")
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{operation}: column '{name}' must be numeric") from exc
    arr = np.asarray(numeric, dtype=float)
    if not np.all(np.isfinite(arr[~np.isnan(arr)])):
        raise ValueError(f"{operation}: column '{name}' contains infinite values")
    return arr


def to_factor(values: Any, reference: Optional[Any] = None) -> pd.Categorical:
    """Convert a grouping column to a categorical with explicit level order.

    Args:
        values: Group labels. A pandas categorical keeps its category order;
            other inputs use their sorted distinct values.
        reference: Optional level to move to the front so it becomes the
            reference (baseline) level.

    Returns:
        pandas.Categorical: Labels without unused categories.

    Raises:
        ValueError: If ``reference`` is not one of the observed levels.
    """
    series = _as_series(values)
    if isinstance(series.dtype, pd.CategoricalDtype):
        cat = pd.Categorical(series).remove_unused_categories()
    else:
        cat = pd.Categorical(series)

    if reference is not None:
        levels = list(cat.categories)
        if reference not in levels:
            raise ValueError(
                f"Reference level {reference!r} not found among levels {levels}"
            )
        order = [reference] + [lvl for lvl in levels if lvl != reference]
        cat = cat.reorder_categories(order, ordered=cat.ordered)
    return cat


def split_by_level(values: np.ndarray, factor: pd.Categorical) -> Dict[Any, np.ndarray]:
    """Split ``values`` into one array per factor level, in level order."""
    codes = np.asarray(factor.codes)
    return {
        level: values[codes == idx] for idx, level in enumerate(factor.categories)
    }


def require_groups(
    groups: Mapping[Any, np.ndarray],
    operation: str,
    min_groups: int = 2,
    min_size: int = 2,
    exact_groups: Optional[int] = None,
) -> None:
    """Check the number of groups and the size of each one.

    Raises:
        InsufficientGroupsError: If there are fewer than ``min_groups`` groups,
            not exactly ``exact_groups`` when that is given, or a group holds
            fewer than ``min_size`` observations.
    """
    levels: List[Any] = list(groups)
    if exact_groups is not None and len(levels) != exact_groups:
        raise InsufficientGroupsError(
            operation,
            f"expected exactly {exact_groups} groups, found {len(levels)}: {levels}",
        )
    if len(levels) < min_groups:
        raise InsufficientGroupsError(
            operation,
            f"need at least {min_groups} groups, found {len(levels)}: {levels}",
        )
    small = {lvl: len(arr) for lvl, arr in groups.items() if len(arr) < min_size}
    if small:
        detail = ", ".join(f"{lvl!r} (n={n})" for lvl, n in small.items())
        raise InsufficientGroupsError(
            operation,
            f"each group needs at least {min_size} observations; offending: {detail}",
        )
