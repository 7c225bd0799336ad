"""Provide ordinary least-squares regression with mixed predictor types.

This module supports:
- numeric predictors, entered as-is (optionally z-scored),
- categorical predictors, expanded into reference-level dummy columns, and
- two-way interaction terms built from the cross-products of two design blocks.

The design matrix keeps its columns grouped by term in entry order, which is
what the sequential ANOVA in :mod:`hypotest.stats.anova` relies on.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
from pandas.api.types import is_bool_dtype, is_numeric_dtype
from scipy.linalg import solve_triangular

from ..data_processing import (
    DEFAULT_MISSING_POLICY,
    column_name,
    complete_cases,
    to_factor,
    to_float_array,
)
from ..errors import InsufficientDataError, InsufficientGroupsError, RankDeficiencyError
from ..results import RegressionResult
from ..schema import INTERCEPT
from .distributions import f_p_value, t_p_value

logger = logging.getLogger(__name__)

_RESPONSE_KEY = "__response__"


def interaction_name(a: str, b: str) -> str:
    return f"{a}:{b}"


def _is_categorical(series: pd.Series) -> bool:
    if isinstance(series.dtype, pd.CategoricalDtype) or is_bool_dtype(series):
        return True
    return not is_numeric_dtype(series)


def _zscore(values: np.ndarray, name: str, operation: str) -> np.ndarray:
    sd = float(np.std(values, ddof=1)) if len(values) > 1 else 0.0
    if not sd > 0:
        raise InsufficientDataError(operation, f"cannot standardize constant column '{name}'")
    return (values - float(np.mean(values))) / sd


def build_design(
    frame: pd.DataFrame,
    names: Sequence[str],
    interactions: Iterable[Tuple[str, str]] = (),
    reference: Optional[Mapping[str, Any]] = None,
    categorical: Iterable[str] = (),
    standardize: bool = False,
    operation: str = "linear_regression",
) -> Tuple[pd.DataFrame, List[str], Dict[str, Tuple[str, ...]], Dict[str, Tuple[Any, ...]]]:
    """Expand predictor columns into an intercept-first design matrix.

    Args:
        frame (pandas.DataFrame): Complete rows holding every predictor.
        names (Sequence[str]): Main-effect predictor names in entry order.
        interactions (Iterable[tuple[str, str]]): Pairs of main-effect names
            to cross.
        reference (Mapping[str, Any], optional): Reference level per factor.
        categorical (Iterable[str]): Numeric predictors to treat as factors.
        standardize (bool): Z-score numeric main effects.
        operation (str): Operation name for error messages.

    Returns:
        tuple: ``(design, terms, term_columns, levels)`` where ``design`` is
        the design matrix as a DataFrame, ``terms`` the model terms in entry
        order, ``term_columns`` the design columns of each term and
        ``levels`` the level order of each factor (reference first).

    Raises:
        InsufficientGroupsError: If a factor has a single observed level.
        ValueError: If an interaction names an unknown or repeated predictor,
            or a design column name is used twice (including ``"intercept"``).
    """
    reference = dict(reference or {})
    forced = set(categorical)
    unknown = (set(reference) | forced) - set(names)
    if unknown:
        raise ValueError(f"Unknown predictors in reference/categorical: {sorted(unknown)}")

    blocks: Dict[str, Dict[str, np.ndarray]] = {}
    levels: Dict[str, Tuple[Any, ...]] = {}
    for name in names:
        raw = frame[name]
        if name in forced or _is_categorical(raw):
            factor = to_factor(raw, reference.get(name))
            cats = list(factor.categories)
            if len(cats) < 2:
                raise InsufficientGroupsError(
                    operation, f"factor '{name}' needs at least 2 levels, found {cats}"
                )
            codes = np.asarray(factor.codes)
            blocks[name] = {
                f"{name}[{level}]": (codes == idx).astype(float)
                for idx, level in enumerate(cats)
                if idx > 0
            }
            levels[name] = tuple(cats)
        else:
            values = to_float_array(raw, name, operation)
            if standardize:
                values = _zscore(values, name, operation)
            blocks[name] = {name: values}

    terms = list(names)
    for a, b in interactions:
        if a not in blocks or b not in blocks:
            raise ValueError(
                f"Interaction {a}:{b} requires both '{a}' and '{b}' as main effects"
            )
        if a == b:
            raise ValueError(f"Interaction of '{a}' with itself is not supported")
        term = interaction_name(a, b)
        if term in blocks:
            continue
        blocks[term] = {
            interaction_name(col_a, col_b): val_a * val_b
            for col_a, val_a in blocks[a].items()
            for col_b, val_b in blocks[b].items()
        }
        terms.append(term)

    columns: Dict[str, np.ndarray] = {INTERCEPT: np.ones(len(frame))}
    term_columns: Dict[str, Tuple[str, ...]] = {}
    for term in terms:
        for col, values in blocks[term].items():
            if col in columns:
                raise ValueError(
                    f"Design column '{col}' of term '{term}' clashes with an "
                    "existing column; rename the predictor"
                )
            columns[col] = values
        term_columns[term] = tuple(blocks[term])
    return pd.DataFrame(columns), terms, term_columns, levels


def linear_regression(
    y: Sequence[float],
    predictors: Mapping[str, Sequence[Any]],
    interactions: Iterable[Tuple[str, str]] = (),
    reference: Optional[Mapping[str, Any]] = None,
    categorical: Iterable[str] = (),
    standardize: bool = False,
    missing: str = DEFAULT_MISSING_POLICY,
) -> RegressionResult:
    """Fit ``y`` on numeric and categorical predictors by least squares.

    Categorical predictors (non-numeric values, booleans, pandas categoricals,
    or names listed in ``categorical``) are dummy-coded against a reference
    level: the one named in ``reference``, else the first level in category
    order (pandas categoricals) or sorted order (everything else).

    Args:
        y (Sequence[float]): Response values.
        predictors (Mapping[str, Sequence]): Predictor name to column, in the
            order the terms enter the model.
        interactions (Iterable[tuple[str, str]]): Predictor pairs whose design
            blocks are crossed, entered after all main effects.
        reference (Mapping[str, Any], optional): Reference level per factor.
        categorical (Iterable[str]): Numeric predictors to treat as factors,
            e.g. a 0/1 transmission code.
        standardize (bool): Z-score the response and numeric predictors
            (sample standard deviation) before fitting, giving standardized
            coefficients.
        missing (str): ``"raise"`` or ``"drop"`` (listwise over the response
            and every predictor).

    Returns:
        RegressionResult: Coefficients with standard errors, t values and
        two-sided p-values, R², adjusted R², the overall F test and the fit
        context used by :func:`hypotest.stats.anova.anova_from_model`.

    Raises:
        ValueError: If no predictors are given, or a predictor name clashes
            with ``"intercept"`` or another design column.
        RankDeficiencyError: If the design matrix is not of full column rank,
            including when there are more parameters than observations.
        InsufficientDataError: If no residual degrees of freedom remain.
        MissingValueError: On missing values with ``missing="raise"``.

    Note:
        The fit uses a QR decomposition of the design matrix rather than the
        normal equations.
    """
    operation = "linear_regression"
    if not predictors:
        raise ValueError(f"{operation}: at least one predictor is required")
    if _RESPONSE_KEY in predictors:
        raise ValueError(f"{operation}: predictor name '{_RESPONSE_KEY}' is reserved")

    response_name = column_name(y, "y")
    columns: Dict[str, Any] = {_RESPONSE_KEY: y}
    columns.update(predictors)
    frame = complete_cases(columns, operation, missing)

    response = to_float_array(frame[_RESPONSE_KEY], response_name, operation)
    if standardize:
        response = _zscore(response, response_name, operation)

    design, terms, term_columns, levels = build_design(
        frame,
        list(predictors),
        interactions=interactions,
        reference=reference,
        categorical=categorical,
        standardize=standardize,
        operation=operation,
    )

    X = design.to_numpy(dtype=float)
    n, p = X.shape
    rank = int(np.linalg.matrix_rank(X)) if n else 0
    if n < p or rank < p:
        raise RankDeficiencyError(
            operation,
            f"design matrix has rank {rank} but {p} columns ({n} observations); "
            "predictors are collinear or too many for the data",
        )
    df_resid = n - p
    if df_resid < 1:
        raise InsufficientDataError(
            operation,
            f"{n} observations leave no residual degrees of freedom for {p} parameters",
        )

    q, r = np.linalg.qr(X)
    beta = solve_triangular(r, q.T @ response)
    fitted = X @ beta
    resid = response - fitted

    sse = float(np.sum(resid**2))
    mse = sse / df_resid
    r_inv = solve_triangular(r, np.eye(p))
    cov = mse * (r_inv @ r_inv.T)
    se = np.sqrt(np.clip(np.diag(cov), 0.0, None))
    with np.errstate(divide="ignore", invalid="ignore"):
        t_values = beta / se

    sst = float(np.sum((response - np.mean(response)) ** 2))
    df_model = p - 1
    r2 = 1.0 - sse / sst if sst > 0 else math.nan
    adj_r2 = 1.0 - (1.0 - r2) * (n - 1) / df_resid if sst > 0 else math.nan
    ssr = max(sst - sse, 0.0)
    if mse > 0:
        f_stat = (ssr / df_model) / mse
    else:
        f_stat = math.inf if ssr > 0 else math.nan

    names = list(design.columns)
    logger.debug(
        "%s: fitted %d coefficients on %d observations (R^2=%.4f)",
        operation,
        p,
        n,
        r2,
    )
    return RegressionResult(
        coefficients=dict(zip(names, map(float, beta))),
        std_errors=dict(zip(names, map(float, se))),
        t_values=dict(zip(names, map(float, t_values))),
        p_values={
            name: t_p_value(float(t), df_resid) for name, t in zip(names, t_values)
        },
        r_squared=float(r2),
        adj_r_squared=float(adj_r2),
        f_statistic=float(f_stat),
        f_df=(int(df_model), int(df_resid)),
        f_p_value=f_p_value(float(f_stat), df_model, df_resid),
        df_resid=int(df_resid),
        residual_std_error=math.sqrt(mse),
        n_obs=int(n),
        terms=tuple(terms),
        term_columns=term_columns,
        response_name=response_name,
        design_matrix=X,
        design_columns=tuple(design.columns),
        response=response,
        fitted=fitted,
        residuals=resid,
        levels=levels,
    )
