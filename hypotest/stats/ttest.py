"""One-sample, paired and independent two-sample Student t-tests."""

from __future__ import annotations

import math
from typing import Sequence

import numpy as np

from ..data_processing import (
    DEFAULT_MISSING_POLICY,
    column_name,
    complete_cases,
    to_float_array,
)
from ..errors import InsufficientDataError, LengthMismatchError
from ..results import TestResult
from .distributions import (
    DEFAULT_CONFIDENCE_LEVEL,
    check_alternative,
    check_confidence_level,
    t_interval,
    t_p_value,
)

_EPS = float(np.finfo(float).eps)


def _is_constant(std_error: float, *means: float) -> bool:
    # same tolerance as R's "data are essentially constant" check
    scale = max((abs(m) for m in means), default=0.0)
    return std_error <= 10.0 * _EPS * scale


def _one_sample(
    x: np.ndarray,
    mu: float,
    alternative: str,
    confidence_level: float,
    operation: str,
    name: str,
    method: str,
    estimate_name: str,
) -> TestResult:
    n = int(len(x))
    if n < 2:
        raise InsufficientDataError(
            operation, f"need at least 2 observations for n-1 degrees of freedom, got {n}"
        )

    mean = float(np.mean(x))
    se = float(np.std(x, ddof=1)) / math.sqrt(n)
    if _is_constant(se, mean):
        raise InsufficientDataError(
            operation, "data are essentially constant; the standard error is zero"
        )

    df = n - 1
    t_stat = (mean - mu) / se
    return TestResult(
        name=name,
        method=method,
        statistic=float(t_stat),
        statistic_name="t",
        df=float(df),
        p_value=t_p_value(t_stat, df, alternative),
        estimates={estimate_name: mean},
        confidence_interval=t_interval(mean, se, df, confidence_level, alternative),
        confidence_level=confidence_level,
        alternative=alternative,
        null_value=float(mu),
        n_obs=n,
    )


def one_sample_t_test(
    sample: Sequence[float],
    reference_mean: float = 0.0,
    alternative: str = "two-sided",
    confidence_level: float = DEFAULT_CONFIDENCE_LEVEL,
    missing: str = DEFAULT_MISSING_POLICY,
) -> TestResult:
    """Test whether a sample mean differs from a reference value.

    Args:
        sample (Sequence[float]): Observations.
        reference_mean (float): Hypothesised population mean ``mu``.
        alternative (str): ``"two-sided"``, ``"less"`` or ``"greater"``.
        confidence_level (float): Coverage of the interval for the mean.
        missing (str): Missing-value policy, ``"raise"`` or ``"drop"``.

    Returns:
        TestResult: ``t = (mean - mu) / SE`` with ``n - 1`` degrees of
        freedom, the p-value from Student's t distribution and a confidence
        interval for the mean. ``estimates`` holds ``"mean"``.

    Raises:
        InsufficientDataError: If fewer than 2 observations remain or the
            sample has no spread.
        MissingValueError: If ``sample`` holds missing values and
            ``missing="raise"``.
    """
    operation = "one_sample_t_test"
    alternative = check_alternative(alternative)
    confidence_level = check_confidence_level(confidence_level)

    name = column_name(sample, "sample")
    frame = complete_cases({name: sample}, operation, missing)
    x = to_float_array(frame[name], name, operation)

    return _one_sample(
        x,
        float(reference_mean),
        alternative,
        confidence_level,
        operation,
        name=operation,
        method="One Sample t-test",
        estimate_name="mean",
    )


def two_sample_t_test(
    a: Sequence[float],
    b: Sequence[float],
    paired: bool = False,
    equal_variance: bool = False,
    alternative: str = "two-sided",
    confidence_level: float = DEFAULT_CONFIDENCE_LEVEL,
    reference_difference: float = 0.0,
    missing: str = DEFAULT_MISSING_POLICY,
) -> TestResult:
    """Compare the means of two samples.

    With ``paired=True`` the test is the one-sample t-test of the elementwise
    differences ``a - b`` against ``reference_difference``. Otherwise the
    independent-samples statistic for ``mean(a) - mean(b)`` is used: Welch's
    unequal-variance form by default, or the pooled-variance Student form when
    ``equal_variance=True``.

    Args:
        a (Sequence[float]): First sample.
        b (Sequence[float]): Second sample.
        paired (bool): Treat ``a[i]`` and ``b[i]`` as matched observations.
        equal_variance (bool): Pool the two variances (unpaired only).
        alternative (str): ``"two-sided"``, ``"less"`` or ``"greater"``.
        confidence_level (float): Coverage of the interval for the mean
            difference.
        reference_difference (float): Hypothesised mean difference.
        missing (str): Missing-value policy. Paired samples drop incomplete
            pairs; unpaired samples drop each sample's missing values.

    Returns:
        TestResult: ``estimates`` holds ``"mean_difference"`` for paired
        tests and ``"mean_a"`` / ``"mean_b"`` otherwise.

    Raises:
        LengthMismatchError: If ``paired`` and the samples differ in length.
        InsufficientDataError: If either sample (or the set of pairs) has
            fewer than 2 observations, or the data have no spread.
        MissingValueError: On missing values with ``missing="raise"``.
    """
    operation = "two_sample_t_test"
    alternative = check_alternative(alternative)
    confidence_level = check_confidence_level(confidence_level)
    mu = float(reference_difference)

    if paired:
        if len(a) != len(b):
            raise LengthMismatchError(
                operation,
                f"paired samples must have equal length, got {len(a)} and {len(b)}",
            )
        frame = complete_cases({"a": a, "b": b}, operation, missing)
        diffs = to_float_array(frame["a"], "a", operation) - to_float_array(
            frame["b"], "b", operation
        )
        return _one_sample(
            diffs,
            mu,
            alternative,
            confidence_level,
            operation,
            name="paired_t_test",
            method="Paired t-test",
            estimate_name="mean_difference",
        )

    x = to_float_array(complete_cases({"a": a}, operation, missing)["a"], "a", operation)
    y = to_float_array(complete_cases({"b": b}, operation, missing)["b"], "b", operation)
    na, nb = len(x), len(y)
    if na < 2 or nb < 2:
        raise InsufficientDataError(
            operation, f"each sample needs at least 2 observations, got {na} and {nb}"
        )

    mean_a, mean_b = float(np.mean(x)), float(np.mean(y))
    var_a, var_b = float(np.var(x, ddof=1)), float(np.var(y, ddof=1))

    if equal_variance:
        df = float(na + nb - 2)
        pooled = ((na - 1) * var_a + (nb - 1) * var_b) / df
        se = math.sqrt(pooled * (1.0 / na + 1.0 / nb))
        method = "Two Sample t-test"
    else:
        sa, sb = var_a / na, var_b / nb
        se = math.sqrt(sa + sb)
        method = "Welch Two Sample t-test"
        df = math.nan
    if _is_constant(se, mean_a, mean_b):
        raise InsufficientDataError(
            operation, "data are essentially constant; the standard error is zero"
        )
    if not equal_variance:
        # Welch-Satterthwaite approximation
        df = (sa + sb) ** 2 / (sa**2 / (na - 1) + sb**2 / (nb - 1))

    diff = mean_a - mean_b
    t_stat = (diff - mu) / se
    return TestResult(
        name=operation,
        method=method,
        statistic=float(t_stat),
        statistic_name="t",
        df=float(df),
        p_value=t_p_value(t_stat, df, alternative),
        estimates={"mean_a": mean_a, "mean_b": mean_b},
        confidence_interval=t_interval(diff, se, df, confidence_level, alternative),
        confidence_level=confidence_level,
        alternative=alternative,
        null_value=mu,
        n_obs=na + nb,
    )
