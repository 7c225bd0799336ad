"""Tests for Tukey HSD pairwise comparisons."""

from __future__ import annotations

import numpy as np
import pandas as pd
import pytest
from scipy import stats

from hypotest.errors import InsufficientGroupsError
from hypotest.schema import TUKEY
from hypotest.stats.posthoc import tukey_hsd, tukey_hsd_two_way

SPECIES = ("setosa", "versicolor", "virginica")


def test_tukey_lists_every_pair_once(flowers):
    table = tukey_hsd(flowers["sepal_length"], flowers["species"])

    assert list(table.columns) == [
        TUKEY.group1,
        TUKEY.group2,
        TUKEY.diff,
        TUKEY.lower,
        TUKEY.upper,
        TUKEY.p_adj,
    ]
    pairs = list(zip(table[TUKEY.group1], table[TUKEY.group2]))
    assert pairs == [
        ("setosa", "versicolor"),
        ("setosa", "virginica"),
        ("versicolor", "virginica"),
    ]
    assert np.allclose(table[TUKEY.diff], [0.930, 1.582, 0.652])
    assert (table[TUKEY.lower] < table[TUKEY.diff]).all()
    assert (table[TUKEY.diff] < table[TUKEY.upper]).all()
    assert (table[TUKEY.p_adj] < 0.001).all()


def test_tukey_matches_scipy(flowers):
    samples = [flowers.loc[flowers["species"] == sp, "sepal_length"] for sp in SPECIES]
    ref = stats.tukey_hsd(*samples)
    ci = ref.confidence_interval(confidence_level=0.95)
    table = tukey_hsd(flowers["sepal_length"], flowers["species"])

    index = {sp: i for i, sp in enumerate(SPECIES)}
    for _, row in table.iterrows():
        i, j = index[row[TUKEY.group1]], index[row[TUKEY.group2]]
        # scipy reports mean_i - mean_j; the table reports later minus earlier
        assert np.isclose(row[TUKEY.diff], -ref.statistic[i, j])
        assert np.isclose(row[TUKEY.lower], -ci.high[i, j])
        assert np.isclose(row[TUKEY.upper], -ci.low[i, j])
        assert np.isclose(row[TUKEY.p_adj], ref.pvalue[i, j])


def test_tukey_unequal_group_sizes_match_scipy():
    a = [24.1, 25.3, 26.0, 23.8, 25.5]
    b = [27.2, 28.1, 26.9, 27.7]
    c = [24.9, 25.1, 26.3, 25.8, 24.4, 25.6]
    values = a + b + c
    groups = ["a"] * len(a) + ["b"] * len(b) + ["c"] * len(c)

    table = tukey_hsd(values, groups)
    ref = stats.tukey_hsd(a, b, c)

    assert len(table) == 3
    assert np.isclose(table.loc[0, TUKEY.p_adj], ref.pvalue[0, 1])
    assert np.isclose(table.loc[2, TUKEY.p_adj], ref.pvalue[1, 2])


def test_tukey_wider_intervals_at_smaller_alpha(flowers):
    loose = tukey_hsd(flowers["sepal_length"], flowers["species"], alpha=0.1)
    strict = tukey_hsd(flowers["sepal_length"], flowers["species"], alpha=0.01)
    width_loose = loose[TUKEY.upper] - loose[TUKEY.lower]
    width_strict = strict[TUKEY.upper] - strict[TUKEY.lower]
    assert (width_strict > width_loose).all()
    assert np.allclose(loose[TUKEY.p_adj], strict[TUKEY.p_adj])


def test_tukey_pair_count_for_four_groups():
    rng = np.random.default_rng(3)
    values = rng.normal(size=20)
    groups = np.repeat(["w", "x", "y", "z"], 5)
    table = tukey_hsd(values, groups)
    assert len(table) == 6
    assert table[TUKEY.p_adj].between(0.0, 1.0).all()


def test_tukey_rejects_bad_input():
    with pytest.raises(InsufficientGroupsError):
        tukey_hsd([1.0, 2.0, 3.0], ["a", "a", "a"])
    with pytest.raises(ValueError):
        tukey_hsd([1.0, 2.0, 3.0, 4.0], ["a", "a", "b", "b"], alpha=1.0)


def test_tukey_two_way_tables(cars):
    labelled = cars.assign(
        am=pd.Categorical.from_codes(cars["am"], ["automatic", "manual"]),
        vs=pd.Categorical.from_codes(cars["vs"], ["v-shaped", "straight"]),
    )
    with pytest.warns(RuntimeWarning):
        tables = tukey_hsd_two_way(labelled["mpg"], labelled["am"], labelled["vs"])

    assert list(tables) == ["am", "vs", "am:vs"]
    assert len(tables["am"]) == 1
    assert len(tables["am:vs"]) == 6

    am_row = tables["am"].iloc[0]
    assert (am_row[TUKEY.group1], am_row[TUKEY.group2]) == ("automatic", "manual")
    assert np.isclose(am_row[TUKEY.diff], 24.392308 - 17.147368)

    cells = tables["am:vs"]
    first = cells.iloc[0]
    assert first[TUKEY.group1] == "automatic:v-shaped"
    assert first[TUKEY.group2] == "automatic:straight"
    assert np.isclose(first[TUKEY.diff], 20.742857 - 15.05)
