import numpy as np
import pandas as pd
import pytest

from hypotest.errors import InsufficientGroupsError, LengthMismatchError
from hypotest.frame import aov, group_means, lm, parse_formula, t_test_by_group
from hypotest.stats.ttest import two_sample_t_test


def test_parse_formula_expands_crossing():
    assert parse_formula("mpg ~ am * vs") == ("mpg", ["am", "vs"], [("am", "vs")])
    assert parse_formula("y ~ a + b + a:b") == ("y", ["a", "b"], [("a", "b")])
    assert parse_formula(" y~x ") == ("y", ["x"], [])


def test_parse_formula_keeps_first_appearance_order():
    response, mains, pairs = parse_formula("y ~ c + a * b + c")
    assert response == "y"
    assert mains == ["c", "a", "b"]
    assert pairs == [("a", "b")]


@pytest.mark.parametrize(
    "formula",
    ["y x", "y ~ a ~ b", "~ a", "y ~ a + ", "y ~ a * b * c", "y ~ a:b", "y ~ a + a:b"],
)
def test_parse_formula_rejects(formula):
    with pytest.raises(ValueError):
        parse_formula(formula)


def test_group_means_one_and_two_factors(flowers, cars):
    by_species = group_means(flowers, "sepal_length", "species")
    assert list(by_species.index) == ["setosa", "versicolor", "virginica"]
    assert np.allclose(by_species.to_numpy(), [5.006, 5.936, 6.588])

    cells = group_means(cars, "mpg", ["am", "vs"])
    assert cells.shape == (2, 2)
    assert np.isclose(cells.loc[0, 0], 15.05)
    assert np.isclose(cells.loc[1, 1], 28.371429)


def test_group_means_rejects_unknown_column(flowers):
    with pytest.raises(KeyError):
        group_means(flowers, "stem_length", "species")
    with pytest.raises(ValueError):
        group_means(flowers, "sepal_length", ["species", "species", "species"])


def test_t_test_by_group_pooled(cars):
    result = t_test_by_group(cars, "mpg", "am", equal_variance=True)
    assert np.isclose(result.statistic, -4.10613, atol=1e-5)
    assert np.isclose(result.estimates["mean_a"], 17.147368)
    assert np.isclose(result.estimates["mean_b"], 24.392308)


def test_t_test_by_group_needs_two_levels(flowers):
    with pytest.raises(InsufficientGroupsError):
        t_test_by_group(flowers, "sepal_length", "species")


def test_paired_long_format_matches_wide(flowers):
    long = pd.melt(
        flowers.assign(ID=range(len(flowers))),
        id_vars=["ID"],
        value_vars=["petal_length", "sepal_length"],
        var_name="part",
        value_name="value",
    )
    # shuffled rows must still be matched by identifier
    long = long.sample(frac=1.0, random_state=11).reset_index(drop=True)

    result = t_test_by_group(long, "value", "part", paired=True, id_col="ID")
    direct = two_sample_t_test(
        flowers["petal_length"], flowers["sepal_length"], paired=True
    )
    assert result.name == "paired_t_test"
    assert np.isclose(result.statistic, direct.statistic)
    assert np.isclose(result.estimate, direct.estimate)
    assert result.n_obs == 150


def test_paired_long_format_unmatched_ids():
    long = pd.DataFrame(
        {
            "ID": [1, 2, 3, 1, 2],
            "part": ["x", "x", "x", "y", "y"],
            "value": [1.0, 2.0, 3.0, 1.5, 2.5],
        }
    )
    with pytest.raises(LengthMismatchError):
        t_test_by_group(long, "value", "part", paired=True, id_col="ID")

    duplicated = pd.DataFrame(
        {
            "ID": [1, 1, 2, 1, 2],
            "part": ["x", "x", "x", "y", "y"],
            "value": [1.0, 2.0, 3.0, 1.5, 2.5],
        }
    )
    with pytest.raises(LengthMismatchError):
        t_test_by_group(duplicated, "value", "part", paired=True, id_col="ID")


def test_lm_and_aov_check_columns(flowers):
    with pytest.raises(KeyError):
        lm(flowers, "sepal_length ~ stem_width")
    table = aov(flowers, "sepal_length ~ species")
    assert list(table.index) == ["species", "Residuals"]
