import numpy as np
import pandas as pd
import pytest

from hypotest.errors import InsufficientDataError, InsufficientGroupsError, RankDeficiencyError
from hypotest.frame import lm
from hypotest.schema import COEFFICIENTS, INTERCEPT
from hypotest.stats.regression import linear_regression


def test_simple_regression_matches_lstsq(cars):
    model = linear_regression(cars["mpg"], {"wt": cars["wt"]})
    X = np.column_stack([np.ones(len(cars)), cars["wt"]])
    beta, *_ = np.linalg.lstsq(X, cars["mpg"].to_numpy(), rcond=None)

    assert list(model.coefficients) == [INTERCEPT, "wt"]
    assert np.allclose([model.coefficients[INTERCEPT], model.coefficients["wt"]], beta)
    assert np.isclose(model.coefficients["wt"], -5.3445, atol=1e-4)
    assert np.isclose(model.r_squared, 0.7528, atol=1e-4)
    assert model.df_resid == 30
    assert model.response_name == "mpg"
    # single predictor: overall F equals the squared slope t
    assert np.isclose(model.f_statistic, model.t_values["wt"] ** 2)
    assert np.isclose(model.f_p_value, model.p_values["wt"])


def test_multiple_regression(cars):
    model = lm(cars, "mpg ~ wt + hp")
    assert np.isclose(model.coefficients[INTERCEPT], 37.22727, atol=1e-5)
    assert np.isclose(model.coefficients["wt"], -3.87783, atol=1e-5)
    assert np.isclose(model.coefficients["hp"], -0.03177, atol=1e-5)
    assert np.isclose(model.r_squared, 0.8268, atol=1e-4)
    assert np.isclose(model.adj_r_squared, 0.8148, atol=1e-4)
    assert model.f_df == (2, 29)
    assert np.allclose(model.fitted + model.residuals, cars["mpg"])
    assert np.isclose(model.residual_mean_square, model.residual_std_error**2)


def test_categorical_predictor_gives_group_means(flowers):
    model = lm(flowers, "sepal_length ~ species")
    coefs = model.coefficients

    assert list(coefs) == [INTERCEPT, "species[versicolor]", "species[virginica]"]
    assert np.isclose(coefs[INTERCEPT], 5.006)
    assert np.isclose(coefs["species[versicolor]"], 0.930)
    assert np.isclose(coefs["species[virginica]"], 1.582)
    assert model.levels["species"] == ("setosa", "versicolor", "virginica")
    assert model.terms == ("species",)
    assert model.term_columns["species"] == ("species[versicolor]", "species[virginica]")


def test_reference_level_override(flowers):
    model = lm(flowers, "sepal_length ~ species", reference={"species": "virginica"})
    coefs = model.coefficients
    assert np.isclose(coefs[INTERCEPT], 6.588)
    assert np.isclose(coefs["species[setosa]"], 5.006 - 6.588)
    assert model.levels["species"][0] == "virginica"


def test_numeric_code_as_factor(cars):
    model = lm(cars, "mpg ~ am", categorical=["am"])
    assert list(model.coefficients) == [INTERCEPT, "am[1]"]
    assert np.isclose(model.coefficients[INTERCEPT], 17.147368)
    assert np.isclose(model.coefficients["am[1]"], 7.244939)


def test_string_predictor_is_categorical():
    y = [1.0, 2.0, 3.0, 5.0, 6.0, 7.0]
    model = linear_regression(y, {"arm": ["ctl", "ctl", "ctl", "trt", "trt", "trt"]})
    assert np.isclose(model.coefficients["arm[trt]"], 4.0)


def test_interaction_model(cars):
    labelled = cars.assign(
        am=pd.Categorical.from_codes(cars["am"], ["automatic", "manual"]),
        vs=pd.Categorical.from_codes(cars["vs"], ["v-shaped", "straight"]),
    )
    model = lm(labelled, "mpg ~ am * vs")
    coefs = model.coefficients

    assert model.terms == ("am", "vs", "am:vs")
    assert np.isclose(coefs[INTERCEPT], 15.05)
    assert np.isclose(coefs["am[manual]"], 4.70)
    assert np.isclose(coefs["vs[straight]"], 5.692857)
    assert np.isclose(coefs["am[manual]:vs[straight]"], 2.928571)
    assert model.df_resid == 28


def test_numeric_interaction_column(cars):
    model = lm(cars, "mpg ~ wt * hp")
    assert "wt:hp" in model.coefficients
    assert np.allclose(model.design["wt:hp"], cars["wt"] * cars["hp"])


def test_standardized_coefficients(cars):
    raw = lm(cars, "mpg ~ wt + hp")
    std = lm(cars, "mpg ~ wt + hp", standardize=True)
    sd_y = cars["mpg"].std()

    assert abs(std.coefficients[INTERCEPT]) < 1e-10
    for name in ("wt", "hp"):
        expected = raw.coefficients[name] * cars[name].std() / sd_y
        assert np.isclose(std.coefficients[name], expected)
        assert np.isclose(std.t_values[name], raw.t_values[name])
    assert np.isclose(std.r_squared, raw.r_squared)


def test_coefficient_table_and_intervals(cars):
    model = lm(cars, "mpg ~ wt")
    table = model.coefficient_table()
    assert list(table.columns) == [
        COEFFICIENTS.estimate,
        COEFFICIENTS.std_error,
        COEFFICIENTS.t_value,
        COEFFICIENTS.p_value,
    ]
    assert list(table.index) == [INTERCEPT, "wt"]

    ci = model.conf_int(0.95)
    assert (ci["lower"] < table[COEFFICIENTS.estimate]).all()
    assert (table[COEFFICIENTS.estimate] < ci["upper"]).all()
    assert np.isclose(ci.loc["wt", "lower"], -6.486308, atol=1e-5)
    with pytest.raises(ValueError):
        model.conf_int(1.0)


def test_collinear_predictors_rejected():
    x = np.arange(10.0)
    with pytest.raises(RankDeficiencyError) as excinfo:
        linear_regression(x**2, {"x": x, "twice_x": 2.0 * x})
    assert excinfo.value.operation == "linear_regression"


def test_more_parameters_than_observations_rejected():
    with pytest.raises(RankDeficiencyError):
        linear_regression(
            [1.0, 2.0, 4.0],
            {"a": [1.0, 2.0, 3.0], "b": [0.5, 0.1, 0.9], "c": [3.0, 1.0, 2.0]},
        )


def test_saturated_model_has_no_residual_df():
    with pytest.raises(InsufficientDataError):
        linear_regression([1.0, 3.0, 2.0], {"a": [1.0, 2.0, 3.0], "b": [0.5, 0.1, 0.9]})


def test_single_level_factor_rejected():
    with pytest.raises(InsufficientGroupsError):
        linear_regression([1.0, 2.0, 3.0], {"g": ["a", "a", "a"]})


def test_missing_rows_dropped_listwise(cars):
    hp = cars["hp"].astype(float).copy()
    hp.iloc[[0, 5]] = np.nan
    model = linear_regression(cars["mpg"], {"wt": cars["wt"], "hp": hp}, missing="drop")
    assert model.n_obs == 30
    assert model.df_resid == 27


def test_results_are_read_only(cars):
    model = lm(cars, "mpg ~ wt")
    with pytest.raises(TypeError):
        model.coefficients["wt"] = 0.0
    with pytest.raises(ValueError):
        model.residuals[0] = 1.0


def test_predictor_named_intercept_rejected():
    x = np.arange(10.0)
    with pytest.raises(ValueError, match="intercept"):
        linear_regression(2.0 * x + 1.0, {"intercept": x})


def test_predictor_clashing_with_dummy_column_rejected():
    rng = np.random.default_rng(5)
    y = rng.normal(size=20)
    with pytest.raises(ValueError, match=r"g\[b\]"):
        linear_regression(y, {"g": ["a", "b"] * 10, "g[b]": rng.normal(size=20)})


def test_reserved_response_key_rejected():
    with pytest.raises(ValueError, match="reserved"):
        linear_regression([1.0, 2.0, 4.0, 3.0], {"__response__": [1.0, 2.0, 3.0, 4.0]})


def test_design_cannot_be_changed_after_fit(cars):
    model = lm(cars, "mpg ~ wt")
    copy = model.design
    copy["wt"] = 0.0
    assert np.allclose(model.design["wt"], cars["wt"])
    with pytest.raises(ValueError):
        model.design_matrix[0, 1] = 0.0
    assert model.design_columns == (INTERCEPT, "wt")
