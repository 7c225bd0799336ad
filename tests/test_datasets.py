import numpy as np
import pandas as pd

from hypotest.datasets import IRIS_SPECIES, MPG_2019, iris, mtcars


def test_iris_shape_and_totals():
    df = iris()
    assert df.shape == (150, 5)
    assert isinstance(df["species"].dtype, pd.CategoricalDtype)
    assert tuple(df["species"].cat.categories) == IRIS_SPECIES
    assert (df["species"].value_counts() == 50).all()
    assert np.isclose(df["sepal_length"].sum(), 876.5)
    assert np.isclose(df["sepal_width"].sum(), 458.6)
    assert np.isclose(df["petal_length"].sum(), 563.7)
    assert np.isclose(df["petal_width"].sum(), 179.9)


def test_mtcars_shape_and_codes():
    df = mtcars()
    assert df.shape == (32, 12)
    assert df["model"].iloc[0] == "Mazda RX4"
    assert set(df["am"]) == {0, 1}
    assert set(df["vs"]) == {0, 1}
    assert (df["am"] == 0).sum() == 19
    assert len(MPG_2019) == len(df)
    assert np.isclose(np.mean(MPG_2019), 24.375)


def test_accessors_return_fresh_copies():
    first = iris()
    first["sepal_length"] = 0.0
    assert iris()["sepal_length"].sum() > 0
