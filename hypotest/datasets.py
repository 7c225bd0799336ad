"""Built-in example tables used throughout the workshop.

Each accessor reads the packaged CSV and returns a fresh DataFrame, so callers
can add derived columns without affecting later calls.
"""

from __future__ import annotations

from importlib import resources

import pandas as pd

IRIS_SPECIES = ("setosa", "versicolor", "virginica")

# Average 2019 mileage of each mtcars model, in mtcars row order.
MPG_2019 = (
    35, 35, 41, 26, 24, 24, 17, 29, 27, 26,
    27, 27, 20, 12, 12, 16, 34, 33, 35, 21,
    10, 12, 12, 17, 26, 31, 43, 11, 19, 21,
    22, 35,
)


def _read_csv(filename: str) -> pd.DataFrame:
    source = resources.files(__package__) / "data" / filename
    with resources.as_file(source) as path:
        return pd.read_csv(path)


def iris() -> pd.DataFrame:
    """Fisher's iris measurements: 150 flowers, 50 per species.

    Returns:
        pandas.DataFrame: Numeric columns ``sepal_length``, ``sepal_width``,
        ``petal_length`` and ``petal_width`` (cm) and the categorical
        ``species`` with levels ordered setosa, versicolor, virginica.
    """
    df = _read_csv("iris.csv")
    df["species"] = pd.Categorical(df["species"], categories=list(IRIS_SPECIES))
    return df


def mtcars() -> pd.DataFrame:
    """Motor Trend road tests of 32 cars (1973-74 models).

    ``vs`` (0 = V-shaped, 1 = straight engine) and ``am`` (0 = automatic,
    1 = manual) are kept as integer codes; convert them with
    ``pd.Categorical`` or pass them via ``categorical=`` before using them as
    factors.
    """
    return _read_csv("mtcars.csv")
