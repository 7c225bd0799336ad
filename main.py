#!/usr/bin/env python3
"""
Main script for running the hypothesis-testing walkthrough.
"""

# Walkthrough overview (README-style):
# 1) t-tests on iris: one-sample, independent (Welch) and paired, including a
#    paired test on a long-format table produced by pandas.melt.
# 2) One-way ANOVA of sepal length across species with Tukey HSD follow-up.
# 3) Correlation and regression, ending with the ANOVA-as-regression identity.
# 4) mtcars exercises: one-sample, pooled and paired t-tests, a 2x2 factorial
#    ANOVA with post-hoc tests, correlation and (standardized) regression.

import logging
import os
import sys
import time

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s",
    handlers=[
        logging.StreamHandler(sys.stdout),
        logging.FileHandler("hypothesis_testing.log", mode="w"),
    ],
)
logging.captureWarnings(True)

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

import pandas as pd

from hypotest import (
    anova_from_model,
    aov,
    correlation_test,
    group_means,
    lm,
    one_sample_t_test,
    one_way_anova,
    t_test_by_group,
    tukey_hsd,
    tukey_hsd_two_way,
    two_sample_t_test,
    two_way_anova,
)
from hypotest.datasets import MPG_2019, iris, mtcars
from hypotest.schema import INTERCEPT


def log_test(title, result):
    """Log the headline numbers of a TestResult."""
    logging.info("%s [%s]", title, result.method)
    df = result.df
    df_text = (
        ", ".join(f"{v:g}" for v in df) if isinstance(df, tuple) else f"{df:.4g}"
    )
    logging.info(
        "  %s = %.4f, df = %s, p-value = %.4g",
        result.statistic_name,
        result.statistic,
        df_text,
        result.p_value,
    )
    for name, value in result.estimates.items():
        logging.info("  %s: %.4f", name, value)
    if result.confidence_interval is not None:
        low, high = result.confidence_interval
        logging.info(
            "  %.0f%% CI: [%.4f, %.4f]", 100 * result.confidence_level, low, high
        )


def log_model(title, model):
    """Log the coefficient table and fit statistics of a RegressionResult."""
    logging.info("%s", title)
    logging.info("\n%s", model.coefficient_table().round(5).to_string())
    logging.info(
        "  R^2 = %.4f, adjusted R^2 = %.4f, F = %.3f on (%d, %d) df, p-value = %.4g",
        model.r_squared,
        model.adj_r_squared,
        model.f_statistic,
        model.f_df[0],
        model.f_df[1],
        model.f_p_value,
    )


def log_table(title, table):
    logging.info("%s\n%s", title, table.round(5).to_string())


def run_iris_session():
    """t-tests, ANOVA, correlation and regression on the iris table."""
    flowers = iris()
    logging.info("iris: %d rows, columns %s", len(flowers), list(flowers.columns))

    log_test(
        "Is mean sepal length different from 5.0?",
        one_sample_t_test(flowers["sepal_length"], 5.0),
    )

    setosa_versicolor = flowers[flowers["species"] != "virginica"]
    log_test(
        "Do setosa and versicolor differ in sepal length?",
        t_test_by_group(setosa_versicolor, "sepal_length", "species"),
    )

    log_test(
        "Are sepal length and petal length different?",
        two_sample_t_test(flowers["sepal_length"], flowers["petal_length"], paired=True),
    )

    # Reshape wide -> long: one row per (flower, measurement) pair.
    iris_long = pd.melt(
        flowers.assign(ID=range(1, len(flowers) + 1)),
        id_vars=["ID", "species"],
        var_name="measurement",
        value_name="value",
    )
    iris_long[["part", "measurement"]] = iris_long["measurement"].str.split(
        "_", expand=True
    )
    lengths = iris_long[iris_long["measurement"] == "length"]
    log_test(
        "Same paired test on the long-format table (petal - sepal)",
        t_test_by_group(lengths, "value", "part", paired=True, id_col="ID"),
    )

    logging.info(
        "Group means of sepal length:\n%s",
        group_means(flowers, "sepal_length", "species").to_string(),
    )
    sepal_anova = one_way_anova(flowers["sepal_length"], flowers["species"])
    log_test("One-way ANOVA of sepal length by species", sepal_anova)
    log_table("ANOVA table", sepal_anova.table)
    log_table(
        "Tukey HSD",
        tukey_hsd(flowers["sepal_length"], flowers["species"]),
    )

    log_test(
        "Do sepal length and sepal width covary?",
        correlation_test(flowers["sepal_length"], flowers["sepal_width"]),
    )
    log_model("sepal_length ~ sepal_width", lm(flowers, "sepal_length ~ sepal_width"))
    log_model(
        "sepal_length ~ sepal_width + petal_length",
        lm(flowers, "sepal_length ~ sepal_width + petal_length"),
    )
    model3 = lm(flowers, "sepal_length ~ sepal_width + petal_length + species")
    log_table("Sequential ANOVA (model 3)", anova_from_model(model3))
    log_model("sepal_length ~ sepal_width + petal_length + species", model3)

    model4 = lm(flowers, "sepal_length ~ species")
    log_table("Sequential ANOVA (model 4)", anova_from_model(model4))
    log_model("sepal_length ~ species", model4)
    intercept = model4.coefficients[INTERCEPT]
    logging.info("  setosa mean     = %.4f", intercept)
    logging.info(
        "  versicolor mean = %.4f", intercept + model4.coefficients["species[versicolor]"]
    )
    logging.info(
        "  virginica mean  = %.4f", intercept + model4.coefficients["species[virginica]"]
    )


def run_mtcars_exercises():
    """The mtcars exercises."""
    cars = mtcars()
    logging.info("mtcars: %d rows, columns %s", len(cars), list(cars.columns))

    logging.info("Exercise 1: mean mpg = %.4f", cars["mpg"].mean())
    log_test("Does mileage differ from 24.9 mpg?", one_sample_t_test(cars["mpg"], 24.9))

    logging.info(
        "Exercise 2: mean mpg by am:\n%s", group_means(cars, "mpg", "am").to_string()
    )
    log_test(
        "Automatic vs manual mileage (pooled variance)",
        t_test_by_group(cars, "mpg", "am", equal_variance=True),
    )
    log_model("mpg ~ am", lm(cars, "mpg ~ am", categorical=["am"]))

    cars_2019 = cars.assign(mpg_current=list(MPG_2019))
    logging.info(
        "Exercise 3: mean mpg 1974 = %.4f, 2019 = %.4f",
        cars_2019["mpg"].mean(),
        cars_2019["mpg_current"].mean(),
    )
    log_test(
        "Did mileage change since 1974?",
        two_sample_t_test(cars_2019["mpg"], cars_2019["mpg_current"], paired=True),
    )

    labelled = cars.assign(
        am=pd.Categorical.from_codes(cars["am"], ["automatic", "manual"]),
        vs=pd.Categorical.from_codes(cars["vs"], ["v-shaped", "straight"]),
    )
    logging.info(
        "Exercise 4: cell means (am x vs):\n%s",
        group_means(labelled, "mpg", ["am", "vs"]).to_string(),
    )
    car_anova = two_way_anova(labelled["mpg"], labelled["am"], labelled["vs"])
    log_table("Two-way ANOVA mpg ~ am * vs", car_anova.table)
    log_table("Same table from the regression", aov(labelled, "mpg ~ am * vs"))
    car_lm = lm(labelled, "mpg ~ am * vs")
    log_model("mpg ~ am * vs", car_lm)
    for term, table in tukey_hsd_two_way(
        labelled["mpg"], labelled["am"], labelled["vs"]
    ).items():
        log_table(f"Tukey HSD ({term})", table)

    log_test(
        "Exercise 5: do heavier cars get worse mileage?",
        correlation_test(cars["mpg"], cars["wt"]),
    )

    log_model("Exercise 6: mpg ~ wt + hp", lm(cars, "mpg ~ wt + hp"))
    log_model(
        "Exercise 6: standardized mpg ~ wt + hp",
        lm(cars, "mpg ~ wt + hp", standardize=True),
    )


def main():
    """Main execution function with per-section timing."""

    start_time = time.time()
    logging.info("Starting hypothesis-testing walkthrough")

    step_start = time.time()
    run_iris_session()
    logging.info("iris session completed in %.2f seconds", time.time() - step_start)

    step_start = time.time()
    run_mtcars_exercises()
    logging.info("mtcars exercises completed in %.2f seconds", time.time() - step_start)

    logging.info(f"Total execution time: {time.time() - start_time:.2f} seconds")
    return 0


if __name__ == "__main__":
    sys.exit(main())
