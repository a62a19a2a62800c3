"""Ranked summary tables of the regression results."""

from collections.abc import Iterable, Mapping

import pandas as pd

from nycsales.models import GroupKey, RegressionResult
from nycsales.regression import coefficient_table, filter_significant, rank_results

BOROUGH_COLUMNS = ["borough", "slope", "p_value", "adj_r_squared", "n"]
NEIGHBORHOOD_COLUMNS = [
    "borough",
    "neighborhood",
    "slope",
    "p_value",
    "adj_r_squared",
    "n",
]


def results_frame(
    results: Iterable[RegressionResult], columns: list[str] | None = None
) -> pd.DataFrame:
    """Tabulate results in the order given, one row per group."""
    frame = pd.DataFrame([r.to_dict() for r in results])
    if columns is not None:
        frame = frame.reindex(columns=columns)
    return frame


def borough_slope_table(results: Mapping[GroupKey, RegressionResult]) -> pd.DataFrame:
    """Boroughs ranked by price per additional square foot."""
    return results_frame(rank_results(results, by="slope"), BOROUGH_COLUMNS)


def borough_fit_table(results: Mapping[GroupKey, RegressionResult]) -> pd.DataFrame:
    """Boroughs ranked by adjusted R²."""
    return results_frame(rank_results(results, by="adj_r_squared"), BOROUGH_COLUMNS)


def qualifying_neighborhoods(
    results: Mapping[GroupKey, RegressionResult],
    max_p_value: float = 0.05,
    min_adj_r_squared: float = 0.5,
) -> list[RegressionResult]:
    """Significant, well-fitting neighborhoods ranked by adjusted R²."""
    significant = filter_significant(results, max_p_value, min_adj_r_squared)
    return rank_results(significant, by="adj_r_squared")


def neighborhood_table(
    results: Mapping[GroupKey, RegressionResult],
    max_p_value: float = 0.05,
    min_adj_r_squared: float = 0.5,
) -> pd.DataFrame:
    ranked = qualifying_neighborhoods(results, max_p_value, min_adj_r_squared)
    return results_frame(ranked, NEIGHBORHOOD_COLUMNS)


def overall_summary(result: RegressionResult) -> dict[str, pd.DataFrame | dict[str, float]]:
    """Coefficient table and fit statistics of the citywide regression."""
    return {
        "coefficients": coefficient_table(result),
        "fit": {
            "r_squared": result.r_squared,
            "adj_r_squared": result.adj_r_squared,
            "n": result.n,
        },
    }


def select_plot_neighborhoods(
    results: Mapping[GroupKey, RegressionResult],
    curated: Iterable[tuple[str, str]] | None = None,
    limit: int = 6,
    max_p_value: float = 0.05,
    min_adj_r_squared: float = 0.5,
) -> list[tuple[str, str]]:
    """Neighborhoods to draw in the per-neighborhood chart.

    A curated list is returned as given. Otherwise the ``limit`` best
    qualifying neighborhoods by adjusted R² are used.
    """
    if curated is not None:
        return [tuple(key) for key in curated]
    ranked = qualifying_neighborhoods(results, max_p_value, min_adj_r_squared)
    return [r.group_key for r in ranked[:limit]]


def float_format(scientific_notation: bool = False) -> str:
    """Format spec for floats in printed tables.

    Examples:
        >>> format(1234567.891, float_format())
        '1,234,567.8910'
    """
    if scientific_notation:
        return "g"
    return ",.4f"
