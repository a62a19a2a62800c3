import logging
from pathlib import Path
from typing import Any

import pandas as pd

from nycsales.cleaning import (
    clean_sales,
    merge_boroughs,
    save_cleaned,
    segment_by_building_class,
)
from nycsales.config import AnalysisConfig, load_config
from nycsales.loaders import load_borough_files
from nycsales.models import Borough, GroupKey, RegressionResult
from nycsales.plots import plot_by_borough, plot_neighborhoods, plot_overall
from nycsales.regression import fit_by_borough, fit_by_neighborhood, fit_linear
from nycsales.report import (
    borough_fit_table,
    borough_slope_table,
    neighborhood_table,
    overall_summary,
    select_plot_neighborhoods,
)


class SalesAnalysis:
    """Runs the NYC property sales pipeline and keeps each stage's output.

    Every stage is computed on first use from the stage before it, so
    ``analysis.boroughs()`` alone loads, cleans and segments the data first.
    """

    def __init__(
        self,
        config: AnalysisConfig | None = None,
        config_file: str | Path | None = None,
    ) -> None:
        self._logger = logging.getLogger(__name__)
        self.config: AnalysisConfig = config if config is not None else load_config(config_file)

        self._raw: dict[Borough, pd.DataFrame] | None = None
        self._merged: pd.DataFrame | None = None
        self._cleaned: pd.DataFrame | None = None
        self._segment: pd.DataFrame | None = None
        self._overall: RegressionResult | None = None
        self._by_borough: dict[GroupKey, RegressionResult] | None = None
        self._by_neighborhood: dict[GroupKey, RegressionResult] | None = None

    @property
    def cleaned_path(self) -> Path:
        return Path(self.config.cleaning.output_file).expanduser()

    @property
    def output_dir(self) -> Path:
        return Path(self.config.report.output_dir).expanduser()

    def load(self) -> dict[Borough, pd.DataFrame]:
        if self._raw is None:
            self._raw = load_borough_files(self.config.input)
        return self._raw

    def merged(self) -> pd.DataFrame:
        if self._merged is None:
            cleaning = self.config.cleaning
            self._merged = merge_boroughs(
                self.load(),
                title_case_columns=cleaning.title_case_columns,
                drop_columns=cleaning.drop_columns,
            )
        return self._merged

    def cleaned(self) -> pd.DataFrame:
        """Cleaned sales; writes the CSV snapshot the first time it is built."""
        if self._cleaned is None:
            cleaning = self.config.cleaning
            self._cleaned = clean_sales(
                self.merged(),
                min_sale_price=cleaning.min_sale_price,
                min_gross_square_feet=cleaning.min_gross_square_feet,
            )
            save_cleaned(self._cleaned, self.cleaned_path)
        return self._cleaned

    def segment(self) -> pd.DataFrame:
        if self._segment is None:
            self._segment = segment_by_building_class(
                self.cleaned(), self.config.segment.building_class
            )
        return self._segment

    def overall_fit(self) -> RegressionResult:
        if self._overall is None:
            self._overall = fit_linear(self.segment())
        return self._overall

    def borough_fits(self) -> dict[GroupKey, RegressionResult]:
        if self._by_borough is None:
            self._by_borough = fit_by_borough(
                self.segment(), show_progress=self.config.report.show_progress
            )
        return self._by_borough

    def neighborhood_fits(self) -> dict[GroupKey, RegressionResult]:
        if self._by_neighborhood is None:
            self._by_neighborhood = fit_by_neighborhood(
                self.segment(),
                min_group_size=self.config.regression.min_group_size,
                show_progress=self.config.report.show_progress,
            )
        return self._by_neighborhood

    def overall(self) -> dict[str, Any]:
        return overall_summary(self.overall_fit())

    def boroughs(self, by: str = "slope") -> pd.DataFrame:
        """Borough fits ranked by ``slope`` or ``adj_r_squared``."""
        tables = {"slope": borough_slope_table, "adj_r_squared": borough_fit_table}
        if by not in tables:
            raise ValueError(f"Cannot rank boroughs by '{by}'. Must be one of: {', '.join(tables)}")
        return tables[by](self.borough_fits())

    def neighborhoods(self) -> pd.DataFrame:
        regression = self.config.regression
        return neighborhood_table(
            self.neighborhood_fits(),
            max_p_value=regression.max_p_value,
            min_adj_r_squared=regression.min_adj_r_squared,
        )

    def plot_neighborhood_keys(self) -> list[tuple[str, str]]:
        report = self.config.report
        curated = None
        if report.plot_neighborhoods is not None:
            curated = [ref.as_key() for ref in report.plot_neighborhoods]
        return select_plot_neighborhoods(
            self.neighborhood_fits(),
            curated=curated,
            limit=report.max_plot_neighborhoods,
            max_p_value=self.config.regression.max_p_value,
            min_adj_r_squared=self.config.regression.min_adj_r_squared,
        )

    def plot(self) -> list[Path]:
        """Render the overall, borough and neighborhood charts.

        The neighborhood chart is skipped with a warning when no
        neighborhood qualifies.

        Returns:
            Paths of the written image files
        """
        scientific = self.config.report.scientific_notation
        segment = self.segment()
        paths = [
            plot_overall(segment, self.output_dir / "overall.png", scientific),
            plot_by_borough(segment, self.output_dir / "boroughs.png", scientific),
        ]

        keys = self.plot_neighborhood_keys()
        if keys:
            paths.append(
                plot_neighborhoods(
                    segment, keys, self.output_dir / "neighborhoods.png", scientific
                )
            )
        else:
            self._logger.warning("No qualifying neighborhoods to plot")
        return paths

    def run(self) -> dict[str, Any]:
        """Run every stage and return the report tables and chart paths."""
        return {
            "cleaned_rows": len(self.cleaned()),
            "cleaned_path": self.cleaned_path,
            "segment_rows": len(self.segment()),
            "overall": self.overall(),
            "boroughs_by_slope": self.boroughs("slope"),
            "boroughs_by_adj_r_squared": self.boroughs("adj_r_squared"),
            "neighborhoods": self.neighborhoods(),
            "plots": self.plot(),
        }
