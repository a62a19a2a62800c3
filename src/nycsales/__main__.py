"""Command-line interface for the NYC property sales analysis."""

import logging
import sys
from pathlib import Path
from typing import Any, Callable

from fire import Fire

from nycsales.analysis import SalesAnalysis
from nycsales.config import AnalysisConfig, config_search_paths, find_config_file, load_config
from nycsales.cli import OutputFormatter, ProgressTracker
from nycsales.report import float_format


class ConfigCommands:
    """Inspect and create nycsales config files."""

    def __init__(self, config_file: str | None = None) -> None:
        self._config_file = config_file

    def show(self) -> None:
        """Print the settings in effect, as YAML.

        Examples:
            nycsales config show
        """
        source = self._config_file or find_config_file()
        print(f"# Config file: {source or 'none found, using defaults'}")
        print(load_config(self._config_file).to_yaml(), end="")

    def path(self) -> None:
        """List the config locations searched, marking the one in use.

        Examples:
            nycsales config path
        """
        active = find_config_file()
        for candidate in config_search_paths():
            marker = "*" if candidate == active else " "
            print(f"{marker} {candidate}")

    def init(self, path: str = "./nycsales.yml", data_dir: str | None = None) -> None:
        """Write a config file with the default settings.

        Args:
            path: Where to write the file
            data_dir: Directory holding the rolling sales exports

        Examples:
            nycsales config init
            nycsales config init --data_dir ~/data/rollingsales
        """
        target = Path(path).expanduser()
        if target.exists():
            print(f"Config file already exists: {target}")
            return

        config = AnalysisConfig()
        if data_dir is not None:
            config.input.data_dir = data_dir
        print(f"Created config file: {config.save_to_file(target)}")

    def get(self, key: str) -> None:
        """Print one setting.

        Args:
            key: Dotted setting name

        Examples:
            nycsales config get cleaning.min_sale_price
            nycsales config get "input.files.Staten Island"
        """
        try:
            print(load_config(self._config_file).lookup(key))
        except KeyError:
            print(f"Unknown config key: {key}")


class NycSalesCLI:
    """Command-line interface for the NYC property sales analysis.

    Examples:
        nycsales clean
        nycsales overall --format table
        nycsales boroughs --by adj_r_squared
        nycsales neighborhoods --format csv
        nycsales run
    """

    def __init__(
        self,
        format: str = "auto",
        quiet: bool = False,
        verbose: bool = False,
        config_file: str | None = None,
    ):
        """Initialize the CLI wrapper.

        Args:
            format: Output format (auto, json, jsonl, csv, tsv, table)
            quiet: Suppress all non-error output
            verbose: Log each pipeline step
            config_file: Path to config file
        """
        logging.basicConfig(
            level=logging.INFO if verbose else logging.WARNING,
            format="%(asctime)s - %(levelname)s - %(message)s",
        )
        self._analysis = SalesAnalysis(config_file=config_file)
        report = self._analysis.config.report
        if quiet:
            report.show_progress = False
        self._formatter = OutputFormatter(
            format=format, float_format=float_format(report.scientific_notation)
        )
        self._progress = ProgressTracker(show_progress=report.show_progress, quiet=quiet)
        self.config = ConfigCommands(config_file)

    def _report(self, message: str, action: Callable[[], Any], done: Callable[[Any], str]) -> None:
        self._progress.progress(message)
        try:
            data = action()
        except Exception as e:
            self._progress.error(str(e))
            sys.exit(1)
        self._progress.success(done(data))
        print(self._formatter.format_output(data))

    def clean(self) -> None:
        """Load, merge and clean the borough files and write the cleaned CSV.

        Examples:
            nycsales clean
        """
        self._report(
            "Cleaning sales...",
            lambda: {
                "rows": len(self._analysis.cleaned()),
                "path": str(self._analysis.cleaned_path),
            },
            lambda data: f"Wrote {data['rows']:,} rows to {data['path']}",
        )

    def overall(self) -> None:
        """Show the citywide regression of sale price on gross square feet.

        Examples:
            nycsales overall --format table
        """
        self._report(
            "Fitting citywide regression...",
            self._analysis.overall,
            lambda data: f"Fitted {data['fit']['n']:,} sales",
        )

    def boroughs(self, by: str = "slope") -> None:
        """Show borough regressions ranked by slope or adjusted R².

        Args:
            by: Ranking key, slope or adj_r_squared

        Examples:
            nycsales boroughs
            nycsales boroughs --by adj_r_squared
        """
        self._report(
            "Fitting borough regressions...",
            lambda: self._analysis.boroughs(by),
            lambda data: f"Fitted {len(data)} boroughs",
        )

    def neighborhoods(self) -> None:
        """Show significant, well-fitting neighborhoods ranked by adjusted R².

        Examples:
            nycsales neighborhoods --format csv
        """
        self._report(
            "Fitting neighborhood regressions...",
            self._analysis.neighborhoods,
            lambda data: f"Found {len(data)} qualifying neighborhoods",
        )

    def plot(self) -> None:
        """Render the overall, borough and neighborhood charts.

        Examples:
            nycsales plot
        """
        self._report(
            "Rendering charts...",
            lambda: [str(path) for path in self._analysis.plot()],
            lambda data: f"Wrote {len(data)} charts",
        )

    def run(self) -> None:
        """Run the whole pipeline and print every report table.

        Examples:
            nycsales run --format table
        """
        self._report(
            "Running analysis...",
            self._analysis.run,
            lambda data: f"Analysed {data['segment_rows']:,} sales",
        )


def main() -> None:
    """Entry point for the nycsales command."""
    Fire(NycSalesCLI)


if __name__ == "__main__":
    main()
