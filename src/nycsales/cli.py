"""CLI output formatting and progress tracking utilities."""

import json
import math
import sys
from io import StringIO
from typing import Any

import pandas as pd
from tabulate import tabulate


def _to_frame(data: Any) -> pd.DataFrame:
    if isinstance(data, pd.DataFrame):
        # Keep named indexes (e.g. regression terms) as a column
        return data.reset_index() if data.index.name is not None else data
    if isinstance(data, list) and data and isinstance(data[0], dict):
        return pd.DataFrame(data)
    if isinstance(data, dict):
        return pd.DataFrame([data])
    return pd.DataFrame(data)


def _to_records(data: Any) -> Any:
    """Convert data to JSON-ready records; NaN and infinity become None."""
    if isinstance(data, pd.DataFrame):
        return [_to_records(row) for row in _to_frame(data).to_dict("records")]
    if isinstance(data, dict):
        return {k: _to_records(v) for k, v in data.items()}
    if isinstance(data, list):
        return [_to_records(item) for item in data]
    if isinstance(data, float) and not math.isfinite(data):
        return None
    return data


class OutputFormatter:
    """Format data for CLI output in various formats.

    Supports: json, jsonl, csv, tsv, table, and auto (intelligent selection).
    """

    def __init__(
        self,
        format: str = "auto",
        compact: bool = False,
        float_format: str = "g",
    ):
        """Initialize the output formatter.

        Args:
            format: Output format. One of: auto, json, jsonl, csv, tsv, table
            compact: If True, use compact formatting where applicable
            float_format: Format spec applied to floats in tables
        """
        self.format: str = format.lower()
        self.compact: bool = compact
        self.float_format: str = float_format

        valid_formats = {"auto", "json", "jsonl", "csv", "tsv", "table"}
        if self.format not in valid_formats:
            raise ValueError(
                f"Invalid format '{self.format}'. "
                "Must be one of: " + ", ".join(sorted(valid_formats))
            )

    def format_output(self, data: Any) -> str:
        """Route to appropriate formatter based on format setting.

        Args:
            data: Data to format. Can be dict, list, DataFrame, or other types.
                Dicts holding DataFrames (e.g. the overall summary) are
                formatted section by section in table mode.

        Returns:
            Formatted string ready for output
        """
        formatters = {
            "json": self._format_json,
            "jsonl": self._format_jsonl,
            "csv": self._format_csv,
            "tsv": self._format_tsv,
            "table": self._format_table,
            "auto": self._format_auto,
        }

        return formatters[self.format](data)

    def _format_json(self, data: Any) -> str:
        data = _to_records(data)
        if self.compact:
            return json.dumps(data, default=str, separators=(",", ":"))
        return json.dumps(data, indent=2, default=str)

    def _format_jsonl(self, data: Any) -> str:
        data = _to_records(data)
        if not isinstance(data, list):
            data = [data]
        return "\n".join(json.dumps(item, default=str) for item in data)

    def _format_delimited(self, data: Any, sep: str) -> str:
        output = StringIO()
        _to_frame(data).to_csv(output, sep=sep, index=False, lineterminator="\n")
        return output.getvalue()

    def _format_csv(self, data: Any) -> str:
        return self._format_delimited(data, ",")

    def _format_tsv(self, data: Any) -> str:
        return self._format_delimited(data, "\t")

    def _format_table(self, data: Any) -> str:
        """Format data as a pretty table.

        A dict whose values include DataFrames or dicts is rendered as one
        titled table per key.
        """
        if isinstance(data, dict) and any(
            isinstance(v, (pd.DataFrame, dict)) for v in data.values()
        ):
            sections = []
            for key, value in data.items():
                sections.append(f"{key}\n{self._format_table(value)}")
            return "\n\n".join(sections)

        if isinstance(data, pd.DataFrame):
            return tabulate(
                _to_frame(data),
                headers="keys",
                tablefmt="simple",
                floatfmt=self.float_format,
                showindex=False,
            )
        if isinstance(data, list) and data and isinstance(data[0], dict):
            return tabulate(
                data, headers="keys", tablefmt="simple", floatfmt=self.float_format
            )
        if isinstance(data, dict):
            table_data = [[k, v] for k, v in data.items()]
            return tabulate(
                table_data,
                headers=["Key", "Value"],
                tablefmt="simple",
                floatfmt=self.float_format,
            )
        if isinstance(data, list):
            return "\n".join(str(item) for item in data)
        return str(data)

    def _format_auto(self, data: Any) -> str:
        """Use a table on a terminal, JSON otherwise."""
        if sys.stdout.isatty():
            return self._format_table(data)
        return self._format_json(data)


class ProgressTracker:
    """Track and display progress and status messages for CLI operations.

    Messages are sent to stderr to keep stdout clean for data output.
    """

    def __init__(self, show_progress: bool = True, quiet: bool = False):
        self.show_progress: bool = show_progress
        self.quiet: bool = quiet

    def info(self, message: str) -> None:
        if not self.quiet:
            print(f"ℹ {message}", file=sys.stderr)

    def error(self, message: str) -> None:
        """Print an error message to stderr, even in quiet mode."""
        print(f"✗ Error: {message}", file=sys.stderr)

    def success(self, message: str) -> None:
        if not self.quiet:
            print(f"✓ {message}", file=sys.stderr)

    def warning(self, message: str) -> None:
        if not self.quiet:
            print(f"⚠ {message}", file=sys.stderr)

    def progress(self, message: str) -> None:
        """Print a progress message unless progress display is off or quiet."""
        if self.show_progress and not self.quiet:
            print(f"⋯ {message}", file=sys.stderr)


def format_output(
    data: Any, format: str = "auto", compact: bool = False, float_format: str = "g"
) -> str:
    """Convenience function to format output without creating a formatter instance."""
    formatter = OutputFormatter(format=format, compact=compact, float_format=float_format)
    return formatter.format_output(data)
