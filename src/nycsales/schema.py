"""Column naming and schema checks for the rolling sales exports.

The five borough exports are expected to share one layout. Column headers
are normalized first so that cosmetic differences between exports
(capitalisation, trailing whitespace, embedded newlines) do not count as
mismatches; anything else does.
"""

import logging
import re
from collections.abc import Iterable, Mapping

import pandas as pd

from nycsales.errors import SchemaMismatchError

logger = logging.getLogger(__name__)

EXPECTED_COLUMNS: list[str] = [
    "borough",
    "neighborhood",
    "building_class_category",
    "tax_class_at_present",
    "block",
    "lot",
    "ease-ment",
    "building_class_at_present",
    "address",
    "apartment_number",
    "zip_code",
    "residential_units",
    "commercial_units",
    "total_units",
    "land_square_feet",
    "gross_square_feet",
    "year_built",
    "tax_class_at_time_of_sale",
    "building_class_at_time_of_sale",
    "sale_price",
    "sale_date",
]

_WHITESPACE = re.compile(r"\s+")


def normalize_column_name(name: object) -> str:
    """Lowercase a header and join its words with underscores.

    Examples:
        >>> normalize_column_name("BUILDING CLASS CATEGORY")
        'building_class_category'
        >>> normalize_column_name(" SALE\\nPRICE ")
        'sale_price'
        >>> normalize_column_name("EASE-MENT")
        'ease-ment'
    """
    return _WHITESPACE.sub("_", str(name).strip()).lower()


def normalize_columns(df: pd.DataFrame) -> pd.DataFrame:
    """Return a copy of ``df`` with normalized column names."""
    return df.rename(columns=normalize_column_name)


def check_columns(
    columns: Iterable[object],
    source: str,
    expected: Iterable[str] = EXPECTED_COLUMNS,
) -> None:
    """Raise SchemaMismatchError if ``columns`` differ from ``expected``.

    Args:
        columns: Raw or normalized column names of one input
        source: Name used in the error message (e.g. the borough)
        expected: Normalized column names every input must have

    Raises:
        SchemaMismatchError: If any column is missing or unexpected
    """
    normalized = [normalize_column_name(c) for c in columns]
    expected_set = set(expected)
    actual_set = set(normalized)

    missing = expected_set - actual_set
    unexpected = actual_set - expected_set
    if missing or unexpected:
        raise SchemaMismatchError(source, list(missing), list(unexpected))

    if len(normalized) != len(actual_set):
        duplicated = sorted({c for c in normalized if normalized.count(c) > 1})
        raise SchemaMismatchError(source, unexpected=duplicated)

    logger.debug(f"Schema check passed for {source}")


def validate_schema(
    frames: Mapping[str, pd.DataFrame],
    expected: Iterable[str] = EXPECTED_COLUMNS,
) -> None:
    """Check every input frame against the expected schema before merging.

    Raises:
        SchemaMismatchError: For the first input whose columns differ
    """
    expected = list(expected)
    for source, frame in frames.items():
        check_columns(frame.columns, str(source), expected)
