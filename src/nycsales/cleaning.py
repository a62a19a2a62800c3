"""Merging, cleaning and segmenting of the rolling sales exports.

Every function here returns a new DataFrame and leaves its input untouched.
"""

import logging
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

import pandas as pd

from nycsales.models import UNKNOWN_BOROUGH, Borough
from nycsales.schema import normalize_columns, validate_schema

logger = logging.getLogger(__name__)

NUMERIC_COLUMNS = ["sale_price", "gross_square_feet"]
SORT_COLUMNS = ["borough", "neighborhood"]
CODE_COLUMNS = ["building_class_at_present", "building_class_at_time_of_sale"]


def borough_name(code: Any) -> str:
    """Map a DOF borough code to its name, or to ``Unknown``.

    Examples:
        >>> borough_name(1)
        'Manhattan'
        >>> borough_name("5")
        'Staten Island'
        >>> borough_name(9)
        'Unknown'
    """
    borough = Borough.from_code(code)
    if borough is None:
        return UNKNOWN_BOROUGH
    return borough.value


def map_borough_codes(codes: pd.Series) -> pd.Series:
    return codes.map(borough_name).astype(object)


def title_case(value: Any) -> Any:
    if isinstance(value, str):
        return value.strip().title()
    return value


def strip_code(value: Any) -> Any:
    if isinstance(value, str):
        return value.strip()
    return value


def to_numeric(series: pd.Series) -> pd.Series:
    """Convert currency/area strings such as ``"$1,250,000"`` to numbers.

    Values that cannot be parsed (blank cells, ``" -  "``) become NaN.
    """
    if pd.api.types.is_numeric_dtype(series):
        return series
    cleaned = series.astype(str).str.replace(r"[$,\s]", "", regex=True)
    return pd.to_numeric(cleaned, errors="coerce")


def merge_boroughs(
    frames: Mapping[Any, pd.DataFrame],
    title_case_columns: Iterable[str] = (
        "neighborhood",
        "building_class_category",
        "address",
        "apartment_number",
    ),
    drop_columns: Iterable[str] = ("ease-ment",),
) -> pd.DataFrame:
    """Combine the per-borough exports into one normalized table.

    Steps:
    - validate every input against the expected schema
    - concatenate with normalized column names
    - map numeric borough codes to names (``Unknown`` for anything else)
    - title-case the free-text columns
    - strip whitespace around building class codes
    - drop administrative columns
    - remove exact duplicate rows (first occurrence kept)

    Raises:
        SchemaMismatchError: If any input has missing or unexpected columns
    """
    validate_schema({str(source): frame for source, frame in frames.items()})

    merged = pd.concat(
        [normalize_columns(frame) for frame in frames.values()],
        ignore_index=True,
    )
    logger.info(f"Merged {len(frames)} files into {len(merged):,} rows")

    merged["borough"] = map_borough_codes(merged["borough"])

    for column in title_case_columns:
        if column in merged.columns:
            merged[column] = merged[column].map(title_case)

    for column in CODE_COLUMNS:
        if column in merged.columns:
            merged[column] = merged[column].map(strip_code)

    merged = merged.drop(columns=[c for c in drop_columns if c in merged.columns])

    before = len(merged)
    merged = merged.drop_duplicates().reset_index(drop=True)
    logger.info(f"Removed {before - len(merged):,} duplicate rows")

    return merged


def _as_integer_if_whole(series: pd.Series) -> pd.Series:
    if len(series) and (series % 1 == 0).all():
        return series.astype("int64")
    return series


def clean_sales(
    df: pd.DataFrame,
    min_sale_price: float = 10000,
    min_gross_square_feet: float = 150,
) -> pd.DataFrame:
    """Drop non-market and implausible sales and sort by location.

    Keeps rows with ``sale_price > min_sale_price`` and
    ``gross_square_feet >= min_gross_square_feet``, drops rows missing either
    value, then sorts by borough and neighborhood (stable).

    Args:
        df: Merged sales table
        min_sale_price: Exclusive lower bound on sale price
        min_gross_square_feet: Inclusive lower bound on building area

    Returns:
        Cleaned copy of the table with a fresh index
    """
    cleaned = df.copy()
    for column in NUMERIC_COLUMNS:
        cleaned[column] = to_numeric(cleaned[column])

    start = len(cleaned)

    cleaned = cleaned[cleaned["sale_price"] > min_sale_price]
    logger.info(
        f"Dropped {start - len(cleaned):,} rows with sale price <= {min_sale_price:,}"
    )

    count = len(cleaned)
    cleaned = cleaned[cleaned["gross_square_feet"] >= min_gross_square_feet]
    logger.info(
        f"Dropped {count - len(cleaned):,} rows with gross square feet "
        f"< {min_gross_square_feet:,}"
    )

    cleaned = cleaned.dropna(subset=NUMERIC_COLUMNS).copy()
    for column in NUMERIC_COLUMNS:
        cleaned[column] = _as_integer_if_whole(cleaned[column])

    cleaned = cleaned.sort_values(SORT_COLUMNS, kind="mergesort").reset_index(drop=True)
    logger.info(f"Cleaned table has {len(cleaned):,} of {start:,} rows")

    return cleaned


def save_cleaned(df: pd.DataFrame, path: str | Path) -> Path:
    """Write the cleaned table as a UTF-8 CSV snapshot.

    Returns:
        Path the file was written to
    """
    path = Path(path).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(path, index=False, encoding="utf-8", lineterminator="\n")
    logger.info(f"Wrote {len(df):,} rows to {path}")
    return path


def segment_by_building_class(df: pd.DataFrame, building_class: str = "A5") -> pd.DataFrame:
    """Select sales whose building class at time of sale is ``building_class``.

    Codes are compared and returned without surrounding whitespace.
    """
    classes = df["building_class_at_time_of_sale"].map(strip_code)
    segment = df[classes == building_class].copy()
    segment["building_class_at_time_of_sale"] = building_class
    segment = segment.reset_index(drop=True)
    logger.info(f"Selected {len(segment):,} sales of building class {building_class}")
    return segment
