import logging
from pathlib import Path
from typing import Callable

import pandas as pd

from nycsales.config import InputConfig
from nycsales.models import Borough


def load_excel(path: Path, skip_rows: int) -> pd.DataFrame:
    return pd.read_excel(path, skiprows=skip_rows)


def load_csv(path: Path, skip_rows: int) -> pd.DataFrame:
    return pd.read_csv(path, skiprows=skip_rows, encoding="utf-8")


loaders: dict[str, Callable[[Path, int], pd.DataFrame]] = {
    ".csv": load_csv,
    ".xls": load_excel,
    ".xlsx": load_excel,
}


def load_sales_file(path: str | Path, skip_rows: int = 4) -> pd.DataFrame:
    """Read one rolling sales export, skipping the boilerplate above the header.

    Args:
        path: Path to a ``.xlsx``, ``.xls`` or ``.csv`` export
        skip_rows: Number of non-data lines before the header row

    Returns:
        DataFrame with the export's own column headers

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the file type is not supported
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Sales file not found: {path}")

    loader = loaders.get(path.suffix.lower())
    if loader is None:
        raise ValueError(f"Unsupported file type: {path.suffix}")

    df = loader(path, skip_rows)
    logging.info(f"Loaded {len(df):,} rows from {path.name}")
    return df


def load_borough_files(config: InputConfig) -> dict[Borough, pd.DataFrame]:
    """Load the export of every borough named in the input configuration.

    Boroughs are returned in code order (Manhattan first) regardless of the
    order they appear in the configuration.
    """
    frames: dict[Borough, pd.DataFrame] = {}
    for borough in Borough:
        if borough not in config.files:
            raise ValueError(f"No input file configured for {borough}")
        frames[borough] = load_sales_file(config.path_for(borough), config.skip_rows)
    return frames
