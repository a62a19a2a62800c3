"""Scatterplots of sale price against building size with fitted trend lines."""

import logging
from collections.abc import Sequence
from pathlib import Path

import matplotlib.pyplot as plt
import pandas as pd
import seaborn as sns
from matplotlib.axes import Axes
from matplotlib.ticker import StrMethodFormatter

from nycsales.regression import PREDICTOR, RESPONSE

logger = logging.getLogger(__name__)

STYLE = "seaborn-v0_8-whitegrid"
SCATTER_KWS = {"alpha": 0.4, "s": 15}
LINE_KWS = {"color": "red"}


def _plain_ticks(ax: Axes) -> None:
    ax.xaxis.set_major_formatter(StrMethodFormatter("{x:,.0f}"))
    ax.yaxis.set_major_formatter(StrMethodFormatter("{x:,.0f}"))


def _prepare(path: str | Path) -> Path:
    path = Path(path).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)
    return path


def plot_overall(
    df: pd.DataFrame,
    path: str | Path,
    scientific_notation: bool = False,
) -> Path:
    """Scatter all sales with one fitted line."""
    path = _prepare(path)
    with plt.style.context(STYLE):
        fig, ax = plt.subplots(figsize=(9, 6))
        sns.regplot(
            data=df,
            x=PREDICTOR,
            y=RESPONSE,
            ci=None,
            ax=ax,
            scatter_kws=SCATTER_KWS,
            line_kws=LINE_KWS,
        )
        ax.set_title("Sale price vs. gross square feet")
        ax.set_xlabel("Gross square feet")
        ax.set_ylabel("Sale price (USD)")
        if not scientific_notation:
            _plain_ticks(ax)
        fig.tight_layout()
        fig.savefig(path, dpi=150)
        plt.close(fig)

    logger.info(f"Wrote {path}")
    return path


def _facet_plot(
    df: pd.DataFrame,
    col: str,
    col_order: list[str],
    path: Path,
    title: str,
    scientific_notation: bool,
) -> Path:
    with plt.style.context(STYLE):
        grid = sns.lmplot(
            data=df,
            x=PREDICTOR,
            y=RESPONSE,
            col=col,
            col_order=col_order,
            col_wrap=min(3, len(col_order)),
            ci=None,
            height=3.5,
            facet_kws={"sharex": False, "sharey": False},
            scatter_kws=SCATTER_KWS,
            line_kws=LINE_KWS,
        )
        grid.set_titles("{col_name}")
        grid.set_axis_labels("Gross square feet", "Sale price (USD)")
        if not scientific_notation:
            for ax in grid.axes.flat:
                _plain_ticks(ax)
        grid.figure.suptitle(title, y=1.02)
        grid.savefig(path, dpi=150)
        plt.close(grid.figure)

    logger.info(f"Wrote {path}")
    return path


def plot_by_borough(
    df: pd.DataFrame,
    path: str | Path,
    scientific_notation: bool = False,
) -> Path:
    """One panel per borough, each with its own fitted line."""
    if df.empty:
        raise ValueError("No sales to plot")
    boroughs = sorted(df["borough"].dropna().unique())
    return _facet_plot(
        df,
        "borough",
        boroughs,
        _prepare(path),
        "Sale price vs. gross square feet by borough",
        scientific_notation,
    )


def plot_neighborhoods(
    df: pd.DataFrame,
    neighborhoods: Sequence[tuple[str, str]],
    path: str | Path,
    scientific_notation: bool = False,
) -> Path:
    """One panel per selected (borough, neighborhood), in the order given.

    Repeated selections are drawn once.

    Raises:
        ValueError: If none of the selected neighborhoods has any sales
    """
    keys = list(dict.fromkeys(tuple(key) for key in neighborhoods))
    mask = pd.MultiIndex.from_frame(df[["borough", "neighborhood"]]).isin(keys)
    subset = df[mask].copy()
    if subset.empty:
        raise ValueError("No sales found for the selected neighborhoods")

    subset["panel"] = subset["neighborhood"] + " (" + subset["borough"] + ")"
    present = set(zip(subset["borough"], subset["neighborhood"]))
    order = [f"{n} ({b})" for b, n in keys if (b, n) in present]
    missing = [key for key in keys if key not in present]
    if missing:
        logger.warning(f"No sales to plot for {missing}")

    return _facet_plot(
        subset,
        "panel",
        order,
        _prepare(path),
        "Sale price vs. gross square feet for best-fitting neighborhoods",
        scientific_notation,
    )
