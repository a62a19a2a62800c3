"""Simple linear regression of sale price on building size, overall and by group.

Every fit is ``sale_price ~ gross_square_feet`` by ordinary least squares.
Group fits partition the rows first and fit each subset independently, so
results only depend on the rows of their own group.
"""

import logging
import math
from collections.abc import Iterable, Mapping

import pandas as pd
from scipy import stats
from tqdm import tqdm

from nycsales.errors import DegenerateFitError
from nycsales.models import GroupKey, RegressionResult

logger = logging.getLogger(__name__)

PREDICTOR = "gross_square_feet"
RESPONSE = "sale_price"


def _t_value(estimate: float, stderr: float) -> float:
    if math.isnan(stderr):
        return math.nan
    if stderr == 0:
        # Exact fit: the estimate is infinitely many standard errors from zero
        return math.nan if estimate == 0 else math.copysign(math.inf, estimate)
    return estimate / stderr


def _describe(group_key: GroupKey) -> str:
    if group_key is None:
        return "all sales"
    if isinstance(group_key, tuple):
        return " / ".join(str(part) for part in group_key)
    return str(group_key)


def fit_linear(
    df: pd.DataFrame,
    group_key: GroupKey = None,
    x: str = PREDICTOR,
    y: str = RESPONSE,
) -> RegressionResult:
    """Fit ``y ~ x`` over all rows of ``df``.

    With exactly two rows the line is fitted exactly but there are no
    residual degrees of freedom, so t values, p values and adjusted R² are
    NaN.

    Args:
        df: Rows to fit
        group_key: Key recorded on the result (None for an overall fit)
        x: Predictor column
        y: Response column

    Returns:
        RegressionResult for the rows

    Raises:
        DegenerateFitError: If there are fewer than two rows or all
            predictor values are identical
    """
    data = df[[x, y]].astype(float)
    n = len(data)

    if n < 2:
        raise DegenerateFitError(_describe(group_key), f"only {n} row(s)")
    if data[x].nunique() < 2:
        raise DegenerateFitError(_describe(group_key), f"all {x} values are identical")

    fit = stats.linregress(data[x], data[y])
    slope = float(fit.slope)
    intercept = float(fit.intercept)
    r_squared = float(fit.rvalue) ** 2

    if n == 2:
        return RegressionResult(
            group_key=group_key,
            slope=slope,
            intercept=intercept,
            slope_stderr=math.nan,
            intercept_stderr=math.nan,
            t_value=math.nan,
            p_value=math.nan,
            intercept_t_value=math.nan,
            intercept_p_value=math.nan,
            r_squared=r_squared,
            adj_r_squared=math.nan,
            n=n,
        )

    df_resid = n - 2
    intercept_stderr = float(fit.intercept_stderr)
    intercept_t = _t_value(intercept, intercept_stderr)
    if math.isnan(intercept_t):
        intercept_p = math.nan
    else:
        intercept_p = float(2 * stats.t.sf(abs(intercept_t), df_resid))

    return RegressionResult(
        group_key=group_key,
        slope=slope,
        intercept=intercept,
        slope_stderr=float(fit.stderr),
        intercept_stderr=intercept_stderr,
        t_value=_t_value(slope, float(fit.stderr)),
        p_value=float(fit.pvalue),
        intercept_t_value=intercept_t,
        intercept_p_value=intercept_p,
        r_squared=r_squared,
        adj_r_squared=1 - (1 - r_squared) * (n - 1) / df_resid,
        n=n,
    )


def partition(
    df: pd.DataFrame,
    by: str | list[str],
    min_size: int = 0,
) -> dict[GroupKey, pd.DataFrame]:
    """Split ``df`` into row subsets keyed by the values of ``by``.

    Groups come back in sorted key order. Groups with fewer than
    ``min_size`` rows are left out.

    Returns:
        Mapping of group key (a value, or a tuple for several columns) to rows
    """
    groups: dict[GroupKey, pd.DataFrame] = {}
    skipped = 0
    for key, rows in df.groupby(by, sort=True):
        if isinstance(by, str) and isinstance(key, tuple):
            key = key[0]
        if len(rows) < min_size:
            skipped += 1
            continue
        groups[key] = rows

    if skipped:
        logger.info(f"Skipped {skipped} groups with fewer than {min_size} rows")
    return groups


def fit_groups(
    df: pd.DataFrame,
    by: str | list[str],
    min_size: int = 0,
    show_progress: bool = False,
) -> dict[GroupKey, RegressionResult]:
    """Fit an independent regression within every group of ``df``.

    Args:
        df: Rows to partition and fit
        by: Column or columns defining the groups
        min_size: Groups with fewer rows are not fitted
        show_progress: Show a progress bar while fitting

    Returns:
        Mapping of group key to RegressionResult, in sorted key order

    Raises:
        DegenerateFitError: If any retained group cannot be fitted
    """
    groups = partition(df, by, min_size=min_size)
    results: dict[GroupKey, RegressionResult] = {}
    for key, rows in tqdm(
        groups.items(),
        total=len(groups),
        desc=f"Fitting by {by}",
        disable=not show_progress,
    ):
        results[key] = fit_linear(rows, group_key=key)

    logger.info(f"Fitted {len(results)} groups by {by}")
    return results


def fit_by_borough(df: pd.DataFrame, show_progress: bool = False) -> dict[GroupKey, RegressionResult]:
    return fit_groups(df, "borough", show_progress=show_progress)


def fit_by_neighborhood(
    df: pd.DataFrame,
    min_group_size: int = 10,
    show_progress: bool = False,
) -> dict[GroupKey, RegressionResult]:
    """Fit each (borough, neighborhood) group with at least ``min_group_size`` sales."""
    return fit_groups(
        df,
        ["borough", "neighborhood"],
        min_size=min_group_size,
        show_progress=show_progress,
    )


def rank_results(
    results: Mapping[GroupKey, RegressionResult] | Iterable[RegressionResult],
    by: str = "adj_r_squared",
) -> list[RegressionResult]:
    """Sort results by one of their numeric fields, largest first.

    The sort is stable and NaN values go last.
    """
    if isinstance(results, Mapping):
        results = results.values()
    return sorted(results, key=lambda r: RegressionResult.sort_key(getattr(r, by)))


def filter_significant(
    results: Mapping[GroupKey, RegressionResult] | Iterable[RegressionResult],
    max_p_value: float = 0.05,
    min_adj_r_squared: float = 0.5,
) -> list[RegressionResult]:
    """Keep results with ``p_value < max_p_value`` and ``adj_r_squared > min_adj_r_squared``."""
    if isinstance(results, Mapping):
        results = results.values()
    return [r for r in results if r.is_significant(max_p_value, min_adj_r_squared)]


def coefficient_table(result: RegressionResult) -> pd.DataFrame:
    """Coefficient estimates of a fit in the layout of a regression summary."""
    return pd.DataFrame(
        {
            "estimate": [result.intercept, result.slope],
            "std_error": [result.intercept_stderr, result.slope_stderr],
            "t_value": [result.intercept_t_value, result.t_value],
            "p_value": [result.intercept_p_value, result.p_value],
        },
        index=pd.Index(["(Intercept)", PREDICTOR], name="term"),
    )
