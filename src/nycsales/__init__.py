from nycsales.analysis import SalesAnalysis
from nycsales.cleaning import (
    borough_name,
    clean_sales,
    merge_boroughs,
    save_cleaned,
    segment_by_building_class,
)
from nycsales.config import (
    AnalysisConfig,
    CleaningConfig,
    InputConfig,
    NeighborhoodRef,
    RegressionConfig,
    ReportConfig,
    SegmentConfig,
    find_config_file,
    load_config,
)
from nycsales.errors import DegenerateFitError, NycSalesError, SchemaMismatchError
from nycsales.loaders import load_borough_files, load_sales_file
from nycsales.models import UNKNOWN_BOROUGH, Borough, RegressionResult
from nycsales.regression import (
    filter_significant,
    fit_by_borough,
    fit_by_neighborhood,
    fit_groups,
    fit_linear,
    rank_results,
)

__all__ = [
    "AnalysisConfig",
    "Borough",
    "CleaningConfig",
    "DegenerateFitError",
    "InputConfig",
    "NeighborhoodRef",
    "NycSalesError",
    "RegressionConfig",
    "RegressionResult",
    "ReportConfig",
    "SalesAnalysis",
    "SchemaMismatchError",
    "SegmentConfig",
    "UNKNOWN_BOROUGH",
    "borough_name",
    "clean_sales",
    "filter_significant",
    "find_config_file",
    "fit_by_borough",
    "fit_by_neighborhood",
    "fit_groups",
    "fit_linear",
    "load_borough_files",
    "load_config",
    "load_sales_file",
    "merge_boroughs",
    "rank_results",
    "save_cleaned",
    "segment_by_building_class",
]
