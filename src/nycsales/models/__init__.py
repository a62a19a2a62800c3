from nycsales.models.borough import UNKNOWN_BOROUGH, Borough
from nycsales.models.regression import GroupKey, RegressionResult
from nycsales.models.yaml_enum import YamlEnum

__all__ = [
    "Borough",
    "GroupKey",
    "RegressionResult",
    "UNKNOWN_BOROUGH",
    "YamlEnum",
]
