"""Configuration management for the nycsales pipeline.

Settings are read from YAML files with priority:
1. the file named by $NYCSALES_CONFIG
2. ./nycsales.yml (project-level)
3. ~/.config/nycsales/config.yml (user-level)
4. Default values
"""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

from nycsales.models import Borough

CONFIG_ENV_VAR = "NYCSALES_CONFIG"


def _default_files() -> dict[Borough, str]:
    return {borough: f"rollingsales_{borough.file_stem}.xlsx" for borough in Borough}


class InputConfig(BaseModel):
    """Location and layout of the per-borough sales exports."""

    data_dir: str = "."
    skip_rows: int = 4
    files: dict[Borough, str] = Field(default_factory=_default_files)

    def path_for(self, borough: Borough) -> Path:
        return Path(self.data_dir).expanduser() / self.files[borough]


class CleaningConfig(BaseModel):
    """Cleaning thresholds and column handling."""

    min_sale_price: int = 10000
    min_gross_square_feet: int = 150
    title_case_columns: list[str] = [
        "neighborhood",
        "building_class_category",
        "address",
        "apartment_number",
    ]
    drop_columns: list[str] = ["ease-ment"]
    output_file: str = "NYC_property_sales.csv"


class SegmentConfig(BaseModel):
    """Housing subtype selected for the regression analysis."""

    building_class: str = "A5"


class RegressionConfig(BaseModel):
    """Group-wise regression settings."""

    min_group_size: int = 10
    max_p_value: float = 0.05
    min_adj_r_squared: float = 0.5


class NeighborhoodRef(BaseModel):
    borough: str
    neighborhood: str

    def as_key(self) -> tuple[str, str]:
        return (self.borough, self.neighborhood)


class ReportConfig(BaseModel):
    """Report rendering configuration."""

    output_dir: str = "figures"
    scientific_notation: bool = False
    plot_neighborhoods: list[NeighborhoodRef] | None = None
    max_plot_neighborhoods: int = 6
    show_progress: bool = True


class AnalysisConfig(BaseModel):
    """Main configuration for the sales analysis."""

    input: InputConfig = Field(default_factory=InputConfig)
    cleaning: CleaningConfig = Field(default_factory=CleaningConfig)
    segment: SegmentConfig = Field(default_factory=SegmentConfig)
    regression: RegressionConfig = Field(default_factory=RegressionConfig)
    report: ReportConfig = Field(default_factory=ReportConfig)

    @classmethod
    def load_from_file(cls, path: str | Path) -> "AnalysisConfig":
        """Read settings from a YAML file. Missing sections keep their defaults.

        Raises:
            FileNotFoundError: If the file doesn't exist
            yaml.YAMLError: If the file is not valid YAML
            ValueError: If the file does not hold a mapping of sections, or a
                setting has the wrong type
        """
        path = Path(path).expanduser()
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise ValueError(f"Config file {path} must contain a mapping of sections")
        return cls.model_validate(data)

    def save_to_file(self, path: str | Path) -> Path:
        """Write every setting to a YAML file, boroughs keyed by name.

        Returns:
            Path the file was written to
        """
        path = Path(path).expanduser()
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.to_yaml(), encoding="utf-8")
        return path

    def to_yaml(self) -> str:
        return yaml.safe_dump(self.model_dump(), default_flow_style=False, sort_keys=False)

    def lookup(self, key: str) -> Any:
        """Value of a dotted setting such as ``cleaning.min_sale_price``.

        Borough file names are reached by borough name, e.g.
        ``input.files.Staten Island``.

        Raises:
            KeyError: If any part of the key does not name a setting
        """
        value: Any = self
        for part in key.split("."):
            if isinstance(value, BaseModel) and part in type(value).model_fields:
                value = getattr(value, part)
            elif isinstance(value, dict):
                by_name = {str(k): v for k, v in value.items()}
                if part not in by_name:
                    raise KeyError(key)
                value = by_name[part]
            else:
                raise KeyError(key)
        return value


def config_search_paths() -> list[Path]:
    """Config files consulted when none is given, highest priority first."""
    paths = []
    if os.environ.get(CONFIG_ENV_VAR):
        paths.append(Path(os.environ[CONFIG_ENV_VAR]).expanduser())
    paths.append(Path.cwd() / "nycsales.yml")
    paths.append(Path.home() / ".config" / "nycsales" / "config.yml")
    return paths


def find_config_file() -> Path | None:
    return next((path for path in config_search_paths() if path.exists()), None)


def load_config(config_file: str | Path | None = None) -> AnalysisConfig:
    """Settings from ``config_file``, else from the first config found, else defaults.

    Raises:
        FileNotFoundError: If config_file is given but doesn't exist
    """
    path = config_file if config_file is not None else find_config_file()
    if path is None:
        return AnalysisConfig()
    return AnalysisConfig.load_from_file(path)
