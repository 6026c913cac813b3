"""YAML schema validation and config loading.

Provides centralized validation for the chart's configuration files using pydantic:
    - Chart config (agp_chart.v1.yaml): layout constants and logging options
    - Chart data (agp_chart_data.v1.yaml): lower/upper percentile series

All modules must use these validators to load configs for fail-fast error detection
with actionable messages (offending keys, expected ranges).

Units:
    - Geometry: drawing-surface pixels (px)
    - Values: whatever unit the series is recorded in (e.g. mg/dL)

Usage:
    from src.utils import validators

    cfg = validators.load_chart_config("configs/agp_chart.v1.yaml")
    data = validators.load_chart_data("data/week_42.yaml")
"""

from pathlib import Path
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


# ============================================================================
# CHART CONFIG SCHEMA V1
# ============================================================================

class ChartLayoutConfig(BaseModel):
    """Layout constants of the band chart (px unless noted)."""
    top_space: float = Field(40.0, ge=0.0, description="Reserved above the first grid line")
    bottom_space: float = Field(40.0, ge=0.0, description="Reserved below the chart for labels")
    line_gap: float = Field(60.0, gt=0.0, description="Horizontal spacing between categories")
    left_margin: float = Field(40.0, ge=0.0, description="x of the first category")
    top_headroom_factor: float = Field(1.10, ge=1.0, description="Multiplier on the value range")
    fallback_grid_scale: float = Field(400.0, gt=0.0, description="Axis scale for flat series")
    curve_delta: float = Field(0.3, gt=0.0, lt=0.5, description="Naive control point fraction")


class LoggingConfig(BaseModel):
    """Options forwarded to logging_config.setup_logging()."""
    log_level: str = Field("INFO", description="DEBUG, INFO, WARNING, ERROR or CRITICAL")
    log_file: Optional[str] = Field(None, description="Optional log file path")
    json_format: bool = Field(False, alias="json", description="JSON lines instead of human format")
    color: bool = Field(True, description="ANSI colors on the console")

    model_config = ConfigDict(populate_by_name=True)

    @field_validator('log_level')
    @classmethod
    def validate_level(cls, v: str) -> str:
        allowed = {'DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'}
        if v.upper() not in allowed:
            raise ValueError(f"log_level must be one of {sorted(allowed)}, got {v}")
        return v.upper()


class ChartConfigV1(BaseModel):
    """Complete chart configuration (agp_chart.v1.yaml schema)."""
    schema_version: str = Field("agp_chart.v1", alias="schema", description="Schema version")
    layout: ChartLayoutConfig = Field(default_factory=ChartLayoutConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = ConfigDict(populate_by_name=True)

    @field_validator('schema_version')
    @classmethod
    def validate_schema(cls, v: str) -> str:
        if v != "agp_chart.v1":
            raise ValueError(f"Expected schema 'agp_chart.v1', got '{v}'")
        return v


# ============================================================================
# CHART DATA SCHEMA V1
# ============================================================================

class ChartPointEntry(BaseModel):
    """One observation: numeric value and display label."""
    value: float = Field(..., description="Observed value")
    label: str = Field("", description="Category label shown under the column")


class ChartDataV1(BaseModel):
    """Percentile band data (agp_chart_data.v1.yaml schema).

    ``lower`` and ``upper`` are parallel: index i is the same category in both.
    """
    schema_version: str = Field("agp_chart_data.v1", alias="schema", description="Schema version")
    lower: List[ChartPointEntry] = Field(..., description="10th percentile series")
    upper: List[ChartPointEntry] = Field(..., description="90th percentile series")

    model_config = ConfigDict(populate_by_name=True)

    @field_validator('schema_version')
    @classmethod
    def validate_schema(cls, v: str) -> str:
        if v != "agp_chart_data.v1":
            raise ValueError(f"Expected schema 'agp_chart_data.v1', got '{v}'")
        return v

    @model_validator(mode='after')
    def validate_parallel_series(self) -> 'ChartDataV1':
        """Both series must describe the same categories."""
        if len(self.lower) != len(self.upper):
            raise ValueError(
                f"lower has {len(self.lower)} entries but upper has {len(self.upper)}; "
                f"series must have equal length"
            )
        return self


# ============================================================================
# PUBLIC API
# ============================================================================

def load_chart_config(path: Union[str, Path]) -> ChartConfigV1:
    """Load and validate chart config from YAML.

    Parameters
    ----------
    path : Union[str, Path]
        Path to agp_chart.v1.yaml file

    Returns
    -------
    ChartConfigV1
        Validated chart configuration

    Raises
    ------
    FileNotFoundError
        If path doesn't exist
    ValueError
        If validation fails (with actionable error message)
    """
    from . import fs

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Chart config not found: {path}")

    data = fs.load_yaml(path) or {}
    try:
        return ChartConfigV1(**data)
    except Exception as e:
        raise ValueError(f"Chart config validation failed at {path}: {e}") from e


def load_chart_data(path: Union[str, Path]) -> ChartDataV1:
    """Load and validate chart data from YAML.

    Parameters
    ----------
    path : Union[str, Path]
        Path to agp_chart_data.v1.yaml file

    Returns
    -------
    ChartDataV1
        Validated series container

    Raises
    ------
    FileNotFoundError
        If path doesn't exist
    ValueError
        If validation fails, including mismatched series lengths
    """
    from . import fs

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Chart data not found: {path}")

    data = fs.load_yaml(path)
    try:
        return ChartDataV1(**data)
    except Exception as e:
        raise ValueError(f"Chart data validation failed at {path}: {e}") from e
