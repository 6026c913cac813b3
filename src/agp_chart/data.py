"""Loading band series from validated YAML into domain types."""

from pathlib import Path
from typing import Union

from src.utils import validators

from .models import LineModel, PointEntry


def line_model_from_schema(data: validators.ChartDataV1) -> LineModel:
    """Convert a validated ChartDataV1 into a LineModel."""
    return LineModel(
        lower=[PointEntry(e.value, e.label) for e in data.lower],
        upper=[PointEntry(e.value, e.label) for e in data.upper],
    )


def load_line_model(path: Union[str, Path]) -> LineModel:
    """Read and validate an agp_chart_data.v1.yaml file.

    Raises FileNotFoundError / ValueError as validators.load_chart_data does.
    """
    return line_model_from_schema(validators.load_chart_data(path))
