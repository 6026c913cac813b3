"""AGP band chart geometry.

Turns percentile series into a scaled, scrollable band chart:

    LineModel → layout.scale_to_coordinates() → points
              → curves.area_path_for()        → closed BezierPath
              → layout.grid_lines()           → axis lines and labels

Rendering is left to the caller (see scripts/preview_chart.py).

Layering:
    src/agp_chart/ → src/utils/ (never the reverse)
"""

from .curves import (
    BezierPath,
    ClosePath,
    CurveTo,
    LineTo,
    area_path_for,
    control_points_for,
    curved_path_through,
)
from .data import line_model_from_schema, load_line_model
from .layout import (
    ChartLayout,
    ValueRange,
    grid_lines,
    scale_to_coordinates,
    value_range_of,
)
from .models import (
    AreaData,
    CategoryLabel,
    ChartGeometry,
    CurvedSegment,
    GridLine,
    LineModel,
    Point,
    PointEntry,
)

__all__ = [
    # Types
    'AreaData',
    'BezierPath',
    'CategoryLabel',
    'ChartGeometry',
    'ClosePath',
    'CurvedSegment',
    'CurveTo',
    'GridLine',
    'LineModel',
    'LineTo',
    'Point',
    'PointEntry',
    'ValueRange',
    # Curve interpolation
    'control_points_for',
    'curved_path_through',
    'area_path_for',
    # Layout
    'ChartLayout',
    'grid_lines',
    'scale_to_coordinates',
    'value_range_of',
    # Data loading
    'line_model_from_schema',
    'load_line_model',
]
