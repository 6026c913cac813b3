"""Value→pixel mapping, grid lines and per-pass chart geometry.

Frames:
    - View: full drawing surface (width × height), origin top-left
    - Plot: data surface inside the view, offset by top_space and
      shortened by top_space + bottom_space; points live here
    - Content: horizontally scrollable strip, category_count × line_gap wide

Scaling:
    range = (max(upper) - min(lower)) × top_headroom_factor
    y     = plot_height × (1 - (value - min) / range)
    x     = index × line_gap + left_margin

The 1.10 headroom keeps the highest value below the top edge. A zero range
(all values equal) substitutes the fallback scale (4 × 100) instead of
dividing by zero; grid labels then count down from that scale.

Nothing here caches: every layout pass rebuilds all geometry from the model.
"""

import logging
import math
from typing import List, NamedTuple, Optional, Sequence

import torch

from src.utils.validators import ChartLayoutConfig

from .curves import area_path_for
from .models import AreaData, CategoryLabel, ChartGeometry, GridLine, LineModel, Point, PointEntry

logger = logging.getLogger(__name__)

TOP_HEADROOM_FACTOR = 110.0 / 100.0
FALLBACK_GRID_SCALE = 4 * 100.0

FEW_CATEGORY_FRACTIONS = (0.0, 1.0)
MANY_CATEGORY_FRACTIONS = (0.0, 0.25, 0.5, 0.75, 1.0)


class ValueRange(NamedTuple):
    """Extent of the plotted values plus the headroom applied on top."""
    min_value: float
    max_value: float
    headroom_factor: float = TOP_HEADROOM_FACTOR
    fallback_scale: float = FALLBACK_GRID_SCALE

    @property
    def span(self) -> float:
        """(max - min) × headroom; may be 0 for a flat series."""
        return (self.max_value - self.min_value) * self.headroom_factor

    @property
    def is_degenerate(self) -> bool:
        return self.span == 0

    @property
    def scale_span(self) -> float:
        """Divisor for the value→pixel mapping, never zero."""
        return self.fallback_scale if self.is_degenerate else self.span


def value_range_of(
    upper: Sequence[PointEntry],
    lower: Optional[Sequence[PointEntry]] = None,
    headroom_factor: float = TOP_HEADROOM_FACTOR,
    fallback_scale: float = FALLBACK_GRID_SCALE
) -> Optional[ValueRange]:
    """Min of the lower series and max of the upper series.

    With ``lower`` omitted both ends come from ``upper``. Returns None if a
    supplied series is empty.
    """
    if lower is None:
        lower = upper
    if len(upper) == 0 or len(lower) == 0:
        return None
    return ValueRange(
        min_value=float(min(lower).value),
        max_value=float(max(upper).value),
        headroom_factor=headroom_factor,
        fallback_scale=fallback_scale,
    )


def values_to_px(values: torch.Tensor, value_range: ValueRange, surface_height: float) -> torch.Tensor:
    """Map values to y pixels (top-left origin, larger values higher up)."""
    offset = (values - value_range.min_value) / value_range.scale_span
    return surface_height * (1.0 - offset)


def px_to_value(y_px: torch.Tensor, value_range: ValueRange, surface_height: float) -> torch.Tensor:
    """Inverse of values_to_px."""
    if surface_height == 0:
        raise ValueError("Cannot invert a mapping onto a zero-height surface")
    return (1.0 - y_px / surface_height) * value_range.scale_span + value_range.min_value


def _round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


# ============================================================================
# SCALING
# ============================================================================

def scale_to_coordinates(
    upper: Sequence[PointEntry],
    lower: Optional[Sequence[PointEntry]],
    surface_height: float,
    x_spacing: float,
    left_margin: float,
    headroom_factor: float = TOP_HEADROOM_FACTOR,
    fallback_scale: float = FALLBACK_GRID_SCALE
) -> List[Point]:
    """Map band series onto the plot surface.

    Parameters
    ----------
    upper : Sequence[PointEntry]
        Upper series, traced left to right
    lower : Sequence[PointEntry], optional
        Lower series, appended in reverse index order; None for a single line
    surface_height : float
        Plot height in px
    x_spacing : float
        Horizontal px between categories
    left_margin : float
        x of the first category
    headroom_factor : float
        Multiplier on the value range, default 1.10
    fallback_scale : float
        Range substituted when all values are equal, default 400

    Returns
    -------
    List[Point]
        2N points (upper left→right, then lower right→left), N points when
        ``lower`` is None, empty when a series is empty

    Raises
    ------
    ValueError
        If both series are non-empty with different lengths
    """
    if len(upper) == 0 or (lower is not None and len(lower) == 0):
        return []

    if lower is not None and len(lower) != len(upper):
        raise ValueError(
            f"Series length mismatch: upper has {len(upper)} entries, lower has {len(lower)}"
        )

    value_range = value_range_of(upper, lower, headroom_factor, fallback_scale)
    if value_range is None:
        return []

    if value_range.is_degenerate:
        logger.debug(
            "Flat series (min == max == %s); using fallback scale %s",
            value_range.min_value, fallback_scale
        )

    n = len(upper)
    xs = torch.arange(n, dtype=torch.float64) * x_spacing + left_margin
    upper_y = values_to_px(
        torch.tensor([e.value for e in upper], dtype=torch.float64), value_range, surface_height
    )
    points = [Point(x, y) for x, y in zip(xs.tolist(), upper_y.tolist())]

    if lower is not None:
        lower_y = values_to_px(
            torch.tensor([e.value for e in lower], dtype=torch.float64), value_range, surface_height
        )
        points.extend(
            Point(x, y) for x, y in zip(torch.flip(xs, [0]).tolist(), torch.flip(lower_y, [0]).tolist())
        )

    return points


# ============================================================================
# GRID
# ============================================================================

def grid_fractions(category_count: int) -> Sequence[float]:
    """Fractional heights of the grid lines for a given category count."""
    if category_count <= 0:
        return ()
    if category_count < 4:
        return FEW_CATEGORY_FRACTIONS
    return MANY_CATEGORY_FRACTIONS


def grid_lines(
    category_count: int,
    surface_height: float,
    value_range: Optional[ValueRange]
) -> List[GridLine]:
    """Horizontal grid lines with their axis labels.

    Label at fraction f is ``(1 - f) × span + min`` rounded half up. A flat
    or missing range labels the axis on the fixed fallback scale instead:
    ``(1 - f) × 400``. Interior lines are dashed, top and bottom are solid.
    """
    lines = []
    for f in grid_fractions(category_count):
        if value_range is not None and value_range.span > 0:
            label = _round_half_up((1.0 - f) * value_range.span + value_range.min_value)
        else:
            scale = value_range.fallback_scale if value_range is not None else FALLBACK_GRID_SCALE
            label = _round_half_up((1.0 - f) * scale)

        lines.append(GridLine(
            fraction=f,
            y=f * surface_height,
            label=label,
            dashed=0.0 < f < 1.0,
        ))
    return lines


# ============================================================================
# LAYOUT PASS
# ============================================================================

class ChartLayout:
    """Full layout pass for an AGP band chart.

    Parameters
    ----------
    config : ChartLayoutConfig, optional
        Margins, spacing and scale constants; defaults match agp_chart.v1

    Usage
    -----
    >>> layout = ChartLayout()
    >>> geometry = layout.layout(model, width=375.0, height=300.0)
    >>> geometry.path.to_svg()
    """

    def __init__(self, config: Optional[ChartLayoutConfig] = None):
        self.config = config or ChartLayoutConfig()

    def plot_height(self, height: float) -> float:
        return max(0.0, height - self.config.top_space - self.config.bottom_space)

    def content_width(self, category_count: int) -> float:
        return category_count * self.config.line_gap

    def category_labels(self, model: LineModel, height: float) -> List[CategoryLabel]:
        """One label per category, centered under its column."""
        cfg = self.config
        return [
            CategoryLabel(
                text=entry.label,
                x=i * cfg.line_gap + cfg.left_margin,
                y=height - cfg.bottom_space / 2.0,
                width=cfg.line_gap,
            )
            for i, entry in enumerate(model.lower)
        ]

    def layout(self, model: Optional[LineModel], width: float, height: float) -> Optional[ChartGeometry]:
        """Compute fresh geometry for ``model`` on a width × height view.

        Returns None when there is no model yet.
        """
        if model is None:
            return None

        cfg = self.config
        plot_height = self.plot_height(height)
        content_width = self.content_width(model.category_count)

        points = scale_to_coordinates(
            model.upper,
            model.lower,
            surface_height=plot_height,
            x_spacing=cfg.line_gap,
            left_margin=cfg.left_margin,
            headroom_factor=cfg.top_headroom_factor,
            fallback_scale=cfg.fallback_grid_scale,
        )
        area = AreaData.from_band_points(points) if points else None
        path = area_path_for(area, delta=cfg.curve_delta) if area is not None else None

        value_range = value_range_of(
            model.upper, model.lower, cfg.top_headroom_factor, cfg.fallback_grid_scale
        )

        logger.debug(
            "Layout pass: %d categories, plot %.1fx%.1f px, content width %.1f px",
            model.category_count, width, plot_height, content_width
        )

        return ChartGeometry(
            plot_rect=(0.0, cfg.top_space, max(width, content_width), plot_height),
            content_width=content_width,
            points=points,
            area=area,
            path=path,
            grid_lines=grid_lines(model.category_count, plot_height, value_range),
            category_labels=self.category_labels(model, height),
        )
