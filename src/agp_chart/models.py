"""Value types shared by the curve interpolator and the layout engine.

Coordinate system:
    - Drawing-surface pixels, origin at top-left, +Y down
    - Points are immutable once produced

Series convention (AGP band):
    - lower: 10th percentile observations
    - upper: 90th percentile observations
    - Index i in one series is the same category as index i in the other
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List, NamedTuple, Optional, Sequence, Tuple

if TYPE_CHECKING:
    from .curves import BezierPath


class Point(NamedTuple):
    """Surface coordinate (x, y) in pixels."""
    x: float
    y: float


class CurvedSegment(NamedTuple):
    """Control points of the cubic Bézier between two consecutive points."""
    control_point1: Point
    control_point2: Point


@dataclass(frozen=True, order=True)
class PointEntry:
    """One raw observation: a numeric value and its display label.

    Ordering and equality use ``value`` only; ``label`` is opaque text.
    """
    value: float
    label: str = field(default="", compare=False)


@dataclass(frozen=True)
class LineModel:
    """Two parallel series forming a percentile band.

    Raises
    ------
    ValueError
        If the series lengths differ. Mismatched series are never
        truncated or padded.
    """
    lower: Tuple[PointEntry, ...]
    upper: Tuple[PointEntry, ...]

    def __post_init__(self):
        if len(self.lower) != len(self.upper):
            raise ValueError(
                f"Series length mismatch: lower has {len(self.lower)} entries, "
                f"upper has {len(self.upper)}"
            )
        # Frozen: normalise lists to tuples in place
        object.__setattr__(self, 'lower', tuple(self.lower))
        object.__setattr__(self, 'upper', tuple(self.upper))

    @property
    def category_count(self) -> int:
        return len(self.lower)

    @property
    def is_empty(self) -> bool:
        return self.category_count == 0


@dataclass(frozen=True)
class AreaData:
    """Closed boundary of a filled band.

    ``left_to_right`` traces the upper curve, ``right_to_left`` traces the
    lower curve back towards the start.
    """
    left_to_right: Tuple[Point, ...]
    right_to_left: Tuple[Point, ...]

    @classmethod
    def from_band_points(cls, points: Sequence[Point]) -> 'AreaData':
        """Split a 2N boundary (upper then reversed lower) into its two sides."""
        if len(points) % 2 != 0:
            raise ValueError(f"Band boundary needs an even point count, got {len(points)}")
        half = len(points) // 2
        return cls(tuple(points[:half]), tuple(points[half:]))


@dataclass(frozen=True)
class GridLine:
    """Horizontal grid line at ``fraction`` of the plot height."""
    fraction: float
    y: float
    label: int
    dashed: bool


@dataclass(frozen=True)
class CategoryLabel:
    """Text anchored under one category column (center x, center y)."""
    text: str
    x: float
    y: float
    width: float


@dataclass(frozen=True)
class ChartGeometry:
    """Everything a single layout pass produces for the renderer.

    ``plot_rect`` is (x, y, width, height) of the data surface inside the
    full view; ``points``, ``area`` and ``path`` live in plot coordinates.
    """
    plot_rect: Tuple[float, float, float, float]
    content_width: float
    points: List[Point]
    area: Optional[AreaData]
    path: Optional['BezierPath']
    grid_lines: List[GridLine]
    category_labels: List[CategoryLabel]
