"""Smooth cubic Bézier paths through ordered points.

Control points are built in two explicit phases over (N-1, 2) tensors:
    1. Naive pass: for each pair (A, B), cp1 = A + δ(B - A), cp2 = B - δ(B - A)
       with δ = 0.3. Segments look straight.
    2. Smoothing pass: at each interior point A, the neighbouring naive
       control points M (incoming) and N (outgoing) are reflected across A
       and averaged with the opposite side:
           cp1[i]   = (2A - M + N) / 2
           cp2[i-1] = (2A - N + M) / 2
       Both new control points are read from the naive arrays, so the
       result does not depend on iteration order.

Open-path endpoints keep their naive control points. Two points give one
naive segment and no smoothing.

Public API:
    control_points_for(points) -> List[CurvedSegment]
    curved_path_through(points) -> Optional[BezierPath]
    area_path_for(area) -> Optional[BezierPath]
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple, Union

import torch

from src.utils import geometry

from .models import AreaData, CurvedSegment, Point

logger = logging.getLogger(__name__)

CURVE_DELTA = 0.3


# ============================================================================
# PATH REPRESENTATION
# ============================================================================

@dataclass(frozen=True)
class LineTo:
    end: Point


@dataclass(frozen=True)
class CurveTo:
    control_point1: Point
    control_point2: Point
    end: Point


@dataclass(frozen=True)
class ClosePath:
    pass


PathCommand = Union[LineTo, CurveTo, ClosePath]


@dataclass
class BezierPath:
    """Path of straight and cubic segments, as handed to a renderer.

    Built incrementally with add_line() / add_curve() / close(), in the
    order a 2D drawing API would receive the calls.
    """
    start: Point
    commands: List[PathCommand] = field(default_factory=list)

    def add_line(self, to: Point) -> None:
        self.commands.append(LineTo(Point(*to)))

    def add_curve(self, to: Point, control_point1: Point, control_point2: Point) -> None:
        self.commands.append(CurveTo(Point(*control_point1), Point(*control_point2), Point(*to)))

    def close(self) -> None:
        self.commands.append(ClosePath())

    @property
    def is_closed(self) -> bool:
        return bool(self.commands) and isinstance(self.commands[-1], ClosePath)

    @property
    def current_point(self) -> Point:
        """Pen position after the last command."""
        point = self.start
        for cmd in self.commands:
            point = self.start if isinstance(cmd, ClosePath) else cmd.end
        return point

    @property
    def curve_count(self) -> int:
        return sum(1 for cmd in self.commands if isinstance(cmd, CurveTo))

    def anchors(self) -> List[Point]:
        """On-curve points in drawing order (control points excluded)."""
        points = [self.start]
        for cmd in self.commands:
            if not isinstance(cmd, ClosePath):
                points.append(cmd.end)
        return points

    def to_svg(self, precision: int = 2) -> str:
        """Serialize as an SVG path ``d`` attribute."""
        def fmt(p: Point) -> str:
            return f"{p.x:.{precision}f},{p.y:.{precision}f}"

        parts = [f"M{fmt(self.start)}"]
        for cmd in self.commands:
            if isinstance(cmd, LineTo):
                parts.append(f"L{fmt(cmd.end)}")
            elif isinstance(cmd, CurveTo):
                parts.append(
                    f"C{fmt(cmd.control_point1)} {fmt(cmd.control_point2)} {fmt(cmd.end)}"
                )
            else:
                parts.append("Z")
        return " ".join(parts)

    def flatten(self, max_err_px: float = 0.25) -> torch.Tensor:
        """Approximate the path by a polyline.

        Parameters
        ----------
        max_err_px : float
            Maximum deviation of each flattened curve from the true curve

        Returns
        -------
        torch.Tensor
            Vertices, shape (M, 2), float64. Starts at ``start``; a closed
            path ends with ``start`` again.
        """
        current = _as_tensor([self.start])[0]
        chunks = [current.unsqueeze(0)]
        for cmd in self.commands:
            if isinstance(cmd, CurveTo):
                cp1, cp2, end = _as_tensor([cmd.control_point1, cmd.control_point2, cmd.end])
                poly = geometry.bezier_cubic_polyline(current, cp1, cp2, end, max_err_px=max_err_px)
                chunks.append(poly[1:])
                current = end
            else:
                end = _as_tensor([self.start if isinstance(cmd, ClosePath) else cmd.end])[0]
                chunks.append(end.unsqueeze(0))
                current = end
        return torch.cat(chunks, dim=0)

    def bbox(self, max_err_px: float = 0.25) -> Tuple[float, float, float, float]:
        """(xmin, ymin, xmax, ymax) of the flattened path."""
        return geometry.polyline_bbox(self.flatten(max_err_px))

    def length(self, max_err_px: float = 0.25) -> float:
        return geometry.polyline_length(self.flatten(max_err_px))


# ============================================================================
# CONTROL POINTS
# ============================================================================

def _as_tensor(points: Sequence[Point]) -> torch.Tensor:
    return torch.tensor([tuple(p) for p in points], dtype=torch.float64).reshape(-1, 2)


def _naive_control_points(pts: torch.Tensor, delta: float) -> Tuple[torch.Tensor, torch.Tensor]:
    """Pass 1: control points at δ from each end of every segment."""
    a = pts[:-1]
    b = pts[1:]
    step = delta * (b - a)
    return a + step, b - step


def _smooth_control_points(
    pts: torch.Tensor,
    cp1: torch.Tensor,
    cp2: torch.Tensor
) -> Tuple[torch.Tensor, torch.Tensor]:
    """Pass 2: reflection smoothing at interior points.

    Reads only the naive arrays and writes into fresh copies.
    """
    smooth_cp1 = cp1.clone()
    smooth_cp2 = cp2.clone()
    if pts.shape[0] < 3:
        return smooth_cp1, smooth_cp2

    a = pts[1:-1]        # interior points
    m = cp2[:-1]         # incoming control point at each interior point
    n = cp1[1:]          # outgoing control point at each interior point
    m_reflected = 2.0 * a - m
    n_reflected = 2.0 * a - n

    smooth_cp1[1:] = (m_reflected + n) / 2.0
    smooth_cp2[:-1] = (n_reflected + m) / 2.0
    return smooth_cp1, smooth_cp2


def control_points_for(points: Sequence[Point], delta: float = CURVE_DELTA) -> List[CurvedSegment]:
    """Compute smoothing control points for a path through ``points``.

    Parameters
    ----------
    points : Sequence[Point]
        Ordered points (x, y); tuples are accepted
    delta : float
        Fraction of each segment used for the naive control points

    Returns
    -------
    List[CurvedSegment]
        Exactly ``len(points) - 1`` segments; empty if fewer than 2 points
    """
    if len(points) < 2:
        return []

    pts = _as_tensor(points)
    cp1, cp2 = _naive_control_points(pts, delta)
    cp1, cp2 = _smooth_control_points(pts, cp1, cp2)

    return [
        CurvedSegment(Point(*c1), Point(*c2))
        for c1, c2 in zip(cp1.tolist(), cp2.tolist())
    ]


# ============================================================================
# PATHS
# ============================================================================

def _append_curves(path: BezierPath, points: Sequence[Point], delta: float) -> None:
    segments = control_points_for(points, delta)
    for segment, end in zip(segments, points[1:]):
        path.add_curve(end, segment.control_point1, segment.control_point2)


def curved_path_through(points: Sequence[Point], delta: float = CURVE_DELTA) -> Optional[BezierPath]:
    """Smooth open path through ``points``; None if there are no points."""
    if len(points) == 0:
        return None

    path = BezierPath(start=Point(*points[0]))
    _append_curves(path, points, delta)
    return path


def area_path_for(area: AreaData, delta: float = CURVE_DELTA) -> Optional[BezierPath]:
    """Closed band: upper curve, edge down, lower curve back, close.

    Each side is smoothed on its own; tangents are not shared across the
    straight connecting edges.
    """
    if len(area.left_to_right) == 0:
        return None

    path = BezierPath(start=Point(*area.left_to_right[0]))
    _append_curves(path, area.left_to_right, delta)

    if len(area.right_to_left) > 0:
        path.add_line(area.right_to_left[0])
        _append_curves(path, area.right_to_left, delta)
    else:
        logger.debug("Area has no lower boundary; closing upper curve on itself")

    path.close()
    return path
