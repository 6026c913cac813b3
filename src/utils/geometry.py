"""Polyline and cubic Bézier helpers for chart paths.

Provides:
    - Adaptive flattening of a cubic Bézier segment to a polyline
    - Polyline length and axis-aligned bounding box

Used by:
    - agp_chart.curves.BezierPath: flatten(), bbox(), length()
    - scripts/preview_chart.py: rasterizing curves with Pillow
    - Tests: smoothness and closure checks on generated paths

All coordinates are drawing-surface pixels (origin top-left, +Y down).
Tensors are (N, 2) float64 so that pixel values round-trip exactly.
"""

from typing import Tuple

import torch


def bezier_cubic_polyline(
    p1: torch.Tensor,
    p2: torch.Tensor,
    p3: torch.Tensor,
    p4: torch.Tensor,
    max_err_px: float = 0.25,
    max_depth: int = 12
) -> torch.Tensor:
    """Flatten cubic Bézier to polyline via adaptive subdivision.

    Parameters
    ----------
    p1, p2, p3, p4 : torch.Tensor
        Start, control 1, control 2, end; shape (2,) in px
    max_err_px : float
        Maximum allowed deviation from the true curve in px, default 0.25
    max_depth : int
        Maximum recursion depth, default 12

    Returns
    -------
    torch.Tensor
        Polyline vertices, shape (N, 2), N ≥ 2; first row is p1, last is p4

    Notes
    -----
    Flatness criterion: distance from both control points to the chord
    p1-p4 is at most max_err_px. Otherwise split at t=0.5 (de Casteljau).
    """
    def subdivide(q1, q2, q3, q4, depth):
        if depth >= max_depth:
            return torch.stack([q1, q4], dim=0)

        chord = q4 - q1
        chord_len = torch.norm(chord) + 1e-12

        # 2D cross product gives twice the triangle area
        v2 = q2 - q1
        v3 = q3 - q1
        d2 = torch.abs(v2[0] * chord[1] - v2[1] * chord[0]) / chord_len
        d3 = torch.abs(v3[0] * chord[1] - v3[1] * chord[0]) / chord_len

        # Degenerate chord (closed loop): fall back to control point spread
        if chord_len.item() < 1e-9:
            d2 = torch.norm(v2)
            d3 = torch.norm(v3)

        if max(d2.item(), d3.item()) <= max_err_px:
            return torch.stack([q1, q4], dim=0)

        q12 = (q1 + q2) / 2.0
        q23 = (q2 + q3) / 2.0
        q34 = (q3 + q4) / 2.0
        q123 = (q12 + q23) / 2.0
        q234 = (q23 + q34) / 2.0
        q1234 = (q123 + q234) / 2.0

        left = subdivide(q1, q12, q123, q1234, depth + 1)
        right = subdivide(q1234, q234, q34, q4, depth + 1)

        # Drop the shared midpoint
        return torch.cat([left[:-1], right], dim=0)

    return subdivide(p1, p2, p3, p4, depth=0)


def polyline_length(points: torch.Tensor) -> float:
    """Sum of Euclidean distances between consecutive vertices (px)."""
    if points.shape[0] < 2:
        return 0.0

    diffs = points[1:] - points[:-1]
    return torch.norm(diffs, dim=1).sum().item()


def polyline_bbox(points: torch.Tensor) -> Tuple[float, float, float, float]:
    """Compute axis-aligned bounding box of polyline.

    Parameters
    ----------
    points : torch.Tensor
        Polyline vertices, shape (N, 2)

    Returns
    -------
    Tuple[float, float, float, float]
        (xmin, ymin, xmax, ymax); (0, 0, 0, 0) if there are no points
    """
    if points.shape[0] == 0:
        return (0.0, 0.0, 0.0, 0.0)

    xmin, ymin = points.min(dim=0).values.tolist()
    xmax, ymax = points.max(dim=0).values.tolist()
    return (xmin, ymin, xmax, ymax)
