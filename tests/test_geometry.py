"""Test Bézier flattening and polyline measures.

Tests for src.utils.geometry:
    - Flattening keeps both endpoints exactly
    - Straight curve (collinear control points) → single chord
    - Tighter max_err_px → more vertices, length converges
    - Flattened vertices stay within max_err_px of the true curve
    - Closed loop (p1 == p4) still subdivides
    - Polyline length and bounding box

Run:
    pytest tests/test_geometry.py -v
"""

import math

import pytest
import torch

from src.utils import geometry


def _t(x, y):
    return torch.tensor([x, y], dtype=torch.float64)


def _bezier_point(p1, p2, p3, p4, t):
    u = 1.0 - t
    return u ** 3 * p1 + 3 * u ** 2 * t * p2 + 3 * u * t ** 2 * p3 + t ** 3 * p4


@pytest.fixture
def arch():
    """Symmetric arch from (0, 100) to (100, 100) bulging upwards."""
    return _t(0, 100), _t(30, 0), _t(70, 0), _t(100, 100)


def test_flatten_keeps_endpoints(arch):
    poly = geometry.bezier_cubic_polyline(*arch)
    assert torch.equal(poly[0], arch[0])
    assert torch.equal(poly[-1], arch[3])


def test_flatten_straight_curve_is_chord():
    poly = geometry.bezier_cubic_polyline(_t(0, 0), _t(3, 0), _t(7, 0), _t(10, 0))
    assert poly.shape == (2, 2)


def test_flatten_converges(arch):
    coarse = geometry.bezier_cubic_polyline(*arch, max_err_px=2.0)
    fine = geometry.bezier_cubic_polyline(*arch, max_err_px=0.01)

    assert fine.shape[0] > coarse.shape[0]
    assert geometry.polyline_length(fine) >= geometry.polyline_length(coarse)
    assert geometry.polyline_length(fine) == pytest.approx(
        geometry.polyline_length(geometry.bezier_cubic_polyline(*arch, max_err_px=0.001)), rel=1e-3
    )


def test_flatten_vertices_lie_on_curve(arch):
    poly = geometry.bezier_cubic_polyline(*arch, max_err_px=0.1)
    samples = torch.stack([_bezier_point(*arch, t / 200.0) for t in range(201)])

    for vertex in poly:
        assert torch.norm(samples - vertex, dim=1).min().item() < 1.0


def test_flatten_closed_loop_subdivides():
    p = _t(0, 0)
    poly = geometry.bezier_cubic_polyline(p, _t(50, -50), _t(50, 50), p, max_err_px=0.5)
    assert poly.shape[0] > 2


def test_flatten_respects_max_depth(arch):
    poly = geometry.bezier_cubic_polyline(*arch, max_err_px=1e-9, max_depth=3)
    assert poly.shape[0] <= 2 ** 3 + 1


def test_polyline_length():
    pts = torch.tensor([[0.0, 0.0], [3.0, 4.0], [3.0, 10.0]], dtype=torch.float64)
    assert geometry.polyline_length(pts) == pytest.approx(11.0)
    assert geometry.polyline_length(pts[:1]) == 0.0


def test_polyline_bbox():
    pts = torch.tensor([[5.0, -1.0], [2.0, 7.0], [9.0, 3.0]], dtype=torch.float64)
    assert geometry.polyline_bbox(pts) == (2.0, -1.0, 9.0, 7.0)
    assert geometry.polyline_bbox(torch.zeros(0, 2)) == (0.0, 0.0, 0.0, 0.0)


def test_arch_length_reasonable(arch):
    length = geometry.polyline_length(geometry.bezier_cubic_polyline(*arch, max_err_px=0.01))
    chord = 100.0
    control_polygon = 2 * math.hypot(30, 100) + 40
    assert chord < length < control_polygon
