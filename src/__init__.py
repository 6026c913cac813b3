"""AGP Chart: smooth percentile-band charts from raw series.

This package contains the curve interpolation and chart layout logic that
turns lower/upper percentile series into a scaled, scrollable band chart:
Bézier control points, value→pixel mapping and axis grid lines.

Architecture layers (strict one-way dependency):
    scripts/ → src/agp_chart/ → src/utils/

Key invariants:
    - Geometry in drawing-surface pixels, origin top-left, +Y down
    - Every layout pass rebuilds geometry from scratch; nothing is cached
    - YAML-only configs, validated with pydantic
    - Empty input yields empty geometry; mismatched series raise
"""

__version__ = "1.0.0"
