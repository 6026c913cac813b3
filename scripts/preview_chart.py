#!/usr/bin/env python3
"""AGP band chart preview tool for visual validation.

CLI tool that runs one layout pass over a chart data file and rasterizes the
result with Pillow: filled percentile band, bounding curves, grid lines and
labels. Also dumps the computed geometry for inspection.

Usage:
    # Sample data, default layout
    python scripts/preview_chart.py --data_file data/agp_sample.v1.yaml --output_dir outputs/preview

    # Custom config and view size
    python scripts/preview_chart.py \
        --data_file data/agp_sample.v1.yaml \
        --config configs/agp_chart.v1.yaml \
        --size 375,300 --output_dir outputs/preview

Outputs:
    - chart.png: rendered chart (content width × view height)
    - geometry.yaml: plot rect, points, SVG path, grid lines, labels
"""

import argparse
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

from PIL import Image, ImageDraw, ImageFont

from src.agp_chart import BezierPath, ChartGeometry, ChartLayout, curved_path_through, load_line_model
from src.agp_chart.curves import CURVE_DELTA
from src.utils import fs, logging_config, validators

logger = logging.getLogger(__name__)

BAND_FILL = (43, 181, 155, 26)        # 10% alpha
BAND_EDGE = (43, 181, 155, 255)
GRID_COLOR = (71, 138, 187, 255)
TEXT_COLOR = (128, 173, 206, 255)
DASH_PATTERN = (4, 4)


def parse_args(argv: Optional[Sequence[str]] = None):
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Preview an AGP band chart",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )
    parser.add_argument(
        '--data_file',
        type=str,
        required=True,
        help='Path to agp_chart_data.v1 YAML file'
    )
    parser.add_argument(
        '--config',
        type=str,
        default=None,
        help='Path to agp_chart.v1 YAML config (default: built-in layout)'
    )
    parser.add_argument(
        '--size',
        type=str,
        default='375,300',
        help='View size in pixels (W,H), default: 375,300'
    )
    parser.add_argument(
        '--output_dir',
        type=str,
        default='outputs/preview_chart',
        help='Output directory, default: outputs/preview_chart'
    )
    parser.add_argument(
        '--no_edges',
        action='store_true',
        help='Skip stroking the upper and lower curves'
    )
    parser.add_argument(
        '--verbose',
        action='store_true',
        help='Enable verbose logging'
    )
    return parser.parse_args(argv)


def _offset(poly: List[List[float]], dy: float) -> List[Tuple[float, float]]:
    return [(x, y + dy) for x, y in poly]


def _dashed_hline(draw: ImageDraw.ImageDraw, y: float, width: float, pattern=DASH_PATTERN) -> None:
    on, off = pattern
    x = 0.0
    while x < width:
        draw.line([(x, y), (min(x + on, width), y)], fill=GRID_COLOR, width=1)
        x += on + off


def edge_paths(geometry: ChartGeometry, delta: float = CURVE_DELTA) -> List[BezierPath]:
    """Open upper and lower curves of the band.

    ``delta`` must match the curve_delta of the layout pass.
    """
    if geometry.area is None:
        return []

    paths = []
    for side in (geometry.area.left_to_right, geometry.area.right_to_left):
        path = curved_path_through(side, delta=delta)
        if path is not None and path.curve_count > 0:
            paths.append(path)
    return paths


def render_chart(
    geometry: ChartGeometry,
    view_width: float,
    view_height: float,
    edges: bool = True,
    delta: float = CURVE_DELTA
) -> Image.Image:
    """Rasterize one layout pass.

    Parameters
    ----------
    geometry : ChartGeometry
        Output of ChartLayout.layout()
    view_width, view_height : float
        Visible view size in px; the image is widened to the content width
    edges : bool
        Stroke the upper and lower curves on top of the fill
    delta : float
        Control point fraction for the edge strokes (layout's curve_delta)

    Returns
    -------
    PIL.Image.Image
        RGBA image
    """
    plot_x, plot_y, plot_w, plot_h = geometry.plot_rect
    width = int(round(max(view_width, geometry.content_width, plot_w)))
    height = int(round(view_height))

    img = Image.new("RGBA", (width, height), (255, 255, 255, 255))
    overlay = Image.new("RGBA", img.size, (0, 0, 0, 0))
    draw = ImageDraw.Draw(overlay)
    font = ImageFont.load_default()

    for line in geometry.grid_lines:
        y = line.y + plot_y
        if line.dashed:
            _dashed_hline(draw, y, width)
        else:
            draw.line([(0, y), (width, y)], fill=GRID_COLOR, width=1)
        draw.text((4, y), str(line.label), fill=TEXT_COLOR, font=font)

    if geometry.path is not None:
        band = _offset(geometry.path.flatten().tolist(), plot_y)
        if len(band) >= 3:
            draw.polygon(band, fill=BAND_FILL)

    if edges:
        for path in edge_paths(geometry, delta):
            draw.line(_offset(path.flatten().tolist(), plot_y), fill=BAND_EDGE, width=2)

    for label in geometry.category_labels:
        left, top, right, bottom = draw.textbbox((0, 0), label.text, font=font)
        origin = (label.x - (right - left) / 2.0, label.y - (bottom - top) / 2.0)
        draw.text(origin, label.text, fill=TEXT_COLOR, font=font)

    return Image.alpha_composite(img, overlay)


def geometry_to_dict(geometry: ChartGeometry) -> Dict[str, Any]:
    """Plain-data view of a layout pass for YAML dumps."""
    return {
        'plot_rect': list(geometry.plot_rect),
        'content_width': geometry.content_width,
        'points': [[p.x, p.y] for p in geometry.points],
        'path': geometry.path.to_svg() if geometry.path is not None else None,
        'grid_lines': [
            {'fraction': g.fraction, 'y': g.y, 'label': g.label, 'dashed': g.dashed}
            for g in geometry.grid_lines
        ],
        'category_labels': [
            {'text': c.text, 'x': c.x, 'y': c.y, 'width': c.width}
            for c in geometry.category_labels
        ],
    }


def main(argv: Optional[Sequence[str]] = None) -> Dict[str, Path]:
    """Main entry point; returns the written output paths."""
    args = parse_args(argv)

    if args.config:
        cfg = validators.load_chart_config(args.config)
    else:
        cfg = validators.ChartConfigV1()

    if args.verbose:
        cfg.logging.log_level = "DEBUG"
    logging_config.setup_logging_from_config(cfg.logging, context={"app": "preview"})

    view_w, view_h = map(float, args.size.split(','))
    output_dir = fs.ensure_dir(args.output_dir)

    data_file = Path(args.data_file)
    logging_config.push_context(chart=data_file.stem)
    logger.info(f"Loading chart data from: {data_file}")
    model = load_line_model(data_file)

    geometry = ChartLayout(cfg.layout).layout(model, view_w, view_h)
    if not geometry.points:
        logger.warning("Chart data is empty; rendering grid only")

    image_path = output_dir / "chart.png"
    img = render_chart(
        geometry, view_w, view_h, edges=not args.no_edges, delta=cfg.layout.curve_delta
    )
    fs.atomic_save_image(img, image_path)
    logger.info(f"Saved chart: {image_path}")

    geometry_path = output_dir / "geometry.yaml"
    fs.atomic_yaml_dump(geometry_to_dict(geometry), geometry_path)
    logger.info(f"Saved geometry: {geometry_path}")

    logging_config.pop_context(keys=["chart"])
    return {'image': image_path, 'geometry': geometry_path}


if __name__ == '__main__':
    main()
