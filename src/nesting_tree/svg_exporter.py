"""
SVG preview of a nesting tree.

Draws every polygon shape in the tree with a stroke colour chosen by nesting
depth, so the hierarchy can be checked by eye. Shapes are drawn outermost
first. Coordinates are flipped back to SVG's downward y axis.
"""
import logging
import os
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import numpy as np
import svgwrite
from shapely.geometry import Polygon

from nesting_tree.geometry import shape_polygon
from nesting_tree.tree import Tree

logger = logging.getLogger(__name__)

DEPTH_COLORS = (
    "#ff0000",  # outermost: red, as for cut lines
    "#0000ff",
    "#00a000",
    "#ff8c00",
    "#8a2be2",
    "#008b8b",
)


@dataclass
class SVGExportConfig:
    """Styling and layout of the hierarchy preview."""

    margin: float = 0.25  # in drawing units
    stroke_width: float = 0.01
    unit: str = "in"
    add_labels: bool = True
    font_size: float = 0.12
    depth_colors: Tuple[str, ...] = field(default=DEPTH_COLORS)


def tree_to_svg(
    tree: Tree,
    filepath: str,
    config: Optional[SVGExportConfig] = None,
) -> str:
    """
    Export a nesting tree as an SVG preview, one stroke colour per depth.

    Args:
        tree: Tree whose shapes expose a polygon
        filepath: Output SVG file path; missing directories are created
        config: Export options, defaults to ``SVGExportConfig()``

    Returns:
        Path to created SVG file
    """
    directory = os.path.dirname(filepath)
    if directory:
        os.makedirs(directory, exist_ok=True)
    dwg = _build_drawing(tree, config or SVGExportConfig(), filepath)
    dwg.save()
    logger.info("Exported nesting preview: %s", filepath)
    return filepath


def tree_to_svg_string(tree: Tree, config: Optional[SVGExportConfig] = None) -> str:
    """
    Render the same preview as :func:`tree_to_svg` without writing a file.

    Returns:
        SVG markup as a string
    """
    return _build_drawing(tree, config or SVGExportConfig()).tostring()


def _build_drawing(tree: Tree, config: SVGExportConfig, filepath: str = "preview.svg"):
    entries: List[Tuple[int, Polygon, object]] = []
    for depth, shape in tree.iter():
        polygon = shape_polygon(shape)
        if polygon.is_empty:
            continue
        entries.append((depth, polygon, getattr(shape, "label", None)))

    if entries:
        bounds = np.array([polygon.bounds for _, polygon, _ in entries])
        min_x, min_y = float(bounds[:, 0].min()), float(bounds[:, 1].min())
        max_x, max_y = float(bounds[:, 2].max()), float(bounds[:, 3].max())
    else:
        min_x = min_y = max_x = max_y = 0.0

    width = (max_x - min_x) + 2 * config.margin
    height = (max_y - min_y) + 2 * config.margin

    def to_svg(x: float, y: float) -> Tuple[float, float]:
        # Cartesian y-up back to SVG y-down
        return (x - min_x + config.margin, max_y - y + config.margin)

    dwg = svgwrite.Drawing(
        filepath,
        size=(f"{width}{config.unit}", f"{height}{config.unit}"),
        viewBox=f"0 0 {width} {height}",
    )
    dwg.defs.add(dwg.style(
        f".shape {{ fill: none; stroke-width: {config.stroke_width}; }}\n"
        f".label {{ font-size: {config.font_size}px; font-family: Arial, sans-serif; fill: #333; }}"
    ))

    colors = config.depth_colors
    for depth, polygon, label in entries:
        color = colors[depth % len(colors)]
        rings = [polygon.exterior] + list(polygon.interiors)
        for ring in rings:
            points = [to_svg(x, y) for x, y in ring.coords[:-1]]
            dwg.add(dwg.polygon(points, class_="shape", stroke=color))

        if config.add_labels and label is not None:
            point = polygon.representative_point()
            dwg.add(dwg.text(
                str(label),
                insert=to_svg(point.x, point.y),
                class_="label",
                text_anchor="middle",
            ))

    logger.debug("Preview drawing: %d shapes, %.3f x %.3f", len(entries), width, height)
    return dwg
