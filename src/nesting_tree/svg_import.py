"""
SVG importer producing closed point loops for the nesting tree.

Reads path-like elements from an SVG document, flattens curves into
polylines, scales from viewBox units to a physical unit and flips the y axis
so the result is in ordinary Cartesian orientation. Any failure to read or
parse the source gives ``None`` rather than a partial result.
"""
import logging
import math
import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, Optional, Tuple, Union

from shapely.geometry import LineString
from svgpathtools import Arc, CubicBezier, Line, QuadraticBezier, parse_path
from svgpathtools.svg_to_paths import ellipse2pathd, polygon2pathd, polyline2pathd, rect2pathd

logger = logging.getLogger(__name__)

# Units per inch for SVG length units (CSS reference pixel = 1/96 in)
UNITS_PER_INCH = {
    "in": 1.0,
    "mm": 25.4,
    "cm": 2.54,
    "pt": 72.0,
    "pc": 6.0,
    "px": 96.0,
}

# Elements whose contents are not rendered directly
_SKIPPED_CONTAINERS = {"defs", "clipPath", "mask", "symbol", "marker", "pattern"}

# Upper bound on pieces per curve segment
_MAX_SEGMENT_STEPS = 4096

_LENGTH_RE = re.compile(
    r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)\s*([a-z%]*)\s*$"
)
_NUMBER_RE = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")
# Characters that may appear in path data; anything else is malformed
_PATH_DATA_RE = re.compile(r"^[MmZzLlHhVvCcSsQqTtAa0-9eE+\-.,\s]*$")


@dataclass(frozen=True)
class ImportConfig:
    """How SVG geometry is flattened and scaled."""

    flatten_tolerance: float = 0.001  # max curve deviation, in output units
    output_unit: str = "in"
    css_dpi: float = 96.0

    def __post_init__(self):
        if not self.flatten_tolerance > 0:
            raise ValueError(
                f"flatten_tolerance must be positive, got {self.flatten_tolerance!r}"
            )
        if self.output_unit not in UNITS_PER_INCH:
            raise ValueError(
                f"Unknown output unit {self.output_unit!r}; "
                f"expected one of {sorted(UNITS_PER_INCH)}"
            )

    @property
    def units_per_px(self) -> float:
        return UNITS_PER_INCH[self.output_unit] / self.css_dpi


class SVGImportError(ValueError):
    """The SVG source could not be interpreted."""


# ─── Public API ──────────────────────────────────────────────────────────────

def import_svg(
    path: Union[str, Path],
    flatten: Optional[float] = None,
    config: Optional[ImportConfig] = None,
) -> Optional[List[LineString]]:
    """
    Read an SVG file and return its closed loops.

    Args:
        path: SVG file to read
        flatten: Maximum curve deviation in output units; overrides the
            tolerance in ``config``
        config: Scaling and flattening options, defaults to ``ImportConfig()``

    Returns:
        Closed loops in output units with y pointing up, or None if the file
        cannot be read or parsed
    """
    content = _read_source(path)
    if content is None:
        return None
    return import_to_lines(content, flatten, config)


def import_svg_labeled(
    path: Union[str, Path],
    flatten: Optional[float] = None,
    config: Optional[ImportConfig] = None,
) -> Optional[List[Tuple[str, LineString]]]:
    """Like :func:`import_svg`, keeping the source element label of each loop."""
    content = _read_source(path)
    if content is None:
        return None
    return import_to_labeled_lines(content, flatten, config)


def import_to_lines(
    svg: str,
    flatten: Optional[float] = None,
    config: Optional[ImportConfig] = None,
) -> Optional[List[LineString]]:
    """Closed loops from SVG text, or None if the text cannot be parsed."""
    labeled = import_to_labeled_lines(svg, flatten, config)
    if labeled is None:
        return None
    return [loop for _, loop in labeled]


def import_to_labeled_lines(
    svg: str,
    flatten: Optional[float] = None,
    config: Optional[ImportConfig] = None,
) -> Optional[List[Tuple[str, LineString]]]:
    """Closed loops from SVG text, each paired with its source element label.

    The label is the element's ``id`` attribute, or ``"<tag>_<n>"`` when it
    has none. An element with several subpaths yields several loops sharing
    the label.

    Args:
        svg: SVG document text
        flatten: Maximum curve deviation in output units
        config: Scaling and flattening options

    Returns:
        ``(label, loop)`` pairs in document order, or None if the document
        cannot be parsed

    Raises:
        ValueError: ``flatten`` is not positive
    """
    config = _resolve_config(flatten, config)
    try:
        loops = list(_collect_loops(svg, config))
    except (ET.ParseError, SVGImportError, ValueError, IndexError) as exc:
        logger.warning("Could not import SVG: %s", exc)
        return None
    logger.info("Imported %d loops from SVG", len(loops))
    return loops


# ─── Document handling ───────────────────────────────────────────────────────

def _read_source(path: Union[str, Path]) -> Optional[str]:
    try:
        return Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning("Could not read SVG %s: %s", path, exc)
        return None


def _resolve_config(flatten: Optional[float], config: Optional[ImportConfig]) -> ImportConfig:
    if config is None:
        config = ImportConfig() if flatten is None else ImportConfig(flatten_tolerance=flatten)
    elif flatten is not None:
        config = ImportConfig(
            flatten_tolerance=flatten,
            output_unit=config.output_unit,
            css_dpi=config.css_dpi,
        )
    return config


def _collect_loops(svg: str, config: ImportConfig) -> Iterator[Tuple[str, LineString]]:
    root = ET.fromstring(svg)
    if _local_name(root.tag) != "svg":
        raise SVGImportError(f"Root element is <{_local_name(root.tag)}>, not <svg>")

    scale_x, scale_y = _document_scale(root, config)
    # Curves are flattened in viewBox units; tighten so output stays in tolerance
    tolerance = config.flatten_tolerance / max(scale_x, scale_y)

    counters = {}
    for element in _iter_drawable(root):
        tag = _local_name(element.tag)
        counters[tag] = counters.get(tag, 0) + 1
        label = element.get("id") or f"{tag}_{counters[tag]}"

        d = _element_path_data(tag, element)
        if not d:
            continue
        path = parse_path(d)
        for subpath in path.continuous_subpaths():
            points = _flatten_subpath(subpath, tolerance)
            if len(points) < 2:
                continue
            if points[-1] != points[0]:
                points.append(points[0])
            coords = [(p.real * scale_x, -p.imag * scale_y) for p in points]
            yield label, LineString(coords)


def _document_scale(root: ET.Element, config: ImportConfig) -> Tuple[float, float]:
    """Output units per viewBox unit along x and y."""
    view_box = root.get("viewBox")
    width_px = _parse_length(root.get("width"), config)
    height_px = _parse_length(root.get("height"), config)

    if view_box is not None:
        values = [float(v) for v in _NUMBER_RE.findall(view_box)]
        if len(values) != 4:
            raise SVGImportError(f"Malformed viewBox: {view_box!r}")
        vb_width, vb_height = values[2], values[3]
        if vb_width <= 0 or vb_height <= 0:
            raise SVGImportError(f"viewBox has non-positive size: {view_box!r}")
    elif width_px is not None and height_px is not None:
        vb_width, vb_height = width_px, height_px
    else:
        # No size information at all: user units are CSS pixels
        return config.units_per_px, config.units_per_px

    if width_px is None:
        width_px = vb_width
    if height_px is None:
        height_px = vb_height
    if width_px <= 0 or height_px <= 0:
        raise SVGImportError("Document width and height must be positive")

    scale_x = width_px * config.units_per_px / vb_width
    scale_y = height_px * config.units_per_px / vb_height
    return scale_x, scale_y


def _parse_length(value: Optional[str], config: ImportConfig) -> Optional[float]:
    """Parse an SVG length to CSS pixels. Percentages count as unspecified."""
    if value is None:
        return None
    match = _LENGTH_RE.match(value)
    if match is None:
        raise SVGImportError(f"Malformed length: {value!r}")
    number, unit = float(match.group(1)), match.group(2) or "px"
    if unit == "%":
        return None
    if unit not in UNITS_PER_INCH:
        raise SVGImportError(f"Unsupported length unit: {value!r}")
    return number * config.css_dpi / UNITS_PER_INCH[unit]


def _iter_drawable(element: ET.Element) -> Iterator[ET.Element]:
    for child in element:
        tag = _local_name(child.tag)
        if tag in _SKIPPED_CONTAINERS:
            continue
        if tag in ("path", "polygon", "polyline", "rect", "circle", "ellipse"):
            yield child
        else:
            yield from _iter_drawable(child)


def _local_name(tag) -> str:
    if not isinstance(tag, str):
        return ""
    return tag.rsplit("}", 1)[-1]


def _element_path_data(tag: str, element: ET.Element) -> Optional[str]:
    """Path data for ``element``, converting basic shapes with svgpathtools."""
    if tag == "path":
        d = element.get("d", "")
        if not _PATH_DATA_RE.match(d):
            raise SVGImportError(f"Malformed path data: {d!r}")
        return d

    if tag == "polygon":
        return polygon2pathd(element)

    if tag == "polyline":
        return polyline2pathd(element)

    if tag == "rect":
        width = float(element.get("width", 0))
        height = float(element.get("height", 0))
        if width <= 0 or height <= 0:
            return None
        attributes = dict(element.attrib)
        rx = attributes.pop("rx", None)
        ry = attributes.pop("ry", None)
        if rx is not None or ry is not None:
            # A single radius applies to both axes; radii clamp to half the side
            rx, ry = float(rx if rx is not None else ry), float(ry if ry is not None else rx)
            rx, ry = min(rx, width / 2.0), min(ry, height / 2.0)
            if rx > 0 and ry > 0:
                attributes.update(rx=str(rx), ry=str(ry))
        return rect2pathd(attributes)

    if tag == "circle":
        if float(element.get("r", 0)) <= 0:
            return None
        return ellipse2pathd(element)

    if tag == "ellipse":
        if float(element.get("rx", 0)) <= 0 or float(element.get("ry", 0)) <= 0:
            return None
        return ellipse2pathd(element)

    return None


# ─── Flattening ──────────────────────────────────────────────────────────────

def _flatten_subpath(subpath, tolerance: float) -> List[complex]:
    points: List[complex] = []
    for segment in subpath:
        if not points:
            points.append(segment.start)
        points.extend(_flatten_segment(segment, tolerance))
    return points


def _flatten_segment(segment, tolerance: float) -> List[complex]:
    """Points after the segment start, ending at the segment end."""
    steps = _segment_steps(segment, tolerance)
    if steps <= 1:
        return [segment.end]
    points = [segment.point(i / steps) for i in range(1, steps)]
    points.append(segment.end)
    return points


def _segment_steps(segment, tolerance: float) -> int:
    """Uniform parameter steps keeping the chord error under ``tolerance``."""
    if isinstance(segment, Line):
        return 1

    if isinstance(segment, CubicBezier):
        p0, p1, p2, p3 = segment.start, segment.control1, segment.control2, segment.end
        m = max(abs(p0 - 2 * p1 + p2), abs(p1 - 2 * p2 + p3))
        steps = math.sqrt(0.75 * m / tolerance)
    elif isinstance(segment, QuadraticBezier):
        p0, p1, p2 = segment.start, segment.control, segment.end
        m = abs(p0 - 2 * p1 + p2)
        steps = math.sqrt(0.25 * m / tolerance)
    elif isinstance(segment, Arc):
        radius = max(abs(segment.radius.real), abs(segment.radius.imag))
        if radius <= tolerance:
            return 1
        step_angle = 2.0 * math.acos(1.0 - tolerance / radius)
        steps = abs(math.radians(segment.delta)) / step_angle
    else:
        raise SVGImportError(f"Unsupported path segment: {type(segment).__name__}")

    return int(min(max(1, math.ceil(steps)), _MAX_SEGMENT_STEPS))
