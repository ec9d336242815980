#!/usr/bin/env python3
"""
Print the nesting hierarchy of the closed outlines in an SVG file.

Each outline is listed under the outline that most tightly encloses it,
labelled with the id of the SVG element it came from.

Usage:
    python scripts/nest_svg.py --input part.svg
    python scripts/nest_svg.py --input part.svg --unit mm --tolerance 0.05
    python scripts/nest_svg.py --input part.svg --preview part_nesting.svg -v
"""
import argparse
import logging
import os
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from nesting_tree.geometry import loop_to_polygon, tree_from_labeled_polygons
from nesting_tree.svg_exporter import SVGExportConfig, tree_to_svg
from nesting_tree.svg_import import UNITS_PER_INCH, ImportConfig, import_svg_labeled


def print_tree(tree, unit: str) -> None:
    def walk(node, depth):
        shape = node.value
        print(f"{'  ' * depth}{shape.label}  (area {shape.area():.4f} {unit}^2)")
        for child in node.children():
            walk(child, depth + 1)

    for node in tree.children():
        walk(node, 0)


def main():
    parser = argparse.ArgumentParser(
        description="Show which outlines in an SVG are nested inside which.",
    )
    parser.add_argument(
        "--input", required=True,
        help="Path to input SVG file",
    )
    parser.add_argument(
        "--tolerance", type=float, default=0.001,
        help="Curve flattening tolerance in output units (default: 0.001)",
    )
    parser.add_argument(
        "--unit", default="in", choices=sorted(UNITS_PER_INCH),
        help="Output unit (default: in)",
    )
    parser.add_argument(
        "--preview", default=None,
        help="Write an SVG preview coloured by nesting depth to this path",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true",
        help="Enable verbose logging",
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    input_path = os.path.abspath(args.input)
    if not os.path.isfile(input_path):
        parser.error(f"Input file not found: {input_path}")
    if args.tolerance <= 0:
        parser.error("--tolerance must be positive")

    config = ImportConfig(flatten_tolerance=args.tolerance, output_unit=args.unit)
    loops = import_svg_labeled(input_path, config=config)
    if loops is None:
        print(f"Could not import {input_path}", file=sys.stderr)
        return 1

    pairs = []
    for label, loop in loops:
        polygon = loop_to_polygon(loop)
        if not polygon.is_empty:
            pairs.append((label, polygon))

    tree = tree_from_labeled_polygons(pairs)
    print(f"{len(tree)} outlines, {len(tree.children())} top-level")
    print_tree(tree, args.unit)

    if args.preview:
        tree_to_svg(tree, os.path.abspath(args.preview), SVGExportConfig(unit=args.unit))
        print(f"Preview written to {args.preview}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
