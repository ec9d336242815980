"""
Shared test fixtures for nesting tree tests.
"""
import sys
from pathlib import Path

import pytest
from shapely.geometry import Polygon, box

# Add src/ to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


def square(x0: float, y0: float, x1: float, y1: float) -> Polygon:
    """Axis-aligned square/rectangle polygon from two corners."""
    return box(x0, y0, x1, y1)


@pytest.fixture
def nested_squares():
    """A=[0,0]-[10,10] holding B=[2,2]-[8,8] holding C=[4,4]-[6,6]."""
    return {
        "A": square(0, 0, 10, 10),
        "B": square(2, 2, 8, 8),
        "C": square(4, 4, 6, 6),
    }


@pytest.fixture
def disjoint_squares():
    """A=[0,0]-[5,5] and B=[10,10]-[15,15], no overlap."""
    return {
        "A": square(0, 0, 5, 5),
        "B": square(10, 10, 15, 15),
    }


@pytest.fixture
def nested_squares_svg():
    """A 2in x 2in document holding a frame with two windows, one with a pane."""
    return """<?xml version="1.0" encoding="UTF-8"?>
<svg xmlns="http://www.w3.org/2000/svg" width="2in" height="2in" viewBox="0 0 200 200">
  <rect id="frame" x="0" y="0" width="200" height="200"/>
  <g>
    <path id="windows" d="M 20,20 H 90 V 90 H 20 Z M 110,110 H 180 V 180 H 110 Z"/>
    <polygon id="pane" points="40,40 70,40 70,70 40,70"/>
  </g>
</svg>
"""
