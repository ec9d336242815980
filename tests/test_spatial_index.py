"""Tests for spatial_index module."""
import math

import pytest

from nesting_tree.spatial_index import ChildIndex, Envelope, squared_distance


class Disc:
    """Circle item: holds points within ``r`` of its centre."""

    def __init__(self, name, cx, cy, r):
        self.name = name
        self.cx, self.cy, self.r = cx, cy, r

    def envelope(self):
        return Envelope(self.cx - self.r, self.cy - self.r, self.cx + self.r, self.cy + self.r)

    def distance_2(self, point):
        d2 = squared_distance((self.cx, self.cy), point)
        return 0.0 if d2 < self.r * self.r else d2


class Everywhere:
    """Item that claims every point but has no extent."""

    def __init__(self, envelope):
        self._envelope = envelope

    def envelope(self):
        return self._envelope

    def distance_2(self, point):
        return 0.0


class TestEnvelope:
    """Test envelope construction."""

    def test_from_corners_normalises(self):
        env = Envelope.from_corners((5, 1), (2, 4))
        assert env.as_tuple() == (2, 1, 5, 4)

    def test_nan_corner_gives_empty_envelope(self):
        env = Envelope.from_corners((math.nan, 0), (1, 1))
        assert all(math.isnan(v) for v in env.as_tuple())


class TestChildIndex:
    """Test insertion order and point queries."""

    def test_empty_index(self):
        index = ChildIndex()
        assert len(index) == 0
        assert not index
        assert list(index.locate_all_at_point((0, 0))) == []

    def test_iteration_keeps_insertion_order(self):
        index = ChildIndex()
        discs = [Disc(f"d{i}", i * 10, 0, 1) for i in range(20)]
        for disc in discs:
            index.insert(disc)
        assert len(index) == 20
        assert list(index) == discs
        assert index.items() == discs

    def test_envelope_hit_still_needs_shape_hit(self):
        index = ChildIndex()
        index.insert(Disc("d", 0, 0, 1))
        # Box corner is outside the circle itself
        assert list(index.locate_all_at_point((0.95, 0.95))) == []
        assert [d.name for d in index.locate_all_at_point((0.5, 0.5))] == ["d"]

    def test_envelope_is_boundary_inclusive(self):
        index = ChildIndex()
        item = Everywhere(Envelope(0, 0, 2, 2))
        index.insert(item)
        assert list(index.locate_all_at_point((0, 0))) == [item]
        assert list(index.locate_all_at_point((2, 1))) == [item]
        assert list(index.locate_all_at_point((2.5, 1))) == []

    def test_locate_all_at_point_in_insertion_order(self):
        index = ChildIndex()
        big = Disc("big", 0, 0, 10)
        small = Disc("small", 1, 0, 2)
        far = Disc("far", 50, 50, 1)
        for disc in (small, far, big):
            index.insert(disc)
        assert [d.name for d in index.locate_all_at_point((1, 0))] == ["small", "big"]
        assert [d.name for d in index.locate_all_at_point((50, 50))] == ["far"]

    def test_drain_empties_index(self):
        index = ChildIndex()
        discs = [Disc(f"d{i}", i, 0, 0.4) for i in range(12)]
        for disc in discs:
            index.insert(disc)
        assert list(index.drain()) == discs
        assert len(index) == 0
        assert list(index.locate_all_at_point((1, 0))) == []

        index.insert(discs[0])
        assert list(index.locate_all_at_point((0, 0))) == [discs[0]]

    def test_empty_envelope_never_matches(self):
        index = ChildIndex()
        index.insert(Everywhere(Envelope.empty()))
        assert list(index.locate_all_at_point((0, 0))) == []

    def test_squared_distance(self):
        assert squared_distance((0, 0), (3, 4)) == pytest.approx(25.0)
