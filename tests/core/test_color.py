"""Tests for color pairs and hue allocation."""

import random

import pytest

from logfocus.core.color import ColorAllocator, ColorPair, hue_distance, to_hex


class TestColorPair:
    """Tests for ColorPair."""

    def test_from_hue(self):
        pair = ColorPair.from_hue(210)
        assert pair.normal == "hsl(210, 40%, 80%)"
        assert pair.inverted == "hsl(210, 50%, 40%)"
        assert pair.hue == 210

    def test_from_color_keeps_hue_only(self):
        pair = ColorPair.from_color("hsl(15, 90%, 20%)")
        assert pair == ColorPair.from_hue(15)

    def test_from_non_hsl_color(self):
        pair = ColorPair.from_color("#ff0000")
        assert pair.normal == "#ff0000"
        assert pair.inverted == "#ff0000"
        assert pair.hue is None


class TestColorAllocator:
    """Tests for ColorAllocator."""

    def test_consecutive_hues_are_far_apart(self):
        allocator = ColorAllocator(rng=random.Random(42))
        previous = allocator.last_hue
        for _ in range(50):
            pair = allocator.next_pair()
            assert hue_distance(pair.hue, previous) >= 60
            previous = pair.hue

    def test_allocators_do_not_share_state(self):
        a = ColorAllocator(last_hue=0, rng=random.Random(1))
        b = ColorAllocator(last_hue=0, rng=random.Random(1))
        a.next_pair()
        a.next_pair()

        assert b.last_hue == 0

    def test_invalid_min_distance(self):
        with pytest.raises(ValueError):
            ColorAllocator(min_distance=200)


def test_hue_distance_wraps():
    assert hue_distance(350, 10) == 20
    assert hue_distance(0, 180) == 180


def test_to_hex():
    assert to_hex("hsl(0, 100%, 50%)") == "#ff0000"
    assert to_hex("hsl(120, 100%, 50%)") == "#00ff00"
    assert to_hex("red") == "red"
