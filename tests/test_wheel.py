import math

import pytest

from grc_riskmath.probability import FACTOR_KEYS
from grc_riskmath.wheel import CENTER, INNER_RADIUS, SEGMENT_HEIGHT, label_position, segment_path, wheel_segments


def test_five_segments_per_factor():
    segments = wheel_segments({}, FACTOR_KEYS)
    assert len(segments) == 7 * 5
    assert [s.level for s in segments[:5]] == [1, 2, 3, 4, 5]


def test_first_slice_starts_at_top():
    first = wheel_segments({}, FACTOR_KEYS)[0]
    slice_angle = 2 * math.pi / 7
    assert first.center_angle == pytest.approx(-math.pi / 2 + slice_angle / 2)
    assert first.path.startswith(f"M {CENTER:.2f} {CENTER - INNER_RADIUS:.2f}")
    assert first.path.endswith("Z")


def test_radius_grows_with_level():
    segments = wheel_segments({}, ["a"])
    assert [s.radius for s in segments] == [INNER_RADIUS + (level - 0.5) * SEGMENT_HEIGHT for level in range(1, 6)]


def test_selected_levels_follow_factor_value():
    segments = wheel_segments({"complexity": 4}, ["complexity", "vulnerabilities"])
    complexity = [s.selected for s in segments if s.factor == "complexity"]
    missing = [s.selected for s in segments if s.factor == "vulnerabilities"]
    assert complexity == [True, True, True, True, False]
    assert missing == [True, True, True, False, False]


def test_empty_keys():
    assert wheel_segments({}, []) == []


def test_single_factor_uses_large_arc():
    path = segment_path(CENTER, 10, 20, 0, 1.5 * math.pi)
    assert " 0 1 1 " in path


def test_label_position_outside_rings():
    x, y = label_position(0, 4)
    distance = math.hypot(x - CENTER, y - CENTER)
    assert distance == pytest.approx(INNER_RADIUS + 5 * SEGMENT_HEIGHT + 20)
