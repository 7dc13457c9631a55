"""
Factor wheel geometry.

Each factor owns an equal angular slice of the wheel, starting at the top.
A slice is split into five concentric ring segments, one per level; the
segments up to the factor's current level are drawn as selected.
"""

import math
from typing import List, Mapping, Sequence

from .models import WheelSegment, clamp_level

CENTER = 166.25
INNER_RADIUS = 47.5
SEGMENT_HEIGHT = 19


def _point(center: float, radius: float, angle: float) -> str:
    return f"{center + radius * math.cos(angle):.2f} {center + radius * math.sin(angle):.2f}"


def segment_path(center: float, inner_r: float, outer_r: float, start: float, end: float) -> str:
    """SVG path of an annular sector."""
    large_arc = 1 if abs(end - start) > math.pi else 0
    return " ".join([
        f"M {_point(center, inner_r, start)}",
        f"A {inner_r} {inner_r} 0 {large_arc} 1 {_point(center, inner_r, end)}",
        f"L {_point(center, outer_r, end)}",
        f"A {outer_r} {outer_r} 0 {large_arc} 0 {_point(center, outer_r, start)}",
        "Z",
    ])


def wheel_segments(
    factors: Mapping[str, int],
    keys: Sequence[str],
    center: float = CENTER,
    inner_radius: float = INNER_RADIUS,
    segment_height: float = SEGMENT_HEIGHT,
) -> List[WheelSegment]:
    if not keys:
        return []
    angle_per_factor = 2 * math.pi / len(keys)
    segments = []
    for index, key in enumerate(keys):
        start = index * angle_per_factor - math.pi / 2
        end = (index + 1) * angle_per_factor - math.pi / 2
        current = clamp_level(factors.get(key), default=3)
        for level in range(1, 6):
            inner_r = inner_radius + (level - 1) * segment_height
            outer_r = inner_radius + level * segment_height
            segments.append(WheelSegment(
                factor=key,
                factor_index=index,
                level=level,
                path=segment_path(center, inner_r, outer_r, start, end),
                center_angle=(start + end) / 2,
                radius=(inner_r + outer_r) / 2,
                selected=level <= current,
            ))
    return segments


def label_position(index: int, count: int, center: float = CENTER,
                   inner_radius: float = INNER_RADIUS, segment_height: float = SEGMENT_HEIGHT):
    """(x, y) of a factor label, just outside the outer ring."""
    angle = (index + 0.5) * 2 * math.pi / count - math.pi / 2
    radius = inner_radius + 5 * segment_height + 20
    return center + radius * math.cos(angle), center + radius * math.sin(angle)
