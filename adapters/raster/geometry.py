from __future__ import annotations

import math
from collections.abc import Sequence

Point = tuple[float, float]

ELLIPSE_SEGMENTS = 72
CORNER_SEGMENTS = 8


def ellipse_outline(cx: float, cy: float, rx: float, ry: float) -> list[Point]:
    return [
        (
            cx + rx * math.cos(2 * math.pi * step / ELLIPSE_SEGMENTS),
            cy + ry * math.sin(2 * math.pi * step / ELLIPSE_SEGMENTS),
        )
        for step in range(ELLIPSE_SEGMENTS)
    ]


def rectangle_outline(x0: float, y0: float, x1: float, y1: float, radius: float) -> list[Point]:
    radius = min(radius, (x1 - x0) / 2, (y1 - y0) / 2)
    if radius <= 0:
        return [(x0, y0), (x1, y0), (x1, y1), (x0, y1)]
    corners = (
        (x1 - radius, y0 + radius, -90.0),
        (x1 - radius, y1 - radius, 0.0),
        (x0 + radius, y1 - radius, 90.0),
        (x0 + radius, y0 + radius, 180.0),
    )
    outline: list[Point] = []
    for cx, cy, start in corners:
        for step in range(CORNER_SEGMENTS + 1):
            angle = math.radians(start + 90.0 * step / CORNER_SEGMENTS)
            outline.append((cx + radius * math.cos(angle), cy + radius * math.sin(angle)))
    return outline


def dash_segments(points: Sequence[Point], pattern: Sequence[float]) -> list[list[Point]]:
    """Split a polyline into the visible runs of an on/off dash pattern.

    The pattern phase carries over segment joints, as in SVG ``stroke-dasharray``.
    """
    if not pattern or sum(pattern) <= 0:
        return [list(points)]
    segments: list[list[Point]] = []
    current: list[Point] = []
    index = 0
    remaining = pattern[0]
    for (x0, y0), (x1, y1) in zip(points, points[1:]):
        length = math.hypot(x1 - x0, y1 - y0)
        if length == 0:
            continue
        ux, uy = (x1 - x0) / length, (y1 - y0) / length
        travelled = 0.0
        while travelled < length:
            step = min(remaining, length - travelled)
            start = (x0 + ux * travelled, y0 + uy * travelled)
            travelled += step
            end = (x0 + ux * travelled, y0 + uy * travelled)
            visible = index % 2 == 0
            if visible:
                if not current:
                    current.append(start)
                current.append(end)
            remaining -= step
            if remaining <= 1e-9:
                if visible and len(current) > 1:
                    segments.append(current)
                current = []
                index = (index + 1) % len(pattern)
                remaining = pattern[index]
    if len(current) > 1:
        segments.append(current)
    return segments
