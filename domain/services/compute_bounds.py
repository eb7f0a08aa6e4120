from __future__ import annotations

import math
from collections.abc import Iterable

from domain.errors import InvalidSceneError
from domain.models import DEFAULT_PADDING, Element, SceneBounds, is_skipped


def compute_bounds(elements: Iterable[Element], padding: float = DEFAULT_PADDING) -> SceneBounds:
    """Enclosing box of all visible elements plus the offset that makes it non-negative.

    Only ``x``/``y``/``width``/``height`` are consulted, so line and arrow points
    reaching outside their nominal box are not counted.
    """
    min_x = float("inf")
    min_y = float("inf")
    max_x = float("-inf")
    max_y = float("-inf")
    for element in elements:
        if is_skipped(element):
            continue
        x = element.x
        y = element.y
        min_x = min(min_x, x)
        min_y = min(min_y, y)
        max_x = max(max_x, x + (element.width or 0.0))
        max_y = max(max_y, y + (element.height or 0.0))

    width = max_x - min_x + 2 * padding
    height = max_y - min_y + 2 * padding
    offset_x = -min_x + padding
    offset_y = -min_y + padding
    if not all(math.isfinite(value) for value in (width, height, offset_x, offset_y)):
        msg = "Scene has no renderable elements or non-finite geometry"
        raise InvalidSceneError(msg)
    return SceneBounds(width=width, height=height, offset_x=offset_x, offset_y=offset_y)
