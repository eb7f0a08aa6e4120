from __future__ import annotations

import logging
import math
from collections.abc import Callable, Sequence
from dataclasses import replace

from domain.models import (
    DEFAULT_VIEW_BACKGROUND,
    ArrowElement,
    DiamondElement,
    Element,
    ElementBase,
    ElementLabel,
    EllipseElement,
    LinearElement,
    LineElement,
    RectangleElement,
    Scene,
    SceneBounds,
    ShapeElement,
    TextElement,
    is_skipped,
)
from domain.ports.surface import DrawingSurface, Point, StrokeStyle, TextAnchor, TextStyle

logger = logging.getLogger(__name__)

DEFAULT_STROKE_COLOR = "#1e1e1e"
DEFAULT_STROKE_WIDTH = 2.0
DEFAULT_FONT_SIZE = 20.0
DEFAULT_OPACITY = 100.0
DARK_MODE_BACKGROUND = "#121212"
TRANSPARENT = "transparent"
LINE_HEIGHT_RATIO = 1.2
ROUNDED_CORNER_RADIUS = 8.0
ROUNDNESS_ADAPTIVE = 3
LINEAR_LABEL_OFFSET = 5.0
ARROWHEAD_MIN_LENGTH = 10.0
ARROWHEAD_LENGTH_PER_STROKE = 4.0
ARROWHEAD_WIDTH_RATIO = 0.3

DASH_PATTERNS: dict[str, tuple[float, ...] | None] = {
    "solid": None,
    "dashed": (5.0, 5.0),
    "dotted": (2.0, 2.0),
}
MARKER_PALETTE: tuple[tuple[str, str], ...] = (
    ("e03131", "#e03131"),
    ("red", "#e03131"),
    ("2f9e44", "#2f9e44"),
    ("green", "#2f9e44"),
    ("1971c2", "#1971c2"),
    ("blue", "#1971c2"),
    ("f08c00", "#f08c00"),
    ("orange", "#f08c00"),
    ("6741d9", "#6741d9"),
    ("violet", "#6741d9"),
    ("purple", "#6741d9"),
)


def resolve_style(element: ElementBase) -> StrokeStyle:
    stroke_width = (
        DEFAULT_STROKE_WIDTH if element.stroke_width is None else max(element.stroke_width, 0.0)
    )
    pattern = DASH_PATTERNS.get(element.stroke_style or "solid")
    dash = tuple(part * stroke_width for part in pattern) if pattern and stroke_width else None
    background = element.background_color
    opacity = DEFAULT_OPACITY if element.opacity is None else element.opacity
    return StrokeStyle(
        stroke_color=element.stroke_color or DEFAULT_STROKE_COLOR,
        fill_color=None if not background or background == TRANSPARENT else background,
        stroke_width=stroke_width,
        dash=dash,
        alpha=min(max(opacity / 100.0, 0.0), 1.0),
    )


def resolve_background(scene: Scene) -> str | None:
    state = scene.app_state
    if not state.export_background:
        return None
    background = state.view_background_color
    if state.export_with_dark_mode and background.lower() in {DEFAULT_VIEW_BACKGROUND, "#fff"}:
        return DARK_MODE_BACKGROUND
    return background


def marker_color(stroke_color: str) -> str:
    normalized = stroke_color.lower()
    for needle, color in MARKER_PALETTE:
        if needle in normalized:
            return color
    return DEFAULT_STROKE_COLOR


def line_height(font_size: float) -> float:
    return LINE_HEIGHT_RATIO * font_size


def layout_text_lines(text: str, x: float, y: float, font_size: float) -> list[tuple[str, Point]]:
    """Baselines for a left-anchored text block whose first line starts at ``y``."""
    step = line_height(font_size)
    return [
        (line, (x, y + font_size + index * step)) for index, line in enumerate(text.split("\n"))
    ]


def layout_centered_lines(
    text: str, cx: float, cy: float, font_size: float
) -> list[tuple[str, Point]]:
    lines = text.split("\n")
    step = line_height(font_size)
    start_y = cy - (len(lines) * step) / 2 + font_size
    return [(line, (cx, start_y + index * step)) for index, line in enumerate(lines)]


def layout_linear_label(
    text: str, anchor: Point, font_size: float
) -> list[tuple[str, Point]]:
    lines = text.split("\n")
    step = line_height(font_size)
    baseline = anchor[1] - LINEAR_LABEL_OFFSET
    last = len(lines) - 1
    return [
        (line, (anchor[0], baseline - (last - index) * step)) for index, line in enumerate(lines)
    ]


def arrowhead_points(path: Sequence[Point], stroke_width: float) -> list[Point] | None:
    """Triangle with its tip on the last point, pointing along the last non-zero segment."""
    tip = path[-1]
    for previous in reversed(path[:-1]):
        dx = tip[0] - previous[0]
        dy = tip[1] - previous[1]
        distance = math.hypot(dx, dy)
        if distance > 0:
            break
    else:
        return None
    ux, uy = dx / distance, dy / distance
    length = max(ARROWHEAD_MIN_LENGTH, ARROWHEAD_LENGTH_PER_STROKE * stroke_width)
    half_width = length * ARROWHEAD_WIDTH_RATIO
    base_x = tip[0] - ux * length
    base_y = tip[1] - uy * length
    return [
        tip,
        (base_x - uy * half_width, base_y + ux * half_width),
        (base_x + uy * half_width, base_y - ux * half_width),
    ]


class ElementRenderer:
    """Draws scene elements onto a surface in array order."""

    def __init__(self) -> None:
        self._drawers: dict[type, Callable[[DrawingSurface, Element], None]] = {
            RectangleElement: self._draw_rectangle,
            EllipseElement: self._draw_ellipse,
            DiamondElement: self._draw_diamond,
            ArrowElement: self._draw_linear,
            LineElement: self._draw_linear,
            TextElement: self._draw_text,
        }

    def render(
        self,
        scene: Scene,
        bounds: SceneBounds,
        surface: DrawingSurface,
        scale: float = 1.0,
    ) -> DrawingSurface:
        surface.begin(
            bounds.width,
            bounds.height,
            resolve_background(scene),
            (bounds.offset_x, bounds.offset_y),
            scale,
        )
        for element in scene.elements:
            if is_skipped(element):
                continue
            drawer = self._drawers.get(type(element))
            if drawer is None:
                logger.debug("Skipping unsupported element type %r", element.type)
                continue
            drawer(surface, element)
        return surface

    def _draw_rectangle(self, surface: DrawingSurface, element: RectangleElement) -> None:
        style = resolve_style(element)
        roundness = element.roundness
        radius = (
            ROUNDED_CORNER_RADIUS
            if roundness is not None and roundness.type == ROUNDNESS_ADAPTIVE
            else 0.0
        )
        width, height = _size(element)
        surface.rectangle(element.x, element.y, width, height, radius, style)
        self._draw_shape_label(surface, element, style)

    def _draw_ellipse(self, surface: DrawingSurface, element: EllipseElement) -> None:
        style = resolve_style(element)
        width, height = _size(element)
        surface.ellipse(
            element.x + width / 2, element.y + height / 2, width / 2, height / 2, style
        )
        self._draw_shape_label(surface, element, style)

    def _draw_diamond(self, surface: DrawingSurface, element: DiamondElement) -> None:
        style = resolve_style(element)
        width, height = _size(element)
        x, y = element.x, element.y
        surface.polygon(
            [
                (x + width / 2, y),
                (x + width, y + height / 2),
                (x + width / 2, y + height),
                (x, y + height / 2),
            ],
            style,
        )
        self._draw_shape_label(surface, element, style)

    def _draw_linear(self, surface: DrawingSurface, element: LinearElement) -> None:
        if len(element.points) < 2:
            logger.debug("Skipping %s with fewer than two points", element.type)
            return
        style = resolve_style(element)
        path = [(element.x + dx, element.y + dy) for dx, dy in element.points]
        surface.polyline(path, replace(style, fill_color=None))
        if isinstance(element, ArrowElement):
            if element.end_arrowhead == "arrow":
                self._draw_arrowhead(surface, path, style)
            if element.start_arrowhead == "arrow":
                self._draw_arrowhead(surface, path[::-1], style)
        label = _label_text(element.label)
        if label is not None:
            anchor = path[len(path) // 2]
            font_size = _label_font_size(element.label)
            self._draw_lines(
                surface,
                layout_linear_label(label, anchor, font_size),
                style,
                font_size,
                "middle",
            )

    def _draw_arrowhead(
        self, surface: DrawingSurface, path: Sequence[Point], style: StrokeStyle
    ) -> None:
        points = arrowhead_points(path, style.stroke_width)
        if points is None:
            return
        color = marker_color(style.stroke_color)
        surface.polygon(
            points,
            StrokeStyle(
                stroke_color=color,
                fill_color=color,
                stroke_width=1.0,
                dash=None,
                alpha=style.alpha,
            ),
        )

    def _draw_text(self, surface: DrawingSurface, element: TextElement) -> None:
        if not element.text:
            return
        style = resolve_style(element)
        font_size = element.font_size or DEFAULT_FONT_SIZE
        self._draw_lines(
            surface,
            layout_text_lines(element.text, element.x, element.y, font_size),
            style,
            font_size,
            "start",
        )

    def _draw_shape_label(
        self, surface: DrawingSurface, element: ShapeElement, style: StrokeStyle
    ) -> None:
        label = _label_text(element.label)
        if label is None:
            return
        width, height = _size(element)
        font_size = _label_font_size(element.label)
        self._draw_lines(
            surface,
            layout_centered_lines(
                label, element.x + width / 2, element.y + height / 2, font_size
            ),
            style,
            font_size,
            "middle",
        )

    def _draw_lines(
        self,
        surface: DrawingSurface,
        lines: Sequence[tuple[str, Point]],
        style: StrokeStyle,
        font_size: float,
        anchor: TextAnchor,
    ) -> None:
        text_style = TextStyle(
            color=style.stroke_color,
            font_size=font_size,
            anchor=anchor,
            alpha=style.alpha,
        )
        for content, (x, y) in lines:
            surface.text(x, y, content, text_style)


def _size(element: ElementBase) -> tuple[float, float]:
    return element.width or 0.0, element.height or 0.0


def _label_text(label: ElementLabel | None) -> str | None:
    if label is None or not label.text:
        return None
    return label.text


def _label_font_size(label: ElementLabel | None) -> float:
    if label is None or not label.font_size:
        return DEFAULT_FONT_SIZE
    return label.font_size
