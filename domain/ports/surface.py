from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Literal, Protocol

Point = tuple[float, float]
TextAnchor = Literal["start", "middle"]


@dataclass(frozen=True)
class StrokeStyle:
    stroke_color: str
    fill_color: str | None
    stroke_width: float
    dash: tuple[float, ...] | None
    alpha: float


@dataclass(frozen=True)
class TextStyle:
    color: str
    font_size: float
    anchor: TextAnchor
    alpha: float


class DrawingSurface(Protocol):
    """Target of the element renderer.

    Coordinates passed to the drawing primitives are scene coordinates; the
    surface applies the offset and scale given to ``begin``.
    """

    def begin(
        self,
        width: float,
        height: float,
        background: str | None,
        offset: Point,
        scale: float,
    ) -> None: ...

    def rectangle(
        self, x: float, y: float, width: float, height: float, radius: float, style: StrokeStyle
    ) -> None: ...

    def ellipse(self, cx: float, cy: float, rx: float, ry: float, style: StrokeStyle) -> None: ...

    def polygon(self, points: Sequence[Point], style: StrokeStyle) -> None: ...

    def polyline(self, points: Sequence[Point], style: StrokeStyle) -> None: ...

    def text(self, x: float, y: float, content: str, style: TextStyle) -> None: ...

    def finish(self) -> bytes: ...
