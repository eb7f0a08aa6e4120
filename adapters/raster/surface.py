from __future__ import annotations

import io
import logging
import math
from collections.abc import Sequence
from functools import lru_cache
from pathlib import Path

from PIL import Image, ImageColor, ImageDraw, ImageFont

from adapters.raster.geometry import dash_segments, ellipse_outline, rectangle_outline
from domain.ports.surface import Point, StrokeStyle, TextStyle

logger = logging.getLogger(__name__)

RGBA = tuple[int, int, int, int]
Font = ImageFont.FreeTypeFont | ImageFont.ImageFont

FALLBACK_STROKE: RGBA = (30, 30, 30, 255)
CLEAR: RGBA = (0, 0, 0, 0)
FONT_CANDIDATES = (
    "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
    "/usr/share/fonts/dejavu/DejaVuSans.ttf",
    "DejaVuSans.ttf",
)
_TEXT_ANCHORS = {"start": "ls", "middle": "ms"}


def parse_color(value: str | None, alpha: float = 1.0) -> RGBA | None:
    if not value or value.lower() == "transparent":
        return None
    try:
        rgb = ImageColor.getrgb(value)
    except ValueError:
        logger.warning("Unrecognized color %r", value)
        return None
    base_alpha = rgb[3] if len(rgb) == 4 else 255
    return (rgb[0], rgb[1], rgb[2], round(base_alpha * alpha))


@lru_cache(maxsize=64)
def load_font(size: int, font_path: str | None = None) -> Font:
    candidates = (font_path, *FONT_CANDIDATES) if font_path else FONT_CANDIDATES
    for candidate in candidates:
        if candidate.startswith("/") and not Path(candidate).exists():
            continue
        try:
            return ImageFont.truetype(candidate, size=size)
        except OSError:
            continue
    return ImageFont.load_default(size=size)


class PillowSurface:
    """RGBA raster surface; scene coordinates are offset then scaled."""

    def __init__(self, font_path: str | None = None) -> None:
        self.font_path = font_path
        self.offset: Point = (0.0, 0.0)
        self.scale = 1.0
        self.image: Image.Image | None = None
        self._draw: ImageDraw.ImageDraw | None = None

    def begin(
        self,
        width: float,
        height: float,
        background: str | None,
        offset: Point,
        scale: float,
    ) -> None:
        self.offset = offset
        self.scale = scale
        size = (max(1, math.ceil(width * scale)), max(1, math.ceil(height * scale)))
        fill = parse_color(background) or CLEAR
        self.image = Image.new("RGBA", size, fill)
        self._draw = ImageDraw.Draw(self.image, "RGBA")

    @property
    def draw(self) -> ImageDraw.ImageDraw:
        if self._draw is None:
            msg = "Surface used before begin()"
            raise RuntimeError(msg)
        return self._draw

    def rectangle(
        self, x: float, y: float, width: float, height: float, radius: float, style: StrokeStyle
    ) -> None:
        (ax, ay), (bx, by) = self._map(x, y), self._map(x + width, y + height)
        x0, x1 = sorted((ax, bx))
        y0, y1 = sorted((ay, by))
        scaled_radius = min(radius * self.scale, (x1 - x0) / 2, (y1 - y0) / 2)
        fill = parse_color(style.fill_color, style.alpha)
        if fill is not None:
            if scaled_radius > 0:
                self.draw.rounded_rectangle((x0, y0, x1, y1), radius=scaled_radius, fill=fill)
            else:
                self.draw.rectangle((x0, y0, x1, y1), fill=fill)
        self._stroke(rectangle_outline(x0, y0, x1, y1, scaled_radius), style, closed=True)

    def ellipse(self, cx: float, cy: float, rx: float, ry: float, style: StrokeStyle) -> None:
        mx, my = self._map(cx, cy)
        srx, sry = abs(rx) * self.scale, abs(ry) * self.scale
        fill = parse_color(style.fill_color, style.alpha)
        if fill is not None:
            self.draw.ellipse((mx - srx, my - sry, mx + srx, my + sry), fill=fill)
        self._stroke(ellipse_outline(mx, my, srx, sry), style, closed=True)

    def polygon(self, points: Sequence[Point], style: StrokeStyle) -> None:
        mapped = [self._map(x, y) for x, y in points]
        fill = parse_color(style.fill_color, style.alpha)
        if fill is not None:
            self.draw.polygon(mapped, fill=fill)
        self._stroke(mapped, style, closed=True)

    def polyline(self, points: Sequence[Point], style: StrokeStyle) -> None:
        self._stroke([self._map(x, y) for x, y in points], style, closed=False)

    def text(self, x: float, y: float, content: str, style: TextStyle) -> None:
        if not content:
            return
        color = parse_color(style.color, style.alpha) or _fallback(style.alpha)
        font = load_font(max(1, round(style.font_size * self.scale)), self.font_path)
        self.draw.text(
            self._map(x, y), content, font=font, fill=color, anchor=_TEXT_ANCHORS[style.anchor]
        )

    def finish(self) -> bytes:
        if self.image is None:
            msg = "Surface used before begin()"
            raise RuntimeError(msg)
        buffer = io.BytesIO()
        self.image.save(buffer, format="PNG")
        return buffer.getvalue()

    def _map(self, x: float, y: float) -> Point:
        return ((x + self.offset[0]) * self.scale, (y + self.offset[1]) * self.scale)

    def _stroke(self, points: Sequence[Point], style: StrokeStyle, closed: bool) -> None:
        if style.stroke_width <= 0 or len(points) < 2:
            return
        color = parse_color(style.stroke_color, style.alpha) or _fallback(style.alpha)
        width = max(1, round(style.stroke_width * self.scale))
        path = [*points, points[0]] if closed else list(points)
        if style.dash is None:
            self.draw.line(path, fill=color, width=width, joint="curve")
            return
        pattern = [part * self.scale for part in style.dash]
        for segment in dash_segments(path, pattern):
            self.draw.line(segment, fill=color, width=width)


def _fallback(alpha: float) -> RGBA:
    return (*FALLBACK_STROKE[:3], round(255 * alpha))
