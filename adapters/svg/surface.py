from __future__ import annotations

import re
from collections.abc import Sequence
from html import escape

from domain.ports.surface import Point, StrokeStyle, TextStyle

XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>'
SVG_NAMESPACE = "http://www.w3.org/2000/svg"
FONT_FAMILY = "Virgil, Segoe UI Emoji, sans-serif"
# Characters outside the XML 1.0 Char production.
INVALID_XML_CHARS = re.compile("[^\t\n\r\x20-\ud7ff\ue000-\ufffd\U00010000-\U0010ffff]")


def _num(value: float) -> str:
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return "0" if text in {"-0", ""} else text


def _xml(value: str) -> str:
    return escape(INVALID_XML_CHARS.sub("", value), quote=True)


def _points(points: Sequence[Point]) -> str:
    return " ".join(f"{_num(x)},{_num(y)}" for x, y in points)


def _paint(style: StrokeStyle, filled: bool = True) -> str:
    fill = style.fill_color if filled and style.fill_color else "none"
    parts = [
        f'fill="{_xml(fill)}"',
        f'stroke="{_xml(style.stroke_color)}"',
        f'stroke-width="{_num(style.stroke_width)}"',
    ]
    if style.dash:
        parts.append(f'stroke-dasharray="{" ".join(_num(part) for part in style.dash)}"')
    if style.alpha < 1:
        parts.append(f'opacity="{_num(style.alpha)}"')
    return " ".join(parts)


class SvgSurface:
    """Accumulates SVG markup; text and attribute values are XML-escaped."""

    def __init__(self, font_family: str = FONT_FAMILY) -> None:
        self.font_family = font_family
        self._header: list[str] = []
        self._body: list[str] = []

    def begin(
        self,
        width: float,
        height: float,
        background: str | None,
        offset: Point,
        scale: float,
    ) -> None:
        w, h = _num(width), _num(height)
        self._header = [
            f'<svg xmlns="{SVG_NAMESPACE}" width="{w}" height="{h}" viewBox="0 0 {w} {h}">'
        ]
        if background:
            self._header.append(
                f'  <rect width="100%" height="100%" fill="{_xml(background)}"/>'
            )
        self._header.append(f'  <g transform="translate({_num(offset[0])} {_num(offset[1])})">')
        self._body = []

    def rectangle(
        self, x: float, y: float, width: float, height: float, radius: float, style: StrokeStyle
    ) -> None:
        corner = f' rx="{_num(radius)}" ry="{_num(radius)}"' if radius else ""
        self._body.append(
            f'    <rect x="{_num(x)}" y="{_num(y)}" width="{_num(width)}" '
            f'height="{_num(height)}"{corner} {_paint(style)}/>'
        )

    def ellipse(self, cx: float, cy: float, rx: float, ry: float, style: StrokeStyle) -> None:
        self._body.append(
            f'    <ellipse cx="{_num(cx)}" cy="{_num(cy)}" rx="{_num(rx)}" '
            f'ry="{_num(ry)}" {_paint(style)}/>'
        )

    def polygon(self, points: Sequence[Point], style: StrokeStyle) -> None:
        self._body.append(f'    <polygon points="{_points(points)}" {_paint(style)}/>')

    def polyline(self, points: Sequence[Point], style: StrokeStyle) -> None:
        first, *rest = points
        path = f"M {_num(first[0])} {_num(first[1])}" + "".join(
            f" L {_num(x)} {_num(y)}" for x, y in rest
        )
        self._body.append(
            f'    <path d="{path}" {_paint(style, filled=False)} '
            'stroke-linecap="round" stroke-linejoin="round"/>'
        )

    def text(self, x: float, y: float, content: str, style: TextStyle) -> None:
        opacity = f' opacity="{_num(style.alpha)}"' if style.alpha < 1 else ""
        self._body.append(
            f'    <text x="{_num(x)}" y="{_num(y)}" font-family="{_xml(self.font_family)}" '
            f'font-size="{_num(style.font_size)}" fill="{_xml(style.color)}" '
            f'text-anchor="{style.anchor}" xml:space="preserve"{opacity}>{_xml(content)}</text>'
        )

    def markup(self, declaration: bool = True) -> str:
        lines = [*self._header, *self._body, "  </g>", "</svg>"]
        if declaration:
            lines.insert(0, XML_DECLARATION)
        return "\n".join(lines) + "\n"

    def finish(self) -> bytes:
        return self.markup().encode("utf-8")
