from __future__ import annotations

import io
from typing import Any

import pytest
from PIL import Image

from adapters.raster.backend import PillowSceneBackend
from adapters.raster.geometry import dash_segments, rectangle_outline
from adapters.raster.surface import parse_color
from domain.services.compute_bounds import compute_bounds
from tests.helpers.scene_fixtures import make_scene


def _render_png(
    elements: list[dict[str, Any]],
    app_state: dict[str, Any] | None = None,
    scale: float = 1.0,
) -> bytes:
    scene = make_scene(elements, app_state)
    return PillowSceneBackend().render(scene, compute_bounds(scene.elements), scale)


def _open(content: bytes) -> Image.Image:
    return Image.open(io.BytesIO(content)).convert("RGBA")


def test_png_size_follows_bounds_and_scale(rectangle_payload: dict[str, Any]) -> None:
    content = _render_png([rectangle_payload], scale=2.0)

    assert content.startswith(b"\x89PNG")
    assert _open(content).size == (360, 260)


def test_background_fill_and_transparent_export(rectangle_payload: dict[str, Any]) -> None:
    filled = _open(_render_png([rectangle_payload], {"viewBackgroundColor": "#00ff00"}))
    clear = _open(_render_png([rectangle_payload], {"exportBackground": False}))

    assert filled.getpixel((2, 2)) == (0, 255, 0, 255)
    assert clear.getpixel((2, 2))[3] == 0


def test_later_rectangle_paints_on_top() -> None:
    image = _open(
        _render_png(
            [
                {
                    "type": "rectangle",
                    "x": 0,
                    "y": 0,
                    "width": 100,
                    "height": 100,
                    "backgroundColor": "#ff0000",
                },
                {
                    "type": "rectangle",
                    "x": 50,
                    "y": 50,
                    "width": 100,
                    "height": 100,
                    "backgroundColor": "#0000ff",
                },
            ]
        )
    )

    assert image.getpixel((40 + 25, 40 + 25)) == (255, 0, 0, 255)
    assert image.getpixel((40 + 75, 40 + 75)) == (0, 0, 255, 255)


def test_sentinels_do_not_change_pixels(rectangle_payload: dict[str, Any]) -> None:
    plain = _render_png([rectangle_payload])
    noisy = _render_png(
        [
            rectangle_payload,
            {"type": "delete", "x": 0, "y": 0, "width": 100, "height": 50, "backgroundColor": "#f00"},
            {"type": "cameraUpdate", "x": 0, "y": 0, "width": 100, "height": 50},
        ]
    )

    assert plain == noisy


def test_rendering_is_byte_identical_across_calls() -> None:
    elements = [
        {"type": "ellipse", "x": 0, "y": 0, "width": 80, "height": 40, "strokeStyle": "dotted"},
        {"type": "diamond", "x": 90, "y": 0, "width": 60, "height": 60, "backgroundColor": "#ffec99"},
        {"type": "arrow", "x": 0, "y": 70, "points": [[0, 0], [120, 0]], "endArrowhead": "arrow"},
        {"type": "text", "x": 0, "y": 90, "text": "hello\nworld"},
    ]

    assert _render_png(elements) == _render_png(elements)


def test_half_opacity_fill_blends_with_background() -> None:
    image = _open(
        _render_png(
            [
                {
                    "type": "rectangle",
                    "x": 0,
                    "y": 0,
                    "width": 100,
                    "height": 100,
                    "backgroundColor": "#000000",
                    "opacity": 50,
                }
            ]
        )
    )

    red, green, blue, _ = image.getpixel((90, 90))
    assert 120 <= red <= 135
    assert red == green == blue


def test_parse_color_handles_transparent_and_unknown_values() -> None:
    assert parse_color("transparent") is None
    assert parse_color(None) is None
    assert parse_color("not-a-color") is None
    assert parse_color("#ff0000", 0.5) == (255, 0, 0, 128)


def test_dash_segments_alternate_visible_runs() -> None:
    segments = dash_segments([(0.0, 0.0), (20.0, 0.0)], [5.0, 5.0])

    assert segments == [[(0.0, 0.0), (5.0, 0.0)], [(10.0, 0.0), (15.0, 0.0)]]


def test_dash_phase_carries_over_corners() -> None:
    segments = dash_segments([(0.0, 0.0), (3.0, 0.0), (3.0, 4.0)], [5.0, 5.0])

    assert segments[0] == [(0.0, 0.0), (3.0, 0.0), (3.0, 2.0)]


def test_rectangle_outline_without_radius_is_four_corners() -> None:
    assert rectangle_outline(0, 0, 10, 5, 0) == [(0, 0), (10, 0), (10, 5), (0, 5)]
    rounded = rectangle_outline(0, 0, 10, 10, 2)
    assert len(rounded) == 36
    assert min(x for x, _ in rounded) == pytest.approx(0)
