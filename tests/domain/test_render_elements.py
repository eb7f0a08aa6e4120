from __future__ import annotations

import math
from typing import Any

import pytest

from domain.ports.surface import StrokeStyle
from domain.services.render_elements import (
    ElementRenderer,
    arrowhead_points,
    layout_centered_lines,
    layout_text_lines,
    marker_color,
    resolve_style,
)
from domain.models import parse_element
from tests.helpers.scene_fixtures import UNIT_BOUNDS, RecordingSurface, make_scene


def _render(elements: list[dict[str, Any]], app_state: dict[str, Any] | None = None) -> RecordingSurface:
    surface = RecordingSurface()
    ElementRenderer().render(make_scene(elements, app_state), UNIT_BOUNDS, surface)
    return surface


def test_begin_receives_bounds_background_and_offset() -> None:
    surface = RecordingSurface()
    ElementRenderer().render(
        make_scene([{"type": "rectangle", "width": 1, "height": 1}], {"viewBackgroundColor": "#abc"}),
        UNIT_BOUNDS,
        surface,
        scale=2,
    )

    assert surface.begun == (200.0, 200.0, "#abc", (40.0, 40.0), 2)


def test_background_follows_export_flags() -> None:
    element = [{"type": "rectangle", "width": 1, "height": 1}]

    assert _render(element, {"exportBackground": False}).begun[2] is None
    assert _render(element, {"exportWithDarkMode": True}).begun[2] == "#121212"
    assert (
        _render(element, {"exportWithDarkMode": True, "viewBackgroundColor": "#ffeeee"}).begun[2]
        == "#ffeeee"
    )


def test_style_defaults() -> None:
    style = resolve_style(parse_element({"type": "rectangle"}))

    assert style == StrokeStyle(
        stroke_color="#1e1e1e",
        fill_color=None,
        stroke_width=2.0,
        dash=None,
        alpha=1.0,
    )


def test_style_dash_scales_with_stroke_width_and_opacity_maps_to_alpha() -> None:
    dashed = resolve_style(
        parse_element({"type": "ellipse", "strokeStyle": "dashed", "strokeWidth": 3, "opacity": 40})
    )
    dotted = resolve_style(parse_element({"type": "ellipse", "strokeStyle": "dotted"}))

    assert dashed.dash == (15.0, 15.0)
    assert dashed.alpha == pytest.approx(0.4)
    assert dotted.dash == (4.0, 4.0)


def test_transparent_background_is_not_filled() -> None:
    style = resolve_style(parse_element({"type": "rectangle", "backgroundColor": "transparent"}))

    assert style.fill_color is None


def test_rectangle_corner_radius_depends_on_roundness() -> None:
    surface = _render(
        [
            {"type": "rectangle", "x": 0, "y": 0, "width": 10, "height": 10, "roundness": {"type": 3}},
            {"type": "rectangle", "x": 0, "y": 0, "width": 10, "height": 10, "roundness": {"type": 2}},
            {"type": "rectangle", "x": 0, "y": 0, "width": 10, "height": 10},
        ]
    )

    assert [call[5] for call in surface.calls] == [8.0, 0.0, 0.0]


def test_ellipse_is_centered_in_its_box() -> None:
    surface = _render([{"type": "ellipse", "x": 10, "y": 20, "width": 40, "height": 20}])

    assert surface.calls[0][:5] == ("ellipse", 30.0, 30.0, 20.0, 10.0)


def test_diamond_goes_through_edge_midpoints() -> None:
    surface = _render([{"type": "diamond", "x": 0, "y": 0, "width": 100, "height": 50}])

    assert surface.calls[0][1] == [(50.0, 0.0), (100.0, 25.0), (50.0, 50.0), (0.0, 25.0)]


def test_text_lines_use_line_height() -> None:
    surface = _render([{"type": "text", "x": 10, "y": 10, "text": "a\nb", "fontSize": 20}])

    texts = surface.texts()
    assert [(call[1], call[2], call[3]) for call in texts] == [(10.0, 30.0, "a"), (10.0, 54.0, "b")]
    assert all(call[4].anchor == "start" for call in texts)


def test_text_font_size_defaults_to_twenty() -> None:
    assert layout_text_lines("x", 0, 0, 20) == [("x", (0, 20))]
    surface = _render([{"type": "text", "x": 0, "y": 0, "text": "x"}])

    assert surface.texts()[0][4].font_size == 20.0


def test_shape_label_is_vertically_centered() -> None:
    surface = _render(
        [
            {
                "type": "rectangle",
                "x": 0,
                "y": 0,
                "width": 100,
                "height": 100,
                "strokeColor": "#2f9e44",
                "label": {"text": "one\ntwo", "fontSize": 10},
            }
        ]
    )

    texts = surface.texts()
    assert [call[3] for call in texts] == ["one", "two"]
    assert texts[0][1] == 50.0
    assert texts[0][2] == pytest.approx(50 - 12 + 10)
    assert texts[1][2] == pytest.approx(50 - 12 + 10 + 12)
    assert texts[0][4].anchor == "middle"
    assert texts[0][4].color == "#2f9e44"


def test_centered_single_line_layout() -> None:
    ((_, (x, y)),) = layout_centered_lines("label", 50, 50, 20)

    assert (x, y) == (50, pytest.approx(50 - 12 + 20))


def test_line_has_no_fill_and_no_marker() -> None:
    surface = _render(
        [
            {
                "type": "line",
                "x": 10,
                "y": 10,
                "points": [[0, 0], [50, 0]],
                "backgroundColor": "#ff0000",
                "endArrowhead": "arrow",
            }
        ]
    )

    assert surface.kinds() == ["polyline"]
    assert surface.calls[0][1] == [(10.0, 10.0), (60.0, 10.0)]
    assert surface.calls[0][2].fill_color is None


def test_arrow_draws_end_marker_in_palette_color() -> None:
    surface = _render(
        [
            {
                "type": "arrow",
                "x": 0,
                "y": 0,
                "points": [[0, 0], [100, 0]],
                "strokeColor": "#E03131",
                "endArrowhead": "arrow",
            }
        ]
    )

    assert surface.kinds() == ["polyline", "polygon"]
    marker_points, marker_style = surface.calls[1][1], surface.calls[1][2]
    assert marker_points[0] == (100.0, 0.0)
    assert marker_style.fill_color == "#e03131"
    assert marker_style.stroke_color == "#e03131"


def test_arrow_without_end_arrowhead_has_no_marker() -> None:
    surface = _render([{"type": "arrow", "points": [[0, 0], [1, 1]], "endArrowhead": None}])

    assert surface.kinds() == ["polyline"]


def test_start_arrowhead_points_backwards() -> None:
    surface = _render(
        [{"type": "arrow", "points": [[0, 0], [100, 0]], "startArrowhead": "arrow"}]
    )

    assert surface.kinds() == ["polyline", "polygon"]
    assert surface.calls[1][1][0] == (0.0, 0.0)


def test_linear_elements_need_two_points() -> None:
    surface = _render([{"type": "arrow", "points": [[0, 0]], "endArrowhead": "arrow"}])

    assert surface.calls == []


def test_arrow_label_sits_above_middle_point() -> None:
    surface = _render(
        [
            {
                "type": "arrow",
                "x": 0,
                "y": 0,
                "points": [[0, 0], [50, 20], [100, 40]],
                "label": {"text": "flow"},
            }
        ]
    )

    (text_call,) = surface.texts()
    assert text_call[1:4] == (50.0, 15.0, "flow")
    assert text_call[4].anchor == "middle"


def test_marker_palette_matches_substrings() -> None:
    assert marker_color("#1971c2") == "#1971c2"
    assert marker_color("Orange") == "#f08c00"
    assert marker_color("#123456") == "#1e1e1e"


def test_arrowhead_orientation_follows_last_segment() -> None:
    points = arrowhead_points([(0.0, 0.0), (0.0, 100.0)], stroke_width=2.0)

    assert points is not None
    tip, left, right = points
    assert tip == (0.0, 100.0)
    assert left[1] == pytest.approx(90.0)
    assert right[1] == pytest.approx(90.0)
    assert math.dist(left, right) == pytest.approx(6.0)


def test_arrowhead_skips_zero_length_segments() -> None:
    points = arrowhead_points([(0.0, 0.0), (10.0, 0.0), (10.0, 0.0)], stroke_width=2.0)

    assert points is not None
    assert points[1][0] == pytest.approx(0.0)
    assert arrowhead_points([(5.0, 5.0), (5.0, 5.0)], stroke_width=2.0) is None


def test_skipped_and_unknown_kinds_draw_nothing() -> None:
    surface = _render(
        [
            {"type": "cameraUpdate", "x": 0, "y": 0, "width": 10, "height": 10},
            {"type": "delete", "x": 0, "y": 0, "width": 10, "height": 10},
            {"type": "image", "x": 0, "y": 0, "width": 10, "height": 10, "fileId": "f1"},
            {"type": "hologram", "x": 0, "y": 0},
        ]
    )

    assert surface.calls == []


def test_paint_order_matches_array_order() -> None:
    surface = _render(
        [
            {"type": "ellipse", "width": 10, "height": 10},
            {"type": "rectangle", "width": 10, "height": 10},
            {"type": "text", "text": "t"},
            {"type": "diamond", "width": 10, "height": 10},
        ]
    )

    assert surface.kinds() == ["ellipse", "rectangle", "text", "polygon"]


def test_rendering_is_idempotent() -> None:
    elements = [
        {"type": "rectangle", "x": 0, "y": 0, "width": 10, "height": 10, "label": {"text": "a"}},
        {"type": "arrow", "points": [[0, 0], [5, 5]], "endArrowhead": "arrow"},
    ]

    assert _render(elements).finish() == _render(elements).finish()
