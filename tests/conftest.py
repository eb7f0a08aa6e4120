from __future__ import annotations

import os
from collections.abc import Callable, Generator
from typing import Any

import pytest

from app.config import AppSettings, RenderSettings


def _clear_exr_env() -> None:
    for key in list(os.environ):
        if key.startswith("EXR_"):
            os.environ.pop(key, None)


_clear_exr_env()


@pytest.fixture(autouse=True)
def clear_exr_env() -> Generator[None, None, None]:
    _clear_exr_env()
    yield
    _clear_exr_env()


@pytest.fixture
def render_settings() -> RenderSettings:
    return RenderSettings(
        title="Test Render API",
        padding=40.0,
        default_scale=1.0,
        max_scale=4.0,
        png_engine="raster",
        browser_timeout_ms=5000.0,
        cors_origins=["*"],
    )


@pytest.fixture
def app_settings(render_settings: RenderSettings) -> AppSettings:
    return AppSettings(render=render_settings)


@pytest.fixture
def app_settings_factory(render_settings: RenderSettings) -> Callable[..., AppSettings]:
    def _factory(**overrides: object) -> AppSettings:
        return AppSettings(render=render_settings.model_copy(update=overrides))

    return _factory


@pytest.fixture
def rectangle_payload() -> dict[str, Any]:
    return {
        "type": "rectangle",
        "x": 0,
        "y": 0,
        "width": 100,
        "height": 50,
        "strokeColor": "#000",
        "backgroundColor": "#fff",
    }
