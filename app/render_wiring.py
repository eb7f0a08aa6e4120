from __future__ import annotations

from adapters.browser.backend import BrowserSceneBackend
from adapters.browser.engine import PlaywrightScreenshotEngine
from adapters.raster.backend import PillowSceneBackend
from adapters.svg.backend import SvgSceneBackend
from app.config import AppSettings, PngEngine
from domain.ports.rendering import SceneBackend
from domain.services.export_scene import SceneExporter
from domain.services.render_elements import ElementRenderer


def build_png_backend(
    settings: AppSettings, engine: PngEngine, renderer: ElementRenderer
) -> SceneBackend:
    render = settings.render
    if engine == "browser":
        return BrowserSceneBackend(
            PlaywrightScreenshotEngine(
                timeout_ms=render.browser_timeout_ms,
                launch_args=render.browser_launch_args,
            ),
            SvgSceneBackend(renderer),
        )
    return PillowSceneBackend(renderer, font_path=render.font_path)


def build_exporter(settings: AppSettings, png_engine: PngEngine | None = None) -> SceneExporter:
    renderer = ElementRenderer()
    engine = png_engine or settings.render.png_engine
    return SceneExporter(
        {
            "svg": SvgSceneBackend(renderer),
            "png": build_png_backend(settings, engine, renderer),
        },
        padding=settings.render.padding,
        max_scale=settings.render.max_scale,
    )
