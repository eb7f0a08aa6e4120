from __future__ import annotations

from adapters.svg.backend import SvgSceneBackend
from domain.models import MEDIA_TYPES, Scene, SceneBounds
from domain.ports.rendering import ScreenshotEngine


class BrowserSceneBackend:
    media_type = MEDIA_TYPES["png"]

    def __init__(self, engine: ScreenshotEngine, markup_backend: SvgSceneBackend | None = None) -> None:
        self.engine = engine
        self.markup_backend = markup_backend or SvgSceneBackend()

    def render(self, scene: Scene, bounds: SceneBounds, scale: float) -> bytes:
        markup = self.markup_backend.render_markup(scene, bounds, declaration=False)
        return self.engine.screenshot(
            markup,
            bounds.width,
            bounds.height,
            scale,
            transparent=not scene.app_state.export_background,
        )
