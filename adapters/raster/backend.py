from __future__ import annotations

from adapters.raster.surface import PillowSurface
from domain.models import MEDIA_TYPES, Scene, SceneBounds
from domain.services.render_elements import ElementRenderer


class PillowSceneBackend:
    media_type = MEDIA_TYPES["png"]

    def __init__(self, renderer: ElementRenderer | None = None, font_path: str | None = None) -> None:
        self.renderer = renderer or ElementRenderer()
        self.font_path = font_path

    def render(self, scene: Scene, bounds: SceneBounds, scale: float) -> bytes:
        surface = PillowSurface(font_path=self.font_path)
        return self.renderer.render(scene, bounds, surface, scale).finish()
