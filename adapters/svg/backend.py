from __future__ import annotations

from adapters.svg.surface import FONT_FAMILY, SvgSurface
from domain.models import MEDIA_TYPES, Scene, SceneBounds
from domain.services.render_elements import ElementRenderer


class SvgSceneBackend:
    media_type = MEDIA_TYPES["svg"]

    def __init__(
        self, renderer: ElementRenderer | None = None, font_family: str = FONT_FAMILY
    ) -> None:
        self.renderer = renderer or ElementRenderer()
        self.font_family = font_family

    def render_markup(self, scene: Scene, bounds: SceneBounds, declaration: bool = True) -> str:
        surface = SvgSurface(self.font_family)
        self.renderer.render(scene, bounds, surface)
        return surface.markup(declaration=declaration)

    def render(self, scene: Scene, bounds: SceneBounds, scale: float) -> bytes:
        return self.render_markup(scene, bounds).encode("utf-8")
