from __future__ import annotations

from typing import Protocol

from domain.models import Scene, SceneBounds


class SceneBackend(Protocol):
    media_type: str

    def render(self, scene: Scene, bounds: SceneBounds, scale: float) -> bytes: ...


class ScreenshotEngine(Protocol):
    def screenshot(
        self,
        markup: str,
        width: float,
        height: float,
        scale: float,
        transparent: bool,
    ) -> bytes: ...
