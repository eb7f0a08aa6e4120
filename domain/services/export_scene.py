from __future__ import annotations

import logging
from collections.abc import Mapping

import orjson

from domain.errors import UnsupportedFormatError
from domain.models import (
    DEFAULT_PADDING,
    MEDIA_TYPES,
    RenderedImage,
    RenderRequest,
    Scene,
)
from domain.ports.rendering import SceneBackend
from domain.services.compute_bounds import compute_bounds

logger = logging.getLogger(__name__)


def normalize_format(value: str) -> str:
    normalized = str(value or "").strip().lower()
    if normalized not in MEDIA_TYPES:
        supported = ", ".join(MEDIA_TYPES)
        msg = f"Unsupported format {value!r}; expected one of: {supported}"
        raise UnsupportedFormatError(msg)
    return normalized


class SceneExporter:
    def __init__(
        self,
        backends: Mapping[str, SceneBackend],
        padding: float = DEFAULT_PADDING,
        max_scale: float | None = None,
    ) -> None:
        self.backends = dict(backends)
        self.padding = padding
        self.max_scale = max_scale

    def export(self, request: RenderRequest) -> RenderedImage:
        fmt = normalize_format(request.format)
        if fmt == "json":
            payload = {
                "elements": request.elements,
                "appState": request.app_state,
                "files": request.files,
            }
            return RenderedImage(
                content=orjson.dumps(payload), media_type=MEDIA_TYPES[fmt], format=fmt
            )
        backend = self.backends.get(fmt)
        if backend is None:
            msg = f"No renderer configured for format {fmt!r}"
            raise UnsupportedFormatError(msg)

        scene = Scene.from_payload(request.elements, request.app_state)
        bounds = compute_bounds(scene.elements, self.padding)
        scale = request.scale
        if self.max_scale is not None and scale > self.max_scale:
            logger.debug("Clamping scale %s to %s", scale, self.max_scale)
            scale = self.max_scale
        logger.debug(
            "Rendering %d elements as %s (%.0fx%.0f, scale %s)",
            len(scene.elements),
            fmt,
            bounds.width,
            bounds.height,
            scale,
        )
        content = backend.render(scene, bounds, scale)
        return RenderedImage(content=content, media_type=backend.media_type, format=fmt)
