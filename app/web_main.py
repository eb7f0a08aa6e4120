from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, cast

from fastapi import Depends, FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse, Response

from app.config import AppSettings, load_settings
from app.render_wiring import build_exporter
from domain.errors import RenderError
from domain.models import RenderRequest
from domain.services.export_scene import SceneExporter

logger = logging.getLogger(__name__)

INVALID_REQUEST_MESSAGE = 'Invalid request. "elements" array is required.'
ERROR_STATUS_CODES = {
    "invalid_scene": 400,
    "unsupported_format": 400,
    "external_resource": 502,
}


def validation_message(errors: Sequence[Mapping[str, Any]]) -> str:
    locations = [
        [str(part) for part in error.get("loc", ()) if part != "body"] for error in errors
    ]
    if not errors or any(not loc or loc[0] == "elements" for loc in locations):
        return INVALID_REQUEST_MESSAGE
    field = ".".join(locations[0])
    return f'Invalid request. "{field}": {errors[0].get("msg", "invalid value")}'


@dataclass(frozen=True)
class RenderContext:
    settings: AppSettings
    exporter: SceneExporter
    browser_exporter: SceneExporter


def create_app(settings: AppSettings) -> FastAPI:
    app = FastAPI(title=settings.render.title)
    app.state.context = RenderContext(
        settings=settings,
        exporter=build_exporter(settings),
        browser_exporter=build_exporter(settings, png_engine="browser"),
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.render.cors_origins,
        allow_methods=["POST", "OPTIONS"],
        allow_headers=["Content-Type"],
    )

    @app.exception_handler(RequestValidationError)
    async def handle_invalid_request(
        request: Request, exc: RequestValidationError
    ) -> ORJSONResponse:
        return ORJSONResponse(
            {
                "error": validation_message(exc.errors()),
                "details": jsonable_encoder(exc.errors()),
            },
            status_code=400,
        )

    @app.exception_handler(RenderError)
    async def handle_render_error(request: Request, exc: RenderError) -> ORJSONResponse:
        status_code = ERROR_STATUS_CODES.get(exc.kind, 500)
        if status_code >= 500:
            logger.warning("Render failed (%s): %s", exc.kind, exc.message)
        return ORJSONResponse(exc.to_dict(), status_code=status_code)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception) -> ORJSONResponse:
        logger.exception("Unexpected render failure.")
        return ORJSONResponse(
            {"error": "Failed to render diagram", "message": str(exc)},
            status_code=500,
        )

    @app.get("/health")
    def health() -> ORJSONResponse:
        return ORJSONResponse({"status": "ok"})

    @app.post("/api/render")
    def api_render(
        payload: RenderRequest,
        context: RenderContext = Depends(get_context),
    ) -> Response:
        return render_response(context.exporter, payload, context.settings)

    @app.post("/api/render-browser")
    def api_render_browser(
        payload: RenderRequest,
        context: RenderContext = Depends(get_context),
    ) -> Response:
        return render_response(context.browser_exporter, payload, context.settings)

    return app


def get_context(request: Request) -> RenderContext:
    return cast(RenderContext, request.app.state.context)


def render_response(
    exporter: SceneExporter, payload: RenderRequest, settings: AppSettings
) -> Response:
    if "scale" not in payload.model_fields_set:
        payload = payload.model_copy(update={"scale": settings.render.default_scale})
    rendered = exporter.export(payload)
    return Response(content=rendered.content, media_type=rendered.media_type)


app = create_app(load_settings())
