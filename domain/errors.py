from __future__ import annotations


class RenderError(Exception):
    kind = "render_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, str]:
        return {"error": self.kind, "message": self.message}


class InvalidSceneError(RenderError):
    kind = "invalid_scene"


class UnsupportedFormatError(RenderError):
    kind = "unsupported_format"


class ExternalResourceError(RenderError):
    kind = "external_resource"
