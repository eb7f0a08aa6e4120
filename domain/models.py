from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from domain.errors import InvalidSceneError

DEFAULT_VIEW_BACKGROUND = "#ffffff"
DEFAULT_PADDING = 40.0
DEFAULT_SCALE = 2.0

MEDIA_TYPES = {
    "png": "image/png",
    "svg": "image/svg+xml",
    "json": "application/json",
}


class _ExcalidrawModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )


class ElementLabel(_ExcalidrawModel):
    text: str | None = None
    font_size: float | None = None


class Roundness(_ExcalidrawModel):
    type: int | None = None


class ElementBase(_ExcalidrawModel):
    x: float = 0.0
    y: float = 0.0
    width: float | None = None
    height: float | None = None
    stroke_color: str | None = None
    background_color: str | None = None
    stroke_width: float | None = None
    stroke_style: str | None = None
    opacity: float | None = None


class ShapeElement(ElementBase):
    label: ElementLabel | None = None


class RectangleElement(ShapeElement):
    type: Literal["rectangle"] = "rectangle"
    roundness: Roundness | None = None


class EllipseElement(ShapeElement):
    type: Literal["ellipse"] = "ellipse"


class DiamondElement(ShapeElement):
    type: Literal["diamond"] = "diamond"


class LinearElement(ElementBase):
    points: tuple[tuple[float, float], ...] = ()
    start_arrowhead: str | None = None
    end_arrowhead: str | None = None
    label: ElementLabel | None = None


class ArrowElement(LinearElement):
    type: Literal["arrow"] = "arrow"


class LineElement(LinearElement):
    type: Literal["line"] = "line"


class TextElement(ElementBase):
    type: Literal["text"] = "text"
    text: str | None = None
    font_size: float | None = None


class UnsupportedElement(ElementBase):
    type: str


class CameraUpdateElement(_ExcalidrawModel):
    type: Literal["cameraUpdate"] = "cameraUpdate"


class DeleteElement(_ExcalidrawModel):
    type: Literal["delete"] = "delete"


Element = Union[
    RectangleElement,
    EllipseElement,
    DiamondElement,
    ArrowElement,
    LineElement,
    TextElement,
    CameraUpdateElement,
    DeleteElement,
    UnsupportedElement,
]

_ELEMENT_MODELS: dict[str, type[_ExcalidrawModel]] = {
    "rectangle": RectangleElement,
    "ellipse": EllipseElement,
    "diamond": DiamondElement,
    "arrow": ArrowElement,
    "line": LineElement,
    "text": TextElement,
    "cameraUpdate": CameraUpdateElement,
    "delete": DeleteElement,
}


def is_skipped(element: Element) -> bool:
    return isinstance(element, (CameraUpdateElement, DeleteElement))


def parse_element(raw: Mapping[str, Any]) -> Element:
    kind = raw.get("type")
    if not isinstance(kind, str):
        kind = str(kind)
    model = _ELEMENT_MODELS.get(kind, UnsupportedElement)
    payload = dict(raw)
    payload["type"] = kind
    return model.model_validate(payload)  # type: ignore[return-value]


def parse_elements(raw_elements: Sequence[Any]) -> list[Element]:
    elements: list[Element] = []
    for index, raw in enumerate(raw_elements):
        if not isinstance(raw, Mapping):
            msg = f"Element at index {index} must be an object"
            raise InvalidSceneError(msg)
        try:
            elements.append(parse_element(raw))
        except ValidationError as exc:
            fields = ", ".join(
                ".".join(str(part) for part in error["loc"]) for error in exc.errors()
            )
            msg = f"Element at index {index} ({raw.get('type')}) has invalid fields: {fields}"
            raise InvalidSceneError(msg) from exc
    return elements


class AppState(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="allow",
    )

    view_background_color: str = DEFAULT_VIEW_BACKGROUND
    export_background: bool = True
    export_with_dark_mode: bool = False

    @field_validator("view_background_color", mode="before")
    @classmethod
    def default_background(cls, value: object) -> object:
        return value or DEFAULT_VIEW_BACKGROUND

    @field_validator("export_background", mode="before")
    @classmethod
    def default_export_background(cls, value: object) -> object:
        return True if value is None else value

    @field_validator("export_with_dark_mode", mode="before")
    @classmethod
    def default_dark_mode(cls, value: object) -> object:
        return bool(value)


@dataclass(frozen=True)
class Scene:
    elements: tuple[Element, ...]
    app_state: AppState

    @classmethod
    def from_payload(
        cls, elements: Sequence[Any], app_state: Mapping[str, Any] | None = None
    ) -> Scene:
        try:
            state = AppState.model_validate(dict(app_state or {}))
        except ValidationError as exc:
            msg = f"Invalid appState: {exc.error_count()} validation error(s)"
            raise InvalidSceneError(msg) from exc
        return cls(elements=tuple(parse_elements(elements)), app_state=state)


@dataclass(frozen=True)
class SceneBounds:
    width: float
    height: float
    offset_x: float
    offset_y: float


class RenderRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    elements: list[dict[str, Any]]
    app_state: dict[str, Any] | None = Field(default_factory=dict, alias="appState")
    files: dict[str, Any] | None = Field(default_factory=dict)
    format: str = "png"
    scale: float = Field(default=DEFAULT_SCALE, gt=0)

    @field_validator("format", mode="before")
    @classmethod
    def default_format(cls, value: object) -> object:
        if value is None or value == "":
            return "png"
        return value if isinstance(value, str) else str(value)

    @field_validator("scale", mode="before")
    @classmethod
    def default_scale(cls, value: object) -> object:
        return DEFAULT_SCALE if value is None else value


@dataclass(frozen=True)
class RenderedImage:
    content: bytes
    media_type: str
    format: str


@dataclass(frozen=True)
class ExcalidrawDocument:
    elements: list[dict]
    app_state: dict | None
    files: dict | None

    def to_request(self, format: str = "png", scale: float = DEFAULT_SCALE) -> RenderRequest:
        return RenderRequest(
            elements=self.elements,
            app_state=self.app_state,
            files=self.files,
            format=format,
            scale=scale,
        )
