from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Annotated, ClassVar, Literal

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict
from pydantic_settings.sources import PydanticBaseSettingsSource, YamlConfigSettingsSource

from domain.models import DEFAULT_PADDING, DEFAULT_SCALE

DEFAULT_CONFIG_PATH = Path("config/render.yaml")

PngEngine = Literal["raster", "browser"]


def _split_string_list_value(raw_value: str) -> list[str]:
    raw = raw_value.strip()
    if not raw:
        return []
    if raw.startswith("[") and raw.endswith("]"):
        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError:
            raw = raw[1:-1].strip()
        else:
            return [str(item).strip() for item in parsed if str(item).strip()]
    return [
        token for token in (part.strip().strip("'").strip('"') for part in raw.split(",")) if token
    ]


class RenderSettings(BaseModel):
    title: str = "Scene Render API"
    padding: float = Field(default=DEFAULT_PADDING, ge=0)
    default_scale: float = Field(default=DEFAULT_SCALE, gt=0)
    max_scale: float = Field(default=8.0, gt=0)
    png_engine: PngEngine = "raster"
    browser_timeout_ms: float = Field(default=10000.0, gt=0)
    browser_launch_args: Annotated[list[str], NoDecode] = Field(default_factory=list)
    font_path: str | None = None
    cors_origins: Annotated[list[str], NoDecode] = Field(default_factory=lambda: ["*"])

    @field_validator("png_engine", mode="before")
    @classmethod
    def normalize_engine(cls, value: object) -> str:
        return str(value).strip().lower() if value else "raster"

    @field_validator("cors_origins", "browser_launch_args", mode="before")
    @classmethod
    def normalize_lists(cls, value: object) -> list[str]:
        if value is None:
            return []
        if isinstance(value, list):
            normalized: list[str] = []
            for item in value:
                normalized.extend(_split_string_list_value(str(item)))
            return normalized
        return _split_string_list_value(str(value))


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="EXR_", env_nested_delimiter="__")

    render: RenderSettings = RenderSettings()

    _yaml_path: ClassVar[Path | None] = None

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        sources: list[PydanticBaseSettingsSource] = [
            init_settings,
            env_settings,
            dotenv_settings,
            file_secret_settings,
        ]
        if cls._yaml_path:
            sources.append(YamlConfigSettingsSource(settings_cls, yaml_file=cls._yaml_path))
        return tuple(sources)


def load_settings(config_path: Path | None = None) -> AppSettings:
    env_path = os.getenv("EXR_CONFIG_PATH")
    resolved_path: Path | None = None

    if config_path is not None:
        resolved_path = config_path
    elif env_path:
        resolved_path = Path(env_path)
    elif DEFAULT_CONFIG_PATH.exists():
        resolved_path = DEFAULT_CONFIG_PATH

    previous = AppSettings._yaml_path
    try:
        if resolved_path is not None:
            if not resolved_path.exists():
                msg = f"Config file not found: {resolved_path}"
                raise FileNotFoundError(msg)
            AppSettings._yaml_path = resolved_path
        return AppSettings()
    finally:
        AppSettings._yaml_path = previous
