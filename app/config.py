from __future__ import annotations

import os
from pathlib import Path
from typing import ClassVar

from pydantic import AliasChoices, BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic_settings.sources import PydanticBaseSettingsSource, YamlConfigSettingsSource

from domain.models import (
    DEFAULT_ARROW_LENGTH,
    DEFAULT_ARROW_THICKNESS,
    DEFAULT_STROKE_COLOR,
    DEFAULT_STROKE_WIDTH,
    ArrowShape,
    ArrowStyle,
    EndShape,
    LineStyle,
)

DEFAULT_CONFIG_PATH = Path("config/archer.yaml")


class RenderSettings(BaseModel):
    title: str = "SVG Archer"
    container_id: str = "arrow"
    stroke_color: str = DEFAULT_STROKE_COLOR
    stroke_width: float = Field(default=DEFAULT_STROKE_WIDTH, ge=0)
    stroke_dasharray: str | None = None
    line_style: LineStyle | None = Field(
        default=None,
        validation_alias=AliasChoices("line_style", "lineStyle"),
    )
    arrow_length: float = Field(default=DEFAULT_ARROW_LENGTH, ge=0)
    arrow_thickness: float = Field(default=DEFAULT_ARROW_THICKNESS, ge=0)
    offset: float = 0.0
    start_marker: bool = False
    end_marker: bool = True

    @field_validator("line_style", mode="before")
    @classmethod
    def normalize_line_style(cls, value: object) -> str | None:
        return str(value).strip().lower() if value else None

    @field_validator("stroke_dasharray", mode="before")
    @classmethod
    def normalize_dasharray(cls, value: object) -> str | None:
        if value is None or value == "":
            return None
        return str(value)

    def to_arrow_style(self) -> ArrowStyle:
        return ArrowStyle(
            stroke_color=self.stroke_color,
            stroke_width=self.stroke_width,
            stroke_dasharray=self.stroke_dasharray,
            line_style=self.line_style,
            offset=self.offset,
            start_marker=self.start_marker,
            end_marker=self.end_marker,
            end_shape=EndShape(
                arrow=ArrowShape(
                    arrow_length=self.arrow_length,
                    arrow_thickness=self.arrow_thickness,
                )
            ),
        )


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="ARCHER_", env_nested_delimiter="__")

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
    env_path = os.getenv("ARCHER_CONFIG_PATH")
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
