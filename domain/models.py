from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Literal, Set

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from domain.geometry import Rectangle, Vector2

AnchorSide = Literal["top", "bottom", "left", "right", "middle"]
LineStyle = Literal["straight", "curve", "angle"]

DEFAULT_RELATIVE_POSITION = 0.5
DEFAULT_ORDER = 0
DEFAULT_STROKE_COLOR = "#f00"
DEFAULT_STROKE_WIDTH = 2.0
DEFAULT_ARROW_LENGTH = 10.0
DEFAULT_ARROW_THICKNESS = 6.0
DEFAULT_CIRCLE_RADIUS = 2.0


class CamelModel(BaseModel):
    """Accepts both snake_case names and the camelCase props of the web library."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class ArrowShape(CamelModel):
    arrow_length: float = Field(default=DEFAULT_ARROW_LENGTH, ge=0)
    arrow_thickness: float = Field(default=DEFAULT_ARROW_THICKNESS, ge=0)


class CircleShape(CamelModel):
    radius: float = Field(default=DEFAULT_CIRCLE_RADIUS, ge=0)
    fill_color: str = "#f00"
    stroke_color: str = "#0ff"
    stroke_width: float = Field(default=1.0, ge=0)


class EndShape(CamelModel):
    arrow: ArrowShape | None = Field(default_factory=ArrowShape)
    circle: CircleShape | None = None

    def trim_length(self) -> float:
        # Marker size in stroke-width units, doubled so the line stops at the marker base.
        if self.circle is not None:
            return self.circle.radius * 2
        if self.arrow is not None:
            return self.arrow.arrow_length * 2
        return 0.0


class ArrowStyle(CamelModel):
    stroke_color: str = DEFAULT_STROKE_COLOR
    stroke_width: float = Field(default=DEFAULT_STROKE_WIDTH, ge=0)
    stroke_dasharray: str | None = None
    line_style: LineStyle | None = None
    no_curves: bool = False
    offset: float = 0.0
    start_marker: bool = False
    end_marker: bool = True
    end_shape: EndShape = Field(default_factory=EndShape)

    @field_validator("stroke_dasharray", mode="before")
    @classmethod
    def normalize_dasharray(cls, value: object) -> str | None:
        if value is None or value == "":
            return None
        if isinstance(value, (list, tuple)):
            return ",".join(str(item) for item in value)
        return str(value)

    def resolved_line_style(self) -> LineStyle:
        if self.line_style is not None:
            return self.line_style
        return "straight" if self.no_curves else "curve"

    def merged(self, override: ArrowStyle | None) -> ArrowStyle:
        """Overlay only the fields the override was explicitly given."""
        if override is None:
            return self
        updates = {name: getattr(override, name) for name in override.model_fields_set}
        return self.model_copy(update=updates)


class Relation(CamelModel):
    target_id: str = Field(..., min_length=1)
    source_anchor: AnchorSide
    target_anchor: AnchorSide
    source_offset: float = DEFAULT_RELATIVE_POSITION
    target_offset: float = DEFAULT_RELATIVE_POSITION
    label: str | None = None
    style: ArrowStyle | None = None
    order: int = DEFAULT_ORDER

    @field_validator("source_offset", "target_offset", mode="before")
    @classmethod
    def default_offset(cls, value: object) -> object:
        return DEFAULT_RELATIVE_POSITION if value is None else value

    @field_validator("order", mode="before")
    @classmethod
    def default_order(cls, value: object) -> object:
        return DEFAULT_ORDER if value is None else value


class SceneElement(CamelModel):
    id: str = Field(..., min_length=1)
    x: float
    y: float
    width: float = Field(..., ge=0)
    height: float = Field(..., ge=0)
    relations: List[Relation] = Field(default_factory=list)

    def rectangle(self) -> Rectangle:
        return Rectangle(self.x, self.y, self.width, self.height)


class SceneDocument(CamelModel):
    width: float = Field(default=800.0, gt=0)
    height: float = Field(default=600.0, gt=0)
    style: ArrowStyle = Field(default_factory=ArrowStyle)
    elements: List[SceneElement] = Field(default_factory=list)

    @field_validator("elements", mode="after")
    @classmethod
    def ensure_unique_element_ids(cls, elements: List[SceneElement]) -> List[SceneElement]:
        seen: Set[str] = set()
        for element in elements:
            if element.id in seen:
                msg = f"Duplicate element id found: {element.id}"
                raise ValueError(msg)
            seen.add(element.id)
        return elements

    def rectangles(self) -> dict[str, Rectangle]:
        return {element.id: element.rectangle() for element in self.elements}


@dataclass(frozen=True)
class ResolvedAnchor:
    point: Vector2
    orientation: Vector2


@dataclass(frozen=True)
class AnchorRef:
    id: str
    anchor: AnchorSide
    offset: float = DEFAULT_RELATIVE_POSITION


@dataclass(frozen=True)
class SourceToTarget:
    source: AnchorRef
    target: AnchorRef
    label: str | None
    style: ArrowStyle | None
    order: int


@dataclass(frozen=True)
class LabelBox:
    label_width: float
    label_height: float
    x_label: float
    y_label: float


@dataclass(frozen=True)
class ComputedPath:
    d: str
    marker_id: str
    style: str
    line_style: LineStyle
    start: Vector2
    end: Vector2
    points: tuple[Vector2, ...]
    marker_start: str | None = None
    marker_end: str | None = None
    stroke_dasharray: str | None = None
    label: str | None = None
    label_box: LabelBox | None = None


@dataclass(frozen=True)
class ComputedArrow:
    source_id: str
    target_id: str
    order: int
    path: ComputedPath
    style: ArrowStyle

    def to_dict(self) -> dict[str, Any]:
        path = self.path
        payload: dict[str, Any] = {
            "source_id": self.source_id,
            "target_id": self.target_id,
            "order": self.order,
            "d": path.d,
            "style": path.style,
            "line_style": path.line_style,
            "marker_id": path.marker_id,
            "marker_start": path.marker_start,
            "marker_end": path.marker_end,
            "stroke_dasharray": path.stroke_dasharray,
            "points": [[point.x, point.y] for point in path.points],
            "label": path.label,
            "label_box": None,
        }
        if path.label_box is not None:
            payload["label_box"] = {
                "x": path.label_box.x_label,
                "y": path.label_box.y_label,
                "width": path.label_box.label_width,
                "height": path.label_box.label_height,
            }
        return payload
