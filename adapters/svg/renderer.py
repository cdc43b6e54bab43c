from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Any

import svgwrite
from svgwrite import base

from domain.models import ComputedArrow, EndShape
from domain.services.svg_arrow import format_number

XHTML_NAMESPACE = "http://www.w3.org/1999/xhtml"
LABEL_OBJECT_STYLE = "overflow: visible; pointer-events: none;"
LABEL_DIV_STYLE = (
    "width: 100%; height: 100%; display: flex; align-items: center; "
    "justify-content: center; pointer-events: all;"
)


class _ForeignObject(base.BaseElement):
    elementname = "foreignObject"


class _LabelDiv(base.BaseElement):
    elementname = "div"

    def __init__(self, text: str, **extra: Any) -> None:
        super().__init__(**extra)
        self.text = text

    def get_xml(self) -> Any:
        xml = super().get_xml()
        xml.text = self.text
        return xml


class SvgArrowRenderer:
    """Writes computed arrows into a standalone SVG document."""

    def render(self, arrows: Sequence[ComputedArrow], width: float, height: float) -> str:
        drawing = svgwrite.Drawing(
            size=(format_number(width), format_number(height)),
            profile="full",
            debug=False,
        )
        seen_markers: set[str] = set()
        for arrow in arrows:
            if arrow.path.marker_id in seen_markers:
                continue
            if arrow.path.marker_start is None and arrow.path.marker_end is None:
                continue
            marker = self._marker(drawing, arrow)
            if marker is not None:
                drawing.defs.add(marker)
                seen_markers.add(arrow.path.marker_id)

        for arrow in arrows:
            drawing.add(self._path(drawing, arrow))
            label = self._label(arrow)
            if label is not None:
                drawing.add(label)
        return drawing.tostring()

    def save(
        self,
        arrows: Sequence[ComputedArrow],
        width: float,
        height: float,
        path: Path,
    ) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.render(arrows, width, height), encoding="utf-8")

    def _marker(self, drawing: svgwrite.Drawing, arrow: ComputedArrow) -> Any | None:
        end_shape: EndShape = arrow.style.end_shape
        if end_shape.circle is not None:
            circle = end_shape.circle
            center = circle.radius + circle.stroke_width / 2
            size = format_number(center * 2)
            marker = drawing.marker(
                insert=(format_number(center), format_number(center)),
                size=(size, size),
                orient="auto-start-reverse",
                id=arrow.path.marker_id,
                markerUnits="strokeWidth",
            )
            marker.add(
                drawing.circle(
                    center=(format_number(center), format_number(center)),
                    r=format_number(circle.radius),
                    fill=circle.fill_color,
                    stroke=circle.stroke_color,
                    stroke_width=format_number(circle.stroke_width),
                )
            )
            return marker
        if end_shape.arrow is None:
            return None
        length = end_shape.arrow.arrow_length
        thickness = end_shape.arrow.arrow_thickness
        marker = drawing.marker(
            insert=("0", format_number(thickness / 2)),
            size=(format_number(length), format_number(thickness)),
            orient="auto-start-reverse",
            id=arrow.path.marker_id,
            markerUnits="strokeWidth",
        )
        marker.add(
            drawing.path(
                d=(
                    f"M0,0 L0,{format_number(thickness)} "
                    f"L{format_number(length)},{format_number(thickness / 2)} z"
                ),
                fill=arrow.style.stroke_color,
            )
        )
        return marker

    def _path(self, drawing: svgwrite.Drawing, arrow: ComputedArrow) -> Any:
        attributes: dict[str, str] = {"style": arrow.path.style}
        if arrow.path.marker_end:
            attributes["marker-end"] = arrow.path.marker_end
        if arrow.path.marker_start:
            attributes["marker-start"] = arrow.path.marker_start
        return drawing.path(d=arrow.path.d, **attributes)

    def _label(self, arrow: ComputedArrow) -> _ForeignObject | None:
        box = arrow.path.label_box
        if box is None or not arrow.path.label:
            return None
        foreign_object = _ForeignObject(
            debug=False,
            x=format_number(box.x_label),
            y=format_number(box.y_label),
            width=format_number(box.label_width),
            height=format_number(box.label_height),
            style=LABEL_OBJECT_STYLE,
        )
        foreign_object.add(
            _LabelDiv(arrow.path.label, debug=False, xmlns=XHTML_NAMESPACE, style=LABEL_DIV_STYLE)
        )
        return foreign_object
