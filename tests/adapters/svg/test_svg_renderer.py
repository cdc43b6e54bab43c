from __future__ import annotations

import xml.etree.ElementTree as ET

from adapters.svg.renderer import SvgArrowRenderer
from domain.geometry import Rectangle
from domain.models import ArrowStyle, CircleShape, EndShape, Relation
from domain.services.arrow_container import ArrowContainer, ArrowElement

SVG = "{http://www.w3.org/2000/svg}"
XHTML = "{http://www.w3.org/1999/xhtml}"


def _render(
    rects: dict[str, Rectangle],
    relations: list[Relation],
    style: ArrowStyle | None = None,
) -> ET.Element:
    container = ArrowContainer(style=style, container_id="arrow")
    ArrowElement("a", relations, container)
    svg = SvgArrowRenderer().render(container.compute_arrows(rects), 400, 300)
    return ET.fromstring(svg)


def _relation(target_id: str, **overrides: object) -> Relation:
    payload: dict[str, object] = {
        "target_id": target_id,
        "source_anchor": "right",
        "target_anchor": "left",
    }
    payload.update(overrides)
    return Relation.model_validate(payload)


def test_render_path_and_arrow_marker(rects: dict[str, Rectangle]) -> None:
    root = _render(rects, [_relation("b")])

    assert root.get("width") == "400"
    assert root.get("height") == "300"
    [path] = root.findall(f"{SVG}path")
    assert path.get("d") == "M100,25 C140,25 140,125 180,125"
    assert path.get("style") == "fill: none; stroke: #f00; stroke-width: 2;"
    assert path.get("marker-end") == "url(#arrowab)"
    assert path.get("marker-start") is None

    [marker] = root.findall(f"{SVG}defs/{SVG}marker")
    assert marker.get("id") == "arrowab"
    assert marker.get("orient") == "auto-start-reverse"
    assert marker.get("markerUnits") == "strokeWidth"
    assert marker.get("markerWidth") == "10"
    assert marker.get("markerHeight") == "6"
    assert marker.get("refY") == "3"
    [head] = marker.findall(f"{SVG}path")
    assert head.get("d") == "M0,0 L0,6 L10,3 z"
    assert head.get("fill") == "#f00"


def test_render_label_foreign_object(rects: dict[str, Rectangle]) -> None:
    root = _render(rects, [_relation("b", label="calls <api>")])

    [label] = root.findall(f"{SVG}foreignObject")
    assert label.get("x") == "100"
    assert label.get("y") == "25"
    assert label.get("width") == "80"
    assert label.get("height") == "100"
    [div] = label.findall(f"{XHTML}div")
    assert div.text == "calls <api>"


def test_render_circle_marker_and_dasharray(rects: dict[str, Rectangle]) -> None:
    style = ArrowStyle(
        stroke_dasharray="5,5",
        end_shape=EndShape(circle=CircleShape(radius=3, stroke_width=2)),
    )
    root = _render(rects, [_relation("b")], style)

    [path] = root.findall(f"{SVG}path")
    assert path.get("stroke-dasharray") is None
    assert path.get("style") == "fill: none; stroke: #f00; stroke-width: 2; stroke-dasharray: 5,5;"
    [circle] = root.findall(f"{SVG}defs/{SVG}marker/{SVG}circle")
    assert circle.get("r") == "3"
    assert circle.get("cx") == "4"


def test_markers_are_written_once_per_id(rects: dict[str, Rectangle]) -> None:
    root = _render(rects, [_relation("b"), _relation("b", source_anchor="bottom")])

    assert len(root.findall(f"{SVG}path")) == 2
    assert len(root.findall(f"{SVG}defs/{SVG}marker")) == 1


def test_disabled_markers_are_not_defined(rects: dict[str, Rectangle]) -> None:
    root = _render(rects, [_relation("b")], ArrowStyle(end_marker=False))

    assert root.findall(f"{SVG}defs/{SVG}marker") == []
    [path] = root.findall(f"{SVG}path")
    assert path.get("marker-end") is None
