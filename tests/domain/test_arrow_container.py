from __future__ import annotations

import logging

import pytest

from adapters.measurement.in_memory import InMemoryMeasurementSource
from domain.geometry import Rectangle, Vector2
from domain.models import ArrowStyle, ComputedArrow, Relation
from domain.services.arrow_container import (
    ArrowContainer,
    ArrowElement,
    MissingContainerError,
    generate_source_to_target,
)


def _relation(target_id: str, **overrides: object) -> Relation:
    payload: dict[str, object] = {
        "target_id": target_id,
        "source_anchor": "right",
        "target_anchor": "left",
    }
    payload.update(overrides)
    return Relation.model_validate(payload)


def test_element_without_container_fails_fast() -> None:
    with pytest.raises(MissingContainerError, match="ArrowContainer"):
        ArrowElement("a", [_relation("b")], container=None)


def test_generate_source_to_target_fills_defaults() -> None:
    [item] = generate_source_to_target("a", [_relation("b", label="x")])
    assert item.source.id == "a"
    assert item.source.anchor == "right"
    assert item.source.offset == 0.5
    assert item.target.id == "b"
    assert item.target.offset == 0.5
    assert item.order == 0
    assert item.label == "x"


def test_compute_curve_arrow(rects: dict[str, Rectangle]) -> None:
    container = ArrowContainer(container_id="arrow")
    ArrowElement("a", [_relation("b")], container)

    [arrow] = container.compute_arrows(rects)

    assert arrow.source_id == "a"
    assert arrow.target_id == "b"
    assert arrow.path.d == "M100,25 C140,25 140,125 180,125"
    assert arrow.path.marker_id == "arrowab"
    assert arrow.path.marker_end == "url(#arrowab)"
    assert arrow.path.style == "fill: none; stroke: #f00; stroke-width: 2;"


def test_compute_angle_arrows(rects: dict[str, Rectangle]) -> None:
    container = ArrowContainer(style=ArrowStyle(line_style="angle"), container_id="arrow")
    ArrowElement(
        "a",
        [
            _relation("b"),
            _relation("b", source_anchor="bottom", target_anchor="top", order=1),
            _relation("c", source_anchor="bottom", target_anchor="right", order=2),
        ],
        container,
    )

    paths = [arrow.path.d for arrow in container.compute_arrows(rects)]

    assert paths == [
        "M100,25 140,25 140,125 180,125",
        "M50,50 50,65 250,65 250,80",
        "M50,50 50,225 120,225",
    ]


def test_relation_style_overrides_container_style(rects: dict[str, Rectangle]) -> None:
    container = ArrowContainer(style=ArrowStyle(stroke_width=3), container_id="arrow")
    override = ArrowStyle.model_validate({"strokeColor": "blue", "endMarker": False})
    ArrowElement("a", [_relation("b", style=override)], container)

    [arrow] = container.compute_arrows(rects)

    assert arrow.path.style == "fill: none; stroke: blue; stroke-width: 3;"
    assert arrow.path.marker_end is None
    assert arrow.path.d == "M100,25 C150,25 150,125 200,125"


def test_arrows_are_sorted_by_order(rects: dict[str, Rectangle]) -> None:
    container = ArrowContainer(container_id="arrow")
    ArrowElement("a", [_relation("b", order=2), _relation("c", order=1)], container)
    ArrowElement("c", [_relation("b")], container)

    order = [(arrow.source_id, arrow.target_id) for arrow in container.compute_arrows(rects)]

    assert order == [("c", "b"), ("a", "c"), ("a", "b")]


def test_unmeasured_targets_are_skipped(
    rects: dict[str, Rectangle], caplog: pytest.LogCaptureFixture
) -> None:
    container = ArrowContainer(container_id="arrow")
    ArrowElement("a", [_relation("missing"), _relation("b")], container)

    with caplog.at_level(logging.DEBUG, logger="domain.services.arrow_container"):
        arrows = container.compute_arrows(rects)

    assert [arrow.target_id for arrow in arrows] == ["b"]
    assert "not measured yet" in caplog.text


def test_update_and_detach_element(rects: dict[str, Rectangle]) -> None:
    container = ArrowContainer(container_id="arrow")
    element = ArrowElement("a", [_relation("b")], container)
    element.update_relations([_relation("b"), _relation("c")])
    assert len(container.compute_arrows(rects)) == 2
    element.detach()
    assert container.compute_arrows(rects) == []


def test_default_container_ids_are_unique() -> None:
    assert ArrowContainer().container_id != ArrowContainer().container_id


def test_attached_measurements_drive_recomputation() -> None:
    measurements = InMemoryMeasurementSource(origin=Vector2(10, 10))
    container = ArrowContainer(container_id="arrow")
    ArrowElement("a", [_relation("b")], container)
    received: list[list[ComputedArrow]] = []
    unsubscribe = container.subscribe(received.append)

    container.attach(measurements)
    measurements.measure("a", Rectangle(10, 10, 100, 50))
    measurements.measure("b", Rectangle(210, 110, 100, 50))

    assert [len(arrows) for arrows in received] == [0, 0, 1]
    assert received[-1][0].path.d == "M100,25 C140,25 140,125 180,125"

    unsubscribe()
    measurements.forget("b")
    assert len(received) == 3

    container.detach()
    measurements.measure("b", Rectangle(210, 110, 100, 50))
    assert len(received) == 3
