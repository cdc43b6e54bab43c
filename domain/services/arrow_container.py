from __future__ import annotations

import logging
import uuid
from collections.abc import Callable, Iterable, Mapping, Sequence

from domain.geometry import Rectangle
from domain.models import (
    DEFAULT_ORDER,
    DEFAULT_RELATIVE_POSITION,
    AnchorRef,
    ArrowStyle,
    ComputedArrow,
    Relation,
    SourceToTarget,
)
from domain.ports.measurement import MeasurementSource
from domain.services.anchor_resolution import resolve_anchor
from domain.services.svg_arrow import build_arrow_path

logger = logging.getLogger(__name__)

ArrowsListener = Callable[[list[ComputedArrow]], None]


class MissingContainerError(RuntimeError):
    pass


def assert_container_exists(container: ArrowContainer | None, element_id: str) -> ArrowContainer:
    if container is None:
        msg = (
            f"Could not find ArrowContainer for ArrowElement '{element_id}'. "
            "Please create the element with an ArrowContainer (container=...)."
        )
        raise MissingContainerError(msg)
    return container


def generate_source_to_target(
    element_id: str,
    relations: Iterable[Relation],
) -> list[SourceToTarget]:
    return [
        SourceToTarget(
            source=AnchorRef(
                id=element_id,
                anchor=relation.source_anchor,
                offset=(
                    DEFAULT_RELATIVE_POSITION
                    if relation.source_offset is None
                    else relation.source_offset
                ),
            ),
            target=AnchorRef(
                id=relation.target_id,
                anchor=relation.target_anchor,
                offset=(
                    DEFAULT_RELATIVE_POSITION
                    if relation.target_offset is None
                    else relation.target_offset
                ),
            ),
            label=relation.label,
            style=relation.style,
            order=DEFAULT_ORDER if relation.order is None else relation.order,
        )
        for relation in relations
    ]


class ArrowContainer:
    """Registry of relations declared by elements sharing one coordinate space."""

    def __init__(self, style: ArrowStyle | None = None, container_id: str | None = None) -> None:
        self.style = style or ArrowStyle()
        self.container_id = container_id or self._default_container_id()
        self._source_to_targets: dict[str, list[SourceToTarget]] = {}
        self._listeners: list[ArrowsListener] = []
        self._detach_measurements: Callable[[], None] | None = None

    def register_relations(self, element_id: str, relations: Iterable[Relation]) -> None:
        self._source_to_targets[element_id] = generate_source_to_target(element_id, relations)

    def unregister(self, element_id: str) -> None:
        self._source_to_targets.pop(element_id, None)

    def source_to_targets(self) -> list[SourceToTarget]:
        return [item for items in self._source_to_targets.values() for item in items]

    def marker_id(self, source_id: str, target_id: str) -> str:
        return f"{self.container_id}{source_id}{target_id}"

    def compute_arrows(self, rects: Mapping[str, Rectangle]) -> list[ComputedArrow]:
        arrows: list[ComputedArrow] = []
        for relation in sorted(self.source_to_targets(), key=lambda item: item.order):
            source_rect = rects.get(relation.source.id)
            target_rect = rects.get(relation.target.id)
            if source_rect is None or target_rect is None:
                logger.debug(
                    "Skipping arrow %s -> %s: element not measured yet.",
                    relation.source.id,
                    relation.target.id,
                )
                continue
            arrows.append(self._compute_arrow(relation, source_rect, target_rect))
        return arrows

    def subscribe(self, listener: ArrowsListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def refresh(self, rects: Mapping[str, Rectangle]) -> list[ComputedArrow]:
        arrows = self.compute_arrows(rects)
        logger.debug("Recomputed %d arrows for container %s.", len(arrows), self.container_id)
        for listener in list(self._listeners):
            listener(arrows)
        return arrows

    def attach(self, measurements: MeasurementSource) -> None:
        """Recompute and notify listeners on every measurement change."""
        self.detach()
        self._detach_measurements = measurements.subscribe(self.refresh)
        self.refresh(measurements.snapshot())

    def detach(self) -> None:
        if self._detach_measurements is not None:
            self._detach_measurements()
            self._detach_measurements = None

    def _compute_arrow(
        self,
        relation: SourceToTarget,
        source_rect: Rectangle,
        target_rect: Rectangle,
    ) -> ComputedArrow:
        style = self.style.merged(relation.style)
        start = resolve_anchor(source_rect, relation.source.anchor, relation.source.offset)
        end = resolve_anchor(target_rect, relation.target.anchor, relation.target.offset)
        path = build_arrow_path(
            start.point,
            relation.source.anchor,
            end.point,
            relation.target.anchor,
            arrow_marker_id=self.marker_id(relation.source.id, relation.target.id),
            stroke_color=style.stroke_color,
            stroke_width=style.stroke_width,
            line_style=style.resolved_line_style(),
            end_shape=style.end_shape,
            offset=style.offset,
            enable_start_marker=style.start_marker,
            disable_end_marker=not style.end_marker,
            stroke_dasharray=style.stroke_dasharray,
            arrow_label=relation.label,
        )
        return ComputedArrow(
            source_id=relation.source.id,
            target_id=relation.target.id,
            order=relation.order,
            path=path,
            style=style,
        )

    def _default_container_id(self) -> str:
        return "arrow" + uuid.uuid4().hex[:8]


class ArrowElement:
    """An element that declares arrows starting from itself."""

    def __init__(
        self,
        element_id: str,
        relations: Sequence[Relation] = (),
        container: ArrowContainer | None = None,
    ) -> None:
        self.element_id = element_id
        self.container = assert_container_exists(container, element_id)
        self.relations = list(relations)
        self.container.register_relations(element_id, self.relations)

    def update_relations(self, relations: Sequence[Relation]) -> None:
        self.relations = list(relations)
        self.container.register_relations(self.element_id, self.relations)

    def detach(self) -> None:
        self.container.unregister(self.element_id)
