from __future__ import annotations

from collections.abc import Callable, Mapping

from domain.geometry import Rectangle, Vector2
from domain.ports.measurement import MeasurementListener, MeasurementSource


class InMemoryMeasurementSource(MeasurementSource):
    """Holds the latest rectangle per element and notifies on every change.

    Rectangles are measured in page space; ``origin`` is the container's top-left
    corner, so snapshots are in the container's local space.
    """

    def __init__(self, origin: Vector2 | None = None) -> None:
        self.origin = origin or Vector2(0, 0)
        self._rects: dict[str, Rectangle] = {}
        self._listeners: list[MeasurementListener] = []

    def snapshot(self) -> Mapping[str, Rectangle]:
        return {
            element_id: rect.relative_to(self.origin) for element_id, rect in self._rects.items()
        }

    def subscribe(self, listener: MeasurementListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def measure(self, element_id: str, rect: Rectangle) -> None:
        if self._rects.get(element_id) == rect:
            return
        self._rects[element_id] = rect
        self._notify()

    def forget(self, element_id: str) -> None:
        if self._rects.pop(element_id, None) is not None:
            self._notify()

    def move_origin(self, origin: Vector2) -> None:
        if origin == self.origin:
            return
        self.origin = origin
        self._notify()

    def _notify(self) -> None:
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            listener(snapshot)
