from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Protocol

from domain.geometry import Rectangle

MeasurementListener = Callable[[Mapping[str, Rectangle]], None]


class MeasurementSource(Protocol):
    def snapshot(self) -> Mapping[str, Rectangle]: ...

    def subscribe(self, listener: MeasurementListener) -> Callable[[], None]: ...
