from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class Vector2:
    x: float
    y: float

    def add(self, other: Vector2) -> Vector2:
        return Vector2(self.x + other.x, self.y + other.y)

    def subtract(self, other: Vector2) -> Vector2:
        return Vector2(self.x - other.x, self.y - other.y)

    def multiply_by_scalar(self, scalar: float) -> Vector2:
        return Vector2(self.x * scalar, self.y * scalar)

    def rotate(self, angle: float) -> Vector2:
        """Rotate counter-clockwise around the origin, angle in radians."""
        if angle == 0:
            return Vector2(self.x, self.y)
        cos = math.cos(angle)
        sin = math.sin(angle)
        return Vector2(self.x * cos - self.y * sin, self.x * sin + self.y * cos)

    def magnitude(self) -> float:
        return math.hypot(self.x, self.y)

    def distance_to(self, other: Vector2) -> float:
        return math.hypot(other.x - self.x, other.y - self.y)


@dataclass(frozen=True)
class Rectangle:
    x: float
    y: float
    width: float
    height: float

    @property
    def origin(self) -> Vector2:
        return Vector2(self.x, self.y)

    @property
    def center(self) -> Vector2:
        return Vector2(self.x + self.width / 2, self.y + self.height / 2)

    def relative_to(self, origin: Vector2) -> Rectangle:
        """Translate a page-space rectangle into the space whose origin is given."""
        return Rectangle(self.x - origin.x, self.y - origin.y, self.width, self.height)
