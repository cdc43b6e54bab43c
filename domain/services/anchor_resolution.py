from __future__ import annotations

from domain.geometry import Rectangle, Vector2
from domain.models import DEFAULT_RELATIVE_POSITION, ResolvedAnchor

_ORIENTATIONS: dict[str, Vector2] = {
    "top": Vector2(0, -1),
    "bottom": Vector2(0, 1),
    "left": Vector2(-1, 0),
    "right": Vector2(1, 0),
}
_NO_ORIENTATION = Vector2(0, 0)


def anchor_orientation(side: str) -> Vector2:
    """Outward direction of the edge; ``middle`` has no directional bias."""
    return _ORIENTATIONS.get(side, _NO_ORIENTATION)


def resolve_anchor(
    rect: Rectangle,
    side: str,
    offset: float | None = None,
) -> ResolvedAnchor:
    """Turn a side plus relative offset into an absolute point on ``rect``.

    The offset runs along the edge (0 is the left/top corner, 1 the other one)
    and is not clamped, so values outside ``[0, 1]`` extrapolate past the corners.
    """
    relative = DEFAULT_RELATIVE_POSITION if offset is None else offset
    if side == "top":
        point = Vector2(rect.x + rect.width * relative, rect.y)
    elif side == "bottom":
        point = Vector2(rect.x + rect.width * relative, rect.y + rect.height)
    elif side == "left":
        point = Vector2(rect.x, rect.y + rect.height * relative)
    elif side == "right":
        point = Vector2(rect.x + rect.width, rect.y + rect.height * relative)
    else:
        point = rect.center
    return ResolvedAnchor(point=point, orientation=anchor_orientation(side))
