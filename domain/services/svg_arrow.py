from __future__ import annotations

import math
from collections.abc import Sequence

from domain.geometry import Vector2
from domain.models import (
    DEFAULT_STROKE_COLOR,
    DEFAULT_STROKE_WIDTH,
    ComputedPath,
    EndShape,
    LabelBox,
    LineStyle,
)
from domain.services.anchor_resolution import anchor_orientation


def format_number(value: float) -> str:
    """Print a coordinate the way a browser serializes a JS number."""
    number = float(value)
    if math.isnan(number):
        return "NaN"
    if math.isinf(number):
        return "Infinity" if number > 0 else "-Infinity"
    if number.is_integer() and abs(number) < 1e21:
        return str(int(number))
    text = repr(number)
    if "e" in text:
        mantissa, exponent = text.split("e")
        sign = "-" if exponent.startswith("-") else "+"
        text = f"{mantissa}e{sign}{int(exponent.lstrip('+-'))}"
    return text


def format_point(point: Vector2) -> str:
    return f"{format_number(point.x)},{format_number(point.y)}"


def compute_arrow_point_according_to_arrow_head(
    x_end: float,
    y_end: float,
    arrow_length: float,
    stroke_width: float,
    ending_anchor: str,
    line_style: LineStyle | None = None,
    x_start: float | None = None,
    y_start: float | None = None,
) -> Vector2:
    """Pull the end point back so the marker fits between the line and the target.

    The shift is ``arrow_length * stroke_width / 2`` along the anchor's outward
    axis. Straight lines are shortened along the line itself when the start is known.
    """
    direction = anchor_orientation(ending_anchor)
    if line_style == "straight" and x_start is not None and y_start is not None:
        angle = math.atan2(y_start - y_end, x_start - x_end)
        direction = Vector2(math.cos(angle), math.sin(angle))
    x_point = x_end + direction.x * arrow_length * stroke_width / 2
    y_point = y_end + direction.y * arrow_length * stroke_width / 2
    return Vector2(x_point, y_point)


def compute_starting_anchor_position(
    x_start: float,
    y_start: float,
    x_end: float,
    y_end: float,
    starting_anchor: str,
) -> Vector2:
    if starting_anchor in ("top", "bottom"):
        return Vector2(x_start, y_start + (y_end - y_start) / 2)
    if starting_anchor in ("left", "right"):
        return Vector2(x_start + (x_end - x_start) / 2, y_start)
    return Vector2(x_start, y_start)


def compute_ending_anchor_position(
    x_start: float,
    y_start: float,
    x_end: float,
    y_end: float,
    ending_anchor: str,
) -> Vector2:
    if ending_anchor in ("top", "bottom"):
        return Vector2(x_end, y_start + (y_end - y_start) / 2)
    if ending_anchor in ("left", "right"):
        return Vector2(x_start + (x_end - x_start) / 2, y_end)
    return Vector2(x_end, y_end)


def _axis(orientation: Vector2) -> str | None:
    if orientation.y != 0:
        return "vertical"
    if orientation.x != 0:
        return "horizontal"
    return None


def compute_elbow_points(
    start: Vector2,
    end: Vector2,
    starting_anchor: str,
    ending_anchor: str,
) -> tuple[Vector2, ...]:
    """Bend points of an axis-aligned elbow between ``start`` and ``end``.

    Each end leaves along its anchor's axis. A ``middle`` end follows the other
    end's axis; two ``middle`` ends route horizontally first.
    """
    start_axis = _axis(anchor_orientation(starting_anchor))
    end_axis = _axis(anchor_orientation(ending_anchor))
    start_axis = start_axis or end_axis or "horizontal"
    end_axis = end_axis or start_axis

    if start_axis == "vertical" and end_axis == "vertical":
        mid_y = start.y + (end.y - start.y) / 2
        return (Vector2(start.x, mid_y), Vector2(end.x, mid_y))
    if start_axis == "horizontal" and end_axis == "horizontal":
        mid_x = start.x + (end.x - start.x) / 2
        return (Vector2(mid_x, start.y), Vector2(mid_x, end.y))
    if start_axis == "vertical":
        return (Vector2(start.x, end.y),)
    return (Vector2(end.x, start.y),)


def compute_path_string(
    start: Vector2,
    end: Vector2,
    line_style: LineStyle,
    control_points: Sequence[Vector2] = (),
) -> str:
    head = f"M{format_point(start)}"
    if line_style == "curve":
        anchor1, anchor2 = control_points
        return f"{head} C{format_point(anchor1)} {format_point(anchor2)} {format_point(end)}"
    if line_style == "angle":
        bends = "".join(f" {format_point(point)}" for point in control_points)
        return f"{head}{bends} {format_point(end)}"
    return f"{head} {format_point(end)}"


def compute_label_dimensions(
    x_start: float,
    y_start: float,
    x_end: float,
    y_end: float,
) -> LabelBox:
    return LabelBox(
        label_width=abs(x_end - x_start),
        label_height=abs(y_end - y_start),
        x_label=min(x_start, x_end),
        y_label=min(y_start, y_end),
    )


def compute_style_string(
    stroke_color: str,
    stroke_width: float,
    stroke_dasharray: str | None = None,
) -> str:
    style = f"fill: none; stroke: {stroke_color}; stroke-width: {format_number(stroke_width)};"
    if stroke_dasharray:
        style += f" stroke-dasharray: {stroke_dasharray};"
    return style


def build_arrow_path(
    starting_point: Vector2,
    starting_anchor_orientation: str,
    ending_point: Vector2,
    ending_anchor_orientation: str,
    *,
    arrow_marker_id: str,
    stroke_color: str = DEFAULT_STROKE_COLOR,
    stroke_width: float = DEFAULT_STROKE_WIDTH,
    line_style: LineStyle = "curve",
    end_shape: EndShape | None = None,
    offset: float = 0.0,
    enable_start_marker: bool = False,
    disable_end_marker: bool = False,
    stroke_dasharray: str | None = None,
    arrow_label: str | None = None,
) -> ComputedPath:
    start = starting_point
    end = ending_point
    if offset:
        start = start.add(
            anchor_orientation(starting_anchor_orientation).multiply_by_scalar(offset)
        )
        end = end.add(anchor_orientation(ending_anchor_orientation).multiply_by_scalar(offset))

    trim_length = (end_shape or EndShape()).trim_length()
    trimmed_start = start
    trimmed_end = end
    if enable_start_marker:
        trimmed_start = compute_arrow_point_according_to_arrow_head(
            start.x,
            start.y,
            trim_length,
            stroke_width,
            starting_anchor_orientation,
            line_style,
            end.x,
            end.y,
        )
    if not disable_end_marker:
        trimmed_end = compute_arrow_point_according_to_arrow_head(
            end.x,
            end.y,
            trim_length,
            stroke_width,
            ending_anchor_orientation,
            line_style,
            start.x,
            start.y,
        )
    start, end = trimmed_start, trimmed_end

    control_points: tuple[Vector2, ...] = ()
    if line_style == "curve":
        control_points = (
            compute_starting_anchor_position(
                start.x, start.y, end.x, end.y, starting_anchor_orientation
            ),
            compute_ending_anchor_position(
                start.x, start.y, end.x, end.y, ending_anchor_orientation
            ),
        )
    elif line_style == "angle":
        control_points = compute_elbow_points(
            start, end, starting_anchor_orientation, ending_anchor_orientation
        )

    marker_ref = f"url(#{arrow_marker_id})"
    return ComputedPath(
        d=compute_path_string(start, end, line_style, control_points),
        marker_id=arrow_marker_id,
        style=compute_style_string(stroke_color, stroke_width, stroke_dasharray),
        line_style=line_style,
        start=start,
        end=end,
        points=(start, *control_points, end),
        marker_start=marker_ref if enable_start_marker else None,
        marker_end=None if disable_end_marker else marker_ref,
        stroke_dasharray=stroke_dasharray,
        label=arrow_label,
        label_box=(
            compute_label_dimensions(start.x, start.y, end.x, end.y)
            if arrow_label
            else None
        ),
    )
