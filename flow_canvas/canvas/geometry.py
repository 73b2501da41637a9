"""Node card geometry: sizes, socket anchors, curves and hit regions in world space."""
import math
from typing import List, Tuple

Point = Tuple[float, float]

CARD_WIDTH = 280
CARD_HEIGHT_EXPANDED = 250
CARD_HEIGHT_COLLAPSED = 100

# anchor y offset from the card's top edge
ANCHOR_OFFSET_EXPANDED = 40
ANCHOR_OFFSET_COLLAPSED = 20

# world point that "locate" brings to the viewport center
LOCATE_OFFSET = (140, 100)

SOCKET_RADIUS = 8
UNPLUG_RADIUS = 6
CURVE_HIT_WIDTH = 15

# quick-edit and collapse buttons sit on the top border, right aligned
CONTROL_SIZE = 24
CONTROL_GAP = 8
CONTROL_PADDING = 8
CONTROL_TOP = -12

AUTO_LAYOUT_COLUMNS = 3
AUTO_LAYOUT_SPACING = (350, 250)
AUTO_LAYOUT_MARGIN = 100


def card_height(collapsed: bool) -> float:
    return CARD_HEIGHT_COLLAPSED if collapsed else CARD_HEIGHT_EXPANDED


def anchor_offset(collapsed: bool) -> float:
    return ANCHOR_OFFSET_COLLAPSED if collapsed else ANCHOR_OFFSET_EXPANDED


def input_anchor(position, collapsed: bool) -> Point:
    return position.x, position.y + anchor_offset(collapsed)


def output_anchor(position, collapsed: bool) -> Point:
    return position.x + CARD_WIDTH, position.y + anchor_offset(collapsed)


def grid_placement(index: int) -> Point:
    """Deterministic slot for the index-th node of the list"""
    column = index % AUTO_LAYOUT_COLUMNS
    row = index // AUTO_LAYOUT_COLUMNS
    return (
        AUTO_LAYOUT_MARGIN + column * AUTO_LAYOUT_SPACING[0],
        AUTO_LAYOUT_MARGIN + row * AUTO_LAYOUT_SPACING[1],
    )


def control_boxes(position) -> List[Tuple[str, float, float, float, float]]:
    """(name, left, top, right, bottom) for the card's button row"""
    right = position.x + CARD_WIDTH - CONTROL_PADDING
    top = position.y + CONTROL_TOP
    collapse_left = right - CONTROL_SIZE
    edit_left = collapse_left - CONTROL_GAP - CONTROL_SIZE
    return [
        ("edit", edit_left, top, edit_left + CONTROL_SIZE, top + CONTROL_SIZE),
        ("collapse", collapse_left, top, right, top + CONTROL_SIZE),
    ]


def flow_curve(start: Point, end: Point) -> Tuple[Point, Point, Point, Point]:
    """Horizontal S-curve: both control points on the midpoint x, each at its endpoint's y"""
    mid_x = start[0] + (end[0] - start[0]) / 2
    return start, (mid_x, start[1]), (mid_x, end[1]), end


def curve_path(start: Point, end: Point) -> str:
    p0, p1, p2, p3 = flow_curve(start, end)
    return f"M {p0[0]} {p0[1]} C {p1[0]} {p1[1]}, {p2[0]} {p2[1]}, {p3[0]} {p3[1]}"


def bezier_point(curve, t: float) -> Point:
    p0, p1, p2, p3 = curve
    u = 1 - t
    a, b, c, d = u ** 3, 3 * u * u * t, 3 * u * t * t, t ** 3
    return (
        a * p0[0] + b * p1[0] + c * p2[0] + d * p3[0],
        a * p0[1] + b * p1[1] + c * p2[1] + d * p3[1],
    )


def distance_to_curve(point: Point, start: Point, end: Point, samples: int = 48) -> float:
    """Approximate distance by sampling the curve"""
    curve = flow_curve(start, end)
    return min(
        math.dist(point, bezier_point(curve, i / samples))
        for i in range(samples + 1)
    )


def within(point: Point, center: Point, radius: float) -> bool:
    return math.dist(point, center) <= radius


def inside_box(point: Point, left: float, top: float, right: float, bottom: float) -> bool:
    return left <= point[0] <= right and top <= point[1] <= bottom
