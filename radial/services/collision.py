"""
Hit testing and pairwise collision tests.

Both work on BoundingBox records only, so they are pure: calling them never
mutates a shape.

Collision tests ignore rotation and scale. Radius-based variants collide as
circles, everything else as axis-aligned rects.
"""

import math
from typing import Tuple

from ..models.geometry import (
    BoundsRect, clamp, point_in_polygon, point_in_triangle, point_segment_distance,
    points_extent, regular_polygon_vertices, triangle_vertices,
)
from ..models.shape_config import RADIUS_KINDS, BoundingBox, ShapeKind


DEFAULT_HIT_EPSILON = 0.1


# =============================================================================
# Hit testing
# =============================================================================

def is_point_in_shape(x: float, y: float, box: BoundingBox,
                      epsilon: float = DEFAULT_HIT_EPSILON) -> bool:
    """
    Check whether (x, y) lies inside the shape described by `box`.

    Args:
        x, y: Point in surface coordinates
        box: Bounding box of the shape
        epsilon: Tolerance of the triangle area test

    Returns:
        True on a hit. Degenerate geometry and unknown variants never hit.
    """
    kind = box.kind

    if kind in (ShapeKind.RECT, ShapeKind.IMAGE):
        width = box.width or 0.0
        height = box.height or 0.0
        return box.x <= x <= box.x + width and box.y <= y <= box.y + height

    if kind == ShapeKind.CIRCLE:
        radius = box.radius or 0.0
        if radius <= 0:
            return False
        dx = x - box.x
        dy = y - box.y
        return dx * dx + dy * dy <= radius * radius

    if kind == ShapeKind.TRIANGLE:
        vertices = triangle_vertices(box.x, box.y, box.radius or 0.0)
        return point_in_triangle(x, y, vertices, epsilon)

    if kind == ShapeKind.POLYGON:
        if not box.radius:
            return False
        vertices = regular_polygon_vertices(box.x, box.y, box.radius, box.sides or 3)
        return point_in_polygon(x, y, vertices)

    if kind == ShapeKind.LINE:
        return _is_point_on_polyline(x, y, box)

    return False


def _is_point_on_polyline(x: float, y: float, box: BoundingBox) -> bool:
    """Open polyline test; zero-length segments are skipped."""
    points = box.points or []
    half_width = (box.line_width or 0.0) / 2
    for (x1, y1), (x2, y2) in zip(points, points[1:]):
        distance = point_segment_distance(x, y, x1, y1, x2, y2)
        if distance is None:
            continue
        if distance <= half_width:
            return True
    return False


# =============================================================================
# Collision tests
# =============================================================================

def _collision_rect(box: BoundingBox, border_width: float) -> BoundsRect:
    """Rect used for collisions, grown by half the border on every side."""
    half = border_width / 2
    if box.kind == ShapeKind.LINE:
        base = points_extent(box.points or [])
    else:
        base = BoundsRect(box.x, box.y, box.width or 0.0, box.height or 0.0)
    return base.inflated(half, half, half, half)


def _collision_circle(box: BoundingBox, border_width: float) -> Tuple[float, float, float]:
    """(center_x, center_y, radius) used for collisions."""
    return box.x, box.y, (box.radius or 0.0) + border_width / 2


def circles_collide(c1: Tuple[float, float, float], c2: Tuple[float, float, float]) -> bool:
    x1, y1, r1 = c1
    x2, y2, r2 = c2
    return math.hypot(x1 - x2, y1 - y2) <= r1 + r2


def circle_rect_collide(circle: Tuple[float, float, float], rect: BoundsRect) -> bool:
    """Closest point on the rect to the circle center lies within the radius."""
    cx, cy, radius = circle
    closest_x = clamp(cx, rect.x, rect.right)
    closest_y = clamp(cy, rect.y, rect.bottom)
    dx = cx - closest_x
    dy = cy - closest_y
    return dx * dx + dy * dy <= radius * radius


def rects_collide(r1: BoundsRect, r2: BoundsRect) -> bool:
    """Axis-aligned overlap; touching edges count as a collision."""
    return not (
        r1.right < r2.x or
        r1.x > r2.right or
        r1.bottom < r2.y or
        r1.y > r2.bottom
    )


def check_collision(box1: BoundingBox, box2: BoundingBox,
                    border1: float = 0.0, border2: float = 0.0) -> bool:
    """
    Check whether two shapes overlap.

    Args:
        box1, box2: Bounding boxes of the two shapes
        border1, border2: Border widths; half of each is added on every side

    Returns:
        True if the shapes overlap
    """
    radius1 = box1.kind in RADIUS_KINDS
    radius2 = box2.kind in RADIUS_KINDS

    if radius1 and radius2:
        return circles_collide(_collision_circle(box1, border1), _collision_circle(box2, border2))

    if radius1:
        return circle_rect_collide(_collision_circle(box1, border1), _collision_rect(box2, border2))

    if radius2:
        return circle_rect_collide(_collision_circle(box2, border2), _collision_rect(box1, border1))

    return rects_collide(_collision_rect(box1, border1), _collision_rect(box2, border2))
