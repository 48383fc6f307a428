"""
Geometry helpers for the scene graph.

Pure functions only - nothing here touches a drawing surface or a shape.
Used by:
- Hit testing (triangle area test, segment distance, polygon containment)
- Collision tests (clamping, extents)
- Bounding rects (shadow padding, rotated/scaled extents)
- Gradient fills (endpoints across the bounding diagonal)
"""

import math
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple


Point = Tuple[float, float]


# =============================================================================
# Data Classes
# =============================================================================

@dataclass
class BoundsRect:
    """Axis-aligned rectangle in surface coordinates."""
    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def center(self) -> Point:
        return (self.x + self.width / 2, self.y + self.height / 2)

    def contains(self, px: float, py: float) -> bool:
        """Inclusive containment test."""
        return self.x <= px <= self.right and self.y <= py <= self.bottom

    def inflated(self, left: float, top: float, right: float, bottom: float) -> 'BoundsRect':
        """Return a copy grown by the given amount on each side."""
        return BoundsRect(
            x=self.x - left,
            y=self.y - top,
            width=self.width + left + right,
            height=self.height + top + bottom,
        )

    def united(self, other: 'BoundsRect') -> 'BoundsRect':
        """Smallest rect covering both rects."""
        x = min(self.x, other.x)
        y = min(self.y, other.y)
        return BoundsRect(
            x=x,
            y=y,
            width=max(self.right, other.right) - x,
            height=max(self.bottom, other.bottom) - y,
        )


@dataclass
class ShadowPadding:
    """Extra room a drop shadow needs around a shape, per side."""
    top: float = 0.0
    right: float = 0.0
    bottom: float = 0.0
    left: float = 0.0

    @property
    def width(self) -> float:
        return self.left + self.right

    @property
    def height(self) -> float:
        return self.top + self.bottom


# =============================================================================
# Triangles and polygons
# =============================================================================

def calculate_area(x1: float, y1: float, x2: float, y2: float, x3: float, y3: float) -> float:
    """Unsigned area of the triangle (x1,y1), (x2,y2), (x3,y3)."""
    return abs((x1 * (y2 - y3) + x2 * (y3 - y1) + x3 * (y1 - y2)) / 2)


def triangle_vertices(x: float, y: float, radius: float) -> List[Point]:
    """
    Vertices of the isosceles triangle drawn for a Triangle shape.

    The apex sits at (x, y); the base runs from (x - radius, y + radius)
    to (x + radius, y + radius).
    """
    return [
        (x, y),
        (x + radius, y + radius),
        (x - radius, y + radius),
    ]


def point_in_triangle(px: float, py: float, vertices: Sequence[Point],
                      epsilon: float = 0.1) -> bool:
    """
    Area-sum containment test.

    A point is inside when the three sub-triangles it forms with the edges
    add up to the full triangle area. Degenerate triangles never contain
    anything.
    """
    (x1, y1), (x2, y2), (x3, y3) = vertices
    total = calculate_area(x1, y1, x2, y2, x3, y3)
    if total <= 0:
        return False
    area1 = calculate_area(px, py, x2, y2, x3, y3)
    area2 = calculate_area(x1, y1, px, py, x3, y3)
    area3 = calculate_area(x1, y1, x2, y2, px, py)
    return abs(total - (area1 + area2 + area3)) < epsilon


def regular_polygon_vertices(x: float, y: float, radius: float, sides: int) -> List[Point]:
    """Vertices of a regular polygon centered on (x, y), first vertex pointing up."""
    step = (math.pi * 2) / sides
    start = -math.pi / 2
    return [
        (x + radius * math.cos(start + i * step), y + radius * math.sin(start + i * step))
        for i in range(sides)
    ]


def point_in_polygon(px: float, py: float, vertices: Sequence[Point]) -> bool:
    """Even-odd ray casting. Polygons with fewer than three vertices contain nothing."""
    n = len(vertices)
    if n < 3:
        return False
    inside = False
    for i in range(n):
        x1, y1 = vertices[i]
        x2, y2 = vertices[(i + 1) % n]
        if (y1 > py) != (y2 > py):
            t = (py - y1) / (y2 - y1)
            if x1 + t * (x2 - x1) > px:
                inside = not inside
    return inside


# =============================================================================
# Segments and points
# =============================================================================

def point_segment_distance(px: float, py: float,
                           x1: float, y1: float, x2: float, y2: float) -> Optional[float]:
    """
    Distance from a point to the segment (x1,y1)-(x2,y2).

    Returns None for zero-length segments so callers can skip them.
    """
    dx = x2 - x1
    dy = y2 - y1
    length_sq = dx * dx + dy * dy
    if length_sq == 0:
        return None
    t = ((px - x1) * dx + (py - y1) * dy) / length_sq
    t = max(0.0, min(1.0, t))
    cx = x1 + t * dx
    cy = y1 + t * dy
    return math.hypot(px - cx, py - cy)


def clamp(value: float, min_val: float, max_val: float) -> float:
    """Clamp a value to a range."""
    return max(min_val, min(max_val, value))


def distance_to_rect(px: float, py: float, rect: BoundsRect) -> float:
    """Distance from a point to a rect; zero when the point is inside."""
    cx = clamp(px, rect.x, rect.right)
    cy = clamp(py, rect.y, rect.bottom)
    return math.hypot(px - cx, py - cy)


def points_extent(points: Iterable[Point]) -> BoundsRect:
    """Axis-aligned extent of a point sequence (empty rect for no points)."""
    pts = list(points)
    if not pts:
        return BoundsRect()
    xs = [p[0] for p in pts]
    ys = [p[1] for p in pts]
    return BoundsRect(x=min(xs), y=min(ys), width=max(xs) - min(xs), height=max(ys) - min(ys))


# =============================================================================
# Bounding rect adjustments
# =============================================================================

def calculate_shadow_padding(shadow_offset: Optional[Point] = None,
                             shadow_blur: float = 0.0) -> ShadowPadding:
    """
    Padding a shadow adds on each side.

    The offset pushes the shadow toward one side, so padding is asymmetric:
    left = max(0, blur - offset_x), right = max(0, blur + offset_x), and the
    same for top/bottom with offset_y.
    """
    offset_x, offset_y = shadow_offset or (0.0, 0.0)
    blur = shadow_blur or 0.0
    return ShadowPadding(
        top=max(0.0, blur - offset_y),
        right=max(0.0, blur + offset_x),
        bottom=max(0.0, blur + offset_y),
        left=max(0.0, blur - offset_x),
    )


def transformed_bounds(rect: BoundsRect, rotation: float = 0.0,
                       scale: Point = (1.0, 1.0)) -> BoundsRect:
    """
    Axis-aligned bounds of a rect scaled and rotated about its center.

    Args:
        rect: Untransformed rect
        rotation: Rotation in degrees
        scale: (sx, sy) scale factors

    Returns:
        The rotated AABB, same center as the input
    """
    sx, sy = scale
    if rotation == 0 and sx == 1 and sy == 1:
        return BoundsRect(rect.x, rect.y, rect.width, rect.height)

    cx, cy = rect.center
    w = rect.width * abs(sx)
    h = rect.height * abs(sy)
    theta = math.radians(rotation)
    cos_t = abs(math.cos(theta))
    sin_t = abs(math.sin(theta))
    new_w = cos_t * w + sin_t * h
    new_h = sin_t * w + cos_t * h
    return BoundsRect(x=cx - new_w / 2, y=cy - new_h / 2, width=new_w, height=new_h)


def gradient_endpoints(rect: BoundsRect, angle: float) -> Tuple[Point, Point]:
    """
    Start and end points of a linear gradient across a rect.

    The gradient runs through the rect center at `angle` degrees and spans
    the rect diagonal, so both corners along that direction are covered.
    """
    cx, cy = rect.center
    half = math.hypot(rect.width, rect.height) / 2
    theta = math.radians(angle)
    dx = math.cos(theta) * half
    dy = math.sin(theta) * half
    return (cx - dx, cy - dy), (cx + dx, cy + dy)
