"""
Variant geometry and draw hooks.

Shapes dispatch by ShapeKind to the functions registered here instead of
overriding methods. Each variant provides:
- a draw hook issuing path/fill calls on the drawing surface
- a bounding box builder
- raw extents (untransformed, without border or shadow)

A config whose kind has no entry is a contract violation and raises
NotImplementedError.
"""

import math
from typing import Any, Callable, Dict

from ..models.geometry import (
    BoundsRect, points_extent, regular_polygon_vertices, triangle_vertices,
)
from ..models.shape_config import (
    BoundingBox, CircleConfig, ImageConfig, LineConfig, PolygonConfig, RectConfig,
    ShapeConfig, ShapeKind, TriangleConfig,
)
from ..services.surface import DrawingSurface


# =============================================================================
# Draw hooks
# =============================================================================
# Each hook returns True when it painted something. Returning False (an image
# without pixels) keeps the shape out of the scene until a later draw succeeds.

def draw_circle(surface: DrawingSurface, config: CircleConfig) -> bool:
    surface.begin_path()
    surface.arc(config.x, config.y, config.radius, 0, math.pi * 2)
    surface.fill()
    surface.close_path()
    return True


def draw_rect(surface: DrawingSurface, config: RectConfig) -> bool:
    x, y, width, height = config.x, config.y, config.width, config.height
    radius = min(config.border_radius, width / 2, height / 2) if config.border_radius else 0

    surface.begin_path()
    if radius > 0:
        surface.move_to(x + radius, y)
        surface.arc_to(x + width, y, x + width, y + height, radius)
        surface.arc_to(x + width, y + height, x, y + height, radius)
        surface.arc_to(x, y + height, x, y, radius)
        surface.arc_to(x, y, x + width, y, radius)
        surface.close_path()
    else:
        surface.rect(x, y, width, height)
    surface.fill()
    return True


def draw_triangle(surface: DrawingSurface, config: TriangleConfig) -> bool:
    (x1, y1), (x2, y2), (x3, y3) = triangle_vertices(config.x, config.y, config.radius)
    surface.begin_path()
    surface.move_to(x1, y1)
    surface.line_to(x2, y2)
    surface.line_to(x3, y3)
    surface.close_path()
    surface.fill()
    return True


def draw_line(surface: DrawingSurface, config: LineConfig) -> bool:
    if not config.points:
        return True

    surface.save()
    surface.set_line_width(config.line_width)
    if config.line_cap:
        surface.set_line_cap(config.line_cap)
    if config.line_join:
        surface.set_line_join(config.line_join)
    if config.dash:
        surface.set_line_dash(config.dash)
    surface.set_stroke_style(config.color)

    surface.begin_path()
    first_x, first_y = config.points[0]
    surface.move_to(first_x, first_y)
    for x, y in config.points[1:]:
        surface.line_to(x, y)
    surface.stroke()
    surface.restore()
    return True


def draw_polygon(surface: DrawingSurface, config: PolygonConfig) -> bool:
    vertices = regular_polygon_vertices(config.x, config.y, config.radius, config.sides)
    surface.begin_path()
    first_x, first_y = vertices[0]
    surface.move_to(first_x, first_y)
    for x, y in vertices[1:]:
        surface.line_to(x, y)
    surface.close_path()
    surface.fill()
    return True


def draw_image(surface: DrawingSurface, config: ImageConfig) -> bool:
    if config.image is None:
        return False
    # Rect path so a configured border strokes around the image
    surface.begin_path()
    surface.rect(config.x, config.y, config.width, config.height)
    surface.draw_image(config.image, config.x, config.y, config.width, config.height)
    return True


DRAW_HOOKS: Dict[ShapeKind, Callable[[DrawingSurface, Any], bool]] = {
    ShapeKind.CIRCLE: draw_circle,
    ShapeKind.RECT: draw_rect,
    ShapeKind.TRIANGLE: draw_triangle,
    ShapeKind.LINE: draw_line,
    ShapeKind.POLYGON: draw_polygon,
    ShapeKind.IMAGE: draw_image,
}


# =============================================================================
# Bounding geometry
# =============================================================================

def _radius_box(config, scene) -> BoundingBox:
    return BoundingBox(kind=config.kind, x=config.x, y=config.y, radius=config.radius, scene=scene)


def _size_box(config, scene) -> BoundingBox:
    return BoundingBox(kind=config.kind, x=config.x, y=config.y,
                       width=config.width, height=config.height, scene=scene)


def _line_box(config: LineConfig, scene) -> BoundingBox:
    return BoundingBox(kind=config.kind, x=config.x, y=config.y, points=list(config.points),
                       line_width=config.line_width, scene=scene)


def _polygon_box(config: PolygonConfig, scene) -> BoundingBox:
    return BoundingBox(kind=config.kind, x=config.x, y=config.y, radius=config.radius,
                       sides=config.sides, scene=scene)


BOX_BUILDERS: Dict[ShapeKind, Callable[[Any, Any], BoundingBox]] = {
    ShapeKind.CIRCLE: _radius_box,
    ShapeKind.RECT: _size_box,
    ShapeKind.TRIANGLE: _radius_box,
    ShapeKind.LINE: _line_box,
    ShapeKind.POLYGON: _polygon_box,
    ShapeKind.IMAGE: _size_box,
}


def _require(registry: Dict[ShapeKind, Any], config: ShapeConfig, method: str):
    hook = registry.get(config.kind)
    if hook is None:
        name = config.kind.value if config.kind else type(config).__name__
        raise NotImplementedError(f"Method '{method}' must be implemented for {name}.")
    return hook


def draw_shape(surface: DrawingSurface, config: ShapeConfig) -> bool:
    """Run the variant's draw hook. Returns False when nothing was painted."""
    return _require(DRAW_HOOKS, config, "draw()")(surface, config)


def build_bounding_box(config: ShapeConfig, scene: Any) -> BoundingBox:
    """Build the variant's bounding box with a back-reference to `scene`."""
    return _require(BOX_BUILDERS, config, "get_bounding_box()")(config, scene)


def shape_extents(box: BoundingBox) -> BoundsRect:
    """Untransformed axis-aligned extents of a bounding box."""
    if box.kind == ShapeKind.TRIANGLE:
        r = box.radius or 0.0
        return BoundsRect(box.x - r, box.y, 2 * r, r)
    if box.radius is not None:
        r = box.radius
        return BoundsRect(box.x - r, box.y - r, 2 * r, 2 * r)
    if box.kind == ShapeKind.LINE:
        half = (box.line_width or 0.0) / 2
        return points_extent(box.points or []).inflated(half, half, half, half)
    return BoundsRect(box.x, box.y, box.width or 0.0, box.height or 0.0)
