"""
Models package.

Plain data used across the engine:
- Geometry (BoundsRect, ShadowPadding and pure geometry helpers)
- Shape configuration records (ShapeConfig and one subclass per variant)
- Event kinds and payloads
"""

from .geometry import (
    Point,
    BoundsRect,
    ShadowPadding,
    calculate_area,
    triangle_vertices,
    point_in_triangle,
    regular_polygon_vertices,
    point_in_polygon,
    point_segment_distance,
    distance_to_rect,
    points_extent,
    calculate_shadow_padding,
    transformed_bounds,
    gradient_endpoints,
)
from .shape_config import (
    ShapeKind,
    RADIUS_KINDS,
    Gradient,
    ShapeConfig,
    CircleConfig,
    RectConfig,
    TriangleConfig,
    LineConfig,
    PolygonConfig,
    ImageConfig,
    ParticleConfig,
    BoundingBox,
    CollisionState,
)
from .events import (
    EventKind,
    POINTER_KINDS,
    PointerEvent,
    DragEvent,
    ClickEvent,
    CollisionEvent,
    ClosestEvent,
    TransformEvent,
)
