"""
Shape configuration models.

Each shape variant carries a typed configuration record. The shared fields
(position, style, transform, interaction flags) live on ShapeConfig; each
variant adds its own size descriptor:

- CircleConfig, TriangleConfig, PolygonConfig: radius
- RectConfig, ImageConfig: width / height
- LineConfig: points

The recognized attribute keys of a shape are exactly the field names of its
config class, so attribute access stays a typed field access.
"""

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, ClassVar, FrozenSet, List, Optional, Sequence, Tuple

from .geometry import Point, clamp


# =============================================================================
# Enumerations
# =============================================================================

class ShapeKind(Enum):
    """Closed set of shape variants. Never changes after construction."""
    CIRCLE = "Circle"
    RECT = "Rect"
    TRIANGLE = "Triangle"
    LINE = "Line"
    POLYGON = "Polygon"
    IMAGE = "Image"
    PARTICLE = "Particle"


# Variants whose size descriptor is a radius around (x, y)
RADIUS_KINDS = frozenset({ShapeKind.CIRCLE, ShapeKind.TRIANGLE, ShapeKind.POLYGON})


# =============================================================================
# Helper Functions
# =============================================================================

def _to_pair(value: Any) -> Tuple[float, float]:
    """Accept (x, y) tuples, lists, or {'x': .., 'y': ..} dicts."""
    if isinstance(value, dict):
        return (float(value.get("x", 0.0)), float(value.get("y", 0.0)))
    x, y = value
    return (float(x), float(y))


def _to_points(value: Sequence[Any]) -> List[Point]:
    """
    Normalize a point sequence.

    Accepts either pairs [(x1, y1), (x2, y2), ...] or the flat form
    [x1, y1, x2, y2, ...]. A trailing odd coordinate in the flat form is
    dropped.
    """
    items = list(value)
    if items and not isinstance(items[0], (tuple, list, dict)):
        return [(float(items[i]), float(items[i + 1])) for i in range(0, len(items) - 1, 2)]
    return [_to_pair(p) for p in items]


# =============================================================================
# Data Classes
# =============================================================================

@dataclass
class Gradient:
    """Linear gradient fill across the shape's bounding diagonal."""
    from_color: str = "white"
    to_color: str = "black"
    angle: float = 0.0  # degrees, 0 = left to right


@dataclass
class ShapeConfig:
    """
    Fields shared by every shape variant.

    Attributes:
        x, y: Position (center or top-left depending on the variant)
        color: Fill color
        border_width, border_color, border_opacity: Optional outline
        shadow_color, shadow_blur, shadow_offset: Optional drop shadow
        gradient: Optional linear gradient replacing the solid fill
        opacity: Global alpha in [0, 1]
        rotation: Degrees, applied around the shape center
        scale: (sx, sy), applied around the shape center
        visible: Hidden shapes are not painted
        draggable: Pointer drag moves the shape
        ignore: Excluded from scene-level hit tests and collision sweeps
        collision: Emit collision / collisionend events
        closest, closest_threshold: Emit proximity events near the pointer
    """
    kind: ClassVar[Optional[ShapeKind]] = None

    x: float = 0.0
    y: float = 0.0
    color: str = "black"
    border_width: float = 0.0
    border_color: Optional[str] = None
    border_opacity: float = 1.0
    shadow_color: Optional[str] = None
    shadow_blur: float = 0.0
    shadow_offset: Tuple[float, float] = (0.0, 0.0)
    gradient: Optional[Gradient] = None
    opacity: float = 1.0
    rotation: float = 0.0
    scale: Tuple[float, float] = (1.0, 1.0)
    visible: bool = True
    draggable: bool = False
    ignore: bool = False
    collision: bool = False
    closest: bool = False
    closest_threshold: float = 0.0

    def __post_init__(self):
        """Normalize every field through coerce()."""
        for f in fields(self):
            setattr(self, f.name, self.coerce(f.name, getattr(self, f.name)))

    @classmethod
    def attr_names(cls) -> FrozenSet[str]:
        """The attribute keys a shape of this variant recognizes."""
        return frozenset(f.name for f in fields(cls))

    def coerce(self, name: str, value: Any) -> Any:
        """Normalize a value before it is stored under `name`."""
        if name in ("opacity", "border_opacity"):
            return clamp(float(value), 0.0, 1.0)
        if name in ("shadow_offset", "scale"):
            return _to_pair(value)
        if name == "gradient" and isinstance(value, dict):
            return Gradient(**value)
        return value

    @property
    def has_border(self) -> bool:
        return bool(self.border_width) and self.border_color is not None

    @property
    def has_shadow(self) -> bool:
        return self.shadow_color is not None


@dataclass
class CircleConfig(ShapeConfig):
    """Circle centered on (x, y)."""
    kind: ClassVar[Optional[ShapeKind]] = ShapeKind.CIRCLE
    radius: float = 0.0


@dataclass
class RectConfig(ShapeConfig):
    """Rectangle with its top-left corner at (x, y)."""
    kind: ClassVar[Optional[ShapeKind]] = ShapeKind.RECT
    width: float = 0.0
    height: float = 0.0
    border_radius: float = 0.0


@dataclass
class TriangleConfig(ShapeConfig):
    """Isosceles triangle with its apex at (x, y) and a base 2*radius wide."""
    kind: ClassVar[Optional[ShapeKind]] = ShapeKind.TRIANGLE
    radius: float = 0.0


@dataclass
class LineConfig(ShapeConfig):
    """Open polyline through absolute `points`; stroked with `color`."""
    kind: ClassVar[Optional[ShapeKind]] = ShapeKind.LINE
    points: List[Point] = field(default_factory=list)
    line_width: float = 1.0
    line_cap: Optional[str] = None
    line_join: Optional[str] = None
    dash: Optional[List[float]] = None

    def coerce(self, name: str, value: Any) -> Any:
        if name == "points":
            return _to_points(value)
        if name == "dash" and value is not None:
            return [float(v) for v in value]
        return super().coerce(name, value)


@dataclass
class PolygonConfig(ShapeConfig):
    """Regular polygon centered on (x, y)."""
    kind: ClassVar[Optional[ShapeKind]] = ShapeKind.POLYGON
    radius: float = 0.0
    sides: int = 3

    def coerce(self, name: str, value: Any) -> Any:
        if name == "sides":
            return max(3, int(value))
        return super().coerce(name, value)


@dataclass
class ImageConfig(ShapeConfig):
    """
    Image drawn into the rect (x, y, width, height).

    `image` is an already-decoded handle understood by the drawing surface
    (a QImage for the Qt surface). Nothing is drawn while it is None.
    """
    kind: ClassVar[Optional[ShapeKind]] = ShapeKind.IMAGE
    width: float = 0.0
    height: float = 0.0
    image: Any = None


@dataclass
class ParticleConfig(ShapeConfig):
    """
    Particle emitter anchored at (x, y).

    Emission runs outside the engine, so the variant has no geometry and no
    draw hook; drawing or hit testing one raises NotImplementedError.
    """
    kind: ClassVar[Optional[ShapeKind]] = ShapeKind.PARTICLE
    count: int = 0
    lifetime_ms: float = 0.0


@dataclass
class BoundingBox:
    """
    Raw variant geometry plus a non-owning reference to the owning scene.

    Only the fields of the variant's size descriptor are set.
    """
    kind: ShapeKind
    x: float
    y: float
    radius: Optional[float] = None
    width: Optional[float] = None
    height: Optional[float] = None
    points: Optional[List[Point]] = None
    line_width: Optional[float] = None
    sides: Optional[int] = None
    scene: Any = field(default=None, repr=False, compare=False)


@dataclass
class CollisionState:
    """
    Per-shape collision bookkeeping, recomputed on every sweep.

    current_collisions holds shapes, deduplicated by identity.
    """
    is_colliding: bool = False
    previous_collision: bool = False
    current_collisions: List[Any] = field(default_factory=list)

    def begin_sweep(self):
        """Remember the last result and clear the current one."""
        self.previous_collision = self.is_colliding
        self.is_colliding = False
        self.current_collisions = []

    def add(self, other: Any) -> bool:
        """Record a collision with `other`. Returns False if already recorded."""
        if any(existing is other for existing in self.current_collisions):
            return False
        self.current_collisions.append(other)
        self.is_colliding = True
        return True

    @property
    def ended(self) -> bool:
        """True when this sweep ended a collision seen by the previous one."""
        return self.previous_collision and not self.is_colliding
