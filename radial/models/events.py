"""
Event models.

EventKind is the closed set of events shapes, scenes and transformers emit.
PointerEvent is the raw input delivered by a drawing surface; the other
dataclasses are the payloads of semantic events.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional


class EventKind(Enum):
    """Every event name understood by an EventEmitter."""
    # Raw pointer input
    CLICK = "click"
    MOUSEDOWN = "mousedown"
    MOUSEUP = "mouseup"
    MOUSEMOVE = "mousemove"
    MOUSELEAVE = "mouseleave"
    WHEEL = "wheel"
    # Derived pointer events
    MOUSEENTER = "mouseenter"
    DRAGSTART = "dragstart"
    DRAG = "drag"
    DRAGEND = "dragend"
    CLOSEST = "closest"
    # Collision sweep
    COLLISION = "collision"
    COLLISIONEND = "collisionend"
    # Transformer
    TRANSFORM = "transform"


# Kinds a drawing surface may deliver as raw input
POINTER_KINDS = (
    EventKind.CLICK,
    EventKind.MOUSEDOWN,
    EventKind.MOUSEUP,
    EventKind.MOUSEMOVE,
    EventKind.MOUSELEAVE,
    EventKind.WHEEL,
)


@dataclass
class PointerEvent:
    """
    Pointer input in surface-local coordinates.

    Attributes:
        kind: One of POINTER_KINDS
        x, y: Position relative to the surface's top-left corner
        button: 0 = primary, 1 = middle, 2 = secondary
        delta_x, delta_y: Wheel deltas (wheel events only)
        client_x, client_y: Position in window/screen coordinates, if known
        timestamp: Milliseconds on the frame clock, if known
        target: Shape under the pointer (set on scene-level events)
        original: Toolkit event this one was translated from
    """
    kind: EventKind
    x: float = 0.0
    y: float = 0.0
    button: int = 0
    delta_x: float = 0.0
    delta_y: float = 0.0
    client_x: Optional[float] = None
    client_y: Optional[float] = None
    timestamp: Optional[float] = None
    target: Any = None
    original: Any = field(default=None, repr=False, compare=False)


@dataclass
class DragEvent:
    """Payload of dragstart / drag / dragend: the shape position after the step."""
    x: float
    y: float
    event: Optional[PointerEvent] = None


@dataclass
class ClickEvent:
    """Payload of a shape click. `children` lists every shape in the scene."""
    children: List[Any]
    event: PointerEvent


@dataclass
class CollisionEvent:
    """Payload of collision / collisionend."""
    target: Any
    collisions: List[Any] = field(default_factory=list)


@dataclass
class ClosestEvent:
    """Payload of a proximity event."""
    target: Any
    distance: float
    event: PointerEvent


@dataclass
class TransformEvent:
    """
    Payload of a transformer resize.

    Attributes:
        rect: Border rect after the resize
        scale_x, scale_y: New size relative to the size at resize start
        anchor: Name of the anchor being dragged
        nodes: The selected shapes
    """
    rect: Any
    scale_x: float
    scale_y: float
    anchor: str
    nodes: List[Any] = field(default_factory=list)
