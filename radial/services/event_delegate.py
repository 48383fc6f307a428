"""
Per-shape event delegate and the scene-wide collision sweep.

Each shape owns one ShapeEventDelegate. The delegate subscribes to the
drawing surface's pointer events, hit-tests them against the shape's
bounding box and turns them into semantic events (click, dragstart, drag,
dragend, mouseenter, ...). It only sees the shape through a narrow
interface:

    get_bounding_box(), get_bounding_rect(), get_position(),
    set_position(x, y), is_draggable(), is_ignored(), is_visible(),
    is_collision_enabled(), proximity_threshold(), collision_state,
    border_width

The collision sweep runs once per full redraw, immediately before painting.
"""

import logging
from typing import Any, Callable, Iterable, List, Optional, Tuple

from ..models.events import (
    ClickEvent, ClosestEvent, CollisionEvent, DragEvent, EventKind, PointerEvent,
)
from ..models.geometry import distance_to_rect
from .collision import DEFAULT_HIT_EPSILON, check_collision, is_point_in_shape
from .emitter import EventEmitter, Handler
from .frame_clock import FrameClock
from .surface import DrawingSurface


logger = logging.getLogger(__name__)


DEFAULT_THROTTLE_MS = 16.0


class ShapeEventDelegate:
    """
    Pointer routing, drag state machine and event dispatch for one shape.

    Drag protocol:
    - mousedown inside a draggable shape starts a drag (dragstart)
    - mousemove while dragging moves the shape by the pointer delta (drag),
      at most once per `throttle_ms` on the frame clock
    - mouseup, or the pointer leaving the surface, ends it (dragend)
    """

    def __init__(self, target: Any, surface: Optional[DrawingSurface],
                 clock: FrameClock, throttle_ms: float = DEFAULT_THROTTLE_MS,
                 hit_epsilon: float = DEFAULT_HIT_EPSILON):
        self._target = target
        self._surface = surface
        self._clock = clock
        self.throttle_ms = throttle_ms
        self.hit_epsilon = hit_epsilon
        self.events = EventEmitter()

        # Drag state
        self._is_dragging = False
        self._drag_start: Tuple[float, float] = (0.0, 0.0)
        self._initial_position: Tuple[float, float] = (0.0, 0.0)
        self._last_drag_update: Optional[float] = None
        self._pending_move: Optional[PointerEvent] = None

        self._is_hovering = False
        self._attached = False
        self._listeners = (
            (EventKind.CLICK, self._handle_click),
            (EventKind.MOUSEDOWN, self._handle_mousedown),
            (EventKind.MOUSEUP, self._handle_mouseup),
            (EventKind.MOUSEMOVE, self._handle_mousemove),
            (EventKind.MOUSELEAVE, self._handle_mouseleave),
        )
        self.attach()

    # -------------------------------------------------------------------------
    # Wiring
    # -------------------------------------------------------------------------

    def attach(self):
        """Subscribe to the surface's pointer events."""
        if self._attached or self._surface is None:
            return
        for kind, handler in self._listeners:
            self._surface.pointer.on(kind, handler)
        self._attached = True

    def detach(self):
        """Unsubscribe from the surface's pointer events."""
        if not self._attached:
            return
        for kind, handler in self._listeners:
            self._surface.pointer.off(kind, handler)
        self._attached = False

    @property
    def attached(self) -> bool:
        return self._attached

    # -------------------------------------------------------------------------
    # Subscriptions
    # -------------------------------------------------------------------------

    def on(self, event, handler: Handler):
        self.events.on(event, handler)

    def off(self, event, handler: Handler):
        self.events.off(event, handler)

    def emit(self, event, *args, **kwargs):
        self.events.emit(event, *args, **kwargs)

    def clear_events(self):
        self.events.clear()

    # -------------------------------------------------------------------------
    # Hit testing
    # -------------------------------------------------------------------------

    def is_point_in_shape(self, x: float, y: float, box=None) -> bool:
        """Hit test against the target's current bounding box."""
        if box is None:
            box = self._target.get_bounding_box()
        return is_point_in_shape(x, y, box, self.hit_epsilon)

    def _hits(self, event: PointerEvent) -> bool:
        if not self._target.is_visible():
            return False
        return self.is_point_in_shape(event.x, event.y)

    # -------------------------------------------------------------------------
    # Drag state
    # -------------------------------------------------------------------------

    @property
    def is_dragging(self) -> bool:
        return self._is_dragging

    def cancel_drag(self):
        """Abort the current drag without emitting dragend."""
        self._is_dragging = False
        self._pending_move = None

    def _start_dragging(self, event: PointerEvent):
        self._is_dragging = True
        self._drag_start = (event.x, event.y)
        self._initial_position = self._target.get_position()
        self._last_drag_update = None
        self._pending_move = None
        x, y = self._initial_position
        logger.debug(f"Drag started on {self._target!r} at ({x}, {y})")
        self.emit(EventKind.DRAGSTART, DragEvent(x=x, y=y, event=event))

    def _end_dragging(self, event: Optional[PointerEvent]):
        # Apply the last move the throttle dropped so the shape ends under the pointer
        if self._pending_move is not None:
            self._apply_drag(self._pending_move)
        self._is_dragging = False
        x, y = self._target.get_position()
        logger.debug(f"Drag ended on {self._target!r} at ({x}, {y})")
        self.emit(EventKind.DRAGEND, DragEvent(x=x, y=y, event=event))

    def _throttled_drag_update(self, event: PointerEvent):
        now = self._clock.now()
        if self._last_drag_update is not None and now - self._last_drag_update < self.throttle_ms:
            self._pending_move = event
            return
        self._last_drag_update = now
        self._apply_drag(event)

    def _apply_drag(self, event: PointerEvent):
        self._pending_move = None
        dx = event.x - self._drag_start[0]
        dy = event.y - self._drag_start[1]
        x0, y0 = self._initial_position
        self._target.set_position(x0 + dx, y0 + dy)
        x, y = self._target.get_position()
        self.emit(EventKind.DRAG, DragEvent(x=x, y=y, event=event))

    # -------------------------------------------------------------------------
    # Pointer handlers
    # -------------------------------------------------------------------------

    def _handle_mousedown(self, event: PointerEvent):
        if self._hits(event):
            if self._target.is_draggable():
                self._start_dragging(event)
            self.emit(EventKind.MOUSEDOWN, event)

    def _handle_mouseup(self, event: PointerEvent):
        if self._is_dragging:
            self._end_dragging(event)
        if self._hits(event):
            self.emit(EventKind.MOUSEUP, event)

    def _handle_click(self, event: PointerEvent):
        box = self._target.get_bounding_box()
        if self._target.is_visible() and self.is_point_in_shape(event.x, event.y, box):
            children = box.scene.get_children() if box.scene is not None else []
            self.emit(EventKind.CLICK, ClickEvent(children=children, event=event))

    def _handle_mousemove(self, event: PointerEvent):
        inside = self._hits(event)

        if inside and not self._is_hovering:
            self._is_hovering = True
            self.emit(EventKind.MOUSEENTER, event)
        elif not inside and self._is_hovering:
            self._is_hovering = False
            self.emit(EventKind.MOUSELEAVE, event)

        if inside:
            self.emit(EventKind.MOUSEMOVE, event)

        threshold = self._target.proximity_threshold()
        if threshold is not None:
            distance = distance_to_rect(event.x, event.y, self._target.get_bounding_rect())
            if distance <= threshold:
                self.emit(EventKind.CLOSEST, ClosestEvent(target=self._target, distance=distance, event=event))

        if self._is_dragging and self._target.is_draggable():
            self._throttled_drag_update(event)

    def _handle_mouseleave(self, event: PointerEvent):
        if self._is_hovering:
            self._is_hovering = False
            self.emit(EventKind.MOUSELEAVE, event)
        if self._is_dragging:
            self._end_dragging(event)


# =============================================================================
# Collision sweep
# =============================================================================

def run_collision_sweep(shapes: Iterable[Any],
                        notify: Optional[Callable[[EventKind, CollisionEvent], None]] = None
                        ) -> List[Tuple[EventKind, CollisionEvent]]:
    """
    Recompute collision state for every shape and emit collision events.

    Ignored shapes take part in neither side of a test. Each collision-enabled
    shape emits `collision` while it overlaps something, and `collisionend`
    once on the sweep where its last overlap disappears. `notify` receives
    each event right after the shape emits it. Shapes destroyed by a handler
    earlier in the same sweep emit nothing.

    Returns:
        The (kind, payload) pairs emitted, in emission order
    """
    shapes = list(shapes)

    for shape in shapes:
        shape.collision_state.begin_sweep()

    active = [s for s in shapes if not s.is_ignored()]
    boxes = [s.get_bounding_box() for s in active]
    for i in range(len(active)):
        for j in range(i + 1, len(active)):
            first, second = active[i], active[j]
            if check_collision(boxes[i], boxes[j], first.border_width, second.border_width):
                first.collision_state.add(second)
                second.collision_state.add(first)

    emitted: List[Tuple[EventKind, CollisionEvent]] = []

    def deliver(shape, kind: EventKind, payload: CollisionEvent):
        shape.emit(kind, payload)
        emitted.append((kind, payload))
        if notify is not None:
            notify(kind, payload)

    for shape in shapes:
        if shape.is_destroyed or not shape.is_collision_enabled():
            continue
        state = shape.collision_state
        if state.current_collisions:
            deliver(shape, EventKind.COLLISION,
                    CollisionEvent(target=shape, collisions=list(state.current_collisions)))
        if state.ended and not shape.is_destroyed:
            deliver(shape, EventKind.COLLISIONEND, CollisionEvent(target=shape, collisions=[]))
    return emitted
