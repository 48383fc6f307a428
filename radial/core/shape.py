"""
Shape base.

A Shape owns its configuration record, its dirty flag, its collision state
and an event delegate. Geometry and drawing are dispatched by the config's
ShapeKind (see drawing.py); the Shape itself is the same class for every
variant.

Redraw contract:
- any attribute change marks the shape dirty and requests a frame
- at most one frame callback is pending per shape
- when it fires and the shape is still dirty, the whole scene is cleared
  and repainted in z-order (there is no partial invalidation)
"""

import itertools
import logging
import math
from typing import Any, Dict, Optional, Tuple

from ..models.geometry import (
    BoundsRect, calculate_shadow_padding, gradient_endpoints, transformed_bounds,
)
from ..models.shape_config import RADIUS_KINDS, BoundingBox, CollisionState, ShapeConfig, ShapeKind
from ..services.event_delegate import ShapeEventDelegate
from .drawing import build_bounding_box, draw_shape, shape_extents


logger = logging.getLogger(__name__)

_shape_ids = itertools.count(1)


class Shape:
    """
    A drawable scene entity.

    Shapes are created through the Scene factories (scene.circle(...),
    scene.rect(...), ...), which render them once; the first successful
    draw registers the shape in the scene's paint order.
    """

    def __init__(self, scene: 'Scene', config: ShapeConfig):
        self.id = next(_shape_ids)
        self.config = config
        self.layer = None
        self.collision_state = CollisionState()

        self._scene = scene
        self._dirty = True
        self._initialized = False
        self._destroyed = False
        self._pending_frame: Optional[int] = None
        self._bounce_frame: Optional[int] = None

        render_settings = scene.settings.render
        self._events = ShapeEventDelegate(
            self,
            scene.surface,
            scene.clock,
            throttle_ms=render_settings.drag_throttle_ms,
            hit_epsilon=render_settings.hit_epsilon,
        )

    def __repr__(self) -> str:
        name = self.kind.value if self.kind else type(self.config).__name__
        return f"<{name}#{self.id}>"

    # -------------------------------------------------------------------------
    # Identity and state
    # -------------------------------------------------------------------------

    @property
    def kind(self) -> Optional[ShapeKind]:
        return self.config.kind

    @property
    def is_radius(self) -> bool:
        """True for variants sized by a radius around (x, y)."""
        return self.kind in RADIUS_KINDS

    @property
    def scene(self) -> 'Scene':
        return self._scene

    @property
    def is_dirty(self) -> bool:
        return self._dirty

    @property
    def is_destroyed(self) -> bool:
        return self._destroyed

    @property
    def has_pending_redraw(self) -> bool:
        return self._pending_frame is not None

    @property
    def border_width(self) -> float:
        return self.config.border_width or 0.0

    def mark_dirty(self):
        """Force the next render() to repaint this shape."""
        self._dirty = True

    def get_event_delegate(self) -> ShapeEventDelegate:
        return self._events

    # -------------------------------------------------------------------------
    # Attributes
    # -------------------------------------------------------------------------

    def _check_attr(self, name: str):
        if name not in self.config.attr_names():
            raise KeyError(f"Unknown attribute '{name}' for {self!r}")

    def get_attr(self, name: str) -> Any:
        """
        Read an attribute.

        Raises:
            KeyError: if `name` is not a field of this shape's config
        """
        self._check_attr(name)
        return getattr(self.config, name)

    def _assign(self, name: str, value: Any) -> bool:
        """Store a value; returns False when it equals the current one."""
        self._check_attr(name)
        value = self.config.coerce(name, value)
        if getattr(self.config, name) == value:
            return False
        setattr(self.config, name, value)
        return True

    def set_attr(self, name: str, value: Any):
        """Set an attribute; equal values are a no-op (no dirty flag, no redraw)."""
        if self._assign(name, value):
            self._dirty = True
            self.request_redraw()

    def set_attrs(self, values: Dict[str, Any]):
        """Set several attributes, scheduling at most one redraw."""
        changed = [self._assign(name, value) for name, value in values.items()]
        if any(changed):
            self._dirty = True
            self.request_redraw()

    def get_position(self) -> Tuple[float, float]:
        return (self.config.x, self.config.y)

    def set_position(self, x: float, y: float):
        self.set_attrs({"x": x, "y": y})

    # -------------------------------------------------------------------------
    # Delegate interface
    # -------------------------------------------------------------------------

    def is_draggable(self) -> bool:
        return self.config.draggable

    def set_draggable(self, draggable: bool):
        """Toggle dragging. The flag is not painted, so no redraw is scheduled."""
        self._assign("draggable", bool(draggable))

    def is_ignored(self) -> bool:
        return self.config.ignore

    def is_visible(self) -> bool:
        """Visible itself and not hidden by its layer."""
        if not self.config.visible:
            return False
        return self.layer is None or self.layer.visible

    def is_collision_enabled(self) -> bool:
        return self.config.collision

    def proximity_threshold(self) -> Optional[float]:
        """Distance within which `closest` events fire, or None when disabled."""
        return self.config.closest_threshold if self.config.closest else None

    # -------------------------------------------------------------------------
    # Geometry
    # -------------------------------------------------------------------------

    def get_bounding_box(self) -> BoundingBox:
        """
        Variant geometry plus a back-reference to the owning scene.

        Raises:
            NotImplementedError: if the variant has no geometry
        """
        return build_bounding_box(self.config, self._scene)

    def get_bounding_rect(self) -> BoundsRect:
        """
        Axis-aligned rect covering everything the shape paints.

        Raw extents, grown by half the border width and by the shadow
        padding, then scaled and rotated about their center.
        """
        config = self.config
        rect = shape_extents(self.get_bounding_box())

        half = self.border_width / 2
        rect = rect.inflated(half, half, half, half)

        if config.has_shadow:
            pad = calculate_shadow_padding(config.shadow_offset, config.shadow_blur)
            rect = rect.inflated(pad.left, pad.top, pad.right, pad.bottom)

        return transformed_bounds(rect, config.rotation, config.scale)

    # -------------------------------------------------------------------------
    # Rendering
    # -------------------------------------------------------------------------

    def _fill_style(self, surface) -> Any:
        gradient = self.config.gradient
        if gradient is None:
            return self.config.color
        rect = shape_extents(self.get_bounding_box())
        (x0, y0), (x1, y1) = gradient_endpoints(rect, gradient.angle)
        return surface.create_linear_gradient(
            x0, y0, x1, y1, [(0.0, gradient.from_color), (1.0, gradient.to_color)]
        )

    def _apply_transform(self, surface):
        config = self.config
        sx, sy = config.scale
        if config.rotation == 0 and sx == 1 and sy == 1:
            return
        cx, cy = shape_extents(self.get_bounding_box()).center
        surface.translate(cx, cy)
        surface.rotate(math.radians(config.rotation))
        surface.scale(sx, sy)
        surface.translate(-cx, -cy)

    def render(self) -> bool:
        """
        Paint the shape if it is dirty and visible.

        Returns:
            True if the shape was painted (its dirty flag is now clear)
        """
        if self._destroyed or not self._dirty or not self.is_visible():
            return False
        surface = self._scene.surface
        if surface is None:
            return False

        config = self.config
        alpha = config.opacity * (self.layer.opacity if self.layer is not None else 1.0)

        surface.save()
        try:
            surface.set_shadow(None)
            if config.has_shadow:
                offset_x, offset_y = config.shadow_offset
                surface.set_shadow(config.shadow_color, config.shadow_blur, offset_x, offset_y)

            if config.has_border:
                surface.set_line_width(config.border_width)
                surface.set_stroke_style(config.border_color)

            surface.set_fill_style(self._fill_style(surface))
            surface.set_global_alpha(alpha)
            self._apply_transform(surface)

            drawn = self.draw()

            if drawn and config.has_border:
                surface.set_global_alpha(alpha * config.border_opacity)
                surface.stroke()
        finally:
            surface.restore()

        if drawn:
            self._dirty = False
        return drawn

    def draw(self) -> bool:
        """
        Issue the variant's path/fill calls.

        The first successful draw registers the shape in the scene.

        Raises:
            NotImplementedError: if the variant has no draw hook
        """
        drawn = draw_shape(self._scene.surface, self.config)
        if drawn and not self._initialized:
            self._initialized = True
            self._scene.add_child(self)
        return drawn

    # -------------------------------------------------------------------------
    # Redraw scheduling
    # -------------------------------------------------------------------------

    def request_redraw(self):
        """Schedule a frame; requests made while one is pending are absorbed."""
        if self._destroyed or self._pending_frame is not None:
            return
        self._pending_frame = self._scene.clock.request_frame(self._on_frame)

    def _on_frame(self, now: float):
        self._pending_frame = None
        if not self._dirty or self._destroyed:
            return
        if not self._initialized:
            # Never painted yet (hidden at creation, image without pixels)
            self.render()
        self._scene.redraw()

    def bounce(self, duration_ms: float):
        """Destroy the shape after about `duration_ms`, measured on the frame clock."""
        clock = self._scene.clock
        if self._bounce_frame is not None:
            clock.cancel_frame(self._bounce_frame)
        start = clock.now()

        def step(now: float):
            self._bounce_frame = None
            if self._destroyed:
                return
            if now - start >= duration_ms:
                self.destroy()
            else:
                self._bounce_frame = clock.request_frame(step)

        self._bounce_frame = clock.request_frame(step)

    def destroy(self):
        """
        Remove the shape from its scene.

        Cancels pending frame callbacks, repaints the remaining shapes if the
        shape was registered, then drops every handler. Safe to call twice.
        """
        if self._destroyed:
            return
        self._destroyed = True

        clock = self._scene.clock
        for handle in (self._pending_frame, self._bounce_frame):
            if handle is not None:
                clock.cancel_frame(handle)
        self._pending_frame = None
        self._bounce_frame = None

        if self.layer is not None:
            self.layer.discard(self)

        if self._scene.remove_child(self):
            logger.debug(f"Destroyed {self!r}")
            self._scene.redraw()

        self._events.clear_events()
        self._events.detach()

    # -------------------------------------------------------------------------
    # Events
    # -------------------------------------------------------------------------

    def on(self, event, handler):
        """Subscribe to an event ('click', 'drag', EventKind.COLLISION, ...)."""
        self._events.on(event, handler)

    def off(self, event, handler):
        self._events.off(event, handler)

    def emit(self, event, *args, **kwargs):
        self._events.emit(event, *args, **kwargs)
