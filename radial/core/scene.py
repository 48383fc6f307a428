"""
Scene container.

The Scene owns the ordered list of shapes (insertion order is paint order),
the drawing surface and the frame clock. It builds shapes through its
factory methods, forwards raw pointer input as scene-level events with the
shape under the pointer attached, and performs full-surface redraws.

A Scene created without a surface is inert: nothing is wired or painted,
but the factories and the shape list still work.
"""

import logging
from dataclasses import replace
from typing import Any, Dict, List, Optional, Tuple, Type

from ..models.events import DragEvent, EventKind, PointerEvent
from ..models.shape_config import (
    CircleConfig, ImageConfig, LineConfig, PolygonConfig, RectConfig, ShapeConfig,
    TriangleConfig,
)
from ..services.emitter import EventEmitter, Handler
from ..services.event_delegate import run_collision_sweep
from ..services.frame_clock import FrameClock, ManualFrameClock
from ..services.settings_manager import AppSettings, get_settings
from ..services.surface import DrawingSurface
from .layer import Layer
from .shape import Shape


logger = logging.getLogger(__name__)


class Scene:
    """
    Root of the scene graph.

    Scene-level events:
    - click, mousemove, mousedown, mouseup, wheel: the PointerEvent with
      `target` set to the topmost non-ignored shape under the pointer
      (a click on empty space targets the scene itself)
    - dragstart, drag, dragend: pointer drags that start on empty space
    - collision, collisionend: re-emitted from the collision sweep
    """

    def __init__(self, surface: Optional[DrawingSurface], clock: Optional[FrameClock] = None,
                 settings: Optional[AppSettings] = None):
        self.settings = settings if settings is not None else get_settings().settings
        self.clock = clock if clock is not None else ManualFrameClock(
            frame_ms=self.settings.render.frame_interval_ms
        )
        self.events = EventEmitter()
        self.redraw_count = 0

        self._surface: Optional[DrawingSurface] = None
        self._children: List[Shape] = []
        self._layers: Dict[str, Layer] = {}
        self._pending_frame: Optional[int] = None
        self._redrawing = False

        # Background drag
        self._is_dragging = False

        if surface is None:
            logger.error("No drawing surface provided; scene is inert")
            return

        self._surface = surface
        self._listeners = (
            (EventKind.CLICK, self._on_click),
            (EventKind.MOUSEMOVE, self._on_mousemove),
            (EventKind.MOUSEDOWN, self._on_mousedown),
            (EventKind.MOUSEUP, self._on_mouseup),
            (EventKind.MOUSELEAVE, self._on_mouseleave),
            (EventKind.WHEEL, self._on_wheel),
        )
        for kind, handler in self._listeners:
            surface.pointer.on(kind, handler)

    def __repr__(self) -> str:
        return f"<Scene ({len(self._children)} shapes)>"

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def surface(self) -> Optional[DrawingSurface]:
        return self._surface

    @property
    def is_inert(self) -> bool:
        return self._surface is None

    @property
    def children(self) -> List[Shape]:
        """Shapes in paint order (a copy)."""
        return list(self._children)

    def get_children(self) -> List[Shape]:
        return list(self._children)

    # -------------------------------------------------------------------------
    # Shape factories
    # -------------------------------------------------------------------------

    def _create(self, config_cls: Type[ShapeConfig], config: Any, kwargs: Dict[str, Any]) -> Shape:
        if config is None:
            config = config_cls(**kwargs)
        elif isinstance(config, dict):
            config = config_cls(**{**config, **kwargs})
        elif kwargs:
            config = replace(config, **kwargs)
        return self.create(config)

    def create(self, config: ShapeConfig) -> Shape:
        """
        Build a shape from any config and render it once.

        Raises:
            NotImplementedError: if the config's variant cannot be drawn
        """
        shape = Shape(self, config)
        shape.render()
        logger.debug(f"Created {shape!r}")
        return shape

    def circle(self, config: Optional[CircleConfig] = None, **kwargs) -> Shape:
        return self._create(CircleConfig, config, kwargs)

    def rect(self, config: Optional[RectConfig] = None, **kwargs) -> Shape:
        return self._create(RectConfig, config, kwargs)

    def triangle(self, config: Optional[TriangleConfig] = None, **kwargs) -> Shape:
        return self._create(TriangleConfig, config, kwargs)

    def line(self, config: Optional[LineConfig] = None, **kwargs) -> Shape:
        return self._create(LineConfig, config, kwargs)

    def polygon(self, config: Optional[PolygonConfig] = None, **kwargs) -> Shape:
        return self._create(PolygonConfig, config, kwargs)

    def image(self, config: Optional[ImageConfig] = None, **kwargs) -> Shape:
        return self._create(ImageConfig, config, kwargs)

    def transformer(self, config=None, **kwargs) -> 'Transformer':
        """Create a selection overlay bound to this scene."""
        from .transformer import Transformer
        return Transformer(self, config, **kwargs)

    # -------------------------------------------------------------------------
    # Registry
    # -------------------------------------------------------------------------

    def add_child(self, shape: Shape):
        """Append a shape to the paint order. Already registered shapes are ignored."""
        if any(child is shape for child in self._children):
            return
        self._children.append(shape)
        logger.debug(f"Registered {shape!r} ({len(self._children)} shapes)")

    def remove_child(self, shape: Shape) -> bool:
        """
        Remove a shape by identity.

        Returns:
            True if the shape was registered
        """
        for i, child in enumerate(self._children):
            if child is shape:
                del self._children[i]
                return True
        return False

    def clear(self):
        """Destroy every shape, then repaint once."""
        shapes, self._children = self._children, []
        for shape in shapes:
            shape.destroy()
        if shapes:
            self.redraw()

    # -------------------------------------------------------------------------
    # Layers
    # -------------------------------------------------------------------------

    @property
    def layers(self) -> List[Layer]:
        return list(self._layers.values())

    def add_layer(self, name: str, visible: bool = True, opacity: float = 1.0) -> Layer:
        """
        Create a named layer.

        Raises:
            ValueError: if a layer with that name exists
        """
        if name in self._layers:
            raise ValueError(f"Layer '{name}' already exists")
        layer = Layer(self, name, visible=visible, opacity=opacity)
        self._layers[name] = layer
        return layer

    def get_layer(self, name: str) -> Optional[Layer]:
        return self._layers.get(name)

    def remove_layer(self, name: str) -> bool:
        """Remove a layer, releasing its shapes back to the scene."""
        layer = self._layers.pop(name, None)
        if layer is None:
            return False
        layer.clear()
        return True

    # -------------------------------------------------------------------------
    # Rendering
    # -------------------------------------------------------------------------

    def request_redraw(self):
        """Schedule one full redraw on the next frame."""
        if self._surface is None or self._pending_frame is not None:
            return
        self._pending_frame = self.clock.request_frame(self._on_frame)

    def _on_frame(self, now: float):
        self._pending_frame = None
        self.redraw()

    def redraw(self):
        """
        Clear the surface and repaint every shape in order.

        The collision sweep runs first so collision events describe the
        geometry about to be painted. A redraw requested by a handler while
        one is running (destroying a shape on collision, for instance) is
        deferred to the next frame.
        """
        surface = self._surface
        if surface is None:
            return
        if self._redrawing:
            self.request_redraw()
            return
        if self._pending_frame is not None:
            self.clock.cancel_frame(self._pending_frame)
            self._pending_frame = None

        self._redrawing = True
        try:
            surface.clear()
            run_collision_sweep(self._children, notify=self.events.emit)

            shapes = list(self._children)
            for shape in shapes:
                shape.mark_dirty()
            painted = sum(1 for shape in shapes if shape.render())
        finally:
            self._redrawing = False

        surface.present()
        self.redraw_count += 1
        logger.debug(f"Redraw #{self.redraw_count}: painted {painted}/{len(shapes)} shapes")

    # -------------------------------------------------------------------------
    # Hit testing and coordinates
    # -------------------------------------------------------------------------

    def hit_test(self, x: float, y: float) -> Optional[Shape]:
        """Topmost visible, non-ignored shape containing (x, y)."""
        for shape in reversed(self._children):
            if shape.is_ignored() or not shape.is_visible():
                continue
            if shape.get_event_delegate().is_point_in_shape(x, y):
                return shape
        return None

    def get_pointer_position(self, client_x: float, client_y: float) -> Tuple[float, float]:
        """Convert window/client coordinates to surface-local ones."""
        if self._surface is None:
            return (client_x, client_y)
        origin_x, origin_y = self._surface.client_origin()
        return (client_x - origin_x, client_y - origin_y)

    # -------------------------------------------------------------------------
    # Events
    # -------------------------------------------------------------------------

    def on(self, event, handler: Handler):
        self.events.on(event, handler)

    def off(self, event, handler: Handler):
        self.events.off(event, handler)

    def emit(self, event, *args, **kwargs):
        self.events.emit(event, *args, **kwargs)

    def _forward(self, event: PointerEvent, target: Any):
        self.events.emit(event.kind, replace(event, target=target))

    def _on_click(self, event: PointerEvent):
        target = self.hit_test(event.x, event.y)
        self._forward(event, target if target is not None else self)

    def _on_mousemove(self, event: PointerEvent):
        self._forward(event, self.hit_test(event.x, event.y))
        if self._is_dragging:
            self.events.emit(EventKind.DRAG, DragEvent(x=event.x, y=event.y, event=event))

    def _on_mousedown(self, event: PointerEvent):
        target = self.hit_test(event.x, event.y)
        self._forward(event, target)
        if target is None:
            self._is_dragging = True
            self.events.emit(EventKind.DRAGSTART, DragEvent(x=event.x, y=event.y, event=event))

    def _on_mouseup(self, event: PointerEvent):
        self._forward(event, self.hit_test(event.x, event.y))
        self._end_drag(event)

    def _on_mouseleave(self, event: PointerEvent):
        self._end_drag(event)

    def _on_wheel(self, event: PointerEvent):
        self._forward(event, self.hit_test(event.x, event.y))

    def _end_drag(self, event: PointerEvent):
        if not self._is_dragging:
            return
        self._is_dragging = False
        self.events.emit(EventKind.DRAGEND, DragEvent(x=event.x, y=event.y, event=event))

    # -------------------------------------------------------------------------
    # Teardown
    # -------------------------------------------------------------------------

    def destroy(self):
        """Destroy every shape and detach from the surface."""
        self.clear()
        if self._pending_frame is not None:
            self.clock.cancel_frame(self._pending_frame)
            self._pending_frame = None
        if self._surface is not None:
            for kind, handler in self._listeners:
                self._surface.pointer.off(kind, handler)
        self.events.clear()
