"""
Transformer - selection overlay for moving and resizing shapes.

The overlay is built from ordinary shapes: one border Rect around the
selection and up to four corner anchor Circles. All of them are `ignore`d
so scene-level hit tests see through them to the content, and draggable so
their own delegates run the drag protocol:

- dragging the border moves every selected shape by the same delta
- dragging an anchor resizes the border about the opposite corner and emits
  `transform`; applying the resize to each target's own geometry is left to
  the listener, since only it knows how a given variant should scale
"""

import logging
from dataclasses import asdict, dataclass, field, replace
from typing import Dict, List, Optional, Sequence, Tuple

from ..models.events import DragEvent, EventKind, TransformEvent
from ..models.geometry import BoundsRect
from ..models.shape_config import CircleConfig, RectConfig
from ..services.emitter import EventEmitter, Handler
from .drawing import shape_extents
from .shape import Shape


logger = logging.getLogger(__name__)


# Horizontal and vertical edge each anchor drags: -1 = left/top, 1 = right/bottom
ANCHOR_EDGES: Dict[str, Tuple[int, int]] = {
    "topLeft": (-1, -1),
    "topRight": (1, -1),
    "bottomLeft": (-1, 1),
    "bottomRight": (1, 1),
}


@dataclass
class TransformerConfig:
    """
    Overlay appearance.

    Attributes:
        color: Anchor fill
        border_color, border_width: Outline of the border and anchors
        border_fill: Fill of the border rect
        size: Anchor diameter; also the minimum width/height of a resize
        padding: Gap between the selection and the border
        anchors_enabled: Which corner anchors to build
    """
    color: str = "white"
    border_color: str = "#3B82F6"
    border_width: float = 2.0
    border_fill: str = "rgba(255, 255, 255, 0.2)"
    size: float = 10.0
    padding: float = 5.0
    anchors_enabled: List[str] = field(default_factory=lambda: list(ANCHOR_EDGES))

    def __post_init__(self):
        unknown = [name for name in self.anchors_enabled if name not in ANCHOR_EDGES]
        if unknown:
            raise ValueError(f"Unknown anchor(s): {', '.join(unknown)}")
        self.anchors_enabled = list(self.anchors_enabled)
        self.size = max(0.0, float(self.size))
        self.padding = float(self.padding)


# =============================================================================
# Geometry helpers
# =============================================================================

def anchor_point(rect: BoundsRect, anchor: str) -> Tuple[float, float]:
    """Corner of `rect` an anchor sits on."""
    horizontal, vertical = ANCHOR_EDGES[anchor]
    x = rect.x if horizontal < 0 else rect.right
    y = rect.y if vertical < 0 else rect.bottom
    return (x, y)


def resize_rect(start: BoundsRect, anchor: str, dx: float, dy: float,
                minimum: float = 0.0) -> BoundsRect:
    """
    Resize `start` by dragging one corner by (dx, dy).

    Width and height never drop below `minimum`; the opposite corner stays
    where it was.
    """
    horizontal, vertical = ANCHOR_EDGES[anchor]
    width = max(minimum, start.width + horizontal * dx)
    height = max(minimum, start.height + vertical * dy)
    x = start.x if horizontal > 0 else start.right - width
    y = start.y if vertical > 0 else start.bottom - height
    return BoundsRect(x, y, width, height)


def selection_rect(nodes: Sequence[Shape]) -> BoundsRect:
    """Union of the nodes' extents; radius-based shapes use center +/- radius."""
    rect = None
    for node in nodes:
        box = node.get_bounding_box()
        if node.is_radius:
            r = box.radius or 0.0
            extent = BoundsRect(box.x - r, box.y - r, 2 * r, 2 * r)
        else:
            extent = shape_extents(box)
        rect = extent if rect is None else rect.united(extent)
    return rect if rect is not None else BoundsRect()


# =============================================================================
# Transformer
# =============================================================================

class Transformer:
    """
    Selection overlay bound to a scene.

    Events (subscribe with on()):
    - dragstart / drag / dragend: the selection is being moved; payload
      carries the border's top-left corner
    - transform: TransformEvent after every resize step
    """

    def __init__(self, scene: 'Scene', config: Optional[TransformerConfig] = None, **kwargs):
        if config is None:
            config = TransformerConfig(**asdict(scene.settings.transformer))
        elif isinstance(config, dict):
            config = TransformerConfig(**config)
        if kwargs:
            config = replace(config, **kwargs)

        self.config = config
        self.events = EventEmitter()

        self._scene = scene
        self._nodes: List[Shape] = []
        self._saved_draggable: List[bool] = []
        self._border: Optional[Shape] = None
        self._anchors: Dict[str, Shape] = {}
        self._rect: Optional[BoundsRect] = None
        self._destroyed = False

        # Drag bookkeeping
        self._start_rect: Optional[BoundsRect] = None
        self._start_positions: List[Tuple[float, float]] = []
        self._resize_start: Optional[BoundsRect] = None
        self._anchor_start: Tuple[float, float] = (0.0, 0.0)

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def nodes(self) -> List[Shape]:
        return list(self._nodes)

    @property
    def border(self) -> Optional[Shape]:
        return self._border

    @property
    def anchors(self) -> Dict[str, Shape]:
        return dict(self._anchors)

    def get_rect(self) -> Optional[BoundsRect]:
        """Current border rect, or None when nothing is selected."""
        if self._rect is None:
            return None
        return replace(self._rect)

    # -------------------------------------------------------------------------
    # Selection
    # -------------------------------------------------------------------------

    def add(self, nodes: Sequence[Shape]):
        """
        Select `nodes`, replacing the previous selection.

        Selected shapes stop being draggable themselves while the overlay
        exists; their previous flag comes back on clear() or destroy().

        Raises:
            RuntimeError: if the transformer was destroyed
        """
        if self._destroyed:
            raise RuntimeError("Transformer has been destroyed")

        nodes = list(nodes)
        self.clear()
        if not nodes:
            logger.warning("Transformer.add() called with no nodes; selection cleared")
            return

        self._nodes = nodes
        self._saved_draggable = [node.get_attr("draggable") for node in nodes]
        for node in nodes:
            node.set_draggable(False)

        pad = self.config.padding
        self._rect = selection_rect(nodes).inflated(pad, pad, pad, pad)
        self._build_border()
        self._build_anchors()
        logger.debug(f"Transformer selected {len(nodes)} node(s), rect={self._rect}")

    def clear(self):
        """Remove the overlay and give the selected shapes back their drag flag."""
        self._teardown_overlay()
        for node, draggable in zip(self._nodes, self._saved_draggable):
            if not node.is_destroyed:
                node.set_draggable(draggable)
        self._nodes = []
        self._saved_draggable = []
        self._rect = None

    def destroy(self):
        """Clear the selection and drop every listener. Safe to call twice."""
        if self._destroyed:
            return
        self.clear()
        self.events.clear()
        self._destroyed = True

    # -------------------------------------------------------------------------
    # Overlay construction
    # -------------------------------------------------------------------------

    def _build_border(self):
        rect = self._rect
        config = self.config
        self._border = self._scene.rect(RectConfig(
            x=rect.x,
            y=rect.y,
            width=rect.width,
            height=rect.height,
            color=config.border_fill,
            border_width=config.border_width,
            border_color=config.border_color,
            draggable=True,
            ignore=True,
        ))
        self._border.on(EventKind.DRAGSTART, self._on_border_dragstart)
        self._border.on(EventKind.DRAG, self._on_border_drag)
        self._border.on(EventKind.DRAGEND, self._on_border_dragend)

    def _build_anchors(self):
        config = self.config
        for name in config.anchors_enabled:
            x, y = anchor_point(self._rect, name)
            anchor = self._scene.circle(CircleConfig(
                x=x,
                y=y,
                radius=config.size / 2,
                color=config.color,
                border_width=1,
                border_color=config.border_color,
                draggable=True,
                ignore=True,
            ))
            anchor.on(EventKind.DRAGSTART, lambda event, name=name: self._on_anchor_dragstart(name, event))
            anchor.on(EventKind.DRAG, lambda event, name=name: self._on_anchor_drag(name, event))
            anchor.on(EventKind.DRAGEND, lambda event: self._on_anchor_dragend())
            self._anchors[name] = anchor

    def _teardown_overlay(self):
        for anchor in self._anchors.values():
            anchor.destroy()
        self._anchors = {}
        if self._border is not None:
            self._border.destroy()
            self._border = None

    def _place_anchors(self, skip: Optional[str] = None):
        for name, anchor in self._anchors.items():
            if name != skip:
                anchor.set_position(*anchor_point(self._rect, name))

    # -------------------------------------------------------------------------
    # Border drag (move)
    # -------------------------------------------------------------------------

    def _anchor_at(self, x: float, y: float) -> Optional[str]:
        for name, anchor in self._anchors.items():
            if anchor.get_event_delegate().is_point_in_shape(x, y):
                return name
        return None

    def _on_border_dragstart(self, event: DragEvent):
        # Corners overlap the border; a press on an anchor is a resize
        pointer = event.event
        if pointer is not None and self._anchor_at(pointer.x, pointer.y) is not None:
            self._border.get_event_delegate().cancel_drag()
            return
        self._start_rect = replace(self._rect)
        self._start_positions = [node.get_position() for node in self._nodes]
        self.events.emit(EventKind.DRAGSTART, DragEvent(x=self._rect.x, y=self._rect.y, event=pointer))

    def _on_border_drag(self, event: DragEvent):
        if self._start_rect is None:
            return
        dx = event.x - self._start_rect.x
        dy = event.y - self._start_rect.y
        for node, (x, y) in zip(self._nodes, self._start_positions):
            node.set_position(x + dx, y + dy)
        self._rect = BoundsRect(event.x, event.y, self._start_rect.width, self._start_rect.height)
        self._place_anchors()
        self.events.emit(EventKind.DRAG, DragEvent(x=event.x, y=event.y, event=event.event))

    def _on_border_dragend(self, event: DragEvent):
        if self._start_rect is None:
            return
        self._start_rect = None
        self._start_positions = []
        self.events.emit(EventKind.DRAGEND, DragEvent(x=self._rect.x, y=self._rect.y, event=event.event))

    # -------------------------------------------------------------------------
    # Anchor drag (resize)
    # -------------------------------------------------------------------------

    def _on_anchor_dragstart(self, name: str, event: DragEvent):
        self._start_rect = None
        self._resize_start = replace(self._rect)
        self._anchor_start = (event.x, event.y)

    def _on_anchor_drag(self, name: str, event: DragEvent):
        start = self._resize_start
        if start is None:
            return
        dx = event.x - self._anchor_start[0]
        dy = event.y - self._anchor_start[1]
        rect = resize_rect(start, name, dx, dy, minimum=self.config.size)
        self._rect = rect

        self._border.set_attrs({"x": rect.x, "y": rect.y, "width": rect.width, "height": rect.height})
        self._place_anchors(skip=name)

        scale_x = rect.width / start.width if start.width else 1.0
        scale_y = rect.height / start.height if start.height else 1.0
        self.events.emit(EventKind.TRANSFORM, TransformEvent(
            rect=replace(rect),
            scale_x=scale_x,
            scale_y=scale_y,
            anchor=name,
            nodes=list(self._nodes),
        ))

    def _on_anchor_dragend(self):
        # A clamped resize leaves the dragged anchor off its corner
        self._resize_start = None
        if self._rect is not None:
            self._place_anchors()

    # -------------------------------------------------------------------------
    # Events
    # -------------------------------------------------------------------------

    def on(self, event, handler: Handler):
        self.events.on(event, handler)

    def off(self, event, handler: Handler):
        self.events.off(event, handler)
