"""
Drawing surface contract.

The engine needs a 2D immediate-mode context: path construction, fill and
stroke with style state, shadow, global alpha, an affine transform stack
with save/restore, clear-region and pixel dimensions. The same object is the
pointer input source: toolkit adapters translate their mouse events into
PointerEvent and hand them to dispatch_pointer().

The engine never keeps pixels; it always repaints from shape state.
"""

from abc import ABC, abstractmethod
from typing import Any, List, Optional, Sequence, Tuple

from ..models.events import PointerEvent
from .emitter import EventEmitter


ColorStop = Tuple[float, str]


class DrawingSurface(ABC):
    """Immediate-mode 2D drawing context plus pointer event source."""

    def __init__(self):
        self.pointer = EventEmitter()

    # -------------------------------------------------------------------------
    # Pointer input
    # -------------------------------------------------------------------------

    def dispatch_pointer(self, event: PointerEvent):
        """Deliver a raw pointer event to every subscriber of its kind."""
        self.pointer.emit(event.kind, event)

    def client_origin(self) -> Tuple[float, float]:
        """Top-left corner of the surface in client (window/screen) coordinates."""
        return (0.0, 0.0)

    # -------------------------------------------------------------------------
    # Dimensions
    # -------------------------------------------------------------------------

    @property
    @abstractmethod
    def width(self) -> int:
        """Width in pixels."""

    @property
    @abstractmethod
    def height(self) -> int:
        """Height in pixels."""

    # -------------------------------------------------------------------------
    # State stack and transform
    # -------------------------------------------------------------------------

    @abstractmethod
    def save(self): ...

    @abstractmethod
    def restore(self): ...

    @abstractmethod
    def translate(self, dx: float, dy: float): ...

    @abstractmethod
    def rotate(self, radians: float): ...

    @abstractmethod
    def scale(self, sx: float, sy: float): ...

    # -------------------------------------------------------------------------
    # Style
    # -------------------------------------------------------------------------

    @abstractmethod
    def set_fill_style(self, style: Any):
        """Solid color string or a gradient from create_linear_gradient()."""

    @abstractmethod
    def set_stroke_style(self, style: Any): ...

    @abstractmethod
    def set_line_width(self, width: float): ...

    def set_line_cap(self, cap: str):
        """'butt', 'round' or 'square'. Optional for surfaces."""

    def set_line_join(self, join: str):
        """'miter', 'round' or 'bevel'. Optional for surfaces."""

    def set_line_dash(self, dash: Sequence[float]):
        """Dash pattern; empty for solid lines. Optional for surfaces."""

    @abstractmethod
    def set_shadow(self, color: Optional[str], blur: float = 0.0,
                   offset_x: float = 0.0, offset_y: float = 0.0):
        """Shadow applied to subsequent fills/strokes; color None disables it."""

    @abstractmethod
    def set_global_alpha(self, alpha: float): ...

    @abstractmethod
    def create_linear_gradient(self, x0: float, y0: float, x1: float, y1: float,
                               stops: List[ColorStop]) -> Any:
        """Build a fill style usable with set_fill_style()."""

    # -------------------------------------------------------------------------
    # Paths
    # -------------------------------------------------------------------------

    @abstractmethod
    def begin_path(self): ...

    @abstractmethod
    def close_path(self): ...

    @abstractmethod
    def move_to(self, x: float, y: float): ...

    @abstractmethod
    def line_to(self, x: float, y: float): ...

    @abstractmethod
    def arc(self, x: float, y: float, radius: float, start: float, end: float,
            anticlockwise: bool = False): ...

    @abstractmethod
    def arc_to(self, x1: float, y1: float, x2: float, y2: float, radius: float): ...

    @abstractmethod
    def rect(self, x: float, y: float, width: float, height: float): ...

    @abstractmethod
    def quadratic_curve_to(self, cx: float, cy: float, x: float, y: float): ...

    @abstractmethod
    def bezier_curve_to(self, c1x: float, c1y: float, c2x: float, c2y: float,
                        x: float, y: float): ...

    # -------------------------------------------------------------------------
    # Painting
    # -------------------------------------------------------------------------

    @abstractmethod
    def fill(self): ...

    @abstractmethod
    def stroke(self): ...

    @abstractmethod
    def clear_rect(self, x: float, y: float, width: float, height: float): ...

    @abstractmethod
    def draw_image(self, image: Any, x: float, y: float, width: float, height: float): ...

    def clear(self):
        """Clear the whole surface."""
        self.clear_rect(0, 0, self.width, self.height)

    def present(self):
        """Called after a full repaint so adapters can push pixels to screen."""
