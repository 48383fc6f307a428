"""
Qt Canvas.

PyQt6 implementation of the engine's external interfaces:
- QtSurface: DrawingSurface painting into a QImage through QPainter
- QtFrameClock: FrameClock driven by a single-shot QTimer
- RadialCanvas: QWidget that shows the surface and feeds it pointer events

Usage:
    canvas = RadialCanvas(width=800, height=600)
    scene = canvas.create_scene()
    scene.circle(x=100, y=100, radius=40, color="tomato", draggable=True)
"""

import itertools
import logging
import math
import re
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, List, Optional, Tuple

from PyQt6.QtCore import QElapsedTimer, QPoint, QPointF, QRectF, QSize, Qt, QTimer
from PyQt6.QtGui import (
    QBrush, QColor, QCursor, QImage, QLinearGradient, QMouseEvent, QPainter, QPainterPath,
    QPen, QPixmap, QWheelEvent,
)
from PyQt6.QtWidgets import QSizePolicy, QWidget

from ..core.scene import Scene
from ..models.events import EventKind, PointerEvent
from ..services.frame_clock import FrameCallback, FrameClock
from ..services.settings_manager import AppSettings, get_settings
from ..services.surface import ColorStop, DrawingSurface


logger = logging.getLogger(__name__)


# =============================================================================
# Colors
# =============================================================================

_RGB_PATTERN = re.compile(r"^\s*rgba?\(\s*([^)]*)\)\s*$", re.IGNORECASE)


def parse_color(value: Any) -> QColor:
    """
    Convert a CSS-style color to QColor.

    Accepts QColor, named colors, '#RRGGBB' / '#AARRGGBB', 'rgb(r, g, b)' and
    'rgba(r, g, b, a)' with alpha in [0, 1]. None is fully transparent;
    unparseable values fall back to black with a warning.
    """
    if value is None:
        return QColor(0, 0, 0, 0)
    if isinstance(value, QColor):
        return QColor(value)

    text = str(value)
    match = _RGB_PATTERN.match(text)
    if match:
        parts = [p.strip() for p in match.group(1).split(",")]
        try:
            r, g, b = (int(float(p)) for p in parts[:3])
            alpha = float(parts[3]) if len(parts) > 3 else 1.0
        except ValueError:
            logger.warning(f"Invalid color '{text}', using black")
            return QColor(0, 0, 0)
        color = QColor(r, g, b)
        color.setAlphaF(max(0.0, min(1.0, alpha)))
        return color

    color = QColor(text)
    if not color.isValid():
        logger.warning(f"Invalid color '{text}', using black")
        return QColor(0, 0, 0)
    return color


_CAPS = {
    "butt": Qt.PenCapStyle.FlatCap,
    "round": Qt.PenCapStyle.RoundCap,
    "square": Qt.PenCapStyle.SquareCap,
}

_JOINS = {
    "miter": Qt.PenJoinStyle.MiterJoin,
    "round": Qt.PenJoinStyle.RoundJoin,
    "bevel": Qt.PenJoinStyle.BevelJoin,
}


# =============================================================================
# Surface
# =============================================================================

@dataclass
class _PaintState:
    """Style state saved and restored alongside the painter's own."""
    fill: Any = "black"
    stroke: Any = "black"
    line_width: float = 1.0
    line_cap: str = "butt"
    line_join: str = "miter"
    dash: List[float] = field(default_factory=list)
    shadow_color: Optional[str] = None
    shadow_blur: float = 0.0
    shadow_offset: Tuple[float, float] = (0.0, 0.0)


class QtSurface(DrawingSurface):
    """
    DrawingSurface backed by a QImage.

    Shadows are painted as an offset copy of the path in the shadow color;
    blur is not rendered. Rounded corners from arc_to() are approximated
    with a quadratic curve through the corner point.
    """

    def __init__(self, width: int, height: int, antialiasing: bool = True,
                 on_present: Optional[Callable[[], None]] = None,
                 origin: Optional[Callable[[], Tuple[float, float]]] = None):
        super().__init__()
        self.antialiasing = antialiasing
        self._on_present = on_present
        self._origin = origin
        self._image: Optional[QImage] = None
        self._painter: Optional[QPainter] = None
        self._path = QPainterPath()
        self._state = _PaintState()
        self._stack: List[_PaintState] = []
        self.resize(width, height)

    # -------------------------------------------------------------------------
    # Image management
    # -------------------------------------------------------------------------

    @property
    def image(self) -> QImage:
        return self._image

    def resize(self, width: int, height: int):
        """Replace the backing image; its contents are lost."""
        self.end()
        self._image = QImage(max(1, int(width)), max(1, int(height)),
                             QImage.Format.Format_ARGB32_Premultiplied)
        self._image.fill(Qt.GlobalColor.transparent)
        self._painter = QPainter(self._image)
        if self.antialiasing:
            self._painter.setRenderHint(QPainter.RenderHint.Antialiasing)
            self._painter.setRenderHint(QPainter.RenderHint.SmoothPixmapTransform)
        self._stack = []
        self._state = _PaintState()

    def end(self):
        """Finish painting on the current image."""
        if self._painter is not None and self._painter.isActive():
            self._painter.end()
        self._painter = None

    @property
    def width(self) -> int:
        return self._image.width()

    @property
    def height(self) -> int:
        return self._image.height()

    def client_origin(self) -> Tuple[float, float]:
        if self._origin is None:
            return (0.0, 0.0)
        return self._origin()

    def present(self):
        if self._on_present is not None:
            self._on_present()

    # -------------------------------------------------------------------------
    # State stack and transform
    # -------------------------------------------------------------------------

    def save(self):
        self._painter.save()
        self._stack.append(replace(self._state, dash=list(self._state.dash)))

    def restore(self):
        if not self._stack:
            return
        self._painter.restore()
        self._state = self._stack.pop()

    def translate(self, dx: float, dy: float):
        self._painter.translate(dx, dy)

    def rotate(self, radians: float):
        self._painter.rotate(math.degrees(radians))

    def scale(self, sx: float, sy: float):
        self._painter.scale(sx, sy)

    # -------------------------------------------------------------------------
    # Style
    # -------------------------------------------------------------------------

    def set_fill_style(self, style: Any):
        self._state.fill = style

    def set_stroke_style(self, style: Any):
        self._state.stroke = style

    def set_line_width(self, width: float):
        self._state.line_width = width

    def set_line_cap(self, cap: str):
        self._state.line_cap = cap

    def set_line_join(self, join: str):
        self._state.line_join = join

    def set_line_dash(self, dash):
        self._state.dash = list(dash or [])

    def set_shadow(self, color: Optional[str], blur: float = 0.0,
                   offset_x: float = 0.0, offset_y: float = 0.0):
        self._state.shadow_color = color
        self._state.shadow_blur = blur
        self._state.shadow_offset = (offset_x, offset_y)

    def set_global_alpha(self, alpha: float):
        self._painter.setOpacity(max(0.0, min(1.0, alpha)))

    def create_linear_gradient(self, x0: float, y0: float, x1: float, y1: float,
                               stops: List[ColorStop]) -> QLinearGradient:
        gradient = QLinearGradient(x0, y0, x1, y1)
        for position, color in stops:
            gradient.setColorAt(position, parse_color(color))
        return gradient

    def _brush(self, style: Any) -> QBrush:
        if isinstance(style, QLinearGradient):
            return QBrush(style)
        return QBrush(parse_color(style))

    def _pen(self) -> QPen:
        state = self._state
        pen = QPen(self._brush(state.stroke), state.line_width)
        pen.setCapStyle(_CAPS.get(state.line_cap, Qt.PenCapStyle.FlatCap))
        pen.setJoinStyle(_JOINS.get(state.line_join, Qt.PenJoinStyle.MiterJoin))
        if state.dash and state.line_width > 0:
            # Qt dash lengths are in units of the pen width
            pen.setDashPattern([d / state.line_width for d in state.dash])
        return pen

    def _paint_shadow(self, paint: Callable[[QPainterPath], None]):
        color = self._state.shadow_color
        if color is None:
            return
        offset_x, offset_y = self._state.shadow_offset
        paint(self._path.translated(offset_x, offset_y))

    # -------------------------------------------------------------------------
    # Paths
    # -------------------------------------------------------------------------

    def begin_path(self):
        self._path = QPainterPath()

    def close_path(self):
        self._path.closeSubpath()

    def move_to(self, x: float, y: float):
        self._path.moveTo(x, y)

    def line_to(self, x: float, y: float):
        self._path.lineTo(x, y)

    def arc(self, x: float, y: float, radius: float, start: float, end: float,
            anticlockwise: bool = False):
        full = 2 * math.pi
        if anticlockwise:
            span = start - end
            span = -(full if span >= full else span % full)
        else:
            span = end - start
            span = full if span >= full else span % full

        # Qt measures angles counter-clockwise in degrees
        rect = QRectF(x - radius, y - radius, 2 * radius, 2 * radius)
        if self._path.elementCount() == 0:
            self._path.arcMoveTo(rect, -math.degrees(start))
        self._path.arcTo(rect, -math.degrees(start), -math.degrees(span))

    def arc_to(self, x1: float, y1: float, x2: float, y2: float, radius: float):
        if self._path.elementCount() == 0:
            self._path.moveTo(x1, y1)
        current = self._path.currentPosition()
        d0 = math.hypot(current.x() - x1, current.y() - y1)
        d2 = math.hypot(x2 - x1, y2 - y1)
        if radius <= 0 or d0 == 0 or d2 == 0:
            self._path.lineTo(x1, y1)
            return
        t0 = min(radius, d0)
        t2 = min(radius, d2)
        start = QPointF(x1 + (current.x() - x1) * t0 / d0, y1 + (current.y() - y1) * t0 / d0)
        end = QPointF(x1 + (x2 - x1) * t2 / d2, y1 + (y2 - y1) * t2 / d2)
        self._path.lineTo(start)
        self._path.quadTo(QPointF(x1, y1), end)

    def rect(self, x: float, y: float, width: float, height: float):
        self._path.addRect(QRectF(x, y, width, height))

    def quadratic_curve_to(self, cx: float, cy: float, x: float, y: float):
        self._path.quadTo(cx, cy, x, y)

    def bezier_curve_to(self, c1x: float, c1y: float, c2x: float, c2y: float,
                        x: float, y: float):
        self._path.cubicTo(c1x, c1y, c2x, c2y, x, y)

    # -------------------------------------------------------------------------
    # Painting
    # -------------------------------------------------------------------------

    def fill(self):
        shadow_brush = QBrush(parse_color(self._state.shadow_color))
        self._paint_shadow(lambda path: self._painter.fillPath(path, shadow_brush))
        self._painter.fillPath(self._path, self._brush(self._state.fill))

    def stroke(self):
        pen = self._pen()
        if self._state.shadow_color is not None:
            shadow_pen = QPen(pen)
            shadow_pen.setBrush(QBrush(parse_color(self._state.shadow_color)))
            self._paint_shadow(lambda path: self._painter.strokePath(path, shadow_pen))
        self._painter.strokePath(self._path, pen)

    def clear_rect(self, x: float, y: float, width: float, height: float):
        painter = self._painter
        painter.save()
        painter.resetTransform()
        painter.setCompositionMode(QPainter.CompositionMode.CompositionMode_Clear)
        painter.fillRect(QRectF(x, y, width, height), Qt.GlobalColor.transparent)
        painter.restore()

    def draw_image(self, image: Any, x: float, y: float, width: float, height: float):
        target = QRectF(x, y, width, height)
        if isinstance(image, QPixmap):
            self._painter.drawPixmap(target, image, QRectF(image.rect()))
        elif isinstance(image, QImage):
            self._painter.drawImage(target, image)
        else:
            logger.warning(f"Cannot draw image of type {type(image).__name__}")


# =============================================================================
# Frame clock
# =============================================================================

class QtFrameClock(FrameClock):
    """
    FrameClock running on the Qt event loop.

    Requests made during a frame wait for the next one; the timer only runs
    while something is pending.
    """

    def __init__(self, interval_ms: int = 16):
        self._elapsed = QElapsedTimer()
        self._elapsed.start()
        self._ids = itertools.count(1)
        self._pending: Dict[int, FrameCallback] = {}
        self._firing: Dict[int, FrameCallback] = {}

        self._timer = QTimer()
        self._timer.setSingleShot(True)
        self._timer.setInterval(int(interval_ms))
        self._timer.timeout.connect(self._fire)

    def request_frame(self, callback: FrameCallback) -> int:
        handle = next(self._ids)
        self._pending[handle] = callback
        if not self._timer.isActive():
            self._timer.start()
        return handle

    def cancel_frame(self, handle: int):
        self._pending.pop(handle, None)
        self._firing.pop(handle, None)
        if not self._pending:
            self._timer.stop()

    def now(self) -> float:
        return float(self._elapsed.elapsed())

    @property
    def pending(self) -> int:
        return len(self._pending)

    def stop(self):
        """Drop every pending callback."""
        self._pending.clear()
        self._firing.clear()
        self._timer.stop()

    def _fire(self):
        self._firing, self._pending = self._pending, {}
        now = self.now()
        try:
            while self._firing:
                handle = next(iter(self._firing))
                self._firing.pop(handle)(now)
        finally:
            self._firing = {}
        if self._pending and not self._timer.isActive():
            self._timer.start()


# =============================================================================
# Widget
# =============================================================================

_BUTTONS = {
    Qt.MouseButton.LeftButton: 0,
    Qt.MouseButton.MiddleButton: 1,
    Qt.MouseButton.RightButton: 2,
}


class RadialCanvas(QWidget):
    """
    Widget hosting a QtSurface.

    Translates Qt mouse input into PointerEvents:
    - press / release / move / leave / wheel map one to one
    - a release over the press position's widget emits a click afterwards
    """

    def __init__(self, width: Optional[int] = None, height: Optional[int] = None,
                 settings: Optional[AppSettings] = None, parent=None):
        super().__init__(parent)
        self.settings = settings if settings is not None else get_settings().settings
        width = width or self.settings.canvas.width
        height = height or self.settings.canvas.height

        self._background = parse_color(self.settings.render.background)
        self._press_pos: Optional[QPointF] = None

        self.surface = QtSurface(
            width,
            height,
            antialiasing=self.settings.render.antialiasing,
            on_present=self.update,
            origin=self._client_origin,
        )
        self.clock = QtFrameClock(self.settings.render.frame_interval_ms)

        self.setMouseTracking(True)
        self.setFixedSize(QSize(width, height))
        self.setSizePolicy(QSizePolicy.Policy.Fixed, QSizePolicy.Policy.Fixed)

    def create_scene(self) -> Scene:
        """Build a Scene drawing on this canvas."""
        return Scene(self.surface, clock=self.clock, settings=self.settings)

    def _client_origin(self) -> Tuple[float, float]:
        origin = self.mapToGlobal(QPoint(0, 0))
        return (float(origin.x()), float(origin.y()))

    # -------------------------------------------------------------------------
    # Painting
    # -------------------------------------------------------------------------

    def paintEvent(self, event):
        painter = QPainter(self)
        painter.fillRect(self.rect(), self._background)
        painter.drawImage(0, 0, self.surface.image)
        painter.end()

    # -------------------------------------------------------------------------
    # Pointer input
    # -------------------------------------------------------------------------

    def _pointer(self, kind: EventKind, event, button: int = 0,
                 delta: Tuple[float, float] = (0.0, 0.0)) -> PointerEvent:
        pos = event.position()
        global_pos = event.globalPosition()
        return PointerEvent(
            kind=kind,
            x=pos.x(),
            y=pos.y(),
            button=button,
            delta_x=delta[0],
            delta_y=delta[1],
            client_x=global_pos.x(),
            client_y=global_pos.y(),
            timestamp=self.clock.now(),
            original=event,
        )

    def mousePressEvent(self, event: QMouseEvent):
        self._press_pos = event.position()
        button = _BUTTONS.get(event.button(), 0)
        self.surface.dispatch_pointer(self._pointer(EventKind.MOUSEDOWN, event, button))
        event.accept()

    def mouseReleaseEvent(self, event: QMouseEvent):
        button = _BUTTONS.get(event.button(), 0)
        self.surface.dispatch_pointer(self._pointer(EventKind.MOUSEUP, event, button))
        if self._press_pos is not None and self.rect().contains(event.position().toPoint()):
            self.surface.dispatch_pointer(self._pointer(EventKind.CLICK, event, button))
        self._press_pos = None
        event.accept()

    def mouseMoveEvent(self, event: QMouseEvent):
        self.surface.dispatch_pointer(self._pointer(EventKind.MOUSEMOVE, event))
        event.accept()

    def leaveEvent(self, event):
        pos = self.mapFromGlobal(QCursor.pos())
        self.surface.dispatch_pointer(PointerEvent(
            kind=EventKind.MOUSELEAVE,
            x=float(pos.x()),
            y=float(pos.y()),
            timestamp=self.clock.now(),
            original=event,
        ))
        super().leaveEvent(event)

    def wheelEvent(self, event: QWheelEvent):
        delta = event.angleDelta()
        self.surface.dispatch_pointer(
            self._pointer(EventKind.WHEEL, event, delta=(float(delta.x()), float(delta.y())))
        )
        event.accept()

    def closeEvent(self, event):
        self.clock.stop()
        self.surface.end()
        super().closeEvent(event)
