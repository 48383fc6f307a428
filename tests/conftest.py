"""
Pytest configuration and shared fixtures for Radial tests.
"""

import pytest
from pathlib import Path
from typing import Any, List, Tuple

# Add parent directory to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from radial.core.scene import Scene
from radial.models.events import EventKind, PointerEvent
from radial.services.frame_clock import ManualFrameClock
from radial.services.settings_manager import AppSettings, reset_settings_manager
from radial.services.surface import DrawingSurface


# ============== Drawing Surface ==============

class RecordingSurface(DrawingSurface):
    """DrawingSurface that records every call instead of painting."""

    def __init__(self, width: int = 800, height: int = 600,
                 origin: Tuple[float, float] = (0.0, 0.0)):
        super().__init__()
        self._width = width
        self._height = height
        self._origin = origin
        self.calls: List[Tuple[str, tuple]] = []
        self.presented = 0

    def _record(self, name: str, *args):
        self.calls.append((name, args))

    # Inspection helpers
    def names(self) -> List[str]:
        return [name for name, _ in self.calls]

    def count(self, name: str) -> int:
        return sum(1 for n, _ in self.calls if n == name)

    def args_of(self, name: str) -> List[tuple]:
        return [args for n, args in self.calls if n == name]

    def reset(self):
        self.calls = []

    # DrawingSurface
    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    def client_origin(self) -> Tuple[float, float]:
        return self._origin

    def save(self):
        self._record("save")

    def restore(self):
        self._record("restore")

    def translate(self, dx, dy):
        self._record("translate", dx, dy)

    def rotate(self, radians):
        self._record("rotate", radians)

    def scale(self, sx, sy):
        self._record("scale", sx, sy)

    def set_fill_style(self, style):
        self._record("set_fill_style", style)

    def set_stroke_style(self, style):
        self._record("set_stroke_style", style)

    def set_line_width(self, width):
        self._record("set_line_width", width)

    def set_line_cap(self, cap):
        self._record("set_line_cap", cap)

    def set_line_join(self, join):
        self._record("set_line_join", join)

    def set_line_dash(self, dash):
        self._record("set_line_dash", list(dash))

    def set_shadow(self, color, blur=0.0, offset_x=0.0, offset_y=0.0):
        self._record("set_shadow", color, blur, offset_x, offset_y)

    def set_global_alpha(self, alpha):
        self._record("set_global_alpha", alpha)

    def create_linear_gradient(self, x0, y0, x1, y1, stops):
        self._record("create_linear_gradient", x0, y0, x1, y1, stops)
        return ("gradient", x0, y0, x1, y1, tuple(stops))

    def begin_path(self):
        self._record("begin_path")

    def close_path(self):
        self._record("close_path")

    def move_to(self, x, y):
        self._record("move_to", x, y)

    def line_to(self, x, y):
        self._record("line_to", x, y)

    def arc(self, x, y, radius, start, end, anticlockwise=False):
        self._record("arc", x, y, radius, start, end, anticlockwise)

    def arc_to(self, x1, y1, x2, y2, radius):
        self._record("arc_to", x1, y1, x2, y2, radius)

    def rect(self, x, y, width, height):
        self._record("rect", x, y, width, height)

    def quadratic_curve_to(self, cx, cy, x, y):
        self._record("quadratic_curve_to", cx, cy, x, y)

    def bezier_curve_to(self, c1x, c1y, c2x, c2y, x, y):
        self._record("bezier_curve_to", c1x, c1y, c2x, c2y, x, y)

    def fill(self):
        self._record("fill")

    def stroke(self):
        self._record("stroke")

    def clear_rect(self, x, y, width, height):
        self._record("clear_rect", x, y, width, height)

    def draw_image(self, image, x, y, width, height):
        self._record("draw_image", image, x, y, width, height)

    def present(self):
        self.presented += 1


# ============== Pointer Input ==============

class PointerDriver:
    """Feeds PointerEvents into a surface."""

    def __init__(self, surface: DrawingSurface):
        self.surface = surface

    def send(self, kind: EventKind, x: float, y: float, **kwargs) -> PointerEvent:
        event = PointerEvent(kind=kind, x=x, y=y, **kwargs)
        self.surface.dispatch_pointer(event)
        return event

    def down(self, x, y, **kwargs):
        return self.send(EventKind.MOUSEDOWN, x, y, **kwargs)

    def up(self, x, y, **kwargs):
        return self.send(EventKind.MOUSEUP, x, y, **kwargs)

    def move(self, x, y, **kwargs):
        return self.send(EventKind.MOUSEMOVE, x, y, **kwargs)

    def click(self, x, y, **kwargs):
        return self.send(EventKind.CLICK, x, y, **kwargs)

    def leave(self, x=-1, y=-1, **kwargs):
        return self.send(EventKind.MOUSELEAVE, x, y, **kwargs)

    def wheel(self, x, y, delta_y=120.0, **kwargs):
        return self.send(EventKind.WHEEL, x, y, delta_y=delta_y, **kwargs)

    def drag(self, start: Tuple[float, float], end: Tuple[float, float]):
        """Press at `start`, move to `end`, release."""
        self.down(*start)
        self.move(*end)
        self.up(*end)


class EventRecorder:
    """Callable that stores every payload it receives."""

    def __init__(self):
        self.events: List[Any] = []

    def __call__(self, *args):
        self.events.append(args[0] if len(args) == 1 else args)

    def __len__(self):
        return len(self.events)

    @property
    def last(self):
        return self.events[-1]


# ============== Fixtures ==============

@pytest.fixture(autouse=True)
def isolated_settings():
    """Never let a test see another test's global settings manager."""
    reset_settings_manager()
    yield
    reset_settings_manager()


@pytest.fixture
def settings() -> AppSettings:
    """Default settings, never read from disk."""
    return AppSettings()


@pytest.fixture
def surface() -> RecordingSurface:
    return RecordingSurface()


@pytest.fixture
def clock() -> ManualFrameClock:
    return ManualFrameClock(frame_ms=16)


@pytest.fixture
def scene(surface, clock, settings) -> Scene:
    """Empty scene on a recording surface."""
    return Scene(surface, clock=clock, settings=settings)


@pytest.fixture
def pointer(surface) -> PointerDriver:
    return PointerDriver(surface)


@pytest.fixture
def recorder():
    """Factory for EventRecorder instances."""
    return EventRecorder


@pytest.fixture
def populated_scene(scene):
    """Scene with a circle, a rect and a triangle, in that paint order."""
    scene.circle(x=50, y=50, radius=20, color="red")
    scene.rect(x=100, y=100, width=80, height=40, color="blue")
    scene.triangle(x=300, y=100, radius=50, color="green")
    return scene


@pytest.fixture
def settings_path(tmp_path: Path) -> str:
    """Temporary settings file location."""
    return str(tmp_path / "config" / "settings.json")
