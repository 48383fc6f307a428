"""Services package."""

from .emitter import EventEmitter
from .frame_clock import FrameClock, ManualFrameClock
from .surface import DrawingSurface
from .collision import (
    is_point_in_shape,
    check_collision,
    circles_collide,
    circle_rect_collide,
    rects_collide,
)
from .event_delegate import ShapeEventDelegate, run_collision_sweep
from .settings_manager import (
    SettingsManager,
    AppSettings,
    RenderSettings,
    TransformerDefaults,
    CanvasSettings,
    get_settings,
    reset_settings_manager,
)
