"""
Radial - a retained-mode 2D scene graph.

Shapes live in a Scene, repaint themselves when their attributes change,
answer hit tests and collision sweeps, and can be dragged or resized through
a Transformer overlay. Drawing goes through the DrawingSurface contract; the
PyQt6 implementation lives in radial.views.
"""

from .models import (
    ShapeKind,
    ShapeConfig,
    CircleConfig,
    RectConfig,
    TriangleConfig,
    LineConfig,
    PolygonConfig,
    ImageConfig,
    ParticleConfig,
    Gradient,
    BoundsRect,
    EventKind,
    PointerEvent,
)
from .services import (
    DrawingSurface,
    FrameClock,
    ManualFrameClock,
    EventEmitter,
    AppSettings,
    get_settings,
)
from .core import Scene, Shape, Layer, Transformer, TransformerConfig

__version__ = "0.1.0"
