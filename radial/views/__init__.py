"""Views package - PyQt6 drawing surface, frame clock and canvas widget."""

from .canvas import QtSurface, QtFrameClock, RadialCanvas, parse_color
