#!/usr/bin/env python3
"""
Radial - Demo Entry Point

Opens a window with a small interactive scene: draggable shapes that log
collisions, and a selection overlay that follows clicks.

Usage:
    python main.py
    python main.py --debug    # Enable debug logging
"""

import sys
import logging
import argparse
from PyQt6.QtWidgets import QApplication, QMainWindow
from PyQt6.QtCore import Qt

from radial import CircleConfig, EventKind, Gradient, Scene, get_settings
from radial.views import RadialCanvas


def setup_logging(debug: bool = False):
    """Configure logging for the application."""
    level = logging.DEBUG if debug else logging.INFO

    # Create formatter
    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S'
    )

    # Console handler
    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)

    # Configure root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.addHandler(console_handler)

    # Log startup message
    logger = logging.getLogger(__name__)
    logger.info(f"Logging initialized at {'DEBUG' if debug else 'INFO'} level")


def setup_application() -> QApplication:
    """Configure the Qt application."""
    QApplication.setHighDpiScaleFactorRoundingPolicy(
        Qt.HighDpiScaleFactorRoundingPolicy.PassThrough
    )

    app = QApplication(sys.argv)
    app.setApplicationName("Radial")
    app.setApplicationVersion("0.1.0")
    app.setOrganizationName("radial")
    return app


def build_demo_scene(scene: Scene):
    """Populate `scene` with a few interactive shapes."""
    logger = logging.getLogger(__name__)

    scene.rect(x=60, y=60, width=160, height=100, color="#60A5FA", border_radius=12,
               border_width=2, border_color="#1D4ED8", draggable=True, collision=True)
    scene.circle(CircleConfig(x=360, y=140, radius=55, color="#F59E0B",
                              shadow_color="rgba(0, 0, 0, 0.3)", shadow_offset=(4, 4),
                              draggable=True, collision=True))
    scene.triangle(x=560, y=80, radius=70, color="#10B981", draggable=True, collision=True)
    scene.polygon(x=200, y=380, radius=60, sides=6,
                  gradient=Gradient(from_color="#F472B6", to_color="#7C3AED", angle=45),
                  draggable=True, collision=True)
    scene.line(points=[420, 360, 520, 440, 640, 380], line_width=6, color="#374151",
               line_cap="round", line_join="round")

    def on_collision(event):
        names = ", ".join(repr(shape) for shape in event.collisions)
        logger.info(f"{event.target!r} collides with {names}")

    def on_collision_end(event):
        logger.info(f"{event.target!r} no longer collides")

    scene.on(EventKind.COLLISION, on_collision)
    scene.on(EventKind.COLLISIONEND, on_collision_end)

    transformer = scene.transformer()

    def on_click(event):
        if event.target is scene:
            transformer.clear()
        else:
            transformer.add([event.target])

    def on_transform(event):
        logger.debug(f"Resize via {event.anchor}: {event.scale_x:.2f} x {event.scale_y:.2f}")

    scene.on(EventKind.CLICK, on_click)
    transformer.on(EventKind.TRANSFORM, on_transform)
    scene.redraw()


def main():
    """Main entry point."""
    # Parse command line arguments
    parser = argparse.ArgumentParser(description='Radial scene graph demo')
    parser.add_argument('--debug', action='store_true', help='Enable debug logging')
    args = parser.parse_args()

    # Setup logging
    setup_logging(debug=args.debug)

    app = setup_application()

    settings = get_settings().settings
    canvas = RadialCanvas(settings=settings)
    scene = canvas.create_scene()
    build_demo_scene(scene)

    window = QMainWindow()
    window.setWindowTitle("Radial")
    window.setCentralWidget(canvas)
    window.show()

    # Run event loop
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
