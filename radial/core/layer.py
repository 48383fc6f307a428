"""
Layers.

A Layer groups shapes under a name so they can be hidden or faded together.
It does not own its shapes and does not affect paint order: shapes are
still painted in the order the scene registered them.
"""

import logging
from typing import List

from ..models.geometry import clamp


logger = logging.getLogger(__name__)


class Layer:
    """Named visibility/opacity group of shapes."""

    def __init__(self, scene: 'Scene', name: str, visible: bool = True, opacity: float = 1.0):
        self.name = name
        self._scene = scene
        self._visible = visible
        self._opacity = clamp(float(opacity), 0.0, 1.0)
        self._shapes: List['Shape'] = []

    def __repr__(self) -> str:
        return f"<Layer {self.name!r} ({len(self._shapes)} shapes)>"

    def __len__(self) -> int:
        return len(self._shapes)

    def __contains__(self, shape) -> bool:
        return any(s is shape for s in self._shapes)

    @property
    def shapes(self) -> List['Shape']:
        return list(self._shapes)

    # -------------------------------------------------------------------------
    # Appearance
    # -------------------------------------------------------------------------

    @property
    def visible(self) -> bool:
        return self._visible

    @visible.setter
    def visible(self, value: bool):
        value = bool(value)
        if value != self._visible:
            self._visible = value
            self._invalidate()

    @property
    def opacity(self) -> float:
        return self._opacity

    @opacity.setter
    def opacity(self, value: float):
        value = clamp(float(value), 0.0, 1.0)
        if value != self._opacity:
            self._opacity = value
            self._invalidate()

    def show(self):
        self.visible = True

    def hide(self):
        self.visible = False

    # -------------------------------------------------------------------------
    # Membership
    # -------------------------------------------------------------------------

    def add(self, *shapes: 'Shape'):
        """Move shapes into this layer, taking them out of any other."""
        for shape in shapes:
            if shape in self:
                continue
            if shape.layer is not None:
                shape.layer.discard(shape)
            shape.layer = self
            self._shapes.append(shape)
            shape.mark_dirty()
        if shapes:
            self._scene.request_redraw()

    def remove(self, shape: 'Shape') -> bool:
        """Take a shape out of the layer and repaint. Returns False if absent."""
        if not self.discard(shape):
            return False
        shape.mark_dirty()
        self._scene.request_redraw()
        return True

    def discard(self, shape: 'Shape') -> bool:
        """Take a shape out of the layer without scheduling a repaint."""
        for i, existing in enumerate(self._shapes):
            if existing is shape:
                del self._shapes[i]
                shape.layer = None
                return True
        return False

    def clear(self):
        """Release every member."""
        shapes, self._shapes = self._shapes, []
        for shape in shapes:
            shape.layer = None
            shape.mark_dirty()
        if shapes:
            self._scene.request_redraw()

    def _invalidate(self):
        for shape in self._shapes:
            shape.mark_dirty()
        logger.debug(f"{self!r} changed (visible={self._visible}, opacity={self._opacity})")
        self._scene.request_redraw()
