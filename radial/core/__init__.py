"""Scene graph core: shapes, scene container, layers and the transformer."""

from .drawing import DRAW_HOOKS, BOX_BUILDERS, draw_shape, build_bounding_box, shape_extents
from .shape import Shape
from .layer import Layer
from .scene import Scene
from .transformer import (
    Transformer,
    TransformerConfig,
    ANCHOR_EDGES,
    anchor_point,
    resize_rect,
    selection_rect,
)
