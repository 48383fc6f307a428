"""
Unit tests for the Transformer selection overlay.

Tests:
- Resize geometry helpers
- Selection, border and anchors
- Moving the selection by dragging the border
- Resizing by dragging an anchor
"""

import logging

import pytest
from radial.core.transformer import (
    ANCHOR_EDGES, Transformer, TransformerConfig, anchor_point, resize_rect, selection_rect,
)
from radial.models.events import EventKind, TransformEvent
from radial.models.geometry import BoundsRect


class TestResizeGeometry:
    """Tests for the pure resize helpers."""

    def test_anchor_points(self):
        rect = BoundsRect(0, 0, 100, 50)
        assert anchor_point(rect, "topLeft") == (0, 0)
        assert anchor_point(rect, "topRight") == (100, 0)
        assert anchor_point(rect, "bottomLeft") == (0, 50)
        assert anchor_point(rect, "bottomRight") == (100, 50)

    def test_top_left_keeps_bottom_right_fixed(self):
        rect = resize_rect(BoundsRect(0, 0, 100, 50), "topLeft", 20, 10)
        assert rect == BoundsRect(20, 10, 80, 40)

    def test_bottom_right_grows(self):
        rect = resize_rect(BoundsRect(0, 0, 100, 50), "bottomRight", 20, 10)
        assert rect == BoundsRect(0, 0, 120, 60)

    def test_top_right(self):
        rect = resize_rect(BoundsRect(0, 0, 100, 50), "topRight", -30, 10)
        assert rect == BoundsRect(0, 10, 70, 40)

    def test_minimum_size(self):
        rect = resize_rect(BoundsRect(0, 0, 100, 50), "topLeft", 500, 500, minimum=10)
        assert rect == BoundsRect(90, 40, 10, 10)

    def test_selection_rect_union(self, scene):
        circle = scene.circle(x=50, y=50, radius=10)
        rect = scene.rect(x=100, y=100, width=20, height=20)
        assert selection_rect([circle, rect]) == BoundsRect(40, 40, 80, 80)

    def test_selection_rect_empty(self):
        assert selection_rect([]) == BoundsRect()


class TestTransformerConfig:
    """Tests for TransformerConfig."""

    def test_defaults_follow_settings(self, scene):
        transformer = scene.transformer()
        expected = scene.settings.transformer
        assert transformer.config.padding == expected.padding
        assert transformer.config.size == expected.size

    def test_keyword_overrides(self, scene):
        transformer = scene.transformer(padding=0, color="red")
        assert transformer.config.padding == 0
        assert transformer.config.color == "red"

    def test_unknown_anchor_raises(self):
        with pytest.raises(ValueError):
            TransformerConfig(anchors_enabled=["middle"])

    def test_all_anchors_by_default(self):
        assert TransformerConfig().anchors_enabled == list(ANCHOR_EDGES)


class TestSelection:
    """Tests for add / clear / destroy."""

    def test_add_builds_border_and_anchors(self, scene):
        target = scene.rect(x=0, y=0, width=100, height=50, draggable=True)
        transformer = Transformer(scene, TransformerConfig())

        transformer.add([target])

        assert transformer.get_rect() == BoundsRect(-5, -5, 110, 60)
        assert transformer.border.is_ignored()
        assert transformer.border.get_position() == (-5, -5)
        assert set(transformer.anchors) == set(ANCHOR_EDGES)
        assert transformer.anchors["bottomRight"].get_position() == (105, 55)
        assert transformer.anchors["topLeft"].get_attr("radius") == 5
        assert len(scene.children) == 6

    def test_add_disables_node_drag(self, scene):
        target = scene.rect(x=0, y=0, width=100, height=50, draggable=True)
        transformer = scene.transformer()
        transformer.add([target])
        assert not target.is_draggable()

    def test_clear_restores_drag_flag(self, scene):
        target = scene.rect(x=0, y=0, width=100, height=50, draggable=True)
        other = scene.rect(x=200, y=0, width=10, height=10)
        transformer = scene.transformer()

        transformer.add([target, other])
        transformer.clear()

        assert target.is_draggable()
        assert not other.is_draggable()
        assert transformer.get_rect() is None
        assert transformer.border is None
        assert scene.children == [target, other]

    def test_drag_toggle_schedules_no_frame(self, scene):
        """The drag flag is not painted, so toggling it leaves the target clean."""
        target = scene.rect(x=0, y=0, width=100, height=50, draggable=True)
        transformer = scene.transformer()

        transformer.add([target])
        assert not target.is_draggable()
        assert not target.has_pending_redraw

        transformer.clear()
        assert target.is_draggable()
        assert not target.has_pending_redraw

    def test_reselect_replaces_overlay(self, scene):
        a = scene.rect(x=0, y=0, width=10, height=10)
        b = scene.rect(x=100, y=0, width=10, height=10)
        transformer = scene.transformer()

        transformer.add([a])
        first_border = transformer.border
        transformer.add([b])

        assert first_border.is_destroyed
        assert transformer.nodes == [b]
        assert len(scene.children) == 2 + 1 + 4

    def test_subset_of_anchors(self, scene):
        target = scene.rect(width=10, height=10)
        transformer = scene.transformer(anchors_enabled=["topLeft", "bottomRight"])
        transformer.add([target])
        assert set(transformer.anchors) == {"topLeft", "bottomRight"}

    def test_empty_selection_warns(self, scene, caplog):
        transformer = scene.transformer()
        with caplog.at_level(logging.WARNING, logger="radial.core.transformer"):
            transformer.add([])
        assert "no nodes" in caplog.text
        assert transformer.border is None

    def test_add_after_destroy_raises(self, scene):
        target = scene.rect(width=10, height=10)
        transformer = scene.transformer()
        transformer.destroy()
        with pytest.raises(RuntimeError):
            transformer.add([target])

    def test_destroyed_node_is_skipped_on_clear(self, scene):
        target = scene.rect(width=10, height=10, draggable=True)
        transformer = scene.transformer()
        transformer.add([target])
        target.destroy()
        transformer.clear()
        assert transformer.nodes == []


class TestBorderDrag:
    """Tests for moving the selection."""

    def test_drag_moves_every_node(self, scene, pointer, recorder):
        target = scene.rect(x=0, y=0, width=100, height=50)
        transformer = scene.transformer()
        transformer.add([target])
        drags, ends = recorder(), recorder()
        transformer.on(EventKind.DRAG, drags)
        transformer.on(EventKind.DRAGEND, ends)

        pointer.down(50, 25)
        pointer.move(70, 35)
        pointer.up(70, 35)

        assert transformer.border.get_position() == (15, 5)
        assert target.get_position() == (20, 10)
        assert transformer.anchors["bottomRight"].get_position() == (125, 65)
        assert transformer.get_rect() == BoundsRect(15, 5, 110, 60)
        assert (drags.last.x, drags.last.y) == (15, 5)
        assert len(ends) == 1

    def test_press_on_anchor_does_not_move(self, scene, pointer, recorder):
        target = scene.rect(x=0, y=0, width=100, height=50)
        transformer = scene.transformer()
        transformer.add([target])
        starts = recorder()
        transformer.on(EventKind.DRAGSTART, starts)

        pointer.down(105, 55)
        pointer.move(125, 65)
        pointer.up(125, 65)

        assert len(starts) == 0
        assert target.get_position() == (0, 0)
        assert transformer.border.get_position() == (-5, -5)


class TestAnchorResize:
    """Tests for resizing through the anchors."""

    def test_bottom_right_resize(self, scene, pointer, recorder):
        target = scene.rect(x=0, y=0, width=100, height=50)
        transformer = scene.transformer()
        transformer.add([target])
        transforms = recorder()
        transformer.on(EventKind.TRANSFORM, transforms)

        pointer.down(105, 55)
        pointer.move(125, 65)

        event = transforms.last
        assert isinstance(event, TransformEvent)
        assert event.anchor == "bottomRight"
        assert event.rect == BoundsRect(-5, -5, 130, 70)
        assert event.scale_x == pytest.approx(130 / 110)
        assert event.scale_y == pytest.approx(70 / 60)
        assert event.nodes == [target]

        border = transformer.border
        assert (border.get_attr("width"), border.get_attr("height")) == (130, 70)
        assert transformer.anchors["topRight"].get_position() == (125, -5)
        assert transformer.anchors["bottomLeft"].get_position() == (-5, 65)

    def test_resize_clamps_to_anchor_size(self, scene, pointer):
        target = scene.rect(x=0, y=0, width=100, height=50)
        transformer = scene.transformer()
        transformer.add([target])

        pointer.down(105, 55)
        pointer.move(-200, -200)
        pointer.up(-200, -200)

        assert transformer.get_rect() == BoundsRect(-5, -5, 10, 10)
        assert transformer.anchors["bottomRight"].get_position() == (5, 5)

    def test_resize_does_not_touch_nodes(self, scene, pointer):
        target = scene.rect(x=0, y=0, width=100, height=50)
        transformer = scene.transformer()
        transformer.add([target])

        pointer.drag((105, 55), (125, 65))

        assert target.get_attr("width") == 100
        assert target.get_position() == (0, 0)
