"""
Unit tests for Shape.

Tests:
- Attribute access, normalization and no-op writes
- Dirty flag and render()
- Bounding boxes and bounding rects
- Render pipeline order (shadow, border, fill, alpha, transform)
- destroy() and bounce()
"""

import math

import pytest
from radial.core.scene import Scene
from radial.core.shape import Shape
from radial.models.geometry import BoundsRect
from radial.models.shape_config import (
    CircleConfig, Gradient, ImageConfig, LineConfig, ParticleConfig, ShapeConfig, ShapeKind,
)
from radial.models.events import EventKind
from radial.services.frame_clock import ManualFrameClock


class TestAttributes:
    """Tests for get_attr / set_attr."""

    def test_get_attr(self, scene):
        circle = scene.circle(x=10, y=20, radius=5)
        assert circle.get_attr("radius") == 5
        assert circle.get_position() == (10, 20)

    def test_unknown_attribute(self, scene):
        rect = scene.rect(x=0, y=0, width=10, height=10)
        with pytest.raises(KeyError):
            rect.get_attr("radius")
        with pytest.raises(KeyError):
            rect.set_attr("radius", 3)

    def test_set_same_value_is_noop(self, scene, clock):
        circle = scene.circle(x=10, y=20, radius=5)
        assert not circle.is_dirty

        circle.set_attr("x", 10)

        assert not circle.is_dirty
        assert clock.pending == 0

    def test_set_new_value_marks_dirty_and_schedules_once(self, scene, clock):
        circle = scene.circle(x=10, y=20, radius=5)

        circle.set_attr("x", 11)
        circle.set_attr("y", 21)

        assert circle.is_dirty
        assert circle.has_pending_redraw
        assert clock.pending == 1

    def test_set_attrs_single_redraw(self, scene, clock):
        circle = scene.circle(x=10, y=20, radius=5)
        circle.set_attrs({"x": 1, "y": 2, "radius": 3})
        assert clock.pending == 1
        assert circle.get_attr("radius") == 3

    def test_set_attrs_nothing_changed(self, scene, clock):
        circle = scene.circle(x=10, y=20, radius=5)
        circle.set_attrs({"x": 10, "radius": 5})
        assert clock.pending == 0
        assert not circle.is_dirty

    def test_opacity_is_clamped(self, scene):
        rect = scene.rect(width=10, height=10, opacity=2)
        assert rect.get_attr("opacity") == 1.0
        rect.set_attr("opacity", -1)
        assert rect.get_attr("opacity") == 0.0

    def test_polygon_sides_normalized(self, scene):
        polygon = scene.polygon(x=0, y=0, radius=10, sides=2)
        assert polygon.get_attr("sides") == 3
        polygon.set_attr("sides", 5.7)
        assert polygon.get_attr("sides") == 5

    def test_line_points_flat_form(self, scene):
        line = scene.line(points=[0, 0, 10, 5, 20, 0])
        assert line.get_attr("points") == [(0, 0), (10, 5), (20, 0)]

    def test_scale_accepts_dict(self, scene):
        rect = scene.rect(width=10, height=10)
        rect.set_attr("scale", {"x": 2, "y": 3})
        assert rect.get_attr("scale") == (2.0, 3.0)

    def test_kind_and_is_radius(self, scene):
        circle = scene.circle(radius=5)
        rect = scene.rect(width=5, height=5)
        assert circle.kind == ShapeKind.CIRCLE
        assert circle.is_radius
        assert not rect.is_radius


class TestRender:
    """Tests for the dirty flag and render()."""

    def test_factory_renders_and_registers(self, scene, surface):
        circle = scene.circle(x=50, y=50, radius=20)
        assert scene.children == [circle]
        assert not circle.is_dirty
        assert surface.count("arc") == 1

    def test_render_is_noop_when_clean(self, scene, surface):
        circle = scene.circle(x=50, y=50, radius=20)
        surface.reset()
        assert circle.render() is False
        assert surface.calls == []

    def test_single_render_clears_dirty(self, scene):
        circle = scene.circle(x=50, y=50, radius=20)
        circle.mark_dirty()
        assert circle.render() is True
        assert not circle.is_dirty

    def test_hidden_shape_is_not_drawn_or_registered(self, scene, surface):
        circle = scene.circle(x=50, y=50, radius=20, visible=False)
        assert circle.is_dirty
        assert scene.children == []
        assert surface.count("arc") == 0

    def test_hidden_shape_registers_once_shown(self, scene, clock):
        circle = scene.circle(x=50, y=50, radius=20, visible=False)
        circle.set_attr("visible", True)
        clock.run()
        assert scene.children == [circle]
        assert not circle.is_dirty

    def test_image_without_pixels_is_not_registered(self, scene, surface):
        image = scene.image(x=0, y=0, width=10, height=10)
        assert scene.children == []
        image.set_attr("image", "pixels")
        image.render()
        assert scene.children == [image]
        assert surface.args_of("draw_image") == [("pixels", 0, 0, 10, 10)]

    def test_base_config_cannot_draw(self, scene):
        with pytest.raises(NotImplementedError):
            scene.create(ShapeConfig())

    def test_base_config_has_no_geometry(self, scene):
        shape = Shape(scene, ShapeConfig())
        with pytest.raises(NotImplementedError):
            shape.get_bounding_box()

    def test_particle_emitter_is_not_drawable(self, scene):
        with pytest.raises(NotImplementedError):
            scene.create(ParticleConfig(x=10, y=10, count=20))

    def test_pipeline_order(self, scene, surface):
        scene.rect(x=0, y=0, width=10, height=10, shadow_color="black", shadow_blur=2,
                   border_width=2, border_color="red")
        names = surface.names()

        assert names[0] == "save"
        assert names[-1] == "restore"
        assert names.index("set_shadow") < names.index("set_fill_style")
        assert names.index("set_stroke_style") < names.index("fill")
        assert names.index("fill") < names.index("stroke")

    def test_shadow_reset_before_applied(self, scene, surface):
        scene.circle(x=0, y=0, radius=5, shadow_color="black", shadow_blur=3, shadow_offset=(1, 2))
        assert surface.args_of("set_shadow") == [
            (None, 0.0, 0.0, 0.0),
            ("black", 3, 1.0, 2.0),
        ]

    def test_border_alpha(self, scene, surface):
        scene.rect(width=10, height=10, opacity=0.5, border_width=1, border_color="red",
                   border_opacity=0.5)
        alphas = [args[0] for args in surface.args_of("set_global_alpha")]
        assert alphas == pytest.approx([0.5, 0.25])

    def test_no_stroke_without_border(self, scene, surface):
        scene.rect(width=10, height=10)
        assert surface.count("stroke") == 0

    def test_gradient_fill(self, scene, surface):
        scene.rect(x=0, y=0, width=30, height=40,
                   gradient=Gradient(from_color="white", to_color="black", angle=0))
        (x0, y0, x1, y1, stops), = surface.args_of("create_linear_gradient")
        assert (x0, y0, x1, y1) == pytest.approx((-10, 20, 40, 20))
        assert stops == [(0.0, "white"), (1.0, "black")]
        fill_style = surface.args_of("set_fill_style")[0][0]
        assert fill_style[0] == "gradient"

    def test_gradient_from_dict(self, scene):
        rect = scene.rect(width=10, height=10, gradient={"from_color": "red", "to_color": "blue"})
        assert rect.get_attr("gradient") == Gradient(from_color="red", to_color="blue")

    def test_transform_about_center(self, scene, surface):
        scene.rect(x=0, y=0, width=100, height=50, rotation=90, scale=(2, 1))
        names = surface.names()
        assert names.index("translate") < names.index("rotate") < names.index("scale")
        assert surface.args_of("translate") == [(50, 25), (-50, -25)]
        assert surface.args_of("rotate") == [(pytest.approx(math.pi / 2),)]

    def test_no_transform_calls_for_identity(self, scene, surface):
        scene.rect(width=10, height=10)
        assert surface.count("translate") == 0

    def test_line_draw(self, scene, surface):
        scene.line(points=[(0, 0), (10, 10)], line_width=3, line_cap="round", dash=[4, 2])
        assert surface.args_of("set_line_width") == [(3,)]
        assert surface.args_of("set_line_cap") == [("round",)]
        assert surface.args_of("set_line_dash") == [([4.0, 2.0],)]
        assert surface.args_of("line_to") == [(10, 10)]

    def test_rounded_rect_uses_arc_to(self, scene, surface):
        scene.rect(x=0, y=0, width=40, height=20, border_radius=5)
        assert surface.count("arc_to") == 4
        assert surface.count("rect") == 0


class TestBounds:
    """Tests for bounding boxes and rects."""

    def test_bounding_box_carries_scene(self, scene):
        circle = scene.circle(x=1, y=2, radius=3)
        box = circle.get_bounding_box()
        assert box.kind == ShapeKind.CIRCLE
        assert (box.x, box.y, box.radius) == (1, 2, 3)
        assert box.scene is scene

    def test_circle_rect_with_border(self, scene):
        circle = scene.circle(x=50, y=50, radius=10, border_width=4, border_color="black")
        assert circle.get_bounding_rect() == BoundsRect(38, 38, 24, 24)

    def test_triangle_rect(self, scene):
        triangle = scene.triangle(x=100, y=100, radius=50)
        assert triangle.get_bounding_rect() == BoundsRect(50, 100, 100, 50)

    def test_line_rect_includes_half_width(self, scene):
        line = scene.line(points=[(0, 0), (10, 20)], line_width=4)
        assert line.get_bounding_rect() == BoundsRect(-2, -2, 14, 24)

    def test_shadow_padding(self, scene):
        rect = scene.rect(x=10, y=10, width=100, height=50,
                          shadow_color="black", shadow_blur=4, shadow_offset=(2, 0))
        assert rect.get_bounding_rect() == BoundsRect(8, 6, 108, 58)

    def test_shadow_ignored_without_color(self, scene):
        rect = scene.rect(x=10, y=10, width=100, height=50, shadow_blur=4)
        assert rect.get_bounding_rect() == BoundsRect(10, 10, 100, 50)

    def test_rotated_rect(self, scene):
        rect = scene.rect(x=0, y=0, width=100, height=50, rotation=90)
        bounds = rect.get_bounding_rect()
        assert (bounds.x, bounds.y, bounds.width, bounds.height) == pytest.approx((25, -25, 50, 100))


class TestDestroy:
    """Tests for destroy() and bounce()."""

    def test_destroy_removes_by_identity_and_keeps_order(self, scene):
        a = scene.rect(x=0, y=0, width=10, height=10)
        b = scene.rect(x=0, y=0, width=10, height=10)
        c = scene.rect(x=0, y=0, width=10, height=10)

        b.destroy()

        assert scene.children == [a, c]
        assert scene.children[0] is a
        assert b.is_destroyed

    def test_destroy_triggers_full_redraw(self, scene, surface):
        a = scene.circle(x=0, y=0, radius=5)
        b = scene.circle(x=20, y=0, radius=5)
        surface.reset()

        b.destroy()

        assert scene.redraw_count == 1
        assert surface.count("clear_rect") == 1
        assert surface.count("arc") == 1

    def test_destroy_is_idempotent(self, scene):
        a = scene.circle(radius=5)
        a.destroy()
        a.destroy()
        assert scene.children == []
        assert scene.redraw_count == 1

    def test_destroy_cancels_pending_redraw(self, scene, clock):
        a = scene.circle(radius=5)
        a.set_attr("x", 3)
        assert clock.pending == 1
        a.destroy()
        assert clock.pending == 0

    def test_destroy_clears_handlers_and_detaches(self, scene, surface):
        before = surface.pointer.listener_count(EventKind.CLICK)
        a = scene.circle(radius=5)
        calls = []
        a.on(EventKind.CLICK, calls.append)
        assert surface.pointer.listener_count(EventKind.CLICK) == before + 1

        a.destroy()

        assert surface.pointer.listener_count(EventKind.CLICK) == before
        assert not a.get_event_delegate().events.has_listeners(EventKind.CLICK)

    def test_destroy_unregistered_shape_skips_redraw(self, scene):
        hidden = scene.circle(radius=5, visible=False)
        hidden.destroy()
        assert scene.redraw_count == 0

    def test_bounce(self, scene, clock):
        circle = scene.circle(radius=5)
        circle.bounce(50)

        for _ in range(3):
            clock.tick()
        assert not circle.is_destroyed

        clock.tick()
        assert circle.is_destroyed
        assert scene.children == []

    def test_destroy_cancels_bounce(self, scene, clock):
        circle = scene.circle(radius=5)
        circle.bounce(50)
        circle.destroy()
        assert clock.pending == 0

    def test_destroy_earlier_in_frame_stops_bounce(self, scene, clock):
        circle = scene.circle(radius=5)
        clock.request_frame(lambda now: circle.destroy())
        circle.bounce(10_000)

        clock.tick()

        assert circle.is_destroyed
        assert clock.pending == 0

    def test_bounce_step_after_destroy_does_not_reschedule(self, surface, settings):
        """A bounce frame that still fires on a destroyed shape ends the timer."""
        class UncancellableClock(ManualFrameClock):
            def cancel_frame(self, handle):
                pass

        clock = UncancellableClock()
        scene = Scene(surface, clock=clock, settings=settings)
        circle = scene.circle(radius=5)
        circle.bounce(10_000)
        circle.destroy()

        clock.tick()

        assert clock.pending == 0
