import pytest

from flow_canvas.canvas import Transform


class TestCoordinateMapping:

    @pytest.mark.parametrize("scale", [0.1, 0.37, 1.0, 2.5, 5.0])
    @pytest.mark.parametrize("point", [(0, 0), (123.5, -42.25), (-900, 3000)])
    def test_screen_world_round_trip(self, scale, point):
        transform = Transform(pan_x=17.5, pan_y=-230, scale=scale)
        back = transform.screen_to_world(transform.world_to_screen(point))
        assert back == pytest.approx(point)

    def test_world_to_screen_applies_scale_then_pan(self):
        transform = Transform(pan_x=10, pan_y=20, scale=2)
        assert transform.world_to_screen((5, 7)) == (20, 34)

    def test_scale_is_clamped_on_creation(self):
        assert Transform(scale=50).scale == 5.0
        assert Transform(scale=0.01).scale == 0.1


class TestZoom:

    def test_zoom_keeps_world_point_under_cursor(self):
        transform = Transform(pan_x=30, pan_y=-20, scale=1.5)
        cursor = (400, 300)
        world_before = transform.screen_to_world(cursor)

        transform.wheel(cursor, delta_y=-200)

        assert transform.scale == pytest.approx(1.7)
        assert transform.world_to_screen(world_before) == pytest.approx(cursor)

    def test_scroll_down_zooms_out(self):
        transform = Transform()
        transform.wheel((0, 0), delta_y=100)
        assert transform.scale == pytest.approx(0.9)

    def test_zoom_is_clamped(self):
        transform = Transform()
        transform.wheel((100, 100), delta_y=-100000)
        assert transform.scale == 5.0
        transform.wheel((100, 100), delta_y=100000)
        assert transform.scale == 0.1

    def test_anchor_holds_at_the_clamp(self):
        transform = Transform(pan_x=-50, pan_y=80, scale=4.9)
        cursor = (640, 360)
        world_before = transform.screen_to_world(cursor)
        transform.zoom(cursor, 1000)
        assert transform.world_to_screen(world_before) == pytest.approx(cursor)

    def test_zoom_percent(self):
        assert Transform(scale=1.234).zoom_percent == 123


class TestPanAndCenter:

    def test_pan_is_unscaled_screen_delta(self):
        transform = Transform(scale=3)
        transform.pan_by(15, -5)
        assert (transform.pan_x, transform.pan_y) == (15, -5)

    def test_drag_delta_is_divided_by_scale(self):
        transform = Transform(scale=2)
        assert transform.screen_delta_to_world(40, 20) == (20, 10)

    def test_center_on(self):
        transform = Transform(scale=2)
        transform.center_on((240, 200), 1000, 800)
        assert (transform.pan_x, transform.pan_y) == (20, 0)
        assert transform.world_to_screen((240, 200)) == (500, 400)
