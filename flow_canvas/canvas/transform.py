from typing import Tuple

from flow_canvas.core.config import settings

Point = Tuple[float, float]


class Transform:
    """ Pan offset and zoom scale of the canvas, maps screen <-> world space"""

    def __init__(self, pan_x: float = 0.0, pan_y: float = 0.0, scale: float = 1.0,
                 min_scale: float = None, max_scale: float = None, zoom_sensitivity: float = None):
        self.min_scale = settings.MIN_SCALE if min_scale is None else min_scale
        self.max_scale = settings.MAX_SCALE if max_scale is None else max_scale
        self.zoom_sensitivity = settings.ZOOM_SENSITIVITY if zoom_sensitivity is None else zoom_sensitivity
        self.pan_x = pan_x
        self.pan_y = pan_y
        self.scale = self.clamp(scale)

    def clamp(self, scale: float) -> float:
        return min(max(scale, self.min_scale), self.max_scale)

    def world_to_screen(self, point: Point) -> Point:
        return point[0] * self.scale + self.pan_x, point[1] * self.scale + self.pan_y

    def screen_to_world(self, point: Point) -> Point:
        return (point[0] - self.pan_x) / self.scale, (point[1] - self.pan_y) / self.scale

    def screen_delta_to_world(self, dx: float, dy: float) -> Point:
        """Drag deltas are divided by the scale so dragging feels 1:1 at any zoom"""
        return dx / self.scale, dy / self.scale

    def pan_by(self, dx: float, dy: float):
        self.pan_x += dx
        self.pan_y += dy

    def zoom(self, cursor: Point, delta: float):
        """Zoom by delta (in wheel units) keeping the world point under the cursor in place"""
        new_scale = self.clamp(self.scale + delta * self.zoom_sensitivity)
        world_x, world_y = self.screen_to_world(cursor)
        self.pan_x = cursor[0] - world_x * new_scale
        self.pan_y = cursor[1] - world_y * new_scale
        self.scale = new_scale

    def wheel(self, cursor: Point, delta_y: float):
        """Browser style wheel: scrolling up (negative delta_y) zooms in"""
        self.zoom(cursor, -delta_y)

    def center_on(self, world_point: Point, viewport_width: float, viewport_height: float):
        """Pan so world_point shows in the middle of the viewport, scale unchanged"""
        self.pan_x = viewport_width / 2 - world_point[0] * self.scale
        self.pan_y = viewport_height / 2 - world_point[1] * self.scale

    @property
    def zoom_percent(self) -> int:
        return round(self.scale * 100)

    def as_dict(self) -> dict:
        return {"pan_x": self.pan_x, "pan_y": self.pan_y, "scale": self.scale, "zoom_percent": self.zoom_percent}
