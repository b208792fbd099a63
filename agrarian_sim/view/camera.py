"""Smoothed 2D camera and the world <-> screen transform."""

from __future__ import annotations

from agrarian_sim.core.config import (
    BASE_WORLD_SIZE,
    CAMERA_SMOOTHING,
    USER_ZOOM_MAX,
    USER_ZOOM_MIN,
    WHEEL_ZOOM_IN,
    WHEEL_ZOOM_OUT,
)
from agrarian_sim.core.errors import ConfigurationError


class Camera:
    """Live position eases toward a target; user zoom is a bounded multiplier."""

    def __init__(
        self,
        zoom_min: float = USER_ZOOM_MIN,
        zoom_max: float = USER_ZOOM_MAX,
        smoothing_rate: float = CAMERA_SMOOTHING,
        base_world_size: float = BASE_WORLD_SIZE,
    ) -> None:
        if not 0 < zoom_min <= zoom_max:
            raise ConfigurationError(f"invalid zoom band [{zoom_min}, {zoom_max}]")
        if smoothing_rate <= 0:
            raise ConfigurationError(f"smoothing_rate must be positive, got {smoothing_rate}")
        if base_world_size <= 0:
            raise ConfigurationError(f"base_world_size must be positive, got {base_world_size}")

        self.zoom_min = zoom_min
        self.zoom_max = zoom_max
        self.smoothing_rate = smoothing_rate
        self.base_world_size = base_world_size

        self.x: float = 0.0
        self.y: float = 0.0
        self.target_x: float = 0.0
        self.target_y: float = 0.0
        self.user_zoom: float = max(zoom_min, min(zoom_max, 1.0))

    # ------------------------------------------------------------------
    # Movement
    # ------------------------------------------------------------------

    def center(self) -> None:
        self.target_x = 0.0
        self.target_y = 0.0

    def focus_on(self, x: float, y: float) -> None:
        self.target_x = x
        self.target_y = y

    def jump_to(self, x: float, y: float) -> None:
        self.x = self.target_x = x
        self.y = self.target_y = y

    def pan(self, dx_screen: float, dy_screen: float, level_scale: float, viewport_width: float) -> None:
        """Shift the target (never the live position) by a screen-space delta."""
        ratio = self.pixel_ratio(level_scale, viewport_width)
        if ratio <= 0:
            return
        self.target_x += dx_screen / ratio
        self.target_y += dy_screen / ratio

    def apply_wheel(self, delta_y: float) -> None:
        if delta_y == 0:
            return
        factor = WHEEL_ZOOM_OUT if delta_y > 0 else WHEEL_ZOOM_IN
        self.user_zoom = max(self.zoom_min, min(self.zoom_max, self.user_zoom * factor))

    def step(self, dt: float) -> None:
        """Exponential approach; never overshoots."""
        t = min(1.0, max(0.0, dt) * self.smoothing_rate)
        self.x += (self.target_x - self.x) * t
        self.y += (self.target_y - self.y) * t

    # ------------------------------------------------------------------
    # Transform
    # ------------------------------------------------------------------

    def pixel_ratio(self, level_scale: float, viewport_width: float) -> float:
        return level_scale * self.user_zoom * (viewport_width / self.base_world_size)

    def world_to_screen(
        self, wx: float, wy: float, level_scale: float, viewport_width: float, viewport_height: float,
    ) -> tuple[float, float]:
        ratio = self.pixel_ratio(level_scale, viewport_width)
        sx = (wx - self.x) * ratio + viewport_width / 2
        sy = (wy - self.y) * ratio + viewport_height / 2
        return sx, sy

    def screen_to_world(
        self, sx: float, sy: float, level_scale: float, viewport_width: float, viewport_height: float,
    ) -> tuple[float, float]:
        ratio = self.pixel_ratio(level_scale, viewport_width)
        if ratio <= 0:
            raise ValueError(f"pixel ratio must be positive to invert, got {ratio}")
        wx = (sx - viewport_width / 2) / ratio + self.x
        wy = (sy - viewport_height / 2) / ratio + self.y
        return wx, wy
