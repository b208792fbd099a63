"""Per-frame driver: simulated time, level transitions, camera, and input."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Callable, Optional

import numpy as np

from agrarian_sim.core.clock import TimeController
from agrarian_sim.core.config import FRAME_INTERVAL, OVERLAY_MODES, SessionConfig
from agrarian_sim.simulation.engine import Simulation
from agrarian_sim.view.camera import Camera
from agrarian_sim.view.levels import LevelTransition
from agrarian_sim.view.picking import LevelEntities, Marker
from agrarian_sim.view.render_state import FrameState, build_frame_state
from agrarian_sim.viz.logger import SimLogger
from agrarian_sim.world.eras import day_number


@dataclass
class Session:
    """Everything one view session owns; created at start, dropped at end."""

    config: SessionConfig
    simulation: Simulation
    clock: TimeController
    levels: LevelTransition
    camera: Camera
    entities: LevelEntities
    viewport: tuple[int, int]
    playing: bool = True
    fast_forward: bool = False
    overlay: str = "none"
    selection: Optional[Marker] = None
    day_accumulator: float = 0.0
    frames: int = 0
    logger: SimLogger = field(default_factory=lambda: SimLogger(verbosity=0, stdout=False))

    @classmethod
    def create(cls, config: Optional[SessionConfig] = None, logger: Optional[SimLogger] = None) -> "Session":
        config = (config or SessionConfig()).validate()
        logger = logger or SimLogger(verbosity=0, stdout=False)

        clock = TimeController(
            eras=config.eras,
            start_day=day_number(*config.start_date),
            tick_days=config.tick_days,
            strict=config.strict_eras,
        )
        for first, last in clock.gaps:
            logger.log(SimLogger.ERA, f"Era table leaves days {first}..{last} uncovered", gap=[first, last])

        simulation = Simulation(rng=np.random.default_rng(config.seed), clock=clock, logger=logger)
        simulation.generate(config.farm_count, config.person_count, config.household_size)

        return cls(
            config=config,
            simulation=simulation,
            clock=clock,
            levels=LevelTransition(config.levels, ease_speed=config.ease_speed),
            camera=Camera(
                zoom_min=config.zoom_min,
                zoom_max=config.zoom_max,
                smoothing_rate=config.smoothing_rate,
                base_world_size=config.base_world_size,
            ),
            entities=LevelEntities.from_simulation(simulation, pick_radius=config.pick_radius),
            viewport=tuple(config.viewport),
            logger=logger,
        )


class FrameScheduler:
    """Single-threaded frame loop. All state changes happen inside frame() or an input handler."""

    def __init__(self, session: Session, renderer: Optional[Callable[[FrameState], None]] = None) -> None:
        self.session = session
        self.renderer = renderer
        self._running = False
        self.last_frame: Optional[FrameState] = None

    @property
    def running(self) -> bool:
        return self._running

    # ------------------------------------------------------------------
    # Frame
    # ------------------------------------------------------------------

    def frame(self, dt: float) -> FrameState:
        """Advance one display frame of ``dt`` real seconds."""
        s = self.session
        dt = max(0.0, dt)
        s.frames += 1

        if s.playing:
            rate = s.config.fast_forward_multiplier if s.fast_forward else 1.0
            s.day_accumulator += dt * rate
            if s.day_accumulator >= s.config.seconds_per_day:
                s.day_accumulator = 0.0
                s.simulation.advance_day()

        s.levels.step(dt)
        s.camera.step(dt)

        state = build_frame_state(s)
        self.last_frame = state
        if self.renderer is not None:
            self.renderer(state)
        return state

    def run(self, max_frames: Optional[int] = None, frame_interval: float = FRAME_INTERVAL) -> int:
        """Drive frames in real time until stop() or ``max_frames``. Returns frames run."""
        self._running = True
        count = 0
        last = time.perf_counter()
        try:
            while self._running and (max_frames is None or count < max_frames):
                now = time.perf_counter()
                self.frame(now - last)
                last = now
                count += 1
                remaining = frame_interval - (time.perf_counter() - now)
                if remaining > 0:
                    time.sleep(remaining)
        finally:
            self._running = False
        return count

    def stop(self) -> None:
        self._running = False

    # ------------------------------------------------------------------
    # Input (already normalised by the input layer)
    # ------------------------------------------------------------------

    def on_level_key(self, index: int) -> bool:
        accepted = self.session.levels.request_level(index)
        if accepted:
            self._log_view(f"Level requested: {self.session.levels.target_level.name}",
                           level=self.session.levels.target_level.id)
        return accepted

    def on_level_step(self, delta: int) -> bool:
        accepted = self.session.levels.step_target(delta)
        if accepted:
            self._log_view(f"Level requested: {self.session.levels.target_level.name}",
                           level=self.session.levels.target_level.id)
        return accepted

    def on_wheel(self, delta_y: float) -> None:
        self.session.camera.apply_wheel(delta_y)

    def on_drag(self, dx: float, dy: float) -> None:
        """Pointer drag in screen pixels; the world follows the pointer."""
        s = self.session
        s.camera.pan(-dx, -dy, s.levels.interpolated_scale(), s.viewport[0])

    def on_click(self, sx: float, sy: float) -> Optional[Marker]:
        """Farms win at every level; otherwise pick among the target level's markers.

        Selecting a farm also re-centres the camera on it.
        """
        s = self.session
        vw, vh = s.viewport
        wx, wy = s.camera.screen_to_world(sx, sy, s.levels.interpolated_scale(), vw, vh)
        picked = s.entities.pick_entity(s.levels.target_level.id, wx, wy)
        s.selection = picked
        if picked is not None:
            self._log_view(f"Selected {picked.kind} {picked.name}", [picked.id], kind=picked.kind)
            if picked.kind == "farm":
                s.camera.focus_on(picked.x, picked.y)
        return picked

    def on_center(self) -> None:
        self.session.camera.center()

    def on_clear_selection(self) -> None:
        self.session.selection = None

    def toggle_play(self) -> bool:
        self.session.playing = not self.session.playing
        return self.session.playing

    def toggle_fast(self) -> bool:
        self.session.fast_forward = not self.session.fast_forward
        return self.session.fast_forward

    def step_day(self) -> None:
        """Manual single-day advance, independent of play state."""
        self.session.simulation.advance_day()

    def set_overlay(self, mode: str) -> bool:
        if mode not in OVERLAY_MODES:
            return False
        self.session.overlay = mode
        return True

    def resize(self, width: int, height: int) -> None:
        if width > 0 and height > 0:
            self.session.viewport = (width, height)

    def _log_view(self, message: str, entity_ids: Optional[list[str]] = None, **data) -> None:
        """View events are written at once; a paused session has no daily flush."""
        s = self.session
        s.logger.log(SimLogger.VIEW, message, entity_ids=entity_ids, day=s.simulation.day, **data)
        s.logger.flush()
