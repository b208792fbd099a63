"""All tunable constants for the agrarian simulation and its view engine.

Every magic number in the codebase must reference this file.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Optional

from agrarian_sim.core.errors import ConfigurationError

# =============================================================================
# TIME
# =============================================================================
START_DATE: tuple[int, int, int] = (1905, 1, 1)
TICK_DAYS: int = 1
SECONDS_PER_SIM_DAY: float = 0.6        # real seconds per simulated day
FAST_FORWARD_MULTIPLIER: float = 10.0

# =============================================================================
# WORLD BUILD
# =============================================================================
INITIAL_FARM_COUNT: int = 24
INITIAL_PERSON_COUNT: int = 150
HOUSEHOLD_SIZE: int = 5
FARM_SPREAD_X: float = 1400.0
FARM_SPREAD_Y: float = 1000.0
FARM_LAND_AREA_RANGE: tuple[float, float] = (60.0, 210.0)
FARM_PRODUCTIVITY_RANGE: tuple[float, float] = (0.8, 1.2)
FARM_START_MECHANIZATION: float = 0.05
FARM_START_FAMINE_RISK: float = 0.05
FARM_START_STORED_GRAIN: float = 20.0
HOUSEHOLD_START_FOOD: float = 40.0

PERSON_AGE_RANGE: tuple[int, int] = (18, 48)
PERSON_SKILL_RANGE: tuple[float, float] = (0.4, 1.0)
PERSON_MORALE_RANGE: tuple[float, float] = (0.6, 0.9)
PERSON_DISPOSITION_RANGE: tuple[float, float] = (0.3, 0.7)

# =============================================================================
# FARM YIELD MODEL
# =============================================================================
YIELD_HISTORY_LIMIT: int = 365
YIELD_WINDOW_DAYS: int = 30
MECHANIZATION_YIELD_WEIGHT: float = 0.5
MORALE_YIELD_FLOOR: float = 0.7
MORALE_YIELD_WEIGHT: float = 0.3
FAMINE_YIELD_PENALTY: float = 0.3
GRAIN_STORAGE_FRACTION: float = 0.2
COLLECTIVE_SKILL_BOOST: float = 0.05
COLLECTIVE_MIN_MECHANIZATION: float = 0.08

# =============================================================================
# PERSON / HOUSEHOLD
# =============================================================================
DAILY_AGING_PROBABILITY: float = 0.0004
HEALTH_MORALE_DRIFT: float = 0.002
DISPLACEMENT_FAMINE_THRESHOLD: float = 0.4
DISPLACEMENT_RATE: float = 0.004
FOOD_PER_MEMBER_PER_DAY: float = 0.5
LIVESTOCK_PER_LAND_UNIT: float = 0.05

# =============================================================================
# POLICIES
# =============================================================================
BASELINE_GROWTH: float = 0.00005
DISRUPTION_YIELD_FACTOR: float = 0.90
DISRUPTION_FAMINE_STEP: float = 0.0002
DISRUPTION_MORALE_LOSS: float = 0.001
REQUISITION_FRACTION: float = 0.02
NEP_YIELD_FACTOR: float = 1.08
NEP_FAMINE_FACTOR: float = 0.95
NEP_MORALE_GAIN: float = 0.002
COLLECTIVIZATION_START_YEAR: int = 1929
COLLECTIVIZATION_DAILY_FRACTION: float = 0.01
COLLECTIVIZATION_MORALE_LOSS: float = 0.0015
QUOTA_YIELD_FACTOR: float = 1.05
QUOTA_FAMINE_STEP: float = 0.0005
QUOTA_FAMINE_CEILING: float = 0.5
MECHANIZATION_STEP: float = 0.0003
MECHANIZATION_PRODUCTIVITY_GROWTH: float = 0.0001
MECHANIZATION_FAMINE_FACTOR: float = 0.995

# =============================================================================
# VIEW: LEVELS & CAMERA
# =============================================================================
EASE_SPEED: float = 4.0                 # transition progress per second
PICK_RADIUS: float = 25.0               # world units
USER_ZOOM_MIN: float = 0.5
USER_ZOOM_MAX: float = 2.5
WHEEL_ZOOM_OUT: float = 0.9
WHEEL_ZOOM_IN: float = 1.1
CAMERA_SMOOTHING: float = 8.0
BASE_WORLD_SIZE: float = 5000.0
DEFAULT_VIEWPORT: tuple[int, int] = (1280, 720)
FRAME_INTERVAL: float = 1.0 / 60.0

# =============================================================================
# RENDER STATE
# =============================================================================
PRIVATE_FARM_COLOR: int = 0x52C28D
COLLECTIVE_FARM_COLOR: int = 0xC2527D
PERSON_COLOR: int = 0xDBE2E9
DISPLACED_PERSON_COLOR: int = 0xFFA500
OVERLAY_COLORS: dict[str, int] = {
    "grain": 0x78DCFF,
    "morale": 0x78FF78,
    "famine_risk": 0xFF3C00,
}
OVERLAY_MODES: tuple[str, ...] = ("none", "grain", "morale", "famine_risk")
GRAIN_OVERLAY_SCALE: float = 100.0      # last yield that maps to full heat
OVERLAY_ALPHA: float = 0.25
FARM_MARKER_BASE_RADIUS: float = 10.0
FARM_MARKER_MAX_EXTRA: float = 25.0
FARM_MARKER_AREA_DIVISOR: float = 30.0
MAX_PERSON_MARKERS: int = 120
PERSON_RING_RADIUS: float = 7.0         # world units around the home farm

# =============================================================================
# DASHBOARD
# =============================================================================
DASHBOARD_UPDATE_INTERVAL: int = 30  # update every N simulated days


@dataclass
class SessionConfig:
    """Recognised options for one view session.

    ``levels`` and ``eras`` default to the built-in tables when left as None.
    """

    levels: Optional[list] = None
    eras: Optional[list] = None
    pick_radius: float = PICK_RADIUS
    ease_speed: float = EASE_SPEED
    zoom_min: float = USER_ZOOM_MIN
    zoom_max: float = USER_ZOOM_MAX
    smoothing_rate: float = CAMERA_SMOOTHING
    seconds_per_day: float = SECONDS_PER_SIM_DAY
    fast_forward_multiplier: float = FAST_FORWARD_MULTIPLIER
    base_world_size: float = BASE_WORLD_SIZE
    start_date: tuple[int, int, int] = START_DATE
    tick_days: int = TICK_DAYS
    strict_eras: bool = False
    seed: int = 42
    farm_count: int = INITIAL_FARM_COUNT
    person_count: int = INITIAL_PERSON_COUNT
    household_size: int = HOUSEHOLD_SIZE
    viewport: tuple[int, int] = DEFAULT_VIEWPORT

    def validate(self) -> "SessionConfig":
        """Raise ConfigurationError for values the session cannot run with."""
        if self.levels is not None and not self.levels:
            raise ConfigurationError("level table is empty")
        if self.eras is not None and not self.eras:
            raise ConfigurationError("era table is empty")
        if self.pick_radius <= 0:
            raise ConfigurationError(f"pick_radius must be positive, got {self.pick_radius}")
        if self.ease_speed <= 0:
            raise ConfigurationError(f"ease_speed must be positive, got {self.ease_speed}")
        if not 0 < self.zoom_min <= self.zoom_max:
            raise ConfigurationError(
                f"zoom band must satisfy 0 < min <= max, got [{self.zoom_min}, {self.zoom_max}]"
            )
        if self.smoothing_rate <= 0:
            raise ConfigurationError(f"smoothing_rate must be positive, got {self.smoothing_rate}")
        if self.seconds_per_day <= 0:
            raise ConfigurationError(f"seconds_per_day must be positive, got {self.seconds_per_day}")
        if self.fast_forward_multiplier < 1:
            raise ConfigurationError(
                f"fast_forward_multiplier must be >= 1, got {self.fast_forward_multiplier}"
            )
        if self.base_world_size <= 0:
            raise ConfigurationError(f"base_world_size must be positive, got {self.base_world_size}")
        if self.tick_days < 1:
            raise ConfigurationError(f"tick_days must be >= 1, got {self.tick_days}")
        if self.farm_count < 1 or self.person_count < 0 or self.household_size < 1:
            raise ConfigurationError("entity counts must be positive")
        if self.viewport[0] <= 0 or self.viewport[1] <= 0:
            raise ConfigurationError(f"viewport must be positive, got {self.viewport}")
        return self

    @classmethod
    def from_dict(cls, data: dict) -> "SessionConfig":
        """Build a config from a JSON-style mapping.

        Levels are given as ``{"id", "name", "scale"}`` objects and eras as
        ``{"id", "name", "start": "YYYY-MM-DD", "end": ..., "policies": [...]}``.
        """
        from agrarian_sim.view.levels import Level
        from agrarian_sim.world.eras import Era, parse_day

        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ConfigurationError(f"unknown config keys: {sorted(unknown)}")

        kwargs = dict(data)
        try:
            if "levels" in kwargs:
                kwargs["levels"] = [
                    Level(id=str(lv["id"]), name=str(lv["name"]), scale=float(lv["scale"]))
                    for lv in kwargs["levels"]
                ]
            if "eras" in kwargs:
                kwargs["eras"] = [
                    Era(
                        id=str(e["id"]),
                        name=str(e["name"]),
                        start=parse_day(e["start"]),
                        end=parse_day(e["end"]),
                        description=str(e.get("description", "")),
                        policies=tuple(e.get("policies", ())),
                    )
                    for e in kwargs["eras"]
                ]
        except (KeyError, TypeError, ValueError) as exc:
            raise ConfigurationError(f"malformed level/era entry: {exc}") from exc
        for key in ("start_date", "viewport"):
            if key in kwargs:
                kwargs[key] = tuple(kwargs[key])
        return cls(**kwargs).validate()
