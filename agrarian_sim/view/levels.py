"""Zoom levels (house -> world) and the eased transition between them."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence, Union

from agrarian_sim.core.config import EASE_SPEED
from agrarian_sim.core.errors import ConfigurationError


@dataclass(frozen=True)
class Level:
    id: str
    name: str
    scale: float  # base rendering scale; larger is closer


LEVELS: list[Level] = [
    Level("house", "House", 1.2),
    Level("district", "District", 0.8),
    Level("village", "Village", 0.55),
    Level("state", "State", 0.35),
    Level("country", "Country", 0.2),
    Level("world", "World", 0.08),
]


def lerp(a: float, b: float, t: float) -> float:
    return a + (b - a) * t


def ease_in_out_cubic(t: float) -> float:
    if t < 0.5:
        return 4 * t * t * t
    return 1 - (-2 * t + 2) ** 3 / 2


class LevelTransition:
    """Discrete level index plus continuous transition progress.

    Progress only grows between requests and sticks at 1; reaching 1 commits
    the target as the current level.
    """

    def __init__(self, levels: Optional[Sequence[Level]] = None, ease_speed: float = EASE_SPEED) -> None:
        self.levels: list[Level] = list(levels if levels is not None else LEVELS)
        if not self.levels:
            raise ConfigurationError("level table is empty")
        ids = [lv.id for lv in self.levels]
        if len(set(ids)) != len(ids):
            raise ConfigurationError(f"duplicate level ids in {ids}")
        for lv in self.levels:
            if lv.scale <= 0:
                raise ConfigurationError(f"level '{lv.id}' has non-positive scale {lv.scale}")
        if ease_speed <= 0:
            raise ConfigurationError(f"ease_speed must be positive, got {ease_speed}")

        self.ease_speed = ease_speed
        self.current_index: int = 0
        self.target_index: int = 0
        self.progress: float = 1.0

    @property
    def current_level(self) -> Level:
        return self.levels[self.current_index]

    @property
    def target_level(self) -> Level:
        return self.levels[self.target_index]

    @property
    def in_transition(self) -> bool:
        return self.progress < 1.0

    def index_of(self, level_id: str) -> int:
        for i, lv in enumerate(self.levels):
            if lv.id == level_id:
                return i
        return -1

    def request_level(self, id_or_index: Union[str, int]) -> bool:
        """Retarget the transition. Invalid or unchanged targets are ignored."""
        if isinstance(id_or_index, bool):
            return False
        if isinstance(id_or_index, str):
            index = self.index_of(id_or_index)
        elif isinstance(id_or_index, int):
            index = id_or_index
        else:
            return False

        if not 0 <= index < len(self.levels) or index == self.target_index:
            return False
        self.target_index = index
        self.progress = 0.0
        return True

    def step_target(self, delta: int) -> bool:
        """Move the target one or more levels in/out, clamped to the table."""
        index = max(0, min(len(self.levels) - 1, self.target_index + delta))
        return self.request_level(index)

    def step(self, dt: float) -> None:
        if self.progress >= 1.0:
            return
        self.progress += max(0.0, dt) * self.ease_speed
        if self.progress >= 1.0:
            self.progress = 1.0
            self.current_index = self.target_index

    def eased_progress(self) -> float:
        return ease_in_out_cubic(self.progress)

    def interpolated_scale(self) -> float:
        if self.progress >= 1.0:
            return self.target_level.scale
        return lerp(self.current_level.scale, self.target_level.scale, self.eased_progress())

    def interpolated_name(self) -> str:
        """Label switches to the target at the eased, not linear, midpoint."""
        if self.progress >= 1.0:
            return self.target_level.name
        if self.eased_progress() < 0.5:
            return f"{self.current_level.name} → {self.target_level.name}"
        return self.target_level.name
