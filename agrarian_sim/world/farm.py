"""Farm state and the daily yield model."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field

from agrarian_sim.core.config import (
    COLLECTIVE_MIN_MECHANIZATION,
    COLLECTIVE_SKILL_BOOST,
    FAMINE_YIELD_PENALTY,
    FARM_START_FAMINE_RISK,
    FARM_START_MECHANIZATION,
    FARM_START_STORED_GRAIN,
    GRAIN_STORAGE_FRACTION,
    MECHANIZATION_YIELD_WEIGHT,
    MORALE_YIELD_FLOOR,
    MORALE_YIELD_WEIGHT,
    YIELD_HISTORY_LIMIT,
    YIELD_WINDOW_DAYS,
)

PRIVATE = "private"
COLLECTIVE = "collective"


@dataclass
class Farm:
    """A landholding worked by the persons whose farm_id points at it."""

    id: str
    x: float = 0.0
    y: float = 0.0
    land_area: float = 100.0
    ownership_mode: str = PRIVATE  # private -> collective, never back
    productivity_base: float = 1.0
    mechanization_level: float = FARM_START_MECHANIZATION
    famine_risk: float = FARM_START_FAMINE_RISK
    daily_yield_modifier: float = 1.0
    stored_grain: float = FARM_START_STORED_GRAIN
    name: str = ""
    yield_history: deque = field(default_factory=lambda: deque(maxlen=YIELD_HISTORY_LIMIT))

    def __post_init__(self) -> None:
        if not self.name:
            self.name = f"Farm {self.id}"
        self.set_famine_risk(self.famine_risk)

    @property
    def is_private(self) -> bool:
        return self.ownership_mode == PRIVATE

    @property
    def is_collective(self) -> bool:
        return self.ownership_mode == COLLECTIVE

    @property
    def last_yield(self) -> float:
        return self.yield_history[-1] if self.yield_history else 0.0

    def set_famine_risk(self, value: float, ceiling: float = 1.0) -> None:
        """Store famine risk clamped to [0, ceiling]."""
        self.famine_risk = max(0.0, min(ceiling, value))

    def daily_reset(self) -> None:
        """Start-of-day reset, before any policy runs."""
        self.daily_yield_modifier = 1.0

    def convert_to_collective(self, avg_skill: float) -> None:
        self.ownership_mode = COLLECTIVE
        self.productivity_base *= 1 + avg_skill * COLLECTIVE_SKILL_BOOST
        self.mechanization_level = max(self.mechanization_level, COLLECTIVE_MIN_MECHANIZATION)

    def compute_daily_yield(self, labor_sum: float, morale_average: float) -> float:
        """Realize one day of output, bank part of it, and record it.

        The labor factor saturates at 1.0 once ``labor_sum`` exceeds 1, so labor
        only matters for nearly empty farms.
        """
        base = self.productivity_base * self.land_area
        base *= 1 + self.mechanization_level * MECHANIZATION_YIELD_WEIGHT
        base *= MORALE_YIELD_FLOOR + MORALE_YIELD_WEIGHT * morale_average
        base *= 0.5 + labor_sum / (2 * max(1.0, labor_sum))
        base *= self.daily_yield_modifier
        realized = base * (1 - self.famine_risk * FAMINE_YIELD_PENALTY)

        self.stored_grain += realized * GRAIN_STORAGE_FRACTION
        self.yield_history.append(realized)  # deque evicts the oldest past the limit
        return realized

    def avg_30_day_yield(self) -> float:
        """Sum, not mean, of the last 30 recorded yields."""
        recent = list(self.yield_history)[-YIELD_WINDOW_DAYS:]
        return sum(recent)
