"""A rural person: labor, health, morale, and displacement."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from numpy.random import Generator

from agrarian_sim.core.config import (
    DAILY_AGING_PROBABILITY,
    DISPLACEMENT_FAMINE_THRESHOLD,
    DISPLACEMENT_RATE,
    HEALTH_MORALE_DRIFT,
)


def _clamp01(value: float) -> float:
    return max(0.0, min(1.0, value))


@dataclass
class Person:
    """Links to a farm and household by id only."""

    id: str
    name: str = ""
    age: int = 30
    labor_skill: float = 0.7
    health: float = 1.0
    morale: float = 0.75
    political_disposition: float = 0.5
    household_id: Optional[str] = None
    farm_id: Optional[str] = None
    displaced: bool = False

    def __post_init__(self) -> None:
        if not self.name:
            self.name = f"Person {self.id}"
        self.health = _clamp01(self.health)
        self.morale = _clamp01(self.morale)

    @property
    def labor_contribution(self) -> float:
        return self.labor_skill * self.health

    def adjust_morale(self, delta: float) -> None:
        self.morale = _clamp01(self.morale + delta)

    def daily_update(self, famine_risk: float, rng: Generator) -> bool:
        """Age, drift health with morale, and roll for displacement.

        Returns True if the person became displaced today.
        """
        if rng.random() < DAILY_AGING_PROBABILITY:
            self.age += 1

        # Health rises above 0.5 morale and falls below it
        self.health = _clamp01(self.health - HEALTH_MORALE_DRIFT * (0.5 - self.morale))

        became_displaced = False
        if (
            not self.displaced
            and famine_risk > DISPLACEMENT_FAMINE_THRESHOLD
            and rng.random() < famine_risk * DISPLACEMENT_RATE
        ):
            self.displaced = True
            became_displaced = True

        self.morale = _clamp01(self.morale)
        return became_displaced
