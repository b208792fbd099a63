"""Households: shared food stores."""

from __future__ import annotations

from dataclasses import dataclass, field

from agrarian_sim.core.config import FOOD_PER_MEMBER_PER_DAY, HOUSEHOLD_START_FOOD


@dataclass
class Household:
    id: str
    member_ids: set[str] = field(default_factory=set)
    stored_food: float = HOUSEHOLD_START_FOOD

    def __post_init__(self) -> None:
        self.stored_food = max(0.0, self.stored_food)

    @property
    def size(self) -> int:
        return len(self.member_ids)

    def add_member(self, person_id: str) -> None:
        self.member_ids.add(person_id)

    def daily_update(self) -> float:
        """Consume food for every member; returns what was actually eaten."""
        demand = FOOD_PER_MEMBER_PER_DAY * len(self.member_ids)
        consumed = min(demand, self.stored_food)
        self.stored_food = max(0.0, self.stored_food - demand)
        return consumed
