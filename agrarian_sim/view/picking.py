"""Pickable markers per zoom level and nearest-marker picking."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Optional

from agrarian_sim.core.config import PERSON_RING_RADIUS, PICK_RADIUS


@dataclass(frozen=True)
class Marker:
    """Anything that can be clicked: a farm, a person, or a map landmark."""

    kind: str  # "farm", "person", "house", "district", "village", "state", "country"
    id: str
    name: str
    x: float
    y: float


# Landmarks that exist regardless of the simulated population
WORLD_MARKERS: dict[str, list[Marker]] = {
    "house": [],
    "district": [Marker("house", "house_main", "Main House", 0.0, 0.0)],
    "village": [Marker("district", "district_central", "Central District", 0.0, 0.0)],
    "state": [Marker("village", "village_alpha", "Alpha Village", 0.0, 0.0)],
    "country": [Marker("state", "state_north", "North State", 0.0, 0.0)],
    "world": [Marker("country", "country_demo", "Demo Country", 0.0, 0.0)],
}


def pick_nearest(markers: Iterable[Marker], wx: float, wy: float, radius: float) -> Optional[Marker]:
    """Closest marker strictly inside ``radius``; ties keep the earlier marker."""
    closest: Optional[Marker] = None
    best = math.inf
    for marker in markers:
        dist = math.hypot(marker.x - wx, marker.y - wy)
        if dist < radius and dist < best:
            best = dist
            closest = marker
    return closest


class LevelEntities:
    """Farm markers shared by every level, plus per-level persons or landmarks.

    Farms are drawn at every level, so they are pickable at every level and
    take precedence; persons (house level) and landmarks are only tried when
    no farm is within reach.
    """

    def __init__(self, pick_radius: float = PICK_RADIUS, markers: Optional[dict[str, list[Marker]]] = None) -> None:
        self.pick_radius = pick_radius
        self.farm_markers: list[Marker] = []
        self.markers: dict[str, list[Marker]] = {
            level_id: list(items) for level_id, items in (markers or {}).items()
        }

    @classmethod
    def from_simulation(cls, sim: "Simulation", pick_radius: float = PICK_RADIUS) -> "LevelEntities":  # noqa: F821
        catalog = cls(pick_radius, WORLD_MARKERS)
        catalog.refresh(sim)
        return catalog

    def refresh(self, sim: "Simulation") -> None:  # noqa: F821
        """Rebuild the simulation-backed markers (all farms, persons at house)."""
        self.farm_markers = [Marker("farm", f.id, f.name, f.x, f.y) for f in sim.farms.values()]
        self.markers["house"] = person_markers(sim)

    @property
    def persons(self) -> list[Marker]:
        return [m for m in self.markers.get("house", []) if m.kind == "person"]

    def for_level(self, level_id: str) -> list[Marker]:
        """Everything pickable at a level, farms first."""
        return self.farm_markers + self.markers.get(level_id, [])

    def pick_entity(self, level_id: str, wx: float, wy: float) -> Optional[Marker]:
        farm = pick_nearest(self.farm_markers, wx, wy, self.pick_radius)
        if farm is not None:
            return farm
        return pick_nearest(self.markers.get(level_id, []), wx, wy, self.pick_radius)


def person_markers(sim: "Simulation") -> list[Marker]:  # noqa: F821
    """Persons spread evenly on a small ring around their farm.

    Persons without a known farm have no position and are not pickable.
    """
    markers: list[Marker] = []
    for farm in sim.farms.values():
        residents = sim.occupants(farm.id, include_displaced=True)
        n = len(residents)
        for i, person in enumerate(residents):
            angle = 2 * math.pi * i / max(1, n)
            markers.append(Marker(
                "person",
                person.id,
                person.name,
                farm.x + PERSON_RING_RADIUS * math.cos(angle),
                farm.y + PERSON_RING_RADIUS * math.sin(angle),
            ))
    return markers
