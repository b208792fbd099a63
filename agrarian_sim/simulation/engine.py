"""Main simulation loop: the six-step daily tick."""

from __future__ import annotations

from typing import Callable, Iterable, Optional

import numpy as np
from numpy.random import Generator

from agrarian_sim.agents.household import Household
from agrarian_sim.agents.person import Person
from agrarian_sim.agents.population import generate_initial_entities
from agrarian_sim.core.clock import TimeController
from agrarian_sim.core.config import HOUSEHOLD_SIZE, INITIAL_FARM_COUNT, INITIAL_PERSON_COUNT
from agrarian_sim.simulation.metrics import MetricsCollector, SimulationMetrics
from agrarian_sim.simulation.policies import apply_policies
from agrarian_sim.viz.logger import SimLogger
from agrarian_sim.world.eras import Era
from agrarian_sim.world.farm import Farm


class Simulation:
    """Owns every farm, person and household and advances them one day at a time.

    Entities reference each other by id only; the simulation keeps the id maps
    and a farm -> occupants index for constant-time lookups. Move persons between
    farms with reassign_farm() so the index stays current.
    """

    def __init__(
        self,
        rng: Optional[Generator] = None,
        clock: Optional[TimeController] = None,
        logger: Optional[SimLogger] = None,
        seed: int = 42,
    ) -> None:
        self.rng: Generator = rng if rng is not None else np.random.default_rng(seed)
        self.clock = clock
        self.logger = logger if logger is not None else SimLogger(verbosity=0, stdout=False)

        self.farms: dict[str, Farm] = {}
        self.persons: dict[str, Person] = {}
        self.households: dict[str, Household] = {}
        self._occupants: dict[str, list[str]] = {}

        self.collector = MetricsCollector()
        self.metrics = SimulationMetrics()
        self.ticks: int = 0

        # Per-day callback (set externally, e.g. a dashboard)
        self._day_callback: Optional[Callable[[int, MetricsCollector], None]] = None

    # ------------------------------------------------------------------
    # World setup
    # ------------------------------------------------------------------

    def populate(
        self,
        farms: Iterable[Farm],
        persons: Iterable[Person],
        households: Iterable[Household],
    ) -> None:
        self.farms = {f.id: f for f in farms}
        self.persons = {p.id: p for p in persons}
        self.households = {h.id: h for h in households}
        self._rebuild_index()

    def generate(
        self,
        farm_count: int = INITIAL_FARM_COUNT,
        person_count: int = INITIAL_PERSON_COUNT,
        household_size: int = HOUSEHOLD_SIZE,
    ) -> None:
        """Build a fresh world from the simulation's own rng."""
        farms, persons, households = generate_initial_entities(
            self.rng, farm_count, person_count, household_size,
        )
        self.populate(farms, persons, households)
        self.logger.log(
            SimLogger.LIFECYCLE,
            f"World built: {len(farms)} farms, {len(persons)} persons, {len(households)} households",
            day=self.day,
            farms=len(farms),
            persons=len(persons),
            households=len(households),
        )

    def reassign_farm(self, person_id: str, farm_id: Optional[str]) -> None:
        """Move a person to another farm (or none) and keep the occupants index current."""
        person = self.persons[person_id]
        old = self._occupants.get(person.farm_id)
        if old is not None and person_id in old:
            old.remove(person_id)
        person.farm_id = farm_id
        if farm_id in self._occupants:
            self._occupants[farm_id].append(person_id)

    def _rebuild_index(self) -> None:
        self._occupants = {farm_id: [] for farm_id in self.farms}
        for person in self.persons.values():
            if person.farm_id in self._occupants:
                self._occupants[person.farm_id].append(person.id)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    @property
    def day(self) -> int:
        """Simulated day counter (days since the start date)."""
        if self.clock is not None:
            return self.clock.days_elapsed
        return self.ticks

    @property
    def current_year(self) -> Optional[int]:
        return self.clock.year if self.clock is not None else None

    def occupants(self, farm_id: str, include_displaced: bool = False) -> list[Person]:
        """Persons working a farm, in the order they joined it."""
        persons = [self.persons[pid] for pid in self._occupants.get(farm_id, ())]
        if include_displaced:
            return persons
        return [p for p in persons if not p.displaced]

    def farm_morale(self, farm_id: str) -> float:
        workers = self.occupants(farm_id)
        return sum(p.morale for p in workers) / max(1, len(workers))

    def famine_risk_for(self, person: Person) -> float:
        farm = self.farms.get(person.farm_id) if person.farm_id is not None else None
        return farm.famine_risk if farm is not None else 0.0

    # ------------------------------------------------------------------
    # Ticking
    # ------------------------------------------------------------------

    def set_day_callback(self, callback: Callable[[int, MetricsCollector], None]) -> None:
        self._day_callback = callback

    def daily_tick(self, era: Era) -> SimulationMetrics:
        """One simulated day under ``era``'s policies.

        The metrics snapshot is only replaced once every step has run.
        """
        self.ticks += 1
        day = self.day

        # 1. Reset daily modifiers
        for farm in self.farms.values():
            farm.daily_reset()

        # 2. Era policies, in listed order
        apply_policies(self, era.policies)

        # 3. Yields
        total_yield = 0.0
        for farm in self.farms.values():
            workers = self.occupants(farm.id)
            labor_sum = sum(p.labor_contribution for p in workers)
            morale_avg = sum(p.morale for p in workers) / max(1, len(workers))
            total_yield += farm.compute_daily_yield(labor_sum, morale_avg)

        # 4. Households eat
        for household in self.households.values():
            household.daily_update()

        # 5. Persons
        for person in self.persons.values():
            risk = self.famine_risk_for(person)
            if person.daily_update(risk, self.rng):
                self.logger.log(
                    SimLogger.DISPLACEMENT,
                    f"{person.name} left {person.farm_id}",
                    entity_ids=[person.id],
                    day=day,
                    farm_id=person.farm_id,
                    famine_risk=risk,
                )

        # 6. Aggregate
        self.metrics = self.collector.collect_daily(
            day,
            era.id,
            list(self.farms.values()),
            list(self.persons.values()),
            list(self.households.values()),
            total_yield,
        )
        self.logger.flush()
        return self.metrics

    def advance_day(self) -> SimulationMetrics:
        """Advance the clock one step, then tick under the era it lands in."""
        if self.clock is None:
            raise RuntimeError("advance_day() needs a TimeController; use daily_tick(era) instead")
        previous = self.clock.current_era
        was_covered = self.clock.in_coverage
        switched = self.clock.advance_one_day()
        if switched:
            era = self.clock.current_era
            self.logger.log(
                SimLogger.ERA,
                f"{self.clock.date.isoformat()}: {previous.name} -> {era.name}",
                day=self.day,
                era_id=era.id,
                previous_era_id=previous.id,
                policies=list(era.policies),
            )
        elif was_covered and not self.clock.in_coverage:
            self.logger.log(
                SimLogger.ERA,
                f"{self.clock.date.isoformat()} is outside every era; staying in {previous.name}",
                day=self.day,
                era_id=previous.id,
                in_coverage=False,
            )
        return self.daily_tick(self.clock.current_era)

    def run(self, days: int) -> None:
        """Run the simulation for a number of days."""
        for _ in range(days):
            self.advance_day()
            if self._day_callback:
                self._day_callback(self.day, self.collector)
