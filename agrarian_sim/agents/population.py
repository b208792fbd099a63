"""Seeded world building: farms, persons, and the households they share."""

from __future__ import annotations

from itertools import count

from numpy.random import Generator

from agrarian_sim.agents.household import Household
from agrarian_sim.agents.person import Person
from agrarian_sim.core.config import (
    FARM_LAND_AREA_RANGE,
    FARM_PRODUCTIVITY_RANGE,
    FARM_SPREAD_X,
    FARM_SPREAD_Y,
    HOUSEHOLD_SIZE,
    INITIAL_FARM_COUNT,
    INITIAL_PERSON_COUNT,
    PERSON_AGE_RANGE,
    PERSON_DISPOSITION_RANGE,
    PERSON_MORALE_RANGE,
    PERSON_SKILL_RANGE,
)
from agrarian_sim.world.farm import Farm


_GIVEN_NAMES: list[str] = [
    "Ivan", "Pyotr", "Nikolai", "Fyodor", "Grigory", "Semyon", "Vasily", "Mikhail",
    "Alexei", "Dmitri", "Yakov", "Stepan", "Pavel", "Timofei", "Kuzma", "Ilya",
    "Anna", "Maria", "Darya", "Praskovya", "Avdotya", "Yelena", "Olga", "Natalya",
    "Agafya", "Marfa", "Tatiana", "Varvara", "Irina", "Fekla", "Akulina", "Vera",
]

_FARMSTEAD_NAMES: list[str] = [
    "Berezovka", "Sosnovka", "Ivanovka", "Pokrovka", "Dubrovka", "Krasnoye",
    "Lipovka", "Gorki", "Zarechye", "Olkhovka", "Kamenka", "Polyana",
]


def _uniform(rng: Generator, bounds: tuple[float, float]) -> float:
    lo, hi = bounds
    return float(lo + rng.random() * (hi - lo))


def generate_farms(rng: Generator, n: int = INITIAL_FARM_COUNT) -> list[Farm]:
    farms: list[Farm] = []
    ids = count(1)
    for _ in range(n):
        farm_id = f"F{next(ids)}"
        farms.append(Farm(
            id=farm_id,
            name=f"{rng.choice(_FARMSTEAD_NAMES)} {farm_id}",
            land_area=_uniform(rng, FARM_LAND_AREA_RANGE),
            x=float((rng.random() - 0.5) * FARM_SPREAD_X),
            y=float((rng.random() - 0.5) * FARM_SPREAD_Y),
            productivity_base=_uniform(rng, FARM_PRODUCTIVITY_RANGE),
        ))
    return farms


def generate_initial_entities(
    rng: Generator,
    farm_count: int = INITIAL_FARM_COUNT,
    person_count: int = INITIAL_PERSON_COUNT,
    household_size: int = HOUSEHOLD_SIZE,
) -> tuple[list[Farm], list[Person], list[Household]]:
    """Create the starting world.

    Every person works a randomly chosen farm. Households fill up in order,
    ``household_size`` members each.
    """
    farms = generate_farms(rng, farm_count)

    persons: list[Person] = []
    households: list[Household] = []
    person_ids = count(1)
    household_ids = count(1)

    lo_age, hi_age = PERSON_AGE_RANGE
    for _ in range(person_count):
        farm = farms[int(rng.integers(0, len(farms)))]
        person_id = f"P{next(person_ids)}"
        person = Person(
            id=person_id,
            name=f"{rng.choice(_GIVEN_NAMES)} ({person_id})",
            age=int(lo_age + rng.integers(0, hi_age - lo_age)),
            labor_skill=_uniform(rng, PERSON_SKILL_RANGE),
            health=1.0,
            morale=_uniform(rng, PERSON_MORALE_RANGE),
            political_disposition=_uniform(rng, PERSON_DISPOSITION_RANGE),
            farm_id=farm.id,
        )

        household = households[-1] if households else None
        if household is None or household.size >= household_size:
            household = Household(id=f"H{next(household_ids)}")
            households.append(household)
        household.add_member(person.id)
        person.household_id = household.id
        persons.append(person)

    return farms, persons, households
