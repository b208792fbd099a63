"""Pytest configuration and fixtures for agrarian simulation tests."""

from __future__ import annotations

import numpy as np
import pytest


class ScriptedRng:
    """Stand-in for numpy's Generator that replays fixed draws from random()."""

    def __init__(self, values, default: float = 0.99) -> None:
        self._values = list(values)
        self._default = default
        self.calls = 0

    def random(self) -> float:
        self.calls += 1
        if self._values:
            return self._values.pop(0)
        return self._default


@pytest.fixture
def seeded_rng():
    """Provide a deterministic RNG for tests."""
    return np.random.default_rng(42)


@pytest.fixture
def scripted_rng():
    return ScriptedRng


@pytest.fixture
def small_world():
    """Two farms, three persons, one household; no clock attached."""
    from agrarian_sim.agents.household import Household
    from agrarian_sim.agents.person import Person
    from agrarian_sim.simulation.engine import Simulation
    from agrarian_sim.world.farm import Farm

    sim = Simulation(seed=7)
    farms = [
        Farm("F1", x=0.0, y=0.0, land_area=100.0),
        Farm("F2", x=200.0, y=0.0, land_area=150.0),
    ]
    persons = [
        Person("P1", labor_skill=0.6, morale=0.8, household_id="H1", farm_id="F1"),
        Person("P2", labor_skill=0.8, morale=0.6, household_id="H1", farm_id="F1"),
        Person("P3", labor_skill=0.5, morale=0.7, household_id="H1", farm_id="F2"),
    ]
    households = [Household("H1", {"P1", "P2", "P3"})]
    sim.populate(farms, persons, households)
    return sim


@pytest.fixture
def session():
    """Small seeded view session."""
    from agrarian_sim.core.config import SessionConfig
    from agrarian_sim.view.scheduler import Session

    return Session.create(SessionConfig(seed=3, farm_count=6, person_count=30))
