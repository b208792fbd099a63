"""Named daily policy effects, composed per era.

Each policy mutates the simulation in place and is applied once per simulated
day, after the farms' daily reset and before yields are computed.
"""

from __future__ import annotations

import math
from typing import Callable, Iterable

from agrarian_sim.core.config import (
    BASELINE_GROWTH,
    COLLECTIVIZATION_DAILY_FRACTION,
    COLLECTIVIZATION_MORALE_LOSS,
    COLLECTIVIZATION_START_YEAR,
    DISRUPTION_FAMINE_STEP,
    DISRUPTION_MORALE_LOSS,
    DISRUPTION_YIELD_FACTOR,
    MECHANIZATION_FAMINE_FACTOR,
    MECHANIZATION_PRODUCTIVITY_GROWTH,
    MECHANIZATION_STEP,
    NEP_FAMINE_FACTOR,
    NEP_MORALE_GAIN,
    NEP_YIELD_FACTOR,
    QUOTA_FAMINE_CEILING,
    QUOTA_FAMINE_STEP,
    QUOTA_YIELD_FACTOR,
    REQUISITION_FRACTION,
)

PolicyFn = Callable[["Simulation"], None]  # noqa: F821

POLICIES: dict[str, PolicyFn] = {}


def register_policy(policy_id: str) -> Callable[[PolicyFn], PolicyFn]:
    def decorator(fn: PolicyFn) -> PolicyFn:
        POLICIES[policy_id] = fn
        return fn
    return decorator


@register_policy("baselineAgrarian")
def baseline_agrarian(sim: "Simulation") -> None:  # noqa: F821
    """Slow organic growth on private holdings."""
    for farm in sim.farms.values():
        if farm.is_private:
            farm.productivity_base *= 1 + BASELINE_GROWTH


@register_policy("disruption")
def disruption(sim: "Simulation") -> None:  # noqa: F821
    for farm in sim.farms.values():
        farm.daily_yield_modifier *= DISRUPTION_YIELD_FACTOR
        farm.set_famine_risk(farm.famine_risk + DISRUPTION_FAMINE_STEP)
    for person in sim.persons.values():
        person.adjust_morale(-DISRUPTION_MORALE_LOSS)


@register_policy("earlyRequisition")
def early_requisition(sim: "Simulation") -> None:  # noqa: F821
    for farm in sim.farms.values():
        if farm.stored_grain > 0:
            taken = farm.stored_grain * REQUISITION_FRACTION
            farm.stored_grain -= taken
            sim.collector.record_requisition(taken)


@register_policy("nepIncentives")
def nep_incentives(sim: "Simulation") -> None:  # noqa: F821
    for farm in sim.farms.values():
        farm.daily_yield_modifier *= NEP_YIELD_FACTOR
        farm.set_famine_risk(farm.famine_risk * NEP_FAMINE_FACTOR)
    for person in sim.persons.values():
        person.adjust_morale(NEP_MORALE_GAIN)


@register_policy("collectivize")
def collectivize(sim: "Simulation") -> None:  # noqa: F821
    """Convert ceil(1%) of remaining private farms per day from 1929 on.

    A converted farm's productivity is boosted by the mean labor skill of its
    non-displaced occupants. The morale cost applies every day of the era,
    whether or not anything was converted.
    """
    year = sim.current_year
    if year is not None and year >= COLLECTIVIZATION_START_YEAR:
        remaining = [f for f in sim.farms.values() if f.is_private]
        convert_count = math.ceil(len(remaining) * COLLECTIVIZATION_DAILY_FRACTION)
        for farm in remaining[:convert_count]:
            workers = sim.occupants(farm.id)
            avg_skill = sum(p.labor_skill for p in workers) / max(1, len(workers))
            farm.convert_to_collective(avg_skill)
            sim.collector.record_collectivization()
            sim.logger.log(
                sim.logger.COLLECTIVIZATION,
                f"{farm.name} collectivized",
                entity_ids=[farm.id],
                day=sim.day,
                farm_id=farm.id,
                workers=len(workers),
                avg_skill=avg_skill,
                productivity=farm.productivity_base,
            )

    for person in sim.persons.values():
        person.adjust_morale(-COLLECTIVIZATION_MORALE_LOSS)


@register_policy("quotaPressure")
def quota_pressure(sim: "Simulation") -> None:  # noqa: F821
    for farm in sim.farms.values():
        if farm.is_collective:
            farm.daily_yield_modifier *= QUOTA_YIELD_FACTOR
            farm.set_famine_risk(farm.famine_risk + QUOTA_FAMINE_STEP, ceiling=QUOTA_FAMINE_CEILING)


@register_policy("mechanizationPush")
def mechanization_push(sim: "Simulation") -> None:  # noqa: F821
    for farm in sim.farms.values():
        if farm.is_collective:
            farm.mechanization_level += MECHANIZATION_STEP
            farm.productivity_base *= 1 + MECHANIZATION_PRODUCTIVITY_GROWTH
            farm.set_famine_risk(farm.famine_risk * MECHANIZATION_FAMINE_FACTOR)


def apply_policies(sim: "Simulation", policy_ids: Iterable[str]) -> list[str]:  # noqa: F821
    """Apply policies in the given order; unknown ids are skipped.

    Returns the ids that were actually applied.
    """
    applied: list[str] = []
    for policy_id in policy_ids:
        policy = POLICIES.get(policy_id)
        if policy is None:
            sim.logger.log(
                sim.logger.POLICY, f"Unknown policy '{policy_id}' skipped", day=sim.day, policy_id=policy_id,
            )
            continue
        policy(sim)
        applied.append(policy_id)
    return applied
