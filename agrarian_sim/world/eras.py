"""Historical era table and integer day-number calendar helpers.

Simulated dates are day numbers (proleptic Gregorian ordinals). Calendar
objects only appear when converting at the edges.
"""

from __future__ import annotations

import datetime
from dataclasses import dataclass
from typing import Optional, Sequence

from agrarian_sim.core.errors import ConfigurationError


def day_number(year: int, month: int, day: int) -> int:
    """Day number of a calendar date."""
    return datetime.date(year, month, day).toordinal()


def to_date(day: int) -> datetime.date:
    return datetime.date.fromordinal(day)


def parse_day(value: str) -> int:
    """Day number of an ISO ``YYYY-MM-DD`` string."""
    return datetime.date.fromisoformat(value).toordinal()


@dataclass(frozen=True)
class Era:
    """A named period whose policies govern the daily tick."""

    id: str
    name: str
    start: int  # day number, inclusive
    end: int    # day number, inclusive
    description: str = ""
    policies: tuple[str, ...] = ()

    def contains(self, day: int) -> bool:
        return self.start <= day <= self.end

    @property
    def length_days(self) -> int:
        return self.end - self.start + 1


ERAS: list[Era] = [
    Era(
        id="tsarist",
        name="Late Tsarist",
        start=day_number(1905, 1, 1),
        end=day_number(1916, 12, 31),
        description="Private landholding, unrest emerging.",
        policies=("baselineAgrarian",),
    ),
    Era(
        id="revolution",
        name="Revolution & Turmoil",
        start=day_number(1917, 1, 1),
        end=day_number(1921, 12, 31),
        description="Disruption & requisitions.",
        policies=("disruption", "earlyRequisition"),
    ),
    Era(
        id="nep",
        name="NEP",
        start=day_number(1922, 1, 1),
        end=day_number(1927, 12, 31),
        description="Partial market incentives, recovery.",
        policies=("nepIncentives",),
    ),
    Era(
        id="collectivization",
        name="Collectivization",
        start=day_number(1928, 1, 1),
        end=day_number(1933, 12, 31),
        description="Forced consolidation, quota pressure.",
        policies=("collectivize", "quotaPressure"),
    ),
    Era(
        id="postCollectivization",
        name="Post-Collectivization",
        start=day_number(1934, 1, 1),
        end=day_number(1940, 12, 31),
        description="Stabilization & mechanization push.",
        policies=("mechanizationPush",),
    ),
]


def find_era_index(eras: Sequence[Era], day: int) -> int:
    """Index of the first era containing ``day``, or -1."""
    for i, era in enumerate(eras):
        if era.contains(day):
            return i
    return -1


def era_by_id(eras: Sequence[Era], era_id: str) -> Optional[Era]:
    for era in eras:
        if era.id == era_id:
            return era
    return None


def validate_era_table(eras: Sequence[Era]) -> list[tuple[int, int]]:
    """Check ordering and overlap; return uncovered gaps as (first, last) day pairs.

    Gaps are legal, so they are reported rather than rejected.
    """
    if not eras:
        raise ConfigurationError("era table is empty")

    seen: set[str] = set()
    gaps: list[tuple[int, int]] = []
    for i, era in enumerate(eras):
        if era.end < era.start:
            raise ConfigurationError(f"era '{era.id}' ends before it starts")
        if era.id in seen:
            raise ConfigurationError(f"duplicate era id '{era.id}'")
        seen.add(era.id)
        if i == 0:
            continue
        prev = eras[i - 1]
        if era.start <= prev.end:
            raise ConfigurationError(
                f"era '{era.id}' overlaps or precedes '{prev.id}'"
            )
        if era.start > prev.end + 1:
            gaps.append((prev.end + 1, era.start - 1))
    return gaps
