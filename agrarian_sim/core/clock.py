"""Time system for the simulation: calendar days and the active era."""

from __future__ import annotations

import datetime
from typing import Optional, Sequence

from agrarian_sim.core.config import START_DATE, TICK_DAYS
from agrarian_sim.core.errors import EraCoverageError
from agrarian_sim.world.eras import ERAS, Era, day_number, find_era_index, to_date, validate_era_table


class TimeController:
    """Advances the simulated calendar and resolves the current era."""

    def __init__(
        self,
        eras: Optional[Sequence[Era]] = None,
        start_day: Optional[int] = None,
        tick_days: int = TICK_DAYS,
        strict: bool = False,
    ) -> None:
        self.eras: list[Era] = list(eras if eras is not None else ERAS)
        self.gaps = validate_era_table(self.eras)
        self.start_day: int = start_day if start_day is not None else day_number(*START_DATE)
        self.day: int = self.start_day
        self.tick_days = tick_days
        self.strict = strict

        index = find_era_index(self.eras, self.day)
        if index < 0:
            raise EraCoverageError(self.day, f"start date {self.date.isoformat()} is not inside any era")
        self.current_era_index: int = index
        self.in_coverage: bool = True

    @property
    def current_era(self) -> Era:
        return self.eras[self.current_era_index]

    @property
    def date(self) -> datetime.date:
        return to_date(self.day)

    @property
    def year(self) -> int:
        return self.date.year

    @property
    def days_elapsed(self) -> int:
        return self.day - self.start_day

    def advance_one_day(self) -> bool:
        """Move forward by the tick size. Returns True when the era switched.

        A day outside every era keeps the previous era current and clears
        ``in_coverage``; in strict mode it raises EraCoverageError instead.
        """
        self.day += self.tick_days
        index = find_era_index(self.eras, self.day)
        if index < 0:
            self.in_coverage = False
            if self.strict:
                raise EraCoverageError(self.day)
            return False

        self.in_coverage = True
        if index != self.current_era_index:
            self.current_era_index = index
            return True
        return False

    def era_progress(self) -> float:
        """Fraction of the current era elapsed, for progress bars."""
        era = self.current_era
        span = era.end - era.start
        if span <= 0:
            return 1.0
        return min(1.0, max(0.0, (self.day - era.start) / span))
