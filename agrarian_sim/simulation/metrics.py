"""Daily metric snapshots, cumulative policy counters, and export."""

from __future__ import annotations

import csv
import os
from dataclasses import dataclass
from typing import Optional

from agrarian_sim.core.config import LIVESTOCK_PER_LAND_UNIT


@dataclass
class SimulationMetrics:
    """Aggregates for the most recently completed day."""

    day: int = 0
    era_id: str = ""
    total_grain_today: float = 0.0
    total_livestock_est: float = 0.0
    avg_morale: float = 0.0
    displaced_count: int = 0
    grain_requisitioned: float = 0.0   # cumulative
    farms_collectivized: int = 0       # cumulative
    total_stored_grain: float = 0.0
    total_household_food: float = 0.0
    collective_farm_count: int = 0


class MetricsCollector:
    """Collects one snapshot per simulated day plus running policy totals."""

    def __init__(self) -> None:
        self.snapshots: list[SimulationMetrics] = []
        self.grain_requisitioned: float = 0.0
        self.farms_collectivized: int = 0

    @property
    def latest(self) -> Optional[SimulationMetrics]:
        return self.snapshots[-1] if self.snapshots else None

    def record_requisition(self, amount: float) -> None:
        self.grain_requisitioned += amount

    def record_collectivization(self) -> None:
        self.farms_collectivized += 1

    def collect_daily(
        self,
        day: int,
        era_id: str,
        farms: list["Farm"],  # noqa: F821
        persons: list["Person"],  # noqa: F821
        households: list["Household"],  # noqa: F821
        total_grain_today: float,
    ) -> SimulationMetrics:
        """Build and store the snapshot for a finished day."""
        n = len(persons)
        snapshot = SimulationMetrics(
            day=day,
            era_id=era_id,
            total_grain_today=total_grain_today,
            total_livestock_est=sum(f.land_area * LIVESTOCK_PER_LAND_UNIT for f in farms),
            avg_morale=sum(p.morale for p in persons) / max(1, n),
            displaced_count=sum(1 for p in persons if p.displaced),
            grain_requisitioned=self.grain_requisitioned,
            farms_collectivized=self.farms_collectivized,
            total_stored_grain=sum(f.stored_grain for f in farms),
            total_household_food=sum(h.stored_food for h in households),
            collective_farm_count=sum(1 for f in farms if f.is_collective),
        )
        self.snapshots.append(snapshot)
        return snapshot

    def export_csv(self, filepath: str) -> None:
        """Export all snapshots to CSV."""
        os.makedirs(os.path.dirname(filepath) if os.path.dirname(filepath) else ".", exist_ok=True)
        with open(filepath, "w", newline="") as f:
            writer = csv.writer(f)
            writer.writerow([
                "day", "era", "grain_today", "livestock_est", "avg_morale",
                "displaced", "grain_requisitioned", "farms_collectivized",
                "stored_grain", "household_food", "collective_farms",
            ])
            for s in self.snapshots:
                writer.writerow([
                    s.day, s.era_id,
                    f"{s.total_grain_today:.2f}", f"{s.total_livestock_est:.1f}",
                    f"{s.avg_morale:.4f}", s.displaced_count,
                    f"{s.grain_requisitioned:.2f}", s.farms_collectivized,
                    f"{s.total_stored_grain:.1f}", f"{s.total_household_food:.1f}",
                    s.collective_farm_count,
                ])

    def era_spans(self) -> list[tuple[str, int, int]]:
        """Consecutive (era_id, first_day, last_day) runs across the snapshots."""
        spans: list[tuple[str, int, int]] = []
        for s in self.snapshots:
            if spans and spans[-1][0] == s.era_id:
                era_id, first, _ = spans[-1]
                spans[-1] = (era_id, first, s.day)
            else:
                spans.append((s.era_id, s.day, s.day))
        return spans

    def summary_report(self, start_day: int = 0, end_day: Optional[int] = None) -> str:
        """Generate a human-readable summary of the simulation period."""
        relevant = [
            s for s in self.snapshots
            if s.day >= start_day and (end_day is None or s.day <= end_day)
        ]
        if not relevant:
            return "No data available for the specified period."

        first = relevant[0]
        last = relevant[-1]
        total_grain = sum(s.total_grain_today for s in relevant)

        lines = [
            f"=== Simulation Summary: Day {first.day} to Day {last.day} ===",
            f"Duration: {len(relevant)} days ({len(relevant) / 365.25:.1f} years)",
            f"",
            f"Grain:",
            f"  Total harvested: {total_grain:,.0f}",
            f"  Avg per day: {total_grain / len(relevant):,.1f}",
            f"  Requisitioned (cumulative): {last.grain_requisitioned:,.1f}",
            f"  Stored on farms: {last.total_stored_grain:,.1f}",
            f"",
            f"Society:",
            f"  Avg morale: {first.avg_morale:.3f} -> {last.avg_morale:.3f}",
            f"  Displaced persons: {first.displaced_count} -> {last.displaced_count}",
            f"  Farms collectivized: {last.farms_collectivized}"
            f" ({last.collective_farm_count} collective now)",
            f"  Household food: {last.total_household_food:,.1f}",
        ]

        spans = [sp for sp in self.era_spans() if sp[2] >= first.day and sp[1] <= last.day]
        if spans:
            lines.append(f"")
            lines.append(f"Eras:")
            by_day = {s.day: s for s in relevant}
            for era_id, lo, hi in spans:
                days = [by_day[d] for d in range(max(lo, first.day), min(hi, last.day) + 1) if d in by_day]
                if not days:
                    continue
                era_grain = sum(s.total_grain_today for s in days)
                lines.append(
                    f"  {era_id}: {len(days)} days, avg grain/day {era_grain / len(days):,.1f}, "
                    f"morale at end {days[-1].avg_morale:.3f}"
                )

        return "\n".join(lines)
