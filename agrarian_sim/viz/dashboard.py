"""Matplotlib dashboard: live charts during a run and static reports after it."""

from __future__ import annotations

import os
from typing import Optional

import matplotlib.pyplot as plt

from agrarian_sim.core.config import DASHBOARD_UPDATE_INTERVAL

# Background tint per era id; unknown eras fall back to grey
ERA_SHADES: dict[str, str] = {
    "tsarist": "#d9d2b6",
    "revolution": "#e8b4a8",
    "nep": "#b8d8b0",
    "collectivization": "#c9a9c9",
    "postCollectivization": "#a9bfd6",
}


def shade_eras(ax, metrics: "MetricsCollector") -> None:  # noqa: F821
    """Tint each era's span of days behind a time-series axis."""
    for era_id, first, last in metrics.era_spans():
        ax.axvspan(first, last + 1, color=ERA_SHADES.get(era_id, "#dddddd"), alpha=0.25, linewidth=0)


class Dashboard:
    """Live dashboard with six panels, redrawn every few simulated days."""

    def __init__(self, update_interval: int = DASHBOARD_UPDATE_INTERVAL) -> None:
        self.update_interval = max(1, update_interval)
        self._initialized = False
        self._fig = None
        self._axes: Optional[dict] = None
        self._update_counter = 0

    def initialize(self) -> None:
        plt.ion()
        self._fig, axes = plt.subplots(2, 3, figsize=(16, 8))
        self._fig.suptitle("Agrarian Simulation Dashboard", fontsize=14)
        self._axes = {
            "grain": axes[0, 0],
            "stores": axes[0, 1],
            "morale": axes[0, 2],
            "displaced": axes[1, 0],
            "collective": axes[1, 1],
            "requisition": axes[1, 2],
        }
        for ax in axes.flat:
            ax.grid(True, alpha=0.3)
        plt.tight_layout()
        self._initialized = True
        plt.pause(0.01)

    def update(self, day: int, metrics: "MetricsCollector") -> None:  # noqa: F821
        self._update_counter += 1
        if self._update_counter % self.update_interval != 0:
            return

        if not self._initialized:
            self.initialize()

        snapshots = metrics.snapshots
        if not snapshots:
            return

        days = [s.day for s in snapshots]
        self._panel("grain", "Grain Harvested / Day", metrics, days,
                    [s.total_grain_today for s in snapshots], "g-")

        ax = self._panel("stores", "Food Stores", metrics, days,
                         [s.total_stored_grain for s in snapshots], "y-", label="Farm grain")
        ax.plot(days, [s.total_household_food for s in snapshots], "b-", linewidth=1, label="Household food")
        ax.legend(fontsize=8)

        ax = self._panel("morale", "Average Morale", metrics, days,
                         [s.avg_morale for s in snapshots], "m-")
        ax.set_ylim(0, 1)

        self._panel("displaced", "Displaced Persons", metrics, days,
                    [s.displaced_count for s in snapshots], "r-")
        self._panel("collective", "Collective Farms", metrics, days,
                    [s.collective_farm_count for s in snapshots], "c-")
        self._panel("requisition", "Grain Requisitioned (cumulative)", metrics, days,
                    [s.grain_requisitioned for s in snapshots], "k-")

        self._fig.suptitle(f"Agrarian Simulation: Day {day} ({snapshots[-1].era_id})", fontsize=14)
        plt.tight_layout()
        plt.pause(0.01)

    def _panel(self, key: str, title: str, metrics, days: list[int], values: list[float], style: str, label=None):
        ax = self._axes[key]
        ax.clear()
        ax.set_title(title)
        shade_eras(ax, metrics)
        ax.plot(days, values, style, linewidth=1.5, label=label)
        ax.grid(True, alpha=0.3)
        return ax

    def save(self, filepath: str) -> None:
        if self._fig:
            self._fig.savefig(filepath, dpi=150, bbox_inches="tight")

    def close(self) -> None:
        if self._fig:
            plt.close(self._fig)

    # ------------------------------------------------------------------
    # Post-hoc static plots
    # ------------------------------------------------------------------

    @staticmethod
    def comprehensive_report(metrics: "MetricsCollector", output_dir: str) -> list[str]:  # noqa: F821
        """Write one PNG per tracked series into ``output_dir``; returns the paths."""
        os.makedirs(output_dir, exist_ok=True)

        snapshots = metrics.snapshots
        if not snapshots:
            return []

        days = [s.day for s in snapshots]
        charts = [
            ("grain.png", "Grain Harvested per Day", "Grain", [s.total_grain_today for s in snapshots]),
            ("morale.png", "Average Morale", "Morale (0-1)", [s.avg_morale for s in snapshots]),
            ("displaced.png", "Displaced Persons", "Persons", [s.displaced_count for s in snapshots]),
            ("collectivization.png", "Collective Farms", "Farms", [s.collective_farm_count for s in snapshots]),
            ("requisition.png", "Grain Requisitioned (cumulative)", "Grain",
             [s.grain_requisitioned for s in snapshots]),
            ("food_stores.png", "Household Food Stores", "Food", [s.total_household_food for s in snapshots]),
        ]

        paths: list[str] = []
        for filename, title, ylabel, values in charts:
            fig, ax = plt.subplots(figsize=(10, 5))
            shade_eras(ax, metrics)
            ax.plot(days, values)
            ax.set_title(title)
            ax.set_xlabel("Day")
            ax.set_ylabel(ylabel)
            if filename == "morale.png":
                ax.set_ylim(0, 1)
            ax.grid(True, alpha=0.3)
            path = os.path.join(output_dir, filename)
            fig.savefig(path, dpi=150)
            plt.close(fig)
            paths.append(path)

        print(f"Reports saved to {output_dir}/")
        return paths
