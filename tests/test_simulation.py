"""Tests for policies, the daily tick and metrics collection."""

from __future__ import annotations

import datetime

import pytest

from agrarian_sim.core.clock import TimeController
from agrarian_sim.simulation.engine import Simulation
from agrarian_sim.simulation.metrics import MetricsCollector
from agrarian_sim.simulation.policies import POLICIES, apply_policies
from agrarian_sim.viz.logger import SimLogger
from agrarian_sim.world.eras import Era, day_number
from agrarian_sim.world.farm import Farm


def _quiet_era(*policies: str) -> Era:
    return Era("test", "Test", day_number(1900, 1, 1), day_number(1950, 1, 1), policies=policies)


class TestPolicyRegistry:
    def test_all_policies_registered(self) -> None:
        assert set(POLICIES) == {
            "baselineAgrarian", "disruption", "earlyRequisition", "nepIncentives",
            "collectivize", "quotaPressure", "mechanizationPush",
        }

    def test_unknown_policy_skipped(self, small_world) -> None:
        applied = apply_policies(small_world, ["nope", "disruption"])
        assert applied == ["disruption"]
        assert any(e.category == SimLogger.POLICY for e in small_world.logger.entries)


class TestPolicies:
    def test_baseline_grows_private_only(self, small_world) -> None:
        small_world.farms["F2"].convert_to_collective(0.0)
        apply_policies(small_world, ["baselineAgrarian"])
        assert small_world.farms["F1"].productivity_base == pytest.approx(1.00005)
        assert small_world.farms["F2"].productivity_base == 1.0

    def test_disruption(self, small_world) -> None:
        apply_policies(small_world, ["disruption"])
        farm = small_world.farms["F1"]
        assert farm.daily_yield_modifier == pytest.approx(0.9)
        assert farm.famine_risk == pytest.approx(0.0502)
        assert small_world.persons["P1"].morale == pytest.approx(0.799)

    def test_requisition_records_total(self, small_world) -> None:
        apply_policies(small_world, ["earlyRequisition"])
        assert small_world.farms["F1"].stored_grain == pytest.approx(19.6)
        assert small_world.collector.grain_requisitioned == pytest.approx(0.8)

    def test_requisition_skips_empty_stores(self, small_world) -> None:
        for farm in small_world.farms.values():
            farm.stored_grain = 0.0
        apply_policies(small_world, ["earlyRequisition"])
        assert small_world.collector.grain_requisitioned == 0.0

    def test_nep(self, small_world) -> None:
        apply_policies(small_world, ["nepIncentives"])
        farm = small_world.farms["F1"]
        assert farm.daily_yield_modifier == pytest.approx(1.08)
        assert farm.famine_risk == pytest.approx(0.0475)
        assert small_world.persons["P2"].morale == pytest.approx(0.602)

    def test_quota_pressure_caps_famine_risk(self, small_world) -> None:
        farm = small_world.farms["F1"]
        farm.convert_to_collective(0.0)
        farm.set_famine_risk(0.4999)
        apply_policies(small_world, ["quotaPressure"])
        assert farm.famine_risk == pytest.approx(0.5)
        assert farm.daily_yield_modifier == pytest.approx(1.05)
        assert small_world.farms["F2"].daily_yield_modifier == 1.0

    def test_mechanization_push_collective_only(self, small_world) -> None:
        small_world.farms["F1"].convert_to_collective(0.0)
        apply_policies(small_world, ["mechanizationPush"])
        assert small_world.farms["F1"].mechanization_level == pytest.approx(0.0803)
        assert small_world.farms["F2"].mechanization_level == pytest.approx(0.05)


class TestCollectivize:
    def _sim(self, year: int, farm_count: int) -> Simulation:
        clock = TimeController(start_day=day_number(year, 6, 1))
        sim = Simulation(clock=clock, seed=1)
        sim.generate(farm_count=farm_count, person_count=farm_count * 2)
        return sim

    def test_no_conversion_before_1929(self) -> None:
        sim = self._sim(1928, 10)
        morale_before = sim.persons["P1"].morale
        apply_policies(sim, ["collectivize"])
        assert all(f.is_private for f in sim.farms.values())
        assert sim.persons["P1"].morale == pytest.approx(morale_before - 0.0015)

    def test_converts_ceiling_of_one_percent_in_order(self) -> None:
        sim = self._sim(1930, 150)
        apply_policies(sim, ["collectivize"])
        converted = [f.id for f in sim.farms.values() if f.is_collective]
        assert converted == ["F1", "F2"]
        assert sim.collector.farms_collectivized == 2

    def test_one_farm_per_day_when_few_remain(self) -> None:
        sim = self._sim(1930, 3)
        for expected in (1, 2, 3, 3):
            apply_policies(sim, ["collectivize"])
            assert sim.collector.farms_collectivized == expected

    def test_without_clock_nothing_converts(self, small_world) -> None:
        apply_policies(small_world, ["collectivize"])
        assert all(f.is_private for f in small_world.farms.values())


class TestDailyTick:
    def test_tick_produces_snapshot(self, small_world) -> None:
        metrics = small_world.daily_tick(_quiet_era())
        assert metrics.day == 1
        assert metrics.era_id == "test"
        assert metrics.total_grain_today > 0
        assert metrics.total_livestock_est == pytest.approx((100 + 150) * 0.05)
        assert metrics.avg_morale == pytest.approx(0.7)
        assert small_world.collector.latest is metrics

    def test_yield_uses_workers(self, small_world) -> None:
        small_world.daily_tick(_quiet_era())
        f1 = small_world.farms["F1"]
        # workers P1, P2: labor 1.4 saturates, morale avg 0.7 (before the person step)
        expected = 1.0 * 100 * 1.025 * (0.7 + 0.3 * 0.7) * 1.0 * (1 - 0.05 * 0.3)
        assert f1.last_yield == pytest.approx(expected)

    def test_modifier_reset_each_day(self, small_world) -> None:
        era = _quiet_era("disruption")
        small_world.daily_tick(era)
        small_world.daily_tick(era)
        assert small_world.farms["F1"].daily_yield_modifier == pytest.approx(0.9)

    def test_households_eat(self, small_world) -> None:
        small_world.daily_tick(_quiet_era())
        assert small_world.households["H1"].stored_food == pytest.approx(38.5)

    def test_displaced_excluded_from_workers(self, small_world) -> None:
        small_world.persons["P3"].displaced = True
        assert small_world.occupants("F2") == []
        assert [p.id for p in small_world.occupants("F2", include_displaced=True)] == ["P3"]
        metrics = small_world.daily_tick(_quiet_era())
        assert metrics.displaced_count == 1

    def test_missing_farm_means_zero_famine_risk(self, small_world) -> None:
        small_world.reassign_farm("P3", "F404")
        assert small_world.famine_risk_for(small_world.persons["P3"]) == 0.0
        assert small_world.occupants("F2", include_displaced=True) == []

    def test_reassign_farm_moves_worker(self, small_world) -> None:
        small_world.reassign_farm("P3", "F1")
        assert small_world.persons["P3"].farm_id == "F1"
        assert small_world.occupants("F2") == []
        assert [p.id for p in small_world.occupants("F1")] == ["P1", "P2", "P3"]
        small_world.daily_tick(_quiet_era())
        # F2 has no workers left: labor factor 0.5 and morale term 0.7
        assert small_world.farms["F2"].last_yield == pytest.approx(150 * 1.025 * 0.7 * 0.5 * (1 - 0.05 * 0.3))
        small_world.reassign_farm("P3", None)
        assert [p.id for p in small_world.occupants("F1")] == ["P1", "P2"]

    def test_advance_day_requires_clock(self, small_world) -> None:
        with pytest.raises(RuntimeError):
            small_world.advance_day()


class TestRun:
    def test_run_advances_clock_and_snapshots(self) -> None:
        sim = Simulation(clock=TimeController(), seed=11)
        sim.generate(farm_count=4, person_count=12)
        calls = []
        sim.set_day_callback(lambda day, collector: calls.append(day))
        sim.run(10)
        assert sim.day == 10
        assert len(sim.collector.snapshots) == 10
        assert calls == list(range(1, 11))

    def test_same_seed_is_deterministic(self) -> None:
        def trace(seed: int) -> list[float]:
            sim = Simulation(clock=TimeController(start_day=day_number(1930, 1, 1)), seed=seed)
            sim.generate(farm_count=5, person_count=20)
            sim.run(30)
            return [s.total_grain_today for s in sim.collector.snapshots]

        assert trace(9) == trace(9)

    def test_era_switch_logged(self) -> None:
        sim = Simulation(clock=TimeController(start_day=day_number(1916, 12, 30)), seed=2)
        sim.generate(farm_count=3, person_count=6)
        sim.run(3)
        assert sim.clock.date == datetime.date(1917, 1, 2)
        era_logs = [e for e in sim.logger.entries if e.category == SimLogger.ERA]
        assert len(era_logs) == 1
        assert "Revolution" in era_logs[0].message
        assert [s.era_id for s in sim.collector.snapshots] == ["tsarist", "revolution", "revolution"]
        assert sim.collector.grain_requisitioned > 0

    def test_displacement_monotone_under_famine(self) -> None:
        sim = Simulation(clock=TimeController(start_day=day_number(1930, 1, 1)), seed=4)
        sim.generate(farm_count=4, person_count=40)
        for farm in sim.farms.values():
            farm.set_famine_risk(1.0)
        seen: set[str] = set()
        for _ in range(200):
            sim.daily_tick(_quiet_era())
            now = {p.id for p in sim.persons.values() if p.displaced}
            assert seen <= now
            seen = now
        assert sim.metrics.displaced_count == len(seen)


class TestMetricsCollector:
    def test_era_spans(self) -> None:
        collector = MetricsCollector()
        farms = [Farm("F1")]
        for day, era in enumerate(["a", "a", "b", "b", "b", "a"], start=1):
            collector.collect_daily(day, era, farms, [], [], 0.0)
        assert collector.era_spans() == [("a", 1, 2), ("b", 3, 5), ("a", 6, 6)]

    def test_cumulative_counters_in_snapshots(self) -> None:
        collector = MetricsCollector()
        collector.record_requisition(1.5)
        collector.record_collectivization()
        snap = collector.collect_daily(1, "x", [], [], [], 0.0)
        assert snap.grain_requisitioned == 1.5
        assert snap.farms_collectivized == 1
        assert snap.avg_morale == 0.0

    def test_export_csv(self, tmp_path, small_world) -> None:
        small_world.daily_tick(_quiet_era())
        small_world.daily_tick(_quiet_era())
        path = tmp_path / "out" / "metrics.csv"
        small_world.collector.export_csv(str(path))
        rows = path.read_text().strip().splitlines()
        assert rows[0].startswith("day,era,grain_today")
        assert len(rows) == 3

    def test_summary_report(self, small_world) -> None:
        assert "No data" in small_world.collector.summary_report()
        small_world.daily_tick(_quiet_era())
        report = small_world.collector.summary_report()
        assert "Simulation Summary" in report
        assert "test: 1 days" in report
