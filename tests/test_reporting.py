"""Tests for the event logger, static reports and the command line."""

from __future__ import annotations

import json

import matplotlib
import pytest

matplotlib.use("Agg")

from agrarian_sim.core.clock import TimeController  # noqa: E402
from agrarian_sim.simulation.engine import Simulation  # noqa: E402
from agrarian_sim.viz.dashboard import Dashboard  # noqa: E402
from agrarian_sim.viz.logger import SimLogger  # noqa: E402
from agrarian_sim.world.eras import day_number  # noqa: E402


class TestSimLogger:
    def test_verbosity_gates_echo_not_storage(self, tmp_path, capsys) -> None:
        log_path = tmp_path / "sim.log"
        logger = SimLogger(verbosity=1, log_file=str(log_path), stdout=True)
        logger.log(SimLogger.ERA, "era changed", day=3, era_id="revolution")
        logger.log(SimLogger.VIEW, "zoomed", day=3)
        assert logger.flush() == 1
        logger.close()
        out = capsys.readouterr().out
        assert "era changed" in out
        assert "era_id=revolution" in out
        assert "zoomed" not in out
        assert "era changed" in log_path.read_text()
        assert len(logger.entries) == 2

    def test_structured_fields_formatted(self) -> None:
        logger = SimLogger(verbosity=0, stdout=False)
        entry = logger.log(SimLogger.DISPLACEMENT, "Ivan left F3", entity_ids=["P1"], day=9,
                           farm_id="F3", famine_risk=0.45)
        assert entry.data == {"farm_id": "F3", "famine_risk": 0.45}
        assert entry.format_line().endswith("farm_id=F3 famine_risk=0.450")

    def test_select_and_counts(self) -> None:
        logger = SimLogger(verbosity=0, stdout=False)
        logger.log(SimLogger.ERA, "a", day=1)
        logger.log(SimLogger.COLLECTIVIZATION, "b", day=5)
        logger.log(SimLogger.VIEW, "c", day=7)
        assert [e.message for e in logger.select([SimLogger.ERA, SimLogger.VIEW])] == ["a", "c"]
        assert [e.message for e in logger.select(first_day=2, last_day=6)] == ["b"]
        assert logger.counts() == {"ERA": 1, "COLLECTIVE": 1, "VIEW": 1}

    def test_chronicle(self) -> None:
        logger = SimLogger(verbosity=0, stdout=False)
        assert logger.chronicle() == "No notable events."
        logger.log(SimLogger.ERA, "into NEP", day=1)
        logger.log(SimLogger.VIEW, "zoomed", day=2)
        logger.log(SimLogger.COLLECTIVIZATION, "F1 collectivized", day=3)
        text = logger.chronicle()
        assert "into NEP" in text and "F1 collectivized" in text
        assert "zoomed" not in text
        assert logger.chronicle(limit=1).count("\n") == 0

    def test_export_includes_pending(self, tmp_path) -> None:
        logger = SimLogger(verbosity=0, stdout=False)
        logger.log(SimLogger.LIFECYCLE, "flushed", day=0)
        logger.flush()
        logger.log(SimLogger.VIEW, "pending", day=0, level="world")
        path = tmp_path / "events.json"
        logger.export_json(str(path))
        data = json.loads(path.read_text())
        assert [e["message"] for e in data["entries"]] == ["flushed", "pending"]
        assert data["entries"][1]["data"] == {"level": "world"}
        assert data["counts"] == {"LIFECYCLE": 1, "VIEW": 1}


class TestDashboard:
    def _run(self, days: int) -> Simulation:
        sim = Simulation(clock=TimeController(start_day=day_number(1916, 12, 20)), seed=5)
        sim.generate(farm_count=4, person_count=12)
        sim.run(days)
        return sim

    def test_comprehensive_report_writes_pngs(self, tmp_path) -> None:
        sim = self._run(20)
        paths = Dashboard.comprehensive_report(sim.collector, str(tmp_path / "plots"))
        assert len(paths) == 6
        for path in paths:
            assert (tmp_path / "plots" / path.rsplit("/", 1)[-1]).stat().st_size > 0

    def test_empty_report(self, tmp_path) -> None:
        sim = Simulation(seed=1)
        assert Dashboard.comprehensive_report(sim.collector, str(tmp_path)) == []

    def test_live_update_and_save(self, tmp_path) -> None:
        sim = self._run(4)
        dashboard = Dashboard(update_interval=2)
        dashboard.update(1, sim.collector)
        assert dashboard._fig is None
        dashboard.update(2, sim.collector)
        dashboard.save(str(tmp_path / "dash.png"))
        dashboard.close()
        assert (tmp_path / "dash.png").exists()


class TestMain:
    def test_direct_run(self, tmp_path) -> None:
        from agrarian_sim.main import main

        out = tmp_path / "results"
        main(["--days", "5", "--seed", "3", "--output-dir", str(out), "--no-plots"])
        rows = (out / "metrics.csv").read_text().strip().splitlines()
        assert len(rows) == 6
        assert json.loads((out / "events.json").read_text())

    def test_frames_run(self, tmp_path) -> None:
        from agrarian_sim.main import main

        out = tmp_path / "frames"
        main([
            "--days", "3", "--mode", "frames", "--frame-dt", "0.3",
            "--output-dir", str(out), "--no-plots",
        ])
        rows = (out / "metrics.csv").read_text().strip().splitlines()
        assert len(rows) == 4

    def test_config_file(self, tmp_path) -> None:
        from agrarian_sim.main import main

        config = tmp_path / "session.json"
        config.write_text(json.dumps({"farm_count": 3, "person_count": 9, "start_date": [1930, 1, 1]}))
        out = tmp_path / "cfg"
        main(["--days", "2", "--config", str(config), "--output-dir", str(out), "--no-plots"])
        header, first = (out / "metrics.csv").read_text().splitlines()[:2]
        assert first.split(",")[1] == "collectivization"

    @pytest.mark.parametrize("frame_dt", ["0", "-0.5"])
    def test_non_positive_frame_dt_rejected(self, tmp_path, frame_dt) -> None:
        from agrarian_sim.main import main

        out = tmp_path / "bad"
        with pytest.raises(SystemExit) as info:
            main(["--days", "1", "--mode", "frames", "--frame-dt", frame_dt,
                  "--output-dir", str(out), "--no-plots"])
        assert info.value.code == 2
        assert not out.exists()

    def test_events_carry_structured_fields(self, tmp_path) -> None:
        from agrarian_sim.main import main

        out = tmp_path / "era"
        config = tmp_path / "session.json"
        config.write_text(json.dumps({"farm_count": 3, "person_count": 9, "start_date": [1916, 12, 31]}))
        main(["--days", "2", "--config", str(config), "--output-dir", str(out), "--no-plots"])
        data = json.loads((out / "events.json").read_text())
        era = [e for e in data["entries"] if e["category"] == "ERA"]
        assert era[0]["data"]["era_id"] == "revolution"
        assert era[0]["data"]["policies"] == ["disruption", "earlyRequisition"]
