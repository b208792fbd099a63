"""Entry point for the agrarian era simulation."""

from __future__ import annotations

import argparse
import json
import os
import time


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        description="Agrarian Era Simulation (1905-1940)",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("--days", type=int, default=365, help="Number of days to simulate")
    parser.add_argument("--seed", type=int, default=None, help="Random seed (overrides config)")
    parser.add_argument("--config", type=str, default=None, help="JSON file with session options")
    parser.add_argument("--output-dir", type=str, default="results", help="Output directory for results")
    parser.add_argument("--verbosity", type=int, default=0, choices=[0, 1, 2, 3], help="Log verbosity level")
    parser.add_argument("--log-file", type=str, default=None, help="Path to log file")
    parser.add_argument(
        "--mode", choices=["direct", "frames"], default="direct",
        help="direct: tick day by day; frames: drive the frame scheduler with a fixed frame time",
    )
    parser.add_argument("--frame-dt", type=float, default=0.1, help="Seconds per frame in frames mode")
    parser.add_argument("--dashboard", action="store_true", help="Show the live matplotlib dashboard")
    parser.add_argument("--no-plots", action="store_true", help="Skip the static PNG reports")

    args = parser.parse_args(argv)
    if args.days < 0:
        parser.error("--days must not be negative")
    if args.frame_dt <= 0:
        parser.error("--frame-dt must be positive")

    # Import here to allow --help without loading everything
    from agrarian_sim.core.config import SessionConfig
    from agrarian_sim.core.errors import ConfigurationError
    from agrarian_sim.view.scheduler import FrameScheduler, Session
    from agrarian_sim.viz.logger import SimLogger

    config = SessionConfig()
    if args.config:
        with open(args.config) as f:
            config = SessionConfig.from_dict(json.load(f))
    if args.seed is not None:
        config.seed = args.seed

    os.makedirs(args.output_dir, exist_ok=True)
    logger = SimLogger(
        verbosity=args.verbosity,
        log_file=args.log_file or os.path.join(args.output_dir, "simulation.log"),
        stdout=(args.verbosity > 0),
    )

    print("=== Agrarian Era Simulation ===")
    print(f"Days: {args.days} | Seed: {config.seed} | Mode: {args.mode}")
    print(f"Output: {args.output_dir}")
    print()

    try:
        session = Session.create(config, logger=logger)
    except ConfigurationError as e:
        logger.close()
        parser.error(str(e))
    sim = session.simulation
    print(f"  Farms: {len(sim.farms)} | Persons: {len(sim.persons)} | Households: {len(sim.households)}")
    print(f"  Start: {session.clock.date.isoformat()} ({session.clock.current_era.name})")
    if session.clock.gaps:
        print(f"  Warning: era table has {len(session.clock.gaps)} uncovered span(s)")
    print()

    dashboard = None
    if args.dashboard:
        try:
            from agrarian_sim.viz.dashboard import Dashboard
            dashboard = Dashboard()
            dashboard.initialize()
            sim.set_day_callback(lambda day, metrics: dashboard.update(day, metrics))
            print("Live dashboard enabled")
        except Exception as e:
            print(f"Dashboard unavailable ({e}), continuing without visualization")
            dashboard = None

    print(f"Running simulation for {args.days} days...")
    t0 = time.time()
    try:
        if args.mode == "direct":
            sim.run(args.days)
        else:
            scheduler = FrameScheduler(session)
            target = sim.day + args.days
            while sim.day < target:
                before = sim.day
                scheduler.frame(args.frame_dt)
                if dashboard and sim.day != before:
                    dashboard.update(sim.day, sim.collector)
            print(f"  Frames: {session.frames}")
    except KeyboardInterrupt:
        print("\nSimulation interrupted by user")

    elapsed = time.time() - t0
    print(
        f"\nSimulation complete: {sim.day} days in {elapsed:.2f}s "
        f"({sim.day / max(0.01, elapsed):.0f} days/sec), now {session.clock.date.isoformat()}"
    )

    csv_path = os.path.join(args.output_dir, "metrics.csv")
    sim.collector.export_csv(csv_path)
    print(f"Metrics exported to {csv_path}")

    if not args.no_plots:
        try:
            from agrarian_sim.viz.dashboard import Dashboard as DashClass
            DashClass.comprehensive_report(sim.collector, args.output_dir)
        except Exception as e:
            print(f"Could not generate plots: {e}")

    print()
    print(sim.collector.summary_report())
    print()
    print("Key events:")
    print(logger.chronicle(limit=20))
    counts = logger.counts()
    if counts:
        print("Events by category: " + ", ".join(f"{k} {v}" for k, v in sorted(counts.items())))

    if dashboard:
        dashboard.save(os.path.join(args.output_dir, "dashboard_final.png"))
        dashboard.close()

    logger.export_json(os.path.join(args.output_dir, "events.json"))
    logger.close()

    print(f"\nAll results saved to {args.output_dir}/")


if __name__ == "__main__":
    main()
