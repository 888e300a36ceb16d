#!/usr/bin/env python3
"""
Physarum Transport Simulation

Agents shuttle between a pickup and a delivery zone by following diffusing
chemical fields, reinforcing a vein network with every completed trip.

Usage:
    python -m physarum_transport.main [--config configs/default.yaml] [options]

Examples:
    python -m physarum_transport.main --steps 3000 --seed 42
    python -m physarum_transport.main --config configs/default.yaml --gif --out-dir results/
    python -m physarum_transport.main --agents 200 --no-snapshot --quiet
    python -m physarum_transport.main --bench --steps 1000 --agents 500
"""

import argparse
import logging
import sys
import time
from pathlib import Path
from typing import List, Optional

from .config import default_config, load_config, validate_config
from .model.engine import Simulation, run_simulation_bench
from .export.csv_writer import CSVWriter
from .export.visualizer import Visualizer
from .export.reporter import Reporter


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description='Physarum Transport Network Simulation',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    python -m physarum_transport.main --steps 3000 --seed 42
    python -m physarum_transport.main --config configs/default.yaml --gif --out-dir results/
    python -m physarum_transport.main --agents 200 --no-snapshot --quiet
    python -m physarum_transport.main --bench --steps 1000 --agents 500
        """
    )

    parser.add_argument('--config', type=Path, default=None,
                        help='Path to YAML configuration file (default: built-in tuning)')

    # Optional overrides
    parser.add_argument('--steps', type=int, default=None,
                        help='Override max simulation steps')
    parser.add_argument('--agents', type=int, default=None,
                        help='Override agent count')
    parser.add_argument('--out-dir', type=Path, default=Path('./output'),
                        help='Output directory for exports (default: ./output)')

    # Export toggles
    parser.add_argument('--csv', dest='csv', action='store_true', default=None,
                        help='Enable CSV export')
    parser.add_argument('--no-csv', dest='csv', action='store_false',
                        help='Disable CSV export (default)')
    parser.add_argument('--csv-every', type=int, default=None, metavar='N',
                        help='Log agents to CSV every N steps (default: 1)')

    parser.add_argument('--snapshot', dest='snapshot', action='store_true', default=None,
                        help='Enable final snapshot (default)')
    parser.add_argument('--no-snapshot', dest='snapshot', action='store_false',
                        help='Disable final snapshot')

    parser.add_argument('--gif', action='store_true', default=False,
                        help='Enable GIF animation export')

    parser.add_argument('--bench', action='store_true', default=False,
                        help='Run headless and report deliveries and timing only')

    parser.add_argument('--quiet', action='store_true', default=False,
                        help='Suppress stdout output')
    parser.add_argument('--verbose', action='store_true', default=False,
                        help='Enable debug logging')

    parser.add_argument('--seed', type=int, default=None,
                        help='Random seed for reproducibility')

    return parser.parse_args(argv)


def run_bench(steps: int, agents: int, seed: Optional[int], quiet: bool) -> int:
    """Time a headless run."""
    start = time.perf_counter()
    delivered = run_simulation_bench(steps, agents, seed=seed)
    elapsed = time.perf_counter() - start
    if not quiet:
        print(f"Benchmark: {steps} steps, {agents} agents")
        print(f"  Delivered: {delivered}")
        print(f"  Elapsed:   {elapsed:.3f} s ({steps / max(elapsed, 1e-9):.1f} steps/s)")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else
        (logging.WARNING if args.quiet else logging.INFO),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s'
    )

    # Load configuration
    try:
        config = load_config(args.config) if args.config else default_config()
    except FileNotFoundError:
        print(f"Error: Configuration file not found: {args.config}", file=sys.stderr)
        return 1
    except Exception as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        return 1

    # Apply CLI overrides
    if args.steps is not None:
        config.max_steps = args.steps
    if args.agents is not None:
        config.agent_count = args.agents
    if args.csv is not None:
        config.csv_enabled = args.csv
    if args.csv_every is not None:
        config.csv_every = args.csv_every
    if args.snapshot is not None:
        config.snapshot_enabled = args.snapshot
    if args.gif:
        config.gif_enabled = True
    config.quiet = args.quiet
    if args.seed is not None:
        config.seed = args.seed
    config.out_dir = args.out_dir

    try:
        validate_config(config)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.bench:
        return run_bench(config.max_steps, config.agent_count, config.seed, config.quiet)

    # Initialize engine
    if not config.quiet:
        print("Initializing simulation...")
        print(f"  Grid: {config.grid.width}x{config.grid.height}")
        print(f"  Agents: {config.agent_count}")
        print(f"  Max steps: {config.max_steps}")

    try:
        engine = Simulation(config)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    # Initialize exporters
    csv_writer = None
    if config.csv_enabled:
        csv_writer = CSVWriter(config.out_dir / 'simulation_log.csv', every=config.csv_every)
        csv_writer.open()

    visualizer = Visualizer(config.grid.width, config.grid.height)

    reporter = Reporter(str(args.config) if args.config else None, config.seed)

    # Main simulation loop
    if not config.quiet:
        print("\nRunning simulation...")

    final_state = None
    try:
        while not engine.is_finished():
            state = engine.step()
            final_state = state

            # Export CSV
            if csv_writer:
                csv_writer.append(state)

            # Buffer GIF frame (every N steps to reduce memory)
            if config.gif_enabled:
                if state.step % 20 == 0 or engine.is_finished():
                    visualizer.buffer_frame(state)

            # Update reporter
            reporter.update(state)

            # Progress indicator
            if not config.quiet and state.step % 100 == 0:
                delivered = int(state.metrics.get('delivered', 0))
                vein_peak = state.metrics.get('vein_peak', 0.0)
                print(f"  Step {state.step}: {delivered} delivered, "
                      f"peak vein {vein_peak:.2f}")

    except KeyboardInterrupt:
        if not config.quiet:
            print("\nSimulation interrupted by user.")
    finally:
        if csv_writer:
            csv_writer.close()

    if csv_writer and not config.quiet:
        print(f"\nCSV saved: {config.out_dir / 'simulation_log.csv'} "
              f"({csv_writer.rows_written} rows)")

    if config.snapshot_enabled and final_state:
        snapshot_path = config.out_dir / 'final_state.png'
        visualizer.save_snapshot(final_state, snapshot_path)
        if not config.quiet:
            print(f"Snapshot saved: {snapshot_path}")

    if config.gif_enabled:
        gif_path = config.out_dir / 'simulation.gif'
        if not config.quiet:
            print(f"Generating GIF ({len(visualizer.frames)} frames)...")
        visualizer.generate_gif(gif_path, fps=10)
        if not config.quiet:
            print(f"Animation saved: {gif_path}")

    # Print summary report
    if not config.quiet and final_state:
        report = reporter.generate_summary(
            final_state,
            config.out_dir,
            config.csv_enabled,
            config.snapshot_enabled,
            config.gif_enabled
        )
        print(report)

    return 0


if __name__ == '__main__':
    sys.exit(main())
