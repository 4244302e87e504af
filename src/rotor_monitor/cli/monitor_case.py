#!/usr/bin/env python3
"""
Rotor monitor CLI.

This script previews single-propeller case configurations and re-plots
convergence records written by the runtime monitor.

Usage:
    python -m rotor_monitor.cli.monitor_case config.yaml [options]

Examples:
    # Preview the operating point and monitor setup
    python -m rotor_monitor.cli.monitor_case case.yaml --preview

    # Generate template configuration
    python -m rotor_monitor.cli.monitor_case --template > case.yaml

    # Plot the coefficient histories of a finished run
    python -m rotor_monitor.cli.monitor_case --plot runs/singlerotor_convergence.csv
"""

import argparse
import logging
import sys
from pathlib import Path

logger = logging.getLogger(__name__)

# Template YAML configuration
TEMPLATE_CONFIG = """# Rotor Monitor Configuration
# ===========================

#============================================================================
# OPERATING CASE (isolated propeller in forward flight)
#============================================================================
case:
  rotor_file: "apc10x7.csv"  # Rotor geometry database entry
  rotor_radius: 0.127        # Rotor radius [m]
  n_blades: 2                # Number of blades
  n_elements: 10             # Blade elements per blade
  pitch: 0.0                 # Collective pitch [deg]

  J: 0.6                     # Advance ratio V/(nD)
  ReD07: 1.5e+6              # Diameter-based Reynolds number at 70% span
  rho: 1.225                 # Air density [kg/m³]
  mu: 1.81e-5                # Air dynamic viscosity [kg/(m·s)]
  sound_speed: 343.0         # Speed of sound [m/s]

  nrevs: 8                   # Revolutions simulated
  nsteps_per_rev: 36         # Time steps per revolution
  p_per_step: 1              # Particle sheds per time step
  core_overlap: 2.125        # Particle core overlap

#============================================================================
# RUNTIME MONITOR
#============================================================================
monitor:
  output_path: "runs"        # Omit to disable the convergence record
  run_name: "singlerotor"
  enable_plot: true
  figure_name: "monitor_rotor"
  snapshot_every_n_calls: 10

  # Reference operating point, derived from `case` when omitted
  # ambient:
  #   rho: 1.225
  #   J: 0.6
  #   nominal_rpm: 5000.0
  #   total_steps: 288
"""


def setup_logging(verbose: bool = False) -> None:
    """Configure logging for the CLI."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def print_template() -> None:
    """Print template configuration to stdout."""
    print(TEMPLATE_CONFIG)


def preview_config(config_path: str) -> bool:
    """Log the operating point and monitor setup of a configuration file."""
    from rotor_monitor.config import load_config

    try:
        case, monitor = load_config(config_path)
    except (ValueError, FileNotFoundError) as e:
        logger.error("Invalid configuration: %s", e)
        return False

    if case is not None:
        case.log_summary()

    ambient = monitor.ambient
    logger.info("MONITOR")
    logger.info("  Run name:       %s", monitor.run_name)
    logger.info("  Record:         %s", monitor.record_file or "disabled")
    logger.info("  Plot:           %s", monitor.enable_plot)
    logger.info("  Snapshot every: %d calls", monitor.snapshot_every_n_calls)
    logger.info(
        "  Ambient:        rho=%s, J=%s, RPM=%.1f, steps=%d",
        ambient.rho,
        ambient.J,
        ambient.nominal_rpm,
        ambient.total_steps,
    )
    return True


def plot_convergence(record_path: str, output: str = None, run: int = -1) -> Path:
    """Plot one run of a convergence record next to it, or to ``output``."""
    from rotor_monitor.plotting import plot_record
    from rotor_monitor.reader import read_convergence

    record_path = Path(record_path)
    df = read_convergence(record_path, run=run)
    if output is None:
        output = record_path.with_name(record_path.stem + "_coefficients.png")
    return plot_record(df, output)


def main(argv=None):
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        description="Preview rotor monitor cases and plot convergence records.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s case.yaml --preview            Preview configuration
  %(prog)s --template > case.yaml         Generate template
  %(prog)s --plot run_convergence.csv     Plot a convergence record
        """,
    )

    parser.add_argument(
        "config",
        nargs="?",
        help="Path to YAML configuration file",
    )

    parser.add_argument(
        "--preview",
        "-p",
        action="store_true",
        help="Preview configuration",
    )

    parser.add_argument(
        "--template",
        "-t",
        action="store_true",
        help="Print template configuration to stdout",
    )

    parser.add_argument(
        "--plot",
        metavar="CSV",
        help="Plot coefficient histories of a convergence record",
    )

    parser.add_argument(
        "--output",
        "-o",
        help="Output image for --plot",
    )

    parser.add_argument(
        "--run",
        type=int,
        default=-1,
        help="Run block to plot when a record holds appended runs (default: latest)",
    )

    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging",
    )

    args = parser.parse_args(argv)

    # Handle special commands first
    if args.template:
        print_template()
        return 0

    setup_logging(args.verbose)

    if args.plot:
        try:
            plot_convergence(args.plot, args.output, args.run)
            return 0
        except Exception as e:
            logging.exception("Plotting failed")
            print(f"\nError: {e}")
            return 1

    if not args.config:
        parser.print_help()
        return 1

    config_path = Path(args.config)
    if not config_path.exists():
        print(f"Error: Configuration file not found: {config_path}")
        return 1

    return 0 if preview_config(str(config_path)) else 1


if __name__ == "__main__":
    sys.exit(main())
