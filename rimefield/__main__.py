"""Entry point for ``python -m rimefield``.

Loads the default YAML config, builds a thermal simulation on a demo
world, and either runs it headless or opens a Pygame temperature map.
"""

from __future__ import annotations

import argparse
import logging
import pathlib

from rimefield.logging_config import setup_logging
from rimefield.simulation.config import ThermalConfig
from rimefield.simulation.engine import ThermalSimulation

_DEFAULT_CONFIG = (
    pathlib.Path(__file__).resolve().parent.parent / "config" / "default.yaml"
)

logger = logging.getLogger(__name__)


def main() -> None:
    """Parse CLI args, create the simulation, run or render it."""
    parser = argparse.ArgumentParser(
        prog="rimefield",
        description="Rimefield - per-cell map temperature simulator",
    )
    parser.add_argument(
        "-c",
        "--config",
        type=pathlib.Path,
        default=_DEFAULT_CONFIG,
        help="Path to YAML config file (default: config/default.yaml)",
    )
    parser.add_argument(
        "--headless",
        action="store_true",
        help="Run without a window and log a summary",
    )
    parser.add_argument(
        "--ticks",
        type=int,
        default=60_000,
        help="Ticks to run in headless mode (default: 60000)",
    )
    parser.add_argument(
        "--cell-size",
        type=int,
        default=10,
        help="Pixel size per grid cell (default: 10)",
    )
    parser.add_argument(
        "--fps",
        type=int,
        default=30,
        help="Target frames per second (default: 30)",
    )
    parser.add_argument(
        "--speed",
        type=float,
        default=600.0,
        help="Simulation ticks per second (default: 600)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (default: INFO)",
    )
    args = parser.parse_args()

    setup_logging(level=getattr(logging, args.log_level))
    config = ThermalConfig.from_yaml(args.config)
    simulation = ThermalSimulation(config=config)

    if args.headless:
        simulation.run(args.ticks)
        temps = simulation.grid.temperatures
        logger.info(
            "After %d ticks (%d updates): min %.1f, mean %.1f, max %.1f; %d frozen cells.",
            simulation.tick,
            simulation.updates,
            temps.min(),
            temps.mean(),
            temps.max(),
            len(simulation.world.under_terrain) if simulation.world else 0,
        )
        return

    from rimefield.ui.pygame_client import PygameRenderer

    renderer = PygameRenderer(
        simulation=simulation,
        cell_size=args.cell_size,
        ticks_per_second=args.speed,
    )
    renderer.run(fps=args.fps)


if __name__ == "__main__":
    main()
