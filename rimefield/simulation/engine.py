"""ThermalSimulation: the main tick loop.

Owns the world, its temperature grid and the phase-change controller,
and advances them in the canonical order once every
``ticks_per_update`` host ticks:

1. Diffuse temperatures (air, outdoors, terrain surfaces)
2. Freeze and melt terrain
3. Collect cells hot enough to ignite
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

import numpy as np
from numpy.random import Generator

from rimefield.simulation.config import ThermalConfig
from rimefield.thermal.grid import TemperatureGrid
from rimefield.thermal.phase import PhaseChangeController, PhaseChangeReport
from rimefield.world.cell import Cell
from rimefield.world.world import World

logger = logging.getLogger(__name__)


@dataclass
class ThermalSimulation:
    """Drives the thermal simulation forward tick by tick.

    Attributes:
        config: Loaded simulation configuration.
        world: The host map; a populated demo world is built from the
            config when omitted.
        grid: Temperature field attached to the world.
        phase: Terrain freeze/melt controller.
        rng: Master seeded random generator.
        tick: Current host tick count.
        updates: Number of temperature updates run so far.
        last_phase_report: Terrain changes from the latest update.
        ignition_candidates: Cells that reached their ignition point
            in the latest update.
    """

    config: ThermalConfig
    world: World | None = None
    grid: TemperatureGrid = field(init=False)
    phase: PhaseChangeController = field(init=False)
    rng: Generator = field(init=False)
    tick: int = 0
    updates: int = 0
    last_phase_report: PhaseChangeReport = field(
        init=False,
        default_factory=PhaseChangeReport,
    )
    ignition_candidates: list[Cell] = field(init=False, default_factory=list)

    def __post_init__(self) -> None:
        """Build world, temperature grid and RNG from config."""
        self.rng = np.random.default_rng(self.config.seed)
        if self.world is None:
            self.world = World(
                width=self.config.world_width,
                height=self.config.world_height,
                outdoor_temperature=self.config.outdoor_temperature,
            )
            self.world.populate(self.rng)
        self.grid = TemperatureGrid.attach(self.world, self.config)
        self.phase = PhaseChangeController(self.world, self.grid)

    def step(self) -> None:
        """Advance the simulation by one host tick."""
        self.tick += 1
        if self.tick % self.config.ticks_per_update == 0:
            self.update()

    def update(self) -> None:
        """Run one temperature update and everything driven by it."""
        self.grid.update()

        if self.config.freezing_and_melting_enabled:
            self.last_phase_report = self.phase.scan()
        else:
            self.last_phase_report = PhaseChangeReport()

        self.ignition_candidates = self.grid.cells_to_ignite()
        if self.ignition_candidates:
            logger.info("%d cells reached ignition temperature.", len(self.ignition_candidates))
        self.updates += 1

    def run(self, ticks: int) -> None:
        """Run the simulation for a fixed number of host ticks.

        Args:
            ticks: Number of ticks to advance.
        """
        for _ in range(ticks):
            self.step()

    def configure(self, config: ThermalConfig) -> None:
        """Swap in new settings and refresh the cached diffusion constants."""
        self.config = config
        self.grid.config = config
        self.grid.resolver.config = config
        self.grid.engine.configure(config)
