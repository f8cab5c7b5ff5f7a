"""TemperatureGrid: per-cell temperature store for one world.

Holds the air temperature of every cell (and, where terrain supports
it, a separate terrain-surface temperature) as 2D NumPy arrays and
advances them once per update.

Each update computes all deltas from the temperatures as they were at
the start of the pass and applies them together afterwards, so every
cell sees the same neighbour state regardless of iteration order.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING

import numpy as np
from numpy.typing import NDArray

from rimefield.thermal.diffusion import DiffusionEngine
from rimefield.thermal.properties import ThermalProperties, ThermalPropertyResolver
from rimefield.world.cell import Cell

if TYPE_CHECKING:
    from rimefield.simulation.config import ThermalConfig
    from rimefield.world.world import World

logger = logging.getLogger(__name__)


class TemperatureGrid:
    """Authoritative temperature field of a world.

    Attributes:
        world: The map this grid belongs to.
        config: Thermal configuration.
        engine: Diffusion math with cached air constants.
        resolver: Thermal property lookup for cells.
        temperatures: Air temperature per cell, indexed ``[y, x]``.
        terrain_temperatures: Terrain-surface temperature per cell (NaN
            where the terrain has none), or None when disabled.
    """

    def __init__(
        self,
        world: World,
        config: ThermalConfig,
        engine: DiffusionEngine | None = None,
    ) -> None:
        self.world = world
        self.config = config
        self.engine = engine if engine is not None else DiffusionEngine(config)
        self.resolver = ThermalPropertyResolver(world, config)
        self.temperatures: NDArray[np.float64] = np.full(
            (world.height, world.width),
            world.outdoor_temperature,
            dtype=np.float64,
        )
        self.terrain_temperatures: NDArray[np.float64] | None = None
        if config.terrain_temperatures_enabled and world.has_terrain_temperatures():
            self.terrain_temperatures = np.full_like(self.temperatures, np.nan)
            self._sync_terrain_temperatures()

    @classmethod
    def attach(cls, world: World, config: ThermalConfig) -> TemperatureGrid:
        """Create a grid for ``world`` and register it on the world."""
        grid = cls(world, config)
        world.temperature_grid = grid
        logger.info(
            "Temperature grid initialised for %dx%d world at %.1f.",
            world.width,
            world.height,
            world.outdoor_temperature,
        )
        return grid

    @property
    def has_terrain_temperatures(self) -> bool:
        return self.terrain_temperatures is not None

    # -- accessors -------------------------------------------------------

    def get_temperature(self, cell: Cell) -> float:
        """Return the air temperature at ``cell``."""
        self.world.check_bounds(cell)
        return float(self.temperatures[cell.y, cell.x])

    def set_temperature(self, cell: Cell, value: float) -> None:
        """Overwrite the air temperature at ``cell``."""
        self.world.check_bounds(cell)
        self.temperatures[cell.y, cell.x] = value

    def get_terrain_temperature(self, cell: Cell) -> float:
        """Return the terrain-surface temperature at ``cell`` (NaN if none)."""
        self.world.check_bounds(cell)
        if self.terrain_temperatures is None:
            return float("nan")
        return float(self.terrain_temperatures[cell.y, cell.x])

    def set_terrain_temperature(self, cell: Cell, value: float) -> None:
        self.world.check_bounds(cell)
        if self.terrain_temperatures is not None:
            self.terrain_temperatures[cell.y, cell.x] = value

    def average_temperature(self, cells: Iterable[Cell]) -> float:
        """Return the mean air temperature over ``cells``."""
        values = [self.get_temperature(c) for c in cells]
        if not values:
            return self.world.outdoor_temperature
        return float(np.mean(values))

    # -- update pass -----------------------------------------------------

    def compute_deltas(
        self,
        properties: tuple[NDArray[np.float64], NDArray[np.float64]] | None = None,
    ) -> NDArray[np.float64]:
        """Return the temperature change of every cell for one update.

        Thermal properties are resolved once per cell, then each pair
        of orthogonal neighbours exchanges heat exactly once.  Unroofed
        cells also exchange heat with the outdoor temperature.

        Args:
            properties: Pre-resolved ``(capacity, conductivity)`` arrays
                for this tick.
        """
        temps = self.temperatures
        if properties is None:
            properties = self.resolver.property_arrays()
        capacity, conductivity = properties
        engine = self.engine
        delta = np.zeros_like(temps)

        # West-east pairs
        d1, d2 = engine.diffuse_mutual_array(
            temps[:, :-1],
            capacity[:, :-1],
            conductivity[:, :-1],
            temps[:, 1:],
            capacity[:, 1:],
            conductivity[:, 1:],
        )
        delta[:, :-1] += d1
        delta[:, 1:] += d2

        # North-south pairs
        d1, d2 = engine.diffuse_mutual_array(
            temps[:-1, :],
            capacity[:-1, :],
            conductivity[:-1, :],
            temps[1:, :],
            capacity[1:, :],
            conductivity[1:, :],
        )
        delta[:-1, :] += d1
        delta[1:, :] += d2

        outdoors = ~self.world.roofed
        if outdoors.any():
            delta[outdoors] += engine.diffuse_single_array(
                temps[outdoors],
                self.world.outdoor_temperature,
                capacity[outdoors],
                conductivity[outdoors],
            )
        return delta

    def cell_delta(
        self,
        cell: Cell,
        properties: dict[Cell, ThermalProperties] | None = None,
    ) -> float:
        """Return the temperature change of a single cell for one update.

        Reference helper for inspecting one cell; the update pass itself
        always goes through :meth:`compute_deltas`, and this must match the
        corresponding entry of its result.

        Args:
            cell: Cell to evaluate.
            properties: Per-tick cache of resolved properties, filled in
                as cells are looked up.
        """
        if properties is None:
            properties = {}

        def resolve(c: Cell) -> ThermalProperties:
            if c not in properties:
                properties[c] = self.resolver.properties(c)
            return properties[c]

        own = resolve(cell)
        temp = self.get_temperature(cell)
        delta = 0.0
        for neighbour in self.world.neighbours(cell):
            other = resolve(neighbour)
            change, _ = self.engine.diffuse_mutual(
                temp,
                own.heat_capacity,
                own.heat_conductivity,
                self.get_temperature(neighbour),
                other.heat_capacity,
                other.heat_conductivity,
            )
            delta += change
        if not self.world.roofed[cell.y, cell.x]:
            delta += self.engine.diffuse_single(
                temp,
                self.world.outdoor_temperature,
                own.heat_capacity,
                own.heat_conductivity,
            )
        return delta

    def update(self) -> None:
        """Advance all temperatures by one update interval."""
        properties = self.resolver.property_arrays()
        self.temperatures = self.temperatures + self.compute_deltas(properties)
        if self.terrain_temperatures is not None:
            self._update_terrain_temperatures(properties)

    def _sync_terrain_temperatures(self) -> None:
        """Match terrain temperatures to the current terrain layout.

        Cells whose terrain gained a temperature start at the air
        temperature; cells whose terrain lost it become NaN.
        """
        terrain = self.terrain_temperatures
        if terrain is None:
            return
        has_temperature = np.array(
            [[t.has_temperature for t in row] for row in self.world.terrain],
            dtype=np.bool_,
        )
        fresh = has_temperature & np.isnan(terrain)
        terrain[fresh] = self.temperatures[fresh]
        terrain[~has_temperature] = np.nan

    def _update_terrain_temperatures(
        self,
        properties: tuple[NDArray[np.float64], NDArray[np.float64]],
    ) -> None:
        """Exchange heat between each cell's air and its terrain surface."""
        self._sync_terrain_temperatures()
        terrain = self.terrain_temperatures
        assert terrain is not None
        t_capacity, t_conductivity = self.resolver.terrain_property_arrays()
        mask = ~np.isnan(t_capacity)
        if not mask.any():
            return
        capacity, conductivity = properties
        d_air, d_terrain = self.engine.diffuse_mutual_array(
            self.temperatures[mask],
            capacity[mask],
            conductivity[mask],
            terrain[mask],
            t_capacity[mask],
            t_conductivity[mask],
        )
        self.temperatures[mask] += d_air
        terrain[mask] += d_terrain

    # -- ignition --------------------------------------------------------

    def ignition_temperature(self, cell: Cell) -> float | None:
        """Return the lowest ignition temperature among things in ``cell``."""
        thresholds = [
            t.ignition_temperature
            for t in self.world.things_at(cell)
            if t.ignition_temperature is not None
        ]
        return min(thresholds) if thresholds else None

    def cells_to_ignite(self) -> list[Cell]:
        """Return cells whose temperature reached their ignition point."""
        if not self.config.autoignition_enabled:
            return []
        result: list[Cell] = []
        for cell in self.world.occupied_cells():
            threshold = self.ignition_temperature(cell)
            if threshold is not None and self.get_temperature(cell) >= threshold:
                result.append(cell)
        return result
