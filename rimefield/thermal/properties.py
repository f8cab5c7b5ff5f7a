"""Thermal property resolution for cells.

A cell's heat capacity and conductivity come from the first thermal
thing standing on it (walls, closed doors, ...) or, if there is none,
from the configured air defaults.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, NamedTuple

import numpy as np
from numpy.typing import NDArray

if TYPE_CHECKING:
    from rimefield.simulation.config import ThermalConfig
    from rimefield.world.cell import Cell
    from rimefield.world.things import Thing
    from rimefield.world.world import World


class ThermalProperties(NamedTuple):
    """A (heat capacity, heat conductivity) pair."""

    heat_capacity: float
    heat_conductivity: float


class ThermalPropertyResolver:
    """Resolve thermal properties of cells on one world.

    Attributes:
        world: The map whose cells are resolved.
        config: Source of the air defaults.
    """

    def __init__(self, world: World, config: ThermalConfig) -> None:
        self.world = world
        self.config = config

    @property
    def air(self) -> ThermalProperties:
        """Properties of a cell holding nothing but air."""
        return ThermalProperties(
            self.config.air_heat_capacity,
            self.config.air_heat_conductivity,
        )

    def thermal_thing(self, cell: Cell) -> Thing | None:
        """Return the first thermal thing occupying ``cell``, if any."""
        if not self.world.in_bounds(cell):
            return None
        for thing in self.world.things_at(cell):
            if thing.is_thermal:
                return thing
        return None

    def properties(self, cell: Cell) -> ThermalProperties:
        """Return the effective thermal properties of ``cell``."""
        thing = self.thermal_thing(cell)
        if thing is None:
            return self.air
        return ThermalProperties(thing.heat_capacity, thing.heat_conductivity)

    def heat_capacity(self, cell: Cell) -> float:
        return self.properties(cell).heat_capacity

    def property_arrays(
        self,
    ) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
        """Resolve every cell once, for use throughout a single tick.

        Returns:
            ``(capacity, conductivity)`` arrays shaped ``(height, width)``.
        """
        shape = (self.world.height, self.world.width)
        capacity = np.full(shape, self.config.air_heat_capacity, dtype=np.float64)
        conductivity = np.full(
            shape,
            self.config.air_heat_conductivity,
            dtype=np.float64,
        )
        for cell in self.world.occupied_cells():
            thing = self.thermal_thing(cell)
            if thing is not None:
                capacity[cell.y, cell.x] = thing.heat_capacity
                conductivity[cell.y, cell.x] = thing.heat_conductivity
        return capacity, conductivity

    def terrain_property_arrays(
        self,
    ) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
        """Resolve terrain-surface properties for every cell.

        Cells whose terrain has no temperature of its own, or that hold
        a thermal thing, get NaN capacity.

        Returns:
            ``(capacity, conductivity)`` arrays shaped ``(height, width)``.
        """
        shape = (self.world.height, self.world.width)
        capacity = np.full(shape, np.nan, dtype=np.float64)
        conductivity = np.zeros(shape, dtype=np.float64)
        for y, row in enumerate(self.world.terrain):
            for x, terrain in enumerate(row):
                if terrain.has_temperature:
                    capacity[y, x] = terrain.heat_capacity
                    conductivity[y, x] = terrain.heat_conductivity
        for cell in self.world.occupied_cells():
            if self.thermal_thing(cell) is not None:
                capacity[cell.y, cell.x] = np.nan
        return capacity, conductivity
