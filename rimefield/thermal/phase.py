"""Terrain phase changes: water freezing into ice and ice melting back.

Freezing records the water terrain underneath the new ice so that
melting can restore it.  Ice that was never produced by freezing (for
instance, generated with the map) has nothing recorded, so melting it
infers a plausible water terrain from the surrounding cells.

Melting is destructive: things that cannot stand on the resulting
terrain sink, are uncovered, or are removed.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from rimefield.world.terrain import ICE_MELTING_POINT, Biome, TerrainDef, Terrains
from rimefield.world.things import Filth, Grave, Pawn

if TYPE_CHECKING:
    from rimefield.thermal.grid import TemperatureGrid
    from rimefield.world.cell import Cell
    from rimefield.world.world import World

logger = logging.getLogger(__name__)


@dataclass
class PhaseChangeReport:
    """Cells changed by one scan."""

    frozen: list[Cell] = field(default_factory=list)
    melted: list[Cell] = field(default_factory=list)


class PhaseChangeController:
    """Freeze and melt terrain according to cell temperatures.

    Attributes:
        world: The map whose terrain is changed.
        grid: Temperature source.
    """

    def __init__(self, world: World, grid: TemperatureGrid) -> None:
        self.world = world
        self.grid = grid

    def temperature_at(self, cell: Cell) -> float:
        """Return the terrain temperature at ``cell``, else the air temperature."""
        terrain_temp = self.grid.get_terrain_temperature(cell)
        if not math.isnan(terrain_temp):
            return terrain_temp
        return self.grid.get_temperature(cell)

    def should_freeze(self, cell: Cell) -> bool:
        terrain = self.world.terrain_at(cell)
        return terrain.is_water and self.temperature_at(cell) <= terrain.freezing_point

    def should_melt(self, cell: Cell) -> bool:
        return (
            self.world.terrain_at(cell) == Terrains.ICE
            and self.temperature_at(cell) > ICE_MELTING_POINT
        )

    def scan(self) -> PhaseChangeReport:
        """Freeze and melt every cell whose temperature calls for it.

        Conditions are evaluated for the whole map before any terrain
        changes, so a cell changes phase at most once per scan.
        """
        report = PhaseChangeReport()
        for cell in self.world.cells():
            if self.should_freeze(cell):
                report.frozen.append(cell)
            elif self.should_melt(cell):
                report.melted.append(cell)
        for cell in report.frozen:
            self.freeze(cell)
        for cell in report.melted:
            self.melt(cell)
        if report.frozen or report.melted:
            logger.info(
                "Phase change: %d cells froze, %d melted.",
                len(report.frozen),
                len(report.melted),
            )
        return report

    def freeze(self, cell: Cell) -> None:
        """Cover ``cell`` with ice, remembering the terrain underneath."""
        terrain = self.world.terrain_at(cell)
        logger.debug("%s freezes at %s.", terrain, cell)
        self.world.set_terrain(cell, Terrains.ICE)
        self.world.set_under_terrain(cell, terrain)

    def melt(self, cell: Cell, melted_terrain: TerrainDef | None = None) -> TerrainDef:
        """Turn the ice at ``cell`` back into water.

        Args:
            cell: An ice cell.
            melted_terrain: Terrain to use when nothing was recorded
                under the ice; inferred from neighbours if omitted.

        Returns:
            The terrain the cell ends up with.
        """
        world = self.world
        if melted_terrain is None:
            melted_terrain = self.best_under_ice_terrain(cell)
        resulting = world.under_terrain_at(cell) or melted_terrain

        for thing in reversed(world.things_at(cell)):
            if resulting.impassable:
                if isinstance(thing, Pawn):
                    logger.info("%s sinks in %s and dies.", thing, resulting)
                    if thing.player_owned:
                        world.send_letter(
                            f"{thing.label} sunk",
                            f"{thing.label} sunk in {resulting} when ice melted.",
                            cell,
                        )
                    corpse = world.kill(thing)
                    world.destroy(corpse)
                else:
                    logger.info("%s sinks in %s.", thing, resulting)
                    world.destroy(thing)
            elif isinstance(thing, Grave) and thing.has_contents:
                logger.info("Grave at %s is uncovered due to melting.", cell)
                world.eject_contents(thing)
                world.destroy(thing)
            elif (
                thing.terrain_affordance is not None
                and thing.terrain_affordance not in resulting.affordances
            ):
                logger.info("%s can't stand on %s and is destroyed.", thing, resulting)
                world.destroy(thing)
            elif isinstance(thing, Filth) and not resulting.accepts_filth:
                logger.debug("Removing filth %s from %s.", thing, resulting)
                world.destroy(thing)

        if world.under_terrain_at(cell) is None:
            world.set_under_terrain(cell, melted_terrain)
        logger.debug("Ice melts at %s into %s.", cell, resulting)
        world.remove_top_layer(cell)
        world.snow_depth[cell.y, cell.x] = 0.0
        return resulting

    def best_under_ice_terrain(self, cell: Cell) -> TerrainDef:
        """Guess what water lies under ``cell``'s ice.

        Returns the recorded under-terrain if there is one.  Otherwise
        any neighbouring water (visible or under ice) is copied; failing
        that, shallow water is chosen next to solid ground and deep
        water when surrounded by ice.  Sea-ice maps use ocean variants.
        """
        world = self.world
        recorded = world.under_terrain_at(cell)
        if recorded is not None:
            return recorded

        found_ground = False
        for neighbour in world.neighbours(cell):
            terrain = world.terrain_at(neighbour)
            if terrain.is_water:
                return terrain
            under = world.under_terrain_at(neighbour)
            if under is not None and under.is_water:
                return under
            if terrain != Terrains.ICE or (under is not None and under != Terrains.ICE):
                found_ground = True

        ocean = world.biome is Biome.SEA_ICE
        if found_ground:
            return Terrains.WATER_OCEAN_SHALLOW if ocean else Terrains.WATER_SHALLOW
        return Terrains.WATER_OCEAN_DEEP if ocean else Terrains.WATER_DEEP
