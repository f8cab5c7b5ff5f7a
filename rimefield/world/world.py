"""World grid: the host map the thermal simulation runs on.

The World owns terrain layers, snow, roofs, things and rooms, and
provides the spatial queries and destructive operations (destroy,
kill, eject) that temperature-driven terrain changes rely on.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import numpy as np
from numpy.typing import NDArray

from rimefield.world.cell import Cell
from rimefield.world.terrain import Biome, TerrainDef, Terrains
from rimefield.world.things import Corpse, Door, Grave, Pawn, Thing

if TYPE_CHECKING:
    from numpy.random import Generator

    from rimefield.thermal.grid import TemperatureGrid

logger = logging.getLogger(__name__)


@dataclass
class Letter:
    """A player-visible notification."""

    label: str
    text: str
    cell: Cell


@dataclass(eq=False)
class Room:
    """A connected set of cells enclosed by walls.

    Attributes:
        cells: Cells belonging to the room.
        touches_map_edge: Outdoor rooms use the outdoor temperature.
    """

    cells: list[Cell]
    touches_map_edge: bool = False


@dataclass
class World:
    """A 2D map that contains all host-side spatial state.

    Attributes:
        width: Number of columns in the grid.
        height: Number of rows in the grid.
        biome: Map biome.
        outdoor_temperature: Map-wide ambient temperature, also used as a
            fallback when no temperature grid is attached.
        terrain: Top terrain layer indexed as ``terrain[y][x]``.
        under_terrain: Terrain recorded beneath frozen cells.
        snow_depth: Snow depth per cell (0.0-1.0).
        roofed: Cells covered by a roof do not exchange heat outdoors.
        rooms: Enclosed rooms.
        letters: Notifications delivered to the player.
        temperature_grid: Attached thermal simulation, if any.
    """

    width: int
    height: int
    biome: Biome = Biome.TEMPERATE_FOREST
    outdoor_temperature: float = 15.0
    terrain: list[list[TerrainDef]] = field(init=False, repr=False)
    under_terrain: dict[Cell, TerrainDef] = field(default_factory=dict, repr=False)
    snow_depth: NDArray[np.float64] = field(init=False, repr=False)
    roofed: NDArray[np.bool_] = field(init=False, repr=False)
    rooms: list[Room] = field(default_factory=list, repr=False)
    letters: list[Letter] = field(default_factory=list, repr=False)
    temperature_grid: TemperatureGrid | None = field(default=None, repr=False)
    _things: dict[Cell, list[Thing]] = field(init=False, repr=False)
    _positions: dict[Thing, Cell] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        """Initialise every cell as bare soil with no snow and no roof."""
        self.terrain = [
            [Terrains.SOIL for _ in range(self.width)] for _ in range(self.height)
        ]
        self.snow_depth = np.zeros((self.height, self.width), dtype=np.float64)
        self.roofed = np.zeros((self.height, self.width), dtype=np.bool_)
        self._things = {}
        self._positions = {}

    # -- spatial queries -------------------------------------------------

    def in_bounds(self, cell: Cell) -> bool:
        """Return True if ``cell`` lies inside the grid."""
        return 0 <= cell.x < self.width and 0 <= cell.y < self.height

    def check_bounds(self, cell: Cell) -> Cell:
        """Return ``cell`` unchanged if it is in bounds.

        Raises:
            IndexError: If coordinates are out of bounds.
        """
        if not self.in_bounds(cell):
            msg = f"({cell.x}, {cell.y}) out of bounds for {self.width}x{self.height}"
            raise IndexError(msg)
        return cell

    def cells(self) -> list[Cell]:
        """Return every cell in row-major order."""
        return [Cell(x, y) for y in range(self.height) for x in range(self.width)]

    def neighbours(self, cell: Cell) -> list[Cell]:
        """Return the in-bounds orthogonal neighbours of ``cell``."""
        return [c for c in cell.adjacent() if self.in_bounds(c)]

    def room_at(self, cell: Cell) -> Room | None:
        """Return the room containing ``cell``, if any."""
        for room in self.rooms:
            if cell in room.cells:
                return room
        return None

    # -- terrain ---------------------------------------------------------

    def terrain_at(self, cell: Cell) -> TerrainDef:
        """Return the visible terrain at ``cell``."""
        self.check_bounds(cell)
        return self.terrain[cell.y][cell.x]

    def set_terrain(self, cell: Cell, terrain: TerrainDef) -> None:
        """Replace the visible terrain at ``cell``."""
        self.check_bounds(cell)
        self.terrain[cell.y][cell.x] = terrain

    def under_terrain_at(self, cell: Cell) -> TerrainDef | None:
        """Return the terrain recorded beneath ``cell``, if any."""
        return self.under_terrain.get(cell)

    def set_under_terrain(self, cell: Cell, terrain: TerrainDef | None) -> None:
        """Record (or clear, with None) the terrain beneath ``cell``."""
        self.check_bounds(cell)
        if terrain is None:
            self.under_terrain.pop(cell, None)
        else:
            self.under_terrain[cell] = terrain

    def remove_top_layer(self, cell: Cell) -> None:
        """Strip the visible terrain, exposing the recorded under-terrain.

        Does nothing if no under-terrain is recorded.
        """
        under = self.under_terrain.pop(cell, None)
        if under is not None:
            self.set_terrain(cell, under)

    def has_terrain_temperatures(self) -> bool:
        """Return True if any terrain on the map tracks its own temperature."""
        return any(t.has_temperature for row in self.terrain for t in row) or any(
            t.has_temperature for t in self.under_terrain.values()
        )

    # -- things ----------------------------------------------------------

    def things_at(self, cell: Cell) -> list[Thing]:
        """Return a snapshot of the things occupying ``cell``."""
        return list(self._things.get(cell, ()))

    def occupied_cells(self) -> list[Cell]:
        """Return every cell holding at least one thing."""
        return list(self._things)

    def position_of(self, thing: Thing) -> Cell | None:
        """Return where ``thing`` is, or None if it is not on the map."""
        return self._positions.get(thing)

    def spawn(self, thing: Thing, cell: Cell) -> Thing:
        """Place ``thing`` on ``cell``."""
        self.check_bounds(cell)
        self._things.setdefault(cell, []).append(thing)
        self._positions[thing] = cell
        thing.destroyed = False
        return thing

    def despawn(self, thing: Thing) -> None:
        """Remove ``thing`` from the map without destroying it."""
        cell = self._positions.pop(thing, None)
        if cell is None:
            return
        things = self._things[cell]
        things.remove(thing)
        if not things:
            del self._things[cell]

    def destroy(self, thing: Thing) -> None:
        """Remove ``thing`` from the map permanently."""
        self.despawn(thing)
        thing.destroyed = True

    def kill(self, pawn: Pawn) -> Corpse:
        """Kill ``pawn``, replacing it with a corpse on the same cell.

        Raises:
            ValueError: If the pawn is not on the map.
        """
        cell = self.position_of(pawn)
        if cell is None:
            msg = f"{pawn} is not on the map"
            raise ValueError(msg)
        pawn.alive = False
        self.destroy(pawn)
        corpse = Corpse(label=f"{pawn.label} (corpse)", pawn=pawn)
        self.spawn(corpse, cell)
        return corpse

    def eject_contents(self, grave: Grave) -> list[Thing]:
        """Drop everything inside ``grave`` onto its cell."""
        cell = self.position_of(grave)
        if cell is None:
            msg = f"{grave} is not on the map"
            raise ValueError(msg)
        ejected, grave.contents = grave.contents, []
        for thing in ejected:
            self.spawn(thing, cell)
        return ejected

    def send_letter(self, label: str, text: str, cell: Cell) -> None:
        """Deliver a player-visible notification."""
        logger.info("Letter: %s - %s", label, text)
        self.letters.append(Letter(label=label, text=text, cell=cell))

    # -- generation ------------------------------------------------------

    def populate(
        self,
        rng: Generator,
        *,
        num_lakes: int = 3,
        lake_radius: int = 6,
        hut_size: int = 7,
    ) -> None:
        """Lay out lakes and a roofed hut with a door.

        Lakes are deep in the middle and shallow towards the shore.  The
        hut is built from stone walls around the map centre.

        Args:
            rng: Seeded random generator.
            num_lakes: Number of circular lakes to place.
            lake_radius: Radius of each lake in cells.
            hut_size: Outer side length of the hut in cells.
        """
        ocean = self.biome is Biome.SEA_ICE
        deep = Terrains.WATER_OCEAN_DEEP if ocean else Terrains.WATER_DEEP
        shallow = Terrains.WATER_OCEAN_SHALLOW if ocean else Terrains.WATER_SHALLOW
        for _ in range(num_lakes):
            cx = int(rng.integers(0, self.width))
            cy = int(rng.integers(0, self.height))
            for dy in range(-lake_radius, lake_radius + 1):
                for dx in range(-lake_radius, lake_radius + 1):
                    cell = Cell(cx + dx, cy + dy)
                    if not self.in_bounds(cell):
                        continue
                    dist = (dx * dx + dy * dy) ** 0.5
                    if dist <= lake_radius / 2:
                        self.set_terrain(cell, deep)
                    elif dist <= lake_radius:
                        self.set_terrain(cell, shallow)

        self.build_hut(
            Cell((self.width - hut_size) // 2, (self.height - hut_size) // 2),
            hut_size,
        )

    def build_hut(self, corner: Cell, size: int) -> Room:
        """Build a square walled, roofed room with a door on its south wall.

        Args:
            corner: Top-left cell of the outer wall.
            size: Outer side length (at least 3).

        Returns:
            The room formed by the interior cells.
        """
        interior: list[Cell] = []
        for dy in range(size):
            for dx in range(size):
                cell = Cell(corner.x + dx, corner.y + dy)
                if not self.in_bounds(cell):
                    continue
                self.set_terrain(cell, Terrains.GRAVEL)
                self.roofed[cell.y, cell.x] = True
                edge = dx in (0, size - 1) or dy in (0, size - 1)
                if not edge:
                    interior.append(cell)
                elif dx == size // 2 and dy == size - 1:
                    self.spawn(
                        Door("door", heat_capacity=6000.0, heat_conductivity=1.0),
                        cell,
                    )
                else:
                    self.spawn(
                        Thing("stone wall", heat_capacity=12000.0, heat_conductivity=2.0),
                        cell,
                    )
        room = Room(cells=interior)
        self.rooms.append(room)
        return room
