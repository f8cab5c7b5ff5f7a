"""Save and restore thermal state with NumPy ``.npz`` archives.

The archive holds the air temperature field, the terrain temperature
field (if tracked) and the under-terrain mapping of frozen cells.
Floats are stored as float64, so a round trip is bit-identical.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

import numpy as np

from rimefield.thermal.grid import TemperatureGrid
from rimefield.world.cell import Cell
from rimefield.world.terrain import Terrains

if TYPE_CHECKING:
    from rimefield.simulation.config import ThermalConfig
    from rimefield.world.world import World

logger = logging.getLogger(__name__)


def save_world_state(path: str | Path, grid: TemperatureGrid, world: World) -> Path:
    """Write the thermal state of ``world`` to ``path``.

    Args:
        path: Destination file; ``.npz`` is appended if missing.
        grid: The world's temperature grid.
        world: The world owning the under-terrain mapping.

    Returns:
        The path actually written.
    """
    path = Path(path)
    if path.suffix != ".npz":
        path = path.with_suffix(path.suffix + ".npz")
    under = sorted(world.under_terrain.items())
    under_cells = np.array([[c.x, c.y] for c, _ in under], dtype=np.int64).reshape(-1, 2)
    under_names = np.array([t.name for _, t in under], dtype=np.str_)
    terrain = grid.terrain_temperatures
    np.savez(
        path,
        temperatures=grid.temperatures,
        terrain_temperatures=(
            terrain if terrain is not None else np.empty((0, 0), dtype=np.float64)
        ),
        under_cells=under_cells,
        under_names=under_names,
    )
    logger.info("Saved thermal state (%d frozen cells) to %s.", len(under), path)
    return path


def load_world_state(
    path: str | Path,
    world: World,
    config: ThermalConfig,
) -> TemperatureGrid:
    """Restore thermal state saved by :func:`save_world_state`.

    The archive is checked before anything is written, so a failed load
    leaves ``world`` untouched.  On success the under-terrain mapping on
    ``world`` is replaced and a new grid is attached to it.  The saved
    terrain field is only restored when ``config`` enables the terrain
    layer.

    Raises:
        ValueError: If a saved field does not match the world size.
        KeyError: If a saved under-terrain name is unknown.
    """
    with np.load(Path(path), allow_pickle=False) as data:
        temperatures = data["temperatures"]
        terrain = data["terrain_temperatures"]
        under_cells = data["under_cells"]
        under_names = data["under_names"]

    shape = (world.height, world.width)
    if temperatures.shape != shape:
        msg = f"saved temperatures {temperatures.shape} do not match world {shape}"
        raise ValueError(msg)
    if terrain.size and terrain.shape != shape:
        msg = f"saved terrain temperatures {terrain.shape} do not match world {shape}"
        raise ValueError(msg)
    under_terrain = {
        Cell(int(x), int(y)): Terrains.named(str(name))
        for (x, y), name in zip(under_cells, under_names, strict=True)
    }

    world.under_terrain = under_terrain
    grid = TemperatureGrid.attach(world, config)
    grid.temperatures = temperatures.astype(np.float64, copy=True)
    if terrain.size and grid.has_terrain_temperatures:
        grid.terrain_temperatures = terrain.astype(np.float64, copy=True)
    elif terrain.size:
        logger.debug("Terrain temperature layer disabled; saved field ignored.")
    logger.info("Loaded thermal state from %s.", path)
    return grid
