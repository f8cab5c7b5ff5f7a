"""Host-facing temperature API.

These functions are what a host binds its own temperature queries, heat
sources and world events to.  Each one tolerates a world without an
attached ``TemperatureGrid``: reads fall back to the world's outdoor
temperature and writes are skipped, with a log message instead of an
exception.
"""

from __future__ import annotations

import logging
from enum import IntEnum
from typing import TYPE_CHECKING

from rimefield.thermal.diffusion import TEMPERATURE_CHANGE_PRECISION

if TYPE_CHECKING:
    from rimefield.world.cell import Cell
    from rimefield.world.world import Room, World

logger = logging.getLogger(__name__)

# How far outside a pawn's comfortable range a cell is still only risky.
DANGER_MARGIN = 80.0


class Danger(IntEnum):
    """How dangerous a cell's temperature is for a pawn."""

    NONE = 0
    SOME = 1
    DEADLY = 2


def get_temperature_for_cell(cell: Cell, world: World) -> float:
    """Return the air temperature at ``cell``.

    Falls back to the world's outdoor temperature without a grid.
    """
    grid = world.temperature_grid
    if grid is None:
        logger.warning("No temperature grid for %s; using outdoor temperature.", world)
        return world.outdoor_temperature
    return grid.get_temperature(cell)


def set_temperature_for_cell(cell: Cell, world: World, value: float) -> None:
    """Overwrite the air temperature at ``cell`` (skipped without a grid)."""
    grid = world.temperature_grid
    if grid is None:
        logger.warning("No temperature grid for %s; ignoring temperature write.", world)
        return
    grid.set_temperature(cell, value)


def push_heat(cell: Cell, world: World, energy: float) -> bool:
    """Inject ``energy`` into ``cell`` as an instantaneous temperature change.

    The change is ``energy * ticks_per_second * heat_push_effect /
    heat_capacity`` where the capacity is that of the cell itself.
    Negative energy cools.

    Returns:
        False (and nothing changes) if the world has no temperature grid.
    """
    grid = world.temperature_grid
    if grid is None:
        logger.warning("No temperature grid for %s; cannot push heat.", world)
        return False
    config = grid.config
    capacity = grid.resolver.heat_capacity(cell)
    change = energy * config.ticks_per_second * config.heat_push_effect / capacity
    if config.debug:
        logger.debug("Pushing %s heat at %s (%+.2f).", energy, cell, change)
    grid.set_temperature(cell, grid.get_temperature(cell) + change)
    return True


def update(world: World) -> bool:
    """Run one temperature update on ``world``.

    Returns:
        False if the world has no temperature grid.
    """
    grid = world.temperature_grid
    if grid is None:
        logger.warning("No temperature grid for %s; skipping update.", world)
        return False
    grid.update()
    return True


def get_room_temperature(room: Room, world: World) -> float:
    """Return the mean temperature of ``room``.

    Rooms touching the map edge are outdoors and use the outdoor
    temperature.
    """
    grid = world.temperature_grid
    if grid is None:
        logger.error("Temperature grid unavailable for %s.", world)
        return world.outdoor_temperature
    if room.touches_map_edge:
        return world.outdoor_temperature
    return grid.average_temperature(room.cells)


def get_surrounding_temperature(cell: Cell, world: World) -> float:
    """Return the mean temperature of ``cell`` and its orthogonal neighbours."""
    grid = world.temperature_grid
    if grid is None:
        return world.outdoor_temperature
    return grid.average_temperature([cell, *world.neighbours(cell)])


def control_temperature(
    cell: Cell,
    world: World,
    energy_limit: float,
    target_temperature: float,
) -> float:
    """Drive the temperature around ``cell`` toward a target.

    Heaters pass a positive ``energy_limit`` and only push while the
    room is colder than the target; coolers pass a negative one and only
    push while it is warmer.

    Returns:
        The energy pushed (``energy_limit`` or 0).
    """
    room = world.room_at(cell)
    if room is not None and not room.touches_map_edge:
        current = get_room_temperature(room, world)
    else:
        current = get_surrounding_temperature(cell, world)

    if energy_limit > 0:
        needed = current < target_temperature - TEMPERATURE_CHANGE_PRECISION
    else:
        needed = current > target_temperature + TEMPERATURE_CHANGE_PRECISION
    if not needed:
        return 0.0
    push_heat(cell, world, energy_limit)
    return energy_limit


def fire_extinguished(cell: Cell, world: World) -> bool:
    """Cool ``cell`` down to its ignition temperature once a fire goes out.

    Returns:
        True if the temperature was lowered.
    """
    grid = world.temperature_grid
    if grid is None or not grid.config.autoignition_enabled:
        return False
    threshold = grid.ignition_temperature(cell)
    if threshold is None:
        return False
    current = grid.get_temperature(cell)
    if current <= threshold:
        return False
    logger.debug("Setting temperature at %s to %.0f.", cell, threshold)
    grid.set_temperature(cell, threshold)
    return True


def danger_for(
    cell: Cell,
    world: World,
    safe_range: tuple[float, float],
) -> Danger:
    """Classify the temperature at ``cell`` against a pawn's safe range."""
    low, high = safe_range
    temperature = get_temperature_for_cell(cell, world)
    if low <= temperature <= high:
        return Danger.NONE
    if low - DANGER_MARGIN <= temperature <= high + DANGER_MARGIN:
        return Danger.SOME
    return Danger.DEADLY
