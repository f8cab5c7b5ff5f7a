"""Tests for rimefield.thermal.grid: the per-cell temperature field."""

import math

import numpy as np
import pytest
from numpy.random import Generator

from rimefield.simulation.config import ThermalConfig
from rimefield.thermal.grid import TemperatureGrid
from rimefield.world.cell import Cell
from rimefield.world.terrain import Terrains
from rimefield.world.things import Door, Thing
from rimefield.world.world import World


def _varied_grid(rng: Generator) -> TemperatureGrid:
    """A 10x7 world with walls, a door, open sky and random temperatures."""
    world = World(width=10, height=7, outdoor_temperature=-5.0)
    world.roofed[:, :5] = True
    for y in range(7):
        world.spawn(Thing("wall", heat_capacity=9000.0, heat_conductivity=1.5), Cell(4, y))
    world.spawn(Door("door", heat_capacity=3000.0, heat_conductivity=0.8), Cell(7, 3))
    grid = TemperatureGrid.attach(world, ThermalConfig())
    grid.temperatures = rng.uniform(-30.0, 60.0, size=(7, 10))
    return grid


class TestAccessors:
    """Tests for reading and writing cell temperatures."""

    def test_initialised_to_outdoor_temperature(self, small_grid: TemperatureGrid) -> None:
        assert np.all(small_grid.temperatures == 10.0)
        assert small_grid.world.temperature_grid is small_grid

    def test_set_and_get(self, small_grid: TemperatureGrid) -> None:
        small_grid.set_temperature(Cell(2, 5), 37.5)
        assert small_grid.get_temperature(Cell(2, 5)) == 37.5
        assert small_grid.temperatures[5, 2] == 37.5

    def test_out_of_bounds(self, small_grid: TemperatureGrid) -> None:
        with pytest.raises(IndexError):
            small_grid.get_temperature(Cell(-1, 0))

    def test_average_temperature(self, small_grid: TemperatureGrid) -> None:
        small_grid.set_temperature(Cell(0, 0), 20.0)
        assert small_grid.average_temperature([Cell(0, 0), Cell(1, 0)]) == 15.0


class TestUpdate:
    """Tests for the per-tick diffusion pass."""

    def test_uniform_field_is_stable(self, small_grid: TemperatureGrid) -> None:
        small_grid.update()
        assert np.all(small_grid.temperatures == 10.0)

    def test_hot_spot_spreads_symmetrically(self, small_grid: TemperatureGrid) -> None:
        small_grid.set_temperature(Cell(3, 3), 100.0)
        small_grid.update()
        t = small_grid.temperatures
        assert t[3, 3] < 100.0
        neighbours = [t[2, 3], t[4, 3], t[3, 2], t[3, 4]]
        assert all(n > 10.0 for n in neighbours)
        assert np.allclose(neighbours, neighbours[0])
        # Only direct neighbours see the change within one update
        assert t[1, 3] == 10.0

    def test_closed_air_grid_conserves_heat(
        self,
        small_grid: TemperatureGrid,
        rng: Generator,
    ) -> None:
        small_grid.temperatures = rng.uniform(-20.0, 40.0, size=(8, 8))
        total = small_grid.temperatures.sum()
        for _ in range(10):
            small_grid.update()
        assert small_grid.temperatures.sum() == pytest.approx(total)

    def test_order_independent(self, rng: Generator) -> None:
        grid = _varied_grid(rng)
        cells = grid.world.cells()
        shuffled = [cells[i] for i in rng.permutation(len(cells))]

        cache: dict = {}
        in_shuffled_order = {c: grid.cell_delta(c, cache) for c in shuffled}
        in_row_order = {c: grid.cell_delta(c) for c in cells}
        assert in_shuffled_order == in_row_order

        deltas = grid.compute_deltas()
        for c in cells:
            assert deltas[c.y, c.x] == pytest.approx(in_row_order[c], abs=1e-12)

    def test_update_applies_deltas_from_snapshot(self, rng: Generator) -> None:
        grid = _varied_grid(rng)
        before = grid.temperatures.copy()
        expected = before + grid.compute_deltas()
        grid.update()
        assert np.array_equal(grid.temperatures, expected)

    def test_unroofed_cells_approach_outdoors(self) -> None:
        world = World(width=3, height=3, outdoor_temperature=0.0)
        grid = TemperatureGrid.attach(world, ThermalConfig())
        grid.temperatures[:, :] = 20.0
        grid.update()
        assert np.all(grid.temperatures < 20.0)
        assert np.all(grid.temperatures > 0.0)

    def test_roofed_cells_ignore_outdoors(self, small_grid: TemperatureGrid) -> None:
        small_grid.world.outdoor_temperature = -40.0
        small_grid.update()
        assert np.all(small_grid.temperatures == 10.0)

    def test_open_door_behaves_like_air(self, small_world: World) -> None:
        door = small_world.spawn(
            Door("door", heat_capacity=5000.0, heat_conductivity=0.1),
            Cell(3, 3),
        )
        grid = TemperatureGrid.attach(small_world, ThermalConfig())
        grid.set_temperature(Cell(2, 3), 50.0)
        closed = grid.compute_deltas()[3, 3]
        door.is_open = True
        opened = grid.compute_deltas()[3, 3]
        assert opened > closed > 0.0


class TestTerrainTemperatures:
    """Tests for the terrain-surface temperature layer."""

    def test_disabled_without_terrain_capacity(self, small_grid: TemperatureGrid) -> None:
        assert not small_grid.has_terrain_temperatures
        assert math.isnan(small_grid.get_terrain_temperature(Cell(0, 0)))

    def test_water_cells_track_terrain_temperature(self, small_world: World) -> None:
        small_world.set_terrain(Cell(1, 1), Terrains.WATER_SHALLOW)
        grid = TemperatureGrid.attach(small_world, ThermalConfig())
        assert grid.has_terrain_temperatures
        assert grid.get_terrain_temperature(Cell(1, 1)) == 10.0
        assert math.isnan(grid.get_terrain_temperature(Cell(0, 0)))

    def test_terrain_and_air_exchange_heat(self, small_world: World) -> None:
        cell = Cell(1, 1)
        small_world.set_terrain(cell, Terrains.WATER_SHALLOW)
        grid = TemperatureGrid.attach(small_world, ThermalConfig())
        grid.set_terrain_temperature(cell, -10.0)
        grid.update()
        terrain = grid.get_terrain_temperature(cell)
        assert -10.0 < terrain < 10.0
        assert grid.get_temperature(cell) < 10.0

    def test_disabled_by_config(self, small_world: World) -> None:
        small_world.set_terrain(Cell(1, 1), Terrains.WATER_SHALLOW)
        cfg = ThermalConfig(terrain_temperatures_enabled=False)
        grid = TemperatureGrid.attach(small_world, cfg)
        assert not grid.has_terrain_temperatures


class TestIgnition:
    """Tests for autoignition thresholds."""

    def test_lowest_threshold_wins(self, small_grid: TemperatureGrid) -> None:
        world = small_grid.world
        world.spawn(Thing("wood", ignition_temperature=300.0), Cell(2, 2))
        world.spawn(Thing("cloth", ignition_temperature=220.0), Cell(2, 2))
        assert small_grid.ignition_temperature(Cell(2, 2)) == 220.0
        assert small_grid.ignition_temperature(Cell(3, 3)) is None

    def test_cells_to_ignite(self, small_grid: TemperatureGrid) -> None:
        small_grid.world.spawn(Thing("wood", ignition_temperature=300.0), Cell(2, 2))
        assert small_grid.cells_to_ignite() == []
        small_grid.set_temperature(Cell(2, 2), 300.0)
        assert small_grid.cells_to_ignite() == [Cell(2, 2)]

    def test_autoignition_disabled(self, small_world: World) -> None:
        grid = TemperatureGrid.attach(
            small_world,
            ThermalConfig(autoignition_enabled=False),
        )
        small_world.spawn(Thing("wood", ignition_temperature=300.0), Cell(2, 2))
        grid.set_temperature(Cell(2, 2), 500.0)
        assert grid.cells_to_ignite() == []
