"""Tests for rimefield.thermal.phase: freezing and melting terrain."""

import pytest

from rimefield.simulation.config import ThermalConfig
from rimefield.thermal.grid import TemperatureGrid
from rimefield.thermal.phase import PhaseChangeController
from rimefield.world.cell import Cell
from rimefield.world.terrain import Affordance, Biome, TerrainDef, Terrains
from rimefield.world.things import Filth, Grave, Pawn, Thing
from rimefield.world.world import World

CENTER = Cell(1, 1)


def _controller(
    center: TerrainDef,
    surrounding: TerrainDef = Terrains.SOIL,
    *,
    biome: Biome = Biome.TEMPERATE_FOREST,
    config: ThermalConfig | None = None,
) -> PhaseChangeController:
    """A 3x3 world with ``center`` terrain ringed by ``surrounding``."""
    world = World(width=3, height=3, biome=biome, outdoor_temperature=5.0)
    for cell in world.cells():
        world.set_terrain(cell, surrounding)
    world.set_terrain(CENTER, center)
    grid = TemperatureGrid.attach(world, config or ThermalConfig())
    return PhaseChangeController(world, grid)


class TestFreezing:
    """Tests for the freezing threshold and its effects."""

    @pytest.mark.parametrize(
        ("terrain", "frozen_at", "liquid_at"),
        [
            (Terrains.WATER_OCEAN_DEEP, -2.0, -1.99),
            (Terrains.WATER_MOVING_CHEST_DEEP, -3.0, -2.99),
            (Terrains.WATER_MOVING_SHALLOW, -2.0, -1.99),
            (Terrains.WATER_SHALLOW, 0.0, 0.01),
        ],
    )
    def test_terrain_specific_freezing_point(
        self,
        terrain: TerrainDef,
        frozen_at: float,
        liquid_at: float,
    ) -> None:
        controller = _controller(terrain)
        controller.grid.set_terrain_temperature(CENTER, liquid_at)
        assert not controller.should_freeze(CENTER)
        controller.grid.set_terrain_temperature(CENTER, frozen_at)
        assert controller.should_freeze(CENTER)

    def test_ground_never_freezes(self) -> None:
        controller = _controller(Terrains.SOIL)
        controller.grid.set_temperature(CENTER, -50.0)
        assert not controller.should_freeze(CENTER)

    def test_freeze_records_under_terrain(self) -> None:
        controller = _controller(Terrains.WATER_OCEAN_DEEP)
        controller.freeze(CENTER)
        assert controller.world.terrain_at(CENTER) == Terrains.ICE
        assert controller.world.under_terrain_at(CENTER) == Terrains.WATER_OCEAN_DEEP

    def test_uses_air_temperature_without_terrain_layer(self) -> None:
        controller = _controller(
            Terrains.WATER_SHALLOW,
            config=ThermalConfig(terrain_temperatures_enabled=False),
        )
        controller.grid.set_temperature(CENTER, -0.5)
        assert controller.should_freeze(CENTER)


class TestMelting:
    """Tests for melting ice and the terrain it leaves behind."""

    def test_melt_threshold(self) -> None:
        controller = _controller(Terrains.ICE)
        controller.grid.set_terrain_temperature(CENTER, 0.0)
        assert not controller.should_melt(CENTER)
        controller.grid.set_terrain_temperature(CENTER, 0.1)
        assert controller.should_melt(CENTER)

    def test_restores_recorded_terrain(self) -> None:
        controller = _controller(Terrains.WATER_MOVING_CHEST_DEEP)
        controller.freeze(CENTER)
        result = controller.melt(CENTER)
        assert result == Terrains.WATER_MOVING_CHEST_DEEP
        assert controller.world.terrain_at(CENTER) == Terrains.WATER_MOVING_CHEST_DEEP
        assert controller.world.under_terrain_at(CENTER) is None

    def test_unrecorded_ice_next_to_ground_becomes_shallow(self) -> None:
        controller = _controller(Terrains.ICE, Terrains.SOIL)
        assert controller.melt(CENTER) == Terrains.WATER_SHALLOW
        assert controller.world.terrain_at(CENTER) == Terrains.WATER_SHALLOW

    def test_sea_ice_biome_uses_ocean_variant(self) -> None:
        controller = _controller(Terrains.ICE, Terrains.SOIL, biome=Biome.SEA_ICE)
        assert controller.melt(CENTER) == Terrains.WATER_OCEAN_SHALLOW

    def test_unrecorded_ice_surrounded_by_ice_becomes_deep(self) -> None:
        controller = _controller(Terrains.ICE, Terrains.ICE)
        assert controller.best_under_ice_terrain(CENTER) == Terrains.WATER_DEEP
        sea = _controller(Terrains.ICE, Terrains.ICE, biome=Biome.SEA_ICE)
        assert sea.best_under_ice_terrain(CENTER) == Terrains.WATER_OCEAN_DEEP

    def test_neighbouring_water_is_copied(self) -> None:
        controller = _controller(Terrains.ICE, Terrains.ICE)
        controller.world.set_terrain(Cell(1, 2), Terrains.WATER_MOVING_SHALLOW)
        assert controller.best_under_ice_terrain(CENTER) == Terrains.WATER_MOVING_SHALLOW

    def test_water_under_neighbouring_ice_is_copied(self) -> None:
        controller = _controller(Terrains.ICE, Terrains.ICE)
        controller.world.set_under_terrain(Cell(0, 1), Terrains.WATER_OCEAN_SHALLOW)
        assert controller.best_under_ice_terrain(CENTER) == Terrains.WATER_OCEAN_SHALLOW

    def test_clears_snow(self) -> None:
        controller = _controller(Terrains.ICE)
        controller.world.snow_depth[CENTER.y, CENTER.x] = 0.7
        controller.melt(CENTER)
        assert controller.world.snow_depth[CENTER.y, CENTER.x] == 0.0


class TestMeltingConsequences:
    """Tests for things caught on melting ice."""

    def _frozen_over(self, water: TerrainDef) -> PhaseChangeController:
        controller = _controller(water)
        controller.freeze(CENTER)
        return controller

    def test_player_pawn_drowns_with_letter(self) -> None:
        controller = self._frozen_over(Terrains.WATER_DEEP)
        world = controller.world
        pawn = world.spawn(Pawn("Ada", player_owned=True), CENTER)
        controller.melt(CENTER)
        assert not pawn.alive
        assert pawn.destroyed
        assert world.things_at(CENTER) == []
        assert len(world.letters) == 1
        assert "Ada" in world.letters[0].text

    def test_wild_pawn_drowns_silently(self) -> None:
        controller = self._frozen_over(Terrains.WATER_DEEP)
        pawn = controller.world.spawn(Pawn("hare"), CENTER)
        controller.melt(CENTER)
        assert not pawn.alive
        assert controller.world.letters == []

    def test_objects_sink_in_deep_water(self) -> None:
        controller = self._frozen_over(Terrains.WATER_OCEAN_DEEP)
        crate = controller.world.spawn(Thing("crate"), CENTER)
        controller.melt(CENTER)
        assert crate.destroyed

    def test_grave_is_uncovered(self) -> None:
        controller = self._frozen_over(Terrains.WATER_SHALLOW)
        world = controller.world
        body = Thing("body")
        grave = world.spawn(Grave("grave", contents=[body]), CENTER)
        controller.melt(CENTER)
        assert grave.destroyed
        assert world.position_of(body) == CENTER

    def test_missing_affordance_destroys(self) -> None:
        controller = self._frozen_over(Terrains.WATER_SHALLOW)
        world = controller.world
        wall = world.spawn(Thing("wall", terrain_affordance=Affordance.HEAVY), CENTER)
        post = world.spawn(
            Thing("post", terrain_affordance=Affordance.SHALLOW_WATER),
            CENTER,
        )
        controller.melt(CENTER)
        assert wall.destroyed
        assert not post.destroyed

    def test_filth_is_removed(self) -> None:
        controller = self._frozen_over(Terrains.WATER_SHALLOW)
        filth = controller.world.spawn(Filth("blood"), CENTER)
        controller.melt(CENTER)
        assert filth.destroyed

    def test_pawn_survives_shallow_water(self) -> None:
        controller = self._frozen_over(Terrains.WATER_SHALLOW)
        pawn = controller.world.spawn(Pawn("Ada", player_owned=True), CENTER)
        controller.melt(CENTER)
        assert pawn.alive
        assert controller.world.things_at(CENTER) == [pawn]


class TestScan:
    """Tests for the map-wide phase-change scan."""

    def test_scan_freezes_then_melts(self) -> None:
        cfg = ThermalConfig(terrain_temperatures_enabled=False)
        controller = _controller(Terrains.WATER_SHALLOW, config=cfg)
        controller.grid.temperatures[:, :] = -1.0

        report = controller.scan()
        assert report.frozen == [CENTER]
        assert report.melted == []
        assert controller.world.terrain_at(CENTER) == Terrains.ICE

        controller.grid.temperatures[:, :] = 3.0
        report = controller.scan()
        assert report.melted == [CENTER]
        assert controller.world.terrain_at(CENTER) == Terrains.WATER_SHALLOW
        assert controller.world.under_terrain == {}
