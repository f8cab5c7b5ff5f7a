"""Terrain definitions and biomes.

Terrain carries the properties the thermal core consumes: whether it is
water, whether pawns can stand on it, which building affordances it
provides, where it freezes, and (optionally) its own heat capacity and
conductivity for terrain-surface temperatures.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto


class Affordance(Enum):
    """Building requirements a terrain may satisfy."""

    LIGHT = auto()
    MEDIUM = auto()
    HEAVY = auto()
    SHALLOW_WATER = auto()


class Biome(Enum):
    """Map biome; only affects which water variants ice melts into."""

    TEMPERATE_FOREST = auto()
    TUNDRA = auto()
    ICE_SHEET = auto()
    SEA_ICE = auto()


@dataclass(frozen=True)
class TerrainDef:
    """Static description of a terrain type.

    Attributes:
        name: Unique identifier, also used in saved states.
        is_water: True for every liquid water terrain.
        impassable: Nothing can stand on this terrain.
        affordances: Building affordances provided.
        accepts_filth: Whether filth can lie on this terrain.
        freezing_point: Temperature at or below which water freezes.
        heat_capacity: Terrain heat capacity, or None if the terrain
            has no surface temperature of its own.
        heat_conductivity: Terrain heat conductivity.
    """

    name: str
    is_water: bool = False
    impassable: bool = False
    affordances: frozenset[Affordance] = field(default_factory=frozenset)
    accepts_filth: bool = True
    freezing_point: float = 0.0
    heat_capacity: float | None = None
    heat_conductivity: float = 0.0

    @property
    def has_temperature(self) -> bool:
        """Return True if this terrain tracks its own surface temperature."""
        return self.heat_capacity is not None and self.heat_capacity > 0

    def __str__(self) -> str:
        return self.name


_GROUND = frozenset({Affordance.LIGHT, Affordance.MEDIUM, Affordance.HEAVY})

# Water and ice carry their own heat capacity so they lag behind the air.
_WATER_CAPACITY = 4000.0
_WATER_CONDUCTIVITY = 0.6
_ICE_CAPACITY = 2000.0
_ICE_CONDUCTIVITY = 2.2


class Terrains:
    """Catalogue of the built-in terrain types."""

    SOIL = TerrainDef("Soil", affordances=_GROUND)
    SAND = TerrainDef("Sand", affordances=frozenset({Affordance.LIGHT}))
    GRAVEL = TerrainDef("Gravel", affordances=_GROUND)
    ICE = TerrainDef(
        "Ice",
        affordances=frozenset({Affordance.LIGHT, Affordance.MEDIUM}),
        heat_capacity=_ICE_CAPACITY,
        heat_conductivity=_ICE_CONDUCTIVITY,
    )
    WATER_SHALLOW = TerrainDef(
        "WaterShallow",
        is_water=True,
        affordances=frozenset({Affordance.SHALLOW_WATER}),
        accepts_filth=False,
        heat_capacity=_WATER_CAPACITY,
        heat_conductivity=_WATER_CONDUCTIVITY,
    )
    WATER_DEEP = TerrainDef(
        "WaterDeep",
        is_water=True,
        impassable=True,
        accepts_filth=False,
        heat_capacity=_WATER_CAPACITY,
        heat_conductivity=_WATER_CONDUCTIVITY,
    )
    WATER_OCEAN_SHALLOW = TerrainDef(
        "WaterOceanShallow",
        is_water=True,
        affordances=frozenset({Affordance.SHALLOW_WATER}),
        accepts_filth=False,
        freezing_point=-2.0,
        heat_capacity=_WATER_CAPACITY,
        heat_conductivity=_WATER_CONDUCTIVITY,
    )
    WATER_OCEAN_DEEP = TerrainDef(
        "WaterOceanDeep",
        is_water=True,
        impassable=True,
        accepts_filth=False,
        freezing_point=-2.0,
        heat_capacity=_WATER_CAPACITY,
        heat_conductivity=_WATER_CONDUCTIVITY,
    )
    WATER_MOVING_SHALLOW = TerrainDef(
        "WaterMovingShallow",
        is_water=True,
        affordances=frozenset({Affordance.SHALLOW_WATER}),
        accepts_filth=False,
        freezing_point=-2.0,
        heat_capacity=_WATER_CAPACITY,
        heat_conductivity=_WATER_CONDUCTIVITY,
    )
    WATER_MOVING_CHEST_DEEP = TerrainDef(
        "WaterMovingChestDeep",
        is_water=True,
        impassable=True,
        accepts_filth=False,
        freezing_point=-3.0,
        heat_capacity=_WATER_CAPACITY,
        heat_conductivity=_WATER_CONDUCTIVITY,
    )

    @classmethod
    def all(cls) -> list[TerrainDef]:
        """Return every catalogued terrain."""
        return [v for v in vars(cls).values() if isinstance(v, TerrainDef)]

    @classmethod
    def named(cls, name: str) -> TerrainDef:
        """Look up a terrain by its ``name``.

        Raises:
            KeyError: If no catalogued terrain has that name.
        """
        for terrain in cls.all():
            if terrain.name == name:
                return terrain
        raise KeyError(name)


# Ice melts as soon as it is warmer than this.
ICE_MELTING_POINT = 0.0
