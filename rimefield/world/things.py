"""Things: objects that occupy cells.

Only the parts of a thing the thermal core looks at are modelled:
heat stats, ignition threshold, terrain requirements, and the few
kinds (pawns, graves, filth, doors) that react to melting ice.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from rimefield.world.terrain import Affordance


@dataclass(eq=False)
class Thing:
    """A generic object placed on the map.

    Attributes:
        label: Human-readable name.
        heat_capacity: HeatCapacity stat; a positive value makes the
            thing a thermal object that overrides the cell's air.
        heat_conductivity: HeatConductivity stat.
        ignition_temperature: Temperature at which the thing catches
            fire, or None if it is not flammable.
        terrain_affordance: Affordance the terrain must provide for the
            thing to stand on it.
        destroyed: Set once the thing has been removed from the map.
    """

    label: str
    heat_capacity: float = 0.0
    heat_conductivity: float = 0.0
    ignition_temperature: float | None = None
    terrain_affordance: Affordance | None = None
    destroyed: bool = False

    @property
    def is_thermal(self) -> bool:
        """Return True if this thing replaces air properties in its cell."""
        return self.heat_capacity > 0

    def __str__(self) -> str:
        return self.label


@dataclass(eq=False)
class Door(Thing):
    """A door is a thermal object only while it is closed."""

    is_open: bool = False

    @property
    def is_thermal(self) -> bool:
        return not self.is_open and self.heat_capacity > 0


@dataclass(eq=False)
class Pawn(Thing):
    """A mobile living entity.

    Attributes:
        player_owned: Whether the pawn belongs to the player's faction
            (its death is announced with a letter).
        alive: False once killed.
    """

    player_owned: bool = False
    alive: bool = True


@dataclass(eq=False)
class Corpse(Thing):
    """Remains left behind when a pawn dies."""

    pawn: Pawn | None = None


@dataclass(eq=False)
class Grave(Thing):
    """A container holding buried things."""

    contents: list[Thing] = field(default_factory=list)

    @property
    def has_contents(self) -> bool:
        return bool(self.contents)


@dataclass(eq=False)
class Filth(Thing):
    """Surface covering (dirt, blood, ...) lying on terrain."""
