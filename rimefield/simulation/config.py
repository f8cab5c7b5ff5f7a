"""Config: load thermal simulation parameters from YAML files.

All tunable constants (map size, air properties, conductivity and
heat-push multipliers, feature switches) live in YAML and are parsed
into a typed dataclass here.  Numeric knobs are read by the diffusion
engine at construction time and cached as derived constants.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path

import yaml

AIR_HEAT_CAPACITY_DEFAULT = 1200.0
AIR_HEAT_CONDUCTIVITY_DEFAULT = 0.03
CONVECTION_CONDUCTIVITY_EFFECT_DEFAULT = 10.0
HEAT_PUSH_EFFECT_DEFAULT = 5.0


@dataclass
class ThermalConfig:
    """Top-level thermal simulation configuration.

    Attributes:
        seed: RNG seed for the demo map layout.
        world_width: Number of grid columns.
        world_height: Number of grid rows.
        outdoor_temperature: Starting ambient temperature.
        ticks_per_second: Host ticks per simulated second.
        ticks_per_update: Host ticks between two temperature updates.
        air_heat_capacity: Heat capacity of a cell holding only air.
        air_heat_conductivity: Heat conductivity of air.
        heat_conductivity_factor: Global multiplier on all conductivity.
        convection_conductivity_effect: Extra multiplier for air-to-air
            exchange.
        heat_push_effect: Multiplier converting pushed energy into heat.
        freezing_and_melting_enabled: Run the terrain phase-change scan.
        autoignition_enabled: Report cells hot enough to catch fire.
        terrain_temperatures_enabled: Track terrain-surface temperatures.
        debug: Log per-cell diffusion details.
    """

    seed: int = 42
    world_width: int = 64
    world_height: int = 64
    outdoor_temperature: float = 15.0

    # Timing
    ticks_per_second: int = 60
    ticks_per_update: int = 120

    # Air and diffusion
    air_heat_capacity: float = AIR_HEAT_CAPACITY_DEFAULT
    air_heat_conductivity: float = AIR_HEAT_CONDUCTIVITY_DEFAULT
    heat_conductivity_factor: float = 1.0
    convection_conductivity_effect: float = CONVECTION_CONDUCTIVITY_EFFECT_DEFAULT
    heat_push_effect: float = HEAT_PUSH_EFFECT_DEFAULT

    # Feature switches
    freezing_and_melting_enabled: bool = True
    autoignition_enabled: bool = True
    terrain_temperatures_enabled: bool = True
    debug: bool = False

    @property
    def seconds_per_update(self) -> float:
        """Simulated seconds covered by one temperature update (Δt)."""
        return self.ticks_per_update / self.ticks_per_second

    def reset(self) -> None:
        """Restore every field to its default value."""
        defaults = type(self)()
        for f in fields(self):
            setattr(self, f.name, getattr(defaults, f.name))

    @classmethod
    def from_yaml(cls, path: str | Path) -> ThermalConfig:
        """Load configuration from a YAML file.

        Keys missing from the file keep their defaults; unknown keys are
        ignored.

        Args:
            path: Path to the YAML config file.

        Returns:
            A populated ThermalConfig instance.

        Raises:
            FileNotFoundError: If the config file does not exist.
        """
        path = Path(path)
        with path.open("r") as f:
            data = yaml.safe_load(f) or {}

        known = {f.name for f in fields(cls)}
        return cls(**{key: value for key, value in data.items() if key in known})
