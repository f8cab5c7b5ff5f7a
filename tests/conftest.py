"""Shared fixtures for the Rimefield test suite."""

from __future__ import annotations

import numpy as np
import pytest
from numpy.random import Generator

from rimefield.simulation.config import ThermalConfig
from rimefield.thermal.diffusion import DiffusionEngine
from rimefield.thermal.grid import TemperatureGrid
from rimefield.world.world import World


@pytest.fixture
def rng() -> Generator:
    """A deterministic random generator for reproducible tests."""
    return np.random.default_rng(seed=12345)


@pytest.fixture
def default_config() -> ThermalConfig:
    """Default thermal config (no YAML file needed)."""
    return ThermalConfig()


@pytest.fixture
def engine(default_config: ThermalConfig) -> DiffusionEngine:
    """A diffusion engine using default settings."""
    return DiffusionEngine(default_config)


@pytest.fixture
def small_world() -> World:
    """A small 8x8 fully roofed world of bare soil."""
    world = World(width=8, height=8, outdoor_temperature=10.0)
    world.roofed[:, :] = True
    return world


@pytest.fixture
def small_grid(small_world: World, default_config: ThermalConfig) -> TemperatureGrid:
    """A temperature grid attached to ``small_world``."""
    return TemperatureGrid.attach(small_world, default_config)
