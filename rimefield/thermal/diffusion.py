"""Heat diffusion between two thermal entities.

Every exchange moves temperatures toward an equilibrium value by a
relaxation factor ``r = 1 - (1 - k / C) ** dt`` capped at 0.25, where
``k`` is the effective conductivity, ``C`` the heat capacity and ``dt``
the simulated seconds per update.  The cap keeps the explicit scheme
from overshooting however large ``k * dt / C`` gets.

Air-to-air exchange is by far the most common case, so its factor is
computed once per configuration and reused.

Scalar functions serve single cells; the ``*_array`` variants apply the
same formulas element-wise to NumPy arrays for whole-grid passes.
"""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING

import numpy as np
from numpy.typing import NDArray

if TYPE_CHECKING:
    from rimefield.simulation.config import ThermalConfig

logger = logging.getLogger(__name__)

# Smallest temperature difference that is worth exchanging heat over.
TEMPERATURE_CHANGE_PRECISION = 0.01

MAX_RELAXATION = 0.25


class DiffusionEngine:
    """Compute per-update temperature changes from heat exchange.

    Attributes:
        config: Configuration the cached constants were derived from.
        seconds_per_update: Simulated seconds per update (dt).
        air_conductivity: Effective air-to-air conductivity, including
            the global factor and convection.
        air_relaxation: Cached relaxation factor for air-to-air exchange.
    """

    def __init__(self, config: ThermalConfig) -> None:
        self.configure(config)

    def configure(self, config: ThermalConfig) -> None:
        """Adopt ``config`` and recompute the cached air constants.

        Call again whenever any of the numeric knobs change.
        """
        self.config = config
        self.seconds_per_update = config.seconds_per_update
        self._air_capacity = config.air_heat_capacity
        self._air_conductivity_base = config.air_heat_conductivity
        self._factor = config.heat_conductivity_factor
        self.air_conductivity = (
            config.air_heat_conductivity
            * config.heat_conductivity_factor
            * config.convection_conductivity_effect
        )
        self.air_relaxation = self.relaxation_factor(
            self.air_conductivity,
            config.air_heat_capacity,
        )
        logger.debug(
            "Air conductivity: %.2f. Air relaxation factor: %.3f%%.",
            self.air_conductivity,
            self.air_relaxation * 100,
        )

    # -- relaxation ------------------------------------------------------

    def relaxation_factor(self, conductivity: float, capacity: float) -> float:
        """Return the fraction of a temperature gap closed in one update.

        Always within ``[0, MAX_RELAXATION]``.

        Args:
            conductivity: Effective conductivity of the exchange.
            capacity: Heat capacity of the side being moved (> 0).
        """
        base = min(max(1.0 - conductivity / capacity, 0.0), 1.0)
        return min(1.0 - base**self.seconds_per_update, MAX_RELAXATION)

    def relaxation_factor_array(
        self,
        conductivity: NDArray[np.float64],
        capacity: NDArray[np.float64],
    ) -> NDArray[np.float64]:
        """Element-wise :meth:`relaxation_factor`."""
        base = np.clip(1.0 - conductivity / capacity, 0.0, 1.0)
        return np.minimum(1.0 - base**self.seconds_per_update, MAX_RELAXATION)

    def is_air(self, capacity: float, conductivity: float) -> bool:
        """Return True if the properties are exactly the air defaults."""
        return (
            capacity == self._air_capacity
            and conductivity == self._air_conductivity_base
        )

    def _single_relaxation(self, capacity: float, conductivity: float) -> float:
        if self.is_air(capacity, conductivity):
            return self.air_relaxation
        return self.relaxation_factor(conductivity * self._factor, capacity)

    # -- scalar exchange -------------------------------------------------

    def diffuse_single(
        self,
        old_temp: float,
        neighbour_temp: float,
        capacity: float,
        conductivity: float,
    ) -> float:
        """Return the change of ``old_temp`` against a fixed neighbour.

        The neighbour acts as an infinite reservoir (e.g. the outdoors)
        and does not change.

        Args:
            old_temp: Current temperature of the side being moved.
            neighbour_temp: Temperature of the fixed driver.
            capacity: Heat capacity of the side being moved.
            conductivity: Heat conductivity of the side being moved.
        """
        if abs(old_temp - neighbour_temp) < TEMPERATURE_CHANGE_PRECISION:
            return 0.0
        final_temp = (old_temp + neighbour_temp) / 2
        relaxation = self._single_relaxation(capacity, conductivity)
        if self.config.debug:
            logger.debug(
                "Old temperature: %.1f. Neighbour temperature: %.1f. "
                "Capacity: %s. Conductivity: %s. Relaxation: %.3f.",
                old_temp,
                neighbour_temp,
                capacity,
                conductivity,
                relaxation,
            )
        return relaxation * (final_temp - old_temp)

    def diffuse_mutual(
        self,
        temp1: float,
        capacity1: float,
        conductivity1: float,
        temp2: float,
        capacity2: float,
        conductivity2: float,
    ) -> tuple[float, float]:
        """Return the changes of two entities exchanging heat with each other.

        Both move toward the capacity-weighted mean.  Each side's
        relaxation factor is derived from its own capacity, and the
        smaller of the two is applied to both so that
        ``capacity1 * delta1 + capacity2 * delta2 == 0``.
        Air next to a high-capacity object therefore relaxes at the
        object's rate, which is much slower than its own.

        Returns:
            ``(delta1, delta2)``.
        """
        if abs(temp1 - temp2) < TEMPERATURE_CHANGE_PRECISION:
            return 0.0, 0.0
        final_temp = (temp1 * capacity1 + temp2 * capacity2) / (capacity1 + capacity2)
        if self.is_air(capacity1, conductivity1) and self.is_air(
            capacity2,
            conductivity2,
        ):
            relaxation = self.air_relaxation
        else:
            conductivity = math.sqrt(conductivity1 * conductivity2) * self._factor
            relaxation = min(
                self.relaxation_factor(conductivity, capacity1),
                self.relaxation_factor(conductivity, capacity2),
            )
        if self.config.debug:
            logger.debug(
                "Exchange %.1f (C=%s, k=%s) <-> %.1f (C=%s, k=%s): "
                "final %.1f, relaxation %.3f.",
                temp1,
                capacity1,
                conductivity1,
                temp2,
                capacity2,
                conductivity2,
                final_temp,
                relaxation,
            )
        return (
            relaxation * (final_temp - temp1),
            relaxation * (final_temp - temp2),
        )

    # -- array exchange --------------------------------------------------

    def diffuse_single_array(
        self,
        old_temp: NDArray[np.float64],
        neighbour_temp: float,
        capacity: NDArray[np.float64],
        conductivity: NDArray[np.float64],
    ) -> NDArray[np.float64]:
        """Element-wise :meth:`diffuse_single` against one fixed driver."""
        relaxation = np.full(old_temp.shape, self.air_relaxation, dtype=np.float64)
        other = ~self._air_mask(capacity, conductivity)
        if other.any():
            relaxation[other] = self.relaxation_factor_array(
                conductivity[other] * self._factor,
                capacity[other],
            )
        relaxation[np.abs(old_temp - neighbour_temp) < TEMPERATURE_CHANGE_PRECISION] = 0.0
        return relaxation * ((old_temp + neighbour_temp) / 2 - old_temp)

    def diffuse_mutual_array(
        self,
        temp1: NDArray[np.float64],
        capacity1: NDArray[np.float64],
        conductivity1: NDArray[np.float64],
        temp2: NDArray[np.float64],
        capacity2: NDArray[np.float64],
        conductivity2: NDArray[np.float64],
    ) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
        """Element-wise :meth:`diffuse_mutual`."""
        final_temp = (temp1 * capacity1 + temp2 * capacity2) / (capacity1 + capacity2)
        relaxation = np.full(temp1.shape, self.air_relaxation, dtype=np.float64)
        other = ~(
            self._air_mask(capacity1, conductivity1)
            & self._air_mask(capacity2, conductivity2)
        )
        if other.any():
            conductivity = np.sqrt(conductivity1[other] * conductivity2[other]) * self._factor
            relaxation[other] = np.minimum(
                self.relaxation_factor_array(conductivity, capacity1[other]),
                self.relaxation_factor_array(conductivity, capacity2[other]),
            )
        relaxation[np.abs(temp1 - temp2) < TEMPERATURE_CHANGE_PRECISION] = 0.0
        return relaxation * (final_temp - temp1), relaxation * (final_temp - temp2)

    def _air_mask(
        self,
        capacity: NDArray[np.float64],
        conductivity: NDArray[np.float64],
    ) -> NDArray[np.bool_]:
        return (capacity == self._air_capacity) & (
            conductivity == self._air_conductivity_base
        )
