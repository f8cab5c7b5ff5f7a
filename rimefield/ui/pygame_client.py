"""Pygame temperature-map viewer for the thermal simulation.

Renders every cell coloured by its air temperature, outlines ice and
walls, and shows the temperature under the mouse.  The simulation steps
at a configurable tick rate while the display refreshes at the Pygame
frame rate.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, ClassVar

import numpy as np
import pygame
from numpy.typing import NDArray

if TYPE_CHECKING:
    from rimefield.simulation.engine import ThermalSimulation

from rimefield.world.cell import Cell
from rimefield.world.terrain import Terrains

# Colour palette
_BG = (20, 20, 24)
_ICE = (230, 245, 255)
_WALL = (60, 60, 60)

# Temperature colour ramp (cold blue -> neutral -> hot red)
_COLD = np.array([40, 80, 220], dtype=np.float64)
_MILD = np.array([90, 170, 90], dtype=np.float64)
_HOT = np.array([230, 60, 30], dtype=np.float64)
_RAMP_LOW = -30.0
_RAMP_HIGH = 50.0


def temperature_colours(temperatures: NDArray[np.float64]) -> NDArray[np.uint8]:
    """Map a temperature field to RGB colours.

    Args:
        temperatures: 2D array indexed ``[y, x]``.

    Returns:
        Array shaped ``(height, width, 3)``.
    """
    t = np.clip((temperatures - _RAMP_LOW) / (_RAMP_HIGH - _RAMP_LOW), 0.0, 1.0)
    t = t[..., np.newaxis]
    lower = _COLD + (t * 2) * (_MILD - _COLD)
    upper = _MILD + (t * 2 - 1) * (_HOT - _MILD)
    return np.where(t < 0.5, lower, upper).astype(np.uint8)


class PygameRenderer:
    """Renders a ThermalSimulation state into a Pygame window.

    Attributes:
        simulation: The simulation to visualise.
        cell_size: Pixel size of each grid cell.
        screen: The Pygame display surface.
    """

    # Speed presets: ticks per second at 30 fps
    _SPEED_STEPS: ClassVar[list[float]] = [
        60.0,
        120.0,
        300.0,
        600.0,
        1200.0,
        3000.0,
        6000.0,
    ]

    def __init__(
        self,
        simulation: ThermalSimulation,
        cell_size: int = 10,
        ticks_per_second: float = 600.0,
    ) -> None:
        """Initialise the renderer.

        Args:
            simulation: The simulation to render.
            cell_size: Pixel width/height per grid cell.
            ticks_per_second: Simulation ticks per real-time second.
        """
        self.simulation = simulation
        self.cell_size = cell_size
        self.ticks_per_second = ticks_per_second
        self._speed_index = self._nearest_speed(ticks_per_second)
        self._tick_accumulator = 0.0

        world = simulation.world
        assert world is not None
        self._panel_width = 220
        self._win_w = world.width * cell_size + self._panel_width
        self._win_h = world.height * cell_size

        pygame.init()
        self.screen = pygame.display.set_mode((self._win_w, self._win_h))
        pygame.display.set_caption("Rimefield")
        self.clock = pygame.time.Clock()
        self.font = pygame.font.SysFont("monospace", 14)
        self.running = True
        self.paused = False

    def _nearest_speed(self, tps: float) -> int:
        """Return the index of the closest speed preset."""
        diffs = [abs(s - tps) for s in self._SPEED_STEPS]
        return diffs.index(min(diffs))

    def run(self, fps: int = 30) -> None:
        """Main loop: handle events, step sim, render.

        Args:
            fps: Target frames per second.
        """
        while self.running:
            dt = self.clock.tick(fps) / 1000.0
            self._handle_events()
            if not self.paused:
                self._tick_accumulator += self.ticks_per_second * dt
                steps = int(self._tick_accumulator)
                self._tick_accumulator -= steps
                self.simulation.run(steps)
            self._draw()

        pygame.quit()

    def _handle_events(self) -> None:
        """Process Pygame input events."""
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.running = False
            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    self.running = False
                elif event.key == pygame.K_SPACE:
                    self.paused = not self.paused
                elif event.key in (pygame.K_PLUS, pygame.K_EQUALS):
                    self._speed_index = min(
                        len(self._SPEED_STEPS) - 1,
                        self._speed_index + 1,
                    )
                    self.ticks_per_second = self._SPEED_STEPS[self._speed_index]
                elif event.key == pygame.K_MINUS:
                    self._speed_index = max(0, self._speed_index - 1)
                    self.ticks_per_second = self._SPEED_STEPS[self._speed_index]

    def _draw(self) -> None:
        """Render one frame."""
        self.screen.fill(_BG)
        self._draw_temperatures()
        self._draw_terrain_outlines()
        self._draw_info_panel()
        pygame.display.flip()

    def _draw_temperatures(self) -> None:
        """Fill each cell with its temperature colour."""
        cs = self.cell_size
        colours = temperature_colours(self.simulation.grid.temperatures)
        for y in range(colours.shape[0]):
            for x in range(colours.shape[1]):
                pygame.draw.rect(
                    self.screen,
                    colours[y, x].tolist(),
                    (x * cs, y * cs, cs, cs),
                )

    def _draw_terrain_outlines(self) -> None:
        """Outline ice cells and cells holding thermal things."""
        cs = self.cell_size
        world = self.simulation.world
        assert world is not None
        resolver = self.simulation.grid.resolver
        for y, row in enumerate(world.terrain):
            for x, terrain in enumerate(row):
                rect = (x * cs, y * cs, cs, cs)
                if resolver.thermal_thing(Cell(x, y)) is not None:
                    pygame.draw.rect(self.screen, _WALL, rect, 2)
                elif terrain == Terrains.ICE:
                    pygame.draw.rect(self.screen, _ICE, rect, 1)

    def _draw_info_panel(self) -> None:
        """Draw a stats panel on the right side of the window."""
        sim = self.simulation
        world = sim.world
        assert world is not None
        panel_x = world.width * self.cell_size + 10
        y = 10

        temps = sim.grid.temperatures
        lines = [
            f"Tick: {sim.tick}",
            f"Updates: {sim.updates}",
            f"Speed: {self.ticks_per_second:.0f} t/s",
            f"{'PAUSED' if self.paused else 'RUNNING'}",
            "",
            "--- Temperature ---",
            f"Outdoor: {world.outdoor_temperature:.1f}",
            f"Min: {temps.min():.1f}",
            f"Mean: {temps.mean():.1f}",
            f"Max: {temps.max():.1f}",
            f"Frozen cells: {len(world.under_terrain)}",
        ]

        mx, my = pygame.mouse.get_pos()
        cell = Cell(mx // self.cell_size, my // self.cell_size)
        if world.in_bounds(cell):
            lines += [
                "",
                f"Cell {cell.x},{cell.y}: {sim.grid.get_temperature(cell):.1f}",
                f"  {world.terrain_at(cell)}",
            ]
            terrain_temp = sim.grid.get_terrain_temperature(cell)
            if not np.isnan(terrain_temp):
                lines.append(f"  Terrain: {terrain_temp:.1f}")

        lines += [
            "",
            "--- Controls ---",
            "SPACE: pause",
            "+/-: speed",
            "ESC: quit",
        ]

        for line in lines:
            surf = self.font.render(line, True, (200, 200, 200))
            self.screen.blit(surf, (panel_x, y))
            y += 18
