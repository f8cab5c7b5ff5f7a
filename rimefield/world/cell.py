"""Cell: grid coordinates used as the key into every per-cell map.

Cells carry no state of their own.  Temperatures live in
``TemperatureGrid`` arrays and terrain/things live on the ``World``.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import NamedTuple


class Cell(NamedTuple):
    """A single tile position in the world grid.

    Attributes:
        x: Column position.
        y: Row position.
    """

    x: int
    y: int

    def adjacent(self) -> Iterator[Cell]:
        """Yield the four orthogonal neighbours (north, south, west, east).

        Bounds are not checked here; the world filters them.
        """
        yield Cell(self.x, self.y - 1)
        yield Cell(self.x, self.y + 1)
        yield Cell(self.x - 1, self.y)
        yield Cell(self.x + 1, self.y)
