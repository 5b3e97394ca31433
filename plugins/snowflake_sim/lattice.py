"""
Padded Hex Lattice Storage

Cells live in flat arrays of (width + 2) * (height + 2) entries: the
interior simulation domain plus a one-cell padding ring that only the
border feed writes to. Two buffers (current / next) are kept and exchanged
by reference after each step.

Hex neighbours use offset coordinates where odd rows are shifted half a
cell to the right:

    even y: (+1, 0) (0, -1) (-1, -1) (-1, 0) (-1, +1) (0, +1)
    odd y:  (+1, 0) (+1, -1) (0, -1) (-1, 0) (0, +1) (+1, +1)

Neighbour lists are resolved to flat indices once, so the stepping loop
never does coordinate arithmetic.
"""

import numpy as np

from .errors import BoundsError

EVEN_ROW_OFFSETS = ((1, 0), (0, -1), (-1, -1), (-1, 0), (-1, 1), (0, 1))
ODD_ROW_OFFSETS = ((1, 0), (1, -1), (0, -1), (-1, 0), (0, 1), (1, 1))


def hex_neighbours(x, y, width, height):
    """Yield the in-bounds interior neighbours of interior cell (x, y)."""
    offsets = EVEN_ROW_OFFSETS if y % 2 == 0 else ODD_ROW_OFFSETS
    for dx, dy in offsets:
        nx, ny = x + dx, y + dy
        if 0 <= nx < width and 0 <= ny < height:
            yield nx, ny


class CellBuffer:
    """One full lattice of cells as parallel water / receptive arrays."""

    def __init__(self, n_cells, water=0.0):
        self.water = np.full(n_cells, water, dtype=np.float64)
        self.receptive = np.zeros(n_cells, dtype=bool)

    def reset(self, water=0.0):
        self.water[:] = water
        self.receptive[:] = False


class HexLattice:
    """Double-buffered padded hex lattice.

    Args:
        width: Interior columns
        height: Interior rows
        water: Initial water value of every cell, padding included
    """

    def __init__(self, width, height, water=0.0):
        if width <= 0 or height <= 0:
            raise ValueError(
                f"Lattice size must be positive, got {width}x{height}")
        self.width = width
        self.height = height
        self.stride = width + 2
        self.n_cells = (width + 2) * (height + 2)

        self.current = CellBuffer(self.n_cells, water)
        self.next = CellBuffer(self.n_cells, water)

        # Row-major interior indices and the padding ring
        self.interior = tuple(
            self._padded_index(x, y)
            for y in range(height) for x in range(width)
        )
        interior_set = set(self.interior)
        self.border = tuple(
            i for i in range(self.n_cells) if i not in interior_set)

        # Flat neighbour indices per padded index (empty for padding cells)
        self.neighbours = [()] * self.n_cells
        for y in range(height):
            for x in range(width):
                self.neighbours[self._padded_index(x, y)] = tuple(
                    self._padded_index(nx, ny)
                    for nx, ny in hex_neighbours(x, y, width, height)
                )

    def _padded_index(self, x, y):
        return (y + 1) * self.stride + (x + 1)

    def index(self, x, y):
        """Flat padded index of interior cell (x, y), bounds checked."""
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise BoundsError(x, y, self.width, self.height)
        return self._padded_index(x, y)

    def swap(self):
        """Exchange current and next."""
        self.current, self.next = self.next, self.current

    def reset(self, water=0.0):
        self.current.reset(water)
        self.next.reset(water)

    def interior_view(self, array):
        """(height, width) view of the interior of a flat buffer array."""
        return array.reshape(self.height + 2, self.stride)[1:-1, 1:-1]
