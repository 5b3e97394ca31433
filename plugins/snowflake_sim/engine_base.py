"""
Abstract Base Class for Hex Lattice Engines

Engines own a double-buffered HexLattice and expose a common read
interface, so a renderer can read any engine without knowing its
update rule.
"""

from abc import ABC, abstractmethod

from .lattice import HexLattice


class LatticeEngine(ABC):
    """Base class for hex lattice engines."""

    engine_name = ""   # e.g. "snowflake"
    engine_label = ""  # e.g. "Snowflake"

    def __init__(self, width, height, water=0.0):
        self.width = width
        self.height = height
        self.lattice = HexLattice(width, height, water)
        self.iteration_count = 0

    @abstractmethod
    def step(self):
        """Advance one time step."""

    def step_n(self, n):
        """Advance n steps. Returns the final interior water field."""
        for _ in range(n):
            self.step()
        return self.water_field()

    @abstractmethod
    def set_params(self, **params):
        """Update engine parameters."""

    @abstractmethod
    def get_params(self):
        """Return dict of current parameter values."""

    @abstractmethod
    def seed(self, seed_type="center", **kwargs):
        """Seed the lattice based on type string."""

    def get_water(self, x, y):
        """Water value of interior cell (x, y) in the current buffer."""
        return float(self.lattice.current.water[self.lattice.index(x, y)])

    def get_receptive(self, x, y):
        return bool(self.lattice.current.receptive[self.lattice.index(x, y)])

    def water_field(self):
        """Copy of the interior water values as a (height, width) array."""
        return self.lattice.interior_view(self.lattice.current.water).copy()

    def receptive_field(self):
        return self.lattice.interior_view(self.lattice.current.receptive).copy()

    def clear(self):
        """Clear the lattice."""
        self.lattice.reset()
        self.iteration_count = 0

    @property
    def stats(self):
        """Return current lattice statistics."""
        water = self.water_field()
        return {
            "iteration": self.iteration_count,
            "frozen": int((water >= 1.0).sum()),
            "receptive": int(self.receptive_field().sum()),
            "mean": float(water.mean()),
            "max": float(water.max()),
        }

    def __str__(self):
        water = self.water_field()
        return "\n".join(
            " ".join(f"{v:.2f}" for v in row) for row in water
        )
