"""
Buffered Deterministic Random Source

Pre-generates a fixed pool of uniform floats from a seeded PCG64 generator
and hands them out in order, wrapping at the end of the pool. Two buffers
built from the same seed produce the same draw sequence, which is what
makes a recorded simulation replayable.

The pool is cyclic: once more than RANDOM_BUFFER_SIZE values have been
drawn the sequence repeats.
"""

import numpy as np

RANDOM_BUFFER_SIZE = 1 << 16
DEFAULT_SEED = 12831321


class RandomBuffer:
    """Seeded cyclic pool of uniform [0, 1) floats."""

    def __init__(self, seed=DEFAULT_SEED, size=RANDOM_BUFFER_SIZE):
        if size <= 0:
            raise ValueError(f"Buffer size must be positive, got {size}")
        self.size = size
        self.reseed(seed)

    def reseed(self, seed):
        """Regenerate the whole pool from seed and rewind to the start."""
        rng = np.random.Generator(np.random.PCG64(seed))
        # Plain list: draws happen once per cell in the hot loop
        self._values = rng.random(self.size).tolist()
        self.seed = seed
        self.index = 0

    def rewind(self):
        self.index = 0

    def next(self):
        """Return the next uniform value and advance the draw index."""
        value = self._values[self.index % self.size]
        self.index += 1
        return value

    def spread(self, value, spread):
        """Randomize value by a uniform factor in [1 - spread, 1 + spread].

        The factor is clamped at zero. A non-positive spread returns value
        unchanged without consuming a draw.
        """
        if spread > 0.0:
            return value * max(0.0, 1.0 + spread * (1.0 - 2.0 * self.next()))
        return value
