"""
Snowflake Engine - Diffusion-Limited Deposition on a Hex Lattice

Each cell carries a water (vapor/ice) density and a receptive flag. Cells
with water >= 1.0 are frozen. Receptive cells stop diffusing and instead
accumulate water; everything else diffuses toward the average of its
non-receptive neighbours:

  receptive:      next = water + gamma + (alpha/2) * (avg - 0)
  non-receptive:  next = water + (alpha/2) * (avg - water)

where avg is the sum of non-receptive neighbour water divided by 6
(always 6, missing and receptive neighbours weigh zero). A cell whose
frozen state flips during a step makes its six neighbours receptive, which
is how the crystal grows outward. The padding ring is refilled with
background vapor (beta) after every step.

Parameters:
  alpha (vapor_diffusion)   - diffusion rate
  beta  (background_vapor)  - vapor fed in at the border
  gamma (vapor_addition)    - water added to receptive cells per step

Each parameter can be randomized per draw by a percentage spread
(*_rand), drawn from the engine's own buffered random source.

References:
  Reiter, "A local cellular model for snow crystal growth" (2005)
"""

import logging

import numpy as np

from .engine_base import LatticeEngine
from .presets import get_preset
from .rng import RandomBuffer, DEFAULT_SEED

logger = logging.getLogger(__name__)


class SnowflakeSim(LatticeEngine):

    engine_name = "snowflake"
    engine_label = "Snowflake"

    def __init__(self, width=100, height=100, alpha=1.0, beta=0.4,
                 gamma=0.0001):
        """
        Args:
            width: Interior lattice columns
            height: Interior lattice rows
            alpha: Vapor diffusion rate
            beta: Background vapor, also the initial water of every cell
            gamma: Vapor added to receptive cells each step
        """
        super().__init__(width, height, water=beta)
        self.vapor_diffusion = alpha
        self.background_vapor = beta
        self.vapor_addition = gamma

        # Percentage spread of each parameter (0 = no randomization)
        self.vapor_diffusion_rand = 0.0
        self.background_vapor_rand = 0.0
        self.vapor_addition_rand = 0.0

        self.rng = RandomBuffer(DEFAULT_SEED)

    @classmethod
    def from_preset(cls, key, **overrides):
        """Build an engine from a named preset, seeded as the preset says."""
        preset = get_preset(key)
        if preset is None:
            raise ValueError(f"Unknown preset: {key!r}")
        preset.update(overrides)
        sim = cls(width=preset["width"], height=preset["height"],
                  alpha=preset["alpha"], beta=preset["beta"],
                  gamma=preset["gamma"])
        sim.set_params(**preset)
        if "random_seed" in preset:
            sim.set_random_seed(preset["random_seed"])
        sim.seed(preset.get("seed", "center"))
        return sim

    # -----------------------------------------------------------------------
    # Random source
    # -----------------------------------------------------------------------

    @property
    def random_seed(self):
        """Seed currently in force for the random buffer."""
        return self.rng.seed

    def set_random_seed(self, seed):
        logger.debug("Reseeding %s engine with %d", self.engine_name, seed)
        self.rng.reseed(seed)

    # -----------------------------------------------------------------------
    # Cell access
    # -----------------------------------------------------------------------

    def set_water(self, x, y, val):
        """Set the water of interior cell (x, y).

        A frozen value (>= 1.0) also makes the cell and its neighbours
        receptive in both buffers; this is how seed crystals are placed.
        """
        lat = self.lattice
        idx = lat.index(x, y)
        lat.current.water[idx] = val
        if val >= 1.0:
            for buf in (lat.current, lat.next):
                buf.receptive[idx] = True
                for n in lat.neighbours[idx]:
                    buf.receptive[n] = True

    # -----------------------------------------------------------------------
    # Stepping
    # -----------------------------------------------------------------------

    def step(self):
        """Advance one iteration.

        Interior cells are updated first: the freeze check compares against
        the value still sitting in the next buffer from the previous step,
        so the border feed must not touch next until the interior is done.
        """
        lat = self.lattice
        cur, nxt = lat.current, lat.next

        # Work on lists in the hot loop, write back once per step
        water = cur.water.tolist()
        receptive = cur.receptive.tolist()
        next_water = nxt.water.tolist()

        for idx in lat.interior:
            self._step_cell(idx, water, receptive, next_water)

        # Keep receptivity marks made during the pass, including ones made
        # after a cell was already computed
        cur.receptive[:] = receptive
        np.logical_or(nxt.receptive, cur.receptive, out=nxt.receptive)

        beta, beta_rand = self.background_vapor, self.background_vapor_rand
        for idx in lat.border:
            next_water[idx] = self.rng.spread(beta, beta_rand)
        nxt.water[:] = next_water

        lat.swap()
        self.iteration_count += 1

    def _step_cell(self, idx, water, receptive, next_water):
        """Compute next water for one interior cell.

        Draw order is fixed: diffusion first, then addition (receptive
        cells only). Replays depend on it.
        """
        rng = self.rng
        alpha = rng.spread(self.vapor_diffusion, self.vapor_diffusion_rand)

        cell_water = water[idx]
        if receptive[idx]:
            nonparticipating = cell_water + rng.spread(
                self.vapor_addition, self.vapor_addition_rand)
            participating = 0.0
        else:
            nonparticipating = 0.0
            participating = cell_water

        neighbours = self.lattice.neighbours[idx]
        water_avg = 0.0
        for n in neighbours:
            if not receptive[n]:
                water_avg += water[n]
        water_avg = water_avg / 6.0

        participating += (alpha / 2.0) * (water_avg - participating)
        new_water = participating + nonparticipating

        # Stale next value is the frame before current
        started_frozen = next_water[idx] >= 1.0
        ended_frozen = new_water >= 1.0
        if started_frozen != ended_frozen:
            for n in neighbours:
                receptive[n] = True

        next_water[idx] = new_water

    # -----------------------------------------------------------------------
    # Parameters
    # -----------------------------------------------------------------------

    def set_params(self, alpha=None, beta=None, gamma=None, alpha_rand=None,
                   beta_rand=None, gamma_rand=None, **_kw):
        if alpha is not None:
            self.vapor_diffusion = alpha
        if beta is not None:
            self.background_vapor = beta
        if gamma is not None:
            self.vapor_addition = gamma
        if alpha_rand is not None:
            self.vapor_diffusion_rand = alpha_rand
        if beta_rand is not None:
            self.background_vapor_rand = beta_rand
        if gamma_rand is not None:
            self.vapor_addition_rand = gamma_rand

    def get_params(self):
        return {
            "alpha": self.vapor_diffusion,
            "beta": self.background_vapor,
            "gamma": self.vapor_addition,
            "alpha_rand": self.vapor_diffusion_rand,
            "beta_rand": self.background_vapor_rand,
            "gamma_rand": self.vapor_addition_rand,
        }

    def seed(self, seed_type="center", **kwargs):
        if seed_type == "center":
            x = max(0, self.width // 2 - 1)
            y = max(0, self.height // 2 - 1)
            self.set_water(x, y, 1.0)
        elif seed_type != "none":
            raise ValueError(f"Unknown seed type: {seed_type!r}")

    def clear(self):
        """Reset every cell to background vapor and rewind the random source."""
        self.lattice.reset(self.background_vapor)
        self.iteration_count = 0
        self.rng.rewind()
