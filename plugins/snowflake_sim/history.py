"""
Simulation History Tracking and Playback

Records just enough about a SnowflakeSim run to re-drive an identical run
later: lattice size, random seed, the cells frozen at the start, and the
tick-by-tick values of alpha, beta, gamma and the alpha randomization
spread. Parameter series are stored as change points only, so a history
grows with the number of edits rather than with the run length.

Recording:
    history = SimStateHistory()
    history.init_tracking(sim)
    for _ in range(n):
        sim.step()
        ...edit parameters...
        history.track_tick(sim)

Playback:
    sim = history.init_playback()
    for _ in range(n):
        sim.step()
        history.playback_tick(sim)
"""

import logging
from dataclasses import dataclass, field

from .snowflake import SnowflakeSim

logger = logging.getLogger(__name__)


@dataclass
class AttribHistory:
    """Change-point series of one scalar attribute over ticks."""

    history: list = field(default_factory=list)

    def add(self, tick, value):
        """Record value at tick, only if it differs from the last value.

        Ticks must not go backwards. Recording the same tick twice keeps
        the later value.
        """
        value = float(value)
        if self.history:
            last_tick = self.history[-1][0]
            if tick < last_tick:
                raise ValueError(
                    f"Tick {tick} precedes last recorded tick {last_tick}")
            if tick == last_tick:
                self.history.pop()
        if not self.history or self.history[-1][1] != value:
            self.history.append((int(tick), value))

    def get(self, tick):
        """Value in force at tick.

        Before the first change point the first value is returned, after
        the last one the last value.
        """
        if not self.history:
            raise IndexError("Attribute history is empty")
        value = self.history[0][1]
        for point_tick, point_value in self.history:
            if point_tick > tick:
                break
            value = point_value
        return value

    @property
    def last_tick(self):
        return self.history[-1][0] if self.history else 0

    def __len__(self):
        return len(self.history)


@dataclass
class SimStateHistory:
    """History of a snowflake simulation, for playback and sharing."""

    seed: int = 0
    size: tuple = (0, 0)
    last_tick: int = 0
    start_filled: list = field(default_factory=list)
    alpha_history: AttribHistory = field(default_factory=AttribHistory)
    beta_history: AttribHistory = field(default_factory=AttribHistory)
    gamma_history: AttribHistory = field(default_factory=AttribHistory)
    alpha_rand_history: AttribHistory = field(default_factory=AttribHistory)

    def timelines(self):
        """The four parameter timelines in record order."""
        return (self.alpha_history, self.beta_history,
                self.gamma_history, self.alpha_rand_history)

    @property
    def tick_count(self):
        """Last tick passed to track_tick."""
        return self.last_tick

    # -----------------------------------------------------------------------
    # Tracking
    # -----------------------------------------------------------------------

    def init_tracking(self, sim):
        """Capture size, seed and starting frozen cells, then track tick 0."""
        self.size = (sim.width, sim.height)
        self.seed = sim.random_seed
        # A lattice that starts fully frozen has nothing worth recording
        if sim.background_vapor < 1.0:
            water = sim.water_field()
            for y in range(sim.height):
                for x in range(sim.width):
                    if water[y, x] >= 1.0:
                        self.start_filled.append((x, y))
        logger.debug("Tracking %dx%d lattice, seed %d, %d frozen cells",
                     sim.width, sim.height, self.seed, len(self.start_filled))
        self.track_tick(sim)

    def track_tick(self, sim):
        i = sim.iteration_count
        self.alpha_history.add(i, sim.vapor_diffusion)
        self.beta_history.add(i, sim.background_vapor)
        self.gamma_history.add(i, sim.vapor_addition)
        self.alpha_rand_history.add(i, sim.vapor_diffusion_rand)
        self.last_tick = max(self.last_tick, i)

    # -----------------------------------------------------------------------
    # Playback
    # -----------------------------------------------------------------------

    def init_playback(self):
        """Build a fresh engine in the recorded starting state."""
        if not all(self.timelines()):
            raise ValueError("History is missing tracked parameter timelines")
        width, height = self.size
        sim = SnowflakeSim(width, height,
                           alpha=self.alpha_history.get(0),
                           beta=self.beta_history.get(0),
                           gamma=self.gamma_history.get(0))
        sim.vapor_diffusion_rand = self.alpha_rand_history.get(0)
        sim.set_random_seed(self.seed)
        for x, y in self.start_filled:
            sim.set_water(x, y, 1.0)
        logger.debug("Playback engine ready, %d recorded ticks",
                     self.tick_count)
        return sim

    def playback_tick(self, sim):
        """Restore the parameters in force at the engine's current tick."""
        count = sim.iteration_count
        sim.vapor_diffusion = self.alpha_history.get(count)
        sim.background_vapor = self.beta_history.get(count)
        sim.vapor_addition = self.gamma_history.get(count)
        sim.vapor_diffusion_rand = self.alpha_rand_history.get(count)

    def replay(self, ticks=None):
        """Yield a playback engine after each step.

        Args:
            ticks: Number of steps to run (default: up to the last
                recorded tick)
        """
        if ticks is None:
            ticks = self.tick_count
        sim = self.init_playback()
        for _ in range(ticks):
            sim.step()
            self.playback_tick(sim)
            yield sim
