#!/usr/bin/env python3
"""
Test script for history tracking and playback.

Verifies:
1. AttribHistory change-point compaction and lookup
2. SimStateHistory captures size, seed and starting crystal
3. Playback reproduces a tracked run with mid-run parameter edits
"""

import numpy as np
import pytest

from snowflake_sim.history import AttribHistory, SimStateHistory
from snowflake_sim.snowflake import SnowflakeSim

GRID_WIDTH = 100
GRID_HEIGHT = 100
ITERATIONS = 50
EPSILON = np.finfo(np.float64).eps


def _tracked_run(width, height, ticks, seed=12831321):
    """Run and track a simulation with edits at ticks 8, 15 and 32."""
    sim = SnowflakeSim(width, height, alpha=1.0, beta=0.4, gamma=0.0001)
    sim.set_random_seed(seed)
    sim.set_water(width // 2 - 1, height // 2 - 1, 1.0)

    tracker = SimStateHistory()
    tracker.init_tracking(sim)

    fields = []
    for i in range(ticks):
        sim.step()
        if i == 8:
            sim.vapor_diffusion = 0.9
            sim.vapor_diffusion_rand = 0.3
        elif i == 15:
            sim.vapor_addition = 0.01
        elif i == 32:
            sim.vapor_addition = 0.001
        tracker.track_tick(sim)
        fields.append(sim.water_field())
    return sim, tracker, fields


def test_attrib_history_compaction():
    """Repeated values are not stored."""
    print("Testing AttribHistory compaction...")
    h = AttribHistory()
    for tick, value in [(0, 1.0), (1, 1.0), (2, 2.0), (3, 2.0), (5, 1.0)]:
        h.add(tick, value)
    assert h.history == [(0, 1.0), (2, 2.0), (5, 1.0)]
    for a, b in zip(h.history, h.history[1:]):
        assert a[1] != b[1]
        assert a[0] < b[0]
    print("  ✓ Compaction correct")


def test_attrib_history_get():
    h = AttribHistory()
    h.add(3, 0.5)
    h.add(10, 0.7)
    h.add(20, 0.9)
    assert h.get(0) == 0.5     # before first point
    assert h.get(3) == 0.5
    assert h.get(9) == 0.5
    assert h.get(10) == 0.7
    assert h.get(19) == 0.7
    assert h.get(20) == 0.9
    assert h.get(500) == 0.9   # past last point
    assert h.last_tick == 20
    assert len(h) == 3


def test_attrib_history_same_tick():
    h = AttribHistory()
    h.add(0, 1.0)
    h.add(4, 2.0)
    h.add(4, 3.0)
    assert h.history == [(0, 1.0), (4, 3.0)]
    # Overriding back to the previous value drops the change point
    h.add(4, 1.0)
    assert h.history == [(0, 1.0)]


def test_attrib_history_errors():
    h = AttribHistory()
    with pytest.raises(IndexError):
        h.get(0)
    h.add(5, 1.0)
    with pytest.raises(ValueError):
        h.add(4, 2.0)


def test_init_tracking():
    """Starting frozen cells, size and seed are captured."""
    print("Testing init_tracking...")
    sim = SnowflakeSim(20, 10, alpha=1.0, beta=0.4, gamma=0.0001)
    sim.set_random_seed(99)
    sim.set_water(3, 4, 1.0)
    sim.set_water(15, 2, 1.5)
    sim.set_water(7, 7, 0.99)

    tracker = SimStateHistory()
    tracker.init_tracking(sim)
    assert tracker.size == (20, 10)
    assert tracker.seed == 99
    assert tracker.start_filled == [(15, 2), (3, 4)]
    assert tracker.alpha_history.history == [(0, 1.0)]
    assert tracker.beta_history.history == [(0, 0.4)]
    assert tracker.gamma_history.history == [(0, 0.0001)]
    assert tracker.alpha_rand_history.history == [(0, 0.0)]
    print("  ✓ Tracking initialized")


def test_init_tracking_frozen_background():
    """A fully frozen background records no start cells."""
    sim = SnowflakeSim(6, 6, beta=1.2)
    tracker = SimStateHistory()
    tracker.init_tracking(sim)
    assert tracker.start_filled == []


def test_track_tick_records_changes_only():
    sim = SnowflakeSim(8, 8)
    tracker = SimStateHistory()
    tracker.init_tracking(sim)
    for i in range(10):
        sim.step()
        if i == 4:
            sim.vapor_addition = 0.05
        tracker.track_tick(sim)
    assert tracker.gamma_history.history == [(0, 0.0001), (5, 0.05)]
    assert len(tracker.alpha_history) == 1
    assert tracker.tick_count == 10


def test_history_tracking():
    """Playback matches the tracked run at every tick."""
    print("Testing playback fidelity...")
    sim1, tracker, fields = _tracked_run(GRID_WIDTH, GRID_HEIGHT, ITERATIONS)

    sim2 = tracker.init_playback()
    assert sim2.random_seed == 12831321
    assert sim2.get_water(49, 49) == 1.0

    for i in range(ITERATIONS):
        sim2.step()
        tracker.playback_tick(sim2)
        diff = np.abs(sim2.water_field() - fields[i]).max()
        assert diff <= EPSILON, f"Tick {i + 1} diverged by {diff}"

    assert sim2.get_params() == sim1.get_params()
    assert sim2.rng.index == sim1.rng.index
    print("  ✓ Playback reproduced the run")


def test_replay_generator():
    _, tracker, fields = _tracked_run(30, 30, 40)
    count = 0
    for i, sim in enumerate(tracker.replay()):
        assert np.array_equal(sim.water_field(), fields[i])
        count += 1
    # Runs to the last tracked tick, not the last parameter edit (tick 33)
    assert count == tracker.tick_count == 40


def test_replay_without_edits_runs_every_tick():
    """A run with no parameter edits still replays every tracked tick."""
    sim = SnowflakeSim(10, 10)
    sim.seed("center")
    tracker = SimStateHistory()
    tracker.init_tracking(sim)
    for _ in range(30):
        sim.step()
        tracker.track_tick(sim)
    assert all(len(t) == 1 for t in tracker.timelines())
    assert tracker.tick_count == 30
    replayed = list(tracker.replay())
    assert len(replayed) == 30
    assert np.array_equal(replayed[-1].water_field(), sim.water_field())


def test_init_playback_untracked():
    with pytest.raises(ValueError):
        SimStateHistory().init_playback()


def test_init_playback_partial_timelines():
    tracker = SimStateHistory(seed=1, size=(4, 4))
    tracker.alpha_history.add(0, 1.0)
    with pytest.raises(ValueError):
        tracker.init_playback()


def test_history_equality():
    _, a, _ = _tracked_run(20, 20, 20)
    _, b, _ = _tracked_run(20, 20, 20)
    assert a == b
    b.gamma_history.add(40, 0.5)
    assert a != b


if __name__ == "__main__":
    print("\n=== Testing History Tracking ===\n")

    test_attrib_history_compaction()
    test_attrib_history_get()
    test_attrib_history_same_tick()
    test_init_tracking()
    test_track_tick_records_changes_only()
    test_history_tracking()
    test_replay_generator()

    print("\n✓ All tests passed!\n")
