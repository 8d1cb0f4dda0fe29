import sys
import time
import logging
from pathlib import Path
sys.path.append(str(Path(__file__).resolve().parents[1] / "lib"))
import numpy as np
import pytest
import hdmc
from hdmc import BinaryHardDisc, Parameters, RandomSource, Species
from hdmc.geometry import disc_aabb, periodic_wrap
from hdmc.spatial import RTreeIndex


class CountingIndex(RTreeIndex):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.n_update = 0

    def update(self, pid, aabb):
        self.n_update += 1
        super().update(pid, aabb)


def get_small_system(seed=0, **kwargs):
    params = Parameters(n_small=20, n_large=5, d_small=1, d_large=5, density=0.1)
    return BinaryHardDisc.from_parameters(params, rng=RandomSource(seed), **kwargs)


def assert_in_box(system):
    for positions in system.get_positions():
        for d, L in enumerate(system.box):
            assert np.all(positions[:, d] >= 0)
            assert np.all(positions[:, d] < L)


def test_fill():
    params = Parameters(n_small=50, n_large=5, d_small=1, d_large=5, density=0.1)
    system = BinaryHardDisc.from_parameters(params)
    t0 = time.time()
    system.fill_hd()
    assert time.time() - t0 < 1.0
    assert system.is_filled
    assert not system.report_overlap(), "Overlap detected"
    small, large = system.get_positions()
    assert small.shape == (50, 2)
    assert large.shape == (5, 2)
    assert_in_box(system)
    assert len(system.get_index(Species.SMALL)) == 50
    assert len(system.get_index(Species.LARGE)) == 5


def test_no_overlap_after_sweeps():
    system = get_small_system()
    system.fill_hd()
    for _ in range(30):
        system.sweep()
        assert not system.report_overlap(), "Overlap detected"
        assert_in_box(system)
    assert system.n_sweep == 30
    assert sum(system.attempted.values()) == 30 * 25
    assert 0 < sum(system.accepted.values()) <= 30 * 25


def test_index_follows_positions():
    system = get_small_system(seed=3)
    system.fill_hd()
    for _ in range(10):
        system.sweep()
    for species, positions in zip(Species, system.get_positions()):
        index = system.get_index(species)
        for i, p in enumerate(positions):
            assert np.allclose(index.get_aabb(i), disc_aabb(p, system.radii[species]))


def test_rejection_changes_nothing():
    params = Parameters(
        n_small=20, n_large=5, d_small=1, d_large=5, density=0.1, max_disp=0.5
    )
    system = BinaryHardDisc.from_parameters(
        params, rng=RandomSource(7), index_type=CountingIndex
    )
    system.fill_hd()
    indices = [system.get_index(s) for s in Species]
    n_reject = 0
    for _ in range(1000):
        before = system.get_positions()
        aabbs = [[idx.get_aabb(i) for i in range(len(idx))] for idx in indices]
        n_update = [idx.n_update for idx in indices]
        if not system.trial_move():
            n_reject += 1
            for old, new in zip(before, system.get_positions()):
                assert np.array_equal(old, new)
            for idx, old in zip(indices, aabbs):
                assert [idx.get_aabb(i) for i in range(len(idx))] == old
            assert [idx.n_update for idx in indices] == n_update
    assert n_reject > 0
    assert sum(idx.n_update for idx in indices) == sum(system.accepted.values())


def test_self_is_excluded():
    system = BinaryHardDisc(1, 0, 1, 1, box=(10, 10), max_disp=0.4)
    system.fill_hd()
    for _ in range(20):
        system.sweep()
    assert system.acceptance[Species.SMALL] == 1.0
    assert system.accepted[Species.LARGE] == 0


def test_draw_order():
    seed, box, max_disp = 11, (10.0, 10.0), 0.3
    system = BinaryHardDisc(1, 0, 1, 1, box=box, max_disp=max_disp, rng=RandomSource(seed))
    system.fill_hd()
    twin = RandomSource(seed)
    expected = [box[0] * twin.uniform(), box[1] * twin.uniform()]
    assert np.array_equal(system.get_positions()[0][0], expected)
    for _ in range(10):
        assert twin.integer(0, 0) == 0
        x = expected[0] + max_disp * (2.0 * twin.uniform() - 1.0)
        y = expected[1] + max_disp * (2.0 * twin.uniform() - 1.0)
        expected = periodic_wrap((x, y), box, (True, True))
        assert system.trial_move()
        assert np.array_equal(system.get_positions()[0][0], expected)


def test_sample_count(tmp_path):
    system = get_small_system()
    system.fill_hd()
    sampled = []

    def sampler(s):
        sampled.append(s.n_sweep)

    system.run(n_sweeps=1000, sample_interval=100, sampler=sampler)
    assert sampled == list(range(100, 1001, 100))
    assert system.n_sample == 10
    assert system.n_sweep == 1000
    assert not system.report_overlap()


def test_trajectory_frames(tmp_path):
    filename = tmp_path / "trajectory.xyz"
    system = get_small_system()
    system.fill_hd()
    system.run(n_sweeps=100, sample_interval=10, sampler=hdmc.TrajectoryRecorder(filename))
    with hdmc.XYZ(filename) as frames:
        assert len(frames) == 10
        assert frames.numbers == [25] * 10
        last = frames[-1]
    small, large = system.get_positions()
    assert np.allclose(last[:20, 1:3], small, atol=1e-6)
    assert np.allclose(last[20:, 1:3], large, atol=1e-6)
    assert np.all(last[:20, 0] == 0) and np.all(last[20:, 0] == 1)


def test_determinism(tmp_path):
    outputs = []
    for name in ("a.xyz", "b.xyz", "c.xyz"):
        seed = 1 if name == "c.xyz" else 0
        system = get_small_system(seed=seed)
        system.fill_hd()
        system.run(50, 10, sampler=hdmc.TrajectoryRecorder(tmp_path / name))
        outputs.append((tmp_path / name).read_bytes())
    assert outputs[0] == outputs[1]
    assert outputs[0] != outputs[2]


def test_run_messages(caplog):
    caplog.set_level(logging.INFO, logger="hdmc")
    system = get_small_system()
    system.fill_hd()
    system.run(n_sweeps=20, sample_interval=5)
    saved = [r.getMessage() for r in caplog.records if "Saved configuration" in r.getMessage()]
    assert saved == [f"Saved configuration {i} of 4" for i in range(1, 5)]


def test_generation_failure():
    system = BinaryHardDisc(0, 4, 1, 5, box=(10, 10), max_attempts=50)
    with pytest.raises(hdmc.GenerationFailure) as err:
        system.fill_hd()
    assert err.value.attempts == 50
    assert err.value.species == "large"


def test_load_positions():
    system = BinaryHardDisc(2, 1, 1, 2, box=(10, 10))
    system.load_positions([(1, 1), (1, 9)], [(5, 5)])
    assert not system.report_overlap()
    with pytest.raises(ValueError):
        system.load_positions([(1, 1), (1.5, 1)], [(5, 5)])
    with pytest.raises(ValueError):
        system.load_positions([(1, 1)], [(5, 5)])
    system.load_positions([(-1, 1), (1, 12)], [(5, 5)])
    assert np.allclose(system.get_positions()[0], [(9, 1), (1, 2)])


def test_run_rejects_negative_sweeps():
    system = get_small_system()
    system.fill_hd()
    with pytest.raises(hdmc.ConfigurationError):
        system.run(n_sweeps=-1, sample_interval=10)
    with pytest.raises(hdmc.ConfigurationError):
        system.run(n_sweeps=10, sample_interval=0)
    assert system.n_sweep == 0


def test_sweep_needs_particles():
    system = BinaryHardDisc(2, 1, 1, 2, box=(10, 10))
    with pytest.raises(RuntimeError):
        system.sweep()


def test_invalid_system():
    with pytest.raises(hdmc.ConfigurationError):
        BinaryHardDisc(400, 0, 1, 1, box=(10, 10), max_attempts=20)
    with pytest.raises(hdmc.ConfigurationError):
        BinaryHardDisc(10, 1, 1, 10, box=(15, 15))
    with pytest.raises(hdmc.ConfigurationError):
        BinaryHardDisc(10, 1, 0, 1, box=(15, 15))
    with pytest.raises(hdmc.ConfigurationError):
        BinaryHardDisc(10, 1, 1, 2, box=(15, 15), max_disp=0)
    with pytest.raises(hdmc.ConfigurationError):
        BinaryHardDisc(0, 0, 1, 2, box=(15, 15))


def test_overview():
    system = get_small_system()
    system.fill_hd()
    system.sweep()
    text = repr(system)
    assert "25 particles" in text
    assert "sweeps: 1" in text


if __name__ == "__main__":
    test_fill()
    test_no_overlap_after_sweeps()
    test_rejection_changes_nothing()
