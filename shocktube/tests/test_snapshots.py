"""
Pytest tests for snapshots, x-t downsampling and interface tracers.
"""

import numpy as np
import pytest

from shocktube import (FlowState, Mesh1D, Snapshot, SnapshotStore, Tracer, TracerSet,
                       downsample_xt)


def make_state(n=4, p=1e5):
    return FlowState(rho=np.ones(n), u=np.zeros(n), p=np.full(n, p), T=np.full(n, 300.0),
                     gamma=np.full(n, 1.4), molecular_weight=np.full(n, 28.97),
                     gas_id=np.array(['air', 'air', 'helium', 'helium'][:n], dtype=object))


class TestSnapshotStore:

    def test_append_in_time_order(self):
        store = SnapshotStore()
        for t in (0.0, 1e-4, 2e-4):
            store.append(Snapshot.capture(t, make_state(p=1e5 * (1 + t))))
        assert len(store) == 3
        np.testing.assert_array_equal(store.times(), [0.0, 1e-4, 2e-4])
        assert store.last.time == 2e-4

    @pytest.mark.parametrize('t', [1e-4, 5e-5])
    def test_rejects_non_increasing_time(self, t):
        store = SnapshotStore()
        store.append(Snapshot.capture(0.0, make_state()))
        store.append(Snapshot.capture(1e-4, make_state()))
        with pytest.raises(ValueError):
            store.append(Snapshot.capture(t, make_state()))
        assert len(store) == 2

    def test_field(self):
        store = SnapshotStore()
        store.append(Snapshot.capture(0.0, make_state(p=1.0)))
        store.append(Snapshot.capture(1.0, make_state(p=2.0)))
        p = store.field('p')
        assert p.shape == (2, 4)
        np.testing.assert_array_equal(p[:, 0], [1.0, 2.0])
        assert store.field_range('p') == (1.0, 2.0)

    def test_unknown_field(self):
        store = SnapshotStore()
        store.append(Snapshot.capture(0.0, make_state()))
        with pytest.raises(KeyError):
            store.field('entropy')


class TestSnapshot:

    def test_capture_copies(self):
        state = make_state()
        snapshot = Snapshot.capture(0.0, state)
        state.p[:] = 0.0
        assert np.all(snapshot.p == 1e5)

    def test_arrays_are_read_only(self):
        snapshot = Snapshot.capture(0.0, make_state())
        with pytest.raises(ValueError):
            snapshot.rho[0] = 2.0

    def test_fields_are_frozen(self):
        snapshot = Snapshot.capture(0.0, make_state())
        with pytest.raises(AttributeError):
            snapshot.time = 1.0

    def test_composition(self):
        snapshot = Snapshot.capture(0.0, make_state())
        assert snapshot.composition() == {'air': 2, 'helium': 2}


class TestDownsample:

    def test_small_input_unchanged(self):
        times = np.arange(5.0)
        data = np.ones((5, 8))
        out_t, out = downsample_xt(times, data, max_nt=10, max_nx=10)
        assert out_t is times
        assert out is data

    def test_block_average(self):
        times = np.arange(4.0)
        data = np.arange(16.0).reshape(4, 4)
        out_t, out = downsample_xt(times, data, max_nt=2, max_nx=2)
        np.testing.assert_array_equal(out_t, [0.5, 2.5])
        np.testing.assert_array_equal(out, [[2.5, 4.5], [10.5, 12.5]])

    def test_uneven_blocks_preserve_mean(self):
        rng = np.random.default_rng(1)
        data = rng.random((201, 500))
        times = np.linspace(0.0, 0.02, 201)
        out_t, out = downsample_xt(times, data, max_nt=60, max_nx=100)
        assert out.shape == (60, 100)
        assert out_t[0] >= times[0]
        assert out_t[-1] <= times[-1]
        assert np.all(np.diff(out_t) > 0)
        assert out.mean() == pytest.approx(data.mean(), rel=0.02)

    def test_only_space_reduced(self):
        data = np.tile(np.arange(6.0), (3, 1))
        out_t, out = downsample_xt(np.arange(3.0), data, max_nt=10, max_nx=3)
        np.testing.assert_array_equal(out_t, [0.0, 1.0, 2.0])
        np.testing.assert_array_equal(out, np.tile([0.5, 2.5, 4.5], (3, 1)))


class TestTracers:

    @pytest.fixture
    def mesh(self):
        return Mesh1D.uniform(0.0, 1.0, 10)

    def test_initial_trajectory(self):
        tracer = Tracer(position=0.3)
        assert tracer.trajectory == [(0.0, 0.3)]

    def test_from_boundaries(self):
        tracers = TracerSet.from_boundaries([0.25, 0.75])
        assert len(tracers) == 2
        np.testing.assert_array_equal(tracers.positions(), [0.25, 0.75])

    def test_nearest_cell_velocity(self, mesh):
        tracers = TracerSet.from_boundaries([0.35])
        u = np.arange(10.0)
        tracers.advect(u, mesh, t=0.01, dt=0.01)
        # 0.35 lies in cell 3
        assert tracers[0].position == pytest.approx(0.35 + 3.0 * 0.01)
        assert tracers[0].trajectory[-1] == (0.01, tracers[0].position)

    @pytest.mark.parametrize('start, velocity, expected', [(0.05, -100.0, 0.0), (0.95, 100.0, 1.0)])
    def test_clamped_to_domain(self, mesh, start, velocity, expected):
        tracers = TracerSet.from_boundaries([start])
        tracers.advect(np.full(10, velocity), mesh, t=0.01, dt=0.01)
        assert tracers[0].position == expected

    def test_trajectory_grows_each_step(self, mesh):
        tracers = TracerSet.from_boundaries([0.5])
        u = np.full(10, 1.0)
        for k in range(1, 4):
            tracers.advect(u, mesh, t=0.1 * k, dt=0.1)
        tracer = tracers[0]
        assert len(tracer.trajectory) == 4
        assert np.all(np.diff(tracer.times()) > 0)
        np.testing.assert_allclose(tracer.positions(), [0.5, 0.6, 0.7, 0.8])
