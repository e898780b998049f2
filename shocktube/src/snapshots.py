"""
Time-ordered snapshots of the full flow field for x-t diagrams.
"""

import numpy as np
from dataclasses import dataclass
from typing import Iterator, List, Tuple

from .state import FlowState

FIELDS = ('rho', 'u', 'p', 'T', 'gamma', 'molecular_weight')


def _frozen(a: np.ndarray) -> np.ndarray:
    a = np.array(a, copy=True)
    a.flags.writeable = False
    return a


@dataclass(frozen=True, eq=False)
class Snapshot:
    """
    Immutable capture of the field at one physical time.

    Includes the per-cell gas properties so the mixture composition can be
    reconstructed without re-running the solver.
    """
    time: float
    rho: np.ndarray
    u: np.ndarray
    p: np.ndarray
    T: np.ndarray
    gamma: np.ndarray
    molecular_weight: np.ndarray
    gas_id: np.ndarray

    @classmethod
    def capture(cls, time: float, state: FlowState) -> 'Snapshot':
        return cls(time=float(time),
                   rho=_frozen(state.rho), u=_frozen(state.u),
                   p=_frozen(state.p), T=_frozen(state.T),
                   gamma=_frozen(state.gamma),
                   molecular_weight=_frozen(state.molecular_weight),
                   gas_id=_frozen(state.gas_id))

    def composition(self) -> dict:
        """Number of cells occupied by each gas id."""
        ids, counts = np.unique(self.gas_id.astype(str), return_counts=True)
        return dict(zip(ids.tolist(), counts.tolist()))


class SnapshotStore:
    """Append-only, strictly time-ordered list of snapshots."""

    def __init__(self):
        self._snapshots: List[Snapshot] = []

    def append(self, snapshot: Snapshot):
        if self._snapshots and snapshot.time <= self._snapshots[-1].time:
            raise ValueError(f"Snapshot at t = {snapshot.time:.6e} s is not after "
                             f"the last one at t = {self._snapshots[-1].time:.6e} s")
        self._snapshots.append(snapshot)

    def __len__(self) -> int:
        return len(self._snapshots)

    def __iter__(self) -> Iterator[Snapshot]:
        return iter(self._snapshots)

    def __getitem__(self, index) -> Snapshot:
        return self._snapshots[index]

    @property
    def last(self) -> Snapshot:
        return self._snapshots[-1]

    def times(self) -> np.ndarray:
        return np.array([s.time for s in self._snapshots])

    def field(self, name: str) -> np.ndarray:
        """x-t array of one field, shape (n_snapshots, n_cells)."""
        if name not in FIELDS:
            raise KeyError(f"Unknown field {name!r}. Options: {', '.join(FIELDS)}")
        return np.stack([getattr(s, name) for s in self._snapshots])

    def field_range(self, name: str) -> Tuple[float, float]:
        data = self.field(name)
        return float(data.min()), float(data.max())


def downsample_xt(times: np.ndarray, data: np.ndarray,
                  max_nt: int, max_nx: int) -> Tuple[np.ndarray, np.ndarray]:
    """
    Block-average an x-t field down to at most (max_nt, max_nx) samples.

    Each output sample is the mean of the block of input samples that maps
    onto it; times are averaged over the same row blocks. Inputs already
    within the target size are returned unchanged.

    Args:
        times: Snapshot times (nt,)
        data: Field values (nt, nx)

    Returns:
        times, data at the reduced resolution
    """
    nt, nx = data.shape
    target_nt = min(max_nt, nt)
    target_nx = min(max_nx, nx)
    if nt <= target_nt and nx <= target_nx:
        return times, data

    row_edges = np.floor(np.arange(target_nt + 1) * nt / target_nt).astype(int)
    col_edges = np.floor(np.arange(target_nx + 1) * nx / target_nx).astype(int)
    row_edges[-1] = nt
    col_edges[-1] = nx

    out_t = np.empty(target_nt)
    out = np.empty((target_nt, target_nx))
    for j in range(target_nt):
        j0, j1 = row_edges[j], row_edges[j + 1]
        out_t[j] = times[j0:j1].mean()
        block = data[j0:j1]
        for i in range(target_nx):
            out[j, i] = block[:, col_edges[i]:col_edges[i + 1]].mean()
    return out_t, out
