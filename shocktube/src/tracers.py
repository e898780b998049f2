"""
Lagrangian tracers marking the material interfaces.
"""

import numpy as np
from dataclasses import dataclass, field
from typing import Iterator, List, Sequence, Tuple

from .mesh import Mesh1D


@dataclass
class Tracer:
    """Massless marker with its full (time, position) history."""
    position: float
    trajectory: List[Tuple[float, float]] = field(default_factory=list)

    def __post_init__(self):
        if not self.trajectory:
            self.trajectory.append((0.0, self.position))

    def times(self) -> np.ndarray:
        return np.array([t for t, _ in self.trajectory])

    def positions(self) -> np.ndarray:
        return np.array([x for _, x in self.trajectory])


class TracerSet:
    """One tracer per internal slab boundary; fixed for the whole run."""

    def __init__(self, tracers: Sequence[Tracer] = ()):
        self.tracers: List[Tracer] = list(tracers)

    @classmethod
    def from_boundaries(cls, boundaries: Sequence[float]) -> 'TracerSet':
        return cls([Tracer(position=float(x)) for x in boundaries])

    def __len__(self) -> int:
        return len(self.tracers)

    def __iter__(self) -> Iterator[Tracer]:
        return iter(self.tracers)

    def __getitem__(self, index: int) -> Tracer:
        return self.tracers[index]

    def positions(self) -> np.ndarray:
        """Current tracer positions in creation order."""
        return np.array([tr.position for tr in self.tracers], dtype=float)

    def advect(self, u: np.ndarray, mesh: Mesh1D, t: float, dt: float):
        """
        Move every tracer with the velocity of the cell containing it.

        Forward Euler with nearest-cell sampling; positions are clamped to
        the domain and (t, x) is appended to each trajectory.
        """
        for tracer in self.tracers:
            velocity = u[mesh.cell_index(tracer.position)]
            x = tracer.position + velocity * dt
            tracer.position = float(min(max(x, mesh.x_min), mesh.x_max))
            tracer.trajectory.append((t, tracer.position))
