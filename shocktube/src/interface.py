"""
Material interface tracking.

After every time step the active tracker refreshes the per-cell gas
properties (gamma, molecular weight, gas id) the flux engine will see:

- sharp: every cell takes the properties of the region it lies in, with
  region boundaries given by the Lagrangian tracers.
- ghost: the sharp assignment, plus a record of the cells straddling an
  interface.
- mixed: per-material volume fractions advected with the flow, blended
  into effective mixture properties.
"""

import logging
import numpy as np
from abc import ABC, abstractmethod
from typing import Dict, Sequence, Type

from .errors import ConfigurationError
from .gas import GasSlab

logger = logging.getLogger(__name__)

# Row sums at or below this are treated as empty cells
FRACTION_SUM_FLOOR = 1e-10

# Cells within this many widths of a tracer are interface cells
INTERFACE_BAND = 1.5


class InterfaceTracker(ABC):
    """Abstract base class for interface tracking strategies."""

    name: str = ''

    def initialize(self, solver, slabs: Sequence[GasSlab]):
        """Set up tracker state once the grid and initial condition exist."""

    @abstractmethod
    def update(self, solver, dt: float):
        """Refresh solver.gamma, solver.molecular_weight and solver.gas_id."""

    def assign_regions(self, solver):
        """Copy region properties into each cell from the tracer positions."""
        index = solver.regions.lookup(solver.mesh.x_cells, solver.tracers.positions())
        solver.gamma[:] = solver.regions.gamma[index]
        solver.molecular_weight[:] = solver.regions.molecular_weight[index]
        solver.gas_id[:] = solver.regions.gas_id[index]


class SharpInterfaceTracker(InterfaceTracker):
    """Cells inherit the properties of the region they lie in."""

    name = 'sharp'

    def update(self, solver, dt: float):
        self.assign_regions(solver)


class GhostFluidTracker(InterfaceTracker):
    """
    Sharp region assignment with interface-cell marking.

    ``interface_cells`` holds the indices of cells whose faces or center lie
    within INTERFACE_BAND cell widths of a tracer. The flux computation does
    not treat these cells differently.
    """

    name = 'ghost'

    def __init__(self):
        self.interface_cells = np.zeros(0, dtype=int)

    def initialize(self, solver, slabs: Sequence[GasSlab]):
        self.mark_interface_cells(solver)

    def mark_interface_cells(self, solver):
        mesh = solver.mesh
        positions = np.sort(solver.tracers.positions())
        if len(positions) == 0:
            self.interface_cells = np.zeros(0, dtype=int)
            return

        # Distance from each cell's left face, right face and center to each tracer
        probes = np.stack([mesh.x_faces[:-1], mesh.x_faces[1:], mesh.x_cells])
        dist = np.abs(probes[:, :, None] - positions[None, None, :]).min(axis=(0, 2))
        self.interface_cells = np.flatnonzero(dist < INTERFACE_BAND * mesh.dx)

    def update(self, solver, dt: float):
        self.mark_interface_cells(solver)
        self.assign_regions(solver)


class MixedCellTracker(InterfaceTracker):
    """
    Volume-fraction (mixed-cell) method.

    Each cell carries a fraction alpha_m for every material m, initialised
    from the overlap of the cell with each slab. Fractions obey

        d(alpha)/dt + u * d(alpha)/dx = 0

    discretised with first-order upwind face fluxes. Mixture properties:

        1 / (gamma_mix - 1) = sum(alpha_m / (gamma_m - 1)) / sum(alpha_m)
        MW_mix              = sum(alpha_m * MW_m) / sum(alpha_m)

    and the gas id of the material with the largest fraction.
    """

    name = 'mixed'

    def __init__(self):
        self.fractions = None
        self.material_gamma = None
        self.material_mw = None
        self.material_ids = None
        self.fallback_count = 0

    def initialize(self, solver, slabs: Sequence[GasSlab]):
        mesh = solver.mesh
        self.material_gamma = np.array([s.gamma for s in slabs], dtype=float)
        self.material_mw = np.array([s.molecular_weight for s in slabs], dtype=float)
        self.material_ids = np.array([s.gas_id for s in slabs], dtype=object)
        self.fallback_count = 0

        edges = np.concatenate([[0.0], np.cumsum([s.length for s in slabs])])
        cell_left = mesh.x_faces[:-1, None]
        cell_right = mesh.x_faces[1:, None]
        overlap = np.minimum(cell_right, edges[None, 1:]) - np.maximum(cell_left, edges[None, :-1])
        self.fractions = np.maximum(overlap, 0.0) / mesh.dx
        self.normalize()

    def face_fluxes(self, u: np.ndarray) -> np.ndarray:
        """
        Upwind fraction fluxes at all faces (n_cells + 1, n_materials).

        The face velocity is the average of the two neighbouring cells; the
        wall faces carry no flux.
        """
        n_cells, n_mat = self.fractions.shape
        flux = np.zeros((n_cells + 1, n_mat))
        u_face = 0.5 * (u[:-1] + u[1:])
        upwind = np.where(u_face[:, None] > 0, self.fractions[:-1], self.fractions[1:])
        flux[1:-1] = u_face[:, None] * upwind
        return flux

    def advect(self, u: np.ndarray, dt: float, dx: float):
        flux = self.face_fluxes(u)
        self.fractions = self.fractions - (dt / dx) * (flux[1:] - flux[:-1])
        self.normalize()

    def normalize(self):
        """
        Clamp fractions to [0, 1] and rescale each row to sum to 1.

        Rows whose sum has collapsed to zero are reset to a uniform
        distribution and counted in ``fallback_count``.
        """
        alpha = np.clip(self.fractions, 0.0, 1.0)
        total = alpha.sum(axis=1)
        empty = total <= FRACTION_SUM_FLOOR
        alpha[~empty] /= total[~empty, None]
        if np.any(empty):
            n_empty = int(np.count_nonzero(empty))
            alpha[empty] = 1.0 / alpha.shape[1]
            self.fallback_count += n_empty
            logger.debug("Volume fractions reset to uniform in %d cell(s)", n_empty)
        self.fractions = alpha

    def mixture_properties(self):
        """Effective gamma, molecular weight and dominant gas id per cell."""
        alpha = self.fractions
        total = alpha.sum(axis=1)
        inv_gm1 = (alpha / (self.material_gamma - 1)).sum(axis=1) / total
        mw = (alpha * self.material_mw).sum(axis=1) / total
        gamma = 1 + 1 / inv_gm1
        gas_id = self.material_ids[np.argmax(alpha, axis=1)]
        return gamma, mw, gas_id

    def update(self, solver, dt: float):
        self.advect(solver.state.u, dt, solver.mesh.dx)
        gamma, mw, gas_id = self.mixture_properties()
        solver.gamma[:] = gamma
        solver.molecular_weight[:] = mw
        solver.gas_id[:] = gas_id


INTERFACE_METHODS: Dict[str, Type[InterfaceTracker]] = {
    'sharp': SharpInterfaceTracker,
    'ghost': GhostFluidTracker,
    'mixed': MixedCellTracker,
}


def normalize_interface_method(method: str) -> str:
    """Canonical interface method name, or ConfigurationError if unknown."""
    key = str(method).lower()
    if key not in INTERFACE_METHODS:
        raise ConfigurationError(f"Unknown interface method: {method!r}. "
                                 f"Options: {', '.join(INTERFACE_METHODS)}")
    return key


def create_tracker(method: str) -> InterfaceTracker:
    """Instantiate an interface tracker by name ('sharp', 'ghost' or 'mixed')."""
    return INTERFACE_METHODS[normalize_interface_method(method)]()
