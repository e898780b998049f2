"""
Flow state representation and conservative-variable buffers.

Conservative variables, stored as arrays of shape (3, n_cells):
    rho   - density [kg/m³]
    rhoU  - momentum per volume [kg/(m²·s)]
    E     - total energy per volume [J/m³]

Gas properties (gamma, molecular weight, gas id) vary from cell to cell and
are carried alongside the primitive variables.
"""

import numpy as np
from dataclasses import dataclass

from .errors import NumericalInvariantViolation
from .gas import RU


def first_bad_index(mask: np.ndarray) -> int:
    """Index of the first True entry of a boolean mask."""
    return int(np.flatnonzero(mask)[0])


@dataclass
class FlowState:
    """
    Primitive flow field with per-cell gas properties.

    Primitive variables (stored):
        rho, u, p, T
    Gas properties (stored):
        gamma, molecular_weight, gas_id
    """
    rho: np.ndarray     # Density [kg/m³]
    u: np.ndarray       # Velocity [m/s]
    p: np.ndarray       # Pressure [Pa]
    T: np.ndarray       # Temperature [K]
    gamma: np.ndarray
    molecular_weight: np.ndarray
    gas_id: np.ndarray

    @classmethod
    def from_conservative(cls, U: np.ndarray, gamma: np.ndarray,
                          molecular_weight: np.ndarray, gas_id: np.ndarray) -> 'FlowState':
        """
        Recover primitive variables from conservative variables.

        Raises NumericalInvariantViolation if any cell has non-positive
        density, or a non-finite or non-positive pressure.
        """
        rho = U[0]
        bad = ~(rho > 0)
        if np.any(bad):
            i = first_bad_index(bad)
            raise NumericalInvariantViolation(f"Non-positive density {rho[i]:.6e} kg/m³", cell=i)

        u = U[1] / rho
        p = (gamma - 1) * (U[2] - 0.5 * rho * u**2)
        bad = ~(np.isfinite(p) & (p > 0))
        if np.any(bad):
            i = first_bad_index(bad)
            raise NumericalInvariantViolation(f"Non-physical pressure {p[i]:.6e} Pa", cell=i)

        T = p / (rho * (RU / molecular_weight))
        return cls(rho=rho.copy(), u=u, p=p, T=T, gamma=gamma.copy(),
                   molecular_weight=molecular_weight.copy(), gas_id=gas_id.copy())


class ConservedBuffers:
    """
    The three conservative-state buffers owned by the grid.

    - current: the solution at the present stage
    - saved:   a copy of the solution at the start of the step
    - scratch: work space for single-stage forward Euler updates

    Integrators only ever read and write these three arrays; no stage
    allocates further state buffers.
    """

    def __init__(self, n_cells: int):
        self.current = np.zeros((3, n_cells))
        self.saved = np.zeros((3, n_cells))
        self.scratch = np.zeros((3, n_cells))

    def copy_current_to_saved(self):
        self.saved[:] = self.current
