"""
Uniform 1D finite volume mesh.
"""

import numpy as np
from dataclasses import dataclass


@dataclass
class Mesh1D:
    """
    Uniform cell-centered finite volume mesh.

    - x_faces: Face locations (n_cells + 1)
    - x_cells: Cell centers (n_cells)
    - dx: Cell width (uniform)
    """
    x_faces: np.ndarray

    def __post_init__(self):
        self.n_cells = len(self.x_faces) - 1
        self.x_cells = 0.5 * (self.x_faces[:-1] + self.x_faces[1:])
        self.dx = float(self.x_faces[1] - self.x_faces[0])
        self.x_min = float(self.x_faces[0])
        self.x_max = float(self.x_faces[-1])

    @classmethod
    def uniform(cls, x_min: float, x_max: float, n_cells: int) -> 'Mesh1D':
        """
        Create a uniform mesh.

        Cell centers sit at x_min + (i + 0.5) * dx with dx = (x_max - x_min) / n_cells.
        """
        dx = (x_max - x_min) / n_cells
        x_faces = x_min + dx * np.arange(n_cells + 1)
        return cls(x_faces=x_faces)

    def cell_index(self, x):
        """Index of the cell containing x, clamped to the domain."""
        index = np.floor((np.asarray(x) - self.x_min) / self.dx).astype(int)
        return np.clip(index, 0, self.n_cells - 1)
