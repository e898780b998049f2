"""
Boundary conditions for the 1D shock tube.

Both ends of the tube are solid walls; the only supported condition is
inviscid reflection.
"""

import numpy as np


class ReflectiveWallBC:
    """
    Inviscid solid wall: zero normal velocity.

    The ghost state mirrors the adjacent interior cell with the momentum
    reversed; density and total energy are copied unchanged.
    """

    def ghost_state(self, U_cell: np.ndarray) -> np.ndarray:
        """
        Ghost state for a single boundary cell.

        Args:
            U_cell: Conservative variables of the adjacent interior cell (3,)

        Returns:
            Reflected conservative state (3,)
        """
        U_ghost = U_cell.copy()
        U_ghost[1] = -U_cell[1]  # Reflect momentum
        return U_ghost

    def apply(self, U: np.ndarray, side: str) -> np.ndarray:
        """
        Ghost state beyond the given end of the domain.

        Args:
            U: Conservative variables of the interior cells (3, n_cells)
            side: 'left' or 'right'
        """
        if side == 'left':
            return self.ghost_state(U[:, 0])
        elif side == 'right':
            return self.ghost_state(U[:, -1])
        raise ValueError(f"Unknown boundary side: {side!r}")
