"""
First-order (piecewise constant) face states.
"""

import numpy as np
from typing import Tuple

from .boundary import ReflectiveWallBC


def face_states(U: np.ndarray, gamma: np.ndarray,
                bc: ReflectiveWallBC) -> Tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
    """
    Left and right states at every face, with the gamma of each side.

    Interior faces take the neighbouring cell values directly; the two
    boundary faces pair the first/last cell with its wall ghost state.
    Ghost states share the gamma of the cell they mirror.

    Args:
        U: Conservative variables (3, n_cells)
        gamma: Ratio of specific heats per cell (n_cells,)
        bc: Wall boundary condition

    Returns:
        UL, UR: States at each face (3, n_cells + 1)
        gammaL, gammaR: Gamma on each side of each face (n_cells + 1,)
    """
    n_vars, n_cells = U.shape
    n_faces = n_cells + 1

    UL = np.empty((n_vars, n_faces))
    UR = np.empty((n_vars, n_faces))
    gammaL = np.empty(n_faces)
    gammaR = np.empty(n_faces)

    # Interior faces: left cell i-1, right cell i
    UL[:, 1:] = U
    UR[:, :-1] = U
    gammaL[1:] = gamma
    gammaR[:-1] = gamma

    # Wall faces
    UL[:, 0] = bc.apply(U, 'left')
    gammaL[0] = gamma[0]
    UR[:, -1] = bc.apply(U, 'right')
    gammaR[-1] = gamma[-1]

    return UL, UR, gammaL, gammaR
