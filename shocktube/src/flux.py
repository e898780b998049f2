"""
HLLC numerical flux for the 1D multi-material Euler equations.

Vectorized over all faces; gamma may differ on the two sides of a face.
"""

import numpy as np
from abc import ABC, abstractmethod
from typing import Tuple

from .errors import NumericalInvariantViolation
from .state import first_bad_index


class FluxScheme(ABC):
    """Abstract base class for numerical flux schemes."""

    @abstractmethod
    def compute_flux_vectorized(self, UL: np.ndarray, UR: np.ndarray,
                                gammaL: np.ndarray, gammaR: np.ndarray) -> Tuple[np.ndarray, float]:
        """
        Compute numerical fluxes at all faces.

        Args:
            UL: Left states (3, n_faces)
            UR: Right states (3, n_faces)
            gammaL, gammaR: Ratio of specific heats on each side (n_faces,)

        Returns:
            F: Fluxes at all faces (3, n_faces)
            max_wave_speed: Largest signal speed over all faces [m/s]
        """

    def compute_flux(self, UL: np.ndarray, UR: np.ndarray,
                     gammaL: float, gammaR: float) -> Tuple[np.ndarray, float]:
        """Single-face flux computation."""
        F, s_max = self.compute_flux_vectorized(UL.reshape(-1, 1), UR.reshape(-1, 1),
                                                np.atleast_1d(gammaL), np.atleast_1d(gammaR))
        return F[:, 0], s_max


def _check_side(rho: np.ndarray, p: np.ndarray, side: str):
    bad = ~(rho > 0)
    if np.any(bad):
        i = first_bad_index(bad)
        raise NumericalInvariantViolation(f"Non-positive {side} face density {rho[i]:.6e}", cell=i)
    bad = ~(np.isfinite(p) & (p > 0))
    if np.any(bad):
        i = first_bad_index(bad)
        raise NumericalInvariantViolation(f"Non-physical {side} face pressure {p[i]:.6e}", cell=i)


class HLLCFlux(FluxScheme):
    """
    HLLC approximate Riemann solver with Davis wave-speed estimates.

    Resolves the contact discontinuity, so material interfaces with a jump
    in gamma are carried without any explicit interface treatment.
    """

    def compute_flux_vectorized(self, UL: np.ndarray, UR: np.ndarray,
                                gammaL: np.ndarray, gammaR: np.ndarray) -> Tuple[np.ndarray, float]:
        n_vars, n_faces = UL.shape

        # Left state
        rhoL = UL[0]
        uL = UL[1] / rhoL
        EL = UL[2]
        pL = (gammaL - 1) * (EL - 0.5 * rhoL * uL**2)
        _check_side(rhoL, pL, 'left')
        aL = np.sqrt(gammaL * pL / rhoL)

        # Right state
        rhoR = UR[0]
        uR = UR[1] / rhoR
        ER = UR[2]
        pR = (gammaR - 1) * (ER - 0.5 * rhoR * uR**2)
        _check_side(rhoR, pR, 'right')
        aR = np.sqrt(gammaR * pR / rhoR)

        # Davis wave speed estimates
        SL = np.minimum(uL - aL, uR - aR)
        SR = np.maximum(uL + aL, uR + aR)

        # Contact wave speed
        denom = rhoL * (SL - uL) - rhoR * (SR - uR)
        bad = ~(np.isfinite(denom) & (denom != 0))
        if np.any(bad):
            i = first_bad_index(bad)
            raise NumericalInvariantViolation("Degenerate HLLC contact-speed denominator", cell=i)
        SM = (pR - pL + rhoL * uL * (SL - uL) - rhoR * uR * (SR - uR)) / denom

        # Wave structure masks
        mask_left = SL >= 0
        mask_star_left = ~mask_left & (SM >= 0)
        mask_star_right = ~mask_left & ~mask_star_left & (SR >= 0)
        mask_right = ~mask_left & ~mask_star_left & ~mask_star_right

        F = np.zeros((n_vars, n_faces))

        # Supersonic to the right: physical left flux
        if np.any(mask_left):
            r, u, p, E = rhoL[mask_left], uL[mask_left], pL[mask_left], EL[mask_left]
            F[0, mask_left] = r * u
            F[1, mask_left] = r * u * u + p
            F[2, mask_left] = u * (E + p)

        # Supersonic to the left: physical right flux
        if np.any(mask_right):
            r, u, p, E = rhoR[mask_right], uR[mask_right], pR[mask_right], ER[mask_right]
            F[0, mask_right] = r * u
            F[1, mask_right] = r * u * u + p
            F[2, mask_right] = u * (E + p)

        if np.any(mask_star_left):
            F[:, mask_star_left] = self._star_flux(
                rhoL[mask_star_left], uL[mask_star_left], pL[mask_star_left],
                EL[mask_star_left], SL[mask_star_left], SM[mask_star_left],
                np.flatnonzero(mask_star_left))

        if np.any(mask_star_right):
            F[:, mask_star_right] = self._star_flux(
                rhoR[mask_star_right], uR[mask_star_right], pR[mask_star_right],
                ER[mask_star_right], SR[mask_star_right], SM[mask_star_right],
                np.flatnonzero(mask_star_right))

        max_wave_speed = float(np.max(np.maximum(np.abs(SL), np.abs(SR))))
        if not np.isfinite(max_wave_speed):
            raise NumericalInvariantViolation("Non-finite wave speed estimate")

        return F, max_wave_speed

    @staticmethod
    def _star_flux(rho, u, p, E, S, SM, faces) -> np.ndarray:
        """
        Flux through the star region on one side of the contact.

        S is the outer wave speed on that side (SL or SR); faces are the
        global face indices, used only for error reporting.
        """
        dS = S - SM
        bad = dS == 0
        if np.any(bad):
            raise NumericalInvariantViolation("Degenerate HLLC star state (S = S*)",
                                              cell=int(faces[first_bad_index(bad)]))

        p_star = p + rho * (S - u) * (SM - u)
        rho_star = rho * (S - u) / dS
        E_star = rho_star * (E / rho + (SM - u) * (SM + p / (rho * (S - u))))

        F = np.empty((3, len(rho)))
        F[0] = rho_star * SM
        F[1] = rho_star * SM * SM + p_star
        F[2] = SM * (E_star + p_star)

        bad = ~np.all(np.isfinite(F), axis=0)
        if np.any(bad):
            raise NumericalInvariantViolation("Non-finite HLLC star flux",
                                              cell=int(faces[first_bad_index(bad)]))
        return F
