"""
Pytest tests for the HLLC flux engine.

Tests verify:
1. Consistency: identical states give the physical Euler flux
2. Reflective walls carry no mass or energy flux
3. Sod's problem: wave speed estimates against the exact solution
4. Material contacts at rest with a gamma jump stay at rest
5. Non-physical states are rejected
"""

import numpy as np
import pytest

from shocktube import HLLCFlux, NumericalInvariantViolation, ReflectiveWallBC
from shocktube.src.reconstruction import face_states
from shocktube.tests.shock_tube import SOD_LEFT, SOD_RIGHT, star_state


def conservative(rho, u, p, gamma):
    return np.array([rho, rho * u, p / (gamma - 1) + 0.5 * rho * u**2])


def euler_flux(rho, u, p, gamma):
    E = p / (gamma - 1) + 0.5 * rho * u**2
    return np.array([rho * u, rho * u**2 + p, u * (E + p)])


@pytest.fixture
def hllc():
    return HLLCFlux()


class TestConsistency:
    """The numerical flux reduces to the physical flux for uniform states."""

    @pytest.mark.parametrize('u', [0.0, 50.0, -80.0, 600.0, -600.0])
    def test_identical_states(self, hllc, u):
        U = conservative(1.2, u, 101325.0, 1.4)
        F, _ = hllc.compute_flux(U, U, 1.4, 1.4)
        np.testing.assert_allclose(F, euler_flux(1.2, u, 101325.0, 1.4), rtol=1e-12, atol=1e-9)

    def test_max_wave_speed_uniform(self, hllc):
        rho, u, p, gamma = 1.2, 100.0, 101325.0, 1.4
        U = conservative(rho, u, p, gamma)
        _, s_max = hllc.compute_flux(U, U, gamma, gamma)
        a = np.sqrt(gamma * p / rho)
        assert s_max == pytest.approx(abs(u) + a, rel=1e-12)

    def test_supersonic_upwinding(self, hllc):
        """All waves moving right: the left physical flux is used."""
        UL = conservative(1.0, 1000.0, 1e5, 1.4)
        UR = conservative(0.5, 900.0, 5e4, 1.4)
        F, _ = hllc.compute_flux(UL, UR, 1.4, 1.4)
        np.testing.assert_allclose(F, euler_flux(1.0, 1000.0, 1e5, 1.4), rtol=1e-12)


class TestReflectiveWall:
    """Wall faces must not let mass or energy through."""

    @pytest.mark.parametrize('u', [0.0, 120.0, -250.0])
    def test_zero_mass_flux(self, hllc, u):
        bc = ReflectiveWallBC()
        U = conservative(1.1, u, 2e5, 1.4).reshape(3, 1)
        UL, UR, gL, gR = face_states(U, np.array([1.4]), bc)
        F, _ = hllc.compute_flux_vectorized(UL, UR, gL, gR)
        assert F[0, 0] == 0.0
        assert F[2, 0] == 0.0
        assert F[0, 1] == 0.0
        assert F[2, 1] == 0.0

    def test_ghost_state_reverses_momentum(self):
        bc = ReflectiveWallBC()
        U = np.array([[1.0, 2.0], [3.0, -4.0], [5.0, 6.0]])
        np.testing.assert_array_equal(bc.apply(U, 'left'), [1.0, -3.0, 5.0])
        np.testing.assert_array_equal(bc.apply(U, 'right'), [2.0, 4.0, 6.0])

    def test_face_states_shape(self):
        U = np.ones((3, 10))
        UL, UR, gL, gR = face_states(U, np.full(10, 1.4), ReflectiveWallBC())
        assert UL.shape == (3, 11)
        assert UR.shape == (3, 11)
        assert gL.shape == (11,)
        assert gR.shape == (11,)


class TestSodWaveSpeeds:
    """A single flux evaluation across Sod's diaphragm (pressure ratio 10)."""

    def test_rarefaction_head_speed(self, hllc):
        UL = conservative(*SOD_LEFT, 1.4)
        UR = conservative(*SOD_RIGHT, 1.4)
        F, s_max = hllc.compute_flux(UL, UR, 1.4, 1.4)

        exact = star_state(SOD_LEFT, SOD_RIGHT, 1.4)
        # Davis estimate SL = uL - aL is the exact head of the rarefaction
        assert s_max == pytest.approx(abs(exact['head']), rel=0.02)

    def test_contact_side_flux(self, hllc):
        """The contact moves right, so the left star flux is selected."""
        gamma = 1.4
        UL = conservative(*SOD_LEFT, gamma)
        UR = conservative(*SOD_RIGHT, gamma)
        F, _ = hllc.compute_flux(UL, UR, gamma, gamma)

        rho_L, u_L, p_L = SOD_LEFT
        rho_R, u_R, p_R = SOD_RIGHT
        a_L = np.sqrt(gamma * p_L / rho_L)
        a_R = np.sqrt(gamma * p_R / rho_R)
        SL = min(u_L - a_L, u_R - a_R)
        SR = max(u_L + a_L, u_R + a_R)
        SM = (p_R - p_L + rho_L * u_L * (SL - u_L) - rho_R * u_R * (SR - u_R)) / \
             (rho_L * (SL - u_L) - rho_R * (SR - u_R))

        assert SM > 0
        # Mass flux through the face equals rho*_L * S*
        rho_star = rho_L * (SL - u_L) / (SL - SM)
        assert F[0] == pytest.approx(rho_star * SM, rel=1e-12)
        assert F[0] > 0


class TestMaterialContact:
    """Pressure-equilibrium contact with different gamma on each side."""

    def test_contact_at_rest(self, hllc):
        p = 101325.0
        UL = conservative(1.18, 0.0, p, 1.4)
        UR = conservative(0.16, 0.0, p, 1.667)
        F, _ = hllc.compute_flux(UL, UR, 1.4, 1.667)
        assert F[0] == pytest.approx(0.0, abs=1e-12)
        assert F[1] == pytest.approx(p, rel=1e-12)
        assert F[2] == pytest.approx(0.0, abs=1e-6)

    def test_gamma_affects_wave_speed(self, hllc):
        p, rho = 101325.0, 1.0
        U = conservative(rho, 0.0, p, 1.4)
        _, s_air = hllc.compute_flux(U, U, 1.4, 1.4)
        U = conservative(rho, 0.0, p, 1.667)
        _, s_he = hllc.compute_flux(U, U, 1.667, 1.667)
        assert s_he / s_air == pytest.approx(np.sqrt(1.667 / 1.4), rel=1e-12)


class TestInvariantViolations:
    """Non-physical face states are reported, never propagated as NaN."""

    def test_negative_density(self, hllc):
        UL = np.array([-1.0, 0.0, 2.5e5])
        UR = conservative(1.0, 0.0, 1e5, 1.4)
        with pytest.raises(NumericalInvariantViolation) as info:
            hllc.compute_flux(UL, UR, 1.4, 1.4)
        assert info.value.cell == 0

    def test_negative_pressure(self, hllc):
        # Kinetic energy exceeds total energy
        UL = np.array([1.0, 1000.0, 1.0])
        UR = conservative(1.0, 0.0, 1e5, 1.4)
        with pytest.raises(NumericalInvariantViolation):
            hllc.compute_flux(UL, UR, 1.4, 1.4)

    def test_reports_face_index(self, hllc):
        U = np.tile(conservative(1.0, 0.0, 1e5, 1.4)[:, None], (1, 5))
        U[2, 3] = np.nan
        UL, UR, gL, gR = face_states(U, np.full(5, 1.4), ReflectiveWallBC())
        with pytest.raises(NumericalInvariantViolation) as info:
            hllc.compute_flux_vectorized(UL, UR, gL, gR)
        # Cell 3 is the right state of face 3 and the left state of face 4
        assert info.value.cell in (3, 4)
