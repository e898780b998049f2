"""
Time integration schemes and timestep computation.

Both integrators advance the solver's three conservative buffers in place:

    current - the solution, overwritten stage by stage
    saved   - the solution at the start of the step
    scratch - forward Euler update of the current stage

and share the same CFL/snapshot-synchronized step size policy and the same
post-step bookkeeping.
"""

import math
import numpy as np
from abc import ABC, abstractmethod
from typing import Dict, List, Tuple, Type

from .errors import ConfigurationError

# Tolerance for considering a snapshot instant reached [s]
SNAPSHOT_TOLERANCE = 1e-10

# Snapshot synchronization kicks in within this many CFL steps of the instant
SYNC_WINDOW = 2.5


def compute_fluxes(solver) -> Tuple[np.ndarray, float]:
    """
    Fluxes at all faces from the solver's current buffer.

    Returns:
        F: Face fluxes (3, n_cells + 1)
        max_wave_speed: Global maximum signal speed [m/s]
    """
    return solver.compute_fluxes()


def conservative_update(U_old: np.ndarray, F: np.ndarray, dt: float, dx: float,
                        out: np.ndarray) -> np.ndarray:
    """
    Finite volume update U_new = U_old - dt/dx * (F_right - F_left).

    The full result is formed before anything is written to ``out``, so
    ``out`` may be the same array as ``U_old``.

    Returns:
        out, holding U_new
    """
    U_new = U_old - (dt / dx) * (F[:, 1:] - F[:, :-1])
    out[...] = U_new
    return out


def compute_timestep(solver, max_wave_speed: float) -> float:
    """
    CFL time step, clamped to the final time and aligned to snapshot instants.

    When the next snapshot lies within SYNC_WINDOW steps, the step is shrunk
    so that an integer number of equal substeps lands on it exactly.
    """
    dt = solver.config.cfl * solver.mesh.dx / max_wave_speed

    # Don't overshoot the final time
    if solver.time + dt > solver.config.final_time:
        dt = solver.config.final_time - solver.time

    # The final instant takes over from any snapshot scheduled at or past it
    time_to_snapshot = min(solver.next_snapshot_time, solver.config.final_time) - solver.time
    if 0 < time_to_snapshot < SYNC_WINDOW * dt:
        n_substeps = max(1, math.ceil(time_to_snapshot / dt))
        dt = time_to_snapshot / n_substeps

    return dt


class TimeIntegrator(ABC):
    """Base class for the explicit multi-stage integrators."""

    name: str = ''
    cfl_recommended: float = 0.0
    order: int = 0
    stages: int = 0
    description: str = ''

    @abstractmethod
    def advance(self, solver, F: np.ndarray, dt: float):
        """
        Advance solver.buffers.current from t to t + dt.

        Args:
            solver: The shock tube solver
            F: Fluxes already evaluated at the start-of-step state
            dt: Time step
        """

    def step(self, solver) -> float:
        """
        Take one time step.

        Returns:
            dt: The time step used
        """
        F, max_wave_speed = compute_fluxes(solver)
        dt = compute_timestep(solver, max_wave_speed)
        self.advance(solver, F, dt)
        self.post_step(solver, dt)
        return dt

    def post_step(self, solver, dt: float):
        """Bookkeeping shared by all integrators once the state is advanced."""
        solver.dt = dt
        solver.time += dt
        if solver.config.final_time - solver.time < SNAPSHOT_TOLERANCE:
            solver.time = solver.config.final_time
        solver.time_steps += 1

        solver.update_primitives()
        solver.tracers.advect(solver.state.u, solver.mesh, solver.time, dt)
        solver.interface_tracker.update(solver, dt)

        if (abs(solver.time - solver.next_snapshot_time) < SNAPSHOT_TOLERANCE
                or solver.time > solver.next_snapshot_time):
            solver.capture_snapshot()
            solver.snapshot_index += 1
            solver.next_snapshot_time = solver.snapshot_index * solver.config.snapshot_interval

    def __repr__(self):
        return f"{type(self).__name__}(cfl_recommended={self.cfl_recommended})"


class RK2Integrator(TimeIntegrator):
    """
    Two-stage, second-order predictor-corrector (Heun / SSP-RK2).

        U*      = U^n + dt * L(U^n)
        U^{n+1} = 0.5 * U^n + 0.5 * (U* + dt * L(U*))
    """

    name = 'RK2'
    cfl_recommended = 0.4
    order = 2
    stages = 2
    description = '2nd-order Runge-Kutta'

    def advance(self, solver, F: np.ndarray, dt: float):
        buf = solver.buffers
        dx = solver.mesh.dx

        # Predictor
        buf.copy_current_to_saved()
        conservative_update(buf.saved, F, dt, dx, out=buf.current)

        # Corrector, flux re-evaluated at the predicted state
        F, _ = compute_fluxes(solver)
        conservative_update(buf.current, F, dt, dx, out=buf.scratch)

        buf.current[:] = 0.5 * buf.saved + 0.5 * buf.scratch


class SSPIntegrator(TimeIntegrator):
    """
    Four-stage, third-order strong stability preserving Runge-Kutta SSPRK(4,3).

    Gottlieb, Shu & Tadmor (2001), Shu-Osher form, with U~ the forward
    Euler update of each stage's input:

        U(1)    = U^n  + 0.5 * (U~ - U^n)
        U(2)    = U(1) + 0.5 * (U~ - U(1))
        U(3)    = 2/3 * U^n + 1/6 * U(2) + 1/6 * U~
        U^{n+1} = 0.5 * U(3) + 0.5 * U~

    SSP coefficient 2: total variation diminishing up to twice the forward
    Euler CFL limit.
    """

    name = 'SSP'
    cfl_recommended = 0.8
    order = 3
    stages = 4
    description = '3rd-order Strong Stability Preserving'

    def advance(self, solver, F: np.ndarray, dt: float):
        buf = solver.buffers
        dx = solver.mesh.dx
        U, Un, Uk = buf.current, buf.saved, buf.scratch

        buf.copy_current_to_saved()

        # Stage 1
        conservative_update(U, F, dt, dx, out=Uk)
        U[:] = U + 0.5 * (Uk - U)

        # Stage 2
        F, _ = compute_fluxes(solver)
        conservative_update(U, F, dt, dx, out=Uk)
        U[:] = U + 0.5 * (Uk - U)

        # Stage 3
        F, _ = compute_fluxes(solver)
        conservative_update(U, F, dt, dx, out=Uk)
        U[:] = (2.0 / 3.0) * Un + (1.0 / 6.0) * U + (1.0 / 6.0) * Uk

        # Stage 4
        F, _ = compute_fluxes(solver)
        conservative_update(U, F, dt, dx, out=Uk)
        U[:] = 0.5 * U + 0.5 * Uk


INTEGRATORS: Dict[str, Type[TimeIntegrator]] = {
    'RK2': RK2Integrator,
    'SSP': SSPIntegrator,
}


def normalize_integrator_name(name: str) -> str:
    """Canonical integrator name, or ConfigurationError if unknown."""
    key = str(name).upper()
    if key not in INTEGRATORS:
        raise ConfigurationError(f"Unknown integrator: {name!r}. "
                                 f"Options: {', '.join(INTEGRATORS)}")
    return key


def create_integrator(name: str) -> TimeIntegrator:
    """Instantiate an integrator by name ('RK2' or 'SSP')."""
    return INTEGRATORS[normalize_integrator_name(name)]()


def available_integrators() -> List[Dict]:
    return [
        {'name': cls.name, 'cfl': cls.cfl_recommended, 'description': cls.description}
        for cls in INTEGRATORS.values()
    ]
