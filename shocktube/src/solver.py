"""
Main solver class for the 1D multi-material shock tube.
"""

import logging
import time as wallclock
import numpy as np
import matplotlib.pyplot as plt
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence, Union

from .errors import ConfigurationError, NumericalInvariantViolation
from .gas import GasSlab, RegionTable
from .mesh import Mesh1D
from .state import FlowState, ConservedBuffers
from .flux import FluxScheme, HLLCFlux
from .boundary import ReflectiveWallBC
from .reconstruction import face_states
from .timestepping import SNAPSHOT_TOLERANCE, create_integrator, normalize_integrator_name
from .interface import MixedCellTracker, GhostFluidTracker, create_tracker, normalize_interface_method
from .tracers import Tracer, TracerSet
from .snapshots import Snapshot, SnapshotStore, downsample_xt

logger = logging.getLogger(__name__)


@dataclass
class SolverConfig:
    """Configuration for the shock tube solver."""
    nx: int = 500                     # Number of grid cells
    cfl: float = 0.4
    final_time: float = 0.02          # [s]
    snapshot_interval: float = 1e-4   # Physical time between snapshots [s]
    interface_method: str = 'sharp'   # Options: 'sharp', 'ghost', 'mixed'
    integrator: str = 'RK2'           # Options: 'RK2', 'SSP'
    progress_interval: float = 0.1    # Wall-clock seconds between progress callbacks
    log_interval: int = 1000          # Steps between debug log lines

    def validate(self):
        """Raise ConfigurationError for any invalid parameter."""
        self.integrator = normalize_integrator_name(self.integrator)
        self.interface_method = normalize_interface_method(self.interface_method)

        if isinstance(self.nx, bool) or not isinstance(self.nx, (int, np.integer)) or self.nx < 2:
            raise ConfigurationError(f"nx must be an integer >= 2, got {self.nx!r}")

        cfl_max = 2.0 if self.integrator == 'SSP' else 1.0
        if not np.isfinite(self.cfl) or not 0 < self.cfl <= cfl_max:
            raise ConfigurationError(f"CFL must be in (0, {cfl_max}] for {self.integrator}, "
                                     f"got {self.cfl}")
        if not np.isfinite(self.final_time) or self.final_time <= 0:
            raise ConfigurationError(f"final_time must be positive, got {self.final_time}")
        if not np.isfinite(self.snapshot_interval) or self.snapshot_interval <= 0:
            raise ConfigurationError(f"snapshot_interval must be positive, got {self.snapshot_interval}")
        if self.progress_interval < 0:
            raise ConfigurationError(f"progress_interval must be non-negative, got {self.progress_interval}")
        if self.log_interval < 1:
            raise ConfigurationError(f"log_interval must be at least 1, got {self.log_interval}")
        return self


@dataclass
class SolverResults:
    """Everything a run produces."""
    x: np.ndarray
    time: float
    rho: np.ndarray
    u: np.ndarray
    p: np.ndarray
    T: np.ndarray
    snapshots: SnapshotStore
    tracers: List[Tracer]
    time_steps: int
    fallback_count: int = 0
    interface_cells: np.ndarray = field(default_factory=lambda: np.zeros(0, dtype=int))


class ShockTubeSolver:
    """
    1D multi-material shock tube solver.

    Features:
    - Euler equations with per-cell gas properties
    - HLLC flux with reflective walls at both ends
    - RK2 or SSPRK(4,3) time integration
    - Sharp, ghost-fluid or mixed-cell interface tracking
    - Lagrangian interface tracers
    - Snapshots at a fixed physical cadence, hit exactly
    """

    def __init__(self, config: SolverConfig = None, flux_scheme: FluxScheme = None):
        """
        Args:
            config: Solver configuration (validated immediately)
            flux_scheme: Numerical flux (HLLC by default)
        """
        self.config = (config if config is not None else SolverConfig()).validate()

        self.flux_scheme = flux_scheme if flux_scheme is not None else HLLCFlux()
        self.bc = ReflectiveWallBC()
        self.integrator = create_integrator(self.config.integrator)
        self.interface_tracker = create_tracker(self.config.interface_method)

        if self.config.cfl > self.integrator.cfl_recommended:
            logger.warning("CFL %.3g exceeds the recommended %.3g for %s",
                           self.config.cfl, self.integrator.cfl_recommended, self.integrator.name)

        # Set by initialize()
        self.mesh: Optional[Mesh1D] = None
        self.regions: Optional[RegionTable] = None
        self.buffers: Optional[ConservedBuffers] = None
        self.state: Optional[FlowState] = None
        self.tracers = TracerSet()
        self.snapshots = SnapshotStore()

        self.gamma = None
        self.molecular_weight = None
        self.gas_id = None

        self.time = 0.0
        self.dt = 0.0
        self.time_steps = 0
        # Scheduled snapshot k falls at k * snapshot_interval
        self.snapshot_index = 0
        self.next_snapshot_time = 0.0

    @property
    def initialized(self) -> bool:
        return self.buffers is not None

    def initialize(self, slabs: Sequence[Union[GasSlab, Dict]]):
        """
        Set up the grid and the initial condition from a list of gas slabs.

        Slabs are laid out left to right starting at x = 0, each at rest at
        its own pressure and temperature.
        """
        if slabs is None or len(slabs) == 0:
            raise ConfigurationError("At least one gas slab is required")
        slabs = [s if isinstance(s, GasSlab) else GasSlab.from_dict(s) for s in slabs]
        for i, slab in enumerate(slabs):
            slab.validate(i)

        nx = self.config.nx
        self.regions = RegionTable(slabs)
        self.mesh = Mesh1D.uniform(0.0, self.regions.total_length, nx)

        # Containing slab for each cell center
        slab_index = self.regions.region_at(self.mesh.x_cells)

        self.gamma = self.regions.gamma[slab_index].copy()
        self.molecular_weight = self.regions.molecular_weight[slab_index].copy()
        self.gas_id = self.regions.gas_id[slab_index].copy()

        pressure = np.array([s.pressure for s in slabs])[slab_index]
        density = np.array([s.density for s in slabs])[slab_index]

        self.buffers = ConservedBuffers(nx)
        U = self.buffers.current
        U[0] = density
        U[1] = 0.0
        U[2] = pressure / (self.gamma - 1)

        self.time = 0.0
        self.dt = 0.0
        self.time_steps = 0

        self.tracers = TracerSet.from_boundaries(self.regions.boundaries)
        self.interface_tracker.initialize(self, slabs)
        self.update_primitives()

        self.snapshots = SnapshotStore()
        self.capture_snapshot()
        self.snapshot_index = 1
        self.next_snapshot_time = self.config.snapshot_interval

    def compute_fluxes(self):
        """HLLC fluxes and max wave speed from the current buffer."""
        UL, UR, gammaL, gammaR = face_states(self.buffers.current, self.gamma, self.bc)
        return self.flux_scheme.compute_flux_vectorized(UL, UR, gammaL, gammaR)

    def update_primitives(self):
        self.state = FlowState.from_conservative(self.buffers.current, self.gamma,
                                                 self.molecular_weight, self.gas_id)

    def capture_snapshot(self):
        self.snapshots.append(Snapshot.capture(self.time, self.get_state()))
        logger.debug("Snapshot %d at t = %.6e s", len(self.snapshots), self.time)

    def get_state(self) -> FlowState:
        """Current primitive state, reporting the current per-cell gas properties."""
        return FlowState(rho=self.state.rho, u=self.state.u, p=self.state.p, T=self.state.T,
                         gamma=self.gamma, molecular_weight=self.molecular_weight,
                         gas_id=self.gas_id)

    def mass(self) -> float:
        """Total mass per unit area [kg/m²]."""
        return float(np.sum(self.buffers.current[0]) * self.mesh.dx)

    def total_energy(self) -> float:
        """Total energy per unit area [J/m²]."""
        return float(np.sum(self.buffers.current[2]) * self.mesh.dx)

    def _require_initialized(self):
        if not self.initialized:
            raise RuntimeError("initialize() must be called before stepping")

    def step(self) -> float:
        """
        Perform one time step.

        Returns:
            dt: Time step taken
        """
        self._require_initialized()
        try:
            return self.integrator.step(self)
        except NumericalInvariantViolation as exc:
            if exc.time is None:
                exc.time = self.time
            logger.error("Numerical invariant violated: %s", exc)
            raise

    def run(self, progress_callback: Callable[[float], None] = None,
            should_stop: Callable[[], bool] = None) -> SolverResults:
        """
        Advance to the final time.

        Args:
            progress_callback: Called with the completed fraction in [0, 1],
                at most every ``progress_interval`` seconds and finally with 1.0
            should_stop: Polled between steps; returning True ends the run early

        Returns:
            SolverResults
        """
        self._require_initialized()
        cfg = self.config

        logger.info("Starting shock tube run: cells=%d, CFL=%.3g, integrator=%s, interface=%s",
                    cfg.nx, cfg.cfl, self.integrator.name, self.interface_tracker.name)

        start = wallclock.perf_counter()
        last_progress = start
        stopped = False

        while self.time < cfg.final_time:
            if should_stop is not None and should_stop():
                stopped = True
                logger.info("Run stopped at t = %.6e s after %d steps", self.time, self.time_steps)
                break

            dt = self.step()

            if self.time_steps % cfg.log_interval == 0:
                logger.debug("Step %d, t = %.6e s, dt = %.4e s", self.time_steps, self.time, dt)

            now = wallclock.perf_counter()
            if progress_callback is not None and now - last_progress >= cfg.progress_interval:
                progress_callback(min(self.time / cfg.final_time, 1.0))
                last_progress = now

        if not stopped:
            # The schedule only lands on final_time when it is a multiple of the interval
            if self.snapshots.last.time < self.time - SNAPSHOT_TOLERANCE:
                self.capture_snapshot()
            if progress_callback is not None:
                progress_callback(1.0)

        elapsed = wallclock.perf_counter() - start
        logger.info("Run finished in %.2f s: %d steps, t = %.6e s, %d snapshots",
                    elapsed, self.time_steps, self.time, len(self.snapshots))

        return self.results()

    def results(self) -> SolverResults:
        self._require_initialized()
        tracker = self.interface_tracker
        return SolverResults(
            x=self.mesh.x_cells.copy(),
            time=self.time,
            rho=self.state.rho.copy(),
            u=self.state.u.copy(),
            p=self.state.p.copy(),
            T=self.state.T.copy(),
            snapshots=self.snapshots,
            tracers=list(self.tracers),
            time_steps=self.time_steps,
            fallback_count=tracker.fallback_count if isinstance(tracker, MixedCellTracker) else 0,
            interface_cells=(tracker.interface_cells.copy() if isinstance(tracker, GhostFluidTracker)
                             else np.zeros(0, dtype=int)),
        )

    def plot_solution(self, filename: str = None, show: bool = True):
        """Plot the current solution."""
        self._require_initialized()
        state = self.get_state()
        x = self.mesh.x_cells

        fig, axes = plt.subplots(3, 2, figsize=(10, 12))
        fig.suptitle(f'Shock Tube Solution (t = {self.time * 1000:.3f} ms, steps = {self.time_steps})')

        panels = [
            (state.rho, 'b-', 'Density [kg/m³]', 'Density'),
            (state.u, 'r-', 'Velocity [m/s]', 'Velocity'),
            (state.p / 1000, 'g-', 'Pressure [kPa]', 'Pressure'),
            (state.T, 'm-', 'Temperature [K]', 'Temperature'),
            (state.gamma, 'k-', 'γ', 'Ratio of Specific Heats'),
            (state.molecular_weight, 'c-', 'MW [kg/kmol]', 'Molecular Weight'),
        ]
        for ax, (values, style, ylabel, title) in zip(axes.flat, panels):
            ax.plot(x, values, style, linewidth=2)
            for tracer in self.tracers:
                ax.axvline(x=tracer.position, color='gray', linestyle=':', alpha=0.5)
            ax.set_xlabel('x [m]')
            ax.set_ylabel(ylabel)
            ax.set_title(title)
            ax.grid(True, alpha=0.3)

        plt.tight_layout()

        if filename:
            plt.savefig(filename, dpi=150, bbox_inches='tight')
            logger.info("Saved plot to %s", filename)

        if show:
            plt.show()
        return fig

    def plot_xt_diagram(self, variable: str = 'p', filename: str = None, log_scale: bool = False,
                        max_nt: int = 600, max_nx: int = 1000, show: bool = True):
        """
        Plot an x-t diagram of one snapshot field with the tracer trajectories.

        Large runs are block-averaged down to at most (max_nt, max_nx) samples.
        """
        self._require_initialized()
        times, data = downsample_xt(self.snapshots.times(), self.snapshots.field(variable),
                                    max_nt, max_nx)
        if log_scale:
            data = np.log10(np.maximum(data, np.finfo(float).tiny))

        fig, ax = plt.subplots(figsize=(10, 6))
        extent = [self.mesh.x_min, self.mesh.x_max, times[0] * 1000, times[-1] * 1000]
        image = ax.imshow(data, origin='lower', aspect='auto', extent=extent, cmap='inferno')
        label = {'p': 'Pressure [Pa]', 'rho': 'Density [kg/m³]', 'u': 'Velocity [m/s]',
                 'T': 'Temperature [K]', 'gamma': 'γ', 'molecular_weight': 'MW [kg/kmol]'}[variable]
        fig.colorbar(image, ax=ax, label=f'log10 {label}' if log_scale else label)

        for tracer in self.tracers:
            ax.plot(tracer.positions(), tracer.times() * 1000, 'c-', linewidth=1.5)

        ax.set_xlabel('x [m]')
        ax.set_ylabel('t [ms]')
        ax.set_title(f'x-t Diagram ({self.integrator.name}, {self.interface_tracker.name} interfaces)')

        if filename:
            plt.savefig(filename, dpi=150, bbox_inches='tight')
            logger.info("Saved x-t diagram to %s", filename)

        if show:
            plt.show()
        return fig
