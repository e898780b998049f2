"""
1D Multi-Material Shock Tube Solver
===================================

A finite volume solver for shock tubes filled with slabs of different
calorically perfect gases.

Features:
- Euler equations with per-cell gas properties (gamma, molecular weight)
- HLLC flux scheme with reflective walls
- RK2 and SSPRK(4,3) time integration
- Sharp, ghost-fluid and mixed-cell (volume fraction) interface tracking
- Lagrangian interface tracers
- Snapshots at a fixed physical cadence for x-t diagrams

State representation (conservative variables):
    rho   - density [kg/m³]
    rhoU  - momentum per volume [kg/(m²·s)]
    E     - total energy per volume [J/m³]

Example:
    config = SolverConfig(nx=500, cfl=0.4, final_time=0.02, integrator='RK2')
    solver = ShockTubeSolver(config)
    solver.initialize([
        GasSlab('air', gamma=1.4, molecular_weight=28.97,
                pressure=101325.0, temperature=300.0, length=6.0),
        GasSlab('helium', gamma=1.667, molecular_weight=4.003,
                pressure=400000.0, temperature=300.0, length=3.0),
    ])
    results = solver.run()
    pressure_xt = results.snapshots.field('p')
"""

from .errors import ShockTubeError, ConfigurationError, NumericalInvariantViolation
from .gas import RU, GasSlab, GasRegion, RegionTable
from .mesh import Mesh1D
from .state import FlowState, ConservedBuffers
from .flux import FluxScheme, HLLCFlux
from .boundary import ReflectiveWallBC
from .timestepping import (TimeIntegrator, RK2Integrator, SSPIntegrator,
                           create_integrator, available_integrators,
                           conservative_update, compute_timestep)
from .interface import (InterfaceTracker, SharpInterfaceTracker, GhostFluidTracker,
                        MixedCellTracker, create_tracker)
from .tracers import Tracer, TracerSet
from .snapshots import Snapshot, SnapshotStore, downsample_xt
from .solver import ShockTubeSolver, SolverConfig, SolverResults

__all__ = [
    # Errors
    'ShockTubeError',
    'ConfigurationError',
    'NumericalInvariantViolation',

    # Gas properties
    'RU',
    'GasSlab',
    'GasRegion',
    'RegionTable',

    # Grid and state
    'Mesh1D',
    'FlowState',
    'ConservedBuffers',

    # Flux and boundaries
    'FluxScheme',
    'HLLCFlux',
    'ReflectiveWallBC',

    # Time integration
    'TimeIntegrator',
    'RK2Integrator',
    'SSPIntegrator',
    'create_integrator',
    'available_integrators',
    'conservative_update',
    'compute_timestep',

    # Interface tracking
    'InterfaceTracker',
    'SharpInterfaceTracker',
    'GhostFluidTracker',
    'MixedCellTracker',
    'create_tracker',

    # Tracers and snapshots
    'Tracer',
    'TracerSet',
    'Snapshot',
    'SnapshotStore',
    'downsample_xt',

    # Solver
    'ShockTubeSolver',
    'SolverConfig',
    'SolverResults',
]

__version__ = '1.0.0'
