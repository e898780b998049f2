"""
Shock Tube Package - 1D Multi-Material Compressible Flow Solver
===============================================================

Re-exports all public components from shocktube.src
"""

from shocktube.src import (
    # Errors
    ShockTubeError,
    ConfigurationError,
    NumericalInvariantViolation,
    # Gas properties
    RU,
    GasSlab,
    GasRegion,
    RegionTable,
    # Grid and state
    Mesh1D,
    FlowState,
    ConservedBuffers,
    # Flux and boundaries
    FluxScheme,
    HLLCFlux,
    ReflectiveWallBC,
    # Time integration
    TimeIntegrator,
    RK2Integrator,
    SSPIntegrator,
    create_integrator,
    available_integrators,
    conservative_update,
    compute_timestep,
    # Interface tracking
    InterfaceTracker,
    SharpInterfaceTracker,
    GhostFluidTracker,
    MixedCellTracker,
    create_tracker,
    # Tracers and snapshots
    Tracer,
    TracerSet,
    Snapshot,
    SnapshotStore,
    downsample_xt,
    # Solver
    ShockTubeSolver,
    SolverConfig,
    SolverResults,
    __version__,
)

__all__ = [
    'ShockTubeError',
    'ConfigurationError',
    'NumericalInvariantViolation',
    'RU',
    'GasSlab',
    'GasRegion',
    'RegionTable',
    'Mesh1D',
    'FlowState',
    'ConservedBuffers',
    'FluxScheme',
    'HLLCFlux',
    'ReflectiveWallBC',
    'TimeIntegrator',
    'RK2Integrator',
    'SSPIntegrator',
    'create_integrator',
    'available_integrators',
    'conservative_update',
    'compute_timestep',
    'InterfaceTracker',
    'SharpInterfaceTracker',
    'GhostFluidTracker',
    'MixedCellTracker',
    'create_tracker',
    'Tracer',
    'TracerSet',
    'Snapshot',
    'SnapshotStore',
    'downsample_xt',
    'ShockTubeSolver',
    'SolverConfig',
    'SolverResults',
]
