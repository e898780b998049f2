"""
Exceptions raised by the shock tube solver.
"""

from typing import Optional


class ShockTubeError(Exception):
    """Base class for all solver errors."""


class ConfigurationError(ShockTubeError, ValueError):
    """Invalid slab, grid, integrator or interface-method parameters.

    Always raised before the first time step is taken.
    """


class NumericalInvariantViolation(ShockTubeError, ArithmeticError):
    """
    Non-physical state detected during a step.

    Attributes:
        cell: Index of the offending cell (or face, for flux errors)
        time: Simulated time [s] at which the violation was detected
    """

    def __init__(self, message: str, cell: Optional[int] = None,
                 time: Optional[float] = None):
        super().__init__(message)
        self.message = message
        self.cell = cell
        self.time = time

    def __str__(self):
        where = []
        if self.cell is not None:
            where.append(f"cell {self.cell}")
        if self.time is not None:
            where.append(f"t = {self.time:.6e} s")
        if where:
            return f"{self.message} ({', '.join(where)})"
        return self.message
