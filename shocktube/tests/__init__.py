"""
Test cases for the 1D shock tube solver.

Run tests with pytest:
    pytest shocktube/tests/ -v

Or run individual test files:
    pytest shocktube/tests/test_flux.py -v
    pytest shocktube/tests/test_solver.py -v
"""

from .shock_tube import sod_slabs, exact_riemann_solution, star_state

__all__ = [
    'sod_slabs',
    'exact_riemann_solution',
    'star_state',
]
