"""
Gas slabs and the region table used for sharp interface tracking.

Each slab is a calorically perfect gas at rest, described by its ratio of
specific heats, molecular weight and initial pressure/temperature.
"""

import numpy as np
from dataclasses import dataclass
from typing import Dict, List, Sequence, Tuple

from .errors import ConfigurationError

RU = 8314.51  # Universal gas constant [J/(kmol·K)]


@dataclass
class GasSlab:
    """A contiguous slab of gas in the initial condition."""
    gas_id: str
    gamma: float                # Ratio of specific heats
    molecular_weight: float     # [kg/kmol]
    pressure: float             # [Pa]
    temperature: float          # [K]
    length: float               # [m]

    @property
    def R(self) -> float:
        """Specific gas constant [J/(kg·K)]."""
        return RU / self.molecular_weight

    @property
    def density(self) -> float:
        """Initial density from the ideal gas law [kg/m³]."""
        return self.pressure / (self.R * self.temperature)

    def validate(self, index: int = 0):
        """Raise ConfigurationError if any property is non-physical."""
        checks = [
            ('gamma', self.gamma, 1.0, 'greater than 1'),
            ('molecular_weight', self.molecular_weight, 0.0, 'positive'),
            ('pressure', self.pressure, 0.0, 'positive'),
            ('temperature', self.temperature, 0.0, 'positive'),
            ('length', self.length, 0.0, 'positive'),
        ]
        for name, value, bound, wording in checks:
            if not np.isfinite(value) or value <= bound:
                raise ConfigurationError(
                    f"Slab {index} ({self.gas_id!r}): {name} must be {wording}, got {value}")

    @classmethod
    def from_dict(cls, data: Dict) -> 'GasSlab':
        """
        Build a slab from a configurator-style mapping.

        Accepts both snake_case keys and the camelCase keys of exported
        slab configurations (``gasId``, ``mw`` / ``molecularWeight``).
        """
        try:
            return cls(
                gas_id=str(data.get('gas_id', data.get('gasId', ''))),
                gamma=float(data['gamma']),
                molecular_weight=float(data.get('molecular_weight',
                                                data.get('molecularWeight', data.get('mw')))),
                pressure=float(data['pressure']),
                temperature=float(data['temperature']),
                length=float(data['length']),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise ConfigurationError(f"Invalid slab definition {data!r}: {exc}") from exc


@dataclass(frozen=True)
class GasRegion:
    """Immutable gas properties over one slab's initial extent."""
    gamma: float
    molecular_weight: float
    gas_id: str
    x_left: float
    x_right: float


class RegionTable:
    """
    Maps spatial extents to gas properties, one region per slab.

    Regions are ordered left to right; region ``k`` lies between internal
    boundaries ``k-1`` and ``k``.
    """

    def __init__(self, slabs: Sequence[GasSlab]):
        regions = []
        x = 0.0
        for slab in slabs:
            regions.append(GasRegion(gamma=slab.gamma,
                                     molecular_weight=slab.molecular_weight,
                                     gas_id=slab.gas_id,
                                     x_left=x, x_right=x + slab.length))
            x += slab.length
        self.regions: Tuple[GasRegion, ...] = tuple(regions)
        self.total_length = x

        self.gamma = np.array([r.gamma for r in self.regions])
        self.molecular_weight = np.array([r.molecular_weight for r in self.regions])
        self.gas_id = np.array([r.gas_id for r in self.regions], dtype=object)

    def __len__(self) -> int:
        return len(self.regions)

    def __getitem__(self, index: int) -> GasRegion:
        return self.regions[index]

    @property
    def boundaries(self) -> List[float]:
        """Positions of the internal slab boundaries (len - 1 values)."""
        return [r.x_right for r in self.regions[:-1]]

    def region_at(self, x):
        """Index of the region whose initial extent contains x (scalar or array)."""
        ends = np.array([r.x_right for r in self.regions])
        return np.minimum(np.searchsorted(ends, x, side='right'), len(self.regions) - 1)

    def lookup(self, x_cells: np.ndarray, tracer_positions: np.ndarray) -> np.ndarray:
        """
        Region index for every cell given the current interface positions.

        A cell belongs to region k when exactly k tracers lie strictly below
        its center. The tracer list is re-sorted on every call since tracers
        may cross; binary search keeps this O(nx * log(n_tracers)).
        """
        positions = np.sort(np.asarray(tracer_positions, dtype=float))
        index = np.searchsorted(positions, x_cells, side='left')
        return np.clip(index, 0, len(self.regions) - 1)
