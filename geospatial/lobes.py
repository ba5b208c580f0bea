"""
Lobe Tables and Lobe Selection for Interrupted Projections.

An interrupted projection cuts the map along a few meridians; each strip
between two cuts (a lobe) is projected around its own central meridian.
A `LobeTable` holds the cut positions of one hemisphere and the central
meridian of each lobe. `select_lobe` finds the lobe owning a coordinate.

Boundary Convention
-------------------
Lobes are closed on the left and open on the right: a coordinate exactly
on an interior cut belongs to the lobe that STARTS at that cut. The last
boundary is inclusive, so the right end of the table (+π) belongs to the
last lobe rather than to no lobe at all.
"""

from dataclasses import dataclass
from typing import Callable, Tuple
import numpy as np

from common.constants import ProjectionConstants
from common.errors import ConfigurationError, DomainError
from common.types import LobeSelection


@dataclass(frozen=True)
class LobeTable:
    """Interruption boundaries and central meridians of one hemisphere.

    Attributes
    ----------
    name : str
        Identifier used in error messages (e.g. 'north').
    boundaries : tuple of float
        Strictly increasing cut positions, one more than the lobes.
    central_meridians : tuple of float
        Central meridian of each lobe in radians.

    Raises
    ------
    ConfigurationError
        On count mismatch, non-finite values or non-increasing boundaries.
    """
    name: str
    boundaries: Tuple[float, ...]
    central_meridians: Tuple[float, ...]

    def __post_init__(self):
        object.__setattr__(self, "boundaries", tuple(float(b) for b in self.boundaries))
        object.__setattr__(
            self, "central_meridians", tuple(float(c) for c in self.central_meridians)
        )

        context = {"table": self.name}
        if len(self.central_meridians) == 0:
            raise ConfigurationError("Lobe table has no lobes", context=context)
        if len(self.boundaries) != len(self.central_meridians) + 1:
            raise ConfigurationError(
                f"Lobe table needs {len(self.central_meridians) + 1} boundaries "
                f"for {len(self.central_meridians)} central meridians, "
                f"got {len(self.boundaries)}",
                context=context,
            )
        values = np.asarray(self.boundaries + self.central_meridians)
        if not np.all(np.isfinite(values)):
            raise ConfigurationError("Lobe table contains non-finite values", context=context)
        if np.any(np.diff(self.boundaries) <= 0):
            raise ConfigurationError(
                "Lobe boundaries must be strictly increasing",
                context={**context, "boundaries": self.boundaries},
            )

    @property
    def lobe_count(self) -> int:
        return len(self.central_meridians)

    def lobe_extent(self, index: int) -> Tuple[float, float]:
        """(left, right) boundary of a lobe."""
        return self.boundaries[index], self.boundaries[index + 1]

    def validate_geographic(
        self,
        tolerance: float = ProjectionConstants.TABLE_SPAN_TOLERANCE
    ) -> None:
        """Check that the table partitions the full longitude range.

        Raises
        ------
        ConfigurationError
            If the boundaries do not span [-π, π] or a central meridian
            lies outside its own lobe.
        """
        pi = ProjectionConstants.PI
        if abs(self.boundaries[0] + pi) > tolerance or abs(self.boundaries[-1] - pi) > tolerance:
            raise ConfigurationError(
                "Lobe boundaries must span [-π, π]",
                context={"table": self.name, "boundaries": self.boundaries},
            )
        for index, meridian in enumerate(self.central_meridians):
            left, right = self.lobe_extent(index)
            if not left <= meridian <= right:
                raise ConfigurationError(
                    "Central meridian outside its lobe",
                    context={"table": self.name, "lobe": index, "central_meridian": meridian},
                )

    def mapped(self, func: Callable[[float], float], name: str) -> "LobeTable":
        """Table with every boundary passed through `func`.

        Central meridians are kept as they are, so a lookup in the mapped
        table still yields a geographic central meridian.
        """
        return LobeTable(
            name=name,
            boundaries=tuple(func(b) for b in self.boundaries),
            central_meridians=self.central_meridians,
        )

    @classmethod
    def from_degrees(
        cls,
        name: str,
        boundaries_deg: Tuple[float, ...],
        central_meridians_deg: Tuple[float, ...]
    ) -> "LobeTable":
        return cls(
            name=name,
            boundaries=ProjectionConstants.radians(boundaries_deg),
            central_meridians=ProjectionConstants.radians(central_meridians_deg),
        )


def select_lobe(table: LobeTable, coordinate: float) -> LobeSelection:
    """Find the lobe owning a coordinate.

    Parameters
    ----------
    table : LobeTable
        Hemisphere table (geographic for longitudes, planar for x).
    coordinate : float
        Longitude in radians or planar x in unit-sphere units.

    Returns
    -------
    LobeSelection
        Central meridian and zero-based index of the lobe.

    Raises
    ------
    DomainError
        If the coordinate is NaN or outside the table's range.

    Notes
    -----
    The lobe is the one ending at the first boundary strictly greater than
    `coordinate`. The final boundary is inclusive.
    """
    boundaries = table.boundaries
    if not boundaries[0] <= coordinate <= boundaries[-1]:
        raise DomainError(
            "Coordinate outside lobe table",
            context={
                "table": table.name,
                "coordinate": coordinate,
                "range": (boundaries[0], boundaries[-1]),
            },
        )

    position = int(np.searchsorted(boundaries, coordinate, side="right"))
    index = min(position, table.lobe_count) - 1

    return LobeSelection(central_meridian=table.central_meridians[index], index=index)
