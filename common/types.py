"""
Type Definitions for Projection Inputs and Outputs.

This module defines the immutable value types that flow between the lobe
selector, the sub-projections and the composite transform. Angles are in
RADIANS throughout; planar coordinates are in unit-sphere units unless a
projection adapter has applied its radius and false origin.

Design Rationale
----------------
Using frozen dataclasses instead of bare tuples provides:
1. Self-documenting code - field names describe the data
2. Values that can be shared between threads without copying
3. Runtime validation of coordinate ranges
"""

from dataclasses import dataclass
from enum import Enum
from typing import Tuple
import numpy as np

from common.errors import DomainError


class Hemisphere(int, Enum):
    """Hemisphere selector; the value is the sign used by the seam offset."""
    NORTH = 1
    SOUTH = -1

    @classmethod
    def of(cls, value: float) -> "Hemisphere":
        """Hemisphere of a latitude or planar y; zero counts as north."""
        return cls.NORTH if value >= 0 else cls.SOUTH


class Branch(str, Enum):
    """Sub-projection used for a point."""
    SINUSOIDAL = "sinusoidal"
    MOLLWEIDE = "mollweide"


@dataclass(frozen=True)
class GeographicPoint:
    """A geographic coordinate on the unit sphere.

    Attributes
    ----------
    longitude : float
        Longitude in RADIANS. Range: [-π, π].
    latitude : float
        Latitude in RADIANS. Range: [-π/2, π/2].

    Examples
    --------
    >>> point = GeographicPoint.from_degrees(-80.1918, 25.7617)
    >>> round(point.to_degrees()[1], 4)
    25.7617
    """
    longitude: float  # radians
    latitude: float  # radians

    def __post_init__(self):
        """Validate coordinate ranges."""
        if not -np.pi / 2 <= self.latitude <= np.pi / 2:
            raise DomainError(
                f"Latitude {self.latitude} rad out of range [-π/2, π/2]. "
                f"Did you pass degrees instead of radians?",
                context={"latitude": self.latitude},
            )
        if not -np.pi <= self.longitude <= np.pi:
            raise DomainError(
                f"Longitude {self.longitude} rad out of range [-π, π]",
                context={"longitude": self.longitude},
            )

    def to_degrees(self) -> Tuple[float, float]:
        """Return (longitude_degrees, latitude_degrees)."""
        return float(np.degrees(self.longitude)), float(np.degrees(self.latitude))

    @classmethod
    def from_degrees(cls, lon_deg: float, lat_deg: float) -> "GeographicPoint":
        """Create a point from degrees."""
        return cls(longitude=float(np.radians(lon_deg)), latitude=float(np.radians(lat_deg)))


@dataclass(frozen=True)
class PlanarPoint:
    """A projected coordinate.

    Attributes
    ----------
    x : float
        Easting, in unit-sphere units (or meters after scaling).
    y : float
        Northing, in unit-sphere units (or meters after scaling).
    """
    x: float
    y: float


@dataclass(frozen=True)
class LobeSelection:
    """Result of a lobe lookup.

    Attributes
    ----------
    central_meridian : float
        Central meridian of the lobe, in radians.
    index : int
        Zero-based lobe index within its hemisphere table.
    """
    central_meridian: float
    index: int
