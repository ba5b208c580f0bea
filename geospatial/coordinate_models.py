"""
Coordinate Models for the Reference Surface.

The homolosine construction is defined on a sphere. Configuration,
however, is usually expressed as an ellipsoid (semi-major and semi-minor
axes). This module holds the ellipsoid description, picks the sphere
radius used to scale unit-sphere output, and normalises longitudes to
the principal range expected by the lobe tables.

References
----------
- NIMA TR8350.2: WGS84 parameters
- Snyder, J.P. (1987). Map Projections - A Working Manual, p. 243-248.
"""

from dataclasses import dataclass
from typing import Union
import numpy as np
from numpy.typing import NDArray

from common.constants import ProjectionConstants


@dataclass(frozen=True)
class EllipsoidParameters:
    """Parameters defining a reference ellipsoid.

    Attributes
    ----------
    a : float
        Semi-major axis (equatorial radius) in meters.
    f : float
        Flattening: f = (a - b) / a
    name : str
        Identifier for the ellipsoid.

    Derived Parameters
    ------------------
    b : float
        Semi-minor axis (polar radius) in meters.
    """
    a: float
    f: float
    name: str

    @property
    def b(self) -> float:
        """Semi-minor axis in meters."""
        return self.a * (1 - self.f)

    @property
    def is_sphere(self) -> bool:
        return self.f == 0.0

    @classmethod
    def from_axes(cls, a: float, b: float, name: str = "custom") -> "EllipsoidParameters":
        """Build an ellipsoid from its two semi-axes."""
        return cls(a=a, f=(a - b) / a, name=name)


# WGS84 ellipsoid - the default configuration
WGS84Ellipsoid = EllipsoidParameters(
    a=ProjectionConstants.EARTH_SEMI_MAJOR_AXIS.value,
    f=ProjectionConstants.EARTH_FLATTENING.value,
    name="WGS84"
)

# The sphere all projection primitives work on
UnitSphere = EllipsoidParameters(a=1.0, f=0.0, name="unit sphere")


def sphere_radius(ellipsoid: EllipsoidParameters) -> float:
    """Radius of the sphere used for a spherical-only projection.

    Notes
    -----
    The homolosine has no ellipsoidal form; like PROJ's `igh`, the
    equatorial radius (semi-major axis) is used as the sphere radius.
    """
    return ellipsoid.a


def normalize_longitude(
    longitude_rad: Union[float, NDArray[np.float64]]
) -> Union[float, NDArray[np.float64]]:
    """Wrap longitudes into the principal range [-π, π].

    Values already inside the range are returned unchanged (no round-off
    is introduced), so ±π stay on their own side of the antimeridian.

    Parameters
    ----------
    longitude_rad : float or ndarray
        Longitude(s) in radians.

    Returns
    -------
    float or ndarray
        Longitude(s) in [-π, π].
    """
    pi = ProjectionConstants.PI
    two_pi = ProjectionConstants.TWO_PI

    if np.ndim(longitude_rad) == 0:
        lon = float(longitude_rad)
        if -pi <= lon <= pi:
            return lon
        return (lon + pi) % two_pi - pi

    lon = np.asarray(longitude_rad, dtype=np.float64)
    outside = np.abs(lon) > pi
    wrapped = np.where(outside, np.mod(lon + pi, two_pi) - pi, lon)
    return wrapped
