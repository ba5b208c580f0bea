"""
Constants for the Interrupted Goode Homolosine Projection.

This module provides the fixed geometry of the homolosine construction:
the latitude at which the Sinusoidal band gives way to the Mollweide caps,
the interruption meridians of both hemispheres, and the numerical budgets
of the iterative solvers. All values are traceable to their sources.

References
----------
- Goode, J.P. (1925). The Homolosine projection: a new device for
  portraying the Earth's surface entire. Annals of the AAG, 15(3), 119-125.
- Snyder, J.P. (1987). Map Projections - A Working Manual. USGS Prof. Paper 1395.
- PROJ, `igh` operation (Interrupted Goode Homolosine).
"""

from dataclasses import dataclass
from typing import Final, Tuple
import numpy as np


@dataclass(frozen=True)
class Constant:
    """A projection constant with provenance.

    Attributes
    ----------
    value : float
        The nominal value of the constant.
    uncertainty : float
        The standard uncertainty (1-sigma) of the constant.
    unit : str
        The unit of the constant.
    source : str
        Reference for the constant value.
    description : str
        Human-readable description of the constant.
    """
    value: float
    uncertainty: float
    unit: str
    source: str
    description: str


def dms_to_degrees(degrees: float, minutes: float = 0.0, seconds: float = 0.0) -> float:
    """Convert a sexagesimal angle to decimal degrees."""
    return degrees + minutes / 60.0 + seconds / 3600.0


class ProjectionConstants:
    """Registry of constants used by the homolosine construction.

    Seam Latitude
    -------------
    The Sinusoidal and Mollweide projections have the same scale along
    the parallel at 40°44'11.8"; Goode joins them there.

    Interruptions
    -------------
    Each hemisphere is cut along a fixed set of meridians. The boundary
    tuples are strictly increasing and span the whole longitude range;
    every lobe between two consecutive boundaries has its own central
    meridian.
    """

    # =========================================================================
    # Angular constants
    # =========================================================================

    PI: Final[float] = np.pi
    HALF_PI: Final[float] = np.pi / 2.0
    TWO_PI: Final[float] = 2.0 * np.pi
    SQRT2: Final[float] = np.sqrt(2.0)

    # =========================================================================
    # WGS84 Ellipsoid Parameters (default projection parameters)
    # Reference: NIMA TR8350.2, Third Edition, 2000
    # =========================================================================

    EARTH_SEMI_MAJOR_AXIS: Final[Constant] = Constant(
        value=6_378_137.0,
        uncertainty=0.0,  # Defined exactly
        unit="m",
        source="WGS84, NIMA TR8350.2",
        description="Semi-major axis (equatorial radius) of WGS84 ellipsoid"
    )

    EARTH_FLATTENING: Final[Constant] = Constant(
        value=1.0 / 298.257223563,
        uncertainty=0.0,  # Defined exactly
        unit="dimensionless",
        source="WGS84, NIMA TR8350.2",
        description="Flattening of WGS84 ellipsoid: f = (a - b) / a"
    )

    # =========================================================================
    # Seam latitude
    # Reference: Goode (1925)
    # =========================================================================

    LAT_THRESH: Final[Constant] = Constant(
        value=np.radians(dms_to_degrees(40, 44, 11.8)),
        uncertainty=0.0,  # Defined exactly
        unit="rad",
        source="Goode (1925); PROJ igh",
        description="Latitude separating the Sinusoidal band from the Mollweide caps"
    )

    # =========================================================================
    # Interruption tables (degrees)
    # =========================================================================

    INTERRUPTIONS_NORTH_DEG: Final[Tuple[float, ...]] = (-180.0, -40.0, 180.0)
    CENTRAL_MERIDIANS_NORTH_DEG: Final[Tuple[float, ...]] = (-100.0, 30.0)

    INTERRUPTIONS_SOUTH_DEG: Final[Tuple[float, ...]] = (-180.0, -100.0, -20.0, 80.0, 180.0)
    CENTRAL_MERIDIANS_SOUTH_DEG: Final[Tuple[float, ...]] = (-160.0, -60.0, 20.0, 140.0)

    # =========================================================================
    # Numerical budgets
    # =========================================================================

    # Newton iteration on the Mollweide auxiliary angle; near the poles the
    # root is almost triple and convergence degrades to linear (ratio 2/3).
    MOLLWEIDE_MAX_ITERATIONS: Final[int] = 50
    MOLLWEIDE_STEP_TOLERANCE: Final[float] = 1e-12
    MOLLWEIDE_RESIDUAL_TOLERANCE: Final[float] = 1e-15

    # Slack on lobe edges when validating inverse results
    LOBE_EDGE_TOLERANCE: Final[float] = 1e-10

    # Slack when comparing table spans to [-pi, pi]
    TABLE_SPAN_TOLERANCE: Final[float] = 1e-12

    @staticmethod
    def radians(values_deg: Tuple[float, ...]) -> Tuple[float, ...]:
        """Convert a table of degrees to a tuple of radians.

        The table ends are snapped to exactly -pi / pi so that the
        longitude range is covered without rounding gaps.
        """
        values = tuple(float(np.radians(v)) for v in values_deg)
        return tuple(
            -np.pi if v_deg == -180.0 else np.pi if v_deg == 180.0 else v
            for v, v_deg in zip(values, values_deg)
        )
