"""
Map Projections with Distortion Tracking.

This module turns the unit-sphere projection cores into map projections
with real-world units: it applies the central meridian, the sphere radius
and the false origin from a `ProjectionParameters` set, and it quantifies
the distortion of any projection through Tissot's indicatrix.

Scientific Context
------------------
Domain: Cartography, mathematical geodesy
Model: Equal-area pseudocylindrical projections on a sphere

Projections Provided
--------------------
- Sinusoidal: equal-area, true scale along the equator and central meridian
- Mollweide: equal-area, elliptical world outline
- Homolosine: Goode's interrupted combination of the two
- ProjHomolosine: PROJ's `igh` through `pyproj`, as an independent reference

Parameters
----------
Every projection recognizes the same parameter names (`PARAMETER_NAMES`):
semi_major, semi_minor, central_meridian, false_easting, false_northing.
`create_projection` instantiates a projection by name from such a set.

References
----------
- Snyder, J.P. (1987). Map Projections - A Working Manual. USGS Prof. Paper 1395.
- Tissot, A. (1859). Mémoire sur la représentation des surfaces.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, ClassVar, Dict, Mapping, Optional, Tuple, Type
import numpy as np
from numpy.typing import NDArray

from pyproj import CRS, Transformer

from common.errors import ConfigurationError, DomainError, ProjectionError
from common.logging_config import get_logger
from common.units import STANDARD_UNITS, to_meters, to_radians
from geospatial.coordinate_models import (
    EllipsoidParameters,
    WGS84Ellipsoid,
    normalize_longitude,
    sphere_radius,
)
from geospatial.homolosine import Homolosine, Tracer
from geospatial.pseudocylindrical import Mollweide, Sinusoidal

logger = get_logger(__name__)


PARAMETER_NAMES: Tuple[str, ...] = (
    "semi_major",
    "semi_minor",
    "central_meridian",
    "false_easting",
    "false_northing",
)


@dataclass(frozen=True)
class ProjectionParameters:
    """Parameters shared by all projections in this module.

    Attributes
    ----------
    semi_major : float
        Semi-major axis in meters.
    semi_minor : float
        Semi-minor axis in meters.
    central_meridian : float
        Central meridian in RADIANS.
    false_easting : float
        Added to every x, in meters.
    false_northing : float
        Added to every y, in meters.
    """
    semi_major: float = WGS84Ellipsoid.a
    semi_minor: float = WGS84Ellipsoid.b
    central_meridian: float = 0.0
    false_easting: float = 0.0
    false_northing: float = 0.0

    def __post_init__(self):
        values = (
            self.semi_major, self.semi_minor, self.central_meridian,
            self.false_easting, self.false_northing,
        )
        if not all(np.isfinite(v) for v in values):
            raise ConfigurationError(
                "Projection parameters must be finite",
                context=dict(zip(PARAMETER_NAMES, values)),
            )
        if self.semi_major <= 0 or self.semi_minor <= 0:
            raise ConfigurationError(
                "Semi-axes must be positive",
                context={"semi_major": self.semi_major, "semi_minor": self.semi_minor},
            )
        if self.semi_minor > self.semi_major:
            raise ConfigurationError(
                "Semi-minor axis larger than semi-major axis",
                context={"semi_major": self.semi_major, "semi_minor": self.semi_minor},
            )

    @property
    def ellipsoid(self) -> EllipsoidParameters:
        return EllipsoidParameters.from_axes(self.semi_major, self.semi_minor)

    @classmethod
    def sphere(cls, radius: float = 1.0, **kwargs: float) -> "ProjectionParameters":
        """Parameters for a sphere of the given radius."""
        return cls(semi_major=radius, semi_minor=radius, **kwargs)

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> "ProjectionParameters":
        """Build parameters from named values.

        Parameters
        ----------
        mapping : Mapping[str, Any]
            Keys from `PARAMETER_NAMES`. Bare numbers are read in
            `STANDARD_UNITS` (central meridian in degrees, lengths in meters);
            pint quantities may use any compatible unit.

        Raises
        ------
        ConfigurationError
            On unknown names or incompatible units.
        """
        unknown = sorted(set(mapping) - set(PARAMETER_NAMES))
        if unknown:
            raise ConfigurationError(
                f"Unknown projection parameters: {', '.join(unknown)}",
                context={"recognized": PARAMETER_NAMES},
            )

        values: Dict[str, float] = {}
        for name, value in mapping.items():
            if name == "central_meridian":
                values[name] = to_radians(value, STANDARD_UNITS[name])
            else:
                values[name] = to_meters(value, STANDARD_UNITS[name])

        if "semi_major" in values and "semi_minor" not in values:
            values["semi_minor"] = values["semi_major"]

        return cls(**values)

    def as_proj4(self) -> str:
        return (
            f"+lon_0={np.degrees(self.central_meridian)} "
            f"+x_0={self.false_easting} +y_0={self.false_northing} "
            f"+R={sphere_radius(self.ellipsoid)} +units=m +no_defs"
        )


@dataclass
class TissotIndicatrix:
    """Local distortion ellipse of a projection at one point.

    A small circle on the sphere maps to an ellipse on the map; its axes
    and the scales along the graticule describe the distortion there.
    Along the homolosine interruptions the ellipse is undefined, so
    points must stay clear of them.

    Attributes
    ----------
    semi_major, semi_minor : float
        Maximum and minimum scale (axes of the ellipse).
    meridian_scale : float
        h, scale along the meridian.
    parallel_scale : float
        k, scale along the parallel.
    area_scale : float
        Ratio of map area to sphere area. 1 for every projection in
        this package.
    angular_distortion_rad : float
        Largest angle error at the point, in radians.
    """
    semi_major: float
    semi_minor: float
    meridian_scale: float  # h
    parallel_scale: float  # k
    area_scale: float
    angular_distortion_rad: float

    tolerance: ClassVar[float] = 1e-6

    @property
    def is_conformal(self) -> bool:
        return abs(self.semi_major - self.semi_minor) < self.tolerance

    @property
    def is_equal_area(self) -> bool:
        return abs(self.area_scale - 1.0) < self.tolerance


class ProjectionAdapter(ABC):
    """Map projection with real-world units.

    Subclasses take geographic coordinates in radians and return map
    coordinates in meters (and back), and report their radius so that
    distortion can be measured against the sphere.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable name of the projection."""
        pass

    @property
    @abstractmethod
    def proj4_string(self) -> str:
        """PROJ.4 definition string."""
        pass

    @property
    @abstractmethod
    def radius(self) -> float:
        """Radius of the sphere the projection is evaluated on, in meters."""
        pass

    @property
    @abstractmethod
    def preserves_angles(self) -> bool:
        """Whether this is a conformal projection."""
        pass

    @property
    @abstractmethod
    def preserves_area(self) -> bool:
        """Whether this is an equal-area projection."""
        pass

    @abstractmethod
    def to_projected(
        self,
        lat_rad: float,
        lon_rad: float
    ) -> Tuple[float, float]:
        """Transform geographic coordinates to projected coordinates.

        Parameters
        ----------
        lat_rad, lon_rad : float
            Geographic coordinates in radians.

        Returns
        -------
        Tuple[float, float]
            (x, y) projected coordinates in meters.
        """
        pass

    @abstractmethod
    def to_geodetic(
        self,
        x: float,
        y: float
    ) -> Tuple[float, float]:
        """Transform projected coordinates to geographic.

        Parameters
        ----------
        x, y : float
            Projected coordinates in meters.

        Returns
        -------
        Tuple[float, float]
            (lat_rad, lon_rad) geographic coordinates in radians.
        """
        pass

    def compute_distortion(
        self,
        lat_rad: float,
        lon_rad: float
    ) -> TissotIndicatrix:
        """Compute local distortion at a point.

        Parameters
        ----------
        lat_rad, lon_rad : float
            Location in geographic coordinates (radians).

        Returns
        -------
        TissotIndicatrix
            Local distortion characteristics.
        """
        return compute_tissot_indicatrix(self, lat_rad, lon_rad)


class SphericalProjection(ProjectionAdapter):
    """Common scaffolding for projections built on a unit-sphere core.

    The core receives longitudes relative to the central meridian and
    wrapped to [-π, π]; its output is scaled by the sphere radius and
    shifted by the false origin.

    Parameters
    ----------
    parameters : ProjectionParameters, optional
        Projection parameters (default: WGS84 axes, zero elsewhere).
    """

    proj_name = ""

    def __init__(self, parameters: Optional[ProjectionParameters] = None):
        self._params = parameters or ProjectionParameters()
        self._radius = sphere_radius(self._params.ellipsoid)
        self._proj4 = f"+proj={self.proj_name} {self._params.as_proj4()}"

        if not self._params.ellipsoid.is_sphere:
            logger.info(
                f"{self.name} is spherical; using semi-major axis "
                f"{self._radius:.3f} m as sphere radius"
            )

    @property
    @abstractmethod
    def core(self) -> Any:
        """Unit-sphere transform with `transform` and `inverse` methods."""
        pass

    @property
    def parameters(self) -> ProjectionParameters:
        return self._params

    @property
    def proj4_string(self) -> str:
        return self._proj4

    @property
    def radius(self) -> float:
        return self._radius

    @property
    def preserves_angles(self) -> bool:
        return False

    @property
    def preserves_area(self) -> bool:
        return True

    def to_projected(self, lat_rad: float, lon_rad: float) -> Tuple[float, float]:
        lam = normalize_longitude(lon_rad - self._params.central_meridian)
        x, y = self.core.transform(lam, lat_rad)
        return (
            self._radius * x + self._params.false_easting,
            self._radius * y + self._params.false_northing,
        )

    def to_geodetic(self, x: float, y: float) -> Tuple[float, float]:
        lam, phi = self.core.inverse(
            (x - self._params.false_easting) / self._radius,
            (y - self._params.false_northing) / self._radius,
        )
        return phi, normalize_longitude(lam + self._params.central_meridian)


class SinusoidalProjection(SphericalProjection):
    """Sinusoidal projection."""

    proj_name = "sinu"

    def __init__(self, parameters: Optional[ProjectionParameters] = None):
        self._core = Sinusoidal()
        super().__init__(parameters)

    @property
    def name(self) -> str:
        return f"Sinusoidal (CM={np.degrees(self._params.central_meridian):g}°)"

    @property
    def core(self) -> Sinusoidal:
        return self._core


class MollweideProjection(SphericalProjection):
    """Mollweide projection."""

    proj_name = "moll"

    def __init__(self, parameters: Optional[ProjectionParameters] = None):
        self._core = Mollweide()
        super().__init__(parameters)

    @property
    def name(self) -> str:
        return f"Mollweide (CM={np.degrees(self._params.central_meridian):g}°)"

    @property
    def core(self) -> Mollweide:
        return self._core


class HomolosineProjection(SphericalProjection):
    """Interrupted Goode Homolosine projection.

    Parameters
    ----------
    parameters : ProjectionParameters, optional
        Projection parameters.
    tracer : callable, optional
        Receives a `TraceEvent` for every transformed point.

    Notes
    -----
    Points inside the interruptions have no map position; `to_geodetic`
    raises `DomainError` for them.
    """

    proj_name = "igh"

    def __init__(
        self,
        parameters: Optional[ProjectionParameters] = None,
        tracer: Optional[Tracer] = None
    ):
        self._core = Homolosine(tracer=tracer)
        super().__init__(parameters)

    @property
    def name(self) -> str:
        return f"Goode Homolosine (CM={np.degrees(self._params.central_meridian):g}°)"

    @property
    def core(self) -> Homolosine:
        return self._core


class ProjHomolosine(ProjectionAdapter):
    """Interrupted Goode Homolosine computed by PROJ (`+proj=igh`).

    An independent implementation of the same projection, used to
    cross-check `HomolosineProjection`.

    Parameters
    ----------
    parameters : ProjectionParameters, optional
        Projection parameters.
    """

    def __init__(self, parameters: Optional[ProjectionParameters] = None):
        self._params = parameters or ProjectionParameters()
        self._radius = sphere_radius(self._params.ellipsoid)
        self._proj4 = f"+proj=igh {self._params.as_proj4()}"

        # Geographic CRS on the same sphere, so the transform is a pure projection
        self._crs_proj = CRS.from_proj4(self._proj4)
        self._crs_geo = self._crs_proj.geodetic_crs
        self._to_proj = Transformer.from_crs(self._crs_geo, self._crs_proj, always_xy=True)
        self._to_geo = Transformer.from_crs(self._crs_proj, self._crs_geo, always_xy=True)

    @property
    def name(self) -> str:
        return "Goode Homolosine (PROJ)"

    @property
    def proj4_string(self) -> str:
        return self._proj4

    @property
    def radius(self) -> float:
        return self._radius

    @property
    def preserves_angles(self) -> bool:
        return False

    @property
    def preserves_area(self) -> bool:
        return True

    def to_projected(self, lat_rad: float, lon_rad: float) -> Tuple[float, float]:
        lat_deg = np.degrees(lat_rad)
        lon_deg = np.degrees(lon_rad)
        x, y = self._to_proj.transform(lon_deg, lat_deg)
        return float(x), float(y)

    def to_geodetic(self, x: float, y: float) -> Tuple[float, float]:
        lon_deg, lat_deg = self._to_geo.transform(x, y)
        if not (np.isfinite(lon_deg) and np.isfinite(lat_deg)):
            raise DomainError("Point is not on the map", context={"x": x, "y": y})
        return float(np.radians(lat_deg)), float(np.radians(lon_deg))


PROJECTIONS: Dict[str, Type[SphericalProjection]] = {
    "Homolosine": HomolosineProjection,
    "Goode_Homolosine": HomolosineProjection,
    "Sinusoidal": SinusoidalProjection,
    "Mollweide": MollweideProjection,
}


def create_projection(
    name: str,
    parameters: Optional[Mapping[str, Any]] = None
) -> SphericalProjection:
    """Instantiate a projection by name.

    Parameters
    ----------
    name : str
        One of the keys of `PROJECTIONS` (case-insensitive).
    parameters : Mapping[str, Any], optional
        Named parameter values, see `ProjectionParameters.from_mapping`.

    Returns
    -------
    SphericalProjection
        The configured projection.

    Raises
    ------
    ConfigurationError
        If the name or a parameter is not recognized.
    """
    lookup = {key.lower(): cls for key, cls in PROJECTIONS.items()}
    projection_cls = lookup.get(name.lower())
    if projection_cls is None:
        raise ConfigurationError(
            f"Unknown projection '{name}'",
            context={"available": sorted(PROJECTIONS)},
        )

    params = ProjectionParameters.from_mapping(parameters or {})
    return projection_cls(params)


def compute_tissot_indicatrix(
    projection: ProjectionAdapter,
    lat_rad: float,
    lon_rad: float,
    delta: float = 1e-6
) -> TissotIndicatrix:
    """Compute Tissot's indicatrix numerically.

    This method differentiates the projection with central differences
    and derives the distortion ellipse from the partial derivatives.
    Works for any projection evaluated on a sphere.

    Parameters
    ----------
    projection : ProjectionAdapter
        The projection to analyze.
    lat_rad, lon_rad : float
        Location in geographic coordinates (radians). Must be at least
        `delta` away from interruptions and poles.
    delta : float
        Small angular offset for numerical differentiation.

    Returns
    -------
    TissotIndicatrix
        Local distortion characteristics.
    """
    # ∂x/∂λ, ∂y/∂λ (east-west)
    x_e, y_e = projection.to_projected(lat_rad, lon_rad + delta)
    x_w, y_w = projection.to_projected(lat_rad, lon_rad - delta)
    dxdl = (x_e - x_w) / (2 * delta)
    dydl = (y_e - y_w) / (2 * delta)

    # ∂x/∂φ, ∂y/∂φ (north-south)
    x_n, y_n = projection.to_projected(lat_rad + delta, lon_rad)
    x_s, y_s = projection.to_projected(lat_rad - delta, lon_rad)
    dxdp = (x_n - x_s) / (2 * delta)
    dydp = (y_n - y_s) / (2 * delta)

    R = projection.radius
    cos_lat = np.cos(lat_rad)

    # Scale along meridian (h) and parallel (k)
    h = np.sqrt(dxdp**2 + dydp**2) / R
    k = np.sqrt(dxdl**2 + dydl**2) / (R * cos_lat)

    # Area scale: h * k * sin θ' where θ' is the angle between meridian and parallel
    area_scale = np.abs(dxdp * dydl - dydp * dxdl) / (R**2 * cos_lat)

    # Axes of the indicatrix from h, k and θ'
    a_plus_b = np.sqrt(h**2 + k**2 + 2 * area_scale)
    a_minus_b = np.sqrt(max(h**2 + k**2 - 2 * area_scale, 0.0))
    semi_major = (a_plus_b + a_minus_b) / 2
    semi_minor = (a_plus_b - a_minus_b) / 2

    return TissotIndicatrix(
        semi_major=float(semi_major),
        semi_minor=float(semi_minor),
        meridian_scale=float(h),
        parallel_scale=float(k),
        area_scale=float(area_scale),
        angular_distortion_rad=float(2 * np.arcsin(a_minus_b / a_plus_b))
    )


def batch_project(
    projection: ProjectionAdapter,
    lats_rad: NDArray[np.float64],
    lons_rad: NDArray[np.float64],
    errors: str = "raise"
) -> Tuple[NDArray[np.float64], NDArray[np.float64]]:
    """Project arrays of coordinates.

    Parameters
    ----------
    projection : ProjectionAdapter
        Projection to use.
    lats_rad, lons_rad : ndarray
        Coordinates in radians, broadcast against each other.
    errors : str
        'raise' to propagate projection errors, 'nan' to mark failing
        points with NaN.

    Returns
    -------
    Tuple[ndarray, ndarray]
        (x, y) projected coordinates in meters.
    """
    if errors not in ("raise", "nan"):
        raise ValueError(f"errors must be 'raise' or 'nan', got {errors!r}")

    lats, lons = np.broadcast_arrays(
        np.asarray(lats_rad, dtype=np.float64),
        np.asarray(lons_rad, dtype=np.float64),
    )
    x = np.full(lats.shape, np.nan)
    y = np.full(lats.shape, np.nan)

    failures = 0
    for idx in np.ndindex(lats.shape):
        try:
            x[idx], y[idx] = projection.to_projected(float(lats[idx]), float(lons[idx]))
        except ProjectionError:
            if errors == "raise":
                raise
            failures += 1

    if failures:
        logger.warning(f"{projection.name}: {failures} of {lats.size} points could not be projected")

    return x, y
