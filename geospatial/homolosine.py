"""
Interrupted Goode Homolosine Projection.

The homolosine joins two equal-area projections at the latitude where
their parallels have the same length: Sinusoidal between ±40°44'11.8",
Mollweide poleward of it. The globe is cut along fixed meridians (over
the oceans) and every lobe is projected around its own central meridian,
then shifted into place on the shared map.

Pipeline
--------
Forward:  hemisphere -> lobe -> local longitude -> branch by latitude
          -> sub-projection -> seam offset (Mollweide only)
          -> horizontal placement
Inverse:  hemisphere -> lobe by planar x -> undo placement
          -> branch by planar y -> undo seam offset (Mollweide only)
          -> sub-projection inverse -> restore longitude

All tables, thresholds and sub-projection instances are built once in the
constructor and never mutated afterwards, so one instance can be shared
between threads.

References
----------
- Goode, J.P. (1925). The Homolosine projection. Annals of the AAG, 15(3).
- Snyder, J.P. (1987). Map Projections - A Working Manual.
"""

from typing import Callable, Optional, Tuple

from common.constants import ProjectionConstants
from common.errors import DomainError, ProjectionError
from common.logging_config import TraceEvent, get_logger
from common.types import Branch, GeographicPoint, Hemisphere, LobeSelection, PlanarPoint
from geospatial.lobes import LobeTable, select_lobe
from geospatial.pseudocylindrical import Mollweide, Sinusoidal

logger = get_logger(__name__)

Tracer = Callable[[TraceEvent], None]


NORTH_LOBES = LobeTable.from_degrees(
    "north",
    ProjectionConstants.INTERRUPTIONS_NORTH_DEG,
    ProjectionConstants.CENTRAL_MERIDIANS_NORTH_DEG,
)

SOUTH_LOBES = LobeTable.from_degrees(
    "south",
    ProjectionConstants.INTERRUPTIONS_SOUTH_DEG,
    ProjectionConstants.CENTRAL_MERIDIANS_SOUTH_DEG,
)


class SeamCorrector:
    """Vertical seam offset and horizontal lobe placement.

    Parameters
    ----------
    sinusoidal : Sinusoidal
        Equatorial sub-projection.
    mollweide : Mollweide
        Polar sub-projection.
    lat_threshold : float
        Seam latitude in radians.

    Attributes
    ----------
    moll_offset : float
        Mollweide y minus Sinusoidal y at the seam latitude. Subtracting
        it from northern Mollweide output (adding it in the south) makes
        the two branches meet without a step.
    north_threshold : float
        Planar y of the seam latitude; the inverse compares |y| against it.
    """

    def __init__(self, sinusoidal: Sinusoidal, mollweide: Mollweide, lat_threshold: float):
        self._sinusoidal = sinusoidal

        _, sinu_y = sinusoidal.transform(0.0, lat_threshold)
        _, moll_y = mollweide.transform(0.0, lat_threshold)

        self.lat_threshold = lat_threshold
        self.north_threshold = sinu_y
        self.moll_offset = moll_y - sinu_y

    def vertical_offset(self, hemisphere: Hemisphere) -> float:
        """+moll_offset in the north, -moll_offset in the south."""
        return hemisphere.value * self.moll_offset

    def horizontal_shift(self, central_meridian: float) -> float:
        """Map x of a lobe's central meridian.

        This is where the lobe's local origin sits in the assembled map.
        """
        x, _ = self._sinusoidal.transform(central_meridian, 0.0)
        return x


class Homolosine:
    """Interrupted Goode Homolosine on the unit sphere.

    Parameters
    ----------
    north_lobes, south_lobes : LobeTable, optional
        Interruption tables. Default to Goode's land-oriented cuts.
    lat_threshold : float, optional
        Seam latitude in radians.
    mollweide : Mollweide, optional
        Polar sub-projection (e.g. with a custom iteration budget).
    tracer : callable, optional
        Called with a `TraceEvent` for every successful transform.

    Raises
    ------
    ConfigurationError
        If a lobe table does not partition [-π, π].

    Examples
    --------
    >>> projection = Homolosine()
    >>> projection.transform(0.0, 0.0)
    (0.0, 0.0)
    """

    def __init__(
        self,
        north_lobes: LobeTable = NORTH_LOBES,
        south_lobes: LobeTable = SOUTH_LOBES,
        lat_threshold: float = ProjectionConstants.LAT_THRESH.value,
        mollweide: Optional[Mollweide] = None,
        tracer: Optional[Tracer] = None
    ):
        north_lobes.validate_geographic()
        south_lobes.validate_geographic()

        self._sinusoidal = Sinusoidal()
        self._mollweide = mollweide or Mollweide()
        self._seam = SeamCorrector(self._sinusoidal, self._mollweide, lat_threshold)
        self._tracer = tracer

        self._lobes = {Hemisphere.NORTH: north_lobes, Hemisphere.SOUTH: south_lobes}
        self._planar_lobes = {
            hemisphere: table.mapped(
                self._seam.horizontal_shift, name=f"{table.name} (planar)"
            )
            for hemisphere, table in self._lobes.items()
        }
        self._max_y = ProjectionConstants.SQRT2 - self._seam.moll_offset

        logger.debug(
            f"Homolosine ready: lat_thresh={lat_threshold:.10f} rad, "
            f"north_thresh={self._seam.north_threshold:.10f}, "
            f"moll_offset={self._seam.moll_offset:.10f}"
        )

    @property
    def seam(self) -> SeamCorrector:
        return self._seam

    @property
    def lat_threshold(self) -> float:
        return self._seam.lat_threshold

    @property
    def north_threshold(self) -> float:
        return self._seam.north_threshold

    @property
    def moll_offset(self) -> float:
        return self._seam.moll_offset

    def lobe_table(self, hemisphere: Hemisphere, planar: bool = False) -> LobeTable:
        tables = self._planar_lobes if planar else self._lobes
        return tables[hemisphere]

    def select_lobe(self, hemisphere: Hemisphere, coordinate: float, planar: bool = False) -> LobeSelection:
        """Lobe owning a longitude (or planar x when `planar`) in a hemisphere."""
        return select_lobe(self.lobe_table(hemisphere, planar), coordinate)

    def branch_for_latitude(self, phi: float) -> Branch:
        if abs(phi) > self._seam.lat_threshold:
            return Branch.MOLLWEIDE
        return Branch.SINUSOIDAL

    def branch_for_y(self, y: float) -> Branch:
        if abs(y) > self._seam.north_threshold:
            return Branch.MOLLWEIDE
        return Branch.SINUSOIDAL

    def transform(self, lam: float, phi: float) -> Tuple[float, float]:
        """Project a point on the unit sphere.

        Parameters
        ----------
        lam : float
            Longitude in radians, in [-π, π].
        phi : float
            Latitude in radians, in [-π/2, π/2].

        Returns
        -------
        Tuple[float, float]
            (x, y) in unit-sphere units.

        Raises
        ------
        DomainError
            If the point is outside the valid range.
        ProjectionError
            If a sub-projection fails (e.g. `ConvergenceError`).
        """
        if not -ProjectionConstants.HALF_PI <= phi <= ProjectionConstants.HALF_PI:
            raise DomainError("Latitude outside [-π/2, π/2]", context={"lam": lam, "phi": phi})

        hemisphere = Hemisphere.of(phi)
        lobe = self.select_lobe(hemisphere, lam)
        lam_local = lam - lobe.central_meridian
        branch = self.branch_for_latitude(phi)

        try:
            if branch is Branch.MOLLWEIDE:
                x, y = self._mollweide.transform(lam_local, phi)
                y -= self._seam.vertical_offset(hemisphere)
            else:
                x, y = self._sinusoidal.transform(lam_local, phi)
        except ProjectionError as e:
            e.context.update(hemisphere=hemisphere.name, lobe=lobe.index)
            raise

        x += self._seam.horizontal_shift(lobe.central_meridian)

        self._trace("forward", hemisphere, lobe, branch, (lam, phi), (x, y))
        return x, y

    def inverse(self, x: float, y: float) -> Tuple[float, float]:
        """Recover geographic coordinates from a unit-sphere map point.

        Parameters
        ----------
        x, y : float
            Planar coordinates in unit-sphere units.

        Returns
        -------
        Tuple[float, float]
            (lam, phi) in radians.

        Raises
        ------
        DomainError
            If the point is off the map: beyond the poles, outside the
            lobe tables, or inside an interruption.
        """
        if not abs(y) <= self._max_y + 1e-12:
            raise DomainError("Planar y beyond the poles", context={"x": x, "y": y})

        hemisphere = Hemisphere.of(y)
        lobe = self.select_lobe(hemisphere, self._snap_to_map_edge(hemisphere, x), planar=True)
        x_local = x - self._seam.horizontal_shift(lobe.central_meridian)
        branch = self.branch_for_y(y)

        if branch is Branch.MOLLWEIDE:
            sub_projection = self._mollweide
            y_local = y + self._seam.vertical_offset(hemisphere)
        else:
            sub_projection = self._sinusoidal
            y_local = y

        try:
            lam_local, phi = sub_projection.inverse(x_local, y_local)
        except ProjectionError as e:
            e.context.update(hemisphere=hemisphere.name, lobe=lobe.index)
            raise

        lam = lam_local + lobe.central_meridian

        left, right = self._lobes[hemisphere].lobe_extent(lobe.index)
        slack = self._edge_slack(sub_projection.x_scale(y_local))
        if not left - slack <= lam <= right + slack:
            raise DomainError(
                "Planar point falls inside an interruption",
                context={
                    "x": x,
                    "y": y,
                    "hemisphere": hemisphere.name,
                    "lobe": lobe.index,
                    "lam": lam,
                },
            )
        lam = min(max(lam, left), right)

        self._trace("inverse", hemisphere, lobe, branch, (x, y), (lam, phi))
        return lam, phi

    def transform_point(self, point: GeographicPoint) -> PlanarPoint:
        """Forward transform of a range-checked `GeographicPoint`."""
        return PlanarPoint(*self.transform(point.longitude, point.latitude))

    def inverse_point(self, point: PlanarPoint) -> GeographicPoint:
        """Inverse transform returning a `GeographicPoint`."""
        lam, phi = self.inverse(point.x, point.y)
        return GeographicPoint(longitude=lam, latitude=phi)

    def _edge_slack(self, x_scale: float) -> float:
        # Longitude slack matching LOBE_EDGE_TOLERANCE in planar x; it widens
        # towards the poles, where x_scale goes to zero
        tolerance = ProjectionConstants.LOBE_EDGE_TOLERANCE
        return tolerance / max(x_scale, tolerance)

    def _snap_to_map_edge(self, hemisphere: Hemisphere, x: float) -> float:
        # Points on the outer meridians can land a few ulps past the map edge
        boundaries = self._planar_lobes[hemisphere].boundaries
        left, right = boundaries[0], boundaries[-1]
        slack = ProjectionConstants.LOBE_EDGE_TOLERANCE
        if left - slack <= x < left:
            return left
        if right < x <= right + slack:
            return right
        return x

    def _trace(
        self,
        direction: str,
        hemisphere: Hemisphere,
        lobe: LobeSelection,
        branch: Branch,
        source: Tuple[float, float],
        result: Tuple[float, float]
    ) -> None:
        if self._tracer is None:
            return
        self._tracer(
            TraceEvent(
                direction=direction,
                hemisphere=hemisphere.name,
                lobe_index=lobe.index,
                central_meridian=lobe.central_meridian,
                branch=branch.value,
                source=source,
                result=result,
            )
        )
