"""
Shared test fixtures for pytest.

Provides projection instances on the unit sphere and on an Earth-sized
sphere, plus a trace recorder wired into a projection.
"""

import numpy as np
import pytest

from common.logging_config import TraceRecorder
from geospatial.homolosine import Homolosine
from geospatial.projections import HomolosineProjection, ProjectionParameters

EARTH_RADIUS_M = 6_371_000.0


@pytest.fixture
def homolosine():
    """Unit-sphere homolosine with the default lobe tables."""
    return Homolosine()


@pytest.fixture
def recorder():
    """Empty trace recorder."""
    return TraceRecorder()


@pytest.fixture
def traced_homolosine(recorder):
    """Unit-sphere homolosine reporting to `recorder`."""
    return Homolosine(tracer=recorder)


@pytest.fixture
def earth_parameters():
    """Earth-sized sphere with a shifted central meridian and false origin."""
    return ProjectionParameters.sphere(
        EARTH_RADIUS_M,
        central_meridian=float(np.radians(11.0)),
        false_easting=500_000.0,
        false_northing=-200_000.0,
    )


@pytest.fixture
def earth_homolosine(earth_parameters):
    """Homolosine adapter on an Earth-sized sphere."""
    return HomolosineProjection(earth_parameters)


@pytest.fixture
def interior_points():
    """(lam, phi) pairs in radians, offset from every interruption and the seam."""
    step_deg, margin_deg = 7.5, 0.25
    lons = np.arange(-180.0 + margin_deg, 180.0, step_deg)
    lats = np.arange(-89.0 + margin_deg, 89.0, step_deg)
    lon_grid, lat_grid = np.meshgrid(np.radians(lons), np.radians(lats))
    return list(zip(lon_grid.ravel(), lat_grid.ravel()))
