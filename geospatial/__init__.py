"""
Geospatial Module for the Goode Homolosine Projection Library.

This module provides:
- Reference surface models and longitude normalisation
- Sinusoidal and Mollweide unit-sphere projections
- Lobe tables and lobe selection for interrupted projections
- The interrupted Goode Homolosine composite
- Map projection adapters with distortion tracking
"""

from geospatial.coordinate_models import (
    EllipsoidParameters,
    WGS84Ellipsoid,
    UnitSphere,
    normalize_longitude,
    sphere_radius,
)

from geospatial.pseudocylindrical import (
    Sinusoidal,
    Mollweide,
)

from geospatial.lobes import (
    LobeTable,
    select_lobe,
)

from geospatial.homolosine import (
    NORTH_LOBES,
    SOUTH_LOBES,
    SeamCorrector,
    Homolosine,
)

from geospatial.projections import (
    PARAMETER_NAMES,
    PROJECTIONS,
    ProjectionParameters,
    ProjectionAdapter,
    SinusoidalProjection,
    MollweideProjection,
    HomolosineProjection,
    ProjHomolosine,
    TissotIndicatrix,
    create_projection,
    compute_tissot_indicatrix,
    batch_project,
)

__all__ = [
    # Coordinate models
    "EllipsoidParameters",
    "WGS84Ellipsoid",
    "UnitSphere",
    "normalize_longitude",
    "sphere_radius",
    # Sub-projections
    "Sinusoidal",
    "Mollweide",
    # Lobes
    "LobeTable",
    "select_lobe",
    # Homolosine
    "NORTH_LOBES",
    "SOUTH_LOBES",
    "SeamCorrector",
    "Homolosine",
    # Projections
    "PARAMETER_NAMES",
    "PROJECTIONS",
    "ProjectionParameters",
    "ProjectionAdapter",
    "SinusoidalProjection",
    "MollweideProjection",
    "HomolosineProjection",
    "ProjHomolosine",
    "TissotIndicatrix",
    "create_projection",
    "compute_tissot_indicatrix",
    "batch_project",
]
