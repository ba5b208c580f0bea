"""
Common utilities and infrastructure for the Goode Homolosine projection library.

This package provides foundational components used across all modules:
- Projection constants and lobe tables
- Error hierarchy
- Immutable coordinate types
- Unit conversion for projection parameters
- Logging and transform tracing
"""

from common.constants import ProjectionConstants
from common.errors import (
    ProjectionError,
    DomainError,
    ConvergenceError,
    ConfigurationError,
)
from common.types import (
    GeographicPoint,
    PlanarPoint,
    Hemisphere,
    Branch,
    LobeSelection,
)
from common.units import ureg, Q_, to_radians, to_meters
from common.logging_config import get_logger, TraceEvent, TraceRecorder

__all__ = [
    "ProjectionConstants",
    "ProjectionError",
    "DomainError",
    "ConvergenceError",
    "ConfigurationError",
    "GeographicPoint",
    "PlanarPoint",
    "Hemisphere",
    "Branch",
    "LobeSelection",
    "ureg",
    "Q_",
    "to_radians",
    "to_meters",
    "get_logger",
    "TraceEvent",
    "TraceRecorder",
]
