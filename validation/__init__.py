"""
Validation Framework for the Goode Homolosine Projection Library.

This module provides runtime consistency checks for configured projections.
"""

from validation.projection_checks import (
    ValidationResult,
    ProjectionConsistencyChecker,
    summarize_results,
)

__all__ = [
    "ValidationResult",
    "ProjectionConsistencyChecker",
    "summarize_results",
]
