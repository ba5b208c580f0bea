"""
Error Hierarchy for Projection Failures.

All failures are terminal for the call that raised them; none of them is
transient, so nothing in the library retries. Every error carries a
context dictionary (input point, sub-projection, lobe, hemisphere) that
is enough to diagnose the failure after the fact.

Taxonomy
--------
- DomainError: input outside the region covered by the lobe tables or
  by a sub-projection (also a ValueError).
- ConvergenceError: an iterative solve ran out of its iteration budget
  (also an ArithmeticError).
- ConfigurationError: malformed lobe tables or projection parameters,
  detected at construction time (also a ValueError).
"""

from typing import Any, Dict, Optional


class ProjectionError(Exception):
    """Base exception for all projection failures."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.context: Dict[str, Any] = dict(context or {})

    def __str__(self) -> str:
        if not self.context:
            return self.message
        details = ", ".join(f"{key}={value!r}" for key, value in self.context.items())
        return f"{self.message} ({details})"


class DomainError(ProjectionError, ValueError):
    """Coordinate outside the domain covered by a projection or lobe table."""


class ConvergenceError(ProjectionError, ArithmeticError):
    """Iterative solve did not converge within its iteration budget."""


class ConfigurationError(ProjectionError, ValueError):
    """Malformed lobe table or projection parameters."""
