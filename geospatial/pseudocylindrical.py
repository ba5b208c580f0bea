"""
Sinusoidal and Mollweide Projections on the Unit Sphere.

These two equal-area pseudocylindrical projections are the building blocks
of the homolosine. Both work on the unit sphere, centred on local meridian
0, and share one contract:

- ``transform(lam, phi) -> (x, y)``
- ``inverse(x, y) -> (lam, phi)``

Both raise `DomainError` for out-of-domain input; the Mollweide forward
transform raises `ConvergenceError` if its Newton solve runs out of
iterations.

Scientific Context
------------------
Sinusoidal:  x = λ cos φ,  y = φ  (closed form both ways)

Mollweide:   x = (2√2/π) λ cos θ,  y = √2 sin θ
             where 2θ + sin 2θ = π sin φ

The Mollweide auxiliary angle θ has no closed form and is found by
Newton's method; the inverse is closed form because y gives θ directly.

References
----------
- Snyder, J.P. (1987). Map Projections - A Working Manual. USGS Prof.
  Paper 1395, p. 243-257.
"""

from typing import Tuple
import numpy as np

from common.constants import ProjectionConstants
from common.errors import ConvergenceError, DomainError


_PI = ProjectionConstants.PI
_HALF_PI = ProjectionConstants.HALF_PI
_SQRT2 = ProjectionConstants.SQRT2


def _check_latitude(phi: float, projection: str) -> None:
    if not -_HALF_PI <= phi <= _HALF_PI:
        raise DomainError(
            "Latitude outside [-π/2, π/2]",
            context={"projection": projection, "phi": phi},
        )


class Sinusoidal:
    """Sinusoidal (Sanson-Flamsteed) projection on the unit sphere.

    The equator and the central meridian are true to scale; every parallel
    is a straight line of true length.
    """

    name = "Sinusoidal"

    def transform(self, lam: float, phi: float) -> Tuple[float, float]:
        _check_latitude(phi, self.name)
        return float(lam * np.cos(phi)), float(phi)

    def inverse(self, x: float, y: float) -> Tuple[float, float]:
        phi = float(y)
        abs_phi = abs(phi)

        if abs_phi < _HALF_PI:
            return float(x / np.cos(phi)), phi
        if abs_phi - 1e-10 < _HALF_PI:
            # At the pole every longitude maps to x = 0
            return 0.0, float(np.copysign(_HALF_PI, phi))

        raise DomainError(
            "Planar y beyond the pole",
            context={"projection": self.name, "x": x, "y": y},
        )

    def x_scale(self, y: float) -> float:
        """dx/dλ along the parallel through planar `y`."""
        return float(np.cos(min(abs(y), _HALF_PI)))


class Mollweide:
    """Mollweide (homalographic) projection on the unit sphere.

    Parameters
    ----------
    max_iterations : int
        Newton iteration budget for the auxiliary angle.
    step_tolerance : float
        Convergence threshold on the Newton step (radians).
    residual_tolerance : float
        Convergence threshold on the equation residual. Near the poles the
        root becomes almost triple and the step never drops below
        `step_tolerance` in double precision; the residual does.
    """

    name = "Mollweide"

    C_X = 2.0 * _SQRT2 / _PI
    C_Y = _SQRT2

    def __init__(
        self,
        max_iterations: int = ProjectionConstants.MOLLWEIDE_MAX_ITERATIONS,
        step_tolerance: float = ProjectionConstants.MOLLWEIDE_STEP_TOLERANCE,
        residual_tolerance: float = ProjectionConstants.MOLLWEIDE_RESIDUAL_TOLERANCE
    ):
        self.max_iterations = max_iterations
        self.step_tolerance = step_tolerance
        self.residual_tolerance = residual_tolerance

    def auxiliary_angle(self, phi: float) -> float:
        """Solve 2θ + sin 2θ = π sin φ for θ.

        Parameters
        ----------
        phi : float
            Latitude in radians.

        Returns
        -------
        float
            Auxiliary angle θ in radians, same sign as `phi`.

        Raises
        ------
        ConvergenceError
            If the solve does not converge within `max_iterations`.
        """
        _check_latitude(phi, self.name)

        abs_phi = abs(phi)
        if abs_phi == _HALF_PI:
            return float(np.copysign(_HALF_PI, phi))

        # Work on the positive half; f(t) = t + sin t - π sin|φ| is increasing
        # and concave on [0, π], so Newton from t = |φ| approaches the root
        # monotonically from below.
        target = _PI * np.sin(abs_phi)
        t = abs_phi
        for _ in range(self.max_iterations):
            residual = t + np.sin(t) - target
            if abs(residual) <= self.residual_tolerance:
                break
            step = residual / (1.0 + np.cos(t))
            t = min(t - step, _PI)
            if abs(step) < self.step_tolerance:
                break
        else:
            raise ConvergenceError(
                f"Auxiliary angle did not converge in {self.max_iterations} iterations",
                context={"projection": self.name, "phi": phi, "last_estimate": t / 2.0},
            )

        return float(np.copysign(t / 2.0, phi))

    def transform(self, lam: float, phi: float) -> Tuple[float, float]:
        theta = self.auxiliary_angle(phi)
        x = self.C_X * lam * np.cos(theta)
        y = self.C_Y * np.sin(theta)
        return float(x), float(y)

    def inverse(self, x: float, y: float) -> Tuple[float, float]:
        ratio = y / self.C_Y
        if abs(ratio) > 1.0:
            if abs(ratio) - 1e-12 > 1.0:
                raise DomainError(
                    "Planar y outside the Mollweide ellipse",
                    context={"projection": self.name, "x": x, "y": y},
                )
            ratio = float(np.copysign(1.0, ratio))

        theta = np.arcsin(ratio)
        cos_theta = np.cos(theta)
        phi = np.arcsin(np.clip((2.0 * theta + np.sin(2.0 * theta)) / _PI, -1.0, 1.0))

        if abs(cos_theta) < 1e-15:
            lam = 0.0
        else:
            lam = x / (self.C_X * cos_theta)

        return float(lam), float(phi)

    def x_scale(self, y: float) -> float:
        """dx/dλ along the parallel through planar `y`.

        Goes to zero at the poles, where a rounding error in `y` is
        amplified in the recovered longitude.
        """
        ratio = min(abs(y) / self.C_Y, 1.0)
        return float(self.C_X * np.sqrt(1.0 - ratio * ratio))
