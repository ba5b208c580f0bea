"""
Consistency Checks for the Homolosine Projection.

This module verifies at runtime that a configured projection obeys the
geometric properties the construction relies on.

Check Categories
----------------
1. Invertibility (inverse(forward(p)) recovers p)
2. Lobe coverage (every longitude belongs to exactly one lobe)
3. Seam continuity (no vertical step at the seam latitude)
4. Hemisphere symmetry of the seam offset
5. Region classification (inverse picks the forward branch)
6. Equal area (Tissot area scale is 1)
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence
import numpy as np

from common.errors import ProjectionError
from common.logging_config import get_logger
from common.types import Hemisphere
from geospatial.homolosine import Homolosine
from geospatial.projections import HomolosineProjection, ProjectionParameters

logger = get_logger(__name__)


# Sample grid offset by half a degree from every interruption and from the seam
DEFAULT_LONGITUDES_DEG = np.arange(-177.5, 180.0, 5.0)
DEFAULT_LATITUDES_DEG = np.arange(-87.5, 90.0, 5.0)


@dataclass
class ValidationResult:
    """Result of a validation check.

    Attributes
    ----------
    test_name : str
        Name of the test.
    passed : bool
        Whether the test passed.
    message : str
        Description of result.
    details : dict
        Additional details.
    """
    test_name: str
    passed: bool
    message: str
    details: Dict[str, Any]


class ProjectionConsistencyChecker:
    """Checker for geometric consistency of a Homolosine projection.

    Parameters
    ----------
    projection : HomolosineProjection, optional
        Projection to check (default: unit sphere).
    strict_mode : bool
        If True, raise `ProjectionError` on the first failed check.
    log_violations : bool
        Whether to log failed checks.
    """

    def __init__(
        self,
        projection: Optional[HomolosineProjection] = None,
        strict_mode: bool = False,
        log_violations: bool = True
    ):
        self.projection = projection or HomolosineProjection(ProjectionParameters.sphere())
        self.strict_mode = strict_mode
        self.log_violations = log_violations
        self._logger = get_logger("ProjectionConsistencyChecker")

    @property
    def core(self) -> Homolosine:
        return self.projection.core

    def check_all(
        self,
        longitudes_deg: Sequence[float] = DEFAULT_LONGITUDES_DEG,
        latitudes_deg: Sequence[float] = DEFAULT_LATITUDES_DEG
    ) -> List[ValidationResult]:
        """Run all checks.

        Parameters
        ----------
        longitudes_deg, latitudes_deg : sequence of float
            Sample grid. Keep it away from interruptions and the seam.

        Returns
        -------
        List[ValidationResult]
            Results of all checks.
        """
        results = [
            self.check_round_trip(longitudes_deg, latitudes_deg),
            self.check_lobe_coverage(),
            self.check_seam_continuity(longitudes_deg),
            self.check_hemisphere_symmetry(),
            self.check_region_classification(longitudes_deg, latitudes_deg),
            self.check_equal_area(longitudes_deg[::3], latitudes_deg[::3]),
        ]
        return results

    def check_round_trip(
        self,
        longitudes_deg: Sequence[float] = DEFAULT_LONGITUDES_DEG,
        latitudes_deg: Sequence[float] = DEFAULT_LATITUDES_DEG,
        tolerance: float = 1e-9
    ) -> ValidationResult:
        """Check that inverse(forward(λ, φ)) recovers (λ, φ)."""
        lam, phi = self._grid(longitudes_deg, latitudes_deg)

        errors = np.empty(lam.size)
        for i, (l, p) in enumerate(zip(lam, phi)):
            x, y = self.core.transform(l, p)
            l_back, p_back = self.core.inverse(x, y)
            errors[i] = max(abs(l_back - l), abs(p_back - p))

        max_error = float(np.max(errors))
        return self._result(
            "round_trip",
            max_error <= tolerance,
            f"Round trip: max error {max_error:.3e} rad over {lam.size} points",
            {'max_error_rad': max_error, 'tolerance': tolerance, 'num_points': int(lam.size)},
        )

    def check_lobe_coverage(self, samples_per_lobe: int = 50) -> ValidationResult:
        """Check that every longitude belongs to exactly one lobe.

        Samples every boundary exactly plus points inside each lobe, in
        both hemispheres.
        """
        problems = []
        for hemisphere in Hemisphere:
            table = self.core.lobe_table(hemisphere)
            samples = list(table.boundaries)
            for index in range(table.lobe_count):
                left, right = table.lobe_extent(index)
                samples.extend(np.linspace(left, right, samples_per_lobe, endpoint=False)[1:])

            last = table.lobe_count - 1
            for lam in samples:
                owners = [
                    i for i in range(table.lobe_count)
                    if table.boundaries[i] <= lam < table.boundaries[i + 1]
                    or (i == last and lam == table.boundaries[-1])
                ]
                selected = self.core.select_lobe(hemisphere, lam).index
                if owners != [selected]:
                    problems.append((hemisphere.name, float(lam), owners, selected))

        return self._result(
            "lobe_coverage",
            not problems,
            f"Lobe coverage: {len(problems)} ambiguous or misassigned longitudes",
            {'problems': problems[:10]},
        )

    def check_seam_continuity(
        self,
        longitudes_deg: Sequence[float] = DEFAULT_LONGITUDES_DEG,
        epsilon: float = 1e-9,
        tolerance: float = 1e-7
    ) -> ValidationResult:
        """Check that y has no jump across the seam latitude."""
        threshold = self.core.lat_threshold
        jumps = []
        for lon in np.radians(longitudes_deg):
            for sign in (1.0, -1.0):
                _, y_inside = self.core.transform(lon, sign * (threshold - epsilon))
                _, y_outside = self.core.transform(lon, sign * (threshold + epsilon))
                jumps.append(abs(y_outside - y_inside))

        max_jump = float(np.max(jumps))
        return self._result(
            "seam_continuity",
            max_jump <= tolerance,
            f"Seam continuity: max jump {max_jump:.3e}",
            {'max_jump': max_jump, 'epsilon_rad': epsilon, 'tolerance': tolerance},
        )

    def check_hemisphere_symmetry(self) -> ValidationResult:
        """Check that the seam offset flips sign with the hemisphere."""
        north = self.core.seam.vertical_offset(Hemisphere.NORTH)
        south = self.core.seam.vertical_offset(Hemisphere.SOUTH)

        return self._result(
            "hemisphere_symmetry",
            north == -south and north != 0.0,
            f"Seam offset: north={north:.10f}, south={south:.10f}",
            {'north_offset': north, 'south_offset': south},
        )

    def check_region_classification(
        self,
        longitudes_deg: Sequence[float] = DEFAULT_LONGITUDES_DEG,
        latitudes_deg: Sequence[float] = DEFAULT_LATITUDES_DEG
    ) -> ValidationResult:
        """Check that the inverse's planar test picks the forward branch."""
        lam, phi = self._grid(longitudes_deg, latitudes_deg)

        mismatches = 0
        for l, p in zip(lam, phi):
            _, y = self.core.transform(l, p)
            if self.core.branch_for_latitude(p) is not self.core.branch_for_y(y):
                mismatches += 1

        return self._result(
            "region_classification",
            mismatches == 0,
            f"Region classification: {mismatches} mismatches over {lam.size} points",
            {'mismatches': mismatches, 'num_points': int(lam.size)},
        )

    def check_equal_area(
        self,
        longitudes_deg: Sequence[float] = DEFAULT_LONGITUDES_DEG,
        latitudes_deg: Sequence[float] = DEFAULT_LATITUDES_DEG,
        tolerance: float = 1e-4
    ) -> ValidationResult:
        """Check that the Tissot area scale is 1."""
        lam, phi = self._grid(longitudes_deg, latitudes_deg)

        scales = np.array([
            self.projection.compute_distortion(p, l).area_scale
            for l, p in zip(lam, phi)
        ])
        max_deviation = float(np.max(np.abs(scales - 1.0)))

        return self._result(
            "equal_area",
            max_deviation <= tolerance,
            f"Equal area: max area-scale deviation {max_deviation:.3e}",
            {'max_deviation': max_deviation, 'tolerance': tolerance},
        )

    def _grid(
        self,
        longitudes_deg: Sequence[float],
        latitudes_deg: Sequence[float]
    ) -> tuple:
        lon_grid, lat_grid = np.meshgrid(
            np.radians(np.asarray(longitudes_deg, dtype=np.float64)),
            np.radians(np.asarray(latitudes_deg, dtype=np.float64)),
        )
        return lon_grid.ravel(), lat_grid.ravel()

    def _result(
        self,
        test_name: str,
        passed: bool,
        message: str,
        details: Dict[str, Any]
    ) -> ValidationResult:
        result = ValidationResult(
            test_name=test_name,
            passed=bool(passed),
            message=message,
            details=details,
        )

        if not result.passed:
            if self.log_violations:
                self._logger.warning(f"CHECK FAILED | {test_name} | {message}")
            if self.strict_mode:
                raise ProjectionError(message, context={"check": test_name})

        return result


def summarize_results(results: List[ValidationResult]) -> Dict[str, Any]:
    """Summarize a list of validation results."""
    failed = [r.test_name for r in results if not r.passed]
    return {
        "total": len(results),
        "passed": len(results) - len(failed),
        "failed": failed,
        "all_passed": not failed,
    }
