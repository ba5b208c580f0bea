"""Tests for geospatial.homolosine module."""

from concurrent.futures import ThreadPoolExecutor

import numpy as np
import pytest

from common.constants import ProjectionConstants
from common.errors import ConfigurationError, ConvergenceError, DomainError, ProjectionError
from common.types import Branch, GeographicPoint, Hemisphere, PlanarPoint
from geospatial.homolosine import Homolosine, SeamCorrector
from geospatial.lobes import LobeTable
from geospatial.pseudocylindrical import Mollweide, Sinusoidal

LAT_THRESH = ProjectionConstants.LAT_THRESH.value


class FailingPolarMollweide(Mollweide):
    """Mollweide that gives up poleward of 60 degrees."""

    def transform(self, lam, phi):
        if abs(phi) > np.radians(60.0):
            raise ConvergenceError("gave up", context={"projection": self.name, "phi": phi})
        return super().transform(lam, phi)


class TestSeamCorrector:
    """Tests for the seam offset and lobe placement."""

    def test_lat_threshold_value(self):
        assert np.degrees(LAT_THRESH) == pytest.approx(40 + 44 / 60 + 11.8 / 3600)

    def test_north_threshold_is_sinusoidal_y_of_seam(self):
        seam = SeamCorrector(Sinusoidal(), Mollweide(), LAT_THRESH)
        assert seam.north_threshold == LAT_THRESH
        assert seam.north_threshold == pytest.approx(0.710988, abs=1e-6)

    def test_moll_offset_value(self):
        seam = SeamCorrector(Sinusoidal(), Mollweide(), LAT_THRESH)
        assert seam.moll_offset == pytest.approx(0.0528035, abs=1e-5)

    def test_vertical_offset_flips_with_hemisphere(self):
        seam = SeamCorrector(Sinusoidal(), Mollweide(), LAT_THRESH)
        north = seam.vertical_offset(Hemisphere.NORTH)
        south = seam.vertical_offset(Hemisphere.SOUTH)
        assert north == seam.moll_offset
        assert north == -south

    def test_horizontal_shift_is_sinusoidal_x_of_central_meridian(self):
        seam = SeamCorrector(Sinusoidal(), Mollweide(), LAT_THRESH)
        for meridian in np.radians([-160.0, -100.0, -60.0, 20.0, 30.0, 140.0]):
            assert seam.horizontal_shift(meridian) == pytest.approx(meridian)


class TestForward:
    """Tests for Homolosine.transform."""

    def test_origin_maps_to_origin(self, homolosine):
        x, y = homolosine.transform(0.0, 0.0)
        assert x == pytest.approx(0.0, abs=1e-15)
        assert y == 0.0

    def test_origin_uses_sinusoidal_in_lobe_around_30e(self, traced_homolosine, recorder):
        traced_homolosine.transform(0.0, 0.0)
        event = recorder.last
        assert event.branch == Branch.SINUSOIDAL.value
        assert event.hemisphere == "NORTH"
        assert event.central_meridian == pytest.approx(np.radians(30.0))

    def test_equator_maps_longitude_to_x(self, homolosine):
        for lon_deg in (-170.0, -60.0, 15.0, 100.0, 179.0):
            x, y = homolosine.transform(np.radians(lon_deg), 0.0)
            assert x == pytest.approx(np.radians(lon_deg), abs=1e-12)
            assert y == 0.0

    def test_sinusoidal_band_matches_lobe_sinusoidal(self, homolosine):
        lam, phi = np.radians(-75.0), np.radians(25.0)
        central = np.radians(-100.0)
        x, y = homolosine.transform(lam, phi)
        assert x == pytest.approx((lam - central) * np.cos(phi) + central)
        assert y == pytest.approx(phi)

    @pytest.mark.parametrize("phi_deg", [89.0, -89.0])
    def test_near_polar_points_use_mollweide(self, traced_homolosine, recorder, phi_deg):
        x, y = traced_homolosine.transform(np.radians(20.0), np.radians(phi_deg))
        assert recorder.last.branch == Branch.MOLLWEIDE.value
        assert np.isfinite(x)
        assert abs(y) < np.sqrt(2.0)

    def test_mollweide_cap_is_shifted_by_seam_offset(self, homolosine):
        phi = np.radians(60.0)
        _, y_moll = Mollweide().transform(0.0, phi)
        _, y = homolosine.transform(np.radians(30.0), phi)
        assert y == pytest.approx(y_moll - homolosine.moll_offset)
        _, y_south = homolosine.transform(np.radians(20.0), -phi)
        assert y_south == pytest.approx(-y_moll + homolosine.moll_offset)

    def test_pole_maps_to_lobe_tip(self, homolosine):
        x, y = homolosine.transform(np.radians(-150.0), np.pi / 2)
        assert x == pytest.approx(np.radians(-100.0))
        assert y == pytest.approx(np.sqrt(2.0) - homolosine.moll_offset)

    def test_seam_latitude_itself_uses_sinusoidal(self, homolosine):
        assert homolosine.branch_for_latitude(LAT_THRESH) is Branch.SINUSOIDAL
        assert homolosine.branch_for_latitude(np.nextafter(LAT_THRESH, 2.0)) is Branch.MOLLWEIDE
        assert homolosine.branch_for_latitude(-np.nextafter(LAT_THRESH, 2.0)) is Branch.MOLLWEIDE

    @pytest.mark.parametrize("lon_deg", [-170.0, -70.0, -30.0, 0.0, 45.0, 120.0, 175.0])
    def test_no_vertical_jump_at_seam(self, homolosine, lon_deg):
        lam = np.radians(lon_deg)
        for sign in (1.0, -1.0):
            _, below = homolosine.transform(lam, sign * (LAT_THRESH - 1e-10))
            _, above = homolosine.transform(lam, sign * (LAT_THRESH + 1e-10))
            assert above == pytest.approx(below, abs=1e-8)

    def test_boundary_longitude_is_deterministic(self, traced_homolosine, recorder):
        lam = np.radians(-40.0)
        results = {traced_homolosine.transform(lam, np.radians(50.0)) for _ in range(20)}
        assert len(results) == 1
        assert {e.lobe_index for e in recorder.events} == {1}

    def test_hemisphere_decided_by_latitude_sign(self, traced_homolosine, recorder):
        traced_homolosine.transform(np.radians(-60.0), np.radians(10.0))
        assert recorder.last.hemisphere == "NORTH"
        assert recorder.last.lobe_index == 0
        traced_homolosine.transform(np.radians(-60.0), np.radians(-10.0))
        assert recorder.last.hemisphere == "SOUTH"
        assert recorder.last.lobe_index == 1

    @pytest.mark.parametrize("lam, phi", [(0.0, 1.6), (0.0, -1.6), (3.2, 0.0), (-3.2, 0.0), (np.nan, 0.0)])
    def test_out_of_range_raises_domain_error(self, homolosine, lam, phi):
        with pytest.raises(DomainError):
            homolosine.transform(lam, phi)

    def test_sub_projection_failure_propagates_with_context(self):
        projection = Homolosine(mollweide=FailingPolarMollweide())
        with pytest.raises(ProjectionError) as exc_info:
            projection.transform(np.radians(100.0), np.radians(-70.0))

        assert isinstance(exc_info.value, ConvergenceError)
        assert exc_info.value.context["hemisphere"] == "SOUTH"
        assert exc_info.value.context["lobe"] == 3


class TestInverse:
    """Tests for Homolosine.inverse."""

    def test_round_trip_interior(self, homolosine, interior_points):
        for lam, phi in interior_points:
            x, y = homolosine.transform(lam, phi)
            lam_back, phi_back = homolosine.inverse(x, y)
            assert lam_back == pytest.approx(lam, abs=1e-9)
            assert phi_back == pytest.approx(phi, abs=1e-9)

    @pytest.mark.parametrize("boundary_deg", [-40.0])
    def test_round_trip_on_northern_boundary(self, homolosine, boundary_deg):
        for lat_deg in (5.0, 35.0, 55.0, 80.0):
            lam, phi = np.radians(boundary_deg), np.radians(lat_deg)
            lam_back, phi_back = homolosine.inverse(*homolosine.transform(lam, phi))
            assert lam_back == pytest.approx(lam, abs=1e-9)
            assert phi_back == pytest.approx(phi, abs=1e-9)

    @pytest.mark.parametrize("boundary_deg", [-100.0, -20.0, 80.0])
    def test_round_trip_on_southern_boundaries(self, homolosine, boundary_deg):
        for lat_deg in (-5.0, -35.0, -55.0, -80.0):
            lam, phi = np.radians(boundary_deg), np.radians(lat_deg)
            lam_back, phi_back = homolosine.inverse(*homolosine.transform(lam, phi))
            assert lam_back == pytest.approx(lam, abs=1e-9)
            assert phi_back == pytest.approx(phi, abs=1e-9)

    @pytest.mark.parametrize("lam", [-np.pi, np.pi])
    def test_round_trip_on_map_edges(self, homolosine, lam):
        for lat_deg in (-60.0, -10.0, 0.0, 10.0, 60.0):
            phi = np.radians(lat_deg)
            lam_back, phi_back = homolosine.inverse(*homolosine.transform(lam, phi))
            assert lam_back == pytest.approx(lam, abs=1e-9)
            assert phi_back == pytest.approx(phi, abs=1e-9)

    @pytest.mark.parametrize("lat_deg", [89.9999, 89.99999, -89.9999, -89.99999])
    @pytest.mark.parametrize("lon_deg", [-180.0, -100.0, -40.0, -20.0, 80.0, 170.0, 180.0])
    def test_round_trip_near_poles(self, homolosine, lon_deg, lat_deg):
        lam, phi = np.radians(lon_deg), np.radians(lat_deg)
        x, y = homolosine.transform(lam, phi)
        lam_back, phi_back = homolosine.inverse(x, y)

        # A rounding error in y is amplified by 1 / x_scale**2 in the longitude
        x_scale = Mollweide().x_scale(abs(y) + homolosine.moll_offset)
        assert lam_back == pytest.approx(lam, abs=1e-9 + 1e-15 / x_scale**2)
        assert phi_back == pytest.approx(phi, abs=1e-8)

    def test_x_scale_matches_numerical_derivative(self):
        moll = Mollweide()
        for phi in np.radians([10.0, 60.0, 89.0]):
            x_east, y = moll.transform(1e-6, phi)
            x_west, _ = moll.transform(-1e-6, phi)
            assert moll.x_scale(y) == pytest.approx((x_east - x_west) / 2e-6, rel=1e-6)
        assert moll.x_scale(np.sqrt(2.0)) == 0.0
        assert Sinusoidal().x_scale(0.3) == pytest.approx(np.cos(0.3))

    def test_inverse_uses_forward_branch(self, traced_homolosine, recorder, interior_points):
        for lam, phi in interior_points:
            x, y = traced_homolosine.transform(lam, phi)
            traced_homolosine.inverse(x, y)
            forward, inverse = recorder.events[-2:]
            assert inverse.branch == forward.branch
            assert inverse.lobe_index == forward.lobe_index
            assert inverse.hemisphere == forward.hemisphere

    def test_planar_threshold_matches_latitude_threshold(self, homolosine):
        _, y = homolosine.transform(0.3, np.radians(42.0))
        assert homolosine.branch_for_y(y) is Branch.MOLLWEIDE
        _, y = homolosine.transform(0.3, np.radians(39.0))
        assert homolosine.branch_for_y(y) is Branch.SINUSOIDAL

    def test_pole_row_inverts_to_pole(self, homolosine):
        lam, phi = homolosine.inverse(np.radians(30.0), np.sqrt(2.0) - homolosine.moll_offset)
        assert phi == pytest.approx(np.pi / 2)
        assert lam == pytest.approx(np.radians(30.0))

    def test_beyond_pole_raises(self, homolosine):
        with pytest.raises(DomainError, match="beyond the poles"):
            homolosine.inverse(0.5, 1.5)

    def test_outside_map_raises(self, homolosine):
        with pytest.raises(DomainError):
            homolosine.inverse(3.5, 0.1)

    def test_interruption_gap_raises(self, homolosine):
        # Just east of the -40 degree cut, high in the northern cap
        with pytest.raises(DomainError, match="interruption") as exc_info:
            homolosine.inverse(np.radians(-40.0), 1.2)

        assert exc_info.value.context["hemisphere"] == "NORTH"
        assert exc_info.value.context["lobe"] == 1

    def test_nan_raises(self, homolosine):
        with pytest.raises(DomainError):
            homolosine.inverse(0.0, np.nan)


class TestPointTransforms:
    """Tests for Homolosine.transform_point and inverse_point."""

    def test_transform_point_matches_transform(self, homolosine):
        point = GeographicPoint.from_degrees(-75.0, 52.0)
        planar = homolosine.transform_point(point)
        assert isinstance(planar, PlanarPoint)
        assert (planar.x, planar.y) == homolosine.transform(point.longitude, point.latitude)

    def test_round_trip_through_points(self, homolosine):
        point = GeographicPoint.from_degrees(120.0, -30.0)
        back = homolosine.inverse_point(homolosine.transform_point(point))
        assert isinstance(back, GeographicPoint)
        lon_deg, lat_deg = back.to_degrees()
        assert lon_deg == pytest.approx(120.0, abs=1e-7)
        assert lat_deg == pytest.approx(-30.0, abs=1e-7)

    def test_inverse_point_in_interruption_raises(self, homolosine):
        with pytest.raises(DomainError, match="interruption"):
            homolosine.inverse_point(PlanarPoint(np.radians(-40.0), 1.2))

    def test_degrees_rejected_before_projecting(self):
        with pytest.raises(DomainError, match="degrees"):
            GeographicPoint(longitude=10.0, latitude=45.0)


class TestConfiguration:
    """Tests for construction-time configuration."""

    def test_rejects_table_not_spanning_longitudes(self):
        partial = LobeTable("north", (-np.pi, 0.0, 3.0), (-1.0, 1.0))
        with pytest.raises(ConfigurationError):
            Homolosine(north_lobes=partial)

    def test_custom_tables_are_used(self, recorder):
        single = LobeTable("single", (-np.pi, np.pi), (0.0,))
        projection = Homolosine(north_lobes=single, south_lobes=single, tracer=recorder)
        x, _ = projection.transform(np.radians(-150.0), np.radians(-20.0))
        assert recorder.last.lobe_index == 0
        assert x == pytest.approx(np.radians(-150.0) * np.cos(np.radians(-20.0)))

    def test_planar_tables_follow_sinusoidal_equator(self, homolosine):
        for hemisphere in Hemisphere:
            geographic = homolosine.lobe_table(hemisphere)
            planar = homolosine.lobe_table(hemisphere, planar=True)
            np.testing.assert_allclose(planar.boundaries, geographic.boundaries)
            assert planar.central_meridians == geographic.central_meridians


class TestConcurrency:
    """Tests for sharing one instance between threads."""

    def test_parallel_results_match_serial(self, homolosine, interior_points):
        serial = [homolosine.transform(lam, phi) for lam, phi in interior_points]

        with ThreadPoolExecutor(max_workers=8) as pool:
            parallel = list(pool.map(lambda p: homolosine.transform(*p), interior_points))

        assert parallel == serial
