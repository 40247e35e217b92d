import asyncio
import logging

import pytest

from globeframe.camera import fit_range, look_at_with_padding, visible_fraction
from globeframe.exceptions import ElevationLookupError
from globeframe.geo import haversine_m
from globeframe.providers.flat import FlatElevationProvider
from globeframe.schemas import FramingConfig, Padding

TRIANGLE = [(0.0, 0.0), (0.0, 1.0), (1.0, 0.0)]


class FailingElevation:
    async def lookup(self, points):
        raise ElevationLookupError("service down")


class BrokenElevation:
    async def lookup(self, points):
        raise LookupError("elevation service down")


class ShortElevation:
    async def lookup(self, points):
        return [500.0]


class SlowElevation:
    async def lookup(self, points):
        await asyncio.sleep(10)
        return [0.0 for _ in points]


class RecordingElevation:
    def __init__(self, values):
        self.values = values
        self.calls = []

    async def lookup(self, points):
        self.calls.append(list(points))
        return list(self.values)


@pytest.mark.asyncio
async def test_triangle_is_framed():
    pose = await look_at_with_padding(TRIANGLE, FlatElevationProvider(), 0.0, [0, 0, 0, 0])
    assert 0.0 <= pose.center.lat <= 1.0
    assert 0.0 <= pose.center.lng <= 1.0
    assert pose.range > haversine_m((0.0, 0.0), (1.0, 1.0))
    assert pose.roll == 0.0
    assert pose.tilt == FramingConfig().tilt


@pytest.mark.asyncio
async def test_left_padding_increases_range():
    elevation = FlatElevationProvider()
    plain = await look_at_with_padding(TRIANGLE, elevation, 0.0, [0, 0, 0, 0])
    padded = await look_at_with_padding(TRIANGLE, elevation, 0.0, [0, 0, 0, 0.3])
    assert padded.range > plain.range
    # The usable region sits right of screen center, so the camera looks further west.
    assert padded.center.lng < plain.center.lng


@pytest.mark.asyncio
async def test_center_altitude_follows_highest_ground():
    elevation = RecordingElevation([100.0, 250.0, 90.0, 80.0, 70.0])
    config = FramingConfig(altitude_offset_m=10.0)
    pose = await look_at_with_padding(TRIANGLE, elevation, config=config)
    assert pose.center.altitude == pytest.approx(260.0)
    assert len(elevation.calls[0]) == 5


@pytest.mark.asyncio
async def test_lookup_failure_falls_back():
    config = FramingConfig(fallback_ground_elevation_m=42.0)
    pose = await look_at_with_padding(TRIANGLE, FailingElevation(), config=config)
    assert pose.center.altitude == pytest.approx(42.0)


@pytest.mark.asyncio
async def test_lookup_timeout_falls_back():
    config = FramingConfig(elevation_timeout_s=0.01, fallback_ground_elevation_m=7.0)
    pose = await look_at_with_padding(TRIANGLE, SlowElevation(), config=config)
    assert pose.center.altitude == pytest.approx(7.0)


@pytest.mark.asyncio
async def test_heading_passes_through():
    pose = await look_at_with_padding(TRIANGLE, FlatElevationProvider(), heading=370.0)
    assert pose.heading == pytest.approx(10.0)


@pytest.mark.asyncio
async def test_single_point_uses_minimum_range():
    config = FramingConfig(min_range_m=800.0)
    pose = await look_at_with_padding([(45.0, 7.0)], FlatElevationProvider(), config=config)
    assert pose.range == 800.0
    assert pose.center.lat == pytest.approx(45.0)


@pytest.mark.asyncio
async def test_antimeridian_points_center_near_dateline():
    pose = await look_at_with_padding([(0.0, 179.5), (0.5, -179.5)], FlatElevationProvider())
    assert abs(pose.center.lng) > 179.0
    assert pose.range < 1_000_000


@pytest.mark.asyncio
async def test_empty_points_rejected():
    with pytest.raises(ValueError):
        await look_at_with_padding([], FlatElevationProvider())


def test_visible_fraction_uses_tighter_axis():
    assert visible_fraction(Padding(left=0.3)) == pytest.approx(0.7)
    assert visible_fraction(Padding(top=0.1, bottom=0.4, left=0.1)) == pytest.approx(0.5)


def test_fit_range_grows_with_padding():
    config = FramingConfig()
    assert fit_range(10_000, Padding(left=0.3), config) > fit_range(10_000, Padding(), config)


@pytest.mark.asyncio
async def test_builtin_lookup_error_falls_back():
    config = FramingConfig(fallback_ground_elevation_m=3.0)
    pose = await look_at_with_padding(TRIANGLE, BrokenElevation(), config=config)
    assert pose.center.altitude == pytest.approx(3.0)


def test_elevation_error_is_a_lookup_error():
    assert issubclass(ElevationLookupError, LookupError)


@pytest.mark.asyncio
async def test_wrong_number_of_elevations_falls_back(caplog):
    config = FramingConfig(fallback_ground_elevation_m=11.0)
    with caplog.at_level(logging.WARNING, logger="globeframe.camera"):
        pose = await look_at_with_padding(TRIANGLE, ShortElevation(), config=config)
    assert pose.center.altitude == pytest.approx(11.0)
    assert "expected 5 elevations, got 1" in caplog.text
