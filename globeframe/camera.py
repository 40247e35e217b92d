"""Camera framing: fit a set of geographic points into the unpadded viewport."""

from __future__ import annotations

import asyncio
import logging
import math
from typing import Iterable, List, Sequence, Union

import numpy as np

from globeframe.exceptions import ElevationLookupError
from globeframe.geo import Bounds, LatLng, bounds_for_points, haversine_m, offset_lat_lng
from globeframe.providers.base import ElevationLookup
from globeframe.schemas import CameraPose, FramingConfig, GeoPoint, Padding

_logger = logging.getLogger(__name__)

MIN_VISIBLE_FRACTION = 0.05

PointLike = Union[GeoPoint, LatLng]
PaddingLike = Union[Padding, Sequence[float]]


def as_lat_lng(point: PointLike) -> LatLng:
    if isinstance(point, GeoPoint):
        return point.lat, point.lng
    return float(point[0]), float(point[1])


def as_padding(padding: PaddingLike) -> Padding:
    if isinstance(padding, Padding):
        return padding
    return Padding.from_sequence(list(padding))


def sample_points(bounds: Bounds, include_corners: bool) -> List[LatLng]:
    samples = [bounds.center]
    if include_corners:
        samples.extend(bounds.corners())
    return samples


def _describe_failure(exc: Exception) -> str:
    if isinstance(exc, ElevationLookupError):
        return f"{exc} (provider={exc.provider or 'unknown'}, status={exc.status_code})"
    if isinstance(exc, asyncio.TimeoutError):
        return "timed out"
    return f"{type(exc).__name__}: {exc}"


async def ground_elevation(
    elevation: ElevationLookup, samples: Sequence[LatLng], config: FramingConfig
) -> float:
    """Highest ground elevation among ``samples``, or the configured fallback."""
    try:
        values = await asyncio.wait_for(elevation.lookup(samples), config.elevation_timeout_s)
        heights = np.asarray(values, dtype=float)
        if heights.shape != (len(samples),):
            raise ElevationLookupError(f"expected {len(samples)} elevations, got {heights.size}")
        if not np.all(np.isfinite(heights)):
            raise ElevationLookupError("elevation lookup returned non-finite values")
    except Exception as exc:  # noqa: BLE001 - any lookup failure falls back
        _logger.warning(
            "Elevation lookup failed, using fallback ground %.1fm: %s",
            config.fallback_ground_elevation_m,
            _describe_failure(exc),
        )
        return config.fallback_ground_elevation_m
    return float(heights.max())


def visible_fraction(padding: Padding) -> float:
    usable_x = 1.0 - padding.left - padding.right
    usable_y = 1.0 - padding.top - padding.bottom
    return max(min(usable_x, usable_y), MIN_VISIBLE_FRACTION)


def fit_range(diagonal_m: float, padding: Padding, config: FramingConfig) -> float:
    """Camera-to-center distance at which ``diagonal_m`` fits the visible region."""
    half_fov = math.radians(config.fov_deg) / 2
    needed = (diagonal_m / 2) / math.tan(half_fov) / visible_fraction(padding)
    return max(config.min_range_m, needed)


def padded_center(
    center: LatLng, range_m: float, heading: float, padding: Padding, config: FramingConfig
) -> LatLng:
    """Shift the camera center so ``center`` lands mid-way in the unpadded region."""
    view_height = 2 * range_m * math.tan(math.radians(config.fov_deg) / 2)
    view_width = view_height * config.aspect_ratio
    # Screen offsets of the usable region's middle, in meters (x right, y up).
    screen = np.array(
        [
            (padding.left - padding.right) / 2 * view_width,
            (padding.bottom - padding.top) / 2 * view_height,
        ]
    )
    if not screen.any():
        return center
    theta = math.radians(heading)
    # Screen up points along the heading (clockwise from north).
    to_east_north = np.array(
        [
            [math.cos(theta), math.sin(theta)],
            [-math.sin(theta), math.cos(theta)],
        ]
    )
    east, north = to_east_north @ screen
    return offset_lat_lng(center[0], center[1], -east, -north)


async def look_at_with_padding(
    points: Iterable[PointLike],
    elevation: ElevationLookup,
    heading: float = 0.0,
    padding: PaddingLike = (0.0, 0.0, 0.0, 0.0),
    *,
    config: FramingConfig | None = None,
) -> CameraPose:
    config = config or FramingConfig()
    coords = [as_lat_lng(point) for point in points]
    if not coords:
        raise ValueError("look_at_with_padding needs at least one point")
    pad = as_padding(padding)

    bounds = bounds_for_points(coords)
    ground = await ground_elevation(elevation, sample_points(bounds, config.sample_corners), config)

    center = bounds.center
    diagonal = haversine_m(bounds.south_west, bounds.north_east)
    range_m = fit_range(diagonal, pad, config)
    lat, lng = padded_center(center, range_m, heading, pad, config)
    _logger.debug(
        "Framed %d points: diagonal=%.0fm range=%.0fm ground=%.1fm", len(coords), diagonal, range_m, ground
    )
    return CameraPose(
        center=GeoPoint(lat=lat, lng=lng, altitude=ground + config.altitude_offset_m),
        range=range_m,
        heading=heading,
        tilt=config.tilt,
        roll=0.0,
    )

