"""Farm-boundary rectangles derived from a center point and an area.

The conversion is a local planar approximation (1 degree of latitude is taken
as 111 km) that holds for farm-scale areas. It degrades towards the poles, so
the latitude fed into the longitude scale factor is clamped to
``MAX_PLANAR_LATITUDE``.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Tuple

from globeframe.geo import METERS_PER_DEGREE, clamp_lat, wrap_lng
from globeframe.schemas import Corners, GeoPoint, RectangularOverlay

SQUARE_METERS_PER_HECTARE = 10000.0
MAX_PLANAR_LATITUDE = 89.0
DEFAULT_FARM_HECTARES = 10.0
DEFAULT_FARM_COLOR = "#ff0000"


@dataclass(frozen=True)
class Dimensions:
    width: float
    height: float


def side_length_m(area_hectares: float) -> float:
    """Side of the square with the given area, in meters. Non-positive areas give 0."""
    return math.sqrt(max(area_hectares, 0.0) * SQUARE_METERS_PER_HECTARE)


def lat_lng_offsets(center_lat: float, side_m: float) -> Tuple[float, float]:
    lat_offset = side_m / (2 * METERS_PER_DEGREE)
    planar_lat = max(min(center_lat, MAX_PLANAR_LATITUDE), -MAX_PLANAR_LATITUDE)
    lng_offset = side_m / (2 * METERS_PER_DEGREE * math.cos(math.radians(planar_lat)))
    return lat_offset, lng_offset


def rectangle_corners(center_lat: float, center_lng: float, area_hectares: float) -> Corners:
    lat_offset, lng_offset = lat_lng_offsets(center_lat, side_length_m(area_hectares))
    north = clamp_lat(center_lat + lat_offset)
    south = clamp_lat(center_lat - lat_offset)
    east = wrap_lng(center_lng + lng_offset)
    west = wrap_lng(center_lng - lng_offset)
    return Corners(
        north_east=GeoPoint(lat=north, lng=east, altitude=0),
        north_west=GeoPoint(lat=north, lng=west, altitude=0),
        south_east=GeoPoint(lat=south, lng=east, altitude=0),
        south_west=GeoPoint(lat=south, lng=west, altitude=0),
    )


def rectangle_dimensions(area_hectares: float) -> Dimensions:
    side = side_length_m(area_hectares)
    return Dimensions(width=side, height=side)


def build_farm_overlay(
    lat: float,
    lng: float,
    area_hectares: Optional[float] = None,
    *,
    label: Optional[str] = None,
    color: str = DEFAULT_FARM_COLOR,
) -> RectangularOverlay:
    area = area_hectares or DEFAULT_FARM_HECTARES
    dimensions = rectangle_dimensions(area)
    return RectangularOverlay(
        center=GeoPoint(lat=lat, lng=lng, altitude=0),
        corners=rectangle_corners(lat, lng, area),
        width=dimensions.width,
        height=dimensions.height,
        label=label if label is not None else f"Farm Location ({area:g} hectares)",
        color=color,
    )
