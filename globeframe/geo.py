from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, List, Tuple

import numpy as np

EARTH_RADIUS_M = 6371008.8
METERS_PER_DEGREE = 111000.0

LatLng = Tuple[float, float]


@dataclass(frozen=True)
class Bounds:
    """Lat/lng box. ``min_lng > max_lng`` means the box crosses the antimeridian."""

    min_lat: float
    min_lng: float
    max_lat: float
    max_lng: float

    @property
    def crosses_antimeridian(self) -> bool:
        return self.min_lng > self.max_lng

    @property
    def lng_span(self) -> float:
        if self.crosses_antimeridian:
            return self.max_lng + 360.0 - self.min_lng
        return self.max_lng - self.min_lng

    @property
    def center(self) -> LatLng:
        lat = (self.min_lat + self.max_lat) / 2
        lng = wrap_lng(self.min_lng + self.lng_span / 2)
        return lat, lng

    @property
    def south_west(self) -> LatLng:
        return self.min_lat, self.min_lng

    @property
    def north_east(self) -> LatLng:
        return self.max_lat, self.max_lng

    def corners(self) -> List[LatLng]:
        return [
            (self.max_lat, self.max_lng),
            (self.max_lat, self.min_lng),
            (self.min_lat, self.max_lng),
            (self.min_lat, self.min_lng),
        ]


def clamp_lat(lat: float) -> float:
    return max(min(lat, 90.0), -90.0)


def wrap_lng(lng: float) -> float:
    if -180.0 <= lng <= 180.0:
        return lng
    return (lng + 180.0) % 360.0 - 180.0


def bounds_for_points(points: Iterable[LatLng]) -> Bounds:
    coords = np.asarray(list(points), dtype=float)
    if coords.size == 0:
        raise ValueError("bounds_for_points needs at least one point")
    lats = coords[:, 0]
    lngs = coords[:, 1]
    min_lng, max_lng = float(lngs.min()), float(lngs.max())
    if max_lng - min_lng > 180.0:
        # Shorter way round is across the antimeridian.
        shifted = np.where(lngs < 0, lngs + 360.0, lngs)
        min_lng = wrap_lng(float(shifted.min()))
        max_lng = wrap_lng(float(shifted.max()))
    return Bounds(float(lats.min()), min_lng, float(lats.max()), max_lng)


def haversine_m(a: LatLng, b: LatLng) -> float:
    lat1, lng1 = map(math.radians, a)
    lat2, lng2 = map(math.radians, b)
    dlat = lat2 - lat1
    dlng = lng2 - lng1
    h = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlng / 2) ** 2
    return 2 * EARTH_RADIUS_M * math.asin(min(1.0, math.sqrt(h)))


def offset_lat_lng(lat: float, lng: float, east_m: float, north_m: float) -> LatLng:
    """Move a point by a local east/north offset (equirectangular)."""
    dlat = math.degrees(north_m / EARTH_RADIUS_M)
    cos_lat = max(math.cos(math.radians(lat)), 1e-6)
    dlng = math.degrees(east_m / (EARTH_RADIUS_M * cos_lat))
    return clamp_lat(lat + dlat), wrap_lng(lng + dlng)
