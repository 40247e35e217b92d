from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Optional

import requests

from globeframe.providers.base import HttpElevationProvider, LatLng, results_elevations

OPEN_ELEVATION_URL = "https://api.open-elevation.com/api/v1/lookup"


@dataclass
class OpenElevationProvider(HttpElevationProvider):
    def _request(self, points: List[LatLng]) -> requests.Response:
        body = {"locations": [{"latitude": lat, "longitude": lng} for lat, lng in points]}
        return requests.post(self.url, json=body, timeout=self.timeout_s)

    def _parse(self, payload: Any) -> List[float]:
        return results_elevations(payload, self.name)


def build_open_elevation_provider(
    url: Optional[str], max_retries: int, throttle_s: float, timeout_s: float
) -> OpenElevationProvider:
    return OpenElevationProvider(
        name="open_elevation",
        url=url or OPEN_ELEVATION_URL,
        max_retries=max_retries,
        throttle_s=throttle_s,
        timeout_s=timeout_s,
    )
