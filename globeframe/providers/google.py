from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Optional

import requests

from globeframe.exceptions import ElevationLookupError
from globeframe.providers.base import HttpElevationProvider, LatLng, results_elevations

GOOGLE_ELEVATION_URL = "https://maps.googleapis.com/maps/api/elevation/json"


@dataclass
class GoogleElevationProvider(HttpElevationProvider):
    def _request(self, points: List[LatLng]) -> requests.Response:
        locations = "|".join(f"{lat:.6f},{lng:.6f}" for lat, lng in points)
        params = {"locations": locations, "key": self.api_key or ""}
        return requests.get(self.url, params=params, timeout=self.timeout_s)

    def _parse(self, payload: Any) -> List[float]:
        status = payload.get("status") if isinstance(payload, dict) else None
        if status != "OK":
            raise ElevationLookupError(f"elevation status {status}", provider=self.name)
        return results_elevations(payload, self.name)


def build_google_provider(
    url: Optional[str], api_key: str, max_retries: int, throttle_s: float, timeout_s: float
) -> GoogleElevationProvider:
    return GoogleElevationProvider(
        name="google",
        url=url or GOOGLE_ELEVATION_URL,
        api_key=api_key,
        max_retries=max_retries,
        throttle_s=throttle_s,
        timeout_s=timeout_s,
    )
