from __future__ import annotations

import asyncio
import logging
import time
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol, Sequence, Tuple

import requests

from globeframe.exceptions import ElevationLookupError

_logger = logging.getLogger(__name__)

LatLng = Tuple[float, float]

DEFAULT_CACHE_SIZE = 4096


class ElevationLookup(Protocol):
    """Ground elevation in meters for each point, in input order."""

    async def lookup(self, points: Sequence[LatLng]) -> List[float]:
        ...


def _cache_key(point: LatLng) -> LatLng:
    return round(point[0], 5), round(point[1], 5)


def describe_request_error(exc: Exception) -> str:
    """Error text safe for logs; requests messages embed the full URL, api key included."""
    if isinstance(exc, requests.RequestException):
        response = exc.response
        if response is not None:
            return f"{type(exc).__name__} (HTTP {response.status_code})"
        return type(exc).__name__
    return str(exc)


@dataclass
class HttpElevationProvider:
    name: str
    url: str
    api_key: Optional[str] = None
    max_retries: int = 3
    throttle_s: float = 0.0
    timeout_s: float = 10.0
    cache_size: int = DEFAULT_CACHE_SIZE
    _cache: OrderedDict[LatLng, float] = field(default_factory=OrderedDict, init=False, repr=False)

    async def lookup(self, points: Sequence[LatLng]) -> List[float]:
        keys = [_cache_key(point) for point in points]
        found: Dict[LatLng, float] = {key: self._cache[key] for key in keys if key in self._cache}
        missing = [key for key in dict.fromkeys(keys) if key not in found]
        if missing:
            elevations = await asyncio.to_thread(self._fetch, missing)
            found.update(zip(missing, elevations))
        self._remember(found)
        return [found[key] for key in keys]

    def _remember(self, elevations: Dict[LatLng, float]) -> None:
        for key, value in elevations.items():
            self._cache[key] = value
            self._cache.move_to_end(key)
        while len(self._cache) > max(self.cache_size, 0):
            self._cache.popitem(last=False)

    def _throttle(self) -> None:
        if self.throttle_s > 0:
            time.sleep(self.throttle_s)

    def _fetch(self, points: List[LatLng]) -> List[float]:
        last_error: Optional[Exception] = None
        for attempt in range(1, self.max_retries + 1):
            try:
                self._throttle()
                response = self._request(points)
                response.raise_for_status()
                elevations = self._parse(response.json())
            except (requests.RequestException, ValueError, ElevationLookupError) as exc:
                _logger.debug(
                    "%s elevation attempt %d failed: %s", self.name, attempt, describe_request_error(exc)
                )
                last_error = exc
                continue
            if len(elevations) != len(points):
                last_error = ElevationLookupError(
                    f"expected {len(points)} elevations, got {len(elevations)}", provider=self.name
                )
                continue
            return elevations
        status_code = None
        if isinstance(last_error, requests.HTTPError) and last_error.response is not None:
            status_code = last_error.response.status_code
        raise ElevationLookupError(
            f"Failed to fetch elevation for {len(points)} points: "
            f"{describe_request_error(last_error) if last_error else 'no attempts made'}",
            status_code=status_code,
            provider=self.name,
        )

    def _request(self, points: List[LatLng]) -> requests.Response:
        raise NotImplementedError

    def _parse(self, payload: Any) -> List[float]:
        raise NotImplementedError


def results_elevations(payload: Any, provider: str) -> List[float]:
    if not isinstance(payload, dict) or not isinstance(payload.get("results"), list):
        raise ElevationLookupError("elevation payload has no results list", provider=provider)
    try:
        return [float(item["elevation"]) for item in payload["results"]]
    except (KeyError, TypeError, ValueError) as exc:
        raise ElevationLookupError(f"malformed elevation result: {exc}", provider=provider) from exc
