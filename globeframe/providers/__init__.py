from __future__ import annotations

from globeframe.exceptions import GlobeframeConfigError
from globeframe.providers.base import ElevationLookup
from globeframe.providers.flat import FlatElevationProvider
from globeframe.providers.google import build_google_provider
from globeframe.providers.open_elevation import build_open_elevation_provider
from globeframe.schemas import ElevationConfig


def build_provider(config: ElevationConfig) -> ElevationLookup:
    if config.name == "flat":
        return FlatElevationProvider(elevation_m=config.flat_elevation_m)
    if config.name == "open_elevation":
        return build_open_elevation_provider(
            config.url, config.max_retries, config.throttle_s, config.timeout_s
        )
    if config.name == "google":
        if not config.api_key:
            raise GlobeframeConfigError("Google elevation api_key is required")
        return build_google_provider(
            config.url, config.api_key, config.max_retries, config.throttle_s, config.timeout_s
        )
    raise GlobeframeConfigError(f"Unknown elevation provider {config.name}")
