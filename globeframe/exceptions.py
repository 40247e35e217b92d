"""Exception hierarchy for globeframe."""

from __future__ import annotations


class GlobeframeError(Exception):
    """Base exception for all globeframe errors."""


class GlobeframeConfigError(GlobeframeError):
    """Invalid or missing configuration."""


class ElevationLookupError(GlobeframeError, LookupError):
    """Elevation service failure (network, non-200, unexpected payload).

    Framing catches this and falls back to a default ground elevation, so it
    never reaches the map controller.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        provider: str = "",
    ) -> None:
        self.status_code = status_code
        self.provider = provider
        super().__init__(message)
