from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence

from globeframe.providers.base import LatLng


@dataclass
class FlatElevationProvider:
    """Offline provider: the same elevation everywhere."""

    elevation_m: float = 0.0
    name: str = "flat"

    async def lookup(self, points: Sequence[LatLng]) -> List[float]:
        return [self.elevation_m for _ in points]
