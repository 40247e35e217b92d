"""Viewport padding derived from the UI chrome that overlaps the map."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from enum import StrEnum

from globeframe.schemas import Padding

_logger = logging.getLogger(__name__)

BASE_PADDING = 0.05
CHROME_GUTTER = 0.02
MOBILE_BREAKPOINT_PX = 768
MAX_EDGE_FRACTION = 0.45


class Edge(StrEnum):
    TOP = "top"
    RIGHT = "right"
    BOTTOM = "bottom"
    LEFT = "left"


@dataclass(frozen=True)
class Chrome:
    """A UI element docked to one edge, ``size_px`` deep into the viewport."""

    edge: Edge
    size_px: float


def compute_padding(
    viewport_width: float,
    viewport_height: float,
    chrome: Mapping[str, Chrome],
    *,
    base: float = BASE_PADDING,
    gutter: float = CHROME_GUTTER,
    mobile_breakpoint: float = MOBILE_BREAKPOINT_PX,
    max_fraction: float = MAX_EDGE_FRACTION,
) -> Padding:
    covered = {edge: 0.0 for edge in Edge}
    for element in chrome.values():
        covered[element.edge] += max(element.size_px, 0.0)

    # Narrow layouts stack side panels instead of overlaying the map.
    is_mobile = viewport_width <= mobile_breakpoint

    def fraction(edge: Edge, extent: float) -> float:
        px = covered[edge]
        if px <= 0 or extent <= 0:
            return base
        if is_mobile and edge in (Edge.LEFT, Edge.RIGHT):
            return base
        return min(max(base, px / extent + gutter), max_fraction)

    return Padding(
        top=fraction(Edge.TOP, viewport_height),
        right=fraction(Edge.RIGHT, viewport_width),
        bottom=fraction(Edge.BOTTOM, viewport_height),
        left=fraction(Edge.LEFT, viewport_width),
    )


PaddingListener = Callable[[Padding], None]


class PaddingObserver:
    """Recomputes padding on viewport or chrome resize and notifies on change."""

    def __init__(self, viewport_width: float = 1280, viewport_height: float = 800) -> None:
        self._width = viewport_width
        self._height = viewport_height
        self._chrome: dict[str, Chrome] = {}
        self._listeners: list[PaddingListener] = []
        self._padding = self._compute()

    @property
    def padding(self) -> Padding:
        return self._padding

    def subscribe(self, listener: PaddingListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def resize_viewport(self, width: float, height: float) -> None:
        self._width = width
        self._height = height
        self._recompute()

    def observe(self, name: str, edge: Edge | str, size_px: float) -> None:
        self._chrome[name] = Chrome(edge=Edge(edge), size_px=size_px)
        self._recompute()

    def unobserve(self, name: str) -> None:
        if self._chrome.pop(name, None) is not None:
            self._recompute()

    def _compute(self) -> Padding:
        return compute_padding(self._width, self._height, self._chrome)

    def _recompute(self) -> None:
        padding = self._compute()
        if padding == self._padding:
            return
        self._padding = padding
        _logger.debug("Padding changed to %s", padding.as_tuple())
        for listener in list(self._listeners):
            listener(padding)
