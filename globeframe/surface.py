"""Render surface contract and an in-memory implementation.

The 3D globe itself lives outside this package. The controller only talks to
it through the protocols below; ``InMemorySurface`` records everything it is
asked to do and backs the CLI and the tests.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Optional, Protocol

from globeframe.schemas import CameraPose, GeoPoint

EventHandler = Callable[[], None]


class PrimitiveEvent(StrEnum):
    POINTER_ENTER = "pointer-enter"
    POINTER_LEAVE = "pointer-leave"
    PRIMARY_CLICK = "primary-click"


class Primitive(Protocol):
    def add_listener(self, event: PrimitiveEvent, handler: EventHandler) -> None:
        ...


class PrimitiveFactory(Protocol):
    def marker(self, *, position: GeoPoint, label: Optional[str], title: str) -> Primitive:
        ...

    def polyline(
        self, *, coordinates: Sequence[GeoPoint], stroke_color: str, stroke_width: float
    ) -> Primitive:
        ...


class RenderSurface(Protocol):
    heading: float
    cursor: str

    @property
    def children(self) -> Sequence[Primitive]:
        ...

    def append(self, primitive: Primitive) -> None:
        ...

    def remove(self, primitive: Primitive) -> None:
        ...

    def fly_camera_to(self, *, duration_ms: int, end_camera: CameraPose) -> None:
        ...


@dataclass(eq=False)
class _Listenable:
    listeners: dict[PrimitiveEvent, list[EventHandler]] = field(
        default_factory=lambda: defaultdict(list), init=False, repr=False
    )

    def add_listener(self, event: PrimitiveEvent, handler: EventHandler) -> None:
        self.listeners[PrimitiveEvent(event)].append(handler)

    def emit(self, event: PrimitiveEvent) -> None:
        for handler in list(self.listeners.get(PrimitiveEvent(event), ())):
            handler()


@dataclass(eq=False)
class MarkerPrimitive(_Listenable):
    position: GeoPoint = field(default_factory=lambda: GeoPoint(lat=0, lng=0))
    label: Optional[str] = None
    title: str = ""


@dataclass(eq=False)
class PolylinePrimitive(_Listenable):
    coordinates: list[GeoPoint] = field(default_factory=list)
    stroke_color: str = "#ffffff"
    stroke_width: float = 1.0


class InMemoryFactory:
    def marker(self, *, position: GeoPoint, label: Optional[str], title: str) -> MarkerPrimitive:
        return MarkerPrimitive(position=position, label=label, title=title)

    def polyline(
        self, *, coordinates: Sequence[GeoPoint], stroke_color: str, stroke_width: float
    ) -> PolylinePrimitive:
        return PolylinePrimitive(
            coordinates=list(coordinates), stroke_color=stroke_color, stroke_width=stroke_width
        )


@dataclass(frozen=True)
class Flight:
    duration_ms: int
    end_camera: CameraPose


class InMemorySurface:
    def __init__(self, heading: float = 0.0) -> None:
        self.heading = heading
        self.cursor = "default"
        self.flights: list[Flight] = []
        self._children: list[Primitive] = []

    @property
    def children(self) -> Sequence[Primitive]:
        return tuple(self._children)

    @property
    def camera(self) -> Optional[CameraPose]:
        """Pose of the most recent flight; the last command wins."""
        return self.flights[-1].end_camera if self.flights else None

    def append(self, primitive: Primitive) -> None:
        self._children.append(primitive)

    def remove(self, primitive: Primitive) -> None:
        self._children.remove(primitive)

    def fly_camera_to(self, *, duration_ms: int, end_camera: CameraPose) -> None:
        self.flights.append(Flight(duration_ms=duration_ms, end_camera=end_camera))
        self.heading = end_camera.heading
