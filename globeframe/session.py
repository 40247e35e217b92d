"""Application-level wiring between the entity store and the map controller.

The session reacts to store changes: entity-list changes are reconciled onto
the surface and auto-framed, camera targets are consumed and flown to.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Optional

from globeframe.controller import MapController
from globeframe.padding import PaddingObserver
from globeframe.schemas import CameraPose, GeoPoint, Padding
from globeframe.store import EntityStore, StoreField, StoreSnapshot

_logger = logging.getLogger(__name__)

LOCATION_FOCUS_ALTITUDE_M = 750.0
LOCATION_FOCUS_RANGE_M = 2500.0
LOCATION_FOCUS_TILT = 50.0

_ENTITY_FIELDS = frozenset({StoreField.MARKERS, StoreField.RECTANGULAR_OVERLAYS})


def framing_points(snapshot: StoreSnapshot) -> list[GeoPoint]:
    """Marker positions, overlay centers and every overlay corner."""
    points = [marker.position for marker in snapshot.markers]
    points.extend(overlay.center for overlay in snapshot.rectangular_overlays)
    for overlay in snapshot.rectangular_overlays:
        points.extend(overlay.corners.as_list())
    return points


class MapSession:
    def __init__(
        self,
        store: EntityStore,
        controller: MapController,
        *,
        padding: Optional[Padding] = None,
        padding_observer: Optional[PaddingObserver] = None,
        heading: float = 0.0,
    ) -> None:
        self._store = store
        self._controller = controller
        self._observer = padding_observer
        if padding is None:
            padding = padding_observer.padding if padding_observer is not None else Padding()
        self._padding = padding
        self._heading = heading
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._tasks: set[asyncio.Task[Optional[CameraPose]]] = set()
        self._unsubscribers: list[Callable[[], None]] = []

    @property
    def padding(self) -> Padding:
        return self._padding

    def start(self) -> None:
        """Subscribe to the store; must be called from a running event loop."""
        if self._loop is not None:
            return
        self._loop = asyncio.get_running_loop()
        self._unsubscribers.append(self._store.subscribe(self._on_store_change))
        if self._observer is not None:
            self._unsubscribers.append(self._observer.subscribe(self.set_padding))

    def stop(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers.clear()
        for task in self._tasks:
            task.cancel()
        self._controller.dispose()
        self._loop = None

    async def wait_idle(self) -> None:
        """Wait for pending framing; tasks cancelled by ``stop`` are skipped."""
        while self._tasks:
            done, _ = await asyncio.wait(list(self._tasks))
            self._tasks.difference_update(done)
            for task in done:
                if not task.cancelled() and task.exception() is not None:
                    raise task.exception()

    def set_padding(self, padding: Padding) -> None:
        if padding == self._padding:
            return
        self._padding = padding
        if self._store.prevent_auto_frame:
            return
        self._schedule_frame(self._store.snapshot())

    def focus_location(self, lat: float, lng: float) -> None:
        self._store.request_focus(
            CameraPose(
                center=GeoPoint(lat=lat, lng=lng, altitude=LOCATION_FOCUS_ALTITUDE_M),
                range=LOCATION_FOCUS_RANGE_M,
                tilt=LOCATION_FOCUS_TILT,
                heading=0.0,
                roll=0.0,
            )
        )

    def _on_store_change(self, snapshot: StoreSnapshot, changed: frozenset[StoreField]) -> None:
        if StoreField.CAMERA_TARGET in changed and snapshot.camera_target is not None:
            self._apply_camera_target()
        if changed & _ENTITY_FIELDS:
            # Suppression is read before the entity lists are looked at.
            suppressed = self._store.prevent_auto_frame
            self._reconcile(snapshot)
            if not suppressed:
                self._schedule_frame(snapshot)

    def _apply_camera_target(self) -> None:
        target = self._store.take_camera_target()
        if target is None:
            return
        self._controller.fly_to(target)
        self._store.set_prevent_auto_frame(False)

    def _reconcile(self, snapshot: StoreSnapshot) -> None:
        self._controller.clear_map()
        if snapshot.markers:
            self._controller.add_markers(snapshot.markers)
        if snapshot.rectangular_overlays:
            self._controller.add_rectangular_overlays(snapshot.rectangular_overlays)
        _logger.debug(
            "Reconciled %d markers and %d overlays",
            len(snapshot.markers),
            len(snapshot.rectangular_overlays),
        )

    def _schedule_frame(self, snapshot: StoreSnapshot) -> None:
        points = framing_points(snapshot)
        if not points or self._loop is None:
            return
        task = self._loop.create_task(
            self._controller.frame_entities(points, self._padding, self._heading)
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
