"""Observable entity store.

Holds the markers and overlays currently on the map, a depth-1 camera target
request and the auto-frame suppression flag. Every mutation replaces one field
as a whole; listeners are told which fields changed.
"""

from __future__ import annotations

import dataclasses
import logging
import threading
from collections import deque
from collections.abc import Callable, Iterable
from enum import StrEnum

from globeframe.schemas import CameraPose, MapMarker, RectangularOverlay

_logger = logging.getLogger(__name__)


class StoreField(StrEnum):
    MARKERS = "markers"
    RECTANGULAR_OVERLAYS = "rectangular_overlays"
    CAMERA_TARGET = "camera_target"
    PREVENT_AUTO_FRAME = "prevent_auto_frame"


@dataclasses.dataclass(frozen=True)
class StoreSnapshot:
    markers: tuple[MapMarker, ...] = ()
    rectangular_overlays: tuple[RectangularOverlay, ...] = ()
    camera_target: CameraPose | None = None
    prevent_auto_frame: bool = False


StoreListener = Callable[[StoreSnapshot, frozenset[StoreField]], None]


class EntityStore:
    """Single owner of map entity state.

    Listeners are called synchronously after each effective change, outside
    the store lock, so they may mutate the store again. Changes made from
    inside a listener are queued and delivered after the current one, so
    every listener sees snapshots in commit order.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._state = StoreSnapshot()
        self._listeners: list[StoreListener] = []
        self._pending: deque[tuple[StoreSnapshot, frozenset[StoreField]]] = deque()
        self._dispatching = False

    def snapshot(self) -> StoreSnapshot:
        with self._lock:
            return self._state

    @property
    def markers(self) -> tuple[MapMarker, ...]:
        return self.snapshot().markers

    @property
    def rectangular_overlays(self) -> tuple[RectangularOverlay, ...]:
        return self.snapshot().rectangular_overlays

    @property
    def camera_target(self) -> CameraPose | None:
        return self.snapshot().camera_target

    @property
    def prevent_auto_frame(self) -> bool:
        return self.snapshot().prevent_auto_frame

    def subscribe(self, listener: StoreListener) -> Callable[[], None]:
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def set_markers(self, markers: Iterable[MapMarker]) -> None:
        self._replace(StoreField.MARKERS, tuple(markers))

    def set_rectangular_overlays(self, overlays: Iterable[RectangularOverlay]) -> None:
        self._replace(StoreField.RECTANGULAR_OVERLAYS, tuple(overlays))

    def clear_rectangular_overlays(self) -> None:
        self._replace(StoreField.RECTANGULAR_OVERLAYS, ())

    def set_camera_target(self, target: CameraPose | None) -> None:
        self._replace(StoreField.CAMERA_TARGET, target)

    def set_prevent_auto_frame(self, prevent: bool) -> None:
        self._replace(StoreField.PREVENT_AUTO_FRAME, bool(prevent))

    def request_focus(self, pose: CameraPose) -> None:
        """Post a user-driven focus request.

        Suppression is raised before the target is published so an auto-frame
        trigger reacting to the target already sees the flag.
        """
        self.set_prevent_auto_frame(True)
        self.set_camera_target(pose)

    def take_camera_target(self) -> CameraPose | None:
        """Consume the pending camera target; at most one caller receives it."""
        with self._lock:
            target = self._state.camera_target
            if target is None:
                return None
            self._commit(StoreField.CAMERA_TARGET, None)
        self._drain()
        return target

    def _replace(self, field: StoreField, value: object) -> None:
        with self._lock:
            if getattr(self._state, field.value) == value:
                return
            self._commit(field, value)
        _logger.debug("Store field %s changed", field)
        self._drain()

    def _commit(self, field: StoreField, value: object) -> None:
        # Caller holds the lock, so queue order is commit order.
        self._state = dataclasses.replace(self._state, **{field.value: value})
        self._pending.append((self._state, frozenset({field})))

    def _drain(self) -> None:
        with self._lock:
            if self._dispatching:
                return
            self._dispatching = True
        try:
            while True:
                with self._lock:
                    if not self._pending:
                        self._dispatching = False
                        return
                    snapshot, changed = self._pending.popleft()
                    listeners = list(self._listeners)
                for listener in listeners:
                    listener(snapshot, changed)
        except BaseException:
            with self._lock:
                self._dispatching = False
            raise
