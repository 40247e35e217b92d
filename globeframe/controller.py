"""Map controller: puts entities on the render surface and moves the camera."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from typing import Optional, Union

from globeframe.camera import PaddingLike, look_at_with_padding
from globeframe.providers.base import ElevationLookup
from globeframe.schemas import CameraPose, FramingConfig, GeoPoint, MapMarker, RectangularOverlay
from globeframe.store import EntityStore
from globeframe.surface import Primitive, PrimitiveEvent, PrimitiveFactory, RenderSurface

_logger = logging.getLogger(__name__)

MARKER_FOCUS_ALTITUDE_M = 200.0
MARKER_FOCUS_RANGE_M = 1000.0
MARKER_FOCUS_TILT = 60.0
OVERLAY_FOCUS_ALTITUDE_M = 500.0
OVERLAY_FOCUS_TILT = 45.0
OUTLINE_STROKE_WIDTH = 3.0

CURSOR_DEFAULT = "default"
CURSOR_POINTER = "pointer"
CURSOR_CROSSHAIR = "crosshair"


class MapController:
    """Centralizes every interaction with the render surface.

    Click handlers never move the camera themselves; they post a focus
    request onto the store and whoever consumes the camera target flies there.
    """

    def __init__(
        self,
        surface: RenderSurface,
        factory: PrimitiveFactory,
        elevation: ElevationLookup,
        store: EntityStore,
        *,
        config: Optional[FramingConfig] = None,
    ) -> None:
        self._surface = surface
        self._factory = factory
        self._elevation = elevation
        self._store = store
        self._config = config or FramingConfig()
        self._generation = 0
        self._disposed = False

    @property
    def disposed(self) -> bool:
        return self._disposed

    def dispose(self) -> None:
        self._disposed = True

    def clear_map(self) -> None:
        if self._disposed:
            return
        for child in list(self._surface.children):
            self._surface.remove(child)

    def add_markers(self, markers: Iterable[MapMarker]) -> None:
        if self._disposed:
            _logger.debug("Controller disposed, not adding markers")
            return
        for marker in markers:
            primitive = self._factory.marker(
                position=marker.position,
                label=marker.label if marker.show_label else None,
                title=marker.label,
            )
            self._attach_cursor(primitive, CURSOR_POINTER)
            self._attach_focus(
                primitive,
                center=marker.position.with_altitude(MARKER_FOCUS_ALTITUDE_M),
                range_m=MARKER_FOCUS_RANGE_M,
                tilt=MARKER_FOCUS_TILT,
            )
            self._surface.append(primitive)

    def add_rectangular_overlays(self, overlays: Iterable[RectangularOverlay]) -> None:
        if self._disposed:
            _logger.debug("Controller disposed, not adding overlays")
            return
        for overlay in overlays:
            corners = overlay.corners
            path = [
                corners.north_west,
                corners.north_east,
                corners.south_east,
                corners.south_west,
                corners.north_west,
            ]
            focus_center = overlay.center.with_altitude(OVERLAY_FOCUS_ALTITUDE_M)
            focus_range = max(overlay.width, overlay.height) * 2

            outline = self._factory.polyline(
                coordinates=path, stroke_color=overlay.color, stroke_width=OUTLINE_STROKE_WIDTH
            )
            self._attach_cursor(outline, CURSOR_POINTER)
            self._attach_focus(outline, center=focus_center, range_m=focus_range, tilt=OVERLAY_FOCUS_TILT)
            self._surface.append(outline)

            center_marker = self._factory.marker(
                position=overlay.center, label=overlay.label, title=overlay.label
            )
            self._attach_cursor(center_marker, CURSOR_POINTER)
            self._attach_focus(
                center_marker, center=focus_center, range_m=focus_range, tilt=OVERLAY_FOCUS_TILT
            )
            self._surface.append(center_marker)

            for index, corner in enumerate(corners.as_list(), start=1):
                corner_marker = self._factory.marker(
                    position=corner, label=None, title=f"Rectangle Corner {index}"
                )
                self._attach_cursor(corner_marker, CURSOR_CROSSHAIR)
                self._surface.append(corner_marker)

    def fly_to(self, pose: CameraPose) -> None:
        if self._disposed:
            _logger.debug("Controller disposed, dropping flight to %s", pose.center)
            return
        self._generation += 1
        _logger.debug("Flying to %s range=%.0fm", pose.center, pose.range)
        self._surface.fly_camera_to(duration_ms=self._config.fly_duration_ms, end_camera=pose)

    async def frame_entities(
        self,
        entities: Sequence[Union[GeoPoint, object]],
        padding: PaddingLike,
        heading: float = 0.0,
    ) -> Optional[CameraPose]:
        """Frame ``entities`` and fly there; returns the pose flown to."""
        if not entities:
            return None
        positions = [_position_of(entity) for entity in entities]
        self._generation += 1
        generation = self._generation
        pose = await look_at_with_padding(
            positions, self._elevation, heading, padding, config=self._config
        )
        if self._disposed or generation != self._generation:
            # A newer flight or framing request was issued while elevation was pending.
            _logger.info("Framing of %d entities superseded, not flying", len(positions))
            return None
        widened = pose.model_copy(update={"range": pose.range + self._config.range_margin_m})
        self.fly_to(widened)
        return widened

    def _attach_cursor(self, primitive: Primitive, cursor: str) -> None:
        def on_enter() -> None:
            self._surface.cursor = cursor

        def on_leave() -> None:
            self._surface.cursor = CURSOR_DEFAULT

        primitive.add_listener(PrimitiveEvent.POINTER_ENTER, on_enter)
        primitive.add_listener(PrimitiveEvent.POINTER_LEAVE, on_leave)

    def _attach_focus(self, primitive: Primitive, *, center: GeoPoint, range_m: float, tilt: float) -> None:
        def on_click() -> None:
            self._store.request_focus(
                CameraPose(
                    center=center,
                    range=range_m,
                    tilt=tilt,
                    heading=self._surface.heading,
                    roll=0.0,
                )
            )

        primitive.add_listener(PrimitiveEvent.PRIMARY_CLICK, on_click)


def _position_of(entity: object) -> GeoPoint:
    if isinstance(entity, GeoPoint):
        return entity
    position = getattr(entity, "position", None)
    if not isinstance(position, GeoPoint):
        raise TypeError(f"cannot frame {type(entity).__name__}: no GeoPoint position")
    return position
