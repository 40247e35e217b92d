from __future__ import annotations

from typing import Literal, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class GeoPoint(BaseModel):
    model_config = ConfigDict(frozen=True)

    lat: float
    lng: float
    altitude: float = 0.0

    @field_validator("lat")
    @classmethod
    def _lat_range(cls, value: float) -> float:
        if not -90 <= value <= 90:
            raise ValueError("lat must be in [-90, 90]")
        return value

    @field_validator("lng")
    @classmethod
    def _lng_range(cls, value: float) -> float:
        if not -180 <= value <= 180:
            raise ValueError("lng must be in [-180, 180]")
        return value

    def with_altitude(self, altitude: float) -> "GeoPoint":
        return self.model_copy(update={"altitude": altitude})


class MapMarker(BaseModel):
    model_config = ConfigDict(frozen=True)

    position: GeoPoint
    label: str = ""
    show_label: bool = True


class Corners(BaseModel):
    model_config = ConfigDict(frozen=True)

    north_east: GeoPoint
    north_west: GeoPoint
    south_east: GeoPoint
    south_west: GeoPoint

    def as_list(self) -> list[GeoPoint]:
        return [self.north_east, self.north_west, self.south_east, self.south_west]


class RectangularOverlay(BaseModel):
    model_config = ConfigDict(frozen=True)

    center: GeoPoint
    corners: Corners
    width: float = Field(..., ge=0)
    height: float = Field(..., ge=0)
    label: str = ""
    color: str = "#ff0000"


class CameraPose(BaseModel):
    model_config = ConfigDict(frozen=True)

    center: GeoPoint
    range: float = Field(..., ge=0)
    heading: float = 0.0
    tilt: float = Field(0.0, ge=0, le=90)
    roll: float = 0.0

    @field_validator("heading")
    @classmethod
    def _normalize_heading(cls, value: float) -> float:
        return value % 360.0


class Padding(BaseModel):
    """Fraction of the viewport reserved by UI chrome on each edge."""

    model_config = ConfigDict(frozen=True)

    top: float = Field(0.0, ge=0, lt=1)
    right: float = Field(0.0, ge=0, lt=1)
    bottom: float = Field(0.0, ge=0, lt=1)
    left: float = Field(0.0, ge=0, lt=1)

    @model_validator(mode="after")
    def _leave_visible_region(self) -> "Padding":
        if self.left + self.right >= 1:
            raise ValueError("left + right padding must leave part of the viewport visible")
        if self.top + self.bottom >= 1:
            raise ValueError("top + bottom padding must leave part of the viewport visible")
        return self

    @classmethod
    def from_sequence(cls, values: Sequence[float]) -> "Padding":
        if len(values) != 4:
            raise ValueError("padding needs exactly four values: top, right, bottom, left")
        top, right, bottom, left = values
        return cls(top=top, right=right, bottom=bottom, left=left)

    def as_tuple(self) -> tuple[float, float, float, float]:
        return (self.top, self.right, self.bottom, self.left)


class FramingConfig(BaseModel):
    fly_duration_ms: int = Field(5000, ge=0)
    range_margin_m: float = 1000.0
    tilt: float = Field(45.0, ge=0, le=90)
    fov_deg: float = Field(35.0, gt=0, lt=90)
    aspect_ratio: float = Field(16 / 9, gt=0)
    min_range_m: float = Field(500.0, ge=0)
    altitude_offset_m: float = 0.0
    fallback_ground_elevation_m: float = 0.0
    elevation_timeout_s: float = Field(5.0, gt=0)
    sample_corners: bool = True


class ElevationConfig(BaseModel):
    name: Literal["flat", "open_elevation", "google"] = "flat"
    api_key: Optional[str] = None
    url: Optional[str] = None
    max_retries: int = Field(3, ge=1)
    throttle_s: float = Field(0.0, ge=0)
    timeout_s: float = Field(10.0, gt=0)
    flat_elevation_m: float = 0.0

    @model_validator(mode="after")
    def _validate_provider(self) -> "ElevationConfig":
        if self.name == "google" and not self.api_key:
            raise ValueError("google elevation provider requires api_key")
        return self


class FarmSpec(BaseModel):
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)
    hectares: float = Field(10.0, gt=0)
    label: Optional[str] = None
    color: str = "#ff0000"


class SceneConfig(BaseModel):
    markers: list[MapMarker] = Field(default_factory=list)
    farms: list[FarmSpec] = Field(default_factory=list)
    padding: Padding = Field(default_factory=Padding)
    heading: float = 0.0
    framing: FramingConfig = Field(default_factory=FramingConfig)
    elevation: ElevationConfig = Field(default_factory=ElevationConfig)
    max_entities: int = 500

    @field_validator("padding", mode="before")
    @classmethod
    def _padding_from_list(cls, value: object) -> object:
        if isinstance(value, (list, tuple)):
            return Padding.from_sequence(value)
        return value

    @model_validator(mode="after")
    def _validate_entities(self) -> "SceneConfig":
        if len(self.markers) + len(self.farms) > self.max_entities:
            raise ValueError("Too many entities")
        return self
