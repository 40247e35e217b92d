import pytest
from pydantic import ValidationError

from globeframe.schemas import CameraPose, ElevationConfig, GeoPoint, Padding, SceneConfig


def test_geopoint_range_validation():
    with pytest.raises(ValidationError):
        GeoPoint(lat=91, lng=0)
    with pytest.raises(ValidationError):
        GeoPoint(lat=0, lng=-181)


def test_geopoint_with_altitude_copies():
    point = GeoPoint(lat=1, lng=2)
    raised = point.with_altitude(200)
    assert raised.altitude == 200
    assert point.altitude == 0


def test_padding_from_sequence():
    padding = Padding.from_sequence([0.1, 0.2, 0.3, 0.4])
    assert (padding.top, padding.right, padding.bottom, padding.left) == (0.1, 0.2, 0.3, 0.4)
    with pytest.raises(ValueError):
        Padding.from_sequence([0.1, 0.2])
    with pytest.raises(ValidationError):
        Padding(left=1.0)
    with pytest.raises(ValidationError):
        Padding(left=0.6, right=0.5)


def test_camera_pose_heading_normalized():
    pose = CameraPose(center=GeoPoint(lat=0, lng=0), range=10, heading=-90)
    assert pose.heading == 270


def test_google_requires_api_key():
    with pytest.raises(ValidationError):
        ElevationConfig(name="google")


def test_scene_accepts_padding_list():
    scene = SceneConfig.model_validate(
        {
            "markers": [{"position": {"lat": 1, "lng": 2}, "label": "Well"}],
            "farms": [{"lat": 1, "lng": 2, "hectares": 5}],
            "padding": [0.05, 0.05, 0.05, 0.3],
        }
    )
    assert scene.padding.left == 0.3
    assert scene.markers[0].show_label is True
