from globeframe.schemas import CameraPose, GeoPoint, MapMarker


def make_marker(lat, lng, label="m", show_label=True):
    return MapMarker(position=GeoPoint(lat=lat, lng=lng), label=label, show_label=show_label)


def make_pose(lat=0.0, lng=0.0, range_m=1000.0):
    return CameraPose(center=GeoPoint(lat=lat, lng=lng), range=range_m)
