import pytest

from globeframe.controller import MapController
from globeframe.providers.flat import FlatElevationProvider
from globeframe.store import EntityStore
from globeframe.surface import InMemoryFactory, InMemorySurface


@pytest.fixture
def store():
    return EntityStore()


@pytest.fixture
def surface():
    return InMemorySurface()


@pytest.fixture
def controller(surface, store):
    return MapController(surface, InMemoryFactory(), FlatElevationProvider(elevation_m=120.0), store)
