"""Sets up fixtures general to the entire test suite of this package.

This file is read during the collection phase of pytest when running anything
inside this directory.
"""

import pytest

from recoflow.geo import GeoManager
from recoflow.hist import HistoManager
from recoflow.node import RecoConsts, RecoServer, make_top_node


@pytest.fixture(autouse=True)
def reset_singletons():
    """Start every test with a fresh event loop state.

    The server, the flags, the histogram registry and the geometry are
    process-wide singletons shared by all the modules of a job.
    """
    RecoServer.reset()
    RecoConsts.reset()
    HistoManager.reset()
    GeoManager.reset()

    yield

    RecoServer.reset()
    RecoConsts.reset()
    HistoManager.reset()
    GeoManager.reset()


@pytest.fixture(name="top_node")
def fixture_top_node():
    """Default node tree of the event loop, with `DST`, `RUN` and `PAR`."""
    return RecoServer.instance().top_node


@pytest.fixture(name="empty_top_node")
def fixture_empty_top_node():
    """Stand-alone node tree, not registered with the server."""
    return make_top_node("TEST")
