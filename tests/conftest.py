"""
Global pytest configuration and fixtures for the eventgraph test suite.

Qt runs on the offscreen platform so GUI tests work without a display.
"""

import os
import sys

# Add project root to sys.path so 'eventgraph' imports without installing
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest

from eventgraph.graph_editor import GraphController, Point, get_kind


def pytest_collection_modifyitems(session, config, items):
    """Skip GUI tests on CI."""
    _ = session
    _ = config
    if "CI" in os.environ or "GITHUB_ACTIONS" in os.environ:
        skip_gui = pytest.mark.skip(reason="GUI tests don't work on CI")
        for item in items:
            if "gui" in item.keywords:
                item.add_marker(skip_gui)


@pytest.fixture
def controller():
    return GraphController()


@pytest.fixture
def delay():
    return get_kind("delay")


@pytest.fixture
def make_node(controller, delay):
    """Add a Delay node at (x, y) with the given size."""
    def _make(x, y, w=150.0, h=60.0, title=""):
        return controller.add_node(delay, Point(x, y), (w, h), title=title)
    return _make
