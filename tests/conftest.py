"""Shared fixtures for the mind map tests."""

import os

# Widgets and PNG rendering run without a display
os.environ.setdefault('QT_QPA_PLATFORM', 'offscreen')

import pytest  # noqa: E402

from mindmap.graph_editor.graph_model import GraphStore  # noqa: E402


@pytest.fixture(scope='session')
def qapp():
    """One QApplication for the whole session."""
    from PySide6.QtWidgets import QApplication
    app = QApplication.instance() or QApplication([])
    yield app


@pytest.fixture
def store():
    """A fresh store holding only the root node."""
    return GraphStore()


@pytest.fixture
def triangle():
    """Root plus two nodes, root-a and a-b connected."""
    g = GraphStore()
    a = g.add_node()
    b = g.add_node()
    g.add_connection('root', a.id)
    g.add_connection(a.id, b.id)
    g.select(None)
    return g, a, b


@pytest.fixture
def events(store):
    """Record every notify() source fired by the store fixture."""
    seen = []
    store.on_change(seen.append)
    return seen
