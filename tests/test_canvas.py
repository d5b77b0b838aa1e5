"""
Tests for the canvas widget and the editor window (offscreen).

Tests cover:
    - Hit testing: node bodies, hover buttons, palette, connection midpoints
    - Show All centring and scroll clamping
    - Zoom clamping
    - Root delete guard rail
    - Window stats line, undo/redo and autosave wiring
"""

import pytest
from PySide6.QtCore import QPointF

from mindmap.core.settings import Settings
from mindmap.core.storage import LocalStore, load_graph
from mindmap.graph_editor.graph_model import (
    GraphStore, MindMapNode, ROOT_ID, PALETTE,
)
from mindmap.graph_editor.node_canvas import MindMapCanvas, _Hit, ZOOM_MIN, ZOOM_MAX


@pytest.fixture
def canvas(qapp, store):
    c = MindMapCanvas(store)
    c.resize(800, 600)
    yield c
    c.deleteLater()


# ============================================================
# HIT TESTING
# ============================================================

class TestHitTest:

    def test_node_body(self, canvas, store):
        hit = canvas.hit_test(QPointF(300, 225))
        assert hit.kind == _Hit.NODE_BODY
        assert hit.node.id == ROOT_ID

    def test_empty_space(self, canvas):
        assert canvas.hit_test(QPointF(10, 10)).kind == _Hit.NONE

    def test_connection_midpoint(self, canvas, store):
        store.nodes.append(MindMapNode(id='b', x=650, y=200))
        store.add_connection(ROOT_ID, 'b')
        # centres (300, 225) and (700, 225)
        hit = canvas.hit_test(QPointF(500, 225))
        assert hit.kind == _Hit.CONN_DELETE
        assert hit.conn.joins(ROOT_ID, 'b')

    def test_palette_swatch_of_selected_node(self, canvas, store):
        store.select(ROOT_ID)
        color, centre = canvas._palette_swatches(store.root)[3]
        hit = canvas.hit_test(centre)
        assert hit.kind == _Hit.SWATCH
        assert hit.color == color == PALETTE[3]

    def test_root_has_no_delete_button(self, canvas, store):
        kinds = [k for k, _ in canvas._action_buttons(store.root)]
        assert kinds == [_Hit.LINK_BTN]
        node = store.add_node()
        kinds = [k for k, _ in canvas._action_buttons(node)]
        assert set(kinds) == {_Hit.LINK_BTN, _Hit.DELETE_BTN}


# ============================================================
# VIEW
# ============================================================

class TestView:

    def test_show_all_centres_centroid(self, canvas, store):
        store.nodes.append(MindMapNode(id='b', x=1250, y=1000))
        canvas.show_all(animate=False)
        # centroid of top-left corners is (750, 600)
        assert canvas.scroll_offset == QPointF(350, 300)
        assert canvas.zoom == 1.0

    def test_show_all_clamps_at_zero(self, canvas, store):
        canvas.show_all(animate=False)
        assert canvas.scroll_offset == QPointF(0, 0)

    def test_zoom_is_clamped(self, canvas):
        canvas.set_zoom(100)
        assert canvas.zoom == ZOOM_MAX
        canvas.set_zoom(0.001)
        assert canvas.zoom == ZOOM_MIN

    def test_show_all_resets_zoom(self, canvas):
        canvas.zoom_in()
        assert canvas.zoom > 1.0
        canvas.show_all(animate=False)
        assert canvas.zoom == 1.0

    def test_coordinate_round_trip(self, canvas):
        canvas.set_zoom(2.0)
        p = QPointF(123, 45)
        back = canvas.scene_to_view(canvas.view_to_scene(p))
        assert abs(back.x() - p.x()) < 1e-9 and abs(back.y() - p.y()) < 1e-9


# ============================================================
# GUARD RAILS
# ============================================================

class TestGuardRails:

    def test_root_delete_emits_message(self, canvas, store):
        messages = []
        canvas.status_message.connect(messages.append)
        canvas._delete_node(ROOT_ID)
        assert messages == ['Cannot delete the root node']
        assert store.root is not None

    def test_link_mode_needs_selection(self, canvas):
        messages = []
        canvas.status_message.connect(messages.append)
        canvas.start_link_mode()
        assert messages == ['Select a node to link from']
        assert canvas.controller.connecting_from is None

    def test_link_mode_toggles(self, canvas, store):
        store.select(ROOT_ID)
        canvas.start_link_mode()
        assert canvas.controller.connecting_from == ROOT_ID
        canvas.start_link_mode()
        assert canvas.controller.connecting_from is None

    def test_delete_while_dragging_ends_drag(self, canvas, store):
        node = store.add_node()
        finished = []
        canvas.drag_finished.connect(finished.append)
        canvas.controller.press(node.id, (node.x + 5, node.y + 5))
        canvas.controller.move((300, 300))
        canvas._delete_node(node.id)
        assert canvas.controller.dragging_id is None
        assert canvas.controller.release() is False
        assert finished == []

    def test_clear_cancels_connect(self, canvas, store):
        store.select(ROOT_ID)
        canvas.start_link_mode()
        store.clear()
        assert canvas.controller.connecting_from is None


# ============================================================
# WINDOW
# ============================================================

@pytest.fixture
def window(qapp, tmp_path):
    from mindmap.graph_editor.mindmap_window import MindMapWindow
    settings = Settings(tmp_path / 'settings.json')
    settings.autosave_delay_ms = 60000
    local = LocalStore(tmp_path / 'storage.json')
    w = MindMapWindow(GraphStore(), local, settings)
    yield w
    w.deleteLater()


class TestWindow:

    def test_stats_line(self, window):
        assert window.stats_text() == '1 nodes • 0 connections'
        node = window.store.add_node()
        window.store.add_connection(ROOT_ID, node.id)
        assert window.stats_text() == '2 nodes • 1 connections'

    def test_stats_hint_while_connecting(self, window):
        window.store.select(ROOT_ID)
        window._canvas.start_link_mode()
        assert 'Click another node to connect' in window.stats_text()

    def test_undo_redo_add(self, window):
        node = window.store.add_node()
        window.undo()
        assert window.store.get_node(node.id) is None
        window.redo()
        assert window.store.get_node(node.id) is not None

    def test_moves_are_one_undo_step(self, window):
        store = window.store
        for x in range(10, 100, 10):
            store.move_node(ROOT_ID, x, x)
        window._on_drag_finished(ROOT_ID)
        window.undo()
        assert (store.root.x, store.root.y) == (250, 200)

    def test_change_schedules_save_and_close_flushes(self, window, tmp_path):
        window.store.add_node()
        assert window._autosaver.pending
        window.close()
        assert not window._autosaver.pending
        saved = load_graph(LocalStore(tmp_path / 'storage.json'))
        assert len(saved.nodes) == 2
