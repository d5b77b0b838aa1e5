"""
Tests for the mind map Graph Store.

Tests cover:
    - Root node invariants
    - Node add / delete (cascade) / label / colour / move
    - Undirected, duplicate-free connections
    - Geometry helpers (midpoint, centroid)
    - Serialisation and repair of loaded data
"""

import json

import pytest

from mindmap.graph_editor.graph_model import (
    GraphStore, MindMapNode, MindMapConnection,
    ROOT_ID, NODE_W, NODE_H, PALETTE, make_root,
)
from mindmap.ops.export import to_json


# ============================================================
# ROOT
# ============================================================

class TestRoot:
    """The root node is always present and never deletable."""

    def test_default_store_has_root(self, store):
        assert [n.id for n in store.nodes] == [ROOT_ID]
        root = store.root
        assert (root.x, root.y) == (250, 200)
        assert root.label == 'Central Idea'
        assert root.color == '#3b82f6'

    def test_root_survives_many_adds(self, store):
        for _ in range(20):
            store.add_node()
        assert store.get_node(ROOT_ID) is not None
        assert sum(1 for n in store.nodes if n.id == ROOT_ID) == 1

    def test_delete_root_is_refused(self, triangle):
        g, a, b = triangle
        before = g.to_dict()
        assert g.delete_node(ROOT_ID) is False
        assert g.to_dict() == before

    def test_clear_resets_to_root(self, triangle):
        g, _, _ = triangle
        g.clear()
        assert [n.id for n in g.nodes] == [ROOT_ID]
        assert g.connections == []
        assert g.selected_id is None


# ============================================================
# NODES
# ============================================================

class TestNodes:
    """add_node / delete_node / update_* / move_node."""

    def test_add_node_defaults(self, store, events):
        node = store.add_node()
        assert node.id.startswith('node-')
        assert node.label == 'Node 1'
        assert node.color == PALETTE[1]
        assert (node.x, node.y) == (180, 180)
        assert store.selected_id == node.id
        assert events == ['add_node']

    def test_add_node_ids_unique(self, store):
        ids = {store.add_node().id for _ in range(50)}
        assert len(ids) == 50

    def test_palette_cycles(self, store):
        nodes = [store.add_node() for _ in range(9)]
        # count before the 8th add is 8, so it wraps to PALETTE[0]
        assert nodes[7].color == PALETTE[0]
        assert nodes[8].color == PALETTE[1]

    def test_delete_cascades_connections(self, triangle):
        g, a, b = triangle
        assert g.delete_node(a.id) is True
        assert g.get_node(a.id) is None
        assert all(not c.touches(a.id) for c in g.connections)
        assert g.connections == []

    def test_delete_clears_selection(self, triangle):
        g, a, _ = triangle
        g.select(a.id)
        g.delete_node(a.id)
        assert g.selected_id is None

    def test_delete_unknown_node(self, store, events):
        assert store.delete_node('nope') is False
        assert events == []

    def test_update_label(self, store):
        node = store.add_node()
        assert store.update_node_label(node.id, 'Ideas & <plans>') is True
        assert store.get_node(node.id).label == 'Ideas & <plans>'

    def test_blank_label_refused(self, store):
        node = store.add_node()
        assert store.update_node_label(node.id, '   ') is False
        assert store.get_node(node.id).label == 'Node 1'

    def test_update_color(self, store):
        store.update_node_color(ROOT_ID, PALETTE[4])
        assert store.root.color == PALETTE[4]

    def test_move_clamps_to_origin(self, store, events):
        store.move_node(ROOT_ID, -40, 75)
        assert (store.root.x, store.root.y) == (0, 75)
        assert events == ['move']

    def test_select_unknown_is_ignored(self, store, events):
        store.select('missing')
        assert store.selected_id is None
        assert events == []


# ============================================================
# CONNECTIONS
# ============================================================

class TestConnections:
    """Connections are undirected, duplicate-free and never self-loops."""

    def test_reverse_duplicate_refused(self, store):
        a = store.add_node()
        assert store.add_connection(ROOT_ID, a.id) is True
        assert store.add_connection(a.id, ROOT_ID) is False
        assert len(store.connections) == 1

    def test_exact_duplicate_refused(self, store):
        a = store.add_node()
        store.add_connection(ROOT_ID, a.id)
        assert store.add_connection(ROOT_ID, a.id) is False
        assert len(store.connections) == 1

    def test_self_loop_refused(self, store):
        assert store.add_connection(ROOT_ID, ROOT_ID) is False
        assert store.connections == []

    def test_missing_endpoint_refused(self, store):
        assert store.add_connection(ROOT_ID, 'ghost') is False

    def test_delete_connection_exact_pair(self, triangle):
        g, a, b = triangle
        assert g.delete_connection(a.id, ROOT_ID) is False
        assert g.delete_connection(ROOT_ID, a.id) is True
        assert len(g.connections) == 1
        assert g.find_connection(a.id, b.id) is not None

    def test_connections_for_node(self, triangle):
        g, a, b = triangle
        assert len(g.connections_for_node(a.id)) == 2
        assert len(g.connections_for_node(b.id)) == 1


# ============================================================
# GEOMETRY
# ============================================================

class TestGeometry:
    """Midpoint and centroid helpers."""

    def test_midpoint_is_between_centres(self):
        g = GraphStore()
        g.nodes = [MindMapNode(id=ROOT_ID, x=0, y=0),
                   MindMapNode(id='b', x=200, y=100)]
        conn = MindMapConnection(ROOT_ID, 'b')
        assert g.connection_midpoint(conn) == (100 + NODE_W / 2, 50 + NODE_H / 2)

    def test_centroid_uses_top_left_corners(self):
        g = GraphStore()
        g.nodes = [MindMapNode(id=ROOT_ID, x=0, y=0),
                   MindMapNode(id='b', x=100, y=300)]
        assert g.centroid() == (50, 150)

    def test_node_center(self):
        assert make_root().center() == (300, 225)


# ============================================================
# SERIALISATION
# ============================================================

class TestSerialisation:
    """to_dict / from_dict / load_dict."""

    def test_round_trip(self, triangle):
        g, _, _ = triangle
        again = GraphStore.from_dict(g.to_dict())
        assert again.to_dict() == g.to_dict()

    def test_connection_keys(self):
        assert MindMapConnection('a', 'b').to_dict() == {'from': 'a', 'to': 'b'}

    def test_missing_root_is_restored(self):
        g = GraphStore.from_dict({'nodes': [{'id': 'x', 'x': 1, 'y': 2}],
                                  'connections': []})
        assert g.nodes[0].id == ROOT_ID
        assert g.get_node('x') is not None

    def test_bad_connections_dropped(self):
        g = GraphStore.from_dict({
            'nodes': [{'id': ROOT_ID}, {'id': 'a'}],
            'connections': [
                {'from': ROOT_ID, 'to': 'a'},
                {'from': 'a', 'to': ROOT_ID},
                {'from': 'a', 'to': 'a'},
                {'from': 'a', 'to': 'ghost'},
            ],
        })
        assert [c.to_dict() for c in g.connections] == [{'from': ROOT_ID, 'to': 'a'}]

    def test_duplicate_node_ids_dropped(self):
        g = GraphStore.from_dict({'nodes': [{'id': 'a', 'label': 'one'},
                                            {'id': 'a', 'label': 'two'}]})
        assert [n.label for n in g.nodes if n.id == 'a'] == ['one']

    def test_load_dict_keeps_listeners(self, store, events):
        store.select(ROOT_ID)
        store.load_dict({'nodes': [{'id': 'x'}]}, source='import')
        assert events[-1] == 'import'
        assert store.selected_id == ROOT_ID

    def test_load_dict_clears_stale_selection(self, store):
        node = store.add_node()
        store.load_dict({'nodes': [{'id': ROOT_ID}]})
        assert store.get_node(node.id) is None
        assert store.selected_id is None

    def test_node_missing_id_raises(self):
        with pytest.raises(KeyError):
            GraphStore.from_dict({'nodes': [{'label': 'no id'}]})


# ============================================================
# SCENARIOS
# ============================================================

class TestScenarios:
    """Short editing sessions checked end to end."""

    def test_three_adds(self, store):
        nodes = [store.add_node() for _ in range(3)]
        assert len(store.nodes) == 4
        assert len({n.id for n in store.nodes}) == 4
        assert len({(n.x, n.y) for n in nodes}) == 3
        assert store.connections == []

    def test_connect_then_delete(self, store):
        n1 = store.add_node()
        store.add_connection(ROOT_ID, n1.id)
        store.delete_node(n1.id)
        assert store.connections == []
        assert len(store.nodes) == 1

    def test_connect_and_export_json(self, store):
        n1 = store.add_node()
        n2 = store.add_node()
        store.add_connection(n1.id, n2.id)
        data = json.loads(to_json(store))
        assert len(data['nodes']) == 3
        assert data['connections'] == [{'from': n1.id, 'to': n2.id}]


class TestCoordinates:
    """Loaded coordinates must be finite numbers."""

    def test_ints_become_floats(self):
        node = MindMapNode.from_dict({'id': 'a', 'x': 3, 'y': 4})
        assert (node.x, node.y) == (3.0, 4.0)
        assert isinstance(node.x, float)

    @pytest.mark.parametrize('bad', [None, '10', True, float('inf'), float('nan')])
    def test_bad_coordinate_raises(self, bad):
        with pytest.raises((TypeError, ValueError)):
            MindMapNode.from_dict({'id': 'a', 'x': bad, 'y': 0})
