"""Mind map data model.

Pure Python, no Qt dependency.  Owns the nodes and connections that the
canvas edits, that storage persists and that the exporters render.

Coordinates:
  x, y  – top-left corner of the node box in canvas units.  Never negative
          once a node has been moved; loaded data is taken as-is.

Root node
---------
Exactly one node with id "root" always exists.  It cannot be deleted and is
re-created by from_dict() when a payload lacks it.  It has no other special
behaviour.

Connections
-----------
Stored with a from/to order (the order they were made in) but treated as
undirected: (b, a) is refused when (a, b) exists, and self-loops are never
created.
"""

from __future__ import annotations
import math
import uuid
from dataclasses import dataclass, field
from typing import Callable, Optional


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

ROOT_ID = "root"

NODE_W = 100
NODE_H = 50

PALETTE = [
    '#3b82f6',  # blue
    '#10b981',  # green
    '#8b5cf6',  # purple
    '#f59e0b',  # orange
    '#ec4899',  # pink
    '#06b6d4',  # cyan
    '#ef4444',  # red
    '#14b8a6',  # teal
]


def new_node_id() -> str:
    return f"node-{uuid.uuid4().hex}"


def _coord(v) -> float:
    """Stored coordinate as a finite float. Raises TypeError / ValueError."""
    if isinstance(v, bool) or not isinstance(v, (int, float)):
        raise TypeError(f"coordinate must be a number, not {v!r}")
    v = float(v)
    if not math.isfinite(v):
        raise ValueError(f"coordinate must be finite, not {v!r}")
    return v


# ---------------------------------------------------------------------------
# Node / connection
# ---------------------------------------------------------------------------

@dataclass
class MindMapNode:
    id: str = field(default_factory=new_node_id)
    x: float = 0.0
    y: float = 0.0
    label: str = ""
    color: str = PALETTE[0]

    def center(self) -> tuple[float, float]:
        return (self.x + NODE_W / 2, self.y + NODE_H / 2)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "x": self.x, "y": self.y,
            "label": self.label,
            "color": self.color,
        }

    @staticmethod
    def from_dict(d: dict) -> "MindMapNode":
        return MindMapNode(
            id=str(d["id"]),
            x=_coord(d.get("x", 0.0)), y=_coord(d.get("y", 0.0)),
            label=str(d.get("label", "")),
            color=str(d.get("color", PALETTE[0])),
        )


@dataclass
class MindMapConnection:
    from_node: str
    to_node: str

    def touches(self, node_id: str) -> bool:
        return self.from_node == node_id or self.to_node == node_id

    def joins(self, a: str, b: str) -> bool:
        """True if this connection links a and b in either direction."""
        return ((self.from_node == a and self.to_node == b) or
                (self.from_node == b and self.to_node == a))

    def to_dict(self) -> dict:
        return {"from": self.from_node, "to": self.to_node}

    @staticmethod
    def from_dict(d: dict) -> "MindMapConnection":
        return MindMapConnection(from_node=str(d["from"]), to_node=str(d["to"]))


def make_root() -> MindMapNode:
    return MindMapNode(id=ROOT_ID, x=250, y=200, label="Central Idea",
                       color=PALETTE[0])


# ---------------------------------------------------------------------------
# Graph store
# ---------------------------------------------------------------------------

class GraphStore:
    """Mutable mind map: nodes + connections + single selection.

    Every mutation calls notify(source) so listeners (autosave, undo, the
    stats line) can react.  Methods that can refuse a change return a bool.
    """

    def __init__(self):
        self.nodes: list[MindMapNode] = [make_root()]
        self.connections: list[MindMapConnection] = []
        self.selected_id: Optional[str] = None
        self._listeners: list[Callable] = []

    # -- Observers --

    def on_change(self, callback: Callable) -> None:
        self._listeners.append(callback)

    def notify(self, source=None) -> None:
        for cb in self._listeners:
            cb(source)

    # -- Lookup --

    def get_node(self, node_id: str) -> Optional[MindMapNode]:
        return next((n for n in self.nodes if n.id == node_id), None)

    @property
    def root(self) -> MindMapNode:
        return self.get_node(ROOT_ID)

    def find_connection(self, a: str, b: str) -> Optional[MindMapConnection]:
        return next((c for c in self.connections if c.joins(a, b)), None)

    def connections_for_node(self, node_id: str) -> list[MindMapConnection]:
        return [c for c in self.connections if c.touches(node_id)]

    # -- Selection --

    def select(self, node_id: Optional[str]) -> None:
        if node_id is not None and self.get_node(node_id) is None:
            return
        if node_id != self.selected_id:
            self.selected_id = node_id
            self.notify('selection')

    # -- Nodes --

    def add_node(self) -> MindMapNode:
        count = len(self.nodes)
        node = MindMapNode(
            x=150 + (count * 30) % 300,
            y=150 + (count * 30) % 200,
            label=f"Node {count}",
            color=PALETTE[count % len(PALETTE)],
        )
        self.nodes.append(node)
        self.selected_id = node.id
        self.notify('add_node')
        return node

    def delete_node(self, node_id: str) -> bool:
        if node_id == ROOT_ID or self.get_node(node_id) is None:
            return False
        self.nodes = [n for n in self.nodes if n.id != node_id]
        self.connections = [c for c in self.connections if not c.touches(node_id)]
        if self.selected_id == node_id:
            self.selected_id = None
        self.notify('delete_node')
        return True

    def update_node_label(self, node_id: str, label: str) -> bool:
        node = self.get_node(node_id)
        if node is None or not label.strip():
            return False
        node.label = label
        self.notify('label')
        return True

    def update_node_color(self, node_id: str, color: str) -> None:
        node = self.get_node(node_id)
        if node is None:
            return
        node.color = color
        self.notify('color')

    def move_node(self, node_id: str, x: float, y: float) -> None:
        node = self.get_node(node_id)
        if node is None:
            return
        node.x = max(0, x)
        node.y = max(0, y)
        self.notify('move')

    # -- Connections --

    def add_connection(self, from_id: str, to_id: str) -> bool:
        """Add an undirected connection. Returns True if accepted.

        Rules:
          - No self-loops.
          - Both endpoints must exist.
          - No duplicate in either direction.
        """
        if from_id == to_id:
            return False
        if self.get_node(from_id) is None or self.get_node(to_id) is None:
            return False
        if self.find_connection(from_id, to_id) is not None:
            return False
        self.connections.append(MindMapConnection(from_id, to_id))
        self.notify('connect')
        return True

    def delete_connection(self, from_id: str, to_id: str) -> bool:
        before = len(self.connections)
        self.connections = [
            c for c in self.connections
            if not (c.from_node == from_id and c.to_node == to_id)
        ]
        if len(self.connections) == before:
            return False
        self.notify('disconnect')
        return True

    # -- Whole graph --

    def clear(self) -> None:
        self.nodes = [make_root()]
        self.connections = []
        self.selected_id = None
        self.notify('clear')

    def load_dict(self, d: dict, source='load') -> None:
        """Replace nodes and connections in place (listeners are kept)."""
        other = GraphStore.from_dict(d)
        self.nodes = other.nodes
        self.connections = other.connections
        if self.selected_id is not None and self.get_node(self.selected_id) is None:
            self.selected_id = None
        self.notify(source)

    # -- Geometry --

    def connection_endpoints(self, conn: MindMapConnection):
        """Return (from_node, to_node), or None if either end is missing."""
        a = self.get_node(conn.from_node)
        b = self.get_node(conn.to_node)
        if a is None or b is None:
            return None
        return a, b

    def connection_midpoint(self, conn: MindMapConnection) -> Optional[tuple[float, float]]:
        ends = self.connection_endpoints(conn)
        if ends is None:
            return None
        a, b = ends
        return ((a.x + b.x) / 2 + NODE_W / 2, (a.y + b.y) / 2 + NODE_H / 2)

    def centroid(self) -> tuple[float, float]:
        """Mean of node positions (top-left corners)."""
        n = len(self.nodes)
        return (sum(node.x for node in self.nodes) / n,
                sum(node.y for node in self.nodes) / n)

    # -- Serialisation --

    def to_dict(self) -> dict:
        return {
            "nodes": [n.to_dict() for n in self.nodes],
            "connections": [c.to_dict() for c in self.connections],
        }

    @staticmethod
    def from_dict(d: dict) -> "GraphStore":
        """Build a store from serialised data, repairing what it has to.

        A missing root is re-inserted at the front; connections that are
        self-loops, duplicates or reference unknown nodes are dropped.
        """
        g = GraphStore()
        nodes = [MindMapNode.from_dict(n) for n in d.get("nodes") or []]
        seen = set()
        g.nodes = []
        for n in nodes:
            if n.id in seen:
                continue
            seen.add(n.id)
            g.nodes.append(n)
        if ROOT_ID not in seen:
            g.nodes.insert(0, make_root())
            seen.add(ROOT_ID)

        for cd in d.get("connections") or []:
            c = MindMapConnection.from_dict(cd)
            if (c.from_node == c.to_node or
                    c.from_node not in seen or c.to_node not in seen or
                    g.find_connection(c.from_node, c.to_node) is not None):
                continue
            g.connections.append(c)
        return g
