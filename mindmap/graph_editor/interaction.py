"""Pointer interaction state machine for the mind map canvas.

Pure Python.  The canvas converts Qt events to canvas-space points and
forwards them here, so the rules can be exercised without a display.

States:
  idle                  – nothing in progress
  dragging(node_id)     – a node follows the pointer
  connecting(from_id)   – the next clicked node completes a connection

Pointers are (x, y) tuples in canvas units (view position plus scroll
offset, divided by zoom).
"""

from __future__ import annotations
from typing import Optional

from .graph_model import GraphStore, MindMapNode


IDLE       = "idle"
DRAGGING   = "dragging"
CONNECTING = "connecting"


class InteractionController:
    """Single-drag, single-connect-source controller over a GraphStore."""

    def __init__(self, store: GraphStore):
        self.store = store
        self.state: str = IDLE
        self.node_id: Optional[str] = None   # drag target or connect source
        self._offset = (0.0, 0.0)
        self._moved = False

    # -- Introspection --

    @property
    def dragging_id(self) -> Optional[str]:
        return self.node_id if self.state == DRAGGING else None

    @property
    def connecting_from(self) -> Optional[str]:
        return self.node_id if self.state == CONNECTING else None

    def _reset(self) -> None:
        self.state = IDLE
        self.node_id = None
        self._offset = (0.0, 0.0)
        self._moved = False

    # -- Drag --

    def press(self, node_id: str, pointer: tuple[float, float]) -> bool:
        """Pointer-down on a node body. Returns True if a drag started."""
        if self.state != IDLE:
            return False
        node = self.store.get_node(node_id)
        if node is None:
            return False
        self.state = DRAGGING
        self.node_id = node_id
        self._offset = (pointer[0] - node.x, pointer[1] - node.y)
        self._moved = False
        self.store.select(node_id)
        return True

    def move(self, pointer: tuple[float, float]) -> bool:
        """Pointer-move. Returns True if a node was moved."""
        if self.state != DRAGGING:
            return False
        self.store.move_node(self.node_id,
                             pointer[0] - self._offset[0],
                             pointer[1] - self._offset[1])
        self._moved = True
        return True

    def release(self) -> bool:
        """Pointer-up. Ends a drag; returns True if the drag moved a node."""
        moved = self.state == DRAGGING and self._moved
        if self.state == DRAGGING:
            self._reset()
        return moved

    def leave(self) -> bool:
        """Pointer left the canvas: same as release."""
        return self.release()

    # -- Connect --

    def start_connect(self, node_id: str) -> bool:
        """Link affordance on a node, or Link Mode on the selection.

        From idle this arms connect mode.  While connecting it behaves
        like click(): same node cancels, another node completes the link.
        Returns True if a connection was created.
        """
        if self.state == CONNECTING:
            return self.click(node_id)
        if self.store.get_node(node_id) is None:
            return False
        self.state = CONNECTING
        self.node_id = node_id
        return False

    def click(self, node_id: str) -> bool:
        """Click on a node body. Returns True if a connection was created."""
        if self.state != CONNECTING:
            return False
        from_id = self.node_id
        self._reset()
        if node_id == from_id:
            return False
        return self.store.add_connection(from_id, node_id)

    def cancel_connect(self) -> None:
        if self.state == CONNECTING:
            self._reset()

    # -- Edit --

    def double_click(self, node_id: str) -> Optional[MindMapNode]:
        """Return the node whose label should be edited; state is unchanged."""
        return self.store.get_node(node_id)
