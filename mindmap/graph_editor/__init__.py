"""Mind map editor package.

Public surface:
  GraphStore              – data model (nodes + connections + selection)
  MindMapNode, MindMapConnection  – model primitives
  InteractionController   – pointer state machine (idle / dragging / connecting)

The Qt widgets are imported from their own modules so that the model can be
used without a display:
  node_canvas.MindMapCanvas      – the canvas widget
  mindmap_window.MindMapWindow   – the editor window
"""

from .graph_model import (
    GraphStore, MindMapNode, MindMapConnection,
    ROOT_ID, NODE_W, NODE_H, PALETTE,
)
from .interaction import InteractionController, IDLE, DRAGGING, CONNECTING

__all__ = [
    "GraphStore", "MindMapNode", "MindMapConnection",
    "ROOT_ID", "NODE_W", "NODE_H", "PALETTE",
    "InteractionController", "IDLE", "DRAGGING", "CONNECTING",
]
