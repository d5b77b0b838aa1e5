"""Snapshot-based undo/redo for the mind map editor.

Snapshots are GraphStore.to_dict() payloads; the selection and any
in-progress pointer interaction are not part of the history.
"""

import copy
from typing import Optional


class UndoStack:
    """Linear history of graph snapshots with a cursor.

    stack[pointer] is the snapshot matching the current graph.  Pushing
    after an undo drops the redo branch; the oldest entry is evicted once
    max_size is exceeded.
    """

    def __init__(self, max_size: int = 100):
        self.max_size = max_size
        self.stack: list[dict] = []
        self.pointer = -1

    def can_undo(self) -> bool:
        return self.pointer > 0

    def can_redo(self) -> bool:
        return self.pointer < len(self.stack) - 1

    def push(self, snapshot: dict):
        del self.stack[self.pointer + 1:]
        if self.stack and self.stack[-1] == snapshot:
            return
        self.stack.append(snapshot)
        if len(self.stack) > self.max_size:
            del self.stack[0]
        self.pointer = len(self.stack) - 1

    def undo(self) -> Optional[dict]:
        if not self.can_undo():
            return None
        self.pointer -= 1
        return self.stack[self.pointer]

    def redo(self) -> Optional[dict]:
        if not self.can_redo():
            return None
        self.pointer += 1
        return self.stack[self.pointer]


def capture_state(store) -> dict:
    return copy.deepcopy(store.to_dict())


def restore_state(store, snapshot: dict):
    """Load a snapshot into store in place, keeping its listeners.

    A selection that points at a node absent from the snapshot is cleared.
    """
    store.load_dict(copy.deepcopy(snapshot), source='undo')
