"""Local key-value store for the mind map, plus the debounced autosaver.

The store is a single JSON object on disk; the mind map lives under one
key as a JSON-encoded string, so the file is a most-recent-write-wins
snapshot with no versioning.
"""

import json
import logging
from pathlib import Path
from typing import Optional

from PySide6.QtCore import QObject, QTimer

from ..graph_editor.graph_model import GraphStore

log = logging.getLogger(__name__)

STORAGE_KEY = 'mind-map-data'


class LocalStore:
    """Tiny JSON-file key-value store. Values are strings."""

    def __init__(self, path):
        self.path = Path(path)

    def _read_all(self) -> dict:
        if not self.path.exists():
            return {}
        with open(self.path, encoding='utf-8') as f:
            d = json.load(f)
        if not isinstance(d, dict):
            raise ValueError(f"{self.path} does not hold a JSON object")
        return d

    def get(self, key: str) -> Optional[str]:
        return self._read_all().get(key)

    def set(self, key: str, value: str) -> None:
        try:
            d = self._read_all()
        except (OSError, ValueError) as e:
            log.warning("Overwriting unreadable store %s: %s", self.path, e)
            d = {}
        d[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + '.tmp')
        with open(tmp, 'w', encoding='utf-8') as f:
            json.dump(d, f)
        tmp.replace(self.path)


def save_graph(local: LocalStore, store: GraphStore) -> bool:
    """Write the graph snapshot. Returns False (and logs) on I/O failure."""
    try:
        local.set(STORAGE_KEY, json.dumps(store.to_dict()))
        return True
    except OSError as e:
        log.error("Failed to save mind map to %s: %s", local.path, e)
        return False


def load_graph(local: LocalStore) -> GraphStore:
    """Load the stored graph, or the default graph if there is none.

    Missing, unreadable or malformed state is treated as "no saved state".
    """
    try:
        raw = local.get(STORAGE_KEY)
        if raw is None:
            return GraphStore()
        data = json.loads(raw)
        if not isinstance(data, dict):
            raise ValueError("stored mind map is not a JSON object")
        return GraphStore.from_dict(data)
    except (OSError, ValueError, TypeError, KeyError, AttributeError) as e:
        log.error("Error loading mind map from %s: %s", local.path, e)
        return GraphStore()


class AutoSaver(QObject):
    """Debounced persistence of a GraphStore.

    schedule() restarts a single-shot timer, so a burst of changes (e.g. a
    drag) produces one write delay_ms after the last change.
    """

    def __init__(self, store: GraphStore, local: LocalStore,
                 delay_ms: int = 1000, parent=None):
        super().__init__(parent)
        self.store = store
        self.local = local
        self.save_count = 0

        self._timer = QTimer(self)
        self._timer.setSingleShot(True)
        self._timer.setInterval(delay_ms)
        self._timer.timeout.connect(self.flush)

    @property
    def pending(self) -> bool:
        return self._timer.isActive()

    def schedule(self, source=None) -> None:
        if source == 'selection':
            return
        self._timer.start()

    def flush(self) -> None:
        """Write now, cancelling any pending timer."""
        self._timer.stop()
        if save_graph(self.local, self.store):
            self.save_count += 1
