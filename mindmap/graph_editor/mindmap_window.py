"""Mind map editor window.

Layout:
  ┌────────────────────────────────────────────────────────────────────┐
  │ [+ Add Node] [Link Mode] [↶] [↷] [−] [+]   status   [Show All]     │
  │                        [Import] [Export] [Clear All] [Fullscreen]  │  ← toolbar
  ├────────────────────────────────────────────────────────────────────┤
  │                                                                    │
  │                        MindMapCanvas                               │
  │                                                                    │
  ├────────────────────────────────────────────────────────────────────┤
  │                 N nodes • M connections                            │  ← stats
  └────────────────────────────────────────────────────────────────────┘

Every GraphStore change schedules a debounced save (AutoSaver) and, unless
it is a drag step or an undo, records an undo snapshot.  A drag records one
snapshot when it ends.
"""

from __future__ import annotations

import logging
from pathlib import Path

from PySide6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QPushButton,
    QLabel, QFrame, QFileDialog, QMessageBox, QDialog,
)
from PySide6.QtCore import Qt
from PySide6.QtGui import QKeySequence, QShortcut

from ..core.settings import Settings
from ..core.storage import LocalStore, AutoSaver
from ..errors import MindMapError
from ..ops.export import write_export, export_filename
from ..ops.project_io import import_mindmap
from ..ui.dialogs import EditNodeDialog, ExportDialog
from ..undo import UndoStack, capture_state, restore_state
from .graph_model import GraphStore
from .node_canvas import MindMapCanvas

log = logging.getLogger(__name__)

FILE_FILTERS = {
    'json': "Mind map JSON (*.json)",
    'png':  "PNG image (*.png)",
    'svg':  "SVG image (*.svg)",
}

# Sources that do not get their own undo snapshot
_NO_SNAPSHOT = ('move', 'selection', 'undo')


class MindMapWindow(QWidget):
    """Top-level mind map editor.

    Parameters
    ----------
    store     GraphStore loaded from local storage; edited in-place.
    local     LocalStore the autosaver writes to.
    settings  Settings (autosave delay, export dir, undo limit).
    """

    def __init__(self, store: GraphStore, local: LocalStore,
                 settings: Settings = None, parent=None):
        super().__init__(parent,
                         Qt.Window | Qt.WindowCloseButtonHint |
                         Qt.WindowMinimizeButtonHint | Qt.WindowMaximizeButtonHint)
        self.setWindowTitle("Mind Map")
        self.resize(1100, 700)

        self.store = store
        self.settings = settings or Settings()

        self._autosaver = AutoSaver(store, local, self.settings.autosave_delay_ms, self)
        self._undo = UndoStack(max_size=self.settings.undo_limit)
        self._undo.push(capture_state(store))

        self._build_ui()
        self._bind_keys()

        self.store.on_change(self._on_store_changed)
        self._refresh_toolbar()

        self.setStyleSheet("""
            QWidget { background-color: #16213e; color: #eeeeee; }
            QPushButton {
                background-color: #1a1a2e; color: #eeeeee;
                border: 1px solid #2a3a5c; border-radius: 4px;
                padding: 3px 8px;
            }
            QPushButton:hover { background-color: #2a3a5c; }
            QPushButton:checked { background-color: #3a7bd5; }
            QPushButton:disabled { color: #555; border-color: #333; }
            QLabel { background: transparent; }
        """)

    # -----------------------------------------------------------------------
    # UI construction
    # -----------------------------------------------------------------------

    def _build_ui(self) -> None:
        outer = QVBoxLayout(self)
        outer.setContentsMargins(6, 6, 6, 6)
        outer.setSpacing(4)

        # Canvas first so toolbar buttons can connect to it
        self._canvas = MindMapCanvas(self.store, self)
        self._canvas.edit_requested.connect(self._edit_node)
        self._canvas.drag_finished.connect(self._on_drag_finished)
        self._canvas.status_message.connect(self._show_status)
        self._canvas.connect_mode_changed.connect(self._refresh_toolbar)

        toolbar = QHBoxLayout()
        toolbar.setSpacing(6)

        add_btn = QPushButton("＋ Add Node")
        add_btn.clicked.connect(self._add_node)
        toolbar.addWidget(add_btn)

        self._link_btn = QPushButton("Link Mode")
        self._link_btn.setCheckable(True)
        self._link_btn.setToolTip("Link the selected node to the next node you click")
        self._link_btn.clicked.connect(self._toggle_link_mode)
        toolbar.addWidget(self._link_btn)

        toolbar.addSpacing(8)

        self._undo_btn = QPushButton("↶")
        self._undo_btn.setToolTip("Undo  [Ctrl+Z]")
        self._undo_btn.clicked.connect(self.undo)
        toolbar.addWidget(self._undo_btn)

        self._redo_btn = QPushButton("↷")
        self._redo_btn.setToolTip("Redo  [Ctrl+Shift+Z]")
        self._redo_btn.clicked.connect(self.redo)
        toolbar.addWidget(self._redo_btn)

        zoom_out_btn = QPushButton("−")
        zoom_out_btn.setToolTip("Zoom out")
        zoom_out_btn.clicked.connect(self._canvas.zoom_out)
        toolbar.addWidget(zoom_out_btn)

        zoom_in_btn = QPushButton("+")
        zoom_in_btn.setToolTip("Zoom in")
        zoom_in_btn.clicked.connect(self._canvas.zoom_in)
        toolbar.addWidget(zoom_in_btn)

        toolbar.addStretch()

        self._status_lbl = QLabel("")
        self._status_lbl.setStyleSheet("color: #888; font-size: 10px;")
        toolbar.addWidget(self._status_lbl)

        toolbar.addSpacing(12)

        show_all_btn = QPushButton("Show All")
        show_all_btn.setToolTip("Center view on all nodes  [F]")
        show_all_btn.clicked.connect(lambda: self._canvas.show_all())
        toolbar.addWidget(show_all_btn)

        import_btn = QPushButton("Import")
        import_btn.clicked.connect(self._import)
        toolbar.addWidget(import_btn)

        export_btn = QPushButton("Export")
        export_btn.clicked.connect(self._export)
        toolbar.addWidget(export_btn)

        clear_btn = QPushButton("Clear All")
        clear_btn.setStyleSheet("color: #e94560;")
        clear_btn.clicked.connect(self._clear)
        toolbar.addWidget(clear_btn)

        self._fullscreen_btn = QPushButton("⛶")
        self._fullscreen_btn.setToolTip("Enter Fullscreen")
        self._fullscreen_btn.clicked.connect(self.toggle_fullscreen)
        toolbar.addWidget(self._fullscreen_btn)

        outer.addLayout(toolbar)

        sep = QFrame()
        sep.setFrameShape(QFrame.HLine)
        sep.setStyleSheet("color: #2a3a5c;")
        outer.addWidget(sep)

        outer.addWidget(self._canvas, 1)

        self._stats_lbl = QLabel("")
        self._stats_lbl.setAlignment(Qt.AlignCenter)
        self._stats_lbl.setStyleSheet("color: #888; font-size: 10px;")
        outer.addWidget(self._stats_lbl)

        self._initial_view = True

    def _bind_keys(self) -> None:
        QShortcut(QKeySequence(QKeySequence.Undo), self, self.undo)
        QShortcut(QKeySequence(QKeySequence.Redo), self, self.redo)
        QShortcut(QKeySequence('Ctrl+N'), self, self._add_node)
        QShortcut(QKeySequence('Ctrl+E'), self, self._export)
        QShortcut(QKeySequence(Qt.Key_F11), self, self.toggle_fullscreen)

    # -----------------------------------------------------------------------
    # State reflection
    # -----------------------------------------------------------------------

    def stats_text(self) -> str:
        text = f"{len(self.store.nodes)} nodes • {len(self.store.connections)} connections"
        if self._canvas.controller.connecting_from is not None:
            text += "   → Click another node to connect"
        return text

    def _refresh_toolbar(self) -> None:
        connecting = self._canvas.controller.connecting_from is not None
        self._link_btn.setChecked(connecting)
        self._link_btn.setText("Cancel Link" if connecting else "Link Mode")
        self._link_btn.setEnabled(connecting or self.store.selected_id is not None)
        self._undo_btn.setEnabled(self._undo.can_undo())
        self._redo_btn.setEnabled(self._undo.can_redo())
        self._stats_lbl.setText(self.stats_text())

    def _show_status(self, text: str, ok: bool = False) -> None:
        self._status_lbl.setText(text)
        color = "#6bcb77" if ok else "#e94560"
        self._status_lbl.setStyleSheet(f"color: {color}; font-size: 10px;")

    def _on_store_changed(self, source=None) -> None:
        self._autosaver.schedule(source)
        if source not in _NO_SNAPSHOT:
            self._undo.push(capture_state(self.store))
        self._refresh_toolbar()

    def _on_drag_finished(self, node_id: str) -> None:
        self._undo.push(capture_state(self.store))
        self._refresh_toolbar()

    # -----------------------------------------------------------------------
    # Actions
    # -----------------------------------------------------------------------

    def _add_node(self) -> None:
        node = self.store.add_node()
        self._canvas.center_on_node(node.id)

    def _toggle_link_mode(self) -> None:
        self._canvas.start_link_mode()
        self._refresh_toolbar()

    def _edit_node(self, node_id: str) -> None:
        node = self.store.get_node(node_id)
        if node is None:
            return
        dlg = EditNodeDialog(self, node.label)
        if dlg.exec() == QDialog.Accepted:
            self.store.update_node_label(node_id, dlg.label())

    def _clear(self) -> None:
        answer = QMessageBox.question(
            self, "Clear Mind Map",
            "Are you sure you want to clear the entire mind map?")
        if answer == QMessageBox.Yes:
            self.store.clear()

    def undo(self) -> None:
        snapshot = self._undo.undo()
        if snapshot is not None:
            restore_state(self.store, snapshot)

    def redo(self) -> None:
        snapshot = self._undo.redo()
        if snapshot is not None:
            restore_state(self.store, snapshot)

    def toggle_fullscreen(self) -> None:
        if self.isFullScreen():
            self.showNormal()
        else:
            self.showFullScreen()
        entered = self.isFullScreen()
        self._fullscreen_btn.setToolTip("Exit Fullscreen" if entered else "Enter Fullscreen")
        log.debug("Fullscreen %s", "on" if entered else "off")

    # -----------------------------------------------------------------------
    # Import / export
    # -----------------------------------------------------------------------

    def _export(self) -> None:
        dlg = ExportDialog(self, self.settings.default_export_format)
        if dlg.exec() != QDialog.Accepted:
            return
        fmt = dlg.selected_format()
        suggested = self.settings.resolved_export_dir() / export_filename(fmt)
        path, _ = QFileDialog.getSaveFileName(
            self, "Export Mind Map", str(suggested), FILE_FILTERS[fmt])
        if not path:
            return
        try:
            write_export(self.store, fmt, path)
        except (MindMapError, OSError) as e:
            QMessageBox.warning(self, "Export failed", str(e))
            return
        self._show_status(f"Exported {Path(path).name}", ok=True)

    def _import(self) -> None:
        path, _ = QFileDialog.getOpenFileName(
            self, "Import Mind Map", str(self.settings.resolved_export_dir()),
            FILE_FILTERS['json'])
        if not path:
            return
        if len(self.store.nodes) > 1 or self.store.connections:
            answer = QMessageBox.question(
                self, "Import Mind Map",
                "Importing replaces the current mind map. Continue?")
            if answer != QMessageBox.Yes:
                return
        try:
            import_mindmap(self.store, path)
        except (MindMapError, OSError, ValueError) as e:
            QMessageBox.warning(self, "Import failed", str(e))
            return
        self._canvas.show_all()
        self._show_status(f"Imported {Path(path).name}", ok=True)

    # -----------------------------------------------------------------------
    # Window lifecycle
    # -----------------------------------------------------------------------

    def showEvent(self, event) -> None:
        super().showEvent(event)
        # Layout has sized the canvas by now
        if self._initial_view:
            self._initial_view = False
            self._canvas.show_all(animate=False)

    def closeEvent(self, event) -> None:
        # Flush any pending save before closing
        if self._autosaver.pending:
            self._autosaver.flush()
        super().closeEvent(event)
