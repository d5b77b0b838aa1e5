"""Mind Map - Standalone Desktop Application.

An interactive mind map canvas with local autosave and JSON / PNG / SVG
export.  Built with PySide6.

Usage:
    python main.py [--storage FILE] [--settings FILE] [--debug]
    python main.py --export {json,png,svg} [--out DIR]
    python -m mindmap.main ...
"""
import argparse
import logging
import sys

from .core.settings import Settings
from .core.storage import LocalStore, load_graph
from .errors import MindMapError
from .ops.export import FORMATS, export_to_file

log = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Mind Map - Standalone')
    parser.add_argument('--storage', type=str, default=None,
                        help='Path to the local storage file (default: ~/.config/mindmap/storage.json)')
    parser.add_argument('--settings', type=str, default=None,
                        help='Path to a settings file (default: ~/.config/mindmap/settings.json)')
    parser.add_argument('--export', choices=FORMATS, default=None,
                        help='Export the stored mind map in this format and exit')
    parser.add_argument('--out', type=str, default=None,
                        help='Directory for --export (default: the configured export directory)')
    parser.add_argument('--debug', action='store_true',
                        help='Verbose logging')
    return parser


def run_export(store, fmt: str, directory) -> int:
    """Headless export. Returns a process exit code."""
    if fmt == 'png':
        # Text rendering needs a GUI application, not a window
        from PySide6.QtGui import QGuiApplication
        app = QGuiApplication.instance() or QGuiApplication(sys.argv[:1])  # noqa: F841
    try:
        path = export_to_file(store, fmt, directory)
    except (MindMapError, OSError) as e:
        log.error("Export failed: %s", e)
        return 1
    print(path)
    return 0


def main(argv=None):
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format='[%(name)s] %(message)s',
    )

    settings = Settings(args.settings)
    storage_path = args.storage or settings.resolved_storage_path()
    local = LocalStore(storage_path)
    store = load_graph(local)
    log.debug("Loaded %d nodes, %d connections from %s",
              len(store.nodes), len(store.connections), storage_path)

    if args.export:
        return run_export(store, args.export, args.out or settings.resolved_export_dir())

    from PySide6.QtWidgets import QApplication
    app = QApplication(sys.argv[:1])

    # Set application style
    app.setStyle('Fusion')

    # Import here so headless export never loads the widget modules
    from .graph_editor.mindmap_window import MindMapWindow
    window = MindMapWindow(store, local, settings)
    window.show()

    return app.exec()


if __name__ == '__main__':
    sys.exit(main())
