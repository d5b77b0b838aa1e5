"""User-facing settings - persisted to ~/.config/mindmap/settings.json.

Hard-coded values that are plausible candidates to move here in the future:
  - Node palette (currently the fixed 8-colour PALETTE)
  - Export padding around the bounding box (currently 50)
"""

import json
import logging
from pathlib import Path

log = logging.getLogger(__name__)

CONFIG_DIR = Path.home() / '.config' / 'mindmap'
CONFIG_PATH = CONFIG_DIR / 'settings.json'
DEFAULT_STORAGE_PATH = CONFIG_DIR / 'storage.json'

EXPORT_FORMATS = ('json', 'png', 'svg')

DEFAULTS = {
    'storage_path': '',            # empty string = DEFAULT_STORAGE_PATH
    'autosave_delay_ms': 1000,     # debounce after the last change; 0 = immediate
    'export_dir': '',              # empty string = home directory
    'default_export_format': 'json',
    'undo_limit': 100,
}


class Settings:
    def __init__(self, path=None):
        self.path = Path(path) if path else CONFIG_PATH
        self.storage_path: str = DEFAULTS['storage_path']
        self.autosave_delay_ms: int = DEFAULTS['autosave_delay_ms']
        self.export_dir: str = DEFAULTS['export_dir']
        self.default_export_format: str = DEFAULTS['default_export_format']
        self.undo_limit: int = DEFAULTS['undo_limit']
        self._load()

    def _load(self):
        if not self.path.exists():
            return
        try:
            with open(self.path) as f:
                d = json.load(f)
            self.storage_path = str(d.get('storage_path', self.storage_path))
            self.autosave_delay_ms = max(0, int(d.get('autosave_delay_ms', self.autosave_delay_ms)))
            self.export_dir = str(d.get('export_dir', self.export_dir))
            fmt = str(d.get('default_export_format', self.default_export_format))
            if fmt in EXPORT_FORMATS:
                self.default_export_format = fmt
            self.undo_limit = max(1, int(d.get('undo_limit', self.undo_limit)))
        except (OSError, ValueError, TypeError, AttributeError) as e:
            log.warning("Ignoring unreadable settings file %s: %s", self.path, e)

    def resolved_storage_path(self) -> Path:
        return Path(self.storage_path).expanduser() if self.storage_path else DEFAULT_STORAGE_PATH

    def resolved_export_dir(self) -> Path:
        return Path(self.export_dir).expanduser() if self.export_dir else Path.home()

    def save(self):
        """Persist current settings to the user config file."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, 'w') as f:
                json.dump({
                    'storage_path': self.storage_path,
                    'autosave_delay_ms': self.autosave_delay_ms,
                    'export_dir': self.export_dir,
                    'default_export_format': self.default_export_format,
                    'undo_limit': self.undo_limit,
                }, f, indent=2)
        except OSError as e:
            log.warning("Could not write settings to %s: %s", self.path, e)
