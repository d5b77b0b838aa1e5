"""Tests for user settings."""

import json
from pathlib import Path

from mindmap.core.settings import Settings, DEFAULTS, DEFAULT_STORAGE_PATH


class TestSettings:

    def test_defaults_without_file(self, tmp_path):
        s = Settings(tmp_path / 'settings.json')
        assert s.autosave_delay_ms == DEFAULTS['autosave_delay_ms'] == 1000
        assert s.default_export_format == 'json'
        assert s.undo_limit == 100
        assert s.resolved_storage_path() == DEFAULT_STORAGE_PATH
        assert s.resolved_export_dir() == Path.home()

    def test_save_and_reload(self, tmp_path):
        path = tmp_path / 'cfg' / 'settings.json'
        s = Settings(path)
        s.autosave_delay_ms = 250
        s.default_export_format = 'svg'
        s.export_dir = str(tmp_path)
        s.save()
        again = Settings(path)
        assert again.autosave_delay_ms == 250
        assert again.default_export_format == 'svg'
        assert again.resolved_export_dir() == tmp_path

    def test_invalid_values_are_clamped_or_ignored(self, tmp_path):
        path = tmp_path / 'settings.json'
        path.write_text(json.dumps({'autosave_delay_ms': -5,
                                    'default_export_format': 'pdf',
                                    'undo_limit': 0}))
        s = Settings(path)
        assert s.autosave_delay_ms == 0
        assert s.default_export_format == 'json'
        assert s.undo_limit == 1

    def test_unreadable_file_keeps_defaults(self, tmp_path):
        path = tmp_path / 'settings.json'
        path.write_text('{not json')
        s = Settings(path)
        assert s.autosave_delay_ms == 1000

    def test_storage_path_override(self, tmp_path):
        path = tmp_path / 'settings.json'
        path.write_text(json.dumps({'storage_path': str(tmp_path / 'mm.json')}))
        assert Settings(path).resolved_storage_path() == tmp_path / 'mm.json'
