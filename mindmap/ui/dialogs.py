"""Modal dialogs for the mind map editor."""

from PySide6.QtWidgets import (QDialog, QLabel, QLineEdit, QComboBox,
                                QPushButton, QVBoxLayout, QHBoxLayout, QFormLayout)

from ..ops.export import FORMATS

FORMAT_LABELS = {
    'json': 'JSON (structured data)',
    'png':  'PNG (image)',
    'svg':  'SVG (vector)',
}


class EditNodeDialog(QDialog):
    """Dialog for editing a node label. Save is disabled for blank labels."""

    def __init__(self, parent, label: str):
        super().__init__(parent)
        self.setWindowTitle('Edit Node')
        self.setFixedSize(320, 140)
        self.setModal(True)

        layout = QVBoxLayout(self)
        layout.setSpacing(8)
        layout.addWidget(QLabel('Update the node label'))

        self.label_edit = QLineEdit(label)
        self.label_edit.setPlaceholderText('Enter node label')
        self.label_edit.textChanged.connect(self._on_text_changed)
        self.label_edit.returnPressed.connect(self._ok)
        layout.addWidget(self.label_edit)

        btn_layout = QHBoxLayout()
        btn_layout.addStretch()
        self.save_btn = QPushButton('Save')
        self.save_btn.clicked.connect(self._ok)
        self.save_btn.setDefault(True)
        cancel_btn = QPushButton('Cancel')
        cancel_btn.clicked.connect(self.reject)
        btn_layout.addWidget(cancel_btn)
        btn_layout.addWidget(self.save_btn)

        layout.addStretch()
        layout.addLayout(btn_layout)

        self._on_text_changed(label)
        self.label_edit.setFocus()
        self.label_edit.selectAll()

    def label(self) -> str:
        return self.label_edit.text()

    def _on_text_changed(self, text):
        self.save_btn.setEnabled(bool(text.strip()))

    def _ok(self):
        if self.label().strip():
            self.accept()


class ExportDialog(QDialog):
    """Dialog for choosing the export format."""

    def __init__(self, parent, default_format: str = 'json'):
        super().__init__(parent)
        self.setWindowTitle('Export Mind Map')
        self.setFixedSize(320, 150)
        self.setModal(True)

        layout = QVBoxLayout(self)
        layout.setSpacing(8)
        layout.addWidget(QLabel('Choose the format for exporting your mind map'))

        form_layout = QFormLayout()
        self.format_combo = QComboBox()
        for fmt in FORMATS:
            self.format_combo.addItem(FORMAT_LABELS[fmt], fmt)
        if default_format in FORMATS:
            self.format_combo.setCurrentIndex(FORMATS.index(default_format))
        form_layout.addRow('Format:', self.format_combo)
        layout.addLayout(form_layout)

        btn_layout = QHBoxLayout()
        btn_layout.addStretch()
        ok_btn = QPushButton('Export')
        ok_btn.clicked.connect(self.accept)
        ok_btn.setDefault(True)
        cancel_btn = QPushButton('Cancel')
        cancel_btn.clicked.connect(self.reject)
        btn_layout.addWidget(cancel_btn)
        btn_layout.addWidget(ok_btn)

        layout.addStretch()
        layout.addLayout(btn_layout)

    def selected_format(self) -> str:
        return self.format_combo.currentData()
