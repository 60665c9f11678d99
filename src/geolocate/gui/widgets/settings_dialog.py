from __future__ import annotations

from PySide6.QtWidgets import (
    QDialog,
    QDialogButtonBox,
    QFileDialog,
    QFormLayout,
    QGroupBox,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from geolocate.core.config import Configuration
from geolocate.exif.commands import DEFAULT_CONVERT, DEFAULT_EXIFTOOL


class SettingsDialog(QDialog):
    """Edits tool paths and the maps API key in place; saving happens at shutdown."""

    def __init__(self, config: Configuration, parent=None) -> None:
        super().__init__(parent)
        self.config = config
        self.setWindowTitle("Settings")
        self.setMinimumWidth(560)

        root = QVBoxLayout(self)
        root.setContentsMargins(16, 16, 16, 16)
        root.setSpacing(12)

        subtitle = QLabel("Leave a tool path empty to use the program found on PATH.")
        subtitle.setWordWrap(True)
        root.addWidget(subtitle)

        root.addWidget(self._build_tools_group())
        root.addWidget(self._build_map_group())
        root.addStretch(1)

        buttons = QDialogButtonBox(QDialogButtonBox.Ok | QDialogButtonBox.Cancel)
        buttons.accepted.connect(self._on_accept)
        buttons.rejected.connect(self.reject)
        root.addWidget(buttons)

        self._populate_from_config(self.config)

    def _build_tools_group(self) -> QGroupBox:
        group = QGroupBox("Tool Paths")
        layout = QFormLayout(group)
        layout.setContentsMargins(12, 12, 12, 12)
        layout.setHorizontalSpacing(14)
        layout.setVerticalSpacing(8)

        self.exiftool_edit = QLineEdit()
        self.exiftool_edit.setPlaceholderText(DEFAULT_EXIFTOOL)
        self.convert_edit = QLineEdit()
        self.convert_edit.setPlaceholderText(DEFAULT_CONVERT)

        layout.addRow("ExifTool", self._with_browse(self.exiftool_edit, "Select ExifTool"))
        layout.addRow("ImageMagick convert", self._with_browse(self.convert_edit, "Select convert"))
        return group

    def _build_map_group(self) -> QGroupBox:
        group = QGroupBox("Map")
        layout = QFormLayout(group)
        layout.setContentsMargins(12, 12, 12, 12)
        self.api_key_edit = QLineEdit()
        layout.addRow("Maps API key", self.api_key_edit)
        return group

    def _with_browse(self, edit: QLineEdit, caption: str) -> QWidget:
        browse_btn = QPushButton("Browse…")
        browse_btn.clicked.connect(lambda: self._browse(edit, caption))

        row = QHBoxLayout()
        row.setContentsMargins(0, 0, 0, 0)
        row.setSpacing(8)
        row.addWidget(edit, 1)
        row.addWidget(browse_btn)

        widget = QWidget()
        widget.setLayout(row)
        return widget

    def _populate_from_config(self, source: Configuration) -> None:
        self.exiftool_edit.setText(source.exiftool_path or "")
        self.convert_edit.setText(source.convert_path or "")
        self.api_key_edit.setText(source.maps_api_key or "")

    def _on_accept(self) -> None:
        self.config.exiftool_path = self.exiftool_edit.text().strip()
        self.config.convert_path = self.convert_edit.text().strip()
        self.config.maps_api_key = self.api_key_edit.text().strip()
        self.accept()

    def _browse(self, edit: QLineEdit, caption: str) -> None:
        start_dir = edit.text().strip() or ""
        path, _ = QFileDialog.getOpenFileName(self, caption, start_dir)
        if path:
            edit.setText(path)
