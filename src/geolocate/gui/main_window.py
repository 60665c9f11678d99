from __future__ import annotations

from pathlib import Path

from PySide6.QtCore import QSize, Qt, Slot
from PySide6.QtWidgets import (
    QAbstractItemView, QDoubleSpinBox, QFileDialog, QHBoxLayout, QHeaderView,
    QLabel, QMainWindow, QMessageBox, QPushButton, QStyle, QTableView,
    QVBoxLayout, QWidget,
)

from geolocate.core.config import Configuration
from geolocate.core.controller import MediaController, TaskError
from geolocate.core.models import LatLong
from geolocate.exif.commands import DEFAULT_CONVERT, DEFAULT_EXIFTOOL, is_tool_available
from geolocate.gui.dispatcher import QtDispatcher
from geolocate.gui.models.media_table_model import MediaTableModel
from geolocate.gui.widgets.drop_zone import DropZone
from geolocate.gui.widgets.error_dialog import exception_detail, show_error
from geolocate.gui.widgets.settings_dialog import SettingsDialog
from geolocate.util.paths import IMAGE_EXTENSIONS, VIDEO_EXTENSIONS

THUMBNAIL_ICON_SIZE = 64

FILE_FILTER_GROUPS = [
    ("JPEG images", ("jpg", "jpeg")),
    ("PNG images", ("png",)),
    ("TIFF images", ("tif", "tiff")),
    ("Canon RAW images", ("raw", "cr2", "cr3")),
    ("Nikon RAW images", ("nef", "nrw")),
    ("Sony RAW images", ("arw", "srf", "sr2")),
    ("Samsung RAW images", ("raw", "srw")),
    ("Adobe Photoshop images", ("psd",)),
    ("Videos", VIDEO_EXTENSIONS),
]


def file_dialog_filters() -> str:
    def _patterns(exts) -> str:
        return " ".join(f"*.{e}" for e in exts)

    filters = [f"All images / videos ({_patterns(IMAGE_EXTENSIONS + VIDEO_EXTENSIONS)})"]
    filters += [f"{label} ({_patterns(exts)})" for label, exts in FILE_FILTER_GROUPS]
    filters.append("All files (*)")
    return ";;".join(filters)


class MainWindow(QMainWindow):
    def __init__(self, config: Configuration, workers: int = 2) -> None:
        super().__init__()
        self.config = config
        self.setWindowTitle("Geolocate")
        self.resize(1100, 720)
        self.setMinimumSize(760, 480)

        self.dispatcher = QtDispatcher(self)
        self.controller = MediaController(
            config=config,
            dispatcher=self.dispatcher,
            on_error=self._on_task_error,
            on_count=self._on_in_progress_count,
            workers=workers,
        )

        self._position_edited = False
        self._build_ui()
        self._restore_position()
        # hooked up after the restore so only user edits count
        self.lat_spin.valueChanged.connect(self._on_position_edited)
        self.lon_spin.valueChanged.connect(self._on_position_edited)

    def _build_ui(self) -> None:
        root = QWidget()
        self.setCentralWidget(root)
        layout = QVBoxLayout(root)

        top_row = QHBoxLayout()
        self.add_btn = QPushButton("Add files…")
        self.add_btn.setIcon(self.style().standardIcon(QStyle.SP_DialogOpenButton))
        self.add_btn.clicked.connect(self._on_add_files)
        self.settings_btn = QPushButton("Settings…")
        self.settings_btn.clicked.connect(self._open_settings)
        top_row.addWidget(self.add_btn)
        top_row.addStretch(1)
        top_row.addWidget(self.settings_btn)
        layout.addLayout(top_row)

        self.drop_zone = DropZone()
        self.drop_zone.paths_dropped.connect(self._on_paths_dropped)
        layout.addWidget(self.drop_zone)

        self.table = QTableView()
        self.model = MediaTableModel(self.controller.registry)
        self.table.setModel(self.model)
        self.table.setSelectionBehavior(QAbstractItemView.SelectRows)
        self.table.setSelectionMode(QAbstractItemView.ExtendedSelection)
        self.table.setIconSize(QSize(THUMBNAIL_ICON_SIZE, THUMBNAIL_ICON_SIZE))
        self.table.verticalHeader().setDefaultSectionSize(THUMBNAIL_ICON_SIZE + 4)
        self.table.horizontalHeader().setSectionResizeMode(0, QHeaderView.Stretch)
        self.table.selectionModel().selectionChanged.connect(self._update_action_buttons)
        layout.addWidget(self.table, 1)

        geo_row = QHBoxLayout()
        self.lat_spin = _coordinate_spin(90.0)
        self.lon_spin = _coordinate_spin(180.0)
        self.set_geo_btn = QPushButton("Set geolocation")
        self.set_geo_btn.clicked.connect(self._on_set_geolocation)
        geo_row.addWidget(QLabel("Latitude"))
        geo_row.addWidget(self.lat_spin)
        geo_row.addWidget(QLabel("Longitude"))
        geo_row.addWidget(self.lon_spin)
        geo_row.addWidget(self.set_geo_btn)
        geo_row.addStretch(1)
        layout.addLayout(geo_row)

        self.status_label = QLabel("")
        self.statusBar().addPermanentWidget(self.status_label)
        self._update_action_buttons()

    def _restore_position(self) -> None:
        last = self.config.last_geolocation()
        if last is not None and last.is_valid():
            self.lat_spin.setValue(last.latitude)
            self.lon_spin.setValue(last.longitude)

    def _on_position_edited(self, _value: float) -> None:
        self._position_edited = True

    def current_geolocation(self) -> LatLong:
        return LatLong(self.lat_spin.value(), self.lon_spin.value())

    def selected_paths(self) -> list[Path]:
        rows = sorted({idx.row() for idx in self.table.selectionModel().selectedRows()})
        return [self.model.item_at(r).path for r in rows]

    def check_tools(self) -> list[str]:
        """Names of configured tools that cannot be found."""
        missing = []
        if not is_tool_available(self.config.exiftool_path, DEFAULT_EXIFTOOL):
            missing.append(self.config.exiftool_path or DEFAULT_EXIFTOOL)
        if not is_tool_available(self.config.convert_path, DEFAULT_CONVERT):
            missing.append(self.config.convert_path or DEFAULT_CONVERT)
        return missing

    def warn_missing_tools(self) -> None:
        missing = self.check_tools()
        if missing:
            QMessageBox.warning(
                self,
                "Tools not found",
                "These programs were not found: " + ", ".join(missing)
                + "\nSet their paths in Settings to read metadata and create thumbnails.",
            )

    def _on_add_files(self) -> None:
        start_dir = self.config.last_image_path or ""
        files, _ = QFileDialog.getOpenFileNames(self, "Select images", start_dir, file_dialog_filters())
        if files:
            self.controller.select_files([Path(f) for f in files])

    @Slot(list)
    def _on_paths_dropped(self, paths: list) -> None:
        self.controller.add_files([Path(p) for p in paths])

    def _on_set_geolocation(self) -> None:
        paths = self.selected_paths()
        if not paths:
            return
        self.controller.set_geolocation(paths, self.current_geolocation())

    def _open_settings(self) -> None:
        dlg = SettingsDialog(self.config, self)
        dlg.exec()

    def _update_action_buttons(self, *_args) -> None:
        self.set_geo_btn.setEnabled(bool(self.table.selectionModel().selectedRows()))

    def _on_task_error(self, error: TaskError) -> None:
        detail = exception_detail(error.exception) if error.exception is not None else error.detail
        show_error("Error", error.headline, detail, self)

    def _on_in_progress_count(self, count: int) -> None:
        self.status_label.setText(f"{count} file(s) in progress" if count else "")
        self.model.refresh_status()

    def closeEvent(self, event) -> None:
        self.controller.shutdown()
        if self._position_edited:
            self.config.remember_position(self.current_geolocation())
        super().closeEvent(event)


def _coordinate_spin(limit: float) -> QDoubleSpinBox:
    spin = QDoubleSpinBox()
    spin.setRange(-limit, limit)
    spin.setDecimals(6)
    spin.setSingleStep(0.0001)
    spin.setAlignment(Qt.AlignRight)
    spin.setMinimumWidth(120)
    return spin
