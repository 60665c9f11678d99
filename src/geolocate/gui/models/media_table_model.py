from __future__ import annotations

from PySide6.QtCore import QAbstractTableModel, QModelIndex, Qt
from PySide6.QtGui import QIcon

from geolocate.core.models import MediaItem
from geolocate.core.registry import MediaRegistry

HEADERS = [
    "File",
    "Created",
    "Latitude",
    "Longitude",
    "Duration",
    "Status",
]

# Fields written on the GUI thread; in_progress is covered by refresh_status().
DISPLAYED_FIELDS = ("thumbnail_path", "geolocation", "creation_timestamp", "duration_seconds")

class MediaTableModel(QAbstractTableModel):
    def __init__(self, registry: MediaRegistry) -> None:
        super().__init__()
        self.registry = registry
        self._rows: list[MediaItem] = registry.snapshot()
        registry.on_added(self._on_items_added)
        registry.on_sorted(self._on_sorted)
        for field in DISPLAYED_FIELDS:
            registry.subscribe_items(field, self._on_item_changed)

    def item_at(self, row: int) -> MediaItem:
        return self._rows[row]

    def rowCount(self, parent: QModelIndex = QModelIndex()) -> int:
        return 0 if parent.isValid() else len(self._rows)

    def columnCount(self, parent: QModelIndex = QModelIndex()) -> int:
        return len(HEADERS)

    def headerData(self, section: int, orientation: Qt.Orientation, role: int = Qt.DisplayRole):
        if role != Qt.DisplayRole:
            return None
        if orientation == Qt.Horizontal:
            return HEADERS[section]
        return str(section + 1)

    def data(self, index: QModelIndex, role: int = Qt.DisplayRole):
        if not index.isValid():
            return None
        item = self._rows[index.row()]
        col = index.column()
        if role == Qt.DecorationRole and col == 0:
            return QIcon(str(item.thumbnail_path)) if item.thumbnail_path else None
        if role == Qt.ToolTipRole and col == 0:
            return str(item.path)
        if role != Qt.DisplayRole:
            return None
        if col == 0:
            return item.path.name
        if col == 1:
            return _format_timestamp(item)
        if col == 2:
            return _format_coordinate(item.geolocation.latitude) if item.geolocation else ""
        if col == 3:
            return _format_coordinate(item.geolocation.longitude) if item.geolocation else ""
        if col == 4:
            return _format_duration(item.duration_seconds)
        if col == 5:
            return "Working" if item.in_progress else ""
        return None

    def refresh_status(self) -> None:
        if self._rows:
            self.dataChanged.emit(self.index(0, 5), self.index(len(self._rows) - 1, 5))

    def _on_items_added(self, items: list[MediaItem]) -> None:
        first = len(self._rows)
        self.beginInsertRows(QModelIndex(), first, first + len(items) - 1)
        self._rows.extend(items)
        self.endInsertRows()

    def _on_sorted(self, items: list[MediaItem]) -> None:
        self.layoutAboutToBeChanged.emit()
        self._rows = list(items)
        self.layoutChanged.emit()

    def _on_item_changed(self, item: MediaItem, field: str, _old, _new) -> None:
        try:
            row = self._rows.index(item)
        except ValueError:
            return
        self.dataChanged.emit(self.index(row, 0), self.index(row, len(HEADERS) - 1))


def _format_timestamp(item: MediaItem) -> str:
    ts = item.creation_timestamp
    return ts.strftime("%Y-%m-%d %H:%M:%S") if ts else ""


def _format_coordinate(value: float) -> str:
    return f"{value:.6f}"


def _format_duration(seconds: float | None) -> str:
    if seconds is None:
        return ""
    minutes, secs = divmod(int(round(seconds)), 60)
    return f"{minutes}:{secs:02d}"
