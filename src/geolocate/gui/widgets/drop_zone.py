from __future__ import annotations

from pathlib import Path

from PySide6.QtCore import Qt, Signal
from PySide6.QtGui import QDragEnterEvent, QDropEvent
from PySide6.QtWidgets import QFrame, QLabel, QVBoxLayout


def local_paths(mime) -> list[Path]:
    """Local files carried by a drag; remote URLs and folders are skipped."""
    if not mime.hasUrls():
        return []
    paths = [Path(u.toLocalFile()) for u in mime.urls() if u.isLocalFile()]
    return [p for p in paths if not p.is_dir()]


class DropZone(QFrame):
    """Strip that accepts images and videos dragged from the file manager.

    Emits `paths_dropped` with a list of Path objects. Extension filtering
    happens in the registry.
    """
    paths_dropped = Signal(list)

    def __init__(self, text: str = "Drop images or videos here") -> None:
        super().__init__()
        self.setAcceptDrops(True)
        self.setFrameShape(QFrame.StyledPanel)
        self.setMinimumHeight(56)

        self._label = QLabel(text)
        self._label.setAlignment(Qt.AlignCenter)
        layout = QVBoxLayout(self)
        layout.addWidget(self._label)

    def _set_highlighted(self, on: bool) -> None:
        self.setFrameShadow(QFrame.Sunken if on else QFrame.Plain)
        self.setLineWidth(2 if on else 1)

    def dragEnterEvent(self, event: QDragEnterEvent) -> None:
        if local_paths(event.mimeData()):
            self._set_highlighted(True)
            event.acceptProposedAction()
        else:
            event.ignore()

    def dragLeaveEvent(self, event) -> None:
        self._set_highlighted(False)
        super().dragLeaveEvent(event)

    def dropEvent(self, event: QDropEvent) -> None:
        self._set_highlighted(False)
        paths = local_paths(event.mimeData())
        if not paths:
            event.ignore()
            return
        event.acceptProposedAction()
        self.paths_dropped.emit(paths)
