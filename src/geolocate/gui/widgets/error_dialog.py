from __future__ import annotations

import traceback

from PySide6.QtWidgets import QMessageBox, QWidget


def build_error_dialog(title: str, headline: str, detail: str = "", parent: QWidget | None = None) -> QMessageBox:
    box = QMessageBox(parent)
    box.setIcon(QMessageBox.Critical)
    box.setWindowTitle(title)
    box.setText(headline)
    if detail:
        box.setDetailedText(detail)
    return box


def exception_detail(exc: BaseException) -> str:
    return "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))


def show_error(title: str, headline: str, detail: str = "", parent: QWidget | None = None) -> None:
    build_error_dialog(title, headline, detail, parent).exec()
