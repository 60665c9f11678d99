from __future__ import annotations

import os
from pathlib import Path
import subprocess
import sys

from geolocate.gui.main_window import file_dialog_filters


def _run_offscreen(script: str, tmp_home: Path) -> subprocess.CompletedProcess:
    repo_root = Path(__file__).resolve().parents[1]
    env = os.environ.copy()
    env["PYTHONPATH"] = str(repo_root / "src")
    env["QT_QPA_PLATFORM"] = "offscreen"
    env["HOME"] = str(tmp_home)
    return subprocess.run(
        [sys.executable, "-c", script],
        cwd=repo_root,
        env=env,
        capture_output=True,
        text=True,
        timeout=30,
    )


def test_main_window_boots(tmp_path: Path) -> None:
    script = """
from PySide6.QtWidgets import QApplication
from geolocate.core.config import Configuration, MapSetup
from geolocate.gui.main_window import MainWindow
app = QApplication([])
win = MainWindow(Configuration(last_position=MapSetup(45.5, -73.25)))
geo = win.current_geolocation()
print("main_window_boot_ok", win.model.columnCount(), geo.latitude, geo.longitude, win.set_geo_btn.isEnabled())
win.close()
"""
    completed = _run_offscreen(script, tmp_path)
    assert completed.returncode == 0, completed.stderr or completed.stdout
    assert "main_window_boot_ok 6 45.5 -73.25 False" in completed.stdout


def test_posted_callables_run_on_gui_thread(tmp_path: Path) -> None:
    script = """
import threading
from PySide6.QtCore import QTimer
from PySide6.QtWidgets import QApplication
from geolocate.gui.dispatcher import QtDispatcher
app = QApplication([])
dispatcher = QtDispatcher()
main = threading.current_thread()
seen = []

def post_from_worker():
    dispatcher.post(lambda: seen.append(threading.current_thread() is main))
    dispatcher.post(app.quit)

threading.Thread(target=post_from_worker).start()
QTimer.singleShot(5000, app.quit)
app.exec()
print("dispatch_on_gui_thread", seen)
"""
    completed = _run_offscreen(script, tmp_path)
    assert completed.returncode == 0, completed.stderr or completed.stdout
    assert "dispatch_on_gui_thread [True]" in completed.stdout


def test_table_model_follows_registry(tmp_path: Path) -> None:
    photo = tmp_path / "b.jpg"
    photo.write_text("x", encoding="utf-8")
    other = tmp_path / "a.jpg"
    other.write_text("x", encoding="utf-8")
    script = f"""
from datetime import datetime
from PySide6.QtWidgets import QApplication
from geolocate.core.models import LatLong
from geolocate.core.registry import MediaRegistry
from geolocate.gui.models.media_table_model import MediaTableModel
app = QApplication([])
reg = MediaRegistry()
model = MediaTableModel(reg)
b, a = reg.add([{str(photo)!r}, {str(other)!r}])
a.creation_timestamp = datetime(2020, 1, 1)
b.creation_timestamp = datetime(2021, 1, 1)
b.geolocation = LatLong(1.5, -2.25)
b.duration_seconds = 75.0
reg.sort()
cells = [model.data(model.index(r, c)) for r in range(model.rowCount()) for c in (0, 2, 3, 4)]
print("model_rows", cells)
"""
    completed = _run_offscreen(script, tmp_path)
    assert completed.returncode == 0, completed.stderr or completed.stdout
    assert "model_rows ['a.jpg', '', '', '', 'b.jpg', '1.500000', '-2.250000', '1:15']" in completed.stdout


def test_file_dialog_filters_list_every_group() -> None:
    filters = file_dialog_filters().split(";;")
    assert filters[0].startswith("All images / videos (*.jpg *.jpeg")
    assert "Videos (*.mp4 *.mov *.m2ts *.avi)" in filters
    assert filters[-1] == "All files (*)"


def test_drop_zone_keeps_local_files_only(tmp_path: Path) -> None:
    photo = tmp_path / "a.jpg"
    photo.write_text("x", encoding="utf-8")
    script = f"""
from PySide6.QtCore import QMimeData, QUrl
from PySide6.QtWidgets import QApplication
from geolocate.gui.widgets.drop_zone import local_paths
app = QApplication([])
mime = QMimeData()
mime.setUrls([
    QUrl.fromLocalFile({str(photo)!r}),
    QUrl.fromLocalFile({str(tmp_path)!r}),
    QUrl("https://example.com/b.jpg"),
])
print("dropped", [p.name for p in local_paths(mime)], local_paths(QMimeData()))
"""
    completed = _run_offscreen(script, tmp_path)
    assert completed.returncode == 0, completed.stderr or completed.stdout
    assert "dropped ['a.jpg'] []" in completed.stdout


def test_close_without_edit_keeps_position_unset(tmp_path: Path) -> None:
    script = """
from PySide6.QtWidgets import QApplication
from geolocate.core.config import Configuration
from geolocate.gui.main_window import MainWindow
app = QApplication([])
cfg = Configuration()
win = MainWindow(cfg)
win.show()
win.close()
print("unset_position_ok", cfg.last_position)
"""
    completed = _run_offscreen(script, tmp_path)
    assert completed.returncode == 0, completed.stderr or completed.stdout
    assert "unset_position_ok None" in completed.stdout


def test_close_after_edit_remembers_position(tmp_path: Path) -> None:
    script = """
from PySide6.QtWidgets import QApplication
from geolocate.core.config import Configuration, MapSetup
from geolocate.gui.main_window import MainWindow
app = QApplication([])
cfg = Configuration(last_position=MapSetup(1.0, 2.0, 9))
win = MainWindow(cfg)
win.show()
win.lat_spin.setValue(5.0)
win.close()
pos = cfg.last_position
print("edited_position_ok", pos.latitude, pos.longitude, pos.zoom)
"""
    completed = _run_offscreen(script, tmp_path)
    assert completed.returncode == 0, completed.stderr or completed.stdout
    assert "edited_position_ok 5.0 2.0 9" in completed.stdout
