from __future__ import annotations

import sys

import pytest

from geolocate.exif.process import ProcessRunner, process_name
from geolocate.util.errors import ProcessStartError


def _python(code: str) -> list[str]:
    return [sys.executable, "-c", code]


def test_streams_stdout_lines() -> None:
    runner = ProcessRunner()
    lines = []
    code = runner.run(_python("print('one'); print('two')"), on_line=lines.append)
    assert code == 0
    assert lines == ["one", "two"]


def test_non_zero_exit_reports_stderr() -> None:
    reports = []
    runner = ProcessRunner(lambda *args: reports.append(args))
    code = runner.run(_python("import sys; sys.stderr.write('bad file\\n'); sys.exit(3)"))
    assert code == 3
    ((name, exit_code, error_output, exc),) = reports
    assert name == process_name(sys.executable)
    assert exit_code == 3
    assert error_output == "bad file"
    assert exc is None


def test_missing_binary_reports_and_raises(tmp_path) -> None:
    reports = []
    runner = ProcessRunner(lambda *args: reports.append(args))
    with pytest.raises(ProcessStartError):
        runner.run([str(tmp_path / "no-such-tool"), "-ver"])
    ((name, exit_code, _, exc),) = reports
    assert name == "no-such-tool"
    assert exit_code == -1
    assert isinstance(exc, OSError)


def test_large_stderr_does_not_block() -> None:
    runner = ProcessRunner(lambda *args: None)
    code = runner.run(_python("import sys; sys.stderr.write('x' * 200000); print('done')"))
    assert code == 0
