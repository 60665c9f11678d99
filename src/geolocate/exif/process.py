from __future__ import annotations

from pathlib import Path
import subprocess
import threading
from typing import Callable, Protocol, Sequence

from loguru import logger

from geolocate.util.errors import ProcessStartError

LineCallback = Callable[[str], None]


class ErrorHandler(Protocol):
    def __call__(
        self,
        process_name: str,
        exit_code: int,
        error_output: str | None,
        exc: BaseException | None,
    ) -> None: ...


class ProcessRunner:
    """Run external tools with an argv vector (never through a shell).

    stdout is streamed line by line to the caller, stderr is collected on a
    helper thread. Start failures and non-zero exits are reported through
    `error_handler`; a start failure additionally raises ProcessStartError.
    """

    def __init__(self, error_handler: ErrorHandler | None = None) -> None:
        self.error_handler = error_handler
        self._live: set[subprocess.Popen] = set()
        self._live_lock = threading.Lock()

    def run(self, argv: Sequence[str], on_line: LineCallback | None = None) -> int:
        cmd = [str(a) for a in argv]
        name = process_name(cmd[0])
        logger.debug("Running {}", cmd)
        try:
            proc = subprocess.Popen(
                cmd,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
        except OSError as e:
            logger.warning("{} could not be started: {}", name, e)
            self._report(name, -1, None, e)
            raise ProcessStartError(name, e) from e

        with self._live_lock:
            self._live.add(proc)
        stderr_chunks: list[str] = []
        stderr_reader = threading.Thread(
            target=lambda: stderr_chunks.append(proc.stderr.read()),
            name=f"{name}-stderr",
            daemon=True,
        )
        stderr_reader.start()
        try:
            for line in proc.stdout:
                if on_line is not None:
                    on_line(line.rstrip("\r\n"))
            exit_code = proc.wait()
            stderr_reader.join()
        finally:
            if proc.poll() is None:
                proc.kill()
                proc.wait()
            proc.stdout.close()
            with self._live_lock:
                self._live.discard(proc)

        if exit_code != 0:
            error_output = "".join(stderr_chunks).strip()
            logger.warning("{} exited with error code {}: {}", name, exit_code, error_output)
            self._report(name, exit_code, error_output, None)
        return exit_code

    def terminate_all(self) -> None:
        with self._live_lock:
            live = list(self._live)
        for proc in live:
            if proc.poll() is None:
                logger.info("Terminating {}", proc.args[0] if proc.args else proc)
                proc.kill()

    def _report(self, name: str, exit_code: int, error_output: str | None, exc: BaseException | None) -> None:
        if self.error_handler is not None:
            self.error_handler(name, exit_code, error_output, exc)


def process_name(binary: str) -> str:
    return Path(binary).name or binary
