"""Lifecycle of the shared LibreOffice (soffice) process used for document conversions.

A single headless soffice instance is started per application process and
listens on a fixed local port. Document conversions run ``soffice
--convert-to`` against the same user profile, which hands the work to the
running instance instead of booting a new office for every file.
"""
import atexit
import enum
import logging
import os
import shutil
import signal
import socket
import subprocess
import sys
import tempfile
import threading
import time
from pathlib import Path

from doc_converter.errors import EngineConversionError, EngineStartError

logger = logging.getLogger(__name__)


class EngineState(str, enum.Enum):
    STOPPED = 'stopped'
    STARTING = 'starting'
    RUNNING = 'running'


def is_port_open(host: str, port: int, timeout: float = 0.5) -> bool:
    """Return True if something accepts TCP connections on host:port."""
    try:
        with socket.create_connection((host, port), timeout=timeout):
            return True
    except OSError:
        return False


class OfficeEngine:
    """Owns the one long-lived soffice process of this application.

    ``ensure_started`` and ``stop`` are idempotent. State transitions are
    serialized by a lock; checking for an already running engine is not.
    """

    def __init__(self, soffice_path=None, host='127.0.0.1', port=2002, profile_dir=None,
                 start_timeout=30.0, convert_timeout=120.0):
        self.soffice_path = soffice_path
        self.host = host
        self.port = port
        self.profile_dir = profile_dir
        self.start_timeout = start_timeout
        self.convert_timeout = convert_timeout
        self._state = EngineState.STOPPED
        self._process = None
        self._lock = threading.Lock()

    def init_app(self, app):
        """Configure the engine from Flask settings; does not start it."""
        self.soffice_path = app.config.get('SOFFICE_PATH') or self.soffice_path
        self.host = app.config.get('OFFICE_ENGINE_HOST', self.host)
        self.port = int(app.config.get('OFFICE_ENGINE_PORT', self.port))
        self.profile_dir = app.config.get('OFFICE_PROFILE_DIR') or self.profile_dir
        self.start_timeout = float(app.config.get('OFFICE_START_TIMEOUT', self.start_timeout))
        self.convert_timeout = float(app.config.get('OFFICE_CONVERT_TIMEOUT', self.convert_timeout))
        app.extensions['office_engine'] = self

    @property
    def state(self) -> EngineState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._state is EngineState.RUNNING

    @property
    def profile_uri(self) -> str:
        profile = Path(self.profile_dir or Path(tempfile.gettempdir()) / 'doc-converter-office-profile')
        return profile.resolve().as_uri()

    def _base_command(self) -> list[str]:
        return [
            self.soffice_path,
            f'-env:UserInstallation={self.profile_uri}',
            '--headless',
            '--invisible',
            '--nologo',
            '--norestore',
            '--nolockcheck',
        ]

    def ensure_started(self) -> None:
        """Start the engine unless it is already running.

        Raises:
            EngineStartError: the binary is missing, the port is taken, or
                the process died or never became ready.
        """
        if self._state is EngineState.RUNNING:
            return
        with self._lock:
            if self._state is EngineState.RUNNING:
                return
            self._state = EngineState.STARTING
            try:
                self._process = self._launch()
            except EngineStartError:
                self._state = EngineState.STOPPED
                raise
            self._state = EngineState.RUNNING
            logger.info("LibreOffice engine started on %s:%s (pid %s)", self.host, self.port, self._process.pid)

    def _launch(self):
        if not self.soffice_path or not (os.path.isfile(self.soffice_path) or shutil.which(self.soffice_path)):
            raise EngineStartError(f"LibreOffice binary not found: {self.soffice_path or 'soffice'}")
        if is_port_open(self.host, self.port):
            raise EngineStartError(f"Port {self.port} on {self.host} is already in use")

        cmd = self._base_command() + [
            '--nodefault',
            f'--accept=socket,host={self.host},port={self.port};urp;StarOffice.ComponentContext',
        ]
        try:
            process = subprocess.Popen(cmd, stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL)
        except OSError as e:
            raise EngineStartError(f"Failed to launch LibreOffice: {e}") from e

        deadline = time.monotonic() + self.start_timeout
        while time.monotonic() < deadline:
            if process.poll() is not None:
                raise EngineStartError(f"LibreOffice exited during startup with code {process.returncode}")
            if is_port_open(self.host, self.port):
                return process
            time.sleep(0.2)

        self._terminate(process)
        raise EngineStartError(f"LibreOffice did not accept connections within {self.start_timeout}s")

    def stop(self) -> None:
        """Terminate the engine if it is running; a no-op otherwise."""
        with self._lock:
            if self._state is not EngineState.RUNNING or self._process is None:
                self._state = EngineState.STOPPED
                return
            self._terminate(self._process)
            self._process = None
            self._state = EngineState.STOPPED
            logger.info("LibreOffice engine stopped")

    @staticmethod
    def _terminate(process, timeout=10):
        if process.poll() is not None:
            return
        process.terminate()
        try:
            process.wait(timeout=timeout)
        except subprocess.TimeoutExpired:
            logger.warning("LibreOffice did not exit after SIGTERM, killing pid %s", process.pid)
            process.kill()
            process.wait()

    def convert(self, input_path: str, output_path: str) -> None:
        """Convert ``input_path`` to a PDF written at ``output_path`` through the running engine.

        The engine is left running when a conversion fails.
        """
        input_path = Path(input_path)
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        with tempfile.TemporaryDirectory(dir=output_path.parent, prefix='.soffice-') as outdir:
            cmd = self._base_command() + ['--convert-to', 'pdf', '--outdir', outdir, str(input_path)]
            try:
                subprocess.run(cmd, check=True, capture_output=True, timeout=self.convert_timeout)
            except subprocess.CalledProcessError as e:
                stderr = (e.stderr or b'').decode('utf-8', 'replace').strip()
                raise EngineConversionError(f"LibreOffice failed with code {e.returncode}: {stderr}") from e
            except subprocess.TimeoutExpired as e:
                raise EngineConversionError(f"LibreOffice timed out after {self.convert_timeout}s") from e
            except OSError as e:
                raise EngineConversionError(f"Could not run LibreOffice: {e}") from e

            produced = Path(outdir) / f"{input_path.stem}.pdf"
            if not produced.exists():
                raise EngineConversionError("LibreOffice reported success but produced no PDF")
            shutil.move(str(produced), str(output_path))


_hooked_engines = set()


def install_shutdown_hooks(engine: OfficeEngine) -> None:
    """Stop the engine at interpreter exit and on SIGTERM/SIGINT. Installed once per engine."""
    if id(engine) in _hooked_engines:
        return
    _hooked_engines.add(id(engine))
    atexit.register(engine.stop)

    if threading.current_thread() is not threading.main_thread():
        return

    def _handle_signal(signum, frame):
        logger.info("Received signal %s, shutting down", signum)
        engine.stop()
        sys.exit(128 + signum)

    for sig in (signal.SIGTERM, signal.SIGINT):
        signal.signal(sig, _handle_signal)
