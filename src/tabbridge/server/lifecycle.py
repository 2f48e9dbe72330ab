"""Start/stop control for the HTTP server running on a background thread."""

from __future__ import annotations

import enum
import logging
import threading
import time
from typing import Any, Callable, List, Protocol

import uvicorn

_LOGGER = logging.getLogger(__name__)

StatusListener = Callable[[str], None]


class ServerState(enum.Enum):
    STOPPED = "stopped"
    RUNNING = "running"


class ServerHandle(Protocol):
    """Subset of :class:`uvicorn.Server` the controller drives."""

    started: bool
    should_exit: bool

    def run(self) -> None:
        ...


ServerFactory = Callable[[Any, str, int], ServerHandle]


def uvicorn_server_factory(app: Any, host: str, port: int) -> ServerHandle:
    config = uvicorn.Config(app, host=host, port=port, log_config=None, access_log=False)
    return uvicorn.Server(config)


class ServerController:
    """Owns the server thread and its ``stopped -> running -> stopped`` state.

    Starting a running controller or stopping a stopped one is logged and
    ignored.
    """

    def __init__(
        self,
        app: Any,
        *,
        host: str = "127.0.0.1",
        port: int = 3000,
        server_factory: ServerFactory | None = None,
        startup_timeout: float = 10.0,
    ) -> None:
        self._app = app
        self._host = host
        self._port = port
        self._server_factory = server_factory or uvicorn_server_factory
        self._startup_timeout = startup_timeout
        self._state = ServerState.STOPPED
        self._server: ServerHandle | None = None
        self._thread: threading.Thread | None = None
        self._lock = threading.Lock()
        self._listeners: List[StatusListener] = []

    @property
    def state(self) -> ServerState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._state is ServerState.RUNNING

    @property
    def address(self) -> str:
        return f"http://{self._host}:{self._port}"

    def status_text(self) -> str:
        return f"Server: {self._state.value}"

    def add_status_listener(self, listener: StatusListener) -> None:
        self._listeners.append(listener)
        listener(self.status_text())

    def start(self) -> bool:
        """Start serving; return ``False`` when already running."""

        with self._lock:
            if self._state is ServerState.RUNNING:
                _LOGGER.info("Server is already running")
                return False
            server = self._server_factory(self._app, self._host, self._port)
            thread = threading.Thread(target=server.run, name="tabbridge-server", daemon=True)
            thread.start()
            if not self._wait_until_started(server, thread):
                server.should_exit = True
                thread.join(timeout=self._startup_timeout)
                raise RuntimeError(f"Failed to start server on {self.address}")
            self._server = server
            self._thread = thread
            self._state = ServerState.RUNNING
        _LOGGER.info("Server started on %s", self.address)
        self._notify()
        return True

    def stop(self) -> bool:
        """Stop serving; return ``False`` when not running."""

        with self._lock:
            if self._state is ServerState.STOPPED:
                _LOGGER.info("Server is not running")
                return False
            server, thread = self._server, self._thread
            self._server = None
            self._thread = None
            self._state = ServerState.STOPPED
        if server is not None:
            server.should_exit = True
        if thread is not None:
            thread.join(timeout=self._startup_timeout)
            if thread.is_alive():
                _LOGGER.warning("Server thread did not exit within %.1fs", self._startup_timeout)
        _LOGGER.info("Server stopped")
        self._notify()
        return True

    def close(self) -> None:
        if self.is_running:
            self.stop()

    def __enter__(self) -> ServerController:
        self.start()
        return self

    def __exit__(self, *_exc: object) -> None:
        self.close()

    def _wait_until_started(self, server: ServerHandle, thread: threading.Thread) -> bool:
        deadline = time.monotonic() + self._startup_timeout
        while time.monotonic() < deadline:
            if getattr(server, "started", False):
                return True
            if not thread.is_alive():
                return False
            time.sleep(0.01)
        return False

    def _notify(self) -> None:
        text = self.status_text()
        for listener in list(self._listeners):
            listener(text)


__all__ = ["ServerController", "ServerState", "uvicorn_server_factory"]
