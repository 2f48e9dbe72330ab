"""Tests for the background server controller."""

from __future__ import annotations

import time
from typing import Any

import pytest
import uvicorn

from tabbridge.server.lifecycle import ServerController, ServerState, uvicorn_server_factory


class _StubServer:
    def __init__(self, *, fail: bool = False) -> None:
        self.started = False
        self.should_exit = False
        self.runs = 0
        self._fail = fail

    def run(self) -> None:
        self.runs += 1
        if self._fail:
            return
        self.started = True
        while not self.should_exit:
            time.sleep(0.005)


class _Factory:
    def __init__(self, *, fail: bool = False) -> None:
        self.servers: list[_StubServer] = []
        self._fail = fail

    def __call__(self, app: Any, host: str, port: int) -> _StubServer:
        server = _StubServer(fail=self._fail)
        self.servers.append(server)
        return server


def test_start_and_stop_transition_state_and_notify() -> None:
    factory = _Factory()
    controller = ServerController(object(), port=3999, server_factory=factory)
    messages: list[str] = []
    controller.add_status_listener(messages.append)

    assert controller.start() is True
    assert controller.state is ServerState.RUNNING
    assert controller.stop() is True
    assert controller.state is ServerState.STOPPED

    assert messages == ["Server: stopped", "Server: running", "Server: stopped"]
    assert factory.servers[0].should_exit is True


def test_starting_twice_is_ignored() -> None:
    factory = _Factory()
    controller = ServerController(object(), server_factory=factory)

    try:
        assert controller.start() is True
        assert controller.start() is False
        assert len(factory.servers) == 1
    finally:
        controller.close()


def test_stopping_when_stopped_is_ignored() -> None:
    controller = ServerController(object(), server_factory=_Factory())

    assert controller.stop() is False
    assert controller.status_text() == "Server: stopped"


def test_controller_can_restart_after_stop() -> None:
    factory = _Factory()
    controller = ServerController(object(), server_factory=factory)

    controller.start()
    controller.stop()
    controller.start()
    controller.stop()

    assert len(factory.servers) == 2
    assert all(server.runs == 1 for server in factory.servers)


def test_context_manager_stops_on_exit() -> None:
    with ServerController(object(), server_factory=_Factory()) as controller:
        assert controller.is_running

    assert controller.state is ServerState.STOPPED


def test_failed_start_raises_and_stays_stopped() -> None:
    controller = ServerController(object(), port=4001, server_factory=_Factory(fail=True), startup_timeout=1.0)

    with pytest.raises(RuntimeError, match="http://127.0.0.1:4001"):
        controller.start()

    assert controller.state is ServerState.STOPPED


def test_uvicorn_factory_builds_server_without_its_own_logging() -> None:
    server = uvicorn_server_factory(object(), "127.0.0.1", 3456)

    assert isinstance(server, uvicorn.Server)
    assert server.config.port == 3456
    assert server.config.access_log is False
