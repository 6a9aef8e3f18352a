from __future__ import annotations

from pathlib import Path

import httpx
import pytest

from core.domain.models import ServerEndpoint
from core.errors import ServerLaunchError
from core.services.server import NotebookServer, server_command, wait_until_ready
from fakes import FakeProcess


def test_default_endpoint_url() -> None:
    assert ServerEndpoint().url == "http://localhost:8888/"


def test_server_command(tmp_path: Path) -> None:
    python = tmp_path / "bin" / "python"

    command = server_command(python, ServerEndpoint(port=9999), app="lab", open_browser=False)

    assert command == [str(python), "-m", "jupyter", "lab", "--ip", "localhost", "--port", "9999", "--no-browser"]


def test_start_injects_trust_store_explicitly(tmp_path: Path) -> None:
    captured: dict = {}

    def popen(command, env):
        captured["command"] = command
        captured["env"] = env
        return FakeProcess()

    NotebookServer(popen=popen).start(
        tmp_path / "python",
        ServerEndpoint(),
        extra_env={"SSL_CERT_FILE": "/certs/cacert.pem"},
    )

    assert captured["env"]["SSL_CERT_FILE"] == "/certs/cacert.pem"
    assert captured["command"][2:4] == ["jupyter", "notebook"]


def test_start_failure_is_surfaced(tmp_path: Path) -> None:
    def popen(command, env):
        raise FileNotFoundError(2, "No such file or directory")

    with pytest.raises(ServerLaunchError, match="No such file"):
        NotebookServer(popen=popen).start(tmp_path / "python", ServerEndpoint())


def test_serve_returns_exit_code() -> None:
    assert NotebookServer().serve(FakeProcess(exit_code=3)) == 3  # type: ignore[arg-type]


def test_interrupt_terminates_server() -> None:
    process = FakeProcess(interrupt_on_wait=True)

    code = NotebookServer().serve(process)  # type: ignore[arg-type]

    assert process.terminated
    assert code == -15


def _ticking_clock(step: float = 1.0):
    now = [0.0]

    def clock() -> float:
        now[0] += step
        return now[0]

    return clock


def test_wait_until_ready_polls_until_answer() -> None:
    attempts: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        attempts.append(str(request.url))
        if len(attempts) < 3:
            raise httpx.ConnectError("connection refused", request=request)
        return httpx.Response(200, json={"version": "2.14.0"})

    with httpx.Client(transport=httpx.MockTransport(handler)) as client:
        ready = wait_until_ready(
            ServerEndpoint(),
            timeout=30,
            client=client,
            clock=_ticking_clock(),
            sleep=lambda seconds: None,
        )

    assert ready
    assert attempts == ["http://localhost:8888/api"] * 3


def test_wait_until_ready_gives_up_at_deadline() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with httpx.Client(transport=httpx.MockTransport(handler)) as client:
        ready = wait_until_ready(
            ServerEndpoint(),
            timeout=3,
            client=client,
            clock=_ticking_clock(),
            sleep=lambda seconds: None,
        )

    assert not ready


def test_wait_until_ready_stops_when_process_exits() -> None:
    process = FakeProcess(exit_code=1)
    process.wait()

    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("must not poll a dead server")

    with httpx.Client(transport=httpx.MockTransport(handler)) as client:
        assert not wait_until_ready(ServerEndpoint(), client=client, process=process)  # type: ignore[arg-type]
