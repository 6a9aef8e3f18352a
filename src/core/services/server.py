"""Arranque del servidor de notebooks.

El servidor corre en primer plano hasta que se interrumpe; Ctrl+C se traduce
en terminar el proceso hijo para no dejar un Jupyter huérfano.
"""

from __future__ import annotations

import os
import subprocess
import time
from pathlib import Path
from typing import Callable, Mapping

import httpx

from adapters.http_client import build_client
from core.domain.models import ServerEndpoint
from core.errors import ServerLaunchError
from core.log import get_logger

logger = get_logger(__name__)

PopenFactory = Callable[..., "subprocess.Popen[bytes]"]


def server_command(
    python: Path,
    endpoint: ServerEndpoint,
    *,
    app: str = "notebook",
    open_browser: bool = True,
) -> list[str]:
    command = [str(python), "-m", "jupyter", app, "--ip", endpoint.host, "--port", str(endpoint.port)]
    if not open_browser:
        command.append("--no-browser")
    return command


class NotebookServer:
    def __init__(
        self,
        *,
        popen: PopenFactory = subprocess.Popen,
        shutdown_grace_seconds: float = 10.0,
    ) -> None:
        self._popen = popen
        self._grace = shutdown_grace_seconds

    def start(
        self,
        python: Path,
        endpoint: ServerEndpoint,
        *,
        app: str = "notebook",
        open_browser: bool = True,
        extra_env: Mapping[str, str] | None = None,
    ) -> "subprocess.Popen[bytes]":
        """Start the server process; `extra_env` is layered over the current environment."""

        command = server_command(python, endpoint, app=app, open_browser=open_browser)
        environment = dict(os.environ)
        if extra_env:
            environment.update({str(k): str(v) for k, v in extra_env.items()})
        logger.info("Starting %s server at %s", app, endpoint.url)
        try:
            return self._popen(command, env=environment)
        except OSError as exc:
            raise ServerLaunchError(f"Could not start {' '.join(command)}: {exc}") from exc

    def stop(self, process: "subprocess.Popen[bytes]") -> int:
        if process.poll() is not None:
            return process.returncode
        process.terminate()
        try:
            return process.wait(timeout=self._grace)
        except subprocess.TimeoutExpired:
            logger.warning("Server did not stop within %.0fs; killing it", self._grace)
            process.kill()
            return process.wait()

    def serve(self, process: "subprocess.Popen[bytes]") -> int:
        """Block until the server exits or the operator interrupts it."""

        try:
            return process.wait()
        except KeyboardInterrupt:
            logger.info("Interrupted; stopping server")
            return self.stop(process)


def wait_until_ready(
    endpoint: ServerEndpoint,
    *,
    timeout: float = 60.0,
    interval: float = 0.5,
    client: httpx.Client | None = None,
    process: "subprocess.Popen[bytes] | None" = None,
    clock: Callable[[], float] = time.monotonic,
    sleep: Callable[[float], None] = time.sleep,
) -> bool:
    """Poll `<url>api` until the server answers; False on deadline or early exit."""

    probe_url = endpoint.url + "api"
    owns_client = client is None
    client = client or build_client(timeout=min(5.0, timeout))
    deadline = clock() + timeout
    try:
        while True:
            if process is not None and process.poll() is not None:
                logger.error("Server exited with code %s before becoming ready", process.returncode)
                return False
            try:
                client.get(probe_url)
                return True
            except httpx.TransportError:
                pass
            if clock() >= deadline:
                return False
            sleep(interval)
    finally:
        if owns_client:
            client.close()
