"""Builder de clientes httpx.

Por qué un builder:
- Estandariza timeouts y headers.
- El trust store llega como argumento explícito (`ca_bundle`); aquí nunca se
  lee del entorno del proceso.
"""

from __future__ import annotations

import ssl
from pathlib import Path

import httpx

from core.config import AppSettings

USER_AGENT = "nbenv/0.1"


def build_ssl_context(ca_bundle: Path | None) -> ssl.SSLContext | bool:
    """SSL context trusting exactly `ca_bundle`; `True` means httpx defaults."""

    if ca_bundle is None:
        return True
    return ssl.create_default_context(cafile=str(ca_bundle))


def build_client(
    settings: AppSettings | None = None,
    *,
    ca_bundle: Path | None = None,
    transport: httpx.BaseTransport | None = None,
    timeout: float | None = None,
) -> httpx.Client:
    """Create an `httpx.Client` that validates TLS against `ca_bundle`."""

    settings = settings or AppSettings()
    return httpx.Client(
        timeout=httpx.Timeout(timeout or settings.http_timeout_seconds),
        follow_redirects=True,
        headers={"User-Agent": USER_AGENT},
        verify=build_ssl_context(ca_bundle),
        transport=transport,
    )
