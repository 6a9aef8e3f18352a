"""Configuración del trust store.

El bundle de certificados de `certifi` se exporta mediante una variable
convencional (`SSL_CERT_FILE` por defecto). Solo se comprueba la ruta; el
contenido de los certificados es cosa de quien llama.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Callable, MutableMapping

import certifi

from adapters.process_runner import run_command
from core.config import write_user_env_vars
from core.domain.models import TrustStoreConfig
from core.errors import CommandError, TrustStoreError
from core.interfaces.runner import CommandRunner
from core.log import get_logger

logger = get_logger(__name__)

_CERTIFI_WHERE = "import certifi; print(certifi.where())"


class TrustStoreConfigurator:
    def __init__(
        self,
        runner: CommandRunner = run_command,
        *,
        environ: MutableMapping[str, str] | None = None,
        persist: Callable[[dict[str, str | None]], Path] = write_user_env_vars,
    ) -> None:
        self._runner = runner
        self._environ = os.environ if environ is None else environ
        self._persist = persist

    def resolve_bundle(self, python: Path | None = None) -> Path:
        """Ask `certifi` for its bundle: the environment's copy when `python` is given."""

        if python is None:
            return Path(certifi.where())
        try:
            result = self._runner([python, "-c", _CERTIFI_WHERE])
        except CommandError as exc:
            raise TrustStoreError(f"certifi is not usable in {python}:\n{exc}") from exc
        location = result.stdout.strip().splitlines()[-1:] or [""]
        if not location[0]:
            raise TrustStoreError(f"certifi in {python} reported no bundle path.")
        return Path(location[0])

    def configure(
        self,
        path: Path,
        *,
        env_var: str = "SSL_CERT_FILE",
        persist: bool = True,
    ) -> TrustStoreConfig:
        """Export `path` under `env_var`; optionally persist it for the user."""

        path = Path(path)
        if not path.is_file():
            raise TrustStoreError(f"Certificate bundle not found: {path}")

        self._environ[env_var] = str(path)
        logger.info("%s=%s", env_var, path)

        persisted_to = None
        if persist:
            persisted_to = self._persist({env_var: str(path)})
            logger.info("Persisted %s to %s", env_var, persisted_to)
        return TrustStoreConfig(env_var=env_var, path=path, persisted_to=persisted_to)

    def reset(self, *, env_var: str = "SSL_CERT_FILE") -> Path:
        """Clear the variable in-process and in the user configuration."""

        self._environ.pop(env_var, None)
        location = self._persist({env_var: None})
        logger.info("Cleared %s in %s", env_var, location)
        return location
