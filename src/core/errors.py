"""Taxonomía de errores de los pasos de bootstrap.

Por qué una sola jerarquía:
- La CLI captura `BootstrapError` en el borde del comando y muestra el mensaje
  tal cual; nada por debajo reintenta ni compensa.
- Cada paso lanza su propia subclase, así quien llama (y los tests) sabe qué
  paso falló sin parsear mensajes.
"""

from __future__ import annotations

from typing import Sequence


class BootstrapError(RuntimeError):
    """Base class for fatal setup failures."""


class CommandError(BootstrapError):
    """An external command exited non-zero or could not be started."""

    def __init__(self, args: Sequence[str], returncode: int | None, output: str) -> None:
        self.command = list(args)
        self.returncode = returncode
        self.output = output
        head = f"Command failed ({'not started' if returncode is None else f'exit {returncode}'}): "
        super().__init__(head + " ".join(self.command) + (f"\n{output}" if output else ""))


class InterpreterNotFoundError(BootstrapError):
    """No discovery strategy produced an interpreter."""

    def __init__(self, tried: Sequence[str]) -> None:
        self.tried = list(tried)
        joined = ", ".join(self.tried) if self.tried else "none configured"
        super().__init__(f"No Python interpreter found (strategies tried: {joined}).")


class EnvironmentCreationError(BootstrapError):
    pass


class DependencyInstallError(BootstrapError):
    pass


class ManifestIncompleteError(BootstrapError):
    """Requested packages are missing from the installed snapshot."""

    def __init__(self, missing: Sequence[str]) -> None:
        self.missing = sorted(missing)
        super().__init__("Packages missing from manifest: " + ", ".join(self.missing))


class TrustStoreError(BootstrapError):
    pass


class KernelRegistrationError(BootstrapError):
    pass


class KernelNotFoundError(BootstrapError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"No kernel registered under '{name}'.")


class ServerLaunchError(BootstrapError):
    pass
