"""Registro de kernels de Jupyter.

Un kernel spec es un puntero con nombre a un intérprete, así los notebooks
que arranque cualquier servidor Jupyter se ejecutan dentro del entorno
aprovisionado y no en un Python del sistema.
"""

from __future__ import annotations

import json
import os
import re
import tempfile
from pathlib import Path
from typing import Mapping

from jupyter_client.kernelspec import KernelSpecManager

from core.domain.models import KernelEntry
from core.errors import KernelNotFoundError, KernelRegistrationError
from core.log import get_logger

logger = get_logger(__name__)

_VALID_NAME = re.compile(r"[a-z0-9._-]+", re.IGNORECASE)


def build_kernel_json(
    python: Path,
    display_name: str,
    env: Mapping[str, str] | None = None,
) -> dict[str, object]:
    spec: dict[str, object] = {
        "argv": [str(python), "-m", "ipykernel_launcher", "-f", "{connection_file}"],
        "display_name": display_name,
        "language": "python",
        "metadata": {"debugger": True},
    }
    if env:
        spec["env"] = dict(env)
    return spec


class KernelRegistrar:
    def __init__(self, manager: KernelSpecManager | None = None) -> None:
        self._manager = manager or KernelSpecManager()

    def register(
        self,
        name: str,
        display_name: str,
        python: Path,
        *,
        env: Mapping[str, str] | None = None,
    ) -> KernelEntry:
        """Install (or overwrite) the user-scoped kernel `name`."""

        if not _VALID_NAME.fullmatch(name):
            raise KernelRegistrationError(
                f"Invalid kernel name '{name}': use letters, digits, '.', '_' or '-'."
            )
        # Kernels start in the notebook folder. Not resolve(): venv interpreters are symlinks.
        python = Path(python).absolute()
        name = name.lower()
        spec = build_kernel_json(python, display_name, env)

        with tempfile.TemporaryDirectory() as td:
            os.chmod(td, 0o755)
            with open(os.path.join(td, "kernel.json"), "w", encoding="utf-8") as f:
                json.dump(spec, f, indent=1)
            try:
                destination = self._manager.install_kernel_spec(source_dir=td, kernel_name=name, user=True)
            except (OSError, ValueError) as exc:
                raise KernelRegistrationError(f"Could not install kernel '{name}': {exc}") from exc

        logger.info("Registered kernel %s -> %s", name, python)
        return KernelEntry(
            name=name,
            display_name=display_name,
            argv=list(spec["argv"]),  # type: ignore[arg-type]
            resource_dir=Path(destination),
            env=dict(env or {}),
        )

    def list_kernels(self) -> list[KernelEntry]:
        entries: list[KernelEntry] = []
        for name, payload in self._manager.get_all_specs().items():
            spec = payload.get("spec") or {}
            entries.append(
                KernelEntry(
                    name=name,
                    display_name=spec.get("display_name", ""),
                    argv=list(spec.get("argv") or []),
                    resource_dir=Path(payload["resource_dir"]) if payload.get("resource_dir") else None,
                    env=dict(spec.get("env") or {}),
                )
            )
        return sorted(entries, key=lambda entry: entry.name)

    def get(self, name: str) -> KernelEntry | None:
        name = name.lower()
        for entry in self.list_kernels():
            if entry.name == name:
                return entry
        return None

    def remove(self, name: str) -> Path:
        """Uninstall kernel `name`; unknown names raise `KernelNotFoundError`."""

        name = name.lower()
        if name not in self._manager.find_kernel_specs():
            raise KernelNotFoundError(name)
        try:
            removed = self._manager.remove_kernel_spec(name)
        except KeyError as exc:
            raise KernelNotFoundError(name) from exc
        except OSError as exc:
            raise KernelRegistrationError(f"Could not remove kernel '{name}': {exc}") from exc
        logger.info("Removed kernel %s (%s)", name, removed)
        return Path(removed)
