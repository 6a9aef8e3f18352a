"""Descubrimiento: ruta de intérprete configurada por el operador."""

from __future__ import annotations

from pathlib import Path

from core.interfaces.discovery import DiscoveryStrategy


class ExplicitPathStrategy(DiscoveryStrategy):
    name = "explicit"

    def __init__(self, path: Path | None) -> None:
        self._path = path

    def find(self) -> Path | None:
        if self._path is None:
            return None
        path = Path(self._path).expanduser()
        return path if path.is_file() else None
