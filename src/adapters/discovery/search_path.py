"""Descubrimiento: la ruta de búsqueda de comandos activa (PATH)."""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import Callable, Sequence

from core.interfaces.discovery import DiscoveryStrategy


class SearchPathStrategy(DiscoveryStrategy):
    """Look each executable name up on PATH; the first hit wins."""

    name = "search_path"

    def __init__(
        self,
        names: Sequence[str] = ("python3", "python"),
        *,
        which: Callable[[str], str | None] = shutil.which,
    ) -> None:
        self._names = tuple(names)
        self._which = which

    def find(self) -> Path | None:
        for executable in self._names:
            found = self._which(executable)
            if found:
                return Path(found).resolve()
        return None
