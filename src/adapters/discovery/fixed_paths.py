"""Descubrimiento: ubicaciones de instalación conocidas.

Los candidatos van ordenados de la versión más nueva a la más vieja, así que
el primer fichero existente es también la versión más alta instalada.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Callable, Mapping, Sequence

from core.interfaces.discovery import DiscoveryStrategy


def default_fallback_paths(
    versions: Sequence[str],
    *,
    platform: str | None = None,
    environ: Mapping[str, str] | None = None,
    home: Path | None = None,
) -> list[Path]:
    """Build the platform's candidate list for `versions` (newest first)."""

    platform = platform or sys.platform
    environ = os.environ if environ is None else environ
    home = home or Path.home()

    candidates: list[Path] = []
    for version in versions:
        tag = version.replace(".", "")
        if platform.startswith("win"):
            local = Path(environ.get("LOCALAPPDATA", str(home / "AppData" / "Local")))
            program_files = Path(environ.get("ProgramFiles", r"C:\Program Files"))
            candidates.extend(
                [
                    local / "Programs" / "Python" / f"Python{tag}" / "python.exe",
                    program_files / f"Python{tag}" / "python.exe",
                    Path(f"C:\\Python{tag}") / "python.exe",
                ]
            )
        elif platform == "darwin":
            candidates.extend(
                [
                    Path("/Library/Frameworks/Python.framework/Versions") / version / "bin" / f"python{version}",
                    Path("/opt/homebrew/bin") / f"python{version}",
                    Path("/usr/local/bin") / f"python{version}",
                ]
            )
        else:
            candidates.extend(
                [
                    Path("/usr/local/bin") / f"python{version}",
                    Path("/usr/bin") / f"python{version}",
                    home / ".local" / "bin" / f"python{version}",
                ]
            )
    return candidates


class FixedPathStrategy(DiscoveryStrategy):
    name = "fixed_paths"

    def __init__(
        self,
        candidates: Sequence[Path],
        *,
        exists: Callable[[Path], bool] = Path.is_file,
    ) -> None:
        self._candidates = tuple(Path(c) for c in candidates)
        self._exists = exists

    @property
    def candidates(self) -> tuple[Path, ...]:
        return self._candidates

    def find(self) -> Path | None:
        for candidate in self._candidates:
            if self._exists(candidate):
                return candidate
        return None
