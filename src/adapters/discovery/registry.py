"""Descubrimiento: registro de Windows (PEP 514).

Los instaladores de python.org guardan `InstallPath` bajo
`Software\\Python\\PythonCore\\<version>` en HKCU (por usuario) o HKLM.
En otras plataformas la estrategia nunca encuentra nada.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Callable, Sequence

from core.interfaces.discovery import DiscoveryStrategy

# Maps a version ("3.12") to the executable path recorded for it, if any.
RegistryReader = Callable[[str], "str | None"]


def _read_pep514(version: str) -> str | None:
    import winreg  # noqa: PLC0415  (Windows-only module)

    subkey = rf"Software\Python\PythonCore\{version}\InstallPath"
    for hive in (winreg.HKEY_CURRENT_USER, winreg.HKEY_LOCAL_MACHINE):
        try:
            with winreg.OpenKey(hive, subkey) as key:
                try:
                    executable, _ = winreg.QueryValueEx(key, "ExecutablePath")
                except OSError:
                    install_dir, _ = winreg.QueryValueEx(key, "")
                    executable = str(Path(install_dir) / "python.exe")
        except OSError:
            continue
        if executable:
            return str(executable)
    return None


class RegistryStrategy(DiscoveryStrategy):
    name = "registry"

    def __init__(
        self,
        versions: Sequence[str],
        *,
        platform: str | None = None,
        reader: RegistryReader | None = None,
    ) -> None:
        self._versions = tuple(versions)
        self._platform = platform or sys.platform
        self._reader = reader or _read_pep514

    def find(self) -> Path | None:
        if not self._platform.startswith("win"):
            return None
        for version in self._versions:
            recorded = self._reader(version)
            if recorded and Path(recorded).is_file():
                return Path(recorded)
        return None
