"""Fichero de manifiesto (`nombre==versión` por línea).

Por qué texto plano:
- Es lo que consume `pip install -r`, así que el snapshot sirve también como
  entrada fijada de la siguiente instalación.
"""

from __future__ import annotations

from pathlib import Path

from core.domain.models import InstalledPackage, Manifest


def parse_manifest(text: str) -> Manifest:
    """Parse `pip list --format=freeze` style output.

    Blank lines, comments and anything that is not an exact `name==version`
    pin (editable installs, URLs) are ignored.
    """

    packages: list[InstalledPackage] = []
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#") or "==" not in line:
            continue
        name, version = line.split("==", 1)
        name, version = name.strip(), version.strip()
        if not name or not version or " " in name:
            continue
        packages.append(InstalledPackage(name=name, version=version))
    return Manifest(packages=packages)


def read_manifest(path: Path) -> Manifest | None:
    if not path.exists():
        return None
    return parse_manifest(path.read_text(encoding="utf-8"))


def write_manifest(*, manifest: Manifest, output_path: Path) -> Path:
    """Overwrite `output_path` with the snapshot, sorted by normalised name."""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text("\n".join(manifest.lines()) + "\n", encoding="utf-8")
    return output_path
