"""Instalación de dependencias y snapshot del manifiesto.

La petición nombra paquetes sin versión; el manifiesto escrito tras la
instalación es el único registro duradero de lo que realmente se resolvió.
Si un manifiesto ya cubre el conjunto pedido, se reinstala tal cual (fijado)
salvo que se fuerce un upgrade.
"""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

from adapters.manifest_file import parse_manifest, read_manifest, write_manifest
from adapters.process_runner import run_command
from core.domain.models import InstallReport, Manifest
from core.errors import CommandError, DependencyInstallError, ManifestIncompleteError
from core.interfaces.runner import CommandRunner
from core.log import get_logger

logger = get_logger(__name__)

_PIP_FLAGS = ("--no-input", "--disable-pip-version-check")


class DependencyInstaller:
    def __init__(self, runner: CommandRunner = run_command) -> None:
        self._runner = runner

    def _pip(self, python: Path, *arguments: str | Path) -> str:
        return self._runner([python, "-m", "pip", *arguments]).stdout

    def install(
        self,
        python: Path,
        packages: Sequence[str],
        *,
        manifest_path: Path,
        optional: Sequence[str] = (),
        pinned: bool = True,
    ) -> InstallReport:
        """Install `packages` (+ best-effort `optional`) and snapshot the result."""

        requested = list(packages)
        previous = read_manifest(manifest_path) if pinned else None
        use_pins = bool(previous and previous.packages and not previous.missing(requested))

        try:
            if use_pins:
                logger.info("Installing pinned set from %s", manifest_path)
                self._pip(python, "install", *_PIP_FLAGS, "-r", manifest_path)
            else:
                logger.info("Installing %d packages (latest versions)", len(requested))
                self._pip(python, "install", "--upgrade", *_PIP_FLAGS, *requested)
        except CommandError as exc:
            raise DependencyInstallError(f"Package installation failed:\n{exc}") from exc

        skipped: list[str] = []
        for package in optional:
            pin = previous.get(package) if use_pins and previous else None
            target = (pin.as_line(),) if pin else ("--upgrade", package)
            try:
                self._pip(python, "install", *_PIP_FLAGS, *target)
            except CommandError as exc:
                logger.warning("Skipping optional package %s: %s", package, exc.output or exc)
                skipped.append(package)

        manifest = self.snapshot(python)
        write_manifest(manifest=manifest, output_path=manifest_path)
        logger.info("Wrote %d entries to %s", len(manifest.packages), manifest_path)

        missing = manifest.missing(requested)
        if missing:
            raise ManifestIncompleteError(missing)
        return InstallReport(
            manifest=manifest,
            manifest_path=manifest_path,
            requested=requested,
            skipped=skipped,
            pinned=use_pins,
        )

    def snapshot(self, python: Path) -> Manifest:
        """Resolved package set of the environment (`pip list --format=freeze`)."""

        try:
            output = self._pip(python, "list", "--format=freeze", "--disable-pip-version-check")
        except CommandError as exc:
            raise DependencyInstallError(f"Could not list installed packages:\n{exc}") from exc
        return parse_manifest(output)
