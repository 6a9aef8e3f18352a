"""Modelos de dominio (Pydantic v2).

Por qué Pydantic en el dominio:
- Validación en los bordes (rutas, nombres, puertos) y una forma JSON estable
  para la salida `--json` sin acoplar los servicios a la CLI.

Estos modelos describen *qué* produjo el setup, no *cómo* se obtuvo.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Iterable

from pydantic import BaseModel, Field, computed_field

_NAME_RUN = re.compile(r"[-_.]+")
_REQUIREMENT_NAME = re.compile(r"^\s*([A-Za-z0-9][A-Za-z0-9._-]*)")


def normalize_package_name(name: str) -> str:
    """PEP 503 normalisation (`Scikit_Learn` -> `scikit-learn`)."""

    return _NAME_RUN.sub("-", name).lower()


def requirement_name(requirement: str) -> str:
    """Bare project name of a requirement string (extras/specifiers dropped)."""

    match = _REQUIREMENT_NAME.match(requirement)
    if not match:
        raise ValueError(f"Not a requirement: {requirement!r}")
    return normalize_package_name(match.group(1))


class LocatedInterpreter(BaseModel):
    path: Path = Field(..., description="Interpreter executable.")
    strategy: str = Field(..., min_length=1, description="Discovery strategy that found it.")


class EnvironmentInfo(BaseModel):
    """An isolated environment and what the last provisioning call did to it."""

    root: Path
    python: Path = Field(..., description="Inner interpreter; its presence defines validity.")
    created: bool = Field(default=False, description="The environment was created by this call.")
    recreated: bool = Field(default=False, description="An invalid directory was deleted first.")


class InstalledPackage(BaseModel):
    name: str = Field(..., min_length=1)
    version: str = Field(..., min_length=1)

    @property
    def key(self) -> str:
        return normalize_package_name(self.name)

    def as_line(self) -> str:
        return f"{self.name}=={self.version}"


class Manifest(BaseModel):
    """Snapshot of the fully resolved package set."""

    packages: list[InstalledPackage] = Field(default_factory=list)

    def get(self, name: str) -> InstalledPackage | None:
        key = requirement_name(name)
        for package in self.packages:
            if package.key == key:
                return package
        return None

    def missing(self, names: Iterable[str]) -> list[str]:
        return [name for name in names if self.get(name) is None]

    def lines(self) -> list[str]:
        ordered = sorted(self.packages, key=lambda p: p.key)
        return [p.as_line() for p in ordered]


class InstallReport(BaseModel):
    manifest: Manifest
    manifest_path: Path
    requested: list[str] = Field(default_factory=list)
    skipped: list[str] = Field(
        default_factory=list,
        description="Optional packages that could not be installed.",
    )
    pinned: bool = Field(default=False, description="Installed from an existing manifest.")


class TrustStoreConfig(BaseModel):
    env_var: str = Field(..., min_length=1)
    path: Path
    persisted_to: Path | None = Field(
        default=None,
        description="User config file holding the persisted value, if any.",
    )


class KernelEntry(BaseModel):
    """A user-visible kernel registration."""

    name: str = Field(..., min_length=1)
    display_name: str = ""
    argv: list[str] = Field(default_factory=list)
    resource_dir: Path | None = None
    env: dict[str, str] = Field(default_factory=dict)

    @property
    def python(self) -> str | None:
        return self.argv[0] if self.argv else None


class ServerEndpoint(BaseModel):
    host: str = Field(default="localhost", min_length=1)
    port: int = Field(default=8888, ge=1, le=65535)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def url(self) -> str:
        return f"http://{self.host}:{self.port}/"
