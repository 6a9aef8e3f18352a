"""Configuración del Core.

Por qué aquí:
- Centraliza variables de entorno (pydantic-settings) sin filtrarlas a los
  servicios de cada paso; los servicios reciben valores explícitos.
- El `.env` por usuario es también el hueco persistente de la variable del
  trust store, así que ejecuciones posteriores la heredan sin repetir el paso.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Literal, Mapping

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

APP_DIR_NAME = "nbenv"

DiscoveryStrategyName = Literal["explicit", "search_path", "registry", "fixed_paths"]

DEFAULT_PACKAGES: tuple[str, ...] = (
    "notebook",
    "ipykernel",
    "pandas",
    "numpy",
    "matplotlib",
    "seaborn",
    "nltk",
    "textblob",
    "vaderSentiment",
    "scikit-learn",
    "certifi",
)

# No wheels on the newest interpreters for a while after each release.
DEFAULT_OPTIONAL_PACKAGES: tuple[str, ...] = ("wordcloud",)


def get_user_config_dir() -> Path:
    """Per-user configuration directory (cross-platform, no extra dependencies)."""

    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA", str(Path.home())))
        return base / APP_DIR_NAME
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / APP_DIR_NAME

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / APP_DIR_NAME
    return Path.home() / ".config" / APP_DIR_NAME


def get_user_env_file() -> Path:
    return get_user_config_dir() / ".env"


def _parse_env_lines(text: str) -> dict[str, str]:
    data: dict[str, str] = {}
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip().strip('"').strip("'")
        if key:
            data[key] = value
    return data


def read_user_env_vars() -> dict[str, str]:
    env_path = get_user_env_file()
    if not env_path.exists():
        return {}
    return _parse_env_lines(env_path.read_text(encoding="utf-8"))


def write_user_env_vars(values: dict[str, str | None]) -> Path:
    """Write/update keys in the user `.env`.

    A `None` or empty value removes the key, which is how persisted settings
    are cleared.
    """

    env_path = get_user_env_file()
    env_path.parent.mkdir(parents=True, exist_ok=True)

    existing = read_user_env_vars()
    for key, value in values.items():
        if value is None or value == "":
            existing.pop(key, None)
        else:
            existing[key] = value

    lines = ["# nbenv user config (.env)"]
    for key in sorted(existing.keys()):
        lines.append(f"{key}={existing[key]}")
    env_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return env_path


class AppSettings(BaseSettings):
    """Central application settings.

    Read order: project `.env` first (development), then the user `.env`
    written by `nbenv doctor setup` and `nbenv trust configure`.
    """

    model_config = SettingsConfigDict(
        env_prefix="NBENV_",
        extra="ignore",
        case_sensitive=False,
        populate_by_name=True,
        env_file=(".env", str(get_user_env_file())),
        env_file_encoding="utf-8",
    )

    env_dir: Path = Field(
        default=Path(".venv"),
        description="Directory of the isolated environment.",
    )

    # Interpreter discovery
    python_path: Path | None = Field(
        default=None,
        description="Explicit interpreter, used by the 'explicit' strategy.",
    )
    discovery_strategies: list[DiscoveryStrategyName] = Field(
        default_factory=lambda: ["explicit", "search_path", "registry", "fixed_paths"],
        min_length=1,
        description="Discovery strategies in priority order.",
    )
    python_names: list[str] = Field(
        default_factory=lambda: ["python3", "python"],
        description="Executable names looked up on the command-search path.",
    )
    python_versions: list[str] = Field(
        default_factory=lambda: ["3.14", "3.13", "3.12", "3.11", "3.10"],
        description="Versions probed by registry/fixed-path discovery, newest first.",
    )
    fallback_paths: list[Path] | None = Field(
        default=None,
        description="Explicit candidate list for 'fixed_paths' (replaces the platform defaults).",
    )

    # Dependencies
    packages: list[str] = Field(default_factory=lambda: list(DEFAULT_PACKAGES))
    optional_packages: list[str] = Field(default_factory=lambda: list(DEFAULT_OPTIONAL_PACKAGES))
    manifest_path: Path = Field(
        default=Path("requirements.txt"),
        description="Snapshot of the resolved package set (name==version per line).",
    )
    pin_versions: bool = Field(
        default=True,
        description="Reinstall from an existing manifest instead of re-resolving.",
    )

    # Trust store
    cert_env_var: str = Field(default="SSL_CERT_FILE", min_length=1)
    persist_cert_path: bool = True
    ca_bundle: Path | None = Field(
        default=None,
        validation_alias=AliasChoices("NBENV_CA_BUNDLE", "SSL_CERT_FILE"),
        description="Certificate bundle handed explicitly to HTTPS clients.",
    )

    # Kernel
    kernel_name: str = Field(default="social_media_sentiment", min_length=1)
    kernel_display_name: str = Field(default="Python (Social Media Sentiment)", min_length=1)

    # Server
    server_app: Literal["notebook", "lab"] = "notebook"
    server_host: str = Field(default="localhost", min_length=1)
    server_port: int = Field(default=8888, ge=1, le=65535)
    open_browser: bool = True
    server_ready_timeout_seconds: float = Field(default=60.0, gt=0)

    http_timeout_seconds: float = Field(
        default=20.0,
        gt=0,
        description="Timeout per HTTP request (seconds).",
    )
    connectivity_url: str = Field(default="https://pypi.org/simple/", min_length=8)

    log_level: str = Field(default="INFO")
    log_file: Path | None = None

    @field_validator("python_path", "ca_bundle", "log_file", mode="before")
    @classmethod
    def _blank_as_none(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    def cert_bundle(self, environ: Mapping[str, str] | None = None) -> Path | None:
        """Bundle named by `cert_env_var`.

        Looked up in the process environment, then in the user `.env`
        (where `nbenv trust configure` persists it), then `ca_bundle`.
        """

        environ = os.environ if environ is None else environ
        for source in (environ, read_user_env_vars()):
            value = (source.get(self.cert_env_var) or "").strip()
            if value:
                return Path(value)
        return self.ca_bundle
