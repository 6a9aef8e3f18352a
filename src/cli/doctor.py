"""Doctor command for environment diagnostics."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import httpx
import typer
from rich.console import Console
from rich.table import Table

from adapters.http_client import build_client
from adapters.manifest_file import read_manifest
from core.config import AppSettings, write_user_env_vars
from core.errors import BootstrapError
from core.services.environment import EnvironmentProvisioner
from core.services.interpreter_locator import InterpreterLocator, locator_from_settings
from core.services.kernels import KernelRegistrar

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console()


@dataclass(frozen=True)
class DoctorCheck:
    name: str
    status: str
    detail: str

    @property
    def failed(self) -> bool:
        return self.status == "FAIL"


def _check_http(url: str, ca_bundle: Path | None, transport: httpx.BaseTransport | None = None) -> tuple[bool, str]:
    try:
        with build_client(ca_bundle=ca_bundle, transport=transport) as client:
            response = client.get(url)
        return True, f"HTTP {response.status_code}"
    except (httpx.HTTPError, OSError) as exc:
        return False, str(exc)


def collect_checks(
    settings: AppSettings,
    *,
    locator: InterpreterLocator | None = None,
    provisioner: EnvironmentProvisioner | None = None,
    registrar: KernelRegistrar | None = None,
    http_transport: httpx.BaseTransport | None = None,
) -> list[DoctorCheck]:
    """Run every check; none of them raises."""

    locator = locator or locator_from_settings(settings)
    provisioner = provisioner or EnvironmentProvisioner()
    registrar = registrar or KernelRegistrar()
    checks: list[DoctorCheck] = []

    try:
        found = locator.locate()
        checks.append(DoctorCheck("Interpreter", "OK", f"{found.path} ({found.strategy})"))
    except BootstrapError as exc:
        checks.append(DoctorCheck("Interpreter", "FAIL", str(exc)))

    env_python = provisioner.python_for(settings.env_dir).absolute()
    if provisioner.is_valid(settings.env_dir):
        checks.append(DoctorCheck("Environment", "OK", str(settings.env_dir)))
    else:
        checks.append(DoctorCheck("Environment", "FAIL", f"{env_python} missing -> run `nbenv provision`"))

    manifest = read_manifest(settings.manifest_path)
    if manifest is None:
        checks.append(DoctorCheck("Manifest", "FAIL", f"{settings.manifest_path} missing -> run `nbenv install`"))
    else:
        missing = manifest.missing(settings.packages)
        if missing:
            checks.append(DoctorCheck("Manifest", "FAIL", "missing: " + ", ".join(missing)))
        else:
            checks.append(DoctorCheck("Manifest", "OK", f"{len(manifest.packages)} pinned packages"))

    ca_bundle = settings.cert_bundle()
    if ca_bundle is None:
        checks.append(DoctorCheck("Trust store", "OPTIONAL", f"{settings.cert_env_var} not set -> library defaults"))
    elif ca_bundle.is_file():
        checks.append(DoctorCheck("Trust store", "OK", str(ca_bundle)))
    else:
        checks.append(DoctorCheck("Trust store", "FAIL", f"{ca_bundle} does not exist"))
        ca_bundle = None

    kernel = registrar.get(settings.kernel_name)
    if kernel is None:
        checks.append(DoctorCheck("Kernel", "FAIL", f"{settings.kernel_name} not registered"))
    elif kernel.python and Path(kernel.python) != env_python:
        checks.append(DoctorCheck("Kernel", "WARN", f"{kernel.name} points at {kernel.python}"))
    else:
        checks.append(DoctorCheck("Kernel", "OK", f"{kernel.name} ({kernel.display_name})"))

    # Connectivity (best-effort)
    ok_http, detail_http = _check_http(settings.connectivity_url, ca_bundle, http_transport)
    checks.append(DoctorCheck("HTTPS connectivity", "OK" if ok_http else "FAIL", detail_http))

    return checks


@app.command()
def run() -> None:
    """Run baseline diagnostics and show recommended fixes."""

    settings = AppSettings()
    checks = collect_checks(settings)

    table = Table(title="nbenv doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")
    for check in checks:
        table.add_row(check.name, check.status, check.detail)
    _console.print(table)

    if any(check.failed for check in checks):
        _console.print("\n[yellow]Note:[/yellow] every step is idempotent; `nbenv up` re-runs them all.")
        raise typer.Exit(code=1)


@app.command(name="setup")
def setup() -> None:
    """Interactive setup (stores defaults in the user config .env)."""

    settings = AppSettings()

    env_dir = typer.prompt("Environment directory", default=str(settings.env_dir), show_default=True).strip()
    kernel_name = typer.prompt("Kernel name", default=settings.kernel_name, show_default=True).strip()
    display_name = typer.prompt(
        "Kernel display name",
        default=settings.kernel_display_name,
        show_default=True,
    ).strip()
    port = typer.prompt("Server port", default=settings.server_port, type=int, show_default=True)

    if not env_dir or not kernel_name:
        raise typer.BadParameter("environment directory and kernel name are required")
    if not 1 <= port <= 65535:
        raise typer.BadParameter("port must be between 1 and 65535")

    env_path = write_user_env_vars(
        {
            "NBENV_ENV_DIR": env_dir,
            "NBENV_KERNEL_NAME": kernel_name,
            "NBENV_KERNEL_DISPLAY_NAME": display_name,
            "NBENV_SERVER_PORT": str(port),
        }
    )

    _console.print(f"[green]Saved config to:[/green] {env_path}")
