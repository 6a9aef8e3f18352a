"""CLI de nbenv.

Cada paso del setup es su propio comando para poder repetir solo el que
falló; `up` los encadena y arranca el servidor.
"""

from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

import typer
from rich.console import Console
from rich.markup import escape

from cli import doctor
from cli.ui_components import build_kernels_table, build_plan_table, build_result_panel, print_banner
from core.config import AppSettings
from core.domain.models import ServerEndpoint
from core.errors import BootstrapError
from core.log import setup_logging
from core.services.bootstrap_pipeline import BootstrapPipeline, BootstrapRequest, PipelineHooks
from core.services.dependencies import DependencyInstaller
from core.services.environment import EnvironmentProvisioner
from core.services.interpreter_locator import locator_from_settings
from core.services.kernels import KernelRegistrar
from core.services.server import NotebookServer, wait_until_ready
from core.services.trust_store import TrustStoreConfigurator

app = typer.Typer(no_args_is_help=True, help="Set up and launch the sentiment-analysis notebook environment.")
trust_app = typer.Typer(no_args_is_help=True, help="Certificate bundle (trust store) configuration.")
kernel_app = typer.Typer(no_args_is_help=True, help="Jupyter kernel registration.")

app.add_typer(doctor.app, name="doctor")
app.add_typer(trust_app, name="trust")
app.add_typer(kernel_app, name="kernel")

_console = Console()


@contextmanager
def _surface_errors() -> Iterator[None]:
    try:
        yield
    except BootstrapError as exc:
        _console.print(f"[red]Error:[/red] {escape(str(exc))}")
        raise typer.Exit(code=1) from exc


def _settings(**overrides: object) -> AppSettings:
    settings = AppSettings()
    updates = {key: value for key, value in overrides.items() if value is not None}
    return settings.model_copy(update=updates) if updates else settings


def _env_python(settings: AppSettings) -> Path:
    provisioner = EnvironmentProvisioner()
    if not provisioner.is_valid(settings.env_dir):
        raise BootstrapError(f"No valid environment at {settings.env_dir}; run `nbenv provision` first.")
    return provisioner.python_for(settings.env_dir)


def _launch(settings: AppSettings, python: Path, extra_env: dict[str, str]) -> int:
    endpoint = ServerEndpoint(host=settings.server_host, port=settings.server_port)
    server = NotebookServer()
    process = server.start(
        python,
        endpoint,
        app=settings.server_app,
        open_browser=settings.open_browser,
        extra_env=extra_env,
    )
    try:
        if wait_until_ready(endpoint, timeout=settings.server_ready_timeout_seconds, process=process):
            _console.print(f"[green]Server running at[/green] {endpoint.url} [dim](Ctrl+C to stop)[/dim]")
        else:
            _console.print(f"[yellow]Server not answering at {endpoint.url} yet; see its output above.[/yellow]")
    except KeyboardInterrupt:
        return server.stop(process)
    return server.serve(process)


def _boundary_env(settings: AppSettings) -> dict[str, str]:
    """Trust-store value from the ambient configuration, if one was persisted."""

    bundle = settings.cert_bundle()
    if bundle is not None and bundle.is_file():
        return {settings.cert_env_var: str(bundle)}
    return {}


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging."),
    log_file: Optional[Path] = typer.Option(None, "--log-file", help="Also write logs to this file."),
) -> None:
    settings = AppSettings()
    setup_logging("DEBUG" if verbose else settings.log_level, log_file or settings.log_file)


@app.command()
def up(
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation."),
    launch: bool = typer.Option(True, "--launch/--no-launch", help="Start the notebook server at the end."),
    env_dir: Optional[Path] = typer.Option(None, "--env-dir", help="Environment directory."),
    port: Optional[int] = typer.Option(None, "--port", min=1, max=65535, help="Server port."),
) -> None:
    """Run every setup step, then launch the notebook server."""

    settings = _settings(env_dir=env_dir, server_port=port)
    request = BootstrapRequest.from_settings(settings)
    endpoint = ServerEndpoint(host=settings.server_host, port=settings.server_port) if launch else None

    print_banner(_console)
    _console.print(build_plan_table(request, endpoint))
    if not yes:
        typer.confirm("Proceed?", default=True, abort=True)

    hooks = PipelineHooks(
        step_started=lambda step: _console.print(f"[cyan]→[/cyan] {step}"),
        step_finished=lambda step, detail: _console.print(f"  [green]✓[/green] {escape(detail)}"),
        warning=lambda message: _console.print(f"  [yellow]![/yellow] {escape(message)}"),
    )
    with _surface_errors():
        result = BootstrapPipeline.from_settings(settings).run(request, hooks)
    _console.print(build_result_panel(result))

    if launch:
        with _surface_errors():
            code = _launch(settings, result.environment.python, result.runtime_env)
        raise typer.Exit(code=code)


@app.command()
def locate(as_json: bool = typer.Option(False, "--json", help="Print JSON.")) -> None:
    """Find a Python interpreter."""

    settings = AppSettings()
    with _surface_errors():
        found = locator_from_settings(settings).locate()
    if as_json:
        typer.echo(found.model_dump_json())
        return
    _console.print(f"{found.path} [dim]({found.strategy})[/dim]")


@app.command()
def provision(env_dir: Optional[Path] = typer.Option(None, "--env-dir", help="Environment directory.")) -> None:
    """Create the isolated environment if it is missing or invalid."""

    settings = _settings(env_dir=env_dir)
    with _surface_errors():
        found = locator_from_settings(settings).locate()
        info = EnvironmentProvisioner().ensure(settings.env_dir, found.path)
    state = "recreated" if info.recreated else "created" if info.created else "already valid"
    _console.print(f"[green]Environment {state}:[/green] {info.root}")


@app.command()
def install(
    upgrade: bool = typer.Option(False, "--upgrade", help="Ignore the manifest pins and resolve latest versions."),
) -> None:
    """Install the package set and rewrite the manifest."""

    settings = AppSettings()
    with _surface_errors():
        python = _env_python(settings)
        report = DependencyInstaller().install(
            python,
            settings.packages,
            manifest_path=settings.manifest_path,
            optional=settings.optional_packages,
            pinned=settings.pin_versions and not upgrade,
        )
    for package in report.skipped:
        _console.print(f"[yellow]Skipped optional package:[/yellow] {package}")
    mode = "pinned" if report.pinned else "latest"
    _console.print(
        f"[green]Installed ({mode}):[/green] {len(report.manifest.packages)} packages -> {report.manifest_path}"
    )


@trust_app.command("configure")
def trust_configure(
    path: Optional[Path] = typer.Option(None, "--path", help="Bundle to use instead of the environment's certifi."),
    persist: Optional[bool] = typer.Option(None, "--persist/--no-persist", help="Store the value for this user."),
) -> None:
    """Export the certificate bundle path (and persist it for this user)."""

    settings = AppSettings()
    configurator = TrustStoreConfigurator()
    with _surface_errors():
        if path is None:
            path = configurator.resolve_bundle(_env_python(settings))
        config = configurator.configure(
            path,
            env_var=settings.cert_env_var,
            persist=settings.persist_cert_path if persist is None else persist,
        )
    _console.print(f"[green]{config.env_var}[/green]={config.path}")
    if config.persisted_to:
        _console.print(f"[dim]Persisted to {config.persisted_to}[/dim]")


@trust_app.command("show")
def trust_show() -> None:
    """Show the persisted/ambient certificate bundle path."""

    settings = AppSettings()
    bundle = settings.cert_bundle()
    if bundle is None:
        _console.print(f"{settings.cert_env_var} is not set.")
        return
    state = "[green]exists[/green]" if bundle.is_file() else "[red]missing[/red]"
    _console.print(f"{settings.cert_env_var}={bundle} ({state})")


@trust_app.command("reset")
def trust_reset() -> None:
    """Clear the persisted certificate bundle path."""

    settings = AppSettings()
    location = TrustStoreConfigurator().reset(env_var=settings.cert_env_var)
    _console.print(f"[green]Cleared {settings.cert_env_var}[/green] in {location}")


@kernel_app.command("register")
def kernel_register(
    name: Optional[str] = typer.Option(None, "--name", help="Kernel identifier."),
    display_name: Optional[str] = typer.Option(None, "--display-name", help="Label shown in Jupyter."),
) -> None:
    """Register the environment interpreter as a Jupyter kernel."""

    settings = AppSettings()
    with _surface_errors():
        entry = KernelRegistrar().register(
            name or settings.kernel_name,
            display_name or settings.kernel_display_name,
            _env_python(settings),
            env=_boundary_env(settings),
        )
    _console.print(f"[green]Registered kernel[/green] {entry.name} -> {entry.resource_dir}")


@kernel_app.command("list")
def kernel_list(as_json: bool = typer.Option(False, "--json", help="Print JSON.")) -> None:
    """List registered kernels."""

    entries = KernelRegistrar().list_kernels()
    if as_json:
        typer.echo("[" + ",".join(entry.model_dump_json() for entry in entries) + "]")
        return
    _console.print(build_kernels_table(entries))


@kernel_app.command("remove")
def kernel_remove(
    name: str = typer.Argument(..., help="Kernel identifier."),
    missing_ok: bool = typer.Option(False, "--missing-ok", help="Succeed silently when the kernel does not exist."),
) -> None:
    """Uninstall a kernel registration."""

    registrar = KernelRegistrar()
    if missing_ok and registrar.get(name) is None:
        return
    with _surface_errors():
        removed = registrar.remove(name)
    _console.print(f"[green]Removed kernel[/green] {name.lower()} ({removed})")


@app.command(name="launch")
def launch_server(
    port: Optional[int] = typer.Option(None, "--port", min=1, max=65535, help="Server port."),
    lab: bool = typer.Option(False, "--lab", help="Start JupyterLab instead of the classic notebook."),
    browser: Optional[bool] = typer.Option(None, "--browser/--no-browser", help="Open a browser tab."),
) -> None:
    """Start the notebook server from the environment (Ctrl+C to stop)."""

    settings = _settings(server_port=port, server_app="lab" if lab else None, open_browser=browser)
    with _surface_errors():
        code = _launch(settings, _env_python(settings), _boundary_env(settings))
    raise typer.Exit(code=code)


def run() -> None:
    app()
