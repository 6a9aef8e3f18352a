"""Componentes UI de la CLI (Rich).

Por qué separar componentes:
- Mantiene la lógica de comandos aparte de los detalles de presentación.
- Tablas y paneles se reutilizan desde varios comandos.
"""

from __future__ import annotations

from typing import Iterable

from rich.align import Align
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.domain.models import KernelEntry, ServerEndpoint
from core.services.bootstrap_pipeline import BootstrapRequest, BootstrapResult


def print_banner(console: Console) -> None:
    """Print the welcome banner (skipped in `--json` modes)."""

    title = Text("nbenv", style="bold cyan")
    subtitle = Text("Interpreter • Environment • Packages • Trust store • Kernel • Server", style="dim")
    body = Align.center(Text.assemble(title, "\n", subtitle), vertical="middle")
    console.print(Panel(body, border_style="cyan", padding=(1, 4)))


def build_plan_table(request: BootstrapRequest, endpoint: ServerEndpoint | None) -> Table:
    table = Table(title="Bootstrap plan", show_header=False)
    table.add_column("Setting", style="cyan", no_wrap=True)
    table.add_column("Value", style="white")
    table.add_row("Environment", str(request.env_dir))
    table.add_row("Packages", ", ".join(request.packages))
    if request.optional_packages:
        table.add_row("Optional", ", ".join(request.optional_packages))
    table.add_row("Manifest", f"{request.manifest_path} ({'pinned' if request.pinned else 'floating'})")
    table.add_row(
        "Trust store",
        request.cert_env_var + (" (persisted for this user)" if request.persist_cert else ""),
    )
    table.add_row("Kernel", f"{request.kernel_name} ({request.kernel_display_name})")
    table.add_row("Server", endpoint.url if endpoint else "not launched")
    return table


def build_kernels_table(entries: Iterable[KernelEntry]) -> Table:
    table = Table(title="Jupyter kernels")
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("Display name", style="white")
    table.add_column("Interpreter", style="magenta")
    table.add_column("Location", style="dim")
    for entry in entries:
        table.add_row(
            entry.name,
            entry.display_name,
            entry.python or "-",
            str(entry.resource_dir) if entry.resource_dir else "-",
        )
    return table


def build_result_panel(result: BootstrapResult) -> Panel:
    body = Text()
    body.append("Interpreter: ", style="bold")
    body.append(f"{result.interpreter.path}\n")
    body.append("Environment: ", style="bold")
    body.append(f"{result.environment.root}\n")
    body.append("Manifest: ", style="bold")
    body.append(f"{result.install.manifest_path} ({len(result.install.manifest.packages)} packages)\n")
    body.append("Trust store: ", style="bold")
    body.append(f"{result.trust_store.env_var}={result.trust_store.path}\n")
    body.append("Kernel: ", style="bold")
    body.append(f"{result.kernel.name}")
    for warning in result.warnings:
        body.append(f"\n! {warning}", style="yellow")
    return Panel(body, title=Text("Environment ready", style="bold green"), border_style="green")
