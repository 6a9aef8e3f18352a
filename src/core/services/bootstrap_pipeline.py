"""Orquestación del bootstrap.

Este módulo encadena los pasos que la CLI también expone uno a uno.
Tenerlo aquí lo hace reutilizable desde tests y otros entrypoints, y deja
prints/prompts fuera de la lógica del core: la CLI observa el progreso a
través de `PipelineHooks`.

No hay rollback: un fallo deja en su sitio lo que hicieron los pasos
anteriores, y cada paso es idempotente, así que basta con volver a ejecutar.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Sequence

from core.config import AppSettings
from core.domain.models import (
    EnvironmentInfo,
    InstallReport,
    KernelEntry,
    LocatedInterpreter,
    TrustStoreConfig,
)
from core.services.dependencies import DependencyInstaller
from core.services.environment import EnvironmentProvisioner
from core.services.interpreter_locator import InterpreterLocator, locator_from_settings
from core.services.kernels import KernelRegistrar
from core.services.trust_store import TrustStoreConfigurator

STEPS: tuple[str, ...] = (
    "locate",
    "provision",
    "install",
    "trust",
    "kernel",
)


@dataclass
class BootstrapRequest:
    """Parameters that control the bootstrap pipeline."""

    env_dir: Path
    packages: Sequence[str]
    manifest_path: Path
    optional_packages: Sequence[str] = ()
    pinned: bool = True
    cert_env_var: str = "SSL_CERT_FILE"
    persist_cert: bool = True
    kernel_name: str = "social_media_sentiment"
    kernel_display_name: str = "Python (Social Media Sentiment)"

    @classmethod
    def from_settings(cls, settings: AppSettings) -> "BootstrapRequest":
        return cls(
            env_dir=settings.env_dir,
            packages=list(settings.packages),
            manifest_path=settings.manifest_path,
            optional_packages=list(settings.optional_packages),
            pinned=settings.pin_versions,
            cert_env_var=settings.cert_env_var,
            persist_cert=settings.persist_cert_path,
            kernel_name=settings.kernel_name,
            kernel_display_name=settings.kernel_display_name,
        )


@dataclass
class PipelineHooks:
    """Optional callbacks for UI layers (progress, warnings)."""

    step_started: Callable[[str], None] | None = None
    step_finished: Callable[[str, str], None] | None = None
    warning: Callable[[str], None] | None = None


@dataclass
class BootstrapResult:
    interpreter: LocatedInterpreter
    environment: EnvironmentInfo
    install: InstallReport
    trust_store: TrustStoreConfig
    kernel: KernelEntry
    warnings: list[str] = field(default_factory=list)

    @property
    def runtime_env(self) -> dict[str, str]:
        """Variables handed explicitly to processes started from the environment."""

        return {self.trust_store.env_var: str(self.trust_store.path)}


class BootstrapPipeline:
    def __init__(
        self,
        *,
        locator: InterpreterLocator,
        provisioner: EnvironmentProvisioner | None = None,
        installer: DependencyInstaller | None = None,
        trust_store: TrustStoreConfigurator | None = None,
        registrar: KernelRegistrar | None = None,
    ) -> None:
        self.locator = locator
        self.provisioner = provisioner or EnvironmentProvisioner()
        self.installer = installer or DependencyInstaller()
        self.trust_store = trust_store or TrustStoreConfigurator()
        self.registrar = registrar or KernelRegistrar()

    @classmethod
    def from_settings(cls, settings: AppSettings) -> "BootstrapPipeline":
        return cls(locator=locator_from_settings(settings))

    def run(self, request: BootstrapRequest, hooks: PipelineHooks | None = None) -> BootstrapResult:
        hooks = hooks or PipelineHooks()
        warnings: list[str] = []

        def started(step: str) -> None:
            if hooks.step_started:
                hooks.step_started(step)

        def finished(step: str, detail: str) -> None:
            if hooks.step_finished:
                hooks.step_finished(step, detail)

        def warn(message: str) -> None:
            warnings.append(message)
            if hooks.warning:
                hooks.warning(message)

        started("locate")
        interpreter = self.locator.locate()
        finished("locate", f"{interpreter.path} ({interpreter.strategy})")

        started("provision")
        environment = self.provisioner.ensure(request.env_dir, interpreter.path)
        if environment.recreated:
            warn(f"Invalid environment at {environment.root} was deleted and recreated.")
        finished("provision", "created" if environment.created else "already valid")

        started("install")
        install = self.installer.install(
            environment.python,
            request.packages,
            manifest_path=request.manifest_path,
            optional=request.optional_packages,
            pinned=request.pinned,
        )
        for package in install.skipped:
            warn(f"Optional package '{package}' could not be installed; skipped.")
        finished("install", f"{len(install.manifest.packages)} packages -> {install.manifest_path}")

        started("trust")
        bundle = self.trust_store.resolve_bundle(environment.python)
        trust = self.trust_store.configure(
            bundle,
            env_var=request.cert_env_var,
            persist=request.persist_cert,
        )
        finished("trust", f"{trust.env_var}={trust.path}")

        started("kernel")
        kernel = self.registrar.register(
            request.kernel_name,
            request.kernel_display_name,
            environment.python,
            env={trust.env_var: str(trust.path)},
        )
        finished("kernel", f"{kernel.name} ({kernel.display_name})")

        return BootstrapResult(
            interpreter=interpreter,
            environment=environment,
            install=install,
            trust_store=trust,
            kernel=kernel,
            warnings=warnings,
        )
