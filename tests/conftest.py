from __future__ import annotations

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "src"))

from jupyter_client.kernelspec import KernelSpecManager

from core.config import AppSettings
from core.services.kernels import KernelRegistrar
from fakes import FakeRunner


@pytest.fixture
def runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture(autouse=True)
def user_config_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    target = tmp_path / "user-config"
    monkeypatch.setattr("core.config.get_user_config_dir", lambda: target)
    # env_file is bound when the class is created.
    monkeypatch.setitem(AppSettings.model_config, "env_file", (".env", str(target / ".env")))
    return target


@pytest.fixture
def kernel_manager(tmp_path: Path) -> KernelSpecManager:
    data_dir = tmp_path / "jupyter-data"
    return KernelSpecManager(
        data_dir=str(data_dir),
        kernel_dirs=[str(data_dir / "kernels")],
        ensure_native_kernel=False,
    )


@pytest.fixture
def registrar(kernel_manager: KernelSpecManager) -> KernelRegistrar:
    return KernelRegistrar(kernel_manager)


@pytest.fixture
def ca_bundle(tmp_path: Path) -> Path:
    bundle = tmp_path / "certifi" / "cacert.pem"
    bundle.parent.mkdir(parents=True)
    bundle.write_text("-----BEGIN CERTIFICATE-----\n", encoding="utf-8")
    return bundle


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """No ambient trust store or project `.env` leaks into settings."""

    for name in ("SSL_CERT_FILE", "NBENV_CA_BUNDLE", "NBENV_ENV_DIR", "NBENV_PYTHON_PATH"):
        monkeypatch.delenv(name, raising=False)
    workdir = tmp_path / "cwd"
    workdir.mkdir()
    monkeypatch.chdir(workdir)
