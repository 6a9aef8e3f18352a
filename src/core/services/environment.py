"""Aprovisionamiento del entorno aislado (`venv` de la stdlib).

La validez se define solo por la presencia del intérprete interno. Un
directorio inválido se borra antes de recrearlo.
"""

from __future__ import annotations

import shutil
import sys
from pathlib import Path

from adapters.process_runner import run_command
from core.domain.models import EnvironmentInfo
from core.errors import CommandError, EnvironmentCreationError
from core.interfaces.runner import CommandRunner
from core.log import get_logger

logger = get_logger(__name__)


def venv_python(env_dir: Path, platform: str | None = None) -> Path:
    """Interpreter inside the environment at `env_dir`."""

    platform = platform or sys.platform
    if platform.startswith("win"):
        return env_dir / "Scripts" / "python.exe"
    return env_dir / "bin" / "python"


class EnvironmentProvisioner:
    def __init__(self, runner: CommandRunner = run_command, *, platform: str | None = None) -> None:
        self._runner = runner
        self._platform = platform

    def python_for(self, env_dir: Path) -> Path:
        return venv_python(env_dir, self._platform)

    def is_valid(self, env_dir: Path) -> bool:
        return self.python_for(env_dir).is_file()

    def ensure(self, env_dir: Path, interpreter: Path) -> EnvironmentInfo:
        """Make sure a valid environment exists at `env_dir`.

        Idempotent: a valid environment is left untouched.
        """

        env_dir = Path(env_dir).absolute()
        python = self.python_for(env_dir)
        if self.is_valid(env_dir):
            logger.info("Environment already valid at %s", env_dir)
            return EnvironmentInfo(root=env_dir, python=python)

        recreated = False
        if env_dir.exists() or env_dir.is_symlink():
            logger.warning("Environment at %s is invalid (missing %s); deleting it", env_dir, python)
            try:
                if env_dir.is_dir() and not env_dir.is_symlink():
                    shutil.rmtree(env_dir)
                else:
                    env_dir.unlink()
            except OSError as exc:
                raise EnvironmentCreationError(f"Could not delete invalid environment at {env_dir}: {exc}") from exc
            recreated = True

        logger.info("Creating environment at %s with %s", env_dir, interpreter)
        try:
            self._runner([interpreter, "-m", "venv", env_dir])
        except CommandError as exc:
            raise EnvironmentCreationError(f"Failed to create environment at {env_dir}:\n{exc}") from exc

        if not self.is_valid(env_dir):
            raise EnvironmentCreationError(
                f"Environment created at {env_dir} but {python} does not exist."
            )
        return EnvironmentInfo(root=env_dir, python=python, created=True, recreated=recreated)
