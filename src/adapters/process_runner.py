"""Wrapper de subprocess.

Por qué un wrapper:
- Cada comando externo se registra en el log antes de ejecutarse y su salida
  se captura, para que los fallos muestren la salida de la herramienta tal cual.
- Los servicios reciben un `CommandRunner`; los tests pasan un fake que graba.
"""

from __future__ import annotations

import shlex
import subprocess
from pathlib import Path
from typing import Mapping, Sequence

from core.errors import CommandError
from core.interfaces.runner import CommandResult
from core.log import get_logger

logger = get_logger(__name__)


def run_command(
    args: Sequence[str | Path],
    *,
    env: Mapping[str, str] | None = None,
    cwd: Path | None = None,
) -> CommandResult:
    command = [str(part) for part in args]
    logger.info("Executing: %s", shlex.join(command))
    try:
        completed = subprocess.run(
            command,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            env=dict(env) if env is not None else None,
            cwd=str(cwd) if cwd is not None else None,
        )
    except OSError as exc:
        raise CommandError(command, None, str(exc)) from exc

    result = CommandResult(
        args=tuple(command),
        returncode=completed.returncode,
        stdout=completed.stdout or "",
        stderr=completed.stderr or "",
    )
    if result.returncode != 0:
        raise CommandError(command, result.returncode, result.output)
    logger.debug("Finished: %s", command[0])
    return result
