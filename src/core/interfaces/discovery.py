"""Contrato para estrategias de descubrimiento de intérpretes.

Por qué Protocol:
- Contrato estructural sin herencia: búsqueda en PATH, registro y rutas fijas
  siguen siendo intercambiables y testeables.
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol, runtime_checkable


@runtime_checkable
class DiscoveryStrategy(Protocol):
    """Minimal contract for one way of finding an interpreter.

    Rules:
    - `find` has no side effects beyond filesystem/registry reads.
    - Returning `None` means "not found here"; the locator moves on.
    """

    name: str

    def find(self) -> Path | None:
        ...
