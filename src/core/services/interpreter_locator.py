"""Descubrimiento del intérprete.

El locator evalúa una lista ordenada de estrategias y devuelve el primer
acierto. El orden viene de la configuración, así el mismo código cubre setups
POSIX con PATH primero e instalaciones Windows por registro/rutas fijas.
"""

from __future__ import annotations

from typing import Sequence

from adapters.discovery import (
    ExplicitPathStrategy,
    FixedPathStrategy,
    RegistryStrategy,
    SearchPathStrategy,
    default_fallback_paths,
)
from core.config import AppSettings
from core.domain.models import LocatedInterpreter
from core.errors import InterpreterNotFoundError
from core.interfaces.discovery import DiscoveryStrategy
from core.log import get_logger

logger = get_logger(__name__)


class InterpreterLocator:
    def __init__(self, strategies: Sequence[DiscoveryStrategy]) -> None:
        self._strategies = tuple(strategies)

    @property
    def strategies(self) -> tuple[DiscoveryStrategy, ...]:
        return self._strategies

    def locate(self) -> LocatedInterpreter:
        """Return the first interpreter found; raise if every strategy misses."""

        tried: list[str] = []
        for strategy in self._strategies:
            tried.append(strategy.name)
            found = strategy.find()
            if found is not None:
                logger.info("Interpreter found by %s: %s", strategy.name, found)
                return LocatedInterpreter(path=found, strategy=strategy.name)
            logger.debug("Strategy %s found nothing", strategy.name)
        raise InterpreterNotFoundError(tried)


def build_strategies(settings: AppSettings) -> list[DiscoveryStrategy]:
    """Instantiate the configured strategies in priority order."""

    strategies: list[DiscoveryStrategy] = []
    for name in settings.discovery_strategies:
        if name == "explicit":
            strategies.append(ExplicitPathStrategy(settings.python_path))
        elif name == "search_path":
            strategies.append(SearchPathStrategy(settings.python_names))
        elif name == "registry":
            strategies.append(RegistryStrategy(settings.python_versions))
        elif name == "fixed_paths":
            candidates = settings.fallback_paths
            if candidates is None:
                candidates = default_fallback_paths(settings.python_versions)
            strategies.append(FixedPathStrategy(candidates))
    return strategies


def locator_from_settings(settings: AppSettings) -> InterpreterLocator:
    return InterpreterLocator(build_strategies(settings))
