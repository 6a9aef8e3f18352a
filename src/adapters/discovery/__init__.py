"""Estrategias de descubrimiento de intérpretes.

Cada módulo implementa `core.interfaces.discovery.DiscoveryStrategy`.
"""

from adapters.discovery.explicit import ExplicitPathStrategy
from adapters.discovery.fixed_paths import FixedPathStrategy, default_fallback_paths
from adapters.discovery.registry import RegistryStrategy
from adapters.discovery.search_path import SearchPathStrategy

__all__ = [
    "ExplicitPathStrategy",
    "FixedPathStrategy",
    "RegistryStrategy",
    "SearchPathStrategy",
    "default_fallback_paths",
]
