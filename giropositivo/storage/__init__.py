"""Mini README: Persistence abstractions for GiroPositivo.

The package is divided into ``base`` for the abstract repository,
``registry`` for backend lookup, ``memory`` for the bundled dict-backed
implementation and ``snapshot`` for JSON import/export.
"""

from .base import TrackerRepository
from .memory import InMemoryRepository
from .registry import REGISTRY, RepositoryRegistry
from .snapshot import dump_snapshot, load_snapshot

REGISTRY.register(InMemoryRepository)

__all__ = [
    "InMemoryRepository",
    "REGISTRY",
    "RepositoryRegistry",
    "TrackerRepository",
    "dump_snapshot",
    "load_snapshot",
]
