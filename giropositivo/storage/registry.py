"""Mini README: Registry mapping backend identifiers to repository classes.

Structure:
    * RepositoryRegistry - registration and instantiation of
      ``TrackerRepository`` implementations.

Hosts can register their own persistence backends under a name and select
them through the ``storage_backend`` setting.
"""

from __future__ import annotations

from typing import Dict, Iterable, Type

from ..errors import NotFoundError
from ..logging_utils import get_logger
from .base import TrackerRepository

LOGGER = get_logger(__name__)


class RepositoryRegistry:
    """Simple registry for mapping backend identifiers to classes."""

    def __init__(self) -> None:
        self._backends: Dict[str, Type[TrackerRepository]] = {}

    def register(self, backend: Type[TrackerRepository]) -> None:
        """Register a repository class under its ``backend_name``."""

        identifier = backend.backend_name.lower()
        LOGGER.debug("Registering repository backend '%s'", identifier)
        self._backends[identifier] = backend

    def available_backends(self) -> Iterable[str]:
        return sorted(self._backends.keys())

    def create(self, identifier: str, **kwargs: object) -> TrackerRepository:
        """Instantiate the backend matching ``identifier``."""

        backend_cls = self._backends.get(identifier.lower())
        if not backend_cls:
            raise NotFoundError(f"Unknown repository backend '{identifier}'")
        LOGGER.info("Creating repository backend '%s'", identifier)
        return backend_cls(**kwargs)  # type: ignore[arg-type]


REGISTRY = RepositoryRegistry()
