"""Mini README: JSON snapshot import and export.

Structure:
    * load_snapshot - read a snapshot file into a repository.
    * dump_snapshot - write the repository contents back to disk.

A snapshot is a JSON object with ``contracts``, ``entries`` and ``journeys``
arrays whose items use the ``as_dict`` field names of each record.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, List, Optional, Union

from ..configuration import get_settings
from ..contracts import Contract
from ..errors import InvalidInputError
from ..ledger import Entry, Journey
from ..logging_utils import get_logger
from .base import TrackerRepository
from .registry import REGISTRY

LOGGER = get_logger(__name__)

PathLike = Union[str, Path]


def load_snapshot(path: PathLike, *, backend: Optional[str] = None) -> TrackerRepository:
    """Parse ``path`` and return a repository holding its records."""

    snapshot_path = Path(path).expanduser()
    try:
        payload = json.loads(snapshot_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as error:
        raise InvalidInputError(f"Snapshot {snapshot_path} is invalid JSON") from error
    if not isinstance(payload, dict):
        raise InvalidInputError("Snapshot must be a JSON object")

    contracts = [Contract.from_dict(item) for item in payload.get("contracts", [])]
    entries = [Entry.from_dict(item) for item in payload.get("entries", [])]
    journeys = [Journey.from_dict(item) for item in payload.get("journeys", [])]
    LOGGER.info(
        "Loaded snapshot %s: %s contracts, %s entries, %s journeys",
        snapshot_path,
        len(contracts),
        len(entries),
        len(journeys),
    )
    return REGISTRY.create(
        backend or get_settings().storage_backend,
        contracts=contracts,
        entries=entries,
        journeys=journeys,
    )


def dump_snapshot(
    repository: TrackerRepository, path: PathLike, *, owner_id: Optional[str] = None
) -> Path:
    """Write the repository (optionally one owner's records) to ``path``."""

    payload: Dict[str, List[Dict[str, object]]] = {
        "contracts": [contract.as_dict() for contract in repository.list_contracts(owner_id)],
        "entries": [entry.as_dict() for entry in repository.list_entries(owner_id)],
        "journeys": [journey.as_dict() for journey in repository.list_journeys(owner_id)],
    }
    snapshot_path = Path(path).expanduser()
    snapshot_path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
    LOGGER.info("Wrote snapshot %s", snapshot_path)
    return snapshot_path
