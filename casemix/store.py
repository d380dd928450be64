from __future__ import annotations

import copy
from typing import Any, Protocol

PATIENTS = "patients"
REFERENCE_TEMPLATES = "reference_templates"


class RecordStore(Protocol):
    """Load-all / save-all access to serialized record collections."""

    def load(self, collection: str) -> list[dict[str, Any]]:
        """Return stored records, or an empty list when nothing was saved yet."""

    def save(self, collection: str, records: list[dict[str, Any]]) -> None:
        """Replace the whole collection with ``records``."""


class MemoryRecordStore:
    """Process-local store, mostly for tests and scripts."""

    def __init__(self, initial: dict[str, list[dict[str, Any]]] | None = None) -> None:
        self._data: dict[str, list[dict[str, Any]]] = copy.deepcopy(initial or {})

    def load(self, collection: str) -> list[dict[str, Any]]:
        return copy.deepcopy(self._data.get(collection, []))

    def save(self, collection: str, records: list[dict[str, Any]]) -> None:
        self._data[collection] = copy.deepcopy(list(records))
