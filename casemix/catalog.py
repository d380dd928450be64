"""
In-memory INA-CBG reference catalog.

Usage:
    from casemix.catalog import ReferenceCatalog, load_seed_templates
    catalog = ReferenceCatalog(load_seed_templates())
    catalog.get("j45.9").tariff
"""

from __future__ import annotations

import logging
import warnings
from pathlib import Path
from typing import Iterable, Iterator

import yaml

from .models import ReferenceTemplate, normalize_code

logger = logging.getLogger(__name__)

SEED_CATALOG_PATH = Path(__file__).resolve().parent / "data" / "ina_cbg_templates.yaml"


class CatalogInconsistency(UserWarning):
    """Emitted when the catalog holds more than one template for the same code."""


class ReferenceCatalog:
    """Exact-code lookup over reference templates, keeping catalog order."""

    def __init__(self, templates: Iterable[ReferenceTemplate] = ()) -> None:
        self._templates: tuple[ReferenceTemplate, ...] = tuple(templates)
        self._index: dict[str, ReferenceTemplate] = {}
        duplicates: list[str] = []
        for template in self._templates:
            key = normalize_code(template.code)
            if key in self._index:
                duplicates.append(key)
                continue
            self._index[key] = template
        self.duplicate_codes: tuple[str, ...] = tuple(dict.fromkeys(duplicates))
        if self.duplicate_codes:
            # first match in catalog order wins
            logger.warning("Kode duplikat di katalog INA-CBG: %s", ", ".join(self.duplicate_codes))
            warnings.warn(
                f"Duplicate reference codes, using first match: {list(self.duplicate_codes)}",
                CatalogInconsistency,
                stacklevel=2,
            )

    def get(self, code: str | None) -> ReferenceTemplate | None:
        return self._index.get(normalize_code(code))

    def tariff_for(self, code: str | None) -> int | None:
        template = self.get(code)
        if template is None or not template.tariff or template.tariff <= 0:
            return None
        return template.tariff

    def search(self, term: str | None) -> list[ReferenceTemplate]:
        if not term:
            return list(self._templates)
        needle = term.strip().lower()
        return [
            template
            for template in self._templates
            if needle in template.code.lower() or needle in template.description.lower()
        ]

    @property
    def templates(self) -> tuple[ReferenceTemplate, ...]:
        return self._templates

    def __contains__(self, code: object) -> bool:
        return isinstance(code, str) and normalize_code(code) in self._index

    def __iter__(self) -> Iterator[ReferenceTemplate]:
        return iter(self._templates)

    def __len__(self) -> int:
        return len(self._templates)


def load_seed_templates(path: Path = SEED_CATALOG_PATH) -> list[ReferenceTemplate]:
    """Read the packaged seed catalog (YAML) into reference templates."""
    if not path.exists():
        raise FileNotFoundError(f"Seed catalog not found at {path}")
    with path.open(encoding="utf-8") as f:
        payload = yaml.safe_load(f) or {}
    return [ReferenceTemplate.from_dict(item) for item in payload.get("templates") or []]
