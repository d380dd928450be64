"""
Delimited-text import for the reference catalog.

Row layout: sequence number, code, description, tariff, document list
(comma separated). The field separator is detected from the first line.
"""

from __future__ import annotations

import csv
import io
import logging
import re
import uuid
from dataclasses import dataclass
from typing import Iterable, Sequence

from .models import ReferenceTemplate, Severity, normalize_code

logger = logging.getLogger(__name__)

SEPARATOR_CANDIDATES = (";", "\t", "|", ",")
HEADER_TOKENS = {"no", "no.", "kode", "code", "deskripsi", "description", "tarif", "tariff", "berkas", "dokumen"}


class MalformedImportRow(ValueError):
    """Raised for a catalog row that cannot be turned into a template."""


@dataclass(frozen=True)
class CatalogImportResult:
    templates: tuple[ReferenceTemplate, ...]
    skipped: int

    @property
    def imported(self) -> int:
        return len(self.templates)

    def to_dict(self) -> dict[str, object]:
        return {"imported": self.imported, "skipped": self.skipped}


def detect_separator(text: str) -> str:
    """
    Pick the field separator from the first non-empty line.

    "," is used only when none of ";", tab or "|" appear on that line, since
    document lists and tariffs may contain commas.
    """
    first_line = next((line for line in text.splitlines() if line.strip()), "")
    counts = {sep: first_line.count(sep) for sep in SEPARATOR_CANDIDATES if sep != ","}
    best = max(counts, key=lambda sep: counts[sep])
    return best if counts[best] > 0 else ","


def parse_tariff(raw: str | None) -> int | None:
    digits = re.sub(r"\D", "", raw or "")
    return int(digits) if digits else None


def _split_documents(raw: str) -> tuple[str, ...]:
    return tuple(doc.strip() for doc in raw.split(",") if doc.strip())


def _looks_like_header(cells: Sequence[str]) -> bool:
    return any(cell.strip().lower() in HEADER_TOKENS for cell in cells[:4])


def parse_row(cells: Sequence[str], separator: str) -> ReferenceTemplate:
    cells = [cell.strip() for cell in cells]
    if len(cells) < 3:
        raise MalformedImportRow(f"Baris hanya memiliki {len(cells)} kolom")

    code = normalize_code(cells[1])
    description = cells[2]
    if not code or not description:
        raise MalformedImportRow("Kode atau deskripsi kosong")

    tariff = parse_tariff(cells[3]) if len(cells) > 3 else None
    if separator == ",":
        documents = tuple(cell for cell in cells[4:] if cell)
    else:
        documents = _split_documents(cells[4]) if len(cells) > 4 else ()

    return ReferenceTemplate(
        id=str(uuid.uuid4()),
        code=code,
        description=description,
        severity=Severity.I,
        tariff=tariff,
        required_documents=documents,
    )


def parse_catalog_text(text: str) -> CatalogImportResult:
    """Parse a delimited catalog export; unusable rows are skipped and counted."""
    text = text.lstrip("\ufeff")
    separator = detect_separator(text)
    reader = csv.reader(io.StringIO(text), delimiter=separator)

    templates: list[ReferenceTemplate] = []
    skipped = 0
    first_row = True
    for line_no, cells in enumerate(reader, start=1):
        if not any(cell.strip() for cell in cells):
            continue
        if first_row:
            first_row = False
            if _looks_like_header(cells):
                continue
        try:
            templates.append(parse_row(cells, separator))
        except MalformedImportRow as exc:
            skipped += 1
            logger.info("Baris %s dilewati: %s", line_no, exc)

    logger.info("Import katalog: %s template, %s baris dilewati", len(templates), skipped)
    return CatalogImportResult(templates=tuple(templates), skipped=skipped)


def merge_templates(
    existing: Iterable[ReferenceTemplate],
    imported: Iterable[ReferenceTemplate],
    replace: bool = False,
) -> list[ReferenceTemplate]:
    """
    Combine imported templates with the current catalog.

    Existing codes are updated in place (keeping their id); new codes are
    prepended. With ``replace`` the import becomes the whole catalog.
    """
    imported = list(imported)
    if replace:
        return imported

    incoming: dict[str, ReferenceTemplate] = {}
    for template in imported:
        incoming.setdefault(normalize_code(template.code), template)

    merged: list[ReferenceTemplate] = []
    for template in existing:
        key = normalize_code(template.code)
        update = incoming.pop(key, None)
        if update is None:
            merged.append(template)
        else:
            merged.append(
                ReferenceTemplate(
                    id=template.id,
                    code=update.code,
                    description=update.description,
                    severity=template.severity,
                    tariff=update.tariff,
                    required_documents=update.required_documents or template.required_documents,
                )
            )
    return [*incoming.values(), *merged]
