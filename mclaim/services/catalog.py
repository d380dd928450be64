from __future__ import annotations

from typing import Any

from flask import current_app

from casemix.importer import merge_templates, parse_catalog_text

from .records import load_catalog, load_templates, save_templates

IMPORT_MODES = {"merge", "replace"}


class TemplateNotFound(Exception):
    """Raised when no reference template exists for the requested code."""


class CatalogImportError(Exception):
    """Raised when an import request cannot be processed at all."""


def list_templates(term: str | None = None) -> list[dict[str, Any]]:
    return [template.to_dict() for template in load_catalog().search(term)]


def get_template(code: str) -> dict[str, Any]:
    template = load_catalog().get(code)
    if template is None:
        raise TemplateNotFound(f"Kode {code.strip().upper()} tidak ada di database INA-CBG.")
    return template.to_dict()


def import_catalog(text: str, mode: str = "merge") -> dict[str, Any]:
    """Parse delimited catalog text and store it, returning imported/skipped counts."""
    mode = (mode or "merge").strip().lower()
    if mode not in IMPORT_MODES:
        raise CatalogImportError(f"Nilai mode harus salah satu dari {sorted(IMPORT_MODES)}")
    if not text or not text.strip():
        raise CatalogImportError("Isi file import kosong")

    result = parse_catalog_text(text)
    if mode == "replace" and not result.templates:
        raise CatalogImportError("Tidak ada baris valid; katalog tidak diganti")
    templates = merge_templates(load_templates(), result.templates, replace=mode == "replace")
    save_templates(templates)
    current_app.logger.info(
        "Import katalog (%s): %s kode diimpor, %s baris dilewati, total %s kode",
        mode,
        result.imported,
        result.skipped,
        len(templates),
    )
    return {**result.to_dict(), "mode": mode, "total": len(templates)}
