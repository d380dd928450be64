from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar, Mapping, Protocol

from .catalog import ReferenceCatalog
from .models import Severity, normalize_code

logger = logging.getLogger(__name__)


class ResolutionError(Exception):
    """Raised when a diagnosis code cannot be resolved into a valid resolution."""


class LookupUnavailable(ResolutionError):
    """Raised when no generative lookup is configured for codes missing from the catalog."""


class ResolutionSource(str, Enum):
    LOCAL = "local"
    GENERATED = "generated"


class GenerativeLookup(Protocol):
    def generate(self, code: str, hint: str | None) -> Mapping[str, Any]:
        ...


@dataclass(frozen=True)
class Resolution:
    code: str
    description: str
    severity: Severity
    required_documents: tuple[str, ...]

    source: ClassVar[ResolutionSource]
    provenance: ClassVar[str]

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "description": self.description,
            "severity": self.severity.value,
            "required_documents": list(self.required_documents),
            "source": self.source.value,
        }


@dataclass(frozen=True)
class LocalResolution(Resolution):
    source: ClassVar[ResolutionSource] = ResolutionSource.LOCAL
    provenance: ClassVar[str] = "local database"


@dataclass(frozen=True)
class GeneratedResolution(Resolution):
    source: ClassVar[ResolutionSource] = ResolutionSource.GENERATED
    provenance: ClassVar[str] = "generated (AI lookup)"


def _require_text(payload: Mapping[str, Any], key: str) -> str:
    value = payload.get(key)
    if not isinstance(value, str) or not value.strip():
        raise ResolutionError(f"Hasil lookup tidak memiliki field '{key}' yang valid")
    return value.strip()


def validate_generated(payload: Any) -> GeneratedResolution:
    """Check a generative lookup payload against the resolution schema."""
    if not isinstance(payload, Mapping):
        raise ResolutionError("Hasil lookup bukan objek JSON")

    code = _require_text(payload, "code")
    description = _require_text(payload, "description")

    raw_severity = payload.get("severity")
    try:
        severity = Severity(str(raw_severity).strip()) if raw_severity is not None else None
    except ValueError:
        severity = None
    if severity is None:
        raise ResolutionError(f"Severity {raw_severity!r} di luar pilihan I/II/III")

    documents = payload.get("requiredDocuments", payload.get("required_documents"))
    if not isinstance(documents, (list, tuple)) or not documents:
        raise ResolutionError("Daftar dokumen wajib kosong atau tidak valid")
    if not all(isinstance(doc, str) and doc.strip() for doc in documents):
        raise ResolutionError("Daftar dokumen wajib berisi nama dokumen yang kosong")

    return GeneratedResolution(
        code=code,
        description=description,
        severity=severity,
        required_documents=tuple(doc.strip() for doc in documents),
    )


class CodeResolver:
    """Resolve a diagnosis code from the reference catalog, falling back to a generative lookup."""

    def __init__(self, catalog: ReferenceCatalog, lookup: GenerativeLookup | None = None) -> None:
        self.catalog = catalog
        self.lookup = lookup

    def resolve(self, code: str, hint: str | None = None) -> Resolution:
        normalized = normalize_code(code)
        if not normalized:
            raise ResolutionError("Kode diagnosis tidak boleh kosong")

        template = self.catalog.get(normalized)
        if template is not None:
            logger.info("Kode %s ditemukan di katalog lokal", normalized)
            return LocalResolution(
                code=template.code,
                description=template.description,
                severity=template.severity,
                required_documents=template.required_documents,
            )

        if self.lookup is None:
            raise LookupUnavailable(
                f"Kode {normalized} tidak ada di database dan layanan lookup AI tidak aktif"
            )

        logger.info("Kode %s tidak ada di katalog, memanggil generative lookup", normalized)
        try:
            payload = self.lookup.generate(normalized, hint)
        except ResolutionError:
            raise
        except Exception as exc:
            logger.warning("Generative lookup gagal untuk %s: %s", normalized, exc)
            raise ResolutionError(f"Gagal menganalisis kode {normalized}: {exc}") from exc

        return validate_generated(payload)
