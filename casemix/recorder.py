from __future__ import annotations

import uuid
from dataclasses import replace
from datetime import datetime, timezone

from .checklist import build_checklist
from .models import Diagnosis, Patient
from .resolver import Resolution


class DiagnosisNotFound(LookupError):
    """Raised when a diagnosis id does not belong to the patient."""


class ChecklistItemNotFound(LookupError):
    """Raised when a checklist item id does not belong to the diagnosis."""


def provenance_note(resolution: Resolution, hint: str | None = None) -> str:
    note = f"Sumber: {resolution.provenance}"
    if hint and hint.strip():
        note = f"{note} | Catatan: {hint.strip()}"
    return note


def record_diagnosis(
    patient: Patient,
    resolution: Resolution,
    user_description: str | None = None,
    now: datetime | None = None,
) -> Patient:
    """Return a copy of ``patient`` with a new diagnosis built from ``resolution`` prepended."""
    description = (user_description or "").strip() or resolution.description
    timestamp = (now or datetime.now(tz=timezone.utc)).isoformat()

    diagnosis = Diagnosis(
        id=str(uuid.uuid4()),
        code=resolution.code,
        description=description,
        severity=resolution.severity,
        timestamp=timestamp,
        checklist=build_checklist(resolution.required_documents),
        notes=provenance_note(resolution, user_description),
    )
    return replace(patient, diagnoses=(diagnosis, *patient.diagnoses))


def toggle_checklist_item(patient: Patient, diagnosis_id: str, item_id: str) -> Patient:
    """Flip ``is_checked`` on exactly one checklist item and return the updated patient."""
    diagnoses = list(patient.diagnoses)
    for d_index, diagnosis in enumerate(diagnoses):
        if diagnosis.id != diagnosis_id:
            continue
        checklist = list(diagnosis.checklist)
        for c_index, item in enumerate(checklist):
            if item.id == item_id:
                checklist[c_index] = replace(item, is_checked=not item.is_checked)
                diagnoses[d_index] = replace(diagnosis, checklist=tuple(checklist))
                return replace(patient, diagnoses=tuple(diagnoses))
        raise ChecklistItemNotFound(f"Item checklist {item_id} tidak ditemukan pada diagnosis {diagnosis_id}")
    raise DiagnosisNotFound(f"Diagnosis {diagnosis_id} tidak ditemukan untuk pasien {patient.id}")
