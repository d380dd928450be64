from __future__ import annotations

from typing import Any

from flask import current_app

from casemix.catalog import ReferenceCatalog, load_seed_templates
from casemix.models import Patient, ReferenceTemplate
from casemix.store import PATIENTS, REFERENCE_TEMPLATES, RecordStore

from ..extensions import RECORD_STORE_KEY, db
from ..models import StoredCollection


class PatientNotFound(Exception):
    """Raised when the requested patient id does not exist in the store."""


class SqlAlchemyRecordStore:
    """Keep each collection as one JSON payload row in ``stored_collections``."""

    def load(self, collection: str) -> list[dict[str, Any]]:
        row = db.session.get(StoredCollection, collection)
        if row is None or not row.payload:
            return []
        return list(row.payload)

    def save(self, collection: str, records: list[dict[str, Any]]) -> None:
        row = db.session.get(StoredCollection, collection)
        if row is None:
            row = StoredCollection(name=collection)
            db.session.add(row)
        row.payload = list(records)
        db.session.commit()


def get_record_store() -> RecordStore:
    return current_app.extensions[RECORD_STORE_KEY]


def load_patients() -> list[Patient]:
    return [Patient.from_dict(record) for record in get_record_store().load(PATIENTS)]


def save_patients(patients: list[Patient]) -> None:
    get_record_store().save(PATIENTS, [patient.to_dict() for patient in patients])


def get_patient(patient_id: str) -> Patient:
    for patient in load_patients():
        if patient.id == patient_id:
            return patient
    raise PatientNotFound(f"Pasien {patient_id} tidak ditemukan.")


def replace_patient(updated: Patient) -> Patient:
    """Swap one patient in the stored collection and write the whole collection back."""
    patients = load_patients()
    for index, patient in enumerate(patients):
        if patient.id == updated.id:
            patients[index] = updated
            save_patients(patients)
            return updated
    raise PatientNotFound(f"Pasien {updated.id} tidak ditemukan.")


def load_templates() -> list[ReferenceTemplate]:
    records = get_record_store().load(REFERENCE_TEMPLATES)
    if not records and current_app.config.get("SEED_REFERENCE_CATALOG", True):
        return load_seed_templates()
    return [ReferenceTemplate.from_dict(record) for record in records]


def save_templates(templates: list[ReferenceTemplate]) -> None:
    get_record_store().save(REFERENCE_TEMPLATES, [template.to_dict() for template in templates])


def load_catalog() -> ReferenceCatalog:
    return ReferenceCatalog(load_templates())
