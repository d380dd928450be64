from __future__ import annotations

from typing import Any

from casemix.catalog import ReferenceCatalog
from casemix.checklist import completion
from casemix.models import Patient, PatientStatus
from casemix.tariff import effective_tariff, update_costs

from .diagnoses import serialize_diagnosis
from .records import get_patient, load_catalog, load_patients, replace_patient


def _matches_status(patient: Patient, status: str | None) -> bool:
    if not status:
        return True
    lowered = status.strip().lower()
    if lowered == "active":
        return patient.status is not PatientStatus.DISCHARGED
    if lowered in {"discharged", "krs"}:
        return patient.status is PatientStatus.DISCHARGED
    return patient.status.value.lower() == lowered or patient.status.name.lower() == lowered


def _matches_term(patient: Patient, term: str | None) -> bool:
    if not term:
        return True
    needle = term.strip()
    return (
        needle.lower() in patient.name.lower()
        or needle in patient.mrn
        or any(needle.upper() in diagnosis.code for diagnosis in patient.diagnoses)
    )


def serialize_patient(patient: Patient, catalog: ReferenceCatalog, detail: bool = False) -> dict[str, Any]:
    payload = patient.to_dict()
    active = patient.active_diagnosis
    payload["effective_tariff"] = effective_tariff(patient, catalog).to_dict()
    payload["active_checklist"] = completion(active.checklist).to_dict() if active else None
    if detail:
        payload["diagnoses"] = [serialize_diagnosis(diagnosis) for diagnosis in patient.diagnoses]
    return payload


def list_patients(status: str | None = None, term: str | None = None) -> list[dict[str, Any]]:
    """Return patients filtered by status tab and a name / MRN / diagnosis-code search."""
    catalog = load_catalog()
    return [
        serialize_patient(patient, catalog)
        for patient in load_patients()
        if _matches_status(patient, status) and _matches_term(patient, term)
    ]


def get_patient_detail(patient_id: str) -> dict[str, Any]:
    return serialize_patient(get_patient(patient_id), load_catalog(), detail=True)


def update_patient_costs(patient_id: str, payload: dict[str, Any]) -> Patient:
    """
    Apply billing / manual INA-CBG tariff amounts from a request payload.

    Raises:
        ValueError: if an amount is negative or not a whole number.
    """
    patient = get_patient(patient_id)
    changes = {key: payload[key] for key in ("billing_amount", "ina_cbg_amount") if key in payload}
    updated = update_costs(patient, **changes)
    return replace_patient(updated)
