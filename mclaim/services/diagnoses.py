from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Iterator

from flask import current_app

from casemix.checklist import completion
from casemix.models import Diagnosis, Patient
from casemix.recorder import record_diagnosis, toggle_checklist_item
from casemix.resolver import CodeResolver, Resolution

from ..extensions import GENERATIVE_LOOKUP_KEY, PENDING_RESOLUTIONS_KEY
from .records import get_patient, load_catalog, replace_patient


class ResolutionPending(Exception):
    """Raised when a diagnosis is submitted while another one is still resolving for the patient."""


class PendingResolutions:
    """Track patients with an outstanding code resolution."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._patients: set[str] = set()

    @contextmanager
    def hold(self, patient_id: str) -> Iterator[None]:
        with self._lock:
            if patient_id in self._patients:
                raise ResolutionPending(f"Diagnosis pasien {patient_id} masih diproses, tunggu hingga selesai.")
            self._patients.add(patient_id)
        try:
            yield
        finally:
            with self._lock:
                self._patients.discard(patient_id)


def serialize_diagnosis(diagnosis: Diagnosis) -> dict:
    payload = diagnosis.to_dict()
    payload["progress"] = completion(diagnosis.checklist).to_dict()
    return payload


def add_diagnosis(patient_id: str, code: str, description: str | None = None) -> tuple[Patient, Resolution]:
    """Resolve ``code`` and prepend the resulting diagnosis to the patient's history."""
    get_patient(patient_id)
    pending: PendingResolutions = current_app.extensions[PENDING_RESOLUTIONS_KEY]

    with pending.hold(patient_id):
        resolver = CodeResolver(load_catalog(), current_app.extensions.get(GENERATIVE_LOOKUP_KEY))
        resolution = resolver.resolve(code, hint=description)
        current_app.logger.info(
            "Diagnosis %s untuk pasien %s diselesaikan dari sumber %s",
            resolution.code,
            patient_id,
            resolution.source.value,
        )
        # re-read: the patient may have changed while the lookup ran
        updated = record_diagnosis(get_patient(patient_id), resolution, user_description=description)
        replace_patient(updated)
    return updated, resolution


def toggle_item(patient_id: str, diagnosis_id: str, item_id: str) -> Patient:
    patient = get_patient(patient_id)
    updated = toggle_checklist_item(patient, diagnosis_id, item_id)
    return replace_patient(updated)
