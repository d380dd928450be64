from datetime import datetime, timezone

import pytest

from casemix.models import Patient, Severity
from casemix.recorder import (
    ChecklistItemNotFound,
    DiagnosisNotFound,
    record_diagnosis,
    toggle_checklist_item,
)
from casemix.resolver import GeneratedResolution, LocalResolution

ASTHMA = LocalResolution(
    code="J45.9",
    description="Asthma, unspecified",
    severity=Severity.I,
    required_documents=("SEP", "TRIAGE", "BACAAN THORAKS"),
)
TYPHOID = LocalResolution(
    code="A01.0",
    description="Typhoid fever",
    severity=Severity.I,
    required_documents=("SEP", "TUBEX"),
)


def _patient():
    return Patient(id="p-1", mrn="RM-001", name="Budi Santoso")


def test_record_prepends_and_keeps_history():
    first = record_diagnosis(_patient(), ASTHMA)
    second = record_diagnosis(first, TYPHOID)

    assert [d.code for d in second.diagnoses] == ["A01.0", "J45.9"]
    assert second.diagnoses[1] == first.diagnoses[0]
    assert second.active_diagnosis.code == "A01.0"


def test_record_builds_checklist_and_provenance():
    now = datetime(2024, 5, 1, 8, 30, tzinfo=timezone.utc)

    patient = record_diagnosis(_patient(), ASTHMA, now=now)
    diagnosis = patient.diagnoses[0]

    assert diagnosis.timestamp == "2024-05-01T08:30:00+00:00"
    assert [item.name for item in diagnosis.checklist] == ["SEP", "TRIAGE", "BACAAN THORAKS"]
    assert not any(item.is_checked for item in diagnosis.checklist)
    assert diagnosis.notes == "Sumber: local database"
    assert diagnosis.description == "Asthma, unspecified"


def test_user_description_wins_over_resolution():
    generated = GeneratedResolution(
        code="Z99.9",
        description="Dependence on machine",
        severity=Severity.II,
        required_documents=("SEP",),
    )

    patient = record_diagnosis(_patient(), generated, user_description="  Ketergantungan ventilator ")
    diagnosis = patient.diagnoses[0]

    assert diagnosis.description == "Ketergantungan ventilator"
    assert diagnosis.notes == "Sumber: generated (AI lookup) | Catatan: Ketergantungan ventilator"


def test_record_does_not_mutate_input():
    original = _patient()

    record_diagnosis(original, ASTHMA)

    assert original.diagnoses == ()


def test_toggle_twice_restores_item():
    patient = record_diagnosis(_patient(), ASTHMA)
    diagnosis = patient.diagnoses[0]
    target = diagnosis.checklist[1]

    once = toggle_checklist_item(patient, diagnosis.id, target.id)
    assert once.diagnoses[0].checklist[1].is_checked is True
    assert once.diagnoses[0].checklist[0] == diagnosis.checklist[0]
    assert once.diagnoses[0].checklist[2] == diagnosis.checklist[2]

    twice = toggle_checklist_item(once, diagnosis.id, target.id)
    assert twice == patient


def test_toggle_unknown_ids():
    patient = record_diagnosis(_patient(), ASTHMA)
    diagnosis = patient.diagnoses[0]

    with pytest.raises(DiagnosisNotFound):
        toggle_checklist_item(patient, "missing", diagnosis.checklist[0].id)
    with pytest.raises(ChecklistItemNotFound):
        toggle_checklist_item(patient, diagnosis.id, "missing")
