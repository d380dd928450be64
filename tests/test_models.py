import pytest

from casemix.models import Diagnosis, Gender, Patient, PatientStatus, Severity
from casemix.store import PATIENTS, MemoryRecordStore


def test_patient_from_dict_accepts_values_and_member_names():
    patient = Patient.from_dict(
        {
            "id": "p-1",
            "mrn": "RM-001",
            "name": "Budi",
            "gender": "MALE",
            "status": "Pulang",
            "billing_amount": "1500000",
            "diagnoses": [
                {
                    "id": "dx-1",
                    "code": "J45.9",
                    "description": "Asthma",
                    "severity": "II",
                    "timestamp": "2024-05-01T08:00:00+00:00",
                    "checklist": [{"id": "c-1", "name": "SEP", "is_checked": True}],
                }
            ],
        }
    )

    assert patient.gender is Gender.MALE
    assert patient.status is PatientStatus.DISCHARGED
    assert patient.billing_amount == 1500000
    assert patient.bpjs_number == "-"
    assert patient.active_diagnosis.severity is Severity.II
    assert patient.active_diagnosis.checklist[0].required is True
    assert Patient.from_dict(patient.to_dict()) == patient


def test_unknown_status_is_rejected():
    with pytest.raises(ValueError):
        Patient.from_dict({"id": "p-1", "status": "Dirujuk"})


def test_patient_without_diagnoses_has_no_active_diagnosis():
    assert Patient(id="p-1", mrn="RM-1", name="A").active_diagnosis is None


def test_memory_store_isolates_callers():
    store = MemoryRecordStore()
    records = [{"id": "p-1", "name": "Budi"}]

    store.save(PATIENTS, records)
    records[0]["name"] = "diubah"
    loaded = store.load(PATIENTS)
    loaded.append({"id": "p-2"})

    assert store.load(PATIENTS) == [{"id": "p-1", "name": "Budi"}]
    assert store.load("reference_templates") == []


def test_diagnosis_to_dict_uses_plain_values():
    diagnosis = Diagnosis(
        id="dx-1",
        code="A01.0",
        description="Typhoid fever",
        severity=Severity.I,
        timestamp="2024-05-01T08:00:00+00:00",
    )

    payload = diagnosis.to_dict()

    assert payload["severity"] == "I"
    assert payload["checklist"] == []
    assert payload["notes"] is None
