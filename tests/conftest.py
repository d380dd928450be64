import pytest

from casemix.models import ChecklistItem, Diagnosis, Gender, Patient, PatientStatus, Severity
from mclaim import create_app
from mclaim.extensions import GENERATIVE_LOOKUP_KEY
from mclaim.services.records import save_patients


class FakeLookup:
    """Stand-in for the AI lookup; records every call."""

    def __init__(self, payload=None, error=None):
        self.payload = payload
        self.error = error
        self.calls = []

    def generate(self, code, hint):
        self.calls.append((code, hint))
        if self.error is not None:
            raise self.error
        return self.payload


def make_patients():
    asthma = Diagnosis(
        id="dx-1",
        code="J45.9",
        description="Asthma, unspecified",
        severity=Severity.I,
        timestamp="2024-05-01T08:00:00+00:00",
        checklist=(
            ChecklistItem(id="chk-1", name="SEP", is_checked=True),
            ChecklistItem(id="chk-2", name="TRIAGE", is_checked=True),
            ChecklistItem(id="chk-3", name="BACAAN THORAKS"),
        ),
        notes="Sumber: local database",
    )
    diarrhea = Diagnosis(
        id="dx-2",
        code="A09.9",
        description="Gastroenteritis and colitis of unspecified origin",
        severity=Severity.I,
        timestamp="2024-04-20T08:00:00+00:00",
    )
    return [
        Patient(
            id="p-1",
            mrn="RM-001",
            name="Budi Santoso",
            bpjs_number="0001234567890",
            gender=Gender.MALE,
            status=PatientStatus.ADMITTED,
            diagnoses=(asthma,),
            billing_amount=1000000,
            admission_date="2024-05-01",
            room_number="Melati 2",
        ),
        Patient(
            id="p-2",
            mrn="RM-002",
            name="Siti Aminah",
            gender=Gender.FEMALE,
            status=PatientStatus.DISCHARGED,
            diagnoses=(diarrhea,),
            billing_amount=500000,
            ina_cbg_amount=1200000,
            admission_date="2024-04-20",
            last_visit="2024-04-22",
        ),
    ]


@pytest.fixture
def app():
    app = create_app("testing")
    with app.app_context():
        save_patients(make_patients())
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def use_lookup(app):
    def _install(payload=None, error=None):
        lookup = FakeLookup(payload=payload, error=error)
        app.extensions[GENERATIVE_LOOKUP_KEY] = lookup
        return lookup

    return _install


@pytest.fixture
def fake_lookup_cls():
    return FakeLookup
