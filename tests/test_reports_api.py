from datetime import date

from casemix.models import Patient, PatientStatus
from mclaim.services.reports import export_cost_control_csv, length_of_stay


def test_cost_summary(client):
    response = client.get("/reports/cost-summary")

    assert response.status_code == 200
    assert response.get_json()["data"] == {
        "total_billing": 1500000,
        "total_tariff": 3314700,
        "variance": 1814700,
    }


def test_cost_control_rows(client):
    rows = client.get("/reports/cost-control").get_json()["data"]

    budi, siti = rows
    assert budi["dx_code"] == "J45.9"
    assert budi["tariff_amount"] == 2114700
    assert budi["tariff_from_catalog"] is True
    assert budi["variance"] == 1114700
    assert siti["tariff_amount"] == 1200000
    assert siti["tariff_from_catalog"] is False
    assert siti["length_of_stay"] == "3 Hari"


def test_cost_control_search(client):
    body = client.get("/reports/cost-control?q=a09").get_json()

    assert body["meta"]["total"] == 1
    assert body["data"][0]["mrn"] == "RM-002"


def test_cost_control_csv(client):
    response = client.get("/reports/cost-control.csv")

    assert response.status_code == 200
    assert response.mimetype == "text/csv"
    assert "mclaim_export_" in response.headers["Content-Disposition"]
    assert response.data.startswith(b"\xef\xbb\xbf")
    text = response.data.decode("utf-8-sig")
    header, first, second = text.strip().split("\n")
    assert header.startswith('"No. RM";"Nama Pasien";"BPJS"')
    assert first.startswith('"RM-001";"Budi Santoso"')
    assert first.endswith(";1000000;2114700;1114700")


def test_export_includes_length_of_stay(app):
    with app.app_context():
        text = export_cost_control_csv(today=date(2024, 5, 3)).decode("utf-8-sig")

    assert '"3 Hari"' in text.split("\n")[1]


def test_length_of_stay():
    admitted = Patient(id="p", mrn="m", name="n", admission_date="2024-05-01")
    discharged = Patient(
        id="p",
        mrn="m",
        name="n",
        status=PatientStatus.DISCHARGED,
        admission_date="2024-05-01",
        last_visit="2024-05-01",
    )

    assert length_of_stay(admitted, today=date(2024, 5, 10)) == "10 Hari"
    assert length_of_stay(discharged, today=date(2024, 5, 10)) == "1 Hari"
    assert length_of_stay(Patient(id="p", mrn="m", name="n")) == "-"


def test_dashboard(client):
    data = client.get("/reports/dashboard").get_json()["data"]

    assert data["total_patients"] == 2
    assert data["admitted_patients"] == 1
    assert data["pending_checklists"] == 1
    assert data["catalog_size"] == 105
    assert data["costs"]["total_billing"] == 1500000
