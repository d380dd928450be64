from __future__ import annotations

import csv
from datetime import date, datetime
from typing import Any

import pandas as pd

from casemix.catalog import ReferenceCatalog
from casemix.checklist import has_pending_required
from casemix.models import Patient, PatientStatus
from casemix.tariff import patient_cost_line, summarize_costs

from .records import load_catalog, load_patients

EXPORT_COLUMNS = {
    "mrn": "No. RM",
    "name": "Nama Pasien",
    "bpjs_number": "BPJS",
    "gender": "Gender",
    "status": "Status",
    "admission_date": "Tgl Masuk",
    "room_number": "Kamar",
    "dx_code": "Kode Diagnosis",
    "dx_description": "Deskripsi Diagnosis",
    "length_of_stay": "Lama Rawat",
    "billing_amount": "Tagihan RS",
    "tariff_amount": "Tarif INA-CBG",
    "variance": "Selisih",
}


def _parse_day(value: str | None) -> date | None:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value[:10]).date()
    except ValueError:
        return None


def length_of_stay(patient: Patient, today: date | None = None) -> str:
    """Inclusive day count from admission to today, or to last visit once discharged."""
    start = _parse_day(patient.admission_date)
    if start is None:
        return "-"
    end = today or date.today()
    if patient.status is PatientStatus.DISCHARGED:
        end = _parse_day(patient.last_visit) or end
    total_days = max(1, (end - start).days + 1)
    return f"{total_days} Hari"


def _cost_row(patient: Patient, catalog: ReferenceCatalog, today: date | None) -> dict[str, Any]:
    line = patient_cost_line(patient, catalog)
    active = patient.active_diagnosis
    return {
        "patient_id": patient.id,
        "mrn": patient.mrn,
        "name": patient.name,
        "bpjs_number": patient.bpjs_number,
        "gender": patient.gender.value if patient.gender else "-",
        "status": patient.status.value,
        "admission_date": patient.admission_date or "-",
        "room_number": patient.room_number or "-",
        "dx_code": active.code if active else "-",
        "dx_description": active.description if active else "-",
        "length_of_stay": length_of_stay(patient, today),
        "billing_amount": line.billing,
        "tariff_amount": line.tariff.amount,
        "tariff_from_catalog": line.tariff.is_from_catalog,
        "variance": line.variance,
    }


def build_cost_frame(
    patients: list[Patient] | None = None,
    catalog: ReferenceCatalog | None = None,
    today: date | None = None,
) -> pd.DataFrame:
    """One row per patient with billing, effective tariff and variance."""
    patients = load_patients() if patients is None else patients
    catalog = load_catalog() if catalog is None else catalog
    rows = [_cost_row(patient, catalog, today) for patient in patients]
    return pd.DataFrame(rows, columns=["patient_id", *EXPORT_COLUMNS.keys(), "tariff_from_catalog"])


def get_cost_summary() -> dict[str, int]:
    return summarize_costs(load_patients(), load_catalog()).to_dict()


def get_cost_control(term: str | None = None) -> list[dict[str, Any]]:
    df = build_cost_frame()
    if term and not df.empty:
        needle = term.strip()
        mask = (
            df["name"].str.lower().str.contains(needle.lower(), regex=False)
            | df["mrn"].str.contains(needle, regex=False)
            | df["dx_code"].str.contains(needle.upper(), regex=False)
        )
        df = df[mask]
    records = df.to_dict(orient="records")
    for row in records:
        for key in ("billing_amount", "tariff_amount", "variance"):
            row[key] = int(row[key])
        row["tariff_from_catalog"] = bool(row["tariff_from_catalog"])
    return records


def export_cost_control_csv(today: date | None = None) -> bytes:
    """Semicolon separated, UTF-8 with BOM so Excel (id-ID locale) opens it directly."""
    df = build_cost_frame(today=today)[list(EXPORT_COLUMNS.keys())].rename(columns=EXPORT_COLUMNS)
    return df.to_csv(sep=";", index=False, quoting=csv.QUOTE_NONNUMERIC, lineterminator="\n").encode("utf-8-sig")


def get_dashboard_summary() -> dict[str, Any]:
    patients = load_patients()
    catalog = load_catalog()
    pending_checklists = sum(
        1
        for patient in patients
        if patient.active_diagnosis is not None and has_pending_required(patient.active_diagnosis.checklist)
    )
    return {
        "total_patients": len(patients),
        "admitted_patients": sum(1 for patient in patients if patient.status is PatientStatus.ADMITTED),
        "pending_checklists": pending_checklists,
        "catalog_size": len(catalog),
        "costs": summarize_costs(patients, catalog).to_dict(),
    }
