"""Value objects shared by the claim resolution and cost reconciliation engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping


class Severity(str, Enum):
    I = "I"
    II = "II"
    III = "III"


class PatientStatus(str, Enum):
    ADMITTED = "Rawat Inap"
    OUTPATIENT = "Rawat Jalan"
    DISCHARGED = "Pulang"


class Gender(str, Enum):
    MALE = "Laki-laki"
    FEMALE = "Perempuan"


def _parse_enum(enum_cls, raw: Any, default=None):
    """Accept either the stored value ("Rawat Inap") or the member name ("ADMITTED")."""
    if isinstance(raw, enum_cls):
        return raw
    if raw is None or raw == "":
        return default
    text = str(raw).strip()
    for member in enum_cls:
        if text == member.value or text.upper() == member.name:
            return member
    raise ValueError(f"{text!r} bukan nilai {enum_cls.__name__} yang valid")


def _to_amount(value: Any) -> int | None:
    if value is None or value == "":
        return None
    return int(float(value))


def normalize_code(code: str | None) -> str:
    """Trim and upper-case a diagnosis code before lookup."""
    return (code or "").strip().upper()


@dataclass(frozen=True)
class ReferenceTemplate:
    id: str
    code: str
    description: str
    severity: Severity = Severity.I
    tariff: int | None = None
    required_documents: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "code": self.code,
            "description": self.description,
            "severity": self.severity.value,
            "tariff": self.tariff,
            "required_documents": list(self.required_documents),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ReferenceTemplate":
        return cls(
            id=str(data["id"]),
            code=str(data["code"]),
            description=str(data.get("description") or ""),
            severity=_parse_enum(Severity, data.get("severity"), Severity.I),
            tariff=_to_amount(data.get("tariff")),
            required_documents=tuple(data.get("required_documents") or ()),
        )


@dataclass(frozen=True)
class ChecklistItem:
    id: str
    name: str
    is_checked: bool = False
    required: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "is_checked": self.is_checked,
            "required": self.required,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ChecklistItem":
        return cls(
            id=str(data["id"]),
            name=str(data["name"]),
            is_checked=bool(data.get("is_checked", False)),
            required=bool(data.get("required", True)),
        )


@dataclass(frozen=True)
class Diagnosis:
    id: str
    code: str
    description: str
    severity: Severity
    timestamp: str
    checklist: tuple[ChecklistItem, ...] = ()
    notes: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "code": self.code,
            "description": self.description,
            "severity": self.severity.value,
            "timestamp": self.timestamp,
            "checklist": [item.to_dict() for item in self.checklist],
            "notes": self.notes,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Diagnosis":
        return cls(
            id=str(data["id"]),
            code=str(data["code"]),
            description=str(data.get("description") or ""),
            severity=_parse_enum(Severity, data.get("severity"), Severity.I),
            timestamp=str(data.get("timestamp") or ""),
            checklist=tuple(ChecklistItem.from_dict(item) for item in data.get("checklist") or ()),
            notes=data.get("notes"),
        )


@dataclass(frozen=True)
class Patient:
    id: str
    mrn: str
    name: str
    bpjs_number: str = "-"
    gender: Gender | None = None
    dob: str | None = None
    status: PatientStatus = PatientStatus.ADMITTED
    diagnoses: tuple[Diagnosis, ...] = field(default_factory=tuple)
    billing_amount: int | None = None
    ina_cbg_amount: int | None = None
    admission_date: str | None = None
    room_number: str | None = None
    last_visit: str | None = None

    @property
    def active_diagnosis(self) -> Diagnosis | None:
        return self.diagnoses[0] if self.diagnoses else None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "mrn": self.mrn,
            "bpjs_number": self.bpjs_number,
            "name": self.name,
            "gender": self.gender.value if self.gender else None,
            "dob": self.dob,
            "status": self.status.value,
            "diagnoses": [diagnosis.to_dict() for diagnosis in self.diagnoses],
            "billing_amount": self.billing_amount,
            "ina_cbg_amount": self.ina_cbg_amount,
            "admission_date": self.admission_date,
            "room_number": self.room_number,
            "last_visit": self.last_visit,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Patient":
        return cls(
            id=str(data["id"]),
            mrn=str(data.get("mrn") or ""),
            name=str(data.get("name") or ""),
            bpjs_number=str(data.get("bpjs_number") or "-"),
            gender=_parse_enum(Gender, data.get("gender")),
            dob=data.get("dob"),
            status=_parse_enum(PatientStatus, data.get("status"), PatientStatus.ADMITTED),
            diagnoses=tuple(Diagnosis.from_dict(item) for item in data.get("diagnoses") or ()),
            billing_amount=_to_amount(data.get("billing_amount")),
            ina_cbg_amount=_to_amount(data.get("ina_cbg_amount")),
            admission_date=data.get("admission_date"),
            room_number=data.get("room_number"),
            last_visit=data.get("last_visit"),
        )
