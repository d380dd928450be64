"""Effective INA-CBG tariff per patient and billing-vs-tariff variance."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Iterable

from .catalog import ReferenceCatalog
from .models import Patient

_UNSET = object()


@dataclass(frozen=True)
class EffectiveTariff:
    amount: int
    is_from_catalog: bool

    def to_dict(self) -> dict[str, object]:
        return {"amount": self.amount, "is_from_catalog": self.is_from_catalog}


@dataclass(frozen=True)
class CostLine:
    patient_id: str
    billing: int
    tariff: EffectiveTariff

    @property
    def variance(self) -> int:
        return self.tariff.amount - self.billing


@dataclass(frozen=True)
class CostSummary:
    total_billing: int
    total_tariff: int
    variance: int

    def to_dict(self) -> dict[str, int]:
        return {
            "total_billing": self.total_billing,
            "total_tariff": self.total_tariff,
            "variance": self.variance,
        }


def effective_tariff(patient: Patient, catalog: ReferenceCatalog) -> EffectiveTariff:
    """
    Resolve the claimable tariff for a patient.

    Precedence: manual override (ina_cbg_amount > 0), then the catalog tariff of
    the most recent diagnosis, then 0. Older diagnoses never contribute.
    """
    if patient.ina_cbg_amount and patient.ina_cbg_amount > 0:
        return EffectiveTariff(amount=patient.ina_cbg_amount, is_from_catalog=False)

    active = patient.active_diagnosis
    if active is not None:
        tariff = catalog.tariff_for(active.code)
        if tariff:
            return EffectiveTariff(amount=tariff, is_from_catalog=True)

    return EffectiveTariff(amount=0, is_from_catalog=False)


def patient_cost_line(patient: Patient, catalog: ReferenceCatalog) -> CostLine:
    return CostLine(
        patient_id=patient.id,
        billing=patient.billing_amount or 0,
        tariff=effective_tariff(patient, catalog),
    )


def summarize_costs(patients: Iterable[Patient], catalog: ReferenceCatalog) -> CostSummary:
    """Sum billing and effective tariff over ``patients``; variance > 0 means projected surplus."""
    total_billing = 0
    total_tariff = 0
    for patient in patients:
        line = patient_cost_line(patient, catalog)
        total_billing += line.billing
        total_tariff += line.tariff.amount
    return CostSummary(
        total_billing=total_billing,
        total_tariff=total_tariff,
        variance=total_tariff - total_billing,
    )


def _validate_amount(name: str, value) -> int | None:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise ValueError(f"{name} harus berupa angka")
    try:
        amount = int(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{name} harus berupa angka bulat") from exc
    if isinstance(value, float) and value != amount:
        raise ValueError(f"{name} harus berupa angka bulat")
    if amount < 0:
        raise ValueError(f"{name} tidak boleh negatif")
    return amount


def update_costs(patient: Patient, billing_amount=_UNSET, ina_cbg_amount=_UNSET) -> Patient:
    """
    Return a copy of ``patient`` with new billing / manual tariff amounts.

    Omitted arguments keep the current value. An override of None or 0 lets
    the catalog tariff apply again.
    """
    changes: dict[str, int | None] = {}
    if billing_amount is not _UNSET:
        changes["billing_amount"] = _validate_amount("billing_amount", billing_amount)
    if ina_cbg_amount is not _UNSET:
        changes["ina_cbg_amount"] = _validate_amount("ina_cbg_amount", ina_cbg_amount)
    return replace(patient, **changes)
