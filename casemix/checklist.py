from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Iterable, Sequence

from .models import ChecklistItem


@dataclass(frozen=True)
class ChecklistProgress:
    checked: int
    total: int
    ratio: float
    has_requirements: bool

    @property
    def percent(self) -> int:
        return round(self.ratio * 100)

    def to_dict(self) -> dict[str, object]:
        return {
            "checked": self.checked,
            "total": self.total,
            "ratio": self.ratio,
            "percent": self.percent,
            "has_requirements": self.has_requirements,
        }


def build_checklist(document_names: Iterable[str]) -> tuple[ChecklistItem, ...]:
    """Turn required document names into unchecked, mandatory checklist items (order kept)."""
    return tuple(
        ChecklistItem(id=str(uuid.uuid4()), name=name, is_checked=False, required=True)
        for name in document_names
    )


def completion(checklist: Sequence[ChecklistItem]) -> ChecklistProgress:
    """
    Report how many checklist items are ticked.

    An empty checklist has no requirements and counts as complete (ratio 1.0).
    """
    total = len(checklist)
    checked = sum(1 for item in checklist if item.is_checked)
    if total == 0:
        return ChecklistProgress(checked=0, total=0, ratio=1.0, has_requirements=False)
    return ChecklistProgress(checked=checked, total=total, ratio=checked / total, has_requirements=True)


def has_pending_required(checklist: Sequence[ChecklistItem]) -> bool:
    return any(item.required and not item.is_checked for item in checklist)
