"""INA-CBG claim resolution and cost reconciliation engine."""

from .catalog import CatalogInconsistency, ReferenceCatalog, load_seed_templates
from .checklist import ChecklistProgress, build_checklist, completion
from .models import (
    ChecklistItem,
    Diagnosis,
    Gender,
    Patient,
    PatientStatus,
    ReferenceTemplate,
    Severity,
    normalize_code,
)
from .recorder import ChecklistItemNotFound, DiagnosisNotFound, record_diagnosis, toggle_checklist_item
from .resolver import (
    CodeResolver,
    GeneratedResolution,
    LocalResolution,
    LookupUnavailable,
    Resolution,
    ResolutionError,
    ResolutionSource,
)
from .tariff import CostSummary, EffectiveTariff, effective_tariff, summarize_costs, update_costs
