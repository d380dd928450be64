from flask import jsonify, request

from . import blueprint
from casemix.recorder import ChecklistItemNotFound, DiagnosisNotFound
from casemix.resolver import LookupUnavailable, ResolutionError
from ...services.diagnoses import ResolutionPending, add_diagnosis, serialize_diagnosis, toggle_item
from ...services.patients import get_patient_detail, list_patients, update_patient_costs
from ...services.records import PatientNotFound


@blueprint.route("")
def patients_index():
    """List patients, optionally filtered by status tab and search term."""
    data = list_patients(status=request.args.get("status"), term=request.args.get("q"))
    return jsonify({"data": data, "meta": {"total": len(data)}})


@blueprint.route("/<patient_id>")
def patient_detail(patient_id: str):
    """Patient with full diagnosis history, checklist progress and effective tariff."""
    try:
        payload = get_patient_detail(patient_id)
    except PatientNotFound as exc:
        return jsonify({"error": str(exc)}), 404
    return jsonify({"data": payload})


@blueprint.route("/<patient_id>/diagnoses", methods=["POST"])
def patient_add_diagnosis(patient_id: str):
    """Resolve a diagnosis code (catalog first, AI lookup fallback) and record it."""
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        payload = {}
    code = payload.get("code")
    description = payload.get("description")
    if code is not None and not isinstance(code, str):
        return jsonify({"error": "code harus berupa teks"}), 400
    if description is not None and not isinstance(description, str):
        return jsonify({"error": "description harus berupa teks"}), 400
    code = (code or "").strip()
    if not code:
        return jsonify({"error": "code tidak boleh kosong"}), 400

    try:
        patient, resolution = add_diagnosis(patient_id, code, description)
    except PatientNotFound as exc:
        return jsonify({"error": str(exc)}), 404
    except ResolutionPending as exc:
        return jsonify({"error": str(exc)}), 409
    except LookupUnavailable as exc:
        return jsonify({"error": str(exc)}), 503
    except ResolutionError as exc:
        return jsonify({"error": f"Gagal menganalisis. {exc}. Silakan coba lagi."}), 502

    return (
        jsonify(
            {
                "data": serialize_diagnosis(patient.diagnoses[0]),
                "meta": {"source": resolution.source.value, "diagnosis_count": len(patient.diagnoses)},
            }
        ),
        201,
    )


@blueprint.route(
    "/<patient_id>/diagnoses/<diagnosis_id>/checklist/<item_id>/toggle",
    methods=["POST"],
)
def patient_toggle_checklist(patient_id: str, diagnosis_id: str, item_id: str):
    """Flip the checked state of one checklist item."""
    try:
        patient = toggle_item(patient_id, diagnosis_id, item_id)
    except (PatientNotFound, DiagnosisNotFound, ChecklistItemNotFound) as exc:
        return jsonify({"error": str(exc)}), 404

    diagnosis = next(d for d in patient.diagnoses if d.id == diagnosis_id)
    return jsonify({"data": serialize_diagnosis(diagnosis)})


@blueprint.route("/<patient_id>/costs", methods=["PUT"])
def patient_update_costs(patient_id: str):
    """Update hospital billing and the manual INA-CBG tariff override."""
    payload = request.get_json(silent=True) or {}
    try:
        update_patient_costs(patient_id, payload)
        detail = get_patient_detail(patient_id)
    except PatientNotFound as exc:
        return jsonify({"error": str(exc)}), 404
    except ValueError as exc:
        return jsonify({"error": str(exc)}), 400

    return jsonify({"data": detail})
