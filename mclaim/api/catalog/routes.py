from flask import jsonify, request

from . import blueprint
from ...services.catalog import CatalogImportError, TemplateNotFound, get_template, import_catalog, list_templates


@blueprint.route("")
def catalog_index():
    """List reference templates, optionally filtered by code/description."""
    data = list_templates(request.args.get("q"))
    return jsonify({"data": data, "meta": {"total": len(data)}})


@blueprint.route("/<code>")
def catalog_detail(code: str):
    """Return the reference template for one INA-CBG code."""
    try:
        payload = get_template(code)
    except TemplateNotFound as exc:
        return jsonify({"error": str(exc)}), 404
    return jsonify({"data": payload})


@blueprint.route("/import", methods=["POST"])
def catalog_import():
    """Import delimited catalog text (raw body or JSON {text, mode})."""
    payload = request.get_json(silent=True)
    if isinstance(payload, dict):
        text = payload.get("text") or ""
        mode = payload.get("mode") or request.args.get("mode", "merge")
    else:
        text = request.get_data(as_text=True)
        mode = request.args.get("mode", "merge")
    if not isinstance(text, str) or not isinstance(mode, str):
        return jsonify({"error": "text dan mode harus berupa teks"}), 400

    try:
        result = import_catalog(text, mode)
    except CatalogImportError as exc:
        return jsonify({"error": str(exc)}), 400
    return jsonify({"data": result}), 201
