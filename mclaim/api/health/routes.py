from flask import current_app, jsonify

from . import blueprint
from ...extensions import GENERATIVE_LOOKUP_KEY
from ...services.records import load_catalog


@blueprint.route("/ping")
def ping():
    """Basic liveness probe."""
    return jsonify({"status": "ok"})


@blueprint.route("/ready")
def ready():
    """Report catalog size and whether the generative lookup fallback is configured."""
    catalog = load_catalog()
    return jsonify(
        {
            "status": "ok",
            "catalog_size": len(catalog),
            "duplicate_codes": list(catalog.duplicate_codes),
            "generative_lookup": current_app.extensions.get(GENERATIVE_LOOKUP_KEY) is not None,
        }
    )
