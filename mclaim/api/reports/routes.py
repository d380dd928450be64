from datetime import date

from flask import Response, jsonify, request

from . import blueprint
from ...services.reports import (
    export_cost_control_csv,
    get_cost_control,
    get_cost_summary,
    get_dashboard_summary,
)


@blueprint.route("/cost-summary")
def cost_summary():
    """Return total billing, total effective tariff and variance across all patients."""
    return jsonify({"data": get_cost_summary()})


@blueprint.route("/cost-control")
def cost_control():
    """Return per-patient billing vs INA-CBG tariff rows."""
    data = get_cost_control(request.args.get("q"))
    return jsonify({"data": data, "meta": {"total": len(data)}})


@blueprint.route("/cost-control.csv")
def cost_control_csv():
    """Download the cost-control table as a semicolon separated CSV."""
    filename = f"mclaim_export_{date.today().isoformat()}.csv"
    return Response(
        export_cost_control_csv(),
        mimetype="text/csv",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )


@blueprint.route("/dashboard")
def dashboard():
    """Return patient counts, pending checklists and the cost summary."""
    return jsonify({"data": get_dashboard_summary()})
