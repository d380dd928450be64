from flask import Flask

from .catalog import blueprint as catalog_blueprint
from .docs import blueprint as docs_blueprint
from .health import blueprint as health_blueprint
from .patients import blueprint as patients_blueprint
from .reports import blueprint as reports_blueprint


def register_blueprints(app: Flask) -> None:
    """Wire all HTTP blueprints into the Flask app."""
    app.register_blueprint(health_blueprint, url_prefix="/health")
    app.register_blueprint(patients_blueprint, url_prefix="/patients")
    app.register_blueprint(catalog_blueprint, url_prefix="/catalog")
    app.register_blueprint(reports_blueprint, url_prefix="/reports")
    app.register_blueprint(docs_blueprint, url_prefix="/docs")
