from flask import Blueprint

blueprint = Blueprint("patients", __name__)

from . import routes  # noqa: E402,F401
