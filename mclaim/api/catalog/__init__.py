from flask import Blueprint

blueprint = Blueprint("catalog", __name__)

from . import routes  # noqa: E402,F401
