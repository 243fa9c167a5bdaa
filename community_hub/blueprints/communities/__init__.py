from flask import Blueprint
bp = Blueprint("communities", __name__)
# Importing is what registers the @bp.route decorators
from . import routes  # noqa: E402,F401
