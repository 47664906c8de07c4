from flask import Blueprint

catalog_bp = Blueprint("catalog", __name__)

from bunko.blueprints.catalog import routes  # noqa: E402,F401
