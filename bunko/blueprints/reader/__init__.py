from flask import Blueprint

reader_bp = Blueprint("reader", __name__)

from bunko.blueprints.reader import routes  # noqa: E402,F401
