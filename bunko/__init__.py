import atexit
import logging
import os

from flask import Flask, request
from flask_sqlalchemy import SQLAlchemy


db = SQLAlchemy()


def _configure_logging(app):
    logger = logging.getLogger("bunko")
    logger.setLevel(app.config.get("LOG_LEVEL", "INFO"))
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s [%(name)s] %(message)s")
        )
        logger.addHandler(handler)


def _create_progress(app):
    from bunko.services.progress_storage import create_storage
    from bunko.services.reading_progress import ReaderTrackers

    storage = create_storage(app.config.get("READING_PROGRESS_PATH"))
    return ReaderTrackers(
        storage,
        delay=app.config.get("READING_PROGRESS_DELAY", 0.5),
        storage_key=app.config.get("READING_PROGRESS_KEY"),
    )


def create_app(config_object=None, progress=None):
    app = Flask(__name__, template_folder="templates", static_folder="static")

    from bunko.config import config

    if config_object is None:
        config_object = os.environ.get("BUNKO_CONFIG", "default")
    if isinstance(config_object, str):
        config_object = config[config_object]
    app.config.from_object(config_object)

    _configure_logging(app)
    db.init_app(app)

    if progress is None:
        progress = _create_progress(app)
    app.extensions["reading_progress"] = progress
    atexit.register(progress.close)

    from bunko.blueprints.catalog import catalog_bp
    from bunko.blueprints.reader import reader_bp
    from bunko.blueprints.reviews import reviews_bp
    from bunko.blueprints.auth import auth_bp
    from bunko.blueprints.admin import admin_bp

    app.register_blueprint(catalog_bp)
    app.register_blueprint(reader_bp)
    app.register_blueprint(reviews_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(admin_bp)

    from bunko.utils.dates import relative_date

    app.add_template_filter(relative_date, "relative_date")

    @app.context_processor
    def inject_admin_state():
        from bunko.services.admin_session import AdminSessionService

        token = request.cookies.get(app.config["ADMIN_SESSION_COOKIE"])
        return {
            "is_admin": AdminSessionService.from_config(app.config).check(token),
            "turnstile_site_key": app.config.get("TURNSTILE_SITE_KEY", ""),
        }

    return app
