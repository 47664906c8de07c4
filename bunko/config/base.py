import os


_ROOT = os.path.dirname(os.path.dirname(os.path.dirname(__file__)))


class BaseConfig:
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key")
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", "sqlite:///bunko.db"
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    ADMIN_USERNAME = os.environ.get("ADMIN_USERNAME")
    ADMIN_PASSWORD = os.environ.get("ADMIN_PASSWORD")
    ADMIN_SESSION_COOKIE = "bunkopdf-admin-session"
    ADMIN_SESSION_MAX_AGE = 60 * 60 * 24
    ADMIN_SESSION_SECURE = False

    TURNSTILE_SITE_KEY = os.environ.get("TURNSTILE_SITE_KEY", "")
    TURNSTILE_SECRET_KEY = os.environ.get("TURNSTILE_SECRET_KEY")
    TURNSTILE_VERIFY_URL = "https://challenges.cloudflare.com/turnstile/v0/siteverify"

    IMGBB_API_KEY = os.environ.get("IMGBB_API_KEY")
    IMGBB_UPLOAD_URL = "https://api.imgbb.com/1/upload"

    REQUEST_TIMEOUT = float(os.environ.get("REQUEST_TIMEOUT", "10"))

    READING_PROGRESS_PATH = os.environ.get(
        "READING_PROGRESS_PATH",
        os.path.join(_ROOT, "storage", "reading_progress"),
    )
    READING_PROGRESS_KEY = "kirokumd-reading-progress"
    READING_PROGRESS_DELAY = float(os.environ.get("READING_PROGRESS_DELAY", "0.5"))
    READER_COOKIE = "bunkopdf-reader"
    READER_COOKIE_MAX_AGE = 60 * 60 * 24 * 365


class DevelopmentConfig(BaseConfig):
    DEBUG = True


class ProductionConfig(BaseConfig):
    DEBUG = False
    ADMIN_SESSION_SECURE = True


class TestingConfig(BaseConfig):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    READING_PROGRESS_PATH = None
    ADMIN_USERNAME = "admin"
    ADMIN_PASSWORD = "secret"
    TURNSTILE_SECRET_KEY = "turnstile-test-secret"
    IMGBB_API_KEY = "imgbb-test-key"
