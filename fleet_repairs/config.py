# fleet_repairs/config.py
import os
from datetime import timedelta
from dotenv import load_dotenv

load_dotenv()


def _env_bool(name, default=False):
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-change-me")
    APP_ENV = os.getenv("APP_ENV", "development")
    APP_URL = os.getenv("APP_URL", "https://serepairs.com.au")

    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///fleet_repairs.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Quick-access passwords for the shared staff portals
    OPERATIONS_PASSWORD = os.getenv("OPERATIONS_PASSWORD", "operations-dev")
    WORKSHOP_PASSWORD = os.getenv("WORKSHOP_PASSWORD", "workshop-dev")
    ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "admin-dev")

    PERMANENT_SESSION_LIFETIME = timedelta(days=30)
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = "Lax"
    SESSION_COOKIE_SECURE = APP_ENV == "production"

    # Flask-Limiter: one fixed window shared by every /api/ route
    RATELIMIT_APPLICATION = os.getenv("RATELIMIT_DEFAULT", "50 per minute")
    RATELIMIT_STORAGE_URI = "memory://"
    RATELIMIT_STRATEGY = "fixed-window"
    RATELIMIT_HEADERS_ENABLED = True

    # Local file storage for issue photos/videos
    UPLOAD_FOLDER = os.getenv("UPLOAD_FOLDER", "")
    UPLOAD_MAX_FILES = int(os.getenv("UPLOAD_MAX_FILES", "5"))
    UPLOAD_MAX_SIZE_MB = float(os.getenv("UPLOAD_MAX_SIZE_MB", "10"))

    MAIL_SERVER = os.getenv("MAIL_SERVER", "")
    MAIL_PORT = int(os.getenv("MAIL_PORT", "587"))
    MAIL_USE_TLS = _env_bool("MAIL_USE_TLS", True)
    MAIL_USERNAME = os.getenv("MAIL_USERNAME")
    MAIL_PASSWORD = os.getenv("MAIL_PASSWORD")
    MAIL_DEFAULT_SENDER = os.getenv("MAIL_DEFAULT_SENDER", "noreply@serepairs.com.au")
    REPORT_RECIPIENTS = [
        r.strip()
        for r in os.getenv("REPORT_RECIPIENTS", "management@senational.com.au").split(",")
        if r.strip()
    ]

    GEARBOX_CLIENT_ID = os.getenv("GEARBOX_CLIENT_ID")
    GEARBOX_CLIENT_SECRET = os.getenv("GEARBOX_CLIENT_SECRET")

    EVENTS_HEARTBEAT_SECONDS = int(os.getenv("EVENTS_HEARTBEAT_SECONDS", "30"))
