# fleet_repairs/__init__.py
import os
from flask import Flask, request, redirect
from flask_migrate import Migrate
from dotenv import load_dotenv

from fleet_repairs.config import Config
from fleet_repairs.db_models import db
from fleet_repairs.extensions import limiter, mail, init_cache
from fleet_repairs.routes import register_blueprints
from fleet_repairs.services import access_control
from fleet_repairs.utils.auth import current_role
from fleet_repairs.utils.logger import setup_logging

load_dotenv(dotenv_path=os.path.join(os.path.dirname(__file__), '.env'))
migrate = Migrate()

CONTENT_SECURITY_POLICY = "; ".join([
    "default-src 'self'",
    "script-src 'self' 'unsafe-eval' 'unsafe-inline'",
    "style-src 'self' 'unsafe-inline'",
    "img-src 'self' data: blob: https:",
    "font-src 'self'",
    "connect-src 'self'",
    "media-src 'self' blob:",
])


def create_app(config_overrides=None):
    basedir = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
    app = Flask(__name__,
                template_folder=os.path.join(basedir, 'templates'),
                static_folder=os.path.join(basedir, 'static'))
    app.config.from_object(Config)
    if config_overrides:
        app.config.update(config_overrides)

    database_url = app.config.get("SQLALCHEMY_DATABASE_URI")
    if database_url and database_url.startswith("postgres://"):
        app.config['SQLALCHEMY_DATABASE_URI'] = database_url.replace("postgres://", "postgresql://", 1)

    # No SMTP host means mail is logged rather than sent
    if not app.config.get("MAIL_SERVER"):
        app.config.setdefault("MAIL_SUPPRESS_SEND", True)

    db.init_app(app)
    migrate.init_app(app, db)
    limiter.init_app(app)
    mail.init_app(app)
    init_cache(app)
    setup_logging(app)
    register_access_hooks(app)
    register_blueprints(app)

    return app


def register_access_hooks(app):
    @app.errorhandler(429)
    def _too_many_requests(e):
        app.logger.warning("Rate limit hit for %s on %s", access_control.client_key(request.headers), request.path)
        return "Too Many Requests", 429

    @app.before_request
    def _gate_protected_routes():
        role = current_role()
        decision = access_control.evaluate(request.path, role)
        if request.path.startswith("/admin"):
            app.logger.info("Admin route %s, role: %s", request.path, role)
        if not decision.allowed:
            app.logger.info("Redirecting %s to %s (role: %s)", request.path, decision.redirect_to, role)
            return redirect(decision.redirect_to)
        return None

    @app.after_request
    def _add_security_headers(resp):
        resp.headers.setdefault("Content-Security-Policy", CONTENT_SECURITY_POLICY)
        if access_control.is_protected(request.path):
            resp.headers["X-Robots-Tag"] = "noindex, nofollow"
        return resp

