# fleet_repairs/routes/__init__.py
from .admin import admin_bp
from .analytics import analytics_bp
from .auth import auth_bp
from .costs import costs_bp
from .dashboard import dashboard_bp
from .driver_performance import driver_performance_bp
from .equipment_requests import equipment_requests_bp
from .events import events_bp
from .fleet import fleet_bp
from .gearbox import gearbox_bp
from .issues import issues_bp
from .maintenance import maintenance_bp
from .mappings import mappings_bp
from .notifications import notifications_bp
from .pages import pages_bp
from .settings import settings_bp
from .upload import upload_bp
from .workorders import workorders_bp


def register_blueprints(app):
    app.register_blueprint(pages_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(issues_bp)
    app.register_blueprint(workorders_bp)
    app.register_blueprint(mappings_bp)
    app.register_blueprint(upload_bp)
    app.register_blueprint(dashboard_bp)
    app.register_blueprint(fleet_bp)
    app.register_blueprint(analytics_bp)
    app.register_blueprint(maintenance_bp)
    app.register_blueprint(costs_bp)
    app.register_blueprint(driver_performance_bp)
    app.register_blueprint(equipment_requests_bp)
    app.register_blueprint(notifications_bp)
    app.register_blueprint(settings_bp)
    app.register_blueprint(gearbox_bp)
    app.register_blueprint(events_bp)
    app.register_blueprint(admin_bp)
