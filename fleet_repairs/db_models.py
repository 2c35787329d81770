import json
from datetime import datetime, timezone
from flask_sqlalchemy import SQLAlchemy
from werkzeug.security import generate_password_hash, check_password_hash


db = SQLAlchemy()


def utcnow():
    return datetime.now(timezone.utc)


ROLES = ("DRIVER", "WORKSHOP", "OPERATIONS", "ADMIN")
STAFF_ROLES = {"WORKSHOP", "OPERATIONS", "ADMIN"}

ISSUE_STATUSES = {"PENDING", "IN_PROGRESS", "SCHEDULED", "COMPLETED"}
SEVERITIES = ("LOW", "MEDIUM", "HIGH", "CRITICAL")

MAPPING_KINDS = {"driver", "fleet", "trailer"}

MAINTENANCE_TYPES = {"PREVENTIVE", "CORRECTIVE", "PREDICTIVE", "INSPECTION"}
MAINTENANCE_STATUSES = {"SCHEDULED", "IN_PROGRESS", "COMPLETED", "CANCELLED", "OVERDUE"}
RECURRING_INTERVALS = {"daily", "weekly", "monthly", "yearly"}

COST_CATEGORIES = {"parts", "labor", "external", "other"}

REQUEST_PRIORITIES = ("LOW", "MEDIUM", "HIGH", "URGENT")
REQUEST_STATUSES = {"PENDING", "APPROVED", "ORDERED", "RECEIVED", "CANCELLED"}


class User(db.Model):
    __tablename__ = 'user'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    email = db.Column(db.String(255), unique=True, nullable=False)
    username = db.Column(db.String(255), unique=True, nullable=True)
    password_hash = db.Column(db.String(255), nullable=True)
    role = db.Column(db.String(32), nullable=False, default="DRIVER")
    phone = db.Column(db.String(64), nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    def set_password(self, password):
        self.password_hash = generate_password_hash(password)

    def check_password(self, password):
        if not self.password_hash:
            return False
        return check_password_hash(self.password_hash, password)

    @property
    def is_staff(self):
        return self.role in STAFF_ROLES

    def __repr__(self):
        return f'<User {self.email} ({self.role})>'


class Issue(db.Model):
    __tablename__ = 'issue'

    FIRST_TICKET = 1001

    id = db.Column(db.Integer, primary_key=True)
    ticket = db.Column(db.Integer, unique=True, nullable=False, index=True)
    status = db.Column(db.String(32), nullable=False, default="PENDING", index=True)
    severity = db.Column(db.String(32), nullable=False, default="LOW")
    category = db.Column(db.String(128), nullable=False)
    description = db.Column(db.Text, nullable=False)
    safe_to_continue = db.Column(db.String(16), nullable=True)
    location = db.Column(db.String(255), nullable=True)
    preferred_from = db.Column(db.DateTime(timezone=True), nullable=True)
    preferred_to = db.Column(db.DateTime(timezone=True), nullable=True)
    fleet_number = db.Column(db.String(64), nullable=False, index=True)
    prime_rego = db.Column(db.String(32), nullable=True)
    trailer_a = db.Column(db.String(32), nullable=True)
    trailer_b = db.Column(db.String(32), nullable=True)
    driver_name = db.Column(db.String(255), nullable=True)
    driver_phone = db.Column(db.String(64), nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow, index=True)
    updated_at = db.Column(db.DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    comments = db.relationship(
        "Comment", backref="issue", cascade="all, delete-orphan",
        order_by="Comment.created_at.asc()",
    )
    media = db.relationship("Media", backref="issue", cascade="all, delete-orphan")
    work_orders = db.relationship(
        "WorkOrder", backref="issue", cascade="all, delete-orphan",
        order_by="WorkOrder.created_at.desc()",
    )

    @classmethod
    def next_ticket(cls):
        current = db.session.query(db.func.max(cls.ticket)).scalar()
        return (current + 1) if current else cls.FIRST_TICKET

    @classmethod
    def active(cls):
        return cls.query.filter(cls.status.in_(("PENDING", "IN_PROGRESS")))

    def __repr__(self):
        return f'<Issue #{self.ticket} {self.fleet_number} {self.status}>'


class WorkOrder(db.Model):
    __tablename__ = 'work_order'

    id = db.Column(db.Integer, primary_key=True)
    issue_id = db.Column(db.Integer, db.ForeignKey('issue.id', ondelete="CASCADE"), nullable=False, index=True)
    status = db.Column(db.String(32), nullable=False, default="SCHEDULED")
    start_at = db.Column(db.DateTime(timezone=True), nullable=False)
    end_at = db.Column(db.DateTime(timezone=True), nullable=False)
    workshop_site = db.Column(db.String(255), nullable=False)
    assigned_to_id = db.Column(db.Integer, db.ForeignKey('user.id', ondelete="SET NULL"), nullable=True)
    work_type = db.Column(db.String(128), nullable=True)
    notes = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow, index=True)
    updated_at = db.Column(db.DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    assigned_to = db.relationship("User", foreign_keys=[assigned_to_id])

    def __repr__(self):
        return f'<WorkOrder {self.id} issue={self.issue_id} {self.status}>'


class Comment(db.Model):
    __tablename__ = 'comment'

    id = db.Column(db.Integer, primary_key=True)
    issue_id = db.Column(db.Integer, db.ForeignKey('issue.id', ondelete="CASCADE"), nullable=False, index=True)
    author_id = db.Column(db.Integer, db.ForeignKey('user.id', ondelete="SET NULL"), nullable=True)
    author_role = db.Column(db.String(32), nullable=True)
    body = db.Column(db.Text, nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow, index=True)

    author = db.relationship("User", foreign_keys=[author_id])


class Media(db.Model):
    __tablename__ = 'media'

    id = db.Column(db.Integer, primary_key=True)
    issue_id = db.Column(db.Integer, db.ForeignKey('issue.id', ondelete="CASCADE"), nullable=False, index=True)
    url = db.Column(db.String(1024), nullable=False)
    type = db.Column(db.String(64), nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow)


class Mapping(db.Model):
    """Lookup data the report form autocompletes from (drivers, fleets, trailers)."""
    __tablename__ = 'mapping'

    id = db.Column(db.Integer, primary_key=True)
    kind = db.Column(db.String(32), nullable=False)
    key = db.Column(db.String(255), nullable=False)
    value = db.Column(db.Text, nullable=False, default="{}")
    updated_at = db.Column(db.DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    __table_args__ = (db.UniqueConstraint('kind', 'key', name='uq_mapping_kind_key'),)

    def parsed_value(self):
        try:
            parsed = json.loads(self.value or "{}")
        except (TypeError, ValueError):
            return {}
        return parsed if isinstance(parsed, dict) else {}

    def __repr__(self):
        return f'<Mapping {self.kind}:{self.key}>'


class MaintenanceSchedule(db.Model):
    __tablename__ = 'maintenance_schedule'

    id = db.Column(db.Integer, primary_key=True)
    fleet_number = db.Column(db.String(64), nullable=False, index=True)
    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    type = db.Column(db.String(32), nullable=False, default="PREVENTIVE")
    status = db.Column(db.String(32), nullable=False, default="SCHEDULED", index=True)
    scheduled_at = db.Column(db.DateTime(timezone=True), nullable=False, index=True)
    completed_at = db.Column(db.DateTime(timezone=True), nullable=True)
    assigned_to_id = db.Column(db.Integer, db.ForeignKey('user.id', ondelete="SET NULL"), nullable=True)
    priority = db.Column(db.String(32), nullable=False, default="MEDIUM")
    estimated_hours = db.Column(db.Float, nullable=True)
    actual_hours = db.Column(db.Float, nullable=True)
    cost = db.Column(db.Float, nullable=True)
    notes = db.Column(db.Text, nullable=True)
    recurring = db.Column(db.Boolean, nullable=False, default=False)
    recurring_interval = db.Column(db.String(16), nullable=True)
    recurring_next_date = db.Column(db.DateTime(timezone=True), nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    assigned_to = db.relationship("User", foreign_keys=[assigned_to_id])
    tasks = db.relationship(
        "MaintenanceTask", backref="schedule", cascade="all, delete-orphan",
        order_by="MaintenanceTask.id.asc()",
    )

    def __repr__(self):
        return f'<MaintenanceSchedule {self.id} {self.fleet_number} {self.title}>'


class MaintenanceTask(db.Model):
    __tablename__ = 'maintenance_task'

    id = db.Column(db.Integer, primary_key=True)
    schedule_id = db.Column(
        db.Integer, db.ForeignKey('maintenance_schedule.id', ondelete="CASCADE"), nullable=False, index=True
    )
    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    completed = db.Column(db.Boolean, nullable=False, default=False)
    completed_at = db.Column(db.DateTime(timezone=True), nullable=True)
    notes = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), default=utcnow, onupdate=utcnow)


class CostRecord(db.Model):
    __tablename__ = 'cost_record'

    id = db.Column(db.Integer, primary_key=True)
    issue_id = db.Column(db.Integer, db.ForeignKey('issue.id', ondelete="SET NULL"), nullable=True, index=True)
    work_order_id = db.Column(db.Integer, db.ForeignKey('work_order.id', ondelete="SET NULL"), nullable=True)
    maintenance_schedule_id = db.Column(
        db.Integer, db.ForeignKey('maintenance_schedule.id', ondelete="SET NULL"), nullable=True
    )
    category = db.Column(db.String(32), nullable=False)
    description = db.Column(db.Text, nullable=False)
    amount = db.Column(db.Float, nullable=False)
    currency = db.Column(db.String(8), nullable=False, default="AUD")
    supplier = db.Column(db.String(255), nullable=True)
    invoice_number = db.Column(db.String(128), nullable=True)
    invoice_date = db.Column(db.DateTime(timezone=True), nullable=True)
    approved_by = db.Column(db.String(255), nullable=True)
    approved_at = db.Column(db.DateTime(timezone=True), nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow, index=True)
    updated_at = db.Column(db.DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    def __repr__(self):
        return f'<CostRecord {self.id} {self.category} {self.amount} {self.currency}>'


class DriverPerformance(db.Model):
    __tablename__ = 'driver_performance'

    id = db.Column(db.Integer, primary_key=True)
    driver_name = db.Column(db.String(255), nullable=False, index=True)
    driver_email = db.Column(db.String(255), nullable=True)
    fleet_number = db.Column(db.String(64), nullable=True)
    period_start = db.Column(db.DateTime(timezone=True), nullable=False)
    period_end = db.Column(db.DateTime(timezone=True), nullable=False)
    issues_reported = db.Column(db.Integer, nullable=False, default=0)
    issues_resolved = db.Column(db.Integer, nullable=False, default=0)
    avg_response_time = db.Column(db.Float, nullable=True)
    safe_driving_score = db.Column(db.Float, nullable=True)
    fuel_efficiency = db.Column(db.Float, nullable=True)
    on_time_delivery_rate = db.Column(db.Float, nullable=True)
    notes = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), default=utcnow, onupdate=utcnow)


class EquipmentRequest(db.Model):
    __tablename__ = 'equipment_request'

    id = db.Column(db.Integer, primary_key=True)
    issue_id = db.Column(db.Integer, db.ForeignKey('issue.id', ondelete="SET NULL"), nullable=True, index=True)
    requested_by_id = db.Column(db.Integer, db.ForeignKey('user.id', ondelete="SET NULL"), nullable=True)
    requested_by_role = db.Column(db.String(32), nullable=True)
    item_name = db.Column(db.String(255), nullable=False)
    item_description = db.Column(db.Text, nullable=True)
    quantity = db.Column(db.Integer, nullable=False, default=1)
    estimated_cost = db.Column(db.Float, nullable=True)
    supplier = db.Column(db.String(255), nullable=True)
    part_number = db.Column(db.String(128), nullable=True, index=True)
    reason = db.Column(db.Text, nullable=False)
    fleet_number = db.Column(db.String(64), nullable=True)
    priority = db.Column(db.String(16), nullable=False, default="MEDIUM")
    urgent_reason = db.Column(db.Text, nullable=True)
    status = db.Column(db.String(16), nullable=False, default="PENDING", index=True)
    approved_at = db.Column(db.DateTime(timezone=True), nullable=True)
    approved_by = db.Column(db.String(255), nullable=True)
    ordered_at = db.Column(db.DateTime(timezone=True), nullable=True)
    received_at = db.Column(db.DateTime(timezone=True), nullable=True)
    cancelled_at = db.Column(db.DateTime(timezone=True), nullable=True)
    cancellation_reason = db.Column(db.Text, nullable=True)
    notes = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow, index=True)
    updated_at = db.Column(db.DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    requested_by = db.relationship("User", foreign_keys=[requested_by_id])
    issue = db.relationship("Issue", foreign_keys=[issue_id])

    @classmethod
    def priority_rank(cls):
        """SQL expression ranking URGENT highest, for ORDER BY ... DESC."""
        return db.case(
            {p: i for i, p in enumerate(REQUEST_PRIORITIES)},
            value=cls.priority,
            else_=-1,
        )

    def __repr__(self):
        return f'<EquipmentRequest {self.id} {self.item_name} {self.status}>'


class SystemSetting(db.Model):
    __tablename__ = 'system_setting'

    id = db.Column(db.Integer, primary_key=True)
    values = db.Column(db.JSON, nullable=False)
    updated_at = db.Column(db.DateTime(timezone=True), default=utcnow, onupdate=utcnow)
