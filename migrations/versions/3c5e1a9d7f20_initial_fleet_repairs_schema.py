"""initial fleet repairs schema

Revision ID: 3c5e1a9d7f20
Revises:
Create Date: 2026-10-18 09:12:44.318201
"""
from alembic import op
import sqlalchemy as sa

revision = "3c5e1a9d7f20"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    ]


def upgrade():
    op.create_table(
        "user",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("username", sa.String(length=255), nullable=True),
        sa.Column("password_hash", sa.String(length=255), nullable=True),
        sa.Column("role", sa.String(length=32), nullable=False),
        sa.Column("phone", sa.String(length=64), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("email"),
        sa.UniqueConstraint("username"),
    )

    op.create_table(
        "issue",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("ticket", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(length=32), nullable=False),
        sa.Column("severity", sa.String(length=32), nullable=False),
        sa.Column("category", sa.String(length=128), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("safe_to_continue", sa.String(length=16), nullable=True),
        sa.Column("location", sa.String(length=255), nullable=True),
        sa.Column("preferred_from", sa.DateTime(timezone=True), nullable=True),
        sa.Column("preferred_to", sa.DateTime(timezone=True), nullable=True),
        sa.Column("fleet_number", sa.String(length=64), nullable=False),
        sa.Column("prime_rego", sa.String(length=32), nullable=True),
        sa.Column("trailer_a", sa.String(length=32), nullable=True),
        sa.Column("trailer_b", sa.String(length=32), nullable=True),
        sa.Column("driver_name", sa.String(length=255), nullable=True),
        sa.Column("driver_phone", sa.String(length=64), nullable=True),
        *_timestamps(),
    )
    with op.batch_alter_table("issue", schema=None) as batch_op:
        batch_op.create_index("ix_issue_ticket", ["ticket"], unique=True)
        batch_op.create_index("ix_issue_status", ["status"], unique=False)
        batch_op.create_index("ix_issue_fleet_number", ["fleet_number"], unique=False)
        batch_op.create_index("ix_issue_created_at", ["created_at"], unique=False)

    op.create_table(
        "work_order",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("issue_id", sa.Integer(), sa.ForeignKey("issue.id", ondelete="CASCADE"), nullable=False),
        sa.Column("status", sa.String(length=32), nullable=False),
        sa.Column("start_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("workshop_site", sa.String(length=255), nullable=False),
        sa.Column("assigned_to_id", sa.Integer(), sa.ForeignKey("user.id", ondelete="SET NULL"), nullable=True),
        sa.Column("work_type", sa.String(length=128), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
    )
    with op.batch_alter_table("work_order", schema=None) as batch_op:
        batch_op.create_index("ix_work_order_issue_id", ["issue_id"], unique=False)
        batch_op.create_index("ix_work_order_created_at", ["created_at"], unique=False)

    op.create_table(
        "comment",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("issue_id", sa.Integer(), sa.ForeignKey("issue.id", ondelete="CASCADE"), nullable=False),
        sa.Column("author_id", sa.Integer(), sa.ForeignKey("user.id", ondelete="SET NULL"), nullable=True),
        sa.Column("author_role", sa.String(length=32), nullable=True),
        sa.Column("body", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
    )
    with op.batch_alter_table("comment", schema=None) as batch_op:
        batch_op.create_index("ix_comment_issue_id", ["issue_id"], unique=False)
        batch_op.create_index("ix_comment_created_at", ["created_at"], unique=False)

    op.create_table(
        "media",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("issue_id", sa.Integer(), sa.ForeignKey("issue.id", ondelete="CASCADE"), nullable=False),
        sa.Column("url", sa.String(length=1024), nullable=False),
        sa.Column("type", sa.String(length=64), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
    )
    with op.batch_alter_table("media", schema=None) as batch_op:
        batch_op.create_index("ix_media_issue_id", ["issue_id"], unique=False)

    op.create_table(
        "mapping",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("kind", sa.String(length=32), nullable=False),
        sa.Column("key", sa.String(length=255), nullable=False),
        sa.Column("value", sa.Text(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("kind", "key", name="uq_mapping_kind_key"),
    )

    op.create_table(
        "maintenance_schedule",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("fleet_number", sa.String(length=64), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("type", sa.String(length=32), nullable=False),
        sa.Column("status", sa.String(length=32), nullable=False),
        sa.Column("scheduled_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("assigned_to_id", sa.Integer(), sa.ForeignKey("user.id", ondelete="SET NULL"), nullable=True),
        sa.Column("priority", sa.String(length=32), nullable=False),
        sa.Column("estimated_hours", sa.Float(), nullable=True),
        sa.Column("actual_hours", sa.Float(), nullable=True),
        sa.Column("cost", sa.Float(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("recurring", sa.Boolean(), nullable=False),
        sa.Column("recurring_interval", sa.String(length=16), nullable=True),
        sa.Column("recurring_next_date", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    with op.batch_alter_table("maintenance_schedule", schema=None) as batch_op:
        batch_op.create_index("ix_maintenance_schedule_fleet_number", ["fleet_number"], unique=False)
        batch_op.create_index("ix_maintenance_schedule_status", ["status"], unique=False)
        batch_op.create_index("ix_maintenance_schedule_scheduled_at", ["scheduled_at"], unique=False)

    op.create_table(
        "maintenance_task",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "schedule_id", sa.Integer(),
            sa.ForeignKey("maintenance_schedule.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("completed", sa.Boolean(), nullable=False),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
    )
    with op.batch_alter_table("maintenance_task", schema=None) as batch_op:
        batch_op.create_index("ix_maintenance_task_schedule_id", ["schedule_id"], unique=False)

    op.create_table(
        "cost_record",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("issue_id", sa.Integer(), sa.ForeignKey("issue.id", ondelete="SET NULL"), nullable=True),
        sa.Column(
            "work_order_id", sa.Integer(), sa.ForeignKey("work_order.id", ondelete="SET NULL"), nullable=True
        ),
        sa.Column(
            "maintenance_schedule_id", sa.Integer(),
            sa.ForeignKey("maintenance_schedule.id", ondelete="SET NULL"), nullable=True,
        ),
        sa.Column("category", sa.String(length=32), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("amount", sa.Float(), nullable=False),
        sa.Column("currency", sa.String(length=8), nullable=False),
        sa.Column("supplier", sa.String(length=255), nullable=True),
        sa.Column("invoice_number", sa.String(length=128), nullable=True),
        sa.Column("invoice_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("approved_by", sa.String(length=255), nullable=True),
        sa.Column("approved_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    with op.batch_alter_table("cost_record", schema=None) as batch_op:
        batch_op.create_index("ix_cost_record_issue_id", ["issue_id"], unique=False)
        batch_op.create_index("ix_cost_record_created_at", ["created_at"], unique=False)

    op.create_table(
        "driver_performance",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("driver_name", sa.String(length=255), nullable=False),
        sa.Column("driver_email", sa.String(length=255), nullable=True),
        sa.Column("fleet_number", sa.String(length=64), nullable=True),
        sa.Column("period_start", sa.DateTime(timezone=True), nullable=False),
        sa.Column("period_end", sa.DateTime(timezone=True), nullable=False),
        sa.Column("issues_reported", sa.Integer(), nullable=False),
        sa.Column("issues_resolved", sa.Integer(), nullable=False),
        sa.Column("avg_response_time", sa.Float(), nullable=True),
        sa.Column("safe_driving_score", sa.Float(), nullable=True),
        sa.Column("fuel_efficiency", sa.Float(), nullable=True),
        sa.Column("on_time_delivery_rate", sa.Float(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
    )
    with op.batch_alter_table("driver_performance", schema=None) as batch_op:
        batch_op.create_index("ix_driver_performance_driver_name", ["driver_name"], unique=False)

    op.create_table(
        "equipment_request",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("issue_id", sa.Integer(), sa.ForeignKey("issue.id", ondelete="SET NULL"), nullable=True),
        sa.Column(
            "requested_by_id", sa.Integer(), sa.ForeignKey("user.id", ondelete="SET NULL"), nullable=True
        ),
        sa.Column("requested_by_role", sa.String(length=32), nullable=True),
        sa.Column("item_name", sa.String(length=255), nullable=False),
        sa.Column("item_description", sa.Text(), nullable=True),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("estimated_cost", sa.Float(), nullable=True),
        sa.Column("supplier", sa.String(length=255), nullable=True),
        sa.Column("part_number", sa.String(length=128), nullable=True),
        sa.Column("reason", sa.Text(), nullable=False),
        sa.Column("fleet_number", sa.String(length=64), nullable=True),
        sa.Column("priority", sa.String(length=16), nullable=False),
        sa.Column("urgent_reason", sa.Text(), nullable=True),
        sa.Column("status", sa.String(length=16), nullable=False),
        sa.Column("approved_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("approved_by", sa.String(length=255), nullable=True),
        sa.Column("ordered_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("received_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("cancelled_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("cancellation_reason", sa.Text(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
    )
    with op.batch_alter_table("equipment_request", schema=None) as batch_op:
        batch_op.create_index("ix_equipment_request_issue_id", ["issue_id"], unique=False)
        batch_op.create_index("ix_equipment_request_part_number", ["part_number"], unique=False)
        batch_op.create_index("ix_equipment_request_status", ["status"], unique=False)
        batch_op.create_index("ix_equipment_request_created_at", ["created_at"], unique=False)

    op.create_table(
        "system_setting",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("values", sa.JSON(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )


def downgrade():
    for table in (
        "system_setting",
        "equipment_request",
        "driver_performance",
        "cost_record",
        "maintenance_task",
        "maintenance_schedule",
        "mapping",
        "media",
        "comment",
        "work_order",
        "issue",
        "user",
    ):
        op.drop_table(table)
