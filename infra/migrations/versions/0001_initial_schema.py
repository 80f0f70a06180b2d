"""availability windows, appointment slots, audit log

Revision ID: 0001
Revises:
Create Date: 2024-01-15 00:00:00

"""
from alembic import op
import sqlalchemy as sa

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "availability_windows",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("provider_id", sa.String(64), nullable=False),
        sa.Column("start_time", sa.DateTime(), nullable=False),
        sa.Column("end_time", sa.DateTime(), nullable=False),
        sa.Column("timezone", sa.String(64), nullable=False),
        sa.Column("recurrence_type", sa.String(16), nullable=False, server_default="NONE"),
        sa.Column("recurrence_days", sa.JSON(), nullable=True),
        sa.Column("recurrence_end_date", sa.DateTime(), nullable=True),
        sa.Column("slot_duration_minutes", sa.Integer(), nullable=False),
        sa.Column("price", sa.Numeric(10, 2), nullable=True),
        sa.Column("currency", sa.String(3), nullable=True),
        sa.Column("location", sa.String(255), nullable=True),
        sa.Column("appointment_type", sa.String(64), nullable=True),
        sa.Column("special_requirements", sa.Text(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("status", sa.String(16), nullable=False, server_default="ACTIVE"),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("start_time < end_time", name="ck_window_time_order"),
        sa.CheckConstraint(
            "slot_duration_minutes BETWEEN 15 AND 480", name="ck_window_slot_duration"
        ),
    )
    op.create_index("ix_window_provider_status", "availability_windows", ["provider_id", "status"])
    op.create_index("ix_window_provider_start", "availability_windows", ["provider_id", "start_time"])

    op.create_table(
        "appointment_slots",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column(
            "window_id",
            sa.Uuid(),
            sa.ForeignKey("availability_windows.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("provider_id", sa.String(64), nullable=False),
        sa.Column("start_time", sa.DateTime(), nullable=False),
        sa.Column("end_time", sa.DateTime(), nullable=False),
        sa.Column("timezone", sa.String(64), nullable=False),
        sa.Column("status", sa.String(16), nullable=False, server_default="AVAILABLE"),
        sa.Column("price", sa.Numeric(10, 2), nullable=True),
        sa.Column("currency", sa.String(3), nullable=True),
        sa.Column("location", sa.String(255), nullable=True),
        sa.Column("appointment_type", sa.String(64), nullable=True),
        sa.Column("special_requirements", sa.Text(), nullable=True),
        sa.Column("patient_id", sa.String(64), nullable=True),
        sa.Column("booking_notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("start_time < end_time", name="ck_slot_time_order"),
    )
    op.create_index("ix_slot_window", "appointment_slots", ["window_id"])
    op.create_index("ix_slot_provider_status", "appointment_slots", ["provider_id", "status"])
    op.create_index("ix_slot_status_start", "appointment_slots", ["status", "start_time"])

    op.create_table(
        "audit_logs",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("actor_id", sa.String(64), nullable=True),
        sa.Column("action", sa.String(255), nullable=False),
        sa.Column("details", sa.Text(), nullable=True),
        sa.Column("timestamp", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )


def downgrade() -> None:
    op.drop_table("audit_logs")
    op.drop_index("ix_slot_status_start", table_name="appointment_slots")
    op.drop_index("ix_slot_provider_status", table_name="appointment_slots")
    op.drop_index("ix_slot_window", table_name="appointment_slots")
    op.drop_table("appointment_slots")
    op.drop_index("ix_window_provider_start", table_name="availability_windows")
    op.drop_index("ix_window_provider_status", table_name="availability_windows")
    op.drop_table("availability_windows")
