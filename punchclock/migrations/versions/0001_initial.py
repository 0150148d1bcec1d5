"""Initial punchclock schema

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19 00:00:00
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "0001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

punch_event_kind = sa.Enum(
    "HOME_DEPARTURE",
    "COMPANY_ARRIVAL",
    "COMPANY_DEPARTURE",
    "CLIENT_ARRIVAL",
    "CLIENT_DEPARTURE",
    "HOME_ARRIVAL",
    "HOTEL_ARRIVAL",
    "HOTEL_DEPARTURE",
    "ENTRY",
    "EXIT",
    name="punch_event_kind",
)
justification_type = sa.Enum(
    "MEDICAL_LEAVE",
    "AUTHORIZED_LEAVE",
    "TIME_BANK",
    "UNJUSTIFIED",
    "VACATION",
    "COMPENSATORY",
    name="justification_type",
)
audit_actor_type = sa.Enum(
    "EMPLOYEE",
    "ADMIN",
    "SYSTEM",
    name="audit_actor_type",
)


def upgrade() -> None:
    op.create_table(
        "employees",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("full_name", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.UniqueConstraint("email", name="uq_employees_email"),
    )

    op.create_table(
        "projects",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("location", sa.String(length=500), nullable=True),
        sa.Column("tracking_mode", sa.String(length=40), nullable=True),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
    )

    op.create_table(
        "time_records",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("employee_id", sa.Integer(), nullable=False),
        sa.Column("project_id", sa.Integer(), nullable=False),
        sa.Column("kind", punch_event_kind, nullable=False),
        sa.Column("ts_utc", sa.DateTime(timezone=True), nullable=False),
        sa.Column("lat", sa.Float(), nullable=True),
        sa.Column("lon", sa.Float(), nullable=True),
        sa.Column("note", sa.String(length=1000), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.ForeignKeyConstraint(["employee_id"], ["employees.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["project_id"], ["projects.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_time_records_employee_id", "time_records", ["employee_id"])
    op.create_index("ix_time_records_project_id", "time_records", ["project_id"])
    op.create_index("ix_time_records_ts_utc", "time_records", ["ts_utc"])

    op.create_table(
        "justifications",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("employee_id", sa.Integer(), nullable=False),
        sa.Column("day_date", sa.Date(), nullable=False),
        sa.Column("type", justification_type, nullable=False),
        sa.Column("notes", sa.String(length=1000), nullable=True),
        sa.Column("attachment_name", sa.String(length=255), nullable=True),
        sa.Column("created_by", sa.String(length=255), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.ForeignKeyConstraint(["employee_id"], ["employees.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("employee_id", "day_date", name="uq_justifications_employee_day"),
    )
    op.create_index("ix_justifications_employee_id", "justifications", ["employee_id"])

    op.create_table(
        "audit_logs",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column(
            "ts_utc",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.Column("actor_type", audit_actor_type, nullable=False),
        sa.Column("actor_id", sa.String(length=255), nullable=False),
        sa.Column("action", sa.String(length=255), nullable=False),
        sa.Column("entity_type", sa.String(length=255), nullable=True),
        sa.Column("entity_id", sa.String(length=255), nullable=True),
        sa.Column("success", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("details", sa.JSON(), nullable=False),
    )
    op.create_index("ix_audit_logs_ts_utc", "audit_logs", ["ts_utc"])


def downgrade() -> None:
    op.drop_index("ix_audit_logs_ts_utc", table_name="audit_logs")
    op.drop_table("audit_logs")
    op.drop_index("ix_justifications_employee_id", table_name="justifications")
    op.drop_table("justifications")
    op.drop_index("ix_time_records_ts_utc", table_name="time_records")
    op.drop_index("ix_time_records_project_id", table_name="time_records")
    op.drop_index("ix_time_records_employee_id", table_name="time_records")
    op.drop_table("time_records")
    op.drop_table("projects")
    op.drop_table("employees")

    bind = op.get_bind()
    for enum_type in (audit_actor_type, justification_type, punch_event_kind):
        enum_type.drop(bind, checkfirst=True)
