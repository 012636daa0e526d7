"""Initial planning schema"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime()),
        sa.Column("updated_at", sa.DateTime()),
    ]


def upgrade() -> None:
    op.create_table(
        "academic_period",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("year", sa.String(length=20)),
        sa.Column("winter_break_start", sa.Date()),
        sa.Column("winter_break_end", sa.Date()),
        sa.Column("spring_break_start", sa.Date()),
        sa.Column("spring_break_end", sa.Date()),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
    )

    op.create_table(
        "program",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("code", sa.String(length=30), nullable=False, unique=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("owner_id", sa.String(length=64)),
        sa.Column("start_date", sa.Date()),
        sa.Column("end_date", sa.Date()),
        sa.Column("progression", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="PLANNED"),
        *_timestamps(),
        sa.CheckConstraint("progression >= 0 AND progression <= 100", name="chk_program_progression"),
    )

    op.create_table(
        "instructor",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("civility", sa.String(length=10)),
        sa.Column("first_name", sa.String(length=120), nullable=False),
        sa.Column("last_name", sa.String(length=120), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False, unique=True),
        sa.Column("available", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("max_hours_week", sa.Integer(), server_default="20"),
        sa.Column("max_hours_day", sa.Integer(), server_default="6"),
        *_timestamps(),
    )

    op.create_table(
        "room",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=120), nullable=False, unique=True),
        sa.Column("capacity", sa.Integer(), server_default="30"),
        sa.Column("building", sa.String(length=120)),
        *_timestamps(),
    )

    op.create_table(
        "module",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("program_id", sa.Integer(), sa.ForeignKey("program.id"), nullable=False),
        sa.Column("instructor_id", sa.Integer(), sa.ForeignKey("instructor.id")),
        sa.Column("owner_id", sa.String(length=64)),
        sa.Column("code", sa.String(length=30), nullable=False, unique=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("cm", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("td", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("tp", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("tpe", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("start_date", sa.Date()),
        sa.Column("end_date", sa.Date()),
        sa.Column("progression", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="PLANNED"),
        *_timestamps(),
        sa.CheckConstraint("cm >= 0 AND td >= 0 AND tp >= 0 AND tpe >= 0", name="chk_module_hours"),
        sa.CheckConstraint("progression >= 0 AND progression <= 100", name="chk_module_progression"),
    )

    op.create_table(
        "session",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("module_id", sa.Integer(), sa.ForeignKey("module.id"), nullable=False),
        sa.Column("instructor_id", sa.Integer(), sa.ForeignKey("instructor.id"), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("start_time", sa.Time(), nullable=False),
        sa.Column("end_time", sa.Time(), nullable=False),
        sa.Column("duration", sa.Integer(), nullable=False),
        sa.Column("category", sa.String(length=10), nullable=False, server_default="CM"),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="PLANNED"),
        sa.Column("room", sa.String(length=120)),
        sa.Column("building", sa.String(length=120)),
        sa.Column("notes", sa.Text()),
        *_timestamps(),
        sa.CheckConstraint("end_time > start_time", name="chk_session_time_order"),
        sa.CheckConstraint("duration > 0", name="chk_session_duration_positive"),
    )
    active_booking = sa.text("status != 'CANCELLED'")
    op.create_index(
        "uq_session_instructor_start",
        "session",
        ["instructor_id", "date", "start_time"],
        unique=True,
        sqlite_where=active_booking,
        postgresql_where=active_booking,
    )
    op.create_index("ix_session_room_date", "session", ["room", "date"])


def downgrade() -> None:
    op.drop_index("ix_session_room_date", table_name="session")
    op.drop_index("uq_session_instructor_start", table_name="session")
    op.drop_table("session")
    op.drop_table("module")
    op.drop_table("room")
    op.drop_table("instructor")
    op.drop_table("program")
    op.drop_table("academic_period")
