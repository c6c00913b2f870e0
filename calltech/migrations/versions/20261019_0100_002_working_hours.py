"""Working hours

Revision ID: 002
Revises: 001
Create Date: 2026-10-19 01:00:00.000000

Adds the organisation-scoped working hours table.
"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")


def upgrade() -> None:
    day_columns = []
    for day in WEEKDAYS:
        day_columns += [
            sa.Column(f"{day}_enabled", sa.Boolean(), nullable=False, server_default="false"),
            sa.Column(f"{day}_start_time", sa.String(5), nullable=True),
            sa.Column(f"{day}_end_time", sa.String(5), nullable=True),
        ]

    op.create_table(
        "working_hours",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("organisation_id", postgresql.UUID(as_uuid=True), nullable=False, unique=True),
        sa.Column("is_enabled", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column("timezone", sa.String(64), nullable=False, server_default="America/New_York"),
        *day_columns,
        sa.Column("outside_hours_message", sa.Text(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["organisation_id"], ["organisations.id"], ondelete="CASCADE"),
    )


def downgrade() -> None:
    op.drop_table("working_hours")
