"""Create events and registrations tables

Revision ID: 001
Revises: None
Create Date: 2024-11-02 00:00:00.000000+00:00

What:  Creates `events` (with the derived registration counter) and
       `registrations` (indexed reference to events, no foreign key).

Rollback: downgrade() drops both tables (destructive).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

JSON_TYPE = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")


def upgrade() -> None:
    op.create_table(
        "events",
        sa.Column("id", sa.String(24), nullable=False),
        sa.Column(
            "owner_email",
            sa.String(320),
            nullable=False,
            comment="Email of the authenticated creator",
        ),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column(
            "start_date",
            sa.Date(),
            nullable=True,
            comment="Date the event starts; used by the running-events view",
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.Column(
            "attributes",
            JSON_TYPE,
            nullable=False,
            comment="Arbitrary additional attributes supplied by the client",
        ),
        sa.Column(
            "total_registration_count",
            sa.Integer(),
            nullable=False,
            server_default=sa.text("0"),
            comment="Number of registrations referencing this event",
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("total_registration_count >= 0", name="ck_events_count_non_negative"),
    )
    op.create_index("idx_events_owner_email", "events", ["owner_email"])
    op.create_index("idx_events_start_date", "events", ["start_date"])
    op.create_index("idx_events_created_at", "events", ["created_at"])

    op.create_table(
        "registrations",
        sa.Column("id", sa.String(24), nullable=False),
        sa.Column("event_id", sa.String(24), nullable=False),
        sa.Column("user_email", sa.String(320), nullable=False),
        sa.Column(
            "event_title",
            sa.String(255),
            nullable=False,
            server_default=sa.text("''"),
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.Column("attributes", JSON_TYPE, nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_registrations_event_id", "registrations", ["event_id"])
    op.create_index("idx_registrations_user_email", "registrations", ["user_email"])


def downgrade() -> None:
    """Drop both tables. All event and registration data is lost."""
    op.drop_index("idx_registrations_user_email", table_name="registrations")
    op.drop_index("idx_registrations_event_id", table_name="registrations")
    op.drop_table("registrations")
    op.drop_index("idx_events_created_at", table_name="events")
    op.drop_index("idx_events_start_date", table_name="events")
    op.drop_index("idx_events_owner_email", table_name="events")
    op.drop_table("events")
