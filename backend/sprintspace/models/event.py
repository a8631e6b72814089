"""
SprintSpace Backend — Event SQLAlchemy Model
==============================================

What:  ORM model representing the `events` table (events a.k.a. marathons).
Who:   Used by EventService / RegistrationService and by Alembic.

Table Design:
    - id: 24-hex object id assigned in Python (identifiers.new_object_id)
    - owner_email: identity of the creator; update/delete require a match
    - start_date: compared against "today" by the running-events view
    - attributes: arbitrary client attributes (JSON, JSONB on PostgreSQL)
    - total_registration_count: derived counter, changed only by atomic
      UPDATEs issued from the registration lifecycle; CHECK >= 0
"""

from datetime import date, datetime, timezone
from typing import Any, Dict, Optional

from sqlalchemy import JSON, CheckConstraint, Date, DateTime, Index, Integer, String, text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from sprintspace.database import Base
from sprintspace.identifiers import new_object_id

JSONType = JSON().with_variant(JSONB(), "postgresql")


class Event(Base):
    """
    A registrable activity with a start date and an owner.

    Lifecycle:
        1. Created by an authenticated owner (counter = 0)
        2. Updated/deleted only by the owner
        3. Deleting leaves registrations orphaned (no cascade)
    """

    __tablename__ = "events"

    id: Mapped[str] = mapped_column(
        String(24),
        primary_key=True,
        default=new_object_id,
    )

    owner_email: Mapped[str] = mapped_column(
        String(320),
        nullable=False,
        comment="Email of the authenticated creator",
    )

    title: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    start_date: Mapped[Optional[date]] = mapped_column(
        Date,
        nullable=True,
        comment="Date the event starts; used by the running-events view",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    attributes: Mapped[Dict[str, Any]] = mapped_column(
        JSONType,
        nullable=False,
        default=dict,
        comment="Arbitrary additional attributes supplied by the client",
    )

    total_registration_count: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        server_default=text("0"),
        comment="Number of registrations referencing this event",
    )

    __table_args__ = (
        CheckConstraint("total_registration_count >= 0", name="ck_events_count_non_negative"),
        Index("idx_events_owner_email", "owner_email"),
        Index("idx_events_start_date", "start_date"),
        Index("idx_events_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<Event(id={self.id}, title='{self.title}', "
            f"total_registration_count={self.total_registration_count})>"
        )
