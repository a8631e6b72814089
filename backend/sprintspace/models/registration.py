"""
SprintSpace Backend — Registration SQLAlchemy Model
=====================================================

What:  ORM model representing the `registrations` table.

event_id is an indexed reference to events.id without a foreign key, so
deleting an event does not touch its registrations (they become orphans).
event_title is a denormalized copy of the parent title used by search.
"""

from datetime import datetime, timezone
from typing import Any, Dict

from sqlalchemy import DateTime, Index, String, text
from sqlalchemy.orm import Mapped, mapped_column

from sprintspace.database import Base
from sprintspace.identifiers import new_object_id
from sprintspace.models.event import JSONType


class Registration(Base):
    """A user's enrollment in an Event."""

    __tablename__ = "registrations"

    id: Mapped[str] = mapped_column(
        String(24),
        primary_key=True,
        default=new_object_id,
    )

    event_id: Mapped[str] = mapped_column(
        String(24),
        nullable=False,
    )

    user_email: Mapped[str] = mapped_column(
        String(320),
        nullable=False,
    )

    event_title: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        default="",
        server_default=text("''"),
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
    )

    __table_args__ = (
        Index("idx_registrations_event_id", "event_id"),
        Index("idx_registrations_user_email", "user_email"),
    )

    def __repr__(self) -> str:
        return f"<Registration(id={self.id}, event_id={self.event_id}, user_email='{self.user_email}')>"
