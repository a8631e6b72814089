"""
SprintSpace Backend — Event Request/Response Schemas
======================================================

What:  API contract for events (marathons).
How:   Known fields map to columns; any other JSON keys are kept in
       `model_extra` and stored in Event.attributes, then flattened back into
       the response object.

Server-owned keys (id, owner email, counter, creation time) are dropped from
client payloads; the counter only moves through the registration lifecycle.
"""

from datetime import date, datetime
from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from sprintspace.schemas.common import CamelModel

SERVER_OWNED_EVENT_KEYS = frozenset({
    "id",
    "_id",
    "userEmail",
    "user_email",
    "ownerEmail",
    "owner_email",
    "totalRegistrationCount",
    "total_registration_count",
    "totalRegistrations",
    "createdAt",
    "created_at",
    # start date aliases left over when more than one is sent
    "startDate",
    "marathonStartDate",
    "start_date",
})

START_DATE_ALIASES = AliasChoices("startDate", "marathonStartDate", "start_date")


def _coerce_date_string(value: Any) -> Any:
    # "2025-03-01T00:00:00.000Z" → "2025-03-01"
    if isinstance(value, str) and "T" in value:
        return value.split("T", 1)[0]
    if value == "":
        return None
    return value


class _EventPayload(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    @field_validator("start_date", mode="before", check_fields=False)
    @classmethod
    def parse_start_date(cls, v: Any) -> Any:
        return _coerce_date_string(v)

    def extra_attributes(self) -> Dict[str, Any]:
        """Client attributes that are not columns and not server-owned."""
        return {
            key: value
            for key, value in (self.model_extra or {}).items()
            if key not in SERVER_OWNED_EVENT_KEYS
        }


class EventCreate(_EventPayload):
    """Body of POST /events."""
    title: str = Field(min_length=1, max_length=255)
    start_date: Optional[date] = Field(default=None, validation_alias=START_DATE_ALIASES)


class EventUpdate(_EventPayload):
    """Body of PUT /events/{id}; every field optional (partial update)."""
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    start_date: Optional[date] = Field(default=None, validation_alias=START_DATE_ALIASES)


class EventResponse(CamelModel):
    """Full event representation with its attributes flattened in."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    id: str
    user_email: str
    title: str
    start_date: Optional[date] = None
    created_at: Optional[datetime] = None
    total_registration_count: int = 0


class EventListResponse(CamelModel):
    """
    One page of events plus every event matching the same filter.

    total_pages = ceil(total_events / limit)
    """
    my_events: List[EventResponse]
    events: List[EventResponse]
    total_events: int
    total_pages: int
    current_page: int


class RunningEventsResponse(CamelModel):
    """Upcoming events plus a random sample drawn from them."""
    marathons: List[EventResponse]
    random_running_events: List[EventResponse]
