"""
SprintSpace Backend — Registration Request/Response Schemas
=============================================================

eventId is accepted as a plain string and validated by the service so a
malformed id produces 400 rather than a schema error. Identifier fields in
update payloads are stripped; a registration can never be moved to another
event or given another id.
"""

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import AliasChoices, ConfigDict, Field
from pydantic.alias_generators import to_camel

from sprintspace.schemas.common import CamelModel

SERVER_OWNED_REGISTRATION_KEYS = frozenset({
    "id",
    "_id",
    "eventId",
    "event_id",
    "marathonId",
    "userEmail",
    "user_email",
    "createdAt",
    "created_at",
    # title aliases left over when more than one is sent
    "eventTitle",
    "event_title",
    "title",
})

EVENT_TITLE_ALIASES = AliasChoices("eventTitle", "event_title", "title")


class _RegistrationPayload(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    def extra_attributes(self) -> Dict[str, Any]:
        return {
            key: value
            for key, value in (self.model_extra or {}).items()
            if key not in SERVER_OWNED_REGISTRATION_KEYS
        }


class RegistrationCreate(_RegistrationPayload):
    """Body of POST /registrations."""
    event_id: str = Field(validation_alias=AliasChoices("eventId", "marathonId", "event_id"))
    event_title: Optional[str] = Field(default=None, max_length=255, validation_alias=EVENT_TITLE_ALIASES)


class RegistrationUpdate(_RegistrationPayload):
    """Body of PUT /registrations/{id}."""
    event_title: Optional[str] = Field(default=None, max_length=255, validation_alias=EVENT_TITLE_ALIASES)


class RegistrationResponse(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    id: str
    event_id: str
    user_email: str
    event_title: str = ""
    created_at: Optional[datetime] = None
