"""
SprintSpace Backend — Shared Pydantic Schemas
===============================================

What:  Base model with camelCase wire names, error/health/delete responses.
How:   CamelModel generates camelCase aliases (userEmail, startDate, ...) so
       the JSON contract matches the web client while Python code keeps
       snake_case attribute names.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Accepts both snake_case and camelCase input, emits camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class DeleteResult(CamelModel):
    """Returned by DELETE routes."""
    acknowledged: bool = Field(default=True)
    deleted_count: int = Field(description="Number of records removed (0 or 1)")


class ErrorResponse(BaseModel):
    """
    Standardized error response format for all API errors.

    Example:
        {
            "error": "not_found",
            "message": "event with ID '65a1...' was not found",
            "request_id": "1f2e3d4c"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(CamelModel):
    """Health check response showing service and database status."""
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
