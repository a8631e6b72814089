"""
SprintSpace Backend — Application Package
===========================================

What: Event (marathon) registration API: events, registrations, and
      cookie- or header-based JWT authentication.
Who:  Imported by uvicorn (`sprintspace.main:app`), Alembic, and pytest.

Architecture Note:
    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │    Services (Auth Guard, Events,    │  ← ownership, counters, search
    │    Registrations)                   │
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │     Database (Persistence Gateway)  │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
