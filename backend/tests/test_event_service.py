"""
SprintSpace Backend — Event Service Unit Tests
================================================

What:  Tests for EventService with a mocked AsyncSession.
How:   The session is an AsyncMock; query results are MagicMocks whose
       scalars().all() / scalar() return prepared values.
"""

import random
from datetime import date, datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest
from sqlalchemy.dialects import postgresql
from sqlalchemy.exc import OperationalError

import sprintspace.services.event_service as event_service_module

from sprintspace.exceptions import DatabaseError, ForbiddenError, NotFoundError, ValidationError
from sprintspace.schemas.event import EventCreate, EventUpdate
from sprintspace.services.auth_service import Identity
from sprintspace.services.event_service import EventService, event_to_response


def _scalars_result(items):
    result = MagicMock()
    result.scalars.return_value.all.return_value = items
    return result


def _count_result(total):
    result = MagicMock()
    result.scalar.return_value = total
    return result


def _sql(statement) -> str:
    return str(statement.compile(dialect=postgresql.dialect(), compile_kwargs={"literal_binds": True}))


class TestEventToResponse:

    def test_attributes_are_flattened(self, make_event):
        """Stored attributes appear as top-level keys next to the columns."""
        event = make_event(attributes={"location": "Dhaka", "distance": "42km"})
        body = event_to_response(event).model_dump(by_alias=True)
        assert body["location"] == "Dhaka"
        assert body["distance"] == "42km"
        assert body["userEmail"] == event.owner_email
        assert body["totalRegistrationCount"] == 0

    def test_columns_win_over_attributes(self, make_event):
        """An attribute cannot shadow a column value."""
        event = make_event(attributes={"title": "Fake"}, title="Real")
        assert event_to_response(event).title == "Real"


class TestListEvents:

    def setup_method(self):
        self.service = EventService()

    @pytest.mark.asyncio
    async def test_total_pages_is_ceiling(self, mock_db_session, make_event):
        """20 events with limit 9 → 3 pages."""
        mock_db_session.execute.side_effect = [
            _scalars_result([make_event() for _ in range(9)]),
            _scalars_result([make_event() for _ in range(20)]),
            _count_result(20),
        ]
        result = await self.service.list_events(mock_db_session, page=2, limit=9)
        assert len(result.events) == 9
        assert len(result.my_events) == 20
        assert result.total_events == 20
        assert result.total_pages == 3
        assert result.current_page == 2

    @pytest.mark.asyncio
    async def test_empty_collection(self, mock_db_session):
        mock_db_session.execute.side_effect = [_scalars_result([]), _scalars_result([]), _count_result(0)]
        result = await self.service.list_events(mock_db_session)
        assert result.events == []
        assert result.my_events == []
        assert result.total_pages == 0

    @pytest.mark.asyncio
    async def test_database_failure_is_wrapped(self, mock_db_session):
        mock_db_session.execute.side_effect = OperationalError("SELECT", {}, Exception("down"))
        with pytest.raises(DatabaseError):
            await self.service.list_events(mock_db_session)

    @pytest.mark.asyncio
    async def test_my_events_query_is_capped(self, mock_db_session):
        """The unpaginated myEvents query still carries a LIMIT."""
        mock_db_session.execute.side_effect = [_scalars_result([]), _scalars_result([]), _count_result(0)]
        await self.service.list_events(mock_db_session, email="owner@example.com", my_events_limit=50)

        statement = mock_db_session.execute.await_args_list[1][0][0]
        sql = _sql(statement)
        assert "LIMIT 50" in sql
        assert "OFFSET" not in sql
        assert "owner@example.com" in sql


class TestGetEvent:

    def setup_method(self):
        self.service = EventService()

    @pytest.mark.asyncio
    async def test_malformed_id_never_reaches_database(self, mock_db_session):
        with pytest.raises(ValidationError):
            await self.service.get_event(mock_db_session, "not-an-id")
        mock_db_session.get.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_event_raises_not_found(self, mock_db_session):
        mock_db_session.get.return_value = None
        with pytest.raises(NotFoundError):
            await self.service.get_event(mock_db_session, "a" * 24)


class TestRunningEvents:

    @pytest.mark.asyncio
    async def test_sample_is_subset_of_at_most_three(self, mock_db_session, make_event):
        """randomRunningEvents holds at most 3 items, all from marathons."""
        service = EventService(rng=random.Random(7))
        events = [make_event(title=f"Run {i}") for i in range(6)]
        mock_db_session.execute.return_value = _scalars_result(events)

        result = await service.running_events(mock_db_session, today=date(2024, 1, 1))

        assert len(result.marathons) == 6
        assert len(result.random_running_events) == 3
        ids = {e.id for e in result.marathons}
        assert {e.id for e in result.random_running_events} <= ids

    @pytest.mark.asyncio
    async def test_fewer_than_sample_size_returns_all(self, mock_db_session, make_event):
        service = EventService(rng=random.Random(1))
        events = [make_event(), make_event()]
        mock_db_session.execute.return_value = _scalars_result(events)

        result = await service.running_events(mock_db_session)

        assert len(result.random_running_events) == 2

    @pytest.mark.asyncio
    async def test_default_today_is_utc(self, mock_db_session, monkeypatch):
        """Without an explicit date the cutoff is the current UTC date."""
        monkeypatch.setattr(event_service_module, "utc_today", lambda: date(2030, 1, 1))
        mock_db_session.execute.return_value = _scalars_result([])

        await EventService().running_events(mock_db_session)

        assert "2030-01-01" in _sql(mock_db_session.execute.await_args[0][0])

    def test_utc_today_matches_utc_clock(self):
        assert event_service_module.utc_today() in {
            (datetime.now(timezone.utc) - timedelta(seconds=5)).date(),
            datetime.now(timezone.utc).date(),
        }


class TestWrites:

    def setup_method(self):
        self.service = EventService()
        self.owner = Identity(email="owner@example.com")
        self.stranger = Identity(email="stranger@example.com")

    @pytest.mark.asyncio
    async def test_create_uses_token_email_as_owner(self, mock_db_session):
        """The owner comes from the identity, never from the body."""
        payload = EventCreate.model_validate(
            {"title": "City Run", "userEmail": "forged@example.com", "totalRegistrationCount": 99}
        )
        async def _flush():
            mock_db_session.add.call_args[0][0].id = "b" * 24

        mock_db_session.flush.side_effect = _flush
        result = await self.service.create_event(mock_db_session, payload, self.owner)

        added = mock_db_session.add.call_args[0][0]
        assert added.owner_email == "owner@example.com"
        assert added.total_registration_count == 0
        assert added.attributes == {}
        assert result.user_email == "owner@example.com"
        mock_db_session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_update_by_non_owner_is_forbidden(self, mock_db_session, make_event):
        mock_db_session.get.return_value = make_event()
        payload = EventUpdate.model_validate({"title": "Hijacked"})

        with pytest.raises(ForbiddenError):
            await self.service.update_event(mock_db_session, "a" * 24, payload, self.stranger)
        mock_db_session.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_update_merges_attributes(self, mock_db_session, make_event):
        event = make_event(attributes={"location": "Dhaka"})
        mock_db_session.get.return_value = event
        payload = EventUpdate.model_validate({"distance": "10km", "totalRegistrationCount": 50})

        result = await self.service.update_event(mock_db_session, event.id, payload, self.owner)

        assert event.attributes == {"location": "Dhaka", "distance": "10km"}
        assert result.total_registration_count == 0
        assert result.title == "Sprint Marathon 2024"

    @pytest.mark.asyncio
    async def test_delete_by_non_owner_is_forbidden(self, mock_db_session, make_event):
        mock_db_session.get.return_value = make_event()
        with pytest.raises(ForbiddenError):
            await self.service.delete_event(mock_db_session, "a" * 24, self.stranger)
        mock_db_session.delete.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_delete_malformed_id(self, mock_db_session):
        with pytest.raises(ValidationError):
            await self.service.delete_event(mock_db_session, "xyz", self.owner)
        mock_db_session.get.assert_not_awaited()
