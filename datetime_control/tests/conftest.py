"""
Shared test fixtures and helpers for the date/time visibility test suite.

Provides a fixed clock, a pre-populated in-memory field store and an
engine factory so tests never depend on the real current time.
"""

from datetime import datetime

import pytest

from datetime_control.core.fields import FieldResolver, OPTIONS_SCOPE, user_scope
from datetime_control.core.store import InMemoryFieldStore, StaticPortalSystem
from datetime_control.core.utils import get_reference_timezone
from datetime_control.core.visibility import VisibilityEngine

PORTAL_RECORD_ID = 42


class FixedClock:
    """Callable clock returning a settable datetime."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def store() -> InMemoryFieldStore:
    """Field store with one date and one datetime field in every scope."""
    field_store = InMemoryFieldStore()
    for scope_id in (None, OPTIONS_SCOPE, user_scope(7), PORTAL_RECORD_ID):
        field_store.set_field("event_date", scope_id, "date_picker", "20240115", "Event date")
        field_store.set_field("event_start", scope_id, "date_time_picker", "2024-01-15 14:30:00", "Event start")
    field_store.set_field("title", None, "text", "Hello", "Title")
    field_store.set_record_status(PORTAL_RECORD_ID, "publish")
    return field_store


@pytest.fixture
def portal_system() -> StaticPortalSystem:
    return StaticPortalSystem(current_portal_id="north", portal_map={"north": PORTAL_RECORD_ID})


@pytest.fixture
def make_engine(store):
    """Factory fixture building an engine with a fixed clock.

    Usage:
        engine = make_engine(datetime(2024, 1, 15, 9, 0))
        engine = make_engine(now, timezone="Europe/Berlin", current_user_id=7)
    """

    def _make_engine(
        now: datetime,
        timezone: str = "UTC",
        portal_system: StaticPortalSystem | None = None,
        current_user_id: int | None = None,
        logger=None,
    ) -> VisibilityEngine:
        return VisibilityEngine(
            FieldResolver(store, portal_system),
            timezone=get_reference_timezone(timezone),
            now_provider=FixedClock(now),
            current_user_provider=lambda: current_user_id,
            logger=logger,
        )

    return _make_engine
