"""Tests for the trip expiry job and settings guards."""
from datetime import date

import pytest

from tripmate.config import Settings
from tripmate.models.trip import Trip, TripStatus
from tripmate.models.user import User
from tripmate.scheduler import expire_past_trips


def _trip(db, travel_date, status=TripStatus.ACTIVE.value):
    User.get_or_create(db, "alice")
    trip = Trip(
        user_id="alice",
        source="Pune",
        destination="Mumbai",
        travel_date=travel_date,
        travel_time="09:00",
        transport_mode="car",
        optimization_mode="fastest",
        status=status,
    )
    db.add(trip)
    db.commit()
    return trip


def test_expires_only_past_active_trips(db_session):
    past = _trip(db_session, "2026-05-01")
    today = _trip(db_session, "2026-05-02")
    future = _trip(db_session, "2027-01-15")
    cancelled = _trip(db_session, "2026-04-01", status=TripStatus.CANCELLED.value)

    changed = expire_past_trips(db_session, today=date(2026, 5, 2))

    assert changed == 1
    assert past.status == TripStatus.COMPLETED.value
    assert today.status == TripStatus.ACTIVE.value
    assert future.status == TripStatus.ACTIVE.value
    assert cancelled.status == TripStatus.CANCELLED.value


def test_nothing_to_expire(db_session):
    _trip(db_session, "2030-01-01")
    assert expire_past_trips(db_session, today=date(2026, 5, 2)) == 0


def test_production_refuses_sqlite():
    with pytest.raises(ValueError):
        Settings(env="prod", database_url="sqlite:///./data/tripmate.db")


def test_production_with_postgres():
    settings = Settings(env="prod", database_url="postgresql://tripmate@db/tripmate")
    assert settings.min_match_score == 50
    assert settings.default_match_radius_km == 10
