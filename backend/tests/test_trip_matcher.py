"""Tests for the match scorer and the TripMatcher service."""
import math

import pytest

from tripmate.models.trip import Trip, TripStatus
from tripmate.models.trip_match import TripMatch
from tripmate.models.user import User
from tripmate.services.geo import haversine_distance
from tripmate.services.trip_matcher import (
    MatchRule,
    MatchingConfig,
    TripMatcher,
    TripProfile,
    _proximity_points,
    effective_radius,
    score_match,
)

ORIGIN = (0.0, 0.0)
FAR_END = (0.0, 1.0)
# Roughly 5 km east of ORIGIN
FIVE_KM_EAST = (0.0, 0.045)
ROUTE = [(0.0, 0.0), (0.0, 0.5), (0.0, 1.0)]


def _profile(
    source=ORIGIN,
    destination=FAR_END,
    route=None,
    name="Goa",
    date="2026-12-01",
    mode="car",
    radius=10,
):
    return TripProfile(
        source_coords=source,
        destination_coords=destination,
        route_geometry=route,
        destination=name,
        travel_date=date,
        transport_mode=mode,
        match_radius=radius,
    )


def _make_trip(db, user_id, source=ORIGIN, destination=FAR_END, route=None, **kwargs):
    User.get_or_create(db, user_id)
    trip = Trip(
        user_id=user_id,
        source=kwargs.pop("source_name", "Origin"),
        destination=kwargs.pop("destination_name", "Goa"),
        source_lat=source[0] if source else None,
        source_lon=source[1] if source else None,
        destination_lat=destination[0] if destination else None,
        destination_lon=destination[1] if destination else None,
        travel_date=kwargs.pop("travel_date", "2026-12-01"),
        travel_time=kwargs.pop("travel_time", "09:00"),
        transport_mode=kwargs.pop("transport_mode", "car"),
        optimization_mode=kwargs.pop("optimization_mode", "fastest"),
        status=kwargs.pop("status", TripStatus.ACTIVE.value),
        route_geometry=[list(p) for p in route] if route else None,
        match_radius=kwargs.pop("match_radius", 10),
    )
    db.add(trip)
    db.commit()
    db.refresh(trip)
    return trip


class TestProximityPoints:
    def test_zero_distance_full_weight(self):
        assert _proximity_points(45, 0, 10) == 45

    def test_at_radius_contributes_nothing(self):
        assert _proximity_points(45, 10, 10) == 0

    def test_half_rounds_up(self):
        # 45 * 0.5 = 22.5
        assert _proximity_points(45, 5, 10) == 23

    def test_config_thresholds(self):
        config = MatchingConfig.for_radius(8)
        assert config.source_radius_km == 8
        assert config.destination_radius_km == 8
        assert config.route_proximity_km == 4


class TestScoreMatch:
    def test_identical_trips_without_geometry(self):
        result = score_match(_profile(), _profile())

        assert result.score == 45 + 45 + 10 + 30 + 20
        assert result.tags == [
            "starting_points_nearby_0.00km",
            "destinations_nearby_0.00km",
            "same_destination_name",
            "same_travel_date",
            "same_transport_mode",
        ]
        assert result.details.source_distance == 0.0
        assert result.details.destination_distance == 0.0
        assert result.details.route_proximity is None

    def test_identical_trips_with_shared_route(self):
        result = score_match(_profile(route=ROUTE), _profile(route=ROUTE))
        assert result.score == 45 + 45 + 10 + 40 + 40 + 35 + 35 + 30 + 20
        assert result.details.route_proximity == 0.0

    def test_destination_name_is_case_and_space_insensitive(self):
        result = score_match(_profile(name="Goa"), _profile(name="  goa "))
        assert MatchRule.SAME_DESTINATION_NAME in [r.rule for r in result.reasons]

    def test_transport_mode_is_case_insensitive(self):
        result = score_match(_profile(mode="car"), _profile(mode="CAR"))
        assert MatchRule.SAME_TRANSPORT_MODE in [r.rule for r in result.reasons]

    def test_partial_source_proximity(self):
        d = haversine_distance(ORIGIN, FIVE_KM_EAST)
        result = score_match(_profile(), _profile(source=FIVE_KM_EAST))

        source_reason = result.reasons[0]
        assert source_reason.rule == MatchRule.SOURCES_NEARBY
        assert source_reason.points == int(math.floor(45 * (1 - d / 10) + 0.5))
        assert source_reason.tag == f"starting_points_nearby_{d:.2f}km"

    def test_smaller_radius_governs(self):
        a = _profile(radius=10)
        b = _profile(source=FIVE_KM_EAST, radius=3)
        assert effective_radius(a, b) == 3

        result = score_match(a, b)
        assert MatchRule.SOURCES_NEARBY not in [r.rule for r in result.reasons]
        # Distance is still measured even when the rule does not fire
        assert result.details.source_distance == pytest.approx(haversine_distance(ORIGIN, FIVE_KM_EAST))

    def test_effective_radius_is_symmetric(self):
        a, b = _profile(radius=25), _profile(radius=7)
        assert effective_radius(a, b) == effective_radius(b, a) == 7

    def test_pickup_along_route(self):
        rider_source = (0.02, 0.5)
        d = haversine_distance(rider_source, (0.0, 0.5))
        driver = _profile(route=ROUTE, destination=(5.0, 5.0), name="Elsewhere")
        rider = _profile(source=rider_source, destination=(6.0, 6.0), name="Nowhere")

        result = score_match(driver, rider)

        assert f"can_pickup_along_route_{d:.2f}km" in result.tags
        assert result.details.route_proximity == pytest.approx(d)

    def test_pickup_uses_half_radius(self):
        rider_source = (0.02, 0.5)  # ~2.2 km off the route
        driver = _profile(route=ROUTE, radius=4)
        rider = _profile(source=rider_source, radius=4)

        result = score_match(driver, rider)
        assert MatchRule.CAN_PICKUP not in [r.rule for r in result.reasons]
        assert result.details.route_proximity is None

    def test_reverse_rules_use_other_route(self):
        rider = _profile(source=(0.0, 0.5), destination=(0.0, 1.0))
        driver = _profile(route=ROUTE)

        result = score_match(rider, driver)
        rules = [r.rule for r in result.reasons]
        assert MatchRule.THEY_CAN_PICKUP in rules
        assert MatchRule.THEY_CAN_DROPOFF in rules
        assert MatchRule.CAN_PICKUP not in rules

    def test_missing_coordinates_skip_geometric_rules(self):
        a = _profile(source=None, destination=None, route=ROUTE, name="A", date="2026-01-01", mode="car")
        b = _profile(source=None, destination=None, route=ROUTE, name="B", date="2026-01-02", mode="bus")

        result = score_match(a, b)
        assert result.score == 0
        assert result.reasons == []
        assert result.details.source_distance is None


class TestTripMatcher:
    def test_creates_bidirectional_pair(self, db_session):
        existing = _make_trip(db_session, "alice")
        new_trip = _make_trip(db_session, "bob")

        records = TripMatcher(db_session).run_matching_pass(new_trip)

        assert len(records) == 2
        forward, backward = records
        assert (forward.trip_id, forward.matched_trip_id) == (new_trip.id, existing.id)
        assert (backward.trip_id, backward.matched_trip_id) == (existing.id, new_trip.id)
        assert forward.match_score == backward.match_score == 150
        assert forward.match_reasons == backward.match_reasons
        assert forward.status == backward.status == "pending"
        assert forward.created_at == backward.created_at
        assert db_session.query(TripMatch).count() == 2

    def test_score_of_exactly_fifty_matches(self, db_session):
        # Same date and mode only: 30 + 20
        _make_trip(db_session, "alice", source=None, destination=None, destination_name="Goa")
        new_trip = _make_trip(db_session, "bob", source=None, destination=None, destination_name="Pune")

        records = TripMatcher(db_session).run_matching_pass(new_trip)
        assert len(records) == 2
        assert records[0].match_score == 50

    def test_below_threshold_is_dropped(self, db_session):
        _make_trip(db_session, "alice", source=None, destination=None, destination_name="Goa")
        new_trip = _make_trip(db_session, "bob", source=None, destination=None, destination_name="Pune")

        assert TripMatcher(db_session, min_score=51).run_matching_pass(new_trip) == []
        assert db_session.query(TripMatch).count() == 0

    def test_forty_points_do_not_match(self, db_session):
        # Same destination name and date, different mode: 10 + 30
        _make_trip(db_session, "alice", source=None, destination=None, transport_mode="bus")
        new_trip = _make_trip(db_session, "bob", source=None, destination=None, transport_mode="car")

        assert TripMatcher(db_session).run_matching_pass(new_trip) == []

    def test_ignores_own_and_inactive_trips(self, db_session):
        _make_trip(db_session, "bob")
        _make_trip(db_session, "alice", status=TripStatus.COMPLETED.value)
        new_trip = _make_trip(db_session, "bob")

        assert TripMatcher(db_session).run_matching_pass(new_trip) == []

    def test_failure_is_rolled_back_and_swallowed(self, db_session, monkeypatch):
        _make_trip(db_session, "alice")
        new_trip = _make_trip(db_session, "bob")

        def boom(records):
            raise RuntimeError("disk full")

        monkeypatch.setattr(db_session, "add_all", boom)
        assert TripMatcher(db_session).run_matching_pass(new_trip) == []
        assert db_session.query(Trip).count() == 2
        assert db_session.query(TripMatch).count() == 0

    def test_matches_sorted_by_score(self, db_session):
        _make_trip(db_session, "alice")
        _make_trip(db_session, "carol", source=FIVE_KM_EAST)
        new_trip = _make_trip(db_session, "bob")

        matcher = TripMatcher(db_session)
        matcher.run_matching_pass(new_trip)
        matches = matcher.get_matches_for_trip(new_trip.id)

        assert len(matches) == 2
        assert matches[0].match_score > matches[1].match_score
        assert matches[0].reasons[0] == "starting_points_nearby_0.00km"

    def test_pending_counts(self, db_session):
        existing = _make_trip(db_session, "alice")
        new_trip = _make_trip(db_session, "bob")
        matcher = TripMatcher(db_session)
        matcher.run_matching_pass(new_trip)

        assert matcher.pending_match_counts([existing.id, new_trip.id]) == {existing.id: 1, new_trip.id: 1}
        assert matcher.pending_match_counts([]) == {}


class TestScoreThresholdFromGeometry:
    """Source proximity plus a shared date, landing either side of the bar."""

    def _pair(self, db, lon_offset):
        _make_trip(db, "alice", source=(0.0, 0.0), destination=None, destination_name="Goa", transport_mode="bus")
        return _make_trip(
            db, "bob", source=(0.0, lon_offset), destination=None, destination_name="Pune", transport_mode="car"
        )

    def test_forty_nine_is_dropped(self, db_session):
        # ~5.78 km apart: 19 source points + 30 same date
        new_trip = self._pair(db_session, 0.052)
        assert score_match(
            TripProfile.from_trip(new_trip),
            TripProfile.from_trip(db_session.query(Trip).filter(Trip.user_id == "alice").one()),
        ).score == 49

        assert TripMatcher(db_session).run_matching_pass(new_trip) == []

    def test_fifty_matches(self, db_session):
        # ~5.56 km apart: 20 source points + 30 same date
        new_trip = self._pair(db_session, 0.05)

        records = TripMatcher(db_session).run_matching_pass(new_trip)
        assert len(records) == 2
        assert records[0].match_score == records[1].match_score == 50


def test_pickup_rules_are_not_mirrored():
    driver = _profile(route=ROUTE)
    walker = _profile(source=(0.0, 0.5))

    forward = [r.rule for r in score_match(driver, walker).reasons]
    backward = [r.rule for r in score_match(walker, driver).reasons]

    assert MatchRule.CAN_PICKUP in forward
    assert MatchRule.THEY_CAN_PICKUP not in forward
    assert MatchRule.CAN_PICKUP not in backward
    assert MatchRule.THEY_CAN_PICKUP in backward
