"""Tests for the group combined-route builder."""
from tripmate.models.trip import Trip
from tripmate.services.combined_route import build_combined_route, collect_waypoints
from tripmate.services.route_analyzer import RouteCandidate

from fakes import FakeRouter


def _trip(user_id, source, destination, mode="car", src_name="A", dst_name="B"):
    return Trip(
        user_id=user_id,
        source=src_name,
        destination=dst_name,
        source_lat=source[0] if source else None,
        source_lon=source[1] if source else None,
        destination_lat=destination[0] if destination else None,
        destination_lon=destination[1] if destination else None,
        travel_date="2026-12-01",
        travel_time="09:00",
        transport_mode=mode,
        optimization_mode="fastest",
    )


TRIPS = [
    _trip("alice", (18.52, 73.85), (19.07, 72.87), src_name="Pune", dst_name="Mumbai"),
    _trip("bob", (18.50, 73.92), (19.21, 72.97), src_name="Hadapsar", dst_name="Thane"),
    _trip("carol", (18.60, 73.80), (19.99, 73.78), src_name="Pimpri", dst_name="Nashik"),
]


def test_pickups_before_dropoffs():
    waypoints = collect_waypoints(TRIPS)

    assert [w.type for w in waypoints] == ["pickup"] * 3 + ["dropoff"] * 3
    assert [w.user_id for w in waypoints] == ["alice", "bob", "carol"] * 2
    assert waypoints[0].location == "Pune"
    assert waypoints[3].location == "Mumbai"


def test_trips_without_coordinates_are_skipped():
    trips = [_trip("alice", (18.52, 73.85), None), _trip("bob", None, (19.07, 72.87))]
    waypoints = collect_waypoints(trips)
    assert [(w.type, w.user_id) for w in waypoints] == [("pickup", "alice"), ("dropoff", "bob")]


def test_no_dropoffs_means_no_waypoints():
    assert collect_waypoints([_trip("alice", (18.52, 73.85), None)]) == []


async def test_routes_through_every_waypoint_in_order():
    router = FakeRouter()
    combined = await build_combined_route(TRIPS, router)

    assert combined is not None
    call = router.calls[0]
    assert call["profile"] == "car"
    assert call["waypoints"] == [w.coords for w in collect_waypoints(TRIPS)]
    assert combined.transport_mode == "car"
    assert combined.distance == 150000.0

    data = combined.to_dict()
    assert data["waypoints"][0] == {
        "lat": 18.52, "lon": 73.85, "type": "pickup", "user_id": "alice", "location": "Pune",
    }
    assert data["coordinates"][0] == [18.52, 73.85]


async def test_first_trip_sets_the_mode():
    trips = [_trip("alice", (0, 0), (0, 1), mode="cycling"), _trip("bob", (0, 0), (0, 1), mode="car")]
    router = FakeRouter()
    combined = await build_combined_route(trips, router)

    assert router.calls[0]["profile"] == "bike"
    assert combined.transport_mode == "cycling"


async def test_no_route_no_fallback():
    router = FakeRouter()
    router.candidates = []
    assert await build_combined_route(TRIPS, router) is None


async def test_router_exception_returns_none():
    router = FakeRouter()
    router.error = RuntimeError("connection reset")
    assert await build_combined_route(TRIPS, router) is None


async def test_uses_first_router_candidate():
    router = FakeRouter()
    router.candidates = [
        RouteCandidate(coordinates=[(1.0, 1.0), (2.0, 2.0)], distance=5.0, duration=6.0),
        RouteCandidate(coordinates=[(3.0, 3.0)], distance=7.0, duration=8.0),
    ]
    combined = await build_combined_route(TRIPS, router)
    assert combined.coordinates == [(1.0, 1.0), (2.0, 2.0)]
    assert combined.duration == 6.0


async def test_empty_group():
    assert await build_combined_route([], FakeRouter()) is None
