"""
One shared route for a whole group: collect everyone first, then drop
everyone off. A gather-then-distribute heuristic, not a vehicle-routing solve.
"""
import logging
from dataclasses import dataclass, asdict
from typing import Optional, Sequence

from tripmate.models.trip import Trip
from tripmate.services.geo import LatLon
from tripmate.services.routing import RoutingClient
from tripmate.services.transport_modes import TransportMode, routing_profile

logger = logging.getLogger(__name__)


@dataclass
class Waypoint:
    lat: float
    lon: float
    type: str  # "pickup" or "dropoff"
    user_id: str
    location: str

    @property
    def coords(self) -> LatLon:
        return (self.lat, self.lon)


@dataclass
class CombinedRoute:
    coordinates: list[LatLon]
    distance: float  # metres
    duration: float  # seconds
    waypoints: list[Waypoint]
    transport_mode: str

    def to_dict(self) -> dict:
        return {
            "coordinates": [list(c) for c in self.coordinates],
            "distance": self.distance,
            "duration": self.duration,
            "waypoints": [asdict(w) for w in self.waypoints],
            "transport_mode": self.transport_mode,
        }


def collect_waypoints(trips: Sequence[Trip]) -> list[Waypoint]:
    """All pickups in trip order, then all dropoffs in trip order."""
    pickups = []
    dropoffs = []
    for trip in trips:
        if trip.source_coords:
            lat, lon = trip.source_coords
            pickups.append(Waypoint(lat, lon, "pickup", trip.user_id, trip.source))
        if trip.destination_coords:
            lat, lon = trip.destination_coords
            dropoffs.append(Waypoint(lat, lon, "dropoff", trip.user_id, trip.destination))
    if not pickups or not dropoffs:
        return []
    return pickups + dropoffs


async def build_combined_route(trips: Sequence[Trip], router: RoutingClient) -> Optional[CombinedRoute]:
    """
    Route through every member's pickup and dropoff.

    No straight-line fallback here: if the router has nothing, neither do we.
    """
    if not trips:
        return None

    waypoints = collect_waypoints(trips)
    if not waypoints:
        return None

    transport_mode = trips[0].transport_mode or TransportMode.CAR.value
    profile = routing_profile(transport_mode)

    try:
        candidates = await router.route(profile, [w.coords for w in waypoints], steps=True)
    except Exception as e:
        logger.error(f"Combined route calculation error: {e}")
        return None

    if not candidates:
        logger.warning(f"No combined route for {len(trips)} trip(s) via {profile}")
        return None

    route = candidates[0]
    return CombinedRoute(
        coordinates=route.coordinates,
        distance=route.distance,
        duration=route.duration,
        waypoints=waypoints,
        transport_mode=transport_mode,
    )
