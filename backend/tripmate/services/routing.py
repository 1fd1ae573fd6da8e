"""
OSRM road-routing client.

Coordinates go in and come out as (lat, lon); OSRM itself speaks lon,lat and
GeoJSON [lon, lat], so the flip happens here and nowhere else.
"""
import logging
import math
from typing import Optional, Sequence

import httpx

from tripmate.config import get_settings
from tripmate.services.geo import LatLon
from tripmate.services.route_analyzer import RouteCandidate, RouteInstruction

logger = logging.getLogger(__name__)

COMPASS = ["north", "northeast", "east", "southeast", "south", "southwest", "west", "northwest"]


def compass_direction(bearing: Optional[float]) -> str:
    return COMPASS[int(math.floor((bearing or 0) / 45 + 0.5)) % 8]


def format_maneuver(maneuver: dict, road_name: str) -> str:
    """Turn an OSRM maneuver into a short human-readable instruction."""
    name = road_name or "the road"
    kind = maneuver.get("type")
    modifier = maneuver.get("modifier")

    if kind == "depart":
        return f"Head {compass_direction(maneuver.get('bearing_after'))} on {name}"
    if kind == "arrive":
        return "Arrive at your destination"
    if kind == "turn":
        if modifier in ("left", "right"):
            return f"Turn {modifier} onto {name}"
        if modifier in ("sharp left", "sharp right", "slight left", "slight right"):
            return f"{modifier.capitalize()} onto {name}"
        return f"Turn onto {name}"
    if kind == "merge":
        return f"Merge onto {name}"
    if kind == "on ramp":
        return f"Take the ramp onto {name}"
    if kind == "off ramp":
        return f"Take the exit onto {name}"
    if kind == "fork":
        if modifier in ("left", "right"):
            return f"Keep {modifier} at the fork onto {name}"
        return f"Continue at the fork onto {name}"
    if kind in ("roundabout", "rotary"):
        return f"At the roundabout, take exit {maneuver.get('exit') or 1} onto {name}"
    if kind == "end of road":
        if modifier in ("left", "right"):
            return f"At the end of the road, turn {modifier} onto {name}"
        return f"At the end of the road, continue onto {name}"
    return f"Continue on {name}"


def parse_route(route: dict) -> RouteCandidate:
    coordinates = [(c[1], c[0]) for c in route["geometry"]["coordinates"]]

    instructions = []
    for leg in route.get("legs") or []:
        for step in leg.get("steps") or []:
            maneuver = step.get("maneuver")
            if not maneuver:
                continue
            instructions.append(RouteInstruction(
                distance=step.get("distance", 0.0),
                duration=step.get("duration", 0.0),
                instruction=format_maneuver(maneuver, step.get("name")),
                name=step.get("name") or "Unnamed road",
                type=maneuver.get("type", ""),
            ))

    return RouteCandidate(
        coordinates=coordinates,
        distance=float(route["distance"]),
        duration=float(route["duration"]),
        instructions=instructions,
    )


class RoutingClient:

    def __init__(
        self,
        base_url: Optional[str] = None,
        user_agent: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        settings = get_settings()
        self.base_url = (base_url or settings.osrm_url).rstrip("/")
        self.user_agent = user_agent or settings.http_user_agent
        self.timeout = timeout or settings.http_timeout_seconds
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers={"User-Agent": self.user_agent},
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    async def close(self):
        if self._client and not self._client.is_closed:
            await self._client.aclose()

    async def route(
        self,
        profile: str,
        waypoints: Sequence[LatLon],
        alternatives: bool = False,
        count: int = 1,
        steps: bool = True,
    ) -> list[RouteCandidate]:
        """
        Ask OSRM for one or more paths through ``waypoints`` in order.

        Returns an empty list on any failure; callers decide how to degrade.
        """
        if len(waypoints) < 2:
            return []

        coords = ";".join(f"{lon},{lat}" for lat, lon in waypoints)
        params = {
            "overview": "full",
            "geometries": "geojson",
            "steps": "true" if steps else "false",
        }
        if alternatives:
            params["alternatives"] = str(max(count, 1))

        try:
            client = await self._get_client()
            response = await client.get(f"/route/v1/{profile}/{coords}", params=params)

            if response.status_code != 200:
                logger.error(f"OSRM API error: {response.status_code} {response.text[:200]}")
                return []

            data = response.json()
            if data.get("code") != "Ok" or not data.get("routes"):
                logger.error(f"No routes found in OSRM response: {data.get('code')}")
                return []

            return [parse_route(r) for r in data["routes"]]

        except httpx.HTTPError as e:
            logger.warning(f"OSRM request failed: {e}")
            return []
        except (KeyError, IndexError, TypeError, ValueError) as e:
            logger.error(f"Unexpected OSRM payload: {e}")
            return []


_router: Optional[RoutingClient] = None


def get_router() -> RoutingClient:
    global _router
    if _router is None:
        _router = RoutingClient()
    return _router


async def shutdown_router():
    global _router
    if _router is not None:
        await _router.close()
        _router = None
