"""
Route alternative analysis.

Takes the candidate paths the router returned for one origin/destination
pair, prices each one, estimates congestion, and picks the cheapest, the
fastest and (with three or more candidates) a balanced option.
"""
import logging
import math
from dataclasses import dataclass, field
from typing import Optional, Sequence

from tripmate.config import get_settings
from tripmate.services.geo import LatLon, haversine_distance
from tripmate.services.transport_modes import (
    OptimizationMode,
    RoadType,
    TransportMode,
    fuel_rate,
    nominal_speed,
    parse_mode,
)

logger = logging.getLogger(__name__)

MAX_TRAFFIC_FACTOR = 3.0
HIGHWAY_SPEED_KMH = 70.0
URBAN_SPEED_KMH = 40.0


@dataclass
class RouteInstruction:
    distance: float  # metres
    duration: float  # seconds
    instruction: str
    name: str
    type: str


@dataclass
class RouteCandidate:
    """One path alternative as returned by the routing provider."""
    coordinates: list[LatLon]
    distance: float  # metres
    duration: float  # seconds
    instructions: list[RouteInstruction] = field(default_factory=list)


@dataclass
class AnalyzedRoute:
    candidate: RouteCandidate
    mode: str
    cost: float
    fuel_efficiency: float
    traffic_factor: float
    cheapest_score: float
    fastest_score: float
    road_type: RoadType = RoadType.MIXED
    optimization_type: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "coordinates": [list(c) for c in self.candidate.coordinates],
            "distance": self.candidate.distance,
            "duration": self.candidate.duration,
            "cost": round(self.cost, 2),
            "mode": self.mode,
            "optimization_type": self.optimization_type,
            "fuel_efficiency": self.fuel_efficiency,
            "traffic_factor": self.traffic_factor,
            "instructions": [vars(i) for i in self.candidate.instructions],
        }


def average_speed_kmh(distance_m: float, duration_s: float) -> float:
    if duration_s <= 0:
        # Covering ground in no time is unbounded speed; going nowhere is standing still
        return math.inf if distance_m > 0 else 0.0
    return (distance_m / 1000) / (duration_s / 3600)


def classify_road(avg_speed: float, mode: TransportMode | None) -> RoadType:
    # Only cars burn noticeably more fuel in town than on the motorway
    if mode != TransportMode.CAR:
        return RoadType.MIXED
    if avg_speed > HIGHWAY_SPEED_KMH:
        return RoadType.HIGHWAY
    if avg_speed < URBAN_SPEED_KMH:
        return RoadType.URBAN
    return RoadType.MIXED


def estimate_cost(
    distance_km: float,
    mode: str | TransportMode,
    road_type: RoadType = RoadType.MIXED,
    fuel_price: Optional[float] = None,
) -> float:
    if fuel_price is None:
        fuel_price = get_settings().fuel_price_per_liter
    fuel_used = distance_km * fuel_rate(mode, road_type) / 100
    return fuel_used * fuel_price


def estimate_traffic_factor(distance_m: float, duration_s: float, mode: str | TransportMode) -> float:
    """1.0 means free flowing at the mode's nominal speed; capped at 3.0."""
    if distance_m <= 0 and duration_s <= 0:
        return 1.0
    avg_speed = average_speed_kmh(distance_m, duration_s)
    if avg_speed <= 0:
        return MAX_TRAFFIC_FACTOR
    factor = max(1.0, nominal_speed(mode) / avg_speed)
    return min(factor, MAX_TRAFFIC_FACTOR)


def analyze_candidate(candidate: RouteCandidate, mode: str | TransportMode) -> AnalyzedRoute:
    parsed = parse_mode(mode)
    distance_km = candidate.distance / 1000
    avg_speed = average_speed_kmh(candidate.distance, candidate.duration)

    road_type = classify_road(avg_speed, parsed)
    cost = estimate_cost(distance_km, mode, road_type)
    traffic_factor = estimate_traffic_factor(candidate.distance, candidate.duration, mode)

    if cost > 0 and distance_km > 0:
        fuel_efficiency = 100 / (cost / distance_km)
    else:
        fuel_efficiency = 100.0

    return AnalyzedRoute(
        candidate=candidate,
        mode=parsed.value if parsed else str(mode),
        cost=cost,
        fuel_efficiency=fuel_efficiency,
        traffic_factor=traffic_factor,
        cheapest_score=cost,
        fastest_score=candidate.duration * traffic_factor,
        road_type=road_type,
    )


def fallback_route(start: LatLon, end: LatLon, destination_name: str = "") -> RouteCandidate:
    """Straight-line stand-in for when the router has nothing to offer."""
    settings = get_settings()
    road_distance = haversine_distance(start, end) * 1000 * settings.fallback_detour_factor
    duration = (road_distance / 1000) / settings.fallback_speed_kmh * 3600

    return RouteCandidate(
        coordinates=[tuple(start), tuple(end)],
        distance=road_distance,
        duration=duration,
        instructions=[
            RouteInstruction(
                distance=road_distance,
                duration=duration,
                instruction=f"Head towards {destination_name or 'your destination'}",
                name="Direct route",
                type="depart",
            )
        ],
    )


def _ratio(value: float, best: float) -> float:
    if best <= 0:
        return 0.0
    return value / best


def select_alternatives(
    analyzed: Sequence[AnalyzedRoute],
    preference: str | OptimizationMode = OptimizationMode.FASTEST,
) -> list[AnalyzedRoute]:
    """Pick cheapest / fastest / balanced and order them by ``preference``."""
    if not analyzed:
        return []

    # min() keeps the first of equal scores, so ties go to the router's order
    cheapest = min(analyzed, key=lambda r: r.cheapest_score)
    fastest = min(analyzed, key=lambda r: r.fastest_score)

    cheapest.optimization_type = "cheapest"
    picks = [cheapest]

    if fastest is not cheapest:
        fastest.optimization_type = "fastest"
        picks.append(fastest)

    if len(analyzed) > 2:
        best_cost = cheapest.cheapest_score
        best_time = fastest.fastest_score
        balanced = min(
            analyzed,
            key=lambda r: _ratio(r.cheapest_score, best_cost) + _ratio(r.fastest_score, best_time),
        )
        if balanced is not cheapest and balanced is not fastest:
            balanced.optimization_type = "balanced"
            picks.append(balanced)

    preference = OptimizationMode(preference)
    if preference == OptimizationMode.FASTEST:
        picks.sort(key=lambda r: r.candidate.duration * (r.traffic_factor or 1))
    else:
        picks.sort(key=lambda r: r.cost)

    return picks


def analyze_routes(
    candidates: Sequence[RouteCandidate],
    mode: str | TransportMode,
    preference: str | OptimizationMode = OptimizationMode.FASTEST,
    start: Optional[LatLon] = None,
    end: Optional[LatLon] = None,
    destination_name: str = "",
) -> list[AnalyzedRoute]:
    """
    Analyze router candidates and return the ranked picks.

    With no candidates and both endpoints known, a straight-line fallback is
    synthesized so the caller still gets something to show.
    """
    candidates = list(candidates)
    if not candidates:
        if start is None or end is None:
            return []
        logger.info("Router returned no candidates, using straight-line fallback route")
        candidates = [fallback_route(start, end, destination_name)]

    analyzed = [analyze_candidate(c, mode) for c in candidates]
    picks = select_alternatives(analyzed, preference)
    logger.info(
        f"Analyzed {len(analyzed)} route candidate(s), returning {len(picks)} "
        f"optimized for {OptimizationMode(preference).value}"
    )
    return picks
