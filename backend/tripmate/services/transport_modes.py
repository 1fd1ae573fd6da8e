"""
Per-mode lookup tables shared by the route analyzer, the combined-route
builder and the routing client.
"""

from enum import Enum


class TransportMode(str, Enum):
    CAR = "car"
    CYCLING = "cycling"
    WALKING = "walking"
    BUS = "bus"
    TRAIN = "train"
    FLIGHT = "flight"


class OptimizationMode(str, Enum):
    FASTEST = "fastest"
    CHEAPEST = "cheapest"


class RoadType(str, Enum):
    HIGHWAY = "highway"
    MIXED = "mixed"
    URBAN = "urban"


# OSRM only knows car / bike / foot; public transport and flights ride the car graph
ROUTING_PROFILES = {
    TransportMode.CAR: "car",
    TransportMode.CYCLING: "bike",
    TransportMode.WALKING: "foot",
    TransportMode.BUS: "car",
    TransportMode.TRAIN: "car",
    TransportMode.FLIGHT: "car",
}

# Nominal cruising speed in km/h, used for the traffic factor
NOMINAL_SPEEDS_KMH = {
    TransportMode.CAR: 80.0,
    TransportMode.CYCLING: 20.0,
    TransportMode.WALKING: 5.0,
    TransportMode.BUS: 60.0,
    TransportMode.TRAIN: 100.0,
    TransportMode.FLIGHT: 500.0,
}

DEFAULT_NOMINAL_SPEED_KMH = 60.0

# Litres (or litre-equivalent per passenger) per 100 km
FUEL_RATES = {
    TransportMode.CAR: {RoadType.HIGHWAY: 6.5, RoadType.MIXED: 8.0, RoadType.URBAN: 10.0},
    TransportMode.CYCLING: {RoadType.HIGHWAY: 0.0, RoadType.MIXED: 0.0, RoadType.URBAN: 0.0},
    TransportMode.WALKING: {RoadType.HIGHWAY: 0.0, RoadType.MIXED: 0.0, RoadType.URBAN: 0.0},
    TransportMode.BUS: {RoadType.HIGHWAY: 2.0, RoadType.MIXED: 2.5, RoadType.URBAN: 3.0},
    TransportMode.TRAIN: {RoadType.HIGHWAY: 1.5, RoadType.MIXED: 1.8, RoadType.URBAN: 2.0},
    TransportMode.FLIGHT: {RoadType.HIGHWAY: 15.0, RoadType.MIXED: 15.0, RoadType.URBAN: 15.0},
}


def parse_mode(value: str | TransportMode | None) -> TransportMode | None:
    """Case-insensitive lookup; None for anything unknown."""
    if isinstance(value, TransportMode):
        return value
    if not value:
        return None
    try:
        return TransportMode(value.strip().lower())
    except ValueError:
        return None


def routing_profile(mode: str | TransportMode | None) -> str:
    parsed = parse_mode(mode)
    return ROUTING_PROFILES[parsed] if parsed else "car"


def nominal_speed(mode: str | TransportMode | None) -> float:
    parsed = parse_mode(mode)
    return NOMINAL_SPEEDS_KMH[parsed] if parsed else DEFAULT_NOMINAL_SPEED_KMH


def fuel_rate(mode: str | TransportMode | None, road_type: RoadType) -> float:
    parsed = parse_mode(mode)
    if parsed is None:
        return 0.0
    return FUEL_RATES[parsed][road_type]
