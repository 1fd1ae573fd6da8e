import logging
import math
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, Sequence

from sqlalchemy import func
from sqlalchemy.orm import Session

from tripmate.config import get_settings
from tripmate.models.trip import Trip, TripStatus
from tripmate.models.trip_match import TripMatch, MatchStatus
from tripmate.services.geo import LatLon, haversine_distance, distance_to_route

logger = logging.getLogger(__name__)

SOURCE_POINTS = 45
DESTINATION_POINTS = 45
SAME_DESTINATION_NAME_POINTS = 10
PICKUP_POINTS = 40
DROPOFF_POINTS = 40
REVERSE_PICKUP_POINTS = 35
REVERSE_DROPOFF_POINTS = 35
SAME_DATE_POINTS = 30
SAME_MODE_POINTS = 20


class MatchRule(str, Enum):
    SOURCES_NEARBY = "starting_points_nearby"
    DESTINATIONS_NEARBY = "destinations_nearby"
    SAME_DESTINATION_NAME = "same_destination_name"
    CAN_PICKUP = "can_pickup_along_route"
    CAN_DROPOFF = "can_dropoff_along_route"
    THEY_CAN_PICKUP = "they_can_pickup"
    THEY_CAN_DROPOFF = "they_can_dropoff"
    SAME_TRAVEL_DATE = "same_travel_date"
    SAME_TRANSPORT_MODE = "same_transport_mode"


@dataclass(frozen=True)
class MatchReason:
    rule: MatchRule
    points: int
    distance_km: Optional[float] = None

    @property
    def tag(self) -> str:
        if self.distance_km is None:
            return self.rule.value
        return f"{self.rule.value}_{self.distance_km:.2f}km"

    def __str__(self) -> str:
        return self.tag


@dataclass
class MatchDetails:
    source_distance: Optional[float] = None
    destination_distance: Optional[float] = None
    route_proximity: Optional[float] = None


@dataclass
class MatchResult:
    score: int = 0
    reasons: list[MatchReason] = field(default_factory=list)
    details: MatchDetails = field(default_factory=MatchDetails)

    @property
    def tags(self) -> list[str]:
        return [r.tag for r in self.reasons]

    def add(self, reason: MatchReason):
        self.score += reason.points
        self.reasons.append(reason)


@dataclass(frozen=True)
class MatchingConfig:
    """Geometric thresholds derived from the effective match radius."""
    source_radius_km: float
    destination_radius_km: float
    route_proximity_km: float

    @classmethod
    def for_radius(cls, radius_km: float) -> "MatchingConfig":
        return cls(
            source_radius_km=radius_km,
            destination_radius_km=radius_km,
            route_proximity_km=radius_km / 2,
        )


@dataclass
class TripProfile:
    """The parts of a trip the scorer looks at."""
    source_coords: Optional[LatLon]
    destination_coords: Optional[LatLon]
    route_geometry: Optional[list[LatLon]]
    destination: str
    travel_date: str
    transport_mode: str
    match_radius: int

    @classmethod
    def from_trip(cls, trip: Trip, default_radius: Optional[int] = None) -> "TripProfile":
        if default_radius is None:
            default_radius = get_settings().default_match_radius_km
        geometry = trip.route_geometry
        return cls(
            source_coords=trip.source_coords,
            destination_coords=trip.destination_coords,
            route_geometry=[tuple(p) for p in geometry] if geometry else None,
            destination=trip.destination or "",
            travel_date=trip.travel_date or "",
            transport_mode=trip.transport_mode or "",
            match_radius=trip.match_radius or default_radius,
        )


def effective_radius(a: TripProfile, b: TripProfile) -> int:
    # The stricter party wins
    return min(a.match_radius, b.match_radius)


def _proximity_points(weight: int, distance: float, radius: float) -> int:
    # Half-up rounding; Python's round() would send 22.5 to 22
    return int(math.floor(weight * (1 - distance / radius) + 0.5))


def score_match(a: TripProfile, b: TripProfile) -> MatchResult:
    """
    Score how well trip ``b`` fits with trip ``a``.

    Every rule is independent and additive. A rule whose inputs are missing
    on either side is skipped rather than counted as a mismatch.
    """
    config = MatchingConfig.for_radius(effective_radius(a, b))
    result = MatchResult()

    if a.source_coords and b.source_coords:
        d = haversine_distance(a.source_coords, b.source_coords)
        result.details.source_distance = d
        if d <= config.source_radius_km:
            result.add(MatchReason(
                MatchRule.SOURCES_NEARBY,
                _proximity_points(SOURCE_POINTS, d, config.source_radius_km),
                d,
            ))

    if a.destination_coords and b.destination_coords:
        d = haversine_distance(a.destination_coords, b.destination_coords)
        result.details.destination_distance = d
        if d <= config.destination_radius_km:
            result.add(MatchReason(
                MatchRule.DESTINATIONS_NEARBY,
                _proximity_points(DESTINATION_POINTS, d, config.destination_radius_km),
                d,
            ))

    if a.destination.strip().lower() == b.destination.strip().lower():
        result.add(MatchReason(MatchRule.SAME_DESTINATION_NAME, SAME_DESTINATION_NAME_POINTS))

    # a drives, b rides along
    if a.route_geometry:
        if b.source_coords:
            d = distance_to_route(b.source_coords, a.route_geometry)
            if d <= config.route_proximity_km:
                result.details.route_proximity = d
                result.add(MatchReason(
                    MatchRule.CAN_PICKUP,
                    _proximity_points(PICKUP_POINTS, d, config.route_proximity_km),
                    d,
                ))
        if b.destination_coords:
            d = distance_to_route(b.destination_coords, a.route_geometry)
            if d <= config.route_proximity_km:
                result.add(MatchReason(
                    MatchRule.CAN_DROPOFF,
                    _proximity_points(DROPOFF_POINTS, d, config.route_proximity_km),
                    d,
                ))

    # b drives, a rides along
    if b.route_geometry:
        if a.source_coords:
            d = distance_to_route(a.source_coords, b.route_geometry)
            if d <= config.route_proximity_km:
                result.add(MatchReason(
                    MatchRule.THEY_CAN_PICKUP,
                    _proximity_points(REVERSE_PICKUP_POINTS, d, config.route_proximity_km),
                    d,
                ))
        if a.destination_coords:
            d = distance_to_route(a.destination_coords, b.route_geometry)
            if d <= config.route_proximity_km:
                result.add(MatchReason(
                    MatchRule.THEY_CAN_DROPOFF,
                    _proximity_points(REVERSE_DROPOFF_POINTS, d, config.route_proximity_km),
                    d,
                ))

    if a.travel_date == b.travel_date:
        result.add(MatchReason(MatchRule.SAME_TRAVEL_DATE, SAME_DATE_POINTS))

    if a.transport_mode.lower() == b.transport_mode.lower():
        result.add(MatchReason(MatchRule.SAME_TRANSPORT_MODE, SAME_MODE_POINTS))

    return result


def build_match_pair(
    trip_id: int,
    matched_trip_id: int,
    result: MatchResult,
    created_at: datetime,
) -> list[TripMatch]:
    reasons = ",".join(result.tags)
    return [
        TripMatch(
            trip_id=trip_id,
            matched_trip_id=matched_trip_id,
            match_score=result.score,
            match_reasons=reasons,
            status=MatchStatus.PENDING.value,
            created_at=created_at,
        ),
        TripMatch(
            trip_id=matched_trip_id,
            matched_trip_id=trip_id,
            match_score=result.score,
            match_reasons=reasons,
            status=MatchStatus.PENDING.value,
            created_at=created_at,
        ),
    ]


class TripMatcher:

    def __init__(self, db: Session, min_score: Optional[int] = None):
        self.db = db
        self.min_score = get_settings().min_match_score if min_score is None else min_score

    def candidate_trips(self, trip: Trip) -> list[Trip]:
        return self.db.query(Trip).filter(
            Trip.status == TripStatus.ACTIVE.value,
            Trip.user_id != trip.user_id,
            Trip.id != trip.id,
        ).all()

    def find_matches(self, trip: Trip, candidates: Sequence[Trip]) -> list[tuple[Trip, MatchResult]]:
        profile = TripProfile.from_trip(trip)
        matches = []

        for candidate in candidates:
            result = score_match(profile, TripProfile.from_trip(candidate))
            if result.score < self.min_score:
                continue

            matches.append((candidate, result))
            logger.info(f"Match found: Trip {trip.id} <-> {candidate.id}")
            logger.info(f"Score: {result.score}, Reasons: {','.join(result.tags)}")
            details = result.details
            if details.source_distance is not None:
                logger.debug(f"Source distance: {details.source_distance:.2f}km")
            if details.destination_distance is not None:
                logger.debug(f"Destination distance: {details.destination_distance:.2f}km")
            if details.route_proximity is not None:
                logger.debug(f"Route proximity: {details.route_proximity:.2f}km")

        return matches

    def run_matching_pass(self, trip: Trip) -> list[TripMatch]:
        """
        Match a freshly committed trip against every other active trip.

        All records for the trip go in with one commit. Failures are logged
        and rolled back; they never reach the caller, whose trip is already
        persisted.
        """
        try:
            matches = self.find_matches(trip, self.candidate_trips(trip))
            if not matches:
                return []

            created_at = datetime.utcnow()
            records = []
            for candidate, result in matches:
                records.extend(build_match_pair(trip.id, candidate.id, result, created_at))

            self.db.add_all(records)
            self.db.commit()
            logger.info(f"Created {len(records) // 2} bidirectional matches for trip {trip.id}")
            return records
        except Exception as e:
            logger.error(f"Matching algorithm error for trip {trip.id}: {e}")
            self.db.rollback()
            return []

    def get_matches_for_trip(self, trip_id: int, limit: int = 50) -> list[TripMatch]:
        return self.db.query(TripMatch).filter(
            TripMatch.trip_id == trip_id
        ).order_by(TripMatch.match_score.desc(), TripMatch.id).limit(limit).all()

    def pending_match_counts(self, trip_ids: Sequence[int]) -> dict[int, int]:
        if not trip_ids:
            return {}
        rows = self.db.query(TripMatch.trip_id, func.count(TripMatch.id)).filter(
            TripMatch.trip_id.in_(list(trip_ids)),
            TripMatch.status == MatchStatus.PENDING.value,
        ).group_by(TripMatch.trip_id).all()
        return {trip_id: count for trip_id, count in rows}
