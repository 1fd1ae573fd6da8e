from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional
import logging

from tripmate.config import get_settings
from tripmate.database import get_db
from tripmate.errors import ValidationError, NotFoundError, PermissionDenied, GeocodingFailed
from tripmate.models.trip import Trip, TripStatus
from tripmate.models.user import User
from tripmate.schemas.trip import TripCreate, TripResponse, TripMatchResponse, TripSummary
from tripmate.services.auth import get_current_user
from tripmate.services.geocoding import Geocoder, get_geocoder
from tripmate.services.routing import RoutingClient, get_router
from tripmate.services.route_analyzer import analyze_routes
from tripmate.services.transport_modes import OptimizationMode, TransportMode, parse_mode, routing_profile
from tripmate.services.trip_matcher import TripMatcher

logger = logging.getLogger(__name__)

router = APIRouter()

REQUIRED_FIELDS = ("source", "destination", "travel_date", "travel_time", "transport_mode", "optimization_mode")


def _parse_radius(value, default: int) -> Optional[int]:
    """Whole kilometres only; "15" is accepted, 15.5 and true are not."""
    if value is None:
        return default
    if isinstance(value, bool):
        return None
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    try:
        return int(str(value).strip())
    except ValueError:
        return None


def validate_trip_request(trip: TripCreate) -> dict:
    """Check and normalise a trip submission before anything leaves the process."""
    extra = trip.model_extra or {}
    if "user_id" in extra or "userId" in extra:
        raise ValidationError("User ID cannot be provided in request body", "USER_ID_NOT_ALLOWED")

    values = {}
    for name in REQUIRED_FIELDS:
        value = getattr(trip, name)
        if not isinstance(value, str) or not value.strip():
            raise ValidationError(
                f"Missing required fields: {', '.join(REQUIRED_FIELDS)}",
                "MISSING_REQUIRED_FIELDS",
            )
        values[name] = value.strip()

    settings = get_settings()
    radius = _parse_radius(trip.match_radius, settings.default_match_radius_km)
    if radius is None or not settings.min_match_radius_km <= radius <= settings.max_match_radius_km:
        raise ValidationError(
            f"match_radius must be a number between {settings.min_match_radius_km} "
            f"and {settings.max_match_radius_km}",
            "INVALID_MATCH_RADIUS",
        )
    values["match_radius"] = radius

    mode = parse_mode(values["transport_mode"])
    if mode is None:
        raise ValidationError(
            f"transport_mode must be one of: {', '.join(m.value for m in TransportMode)}",
            "INVALID_TRANSPORT_MODE",
        )
    values["transport_mode"] = mode.value

    optimization = values["optimization_mode"].lower()
    if optimization not in {m.value for m in OptimizationMode}:
        raise ValidationError(
            f"optimization_mode must be one of: {', '.join(m.value for m in OptimizationMode)}",
            "INVALID_OPTIMIZATION_MODE",
        )
    values["optimization_mode"] = optimization

    values["route_data"] = trip.route_data
    return values


def get_owned_trip(db: Session, trip_id: int, user: User) -> Trip:
    trip = db.query(Trip).filter(Trip.id == trip_id).first()
    if not trip:
        raise NotFoundError("Trip not found", "TRIP_NOT_FOUND")
    if trip.user_id != user.id:
        raise PermissionDenied("You do not have access to this trip")
    return trip


@router.post("", status_code=201, response_model=TripResponse)
async def create_trip(
    trip: TripCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    geocoder: Geocoder = Depends(get_geocoder),
    routing: RoutingClient = Depends(get_router),
):
    data = validate_trip_request(trip)

    source_coords, destination_coords = await geocoder.lookup_many(data["source"], data["destination"])
    if not source_coords or not destination_coords:
        raise GeocodingFailed(
            "Unable to geocode source or destination. Please provide more specific location "
            "names (e.g. \"New York, NY\" instead of just \"New York\")"
        )

    # A router outage degrades to a straight-line route instead of failing the trip
    candidates = await routing.route(
        routing_profile(data["transport_mode"]),
        [source_coords, destination_coords],
        alternatives=True,
        count=get_settings().route_alternatives,
    )
    ranked = analyze_routes(
        candidates,
        data["transport_mode"],
        data["optimization_mode"],
        start=source_coords,
        end=destination_coords,
        destination_name=data["destination"],
    )
    route_geometry = [list(c) for c in ranked[0].candidate.coordinates] if ranked else None

    new_trip = Trip(
        user_id=user.id,
        source=data["source"],
        destination=data["destination"],
        source_lat=source_coords[0],
        source_lon=source_coords[1],
        destination_lat=destination_coords[0],
        destination_lon=destination_coords[1],
        travel_date=data["travel_date"],
        travel_time=data["travel_time"],
        transport_mode=data["transport_mode"],
        optimization_mode=data["optimization_mode"],
        status=TripStatus.ACTIVE.value,
        route_data=data["route_data"],
        route_geometry=route_geometry,
        match_radius=data["match_radius"],
    )
    db.add(new_trip)
    db.commit()
    db.refresh(new_trip)
    logger.info(f"Created trip {new_trip.id} for user {user.id}: {new_trip.source} -> {new_trip.destination}")

    # Runs only after the trip is committed; it swallows its own failures
    matches = TripMatcher(db).run_matching_pass(new_trip)

    response = TripResponse.model_validate(new_trip)
    response.match_count = len(matches) // 2
    return response


@router.get("")
async def list_trips(
    status: Optional[str] = Query(None),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    query = db.query(Trip).filter(Trip.user_id == user.id)
    if status:
        query = query.filter(Trip.status == status)
    trips = query.order_by(Trip.created_at.desc(), Trip.id.desc()).all()

    counts = TripMatcher(db).pending_match_counts([t.id for t in trips])
    results = []
    for t in trips:
        item = TripResponse.model_validate(t)
        item.match_count = counts.get(t.id, 0)
        results.append(item)
    return results


@router.get("/{trip_id}", response_model=TripResponse)
async def get_trip(
    trip_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    trip = get_owned_trip(db, trip_id, user)
    response = TripResponse.model_validate(trip)
    response.match_count = TripMatcher(db).pending_match_counts([trip.id]).get(trip.id, 0)
    return response


@router.get("/{trip_id}/matches")
async def get_trip_matches(
    trip_id: int,
    limit: int = Query(20, ge=1, le=100),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    trip = get_owned_trip(db, trip_id, user)
    matches = TripMatcher(db).get_matches_for_trip(trip.id, limit=limit)

    return {
        "trip": TripSummary.model_validate(trip),
        "matches": [
            TripMatchResponse(
                id=m.id,
                trip_id=m.trip_id,
                matched_trip_id=m.matched_trip_id,
                match_score=m.match_score,
                reasons=m.reasons,
                status=m.status,
                created_at=m.created_at,
                matched_trip=TripSummary.model_validate(m.matched_trip) if m.matched_trip else None,
            )
            for m in matches
        ],
    }
