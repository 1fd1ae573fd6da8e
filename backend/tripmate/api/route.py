from fastapi import APIRouter, Depends
import logging

from tripmate.config import get_settings
from tripmate.errors import ValidationError, GeocodingFailed
from tripmate.schemas.route import RouteRequest, RouteAlternativesResponse, RouteOptionResponse
from tripmate.services.geocoding import Geocoder, get_geocoder
from tripmate.services.routing import RoutingClient, get_router
from tripmate.services.route_analyzer import analyze_routes
from tripmate.services.transport_modes import OptimizationMode, TransportMode, parse_mode, routing_profile

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", response_model=RouteAlternativesResponse)
async def calculate_route(
    request: RouteRequest,
    geocoder: Geocoder = Depends(get_geocoder),
    routing: RoutingClient = Depends(get_router),
):
    """Cheapest / fastest / balanced alternatives from the first boarding point to the destination."""
    boarding_points = [p.strip() for p in request.boarding_points if p and p.strip()]
    if not boarding_points:
        raise ValidationError("At least one boarding point is required", "MISSING_BOARDING_POINT")
    if not request.destination or not request.destination.strip():
        raise ValidationError("Destination is required", "MISSING_DESTINATION")

    mode = parse_mode(request.transport_mode)
    if mode is None:
        raise ValidationError(
            f"transport_mode must be one of: {', '.join(m.value for m in TransportMode)}",
            "INVALID_TRANSPORT_MODE",
        )
    try:
        optimization = OptimizationMode(request.optimization_mode.lower())
    except ValueError:
        raise ValidationError(
            f"optimization_mode must be one of: {', '.join(m.value for m in OptimizationMode)}",
            "INVALID_OPTIMIZATION_MODE",
        )

    destination = request.destination.strip()
    logger.info(f"Geocoding locations: source={boarding_points[0]!r} destination={destination!r}")
    start, end = await geocoder.lookup_many(boarding_points[0], destination)
    if not start or not end:
        raise GeocodingFailed(
            "Unable to find one or more locations. Please use more specific addresses "
            "(e.g. 'New York, NY, USA')"
        )

    candidates = await routing.route(
        routing_profile(mode),
        [start, end],
        alternatives=True,
        count=get_settings().route_alternatives,
    )
    ranked = analyze_routes(candidates, mode, optimization, start=start, end=end, destination_name=destination)

    return RouteAlternativesResponse(
        routes=[RouteOptionResponse(**r.to_dict()) for r in ranked]
    )
