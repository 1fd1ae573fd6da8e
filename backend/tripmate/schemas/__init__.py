from tripmate.schemas.trip import TripCreate, TripResponse, TripSummary, TripMatchResponse
from tripmate.schemas.route import RouteRequest, RouteOptionResponse, RouteAlternativesResponse
from tripmate.schemas.group import GroupCreate, GroupResponse, MemberResponse, MessageCreate, MessageResponse
from tripmate.schemas.emergency import (
    EmergencyContactCreate,
    EmergencyContactResponse,
    EmergencyAlertCreate,
    EmergencyAlertResponse,
    EmergencyAlertResult,
)
from tripmate.schemas.profile import ProfileUpdate, ProfileResponse

__all__ = [
    "TripCreate",
    "TripResponse",
    "TripSummary",
    "TripMatchResponse",
    "RouteRequest",
    "RouteOptionResponse",
    "RouteAlternativesResponse",
    "GroupCreate",
    "GroupResponse",
    "MemberResponse",
    "MessageCreate",
    "MessageResponse",
    "EmergencyContactCreate",
    "EmergencyContactResponse",
    "EmergencyAlertCreate",
    "EmergencyAlertResponse",
    "EmergencyAlertResult",
    "ProfileUpdate",
    "ProfileResponse",
]
