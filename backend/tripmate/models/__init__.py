# SQLAlchemy models
from tripmate.models.user import User
from tripmate.models.trip import Trip, TripStatus
from tripmate.models.trip_match import TripMatch, MatchStatus
from tripmate.models.group import Group, GroupMember, Message
from tripmate.models.emergency import EmergencyContact, EmergencyAlert

__all__ = [
    "User",
    "Trip",
    "TripMatch",
    "Group",
    "GroupMember",
    "Message",
    "EmergencyContact",
    "EmergencyAlert",
    # Enums
    "TripStatus",
    "MatchStatus",
]
