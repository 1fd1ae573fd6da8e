from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
import logging

from tripmate.database import get_db
from tripmate.errors import ValidationError, NotFoundError, PermissionDenied
from tripmate.models.emergency import EmergencyContact, EmergencyAlert
from tripmate.models.trip import Trip
from tripmate.models.user import User
from tripmate.schemas.emergency import (
    EmergencyContactCreate,
    EmergencyContactResponse,
    EmergencyAlertCreate,
    EmergencyAlertResponse,
    EmergencyAlertResult,
    NotifiedContact,
)
from tripmate.services.auth import get_current_user
from tripmate.services.geo import is_valid_coordinate
from tripmate.services.messaging import Channel, Recipient, TwilioNotifier, get_notifier

logger = logging.getLogger(__name__)

contacts_router = APIRouter()
alerts_router = APIRouter()

LOCATION_TYPES = ("current", "destination")


def _required_text(value, field: str, code: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field} is required and must be a non-empty string", code)
    return value.strip()


def _own_trip_id(db: Session, user: User, trip_id: int | None) -> int | None:
    # An SOS is never refused over the optional trip reference
    if trip_id is None:
        return None
    trip = db.query(Trip).filter(Trip.id == trip_id).first()
    if not trip or trip.user_id != user.id:
        logger.warning(f"SOS from {user.id} referenced trip {trip_id} they do not own; not linking it")
        return None
    return trip.id


@contacts_router.get("", response_model=list[EmergencyContactResponse])
async def list_contacts(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return db.query(EmergencyContact).filter(
        EmergencyContact.user_id == user.id
    ).order_by(EmergencyContact.created_at.desc(), EmergencyContact.id.desc()).all()


@contacts_router.post("", status_code=201, response_model=EmergencyContactResponse)
async def create_contact(
    payload: EmergencyContactCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    extra = payload.model_extra or {}
    if "user_id" in extra or "userId" in extra:
        raise ValidationError("User ID cannot be provided in request body", "USER_ID_NOT_ALLOWED")

    contact = EmergencyContact(
        user_id=user.id,
        name=_required_text(payload.name, "Name", "MISSING_NAME"),
        phone=_required_text(payload.phone, "Phone", "MISSING_PHONE"),
        email=_required_text(payload.email, "Email", "MISSING_EMAIL").lower(),
        relationship=(payload.relationship or "").strip() or None,
    )
    db.add(contact)
    db.commit()
    db.refresh(contact)
    return contact


@contacts_router.delete("/{contact_id}")
async def delete_contact(
    contact_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    contact = db.query(EmergencyContact).filter(EmergencyContact.id == contact_id).first()
    if not contact:
        raise NotFoundError("Emergency contact not found", "CONTACT_NOT_FOUND")
    if contact.user_id != user.id:
        raise PermissionDenied("You do not have permission to delete this emergency contact")

    deleted = EmergencyContactResponse.model_validate(contact)
    db.delete(contact)
    db.commit()
    return {
        "message": "Emergency contact deleted successfully",
        "deleted_contact": deleted,
    }


@alerts_router.post("", status_code=201, response_model=EmergencyAlertResult)
async def trigger_alert(
    payload: EmergencyAlertCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    notifier: TwilioNotifier = Depends(get_notifier),
):
    """
    Record an SOS alert and text every emergency contact.

    The alert row is committed before any SMS goes out, so it stands even
    when every delivery fails.
    """
    if payload.location_type not in LOCATION_TYPES:
        raise ValidationError(
            'Invalid location_type. Must be "current" or "destination"', "INVALID_LOCATION_TYPE"
        )

    contacts = db.query(EmergencyContact).filter(
        EmergencyContact.user_id == user.id
    ).order_by(EmergencyContact.id).all()
    if not contacts:
        raise ValidationError(
            "No emergency contacts configured. Please add emergency contacts before triggering SOS.",
            "NO_EMERGENCY_CONTACTS",
        )

    if payload.location_type == "current":
        location = payload.current_location
        if not location or location.lat is None or location.lng is None or not location.name:
            raise ValidationError(
                "For current location type, current_location with lat, lng, and name is required",
                "MISSING_CURRENT_LOCATION",
            )
        if not is_valid_coordinate(location.lat, location.lng):
            raise ValidationError("current_location coordinates are out of range", "INVALID_COORDINATES")
        lat, lng, location_name = location.lat, location.lng, location.name
        trip_id = _own_trip_id(db, user, payload.trip_id)
    else:
        if not payload.trip_id:
            raise ValidationError("trip_id is required for destination location type", "MISSING_TRIP_ID")
        trip = db.query(Trip).filter(Trip.id == payload.trip_id).first()
        if not trip:
            raise NotFoundError("Trip not found", "TRIP_NOT_FOUND")
        if trip.user_id != user.id:
            raise PermissionDenied("You do not have access to this trip")
        if not trip.destination_coords:
            raise ValidationError(
                "Trip does not have destination coordinates", "MISSING_DESTINATION_COORDINATES"
            )
        lat, lng = trip.destination_coords
        location_name = trip.destination
        trip_id = trip.id

    user_name = user.display_name
    alert_message = payload.message or (
        f"🆘 EMERGENCY ALERT from {user_name}! Location: {location_name}. "
        f"Coordinates: {lat:.6f}, {lng:.6f}"
    )

    alert = EmergencyAlert(
        user_id=user.id,
        trip_id=trip_id,
        alert_type="manual_sos",
        location_lat=lat,
        location_lng=lng,
        location_name=location_name,
        message=alert_message,
        sent_to=[c.id for c in contacts],
    )
    db.add(alert)
    db.commit()
    db.refresh(alert)

    reach_at = user.phone or user.email or "Unknown"
    sms_body = (
        f"{alert_message}\n\nContact {user_name} immediately at {reach_at}.\n\n"
        f"View location: https://www.google.com/maps?q={lat},{lng}"
    )
    results = await notifier.send_bulk([Recipient(c.phone, sms_body) for c in contacts], Channel.SMS)

    logger.warning(
        f"EMERGENCY ALERT {alert.id} from {user_name} ({user.id}): "
        f"{results.successful} SMS delivered, {results.failed} failed"
    )
    outcomes = list(zip(contacts, results.results))
    for contact, outcome in outcomes:
        status = "sent" if outcome.success else f"failed ({outcome.error})"
        logger.info(f"  SOS to {contact.name} ({contact.relationship or 'N/A'}) {contact.phone}: {status}")

    notified = []
    for contact, outcome in outcomes:
        notified.append(NotifiedContact(
            id=contact.id,
            name=contact.name,
            phone=contact.phone,
            email=contact.email,
            sms_delivered=outcome.success,
        ))

    return EmergencyAlertResult(
        success=True,
        alert_id=alert.id,
        contacts_notified=len(contacts),
        sms_delivered=results.successful,
        sms_failed=results.failed,
        message=f"Emergency alert sent to {len(contacts)} contact(s). {results.successful} SMS delivered.",
        contacts=notified,
    )


@alerts_router.get("", response_model=list[EmergencyAlertResponse])
async def list_alerts(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return db.query(EmergencyAlert).filter(
        EmergencyAlert.user_id == user.id
    ).order_by(EmergencyAlert.created_at.desc(), EmergencyAlert.id.desc()).all()
