from fastapi import APIRouter, Depends, BackgroundTasks
from sqlalchemy.orm import Session
import logging

from tripmate.database import get_db
from tripmate.errors import ValidationError, NotFoundError, PermissionDenied, InternalError
from tripmate.models.group import Group, GroupMember, Message
from tripmate.models.trip import Trip, TripStatus
from tripmate.models.user import User
from tripmate.schemas.group import (
    GroupCreate,
    GroupResponse,
    MemberResponse,
    MessageCreate,
    MessageResponse,
    SenderResponse,
)
from tripmate.schemas.trip import TripSummary
from tripmate.services.auth import get_current_user
from tripmate.services.combined_route import build_combined_route
from tripmate.services.messaging import Channel, Recipient, TwilioNotifier, get_notifier
from tripmate.services.routing import RoutingClient, get_router

logger = logging.getLogger(__name__)

router = APIRouter()


def get_group(db: Session, group_id: int) -> Group:
    group = db.query(Group).filter(Group.id == group_id).first()
    if not group:
        raise NotFoundError("Group not found", "GROUP_NOT_FOUND")
    return group


def require_member(db: Session, group_id: int, user: User) -> Group:
    group = get_group(db, group_id)
    if not GroupMember.is_member(db, group_id, user.id):
        raise PermissionDenied("Access denied: You are not a member of this group")
    return group


def _message_response(message: Message) -> MessageResponse:
    sender = message.sender
    return MessageResponse(
        id=message.id,
        group_id=message.group_id,
        user_id=message.user_id,
        message=message.message,
        created_at=message.created_at,
        sender=SenderResponse(name=sender.name, email=sender.email) if sender else None,
    )


async def notify_group_members(
    notifier: TwilioNotifier,
    group_name: str,
    sender_name: str,
    text: str,
    phones: list[str],
):
    """WhatsApp the other members. Delivery problems are logged, never raised."""
    if not phones:
        logger.info(f"No member of '{group_name}' has a phone number; skipping WhatsApp notification")
        return

    body = f"[{group_name}] {sender_name}: {text}"
    try:
        result = await notifier.send_bulk([Recipient(p, body) for p in phones], Channel.WHATSAPP)
        logger.info(f"Group message notification for '{group_name}': {result.successful} sent, {result.failed} failed")
    except Exception as e:
        logger.error(f"Error sending group message notifications: {e}")


@router.post("", status_code=201, response_model=GroupResponse)
async def create_group(
    payload: GroupCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    name = payload.name.strip()
    if not name:
        raise ValidationError("Group name is required", "MISSING_NAME")

    group = Group(name=name, created_by=user.id)
    group.members.append(GroupMember(user_id=user.id))
    db.add(group)
    db.commit()
    db.refresh(group)
    logger.info(f"User {user.id} created group {group.id} '{group.name}'")

    response = GroupResponse.model_validate(group)
    response.member_count = len(group.members)
    return response


@router.get("/{group_id}", response_model=GroupResponse)
async def read_group(
    group_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    group = require_member(db, group_id, user)
    response = GroupResponse.model_validate(group)
    response.member_count = len(group.members)
    return response


@router.get("/{group_id}/members", response_model=list[MemberResponse])
async def list_members(
    group_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    group = require_member(db, group_id, user)
    return [
        MemberResponse(
            user_id=m.user_id,
            name=m.user.name if m.user else None,
            email=m.user.email if m.user else None,
            joined_at=m.joined_at,
        )
        for m in group.members
    ]


@router.post("/{group_id}/members", status_code=201, response_model=GroupResponse)
async def join_group(
    group_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    group = get_group(db, group_id)
    if not GroupMember.is_member(db, group_id, user.id):
        db.add(GroupMember(group_id=group.id, user_id=user.id))
        db.commit()
        db.refresh(group)
        logger.info(f"User {user.id} joined group {group.id}")

    response = GroupResponse.model_validate(group)
    response.member_count = len(group.members)
    return response


@router.get("/{group_id}/messages", response_model=list[MessageResponse])
async def list_messages(
    group_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Full history, oldest first. Clients poll this."""
    require_member(db, group_id, user)
    messages = db.query(Message).filter(
        Message.group_id == group_id
    ).order_by(Message.created_at.asc(), Message.id.asc()).all()
    return [_message_response(m) for m in messages]


@router.post("/{group_id}/messages", status_code=201, response_model=MessageResponse)
async def post_message(
    group_id: int,
    payload: MessageCreate,
    background_tasks: BackgroundTasks,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    notifier: TwilioNotifier = Depends(get_notifier),
):
    extra = payload.model_extra or {}
    if "user_id" in extra or "userId" in extra:
        raise ValidationError("User ID cannot be provided in request body", "USER_ID_NOT_ALLOWED")

    text = payload.message
    if not isinstance(text, str) or not text.strip():
        raise ValidationError("Message is required and cannot be empty", "INVALID_MESSAGE")

    group = require_member(db, group_id, user)

    message = Message(group_id=group.id, user_id=user.id, message=text.strip())
    db.add(message)
    db.commit()
    db.refresh(message)

    phones = [
        m.user.phone for m in group.members
        if m.user_id != user.id and m.user and m.user.phone
    ]
    background_tasks.add_task(
        notify_group_members, notifier, group.name, user.display_name, message.message, phones
    )

    return _message_response(message)


@router.get("/{group_id}/combined-route")
async def get_combined_route(
    group_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    routing: RoutingClient = Depends(get_router),
):
    group = require_member(db, group_id, user)

    member_trips = db.query(Trip).filter(
        Trip.user_id.in_(group.member_ids()),
        Trip.status == TripStatus.ACTIVE.value,
    ).order_by(Trip.id).all()

    if not member_trips:
        raise NotFoundError("No active trips found for group members", "NO_TRIPS")

    combined = await build_combined_route(member_trips, routing)
    if combined is None:
        raise InternalError("Failed to calculate combined route", "CALCULATION_FAILED")

    return {
        **combined.to_dict(),
        "member_count": len(member_trips),
        "trips": [TripSummary.model_validate(t) for t in member_trips],
    }
