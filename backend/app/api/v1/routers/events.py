# app/api/v1/routers/events.py
from fastapi import APIRouter, Depends, status
from app.api.v1.deps import get_current_user
from app.core.errors import ForbiddenError
from app.models.event import Event
from app.models.user import User
from app.schemas.event import CreateEventIn, UpdateEventIn
from app.services import events as event_service

router = APIRouter(prefix="/events", tags=["events"])

async def event_to_dict(e: Event) -> dict:
    """
    Convert an Event into its API representation.
    An empty admins list means every participant can edit.
    """
    return {
        "id": str(e.id),
        "name": e.name,
        "description": e.description,
        "startDate": e.start_date.isoformat(),
        "endDate": e.end_date.isoformat(),
        "eventCode": e.event_code,
        "participants": [str(pk) for pk in await e.participants.all().values_list("id", flat=True)],
        "admins": [str(pk) for pk in await e.admins.all().values_list("id", flat=True)],
    }

async def _member_event(event_id: str, user: User) -> Event:
    """Load an event the user participates in; others get 403."""
    event = await event_service.get_event_or_404(event_id)
    if not await event_service.is_participant(event, user):
        raise ForbiddenError("You are not a participant of this event")
    return event

@router.post("", status_code=status.HTTP_201_CREATED)
async def create_event(body: CreateEventIn, user: User = Depends(get_current_user)):
    """
    Create an event; the caller becomes its first participant.

    Error codes:
        - MISSING_FIELDS: name/startDate/endDate missing (400)
        - INVALID_DATE_RANGE: startDate not before endDate (400)
    """
    event = await event_service.create_event(user, body.name, body.description, body.startDate, body.endDate)
    return {"success": True, "data": await event_to_dict(event)}

@router.post("/join/{eventCode}")
async def join_event(eventCode: str, user: User = Depends(get_current_user)):
    event = await event_service.join_event(user, eventCode)
    return {"success": True, "data": await event_to_dict(event)}

@router.get("/{eventId}")
async def get_event(eventId: str, user: User = Depends(get_current_user)):
    event = await _member_event(eventId, user)
    data = await event_to_dict(event)
    data["canEdit"] = await event_service.can_edit_event(event, user)
    return {"success": True, "data": data}

@router.patch("/{eventId}")
async def update_event(eventId: str, body: UpdateEventIn, user: User = Depends(get_current_user)):
    event = await event_service.get_event_or_404(eventId)
    event = await event_service.update_event(
        event, user,
        name=body.name, description=body.description,
        start_date=body.startDate, end_date=body.endDate,
    )
    return {"success": True, "data": await event_to_dict(event)}

@router.delete("/{eventId}")
async def delete_event(eventId: str, user: User = Depends(get_current_user)):
    """
    Delete an event (edit rights required). It disappears from every
    participant's event list.
    """
    event = await event_service.get_event_or_404(eventId)
    await event_service.require_edit_rights(event, user)
    await event_service.delete_event(event)
    return {"success": True, "data": {"id": eventId, "deleted": True}}

@router.post("/{eventId}/code")
async def new_event_code(eventId: str, user: User = Depends(get_current_user)):
    event = await event_service.get_event_or_404(eventId)
    code = await event_service.regenerate_event_code(event, user)
    return {"success": True, "data": {"eventCode": code}}

@router.delete("/{eventId}/participants/me")
async def leave_event(eventId: str, user: User = Depends(get_current_user)):
    """
    Leave an event. The last participant leaving deletes the event.
    """
    event = await _member_event(eventId, user)
    deleted = await event_service.remove_participant(event, user)
    return {"success": True, "data": {"id": eventId, "eventDeleted": deleted}}

@router.delete("/{eventId}/participants/{userId}")
async def kick_participant(eventId: str, userId: str, user: User = Depends(get_current_user)):
    event = await event_service.get_event_or_404(eventId)
    deleted = await event_service.kick_participant(event, user, userId)
    return {"success": True, "data": {"id": eventId, "eventDeleted": deleted}}

@router.post("/{eventId}/admins/{userId}")
async def add_admin(eventId: str, userId: str, user: User = Depends(get_current_user)):
    event = await event_service.get_event_or_404(eventId)
    await event_service.add_admin(event, user, userId)
    return {"success": True, "data": await event_to_dict(event)}

@router.delete("/{eventId}/admins/{userId}")
async def remove_admin(eventId: str, userId: str, user: User = Depends(get_current_user)):
    event = await event_service.get_event_or_404(eventId)
    await event_service.remove_admin(event, user, userId)
    return {"success": True, "data": await event_to_dict(event)}
