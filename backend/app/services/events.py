"""
Event lifecycle

Creation, membership (join by code / leave / kick), admin management and the
cascade that keeps users' `events` lists consistent when an event goes away.

Saving an event and deleting an empty one are separate steps: anything that
removes a participant calls reconcile_empty_event afterwards.
"""
import datetime as dt
import logging
import uuid
from typing import Optional

from tortoise.backends.base.client import BaseDBAsyncClient

from ..core.codes import generate_unique_code
from ..core.errors import (
    EventNotFoundError,
    ForbiddenError,
    InvalidDateRangeError,
    MissingFieldsError,
    UserNotFoundError,
)
from ..models.event import Event
from ..models.user import User

logger = logging.getLogger("uvicorn.error")


def as_aware(value: dt.datetime) -> dt.datetime:
    """Treat naive datetimes from clients as UTC so ranges compare safely."""
    if value.tzinfo is None:
        return value.replace(tzinfo=dt.timezone.utc)
    return value


def check_date_range(start_date: dt.datetime, end_date: dt.datetime) -> None:
    if as_aware(start_date) >= as_aware(end_date):
        raise InvalidDateRangeError("Start date must be before end date")


def unique_by_pk(*groups):
    seen = {}
    for group in groups:
        for item in group:
            seen.setdefault(item.pk, item)
    return list(seen.values())


def _is_uuid(value) -> bool:
    try:
        uuid.UUID(str(value))
    except ValueError:
        return False
    return True


async def get_event_or_404(event_id) -> Event:
    event = await Event.get_or_none(id=event_id) if _is_uuid(event_id) else None
    if not event:
        raise EventNotFoundError("Event not found")
    return event


async def is_participant(event: Event, user: User) -> bool:
    return await event.participants.filter(id=user.id).exists()


async def is_admin(event: Event, user: User) -> bool:
    return await event.admins.filter(id=user.id).exists()


async def is_locked(event: Event) -> bool:
    """An event is locked once it has at least one admin."""
    return await event.admins.all().exists()


async def can_edit_event(event: Event, user: User) -> bool:
    """
    Authorization policy for editing an event.

    Non-participants never edit. With no admins every participant may edit;
    otherwise only the listed admins may.
    """
    if not await is_participant(event, user):
        return False
    if not await is_locked(event):
        return True
    return await is_admin(event, user)


async def require_edit_rights(event: Event, user: User) -> None:
    if not await can_edit_event(event, user):
        raise ForbiddenError("You are not allowed to edit this event")


async def create_event(
    creator: User,
    name: Optional[str],
    description: Optional[str],
    start_date: Optional[dt.datetime],
    end_date: Optional[dt.datetime],
) -> Event:
    """
    Create an event with a fresh event code; the creator becomes its first participant.
    """
    name = (name or "").strip()
    if not name or not start_date or not end_date:
        raise MissingFieldsError('Missing required field(s): "name", "startDate" or "endDate"')
    check_date_range(start_date, end_date)

    event = await Event.create(
        name=name,
        description=description,
        start_date=as_aware(start_date),
        end_date=as_aware(end_date),
        event_code=await generate_unique_code(Event, "event_code"),
    )
    await event.participants.add(creator)
    await creator.events.add(event)
    logger.info("[events] event saved id=%s code=%s", event.id, event.event_code)
    return event


async def update_event(
    event: Event,
    actor: User,
    name: Optional[str] = None,
    description: Optional[str] = None,
    start_date: Optional[dt.datetime] = None,
    end_date: Optional[dt.datetime] = None,
) -> Event:
    await require_edit_rights(event, actor)

    new_start = as_aware(start_date) if start_date else event.start_date
    new_end = as_aware(end_date) if end_date else event.end_date
    check_date_range(new_start, new_end)

    if name is not None and name.strip():
        event.name = name.strip()
    if description is not None:
        event.description = description
    event.start_date = new_start
    event.end_date = new_end
    await event.save()
    logger.info("[events] event saved id=%s", event.id)
    return event


async def regenerate_event_code(event: Event, actor: User) -> str:
    await require_edit_rights(event, actor)
    event.event_code = await generate_unique_code(Event, "event_code")
    await event.save(update_fields=["event_code"])
    return event.event_code


async def join_event(user: User, event_code: str) -> Event:
    """
    Join an event by its code.

    The event's participants and the user's events are two separate writes.
    """
    event = await Event.get_or_none(event_code=event_code)
    if not event:
        raise EventNotFoundError("No event matches this code")
    await event.participants.add(user)
    await user.events.add(event)
    logger.info("[events] user %s joined event %s", user.id, event.id)
    return event


async def reconcile_empty_event(event: Event, using_db: Optional[BaseDBAsyncClient] = None) -> bool:
    """
    Delete the event if nobody participates in it any more.

    Returns:
    - bool: True if the event was deleted
    """
    if await event.participants.all().using_db(using_db).exists():
        return False
    logger.info("[events] event %s has no participants left, deleting", event.id)
    await delete_event(event, using_db=using_db)
    return True


async def remove_participant(
    event: Event,
    user: User,
    using_db: Optional[BaseDBAsyncClient] = None,
) -> bool:
    """
    Take a user out of an event (participants, admins and the user's own list),
    then reconcile emptiness.

    Returns:
    - bool: True if the event was deleted because it became empty
    """
    await event.participants.remove(user, using_db=using_db)
    await event.admins.remove(user, using_db=using_db)
    await user.events.remove(event, using_db=using_db)
    logger.info("[events] user %s removed from event %s", user.id, event.id)
    return await reconcile_empty_event(event, using_db=using_db)


async def kick_participant(event: Event, actor: User, target_id) -> bool:
    await require_edit_rights(event, actor)
    target = await event.participants.filter(id=target_id).first() if _is_uuid(target_id) else None
    if not target:
        raise UserNotFoundError("The user is not a participant of this event")
    return await remove_participant(event, target)


async def add_admin(event: Event, actor: User, target_id) -> None:
    await require_edit_rights(event, actor)
    target = await event.participants.filter(id=target_id).first() if _is_uuid(target_id) else None
    if not target:
        raise UserNotFoundError("Only participants can become admins")
    await event.admins.add(target)
    logger.info("[events] user %s is now admin of event %s", target.id, event.id)


async def remove_admin(event: Event, actor: User, target_id) -> None:
    await require_edit_rights(event, actor)
    target = await event.admins.filter(id=target_id).first() if _is_uuid(target_id) else None
    if not target:
        raise UserNotFoundError("The user is not an admin of this event")
    await event.admins.remove(target)
    logger.info("[events] user %s is no longer admin of event %s", target.id, event.id)


async def delete_event(event: Event, using_db: Optional[BaseDBAsyncClient] = None) -> None:
    """
    Delete an event and scrub it from every participant's `events` list.

    One write per participant, in sequence.
    """
    members = unique_by_pk(
        await event.participants.all().using_db(using_db),
        await event.listed_by.all().using_db(using_db),
    )
    for member in members:
        await member.events.remove(event, using_db=using_db)
        logger.info("[events] event %s removed from user %s", event.id, member.id)

    await event.participants.clear(using_db=using_db)
    await event.admins.clear(using_db=using_db)
    await event.delete(using_db=using_db)
    logger.info("[events] event removed id=%s", event.id)
