"""
Availability records

Create-or-update keyed by the client's identifier, plus listing. Records are
stored as given: no range check, no overlap detection.
"""
import datetime as dt
import logging
from typing import List, Optional, Tuple

from ..core.errors import ForbiddenError, MissingFieldsError
from ..models.availability import Availability
from ..models.user import User

logger = logging.getLogger("uvicorn.error")


async def upsert_availability(
    user: User,
    availability_id: Optional[str],
    description: Optional[str],
    start_date: Optional[dt.datetime],
    end_date: Optional[dt.datetime],
    status: Optional[str],
    preference: Optional[int] = None,
) -> Tuple[Availability, bool]:
    """
    Create or update one of the user's availabilities.

    Returns:
    - (Availability, bool): the saved record and whether it was created

    Note:
    - Omitted description/preference keep their stored values on update
    - A record owned by another user cannot be overwritten
    """
    if not availability_id or not start_date or not end_date or not status:
        raise MissingFieldsError(
            'Missing required field(s): "availabilityId", "startDate", "endDate" or "status"'
        )

    existing = await Availability.get_or_none(id=availability_id)
    if existing:
        if not await user.availabilities.filter(id=availability_id).exists():
            raise ForbiddenError("This availability belongs to another user")
        existing.description = description or existing.description
        existing.start_date = start_date
        existing.end_date = end_date
        existing.status = status
        existing.preference = preference if preference is not None else existing.preference
        await existing.save()
        logger.info("[availabilities] updated %s for user %s", existing.id, user.id)
        return existing, False

    if not description:
        raise MissingFieldsError('Missing required field: "description"')

    record = await Availability.create(
        id=availability_id,
        description=description,
        start_date=start_date,
        end_date=end_date,
        status=status,
        preference=preference,
    )
    await user.availabilities.add(record)
    logger.info("[availabilities] created %s for user %s", record.id, user.id)
    return record, True


async def list_availabilities(user: User) -> List[Availability]:
    return await user.availabilities.all().order_by("start_date")
