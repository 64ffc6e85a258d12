# app/api/v1/routers/availabilities.py
from fastapi import APIRouter, Depends, Response, status
from app.api.v1.deps import get_current_user
from app.models.availability import Availability
from app.models.user import User
from app.schemas.availability import AvailabilityIn
from app.services import availabilities as availability_service

router = APIRouter(prefix="/availabilities", tags=["availabilities"])

def availability_to_dict(a: Availability) -> dict:
    return {
        "id": a.id,
        "description": a.description,
        "startDate": a.start_date.isoformat(),
        "endDate": a.end_date.isoformat(),
        "status": a.status,
        "preference": a.preference,
    }

@router.put("/{availabilityId}")
async def put_availability(
    availabilityId: str,
    body: AvailabilityIn,
    response: Response,
    user: User = Depends(get_current_user),
):
    """
    Create or update an availability under a client-chosen id.

    Returns 201 when the record is new, 200 when an existing one was updated.
    Omitted description/preference keep their stored values.

    Error codes:
        - MISSING_FIELDS: startDate/endDate/status (or description on create) missing (400)
        - FORBIDDEN: The id belongs to another user's availability (403)
    """
    record, created = await availability_service.upsert_availability(
        user,
        availabilityId,
        description=body.description,
        start_date=body.startDate,
        end_date=body.endDate,
        status=body.status,
        preference=body.preference,
    )
    response.status_code = status.HTTP_201_CREATED if created else status.HTTP_200_OK
    return {"success": True, "data": availability_to_dict(record)}

@router.get("")
async def list_availabilities(user: User = Depends(get_current_user)):
    rows = await availability_service.list_availabilities(user)
    return {"success": True, "data": [availability_to_dict(a) for a in rows]}
