# app/schemas/availability.py
import datetime as dt
from pydantic import BaseModel
from typing import Optional

class AvailabilityIn(BaseModel):
    description: Optional[str] = None  # Required when creating, kept when omitted on update
    startDate: Optional[dt.datetime] = None
    endDate: Optional[dt.datetime] = None
    status: Optional[str] = None
    preference: Optional[int] = None  # Kept when omitted on update
