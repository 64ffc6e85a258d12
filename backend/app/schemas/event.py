# app/schemas/event.py
"""
Pydantic schemas for event endpoints.
"""
import datetime as dt
from pydantic import BaseModel
from typing import Optional

class CreateEventIn(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    startDate: Optional[dt.datetime] = None  # Must be before endDate
    endDate: Optional[dt.datetime] = None

class UpdateEventIn(BaseModel):
    """All fields optional; only provided fields change."""
    name: Optional[str] = None
    description: Optional[str] = None
    startDate: Optional[dt.datetime] = None
    endDate: Optional[dt.datetime] = None
