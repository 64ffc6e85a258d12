# app/models/__init__.py
"""
Database models module initialization.
Exports all database models for convenient imports throughout the application.

Models exported:
- User: Account, confirmation state and social edges
- Event: Shared event with participants, admins and a join code
- Availability: Time range + status record owned by a user
"""
from .user import User
from .event import Event
from .availability import Availability
