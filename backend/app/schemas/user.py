# app/schemas/user.py
"""
Pydantic schemas for user endpoints.
Fields are optional on purpose: missing values are reported by the service
layer as MISSING_FIELDS instead of a generic validation error.
"""
from pydantic import BaseModel
from typing import Optional

class RegisterIn(BaseModel):
    """
    Request model for registration.
    """
    username: Optional[str] = None  # Display name
    email: Optional[str] = None  # Login email, must be unique
    password: Optional[str] = None  # Plain text, hashed server-side
    confirmPassword: Optional[str] = None  # Must equal password

class LoginIn(BaseModel):
    """
    Request model for login.
    """
    email: Optional[str] = None
    password: Optional[str] = None
    stayLoggedIn: bool = False  # True -> persistent session & token expiry

class UpdateUserIn(BaseModel):
    """
    Request model for profile updates.
    A password change needs both newPassword and oldPassword.
    """
    newUsername: Optional[str] = None
    newPassword: Optional[str] = None
    oldPassword: Optional[str] = None
