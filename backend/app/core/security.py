# app/core/security.py
"""
Security module for authentication.
Handles password hashing, JWT token creation/validation and session cookie lifetimes.
"""
import datetime as dt
import logging
import jwt  # PyJWT
from passlib.context import CryptContext

from app.config import settings
from app.core.errors import HashingError

logger = logging.getLogger("uvicorn.error")

# Password hashing context
# Argon2 only; the time cost (rounds) comes from PASSWORD_HASH_ROUNDS
pwd_context = CryptContext(
    schemes=["argon2"],
    deprecated="auto",
    argon2__default_rounds=settings.password_hash_rounds,
)

# JWT configuration
JWT_SECRET = settings.jwt_secret
JWT_EXPIRY_SECONDS = settings.jwt_expiry
JWT_PERSISTENT_EXPIRY_SECONDS = settings.jwt_persistent_expiry
JWT_ALG = "HS256"  # JWT signing algorithm (HMAC SHA-256)

def hash_password(plain: str) -> str:
    """
    Hash a plain text password using Argon2.

    Args:
        plain: Plain text password to hash

    Returns:
        Hashed password string (safe to store in database)

    Raises:
        HashingError: If the hashing backend fails
    """
    try:
        return pwd_context.hash(plain)
    except Exception as exc:
        logger.exception("[security] password hashing failed")
        raise HashingError("Error generating a password hash") from exc

def verify_password(plain: str, hashed: str) -> bool:
    """
    Verify a plain text password against a hashed password.

    Returns:
        True if password matches, False otherwise
    """
    return pwd_context.verify(plain, hashed)

def create_access_token(user_id: str, persistent: bool = False) -> str:
    """
    Create a signed JWT for a user.

    The user id is the only claim besides the expiry. "Stay logged in" sessions
    get the persistent expiry, everything else the short default.

    Args:
        user_id: Unique user identifier (UUID string)
        persistent: True when the user asked to stay logged in

    Returns:
        Encoded JWT token string
    """
    lifetime = JWT_PERSISTENT_EXPIRY_SECONDS if persistent else JWT_EXPIRY_SECONDS
    payload = {
        "id": user_id,
        "exp": dt.datetime.now(dt.timezone.utc) + dt.timedelta(seconds=lifetime),
    }
    token = jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALG)
    logger.info("[security] JWT created (persistent=%s)", persistent)
    return token

def decode_access_token(token: str) -> dict:
    """
    Decode and validate a JWT access token.

    Raises:
        jwt.ExpiredSignatureError: If token has expired
        jwt.InvalidTokenError: If token is invalid or malformed
    """
    return jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALG])

def session_max_age(persistent: bool = False) -> int:
    """Cookie max-age in seconds for the chosen session tier."""
    return settings.session_persistent_expiry if persistent else settings.session_expiry
