# app/config.py
import os
from pydantic import BaseModel
from dotenv import load_dotenv

load_dotenv()  # Load environment variables from .env file


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in ("true", "1", "yes")


class Settings(BaseModel):
    # General app settings
    APP_NAME: str = "Group Scheduler API"
    env: str = os.getenv("ENV", "dev")

    # Host & Port settings
    host: str = os.getenv("HOST", "0.0.0.0")
    port: int = int(os.getenv("PORT", "8000"))

    # CORS origins for frontend
    CORS_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    # Tokens & sessions (all durations in seconds)
    jwt_secret: str = os.getenv("JWT_SECRET", "dev-secret")  # Use a strong secret in production
    jwt_expiry: int = int(os.getenv("JWT_EXPIRY_SECONDS", "3600"))
    jwt_persistent_expiry: int = int(os.getenv("JWT_PERSISTENT_EXPIRY_SECONDS", str(30 * 24 * 3600)))
    session_expiry: int = int(os.getenv("SESSION_EXPIRY_SECONDS", "3600"))
    session_persistent_expiry: int = int(os.getenv("SESSION_PERSISTENT_EXPIRY_SECONDS", str(30 * 24 * 3600)))
    cookie_secure: bool = _env_flag("COOKIE_SECURE")

    # Passwords
    password_hash_rounds: int = int(os.getenv("PASSWORD_HASH_ROUNDS", "3"))  # Argon2 time cost
    min_password_length: int = int(os.getenv("MIN_PASSWORD_LENGTH", "4"))

    # Unconfirmed accounts are purged after this many seconds
    unconfirmed_user_expiry: int = int(os.getenv("UNCONFIRMED_USER_EXPIRY_SECONDS", "86400"))
    user_purge_interval: int = int(os.getenv("USER_PURGE_INTERVAL_SECONDS", "600"))

    # userCode / eventCode generation
    code_length: int = int(os.getenv("CODE_LENGTH", "10"))
    code_max_attempts: int = int(os.getenv("CODE_MAX_ATTEMPTS", "10"))

    # Follow flow: false keeps the legacy behaviour (both sides' `following` updated,
    # `followers` untouched); true writes the target's `followers` instead.
    follow_maintains_followers: bool = _env_flag("FOLLOW_MAINTAINS_FOLLOWERS")

    # Frontend used in confirmation links
    frontend_domain: str = os.getenv("FRONTEND_DOMAIN", "localhost")
    frontend_port: int = int(os.getenv("FRONTEND_PORT", "3000"))

    # SMTP settings for confirmation emails
    email_host: str | None = os.getenv("EMAIL_HOST")
    email_port: int = int(os.getenv("EMAIL_PORT", "465"))
    email_user: str | None = os.getenv("EMAIL_USER")
    email_pass: str | None = os.getenv("EMAIL_PASS")
    mail_from: str = os.getenv("MAIL_FROM", "no-reply@group-scheduler.local")

settings = Settings()  # Instantiate configuration
