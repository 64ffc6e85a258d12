# app/core/codes.py
"""
Short random handles for users (userCode) and events (eventCode).

Codes are drawn from a 62-character alphanumeric alphabet and checked against
the owning table before use. The unique index on the column is the backstop
for two requests racing on the same code.
"""
import logging
import secrets
import string
from typing import Type

from tortoise import models

from app.config import settings
from app.core.errors import CodeGenerationError

logger = logging.getLogger("uvicorn.error")

CODE_ALPHABET = string.digits + string.ascii_uppercase + string.ascii_lowercase


def random_code(length: int | None = None) -> str:
    length = length or settings.code_length
    return "".join(secrets.choice(CODE_ALPHABET) for _ in range(length))


async def generate_unique_code(
    model: Type[models.Model],
    field: str,
    max_attempts: int | None = None,
) -> str:
    """
    Generate a code that no row of `model` currently holds in `field`.

    Args:
        model: Tortoise model owning the code column (User, Event)
        field: Column name, e.g. "user_code"
        max_attempts: Override for CODE_MAX_ATTEMPTS

    Raises:
        CodeGenerationError: Every attempt collided with an existing code
    """
    attempts = max_attempts or settings.code_max_attempts
    for attempt in range(1, attempts + 1):
        code = random_code()
        if not await model.filter(**{field: code}).exists():
            return code
        logger.warning("[codes] %s.%s collision on attempt %d", model.__name__, field, attempt)
    raise CodeGenerationError(f"Could not generate a unique {field} after {attempts} attempts")
