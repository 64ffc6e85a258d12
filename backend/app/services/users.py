"""
User lifecycle

Registration and confirmation, login, profile updates, the follow graph and
the explicit delete-user cascade that replaces storage-level hooks.
"""
import asyncio
import datetime as dt
import logging
import uuid
from typing import Optional

from email_validator import EmailNotValidError, validate_email
from tortoise import timezone
from tortoise.transactions import in_transaction

from ..config import settings
from ..core.codes import generate_unique_code
from ..core.errors import (
    CannotFollowSelfError,
    EmailAlreadyExistsError,
    InvalidConfirmationCodeError,
    InvalidCredentialsError,
    InvalidEmailError,
    InvalidPasswordError,
    MissingFieldsError,
    UserAlreadyConfirmedError,
    UserNotConfirmedError,
    UserNotFoundError,
)
from ..core.security import hash_password, verify_password
from ..models.availability import Availability
from ..models.user import User
from . import events as event_service
from .mailer import send_confirmation_email

logger = logging.getLogger("uvicorn.error")


def normalize_email(email: str) -> str:
    try:
        return validate_email(email.strip(), check_deliverability=False).normalized
    except EmailNotValidError as exc:
        raise InvalidEmailError("Invalid email format") from exc


def is_expired(user: User) -> bool:
    return (
        not user.confirmed
        and user.expiration_date is not None
        and user.expiration_date <= timezone.now()
    )


def _check_password(password: str) -> None:
    if len(str(password)) < settings.min_password_length:
        raise InvalidPasswordError(
            f"Password must be at least {settings.min_password_length} characters"
        )


async def get_user_or_404(user_id) -> User:
    try:
        uuid.UUID(str(user_id))
    except ValueError:
        raise UserNotFoundError("User not found") from None
    user = await User.get_or_none(id=user_id)
    if not user:
        raise UserNotFoundError("User not found")
    return user


def build_confirmation_link(user_code: str) -> str:
    if settings.env == "production":
        return f"http://{settings.frontend_domain}/confirm?userCode={user_code}"
    return f"http://{settings.frontend_domain}:{settings.frontend_port}/confirm?userCode={user_code}"


# Confirmation mails still being delivered
_mail_tasks: set[asyncio.Task] = set()


def _send_confirmation(user: User) -> asyncio.Task:
    link = build_confirmation_link(user.user_code)
    logger.info("[users] confirmation link for %s: %s", user.id, link)
    task = asyncio.create_task(send_confirmation_email(user.email, link))
    _mail_tasks.add(task)
    task.add_done_callback(_mail_tasks.discard)
    return task


# ---------------------------------------------------------------------------
# Registration & confirmation
# ---------------------------------------------------------------------------
async def create_user(username: str, email: str, password: str) -> User:
    """
    Persist a new unconfirmed user: password hashed, user code generated,
    expiry armed.
    """
    user = await User.create(
        username=username,
        email=email,
        password_hash=hash_password(password),
        user_code=await generate_unique_code(User, "user_code"),
        confirmed=False,
        expiration_date=timezone.now() + dt.timedelta(seconds=settings.unconfirmed_user_expiry),
    )
    logger.info("[users] user saved id=%s", user.id)
    return user


async def register_user(
    username: Optional[str],
    email: Optional[str],
    password: Optional[str],
    confirm_password: Optional[str],
) -> User:
    """
    Register a new account and send its confirmation link.

    Flow:
    1. Validate input (missing fields, email format, password match and length)
    2. Unknown email -> create user, send link
    3. Known but unconfirmed -> resend link, raise UserNotConfirmedError
       (an expired leftover is deleted and registration starts over)
    4. Known and confirmed -> EmailAlreadyExistsError
    """
    if not username or not email or not password or not confirm_password:
        raise MissingFieldsError("Missing Username, Email, Password and/or Confirm Password")
    email = normalize_email(email)
    if password != confirm_password:
        raise InvalidPasswordError("Password and Confirm Password don't match")
    _check_password(password)

    existing = await User.get_or_none(email=email)
    if existing and is_expired(existing):
        logger.info("[users] replacing expired unconfirmed user %s", existing.id)
        await delete_user(existing)
        existing = None

    if existing:
        if not existing.confirmed:
            _send_confirmation(existing)
            raise UserNotConfirmedError(
                "Email already exists but is not confirmed. "
                "Please follow the link sent to your email inbox"
            )
        raise EmailAlreadyExistsError("Email already exists, please sign in instead")

    user = await create_user(username, email, password)
    _send_confirmation(user)
    return user


async def confirm_user(user_code: Optional[str]) -> User:
    if not user_code:
        raise MissingFieldsError("Confirmation code missing")
    user = await User.get_or_none(user_code=user_code)
    if not user:
        raise InvalidConfirmationCodeError("Invalid confirmation code")
    if user.confirmed:
        raise UserAlreadyConfirmedError("User has already been confirmed")
    if is_expired(user):
        logger.info("[users] confirmation for expired user %s, removing it", user.id)
        await delete_user(user)
        raise InvalidConfirmationCodeError("Confirmation link has expired, please register again")

    user.confirm()
    await user.save(update_fields=["confirmed", "expiration_date"])
    logger.info("[users] user confirmed id=%s", user.id)
    return user


# ---------------------------------------------------------------------------
# Login & profile
# ---------------------------------------------------------------------------
async def authenticate(email: Optional[str], password: Optional[str]) -> User:
    if not email and not password:
        raise MissingFieldsError("Missing Email and Password")
    if not email:
        raise MissingFieldsError("Missing Email")
    if not password:
        raise MissingFieldsError("Missing Password")

    try:
        email = normalize_email(email)
    except InvalidEmailError:
        raise InvalidCredentialsError("Incorrect email or password") from None

    user = await User.get_or_none(email=email)
    if not user or not verify_password(password, user.password_hash):
        raise InvalidCredentialsError("Incorrect email or password")
    if not user.confirmed:
        raise UserNotConfirmedError("Please confirm your email before signing in")
    return user


async def regenerate_user_code(user: User) -> str:
    user.user_code = await generate_unique_code(User, "user_code")
    await user.save(update_fields=["user_code"])
    logger.info("[users] new user code for %s", user.id)
    return user.user_code


async def update_profile(
    user: User,
    new_username: Optional[str] = None,
    new_password: Optional[str] = None,
    old_password: Optional[str] = None,
) -> User:
    """
    Change username (unconditional) and/or password (requires the old password).
    """
    if new_password or old_password:
        if not (new_password and old_password):
            raise MissingFieldsError("Changing the password requires both the old and the new password")
        if not verify_password(old_password, user.password_hash):
            raise InvalidCredentialsError("Old password is incorrect")
        _check_password(new_password)
        user.password_hash = hash_password(new_password)

    if new_username:
        user.username = new_username

    await user.save()
    logger.info("[users] user saved id=%s", user.id)
    return user


# ---------------------------------------------------------------------------
# Follow graph
# ---------------------------------------------------------------------------
async def _follow_target(user: User, target_id) -> User:
    target = await get_user_or_404(target_id)
    if target.id == user.id:
        raise CannotFollowSelfError("User can't follow or un-follow themselves")
    return target


async def follow_user(user: User, target_id) -> User:
    """
    Follow another user.

    Legacy mode (default) pushes each side into the other's `following`;
    with FOLLOW_MAINTAINS_FOLLOWERS the follower lands in the target's
    `followers`. Either way these are two independent writes.
    """
    target = await _follow_target(user, target_id)
    await user.following.add(target)
    if settings.follow_maintains_followers:
        await target.followers.add(user)
    else:
        await target.following.add(user)
    logger.info("[users] %s follows %s", user.id, target.id)
    return target


async def unfollow_user(user: User, target_id) -> User:
    target = await _follow_target(user, target_id)
    await user.following.remove(target)
    if settings.follow_maintains_followers:
        await target.followers.remove(user)
    else:
        await target.following.remove(user)
    logger.info("[users] %s unfollowed %s", user.id, target.id)
    return target


async def follow_by_code(user: User, user_code: str) -> User:
    target = await User.get_or_none(user_code=user_code)
    if not target:
        raise UserNotFoundError("No user matches this code")
    return await follow_user(user, target.id)


# ---------------------------------------------------------------------------
# Deletion
# ---------------------------------------------------------------------------
async def delete_user(user: User) -> None:
    """
    Delete a user and clean every back-reference, in order:

    1. Remove the user from the `following` list of each follower
    2. Remove the user from the `followers` list of each followed user
    3. Leave every event (participants/admins); events left empty are deleted
    4. Delete the availabilities the user owns
    5. Delete the user

    Runs in one transaction; a failure propagates and nothing is committed.
    """
    async with in_transaction() as conn:
        followers = event_service.unique_by_pk(
            await user.followers.all().using_db(conn),
            await user.following_of.all().using_db(conn),
        )
        for follower in followers:
            await follower.following.remove(user, using_db=conn)
            logger.info("[users] user %s removed from following of %s", user.id, follower.id)

        followed = event_service.unique_by_pk(
            await user.following.all().using_db(conn),
            await user.followers_of.all().using_db(conn),
        )
        for other in followed:
            await other.followers.remove(user, using_db=conn)

        events = event_service.unique_by_pk(
            await user.events.all().using_db(conn),
            await user.participating_in.all().using_db(conn),
        )
        for event in events:
            await event_service.remove_participant(event, user, using_db=conn)

        owned_ids = await user.availabilities.all().using_db(conn).values_list("id", flat=True)
        await user.availabilities.clear(using_db=conn)
        if owned_ids:
            await Availability.filter(id__in=owned_ids).using_db(conn).delete()

        await user.following.clear(using_db=conn)
        await user.followers.clear(using_db=conn)
        await user.delete(using_db=conn)
    logger.info("[users] user removed id=%s", user.id)


async def purge_expired_users() -> int:
    """
    Delete unconfirmed users whose expiration date has passed.

    A user whose deletion fails is logged and skipped; the next run retries it.

    Returns:
    - int: Number of users removed
    """
    expired = await User.filter(confirmed=False, expiration_date__lte=timezone.now())
    removed = 0
    for user in expired:
        try:
            await delete_user(user)
        except Exception:
            logger.exception("[users] failed to purge expired user %s", user.id)
            continue
        removed += 1
    if removed:
        logger.info("[users] purged %d expired unconfirmed user(s)", removed)
    return removed
