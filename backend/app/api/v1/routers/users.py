# app/api/v1/routers/users.py
from fastapi import APIRouter, Depends, Response, status
from app.api.v1.deps import get_current_user
from app.config import settings
from app.core.security import create_access_token, session_max_age
from app.models.user import User
from app.schemas.user import LoginIn, RegisterIn, UpdateUserIn
from app.services import availabilities as availability_service
from app.services import users as user_service
from app.api.v1.routers.events import event_to_dict
from app.api.v1.routers.availabilities import availability_to_dict

router = APIRouter(prefix="/users", tags=["users"])

def _iso(value):
    return value.isoformat() if value else None

def public_user(u: User) -> dict:
    """What other users get to see: id and display name only."""
    return {"id": str(u.id), "username": u.username}

async def _ids(relation) -> list[str]:
    return [str(pk) for pk in await relation.all().values_list("id", flat=True)]

async def user_to_dict(u: User) -> dict:
    """
    Convert a User into the full profile returned to its owner.
    Related lists are returned as id arrays.
    """
    return {
        "id": str(u.id),
        "username": u.username,
        "email": u.email,
        "userCode": u.user_code,
        "confirmed": u.confirmed,
        "registrationDate": _iso(u.registration_date),
        "expirationDate": _iso(u.expiration_date),
        "events": await _ids(u.events),
        "availabilities": await _ids(u.availabilities),
        "following": await _ids(u.following),
        "followers": await _ids(u.followers),
    }

@router.post("", status_code=status.HTTP_201_CREATED)
async def register(body: RegisterIn):
    """
    Register a new account.

    Creates an unconfirmed user and emails a confirmation link embedding its
    userCode. The account is deleted if not confirmed in time.

    Error codes:
        - MISSING_FIELDS / INVALID_EMAIL / INVALID_PASSWORD: Bad input (400)
        - USER_NOT_CONFIRMED: Email registered but unconfirmed, link re-sent (403)
        - EMAIL_EXISTS: Email belongs to a confirmed account (409)
    """
    await user_service.register_user(body.username, body.email, body.password, body.confirmPassword)
    hours = settings.unconfirmed_user_expiry // 3600
    return {
        "success": True,
        "message": (
            "Registration successful! Please check your email to confirm your account "
            f"within {hours} hours or your account will be deleted."
        ),
    }

@router.get("/confirm/{userCode}")
async def confirm(userCode: str):
    """
    Confirm an account through the code sent by email.

    Error codes:
        - INVALID_CONFIRMATION_CODE: No user with this code (400)
        - USER_ALREADY_CONFIRMED: Code was already used (409)
    """
    await user_service.confirm_user(userCode)
    return {"success": True, "message": "Confirmation successful! Your account has been activated."}

@router.post("/session")
async def login(body: LoginIn, response: Response):
    """
    Authenticate with email and password.

    Issues a JWT carrying the user id. The token is returned in the body and
    set as an HttpOnly "accessToken" cookie whose max-age depends on
    stayLoggedIn (short default vs persistent).

    Raises:
        INVALID_CREDENTIALS (401): Unknown email or wrong password, no cookie is set
        USER_NOT_CONFIRMED (403): Account not confirmed yet
    """
    user = await user_service.authenticate(body.email, body.password)
    token = create_access_token(str(user.id), persistent=body.stayLoggedIn)
    max_age = session_max_age(body.stayLoggedIn)
    response.set_cookie(
        "accessToken", token,
        max_age=max_age, httponly=True, secure=settings.cookie_secure, samesite="lax",
    )
    return {"success": True, "data": {"auth": True, "user": public_user(user),
                                      "accessToken": token, "expiresIn": max_age}}

@router.delete("/session")
async def logout(response: Response):
    """
    Log out by clearing the session cookie.

    Note:
        The JWT itself stays valid until it expires.
    """
    response.delete_cookie("accessToken")
    return {"success": True, "message": "Logged out successfully"}

@router.get("/me")
async def me(user: User = Depends(get_current_user)):
    return {"success": True, "data": await user_to_dict(user)}

@router.patch("/me")
async def update_me(body: UpdateUserIn, user: User = Depends(get_current_user)):
    """
    Update the username and/or password.

    A new password is only accepted together with the correct old password.
    """
    user = await user_service.update_profile(user, body.newUsername, body.newPassword, body.oldPassword)
    return {"success": True, "data": await user_to_dict(user)}

@router.delete("/me")
async def delete_me(response: Response, user: User = Depends(get_current_user)):
    """
    Delete the account.

    Removes the user from followers' lists and events (empty events are
    deleted), deletes owned availabilities, then the user, and clears the cookie.
    """
    user_id = str(user.id)
    await user_service.delete_user(user)
    response.delete_cookie("accessToken")
    return {"success": True, "data": {"id": user_id, "deleted": True}}

@router.get("/events")
async def my_events(user: User = Depends(get_current_user)):
    rows = await user.events.all().order_by("start_date")
    return {"success": True, "data": [await event_to_dict(e) for e in rows]}

@router.get("/availabilities")
async def my_availabilities(user: User = Depends(get_current_user)):
    rows = await availability_service.list_availabilities(user)
    return {"success": True, "data": [availability_to_dict(a) for a in rows]}

@router.post("/code")
async def new_code(user: User = Depends(get_current_user)):
    """Regenerate the user's friend-add code."""
    code = await user_service.regenerate_user_code(user)
    return {"success": True, "data": {"userCode": code}}

@router.post("/follow/code/{userCode}")
async def follow_by_code(userCode: str, user: User = Depends(get_current_user)):
    target = await user_service.follow_by_code(user, userCode)
    return {"success": True, "data": public_user(target)}

@router.post("/follow/{userId}")
async def follow(userId: str, user: User = Depends(get_current_user)):
    """
    Follow another user.

    Error codes:
        - USER_NOT_FOUND (404)
        - CANNOT_FOLLOW_SELF (400)
    """
    target = await user_service.follow_user(user, userId)
    return {"success": True, "data": public_user(target)}

@router.delete("/follow/{userId}")
async def unfollow(userId: str, user: User = Depends(get_current_user)):
    target = await user_service.unfollow_user(user, userId)
    return {"success": True, "data": public_user(target)}
