"""
Integration tests for /api/v1/users: registration, confirmation, sessions and profile.
"""
import pytest

from app.config import settings
from app.models.user import User


pytestmark = pytest.mark.asyncio

USERS = "/api/v1/users"


def _register_body(email="new@example.com", password="pass", confirm=None, username="newbie"):
    return {
        "username": username,
        "email": email,
        "password": password,
        "confirmPassword": password if confirm is None else confirm,
    }


async def test_register_creates_unconfirmed_user(client, sent_emails):
    resp = await client.post(USERS, json=_register_body())
    assert resp.status_code == 201
    body = resp.json()
    assert body["success"] is True
    assert "confirm" in body["message"]

    user = await User.get(email="new@example.com")
    assert user.confirmed is False
    assert user.password_hash != "pass"
    assert user.expiration_date is not None
    sent_emails.assert_called_once()


async def test_register_twice_unconfirmed_resends_link(client, sent_emails):
    await client.post(USERS, json=_register_body())
    resp = await client.post(USERS, json=_register_body())

    assert resp.status_code == 403
    assert resp.json()["error"]["code"] == "USER_NOT_CONFIRMED"
    assert await User.filter(email="new@example.com").count() == 1
    assert sent_emails.call_count == 2


async def test_register_confirmed_email_conflicts(client, create_user):
    user, _ = await create_user()
    resp = await client.post(USERS, json=_register_body(email=user.email))
    assert resp.status_code == 409
    assert resp.json()["error"]["code"] == "EMAIL_EXISTS"


@pytest.mark.parametrize(
    "body, code",
    [
        ({"email": "x@example.com", "password": "pass"}, "MISSING_FIELDS"),
        (_register_body(email="bad-email"), "INVALID_EMAIL"),
        (_register_body(confirm="other"), "INVALID_PASSWORD"),
    ],
)
async def test_register_rejects_bad_input(client, body, code):
    resp = await client.post(USERS, json=body)
    assert resp.status_code == 400
    assert resp.json()["success"] is False
    assert resp.json()["error"]["code"] == code
    assert await User.all().count() == 0


async def test_confirm_flow(client):
    await client.post(USERS, json=_register_body())
    user = await User.get(email="new@example.com")

    resp = await client.get(f"{USERS}/confirm/{user.user_code}")
    assert resp.status_code == 200
    await user.refresh_from_db()
    assert user.confirmed is True
    assert user.expiration_date is None

    again = await client.get(f"{USERS}/confirm/{user.user_code}")
    assert again.status_code == 409
    assert again.json()["error"]["code"] == "USER_ALREADY_CONFIRMED"

    unknown = await client.get(f"{USERS}/confirm/doesnotexist")
    assert unknown.status_code == 400
    assert unknown.json()["error"]["code"] == "INVALID_CONFIRMATION_CODE"


async def test_login_sets_cookie_with_tiered_max_age(client, create_user):
    user, password = await create_user()

    short = await client.post(f"{USERS}/session", json={"email": user.email, "password": password})
    assert short.status_code == 200
    data = short.json()["data"]
    assert data["auth"] is True
    assert data["user"] == {"id": str(user.id), "username": user.username}
    assert data["expiresIn"] == settings.session_expiry
    assert "accessToken" in short.headers["set-cookie"]
    assert f"Max-Age={settings.session_expiry}" in short.headers["set-cookie"]

    long = await client.post(
        f"{USERS}/session",
        json={"email": user.email, "password": password, "stayLoggedIn": True},
    )
    assert long.json()["data"]["expiresIn"] == settings.session_persistent_expiry
    assert long.json()["data"]["expiresIn"] > data["expiresIn"]


async def test_login_wrong_password_sets_no_cookie(client, create_user):
    user, _ = await create_user()
    resp = await client.post(f"{USERS}/session", json={"email": user.email, "password": "nope"})
    assert resp.status_code == 401
    assert resp.json()["error"]["code"] == "INVALID_CREDENTIALS"
    assert "set-cookie" not in resp.headers


async def test_login_unconfirmed_is_rejected(client, create_user):
    user, password = await create_user(confirmed=False)
    resp = await client.post(f"{USERS}/session", json={"email": user.email, "password": password})
    assert resp.status_code == 403
    assert resp.json()["error"]["code"] == "USER_NOT_CONFIRMED"


async def test_cookie_authenticates_requests(client, create_user):
    user, password = await create_user()
    resp = await client.post(f"{USERS}/session", json={"email": user.email, "password": password})
    token = resp.json()["data"]["accessToken"]

    client.cookies.set("accessToken", token)
    me = await client.get(f"{USERS}/me")
    assert me.status_code == 200
    assert me.json()["data"]["id"] == str(user.id)


async def test_me_requires_auth(client, db):
    resp = await client.get(f"{USERS}/me")
    assert resp.status_code == 401

    bad = await client.get(f"{USERS}/me", headers={"Authorization": "Bearer garbage"})
    assert bad.status_code == 401


async def test_me_returns_full_profile(client, logged_in):
    user, headers = await logged_in()
    resp = await client.get(f"{USERS}/me", headers=headers)
    data = resp.json()["data"]
    assert data["email"] == user.email
    assert data["userCode"] == user.user_code
    assert data["events"] == []
    assert data["following"] == []
    assert "password_hash" not in data and "passwordHash" not in data


async def test_update_me(client, logged_in, auth_header_factory):
    user, headers = await logged_in(password="oldpass")

    resp = await client.patch(
        f"{USERS}/me",
        json={"newUsername": "fresh", "newPassword": "newpass", "oldPassword": "oldpass"},
        headers=headers,
    )
    assert resp.status_code == 200
    assert resp.json()["data"]["username"] == "fresh"

    # the new password works, the old one does not
    await auth_header_factory(user.email, "newpass")
    old = await client.post(f"{USERS}/session", json={"email": user.email, "password": "oldpass"})
    assert old.status_code == 401


async def test_update_me_wrong_old_password(client, logged_in):
    _, headers = await logged_in()
    resp = await client.patch(
        f"{USERS}/me", json={"newPassword": "newpass", "oldPassword": "wrong"}, headers=headers
    )
    assert resp.status_code == 401


async def test_regenerate_code(client, logged_in):
    user, headers = await logged_in()
    resp = await client.post(f"{USERS}/code", headers=headers)
    assert resp.status_code == 200
    new_code = resp.json()["data"]["userCode"]
    assert new_code != user.user_code
    assert (await User.get(id=user.id)).user_code == new_code


async def test_delete_me(client, logged_in):
    user, headers = await logged_in()
    resp = await client.delete(f"{USERS}/me", headers=headers)
    assert resp.status_code == 200
    assert resp.json()["data"] == {"id": str(user.id), "deleted": True}
    assert not await User.exists(id=user.id)

    gone = await client.get(f"{USERS}/me", headers=headers)
    assert gone.status_code == 401


async def test_logout_clears_cookie(client, db):
    resp = await client.delete(f"{USERS}/session")
    assert resp.status_code == 200
    assert "accessToken" in resp.headers["set-cookie"]
