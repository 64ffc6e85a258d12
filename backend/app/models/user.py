# app/models/user.py
"""
Database model for users.
Represents an account with its credentials, confirmation state and the
lists it owns: events, availabilities and the two social edges.
"""
import uuid
from tortoise import fields, models

class User(models.Model):
    """
    User database model.

    Each list relation below has its own join table, so every side of a
    relationship is written independently (a user's `events` and an event's
    `participants` are two separate lists, same for `following`/`followers`).

    Lifecycle:
    - Created unconfirmed with `expiration_date` set; purged once that passes
    - Confirmation sets `confirmed` and clears `expiration_date`
    - Deletion goes through app.services.users.delete_user (cascade cleanup)

    Security:
    - Password is stored as an Argon2 hash, never in plain text
    - Email and user_code are unique across all users
    """
    id = fields.UUIDField(pk=True, default=uuid.uuid4)  # Primary key: unique user identifier
    username = fields.CharField(max_length=256)  # Display name, visible to users sharing an event
    email = fields.CharField(max_length=256, unique=True, index=True)  # Login identifier, never shown to other users
    password_hash = fields.CharField(max_length=255)  # Hashed password (argon2)
    user_code = fields.CharField(max_length=32, unique=True, index=True)  # Friend-add handle, also the confirmation code
    confirmed = fields.BooleanField(default=False)
    registration_date = fields.DatetimeField(auto_now_add=True)
    expiration_date = fields.DatetimeField(null=True, index=True)  # Purge deadline while unconfirmed, null once confirmed

    events: fields.ManyToManyRelation["Event"] = fields.ManyToManyField(
        "models.Event",
        related_name="listed_by",
        through="user_events",
        backward_key="user_id",
        forward_key="event_id",
    )
    availabilities: fields.ManyToManyRelation["Availability"] = fields.ManyToManyField(
        "models.Availability",
        related_name="owners",
        through="user_availabilities",
        backward_key="user_id",
        forward_key="availability_id",
    )
    following: fields.ManyToManyRelation["User"] = fields.ManyToManyField(
        "models.User",
        related_name="following_of",
        through="user_following",
        backward_key="user_id",
        forward_key="following_id",
    )
    followers: fields.ManyToManyRelation["User"] = fields.ManyToManyField(
        "models.User",
        related_name="followers_of",
        through="user_followers",
        backward_key="user_id",
        forward_key="follower_id",
    )

    class Meta:
        """Tortoise ORM metadata configuration."""
        table = "users"  # Database table name

    def confirm(self) -> None:
        """Mark the account confirmed and disarm the expiry."""
        self.confirmed = True
        self.expiration_date = None
