# app/models/event.py
"""
Database model for events.
An event is a named date range shared by its participants and joined
through its event code.
"""
import uuid
from tortoise import fields, models

class Event(models.Model):
    """
    Event database model.

    Relationships:
    - participants: users taking part (many-to-many, join table event_participants)
    - admins: subset of participants allowed to edit; when empty every
      participant may edit (see app.services.events.can_edit_event)

    An event without participants does not survive: callers that remove a
    participant follow up with reconcile_empty_event.
    """
    id = fields.UUIDField(pk=True, default=uuid.uuid4)
    name = fields.CharField(max_length=256)
    description = fields.TextField(null=True)
    start_date = fields.DatetimeField()  # Must be before end_date
    end_date = fields.DatetimeField()
    event_code = fields.CharField(max_length=32, unique=True, index=True)  # Join handle
    created_at = fields.DatetimeField(auto_now_add=True)

    participants: fields.ManyToManyRelation["User"] = fields.ManyToManyField(
        "models.User",
        related_name="participating_in",
        through="event_participants",
        backward_key="event_id",
        forward_key="user_id",
    )
    admins: fields.ManyToManyRelation["User"] = fields.ManyToManyField(
        "models.User",
        related_name="administering",
        through="event_admins",
        backward_key="event_id",
        forward_key="user_id",
    )

    class Meta:
        table = "events"
