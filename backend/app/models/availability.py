from tortoise import fields, models

class Availability(models.Model):
    # Client-supplied identifier; the owner is whoever lists it in user.availabilities
    id = fields.CharField(pk=True, max_length=64)
    description = fields.TextField()
    start_date = fields.DatetimeField()
    end_date = fields.DatetimeField()  # Not required to be after start_date
    status = fields.CharField(max_length=32)
    preference = fields.IntField(null=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        table = "availabilities"
