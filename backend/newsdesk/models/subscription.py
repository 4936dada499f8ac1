from tortoise import fields, models

class Subscription(models.Model):
    """
    Billing-linked premium grant, mirrored from Stripe webhook events.
    - external_ref: Stripe subscription id (unique, used to upsert)
    - status: Stripe status string; only "active" grants premium
    """
    id = fields.IntField(pk=True)
    user = fields.ForeignKeyField("models.User", related_name="subscriptions", on_delete=fields.CASCADE)
    plan = fields.CharField(max_length=32)
    status = fields.CharField(max_length=32)
    start_date = fields.DatetimeField()
    end_date = fields.DatetimeField()
    external_ref = fields.CharField(max_length=64, unique=True, null=True)
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "subscriptions"
