from tortoise import fields, models

class ProcessedEvent(models.Model):
    """Ledger of payment webhook event ids that were already applied."""
    id = fields.IntField(pk=True)
    event_id = fields.CharField(max_length=128, unique=True)
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "processed_events"
