from tortoise import fields, models

class SupportTicket(models.Model):
    id = fields.IntField(pk=True)
    user = fields.ForeignKeyField("models.User", related_name="support_tickets", on_delete=fields.CASCADE)
    subject = fields.CharField(max_length=256)
    message = fields.TextField()
    status = fields.CharField(max_length=16, default="open")  # open / in_progress / closed
    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        table = "support_tickets"
