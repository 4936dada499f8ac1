"""
Database model for news articles.
"""
from tortoise import fields, models

class News(models.Model):
    id = fields.IntField(pk=True)
    title = fields.CharField(max_length=512)
    content = fields.TextField()
    summary = fields.TextField(null=True)
    category = fields.CharField(max_length=64, index=True)
    region = fields.CharField(max_length=64, null=True, index=True)
    image_url = fields.CharField(max_length=1024, null=True)
    is_live = fields.BooleanField(default=False)
    is_premium = fields.BooleanField(default=False)
    status = fields.CharField(max_length=16, default="draft")  # draft / published / archived
    author_id = fields.CharField(max_length=36)  # Account id; kept when the author is deleted
    published_at = fields.DatetimeField(null=True)  # Set once, on first publish
    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        table = "news"
