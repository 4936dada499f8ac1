"""
Pydantic schemas for news endpoints.
"""
import datetime as dt
from typing import Literal, Optional

from pydantic import BaseModel, Field

class NewsCreateIn(BaseModel):
    """Staff article form. New articles are drafts unless a status is given."""
    title: str = Field(min_length=1, max_length=512)
    content: str = Field(min_length=1)
    summary: Optional[str] = None
    category: str = Field(min_length=1, max_length=64)
    region: Optional[str] = Field(default=None, max_length=64)
    imageUrl: Optional[str] = Field(default=None, max_length=1024)
    isLive: bool = False
    isPremium: bool = False
    status: Literal["draft", "published", "archived"] = "draft"

class NewsUpdateIn(BaseModel):
    """Partial update; any field may change and status transitions are free-form."""
    title: Optional[str] = Field(default=None, min_length=1, max_length=512)
    content: Optional[str] = Field(default=None, min_length=1)
    summary: Optional[str] = None
    category: Optional[str] = Field(default=None, min_length=1, max_length=64)
    region: Optional[str] = Field(default=None, max_length=64)
    imageUrl: Optional[str] = Field(default=None, max_length=1024)
    isLive: Optional[bool] = None
    isPremium: Optional[bool] = None
    status: Optional[Literal["draft", "published", "archived"]] = None

class NewsOut(BaseModel):
    id: int
    title: str
    content: str
    summary: Optional[str] = None
    category: str
    region: Optional[str] = None
    imageUrl: Optional[str] = None
    isLive: bool
    isPremium: bool
    status: str
    authorId: str
    publishedAt: Optional[dt.datetime] = None
    createdAt: dt.datetime
    updatedAt: dt.datetime
    isPremiumContent: Optional[bool] = None  # Present on public reads

    @classmethod
    def from_record(cls, item, **extra) -> "NewsOut":
        return cls(
            id=item.id,
            title=item.title,
            content=item.content,
            summary=item.summary,
            category=item.category,
            region=item.region,
            imageUrl=item.image_url,
            isLive=item.is_live,
            isPremium=item.is_premium,
            status=item.status,
            authorId=item.author_id,
            publishedAt=item.published_at,
            createdAt=item.created_at,
            updatedAt=item.updated_at,
            **extra,
        )
