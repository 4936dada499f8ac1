"""
Storage package.
- base: the Storage interface every adapter implements
- memory: process-local adapter (default, used by tests)
- orm: Tortoise ORM adapter (durable)
"""
from .base import DuplicateRecord, Storage
from .memory import MemoryStorage
from .records import Account, NewsItem, Subscription, SupportTicket

__all__ = [
    "Storage",
    "DuplicateRecord",
    "MemoryStorage",
    "Account",
    "NewsItem",
    "Subscription",
    "SupportTicket",
]
