"""
Database models module initialization.
Exports all Tortoise ORM models used by the durable storage adapter.

Models exported:
- User: Account credentials, role and profile
- News: News article with lifecycle status and visibility flags
- Subscription: Premium subscription mirrored from Stripe
- SupportTicket: Reader support request
- ProcessedEvent: Applied payment webhook event ids
"""
from .user import User
from .news import News
from .subscription import Subscription
from .support_ticket import SupportTicket
from .processed_event import ProcessedEvent
