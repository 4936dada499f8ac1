"""
Services Module

Business logic behind the routers:
- auth / sessions: credential strategies, login sessions, registration
- authz: role gate
- visibility: public projection of news items
- content: staff content management and publish bookkeeping
- accounts: admin back office, profile edits, Telegram linking
- payments: Stripe checkout and webhook reconciliation
- messaging: Telegram bots (httpx)
"""
from .accounts import AccountService
from .auth import AuthService, CredentialStrategy
from .content import ContentService
from .messaging import TelegramNotifier
from .payments import StripeGateway
from .sessions import MemorySessionStore, Session, SessionStore

__all__ = [
    "AccountService",
    "AuthService",
    "CredentialStrategy",
    "ContentService",
    "TelegramNotifier",
    "StripeGateway",
    "MemorySessionStore",
    "Session",
    "SessionStore",
]
