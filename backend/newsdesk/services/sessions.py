"""
Server-side session store.

A session binds an opaque token to one account id until it expires. Only the
account id is kept; the account itself is re-read on every request.
"""
import datetime as dt
import secrets
from abc import ABC, abstractmethod
from dataclasses import dataclass

from newsdesk.storage.records import utc_now


@dataclass(frozen=True)
class Session:
    token: str
    account_id: str
    expires_at: dt.datetime

    def expired(self, now: dt.datetime | None = None) -> bool:
        return (now or utc_now()) >= self.expires_at


class SessionStore(ABC):
    @abstractmethod
    async def create(self, account_id: str, ttl: dt.timedelta) -> Session: ...

    @abstractmethod
    async def get(self, token: str) -> Session | None:
        """Live session for `token`; expired sessions are dropped and read as None."""

    @abstractmethod
    async def delete(self, token: str) -> None:
        """Idempotent."""

    @abstractmethod
    async def delete_for_account(self, account_id: str) -> int: ...


class MemorySessionStore(SessionStore):
    def __init__(self) -> None:
        self._sessions: dict[str, Session] = {}

    async def create(self, account_id: str, ttl: dt.timedelta) -> Session:
        session = Session(
            token=secrets.token_urlsafe(32),
            account_id=str(account_id),
            expires_at=utc_now() + ttl,
        )
        self._sessions[session.token] = session
        return session

    async def get(self, token: str) -> Session | None:
        session = self._sessions.get(token)
        if session is None:
            return None
        if session.expired():
            self._sessions.pop(token, None)
            return None
        return session

    async def delete(self, token: str) -> None:
        self._sessions.pop(token, None)

    async def delete_for_account(self, account_id: str) -> int:
        doomed = [t for t, s in self._sessions.items() if s.account_id == str(account_id)]
        for token in doomed:
            del self._sessions[token]
        return len(doomed)

