"""
Telegram messaging collaborator.

Four bots, each with its own token:
  - main: account linking / welcome messages
  - news: publish notifications and admin broadcasts
  - support: replies to support tickets
  - staff: internal notifications to the staff chat

A bot without a token is a no-op. Delivery failures are logged and reported
as False / a lower count; they never raise into the request that triggered
them.
"""
import logging

import httpx

from newsdesk.config import Settings
from newsdesk.storage.base import Storage
from newsdesk.storage.records import AccountProfile, NewsItem, SupportTicket

logger = logging.getLogger(__name__)


class TelegramNotifier:
    def __init__(
        self,
        *,
        main_token: str | None = None,
        news_token: str | None = None,
        support_token: str | None = None,
        staff_token: str | None = None,
        staff_chat_id: str | None = None,
        api_base: str = "https://api.telegram.org",
        timeout: float = 5.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.main_token = main_token
        self.news_token = news_token
        self.support_token = support_token
        self.staff_token = staff_token
        self.staff_chat_id = staff_chat_id
        self.api_base = api_base.rstrip("/")
        self.timeout = timeout
        self._transport = transport  # Tests inject httpx.MockTransport

    @classmethod
    def from_settings(cls, settings: Settings) -> "TelegramNotifier":
        notifier = cls(
            main_token=settings.telegram_main_bot_token,
            news_token=settings.telegram_news_bot_token,
            support_token=settings.telegram_support_bot_token,
            staff_token=settings.telegram_staff_bot_token,
            staff_chat_id=settings.telegram_staff_chat_id,
            api_base=settings.telegram_api_base,
            timeout=settings.telegram_timeout_sec,
        )
        for bot, configured in notifier.status().items():
            if not configured:
                logger.warning("[telegram] %s token is not set; that bot is disabled", bot)
        return notifier

    def status(self) -> dict[str, bool]:
        return {
            "mainBot": bool(self.main_token),
            "newsBot": bool(self.news_token),
            "supportBot": bool(self.support_token),
            "staffBot": bool(self.staff_token),
        }

    async def send_message(self, token: str | None, chat_id: str, text: str) -> bool:
        """POST sendMessage; True only on a 2xx answer."""
        if not token:
            return False
        url = f"{self.api_base}/bot{token}/sendMessage"
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                resp = await client.post(url, json={"chat_id": chat_id, "text": text})
        except httpx.HTTPError as exc:
            # The URL embeds the bot token; log the error type only
            logger.warning("[telegram] send to %s failed: %s", chat_id, type(exc).__name__)
            return False
        if resp.status_code >= 400:
            logger.warning("[telegram] send to %s rejected: HTTP %s", chat_id, resp.status_code)
            return False
        return True

    async def welcome(self, account: AccountProfile) -> bool:
        if not account.telegram_id:
            return False
        return await self.send_message(
            self.main_token,
            account.telegram_id,
            f"Hi {account.username}, your Telegram account is now linked to Newsdesk.",
        )

    async def notify_premium_subscribers(self, storage: Storage, item: NewsItem) -> int:
        """Tell every premium account with a linked chat about a newly published item."""
        if not self.news_token:
            logger.warning("[telegram] news bot disabled; skipping notification for news=%s", item.id)
            return 0
        sent = 0
        for account in await storage.list_accounts():
            if account.is_premium and account.telegram_id:
                if await self.send_message(self.news_token, account.telegram_id, f"New: {item.title} (#{item.id})"):
                    sent += 1
        return sent

    async def broadcast(self, storage: Storage, message: str, country: str | None = None) -> int:
        if not self.news_token:
            logger.warning("[telegram] news bot disabled; broadcast skipped")
            return 0
        sent = 0
        for account in await storage.list_accounts():
            if not account.telegram_id:
                continue
            if country and account.country != country:
                continue
            if await self.send_message(self.news_token, account.telegram_id, message):
                sent += 1
        return sent

    async def notify_staff(self, message: str) -> bool:
        if not self.staff_chat_id:
            return False
        return await self.send_message(self.staff_token, self.staff_chat_id, message)

    async def reply_to_ticket(self, account: AccountProfile, ticket: SupportTicket, message: str) -> bool:
        if not account.telegram_id:
            return False
        return await self.send_message(
            self.support_token,
            account.telegram_id,
            f"Ticket #{ticket.id} ({ticket.subject}): {message}",
        )
