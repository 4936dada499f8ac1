# newsdesk/api/v1/routers/telegram.py
from fastapi import APIRouter, Depends

from newsdesk.api.v1.deps import get_notifier
from newsdesk.services.messaging import TelegramNotifier

router = APIRouter(prefix="/telegram", tags=["telegram"])


@router.get("/status")
async def telegram_status(notifier: TelegramNotifier = Depends(get_notifier)):
    """Which bots have a token configured. Tokens themselves are never returned."""
    return {"success": True, "data": notifier.status()}
