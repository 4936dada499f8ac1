# newsdesk/main.py
import datetime as dt
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from newsdesk.config import Settings, settings
from newsdesk.core.bootstrap import ensure_default_admin
from newsdesk.core.db import init_db
from newsdesk.core.errors import NewsdeskError, newsdesk_error_handler

from newsdesk.api.v1.routers import admin, auth, news, payments, staff, telegram, user

from newsdesk.services.accounts import AccountService
from newsdesk.services.auth import AuthService
from newsdesk.services.content import ContentService
from newsdesk.services.messaging import TelegramNotifier
from newsdesk.services.payments import StripeGateway
from newsdesk.services.sessions import MemorySessionStore, SessionStore
from newsdesk.storage.base import Storage
from newsdesk.storage.memory import MemoryStorage

logger = logging.getLogger("uvicorn.error")


def _make_storage(cfg: Settings) -> Storage:
    if cfg.storage_backend == "tortoise":
        from newsdesk.storage.orm import TortoiseStorage  # Connection opens at startup
        return TortoiseStorage()
    if cfg.storage_backend != "memory":
        logger.warning("[storage] unknown STORAGE_BACKEND=%r, using memory", cfg.storage_backend)
    return MemoryStorage()


def build_state(
    app: FastAPI,
    *,
    cfg: Settings = settings,
    storage: Storage | None = None,
    sessions: SessionStore | None = None,
    notifier: TelegramNotifier | None = None,
    payments_gateway: StripeGateway | None = None,
) -> None:
    """
    Wire storage, sessions, collaborators and services onto app.state.

    Every dependency in api.v1.deps reads from here; tests call this again
    with fresh in-memory parts to isolate each test.
    """
    storage = storage or _make_storage(cfg)
    sessions = sessions or MemorySessionStore()
    notifier = notifier or TelegramNotifier.from_settings(cfg)
    auth_service = AuthService(
        storage,
        sessions,
        admin_security_key=cfg.admin_security_key,
        session_ttl=dt.timedelta(minutes=cfg.session_ttl_minutes),
    )
    app.state.storage = storage
    app.state.sessions = sessions
    app.state.notifier = notifier
    app.state.auth = auth_service
    app.state.accounts = AccountService(storage, auth_service, notifier)
    app.state.content = ContentService(storage, notifier)
    app.state.payments = payments_gateway or StripeGateway.from_settings(cfg)


app = FastAPI(title=settings.APP_NAME)

# CORS (with Cookie)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_exception_handler(NewsdeskError, newsdesk_error_handler)

build_state(app)

@app.on_event("startup")
async def on_startup():
    if settings.storage_backend == "tortoise":
        await init_db(generate_schemas=settings.db_generate_schemas)
    logger.info("[storage] using %s storage", settings.storage_backend)
    # Ensure there's a default admin account on first run
    await ensure_default_admin(app.state.storage)

@app.on_event("shutdown")
async def on_shutdown():
    await app.state.storage.close()

# REST
app.include_router(auth.router, prefix="/api/v1")
app.include_router(news.router, prefix="/api/v1")
app.include_router(staff.router, prefix="/api/v1")
app.include_router(user.router, prefix="/api/v1")
app.include_router(admin.router, prefix="/api/v1")
app.include_router(payments.router, prefix="/api/v1")
app.include_router(telegram.router, prefix="/api/v1")

@app.get("/healthz")
def healthz():
    return {"ok": True}
