# newsdesk/config.py
import os
from pydantic import BaseModel
from dotenv import load_dotenv

load_dotenv()  # Load environment variables from .env file

class Settings(BaseModel):
    # General app settings
    APP_NAME: str = "Newsdesk API"
    env: str = os.getenv("ENV", "dev")

    # Host & Port settings
    host: str = os.getenv("HOST", "0.0.0.0")
    port: int = int(os.getenv("PORT", "8000"))

    # CORS origins for frontend
    CORS_ORIGINS: list[str] = [
        "http://localhost:5173",
        "http://127.0.0.1:5173",
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    # Storage backend: "memory" (process-local) or "tortoise" (DATABASE_URL)
    storage_backend: str = os.getenv("STORAGE_BACKEND", "memory").lower()
    # Only meant for local sqlite; production schemas are managed by Aerich
    db_generate_schemas: bool = os.getenv("DB_GENERATE_SCHEMAS", "false").lower() in ("true", "1", "yes")

    # Sessions
    session_secret: str = os.getenv("SESSION_SECRET", "newsdesk-dev-secret")
    session_ttl_minutes: int = int(os.getenv("SESSION_TTL_MINUTES", str(60 * 24 * 7)))  # 1 week
    session_cookie_name: str = os.getenv("SESSION_COOKIE_NAME", "sessionToken")
    session_cookie_secure: bool = os.getenv("ENV", "dev") == "production"

    # Shared secret required by the admin login form
    admin_security_key: str = os.getenv("ADMIN_SECURITY_KEY", "admin-dev-key")

    # Stripe (payments are disabled when the secret key is missing)
    stripe_secret_key: str | None = os.getenv("STRIPE_SECRET_KEY")
    stripe_webhook_secret: str | None = os.getenv("STRIPE_WEBHOOK_SECRET")

    # Telegram bots (each bot's feature is a no-op without its token)
    telegram_api_base: str = os.getenv("TELEGRAM_API_URL", "https://api.telegram.org")
    telegram_main_bot_token: str | None = os.getenv("TELEGRAM_MAIN_BOT_TOKEN")
    telegram_news_bot_token: str | None = os.getenv("TELEGRAM_NEWS_BOT_TOKEN")
    telegram_support_bot_token: str | None = os.getenv("TELEGRAM_SUPPORT_BOT_TOKEN")
    telegram_staff_bot_token: str | None = os.getenv("TELEGRAM_STAFF_BOT_TOKEN")
    telegram_staff_chat_id: str | None = os.getenv("TELEGRAM_STAFF_CHAT_ID")
    telegram_timeout_sec: float = float(os.getenv("TELEGRAM_TIMEOUT_SEC", "5"))

settings = Settings()  # Instantiate configuration
