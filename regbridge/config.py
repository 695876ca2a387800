from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    # Telegram Bot API
    telegram_bot_token: str = ""
    telegram_api_base: str = "https://api.telegram.org"
    telegram_webhook_url: str = ""     # public URL to register with setWebhook
    telegram_webhook_secret: str = ""  # echoed back in X-Telegram-Bot-Api-Secret-Token
    telegram_polling: bool = False     # use getUpdates instead of a webhook
    telegram_timeout_seconds: float = 15.0

    # Handle directory
    data_dir: str = "data"
    chat_ids_file: str = "chat_ids.json"

    # Verification codes
    code_ttl_minutes: int = 10
    ledger_sweep_interval_seconds: int = 0   # 0 disables the background sweep

    # Registration backend (stubbed when empty)
    registration_backend_url: str = ""
    registration_timeout_seconds: float = 15.0

    # App
    cors_origins: list[str] = ["*"]

    class Config:
        env_file = ".env"
        case_sensitive = False


@lru_cache()
def get_settings() -> Settings:
    return Settings()
