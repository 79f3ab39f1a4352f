from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    APP_NAME: str = "AaioConnect"
    LOG_LEVEL: str = "INFO"

    # --- AAIO ---
    AAIO_BASE_URL: str = "https://aaio.so"
    AAIO_API_KEY: Optional[str] = None
    AAIO_MERCHANT_ID: Optional[str] = None
    AAIO_SECRET_KEY_1: Optional[str] = None
    AAIO_SECRET_KEY_2: Optional[str] = None
    # секрет для подписи вебхуков выплат старого API
    AAIO_SECRET_KEY_PAYOFF: Optional[str] = None

    # HTTP
    HTTP_TIMEOUT_SEC: float = 30
    RETRY_MAX: int = 3

    # Проверка IP отправителя вебхука по списку /ip-adresa-servisa
    WEBHOOK_IP_CHECK: bool = False

    # Ожидание оплаты заказа
    WAIT_TIMEOUT_SEC: float = 3 * 24 * 60 * 60
    WAIT_START_DELAY_SEC: float = 1
    WAIT_MAX_DELAY_SEC: float = 5 * 60

settings = Settings()
