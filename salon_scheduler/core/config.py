from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"

    SALON_ID: int = 1
    SALON_NAME: str = "Shooper Dooper Nails"
    SALON_TIMEZONE: str = "Europe/Amsterdam"

    SLOT_GRANULARITY_MINUTES: int = 5
    CONFIRMATION_HOLD_MINUTES: int = 30
    AVAILABILITY_MAX_DAYS: int = 31

    EXPIRATION_SWEEP_ENABLED: bool = True
    EXPIRATION_SWEEP_INTERVAL_SECONDS: float = 3600.0

    CONFIRM_BASE_URL: str = "http://127.0.0.1:5173/booking/confirm"
    EMAIL_API_KEY: str | None = None
    EMAIL_API_URL: str = "https://api.resend.com/emails"
    EMAIL_FROM_ADDRESS: str = "bookings@example.com"
    EMAIL_FROM_NAME: str = "Shooper Dooper Nails"


settings = Settings()
