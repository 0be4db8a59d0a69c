from pydantic_settings import BaseSettings
from pydantic import Field, field_validator
from functools import lru_cache
from typing import List


class Settings(BaseSettings):
    # Environment
    environment: str = Field(default="development", alias="ENVIRONMENT")

    # Logging
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_json: bool = Field(default=False, alias="LOG_JSON")

    # ==============================================
    # Record Store
    # ==============================================
    # memory | sql | sheets
    record_store: str = Field(default="memory", alias="RECORD_STORE")

    # SQL backend (SQLite for development)
    database_url: str = Field(default="sqlite:///./roomdesk.db", alias="DATABASE_URL")

    # Google Sheets backend
    gsheet_id: str = Field(default="", alias="GSHEET_ID")
    service_account_file: str = Field(default="", alias="GOOGLE_SERVICE_ACCOUNT_JSON")
    bookings_sheet: str = Field(default="Guest Bookings", alias="BOOKINGS_SHEET")

    # ==============================================
    # Calendar Sink (best-effort)
    # ==============================================
    # Empty URL disables publishing; events are only logged
    calendar_webhook_url: str = Field(default="", alias="CALENDAR_WEBHOOK_URL")
    calendar_timeout_seconds: float = Field(default=10.0, alias="CALENDAR_TIMEOUT_SECONDS")
    facility_name: str = Field(default="Guest House", alias="FACILITY_NAME")

    # ==============================================
    # Bookings
    # ==============================================
    booking_id_prefix: str = Field(default="BK", alias="BOOKING_ID_PREFIX")
    booking_id_max_attempts: int = Field(default=5, alias="BOOKING_ID_MAX_ATTEMPTS")
    default_payment_status: str = Field(default="Pending", alias="DEFAULT_PAYMENT_STATUS")
    default_booking_source: str = Field(default="Direct", alias="DEFAULT_BOOKING_SOURCE")

    # ==============================================
    # Rate limiting
    # ==============================================
    rate_limit_enabled: bool = Field(default=True, alias="RATE_LIMIT_ENABLED")
    rate_limit_storage_uri: str = Field(default="memory://", alias="RATE_LIMIT_STORAGE_URI")

    # CORS - Frontend URLs (comma-separated)
    allowed_origins: str = Field(
        default="http://localhost:3000,http://127.0.0.1:3000,http://localhost:5173",
        alias="ALLOWED_ORIGINS"
    )

    @field_validator('record_store')
    @classmethod
    def validate_record_store(cls, v: str) -> str:
        v = (v or "").strip().lower()
        if v not in ("memory", "sql", "sheets"):
            raise ValueError("RECORD_STORE must be one of: memory, sql, sheets")
        return v

    @field_validator('booking_id_max_attempts')
    @classmethod
    def validate_attempts(cls, v: int) -> int:
        if v < 1:
            raise ValueError("BOOKING_ID_MAX_ATTEMPTS must be at least 1")
        return v

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    @property
    def cors_origins(self) -> List[str]:
        """
        Parse allowed origins from comma-separated string.
        Returns a list suitable for CORSMiddleware.
        """
        seen = set()
        origins = []
        for origin in self.allowed_origins.split(","):
            origin = origin.strip().rstrip("/")
            if origin and origin not in seen:
                seen.add(origin)
                origins.append(origin)
        return origins

    class Config:
        env_file = ".env"
        extra = "ignore"
        populate_by_name = True


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


settings = get_settings()
