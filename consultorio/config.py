"""Application configuration."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_parse_none_str="null",
    )

    # Application
    app_name: str = Field(default="Consultorio API", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    environment: str = Field(default="development", alias="ENVIRONMENT")
    debug: bool = Field(default=False, alias="DEBUG")
    api_v1_prefix: str = Field(default="/api/v1", alias="API_V1_PREFIX")

    # Server
    host: str = Field(default="127.0.0.1", alias="HOST")
    port: int = Field(default=8000, alias="PORT")
    reload: bool = Field(default=False, alias="RELOAD")

    # Scheduling
    slot_interval_minutes: int = Field(default=30, gt=0, alias="SLOT_INTERVAL_MINUTES")
    workday_start: str = Field(
        default="08:00", pattern=r"^\d{2}:\d{2}$", alias="WORKDAY_START"
    )
    # Exclusive: the last slot starts one interval before this time
    workday_end: str = Field(default="20:00", pattern=r"^\d{2}:\d{2}$", alias="WORKDAY_END")
    overbooking_multiplier: float = Field(default=1.5, gt=0, alias="OVERBOOKING_MULTIPLIER")
    extra_holidays_str: str = Field(default="", alias="EXTRA_HOLIDAYS")

    # Payments
    default_payment_method: str = Field(default="Pix", alias="DEFAULT_PAYMENT_METHOD")
    payment_methods_str: str = Field(
        default="Pix,Cartão de Crédito,Cartão de Débito,Dinheiro",
        alias="PAYMENT_METHODS",
    )

    @property
    def payment_methods(self) -> list[str]:
        """Get accepted payment methods as a list."""
        return [method.strip() for method in self.payment_methods_str.split(",") if method.strip()]

    @property
    def extra_holidays(self) -> list[str]:
        """Get additional blocked dates as a list of ISO dates."""
        return [day.strip() for day in self.extra_holidays_str.split(",") if day.strip()]

    # Storage
    store_backend: str = Field(default="memory", pattern="^(memory|redis)$", alias="STORE_BACKEND")
    redis_host: str = Field(default="localhost", alias="REDIS_HOST")
    redis_port: int = Field(default=6379, alias="REDIS_PORT")
    redis_username: str = Field(default="default", alias="REDIS_USERNAME")
    redis_password: str = Field(default="", alias="REDIS_PASSWORD")
    redis_key_prefix: str = Field(default="consultorio", alias="REDIS_KEY_PREFIX")

    # CORS
    cors_origins_str: str = Field(
        default="http://localhost:3000",
        alias="CORS_ORIGINS",
    )

    @property
    def cors_origins(self) -> list[str]:
        """Get CORS origins as a list."""
        return [origin.strip() for origin in self.cors_origins_str.split(",") if origin.strip()]

    # Logging
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_format: str = Field(default="json", alias="LOG_FORMAT")

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment.lower() == "production"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()
