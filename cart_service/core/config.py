"""Cart Service Configuration"""

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

from ..models.flags import FlagSet

PROJECT_ROOT = Path(__file__).resolve().parents[2]


class Settings(BaseSettings):
    """Application settings loaded from environment"""

    model_config = SettingsConfigDict(
        env_file=str(PROJECT_ROOT / ".env"),
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Cart Service"
    debug: bool = True
    host: str = "0.0.0.0"
    port: int = 8000
    environment: str = "development"

    # Prefix for relative dish image paths
    image_base_url: str = "http://localhost:5000"

    # Order service
    order_request_timeout: float = 30.0
    order_watchdog_seconds: float = 10.0
    simulated_delay_seconds: float = 0.5

    # JWT claims searched for the user id, in order
    user_id_claims: list[str] = [
        "sub",
        "user_id",
        "userId",
        "id",
        "nameid",
        "http://schemas.xmlsoap.org/ws/2005/05/identity/claims/nameidentifier",
    ]

    # Bug toggles, e.g. FEATURE_FLAGS__BREAK_ORDER_CREATION=true
    feature_flags: FlagSet = FlagSet()

    @property
    def is_development(self) -> bool:
        return self.environment.lower() == "development"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


settings = get_settings()
