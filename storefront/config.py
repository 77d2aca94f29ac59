from pydantic_settings import BaseSettings
from pydantic import ConfigDict
from pathlib import Path
from functools import lru_cache


class Settings(BaseSettings):
    ENV: str = "development"
    LOG_LEVEL: str = "INFO"

    # backend services (one base URL per service)
    AUTH_API: str = "http://localhost:8001"
    CATALOG_API: str = "http://localhost:8002"
    SEARCH_API: str = "http://localhost:8003"
    CART_API: str = "http://localhost:8004"
    ORDER_API: str = "http://localhost:8005"

    # single cart owner; carts are not isolated per user
    CART_OWNER: str = "admin"

    DATA_DIR: Path = Path("data")  # where the persisted session storage lives
    STORAGE_FILE: str = "storage.csv"

    SIGNIN_PATH: str = "/auth/signin"
    ORDERS_PATH: str = "/orders"
    RESET_REDIRECT_DELAY: int = 3  # seconds before redirecting to sign-in after a reset

    CORS_ORIGINS: str = "http://localhost:3000"  # comma-separated

    # Example .env:
    # CART_API=http://cart:8004
    # CART_OWNER=admin

    model_config = ConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def storage_path(self) -> Path:
        return Path(self.DATA_DIR) / self.STORAGE_FILE


@lru_cache()
def get_settings() -> Settings:
    """Return cached Settings instance."""
    return Settings()


settings = get_settings()
