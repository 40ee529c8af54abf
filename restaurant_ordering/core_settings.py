from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import Optional

class Settings(BaseSettings):
    POSTGRES_HOST: str = "postgres"
    POSTGRES_PORT: int = 5432
    POSTGRES_DB: str = "restaurant"
    POSTGRES_USER: str = "restaurant"
    POSTGRES_PASSWORD: str = "restaurant"
    # Overrides the Postgres URL when set (e.g. sqlite:///./restaurant.db)
    DATABASE_URL: Optional[str] = None

    SERVICE_VERSION: str = "1.0.0"
    LOG_LEVEL: str = "INFO"
    RUN_MIGRATIONS: bool = False

    PAYMENT_EXPIRY_MINUTES: int = 15
    PAYMENT_GATEWAY: str = "simulated"  # simulated | manual | http
    PAYMENT_GATEWAY_URL: str = "http://payment-gateway:8000"
    PAYMENT_GATEWAY_TIMEOUT: float = 5.0
    PAYMENT_SIMULATED_APPROVAL_SECONDS: int = 30
    PAYMENT_QR_BASE_URL: Optional[str] = None

    ORDER_STATUS_POLICY: str = "permissive"  # permissive | strict

    class Config:
        env_file = ".env"

    @property
    def database_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"postgresql+psycopg2://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )

@lru_cache
def get_settings() -> Settings:
    return Settings()
