# catalog/core/config.py
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    PROJECT_NAME: str = "Catalog Service"
    API_PREFIX: str = "/api"

    # Database Settings
    MYSQL_USER: str = "root"
    MYSQL_PASSWORD: str = "root"
    MYSQL_HOST: str = "mysql-service"
    MYSQL_PORT: int = 3306
    MYSQL_READ_HOST: Optional[str] = None  # replica, 없으면 primary 사용
    MYSQL_DATABASE: str = "catalog"
    DATABASE_URL: Optional[str] = None
    READ_DATABASE_URL: Optional[str] = None
    DB_ECHO: bool = False

    # Logging / Telemetry
    LOG_LEVEL: str = "INFO"
    OTEL_ENABLED: bool = False
    OTEL_SERVICE_NAME: str = "catalog-service"
    OTEL_EXPORTER_OTLP_ENDPOINT: str = "otel-collector:4317"

    # Catalog
    DEFAULT_PAGE_LIMIT: int = 20
    MAX_PAGE_LIMIT: int = 100
    ADMIN_PRODUCT_LIST_LIMIT: int = 200

    # desc_product_count 증감 재시도
    COUNT_ADJUST_MAX_RETRIES: int = 3
    COUNT_ADJUST_RETRY_DELAY: float = 0.05

    SEED_DEMO_CATALOG: bool = False

    @property
    def write_database_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"mysql+aiomysql://{self.MYSQL_USER}:{self.MYSQL_PASSWORD}"
            f"@{self.MYSQL_HOST}:{self.MYSQL_PORT}/{self.MYSQL_DATABASE}?charset=utf8mb4"
        )

    @property
    def read_database_url(self) -> str:
        if self.READ_DATABASE_URL:
            return self.READ_DATABASE_URL
        if self.DATABASE_URL or not self.MYSQL_READ_HOST:
            return self.write_database_url
        return (
            f"mysql+aiomysql://{self.MYSQL_USER}:{self.MYSQL_PASSWORD}"
            f"@{self.MYSQL_READ_HOST}:{self.MYSQL_PORT}/{self.MYSQL_DATABASE}?charset=utf8mb4"
        )


settings = Settings()
