from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import URL


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    # Server
    SERVER_HOST: str = "0.0.0.0"  # all interfaces
    SERVER_PORT: int = 8080

    # Database (defaults match docker-compose.yml for local dev)
    DB_HOST: str = "localhost"
    DB_PORT: int = 5432
    DB_USER: str = "currency_user"
    DB_PASSWORD: str = "currency_pass"
    DB_NAME: str = "currency_db"
    DB_SSLMODE: str = "disable"

    # Pool: 10 kept + 15 overflow = 25 concurrent connections max
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 15
    DB_POOL_RECYCLE: int = 300
    DB_POOL_TIMEOUT: float = 30.0

    # Redis
    REDIS_ADDR: str = "localhost:6379"
    REDIS_PASSWORD: str = ""
    REDIS_DB: int = 0
    REDIS_SOCKET_TIMEOUT: float = 5.0

    # App
    APP_NAME: str = "Currency API"
    DEBUG: bool = False  # Safe default for production; set DEBUG=True in .env for local dev
    LOG_LEVEL: str = "INFO"

    @property
    def database_url(self) -> URL:
        return URL.create(
            "postgresql+asyncpg",
            username=self.DB_USER,
            password=self.DB_PASSWORD,
            host=self.DB_HOST,
            port=self.DB_PORT,
            database=self.DB_NAME,
        )

    @property
    def redis_host(self) -> str:
        host, _, _port = self.REDIS_ADDR.rpartition(":")
        return host or self.REDIS_ADDR

    @property
    def redis_port(self) -> int:
        host, _, port = self.REDIS_ADDR.rpartition(":")
        return int(port) if host and port.isdigit() else 6379


settings = Settings()
