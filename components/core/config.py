from functools import lru_cache
from typing import List, Optional
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Database settings
    DB_URL: Optional[str] = None  # Optional full async DB URL
    DB_USER: str = "root"
    DB_PASSWORD: str = ""
    DB_HOST: str = "localhost"
    DB_PORT: int = 3306
    DB_NAME: str = "spending_plan"

    # API settings
    SERVICE_NAME: str = "Daily Spending Planner"
    API_VERSION: str = "v1"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: List[str] = ["*"]

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True
        validate_default = True

    @property
    def async_db_url(self) -> str:
        """Get asynchronous database URL."""
        if self.DB_URL:
            return self.DB_URL
        return f"mysql+aiomysql://{self.DB_USER}:{self.DB_PASSWORD}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"

    @property
    def is_sqlite(self) -> bool:
        return self.async_db_url.startswith("sqlite")


@lru_cache()
def get_settings() -> Settings:
    """
    Returns cached Settings instance to avoid reloading .env file on every access
    """
    return Settings()


settings = get_settings()
