from functools import lru_cache
from typing import List, Optional
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Database settings
    DB_URL: Optional[str] = None  # Optional full DB URL
    DB_USER: str = "root"
    DB_PASSWORD: str = ""
    DB_HOST: str = "localhost"
    DB_PORT: int = 3306
    DB_NAME: str = "ibanking_db"
    DB_ECHO: bool = False
    DB_CREATE_ALL: bool = True  # Create missing tables on startup

    # API settings
    APP_NAME: str = "Campus Tuition Pay"
    DEBUG: bool = False
    CORS_ORIGINS: List[str] = ["*"]

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False

    # Authentication
    SESSION_TTL_MINUTES: int = 30
    PASSWORD_HASH_ITERATIONS: int = 260000

    # Tuition lookup
    STUDENT_ID_MIN_LENGTH: int = 7

    # One-time passcodes
    OTP_TTL_SECONDS: int = 300
    OTP_MAX_ATTEMPTS: Optional[int] = None  # None keeps the challenge open until expiry
    OTP_SWEEP_INTERVAL_SECONDS: int = 60  # 0 disables the background sweep
    OTP_LOG_CODES: bool = False  # Dev only: write issued codes to the log

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
