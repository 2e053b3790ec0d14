from __future__ import annotations

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # Database
    DATABASE_URL: str = "sqlite:///./sessionkit.db"
    DB_USERNAME: str = ""
    DB_PASSWORD: SecretStr = SecretStr("")
    DB_HOST: str = ""
    DB_NAME: str = ""

    # Tokens
    JWT_SECRET: SecretStr = SecretStr("")
    JWT_ALGORITHM: str = "HS256"
    LOGIN_TOKEN_TTL_SECONDS: int = 3600
    REFRESH_TOKEN_TTL_SECONDS: int = 10800
    BCRYPT_ROUNDS: int = 10

    # Server
    SERVER_HOST: str = "0.0.0.0"
    SERVER_PORT: int = 5000
    CORS_ALLOW_ORIGINS: list[str] = ["*"]
    DUPE_USER: str = "Username is already taken"
    DUPE_EMAIL: str = "Email is already registered"

    # Client log sink
    APP_LOG_PATH: str = "./logs/app.log"
    ERROR_LOG_PATH: str = "./logs/error.log"

    # HTTP (client side)
    API_BASE_URL: str = "http://localhost:5000"
    REQUEST_TIMEOUT: float = 30.0
    REFRESH_TIMEOUT: float = 10.0
    VERIFY_SSL: bool = True
    BACKOFF_FACTOR: float = 0.5

    # Session lifecycle
    SESSION_WARNING_LEAD_SECONDS: int = 60
    SESSION_CLOSE_GRACE_SECONDS: int = 30
    AUTH_COOKIE_NAME: str = "authToken"
    SESSION_ID_COOKIE_NAME: str = "sessionId"
    COOKIE_STORE_PATH: str = ""

    # Remote logging
    CLIENT_LOG_ENABLED: bool = True
    LOG_SHIP_MAX_RETRIES: int = 3

    # Logging
    LOG_LEVEL: str = "INFO"
    DEBUG: bool = False
