from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Backend API
    API_BASE_URL: str = "http://localhost:8000"
    API_TIMEOUT_SECONDS: float = 30.0

    # Session cookie
    TOKEN_COOKIE_NAME: str = "token"
    TOKEN_COOKIE_SECURE: bool = False
    TOKEN_COOKIE_MAX_AGE: int = 60 * 60 * 8

    # Pages
    REDIRECT_DELAY_SECONDS: int = 2
    RECENT_REQUESTS_LIMIT: int = 5
    PENDING_PREVIEW_LIMIT: int = 3

    # App
    APP_NAME: str = "Leave Management Portal"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # CORS
    CORS_ORIGINS: list[str] = ["http://localhost:5173", "http://localhost:3000"]

    model_config = {"env_file": ".env", "extra": "ignore"}


settings = Settings()
