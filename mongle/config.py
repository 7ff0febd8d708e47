"""Engine configuration loaded from environment variables."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Remote pet authority
    API_BASE_URL: str = "http://localhost:8080/api"
    USER_ID: int = 1
    REQUEST_TIMEOUT_SECONDS: float = 5.0
    # Forced release of the action gate when a gesture request hangs
    ACTION_TIMEOUT_SECONDS: float = 10.0

    # Local gauge cache
    REDIS_URL: str = "redis://localhost:6379/0"

    # Timing profile: "production" or "fast" (see data/profiles/)
    PET_PROFILE: str = "production"

    LOG_LEVEL: str = "INFO"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
