from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(case_sensitive=True)

    ENVIRONMENT: str = "dev"

    # Server settings
    HOST: str = "0.0.0.0"
    PORT: int = 5000

    # Logging settings
    LOG_LEVEL: str = "INFO"
    LOG_FILE_PATH: str = "logs/errors.log"
    LOG_EXCLUDED_PATHS: list[str] = ["/metrics", "/health"]

    # WebSocket liveness settings
    HEARTBEAT_INTERVAL_SECONDS: float = 30
    WS_PING_TIMEOUT_SECONDS: float = 20
    WS_CLOSE_TIMEOUT_SECONDS: float = 5


app_settings = Settings()
