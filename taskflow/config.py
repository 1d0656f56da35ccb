"""
Configuration settings for the Taskflow board API and sync client
"""
import os

from dotenv import load_dotenv


class Settings:
    """Application settings"""

    def __init__(self):
        # Load from environment variables with safe defaults
        self.app_name = os.getenv("APP_NAME", "Taskflow Board API")
        self.app_version = os.getenv("APP_VERSION", "1.0.0")
        self.debug = os.getenv("DEBUG", "False").lower() == "true"
        self.environment = os.getenv("ENVIRONMENT", "production")

        # Database - required by the server side only (checked in core.database)
        self.database_url = os.getenv("DATABASE_URL", "")

        # Redis relay for change notifications across worker processes (optional)
        self.redis_url = os.getenv("REDIS_URL", "")
        self.redis_channel_prefix = os.getenv("REDIS_CHANNEL_PREFIX", "taskflow:board")

        # CORS - configure for dev and prod
        origins_str = os.getenv("ALLOWED_ORIGINS", "")
        if not origins_str:
            if self.environment == "production":
                raise RuntimeError("ALLOWED_ORIGINS must be set in production (comma-separated HTTPS URLs)")
            else:
                origins_str = "http://localhost:3000,http://127.0.0.1:3000"

        self.allowed_origins = [origin.strip() for origin in origins_str.split(',') if origin.strip()]

        # Board limits
        self.max_columns = int(os.getenv("MAX_COLUMNS", "8"))
        self.max_board_title_length = int(os.getenv("MAX_BOARD_TITLE_LENGTH", "50"))

        # Sync client
        self.reconcile_debounce_ms = int(os.getenv("RECONCILE_DEBOUNCE_MS", "300"))
        self.api_base_url = os.getenv("API_BASE_URL", "http://localhost:8000/api/v1")
        self.http_timeout = float(os.getenv("HTTP_TIMEOUT", "10"))

        # Logging
        self.log_level = os.getenv("LOG_LEVEL", "INFO")
        self.log_format = os.getenv("LOG_FORMAT", "json")

    @property
    def reconcile_debounce_seconds(self) -> float:
        return self.reconcile_debounce_ms / 1000.0


# Load environment variables from .env file if it exists
load_dotenv()

# Global settings instance
settings = Settings()
