from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Relative to the working directory the service is started from
DEFAULT_DB_PATH = "databases/jobPortal.db"
DEFAULT_LOG_DIR = "logs"


class Settings(BaseSettings):
    """
    Centralized runtime configuration for the job board service.
    All defaults are sensible for dev-mode; ops override via ENV
    (JOBBOARD_PORT, JOBBOARD_DB_PATH, ...).
    """

    model_config = SettingsConfigDict(
        env_prefix="JOBBOARD_",
        env_file=".env",
        extra="ignore",
    )

    # --- Server ---
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=5000)
    cors_origins: List[str] = Field(default_factory=lambda: ["*"])

    # --- Database ---
    db_path: str = Field(default=DEFAULT_DB_PATH)

    # --- Uploads ---
    upload_dir: str = Field(default="uploads")
    upload_field: str = Field(default="logo")
    max_upload_bytes: int = Field(default=2 * 1024 * 1024)  # 2 MiB

    # --- Logging ---
    log_level: str = Field(default="INFO")
    log_dir: Optional[str] = Field(default=DEFAULT_LOG_DIR)


# Create a singleton instance
settings = Settings()


def get_settings() -> Settings:
    return settings
