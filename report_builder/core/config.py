# report_builder/core/config.py
"""Application settings loaded from the environment."""

import os
from functools import lru_cache
from typing import List

from dotenv import load_dotenv
from pydantic import BaseModel, Field


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class Settings(BaseModel):
    """Runtime configuration for the report builder service.

    Every value the application needs at process start lives here and is handed
    to the app factory, the database layer and the API client explicitly.
    """

    database_url: str = "sqlite:///./report_builder.db"
    application_id: str = "Unknown"
    cors_origins: List[str] = Field(default_factory=lambda: ["*"])
    api_host: str = "0.0.0.0"
    api_port: int = 4000
    api_base_url: str = "http://localhost:4000"
    metadata_lookup_workers: int = Field(default=4, ge=1)
    static_dir: str = "static"
    log_level: str = "INFO"
    seed_sample_data: bool = False

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from environment variables (and a local .env file)."""
        load_dotenv()

        origins = [o.strip() for o in os.getenv("CORS_ORIGIN", "*").split(",") if o.strip()]

        return cls(
            database_url=os.getenv("DATABASE_URL", "sqlite:///./report_builder.db"),
            application_id=os.getenv("APPLICATION_ID", "Unknown"),
            cors_origins=origins or ["*"],
            api_host=os.getenv("API_HOST", "0.0.0.0"),
            api_port=int(os.getenv("API_PORT", "4000")),
            api_base_url=os.getenv("API_BASE_URL", "http://localhost:4000"),
            metadata_lookup_workers=int(os.getenv("METADATA_LOOKUP_WORKERS", "4")),
            static_dir=os.getenv("STATIC_DIR", "static"),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            seed_sample_data=_env_bool("SEED_SAMPLE_DATA"),
        )


@lru_cache()
def get_settings() -> Settings:
    """Process-wide settings instance."""
    return Settings.from_env()
