"""Application settings and configuration utilities."""

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


@dataclass(frozen=True)
class Settings:
    """Immutable application settings derived from environment variables."""

    project_name: str = os.getenv("PROJECT_NAME", "Lifeboard Backend")
    version: str = os.getenv("PROJECT_VERSION", "0.1.0")
    api_prefix: str = os.getenv("API_PREFIX", "/api")
    environment: str = os.getenv("ENVIRONMENT", "local")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    # Stand-in for the authenticated user until auth is wired in
    default_user_id: int = int(os.getenv("DEFAULT_USER_ID", "1"))

    # Status given to the next occurrence of a completed recurring task
    recurrence_initial_status: str = os.getenv("RECURRENCE_INITIAL_STATUS", "backlog")

    @property
    def database_path(self) -> str:
        """Return path to SQLite database file."""
        db_path = os.getenv("DATABASE_PATH")
        if db_path:
            return db_path
        # Default: lifeboard.db in backend directory
        backend_dir = Path(__file__).parent.parent.parent
        return str(backend_dir / "lifeboard.db")

    @property
    def database_url(self) -> str:
        """Return the SQLAlchemy URL, preferring DATABASE_URL when set."""
        return os.getenv("DATABASE_URL") or f"sqlite:///{self.database_path}"


@lru_cache
def get_settings() -> Settings:
    """Return a cached settings instance."""
    return Settings()
