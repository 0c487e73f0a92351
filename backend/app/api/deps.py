"""Shared FastAPI dependencies for the routes."""

from app.core.settings import get_settings


def get_current_user_id() -> int:
    """Id of the acting user; a fixed configured user until auth exists."""
    return get_settings().default_user_id
