"""
Simple configuration management.

The ``Settings`` dataclass reads configuration directly from
environment variables so that the service can be configured from a
container or a process manager without a settings file.  Defaults are
provided for all fields and are suitable for local development.
"""

import os
from dataclasses import dataclass


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    project_name: str = os.getenv("PROJECT_NAME", "Dev Events API")
    api_version: str = os.getenv("API_VERSION", "1.0.0")
    debug: bool = os.getenv("DEBUG", "false").lower() in {"1", "true", "yes"}
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    # Optional path of a log file.  When empty, logs only go to the console.
    log_file: str = os.getenv("LOG_FILE", "")

    # Path of the SQLite database file.  A relative path is resolved
    # against the project root by the ``db`` module.
    database_url: str = os.getenv("DATABASE_URL", "dev_events.db")

    # Pagination defaults for ``GET /events``.  Requested page sizes are
    # clamped to ``1..max_page_size``.
    default_page_size: int = int(os.getenv("DEFAULT_PAGE_SIZE", "20"))
    max_page_size: int = int(os.getenv("MAX_PAGE_SIZE", "100"))

    # Number of related events returned by ``GET /events/{slug}/similar``
    # when the client does not ask for a specific amount.
    similar_events_limit: int = int(os.getenv("SIMILAR_EVENTS_LIMIT", "3"))

    api_host: str = os.getenv("API_HOST", "0.0.0.0")
    api_port: int = int(os.getenv("API_PORT", "8000"))


# Instantiate settings once so other modules can import it without
# repeatedly reading environment variables.  Environment variables
# must be set before importing this module.
settings = Settings()
