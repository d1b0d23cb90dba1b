"""Repository configuration — env-driven.

Centralized settings using pydantic-settings. Reads from a .env file and
TRACKLOG_* environment variables.
"""

from __future__ import annotations

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class TracklogSettings(BaseSettings):
    """Tracklog settings with environment variable overrides.

    Examples
    --------
    Override via environment::

        export TRACKLOG_LOG_LEVEL=DEBUG
        export TRACKLOG_COMMIT_LOOKUP=first-match

    Or via .env file::

        TRACKLOG_CONTROL_DIR=.tracklog
        TRACKLOG_LOCK_TIMEOUT_SECONDS=30
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="TRACKLOG_",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Layout
    control_dir: str = ".tracklog"

    # Logging (applied by the CLI only)
    log_level: str = "WARNING"

    # Commit rules
    max_message_length: int = Field(default=255, ge=1)

    # "unique": exact id, else a single id starting with the fragment.
    # "first-match": earliest id in log order containing the fragment.
    commit_lookup: Literal["unique", "first-match"] = "unique"

    # Durability
    lock_timeout_seconds: float = Field(default=10.0, ge=0)
    fsync: bool = True


# Module-level singleton; import as `from tracklog.config import settings`
settings = TracklogSettings()
