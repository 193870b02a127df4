from __future__ import annotations

import os
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Central application configuration.

    All values can be overridden via environment variables (or a .env file at project root).
    """

    # General project information
    PROJECT_NAME: str = "kmerscan"

    # -------------------
    # App / logging
    # -------------------
    ENV: str = Field(default="dev", description="Environment name (dev|staging|prod)")
    LOG_LEVEL: str = Field(default="WARNING", description="Logging level")

    # -------------
    # Scan settings
    # -------------
    KMER_LOG_NAME: str = Field(default="kmerscan.app", description="Python Logger name for the scanner.")
    KMER_K: int = Field(default=31, ge=1, description="Default k-mer length when none is given on the CLI")
    KMER_READ_BUFFER_SIZE: int = Field(
        default=1024 * 1024, ge=1, description="Read-ahead chunk size (bytes) used when counting sequence files"
    )
    KMER_MAX_CONCURRENT_SCANS: int = Field(
        default=1, ge=1, description="Number of root paths scanned at the same time"
    )
    KMER_MAX_ARCHIVE_DEPTH: int = Field(
        default=64, ge=0, description="Nesting level past which archive entries are only tried as sequence files"
    )
    KMER_FOLLOW_SYMLINKS: bool = Field(default=True, description="Follow symlinked files and directories")

    # -------------
    # Pydantic cfg
    # -------------
    model_config = SettingsConfigDict(
        env_file=os.path.join(os.path.dirname(__file__), "../../.env"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Cached accessor so we don't parse .env multiple times.
    """
    return Settings()
