"""Application configuration and environment-aware settings.

This module defines a `Settings` class (pydantic `BaseSettings`) used for
loading API credentials, endpoint URLs, import batch limits and file system
locations from the environment.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import ConfigDict
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Top-level pydantic Settings container for overdrive_import configuration.

    All values may be overridden via environment variables using the
    `OVERDRIVE_IMPORT_` prefix. `libraries` is read as a JSON object mapping a
    library id to its `products`, `collection_token` and `weblink` entries.
    """

    # API credentials; client_id is also sent as the User-Agent
    client_id: str = ""
    client_secret: str = ""

    # Network and API defaults
    oauth_url: str = "https://oauth.overdrive.com/token"
    api_base_url: str = "https://api.overdrive.com"
    default_timeout: float = 30.0
    http_max_attempts: int = 1
    token_safety_margin: int = 180

    # Batch sizing
    default_page_size: int = 200
    max_page_size: int = 300
    bulk_chunk_size: int = 25

    libraries: dict[str, dict[str, Any]] = {}

    # Paths
    state_file: Path = Path(__file__).parent.parent / ".state" / "options.json"
    upload_dir: Path = Path(__file__).parent.parent / "uploads"
    upload_base_url: str = "http://localhost/wp-content/uploads"
    log_file: Path = Path(__file__).parent.parent / "logs" / "overdrive_import.log"

    enable_progress: bool = True

    model_config = ConfigDict(env_prefix="OVERDRIVE_IMPORT_")


settings = Settings()
