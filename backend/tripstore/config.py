import json
import logging
from pathlib import Path

from pydantic_settings import BaseSettings
from functools import lru_cache

_config_logger = logging.getLogger(__name__)

SETTINGS_FILE = Path("data/settings.json")
_BACKEND_DIR = Path(__file__).resolve().parents[1]
_ENV_FILES = (
    _BACKEND_DIR / ".env",
    ".env",
)
RUNTIME_KEYS = frozenset({
    "bootstrap_seed_on_empty",
    "reset_concurrent_phases",
})


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    app_title: str = "Trip Store API"
    app_version: str = "0.1.0"
    app_env: str = "development"
    cors_origins: list[str] = ["http://localhost:5173"]

    # Remote table service: "database" (SQLAlchemy), "postgrest" (REST) or "memory"
    remote_backend: str = "database"
    database_url: str = "sqlite:///./data/tripstore.db"
    postgrest_url: str = ""
    postgrest_api_key: str = ""
    remote_timeout: float = 15.0

    # Device-local snapshot cache
    snapshot_dir: str = "data/snapshots"
    snapshot_namespace: str = "china-explorer"

    # Bootstrap / bulk transfer behaviour
    bootstrap_seed_on_empty: bool = True
    reset_concurrent_phases: bool = False

    # Logging — per-category log levels (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    log_level: str = "INFO"                  # Root / app-wide
    log_level_sql: str = "WARNING"           # sqlalchemy.engine — SQL queries
    log_level_http: str = "WARNING"          # httpx / httpcore — outbound HTTP
    log_level_uvicorn: str = "INFO"          # uvicorn.access / uvicorn.error
    log_level_store: str = "INFO"            # collection stores, bootstrap, bulk transfer
    log_level_remote: str = "INFO"           # remote collection adapters

    model_config = {
        "env_file": _ENV_FILES,
        "env_file_encoding": "utf-8",
    }

    def model_post_init(self, __context: object) -> None:
        """Merge runtime overrides from data/settings.json into the sync settings."""
        if SETTINGS_FILE.exists():
            try:
                overrides = json.loads(SETTINGS_FILE.read_text("utf-8"))
                for key in RUNTIME_KEYS:
                    if key in overrides and isinstance(overrides[key], bool):
                        object.__setattr__(self, key, overrides[key])
            except Exception as exc:
                _config_logger.warning("Could not load settings overrides: %s", exc)


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance — reads .env once."""
    return Settings()
