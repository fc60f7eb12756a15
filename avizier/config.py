from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_prefix="AVIZIER_", extra="ignore")

    # --- Database ---
    database_url: str = "sqlite:///avizier.db"

    # --- Logging ---
    log_level: str = "INFO"
    json_logs: bool = False

    # --- Allocation extensions ---
    # Off by default: MANUAL and BY_CONSUMPTION expenses contribute nothing.
    metered_consumption: bool = False
    manual_allocations: bool = False


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()

if settings.database_url.startswith("sqlite:///"):
    db_path = Path(settings.database_url.replace("sqlite:///", ""))
    db_path.parent.mkdir(parents=True, exist_ok=True)

# --- SQLAlchemy setup ---
engine = create_engine(
    settings.database_url,
    connect_args={"check_same_thread": False}
    if settings.database_url.startswith("sqlite")
    else {},
)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()
