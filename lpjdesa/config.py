# lpjdesa/config.py
from functools import lru_cache
from pathlib import Path
from typing import List, Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_prefix="LPJ_", extra="ignore")

    # --- Database ---
    database_url: str = "sqlite:///lpjdesa/lpj_dev.db"

    # --- CORS ---
    cors_allow_origins: List[str] = ["http://localhost:5173", "http://localhost:5174"]

    # --- Attachment storage ---
    file_storage_backend: str = "local"
    uploads_dir: str = "uploads"
    uploads_public_prefix: str = "uploads"
    api_base_url: str = "http://localhost:8000"
    s3_bucket: Optional[str] = None
    s3_region: Optional[str] = None
    s3_access_key: Optional[str] = None
    s3_secret_key: Optional[str] = None
    s3_endpoint_url: Optional[str] = None

    # --- Document generation ---
    app_name: str = "Sistem LPJ Desa"
    export_output_dir: str = "uploads/exports"
    words_locale: Literal["id", "en"] = "id"
    currency_name: str = "Rupiah"

    # --- Backup ---
    backup_dir: str = "backups/sqlite"
    backup_before_restore: bool = True

    # --- Logging ---
    environment: str = "development"
    log_level: Literal["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"] = "INFO"
    log_json: bool = True

    @property
    def uploads_root_path(self) -> Path:
        return Path(self.uploads_dir)


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()

# Ensure path directory exists (for SQLite)
if settings.database_url.startswith("sqlite:///"):
    db_path = Path(settings.database_url.replace("sqlite:///", "", 1))
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
