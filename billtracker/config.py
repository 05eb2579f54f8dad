"""Application configuration.
Every value can be overridden through the environment; the default database
is a local SQLite file under DATA_DIR.
"""
from __future__ import annotations
import os
from datetime import timedelta
from pathlib import Path


def _env_flag(name: str, default: str) -> bool:
    return os.environ.get(name, default).lower() in ("1", "true", "yes")


class Config:
    APP_VERSION: str = "1.0.0"
    BASE_DIR: Path = Path(__file__).resolve().parent.parent
    SECRET_KEY: str = os.environ.get("SECRET_KEY", "dev-secret")
    JWT_SECRET_KEY: str = os.environ.get("JWT_SECRET", "dev-jwt-secret-change-me-in-production")
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(hours=int(os.environ.get("JWT_ACCESS_HOURS", "24")))
    JWT_TOKEN_LOCATION = ["headers"]

    DATA_DIR: str = os.environ.get("DATA_DIR", str((BASE_DIR / "data").resolve()))
    _default_db_path = str((Path(DATA_DIR) / "billtracker.sqlite").resolve()).replace("\\", "/")
    SQLALCHEMY_DATABASE_URI: str = os.environ.get("DATABASE_URL", f"sqlite:///{_default_db_path}")
    SQLALCHEMY_TRACK_MODIFICATIONS: bool = False

    UPLOAD_FOLDER: str = os.environ.get("UPLOAD_FOLDER", str((BASE_DIR / "uploads").resolve()))
    ALLOWED_EXTENSIONS: set[str] = {"jpg", "jpeg", "png", "gif", "pdf", "heic"}
    MAX_CONTENT_LENGTH: int = 20 * 1024 * 1024  # 20MB

    CORS_ORIGINS: str = os.environ.get("CORS_ORIGINS", "*")

    # Rate limiting
    ENABLE_RATE_LIMITING: bool = _env_flag("ENABLE_RATE_LIMITING", "true")
    RATE_LIMIT_MAX_REQUESTS: int = int(os.environ.get("RATE_LIMIT_MAX_REQUESTS", "100"))
    RATE_LIMIT_WINDOW_SECONDS: int = int(os.environ.get("RATE_LIMIT_WINDOW_SECONDS", "60"))
    AUTH_RATE_LIMIT_MAX_REQUESTS: int = int(os.environ.get("AUTH_RATE_LIMIT_MAX_REQUESTS", "20"))

    # APScheduler
    SCHEDULER_ENABLED: bool = _env_flag("SCHEDULER_ENABLED", "true")
    INTEGRATION_SYNC_MINUTES: int = int(os.environ.get("INTEGRATION_SYNC_MINUTES", "60"))

    # Logging
    LOG_DIR: str = os.environ.get("LOG_DIR", str((BASE_DIR / "logs").resolve()))
    LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "INFO")

    # Swagger
    SWAGGER = {
        "title": "BillTracker API",
        "uiversion": 3,
        "openapi": "3.0.2",
    }
