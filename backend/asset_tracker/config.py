# backend/asset_tracker/config.py
from __future__ import annotations
import os


def _csv_env(name: str, default: str) -> set[str]:
    raw = os.environ.get(name, default)
    return {item.strip() for item in raw.split(",") if item.strip()}


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/asset_tracker.sqlite3 unless DATABASE_URL is set
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL",
        "sqlite:///asset_tracker.sqlite3",
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Asset images. None means "<instance_path>/uploads", resolved in create_app().
    UPLOAD_FOLDER = os.environ.get("UPLOAD_FOLDER")
    MAX_CONTENT_LENGTH = int(os.environ.get("MAX_UPLOAD_MB", "5")) * 1024 * 1024
    ALLOWED_IMAGE_EXTENSIONS = {".png", ".jpg", ".jpeg", ".gif", ".webp"}

    CORS_ORIGINS = _csv_env(
        "CORS_ORIGINS",
        "http://localhost:3000,http://127.0.0.1:3000,http://localhost:5173,http://127.0.0.1:5173",
    )

    # Error messages only; development mode adds str(exc) to 500 responses.
    EXPOSE_ERROR_DETAILS = os.environ.get("APP_ENV", "production").lower() == "development"

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
