# backend/billcraft/config.py
from __future__ import annotations
import os


def _env_flag(name: str, default: str = "0") -> bool:
    return os.environ.get(name, default).strip().lower() in {"1", "true", "yes", "on"}


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/billcraft.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///billcraft.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Demo mode: in-memory catalog/customers/invoices, no login required
    DEMO_MODE = _env_flag("BILLCRAFT_DEMO_MODE")

    # "sql" or "memory"; demo mode defaults to memory
    STORAGE_BACKEND = os.environ.get("BILLCRAFT_STORAGE", "memory" if DEMO_MODE else "sql")

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    CORS_ALLOWED_ORIGINS = {
        origin.strip()
        for origin in os.environ.get(
            "CORS_ALLOWED_ORIGINS",
            "http://localhost:5173,http://127.0.0.1:5173,http://localhost:4173,http://127.0.0.1:4173",
        ).split(",")
        if origin.strip()
    }

    BCRYPT_LOG_ROUNDS = int(os.environ.get("BCRYPT_LOG_ROUNDS", "12"))

    ONE_TIME_CODE_TTL_MINUTES = int(os.environ.get("ONE_TIME_CODE_TTL_MINUTES", "10"))

    # Development only: echo one-time codes in the API response
    EXPOSE_ONE_TIME_CODES = _env_flag("EXPOSE_ONE_TIME_CODES")
