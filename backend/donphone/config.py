# backend/donphone/config.py
from __future__ import annotations
import os


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/donphone.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///donphone.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # Counter documents live in systemSettings so they travel with backups.
    # The first issued number is start + 1.
    SEQUENCES = {
        "sale": {
            "collection": "systemSettings",
            "document_id": "salesCounter",
            "field": "lastSaleNumber",
            "start": int(os.environ.get("SALE_NUMBER_START", "149")),
        },
        "service-order": {
            "collection": "systemSettings",
            "document_id": "serviceOrdersCounter",
            "field": "lastOsNumber",
            "start": int(os.environ.get("SERVICE_ORDER_NUMBER_START", "200")),
        },
    }
    SEQUENCE_RETRY_ATTEMPTS = 5

    # Backup/restore
    BACKUP_COLLECTIONS = (
        "clients",
        "products",
        "providers",
        "sales",
        "serviceOrders",
        "expenses",
        "systemSettings",
        "users",
    )
    # Fields from older schemas stripped from every object on restore
    BACKUP_LEGACY_FIELDS = ("userId",)
    BACKUP_BATCH_SIZE = int(os.environ.get("BACKUP_BATCH_SIZE", "500"))

    # AI repair diagnostics
    ANTHROPIC_API_KEY = os.environ.get("ANTHROPIC_API_KEY")
    AI_MODEL = os.environ.get("AI_MODEL", "claude-sonnet-4-20250514")
    AI_MAX_TOKENS = int(os.environ.get("AI_MAX_TOKENS", "1024"))

    # Browser front-ends allowed to call the API
    CORS_ALLOWED_ORIGINS = tuple(
        origin.strip()
        for origin in os.environ.get(
            "CORS_ALLOWED_ORIGINS",
            "http://localhost:3000,http://127.0.0.1:3000,http://localhost:9002",
        ).split(",")
        if origin.strip()
    )
