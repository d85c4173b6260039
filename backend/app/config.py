"""Configuration for the workflow transfer backend."""

from __future__ import annotations

import os


class Config:
    """Base configuration for the Flask application."""

    SQLALCHEMY_DATABASE_URI: str = os.getenv("DATABASE_URL", "sqlite:///automa-workflows.db")
    SQLALCHEMY_TRACK_MODIFICATIONS: bool = False
    JSONIFY_PRETTYPRINT_REGULAR: bool = False
    CORS_ALLOWED_ORIGINS: str = os.getenv("CORS_ALLOWED_ORIGINS", "http://localhost:5173")
    DB_INIT_MAX_RETRIES: int = int(os.getenv("DB_INIT_MAX_RETRIES", "30"))
    DB_INIT_RETRY_DELAY: float = float(os.getenv("DB_INIT_RETRY_DELAY", "2"))
    EXT_VERSION: str = os.getenv("EXT_VERSION", "1.28.27")
    BROWSER_TYPE: str = os.getenv("BROWSER_TYPE", "chrome")
    MAX_INCLUSION_DEPTH: int = int(os.getenv("MAX_INCLUSION_DEPTH", "3"))
    MAX_DOCUMENT_BYTES: int = int(os.getenv("MAX_DOCUMENT_BYTES", "5000000"))
    MAX_CONTENT_LENGTH: int = MAX_DOCUMENT_BYTES
    IMPORT_RATE_LIMIT: str = os.getenv("IMPORT_RATE_LIMIT", "30 per minute")
