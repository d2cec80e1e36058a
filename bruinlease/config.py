"""Application configuration helpers."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Type


def _email_domains() -> tuple[str, ...]:
    raw = os.getenv("INSTITUTION_EMAIL_DOMAINS", "ucla.edu")
    return tuple(domain.strip().lower() for domain in raw.split(",") if domain.strip())


class BaseConfig:
    """Base configuration shared across environments."""

    PROJECT_ROOT = Path(__file__).resolve().parent.parent
    SECRET_KEY = os.getenv("FLASK_SECRET_KEY", "dev-secret-change-me")
    DATABASE_URL = os.getenv("DATABASE_URL") or f"sqlite:///{PROJECT_ROOT / 'bruinlease.db'}"
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    WTF_CSRF_ENABLED = True
    SESSION_COOKIE_HTTPONLY = True
    REMEMBER_COOKIE_HTTPONLY = True
    PREFERRED_URL_SCHEME = "https"

    INSTITUTION_EMAIL_DOMAINS = _email_domains()
    REVIEW_COMMENT_MIN_LENGTH = 10
    REVIEW_COMMENT_MAX_LENGTH = 500
    MESSAGE_MAX_LENGTH = 1000
    LISTING_MAX_IMAGES = 10


class DevelopmentConfig(BaseConfig):
    """Configuration tweaks for local development."""

    DEBUG = True
    TESTING = False
    LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")


class TestingConfig(BaseConfig):
    """In-memory database configuration for pytest."""

    DEBUG = False
    TESTING = True
    DATABASE_URL = "sqlite:///:memory:"
    WTF_CSRF_ENABLED = False
    INSTITUTION_EMAIL_DOMAINS = ("ucla.edu",)


class ProductionConfig(BaseConfig):
    """Production hardened configuration."""

    DEBUG = False
    TESTING = False
    LOG_LEVEL = os.getenv("LOG_LEVEL", "WARNING")


def get_config() -> Type[BaseConfig]:
    """Return the configuration class based on FLASK_ENV."""

    env = os.getenv("FLASK_ENV", "development").lower()
    if env == "production":
        return ProductionConfig
    if env == "testing":
        return TestingConfig
    return DevelopmentConfig
