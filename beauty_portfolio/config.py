"""Environment-driven configuration for the salon backend."""
from __future__ import annotations

import os


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-change-me")
    SQLALCHEMY_DATABASE_URI = os.environ.get("DATABASE_URL", "sqlite:///beauty_portfolio.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Origins allowed to call the API from the browser
    CORS_ORIGINS = [o.strip() for o in os.environ.get("CORS_ORIGINS", "*").split(",") if o.strip()]

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    STRIPE_SECRET_KEY = os.environ.get("STRIPE_SECRET_KEY")
    STRIPE_CURRENCY = os.environ.get("STRIPE_CURRENCY", "usd")

    RESEND_API_KEY = os.environ.get("RESEND_API_KEY")
    MAIL_FROM = os.environ.get("MAIL_FROM", "Beauty Portfolio <bookings@beautyportfolio.com>")

    # Share of the service price taken as a booking deposit
    DEPOSIT_RATE = os.environ.get("DEPOSIT_RATE", "0.20")

    # Admin bearer tokens expire after this many seconds
    TOKEN_MAX_AGE = int(os.environ.get("TOKEN_MAX_AGE", 86400))


class TestingConfig(Config):
    TESTING = True
    SECRET_KEY = "testing-secret"
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    STRIPE_SECRET_KEY = None
    RESEND_API_KEY = None
