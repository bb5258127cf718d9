"""
Configuration Module for Coffee Bot
===================================

This module centralizes all configuration settings, environment variables, and
constants used throughout the Coffee Bot application. Values are parsed once
at import time so configuration mistakes surface at startup.

Configuration Categories:
-------------------------
- **Database**: Connection URL for the menu and stats relations.

- **Admin Access**: The shared secret that unlocks the admin menu in chat, and
  the HTTP Basic credentials for the admin REST endpoints.

- **Ledger**: Currency label, the timezone that defines "today", and the
  price policy used when an admin corrects today's stats.

- **Rate Limiting / Input Validation / CORS**: HTTP surface protection.

Environment Variables:
----------------------
- DATABASE_URL: SQLAlchemy URL (default: "sqlite:///./coffee_bot.db")
- ADMIN_USERNAME: Admin REST username (default: "admin")
- ADMIN_PASSWORD: Shared admin secret (empty disables admin access)
- CURRENCY_LABEL: Label appended to prices (default: "UAH")
- LEDGER_TIMEZONE: IANA timezone name for the business day (default: "UTC")
- CORRECTION_PRICE_POLICY: "sale" or "menu" (default: "sale")
- RATE_LIMIT_CHAT: Chat endpoint rate limit (default: "30 per minute")
- RATE_LIMIT_ENABLED: Enable/disable rate limiting (default: "true")
- MAX_MESSAGE_LENGTH: Max chat message length (default: 2000)
- CORS_ORIGINS: Comma-separated allowed origins (default: "*")

Usage:
------
    from coffee_bot import config

    if config.ADMIN_PASSWORD:
        ...
"""

import os
from datetime import date, datetime
from typing import List
from zoneinfo import ZoneInfo


# =============================================================================
# Database Configuration
# =============================================================================

DEFAULT_DATABASE_URL = "sqlite:///./coffee_bot.db"


def normalize_database_url(url: str) -> str:
    """
    Map hosting-provider style Postgres URLs onto the psycopg driver.

    Platforms such as Railway and Heroku hand out "postgres://user:pw@host/db"
    URLs, which SQLAlchemy does not accept as a dialect name.
    """
    url = (url or "").strip()
    if not url:
        return DEFAULT_DATABASE_URL
    if url.startswith("postgres://"):
        return "postgresql+psycopg://" + url[len("postgres://"):]
    if url.startswith("postgresql://"):
        return "postgresql+psycopg://" + url[len("postgresql://"):]
    return url


DATABASE_URL: str = normalize_database_url(os.getenv("DATABASE_URL", ""))


# =============================================================================
# Admin Authentication Configuration
# =============================================================================
# ADMIN_PASSWORD is both the secret typed into the chat after "enter password"
# and the HTTP Basic password for /admin/* endpoints. An empty value means
# nobody can become admin.

ADMIN_USERNAME: str = os.getenv("ADMIN_USERNAME", "admin")
ADMIN_PASSWORD: str = os.getenv("ADMIN_PASSWORD", "")


# =============================================================================
# Ledger Configuration
# =============================================================================

CURRENCY_LABEL: str = os.getenv("CURRENCY_LABEL", "UAH")

LEDGER_TIMEZONE: str = os.getenv("LEDGER_TIMEZONE", "UTC")

# "sale": corrections subtract the record's own average sale price.
# "menu": corrections subtract the drink's current menu price.
CORRECTION_PRICE_POLICY_SALE = "sale"
CORRECTION_PRICE_POLICY_MENU = "menu"
CORRECTION_PRICE_POLICY: str = os.getenv(
    "CORRECTION_PRICE_POLICY", CORRECTION_PRICE_POLICY_SALE
).strip().lower()
if CORRECTION_PRICE_POLICY not in (CORRECTION_PRICE_POLICY_SALE, CORRECTION_PRICE_POLICY_MENU):
    CORRECTION_PRICE_POLICY = CORRECTION_PRICE_POLICY_SALE

# Payment methods offered on the payment keyboard, keyed by the suffix of
# their "pay_<method>" action id.
PAYMENT_METHODS = {
    "cash": "Cash",
    "card": "Card",
}


def ledger_today() -> date:
    """
    Return the current business date in LEDGER_TIMEZONE.

    Looked up at call time so tests can patch LEDGER_TIMEZONE.
    """
    return datetime.now(ZoneInfo(LEDGER_TIMEZONE)).date()


# =============================================================================
# Rate Limiting Configuration
# =============================================================================
# Format: "X per Y" where Y is second, minute, hour, or day

RATE_LIMIT_CHAT: str = os.getenv("RATE_LIMIT_CHAT", "30 per minute")
RATE_LIMIT_ENABLED: bool = os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true"


def get_rate_limit_chat() -> str:
    """Return the current chat rate limit (allows dynamic override in tests)."""
    return RATE_LIMIT_CHAT


# =============================================================================
# Input Validation Configuration
# =============================================================================

MAX_MESSAGE_LENGTH: int = int(os.getenv("MAX_MESSAGE_LENGTH", "2000"))


# =============================================================================
# CORS Configuration
# =============================================================================

_cors_origins_env = os.getenv("CORS_ORIGINS", "")
CORS_ORIGINS: List[str] = [
    origin.strip()
    for origin in _cors_origins_env.split(",")
    if origin.strip()
] or ["*"]
