# Load environment variables FIRST, before any module imports that need them
from dotenv import load_dotenv
load_dotenv()

import logging
from contextlib import asynccontextmanager
from typing import Dict

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from . import config, db
from .logging_config import setup_logging
from .middleware import RequestIDMiddleware
from .routes import admin_menu_router, admin_stats_router, chat_router
from .routes.chat import limiter
from .services.session import SessionStore

# Configure logging at module load time
setup_logging()

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    db.init_db()
    if not config.ADMIN_PASSWORD:
        logger.warning("ADMIN_PASSWORD is not set; admin menu and /admin endpoints are disabled")
    logger.info("Coffee Bot started (currency=%s, timezone=%s)", config.CURRENCY_LABEL, config.LEDGER_TIMEZONE)
    yield
    cleared = app.state.sessions.clear()
    logger.info("Coffee Bot stopped, dropped %d in-memory sessions", cleared)


def create_app() -> FastAPI:
    """
    Create the Coffee Bot FastAPI application.

    Each app owns its SessionStore (app.state.sessions); the menu and stats
    live in the database configured by DATABASE_URL.
    """
    app = FastAPI(
        title="Coffee Bot API",
        description="Chat-driven point of sale for a coffee stand",
        version="1.0.0",
        lifespan=lifespan,
        openapi_tags=[
            {"name": "Health", "description": "Health check endpoints"},
            {"name": "Chat", "description": "Inbound chat events"},
            {"name": "Admin - Menu", "description": "Admin endpoints for menu management"},
            {"name": "Admin - Stats", "description": "Admin endpoints for today's stats"},
        ],
    )

    app.state.sessions = SessionStore()

    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials=config.CORS_ORIGINS != ["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Configure rate limiting
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    app.include_router(chat_router)
    app.include_router(admin_menu_router)
    app.include_router(admin_stats_router)

    @app.get("/health", tags=["Health"])
    def health() -> Dict[str, str]:
        """Health check endpoint. Returns ok if the service is running."""
        return {"status": "ok"}

    return app


app = create_app()
