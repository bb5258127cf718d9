"""
Routes Package for Coffee Bot
=============================

API route definitions organized by domain. Each module defines a FastAPI
APIRouter with related endpoints grouped together.

**Delivery Route:**
- chat.py: Inbound chat events -> outbound effects

**Admin Routes (require HTTP Basic authentication):**
- admin_menu.py: Drink menu listing and maintenance
- admin_stats.py: Today's ledger

Error Handling:
---------------
Routes raise HTTPException for error conditions:
- 400: Bad request (validation errors)
- 401: Unauthorized (invalid credentials)
- 429: Too many requests (rate limited)
- 503: Service unavailable (missing configuration, storage failure)
"""

from .chat import chat_router
from .admin_menu import admin_menu_router
from .admin_stats import admin_stats_router

__all__ = [
    "chat_router",
    "admin_menu_router",
    "admin_stats_router",
]
