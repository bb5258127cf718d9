"""
Schemas Package for Coffee Bot
==============================

Pydantic models used for API request validation and response serialization.

Schema Organization:
--------------------
- **chat.py**: Chat event request and outbound effect schemas
- **menu.py**: Admin menu schemas
- **stats.py**: Admin daily stats schemas

Naming Conventions:
-------------------
- *Out: Response models - what API returns
- *Create: Request models for POST
- *Request / *Response: Complex request/response structures
"""

from .chat import (
    ButtonOut,
    ChatEventRequest,
    ChatEventResponse,
    KeyboardOut,
    OutboundEffectOut,
)
from .menu import MenuItemCreate, MenuItemOut
from .stats import StatsRowOut, StatsSummaryOut

__all__ = [
    # Chat
    "ButtonOut",
    "ChatEventRequest",
    "ChatEventResponse",
    "KeyboardOut",
    "OutboundEffectOut",
    # Menu
    "MenuItemCreate",
    "MenuItemOut",
    # Stats
    "StatsRowOut",
    "StatsSummaryOut",
]
