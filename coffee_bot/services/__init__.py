"""
Services Package for Coffee Bot
===============================

Stateful and persistence-facing components used by the conversation engine
and the HTTP routes.

Available Services:
-------------------
- **menu_store**: Drink menu (key -> name, price) backed by the ``menu`` table
- **ledger**: Daily per-drink, per-payment counters backed by the ``stats`` table
- **session**: In-memory per-user conversation sessions

Usage:
------
    from coffee_bot.services.menu_store import MenuStore
    from coffee_bot.services.ledger import Ledger
    from coffee_bot.services.session import SessionStore
"""

from . import ledger
from . import menu_store
from . import session

__all__ = ["ledger", "menu_store", "session"]
