"""
Menu Store Service
==================

Durable mapping from drink key to (display name, price), backed by the
``menu`` table.

Drink keys are derived from the display name: lower-cased, spaces replaced
with underscores ("Flat White" -> "flat_white"). Adding a drink whose name
normalizes to an existing key overwrites the name and price in place.

Usage:
------
    from coffee_bot.services.menu_store import MenuStore

    menu = MenuStore(db)
    key = menu.upsert("Latte", 45)
    item = menu.get(key)
"""

import logging
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..db import upsert_insert
from ..errors import BadFormat, DrinkNotFound, InvalidPrice
from ..models import INT_MAX, MenuItem


logger = logging.getLogger(__name__)


def drink_key(name: str) -> str:
    """Normalize a display name into its drink key."""
    return (name or "").strip().lower().replace(" ", "_")


def _is_valid_price(price) -> bool:
    return isinstance(price, int) and not isinstance(price, bool) and 0 <= price <= INT_MAX


class MenuStore:
    """Menu operations over a single SQLAlchemy session. Writes commit."""

    def __init__(self, db: Session):
        self.db = db

    def upsert(self, name: str, price: int) -> str:
        """
        Insert or overwrite the drink ``name`` with ``price``.

        Returns:
            The drink key.

        Raises:
            InvalidPrice: price is not a non-negative integer.
            BadFormat: the name is blank.
        """
        if not _is_valid_price(price):
            raise InvalidPrice(price)

        name = (name or "").strip()
        key = drink_key(name)
        if not key:
            raise BadFormat("Drink name cannot be empty.")

        stmt = upsert_insert(self.db, MenuItem.__table__).values(key=key, name=name, price=price)
        stmt = stmt.on_conflict_do_update(
            index_elements=["key"],
            set_={"name": stmt.excluded.name, "price": stmt.excluded.price},
        )
        try:
            self.db.execute(stmt)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise

        logger.info("Menu upsert: %s (%s) = %d", key, name, price)
        return key

    def remove(self, key: str) -> None:
        """Delete the drink if present. Removing an absent key is a no-op."""
        try:
            deleted = self.db.query(MenuItem).filter(MenuItem.key == key).delete(
                synchronize_session=False
            )
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise

        if deleted:
            logger.info("Menu remove: %s", key)
        else:
            logger.debug("Menu remove: %s was not on the menu", key)

    def get(self, key: str) -> MenuItem:
        item = self.db.query(MenuItem).filter(MenuItem.key == key).one_or_none()
        if item is None:
            raise DrinkNotFound(key)
        return item

    def list(self) -> List[MenuItem]:
        """All menu items, ordered by name for display."""
        return self.db.query(MenuItem).order_by(MenuItem.name.asc(), MenuItem.key.asc()).all()

    def find_by_name(self, name: str) -> Optional[MenuItem]:
        """
        Case-insensitive exact match on the display name.

        Compared in Python rather than with SQL lower(), which on SQLite only
        folds ASCII letters.
        """
        wanted = (name or "").strip().casefold()
        if not wanted:
            return None
        for item in self.list():
            if item.name.casefold() == wanted:
                return item
        return None
