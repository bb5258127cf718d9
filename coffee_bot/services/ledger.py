"""
Ledger Service for Coffee Bot
=============================

The ledger is the date-partitioned aggregation of order counts and revenue by
(drink, payment method), stored in the ``stats`` table. Every operation takes
the business date explicitly; the conversation flow always passes "today".

Write Path:
-----------
- **record_sale** is the one hot spot where different users mutate the same
  row concurrently. It is a single ``INSERT ... ON CONFLICT DO UPDATE``
  statement, so two simultaneous sales of the same drink/payment/date are
  both counted.

- **decrement** never reads a count and writes it back. It issues a
  conditional DELETE (count <= by_count) and, failing that, a conditional
  UPDATE (count > by_count). Only when neither matches does it check whether
  the row exists at all; if the row exists the count moved underneath us and
  the pair is retried.

Revenue:
--------
Revenue is a stored running total. Corrections subtract
``by_count * unit_price`` where the caller chooses the unit price; the value
is floored at zero so a price change can never produce negative revenue.

Usage:
------
    from coffee_bot.services.ledger import Ledger

    ledger = Ledger(db)
    ledger.record_sale(today, "latte", "card", 45)
    rows = ledger.query(today)   # [LedgerRow("latte", "card", 1, 45)]
"""

import logging
from datetime import date
from typing import Callable, List, NamedTuple

from sqlalchemy import case, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..db import upsert_insert
from ..errors import ConversationError, InvalidCount, InvalidPrice, RecordNotFound
from ..models import INT_MAX, DailyStat


logger = logging.getLogger(__name__)

# Attempts of the DELETE/UPDATE pair before giving up on a row whose count
# keeps changing under concurrent writers.
_DECREMENT_ATTEMPTS = 3


class LedgerRow(NamedTuple):
    drink_key: str
    payment: str
    count: int
    revenue: int


def _check_price(unit_price) -> None:
    if not isinstance(unit_price, int) or isinstance(unit_price, bool) or not 0 <= unit_price <= INT_MAX:
        raise InvalidPrice(unit_price)


def _check_count(by_count) -> None:
    if not isinstance(by_count, int) or isinstance(by_count, bool) or not 0 < by_count <= INT_MAX:
        raise InvalidCount()


class Ledger:
    """Ledger operations over a single SQLAlchemy session. Writes commit."""

    def __init__(self, db: Session):
        self.db = db

    def _record(self, day: date, drink_key: str, payment: str):
        return self.db.query(DailyStat).filter(
            DailyStat.date == day,
            DailyStat.coffee_key == drink_key,
            DailyStat.payment == payment,
        )

    def record_sale(self, day: date, drink_key: str, payment: str, unit_price: int) -> None:
        """Count one sale, creating the record on the first sale of the pair."""
        _check_price(unit_price)

        table = DailyStat.__table__
        stmt = upsert_insert(self.db, table).values(
            date=day,
            coffee_key=drink_key,
            payment=payment,
            count=1,
            revenue=unit_price,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["date", "coffee_key", "payment"],
            set_={
                "count": table.c.count + 1,
                "revenue": table.c.revenue + stmt.excluded.revenue,
            },
        )
        try:
            self.db.execute(stmt)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise

        logger.info("Sale recorded: %s %s/%s +%d", day, drink_key, payment, unit_price)

    def decrement(
        self,
        day: date,
        drink_key: str,
        payment: str,
        by_count: int,
        unit_price: int,
        commit: bool = True,
    ) -> bool:
        """
        Remove ``by_count`` orders from one record.

        With ``commit=False`` the change is left in the open transaction and a
        failure is raised without rolling back; the caller owns both.

        Returns:
            True if the record was exhausted and deleted, False if it was
            reduced.

        Raises:
            RecordNotFound: no record for (day, drink_key, payment).
            InvalidCount: by_count is not an integer in 1..INT_MAX.
            InvalidPrice: unit_price is not an integer in 0..INT_MAX.
        """
        _check_count(by_count)
        _check_price(unit_price)

        amount = by_count * unit_price
        try:
            for _ in range(_DECREMENT_ATTEMPTS):
                deleted = self._record(day, drink_key, payment).filter(
                    DailyStat.count <= by_count
                ).delete(synchronize_session=False)
                if deleted:
                    if commit:
                        self.db.commit()
                    logger.info("Stats deleted: %s %s/%s (-%d)", day, drink_key, payment, by_count)
                    return True

                updated = self._record(day, drink_key, payment).filter(
                    DailyStat.count > by_count
                ).update(
                    {
                        DailyStat.count: DailyStat.count - by_count,
                        DailyStat.revenue: case(
                            (DailyStat.revenue < amount, 0),
                            else_=DailyStat.revenue - amount,
                        ),
                    },
                    synchronize_session=False,
                )
                if updated:
                    if commit:
                        self.db.commit()
                    logger.info(
                        "Stats reduced: %s %s/%s -%d (-%d)", day, drink_key, payment, by_count, amount
                    )
                    return False

                if self._record(day, drink_key, payment).first() is None:
                    break
        except SQLAlchemyError:
            if commit:
                self.db.rollback()
            raise

        if commit:
            self.db.rollback()
        raise RecordNotFound(drink_key, payment)

    def decrement_one(self, day: date, drink_key: str, payment: str, unit_price: int) -> bool:
        """Undo a single sale."""
        return self.decrement(day, drink_key, payment, 1, unit_price)

    def decrement_drink(
        self,
        day: date,
        drink_key: str,
        by_count: int,
        price_for: Callable[[LedgerRow], int],
    ) -> int:
        """
        Remove ``by_count`` orders of a drink across its payment-method records.

        Records are drained in payment-method order. ``price_for`` returns the
        unit price to subtract for a given record. The drain is one
        transaction: if any record fails, none of them change.

        Returns:
            The number of orders actually removed (less than by_count when the
            day had fewer orders of this drink).

        Raises:
            RecordNotFound: the drink has no records on ``day``.
        """
        _check_count(by_count)

        rows = self.records_for_drink(day, drink_key)
        if not rows:
            raise RecordNotFound(drink_key)

        remaining = by_count
        try:
            for row in rows:
                if remaining <= 0:
                    break
                take = min(remaining, row.count)
                self.decrement(day, drink_key, row.payment, take, price_for(row), commit=False)
                remaining -= take
            self.db.commit()
        except (SQLAlchemyError, ConversationError):
            self.db.rollback()
            raise

        return by_count - remaining

    def query(self, day: date) -> List[LedgerRow]:
        """Snapshot of every record for ``day``."""
        rows = (
            self.db.query(DailyStat)
            .filter(DailyStat.date == day)
            .order_by(DailyStat.coffee_key.asc(), DailyStat.payment.asc())
            .all()
        )
        return [LedgerRow(r.coffee_key, r.payment, r.count, r.revenue) for r in rows]

    def records_for_drink(self, day: date, drink_key: str) -> List[LedgerRow]:
        return [row for row in self.query(day) if row.drink_key == drink_key]

    def total_revenue(self, day: date) -> int:
        total = (
            self.db.query(func.coalesce(func.sum(DailyStat.revenue), 0))
            .filter(DailyStat.date == day)
            .scalar()
        )
        return int(total or 0)
