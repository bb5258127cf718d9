"""
Admin Stats Routes for Coffee Bot
=================================

Read-only view of today's ledger for the back office. "Today" follows
LEDGER_TIMEZONE, the same business day the chat flow records sales on.

Endpoints:
----------
- GET /admin/stats/today: Per drink/payment counts and total revenue

Authentication:
---------------
Requires admin authentication via HTTP Basic Auth.
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from .. import config
from ..auth import verify_admin_credentials
from ..db import get_db
from ..schemas.stats import StatsRowOut, StatsSummaryOut
from ..services.ledger import Ledger
from ..services.menu_store import MenuStore


logger = logging.getLogger(__name__)

# Router definition
admin_stats_router = APIRouter(prefix="/admin/stats", tags=["Admin - Stats"])


@admin_stats_router.get("/today", response_model=StatsSummaryOut)
def stats_today(
    db: Session = Depends(get_db),
    _admin: str = Depends(verify_admin_credentials),
) -> StatsSummaryOut:
    """Today's stats. Requires admin authentication."""
    day = config.ledger_today()
    ledger = Ledger(db)
    rows = ledger.query(day)
    names = {item.key: item.name for item in MenuStore(db).list()}

    return StatsSummaryOut(
        day=day,
        rows=[
            StatsRowOut(
                drink_key=row.drink_key,
                drink_name=names.get(row.drink_key, row.drink_key),
                payment=row.payment,
                count=row.count,
                revenue=row.revenue,
            )
            for row in rows
        ],
        total_revenue=ledger.total_revenue(day),
    )
