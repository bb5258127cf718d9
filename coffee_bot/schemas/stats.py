"""
Stats Schemas for Coffee Bot
============================

Pydantic models for GET /admin/stats/today: one row per (drink, payment
method) pair sold today, plus the total revenue.
"""

from datetime import date
from typing import List

from pydantic import BaseModel, Field


class StatsRowOut(BaseModel):
    drink_key: str
    drink_name: str
    payment: str
    count: int
    revenue: int


class StatsSummaryOut(BaseModel):
    day: date
    rows: List[StatsRowOut] = Field(default_factory=list)
    total_revenue: int = 0
