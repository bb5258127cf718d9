from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    Column,
    Date,
    Integer,
    String,
    PrimaryKeyConstraint,
)
from sqlalchemy.orm import declarative_base

Base = declarative_base()

# Upper bound of an INTEGER column on PostgreSQL (and of a price or count here)
INT_MAX = 2**31 - 1


class MenuItem(Base):
    __tablename__ = "menu"

    key = Column(String, primary_key=True)  # slug derived from name, e.g. "flat_white"
    name = Column(String, nullable=False)
    price = Column(Integer, nullable=False)  # minor currency units

    __table_args__ = (
        CheckConstraint("price >= 0", name="ck_menu_price_non_negative"),
    )

    def __repr__(self) -> str:
        return f"MenuItem(key={self.key!r}, name={self.name!r}, price={self.price!r})"


class DailyStat(Base):
    """Aggregated sales of one drink with one payment method on one date."""
    __tablename__ = "stats"

    date = Column(Date, nullable=False)
    coffee_key = Column(String, nullable=False)
    payment = Column(String, nullable=False)  # "cash" | "card"
    count = Column(Integer, nullable=False, default=0)
    revenue = Column(BigInteger, nullable=False, default=0)

    __table_args__ = (
        PrimaryKeyConstraint("date", "coffee_key", "payment", name="pk_stats"),
        CheckConstraint("count >= 0", name="ck_stats_count_non_negative"),
    )

    def __repr__(self) -> str:
        return (
            f"DailyStat(date={self.date!r}, coffee_key={self.coffee_key!r}, "
            f"payment={self.payment!r}, count={self.count!r}, revenue={self.revenue!r})"
        )
