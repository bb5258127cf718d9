"""
Deterministic parsers for the free-text answers the bot asks for.

Numbers are plain ASCII digits only: int() would also take "4_5", "+45" or
Arabic-Indic digits, none of which a cashier means as a price.
"""

import re
from typing import Optional, Tuple

from ..errors import BadFormat, BadPrice, InvalidCount
from ..models import INT_MAX

_DIGITS = re.compile(r"[0-9]+")


def _parse_whole_number(text: str) -> Optional[int]:
    """Return the value of an ASCII digit string within column range, else None."""
    text = (text or "").strip()
    if not _DIGITS.fullmatch(text):
        return None
    value = int(text)
    if value > INT_MAX:
        return None
    return value


def parse_drink_spec(text: str) -> Tuple[str, int]:
    """
    Parse "Name - Price" into (name, price).

    Splits on the first "-" only, so "Latte - -5" is a negative price rather
    than a name containing a dash.

    Raises:
        BadFormat: no "-" in the text.
        BadPrice: the part after the dash is not a whole number between 0
            and INT_MAX.
    """
    text = text or ""
    if "-" not in text:
        raise BadFormat()

    name, raw_price = text.split("-", 1)
    price = _parse_whole_number(raw_price)
    if price is None:
        raise BadPrice()
    return name.strip(), price


def parse_positive_count(text: str) -> int:
    """Parse a strictly positive whole number of orders."""
    count = _parse_whole_number(text)
    if not count:
        raise InvalidCount()
    return count
