"""
Action ids carried by keyboard buttons.

These strings are the stable vocabulary between the engine and whatever
renders the buttons. Parameterized actions embed a drink key or a payment
method after a fixed prefix, e.g. ``order_flat_white`` or ``pay_card``.
"""

from typing import NamedTuple, Optional

CHOOSE_COFFEE = "choose_coffee"
STATS = "stats"
ENTER_PASSWORD = "enter_password"
ADD_COFFEE = "add_coffee"
REMOVE_COFFEE = "remove_coffee"
UNDO_ORDER = "undo_order"
EDIT_STATS = "edit_stats"
BACK_MAIN = "back_main"

# Parameterized actions (name used after parsing)
ORDER = "order"
PAY = "pay"
DELETE_COFFEE = "delete_coffee"

ORDER_PREFIX = "order_"
PAY_PREFIX = "pay_"
DELETE_COFFEE_PREFIX = "delete_coffee_"

# Reachable only after the admin password was accepted
ADMIN_ACTIONS = frozenset({ADD_COFFEE, REMOVE_COFFEE, DELETE_COFFEE, UNDO_ORDER, EDIT_STATS})


class ParsedAction(NamedTuple):
    name: str
    argument: Optional[str] = None


def parse_action(action_id: str) -> ParsedAction:
    """
    Split an action id into its name and optional argument.

    The delete prefix is checked first; drink keys may themselves contain
    underscores, so everything after the prefix is the argument.
    """
    action_id = (action_id or "").strip()
    if action_id.startswith(DELETE_COFFEE_PREFIX):
        return ParsedAction(DELETE_COFFEE, action_id[len(DELETE_COFFEE_PREFIX):])
    if action_id.startswith(ORDER_PREFIX):
        return ParsedAction(ORDER, action_id[len(ORDER_PREFIX):])
    if action_id.startswith(PAY_PREFIX):
        return ParsedAction(PAY, action_id[len(PAY_PREFIX):])
    return ParsedAction(action_id)


def order_action(drink_key: str) -> str:
    return f"{ORDER_PREFIX}{drink_key}"


def delete_action(drink_key: str) -> str:
    return f"{DELETE_COFFEE_PREFIX}{drink_key}"


def pay_action(method: str) -> str:
    return f"{PAY_PREFIX}{method}"
