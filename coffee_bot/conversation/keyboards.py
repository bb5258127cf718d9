"""
Keyboard descriptors for every screen of the bot.

The delivery layer turns these into whatever its chat platform offers
(inline keyboards, quick replies, HTML buttons).
"""

from typing import Dict, Iterable

from ..models import MenuItem
from . import actions
from .events import Button, Keyboard


def main_menu() -> Keyboard:
    return (
        Keyboard()
        .add_row(Button("☕ Choose a drink", actions.CHOOSE_COFFEE))
        .add_row(Button("📊 Stats (today)", actions.STATS))
        .add_row(Button("🔧 Enter password (admin)", actions.ENTER_PASSWORD))
    )


def admin_menu() -> Keyboard:
    return (
        Keyboard()
        .add_row(Button("➕ Add drink", actions.ADD_COFFEE))
        .add_row(Button("🗑 Remove drink", actions.REMOVE_COFFEE))
        .add_row(Button("✏️ Edit stats", actions.EDIT_STATS))
        .add_row(Button("⏪ Undo order", actions.UNDO_ORDER))
        .add_row(Button("📊 Stats (today)", actions.STATS))
        .add_row(Button("🔙 Back", actions.BACK_MAIN))
    )


def drinks_menu(items: Iterable[MenuItem], currency: str) -> Keyboard:
    keyboard = Keyboard()
    for item in items:
        keyboard.add_row(
            Button(f"☕ {item.name} — {item.price} {currency}", actions.order_action(item.key))
        )
    keyboard.add_row(Button("🔙 Back", actions.BACK_MAIN))
    return keyboard


def payment_menu(methods: Dict[str, str]) -> Keyboard:
    icons = {"cash": "💵", "card": "💳"}
    keyboard = Keyboard()
    keyboard.add_row(
        *[
            Button(f"{icons.get(method, '💰')} {label}", actions.pay_action(method))
            for method, label in methods.items()
        ]
    )
    keyboard.add_row(Button("🔙 Back", actions.CHOOSE_COFFEE))
    return keyboard


def delete_menu(items: Iterable[MenuItem]) -> Keyboard:
    keyboard = Keyboard()
    for item in items:
        keyboard.add_row(Button(f"❌ {item.name}", actions.delete_action(item.key)))
    keyboard.add_row(Button("🔙 Back", actions.BACK_MAIN))
    return keyboard
