"""
Chat messages - single source of truth.

Import from here instead of hardcoding strings in the engine or keyboards.
"""


class BotMessages:
    """Standard replies sent by the conversation engine."""

    # Navigation
    WELCOME = "Hi! Choose an action:"
    BACK_TO_MAIN = "🔙 Back to the main menu."

    # Ordering
    CHOOSE_DRINK = "☕ Choose a drink:"
    MENU_EMPTY = "⛔ There are no drinks on the menu."
    DRINK_CHOSEN = "You chose: {name} — {price} {currency}.\nChoose a payment method:"
    ORDER_ADDED = "☕ Order added: {name}, payment: {payment}."

    # Admin login
    ENTER_PASSWORD = "🔑 Enter the password:"
    PASSWORD_OK = "✅ Password accepted!"
    PASSWORD_WRONG = "❌ Wrong password!"

    # Menu management
    ENTER_NEW_DRINK = "Enter the drink name and price (example: Latte - 45):"
    DRINK_ADDED = "✅ Drink added: {name} — {price} {currency}"
    CHOOSE_DRINK_TO_DELETE = "Choose a drink to remove:"
    DRINK_REMOVED = "✅ Drink removed!"

    # Corrections
    ORDER_UNDONE = "✅ Last order cancelled."
    ENTER_EDIT_NAME = "✏️ Enter the drink name to correct today's stats:"
    EDIT_DRINK_FOUND = "☕ Found drink: {name}. Enter the number of orders to remove:"
    STATS_CLEARED = "✅ Stats cleared and the records deleted."
    STATS_REDUCED = "✅ Stats reduced by {count} orders."

    # Statistics
    STATS_HEADER = "📊 Stats for {day}:"
    STATS_LINE = "☕ {name} ({payment}) — {count} pcs ({revenue} {currency})"
    STATS_EMPTY = "No orders yet."
    STATS_TOTAL = "💰 Total revenue: {total} {currency}"

    # Failures
    FAILURE = "⛔ {reason}"
