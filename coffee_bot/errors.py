"""
Domain errors raised by the menu store, the ledger and the conversation engine.

Every error derives from ConversationError and carries a short message that
is safe to show to the chat user. Persistence failures are not wrapped here;
SQLAlchemy exceptions propagate unchanged.
"""


class ConversationError(Exception):
    """Base class for failures that are reported back to the chat user."""

    default_message = "Something went wrong."

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


# --- input validation failures ---

class BadFormat(ConversationError):
    default_message = "Invalid format. Use: Name - Price"


class BadPrice(ConversationError):
    default_message = "Price must be a whole non-negative number!"


class InvalidPrice(ConversationError):
    """Raised by the menu store and ledger when a price is not an integer in 0..INT_MAX."""

    def __init__(self, price):
        self.price = price
        super().__init__(f"Invalid price: {price!r}")


class InvalidCount(ConversationError):
    default_message = "Enter a positive number!"


# --- state consistency failures ---

class DrinkNotFound(ConversationError):
    def __init__(self, key_or_name: str = None):
        self.key_or_name = key_or_name
        super().__init__("Drink not found in the menu.")


class RecordNotFound(ConversationError):
    def __init__(self, drink_key: str = None, payment: str = None):
        self.drink_key = drink_key
        self.payment = payment
        super().__init__("No stats found for this drink today.")


class NoLastOrder(ConversationError):
    default_message = "Last order not found."


class NoDrinkSelected(ConversationError):
    default_message = "Choose a drink first!"


class AdminRequired(ConversationError):
    default_message = "Admin access required. Enter the password first."
