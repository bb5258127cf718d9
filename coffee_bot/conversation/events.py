"""
Boundary types between the conversation engine and the delivery layer.

Inbound events are either a free-text message or a button press. The engine
answers with OutboundEffect descriptors; it never delivers anything itself.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Union


@dataclass(frozen=True)
class MessageEvent:
    """Free text typed by the user (including commands such as /start)."""
    user_id: int
    text: str


@dataclass(frozen=True)
class ButtonPress:
    """A keyboard button was pressed; ``action`` is its action id."""
    user_id: int
    action: str


InboundEvent = Union[MessageEvent, ButtonPress]


@dataclass(frozen=True)
class Button:
    text: str
    action: str


@dataclass
class Keyboard:
    """Rows of buttons, rendered top to bottom."""
    rows: List[List[Button]] = field(default_factory=list)

    def add_row(self, *buttons: Button) -> "Keyboard":
        self.rows.append(list(buttons))
        return self

    def actions(self) -> List[str]:
        """Every action id on the keyboard, row by row."""
        return [button.action for row in self.rows for button in row]


@dataclass
class OutboundEffect:
    """A message to send to ``user_id``, optionally with a keyboard."""
    user_id: int
    text: str
    keyboard: Optional[Keyboard] = None
