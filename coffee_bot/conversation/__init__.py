"""
Conversation package: the per-user state machine and its boundary types.

    from coffee_bot.conversation import ConversationEngine, MessageEvent, ButtonPress
"""

from .engine import ConversationEngine
from .events import Button, ButtonPress, InboundEvent, Keyboard, MessageEvent, OutboundEffect

__all__ = [
    "ConversationEngine",
    "Button",
    "ButtonPress",
    "InboundEvent",
    "Keyboard",
    "MessageEvent",
    "OutboundEffect",
]
