"""
Chat Schemas for Coffee Bot
===========================

Pydantic models for the chat event endpoint, which is the boundary between
the conversation engine and whatever chat platform delivers messages.

Endpoint Coverage:
------------------
- POST /chat/event: Submit one inbound event, receive the outbound effects

Inbound Events:
---------------
Exactly one of ``message`` (free text, including commands like "/start") or
``action`` (the action id of a pressed button) must be set.

Outbound Effects:
-----------------
Each effect is a message for ``user_id`` with an optional keyboard. Keyboard
rows are lists of buttons; a button's ``action`` is what the platform should
send back as ``action`` when it is pressed.

Validation:
-----------
- message length is constrained by MAX_MESSAGE_LENGTH (default: 2000 chars)
"""

from typing import List, Optional

from pydantic import BaseModel, Field, model_validator

from ..config import MAX_MESSAGE_LENGTH
from ..conversation.events import ButtonPress, InboundEvent, Keyboard, MessageEvent, OutboundEffect


class ChatEventRequest(BaseModel):
    """
    Request body for POST /chat/event.

    Attributes:
        user_id: Chat platform identifier of the user (e.g. a chat id)
        message: Free text typed by the user
        action: Action id of the pressed button
    """
    user_id: int
    message: Optional[str] = Field(None, min_length=1, max_length=MAX_MESSAGE_LENGTH)
    action: Optional[str] = Field(None, min_length=1, max_length=200)

    @model_validator(mode="after")
    def _exactly_one_kind(self) -> "ChatEventRequest":
        if (self.message is None) == (self.action is None):
            raise ValueError("Provide exactly one of 'message' or 'action'")
        return self

    def to_event(self) -> InboundEvent:
        if self.message is not None:
            return MessageEvent(user_id=self.user_id, text=self.message)
        return ButtonPress(user_id=self.user_id, action=self.action)


class ButtonOut(BaseModel):
    text: str
    action: str


class KeyboardOut(BaseModel):
    rows: List[List[ButtonOut]] = Field(default_factory=list)

    @classmethod
    def from_keyboard(cls, keyboard: Keyboard) -> "KeyboardOut":
        return cls(
            rows=[[ButtonOut(text=b.text, action=b.action) for b in row] for row in keyboard.rows]
        )


class OutboundEffectOut(BaseModel):
    """
    One message to deliver.

    Attributes:
        user_id: Recipient
        text: Message text
        keyboard: Buttons to attach, or None to leave the current keyboard
    """
    user_id: int
    text: str
    keyboard: Optional[KeyboardOut] = None

    @classmethod
    def from_effect(cls, effect: OutboundEffect) -> "OutboundEffectOut":
        keyboard = KeyboardOut.from_keyboard(effect.keyboard) if effect.keyboard else None
        return cls(user_id=effect.user_id, text=effect.text, keyboard=keyboard)


class ChatEventResponse(BaseModel):
    """Effects produced by one event (empty when the event was ignored)."""
    effects: List[OutboundEffectOut] = Field(default_factory=list)
