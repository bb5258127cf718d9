"""
Session Management Service for Coffee Bot
=========================================

Each chat user has one Session holding what the bot is currently waiting for
(password, new drink, edit-stats name/count) plus the pending selections of
an order in progress. Sessions live in memory only: a restart loses in-flight
conversations, never business data.

Session Data Structure:
-----------------------
- awaiting: which free-text answer is expected next (a single enum, so at most
  one question can be pending)
- selected_drink: drink key chosen before picking a payment method
- last_order: snapshot of this user's most recent sale, used by undo
- edit_target_drink: drink chosen in the edit-stats flow
- is_admin: set only after the admin password was verified

Thread Safety:
--------------
FastAPI runs sync endpoints in a thread pool, so the store guards its dict
with a threading.Lock. get_or_create() hands out a deep copy; the engine
mutates the copy and calls save() only after the event was handled, which
leaves the stored session untouched when persistence fails.

Events of the same user must still be processed one at a time. The delivery
layer takes ``user_lock(user_id)`` around each event to guarantee that.

Limitations:
------------
There is no eviction. Memory grows with the number of distinct users, which
is acceptable for a single kiosk.

Usage:
------
    store = SessionStore()
    with store.user_lock(user_id):
        session = store.get_or_create(user_id)
        session.awaiting = Awaiting.PASSWORD
        store.save(user_id, session)
"""

import logging
import threading
from datetime import date
from enum import Enum
from typing import Dict, Optional

from pydantic import BaseModel


logger = logging.getLogger(__name__)


class Awaiting(str, Enum):
    """Free-text answer the bot is waiting for."""

    NONE = "none"
    PASSWORD = "password"
    NEW_DRINK_SPEC = "new_drink_spec"
    EDIT_STATS_NAME = "edit_stats_name"
    EDIT_STATS_COUNT = "edit_stats_count"


class LastOrder(BaseModel):
    """The sale undo would reverse."""

    day: date
    drink_key: str
    payment: str
    unit_price: int


class Session(BaseModel):
    """Conversation state of one chat user."""

    awaiting: Awaiting = Awaiting.NONE
    selected_drink: Optional[str] = None
    last_order: Optional[LastOrder] = None
    edit_target_drink: Optional[str] = None
    is_admin: bool = False

    def reset_pending(self) -> None:
        """Drop any pending question and in-progress selection."""
        self.awaiting = Awaiting.NONE
        self.selected_drink = None
        self.edit_target_drink = None


class SessionStore:
    """Thread-safe in-memory mapping of user id to Session."""

    def __init__(self):
        self._sessions: Dict[int, Session] = {}
        self._user_locks: Dict[int, threading.Lock] = {}
        self._lock = threading.Lock()

    def get_or_create(self, user_id: int) -> Session:
        """Return a working copy of the user's session, creating it on first contact."""
        with self._lock:
            session = self._sessions.get(user_id)
            if session is None:
                session = Session()
                self._sessions[user_id] = session
                logger.debug("Created session for user %s", user_id)
            return session.model_copy(deep=True)

    def save(self, user_id: int, session: Session) -> None:
        with self._lock:
            self._sessions[user_id] = session.model_copy(deep=True)

    def user_lock(self, user_id: int) -> threading.Lock:
        """Lock serializing the events of one user."""
        with self._lock:
            lock = self._user_locks.get(user_id)
            if lock is None:
                lock = self._user_locks[user_id] = threading.Lock()
            return lock

    def clear(self) -> int:
        """Forget every session. Returns how many there were."""
        with self._lock:
            count = len(self._sessions)
            self._sessions.clear()
            self._user_locks.clear()
        logger.info("Cleared %d sessions", count)
        return count

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def __contains__(self, user_id: int) -> bool:
        with self._lock:
            return user_id in self._sessions
