"""
Chat Routes for Coffee Bot
==========================

The delivery-layer endpoint of the conversation engine. A chat platform
adapter (Telegram webhook, web widget, kiosk UI) posts every user message or
button press here and delivers the returned effects.

Endpoints:
----------
- POST /chat/event: Process one inbound event

Ordering:
---------
The engine assumes at most one in-flight event per user. This route holds
the user's lock from SessionStore.user_lock() for the whole event, so two
requests for the same user are processed one after the other while
different users proceed in parallel.

Error Handling:
---------------
Domain failures (bad input, unknown drink, nothing to undo) are ordinary
chat replies with HTTP 200. Database failures are logged and answered with
503; the user's session is left unchanged so the same event can be re-sent.

Rate Limiting:
--------------
Limited by client address (default: 30/minute), see RATE_LIMIT_CHAT.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from slowapi import Limiter
from slowapi.util import get_remote_address
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..config import RATE_LIMIT_ENABLED, get_rate_limit_chat
from ..conversation import ConversationEngine
from ..db import get_db
from ..schemas.chat import ChatEventRequest, ChatEventResponse, OutboundEffectOut
from ..services.ledger import Ledger
from ..services.menu_store import MenuStore
from ..services.session import SessionStore


logger = logging.getLogger(__name__)

# Router definition
chat_router = APIRouter(prefix="/chat", tags=["Chat"])

limiter = Limiter(key_func=get_remote_address, enabled=RATE_LIMIT_ENABLED)


def get_session_store(request: Request) -> SessionStore:
    """FastAPI dependency returning the application's SessionStore."""
    return request.app.state.sessions


def build_engine(db: Session, sessions: SessionStore) -> ConversationEngine:
    return ConversationEngine(MenuStore(db), Ledger(db), sessions)


@chat_router.post("/event", response_model=ChatEventResponse)
@limiter.limit(get_rate_limit_chat)
def chat_event(
    request: Request,
    req: ChatEventRequest,
    db: Session = Depends(get_db),
    sessions: SessionStore = Depends(get_session_store),
) -> ChatEventResponse:
    """Run one inbound event through the conversation engine."""
    engine = build_engine(db, sessions)
    event = req.to_event()

    with sessions.user_lock(req.user_id):
        try:
            effects = engine.handle(event)
        except SQLAlchemyError:
            logger.exception("Storage failure while handling event for user %s", req.user_id)
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Storage is temporarily unavailable. Please try again.",
            )

    return ChatEventResponse(effects=[OutboundEffectOut.from_effect(e) for e in effects])
