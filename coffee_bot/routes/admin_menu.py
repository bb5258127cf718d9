"""
Admin Menu Routes for Coffee Bot
================================

Back-office endpoints for the drink menu. They use the same MenuStore as the
chat flow, so a drink added here shows up in the chat immediately.

Endpoints:
----------
- GET /admin/menu: List all drinks
- POST /admin/menu: Add a drink, or overwrite the drink with the same key
- DELETE /admin/menu/{key}: Remove a drink (idempotent)

Authentication:
---------------
All endpoints require admin authentication via HTTP Basic Auth.
See auth.py for credential verification.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from ..auth import verify_admin_credentials
from ..db import get_db
from ..errors import ConversationError
from ..schemas.menu import MenuItemCreate, MenuItemOut
from ..services.menu_store import MenuStore


logger = logging.getLogger(__name__)

# Router definition
admin_menu_router = APIRouter(prefix="/admin/menu", tags=["Admin - Menu"])


@admin_menu_router.get("", response_model=List[MenuItemOut])
def admin_menu(
    db: Session = Depends(get_db),
    _admin: str = Depends(verify_admin_credentials),
) -> List[MenuItemOut]:
    """List all drinks. Requires admin authentication."""
    return [MenuItemOut.model_validate(item) for item in MenuStore(db).list()]


@admin_menu_router.post("", response_model=MenuItemOut)
def upsert_menu_item(
    payload: MenuItemCreate,
    db: Session = Depends(get_db),
    _admin: str = Depends(verify_admin_credentials),
) -> MenuItemOut:
    """Add or overwrite a drink. Requires admin authentication."""
    menu = MenuStore(db)
    try:
        key = menu.upsert(payload.name, payload.price)
    except ConversationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.message)
    return MenuItemOut.model_validate(menu.get(key))


@admin_menu_router.delete("/{key}", status_code=status.HTTP_204_NO_CONTENT)
def delete_menu_item(
    key: str,
    db: Session = Depends(get_db),
    _admin: str = Depends(verify_admin_credentials),
) -> Response:
    """Remove a drink. Removing an unknown key succeeds."""
    MenuStore(db).remove(key)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
