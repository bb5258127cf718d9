"""
Menu Schemas for Coffee Bot
===========================

Pydantic models for the admin menu endpoints.

Endpoint Coverage:
------------------
- GET /admin/menu: List all drinks
- POST /admin/menu: Add or overwrite a drink (keyed by its normalized name)
- DELETE /admin/menu/{key}: Remove a drink

Prices are whole numbers in minor currency units.
"""

from pydantic import BaseModel, ConfigDict, Field

from ..models import INT_MAX


class MenuItemOut(BaseModel):
    """
    Response model for a drink.

    Attributes:
        key: Slug derived from the name (e.g. "flat_white")
        name: Display name
        price: Price in minor currency units
    """
    model_config = ConfigDict(from_attributes=True)

    key: str
    name: str
    price: int


class MenuItemCreate(BaseModel):
    """Request body for adding or overwriting a drink."""
    name: str = Field(..., min_length=1, max_length=200)
    price: int = Field(..., ge=0, le=INT_MAX)
