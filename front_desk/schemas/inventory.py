from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class ItemReturn(BaseModel):
    """Staff count of one item type collected from the room at check-out."""

    item_id: int
    returned: int = Field(default=0, ge=0)
    consumed: int = Field(default=0, ge=0)
    damaged: bool = False
    notes: Optional[str] = None


class DirtyItem(BaseModel):
    """One line of a dirty-item batch handed to laundry."""

    item_id: int
    quantity: int = Field(gt=0)
    priority: str = "normal"
