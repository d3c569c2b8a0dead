"""Inventory schemas."""

from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from src.models.enums import ActionType, StandardUnit
from src.schemas.receipt_scan import RawLineItem

SortKey = Literal["expiration_date", "category", "name", "created_at"]


class InventoryItemCreate(BaseModel):
    """Add an item by hand."""

    name: str = Field(..., min_length=1, max_length=255)
    category: str | None = Field(None, max_length=100)
    quantity: float = Field(..., gt=0)
    unit: str = Field("count", max_length=50)
    price: float | None = Field(None, ge=0)
    expiration_date: date | None = None


class InventoryItemUpdate(BaseModel):
    """Update expiry, quantity or price. Explicit null clears expiry or price."""

    expiration_date: date | None = None
    quantity: float | None = Field(None, ge=0)
    price: float | None = Field(None, ge=0)


class InventoryItemResponse(BaseModel):
    """Inventory item response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: str | None
    name: str
    category: str | None
    initial_quantity: float
    current_quantity: float
    user_unit: str
    standard_unit: StandardUnit
    conversion_factor: float
    price: float | None
    expiration_date: date | None
    status: int | None
    created_at: datetime
    updated_at: datetime


class UsageCreate(BaseModel):
    """Record consumption or another adjustment against an item."""

    amount: float = Field(..., gt=0)
    action_type: ActionType = ActionType.CONSUMED


class InventoryLogResponse(BaseModel):
    """Inventory log entry response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    item_id: int | None
    action_type: ActionType
    amount_changed: float
    created_at: datetime


class InventoryBulkAddRequest(BaseModel):
    """Bulk add rows (e.g., reviewed receipt items)."""

    items: list[RawLineItem]


class FailedItemResponse(BaseModel):
    """A row that could not be added."""

    item: RawLineItem
    error: str


class InventoryBulkAddResponse(BaseModel):
    """Result of bulk adding to inventory."""

    added: int
    failed: list[FailedItemResponse]
    items: list[InventoryItemResponse]
