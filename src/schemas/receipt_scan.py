"""Receipt scan schemas."""

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field


class RawLineItem(BaseModel):
    """One food line read off a receipt, before it becomes an inventory row."""

    name: str = Field(..., min_length=1, max_length=255)
    category: str | None = Field(None, max_length=100)
    quantity: float = 1.0
    unit: str = Field("count", max_length=50)
    price: float = 0.0
    expiration_date: date | None = None  # Never invented when the model omits it


class ParsedReceiptItem(BaseModel):
    """Outcome for a single receipt row."""

    name: str
    quantity: float | None = None
    unit: str | None = None
    item_id: int | None = None
    action: str | None = None  # "added" or "failed"
    error: str | None = None


class ReceiptScanResponse(BaseModel):
    """Response for a receipt scan."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: str | None = None
    status: str
    error_message: str | None = None
    parsed_items: list[ParsedReceiptItem] | None = None
    items_added: int | None = None
    items_failed: int | None = None
    processed_at: datetime | None = None
    created_at: datetime


class ReceiptScanCreateResponse(BaseModel):
    """Response when creating a receipt scan."""

    id: int
    status: str
    message: str


class ReceiptPreviewResponse(BaseModel):
    """Rows extracted from a receipt without saving them."""

    items: list[RawLineItem]
