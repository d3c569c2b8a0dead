"""Pydantic schemas for API requests and responses."""

from src.schemas.inventory import (
    InventoryBulkAddRequest,
    InventoryBulkAddResponse,
    InventoryItemCreate,
    InventoryItemResponse,
    InventoryItemUpdate,
    InventoryLogResponse,
    UsageCreate,
)
from src.schemas.receipt_scan import RawLineItem, ReceiptScanResponse
from src.schemas.recipe import RecipeSuggestionResponse, SuggestedRecipe

__all__ = [
    "InventoryItemCreate",
    "InventoryItemUpdate",
    "InventoryItemResponse",
    "InventoryLogResponse",
    "InventoryBulkAddRequest",
    "InventoryBulkAddResponse",
    "UsageCreate",
    "RawLineItem",
    "ReceiptScanResponse",
    "SuggestedRecipe",
    "RecipeSuggestionResponse",
]
