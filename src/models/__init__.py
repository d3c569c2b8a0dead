"""SQLAlchemy models."""

from src.models.inventory import InventoryItem, InventoryLogEntry
from src.models.receipt_scan import ReceiptScan

__all__ = [
    "InventoryItem",
    "InventoryLogEntry",
    "ReceiptScan",
]
