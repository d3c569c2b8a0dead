"""Enums for model fields."""

from enum import Enum, IntEnum


class StandardUnit(str, Enum):
    """Canonical unit family an inventory quantity belongs to."""

    GRAM = "g"
    MILLILITER = "ml"
    COUNT = "count"


class ItemStatus(IntEnum):
    """Lifecycle flag stored in inventory.status.

    Rows with a NULL status predate the flag and are treated as active.
    """

    ACTIVE = 1
    EXPIRED = -1


class ActionType(str, Enum):
    """Kind of quantity change recorded in the inventory log."""

    CONSUMED = "consumed"
    SPOILED = "spoiled"
    ADJUSTED = "adjusted"
    ADDED = "added"


class ScanStatus(str, Enum):
    """Processing state of a receipt scan."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
