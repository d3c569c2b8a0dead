"""Inventory record store: CRUD and expiry-aware queries over pantry items."""

import logging
import math
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import date, timedelta

from sqlalchemy import func, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from src.models.enums import ActionType, ItemStatus, StandardUnit
from src.models.inventory import InventoryItem, InventoryLogEntry
from src.services.exceptions import ItemNotFoundError, PersistenceError, ValidationError

logger = logging.getLogger(__name__)

# All columns follow the requested direction; raw text after the case-folded
# key keeps "Apple" and "apple" apart
SORT_COLUMNS = {
    "expiration_date": (InventoryItem.expiration_date,),
    "category": (func.lower(InventoryItem.category), InventoryItem.category),
    "name": (func.lower(InventoryItem.name), InventoryItem.name),
    "created_at": (InventoryItem.created_at, InventoryItem.id),
}

# Fields a partial update may touch
UPDATABLE_FIELDS = ("expiration_date", "quantity", "price")

# Same window the recipe prompt uses to tag items "USE SOON"
USE_SOON_DAYS = 3


def days_until(expiration_date: date | None, today: date) -> int | None:
    """Whole days from today to the expiration date; negative when past."""
    if expiration_date is None:
        return None
    return (expiration_date - today).days


def is_finite_number(value) -> bool:
    return isinstance(value, int | float) and not isinstance(value, bool) and math.isfinite(value)


class InventoryStore:
    """Persistent CRUD and query surface over InventoryItem."""

    def __init__(self, db: Session):
        self.db = db

    @contextmanager
    def _db_errors(self, action: str) -> Iterator[None]:
        """Roll back and surface database failures as PersistenceError."""
        try:
            yield
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Inventory store failed to {action}: {e}")
            raise PersistenceError(f"Failed to {action}") from e

    @staticmethod
    def _active_clause():
        return or_(
            InventoryItem.status == int(ItemStatus.ACTIVE),
            InventoryItem.status.is_(None),
        )

    # --- Writes ---

    def create(
        self,
        name: str,
        quantity: float,
        user_unit: str,
        standard_unit: StandardUnit,
        conversion_factor: float,
        category: str | None = None,
        price: float | None = None,
        expiration_date: date | None = None,
        user_id: str | None = None,
    ) -> InventoryItem:
        """Insert a new active item.

        Quantity positivity and the conversion factor are the caller's
        responsibility (see src.services.reconciliation).
        """
        item = InventoryItem(
            user_id=user_id,
            name=name.strip(),
            category=category,
            initial_quantity=quantity,
            current_quantity=quantity,
            user_unit=user_unit.strip(),
            standard_unit=StandardUnit(standard_unit),
            conversion_factor=conversion_factor,
            price=price,
            expiration_date=expiration_date,
            status=int(ItemStatus.ACTIVE),
        )
        with self._db_errors(f"create item '{item.name}'"):
            self.db.add(item)
            self.db.commit()
            self.db.refresh(item)

        logger.info(f"Created inventory item {item.id} '{item.name}'")
        return item

    def remove(self, item_id: int) -> None:
        """Hard delete. Log entries are kept and detached by the database."""
        item = self.get(item_id)
        with self._db_errors(f"remove item {item_id}"):
            self.db.delete(item)
            self.db.commit()
        logger.info(f"Removed inventory item {item_id}")

    def mark_expired(self, item_id: int) -> InventoryItem:
        """Flag an item as expired; repeated calls leave it expired."""
        item = self.get(item_id)
        with self._db_errors(f"mark item {item_id} expired"):
            item.status = int(ItemStatus.EXPIRED)
            self.db.commit()
            self.db.refresh(item)
        return item

    def update(self, item_id: int, **fields) -> InventoryItem:
        """Apply a partial update of expiry, quantity and/or price in one commit.

        Every field is validated before anything is written; a failed commit
        leaves the item exactly as it was. Raising the quantity above the
        initial quantity raises the initial quantity too.
        """
        unknown = set(fields) - set(UPDATABLE_FIELDS)
        if unknown:
            raise ValidationError(f"Cannot update field(s): {', '.join(sorted(unknown))}")
        if "quantity" in fields:
            quantity = fields["quantity"]
            if not is_finite_number(quantity) or quantity < 0:
                raise ValidationError("quantity must be a non-negative number")
        if "price" in fields:
            price = fields["price"]
            if price is not None and (not is_finite_number(price) or price < 0):
                raise ValidationError("price must be a non-negative number")

        item = self.get(item_id)
        with self._db_errors(f"update item {item_id}"):
            if "expiration_date" in fields:
                item.expiration_date = fields["expiration_date"]
            if "quantity" in fields:
                item.current_quantity = fields["quantity"]
                if fields["quantity"] > item.initial_quantity:
                    item.initial_quantity = fields["quantity"]
            if "price" in fields:
                item.price = fields["price"]
            self.db.commit()
            self.db.refresh(item)
        return item

    def update_expiry(self, item_id: int, expiration_date: date | None) -> InventoryItem:
        return self.update(item_id, expiration_date=expiration_date)

    def update_quantity(self, item_id: int, quantity: float) -> InventoryItem:
        """Set the remaining quantity directly."""
        return self.update(item_id, quantity=quantity)

    def update_price(self, item_id: int, price: float | None) -> InventoryItem:
        return self.update(item_id, price=price)

    def log_partial_usage(
        self,
        item_id: int,
        amount_used: float,
        action_type: ActionType | str = ActionType.CONSUMED,
    ) -> InventoryLogEntry:
        """Append a log entry and decrement the remaining quantity together.

        The quantity is clamped at zero. Both writes share one transaction and
        the item row is locked for the duration where the backend supports it.
        """
        if not item_id:
            raise ValidationError("item_id is required")
        if not is_finite_number(amount_used) or amount_used <= 0:
            raise ValidationError("amount_used must be a positive number")
        try:
            action = ActionType(action_type)
        except ValueError:
            raise ValidationError(f"Unknown action type: {action_type}") from None

        with self._db_errors(f"log usage for item {item_id}"):
            item = (
                self.db.query(InventoryItem)
                .filter(InventoryItem.id == item_id)
                .with_for_update()
                .first()
            )
            if item is None:
                self.db.rollback()
                raise ValidationError(f"Inventory item {item_id} not found")

            entry = InventoryLogEntry(
                item_id=item.id,
                action_type=action,
                amount_changed=float(amount_used),
            )
            self.db.add(entry)
            remaining = max(0.0, item.current_quantity - amount_used)
            item.current_quantity = remaining
            unit = item.user_unit
            self.db.commit()
            self.db.refresh(entry)

        logger.info(
            f"Logged {action.value} of {amount_used} {unit} for item {item_id}, {remaining} left"
        )
        return entry

    # --- Reads ---

    def get(self, item_id: int) -> InventoryItem:
        with self._db_errors(f"load item {item_id}"):
            item = self.db.get(InventoryItem, item_id) if item_id else None
        if item is None:
            raise ItemNotFoundError(item_id)
        return item

    def list_active(
        self, sort_key: str = "expiration_date", ascending: bool = True
    ) -> list[InventoryItem]:
        """Active items ordered by one column, nulls last, ties in insertion order."""
        columns = SORT_COLUMNS.get(sort_key)
        if columns is None:
            raise ValidationError(
                f"Unknown sort key '{sort_key}'. Use one of: {', '.join(SORT_COLUMNS)}"
            )
        ordering = [(c.asc() if ascending else c.desc()).nulls_last() for c in columns]

        with self._db_errors("list active items"):
            return (
                self.db.query(InventoryItem)
                .filter(self._active_clause())
                .order_by(*ordering, InventoryItem.id.asc())
                .all()
            )

    def list_expiring_within(self, days: int = 5, today: date | None = None) -> list[InventoryItem]:
        """Active items expiring between today and today + days, both inclusive."""
        if days < 0:
            raise ValidationError("days must not be negative")
        today = today or date.today()
        end = today + timedelta(days=days)

        with self._db_errors("list expiring items"):
            return (
                self.db.query(InventoryItem)
                .filter(
                    self._active_clause(),
                    InventoryItem.expiration_date.is_not(None),
                    InventoryItem.expiration_date >= today,
                    InventoryItem.expiration_date <= end,
                )
                .order_by(InventoryItem.expiration_date.asc(), InventoryItem.id.asc())
                .all()
            )

    def list_expired(self) -> list[InventoryItem]:
        with self._db_errors("list expired items"):
            return (
                self.db.query(InventoryItem)
                .filter(InventoryItem.status == int(ItemStatus.EXPIRED))
                .order_by(InventoryItem.expiration_date.desc().nulls_last(), InventoryItem.id.asc())
                .all()
            )

    def list_logs(self, item_id: int) -> list[InventoryLogEntry]:
        """Usage history for an item, oldest first."""
        self.get(item_id)
        with self._db_errors(f"list logs for item {item_id}"):
            return (
                self.db.query(InventoryLogEntry)
                .filter(InventoryLogEntry.item_id == item_id)
                .order_by(InventoryLogEntry.id.asc())
                .all()
            )
