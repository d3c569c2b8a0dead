"""Turn extracted receipt rows into inventory records."""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date

from src.models.inventory import InventoryItem
from src.schemas.receipt_scan import RawLineItem
from src.services.exceptions import PersistenceError, ValidationError
from src.services.inventory_store import InventoryStore, is_finite_number
from src.services.units import DEFAULT_UNIT, classify_standard_unit, infer_conversion_factor

logger = logging.getLogger(__name__)


@dataclass
class FailedLineItem:
    """A receipt row that could not be stored, with the reason."""

    item: RawLineItem
    error: str


@dataclass
class ReconciliationResult:
    """Partitioned outcome of a batch: stored item ids and rejected rows."""

    succeeded: list[int] = field(default_factory=list)
    failed: list[FailedLineItem] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.succeeded) + len(self.failed)


class ReconciliationService:
    """Resolves units for incoming rows and writes them through the store."""

    def __init__(self, store: InventoryStore):
        self.store = store

    def add_item(
        self,
        name: str,
        quantity: float,
        unit: str | None = DEFAULT_UNIT,
        category: str | None = None,
        price: float | None = None,
        expiration_date: date | None = None,
        user_id: str | None = None,
    ) -> InventoryItem:
        """Validate one item, resolve its unit family and factor, and store it."""
        if not name or not name.strip():
            raise ValidationError("name is required")
        if not is_finite_number(quantity) or quantity <= 0:
            raise ValidationError(f"quantity for '{name.strip()}' must be greater than zero")
        if price is not None and (not is_finite_number(price) or price < 0):
            raise ValidationError(f"price for '{name.strip()}' must not be negative")

        user_unit = (unit or "").strip() or DEFAULT_UNIT
        standard_unit = classify_standard_unit(user_unit)
        conversion_factor = infer_conversion_factor(user_unit, standard_unit)

        return self.store.create(
            name=name,
            quantity=quantity,
            user_unit=user_unit,
            standard_unit=standard_unit,
            conversion_factor=conversion_factor,
            category=category,
            price=price,
            expiration_date=expiration_date,
            user_id=user_id,
        )

    def reconcile(
        self, raw_items: Iterable[RawLineItem], user_id: str | None = None
    ) -> ReconciliationResult:
        """Store every row independently.

        A failing row is recorded and skipped; rows already stored stay stored.
        """
        result = ReconciliationResult()

        for raw in raw_items:
            try:
                item = self.add_item(
                    name=raw.name,
                    quantity=raw.quantity,
                    unit=raw.unit,
                    category=raw.category,
                    price=raw.price,
                    expiration_date=raw.expiration_date,
                    user_id=user_id,
                )
            except (ValidationError, PersistenceError) as e:
                logger.warning(f"Could not add receipt item '{raw.name}': {e}")
                result.failed.append(FailedLineItem(item=raw, error=str(e)))
                continue
            result.succeeded.append(item.id)

        logger.info(f"Reconciled receipt: {len(result.succeeded)} of {result.total} items added")
        return result
