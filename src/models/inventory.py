"""Inventory models: pantry items and their append-only usage log."""

from sqlalchemy import CheckConstraint, Column, Date, Float, ForeignKey, Integer, String
from sqlalchemy import Enum as SAEnum
from sqlalchemy.orm import relationship

from src.database import Base
from src.models.enums import ActionType, ItemStatus, StandardUnit
from src.models.mixins import CreatedAtMixin, TimestampMixin


def _enum_values(enum_cls) -> list[str]:
    return [member.value for member in enum_cls]


class InventoryItem(Base, TimestampMixin):
    """A single pantry entry with quantity tracked in the user's unit."""

    __tablename__ = "inventory"
    __table_args__ = (
        CheckConstraint("current_quantity >= 0", name="ck_inventory_current_quantity_nonneg"),
        CheckConstraint("price IS NULL OR price >= 0", name="ck_inventory_price_nonneg"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(64), nullable=True, index=True)  # Not enforced
    name = Column(String(255), nullable=False)
    category = Column(String(100), nullable=True)

    initial_quantity = Column(Float, nullable=False)
    current_quantity = Column(Float, nullable=False)
    user_unit = Column(String(50), nullable=False, default="count")
    standard_unit = Column(
        SAEnum(StandardUnit, name="standard_unit_type", values_callable=_enum_values),
        nullable=False,
        default=StandardUnit.COUNT,
    )
    conversion_factor = Column(Float, nullable=False, default=1.0)

    price = Column(Float, nullable=True)  # Whole-item price, not per unit
    expiration_date = Column(Date, nullable=True, index=True)
    status = Column(Integer, nullable=True, default=int(ItemStatus.ACTIVE))  # 1 | -1 | NULL

    # Logs outlive their item: the database nulls item_id on delete
    logs = relationship(
        "InventoryLogEntry",
        back_populates="item",
        passive_deletes=True,
        order_by="InventoryLogEntry.id",
    )

    @property
    def is_active(self) -> bool:
        """Legacy rows without a status count as active."""
        return self.status is None or self.status == ItemStatus.ACTIVE

    @property
    def standard_quantity(self) -> float:
        """Remaining amount expressed in the standard unit."""
        return self.current_quantity * self.conversion_factor


class InventoryLogEntry(Base, CreatedAtMixin):
    """One consumption or adjustment event against an inventory item."""

    __tablename__ = "inventory_logs"

    id = Column(Integer, primary_key=True, index=True)
    item_id = Column(
        Integer,
        ForeignKey("inventory.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    action_type = Column(
        SAEnum(ActionType, name="action_type_enum", values_callable=_enum_values),
        nullable=False,
    )
    amount_changed = Column(Float, nullable=False)

    item = relationship("InventoryItem", back_populates="logs")
