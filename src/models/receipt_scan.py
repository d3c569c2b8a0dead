"""ReceiptScan model for tracking receipt upload and processing."""

from sqlalchemy import JSON, Column, DateTime, Integer, String, Text
from sqlalchemy.dialects.postgresql import JSONB

from src.database import Base
from src.models.enums import ScanStatus
from src.models.mixins import TimestampMixin


class ReceiptScan(Base, TimestampMixin):
    """Model for tracking receipt scan uploads and their processing status."""

    __tablename__ = "receipt_scans"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(64), nullable=True, index=True)
    status = Column(
        String(20), nullable=False, default=ScanStatus.PENDING.value
    )  # pending, processing, completed, failed
    error_message = Column(Text, nullable=True)

    # Per-row outcome: [{name, quantity, unit, item_id?, action, error?}]
    parsed_items = Column(JSON().with_variant(JSONB, "postgresql"), nullable=True)

    # Summary of what was done
    items_added = Column(Integer, nullable=True)
    items_failed = Column(Integer, nullable=True)

    # When processing completed
    processed_at = Column(DateTime(timezone=True), nullable=True)
