"""Timestamp columns shared by the models."""

from sqlalchemy import Column, DateTime, func


class CreatedAtMixin:
    """Server-assigned creation time; never written by the application."""

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)


class TimestampMixin(CreatedAtMixin):
    """Creation time plus an updated_at refreshed on every UPDATE."""

    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
