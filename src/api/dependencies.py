"""FastAPI dependencies wiring sessions and services."""

from typing import Annotated

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from src.config import Settings, get_settings
from src.database import get_db
from src.models.inventory import InventoryItem
from src.services import llm
from src.services.inventory_store import InventoryStore
from src.services.receipt_service import ReceiptService
from src.services.reconciliation import ReconciliationService
from src.services.recipe_suggestion import RecipeSuggestionService


def get_current_user_id(
    x_user_id: Annotated[str | None, Header(max_length=64)] = None,
) -> str | None:
    """Owner tag taken from the X-User-Id header.

    Stored on new rows but not verified or used to filter reads.
    """
    return x_user_id or None


def get_inventory_store(
    db: Annotated[Session, Depends(get_db)],
) -> InventoryStore:
    """Get inventory store bound to the request session."""
    return InventoryStore(db)


def get_reconciliation_service(
    store: Annotated[InventoryStore, Depends(get_inventory_store)],
) -> ReconciliationService:
    """Get reconciliation service with dependencies."""
    return ReconciliationService(store)


def get_receipt_service(
    settings: Annotated[Settings, Depends(get_settings)],
) -> ReceiptService:
    """Get receipt extraction service."""
    return ReceiptService(settings)


def get_llm_service(
    settings: Annotated[Settings, Depends(get_settings)],
) -> llm.LLMService | llm.AnthropicLLMService:
    """Get the configured text LLM service."""
    return llm.get_llm_service(settings)


def get_recipe_suggestion_service(
    llm_service: Annotated[
        llm.LLMService | llm.AnthropicLLMService, Depends(get_llm_service)
    ],
) -> RecipeSuggestionService:
    """Get recipe suggestion service with dependencies."""
    return RecipeSuggestionService(llm_service)


def get_active_pantry_items(
    store: Annotated[InventoryStore, Depends(get_inventory_store)],
) -> list[InventoryItem]:
    """Active items, soonest expiry first."""
    return store.list_active(sort_key="expiration_date")
