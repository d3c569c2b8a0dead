"""Inventory API endpoints."""

import base64
from typing import Annotated

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile, status
from sqlalchemy.orm import Session

from src.api.dependencies import (
    get_current_user_id,
    get_inventory_store,
    get_receipt_service,
    get_reconciliation_service,
)
from src.config import Settings, get_settings
from src.database import get_db
from src.models.receipt_scan import ReceiptScan
from src.schemas.inventory import (
    FailedItemResponse,
    InventoryBulkAddRequest,
    InventoryBulkAddResponse,
    InventoryItemCreate,
    InventoryItemResponse,
    InventoryItemUpdate,
    InventoryLogResponse,
    SortKey,
    UsageCreate,
)
from src.schemas.receipt_scan import (
    ReceiptPreviewResponse,
    ReceiptScanCreateResponse,
    ReceiptScanResponse,
)
from src.services.inventory_store import InventoryStore
from src.services.receipt_service import ALLOWED_IMAGE_TYPES, ReceiptService
from src.services.reconciliation import ReconciliationService

router = APIRouter(prefix="/api/v1/inventory", tags=["inventory"])

MAX_RECEIPT_BYTES = 10 * 1024 * 1024


async def read_receipt_upload(file: UploadFile) -> bytes:
    """Validate type and size of an uploaded receipt image and return its bytes."""
    if file.content_type not in ALLOWED_IMAGE_TYPES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid file type. Allowed types: {', '.join(sorted(ALLOWED_IMAGE_TYPES))}",
        )

    image_data = await file.read()

    if len(image_data) > MAX_RECEIPT_BYTES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="File too large. Maximum size is 10MB.",
        )
    if not image_data:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Uploaded file is empty.",
        )
    return image_data


@router.get("", response_model=list[InventoryItemResponse])
def list_inventory_items(
    store: Annotated[InventoryStore, Depends(get_inventory_store)],
    sort: SortKey = "expiration_date",
    ascending: bool = True,
):
    """List active pantry items, soonest expiry first by default."""
    return store.list_active(sort_key=sort, ascending=ascending)


@router.get("/expiring", response_model=list[InventoryItemResponse])
def list_expiring_items(
    store: Annotated[InventoryStore, Depends(get_inventory_store)],
    settings: Annotated[Settings, Depends(get_settings)],
    days: Annotated[int | None, Query(ge=0, le=365)] = None,
):
    """List active items expiring from today through the next `days` days."""
    window = settings.expiring_soon_days if days is None else days
    return store.list_expiring_within(window)


@router.get("/expired", response_model=list[InventoryItemResponse])
def list_expired_items(
    store: Annotated[InventoryStore, Depends(get_inventory_store)],
):
    """List items marked expired, most recently expired first."""
    return store.list_expired()


@router.post("", response_model=InventoryItemResponse, status_code=status.HTTP_201_CREATED)
def create_inventory_item(
    item_data: InventoryItemCreate,
    reconciliation: Annotated[ReconciliationService, Depends(get_reconciliation_service)],
    user_id: Annotated[str | None, Depends(get_current_user_id)],
):
    """Add an item by hand."""
    return reconciliation.add_item(
        name=item_data.name,
        quantity=item_data.quantity,
        unit=item_data.unit,
        category=item_data.category,
        price=item_data.price,
        expiration_date=item_data.expiration_date,
        user_id=user_id,
    )


@router.post("/bulk", response_model=InventoryBulkAddResponse)
def bulk_add_inventory_items(
    request: InventoryBulkAddRequest,
    reconciliation: Annotated[ReconciliationService, Depends(get_reconciliation_service)],
    user_id: Annotated[str | None, Depends(get_current_user_id)],
):
    """Bulk add rows (e.g., reviewed receipt items). Bad rows are reported, not fatal."""
    result = reconciliation.reconcile(request.items, user_id=user_id)
    items = [reconciliation.store.get(item_id) for item_id in result.succeeded]
    return InventoryBulkAddResponse(
        added=len(result.succeeded),
        failed=[FailedItemResponse(item=f.item, error=f.error) for f in result.failed],
        items=items,
    )


# --- Receipt Scanning ---


@router.post("/receipt/preview", response_model=ReceiptPreviewResponse)
async def preview_receipt(
    file: Annotated[UploadFile, File(description="Receipt image (JPEG, PNG, GIF, or WebP)")],
    receipt_service: Annotated[ReceiptService, Depends(get_receipt_service)],
):
    """Extract items from a receipt without saving them, for review before /bulk."""
    image_data = await read_receipt_upload(file)
    items = await receipt_service.extract(image_data, file.content_type)
    return ReceiptPreviewResponse(items=items)


@router.post("/scan-receipt", response_model=ReceiptScanCreateResponse)
async def scan_receipt(
    file: Annotated[UploadFile, File(description="Receipt image (JPEG, PNG, GIF, or WebP)")],
    db: Annotated[Session, Depends(get_db)],
    user_id: Annotated[str | None, Depends(get_current_user_id)],
):
    """Upload a receipt image for scanning.

    The receipt will be processed asynchronously using Claude Vision and the
    extracted items added to the inventory. Poll the status endpoint to check
    when processing is complete.

    Note: This endpoint must remain async because UploadFile.read() is async.
    """
    from src.tasks.receipt_scan import process_receipt_scan

    image_data = await read_receipt_upload(file)

    # Create scan record
    scan = ReceiptScan(user_id=user_id, status="pending")
    db.add(scan)
    db.commit()
    db.refresh(scan)

    # Queue async processing
    image_data_b64 = base64.b64encode(image_data).decode("utf-8")
    process_receipt_scan.delay(scan.id, image_data_b64, file.content_type)

    return ReceiptScanCreateResponse(
        id=scan.id,
        status="pending",
        message="Receipt uploaded successfully. Processing in background.",
    )


@router.get("/scan-receipt/{scan_id}", response_model=ReceiptScanResponse)
def get_receipt_scan(
    scan_id: int,
    db: Annotated[Session, Depends(get_db)],
):
    """Get the status and results of a receipt scan."""
    scan = db.query(ReceiptScan).filter(ReceiptScan.id == scan_id).first()

    if not scan:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Receipt scan not found",
        )

    return scan


@router.get("/scan-receipts", response_model=list[ReceiptScanResponse])
def list_receipt_scans(
    db: Annotated[Session, Depends(get_db)],
    limit: Annotated[int, Query(ge=1, le=100)] = 10,
):
    """List recent receipt scans."""
    scans = (
        db.query(ReceiptScan)
        .order_by(ReceiptScan.created_at.desc(), ReceiptScan.id.desc())
        .limit(limit)
        .all()
    )
    return scans


# --- Single item ---


@router.get("/{item_id}", response_model=InventoryItemResponse)
def get_inventory_item(
    item_id: int,
    store: Annotated[InventoryStore, Depends(get_inventory_store)],
):
    """Get a specific inventory item."""
    return store.get(item_id)


@router.put("/{item_id}", response_model=InventoryItemResponse)
def update_inventory_item(
    item_id: int,
    item_data: InventoryItemUpdate,
    store: Annotated[InventoryStore, Depends(get_inventory_store)],
):
    """Update expiry, remaining quantity or price together. Omitted fields are left alone."""
    fields = item_data.model_dump(include=item_data.model_fields_set)
    return store.update(item_id, **fields)


@router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_inventory_item(
    item_id: int,
    store: Annotated[InventoryStore, Depends(get_inventory_store)],
):
    """Remove a used-up item. Its usage history is kept."""
    store.remove(item_id)


@router.post("/{item_id}/expire", response_model=InventoryItemResponse)
def expire_inventory_item(
    item_id: int,
    store: Annotated[InventoryStore, Depends(get_inventory_store)],
):
    """Mark an item expired; it leaves the pantry views but stays in history."""
    return store.mark_expired(item_id)


@router.post(
    "/{item_id}/usage",
    response_model=InventoryLogResponse,
    status_code=status.HTTP_201_CREATED,
)
def log_item_usage(
    item_id: int,
    usage: UsageCreate,
    store: Annotated[InventoryStore, Depends(get_inventory_store)],
):
    """Record partial usage; the remaining quantity never drops below zero."""
    store.get(item_id)
    return store.log_partial_usage(item_id, usage.amount, usage.action_type)


@router.get("/{item_id}/logs", response_model=list[InventoryLogResponse])
def list_item_logs(
    item_id: int,
    store: Annotated[InventoryStore, Depends(get_inventory_store)],
):
    """Usage history for an item, oldest first."""
    return store.list_logs(item_id)
