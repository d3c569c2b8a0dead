"""Celery task for receipt scanning."""

import asyncio
import base64
import logging
from datetime import UTC, datetime

from sqlalchemy.orm import Session

from src.celery_app import app as celery_app
from src.celery_app import get_task_session_factory
from src.models.enums import ScanStatus
from src.models.receipt_scan import ReceiptScan
from src.services.exceptions import ExtractionError, ValidationError
from src.services.inventory_store import InventoryStore
from src.services.receipt_service import ReceiptService
from src.services.reconciliation import ReconciliationService

logger = logging.getLogger(__name__)


def run_receipt_scan(
    db: Session,
    scan_id: int,
    image_data: bytes,
    media_type: str,
    receipt_service: ReceiptService,
) -> dict:
    """Extract a receipt and add its items to the inventory, recording the outcome on the scan."""
    scan = db.query(ReceiptScan).filter(ReceiptScan.id == scan_id).first()
    if not scan:
        logger.error(f"ReceiptScan {scan_id} not found")
        return {"error": "Scan not found"}

    scan.status = ScanStatus.PROCESSING.value
    db.commit()

    try:
        # Run async function in sync context
        raw_items = asyncio.run(receipt_service.extract(image_data, media_type))
    except (ExtractionError, ValidationError) as e:
        logger.error(f"Failed to extract receipt {scan_id}: {e}")
        message = e.user_message if isinstance(e, ExtractionError) else str(e)
        scan.status = ScanStatus.FAILED.value
        scan.error_message = message
        db.commit()
        return {"error": message}

    reconciliation = ReconciliationService(InventoryStore(db))
    result = reconciliation.reconcile(raw_items, user_id=scan.user_id)

    # Pair each row with its outcome; successes come back in row order
    errors_by_row = {id(failed.item): failed.error for failed in result.failed}
    created_ids = iter(result.succeeded)
    parsed_items_data = []
    for raw in raw_items:
        item_data = {"name": raw.name, "quantity": raw.quantity, "unit": raw.unit}
        if id(raw) in errors_by_row:
            item_data.update(action="failed", item_id=None, error=errors_by_row[id(raw)])
        else:
            item_data.update(action="added", item_id=next(created_ids), error=None)
        parsed_items_data.append(item_data)

    # Update scan record
    scan.status = ScanStatus.COMPLETED.value
    scan.parsed_items = parsed_items_data
    scan.items_added = len(result.succeeded)
    scan.items_failed = len(result.failed)
    scan.processed_at = datetime.now(UTC)
    db.commit()

    return {
        "status": ScanStatus.COMPLETED.value,
        "items_added": scan.items_added,
        "items_failed": scan.items_failed,
        "parsed_items": parsed_items_data,
    }


@celery_app.task(name="tasks.process_receipt_scan")
def process_receipt_scan(scan_id: int, image_data_b64: str, media_type: str) -> dict:
    """Process a receipt scan using Claude Vision.

    Args:
        scan_id: ID of the ReceiptScan record
        image_data_b64: Base64-encoded image data
        media_type: MIME type of the image

    Returns:
        Dict with processing results
    """
    db = get_task_session_factory()()
    try:
        return run_receipt_scan(
            db,
            scan_id,
            base64.b64decode(image_data_b64),
            media_type,
            ReceiptService(),
        )
    except Exception as e:
        logger.exception(f"Error processing receipt scan {scan_id}")
        try:
            db.rollback()
            scan = db.query(ReceiptScan).filter(ReceiptScan.id == scan_id).first()
            if scan:
                scan.status = ScanStatus.FAILED.value
                scan.error_message = str(e)
                db.commit()
        except Exception as db_error:
            logger.error(f"Failed to update scan status: {db_error}")
        return {"error": str(e)}
    finally:
        db.close()
