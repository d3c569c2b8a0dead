"""Parsing of receipt extraction output into RawLineItem rows.

Models answer in one of two shapes: a JSON array of objects (keyed
``expiration_date`` or ``expDate``) or six-column CSV
``name,category,quantity,unit,price,expiration_date``. Both are normalized
here so nothing downstream sees the difference. Bad rows are dropped one at a
time; the rest of the receipt survives.
"""

import csv
import io
import json
import logging
import math
import re
from datetime import date, datetime
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from src.schemas.receipt_scan import RawLineItem
from src.services.units import DEFAULT_UNIT

logger = logging.getLogger(__name__)

CSV_COLUMNS = ("name", "category", "quantity", "unit", "price", "expiration_date")
CSV_HEADER_NAMES = {"name", "item_name", "item"}

FENCED_BLOCK_RE = re.compile(r"```[\w-]*\s*(.*?)```", re.DOTALL)
QUANTITY_RE = re.compile(r"^\s*(\d+(?:[.,]\d+)?)\s*(.*?)\s*$")
JSON_START_RE = re.compile(r"\[\s*\{")

# Lines the prompt already excludes; dropped again in case the model slips
NON_FOOD_NAMES = {
    "tax",
    "sales tax",
    "hst",
    "gst",
    "vat",
    "subtotal",
    "sub total",
    "total",
    "balance due",
    "change",
    "bag",
    "bags",
    "bag fee",
    "shopping bag",
    "paper bag",
    "plastic bag",
    "deposit",
    "bottle deposit",
    "fee",
    "service fee",
    "discount",
    "coupon",
}


def strip_code_fences(text: str) -> str:
    """Return the body of the first fenced block, or the text without stray fences."""
    match = FENCED_BLOCK_RE.search(text)
    if match:
        return match.group(1).strip()
    return text.strip().strip("`").strip()


def is_non_food(name: str) -> bool:
    return " ".join(name.lower().split()) in NON_FOOD_NAMES


def parse_receipt_response(text: str) -> list[RawLineItem]:
    """Parse a model reply into line items, skipping anything malformed."""
    body = strip_code_fences(text or "")
    if not body:
        return []

    if body.startswith(("[", "{")) or JSON_START_RE.search(body):
        rows = _rows_from_json(body)
    else:
        rows = _rows_from_csv(body)

    items = []
    for index, row in enumerate(rows):
        item = _normalize_row(row)
        if item is None:
            logger.warning(f"Discarding malformed receipt row {index}: {row!r}")
            continue
        if is_non_food(item.name):
            logger.info(f"Skipping non-food receipt line '{item.name}'")
            continue
        items.append(item)
    return items


def _rows_from_json(body: str) -> list[Any]:
    try:
        data = json.loads(body)
    except json.JSONDecodeError:
        # Prose around the array: try the outermost brackets
        start, end = body.find("["), body.rfind("]")
        if start == -1 or end <= start:
            logger.warning("Receipt response is not valid JSON")
            return []
        try:
            data = json.loads(body[start : end + 1])
        except json.JSONDecodeError as e:
            logger.warning(f"Receipt response is not valid JSON: {e}")
            return []

    if isinstance(data, dict):
        data = data.get("items", [])
    if not isinstance(data, list):
        logger.warning(f"Receipt JSON is a {type(data).__name__}, expected a list")
        return []
    return data


def _rows_from_csv(body: str) -> list[dict[str, str] | None]:
    rows: list[dict[str, str] | None] = []
    reader = csv.reader(io.StringIO(body), skipinitialspace=True)
    for cells in reader:
        if not cells or all(not cell.strip() for cell in cells):
            continue
        if cells[0].strip().lower() in CSV_HEADER_NAMES:
            continue
        if len(cells) != len(CSV_COLUMNS):
            rows.append(None)
            continue
        rows.append({column: cell.strip() for column, cell in zip(CSV_COLUMNS, cells)})
    return rows


def _normalize_row(row: Any) -> RawLineItem | None:
    if not isinstance(row, dict):
        return None

    name = _clean_str(row.get("name"))
    if not name:
        return None

    quantity, unit_hint = _parse_quantity(row.get("quantity"))
    unit = _clean_str(row.get("unit")) or unit_hint or DEFAULT_UNIT
    price = _parse_number(row.get("price"))
    raw_date = row.get("expiration_date")
    if raw_date in (None, ""):
        raw_date = row.get("expDate")
    category = _clean_str(row.get("category"))

    try:
        return RawLineItem(
            name=name[:255],
            category=category[:100] if category else None,
            quantity=quantity,
            unit=unit[:50],
            price=price if price is not None and price >= 0 else 0.0,
            expiration_date=_parse_date(raw_date),
        )
    except PydanticValidationError:
        return None


def _clean_str(value: Any) -> str | None:
    if not isinstance(value, str):
        return None
    cleaned = value.strip()
    return cleaned or None


def _parse_quantity(value: Any) -> tuple[float, str | None]:
    """Quantity defaults to 1; "2 lbs" also yields a unit hint."""
    if isinstance(value, bool):
        return 1.0, None
    if isinstance(value, int | float):
        return (float(value), None) if math.isfinite(value) and value > 0 else (1.0, None)
    if isinstance(value, str):
        match = QUANTITY_RE.match(value)
        if match:
            number = float(match.group(1).replace(",", "."))
            unit = match.group(2) or None
            return (number if number > 0 else 1.0), unit
    return 1.0, None


def _parse_number(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        return float(value) if math.isfinite(value) else None
    if isinstance(value, str):
        cleaned = value.strip().lstrip("$€£").replace(",", ".").strip()
        try:
            number = float(cleaned)
        except ValueError:
            return None
        return number if math.isfinite(number) else None
    return None


def _parse_date(value: Any) -> date | None:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value.strip():
        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError:
            return None
    return None
