"""
Field Validators

Per-field cleaning and checks applied while the seller types.

Two kinds of function live here:
- clean_* take raw input and return the normalized value to store, or None
  when the keystroke should be dropped (no state change, no error shown).
- validate_* take a stored value and return an error message, or None.
"""

import re
from decimal import Decimal, InvalidOperation
from typing import Optional, Sequence

from ..common.constants import (
    DESCRIPTION_MAX_LENGTH,
    MODEL_NAME_MAX_LENGTH,
    NAME_MAX_LENGTH,
    NAME_MIN_LENGTH,
    PRICE_DECIMAL_PLACES,
)

_NON_DECIMAL_CHARS = re.compile(r"[^0-9.]")
_LEADING_INT = re.compile(r"\s*\+?(\d+)")


def parse_decimal(value: str) -> Optional[Decimal]:
    """Parse a cleaned decimal string; None if empty, not a number, NaN or infinite."""
    if not value or value == ".":
        return None
    try:
        parsed = Decimal(value)
    except InvalidOperation:
        return None
    return parsed if parsed.is_finite() else None


def clean_decimal_input(raw: str) -> Optional[str]:
    """
    Clean a price/MRP keystroke.

    Strips everything except digits and '.', then drops the input when it
    would contain a second decimal point or more than two fractional digits.

    Returns:
        Cleaned string, or None to keep the previous value
    """
    cleaned = _NON_DECIMAL_CHARS.sub("", raw or "")
    parts = cleaned.split(".")
    if len(parts) > 2:
        return None
    if len(parts) == 2 and len(parts[1]) > PRICE_DECIMAL_PLACES:
        return None
    return cleaned


def clean_stock_input(raw) -> int:
    """Parse a stock quantity; anything non-numeric or negative becomes 0."""
    if isinstance(raw, bool):
        return 0
    if isinstance(raw, int):
        return max(raw, 0)
    match = _LEADING_INT.match(str(raw or ""))
    return int(match.group(1)) if match else 0


def truncate_text(value: str, limit: int) -> str:
    return (value or "")[:limit]


def clean_name(raw: str) -> str:
    return truncate_text(raw, NAME_MAX_LENGTH)


def clean_model_name(raw: str) -> str:
    return truncate_text(raw, MODEL_NAME_MAX_LENGTH)


def clean_description(raw: str) -> str:
    # Soft cap: truncate, never reject
    return truncate_text(raw, DESCRIPTION_MAX_LENGTH)


def validate_name(name: str) -> Optional[str]:
    stripped = (name or "").strip()
    if not stripped:
        return "Product name is required"
    if len(stripped) < NAME_MIN_LENGTH:
        return f"Product name must be at least {NAME_MIN_LENGTH} characters"
    if len(stripped) > NAME_MAX_LENGTH:
        return f"Product name must be at most {NAME_MAX_LENGTH} characters"
    return None


def validate_price(price: str) -> Optional[str]:
    if not price:
        return "Price is required"
    value = parse_decimal(price)
    if value is None:
        return "Price must be a valid number"
    if value <= 0:
        return "Price must be greater than 0"
    return None


def validate_mrp(mrp: str, price: str) -> Optional[str]:
    """MRP is optional; when present it must be a number not below the price."""
    if not mrp:
        return None
    mrp_value = parse_decimal(mrp)
    if mrp_value is None:
        return "MRP must be a valid number"
    price_value = parse_decimal(price)
    if price_value is not None and mrp_value < price_value:
        return "MRP must be ≥ price"
    return None


def validate_stock(total_stock: int, online_stock: int) -> dict:
    """
    Check stock quantities.

    Returns:
        {field: message}; 'stock' carries the online-vs-total error
    """
    errors = {}
    if total_stock < 0:
        errors["total_stock"] = "Stock cannot be negative"
    if online_stock < 0:
        errors["online_stock"] = "Online stock cannot be negative"
    if online_stock > total_stock:
        errors["stock"] = "Online stock cannot exceed total stock"
    return errors


def validate_attribute(value: str, options: Sequence[str]) -> Optional[str]:
    """Enumerated attributes only accept one of their options (or empty)."""
    if options and value and value not in options:
        return f"Choose one of: {', '.join(options)}"
    return None
