from decimal import Decimal, InvalidOperation
from typing import List, Optional

from catalog.exceptions import ValidationError


def split_comma_list(value: Optional[str]) -> List[str]:
    """Split a comma-joined form value into trimmed, non-empty entries."""
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


def parse_decimal(field_name: str, value: str) -> Decimal:
    try:
        number = Decimal(value.strip())
    except (InvalidOperation, AttributeError):
        raise ValidationError(f"{field_name} must be a number, got {value!r}")
    if not number.is_finite():
        raise ValidationError(f"{field_name} must be a finite number, got {value!r}")
    return number


def format_decimal(value: Decimal) -> str:
    """Render without exponent or trailing zeros: 80, 79.5."""
    text = format(value.normalize(), "f")
    return "0" if text in ("-0", "") else text


def compute_offer_price(price: Optional[str], discount: Optional[str]) -> Optional[str]:
    """offerPrice = price - price * discount / 100, or None unless both are set."""
    if not price or not discount:
        return None
    amount = parse_decimal("price", price)
    percent = parse_decimal("discount", discount)
    return format_decimal(amount - amount * percent / Decimal(100))
