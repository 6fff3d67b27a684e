"""
Product identifier allocation.

Identifiers look like ``productid0042``. A new product takes the lowest
positive sequence number not already in use, so numbers freed by deletes are
handed out again.
"""
import re
from typing import Iterable

from catalog.exceptions import DataIntegrityError

PRODUCT_ID_PREFIX = "productid"
PRODUCT_ID_WIDTH = 4

_PRODUCT_ID_PATTERN = re.compile(rf"^{PRODUCT_ID_PREFIX}(\d+)$")


def parse_product_sequence(product_id: str) -> int:
    """Return the numeric suffix of a stored identifier."""
    match = _PRODUCT_ID_PATTERN.match(product_id or "")
    if not match:
        raise DataIntegrityError(f"Malformed product identifier in store: {product_id!r}")
    return int(match.group(1))


def format_product_id(sequence: int) -> str:
    return f"{PRODUCT_ID_PREFIX}{sequence:0{PRODUCT_ID_WIDTH}d}"


def next_product_id(existing_ids: Iterable[str]) -> str:
    """
    Allocate the first free identifier.

    Args:
        existing_ids: Every identifier currently in the store

    Returns:
        Identifier whose sequence is the lowest positive integer not taken

    Raises:
        DataIntegrityError: If any existing identifier is malformed
    """
    taken = sorted({parse_product_sequence(product_id) for product_id in existing_ids})

    candidate = 1
    for sequence in taken:
        if sequence > candidate:
            break
        if sequence == candidate:
            candidate += 1

    return format_product_id(candidate)
