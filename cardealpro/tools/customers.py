"""
Mock customer persistence (the ``customers`` table).

In production, this would write to a hosted database. Each row keeps the
contact, vehicle, trade-in, and lender blobs side by side with created and
updated timestamps.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Optional, TypedDict

logger = logging.getLogger(__name__)

BLOB_KEYS = ("customer", "vehicle", "tradeIn", "lender")


class CustomerRow(TypedDict):
    """Row stored in the customers table."""

    id: str
    customer: dict[str, Any]
    vehicle: dict[str, Any]
    tradeIn: dict[str, Any]
    lender: dict[str, Any]
    created_at: str
    updated_at: str


class CustomerNotFoundError(KeyError):
    """Raised when updating a customer ID that was never saved."""


_customers: dict[str, CustomerRow] = {}


def save_customer(customer_data: dict[str, Any], customer_id: Optional[str] = None) -> CustomerRow:
    """
    Insert a new customer, or merge into an existing one.

    ``customer_data`` holds any of the blob keys (``customer``, ``vehicle``,
    ``tradeIn``, ``lender``); other keys are ignored. On update, each blob is
    merged key by key into the stored one.

    Raises:
        CustomerNotFoundError: ``customer_id`` given but not stored.
    """
    now = datetime.now(timezone.utc).isoformat()

    if customer_id is None:
        row: CustomerRow = {
            "id": f"CUS-{uuid.uuid4().hex[:8].upper()}",
            "customer": dict(customer_data.get("customer") or {}),
            "vehicle": dict(customer_data.get("vehicle") or {}),
            "tradeIn": dict(customer_data.get("tradeIn") or {}),
            "lender": dict(customer_data.get("lender") or {}),
            "created_at": now,
            "updated_at": now,
        }
        _customers[row["id"]] = row
        logger.info("Customer saved: %s", row["id"])
        return row

    existing = _customers.get(customer_id)
    if existing is None:
        raise CustomerNotFoundError(customer_id)
    for key in BLOB_KEYS:
        if customer_data.get(key):
            existing[key] = {**existing[key], **customer_data[key]}
    existing["updated_at"] = now
    logger.info("Customer updated: %s", customer_id)
    return existing


def get_customer(customer_id: str) -> Optional[CustomerRow]:
    return _customers.get(customer_id)


def list_customers() -> list[CustomerRow]:
    return list(_customers.values())


def reset() -> None:
    """Clear all stored customers. Used by tests."""
    _customers.clear()
