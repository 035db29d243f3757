"""
Marketplace detection and per-marketplace order field extraction.

Each marketplace export names its columns differently. The alias table below is
the single source of truth for where every logical order field lives; to support
a new export, add its column labels here.
"""

import logging
from typing import Any, Sequence

from . import settings
from .schemas import Marketplace, OrderInfo
from .utils import find_column_value, to_int, to_text

logger = logging.getLogger(__name__)

_GENERIC_ALIASES = {
    "sku": ["SKU", "sku", "MSKU", "msku", "Product Code", "Item Code"],
    "quantity": ["Quantity", "quantity", "Qty", "qty", "Count", "Amount"],
    "status": ["Status", "status", "Order Status", "Reason for Credit Entry", "State"],
    "order_date": ["Order Date", "order-date", "Date", "Created Date"],
    "customer_location": ["Customer State", "Customer Location", "Location", "State", "City"],
    "product_name": ["Product Name", "product-name", "Title", "Item Name", "Description"],
}

ORDER_FIELD_ALIASES: dict[Marketplace, dict[str, list[str]]] = {
    Marketplace.AMAZON: {
        "sku": ["SKU", "sku", "ASIN", "asin"],
        "quantity": ["Quantity", "quantity", "Qty", "qty"],
        "status": ["Order Status", "order-status", "Status", "status"],
        "order_date": ["Order Date", "order-date", "Purchase Date", "Date"],
        "customer_location": ["Ship City", "ship-city", "Customer State", "Location"],
        "product_name": ["Product Name", "product-name", "Title", "Item"],
    },
    Marketplace.FLIPKART: {
        "sku": ["SKU", "sku", "FSN", "fsn"],
        "quantity": ["Quantity", "quantity", "Qty", "qty"],
        "status": ["Order Status", "order-status", "Status", "status"],
        "order_date": ["Order Date", "order-date", "Date"],
        "customer_location": ["Customer State", "customer-state", "Location"],
        "product_name": ["Product Name", "product-name", "Item"],
    },
    Marketplace.MEESHO: {
        "sku": ["MSKU", "msku", "SKU", "sku"],
        "quantity": ["Quantity", "quantity", "Qty", "qty"],
        "status": ["Status", "status", "Order Status"],
        "order_date": ["Order Date", "order-date", "Date"],
        "customer_location": ["Customer Location", "customer-location", "Location"],
        "product_name": ["Product Name", "product-name", "Item"],
    },
    Marketplace.GENERIC: _GENERIC_ALIASES,
    Marketplace.UNKNOWN: _GENERIC_ALIASES,
}

# Checked in order; the first marketplace with a matching column wins.
MARKETPLACE_MARKERS: list[tuple[Marketplace, tuple[str, ...]]] = [
    (Marketplace.MEESHO, ("msku",)),
    (Marketplace.AMAZON, ("asin", "amazon")),
    (Marketplace.FLIPKART, ("flipkart", "fsn")),
    (Marketplace.GENERIC, ("sku",)),
]


def detect_marketplace(order_rows: Sequence[dict[str, Any]] | None) -> Marketplace:
    """Classifies an order table by the column names of its first row."""
    if not order_rows:
        return Marketplace.UNKNOWN

    columns = [str(column).lower() for column in order_rows[0].keys()]
    logger.debug(f"Available columns for marketplace detection: {columns}")

    for marketplace, markers in MARKETPLACE_MARKERS:
        if any(marker in column for column in columns for marker in markers):
            return marketplace
    return Marketplace.UNKNOWN


def extract_order_info(order: dict[str, Any], marketplace: Marketplace) -> OrderInfo:
    """Pulls the logical order fields out of one row using the marketplace's aliases."""
    aliases = ORDER_FIELD_ALIASES.get(marketplace, _GENERIC_ALIASES)

    def field(name: str) -> Any:
        return find_column_value(order, aliases[name])

    return OrderInfo(
        sku=to_text(field("sku")),
        quantity=to_int(field("quantity"), 1),
        status=to_text(field("status")),
        order_date=to_text(field("order_date")),
        customer_location=to_text(field("customer_location")),
        product_name=to_text(field("product_name")),
    )


def should_process_order(status: Any) -> bool:
    """
    Returns True when an order status counts as a completed sale.

    The check is a case-insensitive substring match: at least one valid keyword
    must appear, and any invalid keyword (cancelled, returned, ...) vetoes it.
    """
    if status is None:
        return False
    status_lower = str(status).lower()
    if not status_lower:
        return False

    has_valid_status = any(s in status_lower for s in settings.VALID_ORDER_STATUSES)
    has_invalid_status = any(s in status_lower for s in settings.INVALID_ORDER_STATUSES)
    return has_valid_status and not has_invalid_status
