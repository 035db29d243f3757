import logging
from typing import Any, Iterable

from . import settings
from .schemas import ComboComponent, InventoryItem, SkuMapping, StockStatus
from .utils import find_column_value, to_int, to_text

logger = logging.getLogger(__name__)

# --- Column aliases for the master files ---
SKU_COLUMNS = ["sku", "SKU", "Sku"]
MSKU_COLUMNS = ["msku", "MSKU", "Msku"]
STATUS_COLUMNS = ["status", "Status", "STATUS"]
COMBO_COLUMNS = ["Combo ", "Combo", "combo"]
PRODUCT_NAME_COLUMNS = ["Product Name", "product_name", "Product"]
OPENING_STOCK_COLUMNS = ["Opening Stock", "opening_stock", "Opening"]
BUFFER_STOCK_COLUMNS = ["Buffer Stock", "buffer_stock", "Buffer"]

ACTIVE_COMBO_STATUSES = ("combo", "active")


def combo_slot_columns(slot: int) -> list[str]:
    return [f"SKU{slot}", f"sku{slot}"]


def build_sku_mapping(rows: Iterable[dict[str, Any]]) -> dict[str, SkuMapping]:
    """
    Builds the marketplace SKU -> MSKU table from master-SKU rows.
    - Rows missing either side are skipped.
    - Identity rows (sku == msku) are not stored; lookups already fall back to the SKU.
    - A later row for the same SKU overwrites the earlier one.
    """
    mapping: dict[str, SkuMapping] = {}

    for index, row in enumerate(rows):
        sku = to_text(find_column_value(row, SKU_COLUMNS))
        msku = to_text(find_column_value(row, MSKU_COLUMNS))
        status = to_text(find_column_value(row, STATUS_COLUMNS))

        if index < 3:
            logger.debug(f"Row {index}: sku={sku} msku={msku} status={status}")

        if not sku or not msku or sku == msku:
            continue
        mapping[sku] = SkuMapping(sku=sku, msku=msku, status=status)

    logger.info(f"✅ Loaded {len(mapping)} SKU mappings")
    return mapping


def build_combo_table(rows: Iterable[dict[str, Any]]) -> dict[str, list[ComboComponent]]:
    """
    Builds the combo SKU -> components table from the wide combo sheet.

    A row counts when its status is missing, 'Combo' or 'Active'. Components
    come from the SKU1..SKU14 columns; a combo without any is dropped.
    """
    combos: dict[str, list[ComboComponent]] = {}

    for index, row in enumerate(rows):
        combo_sku = to_text(find_column_value(row, COMBO_COLUMNS))
        status = to_text(find_column_value(row, STATUS_COLUMNS))
        components: list[ComboComponent] = []

        if combo_sku and (not status or status.lower() in ACTIVE_COMBO_STATUSES):
            for slot in range(1, settings.COMBO_SLOT_COUNT + 1):
                component = to_text(find_column_value(row, combo_slot_columns(slot)))
                if component:
                    components.append(ComboComponent(msku=component, quantity=1))

            if components:
                combos[combo_sku] = components
                logger.debug(
                    f"Loaded combo {combo_sku} with {len(components)} components: "
                    f"{[c.msku for c in components]}"
                )

        if index < 3:
            logger.debug(
                f"Combo Row {index}: combo={combo_sku} status={status} "
                f"components={len(components)}"
            )

    logger.info(f"✅ Loaded {len(combos)} combo SKU definitions")
    return combos


def _build_inventory_item(row: dict[str, Any], msku: str) -> InventoryItem:
    product_name = to_text(find_column_value(row, PRODUCT_NAME_COLUMNS))
    opening_stock = to_int(find_column_value(row, OPENING_STOCK_COLUMNS), 0)
    buffer_stock = to_int(find_column_value(row, BUFFER_STOCK_COLUMNS), 0)

    # Sum the per-warehouse columns
    location_stock = 0
    location_breakdown: dict[str, int] = {}
    for code in settings.WAREHOUSE_COLUMNS:
        stock = to_int(find_column_value(row, [code]), 0)
        if stock > 0:
            location_stock += stock
            location_breakdown[code] = stock

    # Opening stock wins; warehouse total is only the fallback when it is zero.
    total_stock = opening_stock
    if total_stock == 0 and location_stock > 0:
        total_stock = location_stock
    total_stock = max(0, total_stock)

    if location_breakdown:
        location_summary = f"Warehouses: {', '.join(location_breakdown)}"
    else:
        location_summary = "Unknown"

    return InventoryItem(
        msku=msku,
        product_name=product_name or "Unknown Product",
        location_summary=location_summary,
        status=StockStatus.IN_STOCK if total_stock > 0 else StockStatus.OUT_OF_STOCK,
        current_stock=total_stock,
        original_stock=total_stock,
        opening_stock=opening_stock,
        buffer_stock=buffer_stock,
        location_stock=location_stock,
        location_breakdown=location_breakdown,
    )


def build_inventory(
    rows: Iterable[dict[str, Any]],
) -> tuple[dict[str, InventoryItem], dict[str, InventoryItem]]:
    """
    Builds the working inventory ledger and its load-time snapshot.
    Rows without an MSKU are skipped; a later row for the same MSKU replaces the earlier one.
    """
    ledger: dict[str, InventoryItem] = {}
    snapshot: dict[str, InventoryItem] = {}

    for index, row in enumerate(rows):
        msku = to_text(find_column_value(row, MSKU_COLUMNS))
        if not msku:
            continue

        item = _build_inventory_item(row, msku)
        ledger[msku] = item
        snapshot[msku] = item.model_copy(deep=True)

        if index < 3:
            logger.debug(
                f"Inventory Row {index}: msku={msku} opening={item.opening_stock} "
                f"warehouses={item.location_stock} total={item.current_stock}"
            )

    logger.info(f"✅ Loaded {len(ledger)} inventory items")
    return ledger, snapshot
