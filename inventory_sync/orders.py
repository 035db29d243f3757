import logging
from typing import Any, Sequence

from .catalog import SkuCatalog
from .marketplaces import extract_order_info, should_process_order
from .schemas import BatchResult, Marketplace, ProcessedOrder

logger = logging.getLogger(__name__)


def process_order_batch(
    order_rows: Sequence[dict[str, Any]],
    marketplace: Marketplace,
    catalog: SkuCatalog,
) -> BatchResult:
    """
    Turns one order table into per-MSKU sold quantities.

    - Rows whose status is not a completed sale are skipped.
    - Rows without a SKU or with a non-positive quantity are dropped.
    - Combo SKUs are expanded; each component gets `units x order quantity`.
    - Components that resolve to an empty MSKU are reported as unmapped
      (by their original SKU).
    """
    logger.info(f"Processing {len(order_rows)} orders from {marketplace.value}")

    processed_orders: list[ProcessedOrder] = []
    msku_quantities: dict[str, int] = {}
    unmapped_skus: dict[str, None] = {}  # insertion-ordered set

    for index, order in enumerate(order_rows):
        info = extract_order_info(order, marketplace)

        if index < 3:
            logger.debug(
                f"Order {index}: sku={info.sku} quantity={info.quantity} "
                f"status={info.status} date={info.order_date}"
            )

        if not should_process_order(info.status):
            logger.debug(f"Skipping order with status: {info.status}")
            continue

        if not info.sku or info.quantity <= 0:
            continue

        components = catalog.expand_sku(info.sku, marketplace)
        is_combo = len(components) > 1

        for component in components:
            msku = component.msku
            if not msku:
                unmapped_skus[info.sku] = None
                continue

            item_quantity = component.quantity * info.quantity
            msku_quantities[msku] = msku_quantities.get(msku, 0) + item_quantity

            processed_orders.append(
                ProcessedOrder(
                    marketplace=marketplace,
                    original_sku=info.sku,
                    mapped_msku=msku,
                    quantity=item_quantity,
                    status=info.status,
                    order_date=info.order_date,
                    customer_location=info.customer_location,
                    product_name=info.product_name,
                    is_combo_component=is_combo,
                )
            )

    logger.info(f"Processed {len(processed_orders)} valid order lines")

    return BatchResult(
        processed_orders=processed_orders,
        msku_quantities=msku_quantities,
        unmapped_skus=list(unmapped_skus),
    )
