"""
The reconciliation engine: owns the SKU catalog and the inventory ledger for
the lifetime of the process and serializes every mutation behind one lock.
"""

import logging
import threading
from typing import Iterable

from . import settings
from .catalog import SkuCatalog
from .errors import InventorySyncError, MissingMasterDataError
from .ledger import InventoryLedger
from .marketplaces import detect_marketplace
from .orders import process_order_batch
from .parsers import build_combo_table, build_inventory, build_sku_mapping
from .schemas import (
    ChangesView,
    CombosView,
    FileError,
    HealthStatus,
    InventoryView,
    MappingsView,
    MarketplaceSummary,
    ProcessedOrder,
    ProcessingResult,
    RunSummary,
)
from .utils import parse_table

logger = logging.getLogger(__name__)


class _MarketplaceTally:
    def __init__(self):
        self.orders_processed = 0
        self.mskus: set[str] = set()
        self.total_quantity = 0
        self.unmapped: set[str] = set()

    def to_summary(self) -> MarketplaceSummary:
        return MarketplaceSummary(
            orders_processed=self.orders_processed,
            unique_mskus=len(self.mskus),
            total_quantity=self.total_quantity,
            unmapped_skus=len(self.unmapped),
        )


class ReconciliationEngine:
    def __init__(self, isolate_file_errors: bool | None = None):
        self.catalog = SkuCatalog()
        self.ledger = InventoryLedger()
        self.isolate_file_errors = (
            settings.ISOLATE_FILE_ERRORS
            if isolate_file_errors is None
            else isolate_file_errors
        )
        self._lock = threading.RLock()

    # --- Loads (full replacement of the affected table) ---

    def load_master_skus(self, csv_content: str) -> int:
        rows = parse_table(csv_content)
        mappings = build_sku_mapping(rows)
        with self._lock:
            self.catalog.replace_mappings(mappings)
        return len(mappings)

    def load_combos(self, csv_content: str) -> int:
        rows = parse_table(csv_content)
        combos = build_combo_table(rows)
        with self._lock:
            self.catalog.replace_combos(combos)
        return len(combos)

    def load_inventory(self, csv_content: str) -> int:
        rows = parse_table(csv_content)
        items, snapshot = build_inventory(rows)
        with self._lock:
            self.ledger.replace(items, snapshot)
        return len(items)

    # --- Mutators ---

    def reset_inventory(self):
        with self._lock:
            self.ledger.reset()

    def process_orders(
        self,
        order_files: Iterable[tuple[str, str]],
        master_text: str | None = None,
        combo_text: str | None = None,
        inventory_text: str | None = None,
    ) -> ProcessingResult:
        """
        Runs one processing request: optional master-data loads, a ledger reset,
        then every order file through classify -> batch, and finally one
        reconciliation pass over the combined per-MSKU totals.

        `order_files` is a sequence of (filename, text) pairs.
        """
        with self._lock:
            if master_text is not None:
                self.load_master_skus(master_text)
                logger.info("Master data loaded from supplied file")
            elif not self.catalog.mappings:
                raise MissingMasterDataError(
                    "No master data available. Either supply a master SKU file or place "
                    f"{settings.MASTER_SKU_FILENAME} in the data directory"
                )
            if combo_text is not None:
                self.load_combos(combo_text)
            if inventory_text is not None:
                self.load_inventory(inventory_text)

            # Every request starts from the load-time stock levels.
            self.ledger.reset()

            all_processed: list[ProcessedOrder] = []
            combined_quantities: dict[str, int] = {}
            all_unmapped: dict[str, None] = {}
            tallies: dict[str, _MarketplaceTally] = {}
            file_errors: list[FileError] = []

            for filename, text in order_files:
                logger.info(f"\n--- Processing file: {filename} ---")
                try:
                    order_rows = parse_table(text)
                except InventorySyncError as e:
                    if not self.isolate_file_errors:
                        raise
                    logger.error(f"❌ Skipping {filename}: {e.detail}")
                    file_errors.append(
                        FileError(filename=filename, error=e.reason, details=e.detail)
                    )
                    continue

                marketplace = detect_marketplace(order_rows)
                logger.info(f"Detected marketplace: {marketplace.value} for file: {filename}")

                batch = process_order_batch(order_rows, marketplace, self.catalog)
                all_processed.extend(batch.processed_orders)

                for msku, qty in batch.msku_quantities.items():
                    combined_quantities[msku] = combined_quantities.get(msku, 0) + qty
                for sku in batch.unmapped_skus:
                    all_unmapped[sku] = None

                tally = tallies.setdefault(marketplace.value, _MarketplaceTally())
                tally.orders_processed += len(batch.processed_orders)
                tally.mskus.update(batch.msku_quantities)
                tally.total_quantity += sum(batch.msku_quantities.values())
                tally.unmapped.update(batch.unmapped_skus)

            inventory_updates = self.ledger.apply_sales(combined_quantities)

        summary = RunSummary(
            total_orders_processed=len(all_processed),
            unique_mskus_affected=len(combined_quantities),
            total_quantity_sold=sum(combined_quantities.values()),
            unmapped_skus_count=len(all_unmapped),
            out_of_stock_items_count=sum(1 for u in inventory_updates if u.is_out_of_stock),
            marketplace_summary={
                name: tally.to_summary() for name, tally in tallies.items()
            },
        )

        logger.info(
            f"✅ Processed {summary.total_orders_processed} order lines, "
            f"{summary.total_quantity_sold} units across {summary.unique_mskus_affected} MSKUs"
        )

        return ProcessingResult(
            success=True,
            summary=summary,
            inventory_updates=inventory_updates,
            processed_orders=all_processed[: settings.PROCESSED_ORDERS_LIMIT],
            unmapped_skus=list(all_unmapped),
            file_errors=file_errors,
        )

    # --- Read-only views ---

    def mappings_view(self) -> MappingsView:
        with self._lock:
            records = self.catalog.mapping_records()
        return MappingsView(
            total_mappings=len(records),
            mappings=records[: settings.QUERY_PAGE_LIMIT],
        )

    def combos_view(self) -> CombosView:
        with self._lock:
            records = self.catalog.combo_records()
        return CombosView(total_combos=len(records), combos=records)

    def inventory_view(self) -> InventoryView:
        with self._lock:
            items = [item.model_copy(deep=True) for item in self.ledger.items.values()]
        return InventoryView(
            total_items=len(items),
            inventory=items[: settings.QUERY_PAGE_LIMIT],
        )

    def inventory_changes(self) -> ChangesView:
        with self._lock:
            changes = self.ledger.changes()
        return ChangesView(total_changes=len(changes), changes=changes)

    def health(self) -> HealthStatus:
        with self._lock:
            return HealthStatus(
                status="OK",
                mappings_loaded=len(self.catalog.mappings),
                combos_loaded=len(self.catalog.combos),
                inventory_items=len(self.ledger),
            )
