import logging
from pathlib import Path

from inventory_sync import data_handler, utils
from inventory_sync.engine import ReconciliationEngine
from inventory_sync.pipeline import DataPipeline
from inventory_sync.schemas import ProcessingResult

logger = logging.getLogger(__name__)


class OrderSyncPipeline(DataPipeline):
    """
    Reads marketplace order exports, runs them through the engine and writes
    the resulting inventory updates to disk (and the webhook, outside test mode).
    """

    def __init__(
        self,
        engine: ReconciliationEngine,
        order_paths: list[Path],
        test_mode: bool = False,
    ):
        super().__init__("order sync", engine, test_mode=test_mode)
        self.order_paths = order_paths
        self.written: dict[str, Path] = {}

    def extract(self) -> list[tuple[str, str]]:
        logger.info("--- Reading Order Files ---")

        order_files = []
        for path in self.order_paths:
            if not path.exists():
                logger.warning(f"  > ⚠️  File missing ({path}). Skipping.")
                continue
            logger.info(f"  > Found: {path.name}")
            order_files.append((path.name, utils.read_text(path)))
        return order_files

    def transform(self, raw_data: list[tuple[str, str]]) -> ProcessingResult:
        # MissingMasterDataError propagates: it aborts the whole request.
        return self.engine.process_orders(raw_data)

    def load(self, result: ProcessingResult):
        summary = result.summary
        logger.info("\n--- Final Sync Summary ---")
        logger.info(f"Order lines processed: {summary.total_orders_processed}")
        logger.info(f"MSKUs affected: {summary.unique_mskus_affected}")
        logger.info(f"Units sold: {summary.total_quantity_sold}")
        logger.info(f"Out of stock: {summary.out_of_stock_items_count}")
        for marketplace, stats in summary.marketplace_summary.items():
            logger.info(
                f"{marketplace}: {stats.orders_processed} lines, "
                f"{stats.total_quantity} units, {stats.unmapped_skus} unmapped"
            )
        if result.unmapped_skus:
            logger.warning(
                f"⚠️  Unmapped SKUs ({len(result.unmapped_skus)}): {', '.join(result.unmapped_skus)}"
            )
        for file_error in result.file_errors:
            logger.error(f"❌ {file_error.filename}: {file_error.error} - {file_error.details}")

        self.written = data_handler.save_outputs(result)

        if not self.test_mode:
            data_handler.post_to_webhook(result)
        else:
            logger.info("🧪 Test Mode: Skipping webhook post.")
