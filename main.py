import argparse
import json
import logging
from pathlib import Path

from inventory_sync.engine import ReconciliationEngine
from inventory_sync.errors import InventorySyncError
from inventory_sync.logger import setup_logger
from inventory_sync.pipelines.master_data import MasterDataPipeline
from inventory_sync.pipelines.orders import OrderSyncPipeline

logger = logging.getLogger(__name__)

VIEWS = {
    "mappings": ReconciliationEngine.mappings_view,
    "combos": ReconciliationEngine.combos_view,
    "inventory": ReconciliationEngine.inventory_view,
    "changes": ReconciliationEngine.inventory_changes,
    "health": ReconciliationEngine.health,
}


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Reconcile marketplace order exports against the MSKU inventory."
    )
    parser.add_argument("orders", nargs="*", type=Path, help="Order export files (CSV/TSV)")
    parser.add_argument("--master", type=Path, help="Master SKU -> MSKU mapping file")
    parser.add_argument("--combos", type=Path, help="Combo SKU definition file")
    parser.add_argument("--inventory", type=Path, help="Current inventory file")
    parser.add_argument(
        "--show",
        choices=sorted(VIEWS),
        action="append",
        default=[],
        help="Print a view of the engine state as JSON after processing",
    )
    parser.add_argument(
        "--test-mode", action="store_true", help="Skip the webhook post"
    )
    return parser.parse_args(argv)


def run_process(argv: list[str] | None = None) -> int:
    """Main orchestration function: load master data, process orders, report."""
    args = _parse_args(argv)
    engine = ReconciliationEngine()

    MasterDataPipeline(
        engine,
        master_path=args.master,
        combo_path=args.combos,
        inventory_path=args.inventory,
    ).run()

    if args.orders:
        try:
            OrderSyncPipeline(engine, args.orders, test_mode=args.test_mode).run()
        except InventorySyncError as e:
            logger.error(f"❌ Failed to process files: {e.detail}")
            print(json.dumps(e.to_dict(), indent=2))
            return 1

    for view in args.show:
        print(json.dumps(VIEWS[view](engine).model_dump(mode="json", by_alias=True), indent=2))

    return 0


if __name__ == "__main__":
    setup_logger()
    raise SystemExit(run_process())
