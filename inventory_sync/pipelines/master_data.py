import logging
from pathlib import Path

from inventory_sync import settings, utils
from inventory_sync.engine import ReconciliationEngine
from inventory_sync.errors import InventorySyncError
from inventory_sync.pipeline import DataPipeline

logger = logging.getLogger(__name__)


class MasterDataPipeline(DataPipeline):
    """Loads the master SKU, combo and inventory files into the engine at startup."""

    def __init__(
        self,
        engine: ReconciliationEngine,
        master_path: Path | None = None,
        combo_path: Path | None = None,
        inventory_path: Path | None = None,
    ):
        super().__init__("master data", engine)

        # Master-data sources. Explicit paths override the data directory.
        self.SOURCE_REGISTRY = [
            {
                "name": "master",
                "path": master_path or settings.DATA_DIR / settings.MASTER_SKU_FILENAME,
                "loader": engine.load_master_skus,
                "required": True,
            },
            {
                "name": "combos",
                "path": combo_path or settings.DATA_DIR / settings.COMBO_FILENAME,
                "loader": engine.load_combos,
                "required": False,
            },
            {
                "name": "inventory",
                "path": inventory_path or settings.DATA_DIR / settings.INVENTORY_FILENAME,
                "loader": engine.load_inventory,
                "required": True,
            },
        ]

    def extract(self) -> dict[str, str] | None:
        if not settings.DATA_DIR.exists():
            settings.DATA_DIR.mkdir(parents=True)
            logger.info(f"Created {settings.DATA_DIR}/ directory. Place your master files here:")
            logger.info(f"  - {settings.MASTER_SKU_FILENAME} (SKU -> MSKU mappings)")
            logger.info(f"  - {settings.COMBO_FILENAME} (combo SKU definitions, optional)")
            logger.info(f"  - {settings.INVENTORY_FILENAME} (current inventory)")

        contents: dict[str, str] = {}
        for source in self.SOURCE_REGISTRY:
            path: Path = source["path"]
            if not path.exists():
                if source["required"]:
                    logger.warning(f"⚠️ No {path.name} found ({source['name']}).")
                else:
                    logger.info(f"📋 No {path.name} found (optional file).")
                continue
            contents[source["name"]] = utils.read_text(path)
            logger.info(f"  > Found '{source['name']}': {path}")

        return contents

    def transform(self, raw_data: dict[str, str]) -> dict[str, int]:
        loaded: dict[str, int] = {}
        for source in self.SOURCE_REGISTRY:
            name = source["name"]
            if name not in raw_data:
                continue
            try:
                loaded[name] = source["loader"](raw_data[name])
            except InventorySyncError as e:
                # A bad master file must not stop the others from loading.
                logger.error(f"❌ Could not load {source['path'].name}: {e.detail}")
        return loaded

    def load(self, result: dict[str, int]):
        health = self.engine.health()
        logger.info(
            f"Mappings: {health.mappings_loaded} | Combos: {health.combos_loaded} | "
            f"Inventory items: {health.inventory_items}"
        )
