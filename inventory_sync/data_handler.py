import json
import logging
from pathlib import Path

import pandas as pd
import requests

from . import settings
from . import utils
from .schemas import InventoryUpdate, ProcessingResult

logger = logging.getLogger(__name__)


def updates_to_dataframe(updates: list[InventoryUpdate]) -> pd.DataFrame:
    """Flattens inventory updates into a DataFrame with the aliased column names."""
    columns = [info.alias or name for name, info in InventoryUpdate.model_fields.items()]
    records = [u.model_dump(mode="json", by_alias=True) for u in updates]
    return pd.DataFrame(records, columns=columns)


def save_outputs(result: ProcessingResult) -> dict[str, Path]:
    """Saves the inventory updates to CSV and conditionally the full report to JSON, with dated filenames."""
    settings.OUTPUT_DIR.mkdir(parents=True, exist_ok=True)
    date_suffix = utils.get_date_suffix_for_filename()

    csv_path = settings.OUTPUT_DIR / f"{settings.UPDATES_FILENAME_BASE}_{date_suffix}.csv"
    json_path = settings.OUTPUT_DIR / f"{settings.REPORT_FILENAME_BASE}_{date_suffix}.json"
    written: dict[str, Path] = {}

    df = updates_to_dataframe(result.inventory_updates)
    df.to_csv(csv_path, index=False)
    written["csv"] = csv_path
    logger.info(f"✅ Inventory updates saved to: {csv_path}")

    if settings.SAVE_JSON_OUTPUT:
        with open(json_path, "w", encoding="utf-8") as f:
            json.dump(result.model_dump(mode="json", by_alias=True), f, indent=2)
        written["json"] = json_path
        logger.info(f"✅ JSON report saved to: {json_path}")
    else:
        logger.info("INFO: Skipping JSON file save as per configuration.")

    return written


def post_to_webhook(result: ProcessingResult) -> bool:
    """
    Posts the run summary and inventory updates to the webhook.
    Failures are logged; they never abort the run.
    """
    if not settings.WEBHOOK_URL:
        logger.warning("⚠️ WEBHOOK_URL not set. Skipping webhook post.")
        return False

    logger.info(f"🚀 Posting sync report to webhook: {settings.WEBHOOK_URL}")

    report = result.model_dump(mode="json", by_alias=True)
    payload = {
        "summary": report["summary"],
        "inventoryUpdates": report["inventoryUpdates"],
        "unmappedSkus": report["unmappedSkus"],
        "fileErrors": report["fileErrors"],
    }

    try:
        response = requests.post(settings.WEBHOOK_URL, json=payload, timeout=15)
        response.raise_for_status()
        logger.info("✅ Sync report successfully posted to webhook.")
        return True
    except requests.exceptions.RequestException as e:
        logger.error(f"❌ Error posting to webhook: {e}")
        return False
