import os
from pathlib import Path
from dotenv import load_dotenv

# --- Base Directory ---
BASE_DIR = Path(__file__).resolve().parent.parent

# --- Load Environment Variables ---
load_dotenv(BASE_DIR / ".env")


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


# --- Path Configuration ---
DATA_DIR = BASE_DIR / os.getenv("DATA_DIR", "data")
OUTPUT_DIR = BASE_DIR / os.getenv("OUTPUT_DIR", "output")

# --- Filename Configuration ---
MASTER_SKU_FILENAME = os.getenv("MASTER_SKU_FILENAME", "master-skus.csv")
COMBO_FILENAME = os.getenv("COMBO_FILENAME", "combos.csv")
INVENTORY_FILENAME = os.getenv("INVENTORY_FILENAME", "current-inventory.csv")
UPDATES_FILENAME_BASE = os.getenv("UPDATES_FILENAME", "inventory_updates")
REPORT_FILENAME_BASE = os.getenv("REPORT_FILENAME", "sync_report")

# --- Output / Webhook ---
WEBHOOK_URL = os.getenv("WEBHOOK_URL")
SAVE_JSON_OUTPUT = _env_flag("SAVE_JSON_OUTPUT", True)

# --- Processing ---
# When on, a corrupt order file is reported and its siblings still process.
ISOLATE_FILE_ERRORS = _env_flag("ISOLATE_FILE_ERRORS", True)

# --- Logging ---
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_DIR = BASE_DIR / os.getenv("LOG_DIR", "logs")
LOG_FILENAME = os.getenv("LOG_FILENAME", "inventory_sync.log")
LOG_MAX_BYTES = 5 * 1024 * 1024
LOG_BACKUP_COUNT = 3

# --- Shared Business Logic ---
DELIMITER_CANDIDATES = [",", "\t", "|", ";"]

# Response-size caps, not processing limits.
PROCESSED_ORDERS_LIMIT = 100
QUERY_PAGE_LIMIT = 100

# Combo sheets list components in SKU1..SKU14.
COMBO_SLOT_COUNT = 14

# Warehouse stock columns in the current-inventory export, in scan order.
WAREHOUSE_COLUMNS = [
    "TLCQ",
    "BLR7",
    "BLR8",
    "BOM5",
    "BOM7",
    "CCU1",
    "CCX1",
    "DEL4",
    "DEL5",
    "DEX3",
    "PNQ2",
    "PNQ3",
    "SDED",
    "SDEE",
    "XHJ9",
]

# Order statuses that count as a completed sale (substring match).
VALID_ORDER_STATUSES = [
    "delivered",
    "shipped",
    "ready_to_ship",
    "dispatched",
    "completed",
    "fulfilled",
    "out_for_delivery",
    "success",
    "confirmed",
    "processing",
    "packed",
    "in_transit",
]

# Any of these vetoes a valid match.
INVALID_ORDER_STATUSES = [
    "cancelled",
    "returned",
    "refunded",
    "rejected",
    "failed",
]
